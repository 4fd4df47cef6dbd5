"""
提供一个读取缺失键时自动插入默认值的字典实现.

设计目标:
- 下标读取 `d[key]` 遇到缺失键时, 调用 `default_factory()` 构造默认值,
  插入字典并返回; 读取后该键一定存在.
- 下标写入 `d[key] = value` 只做插入/覆盖, 不触发默认值构造.
- `get`/`in`/`pop`/`setdefault` 等辅助方法不会触发默认值插入.
- 基于 collections.abc.MutableMapping, 内部组合一个普通 dict, 只暴露映射接口.

主要组件:
- DefaultDict: 自动插入默认值的字典类
- to_default_dict: 由任意映射构造 DefaultDict(浅拷贝)

示例:
    >>> d = DefaultDict(list)
    >>> d["a"].append(1)
    >>> d["a"]
    [1]
    >>> "b" in d
    False
    >>> d["b"]
    []
    >>> "b" in d
    True

    # 嵌套默认字典
    >>> tree = DefaultDict(lambda: DefaultDict(int))
    >>> tree["x"]["y"] += 1
    >>> tree["x"]["y"]
    1
"""

from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Callable, Hashable, Iterable, Iterator, Mapping, TypeVar

from pythonic.helpers.log import get_logger_adapter

logger = get_logger_adapter(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING: Any = object()


class DefaultDict(MutableMapping[K, V]):
    """
    读取缺失键时自动插入默认值的字典.

    内部结构:
    - self._data: {键: 值}
    - self._default_factory: 无参可调用对象, 每次调用返回一个新的默认值

    特性:
    - **读取即插入**: `d[key]` 对缺失键插入 `default_factory()` 并返回.
    - **无副作用的辅助读取**: `get`/`in`/`pop`/`setdefault` 不调用工厂.
    - **浅拷贝**: `copy()` 与 `to_default_dict` 只复制键值对, 不复制值本身.
    """

    def __init__(
        self,
        default_factory: Callable[[], V],
        *args: Mapping[K, V] | Iterable[tuple[K, V]],
    ) -> None:
        """
        初始化默认字典.

        Args:
            default_factory: 无参可调用对象, 用于构造缺失键的默认值.
            *args: 初始数据, 映射或 (key, value) 可迭代对象, 按顺序合并, 后者覆盖前者.

        Raises:
            TypeError: default_factory 不可调用.
        """
        if not callable(default_factory):
            raise TypeError(
                f"default_factory must be callable, got {type(default_factory).__name__}"
            )
        self._default_factory = default_factory
        self._data: dict[K, V] = {}
        for arg in args:
            self.update(arg)

    @property
    def default_factory(self) -> Callable[[], V]:
        return self._default_factory

    def __getitem__(self, key: K) -> V:
        return self.get_or_insert(key)

    def __setitem__(self, key: K, value: V) -> None:
        self._data[key] = value

    def __delitem__(self, key: K) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[K]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return self._data == dict(other.items())

    def __repr__(self) -> str:
        factory = getattr(
            self._default_factory, "__qualname__", repr(self._default_factory)
        )
        return f"{self.__class__.__name__}({factory}, {self._data!r})"

    def get_or_insert(self, key: K) -> V:
        """
        读取键对应的值; 键不存在时插入并返回新的默认值.

        这是 `d[key]` 的具名形式.

        Args:
            key (K): 要读取的键.

        Returns:
            V: 已有的值或新插入的默认值.
        """
        try:
            return self._data[key]
        except KeyError:
            pass
        value = self._default_factory()
        self._data[key] = value
        logger.debug("DefaultDict - 插入默认值 - %r", key)
        return value

    def get(self, key: K, default: Any = None) -> Any:
        """不插入默认值的读取, 键不存在时返回 `default`."""
        return self._data.get(key, default)

    def pop(self, key: K, default: Any = _MISSING) -> Any:
        if default is _MISSING:
            return self._data.pop(key)
        return self._data.pop(key, default)

    def setdefault(self, key: K, default: Any = None) -> Any:
        return self._data.setdefault(key, default)

    def clear(self) -> None:
        self._data.clear()

    def copy(self) -> DefaultDict[K, V]:
        """返回相同工厂/相同键值对的新 DefaultDict(值不复制)."""
        return self.__class__(self._default_factory, self._data)

    __copy__ = copy


def to_default_dict(
    mapping: Mapping[K, V], default_factory: Callable[[], V]
) -> DefaultDict[K, V]:
    """
    由任意映射构造 DefaultDict.

    Args:
        mapping: 源映射, 其键值对被浅拷贝.
        default_factory: 新字典的默认值工厂.

    Returns:
        DefaultDict[K, V]: 包含相同键值对的新字典, 源映射不受影响.
    """
    return DefaultDict(default_factory, mapping)
