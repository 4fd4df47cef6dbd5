"""
ChainMap 模块

按顺序在多个字典(层)中查找键, 返回第一个非 None 的值; 写入总是落在第一层.

主要组件:
- ChainMap: 分层查找的映射视图

与标准库 collections.ChainMap 的区别:
- 读取跳过值为 None 的层, 只有非 None 的值才算"找到".
- 键只以 None 存在时同样视为缺失, 抛出 ChainMapKeyError.
- 没有任何层时写入抛出 EmptyLayerSetError, 而不是静默创建新层.
- clone() 为每一层创建独立的浅拷贝.

示例:
    >>> m = ChainMap.from_maps({"x": 1}, {"x": 2, "y": 3})
    >>> m["x"], m["y"]
    (1, 3)
    >>> sorted(m.keys)
    ['x', 'y']
    >>> m["x"] = 99
    >>> m.layers
    [{'x': 99}, {'x': 2, 'y': 3}]
"""

from __future__ import annotations

from typing import (
    Any,
    Generic,
    Hashable,
    Iterable,
    Iterator,
    MutableMapping,
    Self,
    TypeVar,
)

from pythonic.helpers.errors import ChainMapKeyError, EmptyLayerSetError
from pythonic.helpers.log import get_logger_adapter

logger = get_logger_adapter(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

_MISSING: Any = object()


class ChainMap(Generic[K, V]):
    """
    分层查找映射.

    属性:
        layers (list[MutableMapping[K, V]]): 按优先级排列的层, 下标 0 优先级最高.
    """

    def __init__(self, layers: list[MutableMapping[K, V]] | None = None) -> None:
        """
        初始化 ChainMap.

        Args:
            layers: 层列表. 直接持有该列表对象(不复制); None 表示空列表.
        """
        self.layers: list[MutableMapping[K, V]] = layers if layers is not None else []

    @classmethod
    def from_maps(cls, *maps: MutableMapping[K, V]) -> Self:
        """按参数顺序把映射作为层, 构造新的 ChainMap."""
        return cls(list(maps))

    @classmethod
    def from_list(cls, maps: Iterable[MutableMapping[K, V]]) -> Self:
        """由映射的可迭代对象构造新的 ChainMap, 层列表为新列表."""
        return cls(list(maps))

    @property
    def keys(self) -> set[K]:
        """所有层键的并集, 每次访问时重新计算."""
        return {key for layer in self.layers for key in layer}

    def _lookup(self, key: K) -> Any:
        for layer in self.layers:
            value = layer.get(key)
            if value is not None:
                return value
        return _MISSING

    def __getitem__(self, key: K) -> V:
        """
        返回第一个持有非 None 值的层中的值.

        Raises:
            ChainMapKeyError: 没有任何层持有该键的非 None 值.
        """
        value = self._lookup(key)
        if value is _MISSING:
            logger.debug("ChainMap - 键不存在 - %r", key)
            raise ChainMapKeyError(key)
        return value

    def __setitem__(self, key: K, value: V) -> None:
        """
        写入第一层.

        Raises:
            EmptyLayerSetError: 没有任何层.
        """
        if not self.layers:
            logger.debug("ChainMap - 无可写入的层 - %r", key)
            raise EmptyLayerSetError(
                f"Cannot set key {key!r}: ChainMap has no layers"
            )
        self.layers[0][key] = value

    def __contains__(self, key: Any) -> bool:
        return self._lookup(key) is not _MISSING

    def __iter__(self) -> Iterator[K]:
        """遍历所有层键的并集."""
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.layers)

    def __copy__(self) -> Self:
        """浅拷贝: 新的层列表, 层对象本身共享."""
        return self.__class__(list(self.layers))

    def __repr__(self) -> str:
        inner = ", ".join(repr(layer) for layer in self.layers)
        return f"{self.__class__.__name__}([{inner}])"

    def get(self, key: K, default: Any = None) -> Any:
        """与 `m[key]` 规则相同, 找不到时返回 `default`."""
        value = self._lookup(key)
        return default if value is _MISSING else value

    def clone(self) -> Self:
        """
        创建层相互独立的副本.

        每一层复制为新的 dict(浅拷贝), 在副本的层中增删键不影响原对象, 反之亦然.
        值本身在副本与原对象之间共享.

        Returns:
            ChainMap[K, V]: 新的 ChainMap.
        """
        return self.__class__.from_list(dict(layer) for layer in self.layers)
