"""
列表拼接工具.

将若干"单个值"或"值序列"按顺序拼接为一个目标元素类型的列表.

主要组件:
- Scalar: 显式标记"单个值"的参数
- Many: 显式标记"值序列"的参数
- concat_to_list: 拼接函数

参数判定规则:
- Scalar / Many 标记的参数按标记处理, 不做猜测.
- 未标记的参数按运行时类型判定, 序列优先:
    1. 可迭代且所有元素都是目标类型 -> 作为序列展开;
    2. 本身是目标类型 -> 作为单个值追加;
    3. 否则抛出 TypeMismatchError.
- str / bytes / bytearray 始终视为单个值, 不会被拆成字符.
- 映射(Mapping)同样视为单个值, 不会被拆成键.

示例:
    >>> concat_to_list(int, 1, [2, 3], (4,))
    [1, 2, 3, 4]
    >>> concat_to_list(str, "ab", ["c"])
    ['ab', 'c']
    >>> concat_to_list(tuple, Scalar((1, 2)), Many([(3,)]))
    [(1, 2), (3,)]
    >>> concat_to_list(int, "hello")
    Traceback (most recent call last):
        ...
    pythonic.helpers.errors.TypeMismatchError: Argument 0 of type 'str' is neither 'int' nor a sequence of 'int'
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Generic, Iterable, TypeVar

from pythonic.helpers.errors import TypeMismatchError

T = TypeVar("T")

ATOMIC_TYPES = (str, bytes, bytearray, Mapping)


@dataclass(frozen=True, slots=True)
class Scalar(Generic[T]):
    """标记为单个值的参数."""

    value: T


@dataclass(frozen=True, slots=True)
class Many(Generic[T]):
    """标记为值序列的参数, 构造时即物化为元组."""

    values: tuple[T, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", tuple(self.values))


def _type_name(item_type: type | tuple[type, ...]) -> str:
    if isinstance(item_type, tuple):
        return " | ".join(t.__name__ for t in item_type)
    return item_type.__name__


def _mismatch(
    position: int, value: Any, item_type: type | tuple[type, ...]
) -> TypeMismatchError:
    name = _type_name(item_type)
    return TypeMismatchError(
        f"Argument {position} of type {type(value).__name__!r} "
        f"is neither {name!r} nor a sequence of {name!r}",
        position=position,
        value=value,
    )


def concat_to_list(item_type: type[T] | tuple[type, ...], *args: Any) -> list[T]:
    """
    将单个值与值序列按顺序拼接为一个列表.

    Args:
        item_type: 目标元素类型, 可以是类型或类型元组(与 isinstance 一致).
        *args: 单个值/值序列/Scalar/Many.

    Returns:
        list[T]: 拼接结果. 参数之间/序列内部的相对顺序保持不变.

    Raises:
        TypeMismatchError: 参数既不是目标类型, 也不是目标类型元素组成的序列.
    """
    result: list[T] = []
    for position, arg in enumerate(args):
        if isinstance(arg, Scalar):
            if not isinstance(arg.value, item_type):
                raise _mismatch(position, arg.value, item_type)
            result.append(arg.value)
        elif isinstance(arg, Many):
            if not all(isinstance(v, item_type) for v in arg.values):
                raise _mismatch(position, arg.values, item_type)
            result.extend(arg.values)
        elif not isinstance(arg, ATOMIC_TYPES) and isinstance(arg, Iterable):
            # 迭代器只能消费一次, 先物化再判定
            items = arg if isinstance(arg, (list, tuple)) else list(arg)
            if all(isinstance(v, item_type) for v in items):
                result.extend(items)
            elif isinstance(arg, item_type):
                result.append(arg)
            else:
                raise _mismatch(position, arg, item_type)
        elif isinstance(arg, item_type):
            result.append(arg)
        else:
            raise _mismatch(position, arg, item_type)
    return result
