"""
定义集合工具使用的异常体系, 支持错误链追踪.

异常层级结构如下:
    - HelperError: 所有异常的统一基类, 支持嵌套链式追踪.
        - TypeMismatchError: 拼接列表时参数类型不匹配(同时是 TypeError).
        - ChainMapKeyError: ChainMap 所有层都没有非 None 的值(同时是 KeyError).
        - EmptyLayerSetError: 向没有任何层的 ChainMap 写入(同时是 IndexError).
        - SerializationError: JSON 状态序列化/反序列化失败(同时是 ValueError).

每个子类同时继承对应的内置异常, 调用方既可以按 HelperError 统一捕获,
也可以按内置异常类型(如 KeyError)捕获.
"""

from __future__ import annotations

from typing import Any


class HelperError(Exception):
    """
    所有集合工具异常的基类,具备错误链追踪能力.

    参数:
    - `*args`: 异常消息内容;
    - `cause`: 可选的原始异常,用于记录异常链(自动赋值给 `__cause__`).
    """

    def __init__(self, *args: Any, cause: Exception | None = None) -> None:
        super().__init__(*args)
        self.cause: Exception | None = cause
        self.__cause__ = cause


class TypeMismatchError(HelperError, TypeError):
    """
    参数既不是目标类型的值, 也不是目标类型元素组成的序列.

    属性:
    - `position`: 出错参数在参数列表中的位置;
    - `value`: 出错的参数本身.
    """

    def __init__(
        self, *args: Any, position: int, value: Any, cause: Exception | None = None
    ) -> None:
        super().__init__(*args, cause=cause)
        self.position = position
        self.value = value


class ChainMapKeyError(HelperError, KeyError):
    """
    ChainMap 中没有任何一层持有该键的非 None 值.
    """

    def __init__(self, key: Any, cause: Exception | None = None) -> None:
        super().__init__(key, cause=cause)
        self.key = key

    def __str__(self) -> str:
        return f"Key {self.key!r} is not present in any layer of ChainMap"


class EmptyLayerSetError(HelperError, IndexError):
    """
    ChainMap 没有任何层, 无法写入.
    """


class SerializationError(HelperError, ValueError):
    """
    JSON 状态序列化或反序列化失败.

    属性:
    - `errors`: 由 pydantic 验证失败引起时, 为结构化错误列表; 否则为空列表.
    """

    def __init__(
        self,
        *args: Any,
        errors: list[dict[str, Any]] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(*args, cause=cause)
        self.errors: list[dict[str, Any]] = errors or []
