"""
serialization
=============

DefaultDict / ChainMap 的 JSON 状态往返(dumps / loads).

容器被编码为带 `$type` 标记的 JSON 对象(信封), 键值对以 `[key, value]`
列表保存, 因此非字符串键(int/bool/None/tuple)可以原样还原:

- dict:        {"$type": "dict", "items": [[k, v], ...]}
- DefaultDict: {"$type": "DefaultDict", "$factory": "module:qualname", "items": [...]}
- ChainMap:    {"$type": "ChainMap", "layers": [<dict 或 DefaultDict 信封>, ...]}

主要特性:
- 基于 functools.singledispatch 编码, 可为自定义类型注册编码函数.
- 基于 pydantic 判别联合(discriminated union)校验信封, 校验失败时
  SerializationError.errors 给出结构化错误列表.
- 列表与元组都编码为 JSON 数组; 解码时位于键位置的数组还原为元组, 其余还原为列表.
- 默认值工厂按 "模块:限定名" 编码(内置类型/模块级函数或类);
  lambda/局部函数/partial 无法编码.
- 解码时只接受白名单中的工厂: DEFAULT_FACTORIES 加上调用方通过 `factories`
  传入的可调用对象. 解码过程不会导入任何模块.
"""

from __future__ import annotations

import json
import sys
from functools import singledispatch
from typing import Annotated, Any, Callable, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from pythonic.helpers.chain_map import ChainMap
from pythonic.helpers.default_dict import DefaultDict
from pythonic.helpers.errors import SerializationError
from pythonic.helpers.log import get_logger_adapter

logger = get_logger_adapter(__name__)

DEFAULT_FACTORIES: tuple[Callable[[], Any], ...] = (
    list,
    dict,
    set,
    frozenset,
    tuple,
    int,
    float,
    complex,
    str,
    bytes,
    bool,
)


def dumps(value: Any, *, indent: int | None = None) -> str:
    """
    将对象编码为 JSON 字符串.

    Args:
        value: DefaultDict/ChainMap/dict/list/tuple/JSON 基础类型, 可任意嵌套.
        indent: 传给 json.dumps 的缩进.

    Returns:
        JSON 字符串.

    Raises:
        SerializationError: 遇到无法编码的值或无法按名称定位的默认值工厂.
    """
    return json.dumps(_dump(value, []), ensure_ascii=False, indent=indent)


def loads(
    text: str | bytes, *, factories: Iterable[Callable[[], Any]] = ()
) -> Any:
    """
    将 dumps 产生的 JSON 字符串解码为对象.

    Args:
        text: JSON 字符串.
        factories: 除 DEFAULT_FACTORIES 外允许使用的默认值工厂.

    Raises:
        SerializationError: JSON 语法错误/信封校验失败/工厂不在白名单中.
    """
    registry = {
        _factory_name(factory, []): factory
        for factory in (*DEFAULT_FACTORIES, *factories)
    }
    try:
        data = json.loads(text)
    except json.JSONDecodeError as ex:
        logger.debug("Serialization - JSON解码错误 - %s", ex)
        raise SerializationError(f"Invalid JSON: {ex}", cause=ex)
    return _load(data, key=False, factories=registry)


# ===========================================================================
# 编码


def _render_path(path: list[str | int]) -> str:
    """将路径列表渲染为 JSONPath 风格字符串, 例如 $.items[0]."""
    parts = (f"[{p}]" if isinstance(p, int) else f".{p}" for p in path)
    return "$" + "".join(parts)


def _recurse(value: Any, key: str | int, path: list[str | int]) -> Any:
    path.append(key)
    try:
        return _dump(value, path)
    finally:
        path.pop()


def _dump_items(items: Any, path: list[str | int]) -> list[list[Any]]:
    return [
        [_recurse(k, 0, [*path, i]), _recurse(v, 1, [*path, i])]
        for i, (k, v) in enumerate(items)
    ]


@singledispatch
def _dump(value: Any, path: list[str | int]) -> Any:
    """类型分发入口. 未注册的类型无法编码."""
    raise SerializationError(
        f"Unserializable value of type {type(value).__name__!r} at {_render_path(path)}"
    )


@_dump.register(str)
@_dump.register(int)
@_dump.register(float)
@_dump.register(bool)
@_dump.register(type(None))
def _(value: Any, path: list[str | int]) -> Any:
    """基础类型直接返回原值."""
    return value


@_dump.register(list)
@_dump.register(tuple)
def _(value: list | tuple, path: list[str | int]) -> Any:
    return [_recurse(v, i, path) for i, v in enumerate(value)]


@_dump.register(dict)
def _(value: dict, path: list[str | int]) -> Any:
    return {"$type": "dict", "items": _dump_items(value.items(), [*path, "items"])}


@_dump.register(DefaultDict)
def _(value: DefaultDict, path: list[str | int]) -> Any:
    return {
        "$type": "DefaultDict",
        "$factory": _factory_name(value.default_factory, path),
        "items": _dump_items(value.items(), [*path, "items"]),
    }


@_dump.register(ChainMap)
def _(value: ChainMap, path: list[str | int]) -> Any:
    layers = []
    for i, layer in enumerate(value.layers):
        if not isinstance(layer, (dict, DefaultDict)):
            raise SerializationError(
                f"Unserializable layer of type {type(layer).__name__!r} "
                f"at {_render_path([*path, 'layers', i])}"
            )
        layers.append(_dump(layer, [*path, "layers", i]))
    return {"$type": "ChainMap", "layers": layers}


def _factory_name(factory: Callable[[], Any], path: list[str | int]) -> str:
    """
    返回 "模块:限定名", 并确认已加载的模块中按该名称能找到同一对象.

    只查找 sys.modules, 不导入模块.
    """
    message = f"Default factory {factory!r} at {_render_path(path)} is not addressable"
    module = getattr(factory, "__module__", None)
    qualname = getattr(factory, "__qualname__", None)
    if not module or not qualname or "<" in qualname:
        raise SerializationError(message)
    obj: Any = sys.modules.get(module)
    for attr in qualname.split("."):
        obj = getattr(obj, attr, None)
    if obj is not factory:
        raise SerializationError(message)
    return f"{module}:{qualname}"


# ===========================================================================
# 解码

FactoryRegistry = dict[str, Callable[[], Any]]


def _load_items(
    items: list[tuple[Any, Any]], factories: FactoryRegistry
) -> list[tuple[Any, Any]]:
    return [
        (
            _load(k, key=True, factories=factories),
            _load(v, key=False, factories=factories),
        )
        for k, v in items
    ]


class _Envelope(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class DictEnvelope(_Envelope):
    type: Literal["dict"] = Field(alias="$type")
    items: list[tuple[Any, Any]]

    def build(self, factories: FactoryRegistry) -> dict[Any, Any]:
        return dict(_load_items(self.items, factories))


class DefaultDictEnvelope(_Envelope):
    type: Literal["DefaultDict"] = Field(alias="$type")
    factory: str = Field(alias="$factory", pattern=r"^[\w.]+:[\w.]+$")
    items: list[tuple[Any, Any]]

    def build(self, factories: FactoryRegistry) -> DefaultDict[Any, Any]:
        if self.factory not in factories:
            logger.debug("Serialization - 工厂不在白名单中 - %s", self.factory)
            raise SerializationError(f"Default factory {self.factory!r} is not allowed")
        return DefaultDict(
            factories[self.factory], _load_items(self.items, factories)
        )


LayerEnvelope = Annotated[
    Union[DictEnvelope, DefaultDictEnvelope], Field(discriminator="type")
]


class ChainMapEnvelope(_Envelope):
    type: Literal["ChainMap"] = Field(alias="$type")
    layers: list[LayerEnvelope]

    def build(self, factories: FactoryRegistry) -> ChainMap[Any, Any]:
        return ChainMap.from_list(layer.build(factories) for layer in self.layers)


Envelope = Annotated[
    Union[DictEnvelope, DefaultDictEnvelope, ChainMapEnvelope],
    Field(discriminator="type"),
]

_envelope_adapter: TypeAdapter[Any] = TypeAdapter(Envelope)


def _validation_errors(exc: ValidationError) -> list[dict[str, Any]]:
    """ValidationError -> [{"path": "$.items[0]", "message": ..., "type": ...}]"""
    return [
        {
            "path": _render_path(list(error["loc"])),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors(include_url=False, include_input=False)
    ]


def _load(data: Any, *, key: bool, factories: FactoryRegistry) -> Any:
    """
    递归解码 JSON 数据.

    Args:
        data: json.loads 的结果.
        key: 当前值是否位于键位置; 键位置的数组还原为元组.
        factories: 允许使用的默认值工厂, 名称到对象.
    """
    if isinstance(data, list):
        values = [_load(v, key=key, factories=factories) for v in data]
        return tuple(values) if key else values
    if isinstance(data, dict):
        if key:
            raise SerializationError("Mapping cannot be used as a key")
        try:
            envelope = _envelope_adapter.validate_python(data)
        except ValidationError as ex:
            errors = _validation_errors(ex)
            logger.debug("Serialization - 信封校验失败 - %s", errors)
            raise SerializationError(
                f"Invalid envelope: {ex.error_count()} validation error(s)",
                errors=errors,
                cause=ex,
            )
        return envelope.build(factories)
    return data
