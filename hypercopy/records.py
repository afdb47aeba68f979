"""Conversion between JSON wire dictionaries and dataclass records.

Fields are read from their camelCase name unless the field's metadata
gives ``{"wire": name}``; ``{"flatten": True}`` merges a nested record's
keys into the parent object.

Record classes must carry real type objects as field annotations (their
modules do not postpone annotation evaluation).
"""

from __future__ import annotations

import dataclasses
import enum
import types
from typing import Any, NewType, Union, get_args, get_origin

from .errors import JsonParseError

Address = NewType("Address", str)
TokenId = NewType("TokenId", str)

_FIXED_HEX = {Address: 20, TokenId: 16}
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_NONE_TYPE = type(None)


def camel_case(name: str) -> str:
    """Turn a snake_case field name into its camelCase wire name."""
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _wire_name(f: dataclasses.Field) -> str:
    return f.metadata.get("wire", camel_case(f.name))


def _field_type(cls: type, f: dataclasses.Field) -> Any:
    if isinstance(f.type, str):
        raise TypeError(
            f"{cls.__name__}.{f.name}: annotation {f.type!r} is a string; "
            "record fields need evaluated type annotations"
        )
    return f.type


def _is_union(tp: Any) -> bool:
    return get_origin(tp) in (Union, types.UnionType)


def _is_optional(tp: Any) -> bool:
    return _is_union(tp) and _NONE_TYPE in get_args(tp)


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def _fixed_hex_size(tp: Any) -> int | None:
    try:
        return _FIXED_HEX.get(tp)
    except TypeError:
        return None


def _convert(tp: Any, value: Any, path: str) -> Any:
    if tp is Any:
        return value

    size = _fixed_hex_size(tp)
    if size is not None:
        if (
            not isinstance(value, str)
            or not value.startswith("0x")
            or len(value) != 2 + 2 * size
            or not set(value[2:]) <= _HEX_DIGITS
        ):
            raise JsonParseError(f"{path}: expected 0x-prefixed {size}-byte hex, got {value!r}")
        return value.lower()

    if _is_union(tp):
        args = get_args(tp)
        if value is None and _NONE_TYPE in args:
            return None
        for arg in args:
            if arg is _NONE_TYPE:
                continue
            try:
                return _convert(arg, value, path)
            except JsonParseError:
                continue
        raise JsonParseError(f"{path}: data did not match any variant of {tp}")

    origin = get_origin(tp)
    if origin is list:
        if not isinstance(value, list):
            raise JsonParseError(f"{path}: expected a list, got {value!r}")
        (item_type,) = get_args(tp) or (Any,)
        return [_convert(item_type, item, f"{path}[{n}]") for n, item in enumerate(value)]
    if origin is tuple:
        if not isinstance(value, (list, tuple)):
            raise JsonParseError(f"{path}: expected a sequence, got {value!r}")
        args = get_args(tp)
        if len(args) == 2 and args[1] is Ellipsis:
            args = (args[0],) * len(value)
        if len(args) != len(value):
            raise JsonParseError(f"{path}: expected {len(args)} items, got {len(value)}")
        return tuple(
            _convert(arg, item, f"{path}[{n}]") for n, (arg, item) in enumerate(zip(args, value))
        )
    if origin is dict:
        if not isinstance(value, dict):
            raise JsonParseError(f"{path}: expected an object, got {value!r}")
        key_type, value_type = get_args(tp) or (Any, Any)
        return {
            _convert(key_type, key, path): _convert(value_type, item, f"{path}.{key}")
            for key, item in value.items()
        }

    if isinstance(tp, type):
        if dataclasses.is_dataclass(tp):
            return _from_wire(tp, value, path)
        if issubclass(tp, enum.Enum):
            try:
                return tp(value)
            except ValueError as exc:
                raise JsonParseError(f"{path}: {exc}") from exc
        if tp is bool:
            if isinstance(value, bool):
                return value
        elif tp is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
        elif tp is float:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
        elif tp is str:
            if isinstance(value, str):
                return value
        elif tp is _NONE_TYPE:
            if value is None:
                return None
        else:
            raise JsonParseError(f"{path}: unsupported type {tp!r}")
        raise JsonParseError(f"{path}: expected {tp.__name__}, got {value!r}")

    raise JsonParseError(f"{path}: unsupported type {tp!r}")


def _from_wire(cls: type, data: Any, path: str) -> Any:
    if not isinstance(data, dict):
        raise JsonParseError(f"{path}: expected an object for {cls.__name__}, got {data!r}")
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        tp = _field_type(cls, f)
        if f.metadata.get("flatten"):
            kwargs[f.name] = _from_wire(tp, data, path)
            continue
        key = _wire_name(f)
        if key in data:
            kwargs[f.name] = _convert(tp, data[key], f"{path}.{key}")
        elif _has_default(f):
            continue
        elif _is_optional(tp):
            kwargs[f.name] = None
        else:
            raise JsonParseError(f"{path}: missing field `{key}` for {cls.__name__}")
    return cls(**kwargs)


def from_wire(cls: type, data: Any) -> Any:
    """Build an instance of dataclass ``cls`` from decoded JSON ``data``."""
    return _from_wire(cls, data, "$")


def to_wire(obj: Any) -> Any:
    """Turn a record (or nested containers of records) into JSON-ready data."""
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        out: dict[str, Any] = {}
        for f in dataclasses.fields(obj):
            value = to_wire(getattr(obj, f.name))
            if f.metadata.get("flatten"):
                out.update(value)
            else:
                out[_wire_name(f)] = value
        return out
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [to_wire(item) for item in obj]
    if isinstance(obj, dict):
        return {key: to_wire(value) for key, value in obj.items()}
    return obj


__all__ = ["Address", "TokenId", "camel_case", "from_wire", "to_wire"]