"""
JSON codec for service payloads.

Request bodies are decoded into a zero value of the declared type, so any key
missing from the body keeps its zero value (or the dataclass default). Keys
match dataclass fields exactly first, then case-insensitively. Unknown keys
are ignored.
"""
from __future__ import annotations

import dataclasses
import enum
import json
import types
import typing
from typing import Any, Dict, Optional, Tuple

from .errors import DecodeError, EncodeError

_NONE_TYPE = type(None)
_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)
_PRIMITIVE_ZERO: Dict[type, Any] = {int: 0, float: 0.0, str: "", bool: False}


def _is_union(tp) -> bool:
    origin = typing.get_origin(tp)
    return origin is typing.Union or origin is types.UnionType


def unwrap_optional(tp) -> Tuple[Any, bool]:
    """
    Return (inner, True) for Optional[inner], (tp, False) for anything else.
    """
    if _is_union(tp):
        args = [a for a in typing.get_args(tp) if a is not _NONE_TYPE]
        if len(args) == 1 and len(typing.get_args(tp)) == 2:
            return args[0], True
    return tp, False


def is_dataclass_type(tp) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def is_request_type(tp) -> bool:
    if is_dataclass_type(tp):
        return True
    return typing.get_origin(tp) in (list, dict) or tp in (list, dict)


def is_response_type(tp) -> bool:
    if is_request_type(tp):
        return True
    if isinstance(tp, type) and issubclass(tp, BaseException):
        return False
    return isinstance(tp, type) and callable(getattr(tp, "to_json", None))


def type_name(tp) -> str:
    return getattr(tp, "__name__", None) or repr(tp)


def _field_types(tp) -> Dict[str, Any]:
    return typing.get_type_hints(tp)


def zero_value(tp) -> Any:
    if tp is Any or tp is None or tp is _NONE_TYPE:
        return None
    if _is_union(tp):
        return None
    if tp in _PRIMITIVE_ZERO:
        return _PRIMITIVE_ZERO[tp]
    if is_dataclass_type(tp):
        return _build_dataclass(tp, {}, path=type_name(tp))
    origin = typing.get_origin(tp) or tp
    if origin in (list, dict, tuple, set, frozenset):
        return origin()
    return None


def _build_dataclass(tp, data: Dict[str, Any], path: str) -> Any:
    hints = _field_types(tp)
    lowered = {k.lower(): k for k in data}
    kwargs: Dict[str, Any] = {}
    for f in dataclasses.fields(tp):
        if not f.init:
            continue
        ftype = hints.get(f.name, Any)
        key = f.name if f.name in data else lowered.get(f.name.lower())
        if key is not None and data[key] is not None:
            kwargs[f.name] = decode_value(ftype, data[key], path=f"{path}.{f.name}")
            continue
        has_default = (
            f.default is not dataclasses.MISSING
            or f.default_factory is not dataclasses.MISSING
        )
        if not has_default:
            kwargs[f.name] = zero_value(ftype)
    try:
        return tp(**kwargs)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"cannot build {type_name(tp)} at {path}: {e}") from e


def _mismatch(tp, data, path: str) -> DecodeError:
    return DecodeError(
        f"cannot decode {type(data).__name__} into {type_name(tp)} at {path}"
    )


def decode_value(tp, data: Any, path: str = "$") -> Any:
    """
    Convert parsed JSON `data` into an instance of `tp`.
    """
    if tp is Any or tp is object:
        return data
    if data is None:
        return zero_value(tp)

    inner, optional = unwrap_optional(tp)
    if optional:
        return decode_value(inner, data, path)
    if _is_union(tp):
        for arg in typing.get_args(tp):
            if arg is _NONE_TYPE:
                continue
            try:
                return decode_value(arg, data, path)
            except DecodeError:
                continue
        raise _mismatch(tp, data, path)

    if tp is bool:
        if isinstance(data, bool):
            return data
        raise _mismatch(tp, data, path)
    if tp is int:
        if isinstance(data, int) and not isinstance(data, bool):
            return data
        raise _mismatch(tp, data, path)
    if tp is float:
        if isinstance(data, (int, float)) and not isinstance(data, bool):
            try:
                return float(data)
            except OverflowError as e:
                raise DecodeError(f"number out of range for float at {path}") from e
        raise _mismatch(tp, data, path)
    if tp is str:
        if isinstance(data, str):
            return data
        raise _mismatch(tp, data, path)
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        try:
            return tp(data)
        except ValueError as e:
            raise DecodeError(f"invalid {type_name(tp)} value {data!r} at {path}") from e
    if is_dataclass_type(tp):
        if not isinstance(data, dict):
            raise _mismatch(tp, data, path)
        return _build_dataclass(tp, data, path)

    origin = typing.get_origin(tp) or tp
    args = typing.get_args(tp)
    if origin in _SEQUENCE_ORIGINS:
        if not isinstance(data, list):
            raise _mismatch(tp, data, path)
        if origin is tuple and args and args[-1] is not Ellipsis:
            if len(args) != len(data):
                raise DecodeError(f"expected {len(args)} items at {path}, got {len(data)}")
            return tuple(decode_value(a, d, f"{path}[{i}]") for i, (a, d) in enumerate(zip(args, data)))
        item_type = args[0] if args else Any
        return origin(decode_value(item_type, d, f"{path}[{i}]") for i, d in enumerate(data))
    if origin is dict:
        if not isinstance(data, dict):
            raise _mismatch(tp, data, path)
        value_type = args[1] if len(args) == 2 else Any
        return {k: decode_value(value_type, v, f"{path}.{k}") for k, v in data.items()}

    if isinstance(tp, type) and isinstance(data, tp):
        return data
    raise _mismatch(tp, data, path)


def _reject_constant(name: str):
    raise ValueError(f"non-standard JSON constant {name}")


def decode_body(tp, raw: Optional[bytes]) -> Any:
    """
    Decode a request body. An absent or empty body yields the zero value.
    NaN and Infinity are not JSON and are refused.
    """
    if not raw or not raw.strip():
        return zero_value(tp)
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, UnicodeDecodeError, RecursionError) as e:
        raise DecodeError(f"malformed JSON body: {e}") from e
    return decode_value(tp, data)


def encode_value(obj: Any) -> Any:
    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj
    if isinstance(obj, enum.Enum):
        return encode_value(obj.value)
    if hasattr(obj, "to_json") and callable(obj.to_json) and not isinstance(obj, type):
        return obj.to_json()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: encode_value(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, dict):
        return {str(k): encode_value(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [encode_value(v) for v in obj]
    raise EncodeError(f"cannot encode value of type {type(obj).__name__}")


def encode_body(obj: Any) -> bytes:
    try:
        text = json.dumps(encode_value(obj), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise EncodeError(f"cannot encode response: {e}") from e
    return (text + "\n").encode("utf-8")
