"""
Purpose: Wire naming convention + record <-> JSON document conversion.
What it does:
- to_snake_case(): the field-naming policy used on the wire ("RoadClass" -> "road_class").
- to_document(): dataclass record -> plain JSON document (None fields are omitted).
- from_document(): JSON object -> dataclass record, driven by the declared field types.

Rule: Pure functions only. No HTTP, no logging.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import functools
import typing
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type, TypeVar, Union

T = TypeVar("T")


class DocumentError(ValueError):
    """A JSON value does not match the type declared on the target record."""
    pass


def to_snake_case(name: Optional[str]) -> Optional[str]:
    """
    Convert an identifier to the snake_case wire convention.

    Acronym runs are kept together: "HTTPStatus" -> "http_status".
    Names that are already snake_case come back unchanged.
    """
    if not name:
        return name

    out = []
    previous_upper = False
    for i, char in enumerate(name):
        if char.isupper():
            if i > 0 and not previous_upper:
                out.append("_")
            elif i > 0 and previous_upper and i < len(name) - 1 and name[i + 1].islower():
                out.append("_")
            out.append(char.lower())
            previous_upper = True
        else:
            out.append(char)
            previous_upper = False
    return "".join(out)


#----------------
# serialization (record -> document)
#----------------

def to_document(value: Any) -> Any:
    """
    Convert a record (or any nesting of records, lists and dicts) to a JSON-ready document.

    - dataclass fields named through to_snake_case, None fields dropped
    - Enum -> its value
    - datetime -> integer epoch seconds
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        document = {}
        for f in dataclasses.fields(value):
            field_value = getattr(value, f.name)
            if field_value is None:
                continue
            document[to_snake_case(f.name)] = to_document(field_value)
        return document
    if isinstance(value, Enum):
        return to_document(value.value)
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, (list, tuple)):
        return [to_document(item) for item in value]
    if isinstance(value, dict):
        return {key: to_document(item) for key, item in value.items()}
    return value


#----------------
# deserialization (document -> record)
#----------------

@functools.lru_cache(maxsize=None)
def _record_schema(cls: type) -> Tuple[Dict[str, Any], Dict[str, str], Dict[str, str], Tuple[str, ...]]:
    hints = typing.get_type_hints(cls)
    exact: Dict[str, str] = {}
    folded: Dict[str, str] = {}
    required = []
    for f in dataclasses.fields(cls):
        wire = to_snake_case(f.name)
        exact[wire] = f.name
        folded[wire.lower()] = f.name
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.append(f.name)
    return hints, exact, folded, tuple(required)


def _match_field(exact: Dict[str, str], folded: Dict[str, str], key: str) -> Optional[str]:
    if key in exact:
        return exact[key]
    wire = to_snake_case(key)
    if wire in exact:
        return exact[wire]
    # tolerate casing drift on the server side
    return folded.get(key.lower()) or folded.get(wire.lower())


def _json_kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _convert(tp: Any, value: Any, path: str) -> Any:
    origin = typing.get_origin(tp)

    if origin is Union:
        if value is None:
            return None
        options = [arg for arg in typing.get_args(tp) if arg is not type(None)]
        tp = options[0]
        origin = typing.get_origin(tp)

    if tp is Any:
        return value

    if value is None:
        raise DocumentError(f"{path}: expected a value, got null")

    if origin in (list, collections.abc.Sequence):
        if not isinstance(value, list):
            raise DocumentError(f"{path}: expected array, got {_json_kind(value)}")
        item_type = (typing.get_args(tp) or (Any,))[0]
        return [_convert(item_type, item, f"{path}[{i}]") for i, item in enumerate(value)]

    if origin is dict:
        if not isinstance(value, dict):
            raise DocumentError(f"{path}: expected object, got {_json_kind(value)}")
        value_type = (typing.get_args(tp) or (str, Any))[1]
        return {key: _convert(value_type, item, f"{path}.{key}") for key, item in value.items()}

    if dataclasses.is_dataclass(tp):
        return from_document(tp, value, path=path)

    if isinstance(tp, type) and issubclass(tp, Enum):
        try:
            return tp(value)
        except ValueError:
            raise DocumentError(f"{path}: {value!r} is not a valid {tp.__name__}") from None

    if tp is bool:
        if not isinstance(value, bool):
            raise DocumentError(f"{path}: expected boolean, got {_json_kind(value)}")
        return value

    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DocumentError(f"{path}: expected integer, got {_json_kind(value)}")
        return value

    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DocumentError(f"{path}: expected number, got {_json_kind(value)}")
        return float(value)

    if tp is str:
        if not isinstance(value, str):
            raise DocumentError(f"{path}: expected string, got {_json_kind(value)}")
        return value

    if tp is datetime:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise DocumentError(f"{path}: expected epoch seconds, got {_json_kind(value)}")
        return datetime.fromtimestamp(value, tz=timezone.utc)

    return value


def from_document(cls: Type[T], data: Any, path: Optional[str] = None) -> T:
    """
    Build a dataclass record from a JSON object.

    Keys are matched to fields through to_snake_case (case-insensitively as a fallback),
    unknown keys are ignored. Values of the wrong JSON type raise DocumentError.
    """
    path = path or cls.__name__
    if not isinstance(data, dict):
        raise DocumentError(f"{path}: expected object, got {_json_kind(data)}")

    hints, exact, folded, required = _record_schema(cls)
    kwargs = {}
    for key, value in data.items():
        name = _match_field(exact, folded, key)
        if name is None or name in kwargs:
            continue
        kwargs[name] = _convert(hints[name], value, f"{path}.{name}")

    missing = [name for name in required if kwargs.get(name) is None]
    if missing:
        raise DocumentError(f"{path}: missing required field(s) {', '.join(missing)}")
    return cls(**kwargs)
