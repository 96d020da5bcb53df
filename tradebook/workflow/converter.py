"""Custom Temporal DataConverter for tradebook frozen-dataclass types.

Handles serialization of Decimal, date, datetime, Enum and nested frozen
dataclasses (TradeCommand carries a TradeInput carrying TradeLegInputs) by
adding __type__ tags during encoding.
"""

from __future__ import annotations

import dataclasses
import importlib
import json
import types
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union, get_args, get_origin, get_type_hints

from temporalio.converter import (
    CompositePayloadConverter,
    DataConverter,
    DefaultPayloadConverter,
    JSONPlainPayloadConverter,
    JSONTypeConverter,
)

# ---------------------------------------------------------------------------
# Recursive serializer
# ---------------------------------------------------------------------------


def _to_json(obj: Any) -> Any:
    """Recursively convert tradebook objects to JSON-compatible values."""
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Decimal):
        return {"__decimal__": str(obj)}
    if isinstance(obj, datetime):
        return {"__datetime__": obj.isoformat()}
    if isinstance(obj, date):
        return {"__date__": obj.isoformat()}
    if isinstance(obj, Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        d: dict[str, Any] = {
            "__type__": f"{type(obj).__module__}.{type(obj).__qualname__}",
        }
        for field in dataclasses.fields(obj):
            d[field.name] = _to_json(getattr(obj, field.name))
        return d
    if isinstance(obj, (tuple, list)):
        return [_to_json(x) for x in obj]
    if isinstance(obj, dict):
        return {str(k): _to_json(v) for k, v in obj.items()}
    return str(obj)


class TradebookJSONEncoder(json.JSONEncoder):
    def default(self, o: Any) -> Any:
        result = _to_json(o)
        if result is not o:
            return result
        return super().default(o)


# ---------------------------------------------------------------------------
# Recursive deserializer
# ---------------------------------------------------------------------------

# Security: only resolve classes from these modules.
_ALLOWED_MODULES: frozenset[str] = frozenset({
    "tradebook.core.types",
    "tradebook.trade.types",
    "tradebook.workflow.types",
})

_CLASS_CACHE: dict[str, type] = {}


def _resolve_class(fqn: str) -> type | None:
    """Resolve a fully qualified class name from an allowed module."""
    if fqn in _CLASS_CACHE:
        return _CLASS_CACHE[fqn]
    parts = fqn.rsplit(".", 1)
    if len(parts) != 2:
        return None
    module_name, class_name = parts
    if module_name not in _ALLOWED_MODULES:
        return None
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    cls = getattr(module, class_name, None)
    if isinstance(cls, type):
        _CLASS_CACHE[fqn] = cls
        return cls
    return None


def _strip_optional(hint: Any) -> Any:
    """X | None -> X. Other hints pass through."""
    if get_origin(hint) in (Union, types.UnionType):
        args = [a for a in get_args(hint) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return hint


def _from_json(hint: Any, value: Any) -> Any:
    """Recursively convert JSON values back to tradebook types."""
    if value is None:
        return None
    hint = _strip_optional(hint)

    if isinstance(value, dict):
        if "__type__" in value:
            cls = _resolve_class(value["__type__"])
            if cls is None or not dataclasses.is_dataclass(cls):
                raise TypeError(f"Unresolvable payload type: {value['__type__']}")
            hints = get_type_hints(cls)
            kwargs: dict[str, Any] = {
                field.name: _from_json(hints.get(field.name, Any), value[field.name])
                for field in dataclasses.fields(cls)
                if field.name in value
            }
            return cls(**kwargs)
        if "__decimal__" in value:
            return Decimal(value["__decimal__"])
        if "__datetime__" in value:
            return datetime.fromisoformat(value["__datetime__"])
        if "__date__" in value:
            return date.fromisoformat(value["__date__"])

    if isinstance(hint, type) and issubclass(hint, Enum) and not isinstance(value, Enum):
        return hint(value)

    if isinstance(value, list):
        item_hints = get_args(hint) if get_origin(hint) is tuple else ()
        if len(item_hints) == 2 and item_hints[1] is Ellipsis:
            return tuple(_from_json(item_hints[0], x) for x in value)
        if len(item_hints) == len(value):
            return tuple(_from_json(h, x) for h, x in zip(item_hints, value, strict=True))
        return tuple(_from_json(Any, x) for x in value)

    return value


class TradebookJSONTypeConverter(JSONTypeConverter):
    """Deserialize tagged JSON values back to tradebook types."""

    def to_typed_value(self, hint: type, value: Any) -> Any:
        if isinstance(value, dict) and any(
            key in value for key in ("__type__", "__decimal__", "__datetime__", "__date__")
        ):
            return _from_json(hint, value)
        return JSONTypeConverter.Unhandled


# ---------------------------------------------------------------------------
# Wire up
# ---------------------------------------------------------------------------


class TradebookPayloadConverter(CompositePayloadConverter):
    """Payload converter with tradebook-aware JSON handling."""

    def __init__(self) -> None:
        json_converter = JSONPlainPayloadConverter(
            encoder=TradebookJSONEncoder,
            custom_type_converters=[TradebookJSONTypeConverter()],
        )
        super().__init__(
            *(
                c
                for c in DefaultPayloadConverter.default_encoding_payload_converters
                if not isinstance(c, JSONPlainPayloadConverter)
            ),
            json_converter,
        )


TRADEBOOK_DATA_CONVERTER = DataConverter(
    payload_converter_class=TradebookPayloadConverter,
)
