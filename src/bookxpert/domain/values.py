"""Dynamic field values for catalogue items.

Catalogue items carry an untyped JSON object of extra fields. Each scalar is
held as one of four variants so that an edited value can be saved back with
the type it arrived with:

- ``BoolValue``
- ``IntValue``
- ``DoubleValue``
- ``StringValue``

Decoding tries the variants in exactly that order and the first successful
interpretation wins, so ``"1"`` decodes as ``IntValue(1)`` and ``"true"`` as
``BoolValue(True)``. A whole-number float decodes as an ``IntValue``.
Encoding never infers anything: each variant writes its native JSON scalar.
"""

from __future__ import annotations

import json
import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")


class ValueDecodeError(ValueError):
    """Raised when a raw value cannot be represented as a DynamicValue."""

    pass


class ValueEncodeError(ValueError):
    """Raised when a field mapping cannot be serialized."""

    pass


def parse_bool(text: str) -> bool | None:
    """Parse ``true``/``false`` in any case, or return None."""
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return None


def parse_int(text: str) -> int | None:
    """Parse a plain integer literal, or return None."""
    if _INT_PATTERN.match(text):
        return int(text)
    return None


def parse_float(text: str) -> float | None:
    """Parse a finite decimal literal, or return None."""
    if not _FLOAT_PATTERN.match(text):
        return None
    number = float(text)
    if not math.isfinite(number):
        return None
    return number


class DynamicValue:
    """Base class for the four field value variants."""

    kind: ClassVar[str] = ""
    value: Any

    def encode(self) -> Any:
        """Return the native JSON scalar for this value."""
        return self.value

    @property
    def string_value(self) -> str:
        """Text used to display and edit this value."""
        return str(self.value)

    @classmethod
    def parse(cls, text: str) -> DynamicValue | None:
        """Parse text as this variant, or return None if it does not fit."""
        raise NotImplementedError


@dataclass(frozen=True)
class BoolValue(DynamicValue):
    value: bool
    kind: ClassVar[str] = "bool"

    @property
    def string_value(self) -> str:
        return "true" if self.value else "false"

    @classmethod
    def parse(cls, text: str) -> BoolValue | None:
        parsed = parse_bool(text)
        return None if parsed is None else cls(parsed)


@dataclass(frozen=True)
class IntValue(DynamicValue):
    value: int
    kind: ClassVar[str] = "int"

    @classmethod
    def parse(cls, text: str) -> IntValue | None:
        parsed = parse_int(text)
        return None if parsed is None else cls(parsed)


@dataclass(frozen=True)
class DoubleValue(DynamicValue):
    value: float
    kind: ClassVar[str] = "double"

    @property
    def string_value(self) -> str:
        return repr(float(self.value))

    @classmethod
    def parse(cls, text: str) -> DoubleValue | None:
        parsed = parse_float(text)
        return None if parsed is None else cls(parsed)


@dataclass(frozen=True)
class StringValue(DynamicValue):
    value: str
    kind: ClassVar[str] = "string"

    @classmethod
    def parse(cls, text: str) -> StringValue:
        return cls(text)


def _from_number(number: float) -> DynamicValue:
    """Fold whole-number floats into the integer variant."""
    if not math.isfinite(number):
        raise ValueDecodeError(f"Unsupported value: {number!r}")
    if number.is_integer():
        return IntValue(int(number))
    return DoubleValue(number)


def decode(raw: Any) -> DynamicValue:
    """Decode an untyped scalar, trying Bool, Int, Double, then String.

    Raises:
        ValueDecodeError: raw is not a JSON scalar (None, list, dict, ...)
    """
    # bool first: it is a subclass of int
    if isinstance(raw, bool):
        return BoolValue(raw)
    if isinstance(raw, int):
        return IntValue(raw)
    if isinstance(raw, float):
        return _from_number(raw)
    if isinstance(raw, str):
        as_bool = parse_bool(raw)
        if as_bool is not None:
            return BoolValue(as_bool)
        as_int = parse_int(raw)
        if as_int is not None:
            return IntValue(as_int)
        as_float = parse_float(raw)
        if as_float is not None:
            return _from_number(as_float)
        return StringValue(raw)
    raise ValueDecodeError(f"Unsupported value: {raw!r}")


def encode(value: DynamicValue) -> Any:
    """Encode a value to its native JSON scalar."""
    return value.encode()


def string_value(value: DynamicValue) -> str:
    """Display/edit projection of a value."""
    return value.string_value


def infer_from_text(text: str) -> DynamicValue:
    """Infer a variant for freshly typed text with no prior type hint."""
    for variant in (BoolValue, IntValue, DoubleValue):
        parsed = variant.parse(text)
        if parsed is not None:
            return parsed
    return StringValue(text)


def reinterpret(text: str, original: DynamicValue) -> DynamicValue:
    """Parse edited text as the original value's variant.

    Falls back to ``StringValue(text)`` when the text does not fit, so an
    edit is never blocked by type coercion.
    """
    parsed = type(original).parse(text)
    if parsed is None:
        return StringValue(text)
    return parsed


def decode_fields(raw: Mapping[str, Any]) -> dict[str, DynamicValue]:
    """Decode every value of a raw JSON object."""
    return {str(key): decode(value) for key, value in raw.items()}


def encode_fields(fields: Mapping[str, DynamicValue]) -> dict[str, Any]:
    """Encode every value of a field mapping."""
    return {key: encode(value) for key, value in fields.items()}


def fields_to_blob(fields: Mapping[str, DynamicValue] | None) -> bytes | None:
    """Serialize a field mapping for storage; empty or missing maps to None."""
    if not fields:
        return None
    try:
        return json.dumps(encode_fields(fields), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise ValueEncodeError(f"Cannot serialize fields: {e}") from e


def fields_from_blob(blob: bytes | None) -> dict[str, DynamicValue] | None:
    """Deserialize a stored field blob."""
    if blob is None:
        return None
    try:
        raw = json.loads(bytes(blob).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueDecodeError(f"Malformed field blob: {e}") from e
    if not isinstance(raw, dict):
        raise ValueDecodeError(f"Field blob is not an object: {type(raw).__name__}")
    return decode_fields(raw)
