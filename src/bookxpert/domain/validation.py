"""Validation rules for catalogue item edits."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass

from .base import MAX_FIELD_VALUE_LENGTH, MAX_NAME_LENGTH, MAX_YEAR, MIN_YEAR
from .values import parse_float, parse_int

CAPACITY_PATTERN = re.compile(r"^\d+\s*(GB|TB|MB)$", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating an edit: valid, or invalid with messages."""

    errors: tuple[str, ...] = ()

    @classmethod
    def valid(cls) -> ValidationResult:
        return cls()

    @classmethod
    def invalid(cls, errors: list[str]) -> ValidationResult:
        return cls(tuple(errors))

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def summary(self) -> str:
        """All messages joined one per line."""
        return "\n".join(self.errors)


def validate_name(name: str) -> list[str]:
    """Check the display name."""
    errors = []
    if not name.strip():
        errors.append("Name cannot be empty")
    if len(name.strip()) > MAX_NAME_LENGTH:
        errors.append(f"Name cannot exceed {MAX_NAME_LENGTH} characters")
    return errors


def validate_field(key: str, value: str) -> list[str]:
    """Check one field's edited text against the rule for its key.

    Keys match case-insensitively. Surrounding whitespace is ignored, since
    it is trimmed before the value is saved.
    """
    errors = []
    text = value.strip()

    lowered = key.lower()

    if lowered == "price":
        price = parse_float(text)
        if text and price is None:
            errors.append("Price must be a valid number")
        if price is not None and price < 0:
            errors.append("Price cannot be negative")

    elif lowered in ("capacity", "storage"):
        if text and not CAPACITY_PATTERN.match(text):
            errors.append(
                "Capacity must be a valid format (e.g., '64 GB', '128GB', '1TB')"
            )

    elif lowered == "year":
        year = parse_int(text)
        if text and year is None:
            errors.append("Year must be a valid number")
        if year is not None and not MIN_YEAR <= year <= MAX_YEAR:
            errors.append(f"Year must be between {MIN_YEAR} and {MAX_YEAR}")

    elif lowered in ("screen size", "screensize"):
        if text and parse_float(text) is None:
            errors.append("Screen size must be a valid number")

    elif len(value) > MAX_FIELD_VALUE_LENGTH:
        # Generic rule for every other field
        errors.append(f"{key.title()} cannot exceed {MAX_FIELD_VALUE_LENGTH} characters")

    return errors


def validate(name: str, fields: Mapping[str, str]) -> ValidationResult:
    """Validate an edited name and its field texts.

    Every rule runs; messages are collected rather than short-circuited.
    """
    errors = validate_name(name)

    for key, value in fields.items():
        errors.extend(validate_field(key, value))

    folded = [key.lower() for key in fields]
    if len(folded) != len(set(folded)):
        errors.append("Duplicate field names are not allowed")

    return ValidationResult.invalid(errors) if errors else ValidationResult.valid()
