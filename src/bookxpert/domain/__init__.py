"""Domain models for Bookxpert."""

from .base import (
    MAX_NAME_LENGTH,
    CatalogueError,
    InvalidInput,
    ItemNotFound,
    PersistenceFailure,
    TransportFailure,
)
from .item import CatalogueItem, sort_for_display
from .snapshot import CatalogueSnapshot, Subscription
from .validation import ValidationResult, validate
from .values import (
    BoolValue,
    DoubleValue,
    DynamicValue,
    IntValue,
    StringValue,
)

__all__ = [
    "MAX_NAME_LENGTH",
    "BoolValue",
    "CatalogueError",
    "CatalogueItem",
    "CatalogueSnapshot",
    "DoubleValue",
    "DynamicValue",
    "IntValue",
    "InvalidInput",
    "ItemNotFound",
    "PersistenceFailure",
    "StringValue",
    "Subscription",
    "TransportFailure",
    "ValidationResult",
    "sort_for_display",
    "validate",
]
