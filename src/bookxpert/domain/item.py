"""Catalogue item domain model."""

from __future__ import annotations

import locale
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from typing import Any

from .values import DynamicValue, ValueDecodeError, decode, encode_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogueItem:
    """A single catalogue entry.

    Items are immutable; edits produce a new item via ``with_changes``.
    ``fields`` is None (or empty) when the item has no extra data.
    """

    id: str
    name: str
    fields: Mapping[str, DynamicValue] | None = None

    @property
    def key_value_list(self) -> list[tuple[str, str]]:
        """Fields as (key, display text) pairs sorted by key."""
        if not self.fields:
            return []
        return sorted(
            ((key, value.string_value) for key, value in self.fields.items()),
            key=lambda pair: pair[0],
        )

    def with_changes(
        self, name: str, fields: Mapping[str, DynamicValue] | None
    ) -> CatalogueItem:
        """Return a copy with a new name and field mapping."""
        return replace(self, name=name, fields=dict(fields) if fields else None)

    def to_dict(self) -> dict:
        """Serialize to the remote catalogue JSON shape."""
        return {
            "id": self.id,
            "name": self.name,
            "data": encode_fields(self.fields) if self.fields else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CatalogueItem:
        """Hydrate from the remote catalogue JSON shape.

        Field values that are not JSON scalars (null, nested objects) are
        skipped.

        Raises:
            ValueError: id or name missing or not a string
        """
        item_id = data.get("id")
        name = data.get("name")
        if not isinstance(item_id, str) or not isinstance(name, str):
            raise ValueError(f"Catalogue entry needs string id and name: {data!r}")

        raw_fields = data.get("data")
        if raw_fields is None:
            return cls(id=item_id, name=name)
        if not isinstance(raw_fields, Mapping):
            raise ValueError(f"Catalogue entry '{item_id}' has non-object data")

        fields: dict[str, DynamicValue] = {}
        for key, raw in raw_fields.items():
            try:
                fields[str(key)] = decode(raw)
            except ValueDecodeError:
                logger.debug(f"Skipping unsupported field '{key}' on item {item_id}")
        return cls(id=item_id, name=name, fields=fields or None)


def sort_for_display(items: Iterable[CatalogueItem]) -> list[CatalogueItem]:
    """Sort items by name, locale-aware and case-insensitive."""
    return sorted(
        items, key=lambda item: (locale.strxfrm(item.name.casefold()), item.name)
    )


def use_system_collation() -> None:
    """Make sort_for_display follow the user's locale.

    Python starts in the C locale, where strxfrm is a plain code point
    comparison. Entry points call this once at startup.
    """
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.warning(f"Locale collation unavailable, sorting by code point: {e}")
