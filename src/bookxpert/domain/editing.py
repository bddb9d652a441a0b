"""Edit session for a single catalogue item."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import InvalidInput
from .item import CatalogueItem
from .validation import ValidationResult, validate
from .values import DynamicValue, infer_from_text, reinterpret

if TYPE_CHECKING:
    from .repository import CatalogueRepository


class ItemEditor:
    """Holds the text being edited for one item and turns it back into values.

    Fields that existed on the original item keep their original type when
    the new text fits it; new fields get a type inferred from their text.
    """

    def __init__(self, item: CatalogueItem, repository: CatalogueRepository | None = None):
        self.original = item
        self.repository = repository
        self.edited_name = item.name
        self.editable_fields: dict[str, str] = {
            key: value.string_value for key, value in (item.fields or {}).items()
        }

    def update_field(self, key: str, value: str) -> None:
        """Set the text of a field, adding it if new."""
        self.editable_fields[key] = value

    def remove_field(self, key: str) -> None:
        self.editable_fields.pop(key, None)

    def validate(self) -> ValidationResult:
        return validate(self.edited_name, self.editable_fields)

    @property
    def validation_summary(self) -> str:
        return self.validate().summary

    def build_updated_item(self) -> CatalogueItem:
        """Build the item that saving would write.

        Values that are empty after trimming are dropped.
        """
        original_fields = self.original.fields or {}
        fields: dict[str, DynamicValue] = {}

        for key, value in self.editable_fields.items():
            text = value.strip()
            if not text:
                continue

            original = original_fields.get(key)
            if original is not None:
                fields[key] = reinterpret(text, original)
            else:
                fields[key] = infer_from_text(text)

        return self.original.with_changes(
            name=self.edited_name.strip(), fields=fields or None
        )

    @property
    def has_changes(self) -> bool:
        """Whether the edit differs from the original, compared as text."""
        current = self.build_updated_item()
        if current.name != self.original.name:
            return True
        return dict(current.key_value_list) != dict(self.original.key_value_list)

    async def save(self) -> CatalogueItem:
        """Validate, then persist through the repository.

        Raises:
            InvalidInput: Validation failed; nothing was written
            ItemNotFound, PersistenceFailure: From the repository
        """
        if self.repository is None:
            raise RuntimeError("ItemEditor needs a repository to save")

        result = self.validate()
        if not result.is_valid:
            raise InvalidInput(list(result.errors))

        return await self.repository.save(self.build_updated_item())
