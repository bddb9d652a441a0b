"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, Field, field_validator

from bookxpert.domain.item import CatalogueItem
from bookxpert.domain.users import UserDetails

# Request models


class EditItemRequest(BaseModel):
    """Edited name and field texts for one catalogue item.

    Fields missing from the request are removed from the item; fields with
    blank text are dropped when saved.
    """

    name: str
    fields: dict[str, str] = Field(default_factory=dict)


class UserDetailsRequest(BaseModel):
    """User details to cache after sign-in."""

    uid: str = Field(..., min_length=1)
    email: str | None = None
    display_name: str | None = None

    @field_validator("uid")
    @classmethod
    def validate_uid(cls, v: str) -> str:
        """Ensure uid is not just whitespace."""
        if not v.strip():
            raise ValueError("uid cannot be empty or whitespace-only")
        return v.strip()


# Response models


class FieldResponse(BaseModel):
    """One field of a catalogue item."""

    key: str
    value: str
    type: str


class CatalogueItemResponse(BaseModel):
    """Response containing a catalogue item."""

    id: str
    name: str
    fields: list[FieldResponse] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: CatalogueItem) -> "CatalogueItemResponse":
        """Convert a CatalogueItem to a response model, fields sorted by key."""
        fields = item.fields or {}
        return cls(
            id=item.id,
            name=item.name,
            fields=[
                FieldResponse(key=key, value=text, type=fields[key].kind)
                for key, text in item.key_value_list
            ],
        )


class CatalogueResponse(BaseModel):
    """The catalogue, sorted for display."""

    items: list[CatalogueItemResponse]
    count: int


class ValidationResponse(BaseModel):
    """Result of validating an edit without saving it."""

    valid: bool
    errors: list[str] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    """Result of deleting a catalogue item."""

    id: str
    notification: str


class UserDetailsResponse(BaseModel):
    """The cached user."""

    uid: str
    email: str | None = None
    display_name: str | None = None
    has_profile_image: bool = False

    @classmethod
    def from_details(cls, details: UserDetails) -> "UserDetailsResponse":
        return cls(
            uid=details.uid,
            email=details.email,
            display_name=details.display_name,
            has_profile_image=details.profile_image is not None,
        )


class HealthResponse(BaseModel):
    """Basic system health."""

    status: str
    storage: str
    storage_backend: str
    catalogue_source: str
    cached_items: int
