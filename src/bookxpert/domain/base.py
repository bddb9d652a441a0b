"""Base exceptions and constants for the catalogue domain."""

# Constants
MAX_NAME_LENGTH = 50
MAX_FIELD_VALUE_LENGTH = 100
MIN_YEAR = 1900
MAX_YEAR = 2030


class CatalogueError(Exception):
    """Base exception for all catalogue errors.

    ``str(error)`` is always a display-ready message.
    """

    pass


class InvalidInput(CatalogueError):  # noqa: N818
    """Raised when an edit fails validation."""

    def __init__(self, messages: list[str]):
        self.messages = list(messages)
        super().__init__("\n".join(self.messages) or "Invalid input")


class ItemNotFound(CatalogueError):  # noqa: N818
    """Raised when an operation targets an id absent from the persisted table."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Catalogue item '{item_id}' was not found")


class TransportFailure(CatalogueError):  # noqa: N818
    """Raised when the remote catalogue source cannot be reached or fails."""

    pass


class PersistenceFailure(CatalogueError):  # noqa: N818
    """Raised when a local write or commit fails."""

    pass
