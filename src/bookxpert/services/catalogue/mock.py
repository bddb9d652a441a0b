"""Mock catalogue source for testing and offline runs."""

from bookxpert.domain.item import CatalogueItem

from .base import CatalogueSourceError

SAMPLE_CATALOGUE = [
    {
        "id": "1",
        "name": "Google Pixel 6 Pro",
        "data": {"color": "Cloudy White", "capacity": "128 GB"},
    },
    {"id": "2", "name": "Apple iPhone 12 Mini, 256GB, Blue", "data": None},
    {
        "id": "3",
        "name": "Apple iPhone 12 Pro Max",
        "data": {"color": "Cloudy White", "capacity GB": 512},
    },
    {
        "id": "7",
        "name": "Apple MacBook Pro 16",
        "data": {
            "year": 2019,
            "price": 1849.99,
            "CPU model": "Intel Core i9",
            "Hard disk size": "1 TB",
        },
    },
    {
        "id": "10",
        "name": "Apple iPad Mini 5th Gen",
        "data": {"Capacity": "64 GB", "Screen size": 7.9},
    },
]


class MockCatalogueSource:
    """Catalogue source returning scripted results.

    Tracks calls so tests can assert how often the network was used.
    """

    def __init__(
        self,
        items: list[CatalogueItem] | None = None,
        error: CatalogueSourceError | None = None,
    ):
        """Initialize with items to return, or an error to raise."""
        if items is None:
            items = [CatalogueItem.from_dict(entry) for entry in SAMPLE_CATALOGUE]
        self.items = list(items)
        self.error = error
        self.call_count = 0

    @property
    def name(self) -> str:
        return "mock"

    def set_items(self, items: list[CatalogueItem]) -> None:
        """Return these items from now on."""
        self.items = list(items)
        self.error = None

    def set_error(self, error: CatalogueSourceError) -> None:
        """Raise this error from now on."""
        self.error = error

    async def fetch_all(self) -> list[CatalogueItem]:
        self.call_count += 1
        if self.error is not None:
            raise self.error
        return list(self.items)
