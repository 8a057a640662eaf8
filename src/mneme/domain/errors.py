"""Exception hierarchy for Mneme."""


class MnemeError(Exception):
    """Base class for all Mneme errors."""


class InvalidInputError(MnemeError, ValueError):
    """Raised when a caller passes a value outside its documented range."""


class ItemNotFoundError(MnemeError, KeyError):
    """Raised by repositories when an item id is unknown."""

    def __init__(self, item_id: str):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Vocabulary item not found: {self.item_id}"


class StoreError(MnemeError):
    """Raised when a backing store cannot be read or written."""
