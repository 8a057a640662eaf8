"""
Ports (interfaces) for item and session storage.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod

from .models import DrillSession, VocabItem


class ItemRepository(ABC):
    """
    Port for reading and replacing vocabulary items.

    Implementations:
        - InMemoryStore: Keeps items in a dict (tests, ephemeral server).
        - YamlStore: Persists items to a YAML document on disk.
    """

    @abstractmethod
    def list_items(self) -> list[VocabItem]:
        """Return every stored item, in insertion order."""
        pass

    @abstractmethod
    def get_item(self, item_id: str) -> VocabItem:
        """
        Fetch a single item.

        Raises:
            ItemNotFoundError: If no item has the given id.
        """
        pass

    @abstractmethod
    def save_item(self, item: VocabItem) -> None:
        """Insert the item, or replace the stored item with the same id."""
        pass


class SessionRepository(ABC):
    """Port for the read-mostly drill session history."""

    @abstractmethod
    def list_sessions(self) -> list[DrillSession]:
        pass

    @abstractmethod
    def add_session(self, session: DrillSession) -> None:
        pass
