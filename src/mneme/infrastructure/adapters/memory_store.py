"""
In-memory store that keeps items and sessions in process memory.

Used by tests and by the server when no store file is configured.
"""

from mneme.domain.errors import ItemNotFoundError
from mneme.domain.srs.models import DrillSession, VocabItem
from mneme.domain.srs.ports import ItemRepository, SessionRepository


class InMemoryStore(ItemRepository, SessionRepository):
    def __init__(
        self,
        items: list[VocabItem] | None = None,
        sessions: list[DrillSession] | None = None,
    ):
        self._items: dict[str, VocabItem] = {item.id: item for item in items or []}
        self._sessions: list[DrillSession] = list(sessions or [])

    def list_items(self) -> list[VocabItem]:
        return list(self._items.values())

    def get_item(self, item_id: str) -> VocabItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFoundError(item_id) from None

    def save_item(self, item: VocabItem) -> None:
        self._items[item.id] = item

    def list_sessions(self) -> list[DrillSession]:
        return list(self._sessions)

    def add_session(self, session: DrillSession) -> None:
        self._sessions.append(session)
