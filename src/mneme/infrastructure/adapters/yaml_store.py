"""
YAML Store: infrastructure adapter persisting items and sessions to one file.

Implements ItemRepository and SessionRepository on top of a document of
the form ``{items: [...], sessions: [...]}``.
"""

import logging
import threading
from pathlib import Path
from typing import Any

import yaml

from mneme.domain.errors import ItemNotFoundError, StoreError
from mneme.domain.srs.models import DrillSession, VocabItem
from mneme.domain.srs.ports import ItemRepository, SessionRepository
from mneme.infrastructure.serialization import (
    item_from_dict,
    item_to_dict,
    session_from_dict,
    session_to_dict,
)

logger = logging.getLogger(__name__)


class YamlStore(ItemRepository, SessionRepository):
    """
    Reads the whole document on every call and rewrites it on every save.

    A missing file is treated as an empty store and created on first write.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    # ---------- Items ----------

    def list_items(self) -> list[VocabItem]:
        doc = self._load()
        return [item_from_dict(entry) for entry in doc["items"]]

    def get_item(self, item_id: str) -> VocabItem:
        for entry in self._load()["items"]:
            if isinstance(entry, dict) and str(entry.get("id")) == item_id:
                return item_from_dict(entry)
        raise ItemNotFoundError(item_id)

    def save_item(self, item: VocabItem) -> None:
        with self._lock:
            doc = self._load()
            entries = doc["items"]
            payload = item_to_dict(item)

            for i, entry in enumerate(entries):
                if isinstance(entry, dict) and str(entry.get("id")) == item.id:
                    entries[i] = payload
                    break
            else:
                entries.append(payload)

            self._dump(doc)

    # ---------- Sessions ----------

    def list_sessions(self) -> list[DrillSession]:
        return [session_from_dict(entry) for entry in self._load()["sessions"]]

    def add_session(self, session: DrillSession) -> None:
        with self._lock:
            doc = self._load()
            doc["sessions"].append(session_to_dict(session))
            self._dump(doc)

    # ---------- File I/O ----------

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {"items": [], "sessions": []}

        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise StoreError(f"Could not parse store file {self.path}: {e}") from e
        except OSError as e:
            raise StoreError(f"Could not read store file {self.path}: {e}") from e

        if not isinstance(raw, dict):
            raise StoreError(f"Store file {self.path} must contain a mapping")

        items = raw.get("items") or []
        sessions = raw.get("sessions") or []
        if not isinstance(items, list) or not isinstance(sessions, list):
            raise StoreError(f"Store file {self.path}: 'items' and 'sessions' must be lists")

        return {"items": items, "sessions": sessions}

    def _dump(self, doc: dict[str, Any]) -> None:
        text = yaml.safe_dump(doc, sort_keys=False, allow_unicode=True)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Could not write store file {self.path}: {e}") from e

        logger.debug(
            f"Wrote {len(doc['items'])} items, {len(doc['sessions'])} sessions to {self.path}"
        )
