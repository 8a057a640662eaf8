from datetime import datetime, timezone

import pytest

from mneme.domain.srs.models import PerformanceCounters, ScheduleState, VocabItem

T0 = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_item():
    """Factory for vocabulary items with sensible defaults."""

    def _make(
        item_id: str = "vocab-1",
        term: str = "hola",
        created_at: datetime = T0,
        schedule: ScheduleState | None = None,
        performance: PerformanceCounters | None = None,
    ) -> VocabItem:
        return VocabItem(
            id=item_id,
            term=term,
            meaning="hello",
            created_at=created_at,
            schedule=schedule,
            performance=performance,
        )

    return _make


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/store files
    monkeypatch.setenv("HOME", str(home))
    for var in ("MNEME_BACKEND", "MNEME_STORE_PATH", "MNEME_MIN_INTERVAL_HOURS"):
        monkeypatch.delenv(var, raising=False)
    return home
