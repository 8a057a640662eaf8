"""Service for minting stable vocabulary item ids."""

from ulid import ULID


def generate_item_id() -> str:
    """Generate a stable, time-sortable item id using ULID."""
    return f"vocab_{ULID()}"


def generate_session_id() -> str:
    return f"session_{ULID()}"
