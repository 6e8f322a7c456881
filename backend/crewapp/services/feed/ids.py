"""Stable feed item ids. Content-derived so hidden markers and client dedupe survive refetches."""
from crewapp.core.constants import FEED_ITEM_TYPES


def feed_item_id(item_type: str, actor_id: int, subject_ref) -> str:
    """Same (type, actor, subject) always yields the same id, e.g. 'event_joined_7_42'."""
    if item_type not in FEED_ITEM_TYPES:
        raise ValueError(f"Unknown feed item type: {item_type}")
    return f"{item_type}_{int(actor_id)}_{subject_ref}"
