"""
Recency ranking: explicit k-way merge of per-source sequences, newest first.

Missing timestamps rank as oldest (after every dated item), never first.
"""
import heapq
from datetime import datetime, timezone
from typing import Iterable, Iterator

from crewapp.core.clock import as_utc
from crewapp.services.feed.types import FeedItem

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def recency_key(item: FeedItem) -> tuple[bool, datetime]:
    occurred = as_utc(item.occurred_at)
    return (occurred is not None, occurred or _OLDEST)


def sort_by_recency(items: Iterable[FeedItem]) -> list[FeedItem]:
    return sorted(items, key=recency_key, reverse=True)


def merge_by_recency(*sources: Iterable[FeedItem]) -> Iterator[FeedItem]:
    """Merge sources into one newest-first stream. Each source is re-sorted first, so DB order is not trusted."""
    return heapq.merge(*(sort_by_recency(s) for s in sources), key=recency_key, reverse=True)
