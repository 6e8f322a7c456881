from crewapp.services.feed.aggregator import build_feed, hide_item, resolve_followed_set, unhide_item
from crewapp.services.feed.ids import feed_item_id
from crewapp.services.feed.merge import merge_by_recency, recency_key
from crewapp.services.feed.types import FeedItem, FeedPage

__all__ = [
    "FeedItem",
    "FeedPage",
    "build_feed",
    "feed_item_id",
    "hide_item",
    "merge_by_recency",
    "recency_key",
    "resolve_followed_set",
    "unhide_item",
]
