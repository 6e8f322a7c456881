"""
Feed aggregation: followed set -> three sources (concurrent, own sessions) -> k-way recency
merge -> hidden filter -> page -> actor enrichment.

hasMore describes visible rows: hidden items are dropped before the page boundary, and each
source over-fetches by the hidden-set size so a page is never short because of them.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from itertools import islice
from typing import Callable

from sqlalchemy.orm import Session

from crewapp.core.constants import ITEM_TYPE_USER
from crewapp.db.dialect import insert_ignore
from crewapp.models.favorite import Favorite
from crewapp.models.feed_hidden_item import FeedHiddenItem
from crewapp.models.user import User
from crewapp.services.concurrency import in_session, run_concurrently
from crewapp.services.feed.merge import merge_by_recency
from crewapp.services.feed.sources import FEED_SOURCES
from crewapp.services.feed.types import FeedItem, FeedPage

logger = logging.getLogger(__name__)


def resolve_followed_set(db: Session, viewer_id: int) -> list[int]:
    """Viewer plus every user the viewer has favorited. Always contains the viewer."""
    rows = (
        db.query(Favorite.item_id)
        .filter(Favorite.user_id == viewer_id, Favorite.item_type == ITEM_TYPE_USER)
        .all()
    )
    return sorted({viewer_id} | {r[0] for r in rows})


def load_hidden_ids(db: Session, viewer_id: int) -> set[str]:
    return {r[0] for r in db.query(FeedHiddenItem.item_id).filter(FeedHiddenItem.user_id == viewer_id).all()}


def hide_item(db: Session, viewer_id: int, item_id: str) -> None:
    """Idempotent: hiding twice leaves one marker."""
    try:
        insert_ignore(db, FeedHiddenItem, user_id=viewer_id, item_id=item_id)
        db.commit()
    except Exception:
        db.rollback()
        raise


def unhide_item(db: Session, viewer_id: int, item_id: str) -> None:
    try:
        db.query(FeedHiddenItem).filter_by(user_id=viewer_id, item_id=item_id).delete()
        db.commit()
    except Exception:
        db.rollback()
        raise


def _actor(user: User | None) -> dict:
    if user is None:
        return {}
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "avatar_base64": user.avatar_base64,
        "country_flag": user.country_flag,
        "is_coach": bool(user.is_coach),
        "is_staff": bool(user.is_staff),
        "is_club_member": bool(user.is_club_member),
        "role": user.role,
    }


def attach_actors(db: Session, items: list[FeedItem]) -> list[FeedItem]:
    """One enrichment query for every actor on the page."""
    actor_ids = sorted({i.actor_id for i in items})
    if not actor_ids:
        return items
    users = {u.id: u for u in db.query(User).filter(User.id.in_(actor_ids)).all()}
    return [replace(i, actor=_actor(users.get(i.actor_id))) for i in items]


def build_feed(
    db_factory: Callable[[], Session],
    viewer_id: int,
    limit: int,
    offset: int = 0,
    sources: dict | None = None,
) -> FeedPage:
    """Ranked page of followed-set activity for viewer_id."""
    sources = sources or FEED_SOURCES
    db = db_factory()
    try:
        followed = resolve_followed_set(db, viewer_id)
        hidden = load_hidden_ids(db, viewer_id)
    finally:
        db.close()

    fetch_limit = offset + limit + 1 + len(hidden)
    tasks = {
        name: in_session(db_factory, lambda s, fetch=fetch: fetch(s, followed, viewer_id, fetch_limit))
        for name, fetch in sources.items()
    }
    with ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="feed_source") as executor:
        per_source = run_concurrently(executor, tasks)

    visible = (item for item in merge_by_recency(*per_source.values()) if item.id not in hidden)
    window = list(islice(visible, offset, offset + limit + 1))
    has_more = len(window) > limit
    page = window[:limit]

    db = db_factory()
    try:
        page = attach_actors(db, page)
    finally:
        db.close()

    logger.debug(
        "feed viewer=%s followed=%s hidden=%s items=%s has_more=%s",
        viewer_id, len(followed), len(hidden), len(page), has_more,
    )
    return FeedPage(items=page, has_more=has_more)
