"""
The three feed event sources. Each returns FeedItems for actors in the followed set, newest
first, with counts-only reaction summaries scoped to its own subject type.
"""
import logging

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, aliased

from crewapp.core.achievements import achievement_payload
from crewapp.core.constants import (
    FEED_ACHIEVEMENT_EARNED,
    FEED_EVENT_JOINED,
    FEED_PROGRESS_MASTERED,
    FEED_PROGRESS_STARTED,
    STATUS_IN_PROGRESS,
    STATUS_MASTERED,
    SUBJECT_ACHIEVEMENT,
    SUBJECT_EVENT,
    SUBJECT_TRICK,
)
from crewapp.models.event import Event
from crewapp.models.event_attendee import EventAttendee
from crewapp.models.trick import Trick
from crewapp.models.user import User
from crewapp.models.user_achievement import UserAchievement
from crewapp.models.user_trick import UserTrick
from crewapp.services.feed.ids import feed_item_id
from crewapp.services.feed.types import FeedItem
from crewapp.services.reactions.loader import load_reaction_counts
from crewapp.services.reactions.types import EMPTY_REACTIONS

logger = logging.getLogger(__name__)

_ACTIVE = (STATUS_IN_PROGRESS, STATUS_MASTERED)


def progress_item_type(status: str | None, goofy_status: str | None) -> str | None:
    """Mastered in either stance wins; otherwise in_progress in either stance; todo is not an activity."""
    if STATUS_MASTERED in (status, goofy_status):
        return FEED_PROGRESS_MASTERED
    if STATUS_IN_PROGRESS in (status, goofy_status):
        return FEED_PROGRESS_STARTED
    return None


def _with_reactions(db: Session, subject_type: str, viewer_id: int, items: list[FeedItem]) -> list[FeedItem]:
    if not items:
        return items
    counts = load_reaction_counts(db, subject_type, viewer_id, [(i.actor_id, i.subject_ref) for i in items])
    return [
        FeedItem(
            id=i.id,
            type=i.type,
            actor_id=i.actor_id,
            subject_ref=i.subject_ref,
            occurred_at=i.occurred_at,
            payload=i.payload,
            reactions=counts.get((i.actor_id, i.subject_ref), EMPTY_REACTIONS),
        )
        for i in items
    ]


def fetch_progress_items(db: Session, followed: list[int], viewer_id: int, fetch_limit: int) -> list[FeedItem]:
    rows = (
        db.query(UserTrick, Trick.name, Trick.category)
        .join(Trick, Trick.id == UserTrick.trick_id)
        .filter(
            UserTrick.user_id.in_(followed),
            or_(UserTrick.status.in_(_ACTIVE), UserTrick.goofy_status.in_(_ACTIVE)),
        )
        .order_by(UserTrick.updated_at.desc().nullslast(), UserTrick.id.desc())
        .limit(fetch_limit)
        .all()
    )
    items = []
    for ut, trick_name, category in rows:
        item_type = progress_item_type(ut.status, ut.goofy_status)
        if item_type is None:
            continue
        subject_ref = str(ut.trick_id)
        items.append(
            FeedItem(
                id=feed_item_id(item_type, ut.user_id, subject_ref),
                type=item_type,
                actor_id=ut.user_id,
                subject_ref=subject_ref,
                occurred_at=ut.updated_at,
                payload={
                    "trick_id": ut.trick_id,
                    "trick_name": trick_name,
                    "category": category,
                    "status": ut.status,
                    "goofy_status": ut.goofy_status,
                },
            )
        )
    return _with_reactions(db, SUBJECT_TRICK, viewer_id, items)


def fetch_event_items(db: Session, followed: list[int], viewer_id: int, fetch_limit: int) -> list[FeedItem]:
    creator = aliased(User)
    rows = (
        db.query(EventAttendee, Event, creator.username, creator.display_name)
        .join(Event, Event.id == EventAttendee.event_id)
        .outerjoin(creator, creator.id == Event.author_id)
        .filter(EventAttendee.user_id.in_(followed))
        .order_by(EventAttendee.registered_at.desc().nullslast(), EventAttendee.id.desc())
        .limit(fetch_limit)
        .all()
    )
    if not rows:
        return []

    event_ids = sorted({ev.id for _, ev, _, _ in rows})
    attendee_counts = dict(
        db.query(EventAttendee.event_id, func.count(EventAttendee.id))
        .filter(EventAttendee.event_id.in_(event_ids))
        .group_by(EventAttendee.event_id)
        .all()
    )

    items = []
    for att, ev, creator_username, creator_name in rows:
        subject_ref = str(ev.id)
        items.append(
            FeedItem(
                id=feed_item_id(FEED_EVENT_JOINED, att.user_id, subject_ref),
                type=FEED_EVENT_JOINED,
                actor_id=att.user_id,
                subject_ref=subject_ref,
                occurred_at=att.registered_at,
                payload={
                    "event_id": ev.id,
                    "event_title": ev.name,
                    "event_date": ev.date.isoformat() if ev.date else None,
                    "event_time": ev.time,
                    "location": ev.location,
                    "spots": ev.spots,
                    "attendee_count": int(attendee_counts.get(ev.id, 0)),
                    "creator": {"username": creator_username, "display_name": creator_name}
                    if creator_username
                    else None,
                },
            )
        )
    return _with_reactions(db, SUBJECT_EVENT, viewer_id, items)


def fetch_achievement_items(db: Session, followed: list[int], viewer_id: int, fetch_limit: int) -> list[FeedItem]:
    rows = (
        db.query(UserAchievement)
        .filter(UserAchievement.user_id.in_(followed))
        .order_by(UserAchievement.achieved_at.desc().nullslast(), UserAchievement.id.desc())
        .limit(fetch_limit)
        .all()
    )
    items = [
        FeedItem(
            id=feed_item_id(FEED_ACHIEVEMENT_EARNED, ua.user_id, ua.achievement_id),
            type=FEED_ACHIEVEMENT_EARNED,
            actor_id=ua.user_id,
            subject_ref=ua.achievement_id,
            occurred_at=ua.achieved_at,
            payload=achievement_payload(ua.achievement_id, ua.tier),
        )
        for ua in rows
    ]
    return _with_reactions(db, SUBJECT_ACHIEVEMENT, viewer_id, items)


FEED_SOURCES = {
    "progress": fetch_progress_items,
    "events": fetch_event_items,
    "achievements": fetch_achievement_items,
}
