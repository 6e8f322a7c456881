"""
Snapshot fingerprint: a short opaque token that changes whenever anything the snapshot shows
this user may have changed.

Signals are O(1) aggregates (max / count), read in ONE round trip as a single SELECT of
scalar subqueries, joined in a fixed order and hashed with adler32 + crc32 (fast,
non-cryptographic). The user id is appended so a token is never valid for another user.

Equal tokens => the caller may answer "not modified". A signal that is missing here would
make that answer wrong, so every section of the snapshot payload has at least one signal:
catalogs (with their authors), events and attendance, the user's own progress / registrations /
favorites / news / notifications / bookings, the profiles of feed actors and event creators,
and the followed set's activity and reactions (feed). Tables whose rows get deleted pair
count with max(id), so a remove-then-add never restores an old vector.
"""
import logging
import zlib
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from crewapp.core.clock import as_utc
from crewapp.core.constants import ITEM_TYPE_USER
from crewapp.models.comment import Comment
from crewapp.models.event import Event
from crewapp.models.event_attendee import EventAttendee
from crewapp.models.favorite import Favorite
from crewapp.models.feed_hidden_item import FeedHiddenItem
from crewapp.models.like import Like
from crewapp.models.news import News, UserNewsHidden, UserNewsRead
from crewapp.models.notification_group import NotificationGroup
from crewapp.models.order import Order
from crewapp.models.user import User
from crewapp.models.user_achievement import UserAchievement
from crewapp.models.user_article import UserArticle
from crewapp.models.user_trick import UserTrick
from crewapp.services.catalogs import CATALOGS, version_columns, version_signal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fingerprint:
    token: str
    signals: dict = field(default_factory=dict)
    catalog_versions: dict = field(default_factory=dict)


def _scalar(*cols, where=()):
    return [select(c).where(*where).scalar_subquery() for c in cols]


def _followed(column, user_id: int):
    """column belongs to the viewer or to a user the viewer favorited."""
    favorited = select(Favorite.item_id).where(
        Favorite.user_id == user_id, Favorite.item_type == ITEM_TYPE_USER
    )
    return or_(column == user_id, column.in_(favorited))


def signal_columns(user_id: int) -> list[tuple[str, object]]:
    """(name, scalar subquery) pairs in the fixed order the token is built from."""
    # Catalogs first, with the exact columns their cached versions are read with
    groups: list[tuple[str, list]] = [(name, version_columns(spec)) for name, spec in CATALOGS.items()]
    # Rows that are deleted (unlike, unhide, unfavorite) pair count with max(id): ids never repeat
    groups += [
        ("events", _scalar(func.max(Event.updated_at), func.count(Event.id))),
        ("attendees", _scalar(
            func.count(EventAttendee.id), func.max(EventAttendee.registered_at), func.max(EventAttendee.id)
        )),
        ("news", _scalar(func.count(News.id), func.max(News.created_at))),
        # Profiles shown outside catalogs: feed actors and event creators
        ("profiles", _scalar(
            func.max(User.updated_at),
            func.count(User.id),
            where=(or_(_followed(User.id, user_id), User.id.in_(select(Event.author_id))),),
        )),
        # This user's own state
        ("progress", _scalar(
            func.max(UserTrick.updated_at), func.count(UserTrick.id), where=(UserTrick.user_id == user_id,)
        )),
        ("article_progress", _scalar(
            func.max(UserArticle.updated_at), func.count(UserArticle.id), where=(UserArticle.user_id == user_id,)
        )),
        ("registrations", _scalar(
            func.count(EventAttendee.id), func.max(EventAttendee.id), where=(EventAttendee.user_id == user_id,)
        )),
        ("favorites", _scalar(
            func.count(Favorite.id),
            func.max(Favorite.created_at),
            func.max(Favorite.id),
            where=(Favorite.user_id == user_id,),
        )),
        ("news_read", _scalar(
            func.count(UserNewsRead.id), func.max(UserNewsRead.id), where=(UserNewsRead.user_id == user_id,)
        )),
        ("news_hidden", _scalar(
            func.count(UserNewsHidden.id), func.max(UserNewsHidden.id), where=(UserNewsHidden.user_id == user_id,)
        )),
        ("notifications_unread", _scalar(
            func.count(NotificationGroup.id),
            where=(NotificationGroup.user_id == user_id, NotificationGroup.is_read.is_(False)),
        )),
        ("bookings", _scalar(func.count(Order.id), func.max(Order.updated_at), where=(Order.user_id == user_id,))),
        ("feed_hidden", _scalar(
            func.count(FeedHiddenItem.id), func.max(FeedHiddenItem.id), where=(FeedHiddenItem.user_id == user_id,)
        )),
        # Followed set activity (feed)
        ("followed_progress", _scalar(
            func.max(UserTrick.updated_at), func.count(UserTrick.id), where=(_followed(UserTrick.user_id, user_id),)
        )),
        ("followed_achievements", _scalar(
            func.max(UserAchievement.achieved_at),
            func.count(UserAchievement.id),
            where=(_followed(UserAchievement.user_id, user_id),),
        )),
        ("followed_likes", _scalar(func.count(Like.id), func.max(Like.id), where=(_followed(Like.owner_id, user_id),))),
        ("followed_comments", _scalar(
            func.count(Comment.id),
            func.max(Comment.id),
            where=(_followed(Comment.owner_id, user_id), Comment.is_deleted.is_(False)),
        )),
    ]
    out = []
    for name, subqueries in groups:
        for i, sq in enumerate(subqueries):
            out.append((f"{name}.{i}", sq))
    return out


def _fmt(value) -> str:
    if value is None:
        return "-"
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return str(value)


def fingerprint_token(values: list, user_id: int) -> str:
    """Deterministic token for an ordered signal vector."""
    raw = "|".join(_fmt(v) for v in values).encode("utf-8")
    return f"{zlib.adler32(raw):08x}{zlib.crc32(raw):08x}-u{user_id}"


def compute_fingerprint(db: Session, user_id: int) -> Fingerprint:
    columns = signal_columns(user_id)
    row = db.execute(select(*[sq.label(name.replace(".", "_")) for name, sq in columns])).one()
    values = list(row)
    signals = {name: value for (name, _), value in zip(columns, values)}
    catalog_versions = {
        name: version_signal(*(v for k, v in signals.items() if k.rsplit(".", 1)[0] == name))
        for name in CATALOGS
    }
    return Fingerprint(
        token=fingerprint_token(values, user_id),
        signals=signals,
        catalog_versions=catalog_versions,
    )


def parse_if_none_match(header: str | None) -> set[str]:
    """Entity tags from an If-None-Match header: strips W/ and quotes, splits lists."""
    if not header:
        return set()
    tags = set()
    for part in header.split(","):
        tag = part.strip()
        if tag.startswith("W/"):
            tag = tag[2:]
        tag = tag.strip('"')
        if tag:
            tags.add(tag)
    return tags


def etag_matches(header: str | None, token: str | None) -> bool:
    if not token:
        return False
    return token in parse_if_none_match(header)


def format_etag(token: str) -> str:
    return f'"{token}"'
