"""Per-user snapshot sections. Plain reads, one function per section, each taking its own session."""
from sqlalchemy import and_, exists, func, select
from sqlalchemy.orm import Session

from crewapp.core.constants import BOOKING_ORDER_STATUSES, ITEM_TYPE_ARTICLE, ITEM_TYPE_TRICK, ITEM_TYPE_USER
from crewapp.models.event import Event
from crewapp.models.event_attendee import EventAttendee
from crewapp.models.favorite import Favorite
from crewapp.models.news import News, UserNewsHidden, UserNewsRead
from crewapp.models.notification_group import NotificationGroup
from crewapp.models.order import Order
from crewapp.models.user import User
from crewapp.models.user_article import UserArticle
from crewapp.services.progress import get_progress


def load_events(db: Session) -> list[dict]:
    attendees = (
        db.query(func.count(EventAttendee.id))
        .filter(EventAttendee.event_id == Event.id)
        .correlate(Event)
        .scalar_subquery()
    )
    rows = (
        db.query(Event, User.username, User.display_name, attendees.label("attendees"))
        .outerjoin(User, Event.author_id == User.id)
        .order_by(Event.date, Event.time, Event.id)
        .all()
    )
    return [
        {
            "id": e.id,
            "public_id": e.public_id,
            "name": e.name,
            "date": e.date,
            "time": e.time,
            "location": e.location,
            "location_url": e.location_url,
            "spots": e.spots,
            "author_id": e.author_id,
            "author_username": username,
            "author_display_name": display_name,
            "attendees": int(count or 0),
        }
        for e, username, display_name, count in rows
    ]


def load_registered_events(db: Session, user_id: int) -> list[int]:
    rows = db.query(EventAttendee.event_id).filter(EventAttendee.user_id == user_id).order_by(EventAttendee.event_id)
    return [r[0] for r in rows.all()]


def _confirmation_code(public_id: str | None) -> str | None:
    if not public_id or "-" not in public_id:
        return None
    return public_id.split("-", 1)[1].upper()


def load_bookings(db: Session, user_id: int) -> list[dict]:
    rows = (
        db.query(Order)
        .filter(
            Order.user_id == user_id,
            Order.booking_date.isnot(None),
            Order.status.in_(BOOKING_ORDER_STATUSES),
        )
        .order_by(Order.booking_date.asc(), Order.id)
        .all()
    )
    return [
        {
            "id": o.id,
            "public_id": o.public_id,
            "product_name": o.product_name,
            "product_category": o.product_category,
            "booking_date": o.booking_date,
            "booking_time": o.booking_time,
            "status": o.status,
            "amount": float(o.amount) if o.amount is not None else None,
            "created_at": o.created_at,
            "confirmation_code": _confirmation_code(o.public_id),
        }
        for o in rows
    ]


def _not_hidden(user_id: int):
    return ~exists().where(and_(UserNewsHidden.news_id == News.id, UserNewsHidden.user_id == user_id))


def load_news(db: Session, user_id: int) -> list[dict]:
    """Visible news newest first, with the user's read marker."""
    rows = (
        db.query(News, UserNewsRead.read_at)
        .outerjoin(UserNewsRead, and_(UserNewsRead.news_id == News.id, UserNewsRead.user_id == user_id))
        .filter(_not_hidden(user_id))
        .order_by(News.created_at.desc(), News.id.desc())
        .all()
    )
    return [
        {
            "id": n.id,
            "public_id": n.public_id,
            "title": n.title,
            "message": n.message,
            "type": n.type,
            "emoji": n.emoji,
            "event_details": n.event_details,
            "created_at": n.created_at,
            "is_read": read_at is not None,
            "read_at": read_at,
        }
        for n, read_at in rows
    ]


def load_article_progress(db: Session, user_id: int) -> list[dict]:
    rows = db.query(UserArticle.article_id, UserArticle.status).filter(UserArticle.user_id == user_id).all()
    return [{"article_id": article_id, "status": status} for article_id, status in rows]


def load_favorites(db: Session, user_id: int) -> dict[str, list[int]]:
    out = {"tricks": [], "articles": [], "users": []}
    buckets = {ITEM_TYPE_TRICK: "tricks", ITEM_TYPE_ARTICLE: "articles", ITEM_TYPE_USER: "users"}
    rows = db.query(Favorite.item_type, Favorite.item_id).filter(Favorite.user_id == user_id).order_by(Favorite.id)
    for item_type, item_id in rows.all():
        bucket = buckets.get(item_type)
        if bucket:
            out[bucket].append(item_id)
    return out


def load_unread_counts(db: Session, user_id: int) -> dict[str, int]:
    """Unread visible news and unread notification groups, one round trip."""
    read = exists().where(and_(UserNewsRead.news_id == News.id, UserNewsRead.user_id == user_id))
    news_unread = db.query(func.count(News.id)).filter(~read, _not_hidden(user_id)).scalar_subquery()
    groups_unread = (
        db.query(func.count(NotificationGroup.id))
        .filter(NotificationGroup.user_id == user_id, NotificationGroup.is_read.is_(False))
        .scalar_subquery()
    )
    news_count, groups_count = db.execute(select(news_unread, groups_unread)).one()
    return {"news": int(news_count or 0), "notifications": int(groups_count or 0)}


USER_SECTIONS = {
    "progress": get_progress,
    "registeredEvents": load_registered_events,
    "bookings": load_bookings,
    "news": load_news,
    "articleProgress": load_article_progress,
    "favorites": load_favorites,
    "unread": load_unread_counts,
}
