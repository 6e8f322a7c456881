"""
Subject resolution: turns (type, id, optional owner) from a request into a SubjectKey.

trick / achievement / event subjects are scoped by owner (the rider who mastered, earned or
joined) and need owner_id; posts resolve the owner from the post row; news is global.
"""
from sqlalchemy import or_
from sqlalchemy.orm import Session

from crewapp.core.constants import (
    GLOBAL_OWNER_ID,
    OWNER_SCOPED_SUBJECTS,
    STATUS_MASTERED,
    SUBJECT_ACHIEVEMENT,
    SUBJECT_EVENT,
    SUBJECT_NEWS,
    SUBJECT_POST,
    SUBJECT_TRICK,
    SUBJECT_TYPES,
)
from crewapp.core.errors import SubjectNotFoundError, UnknownSubjectError
from crewapp.models.event_attendee import EventAttendee
from crewapp.models.news import News
from crewapp.models.user_achievement import UserAchievement
from crewapp.models.user_post import UserPost
from crewapp.models.user_trick import UserTrick
from crewapp.services.reactions.types import SubjectKey


def _int_id(subject_type: str, subject_id: str) -> int:
    try:
        return int(subject_id)
    except (TypeError, ValueError):
        raise SubjectNotFoundError(f"{subject_type} {subject_id} not found") from None


def resolve_subject(db: Session, subject_type: str, subject_id: str, owner_id: int | None = None) -> SubjectKey:
    if subject_type not in SUBJECT_TYPES:
        raise UnknownSubjectError(f"Unknown subject type: {subject_type}")
    subject_id = str(subject_id).strip()
    if not subject_id:
        raise UnknownSubjectError("Subject id is required")

    if subject_type in OWNER_SCOPED_SUBJECTS:
        if owner_id is None:
            raise UnknownSubjectError(f"owner_id is required for {subject_type} reactions")
        return SubjectKey(subject_type, int(owner_id), subject_id)

    if subject_type == SUBJECT_POST:
        post = db.query(UserPost.user_id).filter(UserPost.id == _int_id(subject_type, subject_id)).first()
        if post is None:
            raise SubjectNotFoundError(f"post {subject_id} not found")
        return SubjectKey(SUBJECT_POST, post.user_id, subject_id)

    if subject_type == SUBJECT_NEWS:
        exists = db.query(News.id).filter(News.id == _int_id(subject_type, subject_id)).first()
        if exists is None:
            raise SubjectNotFoundError(f"news {subject_id} not found")
        return SubjectKey(SUBJECT_NEWS, GLOBAL_OWNER_ID, subject_id)

    raise UnknownSubjectError(f"Unknown subject type: {subject_type}")


def owner_subject_ids(db: Session, subject_type: str, owner_id: int) -> list[str]:
    """Every subject id of this type the owner has: mastered tricks, earned achievements, joined events, posts."""
    if subject_type == SUBJECT_TRICK:
        rows = db.query(UserTrick.trick_id).filter(
            UserTrick.user_id == owner_id,
            or_(UserTrick.status == STATUS_MASTERED, UserTrick.goofy_status == STATUS_MASTERED),
        )
    elif subject_type == SUBJECT_ACHIEVEMENT:
        rows = db.query(UserAchievement.achievement_id).filter(UserAchievement.user_id == owner_id)
    elif subject_type == SUBJECT_EVENT:
        rows = db.query(EventAttendee.event_id).filter(EventAttendee.user_id == owner_id)
    elif subject_type == SUBJECT_POST:
        rows = db.query(UserPost.id).filter(UserPost.user_id == owner_id)
    else:
        raise UnknownSubjectError(f"{subject_type} reactions are not owner-scoped")
    return [str(r[0]) for r in rows.all()]
