"""
Race-free like / unlike.

Algorithm (one transaction): DELETE the edge; if a row was deleted the result is "unliked",
otherwise INSERT ... ON CONFLICT DO NOTHING and the result is "liked". The DELETE's row
count is the only source of truth for which branch ran, so there is no separate existence
read to race against. The count is always recomputed from edges, never incremented, and
written through to any denormalized counter in the same transaction.
"""
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from crewapp.core.constants import SUBJECT_POST
from crewapp.core.errors import CommentNotFoundError, ToggleAnomalyError
from crewapp.db.dialect import insert_ignore
from crewapp.models.comment import Comment
from crewapp.models.comment_like import CommentLike
from crewapp.models.like import Like
from crewapp.models.user_post import UserPost
from crewapp.services.reactions.types import SubjectKey, ToggleResult

logger = logging.getLogger(__name__)

# Edge tables the toggle may touch
_EDGE_MODELS = (Like, CommentLike)


def _toggle_edge(db: Session, model, edge: dict) -> bool:
    """Delete-then-maybe-insert on one edge. Returns the new liked state. Caller commits."""
    if model not in _EDGE_MODELS:
        raise ValueError(f"Invalid like table: {model.__tablename__}")
    deleted = db.query(model).filter_by(**edge).delete(synchronize_session=False)
    if deleted > 1:
        # Unique constraint makes this impossible; surface instead of self-healing
        raise ToggleAnomalyError(f"{model.__tablename__}: deleted {deleted} rows for one edge {edge}")
    if deleted == 1:
        return False
    # rowcount 0 here means a concurrent toggle by the same actor inserted first; the edge exists either way
    insert_ignore(db, model, **edge)
    return True


def count_likes(db: Session, subject: SubjectKey) -> int:
    return (
        db.query(func.count(Like.id))
        .filter(
            Like.subject_type == subject.subject_type,
            Like.owner_id == subject.owner_id,
            Like.subject_id == subject.subject_id,
        )
        .scalar()
        or 0
    )


def write_through_likes(db: Session, subject: SubjectKey, likes_count: int) -> None:
    """Mirror the derived count into denormalized columns (posts only)."""
    if subject.subject_type == SUBJECT_POST:
        db.query(UserPost).filter(UserPost.id == int(subject.subject_id)).update(
            {UserPost.likes_count: likes_count}, synchronize_session=False
        )


def toggle_like(db: Session, subject: SubjectKey, actor_id: int) -> ToggleResult:
    try:
        liked = _toggle_edge(
            db,
            Like,
            {
                "subject_type": subject.subject_type,
                "owner_id": subject.owner_id,
                "subject_id": subject.subject_id,
                "actor_id": actor_id,
            },
        )
        likes_count = count_likes(db, subject)
        write_through_likes(db, subject, likes_count)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.debug("toggle_like %s actor=%s liked=%s count=%s", subject, actor_id, liked, likes_count)
    return ToggleResult(viewer_liked=liked, likes_count=likes_count)


def toggle_comment_like(db: Session, comment_id: int, actor_id: int, subject: SubjectKey | None = None) -> ToggleResult:
    """Like / unlike a live comment. Tombstoned comments are not likeable."""
    try:
        q = db.query(Comment.id).filter(Comment.id == comment_id, Comment.is_deleted.is_(False))
        if subject is not None:
            q = q.filter(
                Comment.subject_type == subject.subject_type,
                Comment.owner_id == subject.owner_id,
                Comment.subject_id == subject.subject_id,
            )
        if q.first() is None:
            raise CommentNotFoundError(f"comment {comment_id} not found")
        liked = _toggle_edge(db, CommentLike, {"comment_id": comment_id, "actor_id": actor_id})
        likes_count = (
            db.query(func.count(CommentLike.id)).filter(CommentLike.comment_id == comment_id).scalar() or 0
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    return ToggleResult(viewer_liked=liked, likes_count=likes_count)
