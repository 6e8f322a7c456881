"""
Comment write paths. Comments are tombstoned, never removed; the live count is recomputed
from rows after every write and written through to denormalized counters.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.orm import Session

from crewapp.core.constants import SUBJECT_POST
from crewapp.core.errors import CommentNotFoundError, EmptyCommentError
from crewapp.models.comment import Comment
from crewapp.models.user import User
from crewapp.models.user_post import UserPost
from crewapp.services.reactions.types import CommentView, SubjectKey

logger = logging.getLogger(__name__)


def _subject_filter(subject: SubjectKey):
    return (
        Comment.subject_type == subject.subject_type,
        Comment.owner_id == subject.owner_id,
        Comment.subject_id == subject.subject_id,
    )


def count_live_comments(db: Session, subject: SubjectKey) -> int:
    return (
        db.query(func.count(Comment.id))
        .filter(*_subject_filter(subject), Comment.is_deleted.is_(False))
        .scalar()
        or 0
    )


def write_through_comments(db: Session, subject: SubjectKey, comments_count: int) -> None:
    if subject.subject_type == SUBJECT_POST:
        db.query(UserPost).filter(UserPost.id == int(subject.subject_id)).update(
            {UserPost.comments_count: comments_count}, synchronize_session=False
        )


def add_comment(db: Session, subject: SubjectKey, author_id: int, content: str | None) -> CommentView:
    """Append a comment; returns it with author projection and zeroed like state."""
    text = (content or "").strip()
    if not text:
        raise EmptyCommentError("Comment cannot be empty")
    try:
        comment = Comment(
            subject_type=subject.subject_type,
            owner_id=subject.owner_id,
            subject_id=subject.subject_id,
            author_id=author_id,
            content=text,
            is_deleted=False,
            created_at=datetime.now(timezone.utc),
        )
        db.add(comment)
        db.flush()
        write_through_comments(db, subject, count_live_comments(db, subject))
        db.commit()
    except Exception:
        db.rollback()
        raise
    author = db.query(User.username, User.display_name, User.avatar_base64, User.country_flag).filter(
        User.id == author_id
    ).first()
    return CommentView(
        id=comment.id,
        author_id=author_id,
        content=comment.content,
        created_at=comment.created_at,
        likes_count=0,
        viewer_liked=False,
        author={
            "username": author.username if author else None,
            "display_name": author.display_name if author else None,
            "avatar_base64": author.avatar_base64 if author else None,
            "country_flag": author.country_flag if author else None,
        },
    )


def delete_comment(db: Session, subject: SubjectKey, comment_id: int, actor_id: int) -> int:
    """Tombstone the actor's own live comment. Returns the subject's new live comment count."""
    try:
        updated = (
            db.query(Comment)
            .filter(
                Comment.id == comment_id,
                Comment.author_id == actor_id,
                Comment.is_deleted.is_(False),
                *_subject_filter(subject),
            )
            .update(
                {
                    Comment.is_deleted: True,
                    Comment.deleted_at: datetime.now(timezone.utc),
                    Comment.deleted_by: actor_id,
                },
                synchronize_session=False,
            )
        )
        if updated == 0:
            raise CommentNotFoundError(f"comment {comment_id} not found")
        comments_count = count_live_comments(db, subject)
        write_through_comments(db, subject, comments_count)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.debug("comment %s tombstoned by %s; %s live", comment_id, actor_id, comments_count)
    return comments_count
