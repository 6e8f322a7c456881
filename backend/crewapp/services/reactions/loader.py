"""
Batch reaction loading: likes, viewer-liked flags and comment threads for many subjects in a
constant number of round trips instead of one query set per subject.

load_reactions (one owner scope, full threads), three round trips:
  1. like edges: count + viewer-liked per subject, one GROUP BY
  2. live (non-tombstoned) comments with author projection for all subjects
  3. comment like edges: count + viewer-liked per comment id from step 2
Joined in memory by subject / comment id.

load_reaction_counts (many owners, counts only) is the feed's variant: two round trips.
"""
import logging
from collections import defaultdict
from typing import Iterable

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from crewapp.models.comment import Comment
from crewapp.models.comment_like import CommentLike
from crewapp.models.like import Like
from crewapp.models.user import User
from crewapp.services.reactions.types import EMPTY_REACTIONS, CommentView, ReactionSummary, SubjectKey

logger = logging.getLogger(__name__)


def _viewer_flag(column, viewer_id: int):
    return func.max(case((column == viewer_id, 1), else_=0))


def _author(username, display_name, avatar, country_flag) -> dict:
    return {
        "username": username,
        "display_name": display_name,
        "avatar_base64": avatar,
        "country_flag": country_flag,
    }


def load_reactions(
    db: Session,
    subject_type: str,
    owner_id: int,
    viewer_id: int,
    subject_ids: Iterable,
) -> dict[str, ReactionSummary]:
    """ReactionSummary per subject id (as str). Subjects without reactions get an empty summary."""
    ids = list(dict.fromkeys(str(s) for s in subject_ids))
    if not ids:
        return {}

    # 1. Like edges
    likes: dict[str, tuple[int, bool]] = {}
    rows = (
        db.query(Like.subject_id, func.count(Like.id), _viewer_flag(Like.actor_id, viewer_id))
        .filter(
            Like.subject_type == subject_type,
            Like.owner_id == owner_id,
            Like.subject_id.in_(ids),
        )
        .group_by(Like.subject_id)
        .all()
    )
    for subject_id, count, liked in rows:
        likes[subject_id] = (int(count), bool(liked))

    # 2. Live comments with author
    comment_rows = (
        db.query(Comment, User.username, User.display_name, User.avatar_base64, User.country_flag)
        .join(User, Comment.author_id == User.id)
        .filter(
            Comment.subject_type == subject_type,
            Comment.owner_id == owner_id,
            Comment.subject_id.in_(ids),
            Comment.is_deleted.is_(False),
        )
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )

    # 3. Comment like edges (live comments only; edges on tombstones are never read)
    comment_likes: dict[int, tuple[int, bool]] = {}
    comment_ids = [c.id for c, *_ in comment_rows]
    if comment_ids:
        cl_rows = (
            db.query(CommentLike.comment_id, func.count(CommentLike.id), _viewer_flag(CommentLike.actor_id, viewer_id))
            .filter(CommentLike.comment_id.in_(comment_ids))
            .group_by(CommentLike.comment_id)
            .all()
        )
        for comment_id, count, liked in cl_rows:
            comment_likes[comment_id] = (int(count), bool(liked))

    grouped: dict[str, list[CommentView]] = defaultdict(list)
    for c, username, display_name, avatar, flag in comment_rows:
        cl_count, cl_liked = comment_likes.get(c.id, (0, False))
        grouped[c.subject_id].append(
            CommentView(
                id=c.id,
                author_id=c.author_id,
                content=c.content,
                created_at=c.created_at,
                likes_count=cl_count,
                viewer_liked=cl_liked,
                author=_author(username, display_name, avatar, flag),
            )
        )

    out = {}
    for subject_id in ids:
        count, liked = likes.get(subject_id, (0, False))
        comments = tuple(grouped.get(subject_id, ()))
        out[subject_id] = ReactionSummary(
            likes_count=count,
            comments_count=len(comments),
            viewer_liked=liked,
            comments=comments,
        )
    return out


def load_reaction(db: Session, subject: SubjectKey, viewer_id: int) -> ReactionSummary:
    """Single-subject variant; same queries as the batch."""
    result = load_reactions(db, subject.subject_type, subject.owner_id, viewer_id, [subject.subject_id])
    return result.get(subject.subject_id, EMPTY_REACTIONS)


def load_reaction_counts(
    db: Session,
    subject_type: str,
    viewer_id: int,
    keys: Iterable[tuple[int, str]],
) -> dict[tuple[int, str], ReactionSummary]:
    """
    Counts-only summaries for (owner_id, subject_id) pairs spanning many owners.
    Filters by owner IN and subject IN, then keeps exact pairs in memory.
    """
    pairs = list(dict.fromkeys((int(o), str(s)) for o, s in keys))
    if not pairs:
        return {}
    owners = sorted({o for o, _ in pairs})
    subjects = sorted({s for _, s in pairs})

    likes: dict[tuple[int, str], tuple[int, bool]] = {}
    rows = (
        db.query(Like.owner_id, Like.subject_id, func.count(Like.id), _viewer_flag(Like.actor_id, viewer_id))
        .filter(Like.subject_type == subject_type, Like.owner_id.in_(owners), Like.subject_id.in_(subjects))
        .group_by(Like.owner_id, Like.subject_id)
        .all()
    )
    for owner_id, subject_id, count, liked in rows:
        likes[(owner_id, subject_id)] = (int(count), bool(liked))

    comments: dict[tuple[int, str], int] = {}
    rows = (
        db.query(Comment.owner_id, Comment.subject_id, func.count(Comment.id))
        .filter(
            Comment.subject_type == subject_type,
            Comment.owner_id.in_(owners),
            Comment.subject_id.in_(subjects),
            Comment.is_deleted.is_(False),
        )
        .group_by(Comment.owner_id, Comment.subject_id)
        .all()
    )
    for owner_id, subject_id, count in rows:
        comments[(owner_id, subject_id)] = int(count)

    out = {}
    for pair in pairs:
        count, liked = likes.get(pair, (0, False))
        out[pair] = ReactionSummary(likes_count=count, comments_count=comments.get(pair, 0), viewer_liked=liked)
    return out
