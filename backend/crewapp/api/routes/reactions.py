"""
Likes and comments on tricks, achievements, event joins, posts and news.

Owner-scoped subjects (trick, achievement, event) take ?owner_id=; posts resolve their owner;
news is global. Counts are always recomputed from rows.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from crewapp.api.deps import current_user_id, handle_service_error
from crewapp.core.constants import COMMENT_MAX_LENGTH
from crewapp.db.session import get_db
from crewapp.services.reactions import (
    add_comment,
    delete_comment,
    load_reaction,
    load_reactions,
    owner_subject_ids,
    resolve_subject,
    toggle_comment_like,
    toggle_like,
)

router = APIRouter()
logger = logging.getLogger(__name__)


class CommentRequest(BaseModel):
    content: str = Field(..., max_length=COMMENT_MAX_LENGTH)


@router.get("/reactions/{subject_type}/{subject_id}")
def get_reactions(
    subject_type: str,
    subject_id: str,
    owner_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        subject = resolve_subject(db, subject_type, subject_id, owner_id)
        return load_reaction(db, subject, user_id).to_dict()
    except Exception as e:
        handle_service_error(e, f"Load reactions failed for {subject_type} {subject_id}")


@router.post("/reactions/{subject_type}/{subject_id}/like")
def like_subject(
    subject_type: str,
    subject_id: str,
    owner_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        subject = resolve_subject(db, subject_type, subject_id, owner_id)
        return toggle_like(db, subject, user_id).to_dict()
    except Exception as e:
        handle_service_error(e, f"Toggle like failed for {subject_type} {subject_id}")


@router.post("/reactions/{subject_type}/{subject_id}/comment", status_code=201)
def comment_on_subject(
    subject_type: str,
    subject_id: str,
    body: CommentRequest,
    owner_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        subject = resolve_subject(db, subject_type, subject_id, owner_id)
        return add_comment(db, subject, user_id, body.content).to_dict()
    except Exception as e:
        handle_service_error(e, f"Add comment failed for {subject_type} {subject_id}")


@router.delete("/reactions/{subject_type}/{subject_id}/comments/{comment_id}")
def remove_comment(
    subject_type: str,
    subject_id: str,
    comment_id: int,
    owner_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    """Author-only. The comment is tombstoned, not removed."""
    try:
        subject = resolve_subject(db, subject_type, subject_id, owner_id)
        comments_count = delete_comment(db, subject, comment_id, user_id)
    except Exception as e:
        handle_service_error(e, f"Delete comment {comment_id} failed")
    return {"success": True, "commentsCount": comments_count}


@router.post("/reactions/{subject_type}/{subject_id}/comments/{comment_id}/like")
def like_comment(
    subject_type: str,
    subject_id: str,
    comment_id: int,
    owner_id: int | None = Query(None),
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        subject = resolve_subject(db, subject_type, subject_id, owner_id)
        return toggle_comment_like(db, comment_id, user_id, subject=subject).to_dict()
    except Exception as e:
        handle_service_error(e, f"Toggle comment like failed for comment {comment_id}")


@router.get("/users/{owner_id}/reactions/{subject_type}")
def get_owner_reactions(
    owner_id: int,
    subject_type: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    """Reactions for every subject of this type the owner has, keyed by subject id."""
    try:
        ids = owner_subject_ids(db, subject_type, owner_id)
        summaries = load_reactions(db, subject_type, owner_id, user_id, ids)
    except Exception as e:
        handle_service_error(e, f"Load {subject_type} reactions failed for owner {owner_id}")
    return {"reactions": {sid: s.to_dict() for sid, s in summaries.items()}}
