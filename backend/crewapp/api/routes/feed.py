"""
Activity feed of the viewer and the riders they follow, plus the viewer's hidden items.
"""
import logging
from typing import Any, Callable

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from crewapp.api.deps import current_user_id, get_session_factory, handle_service_error
from crewapp.config import settings
from crewapp.db.session import get_db
from crewapp.services.feed import build_feed, hide_item, unhide_item

router = APIRouter()
logger = logging.getLogger(__name__)


class HideItemRequest(BaseModel):
    item_id: str = Field(..., alias="itemId", min_length=1, max_length=255)


@router.get("/feed")
def get_feed(
    limit: int = Query(settings.feed_default_limit),
    offset: int = Query(0, ge=0),
    db_factory: Callable[[], Session] = Depends(get_session_factory),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    """Newest first. limit is clamped to [1, feed_max_limit]."""
    limit = max(1, min(limit, settings.feed_max_limit))
    try:
        page = build_feed(db_factory, user_id, limit, offset)
    except Exception as e:
        handle_service_error(e, f"Feed failed for user {user_id}")
    return page.to_dict()


@router.post("/feed/hidden")
def hide_feed_item(
    body: HideItemRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        hide_item(db, user_id, body.item_id)
    except Exception as e:
        handle_service_error(e, f"Hide feed item failed for user {user_id}")
    return {"success": True, "itemId": body.item_id}


@router.delete("/feed/hidden/{item_id}")
def unhide_feed_item(
    item_id: str,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        unhide_item(db, user_id, item_id)
    except Exception as e:
        handle_service_error(e, f"Unhide feed item failed for user {user_id}")
    return {"success": True, "itemId": item_id}
