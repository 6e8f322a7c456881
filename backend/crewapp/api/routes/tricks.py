"""
Trick catalog (served from the catalog cache) and the rider's own progress.
"""
import logging
from typing import Any, Callable, Literal

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from crewapp.api.deps import current_user_id, get_catalog_cache, get_session_factory, handle_service_error
from crewapp.db.session import get_db
from crewapp.services.cache import CatalogCache
from crewapp.services.catalogs import CATALOGS, get_catalog
from crewapp.services.progress import get_progress, update_trick_progress

router = APIRouter()
logger = logging.getLogger(__name__)


class ProgressRequest(BaseModel):
    trick_id: int = Field(..., alias="trickId")
    status: Literal["todo", "in_progress", "mastered"]
    notes: str | None = None
    stance: Literal["regular", "goofy"] | None = None


@router.get("/tricks")
def list_tricks(
    cache: CatalogCache = Depends(get_catalog_cache),
    db_factory: Callable[[], Session] = Depends(get_session_factory),
) -> list[dict[str, Any]]:
    try:
        filled = get_catalog(cache, db_factory, CATALOGS["tricks"])
    except Exception as e:
        handle_service_error(e, "Load tricks failed")
    return filled.value.rows


@router.get("/tricks/progress")
def list_progress(
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[int, dict[str, Any]]:
    return get_progress(db, user_id)


@router.post("/tricks/progress")
def set_progress(
    body: ProgressRequest,
    db: Session = Depends(get_db),
    user_id: int = Depends(current_user_id),
) -> dict[str, Any]:
    try:
        return update_trick_progress(db, user_id, body.trick_id, body.status, body.notes, body.stance)
    except Exception as e:
        handle_service_error(e, f"Progress update failed for user {user_id}")
