"""
GET /snapshot: everything the app needs at startup in one round trip.

Conditional: send the last ETag back as If-None-Match; when nothing changed the answer is an
empty 304 and no catalog or feed work is done.
"""
import logging

from fastapi import APIRouter, Depends, Header, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from crewapp.api.deps import current_user_id, get_snapshot_service, handle_service_error
from crewapp.services.fingerprint import format_etag
from crewapp.services.snapshot import NOT_MODIFIED, SnapshotService

router = APIRouter()
logger = logging.getLogger(__name__)

_CACHE_HEADERS = {"Cache-Control": "private, no-cache"}


@router.get("/snapshot")
def get_snapshot(
    user_id: int = Depends(current_user_id),
    if_none_match: str | None = Header(None, alias="If-None-Match"),
    service: SnapshotService = Depends(get_snapshot_service),
):
    try:
        result = service.build(user_id, if_none_match)
    except Exception as e:
        handle_service_error(e, f"Snapshot failed for user {user_id}")
    if result is NOT_MODIFIED:
        return Response(status_code=304, headers=_CACHE_HEADERS)
    headers = dict(_CACHE_HEADERS)
    if result.token:
        headers["ETag"] = format_etag(result.token)
    return JSONResponse(content=jsonable_encoder(result.payload), headers=headers)
