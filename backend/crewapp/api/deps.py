"""
Request dependencies: the authenticated user and the process-wide services on app.state.
"""
import logging
from typing import Callable, NoReturn

import jwt
from fastapi import Header, HTTPException, Request
from sqlalchemy.orm import Session

from crewapp.config import settings
from crewapp.core.errors import error_to_http
from crewapp.services.cache import CatalogCache
from crewapp.services.snapshot import SnapshotService

logger = logging.getLogger(__name__)


def current_user_id(authorization: str | None = Header(None)) -> int:
    """User id from 'Authorization: Bearer <jwt>' (the 'sub' claim). 401 when missing or invalid."""
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        claims = jwt.decode(token.strip(), settings.jwt_secret, algorithms=[settings.jwt_algorithm])
        return int(claims["sub"])
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
        logger.debug("rejected token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid token") from None


def get_catalog_cache(request: Request) -> CatalogCache:
    return request.app.state.catalog_cache


def get_snapshot_service(request: Request) -> SnapshotService:
    return request.app.state.snapshot_service


def get_session_factory(request: Request) -> Callable[[], Session]:
    return request.app.state.session_factory


def handle_service_error(exc: Exception, log_message: str) -> NoReturn:
    """Log and re-raise a service exception as its HTTP form. Client errors are not logged as failures."""
    http_exc = error_to_http(exc)
    if http_exc.status_code >= 500:
        logger.exception(log_message)
    else:
        logger.info("%s: %s", log_message, exc)
    raise http_exc from exc
