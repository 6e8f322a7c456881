"""
Centralized error handling for snapshot, feed and reaction failures.
Domain exceptions plus one mapping helper so routes stay thin and never leak internals.
"""
from __future__ import annotations

from typing import Callable

from fastapi import HTTPException

# ---------------------------------------------------------------------------
# Constants: status codes and user-facing messages
# ---------------------------------------------------------------------------

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_INTERNAL_ERROR = 500

MSG_SERVER_ERROR = "Server error"


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------


class AggregateFetchError(Exception):
    """One or more concurrent fetch branches failed. No partial result is ever returned."""

    def __init__(self, failures: list[tuple[str, BaseException]]):
        self.failures = failures
        names = ", ".join(name for name, _ in failures)
        super().__init__(f"fetch branches failed: {names}")


class CatalogFillError(Exception):
    """Loading one catalog into the cache failed."""

    def __init__(self, catalog: str, cause: BaseException):
        self.catalog = catalog
        self.cause = cause
        super().__init__(f"catalog fill failed: {catalog}: {cause}")


class ToggleAnomalyError(Exception):
    """The delete-then-insert toggle observed a state its atomicity should rule out."""


class UnknownSubjectError(ValueError):
    """Subject type is not likeable, or an owner-scoped subject came without an owner."""


class SubjectNotFoundError(LookupError):
    pass


class CommentNotFoundError(LookupError):
    """Comment missing, already tombstoned, or not owned by the caller."""


class EmptyCommentError(ValueError):
    pass


# ---------------------------------------------------------------------------
# Error rules: (predicate, status_code, detail_message or None to use str(exc))
# Add new rules here instead of scattering checks in routes.
# ---------------------------------------------------------------------------


def _is(*types: type[BaseException]) -> Callable[[BaseException], bool]:
    return lambda exc: isinstance(exc, types)


# List of (predicate, status_code, detail). First match wins.
ERROR_RULES: list[tuple[Callable[[BaseException], bool], int, str | None]] = [
    (_is(EmptyCommentError), STATUS_BAD_REQUEST, "Comment cannot be empty"),
    (_is(UnknownSubjectError), STATUS_BAD_REQUEST, None),
    (_is(CommentNotFoundError), STATUS_NOT_FOUND, "Comment not found"),
    (_is(SubjectNotFoundError), STATUS_NOT_FOUND, None),
]


def error_to_http(exc: BaseException) -> HTTPException:
    """
    Map a service exception into an HTTPException.
    Uses ERROR_RULES for client errors; everything else (fetch, cache, fingerprint,
    toggle anomalies, store errors) becomes a generic 500 with no internal detail.
    """
    for predicate, status_code, detail in ERROR_RULES:
        if predicate(exc):
            return HTTPException(status_code=status_code, detail=detail or str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=MSG_SERVER_ERROR)
