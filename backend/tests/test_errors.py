"""Exception to HTTP mapping."""
import pytest

from crewapp.core.errors import (
    AggregateFetchError,
    CatalogFillError,
    CommentNotFoundError,
    EmptyCommentError,
    SubjectNotFoundError,
    ToggleAnomalyError,
    UnknownSubjectError,
    error_to_http,
)


@pytest.mark.parametrize(
    "exc,status,detail",
    [
        (EmptyCommentError("x"), 400, "Comment cannot be empty"),
        (UnknownSubjectError("Unknown subject type: park"), 400, "Unknown subject type: park"),
        (CommentNotFoundError("comment 3 not found"), 404, "Comment not found"),
        (SubjectNotFoundError("post 9 not found"), 404, "post 9 not found"),
        (CatalogFillError("tricks", RuntimeError("db down")), 500, "Server error"),
        (ToggleAnomalyError("likes: deleted 2 rows"), 500, "Server error"),
        (AggregateFetchError([("feed", RuntimeError("db down"))]), 500, "Server error"),
        (RuntimeError("cache exploded"), 500, "Server error"),
    ],
)
def test_error_to_http(exc, status, detail):
    http_exc = error_to_http(exc)
    assert (http_exc.status_code, http_exc.detail) == (status, detail)


def test_aggregate_keeps_every_failure():
    first, second = RuntimeError("a"), ValueError("b")
    exc = AggregateFetchError([("catalog:tricks", first), ("feed", second)])
    assert [e for _, e in exc.failures] == [first, second]
    assert "catalog:tricks" in str(exc) and "feed" in str(exc)
