"""
Fan-out helpers for independent read branches.

Every branch gets its own DB session (sessions are never shared across threads) and every
branch runs to completion; failures are collected and raised together as one
AggregateFetchError, so an independent branch (e.g. another catalog fill) is never
aborted by a sibling's failure and no partial result escapes.
"""
import logging
from concurrent.futures import ALL_COMPLETED, Executor, wait
from typing import Any, Callable

from sqlalchemy.orm import Session

from crewapp.core.errors import AggregateFetchError

logger = logging.getLogger(__name__)


def in_session(db_factory: Callable[[], Session], fn: Callable[[Session], Any]) -> Callable[[], Any]:
    """Wrap fn(db) so it runs in its own session, closed afterwards."""

    def _run():
        db = db_factory()
        try:
            return fn(db)
        finally:
            db.close()

    return _run


def run_concurrently(executor: Executor, tasks: dict[str, Callable[[], Any]]) -> dict[str, Any]:
    """Submit every task, wait for all of them, return {name: result} or raise AggregateFetchError."""
    futures = {executor.submit(fn): name for name, fn in tasks.items()}
    done, _ = wait(futures, return_when=ALL_COMPLETED)
    failures: list[tuple[str, BaseException]] = []
    results: dict[str, Any] = {}
    for future in done:
        name = futures[future]
        exc = future.exception()
        if exc is not None:
            logger.error("branch %s failed: %s", name, exc, exc_info=exc)
            failures.append((name, exc))
        else:
            results[name] = future.result()
    if failures:
        failures.sort(key=lambda f: f[0])
        raise AggregateFetchError(failures)
    return results
