"""
Snapshot assembler: one response carrying everything the app shows at startup.

fingerprint -> (match: NOT_MODIFIED, nothing else runs) -> catalog fills + per-user sections
+ feed, all concurrent on the shared executor, each in its own session -> one payload.

Any branch failure fails the whole snapshot (AggregateFetchError); there is no partial payload.
"""
import logging
import time
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable

from sqlalchemy.orm import Session

from crewapp.config import settings
from crewapp.services.cache import CatalogCache
from crewapp.services.catalogs import CATALOGS, CatalogSpec, get_catalog
from crewapp.services.concurrency import in_session, run_concurrently
from crewapp.services.feed import build_feed
from crewapp.services.fingerprint import compute_fingerprint, etag_matches
from crewapp.services.user_state import USER_SECTIONS, load_events

logger = logging.getLogger(__name__)

NOT_MODIFIED = object()


@dataclass
class SnapshotResult:
    token: str | None
    payload: dict


class SnapshotService:
    def __init__(
        self,
        cache: CatalogCache,
        db_factory: Callable[[], Session],
        executor: Executor,
        catalogs: dict[str, CatalogSpec] | None = None,
        feed_builder: Callable | None = None,
        feed_limit: int | None = None,
        unread_cap: int | None = None,
    ):
        self.cache = cache
        self.db_factory = db_factory
        self.executor = executor
        self.catalogs = catalogs if catalogs is not None else CATALOGS
        self.feed_builder = feed_builder or build_feed
        self.feed_limit = feed_limit or settings.feed_default_limit
        self.unread_cap = unread_cap if unread_cap is not None else settings.unread_count_cap

    def _fingerprint(self, user_id: int):
        db = self.db_factory()
        try:
            return compute_fingerprint(db, user_id)
        except Exception as e:
            # Fall open: no token means no 304 and no ETag, never a wrong 304
            logger.warning("fingerprint failed for user %s: %s", user_id, e, exc_info=True)
            return None
        finally:
            db.close()

    def _tasks(self, user_id: int, fingerprint) -> dict[str, Callable]:
        tasks: dict[str, Callable] = {}
        for name, spec in self.catalogs.items():
            expected = fingerprint.catalog_versions.get(name) if fingerprint else None
            tasks[f"catalog:{name}"] = (
                lambda spec=spec, expected=expected: get_catalog(self.cache, self.db_factory, spec, expected)
            )
        tasks["events"] = in_session(self.db_factory, load_events)
        for name, load in USER_SECTIONS.items():
            tasks[name] = in_session(self.db_factory, lambda db, load=load: load(db, user_id))
        tasks["feed"] = lambda: self.feed_builder(self.db_factory, user_id, self.feed_limit)
        return tasks

    def build(self, user_id: int, if_none_match: str | None = None):
        """NOT_MODIFIED when the caller's token is current, else a SnapshotResult."""
        started = time.perf_counter()
        fingerprint = self._fingerprint(user_id)
        token = fingerprint.token if fingerprint else None
        if token and etag_matches(if_none_match, token):
            logger.debug("snapshot not modified user=%s", user_id)
            return NOT_MODIFIED

        results = run_concurrently(self.executor, self._tasks(user_id, fingerprint))

        catalogs = {}
        catalog_hits = []
        for name in self.catalogs:
            filled = results[f"catalog:{name}"]
            catalogs[name] = filled.value.rows
            if filled.hit:
                catalog_hits.append(name)
            expected = fingerprint.catalog_versions.get(name) if fingerprint else None
            if expected is not None and filled.value.version != expected:
                # Rows are not the ones the token describes; send no token rather than a wrong one
                logger.info("catalog %s changed during snapshot for user %s; omitting token", name, user_id)
                token = None

        unread = results["unread"]
        ms = int((time.perf_counter() - started) * 1000)
        payload = {
            **catalogs,
            "progress": results["progress"],
            "events": results["events"],
            "registeredEvents": results["registeredEvents"],
            "bookings": results["bookings"],
            "news": results["news"],
            "articleProgress": results["articleProgress"],
            "favorites": results["favorites"],
            "unreadCount": min(unread["news"] + unread["notifications"], self.unread_cap),
            "feed": results["feed"].to_dict(),
            "_meta": {
                "ms": ms,
                "cached": len(catalog_hits) == len(self.catalogs),
                "catalogHits": catalog_hits,
            },
        }
        logger.info("snapshot loaded user=%s ms=%s catalog_hits=%s", user_id, ms, ",".join(catalog_hits) or "-")
        return SnapshotResult(token=token, payload=payload)
