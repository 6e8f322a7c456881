"""Snapshot assembly: conditional short-circuit, concurrent branches, failure handling."""
from dataclasses import replace

import pytest
from conftest import at

from crewapp.core.errors import AggregateFetchError
from crewapp.models import Trick, User
from crewapp.services import snapshot as snapshot_module
from crewapp.services.catalogs import CATALOGS
from crewapp.services.feed import build_feed, hide_item, unhide_item
from crewapp.services.fingerprint import format_etag
from crewapp.services.snapshot import NOT_MODIFIED, SnapshotService


class Counting:
    """Wraps a callable and counts calls."""

    def __init__(self, fn):
        self.fn = fn
        self.calls = 0

    def __call__(self, *args, **kwargs):
        self.calls += 1
        return self.fn(*args, **kwargs)


@pytest.fixture
def loaders():
    return {name: Counting(spec.load_rows) for name, spec in CATALOGS.items()}


@pytest.fixture
def feed_builder():
    return Counting(build_feed)


@pytest.fixture
def service(cache, session_factory, executor, loaders, feed_builder):
    catalogs = {name: replace(spec, load_rows=loaders[name]) for name, spec in CATALOGS.items()}
    return SnapshotService(cache, session_factory, executor, catalogs=catalogs, feed_builder=feed_builder)


@pytest.fixture
def seeded(factory):
    viewer = factory.user("viewer")
    rider = factory.user("rider")
    factory.follow(viewer.id, rider.id)
    trick = factory.trick("Raley")
    factory.article("Edging 101")
    factory.product("Rope")
    event = factory.event("Sunset session")
    factory.progress(viewer.id, trick.id, status="in_progress", updated_at=at(1))
    factory.attend(viewer.id, event.id, registered_at=at(2))
    factory.achievement(rider.id, "veteran", achieved_at=at(3))
    factory.news("Lake opens")
    factory.notification(viewer.id)
    factory.booking(viewer.id, public_id="ord-x7k2")
    factory.booking(viewer.id, status="cancelled")
    return {"viewer": viewer, "rider": rider, "trick": trick, "event": event}


class TestPayload:
    def test_sections(self, service, seeded):
        result = service.build(seeded["viewer"].id)
        p = result.payload
        assert [t["name"] for t in p["tricks"]] == ["Raley"]
        assert [a["title"] for a in p["articles"]] == ["Edging 101"]
        assert [x["name"] for x in p["products"]] == ["Rope"]
        assert p["progress"] == {seeded["trick"].id: {"status": "in_progress", "goofy_status": "todo", "notes": None}}
        assert p["events"][0]["attendees"] == 1
        assert p["registeredEvents"] == [seeded["event"].id]
        assert [b["confirmation_code"] for b in p["bookings"]] == ["X7K2"]
        assert p["news"][0]["is_read"] is False
        assert p["favorites"] == {"tricks": [], "articles": [], "users": [seeded["rider"].id]}
        assert p["unreadCount"] == 2
        assert [i["type"] for i in p["feed"]["items"]] == ["achievement_earned", "event_joined", "progress_started"]
        assert p["_meta"]["cached"] is False
        assert result.token.endswith(f"-u{seeded['viewer'].id}")

    def test_second_call_hits_catalog_cache(self, service, seeded, loaders):
        service.build(seeded["viewer"].id)
        result = service.build(seeded["viewer"].id)
        assert result.payload["_meta"]["cached"] is True
        assert sorted(result.payload["_meta"]["catalogHits"]) == ["articles", "products", "tricks"]
        assert all(c.calls == 1 for c in loaders.values())

    def test_unread_count_is_capped(self, cache, session_factory, executor, factory):
        viewer = factory.user()
        for _ in range(5):
            factory.notification(viewer.id)
        service = SnapshotService(cache, session_factory, executor, unread_cap=3)
        assert service.build(viewer.id).payload["unreadCount"] == 3


class TestConditional:
    def test_matching_token_short_circuits(self, service, seeded, loaders, feed_builder, cache):
        first = service.build(seeded["viewer"].id)
        cache.clear()
        assert service.build(seeded["viewer"].id, format_etag(first.token)) is NOT_MODIFIED
        assert feed_builder.calls == 1
        assert all(c.calls == 1 for c in loaders.values())

    def test_mutation_invalidates_token(self, service, seeded, factory):
        first = service.build(seeded["viewer"].id)
        factory.achievement(seeded["rider"].id, "rail_rider", achieved_at=at(9))
        result = service.build(seeded["viewer"].id, format_etag(first.token))
        assert result is not NOT_MODIFIED
        assert result.token != first.token
        assert result.payload["feed"]["items"][0]["data"]["achievement_id"] == "rail_rider"

    def test_token_of_another_user_never_matches(self, service, seeded):
        rider_token = service.build(seeded["rider"].id).token
        assert service.build(seeded["viewer"].id, format_etag(rider_token)) is not NOT_MODIFIED

    def test_stale_catalog_entry_is_refilled(self, service, seeded, db, loaders):
        service.build(seeded["viewer"].id)
        # Write without invalidate_catalog: the version check must still catch it
        db.query(Trick).filter_by(id=seeded["trick"].id).update({"name": "Raley to blind", "updated_at": at(30)})
        db.commit()
        result = service.build(seeded["viewer"].id)
        assert [t["name"] for t in result.payload["tricks"]] == ["Raley to blind"]
        assert loaders["tricks"].calls == 2
        assert loaders["articles"].calls == 1

    def test_hidden_item_swap_sends_fresh_payload(self, service, seeded, db):
        viewer_id = seeded["viewer"].id
        ids = [i["id"] for i in service.build(viewer_id).payload["feed"]["items"]]
        hide_item(db, viewer_id, ids[0])
        first = service.build(viewer_id)
        unhide_item(db, viewer_id, ids[0])
        hide_item(db, viewer_id, ids[1])
        result = service.build(viewer_id, format_etag(first.token))
        assert result is not NOT_MODIFIED
        assert [i["id"] for i in result.payload["feed"]["items"]] == [ids[0], ids[2]]

    def test_feed_actor_profile_edit_sends_fresh_payload(self, service, seeded, db):
        first = service.build(seeded["viewer"].id)
        rider = db.get(User, seeded["rider"].id)
        rider.avatar_base64 = "NEW"
        db.commit()
        result = service.build(seeded["viewer"].id, format_etag(first.token))
        assert result is not NOT_MODIFIED
        assert result.payload["feed"]["items"][0]["user"]["avatar_base64"] == "NEW"

    def test_article_author_rename_refills_catalog(self, service, factory, db, loaders):
        viewer = factory.user()
        coach = factory.user("coach")
        factory.article("Edging 101", author_id=coach.id)
        first = service.build(viewer.id)
        db.get(User, coach.id).username = "coach_ana"
        db.commit()
        result = service.build(viewer.id, format_etag(first.token))
        assert result is not NOT_MODIFIED
        assert [a["author_username"] for a in result.payload["articles"]] == ["coach_ana"]
        assert loaders["articles"].calls == 2


class TestFailures:
    def test_branch_failure_fails_the_snapshot(self, cache, session_factory, executor, seeded):
        def broken_feed(*args, **kwargs):
            raise RuntimeError("feed source exploded")

        service = SnapshotService(cache, session_factory, executor, feed_builder=broken_feed)
        with pytest.raises(AggregateFetchError) as exc_info:
            service.build(seeded["viewer"].id)
        assert [name for name, _ in exc_info.value.failures] == ["feed"]
        # Sibling catalog fills still completed and were cached
        assert cache.stats()["keys"] == 3

    def test_fingerprint_failure_falls_open(self, service, seeded, monkeypatch):
        def broken(db, user_id):
            raise RuntimeError("fingerprint query failed")

        monkeypatch.setattr(snapshot_module, "compute_fingerprint", broken)
        result = service.build(seeded["viewer"].id, '"anything"')
        assert result is not NOT_MODIFIED
        assert result.token is None
        assert [t["name"] for t in result.payload["tricks"]] == ["Raley"]
