"""Feed: stable ids, recency merge, followed set, hidden items and pagination."""
from datetime import timedelta

import pytest
from conftest import T0, at

from crewapp.services.feed import (
    FeedItem,
    build_feed,
    feed_item_id,
    hide_item,
    merge_by_recency,
    resolve_followed_set,
    unhide_item,
)
from crewapp.services.feed.sources import progress_item_type
from crewapp.services.reactions import SubjectKey, toggle_like


def _item(item_id, occurred_at):
    return FeedItem(
        id=item_id, type="achievement_earned", actor_id=1, subject_ref=item_id, occurred_at=occurred_at
    )


class TestFeedItemId:
    def test_same_inputs_same_id(self):
        assert feed_item_id("event_joined", 7, 42) == feed_item_id("event_joined", 7, "42") == "event_joined_7_42"

    def test_components_distinguish_items(self):
        ids = {
            feed_item_id("progress_mastered", 1, 2),
            feed_item_id("progress_started", 1, 2),
            feed_item_id("progress_mastered", 2, 2),
            feed_item_id("progress_mastered", 1, 3),
        }
        assert len(ids) == 4

    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            feed_item_id("post_created", 1, 1)


class TestMerge:
    def test_newest_first_across_sources(self):
        a = [_item("a1", at(1)), _item("a3", at(3))]
        b = [_item("b2", at(2))]
        assert [i.id for i in merge_by_recency(a, b)] == ["a3", "b2", "a1"]

    def test_missing_timestamps_sort_last(self):
        a = [_item("undated", None), _item("old", at(1))]
        b = [_item("new", at(5))]
        assert [i.id for i in merge_by_recency(a, b, [])] == ["new", "old", "undated"]

    def test_naive_and_aware_timestamps_compare(self):
        naive = _item("naive", (T0 + timedelta(minutes=2)).replace(tzinfo=None))
        aware = _item("aware", at(1))
        assert [i.id for i in merge_by_recency([aware], [naive])] == ["naive", "aware"]


class TestProgressType:
    @pytest.mark.parametrize(
        "status,goofy,expected",
        [
            ("mastered", "todo", "progress_mastered"),
            ("in_progress", "mastered", "progress_mastered"),
            ("in_progress", "todo", "progress_started"),
            ("todo", "in_progress", "progress_started"),
            ("todo", "todo", None),
            ("todo", None, None),
        ],
    )
    def test_stance_rules(self, status, goofy, expected):
        assert progress_item_type(status, goofy) == expected


@pytest.fixture
def viewer(factory):
    return factory.user("viewer")


@pytest.fixture
def rider(factory, viewer):
    rider = factory.user("rider", display_name="Rider A", is_coach=True)
    factory.follow(viewer.id, rider.id)
    return rider


class TestBuildFeed:
    def test_example_scenario(self, session_factory, factory, viewer, rider):
        trick = factory.trick("Raley")
        event = factory.event("Sunset session")
        factory.progress(rider.id, trick.id, status="mastered", updated_at=at(1))
        factory.attend(rider.id, event.id, registered_at=at(2))

        page = build_feed(session_factory, viewer.id, 1)
        assert [i.id for i in page.items] == [f"event_joined_{rider.id}_{event.id}"]
        assert page.has_more is True

        page = build_feed(session_factory, viewer.id, 2)
        assert [i.type for i in page.items] == ["event_joined", "progress_mastered"]
        assert page.has_more is False

    def test_followed_set_includes_viewer(self, db, viewer):
        assert resolve_followed_set(db, viewer.id) == [viewer.id]

    def test_own_activity_without_favorites(self, session_factory, factory, viewer):
        factory.achievement(viewer.id, "veteran", achieved_at=at(1))
        page = build_feed(session_factory, viewer.id, 10)
        assert [i.id for i in page.items] == [f"achievement_earned_{viewer.id}_veteran"]

    def test_strangers_are_excluded(self, session_factory, factory, viewer):
        stranger = factory.user()
        factory.achievement(stranger.id, "veteran")
        assert build_feed(session_factory, viewer.id, 10).items == []

    def test_empty_feed(self, session_factory, viewer):
        page = build_feed(session_factory, viewer.id, 5)
        assert page.to_dict() == {"items": [], "hasMore": False}

    def test_todo_progress_never_appears(self, session_factory, factory, viewer):
        trick = factory.trick()
        factory.progress(viewer.id, trick.id, status="todo", goofy_status="todo")
        assert build_feed(session_factory, viewer.id, 10).items == []

    def test_pagination_boundary(self, session_factory, factory, viewer):
        for n, ach in enumerate(["veteran", "trick_master", "rail_rider"]):
            factory.achievement(viewer.id, ach, achieved_at=at(n))
        exact = build_feed(session_factory, viewer.id, 3)
        assert (len(exact.items), exact.has_more) == (3, False)
        short = build_feed(session_factory, viewer.id, 2)
        assert [i.subject_ref for i in short.items] == ["rail_rider", "trick_master"]
        assert short.has_more is True

    def test_offset(self, session_factory, factory, viewer):
        for n, ach in enumerate(["veteran", "trick_master", "rail_rider"]):
            factory.achievement(viewer.id, ach, achieved_at=at(n))
        page = build_feed(session_factory, viewer.id, 2, offset=2)
        assert [i.subject_ref for i in page.items] == ["veteran"]
        assert page.has_more is False

    def test_null_timestamps_rank_oldest(self, session_factory, factory, viewer, db):
        from crewapp.models import UserAchievement

        undated = factory.achievement(viewer.id, "veteran")
        db.query(UserAchievement).filter_by(id=undated.id).update({"achieved_at": None})
        db.commit()
        factory.achievement(viewer.id, "rail_rider", achieved_at=at(1))
        page = build_feed(session_factory, viewer.id, 10)
        assert [i.subject_ref for i in page.items] == ["rail_rider", "veteran"]
        assert page.items[1].occurred_at is None

    def test_items_carry_reactions_and_actor(self, session_factory, factory, db, viewer, rider):
        factory.achievement(rider.id, "veteran", achieved_at=at(1))
        toggle_like(db, SubjectKey("achievement", rider.id, "veteran"), viewer.id)
        item = build_feed(session_factory, viewer.id, 5).items[0].to_dict()
        assert item["reactions"] == {"likesCount": 1, "commentsCount": 0, "viewerLiked": True}
        assert item["user"]["display_name"] == "Rider A"
        assert item["user"]["is_coach"] is True
        assert item["data"]["achievement_name"] == "Veteran"

    def test_event_payload(self, session_factory, factory, viewer, rider):
        host = factory.user("host")
        event = factory.event("Park jam", author_id=host.id)
        factory.attend(rider.id, event.id, registered_at=at(1))
        factory.attend(host.id, event.id, registered_at=at(2))
        data = build_feed(session_factory, viewer.id, 5).items[0].payload
        assert data["event_title"] == "Park jam"
        assert data["attendee_count"] == 2
        assert data["creator"]["username"] == "host"


class TestHiddenItems:
    def test_hidden_item_never_appears(self, session_factory, factory, db, viewer):
        factory.achievement(viewer.id, "veteran", achieved_at=at(1))
        factory.achievement(viewer.id, "rail_rider", achieved_at=at(2))
        hide_item(db, viewer.id, f"achievement_earned_{viewer.id}_rail_rider")
        page = build_feed(session_factory, viewer.id, 10)
        assert [i.subject_ref for i in page.items] == ["veteran"]

    def test_has_more_counts_visible_items(self, session_factory, factory, db, viewer):
        for n, ach in enumerate(["veteran", "trick_master", "rail_rider"]):
            factory.achievement(viewer.id, ach, achieved_at=at(n))
        hide_item(db, viewer.id, f"achievement_earned_{viewer.id}_trick_master")
        page = build_feed(session_factory, viewer.id, 2)
        assert [i.subject_ref for i in page.items] == ["rail_rider", "veteran"]
        assert page.has_more is False

    def test_hide_is_idempotent_and_unhide_restores(self, session_factory, factory, db, viewer):
        factory.achievement(viewer.id, "veteran", achieved_at=at(1))
        item_id = f"achievement_earned_{viewer.id}_veteran"
        hide_item(db, viewer.id, item_id)
        hide_item(db, viewer.id, item_id)
        assert build_feed(session_factory, viewer.id, 10).items == []
        unhide_item(db, viewer.id, item_id)
        assert [i.id for i in build_feed(session_factory, viewer.id, 10).items] == [item_id]
