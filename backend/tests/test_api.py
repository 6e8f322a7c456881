"""HTTP layer: status codes, headers and error mapping."""
import jwt
import pytest
from conftest import as_user, at
from fastapi import HTTPException

from crewapp.api.deps import current_user_id
from crewapp.config import settings
from crewapp.services.snapshot import SnapshotService


@pytest.fixture
def viewer(factory):
    return factory.user("viewer")


class TestAuth:
    @pytest.fixture(autouse=True)
    def secret(self, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret", "test-secret-with-at-least-32-bytes!!")

    def test_valid_bearer_token(self):
        token = jwt.encode({"sub": "42"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        assert current_user_id(f"Bearer {token}") == 42

    @pytest.mark.parametrize("header", [None, "", "Basic abc", "Bearer ", "Bearer not-a-jwt"])
    def test_rejected(self, header):
        with pytest.raises(HTTPException) as exc_info:
            current_user_id(header)
        assert exc_info.value.status_code == 401

    def test_wrong_secret(self):
        token = jwt.encode({"sub": "42"}, "other-secret-of-sufficient-length", algorithm="HS256")
        with pytest.raises(HTTPException):
            current_user_id(f"Bearer {token}")


class TestSnapshotRoute:
    def test_etag_then_304(self, client, factory, viewer):
        factory.trick("Raley")
        first = client.get("/snapshot", headers=as_user(viewer.id))
        assert first.status_code == 200
        etag = first.headers["etag"]
        assert etag.startswith('"') and etag.endswith(f'-u{viewer.id}"')
        assert first.json()["tricks"][0]["name"] == "Raley"

        second = client.get("/snapshot", headers={**as_user(viewer.id), "If-None-Match": etag})
        assert second.status_code == 304
        assert second.content == b""

    def test_changed_state_returns_200(self, client, factory, viewer):
        etag = client.get("/snapshot", headers=as_user(viewer.id)).headers["etag"]
        factory.notification(viewer.id)
        resp = client.get("/snapshot", headers={**as_user(viewer.id), "If-None-Match": etag})
        assert resp.status_code == 200
        assert resp.json()["unreadCount"] == 1
        assert resp.headers["etag"] != etag

    def test_failure_is_a_generic_500(self, client, cache, session_factory, executor, viewer):
        def broken_feed(*args, **kwargs):
            raise RuntimeError("connection string postgres://secret")

        client.app.state.snapshot_service = SnapshotService(cache, session_factory, executor, feed_builder=broken_feed)
        resp = client.get("/snapshot", headers=as_user(viewer.id))
        assert resp.status_code == 500
        assert resp.json() == {"detail": "Server error"}
        assert "secret" not in resp.text


class TestReactionRoutes:
    def test_like_toggle(self, client, factory, viewer):
        owner = factory.user()
        url = f"/reactions/achievement/veteran/like?owner_id={owner.id}"
        assert client.post(url, headers=as_user(viewer.id)).json() == {"viewerLiked": True, "likesCount": 1}
        assert client.post(url, headers=as_user(viewer.id)).json() == {"viewerLiked": False, "likesCount": 0}

    def test_owner_required_for_scoped_subjects(self, client, viewer):
        resp = client.post("/reactions/trick/1/like", headers=as_user(viewer.id))
        assert resp.status_code == 400

    def test_unknown_subject_type(self, client, viewer):
        assert client.post("/reactions/park/1/like?owner_id=1", headers=as_user(viewer.id)).status_code == 400

    def test_missing_post_is_404(self, client, viewer):
        assert client.post("/reactions/post/999/like", headers=as_user(viewer.id)).status_code == 404

    def test_comment_lifecycle(self, client, factory, viewer):
        post = factory.post(viewer.id)
        base = f"/reactions/post/{post.id}"
        created = client.post(f"{base}/comment", json={"content": "first!"}, headers=as_user(viewer.id))
        assert created.status_code == 201
        comment = created.json()
        assert comment["content"] == "first!"
        assert (comment["likesCount"], comment["viewerLiked"]) == (0, False)

        liked = client.post(f"{base}/comments/{comment['id']}/like", headers=as_user(viewer.id))
        assert liked.json() == {"viewerLiked": True, "likesCount": 1}

        summary = client.get(base, headers=as_user(viewer.id)).json()
        assert summary["commentsCount"] == 1
        assert summary["comments"][0]["viewerLiked"] is True

        other = factory.user()
        assert client.delete(f"{base}/comments/{comment['id']}", headers=as_user(other.id)).status_code == 404
        deleted = client.delete(f"{base}/comments/{comment['id']}", headers=as_user(viewer.id))
        assert deleted.json() == {"success": True, "commentsCount": 0}
        assert client.get(base, headers=as_user(viewer.id)).json()["comments"] == []

    def test_empty_comment_is_400(self, client, factory, viewer):
        news = factory.news()
        resp = client.post(f"/reactions/news/{news.id}/comment", json={"content": "  "}, headers=as_user(viewer.id))
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Comment cannot be empty"

    def test_owner_reactions(self, client, factory, viewer):
        rider = factory.user()
        factory.achievement(rider.id, "veteran")
        factory.achievement(rider.id, "rail_rider")
        client.post(f"/reactions/achievement/veteran/like?owner_id={rider.id}", headers=as_user(viewer.id))
        body = client.get(f"/users/{rider.id}/reactions/achievement", headers=as_user(viewer.id)).json()
        assert set(body["reactions"]) == {"veteran", "rail_rider"}
        assert body["reactions"]["veteran"]["likesCount"] == 1


class TestFeedRoutes:
    def test_feed_and_hidden(self, client, factory, viewer):
        factory.achievement(viewer.id, "veteran", achieved_at=at(1))
        factory.achievement(viewer.id, "rail_rider", achieved_at=at(2))
        body = client.get("/feed?limit=1", headers=as_user(viewer.id)).json()
        assert body["hasMore"] is True
        newest = body["items"][0]["id"]

        assert client.post("/feed/hidden", json={"itemId": newest}, headers=as_user(viewer.id)).status_code == 200
        ids = [i["id"] for i in client.get("/feed", headers=as_user(viewer.id)).json()["items"]]
        assert newest not in ids

        client.delete(f"/feed/hidden/{newest}", headers=as_user(viewer.id))
        ids = [i["id"] for i in client.get("/feed", headers=as_user(viewer.id)).json()["items"]]
        assert ids[0] == newest

    def test_limit_is_clamped(self, client, factory, viewer):
        factory.achievement(viewer.id, "veteran", achieved_at=at(1))
        factory.achievement(viewer.id, "rail_rider", achieved_at=at(2))
        body = client.get("/feed?limit=0", headers=as_user(viewer.id)).json()
        assert len(body["items"]) == 1
        assert client.get("/feed?offset=-1", headers=as_user(viewer.id)).status_code == 422


class TestTrickRoutes:
    def test_progress_roundtrip(self, client, factory, viewer):
        trick = factory.trick("Raley")
        assert [t["name"] for t in client.get("/tricks", headers=as_user(viewer.id)).json()] == ["Raley"]

        resp = client.post(
            "/tricks/progress",
            json={"trickId": trick.id, "status": "mastered", "stance": "goofy"},
            headers=as_user(viewer.id),
        )
        assert resp.json()["goofy_status"] == "mastered"
        progress = client.get("/tricks/progress", headers=as_user(viewer.id)).json()
        assert progress[str(trick.id)]["goofy_status"] == "mastered"
        assert progress[str(trick.id)]["status"] == "todo"

    def test_unknown_trick_is_404(self, client, viewer):
        resp = client.post("/tricks/progress", json={"trickId": 999, "status": "mastered"}, headers=as_user(viewer.id))
        assert resp.status_code == 404

    def test_invalid_status_is_422(self, client, factory, viewer):
        trick = factory.trick()
        resp = client.post("/tricks/progress", json={"trickId": trick.id, "status": "done"}, headers=as_user(viewer.id))
        assert resp.status_code == 422


def test_health_reports_cache_stats(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"
    assert body["cache"]["hitRate"] == "0%"
