"""
Shared fixtures.

Each test gets a file-backed SQLite database (worker threads open their own connections to
it), a session factory, a deterministic clock and a Factory for seeding rows with explicit
timestamps.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi import Header
from fastapi.testclient import TestClient
from sqlalchemy import event
from sqlalchemy.orm import sessionmaker

import crewapp.models  # noqa: F401
from crewapp.api.deps import current_user_id
from crewapp.db.base import Base
from crewapp.db.session import get_db, make_engine
from crewapp.main import app
from crewapp.models import (
    Article,
    Comment,
    Event,
    EventAttendee,
    Favorite,
    News,
    NotificationGroup,
    Order,
    Product,
    Trick,
    User,
    UserAchievement,
    UserPost,
    UserTrick,
)
from crewapp.services.cache import CatalogCache
from crewapp.services.snapshot import SnapshotService

T0 = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def at(minutes: int) -> datetime:
    """T0 plus minutes; keeps seeded timelines readable."""
    return T0 + timedelta(minutes=minutes)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.t = start

    def monotonic(self) -> float:
        return self.t

    def now(self) -> datetime:
        return T0 + timedelta(seconds=self.t)

    def advance(self, seconds: float) -> None:
        self.t += seconds


class QueryCounter:
    """Counts SQL statements sent on an engine."""

    def __init__(self, engine):
        self.count = 0
        event.listen(engine, "before_cursor_execute", self._on_execute)

    def _on_execute(self, *args, **kwargs):
        self.count += 1

    def reset(self) -> None:
        self.count = 0


class Factory:
    def __init__(self, session_factory):
        self._session_factory = session_factory
        self._n = 0

    def _save(self, obj):
        db = self._session_factory()
        try:
            db.add(obj)
            db.commit()
            db.refresh(obj)
            db.expunge(obj)
        finally:
            db.close()
        return obj

    def _next(self) -> int:
        self._n += 1
        return self._n

    def user(self, username: str | None = None, **kw) -> User:
        n = self._next()
        username = username or f"rider{n}"
        kw.setdefault("updated_at", T0)
        return self._save(User(email=f"{username}@example.com", username=username, **kw))

    def trick(self, name: str = "Raley", category: str = "air", **kw) -> Trick:
        kw.setdefault("difficulty", "intermediate")
        kw.setdefault("updated_at", T0)
        return self._save(Trick(name=name, category=category, **kw))

    def article(self, title: str = "Edging 101", **kw) -> Article:
        kw.setdefault("category", "basics")
        kw.setdefault("updated_at", T0)
        return self._save(Article(title=title, **kw))

    def product(self, name: str = "Rope", **kw) -> Product:
        kw.setdefault("category", "gear")
        kw.setdefault("price", 10)
        kw.setdefault("is_active", True)
        kw.setdefault("updated_at", T0)
        return self._save(Product(name=name, **kw))

    def event(self, name: str = "Sunset session", **kw) -> Event:
        kw.setdefault("date", date(2026, 4, 1))
        kw.setdefault("time", "18:00")
        kw.setdefault("location", "Lake")
        kw.setdefault("updated_at", T0)
        return self._save(Event(name=name, **kw))

    def attend(self, user_id: int, event_id: int, registered_at: datetime | None = T0) -> EventAttendee:
        return self._save(EventAttendee(user_id=user_id, event_id=event_id, registered_at=registered_at))

    def progress(self, user_id: int, trick_id: int, status: str = "mastered", goofy_status: str = "todo",
                 updated_at: datetime | None = T0) -> UserTrick:
        return self._save(
            UserTrick(user_id=user_id, trick_id=trick_id, status=status, goofy_status=goofy_status, updated_at=updated_at)
        )

    def achievement(self, user_id: int, achievement_id: str, tier: str = "bronze",
                    achieved_at: datetime | None = T0) -> UserAchievement:
        return self._save(
            UserAchievement(user_id=user_id, achievement_id=achievement_id, tier=tier, achieved_at=achieved_at)
        )

    def follow(self, user_id: int, followed_id: int) -> Favorite:
        return self._save(Favorite(user_id=user_id, item_type="user", item_id=followed_id))

    def favorite(self, user_id: int, item_type: str, item_id: int) -> Favorite:
        return self._save(Favorite(user_id=user_id, item_type=item_type, item_id=item_id))

    def post(self, user_id: int, content: str = "First ride of the season") -> UserPost:
        return self._save(UserPost(user_id=user_id, content=content, likes_count=0, comments_count=0))

    def news(self, title: str = "Lake opens", created_at: datetime = T0) -> News:
        return self._save(News(title=title, created_at=created_at))

    def notification(self, user_id: int, is_read: bool = False) -> NotificationGroup:
        return self._save(NotificationGroup(user_id=user_id, type="like", is_read=is_read))

    def booking(self, user_id: int, status: str = "completed", **kw) -> Order:
        kw.setdefault("public_id", f"ord-abc{self._next()}")
        kw.setdefault("booking_date", date(2026, 4, 2))
        return self._save(Order(user_id=user_id, status=status, product_name="Lesson", **kw))

    def comment(self, author_id: int, subject_type: str, owner_id: int, subject_id: str, content: str = "nice") -> Comment:
        return self._save(
            Comment(
                author_id=author_id,
                subject_type=subject_type,
                owner_id=owner_id,
                subject_id=str(subject_id),
                content=content,
                is_deleted=False,
            )
        )


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'crew.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def factory(session_factory) -> Factory:
    return Factory(session_factory)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock) -> CatalogCache:
    return CatalogCache(clock=clock, default_ttl=300)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="test_snapshot")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def query_counter(engine) -> QueryCounter:
    return QueryCounter(engine)


@pytest.fixture
def snapshot_service(cache, session_factory, executor) -> SnapshotService:
    return SnapshotService(cache, session_factory, executor)


def _test_user(x_test_user: int = Header(..., alias="X-Test-User")) -> int:
    return x_test_user


@pytest.fixture
def client(session_factory, cache, executor, snapshot_service):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[current_user_id] = _test_user
    app.state.catalog_cache = cache
    app.state.session_factory = session_factory
    app.state.snapshot_service = snapshot_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def as_user(user_id: int) -> dict:
    return {"X-Test-User": str(user_id)}
