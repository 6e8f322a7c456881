"""
Shared catalogs served through the catalog cache: tricks, articles, products.

Each cached value is a CatalogSnapshot carrying the catalog's version, i.e. its
(max updated_at, row count) signal plus the embedded authors' latest profile edit, read
before the rows. The snapshot assembler only accepts a cached catalog whose version equals the version the fingerprint just read, so a
missed invalidation costs a refill instead of a stale "not modified" answer.

Writers to catalog tables call invalidate_catalog afterwards.
"""
import logging
from collections import namedtuple
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from crewapp.config import settings
from crewapp.core.clock import as_utc
from crewapp.core.errors import CatalogFillError
from crewapp.models.article import Article
from crewapp.models.product import Product
from crewapp.models.trick import Trick
from crewapp.models.user import User
from crewapp.services.cache import CatalogCache

logger = logging.getLogger(__name__)

CatalogSnapshot = namedtuple("CatalogSnapshot", ["version", "rows"])


@dataclass(frozen=True)
class CatalogSpec:
    name: str
    key: str
    model: type
    load_rows: Callable[[Session], list[dict]]
    ttl: float
    # Rows embed this user's profile (e.g. author_username)
    author_column: Any = None


def _version_part(value):
    if isinstance(value, datetime):
        return as_utc(value).isoformat()
    return value


def version_signal(*values) -> tuple:
    """Normalized version tuple; shared with the fingerprint so both compare equal."""
    return tuple(_version_part(v) for v in values)


def version_columns(spec: CatalogSpec) -> list:
    """
    Scalar subqueries making up a catalog's version: (max updated_at, row count), plus the
    latest profile edit among embedded authors when the rows carry author fields.
    """
    model = spec.model
    columns = [
        select(func.max(model.updated_at)).scalar_subquery(),
        select(func.count(model.id)).scalar_subquery(),
    ]
    if spec.author_column is not None:
        authors = select(spec.author_column).where(spec.author_column.is_not(None))
        columns.append(select(func.max(User.updated_at)).where(User.id.in_(authors)).scalar_subquery())
    return columns


def read_catalog_version(db: Session, spec: CatalogSpec) -> tuple:
    return version_signal(*db.execute(select(*version_columns(spec))).one())


def _columns(obj, names: tuple[str, ...]) -> dict[str, Any]:
    return {n: getattr(obj, n) for n in names}


_TRICK_COLUMNS = (
    "id", "public_id", "name", "category", "difficulty", "description",
    "video_url", "image_url", "position", "created_at",
)
_ARTICLE_COLUMNS = (
    "id", "public_id", "category", "title", "description", "content",
    "read_time", "author_id", "created_at",
)
_PRODUCT_COLUMNS = (
    "id", "public_id", "name", "category", "description", "price", "image_url", "created_at",
)


def load_tricks(db: Session) -> list[dict]:
    rows = db.query(Trick).order_by(Trick.category, Trick.difficulty, Trick.id).all()
    return [_columns(t, _TRICK_COLUMNS) for t in rows]


def load_articles(db: Session) -> list[dict]:
    rows = (
        db.query(Article, User.username)
        .outerjoin(User, Article.author_id == User.id)
        .order_by(Article.category, Article.created_at.desc(), Article.id)
        .all()
    )
    return [{**_columns(a, _ARTICLE_COLUMNS), "author_username": username} for a, username in rows]


def load_products(db: Session) -> list[dict]:
    rows = (
        db.query(Product)
        .filter(Product.is_active.is_(True))
        .order_by(Product.category, Product.name, Product.id)
        .all()
    )
    return [_columns(p, _PRODUCT_COLUMNS) for p in rows]


CATALOGS: dict[str, CatalogSpec] = {
    "tricks": CatalogSpec("tricks", "tricks:all", Trick, load_tricks, settings.catalog_ttl_seconds),
    "articles": CatalogSpec(
        "articles", "articles:all", Article, load_articles, settings.catalog_ttl_seconds, author_column=Article.author_id
    ),
    "products": CatalogSpec("products", "products:active", Product, load_products, settings.catalog_ttl_seconds),
}


def load_catalog(db: Session, spec: CatalogSpec) -> CatalogSnapshot:
    # Version first: rows newer than the version only cause an extra refill later
    version = read_catalog_version(db, spec)
    return CatalogSnapshot(version=version, rows=spec.load_rows(db))


def get_catalog(
    cache: CatalogCache,
    db_factory: Callable[[], Session],
    spec: CatalogSpec,
    expected_version: tuple | None = None,
):
    """
    Cached catalog rows, filling from the store on a miss. With expected_version, a cached
    snapshot at any other version is refilled. Returns FillResult(CatalogSnapshot, hit).
    """

    def _fill() -> CatalogSnapshot:
        db = db_factory()
        try:
            snapshot = load_catalog(db, spec)
        except Exception as e:
            raise CatalogFillError(spec.name, e) from e
        finally:
            db.close()
        logger.debug("catalog %s filled: %s rows, version=%s", spec.name, len(snapshot.rows), snapshot.version)
        return snapshot

    accept = None
    if expected_version is not None:
        accept = lambda snap: snap.version == expected_version  # noqa: E731
    return cache.get_or_fill(spec.key, _fill, ttl=spec.ttl, accept=accept)


def invalidate_catalog(cache: CatalogCache, name: str) -> int:
    """Call after any write to a catalog table (admin endpoints, imports, scripts)."""
    removed = cache.invalidate_prefix(f"{name}:")
    logger.info("catalog %s invalidated (%s entries)", name, removed)
    return removed
