"""
FastAPI app entrypoint.

The catalog cache, the snapshot executor and the snapshot service are built once per process
in the lifespan and shared through app.state.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from crewapp.api.routes import feed, reactions, snapshot, tricks  # noqa: E402
from crewapp.config import settings  # noqa: E402
from crewapp.db.session import SessionLocal  # noqa: E402
from crewapp.services.cache import CatalogCache  # noqa: E402
from crewapp.services.snapshot import SnapshotService  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    cache = CatalogCache(default_ttl=settings.catalog_ttl_seconds)
    executor = ThreadPoolExecutor(max_workers=settings.snapshot_max_workers, thread_name_prefix="snapshot")
    app.state.catalog_cache = cache
    app.state.session_factory = SessionLocal
    app.state.snapshot_executor = executor
    app.state.snapshot_service = SnapshotService(cache, SessionLocal, executor)
    logger.info("Backend ready (snapshot workers=%s)", settings.snapshot_max_workers)
    yield
    executor.shutdown(wait=False, cancel_futures=True)


app = FastAPI(title="Crew API", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS env (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["ETag"],
)

app.include_router(snapshot.router, tags=["snapshot"])
app.include_router(reactions.router, tags=["reactions"])
app.include_router(feed.router, tags=["feed"])
app.include_router(tricks.router, tags=["tricks"])


@app.get("/", include_in_schema=False)
def root():
    return {"message": "Crew API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict:
    cache = getattr(app.state, "catalog_cache", None)
    return {"status": "ok", "cache": cache.stats() if cache else None}
