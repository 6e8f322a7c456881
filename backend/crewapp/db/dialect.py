"""
Dialect-aware statements. Production runs on PostgreSQL; SQLite is used for local runs and tests.
Both support INSERT ... ON CONFLICT DO NOTHING with the same call shape.
"""
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session


def insert_ignore(db: Session, model, **values):
    """INSERT ... ON CONFLICT DO NOTHING for the session's dialect. Returns the Result."""
    if db.get_bind().dialect.name == "sqlite":
        stmt = sqlite_insert(model).values(**values)
    else:
        stmt = pg_insert(model).values(**values)
    return db.execute(stmt.on_conflict_do_nothing())
