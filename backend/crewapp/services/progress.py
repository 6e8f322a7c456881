"""
Per-user trick progress. The only write path here; it exists so progress changes reach the
fingerprint (user_tricks.updated_at) and the followed-set feed.
"""
import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from crewapp.core.constants import STANCE_GOOFY, STATUS_TODO, TRICK_STATUSES
from crewapp.core.errors import SubjectNotFoundError
from crewapp.models.trick import Trick
from crewapp.models.user_trick import UserTrick

logger = logging.getLogger(__name__)


def get_progress(db: Session, user_id: int) -> dict[int, dict]:
    """trick id -> {status, goofy_status, notes}."""
    rows = db.query(UserTrick).filter(UserTrick.user_id == user_id).all()
    return {
        ut.trick_id: {"status": ut.status, "goofy_status": ut.goofy_status, "notes": ut.notes}
        for ut in rows
    }


def update_trick_progress(
    db: Session,
    user_id: int,
    trick_id: int,
    status: str,
    notes: str | None = None,
    stance: str | None = None,
) -> dict:
    """Upsert the user's progress row. stance='goofy' writes goofy_status; notes are kept when omitted."""
    if status not in TRICK_STATUSES:
        raise ValueError(f"Invalid status: {status}")
    if db.get(Trick, trick_id) is None:
        raise SubjectNotFoundError(f"trick {trick_id}")

    try:
        ut = db.query(UserTrick).filter_by(user_id=user_id, trick_id=trick_id).first()
        if ut is None:
            ut = UserTrick(user_id=user_id, trick_id=trick_id)
            db.add(ut)
        if stance == STANCE_GOOFY:
            ut.goofy_status = status
            if ut.status is None:
                ut.status = STATUS_TODO
        else:
            ut.status = status
        if notes is not None:
            ut.notes = notes
        # Explicit so the change is visible to the fingerprint even where no trigger exists
        ut.updated_at = datetime.now(timezone.utc)
        db.commit()
        db.refresh(ut)
    except Exception:
        db.rollback()
        raise
    logger.info("progress user=%s trick=%s stance=%s status=%s", user_id, trick_id, stance or "regular", status)
    return {"trick_id": ut.trick_id, "status": ut.status, "goofy_status": ut.goofy_status, "notes": ut.notes}
