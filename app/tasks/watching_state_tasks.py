"""
Background jobs for watching states.

Neither task retries: a failed refresh is logged and re-raised, and the
next episode progress change recomputes the state anyway.
"""
from loguru import logger

from app.tasks import celery_app
from app.database import SessionLocal
from app.services.watching_state_service import SeriesWatchingStateService


@celery_app.task(name='tasks.refresh_watching_state')
def refresh_watching_state(user_id: int, series_id: int) -> dict:
    """Recompute one user's watching state for a series."""
    db = SessionLocal()
    try:
        new_status = SeriesWatchingStateService(db).update_status(user_id, series_id)
        return {"user_id": user_id, "series_id": series_id, "status": new_status.value}
    except Exception:
        logger.exception(f"refresh_watching_state failed for user={user_id} series={series_id}")
        raise
    finally:
        db.close()


@celery_app.task(name='tasks.backfill_watching_states')
def backfill_watching_states() -> dict:
    """Create or refresh watching states for every user/series with completed episodes."""
    db = SessionLocal()
    try:
        return SeriesWatchingStateService(db).backfill_states()
    finally:
        db.close()
