"""
Watching state endpoints.
Mounted at: /api/v1/watching-state
"""
from typing import Union
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.series_watch_service import get_series_or_raise, get_user_or_raise
from app.services.watching_state_service import SeriesWatchingStateService
from app.schemas.watching_state import (
    WatchingStatusResponse,
    WatchingStateResponse,
    WatchingStateListResponse,
    ReviewValidationResponse,
    BackfillResponse,
    TaskQueuedResponse,
)

router = APIRouter()


@router.get("/status", response_model=WatchingStatusResponse)
async def get_status(
    user_id: int = Query(..., ge=1),
    series_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    """
    Current status computed from the episodes the user has completed.
    Read-only: use this for "to watch / in progress / finished" lists.
    """
    status = SeriesWatchingStateService(db).get_status(user_id, series_id)
    return {"user_id": user_id, "series_id": series_id, "status": status}


@router.post("/update", response_model=Union[WatchingStatusResponse, TaskQueuedResponse])
async def update_status(
    user_id: int = Query(..., ge=1),
    series_id: int = Query(..., ge=1),
    run_async: bool = Query(False, description="Queue the refresh on the Celery worker"),
    db: Session = Depends(get_db),
):
    """Recompute and store the watching state from the current episode progress."""
    if run_async:
        from app.tasks.watching_state_tasks import refresh_watching_state
        get_user_or_raise(user_id, db)
        get_series_or_raise(series_id, db)
        result = refresh_watching_state.delay(user_id, series_id)
        return {"task_id": result.id, "message": "Watching state refresh queued"}

    status = SeriesWatchingStateService(db).update_status(user_id, series_id)
    return {"user_id": user_id, "series_id": series_id, "status": status}


@router.post("/validate-review", response_model=ReviewValidationResponse)
async def validate_review(
    user_id: int = Query(..., ge=1),
    series_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    """
    Check whether the user may review the series.
    Responds 409 with the current status when the series is not Finished.
    """
    SeriesWatchingStateService(db).validate_review_creation(user_id, series_id)
    return {
        "user_id": user_id,
        "series_id": series_id,
        "can_create_review": True,
        "message": "Review creation is allowed",
    }


@router.get("/state", response_model=WatchingStateResponse)
async def get_state(
    user_id: int = Query(..., ge=1),
    series_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    """Stored watching state record, as last written by /update."""
    state = SeriesWatchingStateService(db).get_state(user_id, series_id)
    if not state:
        raise HTTPException(status_code=404, detail="No watching state recorded yet")
    return state


@router.get("/all", response_model=WatchingStateListResponse)
async def list_states(db: Session = Depends(get_db)):
    """Every stored watching state (for debugging)."""
    states = SeriesWatchingStateService(db).list_states()
    return {"count": len(states), "states": states}


@router.post("/backfill", response_model=Union[BackfillResponse, TaskQueuedResponse])
async def backfill_states(
    run_async: bool = Query(False, description="Queue the backfill on the Celery worker"),
    db: Session = Depends(get_db),
):
    """
    Create or refresh watching states for every user/series pair with
    completed episodes. Useful after importing existing progress data.
    """
    if run_async:
        from app.tasks.watching_state_tasks import backfill_watching_states
        result = backfill_watching_states.delay()
        return {"task_id": result.id, "message": "Backfill queued"}

    return SeriesWatchingStateService(db).backfill_states()
