"""
Episode progress and series review endpoints.
Mounted at: /api/v1/series-watch
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from datetime import datetime

from app.database import get_db
from app.services.series_watch_service import EpisodeWatchService, SeriesRatingService

router = APIRouter()


# ── Schemas ───────────────────────────────────────────────────────────────────

class EpisodeProgressUpdate(BaseModel):
    user_id: int = Field(..., ge=1)
    episode_id: int = Field(..., ge=1)
    last_position: int = Field(0, ge=0, description="Playback position in seconds")
    watch_percentage: float = Field(0.0, ge=0, le=100)
    completed: bool = False


class EpisodeProgressResponse(BaseModel):
    id: int
    user_id: int
    episode_id: int
    watch_percentage: float
    last_position: int
    completed: bool
    watched_at: datetime
    class Config:
        from_attributes = True


class SeriesRatingCreate(BaseModel):
    user_id: int = Field(..., ge=1)
    series_id: int = Field(..., ge=1)
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(None, max_length=2000)


class SeriesRatingResponse(BaseModel):
    id: int
    user_id: int
    series_id: int
    rating: int
    review: Optional[str]
    created_at: datetime
    class Config:
        from_attributes = True


# ════════════════════════════════════════════════════════════════
# EPISODE WATCH PROGRESS
# ════════════════════════════════════════════════════════════════

@router.post("/progress", response_model=EpisodeProgressResponse)
async def update_episode_progress(data: EpisodeProgressUpdate, db: Session = Depends(get_db)):
    """
    Save episode watch progress.

    Marking an episode completed (or un-completing it) also refreshes the
    user's watching state for the series.
    """
    return EpisodeWatchService.update_progress(
        user_id=data.user_id,
        episode_id=data.episode_id,
        last_position=data.last_position,
        watch_percentage=data.watch_percentage,
        completed=data.completed,
        db=db,
    )


@router.get("/progress/{user_id}/{episode_id}", response_model=Optional[EpisodeProgressResponse])
async def get_episode_progress(user_id: int, episode_id: int, db: Session = Depends(get_db)):
    """Get playback position for an episode (used to resume watching)."""
    return EpisodeWatchService.get_progress(user_id, episode_id, db)


@router.get("/series/{series_id}/progress")
async def get_series_progress(
    series_id: int,
    user_id: int = Query(..., ge=1),
    db: Session = Depends(get_db),
):
    """Watch progress for every episode in a series the user has touched."""
    records = EpisodeWatchService.get_series_progress(user_id, series_id, db)
    return [
        {
            "episode_id":       r.episode_id,
            "watch_percentage": r.watch_percentage,
            "last_position":    r.last_position,
            "completed":        r.completed,
            "watched_at":       r.watched_at,
        }
        for r in records
    ]


# ════════════════════════════════════════════════════════════════
# SERIES REVIEWS
# ════════════════════════════════════════════════════════════════

@router.post("/ratings", response_model=SeriesRatingResponse, status_code=status.HTTP_201_CREATED)
async def rate_series(data: SeriesRatingCreate, db: Session = Depends(get_db)):
    """Review a series 1-5 stars. Only allowed once every episode is watched."""
    return SeriesRatingService.rate_series(
        data.user_id, data.series_id, data.rating, data.review, db
    )


@router.get("/ratings/{series_id}/average")
async def get_series_average_rating(series_id: int, db: Session = Depends(get_db)):
    """Get average star rating for a series."""
    return SeriesRatingService.get_average_rating(series_id, db)
