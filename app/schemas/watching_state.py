from pydantic import BaseModel
from typing import List
from datetime import datetime

from app.models.series_watch import WatchingStatus


class WatchingStatusResponse(BaseModel):
    user_id: int
    series_id: int
    status: WatchingStatus


class WatchingStateResponse(BaseModel):
    id: int
    user_id: int
    series_id: int
    status: str
    watched_episodes_count: int
    total_episodes_count: int
    created_at: datetime
    last_updated: datetime

    class Config:
        from_attributes = True


class WatchingStateListResponse(BaseModel):
    count: int
    states: List[WatchingStateResponse]


class ReviewValidationResponse(BaseModel):
    user_id: int
    series_id: int
    can_create_review: bool
    message: str


class BackfillResponse(BaseModel):
    processed: int
    errors: int
    total: int


class TaskQueuedResponse(BaseModel):
    task_id: str
    message: str
