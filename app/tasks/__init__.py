from celery import Celery
from app.config import settings

# Initialize Celery
celery_app = Celery(
    'series_tracker_tasks',
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND
)

# Configure Celery
celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=3600,  # 1 hour max per backfill
    worker_prefetch_multiplier=1,
)

# Import tasks
from app.tasks import watching_state_tasks  # noqa: E402,F401
