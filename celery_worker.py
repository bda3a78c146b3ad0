"""
Celery worker entry point
Run with: celery -A celery_worker worker --loglevel=info
"""
from app.config import settings
from app.utils.logging import setup_logger
from app.tasks import celery_app
from app.tasks import watching_state_tasks

setup_logger(settings.LOG_LEVEL)

# Import all tasks to register them
__all__ = ['celery_app', 'watching_state_tasks']
