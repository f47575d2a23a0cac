"""
HRMS - Celery Configuration

Celery configuration for background task processing.
Uses Redis as the message broker and result backend.
"""

from celery import Celery
from celery.schedules import crontab

from app.config import settings


# Create Celery app
celery_app = Celery(
    'hrms',
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=['app.tasks.celery_tasks'],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',

    # Timezone
    timezone='Asia/Bangkok',
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=1800,  # 30 minutes, large imports
    task_soft_time_limit=1500,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result backend settings
    result_expires=86400,  # 24 hours

    # Beat schedule for periodic tasks
    beat_schedule={
        # Purge expired recycle bin entries every day at 2 AM
        'purge-recycle-bin': {
            'task': 'app.tasks.celery_tasks.purge_recycle_bin_task',
            'schedule': crontab(hour=2, minute=0),
        },
    },
)


celery_app.conf.task_routes = {
    'app.tasks.celery_tasks.import_*': {'queue': 'imports'},
    'app.tasks.celery_tasks.*': {'queue': 'default'},
}
