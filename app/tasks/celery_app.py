from celery import Celery

from app.config import get_settings

settings = get_settings()

# Create Celery application
celery_app = Celery(
    "inventory",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["app.tasks.alert_tasks"]
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Alert checks are a single row read
    task_track_started=True,
    task_time_limit=60,
    task_soft_time_limit=45,

    worker_prefetch_multiplier=1,

    # Redeliver alerts if a worker dies mid-task
    task_acks_late=True,
    task_reject_on_worker_lost=True,
)
