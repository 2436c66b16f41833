"""
Celery app for background plan generation.

The API enqueues and the worker executes:

    celery -A tasks worker -Q plans
"""
from celery import Celery
from celery.signals import setup_logging as celery_setup_logging
from core.config import settings
from core.logging import setup_logging

celery_app = Celery(
    "plan_engine",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_routes={"tasks.generate_training_plan": {"queue": "plans"}},
    task_time_limit=5 * 60,
    task_soft_time_limit=4 * 60,
    result_expires=24 * 3600,
)


@celery_setup_logging.connect
def configure_worker_logging(**kwargs):
    """Use the API's log format in workers instead of Celery's default."""
    setup_logging()


# Import tasks to register them
from . import plan_tasks  # noqa: E402

__all__ = ["celery_app"]
