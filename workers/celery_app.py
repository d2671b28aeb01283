# =============================================================================
# workers/celery_app.py - Celery Application
# =============================================================================
# Builds the Celery app used for bulk email. Redis is both broker and result
# backend so the API can poll job progress (see app/routers/tasks.py).
#
# Usage:
#   celery -A workers.celery_app worker -Q default,email --loglevel=info
# =============================================================================

import logging

from celery import Celery
from celery.signals import task_failure, task_postrun, task_prerun
from dotenv import load_dotenv

# .env must be loaded before app.config builds its settings
load_dotenv()

from app.config import settings  # noqa: E402

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    """
    Build the Celery app from settings.

    Returns:
        Celery app with workers.tasks registered
    """
    app = Celery(
        "heat_awards_worker",
        broker=settings.REDIS_URL,
        backend=settings.REDIS_URL,
        include=["workers.tasks"],
    )
    app.config_from_object("workers.config:CeleryConfig")

    # Never log broker credentials
    logger.info(f"Celery app ready, broker at {settings.REDIS_URL.split('@')[-1]}")
    return app


celery_app = create_celery_app()


# =============================================================================
# Task Lifecycle Logging
# =============================================================================

@task_prerun.connect
def log_task_start(sender=None, task_id=None, task=None, **extra):
    logger.info(f"Starting {task.name} [{task_id}]")


@task_postrun.connect
def log_task_end(sender=None, task_id=None, task=None, state=None, **extra):
    logger.info(f"Finished {task.name} [{task_id}] with state {state}")


@task_failure.connect
def log_task_failure(sender=None, task_id=None, exception=None, **extra):
    logger.error(f"{sender.name} [{task_id}] failed: {exception}")


if __name__ == "__main__":
    celery_app.start()
