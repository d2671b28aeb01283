# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Applied with celery_app.config_from_object("workers.config:CeleryConfig").
# Email jobs run on their own queue so a large campaign can't starve other
# work.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """Celery settings for the email workers."""

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Delivery
    # -------------------------------------------------------------------------

    # Ack after the task finishes; a worker crash re-queues the campaign
    task_acks_late = True
    worker_prefetch_multiplier = 1

    # Campaign summaries stay pollable for a day
    result_expires = 24 * 60 * 60

    # One HTTP call per recipient, so allow for large audiences
    task_soft_time_limit = 29 * 60
    task_time_limit = 30 * 60

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Queues
    # -------------------------------------------------------------------------

    task_default_queue = "default"
    task_queues = {
        "default": {"exchange": "default", "routing_key": "default"},
        "email": {"exchange": "email", "routing_key": "email"},
    }
    task_routes = {
        "workers.tasks.send_payment_reminders": {"queue": "email"},
        "workers.tasks.send_email_campaign": {"queue": "email"},
    }

    # Progress events for monitoring tools
    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
