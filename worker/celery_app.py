from celery import Celery
from listing_hub.core.config import settings

celery = Celery(
    "listing-hub-worker",
    broker=settings.rabbitmq_url,
    backend=settings.redis_url,
    include=["worker.tasks"],
)

celery.conf.update(
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    task_default_queue="default",
    task_routes={
        "worker.tasks.send_listing_notification": {"queue": "notifications"},
    },
)
