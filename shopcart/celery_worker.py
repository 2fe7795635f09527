# shopcart/celery_worker.py
from celery import Celery
from celery.schedules import crontab

from shopcart.utils.settings import (
    CELERY_BROKER_URL,
    CELERY_RESULT_BACKEND,
    CART_CLEAN_HOUR,
    CART_CLEAN_MINUTE,
)

celery_app = Celery(
    "shopcart",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# explicite importuj taski, zeby Celery je zarejestrowal
celery_app.conf.imports = (
    "shopcart.tasks.clean",
    "shopcart.services.notification_service",
)

# sprzatanie starych koszykow raz dziennie (domyslnie 01:00)
celery_app.conf.beat_schedule = {
    "clean-carts-daily": {
        "task": "shopcart.tasks.clean.clean_carts_task",
        "schedule": crontab(hour=CART_CLEAN_HOUR, minute=CART_CLEAN_MINUTE),
    },
}

celery_app.conf.timezone = "UTC"
