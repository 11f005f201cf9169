import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("agrirent")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Fail bookings stuck in awaiting_payment - every minute
    "expire-stale-holds": {
        "task": "bookings.expire_stale_holds",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
}

app.conf.timezone = "UTC"
