import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("courtbook")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Release unpaid bookings once their payment deadline passes
    "cancel-expired-bookings": {
        "task": "bookings.cancel_expired_bookings",
        "schedule": 60.0,
        "options": {"expires": 50},
    },
    # Close recurring groups whose last session is behind us
    "complete-finished-recurring-groups": {
        "task": "recurring.complete_finished_groups",
        "schedule": crontab(minute=5, hour=0),
    },
}

app.conf.timezone = "Asia/Bangkok"
