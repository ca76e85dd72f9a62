import os

from celery import Celery
from celery.schedules import crontab  # type: ignore

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.dev")

app = Celery("booking_calendar")

app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


# ============================================================================
# CELERY BEAT SCHEDULE (Periodic Tasks)
# ============================================================================

app.conf.beat_schedule = {
    # Bookings <-> shared calendar, absorbs edits made in the calendar
    "reconcile-calendar": {
        "task": "calendar_sync.reconcile_calendar",
        "schedule": crontab(minute="*/30"),
        "options": {"expires": 25 * 60},
    },
    # Double bookings and overlapping calendar entries
    "check-conflicts": {
        "task": "conflicts.check_and_notify",
        "schedule": crontab(minute="*/15"),
        "options": {"expires": 10 * 60},
    },
}
