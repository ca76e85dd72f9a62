import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

CONFLICT_TYPES = [
    ("OVERLAPPING_REQUESTS", "Overlapping bookings"),
    ("CALENDAR_CONFLICT", "Booking overlaps a calendar entry"),
    ("OVERLAPPING_CALENDAR_EVENTS", "Overlapping calendar entries"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="IgnoredConflict",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("conflict_key", models.CharField(max_length=2048)),
                ("conflict_type", models.CharField(choices=CONFLICT_TYPES, max_length=32)),
                ("reason", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "ignored_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Ignored conflict",
                "verbose_name_plural": "Ignored conflicts",
                "constraints": [
                    models.UniqueConstraint(fields=("conflict_key", "conflict_type"), name="ignored_conflict_unique_key"),
                ],
            },
        ),
        migrations.CreateModel(
            name="NotifiedConflict",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("conflict_key", models.CharField(max_length=2048)),
                ("conflict_type", models.CharField(choices=CONFLICT_TYPES, max_length=32)),
                ("notified_at", models.DateTimeField()),
            ],
            options={
                "verbose_name": "Notified conflict",
                "verbose_name_plural": "Notified conflicts",
                "constraints": [
                    models.UniqueConstraint(fields=("conflict_key", "conflict_type"), name="notified_conflict_unique_key"),
                ],
            },
        ),
    ]
