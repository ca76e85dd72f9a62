import django.db.models.deletion
import shared.infrastructure.fields
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CalendarConnection",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("calendar_id", models.CharField(blank=True, max_length=255)),
                (
                    "service_account_json",
                    shared.infrastructure.fields.EncryptedTextField(
                        blank=True, help_text="Service account key file (JSON), stored encrypted."
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "updated_by",
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
                "verbose_name": "Calendar connection",
                "verbose_name_plural": "Calendar connection",
            },
        ),
        migrations.CreateModel(
            name="LinkedCalendarEvent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("event_id_1", models.CharField(max_length=1024)),
                ("event_id_2", models.CharField(max_length=1024)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
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
                "verbose_name": "Linked calendar event",
                "verbose_name_plural": "Linked calendar events",
                "constraints": [
                    models.UniqueConstraint(fields=("event_id_1", "event_id_2"), name="linked_event_unique_pair"),
                    models.CheckConstraint(
                        condition=models.Q(("event_id_1__lt", models.F("event_id_2"))),
                        name="linked_event_ordered_pair",
                    ),
                ],
            },
        ),
    ]
