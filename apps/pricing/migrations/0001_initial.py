import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PricingPhase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=120)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("price_per_night", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "family_price_per_night",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Alternate rate used for family bookings; falls back to the regular price.",
                        max_digits=10,
                        null=True,
                    ),
                ),
                (
                    "min_nights",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text="Minimum stay for bookings starting inside this phase (warning only).",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("priority", models.PositiveSmallIntegerField(default=0, help_text="When phases overlap the higher priority wins.")),
                ("color_code", models.CharField(blank=True, max_length=7)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_pricing_phases",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Pricing phase",
                "verbose_name_plural": "Pricing phases",
                "ordering": ["-priority", "start_date"],
                "indexes": [
                    models.Index(fields=["is_active", "start_date", "end_date", "priority"], name="pricing_phase_active_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("end_date__gte", models.F("start_date"))),
                        name="pricing_phase_valid_date_range",
                    ),
                ],
            },
        ),
    ]
