import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Property",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True)),
                (
                    "property_type",
                    models.CharField(
                        choices=[
                            ("house", "House"),
                            ("condo", "Condominium"),
                            ("townhouse", "Townhouse"),
                            ("lot", "Lot"),
                            ("commercial", "Commercial"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("available", "Available"),
                            ("reserved", "Reserved"),
                            ("sold", "Sold"),
                            ("archived", "Archived"),
                        ],
                        default="available",
                        max_length=20,
                    ),
                ),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("location", models.CharField(max_length=255)),
                ("address", models.CharField(blank=True, max_length=255)),
                ("bedrooms", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("bathrooms", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("floor_area", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ("lot_area", models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                (
                    "reservation_type",
                    models.CharField(
                        choices=[("none", "None"), ("deposit", "Deposit"), ("full_payment", "Full payment")],
                        default="none",
                        max_length=20,
                    ),
                ),
                ("reservation_date", models.DateTimeField(blank=True, null=True)),
                (
                    "reservation_expiry",
                    models.DateTimeField(
                        blank=True,
                        help_text="Set only for deposit reservations; the hold lapses after this moment.",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "agent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="properties",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Property",
                "verbose_name_plural": "Properties",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="property_status_idx"),
                    models.Index(
                        fields=["status", "reservation_type", "reservation_expiry"],
                        name="property_reservation_idx",
                    ),
                ],
            },
        ),
    ]
