import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

STATUS_CHOICES = [
    ("new", "New"),
    ("contacted", "Contacted"),
    ("viewing_scheduled", "Viewing scheduled"),
    ("viewing_completed", "Viewing completed"),
    ("negotiating", "Negotiating"),
    ("deposit_paid", "Deposit paid"),
    ("reserved", "Reserved"),
    ("payment_processing", "Payment processing"),
    ("sold", "Sold"),
    ("cancelled", "Cancelled"),
    ("expired", "Expired"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Inquiry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("client_name", models.CharField(max_length=255)),
                ("client_email", models.EmailField(max_length=254)),
                (
                    "client_phone",
                    models.CharField(
                        max_length=20,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Invalid Philippine phone number format (use +639XXXXXXXXX or 09XXXXXXXXX).",
                                regex="^(\\+639|09)\\d{9}$",
                            )
                        ],
                    ),
                ),
                ("message", models.TextField(blank=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="new", max_length=32)),
                ("commission_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                (
                    "commission_locked",
                    models.BooleanField(default=False, help_text="Set once a deposit is paid; freezes the assigned agent."),
                ),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "assigned_to",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="assigned_inquiries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "property",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="inquiries",
                        to="properties.property",
                    ),
                ),
            ],
            options={
                "verbose_name": "Inquiry",
                "verbose_name_plural": "Inquiries",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["property", "status"], name="inquiry_property_status_idx"),
                    models.Index(fields=["assigned_to", "status"], name="inquiry_agent_status_idx"),
                    models.Index(fields=["client_email"], name="inquiry_client_email_idx"),
                    models.Index(fields=["client_phone"], name="inquiry_client_phone_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="InquiryStatusHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=32)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=32)),
                ("notes", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                (
                    "changed_by",
                    models.ForeignKey(
                        blank=True,
                        help_text="Empty for transitions made by the system.",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "inquiry",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="history",
                        to="inquiries.inquiry",
                    ),
                ),
            ],
            options={
                "verbose_name": "Inquiry status change",
                "verbose_name_plural": "Inquiry status history",
                "ordering": ["-created_at", "-id"],
            },
        ),
    ]
