import decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("events", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Registration",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("confirmed", "Confirmed"),
                            ("waitlist", "Waitlist"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="confirmed",
                        max_length=20,
                        verbose_name="Status",
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("paid", "Paid"),
                            ("refunded", "Refunded"),
                            ("not_required", "Not Required"),
                        ],
                        default="not_required",
                        max_length=20,
                        verbose_name="Payment Status",
                    ),
                ),
                (
                    "payment_amount",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(
                                decimal.Decimal("0")
                            )
                        ],
                        verbose_name="Payment Amount",
                    ),
                ),
                (
                    "notes",
                    models.TextField(blank=True, max_length=500, verbose_name="Notes"),
                ),
                (
                    "attendance_status",
                    models.CharField(
                        choices=[
                            ("not_attended", "Not Attended"),
                            ("attended", "Attended"),
                            ("partially_attended", "Partially Attended"),
                        ],
                        default="not_attended",
                        max_length=20,
                        verbose_name="Attendance Status",
                    ),
                ),
                (
                    "feedback_rating",
                    models.PositiveSmallIntegerField(
                        blank=True,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ],
                        verbose_name="Feedback Rating",
                    ),
                ),
                (
                    "feedback_comment",
                    models.TextField(
                        blank=True, max_length=1000, verbose_name="Feedback Comment"
                    ),
                ),
                (
                    "feedback_submitted_at",
                    models.DateTimeField(
                        blank=True, null=True, verbose_name="Feedback Submitted At"
                    ),
                ),
                (
                    "registration_number",
                    models.CharField(
                        max_length=64, unique=True, verbose_name="Registration Number"
                    ),
                ),
                (
                    "registration_date",
                    models.DateTimeField(
                        auto_now_add=True, verbose_name="Registration Date"
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(auto_now_add=True, verbose_name="Created At"),
                ),
                (
                    "updated_at",
                    models.DateTimeField(auto_now=True, verbose_name="Updated At"),
                ),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to="events.event",
                        verbose_name="Event",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="registrations",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="User",
                    ),
                ),
            ],
            options={
                "verbose_name": "Registration",
                "verbose_name_plural": "Registrations",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["event", "status"],
                        name="registratio_event_i_4c2a9e_idx",
                    ),
                    models.Index(
                        fields=["user", "created_at"],
                        name="registratio_user_id_8d13b7_idx",
                    ),
                    models.Index(
                        fields=["registration_date"],
                        name="registratio_registr_f05e6a_idx",
                    ),
                ],
                "unique_together": {("user", "event")},
            },
        ),
    ]
