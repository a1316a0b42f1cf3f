import decimal
import uuid

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
            name="Event",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("title", models.CharField(max_length=100, verbose_name="Title")),
                (
                    "description",
                    models.TextField(max_length=2000, verbose_name="Description"),
                ),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("Technical", "Technical"),
                            ("Cultural", "Cultural"),
                            ("Sports", "Sports"),
                            ("Workshop", "Workshop"),
                            ("Seminar", "Seminar"),
                            ("Competition", "Competition"),
                            ("Social", "Social"),
                            ("Other", "Other"),
                        ],
                        max_length=20,
                        verbose_name="Category",
                    ),
                ),
                (
                    "organizer",
                    models.CharField(max_length=100, verbose_name="Organizer"),
                ),
                ("venue", models.CharField(max_length=200, verbose_name="Venue")),
                ("event_date", models.DateTimeField(verbose_name="Event Date")),
                (
                    "start_time",
                    models.CharField(max_length=5, verbose_name="Start Time"),
                ),
                ("end_time", models.CharField(max_length=5, verbose_name="End Time")),
                (
                    "registration_deadline",
                    models.DateTimeField(verbose_name="Registration Deadline"),
                ),
                (
                    "max_participants",
                    models.PositiveIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(10000),
                        ],
                        verbose_name="Max Participants",
                    ),
                ),
                (
                    "registration_fee",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0.00"),
                        max_digits=10,
                        validators=[
                            django.core.validators.MinValueValidator(
                                decimal.Decimal("0")
                            )
                        ],
                        verbose_name="Registration Fee",
                    ),
                ),
                (
                    "requirements",
                    models.JSONField(
                        blank=True, default=list, verbose_name="Requirements"
                    ),
                ),
                (
                    "tags",
                    models.JSONField(blank=True, default=list, verbose_name="Tags"),
                ),
                (
                    "image_url",
                    models.URLField(blank=True, verbose_name="Image URL"),
                ),
                (
                    "is_active",
                    models.BooleanField(default=True, verbose_name="Is Active"),
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
                    "created_by",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="events_created",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Created By",
                    ),
                ),
            ],
            options={
                "verbose_name": "Event",
                "verbose_name_plural": "Events",
                "ordering": ["event_date"],
                "indexes": [
                    models.Index(
                        fields=["event_date", "is_active"],
                        name="events_even_event_d_3b1f0c_idx",
                    ),
                    models.Index(
                        fields=["category"], name="events_even_categor_9e2d41_idx"
                    ),
                    models.Index(
                        fields=["created_by"], name="events_even_created_5a7c18_idx"
                    ),
                ],
            },
        ),
    ]
