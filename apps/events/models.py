import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Count, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

ACTIVE_REGISTRATION_STATUSES = ("confirmed", "waitlist")


class EventQuerySet(models.QuerySet):
    """Custom queryset for Event with catalog filters and annotations."""

    def active(self):
        return self.filter(is_active=True)

    def upcoming(self):
        return self.filter(is_active=True, event_date__gte=timezone.now())

    def past(self):
        return self.filter(event_date__lt=timezone.now())

    def by_creator(self, user):
        return self.filter(created_by=user)

    def search(self, query):
        return self.filter(
            Q(title__icontains=query)
            | Q(description__icontains=query)
            | Q(organizer__icontains=query)
            | Q(venue__icontains=query)
        )

    def with_registration_counts(self):
        return self.annotate(
            active_registrations=Count(
                "registrations",
                filter=Q(registrations__status__in=ACTIVE_REGISTRATION_STATUSES),
            )
        )


class Event(models.Model):
    """
    A club event that members can sign up for.

    Capacity is enforced against the number of confirmed and waitlisted
    registrations; the counts are always derived from the registration table.
    """

    class Category(models.TextChoices):
        TECHNICAL = "Technical", _("Technical")
        CULTURAL = "Cultural", _("Cultural")
        SPORTS = "Sports", _("Sports")
        WORKSHOP = "Workshop", _("Workshop")
        SEMINAR = "Seminar", _("Seminar")
        COMPETITION = "Competition", _("Competition")
        SOCIAL = "Social", _("Social")
        OTHER = "Other", _("Other")

    class Status(models.TextChoices):
        OPEN = "open", _("Open")
        FULL = "full", _("Full")
        REGISTRATION_CLOSED = "registration_closed", _("Registration Closed")
        COMPLETED = "completed", _("Completed")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(_("Title"), max_length=100)
    description = models.TextField(_("Description"), max_length=2000)
    category = models.CharField(
        _("Category"), max_length=20, choices=Category.choices
    )
    organizer = models.CharField(_("Organizer"), max_length=100)
    venue = models.CharField(_("Venue"), max_length=200)

    event_date = models.DateTimeField(_("Event Date"))
    start_time = models.CharField(_("Start Time"), max_length=5)
    end_time = models.CharField(_("End Time"), max_length=5)
    registration_deadline = models.DateTimeField(_("Registration Deadline"))

    max_participants = models.PositiveIntegerField(
        _("Max Participants"),
        validators=[MinValueValidator(1), MaxValueValidator(10000)],
    )
    registration_fee = models.DecimalField(
        _("Registration Fee"),
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    requirements = models.JSONField(_("Requirements"), default=list, blank=True)
    tags = models.JSONField(_("Tags"), default=list, blank=True)
    image_url = models.URLField(_("Image URL"), blank=True)
    is_active = models.BooleanField(_("Is Active"), default=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="events_created",
        verbose_name=_("Created By"),
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["event_date"]
        verbose_name = _("Event")
        verbose_name_plural = _("Events")
        indexes = [
            models.Index(
                fields=["event_date", "is_active"],
                name="events_even_event_d_3b1f0c_idx",
            ),
            models.Index(fields=["category"], name="events_even_categor_9e2d41_idx"),
            models.Index(fields=["created_by"], name="events_even_created_5a7c18_idx"),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        super().clean()
        if (
            self.registration_deadline
            and self.event_date
            and self.registration_deadline > self.event_date
        ):
            raise ValidationError(
                {
                    "registration_deadline": _(
                        "Registration deadline must be before the event date."
                    )
                }
            )

    @property
    def registration_count(self) -> int:
        annotated = getattr(self, "active_registrations", None)
        if annotated is not None:
            return annotated
        return self.registrations.filter(
            status__in=ACTIVE_REGISTRATION_STATUSES
        ).count()

    @property
    def available_spots(self) -> int:
        return max(self.max_participants - self.registration_count, 0)

    @property
    def is_registration_open(self) -> bool:
        now = timezone.now()
        return (
            self.is_active
            and now < self.registration_deadline
            and self.registration_count < self.max_participants
        )

    @property
    def event_status(self) -> str:
        now = timezone.now()
        if not self.is_active:
            return self.Status.CANCELLED
        if now >= self.event_date:
            return self.Status.COMPLETED
        if now >= self.registration_deadline:
            return self.Status.REGISTRATION_CLOSED
        if self.registration_count >= self.max_participants:
            return self.Status.FULL
        return self.Status.OPEN
