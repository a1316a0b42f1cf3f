from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Count
from django.utils.translation import gettext_lazy as _

from apps.events.models import Event


class RegistrationQuerySet(models.QuerySet):
    """Custom queryset for Registration with ledger filters."""

    def for_event(self, event):
        return self.filter(event=event)

    def for_user(self, user):
        return self.filter(user=user)

    def confirmed(self):
        return self.filter(status=Registration.Status.CONFIRMED)

    def waitlisted(self):
        return self.filter(status=Registration.Status.WAITLIST)

    def cancelled(self):
        return self.filter(status=Registration.Status.CANCELLED)

    def active(self):
        return self.filter(
            status__in=[Registration.Status.CONFIRMED, Registration.Status.WAITLIST]
        )

    def waitlist_queue(self):
        """Waitlisted registrations, oldest first."""
        return self.waitlisted().order_by("created_at", "id")

    def status_counts(self):
        """
        Count registrations per status in a single grouped query.

        Returns a dict with an entry for every status plus `total`, the number
        of confirmed and waitlisted registrations.
        """
        counts = {choice: 0 for choice in Registration.Status.values}
        rows = self.order_by().values("status").annotate(count=Count("id"))
        for row in rows:
            counts[row["status"]] = row["count"]

        return {
            "total": counts[Registration.Status.CONFIRMED]
            + counts[Registration.Status.WAITLIST],
            **counts,
        }


class Registration(models.Model):
    """One member's signup for one event."""

    class Status(models.TextChoices):
        CONFIRMED = "confirmed", _("Confirmed")
        WAITLIST = "waitlist", _("Waitlist")
        CANCELLED = "cancelled", _("Cancelled")

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", _("Pending")
        PAID = "paid", _("Paid")
        REFUNDED = "refunded", _("Refunded")
        NOT_REQUIRED = "not_required", _("Not Required")

    class AttendanceStatus(models.TextChoices):
        NOT_ATTENDED = "not_attended", _("Not Attended")
        ATTENDED = "attended", _("Attended")
        PARTIALLY_ATTENDED = "partially_attended", _("Partially Attended")

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="registrations",
        verbose_name=_("User"),
    )
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name="registrations",
        verbose_name=_("Event"),
    )
    status = models.CharField(
        _("Status"),
        max_length=20,
        choices=Status.choices,
        default=Status.CONFIRMED,
    )

    payment_status = models.CharField(
        _("Payment Status"),
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.NOT_REQUIRED,
    )
    payment_amount = models.DecimalField(
        _("Payment Amount"),
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    notes = models.TextField(_("Notes"), max_length=500, blank=True)
    attendance_status = models.CharField(
        _("Attendance Status"),
        max_length=20,
        choices=AttendanceStatus.choices,
        default=AttendanceStatus.NOT_ATTENDED,
    )

    # Feedback
    feedback_rating = models.PositiveSmallIntegerField(
        _("Feedback Rating"),
        null=True,
        blank=True,
        validators=[MinValueValidator(1), MaxValueValidator(5)],
    )
    feedback_comment = models.TextField(
        _("Feedback Comment"), max_length=1000, blank=True
    )
    feedback_submitted_at = models.DateTimeField(
        _("Feedback Submitted At"), null=True, blank=True
    )

    registration_number = models.CharField(
        _("Registration Number"), max_length=64, unique=True
    )
    registration_date = models.DateTimeField(
        _("Registration Date"), auto_now_add=True
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True)

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = _("Registration")
        verbose_name_plural = _("Registrations")
        unique_together = [["user", "event"]]
        indexes = [
            models.Index(
                fields=["event", "status"], name="registratio_event_i_4c2a9e_idx"
            ),
            models.Index(
                fields=["user", "created_at"], name="registratio_user_id_8d13b7_idx"
            ),
            models.Index(
                fields=["registration_date"], name="registratio_registr_f05e6a_idx"
            ),
        ]

    def __str__(self):
        return f"{self.registration_number} ({self.status})"

    @property
    def feedback(self):
        if self.feedback_submitted_at is None:
            return None
        return {
            "rating": self.feedback_rating,
            "comment": self.feedback_comment,
            "submitted_at": self.feedback_submitted_at,
        }
