"""
Registration lifecycle: signup with capacity and waitlist, cancellation with
waitlist promotion, administrative status changes, feedback and statistics.

All mutations that read or change an event's capacity run inside
`event_lock(event_id)` and, nested inside it, a database transaction that also
row-locks the event. The in-process lock is taken before the first read and
released only after commit.
"""

import logging
from typing import Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.events.models import Event

from .exceptions import (
    AlreadyCancelled,
    AlreadyPastDeadline,
    DeadlinePassed,
    DuplicateRegistration,
    EventAlreadyOccurred,
    EventInactive,
    EventNotFound,
    EventNotYetOccurred,
    Forbidden,
    InvalidStatus,
    RegistrationNotFound,
    ValidationFailed,
)
from .locks import event_lock
from .models import Registration
from .permissions import can_manage_event

logger = logging.getLogger(__name__)

MAX_FEEDBACK_COMMENT_LENGTH = 1000
REGISTRATION_NUMBER_ATTEMPTS = 3


def decide_status(active_count: int, max_participants: int) -> str:
    """Confirm while there is room, otherwise put the member on the waitlist."""
    if active_count < max_participants:
        return Registration.Status.CONFIRMED
    return Registration.Status.WAITLIST


def generate_registration_number(event: Event) -> str:
    """
    Build a `REG` number from the event id, the clock and the ledger size.

    The numeric suffix is bumped until the candidate is unused.
    """
    event_part = str(event.pk)[-4:]
    timestamp_part = str(int(timezone.now().timestamp() * 1000))[-6:]
    sequence = Registration.objects.count() + 1

    candidate = f"REG{event_part}{timestamp_part}{sequence}"
    while Registration.objects.filter(registration_number=candidate).exists():
        sequence += 1
        candidate = f"REG{event_part}{timestamp_part}{sequence}"
    return candidate


def get_event(event_id) -> Event:
    try:
        return Event.objects.get(pk=event_id)
    except (Event.DoesNotExist, DjangoValidationError, ValueError):
        raise EventNotFound()


def _lock_event_row(event_id) -> Event:
    try:
        return Event.objects.select_for_update().get(pk=event_id)
    except (Event.DoesNotExist, DjangoValidationError, ValueError):
        raise EventNotFound()


def _get_registration(registration_id, for_update=False) -> Registration:
    queryset = Registration.objects.select_related("event", "user")
    if for_update:
        queryset = queryset.select_for_update()
    try:
        return queryset.get(pk=registration_id)
    except (Registration.DoesNotExist, ValueError):
        raise RegistrationNotFound()


def _event_id_for(registration_id):
    try:
        event_id = (
            Registration.objects.filter(pk=registration_id)
            .values_list("event_id", flat=True)
            .first()
        )
    except ValueError:
        event_id = None

    if event_id is None:
        raise RegistrationNotFound()
    return event_id


def promote_next(event: Event) -> Optional[Registration]:
    """
    Confirm the oldest waitlisted registration of `event`, if any.

    Must run under the event's lock inside an open transaction.
    """
    candidate = (
        Registration.objects.for_event(event)
        .waitlist_queue()
        .select_for_update()
        .first()
    )
    if candidate is None:
        return None

    candidate.status = Registration.Status.CONFIRMED
    candidate.save(update_fields=["status", "updated_at"])
    logger.info(
        f"Promoted registration {candidate.registration_number} from waitlist "
        f"for event {event.pk}"
    )
    return candidate


def create_registration(user, event_id, notes: str = "") -> Registration:
    # Unknown ids must fail before a lock table entry is created for them.
    event_id = get_event(event_id).pk

    with event_lock(event_id), transaction.atomic():
        event = _lock_event_row(event_id)
        now = timezone.now()

        if not event.is_active:
            raise EventInactive()
        if now >= event.registration_deadline:
            raise DeadlinePassed()
        if now >= event.event_date:
            raise EventAlreadyOccurred()
        if Registration.objects.filter(user=user, event=event).exists():
            raise DuplicateRegistration()

        active_count = Registration.objects.for_event(event).active().count()
        status = decide_status(active_count, event.max_participants)
        registration = _insert_registration(user, event, status, notes)

    logger.info(
        f"User {user.username} registered for event {event.title} "
        f"({registration.status}, {registration.registration_number})"
    )
    return registration


def _insert_registration(user, event, status, notes) -> Registration:
    """
    Insert the ledger row, drawing a fresh registration number on collision.

    Numbers are unique across all events, so a signup on another event can
    claim the same candidate between generation and insert.
    """
    fee = event.registration_fee
    attempts = 0
    while True:
        attempts += 1
        try:
            with transaction.atomic():
                return Registration.objects.create(
                    user=user,
                    event=event,
                    status=status,
                    notes=notes or "",
                    payment_amount=fee,
                    payment_status=(
                        Registration.PaymentStatus.PENDING
                        if fee > 0
                        else Registration.PaymentStatus.NOT_REQUIRED
                    ),
                    registration_number=generate_registration_number(event),
                )
        except IntegrityError:
            if Registration.objects.filter(user=user, event=event).exists():
                raise DuplicateRegistration()
            if attempts >= REGISTRATION_NUMBER_ATTEMPTS:
                raise
            logger.warning(
                f"Registration number collision on event {event.pk}, retrying"
            )


def cancel_registration(
    registration_id, user
) -> Tuple[Registration, Optional[Registration]]:
    """
    Cancel the caller's own registration.

    Returns the cancelled registration and the registration promoted off the
    waitlist, which is only ever set when a confirmed seat was released.
    """
    event_id = _event_id_for(registration_id)

    with event_lock(event_id), transaction.atomic():
        _lock_event_row(event_id)
        registration = _get_registration(registration_id, for_update=True)

        if registration.user_id != user.id:
            raise Forbidden("Not authorized to cancel this registration.")
        if timezone.now() >= registration.event.registration_deadline:
            raise AlreadyPastDeadline()
        if registration.status == Registration.Status.CANCELLED:
            raise AlreadyCancelled()

        previous_status = registration.status
        registration.status = Registration.Status.CANCELLED
        registration.save(update_fields=["status", "updated_at"])

        promoted = None
        if previous_status == Registration.Status.CONFIRMED:
            promoted = promote_next(registration.event)

    logger.info(
        f"User {user.username} cancelled registration "
        f"{registration.registration_number} (was {previous_status})"
    )
    return registration, promoted


def update_registration_status(
    registration_id, new_status, actor, notes=None
) -> Tuple[Registration, bool]:
    """
    Set a registration's status on behalf of the event's creator or an admin.

    No capacity check and no promotion happen here. The returned flag is True
    when a registration was confirmed although the event was already full.
    """
    if new_status not in Registration.Status.values:
        raise InvalidStatus()

    event_id = _event_id_for(registration_id)

    with event_lock(event_id), transaction.atomic():
        event = _lock_event_row(event_id)
        registration = _get_registration(registration_id, for_update=True)

        if not can_manage_event(actor, event):
            raise Forbidden("Not authorized to update this registration.")

        capacity_override = False
        if (
            new_status == Registration.Status.CONFIRMED
            and registration.status != Registration.Status.CONFIRMED
        ):
            confirmed_count = Registration.objects.for_event(event).confirmed().count()
            capacity_override = confirmed_count >= event.max_participants

        previous_status = registration.status
        registration.status = new_status
        update_fields = ["status", "updated_at"]
        if notes:
            registration.notes = notes
            update_fields.append("notes")
        registration.save(update_fields=update_fields)

    if capacity_override:
        logger.warning(
            f"Capacity override: {actor.username} confirmed registration "
            f"{registration.registration_number} on full event {event.pk}"
        )
    logger.info(
        f"Registration {registration.registration_number} status changed "
        f"from {previous_status} to {new_status} by {actor.username}"
    )
    return registration, capacity_override


def _validate_feedback(rating, comment):
    errors = {}
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        errors["rating"] = ["Rating must be between 1 and 5."]
    if comment and len(comment) > MAX_FEEDBACK_COMMENT_LENGTH:
        errors["comment"] = [
            f"Feedback comment cannot exceed {MAX_FEEDBACK_COMMENT_LENGTH} characters."
        ]
    if errors:
        raise ValidationFailed(errors)


def submit_feedback(registration_id, user, rating, comment="") -> Registration:
    _validate_feedback(rating, comment)
    registration = _get_registration(registration_id)

    if registration.user_id != user.id:
        raise Forbidden("Not authorized to submit feedback for this registration.")
    if timezone.now() < registration.event.event_date:
        raise EventNotYetOccurred()

    registration.feedback_rating = rating
    registration.feedback_comment = comment or ""
    registration.feedback_submitted_at = timezone.now()
    registration.save(
        update_fields=[
            "feedback_rating",
            "feedback_comment",
            "feedback_submitted_at",
            "updated_at",
        ]
    )

    logger.info(
        f"Feedback ({rating}/5) submitted for registration "
        f"{registration.registration_number} by {user.username}"
    )
    return registration


def registration_stats(event) -> dict:
    return Registration.objects.for_event(event).status_counts()


def get_registration(registration_id, user) -> Registration:
    """Fetch a registration readable by its owner or the event's managers."""
    registration = _get_registration(registration_id)
    if registration.user_id != user.id and not can_manage_event(
        user, registration.event
    ):
        raise Forbidden("Not authorized to view this registration.")
    return registration


def filter_by_status(queryset, status):
    if status in (None, "", "all"):
        return queryset
    if status not in Registration.Status.values:
        raise InvalidStatus()
    return queryset.filter(status=status)


def event_registrations(event_id, user, status=None):
    """Registrations of an event plus its stats, for the event's managers."""
    event = get_event(event_id)
    if not can_manage_event(user, event):
        raise Forbidden("Not authorized to view registrations for this event.")

    queryset = filter_by_status(
        Registration.objects.for_event(event).select_related("user", "event"),
        status,
    ).order_by("-created_at")
    return event, queryset, registration_stats(event)


def user_registrations(user, status=None):
    return filter_by_status(
        Registration.objects.for_user(user).select_related("event", "user"),
        status,
    ).order_by("-created_at", "-id")
