from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.test import TestCase
from django.utils import timezone

from apps.events.models import Event
from apps.events.tests.test_models import make_event
from apps.registrations import services
from apps.registrations.exceptions import (
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
from apps.registrations.models import Registration

User = get_user_model()


class RegistrationServiceTestCase(TestCase):
    """Shared fixtures for ledger tests."""

    def setUp(self):
        self.creator = User.objects.create_user(
            username="creator", email="creator@example.com", password="testpass123"
        )
        self.admin = User.objects.create_user(
            username="clubadmin",
            email="clubadmin@example.com",
            password="testpass123",
            role=User.Role.ADMIN,
        )
        self.users = [
            User.objects.create_user(
                username=f"student{i}",
                email=f"student{i}@example.com",
                password="testpass123",
            )
            for i in range(6)
        ]
        self.event = make_event(self.creator, max_participants=2)

    def move_event_to_past(self, event=None):
        event = event or self.event
        now = timezone.now()
        Event.objects.filter(pk=event.pk).update(
            event_date=now - timedelta(hours=1),
            registration_deadline=now - timedelta(hours=2),
        )


class DecideStatusTest(TestCase):
    def test_confirmed_below_capacity(self):
        self.assertEqual(services.decide_status(0, 1), Registration.Status.CONFIRMED)
        self.assertEqual(services.decide_status(4, 5), Registration.Status.CONFIRMED)

    def test_waitlist_at_or_above_capacity(self):
        self.assertEqual(services.decide_status(5, 5), Registration.Status.WAITLIST)
        self.assertEqual(services.decide_status(7, 5), Registration.Status.WAITLIST)


class CreateRegistrationTest(RegistrationServiceTestCase):
    def test_confirms_until_full_then_waitlists(self):
        first = services.create_registration(self.users[0], self.event.pk)
        second = services.create_registration(self.users[1], self.event.pk)
        third = services.create_registration(self.users[2], self.event.pk)

        self.assertEqual(first.status, Registration.Status.CONFIRMED)
        self.assertEqual(second.status, Registration.Status.CONFIRMED)
        self.assertEqual(third.status, Registration.Status.WAITLIST)

    def test_waitlisted_members_count_toward_capacity(self):
        services.create_registration(self.users[0], self.event.pk)
        services.create_registration(self.users[1], self.event.pk)
        services.create_registration(self.users[2], self.event.pk)
        Registration.objects.filter(user=self.users[0]).update(
            status=Registration.Status.CANCELLED
        )

        # one confirmed + one waitlisted still fills a capacity of two
        fourth = services.create_registration(self.users[3], self.event.pk)
        self.assertEqual(fourth.status, Registration.Status.WAITLIST)

    def test_free_event_payment_fields(self):
        registration = services.create_registration(
            self.users[0], self.event.pk, notes="Vegetarian lunch"
        )

        self.assertEqual(registration.payment_amount, Decimal("0.00"))
        self.assertEqual(
            registration.payment_status, Registration.PaymentStatus.NOT_REQUIRED
        )
        self.assertEqual(registration.notes, "Vegetarian lunch")

    def test_paid_event_payment_fields(self):
        paid = make_event(self.creator, registration_fee=Decimal("12.50"))

        registration = services.create_registration(self.users[0], paid.pk)

        self.assertEqual(registration.payment_amount, Decimal("12.50"))
        self.assertEqual(registration.payment_status, Registration.PaymentStatus.PENDING)

    def test_duplicate_registration(self):
        services.create_registration(self.users[0], self.event.pk)

        with self.assertRaises(DuplicateRegistration):
            services.create_registration(self.users[0], self.event.pk)

    def test_cancelled_registration_blocks_reregistration(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        services.cancel_registration(registration.pk, self.users[0])

        with self.assertRaises(DuplicateRegistration):
            services.create_registration(self.users[0], self.event.pk)

    def test_unknown_event(self):
        with self.assertRaises(EventNotFound):
            services.create_registration(
                self.users[0], "00000000-0000-0000-0000-000000000000"
            )

    def test_inactive_event(self):
        inactive = make_event(self.creator, is_active=False)

        with self.assertRaises(EventInactive):
            services.create_registration(self.users[0], inactive.pk)

    def test_deadline_passed_regardless_of_capacity(self):
        now = timezone.now()
        closed = make_event(
            self.creator,
            max_participants=100,
            registration_deadline=now - timedelta(minutes=1),
        )

        with self.assertRaises(DeadlinePassed):
            services.create_registration(self.users[0], closed.pk)
        self.assertFalse(Registration.objects.filter(event=closed).exists())

    def test_event_already_occurred(self):
        # Deadline later than the event date can only be produced by bypassing
        # model validation; the event date check must still hold.
        now = timezone.now()
        occurred = make_event(
            self.creator,
            event_date=now - timedelta(minutes=1),
            registration_deadline=now + timedelta(days=1),
        )

        with self.assertRaises(EventAlreadyOccurred):
            services.create_registration(self.users[0], occurred.pk)


class RegistrationNumberTest(RegistrationServiceTestCase):
    def test_format(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        number = registration.registration_number

        self.assertTrue(number.startswith("REG" + str(self.event.pk)[-4:]))
        self.assertTrue(number.endswith("1"))
        self.assertEqual(len(number), 3 + 4 + 6 + 1)

    def test_collision_bumps_suffix(self):
        other_event = make_event(self.creator)
        frozen = timezone.now()
        with patch("apps.registrations.services.timezone.now", return_value=frozen):
            prefix = services.generate_registration_number(self.event)[:-1]
            Registration.objects.create(
                event=other_event,
                user=self.users[5],
                registration_number=f"{prefix}2",
            )
            # one row in the ledger makes suffix 2 the next candidate
            bumped = services.generate_registration_number(self.event)

        self.assertEqual(bumped, f"{prefix}3")

    def test_number_taken_on_insert_is_redrawn(self):
        other_event = make_event(self.creator)
        taken = services.create_registration(self.users[0], other_event.pk)

        with patch(
            "apps.registrations.services.generate_registration_number",
            side_effect=[taken.registration_number, "REGFRESH0001"],
        ):
            with self.assertLogs("apps.registrations.services", level="WARNING"):
                registration = services.create_registration(
                    self.users[1], self.event.pk
                )

        self.assertEqual(registration.registration_number, "REGFRESH0001")
        self.assertEqual(registration.status, Registration.Status.CONFIRMED)

    def test_persistent_number_collision_is_not_reported_as_duplicate(self):
        other_event = make_event(self.creator)
        taken = services.create_registration(self.users[0], other_event.pk)

        with patch(
            "apps.registrations.services.generate_registration_number",
            return_value=taken.registration_number,
        ):
            with self.assertRaises(IntegrityError):
                services.create_registration(self.users[1], self.event.pk)

        self.assertFalse(
            Registration.objects.filter(user=self.users[1], event=self.event).exists()
        )

    def test_numbers_are_unique(self):
        numbers = {
            services.create_registration(user, self.event.pk).registration_number
            for user in self.users
        }
        self.assertEqual(len(numbers), len(self.users))


class CancelRegistrationTest(RegistrationServiceTestCase):
    def test_single_seat_promotion(self):
        event = make_event(self.creator, max_participants=1)
        first = services.create_registration(self.users[0], event.pk)
        second = services.create_registration(self.users[1], event.pk)
        self.assertEqual(second.status, Registration.Status.WAITLIST)

        cancelled, promoted = services.cancel_registration(first.pk, self.users[0])

        self.assertEqual(cancelled.status, Registration.Status.CANCELLED)
        self.assertEqual(promoted.pk, second.pk)
        second.refresh_from_db()
        self.assertEqual(second.status, Registration.Status.CONFIRMED)

    def test_promotes_oldest_waitlisted_only(self):
        confirmed = [
            services.create_registration(user, self.event.pk) for user in self.users[:2]
        ]
        waitlisted = [
            services.create_registration(user, self.event.pk) for user in self.users[2:5]
        ]

        _, promoted = services.cancel_registration(confirmed[0].pk, self.users[0])

        self.assertEqual(promoted.pk, waitlisted[0].pk)
        statuses = dict(
            Registration.objects.filter(event=self.event).values_list("id", "status")
        )
        self.assertEqual(statuses[waitlisted[0].pk], Registration.Status.CONFIRMED)
        self.assertEqual(statuses[waitlisted[1].pk], Registration.Status.WAITLIST)
        self.assertEqual(statuses[waitlisted[2].pk], Registration.Status.WAITLIST)

    def test_empty_waitlist_changes_nothing_else(self):
        first = services.create_registration(self.users[0], self.event.pk)
        second = services.create_registration(self.users[1], self.event.pk)
        before = second.updated_at

        _, promoted = services.cancel_registration(first.pk, self.users[0])

        self.assertIsNone(promoted)
        second.refresh_from_db()
        self.assertEqual(second.status, Registration.Status.CONFIRMED)
        self.assertEqual(second.updated_at, before)

    def test_cancelling_waitlisted_never_promotes(self):
        for user in self.users[:2]:
            services.create_registration(user, self.event.pk)
        waiting = services.create_registration(self.users[2], self.event.pk)
        still_waiting = services.create_registration(self.users[3], self.event.pk)

        _, promoted = services.cancel_registration(waiting.pk, self.users[2])

        self.assertIsNone(promoted)
        still_waiting.refresh_from_db()
        self.assertEqual(still_waiting.status, Registration.Status.WAITLIST)

    def test_not_found(self):
        with self.assertRaises(RegistrationNotFound):
            services.cancel_registration(999999, self.users[0])

    def test_only_owner_can_cancel(self):
        registration = services.create_registration(self.users[0], self.event.pk)

        with self.assertRaises(Forbidden):
            services.cancel_registration(registration.pk, self.users[1])

    def test_cancel_after_deadline(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        self.move_event_to_past()

        with self.assertRaises(AlreadyPastDeadline):
            services.cancel_registration(registration.pk, self.users[0])

    def test_cancel_twice(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        services.cancel_registration(registration.pk, self.users[0])

        with self.assertRaises(AlreadyCancelled):
            services.cancel_registration(registration.pk, self.users[0])


class UpdateStatusTest(RegistrationServiceTestCase):
    def test_creator_can_change_status_without_promotion(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        services.create_registration(self.users[1], self.event.pk)
        waiting = services.create_registration(self.users[2], self.event.pk)

        updated, override = services.update_registration_status(
            registration.pk, "cancelled", self.creator, notes="No-show"
        )

        self.assertEqual(updated.status, Registration.Status.CANCELLED)
        self.assertEqual(updated.notes, "No-show")
        self.assertFalse(override)
        waiting.refresh_from_db()
        self.assertEqual(waiting.status, Registration.Status.WAITLIST)

    def test_admin_confirming_on_full_event_flags_override(self):
        for user in self.users[:2]:
            services.create_registration(user, self.event.pk)
        waiting = services.create_registration(self.users[2], self.event.pk)

        with self.assertLogs("apps.registrations.services", level="WARNING") as logs:
            updated, override = services.update_registration_status(
                waiting.pk, "confirmed", self.admin
            )

        self.assertTrue(override)
        self.assertEqual(updated.status, Registration.Status.CONFIRMED)
        self.assertIn("Capacity override", logs.output[0])
        self.assertEqual(
            Registration.objects.for_event(self.event).confirmed().count(), 3
        )

    def test_confirming_with_room_is_not_an_override(self):
        registration = services.create_registration(self.users[0], self.event.pk)
        services.update_registration_status(registration.pk, "waitlist", self.creator)

        _, override = services.update_registration_status(
            registration.pk, "confirmed", self.creator
        )

        self.assertFalse(override)

    def test_invalid_status(self):
        registration = services.create_registration(self.users[0], self.event.pk)

        with self.assertRaises(InvalidStatus):
            services.update_registration_status(registration.pk, "pending", self.admin)

    def test_member_cannot_update(self):
        registration = services.create_registration(self.users[0], self.event.pk)

        with self.assertRaises(Forbidden):
            services.update_registration_status(
                registration.pk, "cancelled", self.users[0]
            )


class FeedbackTest(RegistrationServiceTestCase):
    def setUp(self):
        super().setUp()
        self.registration = services.create_registration(self.users[0], self.event.pk)

    def test_feedback_before_event(self):
        with self.assertRaises(EventNotYetOccurred):
            services.submit_feedback(self.registration.pk, self.users[0], 5)

    def test_feedback_after_event_overwrites(self):
        self.move_event_to_past()

        services.submit_feedback(self.registration.pk, self.users[0], 3, "Decent")
        updated = services.submit_feedback(self.registration.pk, self.users[0], 5)

        self.assertEqual(updated.feedback_rating, 5)
        self.assertEqual(updated.feedback_comment, "")
        self.assertIsNotNone(updated.feedback["submitted_at"])

    def test_rating_out_of_range(self):
        self.move_event_to_past()

        for rating in (0, 6, "5", True):
            with self.assertRaises(ValidationFailed):
                services.submit_feedback(self.registration.pk, self.users[0], rating)

    def test_comment_too_long(self):
        self.move_event_to_past()

        with self.assertRaises(ValidationFailed):
            services.submit_feedback(
                self.registration.pk, self.users[0], 4, "x" * 1001
            )

    def test_only_owner(self):
        self.move_event_to_past()

        with self.assertRaises(Forbidden):
            services.submit_feedback(self.registration.pk, self.users[1], 4)


class StatsTest(RegistrationServiceTestCase):
    def test_stats_counts(self):
        event = make_event(self.creator, max_participants=3)
        for user in self.users:
            services.create_registration(user, event.pk)
        # 3 confirmed, 3 waitlisted; cancel the last waitlisted
        last = Registration.objects.for_event(event).waitlist_queue().last()
        services.cancel_registration(last.pk, last.user)

        self.assertEqual(
            services.registration_stats(event),
            {"total": 5, "confirmed": 3, "waitlist": 2, "cancelled": 1},
        )

    def test_stats_empty_event(self):
        self.assertEqual(
            services.registration_stats(self.event),
            {"total": 0, "confirmed": 0, "waitlist": 0, "cancelled": 0},
        )
