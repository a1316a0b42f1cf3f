from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.events.models import Event
from apps.registrations.models import Registration

User = get_user_model()


def make_event(created_by, **overrides):
    now = timezone.now()
    data = {
        "title": "Python Workshop",
        "description": "Hands-on introduction to Python",
        "category": Event.Category.WORKSHOP,
        "organizer": "Coding Club",
        "venue": "Lab 3",
        "event_date": now + timedelta(days=7),
        "start_time": "10:00",
        "end_time": "12:00",
        "registration_deadline": now + timedelta(days=5),
        "max_participants": 3,
        "registration_fee": Decimal("0.00"),
        "created_by": created_by,
    }
    data.update(overrides)
    return Event.objects.create(**data)


class EventModelTest(TestCase):
    def setUp(self):
        self.creator = User.objects.create_user(
            username="creator", email="creator@example.com", password="testpass123"
        )
        self.members = [
            User.objects.create_user(
                username=f"member{i}",
                email=f"member{i}@example.com",
                password="testpass123",
            )
            for i in range(4)
        ]

    def register(self, event, user, status, number):
        return Registration.objects.create(
            event=event,
            user=user,
            status=status,
            registration_number=f"REG-TEST-{number}",
        )

    def test_clean_rejects_deadline_after_event(self):
        now = timezone.now()
        event = Event(
            title="Bad dates",
            description="x",
            category=Event.Category.OTHER,
            organizer="Club",
            venue="Hall",
            event_date=now + timedelta(days=1),
            start_time="10:00",
            end_time="11:00",
            registration_deadline=now + timedelta(days=2),
            max_participants=10,
            created_by=self.creator,
        )

        with self.assertRaises(ValidationError):
            event.clean()

    def test_registration_count_ignores_cancelled(self):
        event = make_event(self.creator)
        self.register(event, self.members[0], Registration.Status.CONFIRMED, 1)
        self.register(event, self.members[1], Registration.Status.WAITLIST, 2)
        self.register(event, self.members[2], Registration.Status.CANCELLED, 3)

        self.assertEqual(event.registration_count, 2)
        self.assertEqual(event.available_spots, 1)
        self.assertTrue(event.is_registration_open)

    def test_annotated_count_matches_property(self):
        event = make_event(self.creator)
        self.register(event, self.members[0], Registration.Status.CONFIRMED, 1)
        self.register(event, self.members[1], Registration.Status.CANCELLED, 2)

        annotated = Event.objects.with_registration_counts().get(pk=event.pk)
        self.assertEqual(annotated.registration_count, 1)

    def test_event_status(self):
        now = timezone.now()
        open_event = make_event(self.creator)
        self.assertEqual(open_event.event_status, Event.Status.OPEN)

        closed = make_event(
            self.creator,
            registration_deadline=now - timedelta(hours=1),
        )
        self.assertEqual(closed.event_status, Event.Status.REGISTRATION_CLOSED)

        completed = make_event(
            self.creator,
            event_date=now - timedelta(days=1),
            registration_deadline=now - timedelta(days=2),
        )
        self.assertEqual(completed.event_status, Event.Status.COMPLETED)

        inactive = make_event(self.creator, is_active=False)
        self.assertEqual(inactive.event_status, Event.Status.CANCELLED)

        full = make_event(self.creator, max_participants=1)
        self.register(full, self.members[0], Registration.Status.CONFIRMED, 9)
        self.assertEqual(full.event_status, Event.Status.FULL)
        self.assertFalse(full.is_registration_open)

    def test_queryset_windows(self):
        now = timezone.now()
        upcoming = make_event(self.creator)
        past = make_event(
            self.creator,
            event_date=now - timedelta(days=1),
            registration_deadline=now - timedelta(days=2),
        )
        inactive = make_event(self.creator, is_active=False)

        self.assertEqual(list(Event.objects.upcoming()), [upcoming])
        self.assertEqual(list(Event.objects.past()), [past])
        self.assertIn(inactive, Event.objects.by_creator(self.creator))

    def test_search(self):
        make_event(self.creator, title="Chess Night", description="Blitz games")
        make_event(self.creator, title="Football", organizer="Sports Club")

        self.assertEqual(Event.objects.search("blitz").count(), 1)
        self.assertEqual(Event.objects.search("sports club").count(), 1)
