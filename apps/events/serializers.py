import re

from django.utils import timezone
from rest_framework import serializers
from rest_framework.exceptions import ValidationError

from apps.accounts.serializers import UserMinimalSerializer

from .models import Event

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class EventMinimalSerializer(serializers.ModelSerializer):
    """Compact event representation embedded in registration payloads."""

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "category",
            "venue",
            "event_date",
            "start_time",
            "end_time",
            "registration_deadline",
            "registration_fee",
        ]


class EventListSerializer(serializers.ModelSerializer):
    registration_count = serializers.IntegerField(read_only=True)
    available_spots = serializers.IntegerField(read_only=True)
    is_registration_open = serializers.BooleanField(read_only=True)
    event_status = serializers.CharField(read_only=True)

    class Meta:
        model = Event
        fields = [
            "id",
            "title",
            "category",
            "organizer",
            "venue",
            "event_date",
            "start_time",
            "end_time",
            "registration_deadline",
            "max_participants",
            "registration_fee",
            "tags",
            "image_url",
            "is_active",
            "registration_count",
            "available_spots",
            "is_registration_open",
            "event_status",
        ]


class EventDetailSerializer(EventListSerializer):
    created_by = UserMinimalSerializer(read_only=True)

    class Meta(EventListSerializer.Meta):
        fields = EventListSerializer.Meta.fields + [
            "description",
            "requirements",
            "created_by",
            "created_at",
            "updated_at",
        ]


class EventCreateUpdateSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating events with cross-field validation."""

    requirements = serializers.ListField(
        child=serializers.CharField(max_length=200), required=False
    )
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50), required=False
    )

    class Meta:
        model = Event
        fields = [
            "title",
            "description",
            "category",
            "organizer",
            "venue",
            "event_date",
            "start_time",
            "end_time",
            "registration_deadline",
            "max_participants",
            "registration_fee",
            "requirements",
            "tags",
            "image_url",
        ]

    def validate(self, attrs):
        errors = {}

        event_date = attrs.get(
            "event_date", getattr(self.instance, "event_date", None)
        )
        deadline = attrs.get(
            "registration_deadline",
            getattr(self.instance, "registration_deadline", None),
        )

        if "event_date" in attrs and attrs["event_date"] <= timezone.now():
            errors["event_date"] = "Event date must be in the future."

        if event_date and deadline and deadline > event_date:
            errors["registration_deadline"] = (
                "Registration deadline must be before or on the event date."
            )

        for field in ("start_time", "end_time"):
            value = attrs.get(field)
            if value is not None and not TIME_PATTERN.match(value):
                errors[field] = "Time must use the HH:MM format."

        if errors:
            raise ValidationError(errors)

        return attrs

    def to_representation(self, instance):
        return EventDetailSerializer(instance, context=self.context).data
