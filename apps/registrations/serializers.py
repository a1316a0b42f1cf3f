from rest_framework import serializers

from apps.accounts.serializers import UserMinimalSerializer
from apps.events.serializers import EventMinimalSerializer

from .models import Registration
from .services import MAX_FEEDBACK_COMMENT_LENGTH


class FeedbackSerializer(serializers.Serializer):
    rating = serializers.IntegerField(min_value=1, max_value=5)
    comment = serializers.CharField(
        max_length=MAX_FEEDBACK_COMMENT_LENGTH,
        required=False,
        allow_blank=True,
        default="",
    )
    submitted_at = serializers.DateTimeField(read_only=True)


class RegistrationSerializer(serializers.ModelSerializer):
    user = UserMinimalSerializer(read_only=True)
    event = EventMinimalSerializer(read_only=True)
    feedback = serializers.SerializerMethodField()

    class Meta:
        model = Registration
        fields = [
            "id",
            "user",
            "event",
            "status",
            "payment_status",
            "payment_amount",
            "notes",
            "attendance_status",
            "feedback",
            "registration_number",
            "registration_date",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_feedback(self, obj):
        feedback = obj.feedback
        if feedback is None:
            return None
        return FeedbackSerializer(feedback).data


class RegistrationCreateSerializer(serializers.Serializer):
    notes = serializers.CharField(
        max_length=500, required=False, allow_blank=True, default=""
    )


class RegistrationStatusSerializer(serializers.Serializer):
    # Choice validation happens in the service so that unknown values map to
    # the invalid_status error code.
    status = serializers.CharField()
    notes = serializers.CharField(max_length=500, required=False, allow_blank=True)


class RegistrationStatsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    confirmed = serializers.IntegerField()
    waitlist = serializers.IntegerField()
    cancelled = serializers.IntegerField()


class RegistrationResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    registration = RegistrationSerializer()


class CancellationResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    promoted_registration_id = serializers.IntegerField(allow_null=True)


class StatusUpdateResponseSerializer(RegistrationResponseSerializer):
    capacity_override = serializers.BooleanField()
