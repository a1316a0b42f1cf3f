import logging

from django.utils.decorators import method_decorator
from django_ratelimit.decorators import ratelimit
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from . import services
from .models import Registration
from .serializers import (
    CancellationResponseSerializer,
    FeedbackSerializer,
    RegistrationCreateSerializer,
    RegistrationResponseSerializer,
    RegistrationSerializer,
    RegistrationStatusSerializer,
    StatusUpdateResponseSerializer,
)

logger = logging.getLogger(__name__)

STATUS_FILTER_PARAMETER = OpenApiParameter(
    name="status",
    type=OpenApiTypes.STR,
    enum=["all"] + list(Registration.Status.values),
    description="Only return registrations with this status.",
)


class RegistrationViewSet(viewsets.GenericViewSet):
    """
    Registration lifecycle endpoints. Every route requires an authenticated user.
    """

    queryset = Registration.objects.select_related("event", "user")
    serializer_class = RegistrationSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    @extend_schema(
        summary="Get registration",
        description="Visible to the registration owner, the event creator and admins.",
        tags=["Registrations"],
    )
    def retrieve(self, request, pk=None):
        registration = services.get_registration(pk, request.user)
        serializer = self.get_serializer(registration)
        return Response(serializer.data)

    @extend_schema(
        summary="Cancel registration",
        description=(
            "Cancel your own registration before the registration deadline. "
            "Releasing a confirmed seat promotes the oldest waitlisted member."
        ),
        responses={200: CancellationResponseSerializer},
        tags=["Registrations"],
    )
    def destroy(self, request, pk=None):
        registration, promoted = services.cancel_registration(pk, request.user)
        return Response(
            {
                "message": "Registration cancelled successfully",
                "promoted_registration_id": promoted.id if promoted else None,
            },
            status=status.HTTP_200_OK,
        )

    @extend_schema(
        summary="My registrations",
        parameters=[STATUS_FILTER_PARAMETER],
        tags=["Registrations"],
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        queryset = services.user_registrations(
            request.user, request.query_params.get("status")
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @extend_schema(
        summary="Event registrations",
        description="Registrations and stats of an event, for its creator and admins.",
        parameters=[STATUS_FILTER_PARAMETER],
        tags=["Registrations"],
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"events/(?P<event_id>[0-9a-fA-F-]+)",
        url_name="event",
    )
    def event_registrations(self, request, event_id=None):
        event, queryset, stats = services.event_registrations(
            event_id, request.user, request.query_params.get("status")
        )
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.paginator.get_paginated_response(
                serializer.data, extra={"stats": stats}
            )

        serializer = self.get_serializer(queryset, many=True)
        return Response({"results": serializer.data, "stats": stats})

    @extend_schema(
        summary="Register for event",
        description=(
            "Sign up for an event. Members are confirmed while seats remain "
            "and waitlisted once the event is full."
        ),
        request=RegistrationCreateSerializer,
        responses={201: RegistrationResponseSerializer},
        tags=["Registrations"],
    )
    @event_registrations.mapping.post
    @method_decorator(ratelimit(key="user", rate="5/m", method="POST"))
    def register(self, request, event_id=None):
        serializer = RegistrationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = services.create_registration(
            request.user, event_id, serializer.validated_data["notes"]
        )
        message = (
            "Registration successful"
            if registration.status == Registration.Status.CONFIRMED
            else "Added to waitlist - event is currently full"
        )
        return Response(
            {
                "message": message,
                "registration": self.get_serializer(registration).data,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(
        summary="Update registration status",
        description=(
            "Event creators and admins may set any status. Confirming on a full "
            "event is allowed and reported through `capacity_override`."
        ),
        request=RegistrationStatusSerializer,
        responses={200: StatusUpdateResponseSerializer},
        tags=["Registrations"],
    )
    @action(detail=True, methods=["patch"], url_path="status")
    def update_status(self, request, pk=None):
        serializer = RegistrationStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration, capacity_override = services.update_registration_status(
            pk,
            serializer.validated_data["status"],
            request.user,
            notes=serializer.validated_data.get("notes"),
        )
        return Response(
            {
                "message": "Registration status updated successfully",
                "registration": self.get_serializer(registration).data,
                "capacity_override": capacity_override,
            }
        )

    @extend_schema(
        summary="Submit feedback",
        description="Rate an event you registered for once it has taken place.",
        request=FeedbackSerializer,
        responses={200: RegistrationResponseSerializer},
        tags=["Registrations"],
    )
    @action(detail=True, methods=["post"])
    def feedback(self, request, pk=None):
        serializer = FeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        registration = services.submit_feedback(
            pk,
            request.user,
            serializer.validated_data["rating"],
            serializer.validated_data.get("comment", ""),
        )
        return Response(
            {
                "message": "Feedback submitted successfully",
                "registration": self.get_serializer(registration).data,
            }
        )
