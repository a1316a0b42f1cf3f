import logging

from django.db import transaction
from django.utils import timezone
from django_filters import rest_framework as django_filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema, extend_schema_view
from guardian.shortcuts import assign_perm
from rest_framework import filters, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .exceptions import EventHasRegistrations
from .models import Event
from .permissions import IsEventCreatorOrAdmin
from .serializers import (
    EventCreateUpdateSerializer,
    EventDetailSerializer,
    EventListSerializer,
)

logger = logging.getLogger(__name__)

STATUS_PARAMETER = OpenApiParameter(
    name="status",
    type=OpenApiTypes.STR,
    enum=["active", "past", "all"],
    description="Time window of the events to list.",
)


def filter_by_status(queryset, value):
    """Apply the `active` / `past` / `all` catalog window."""
    if value == "active":
        return queryset.upcoming()
    if value == "past":
        return queryset.past()
    return queryset


class EventFilter(django_filters.FilterSet):
    """Catalog filtering for events."""

    category = django_filters.ChoiceFilter(choices=Event.Category.choices)
    event_date_after = django_filters.DateTimeFilter(
        field_name="event_date", lookup_expr="gte"
    )
    event_date_before = django_filters.DateTimeFilter(
        field_name="event_date", lookup_expr="lte"
    )
    min_fee = django_filters.NumberFilter(
        field_name="registration_fee", lookup_expr="gte"
    )
    max_fee = django_filters.NumberFilter(
        field_name="registration_fee", lookup_expr="lte"
    )
    is_free = django_filters.BooleanFilter(method="filter_is_free")

    class Meta:
        model = Event
        fields = [
            "category",
            "event_date_after",
            "event_date_before",
            "min_fee",
            "max_fee",
            "is_free",
        ]

    def filter_is_free(self, queryset, name, value):
        if value is True:
            return queryset.filter(registration_fee=0)
        elif value is False:
            return queryset.filter(registration_fee__gt=0)
        return queryset


@extend_schema_view(
    list=extend_schema(
        summary="List events",
        description="Paginated event catalog with filtering, search and ordering.",
        parameters=[STATUS_PARAMETER],
        tags=["Events"],
    ),
    retrieve=extend_schema(summary="Get event details", tags=["Events"]),
    create=extend_schema(summary="Create event", tags=["Events"]),
    update=extend_schema(
        summary="Update event",
        description="Only the event creator or an admin can update an event.",
        tags=["Events"],
    ),
    partial_update=extend_schema(summary="Partially update event", tags=["Events"]),
    destroy=extend_schema(
        summary="Delete event",
        description="Refused while the event still has registrations.",
        tags=["Events"],
    ),
)
class EventViewSet(viewsets.ModelViewSet):
    """
    Event catalog. Reads are public; writes are limited to the creator and admins.
    """

    filter_backends = [
        DjangoFilterBackend,
        filters.SearchFilter,
        filters.OrderingFilter,
    ]
    filterset_class = EventFilter
    search_fields = ["title", "description", "organizer"]
    ordering_fields = [
        "event_date",
        "registration_deadline",
        "created_at",
        "title",
        "registration_fee",
    ]
    ordering = ["event_date"]

    def get_serializer_class(self):
        if self.action in ["list", "my"]:
            return EventListSerializer
        elif self.action in ["create", "update", "partial_update"]:
            return EventCreateUpdateSerializer
        return EventDetailSerializer

    def get_queryset(self):
        queryset = Event.objects.select_related(
            "created_by"
        ).with_registration_counts()

        if self.action == "list":
            queryset = filter_by_status(
                queryset, self.request.query_params.get("status", "active")
            )
        elif self.action == "my":
            queryset = filter_by_status(
                queryset.by_creator(self.request.user),
                self.request.query_params.get("status", "all"),
            )
        return queryset

    def get_permissions(self):
        if self.action in ["list", "retrieve"]:
            permission_classes = [permissions.AllowAny]
        elif self.action in ["update", "partial_update", "destroy", "toggle_status"]:
            permission_classes = [permissions.IsAuthenticated, IsEventCreatorOrAdmin]
        else:
            permission_classes = [permissions.IsAuthenticated]

        return [permission() for permission in permission_classes]

    @transaction.atomic
    def perform_create(self, serializer):
        event = serializer.save(created_by=self.request.user)

        assign_perm("events.change_event", self.request.user, event)
        assign_perm("events.delete_event", self.request.user, event)

        logger.info(f"Event created: {event.title} by {self.request.user.username}")

    def perform_update(self, serializer):
        event = serializer.save()
        logger.info(f"Event updated: {event.title} by {self.request.user.username}")

    def perform_destroy(self, instance):
        if instance.registrations.exists():
            raise EventHasRegistrations()

        logger.info(f"Event deleted: {instance.title} by {self.request.user.username}")
        instance.delete()

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        self.perform_destroy(instance)
        return Response(
            {"message": "Event deleted successfully"}, status=status.HTTP_200_OK
        )

    @extend_schema(
        summary="Toggle event active flag",
        request=None,
        responses={200: EventDetailSerializer},
        tags=["Events"],
    )
    @action(detail=True, methods=["patch"], url_path="toggle-status")
    def toggle_status(self, request, pk=None):
        event = self.get_object()
        event.is_active = not event.is_active
        event.save(update_fields=["is_active", "updated_at"])

        state = "activated" if event.is_active else "deactivated"
        logger.info(f"Event {event.title} {state} by {request.user.username}")

        return Response(
            {
                "message": f"Event {state} successfully",
                "event": EventDetailSerializer(
                    event, context={"request": request}
                ).data,
            }
        )

    @extend_schema(
        summary="My events",
        description="Events created by the authenticated user.",
        parameters=[STATUS_PARAMETER],
        tags=["Events"],
    )
    @action(detail=False, methods=["get"])
    def my(self, request):
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)
