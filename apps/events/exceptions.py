from rest_framework import status
from rest_framework.exceptions import APIException


class EventHasRegistrations(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = (
        "Cannot delete event with existing registrations. "
        "Please cancel all registrations first."
    )
    default_code = "event_has_registrations"
