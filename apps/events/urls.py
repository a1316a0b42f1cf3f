from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import EventViewSet

app_name = "events"

router = DefaultRouter()
router.include_root_view = False
router.register(r"", EventViewSet, basename="event")

urlpatterns = [
    path("", include(router.urls)),
]
