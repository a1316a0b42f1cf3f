from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import RegistrationViewSet

app_name = "registrations"

router = DefaultRouter()
router.include_root_view = False
router.register(r"", RegistrationViewSet, basename="registration")

urlpatterns = [
    path("", include(router.urls)),
]
