from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = [
        "username",
        "email",
        "get_full_name",
        "role",
        "student_id",
        "department",
        "is_active",
    ]
    list_filter = ["role", "is_active", "is_staff", "department"]
    search_fields = ["username", "email", "first_name", "last_name", "student_id"]
    fieldsets = BaseUserAdmin.fieldsets + (
        (
            _("Club profile"),
            {"fields": ("role", "student_id", "phone_number", "department", "year")},
        ),
    )
