from django.contrib import admin

from .models import Registration


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = [
        "registration_number",
        "user",
        "event",
        "status",
        "payment_status",
        "attendance_status",
        "feedback_rating",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "attendance_status", "created_at"]
    search_fields = [
        "registration_number",
        "user__username",
        "user__email",
        "event__title",
    ]
    readonly_fields = [
        "registration_number",
        "registration_date",
        "created_at",
        "updated_at",
    ]
    raw_id_fields = ["user", "event"]
