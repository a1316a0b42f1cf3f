from django.contrib import admin
from guardian.admin import GuardedModelAdmin

from .models import Event


@admin.register(Event)
class EventAdmin(GuardedModelAdmin):
    list_display = [
        "title",
        "category",
        "organizer",
        "event_date",
        "registration_deadline",
        "max_participants",
        "registration_fee",
        "is_active",
    ]
    list_filter = ["category", "is_active", "event_date", "created_at"]
    search_fields = ["title", "description", "organizer", "venue"]
    readonly_fields = ["id", "created_at", "updated_at"]
    date_hierarchy = "event_date"
    raw_id_fields = ["created_by"]
