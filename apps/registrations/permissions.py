"""
Authorization rules shared by the registration services.
"""


def can_manage_event(user, event) -> bool:
    """Event creators, club admins and holders of `change_event` manage signups."""
    if not user.is_authenticated:
        return False
    if user.is_admin or event.created_by_id == user.id:
        return True
    return user.has_perm("events.change_event", event)
