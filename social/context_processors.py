"""
================================================================================
SOCIALHUB - CONTEXT PROCESSORS
================================================================================

@file        context_processors.py
@description Template-wide unread notification and friend request counts

USAGE IN SETTINGS.PY
================================================================================
    'social.context_processors.unread_counts',

Available in all templates as:
    {{ unread_notifications_count }}
    {{ pending_friend_requests_count }}

================================================================================
"""

from .models import FriendRequest
from .notifications import unread_count


def unread_counts(request):
    """
    Inject unread notification and pending friend request counts.

    Anonymous users get zeros without touching the database.
    """
    if not request.user.is_authenticated:
        return {
            "unread_notifications_count": 0,
            "pending_friend_requests_count": 0,
        }

    return {
        "unread_notifications_count": unread_count(request.user.pk),
        "pending_friend_requests_count": FriendRequest.objects.filter(
            receiver=request.user
        ).count(),
    }
