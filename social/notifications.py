"""
================================================================================
SOCIALHUB - NOTIFICATION FAN-OUT
================================================================================

@file        notifications.py
@description Persisting and managing notification records

MODULE PURPOSE
================================================================================
notify() is the single write path for Notification rows. It is called by the
signal receivers (receivers.py) after a relationship or engagement write has
committed, so a failure here never undoes the triggering write.

The remaining functions are the recipient's view of their notifications:
listing, marking read and deleting. Every one of them is scoped to the
recipient, so a user can never read or mutate somebody else's rows.

SUPPRESSION RULE
================================================================================
No notification is created when actor and recipient are the same user. The
check happens here and is backed by the notification_not_self constraint.

================================================================================
"""

import logging

from django.utils import timezone

from .exceptions import NotFound, storage_errors
from .models import Notification

logger = logging.getLogger(__name__)

MESSAGE_MAX_LENGTH = Notification._meta.get_field('message').max_length


@storage_errors('notify')
def notify(sender_id, receiver_id, message, navigate_link='/'):
    """
    Record that ``sender_id`` did something concerning ``receiver_id``.

    Returns the created Notification, or None when sender and receiver are
    the same user.
    """
    if sender_id == receiver_id:
        logger.debug("Suppressed self-notification for user %s", sender_id)
        return None
    if len(message) > MESSAGE_MAX_LENGTH:
        logger.warning(
            "Notification message for user %s truncated from %s to %s characters",
            receiver_id, len(message), MESSAGE_MAX_LENGTH,
        )
        message = message[:MESSAGE_MAX_LENGTH]
    notification = Notification.objects.create(
        actor_id=sender_id,
        recipient_id=receiver_id,
        message=message,
        navigate_link=navigate_link,
    )
    logger.info("Notification %s created for user %s", notification.pk, receiver_id)
    return notification


@storage_errors('mark_notification_read')
def mark_read(notification_id, user_id):
    updated = Notification.objects.filter(
        pk=notification_id,
        recipient_id=user_id,
    ).update(is_read=True)
    if not updated:
        raise NotFound('mark_notification_read', 'Notification not found', notification_id)


@storage_errors('mark_all_notifications_read')
def mark_all_read(user_id):
    """Mark every unread notification of ``user_id`` read; returns the count."""
    return Notification.objects.filter(recipient_id=user_id, is_read=False).update(is_read=True)


@storage_errors('delete_notification')
def delete_notification(notification_id, user_id):
    deleted, _ = Notification.objects.filter(
        pk=notification_id,
        recipient_id=user_id,
    ).delete()
    if not deleted:
        raise NotFound('delete_notification', 'Notification not found', notification_id)


@storage_errors('unread_count')
def unread_count(user_id):
    return Notification.objects.filter(recipient_id=user_id, is_read=False).count()


@storage_errors('list_notifications')
def list_for_user(user_id):
    """Notifications addressed to ``user_id``, newest first."""
    notifications = (
        Notification.objects
        .filter(recipient_id=user_id)
        .select_related('actor')
        .order_by('-created_at', '-id')
    )
    return [serialize(notification) for notification in notifications]


def serialize(notification):
    actor = notification.actor
    return {
        'id': notification.pk,
        'message': notification.message,
        'navigate_link': notification.navigate_link,
        'is_read': notification.is_read,
        # Rendered in the timezone TimezoneMiddleware activated
        'created_at': timezone.localtime(notification.created_at).isoformat(),
        'actor': {
            'id': actor.pk,
            'full_name': actor.full_name,
            'profile_picture': actor.profile_picture,
        },
    }
