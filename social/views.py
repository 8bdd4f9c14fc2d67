import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from . import engagement, notifications, relationships
from .exceptions import InvalidOperation

# Logger
logger = logging.getLogger(__name__)


def _json_int(request, key, operation):
    try:
        data = json.loads(request.body or b'{}')
        return int(data[key])
    except (ValueError, TypeError, KeyError):
        raise InvalidOperation(operation, f"'{key}' must be an integer") from None


# ==================== FRIEND REQUESTS ====================

@csrf_exempt
@login_required
@require_POST
def send_friend_request(request):
    receiver_id = _json_int(request, 'receiver_id', 'send_friend_request')
    request_id = relationships.send_friend_request(request.user.id, receiver_id)
    return JsonResponse({"message": "Friend request sent", "request_id": request_id}, status=201)


@csrf_exempt
@login_required
@require_POST
def accept_friend_request(request, request_id):
    relationships.accept_friend_request(request_id, request.user.id)
    return JsonResponse({"message": "Friend request accepted"})


@csrf_exempt
@login_required
@require_POST
def reject_friend_request(request, request_id):
    relationships.reject_friend_request(request_id, request.user.id)
    return JsonResponse({"message": "Friend request rejected"})


@csrf_exempt
@login_required
@require_POST
def cancel_sent_request(request, request_id):
    relationships.cancel_sent_request(request_id, request.user.id)
    return JsonResponse({"message": "Friend request cancelled"})


@login_required
@require_GET
def sent_requests(request):
    return JsonResponse({"requests": relationships.list_sent_requests(request.user.id)})


@login_required
@require_GET
def received_requests(request):
    return JsonResponse({"requests": relationships.list_received_requests(request.user.id)})


# ==================== FRIENDS ====================

@login_required
@require_GET
def friends_list(request, user_id):
    return JsonResponse({"friends": relationships.list_friends(user_id)})


@csrf_exempt
@login_required
@require_POST
def unfriend(request, user_id):
    relationships.unfriend(request.user.id, user_id)
    return JsonResponse({"message": "Friend removed"})


# ==================== FOLLOWS ====================

@csrf_exempt
@login_required
@require_POST
def follow_user(request, user_id):
    relationships.follow_user(request.user.id, user_id)
    return JsonResponse({"message": "User followed"}, status=201)


@csrf_exempt
@login_required
@require_POST
def unfollow_user(request, user_id):
    relationships.unfollow_user(request.user.id, user_id)
    return JsonResponse({"message": "User unfollowed"})


@login_required
@require_GET
def follow_status(request, user_id):
    return JsonResponse(relationships.get_follow_status(request.user.id, user_id))


@login_required
@require_GET
def followers_list(request, user_id):
    return JsonResponse({"users": relationships.list_followers(user_id)})


@login_required
@require_GET
def following_list(request, user_id):
    return JsonResponse({"users": relationships.list_following(user_id)})


# ==================== LIKES & SAVES ====================

@csrf_exempt
@login_required
@require_POST
def toggle_post_like(request, post_id):
    return JsonResponse(engagement.toggle_like(request.user.id, post_id, 'post'))


@csrf_exempt
@login_required
@require_POST
def toggle_comment_like(request, comment_id):
    return JsonResponse(engagement.toggle_like(request.user.id, comment_id, 'comment'))


@login_required
@require_GET
def post_likers(request, post_id):
    return JsonResponse({"users": engagement.list_post_likers(post_id)})


@csrf_exempt
@login_required
@require_POST
def toggle_save(request, post_id):
    return JsonResponse(engagement.toggle_save(request.user.id, post_id))


@login_required
@require_GET
def saved_posts(request):
    return JsonResponse({"saves": engagement.list_saved_posts(request.user.id)})


# ==================== POLLS ====================

@csrf_exempt
@login_required
@require_POST
def vote_poll(request, post_id, option_index):
    return JsonResponse(engagement.vote_poll(request.user.id, post_id, option_index))


@login_required
@require_GET
def poll_results(request, post_id):
    return JsonResponse(engagement.get_poll_results(post_id))


# ==================== NOTIFICATIONS ====================

@login_required
@require_GET
def notifications_list(request):
    return JsonResponse({
        "notifications": notifications.list_for_user(request.user.id),
        "unread": notifications.unread_count(request.user.id),
    })


@csrf_exempt
@login_required
@require_POST
def mark_notification_read(request, notification_id):
    notifications.mark_read(notification_id, request.user.id)
    return JsonResponse({"success": True})


@csrf_exempt
@login_required
@require_POST
def mark_all_notifications_read(request):
    updated = notifications.mark_all_read(request.user.id)
    return JsonResponse({"success": True, "updated": updated})


@csrf_exempt
@login_required
@require_POST
def delete_notification(request, notification_id):
    notifications.delete_notification(notification_id, request.user.id)
    return JsonResponse({"success": True, "message": "Notification deleted."})
