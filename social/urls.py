"""
================================================================================
SOCIALHUB - API URL CONFIGURATION
================================================================================

@file        urls.py
@description JSON endpoints for the social graph, engagement and notifications

URL STRUCTURE OVERVIEW
================================================================================
1. Friend Requests (send, accept, reject, cancel, sent/received lists)
2. Friends (list, unfriend)
3. Follows (follow, unfollow, status, followers, following)
4. Likes & Saves (post/comment like toggles, likers, saves)
5. Polls (vote, results)
6. Notifications (list, mark read, mark all read, delete)

NAMING CONVENTIONS
================================================================================
- Resource actions: <resource>_<action> (e.g., 'accept_friend_request')
- Toggles: Prefixed with 'toggle_' (e.g., 'toggle_post_like')

URL PARAMETER TYPES
================================================================================
- <int:user_id>, <int:post_id>, <int:comment_id>: primary keys
- <int:request_id>: FriendRequest primary key
- <int:notification_id>: Notification primary key
- <int:option_index>: zero-based poll option

All endpoints require an authenticated session and answer with JSON.
Service errors are rendered by social.middleware.SocialErrorMiddleware.

================================================================================
"""

from django.urls import path

from . import views

urlpatterns = [
    # ==================== FRIEND REQUESTS ====================
    path("friend-requests/", views.send_friend_request, name="send_friend_request"),
    path("friend-requests/sent/", views.sent_requests, name="sent_requests"),
    path("friend-requests/received/", views.received_requests, name="received_requests"),
    path("friend-requests/<int:request_id>/accept/", views.accept_friend_request, name="accept_friend_request"),
    path("friend-requests/<int:request_id>/reject/", views.reject_friend_request, name="reject_friend_request"),
    path("friend-requests/<int:request_id>/cancel/", views.cancel_sent_request, name="cancel_sent_request"),

    # ==================== FRIENDS ====================
    path("users/<int:user_id>/friends/", views.friends_list, name="friends_list"),
    path("users/<int:user_id>/unfriend/", views.unfriend, name="unfriend"),

    # ==================== FOLLOWS ====================
    path("users/<int:user_id>/follow/", views.follow_user, name="follow_user"),
    path("users/<int:user_id>/unfollow/", views.unfollow_user, name="unfollow_user"),
    path("users/<int:user_id>/follow-status/", views.follow_status, name="follow_status"),
    path("users/<int:user_id>/followers/", views.followers_list, name="followers_list"),
    path("users/<int:user_id>/following/", views.following_list, name="following_list"),

    # ==================== LIKES & SAVES ====================
    path("posts/<int:post_id>/like/", views.toggle_post_like, name="toggle_post_like"),
    path("posts/<int:post_id>/likers/", views.post_likers, name="post_likers"),
    path("comments/<int:comment_id>/like/", views.toggle_comment_like, name="toggle_comment_like"),
    path("posts/<int:post_id>/save/", views.toggle_save, name="toggle_save"),
    path("saves/", views.saved_posts, name="saved_posts"),

    # ==================== POLLS ====================
    path("posts/<int:post_id>/poll/", views.poll_results, name="poll_results"),
    path("posts/<int:post_id>/poll/<int:option_index>/vote/", views.vote_poll, name="vote_poll"),

    # ==================== NOTIFICATIONS ====================
    path("notifications/", views.notifications_list, name="notifications"),
    path("notifications/read-all/", views.mark_all_notifications_read, name="mark_all_notifications_read"),
    path("notifications/<int:notification_id>/read/", views.mark_notification_read, name="mark_notification_read"),
    path("notifications/<int:notification_id>/delete/", views.delete_notification, name="delete_notification"),
]
