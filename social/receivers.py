"""
Signal receivers turning relationship and engagement events into notifications.

Connected when the app registry is ready (SocialConfig.ready).
"""

from django.dispatch import receiver

from .models import User
from .notifications import notify
from .signals import (
    comment_liked,
    friend_request_accepted,
    friend_request_sent,
    poll_voted,
    post_liked,
    user_followed,
)


def _actor_name(actor_id):
    actor = User.objects.only('username', 'full_name').get(pk=actor_id)
    return actor.display_name


def profile_link(user_id):
    return f"/profile/{user_id}"


def post_link(post_id):
    return f"/posts/{post_id}"


@receiver(friend_request_sent)
def notify_friend_request_sent(sender, actor_id, friend_request, **kwargs):
    notify(
        actor_id,
        friend_request.receiver_id,
        f"{_actor_name(actor_id)} sent you a friend request",
        profile_link(actor_id),
    )


@receiver(friend_request_accepted)
def notify_friend_request_accepted(sender, actor_id, friend_request, **kwargs):
    notify(
        actor_id,
        friend_request.sender_id,
        f"{_actor_name(actor_id)} accepted your friend request",
        profile_link(actor_id),
    )


@receiver(user_followed)
def notify_user_followed(sender, actor_id, followed, **kwargs):
    notify(
        actor_id,
        followed.pk,
        f"{_actor_name(actor_id)} started following you",
        profile_link(actor_id),
    )


@receiver(post_liked)
def notify_post_liked(sender, actor_id, post, **kwargs):
    if post.user_id == actor_id:
        return
    notify(actor_id, post.user_id, f"{_actor_name(actor_id)} liked your post", post_link(post.pk))


@receiver(comment_liked)
def notify_comment_liked(sender, actor_id, comment, **kwargs):
    if comment.user_id == actor_id:
        return
    notify(
        actor_id,
        comment.user_id,
        f"{_actor_name(actor_id)} liked your comment",
        post_link(comment.post_id),
    )


@receiver(poll_voted)
def notify_poll_voted(sender, actor_id, post, **kwargs):
    if post.user_id == actor_id:
        return
    notify(actor_id, post.user_id, f"{_actor_name(actor_id)} voted on your poll", post_link(post.pk))
