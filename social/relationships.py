"""
================================================================================
SOCIALHUB - RELATIONSHIP LEDGER
================================================================================

@file        relationships.py
@description Friend requests, friendships and follows

MODULE PURPOSE
================================================================================
All writes to the social graph go through this module:

1. Friend requests
   - send_friend_request()      none -> pending
   - accept_friend_request()    pending -> two Friendship rows, request deleted
   - reject_friend_request()    pending -> deleted (receiver side)
   - cancel_sent_request()      pending -> deleted (sender side)

2. Friendships
   - unfriend()                 removes both directed rows, idempotent

3. Follows
   - follow_user() / unfollow_user()
   - rebuild_follow_mirrors()   resync a user's cached follower/following ids

Reads (follow status, friend/follower/following lists, pending requests)
project users through User.summary() and never touch the cached mirrors.

TRANSACTIONS & LOCKING
================================================================================
Every write runs in one transaction.atomic() block and first locks the User
rows it touches with SELECT ... FOR UPDATE, always in primary key order so
two writers on the same pair cannot deadlock. Under that lock:

- Friendship rows are created or removed as a pair.
- User.follower_ids / User.following_ids are recomputed from the Follow
  table, so the mirror always equals the relational edges at commit time.

Notifications are emitted as signals and only dispatched after commit
(see signals.py).

================================================================================
"""

import logging

from django.db import transaction
from django.db.models import Q

from .exceptions import Conflict, InvalidOperation, NotFound, storage_errors
from .models import Follow, FriendRequest, Friendship, User
from .signals import emit, friend_request_accepted, friend_request_sent, user_followed

logger = logging.getLogger(__name__)


# ============================================================================
# HELPERS
# ============================================================================

def _lock_users(operation, *user_ids):
    """
    Lock and return the given users in argument order.

    Rows are locked in primary key order. Raises NotFound naming the first
    missing id.
    """
    locked = {
        user.pk: user
        for user in User.objects.select_for_update().filter(pk__in=user_ids).order_by('pk')
    }
    for user_id in user_ids:
        if user_id not in locked:
            raise NotFound(operation, 'User not found', user_id)
    return [locked[user_id] for user_id in user_ids]


def _require_user(operation, user_id):
    if not User.objects.filter(pk=user_id).exists():
        raise NotFound(operation, 'User not found', user_id)


def _sync_follow_mirrors(*users):
    for user in users:
        user.follower_ids = list(
            Follow.objects.filter(followed=user).order_by('pk').values_list('follower_id', flat=True)
        )
        user.following_ids = list(
            Follow.objects.filter(follower=user).order_by('pk').values_list('followed_id', flat=True)
        )
        user.save(update_fields=['follower_ids', 'following_ids'])


def is_friend(user_id, other_id):
    return Friendship.objects.filter(user_id=user_id, friend_id=other_id).exists()


# ============================================================================
# FRIEND REQUESTS
# ============================================================================

@storage_errors('send_friend_request')
def send_friend_request(sender_id, receiver_id):
    """
    Create a pending request from ``sender_id`` to ``receiver_id``.

    Returns:
        int: id of the created FriendRequest

    Raises:
        InvalidOperation: sender and receiver are the same user
        NotFound: either user does not exist
        Conflict: a request is already pending for this pair, or the users
            are already friends
    """
    if sender_id == receiver_id:
        raise InvalidOperation('send_friend_request', 'You cannot send a friend request to yourself', receiver_id)

    with transaction.atomic():
        sender, receiver = _lock_users('send_friend_request', sender_id, receiver_id)

        if FriendRequest.objects.filter(sender=sender, receiver=receiver).exists():
            raise Conflict('send_friend_request', 'Friend request already sent', receiver_id)
        if is_friend(sender.pk, receiver.pk):
            raise Conflict('send_friend_request', 'You are already friends', receiver_id)

        friend_request = FriendRequest.objects.create(sender=sender, receiver=receiver)
        emit(friend_request_sent, FriendRequest, actor_id=sender.pk, friend_request=friend_request)

    logger.info("User %s sent friend request %s to %s", sender_id, friend_request.pk, receiver_id)
    return friend_request.pk


@storage_errors('accept_friend_request')
def accept_friend_request(request_id, acceptor_id):
    """
    Turn a pending request addressed to ``acceptor_id`` into a friendship.

    Both Friendship rows, the deletion of the request and the deletion of
    any reverse pending request commit together.
    """
    with transaction.atomic():
        friend_request = (
            FriendRequest.objects
            .select_for_update()
            .filter(pk=request_id, receiver_id=acceptor_id)
            .first()
        )
        if friend_request is None:
            raise NotFound('accept_friend_request', 'Friend request not found', request_id)

        sender, acceptor = _lock_users('accept_friend_request', friend_request.sender_id, acceptor_id)

        Friendship.objects.get_or_create(user=acceptor, friend=sender)
        Friendship.objects.get_or_create(user=sender, friend=acceptor)

        FriendRequest.objects.filter(sender=acceptor, receiver=sender).delete()
        friend_request.delete()

        emit(friend_request_accepted, FriendRequest, actor_id=acceptor.pk, friend_request=friend_request)

    logger.info("User %s accepted friend request %s from %s", acceptor_id, request_id, sender.pk)


@storage_errors('reject_friend_request')
def reject_friend_request(request_id, user_id):
    deleted, _ = FriendRequest.objects.filter(pk=request_id, receiver_id=user_id).delete()
    if not deleted:
        raise NotFound('reject_friend_request', 'Friend request not found', request_id)
    logger.info("User %s rejected friend request %s", user_id, request_id)


@storage_errors('cancel_sent_request')
def cancel_sent_request(request_id, user_id):
    deleted, _ = FriendRequest.objects.filter(pk=request_id, sender_id=user_id).delete()
    if not deleted:
        raise NotFound('cancel_sent_request', 'Friend request not found or already cancelled', request_id)
    logger.info("User %s cancelled friend request %s", user_id, request_id)


def _request_payload(friend_request, other):
    return {
        'id': friend_request.pk,
        'created_at': friend_request.created_at.isoformat(),
        'user': other.summary(),
    }


@storage_errors('list_sent_requests')
def list_sent_requests(user_id):
    requests = FriendRequest.objects.filter(sender_id=user_id).select_related('receiver')
    return [_request_payload(fr, fr.receiver) for fr in requests]


@storage_errors('list_received_requests')
def list_received_requests(user_id):
    requests = FriendRequest.objects.filter(receiver_id=user_id).select_related('sender')
    return [_request_payload(fr, fr.sender) for fr in requests]


# ============================================================================
# FRIENDSHIPS
# ============================================================================

@storage_errors('unfriend')
def unfriend(user_id, other_id):
    """Remove both directions of the friendship. No error if none exists."""
    with transaction.atomic():
        deleted, _ = Friendship.objects.filter(
            Q(user_id=user_id, friend_id=other_id) | Q(user_id=other_id, friend_id=user_id)
        ).delete()
    if deleted:
        logger.info("User %s unfriended %s", user_id, other_id)


@storage_errors('list_friends')
def list_friends(user_id):
    _require_user('list_friends', user_id)
    friends = User.objects.filter(friend_of__user_id=user_id).order_by('friend_of__created_at')
    return [friend.summary() for friend in friends]


# ============================================================================
# FOLLOWS
# ============================================================================

@storage_errors('follow_user')
def follow_user(follower_id, following_id):
    """
    Make ``follower_id`` follow ``following_id``.

    Raises:
        InvalidOperation: self-follow
        NotFound: either user does not exist
        Conflict: already following
    """
    if follower_id == following_id:
        raise InvalidOperation('follow_user', 'You cannot follow yourself', following_id)

    with transaction.atomic():
        follower, followed = _lock_users('follow_user', follower_id, following_id)

        if Follow.objects.filter(follower=follower, followed=followed).exists():
            raise Conflict('follow_user', 'You are already following this user', following_id)

        Follow.objects.create(follower=follower, followed=followed)
        _sync_follow_mirrors(follower, followed)
        emit(user_followed, Follow, actor_id=follower.pk, followed=followed)

    logger.info("User %s followed %s", follower_id, following_id)


@storage_errors('unfollow_user')
def unfollow_user(follower_id, following_id):
    with transaction.atomic():
        follower, followed = _lock_users('unfollow_user', follower_id, following_id)

        deleted, _ = Follow.objects.filter(follower=follower, followed=followed).delete()
        if not deleted:
            raise NotFound('unfollow_user', 'You are not following this user', following_id)

        _sync_follow_mirrors(follower, followed)

    logger.info("User %s unfollowed %s", follower_id, following_id)


@storage_errors('rebuild_follow_mirrors')
def rebuild_follow_mirrors(user_id):
    """Recompute one user's cached follower/following ids from Follow rows."""
    with transaction.atomic():
        user, = _lock_users('rebuild_follow_mirrors', user_id)
        _sync_follow_mirrors(user)
    return user


@storage_errors('get_follow_status')
def get_follow_status(user_id, other_id):
    return {
        'is_following': Follow.objects.filter(follower_id=user_id, followed_id=other_id).exists(),
        'is_followed_by': Follow.objects.filter(follower_id=other_id, followed_id=user_id).exists(),
    }


@storage_errors('list_followers')
def list_followers(user_id):
    _require_user('list_followers', user_id)
    followers = User.objects.filter(following__followed_id=user_id).order_by('following__created_at')
    return [user.summary() for user in followers]


@storage_errors('list_following')
def list_following(user_id):
    _require_user('list_following', user_id)
    following = User.objects.filter(followers__follower_id=user_id).order_by('followers__created_at')
    return [user.summary() for user in following]
