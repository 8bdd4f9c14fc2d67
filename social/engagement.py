"""
================================================================================
SOCIALHUB - ENGAGEMENT TOGGLER
================================================================================

@file        engagement.py
@description Likes, saves and single-choice poll voting

MODULE PURPOSE
================================================================================
1. Toggles
   - toggle_like(user_id, target_id, 'post' | 'comment')
   - toggle_save(user_id, post_id)
   A toggle deletes the (user, target) row when it exists and inserts it
   otherwise. Each call locks the target row first, so toggles on the same
   target are applied one after the other; the unique constraint on
   (user, target) is the backstop against duplicate rows.

2. Polls
   - vote_poll(user_id, post_id, option_index)
   - get_poll_results(post_id)
   A voter holds at most one PollVote per post. Voting for another option
   moves the vote; voting for the same option again changes nothing.
   Only a voter's first vote on a poll notifies the post owner.

POLL EXPIRY
================================================================================
A poll whose end date has passed is closed even if poll_active is still
stored as True. Both vote_poll and get_poll_results persist the corrected
flag when they notice it.

================================================================================
"""

import logging
import math
from collections import defaultdict

from django.db import transaction

from .exceptions import InvalidOperation, InvalidState, NotFound, OutOfRange, storage_errors
from .models import Comment, CommentLike, PollVote, Post, PostLike, SavedItem, User
from .signals import comment_liked, emit, poll_voted, post_liked

logger = logging.getLogger(__name__)

# target kind -> (target model, like model, like field name, signal)
LIKE_TARGETS = {
    'post': (Post, PostLike, 'post', post_liked),
    'comment': (Comment, CommentLike, 'comment', comment_liked),
}


# ============================================================================
# TOGGLE PRIMITIVE
# ============================================================================

def _lock_target(operation, model, target_id):
    target = model.objects.select_for_update().filter(pk=target_id).first()
    if target is None:
        raise NotFound(operation, f'{model.__name__} not found', target_id)
    return target


def toggle_edge(model, **lookup):
    """
    Delete the row matching ``lookup`` if present, else create it.

    Must run inside a transaction that already serialises callers on the
    target. Returns True when the row now exists.
    """
    deleted, _ = model.objects.filter(**lookup).delete()
    if deleted:
        return False
    model.objects.create(**lookup)
    return True


@storage_errors('toggle_like')
def toggle_like(user_id, target_id, target_kind):
    """
    Like or unlike a post or comment.

    Returns:
        dict: {'liked': bool, 'count': int}
    """
    try:
        target_model, like_model, field, signal = LIKE_TARGETS[target_kind]
    except KeyError:
        raise InvalidOperation('toggle_like', f'Unsupported like target {target_kind!r}', target_id) from None

    with transaction.atomic():
        target = _lock_target('toggle_like', target_model, target_id)
        liked = toggle_edge(like_model, user_id=user_id, **{field: target})
        count = like_model.objects.filter(**{field: target}).count()
        if liked:
            emit(signal, target_model, actor_id=user_id, **{field: target})

    logger.info("User %s %s %s %s", user_id, 'liked' if liked else 'unliked', target_kind, target_id)
    return {'liked': liked, 'count': count}


@storage_errors('toggle_save')
def toggle_save(user_id, post_id):
    with transaction.atomic():
        post = _lock_target('toggle_save', Post, post_id)
        saved = toggle_edge(SavedItem, user_id=user_id, post=post)
        count = SavedItem.objects.filter(post=post).count()
    return {'saved': saved, 'count': count}


@storage_errors('list_post_likers')
def list_post_likers(post_id):
    if not Post.objects.filter(pk=post_id).exists():
        raise NotFound('list_post_likers', 'Post not found', post_id)
    likers = User.objects.filter(post_likes__post_id=post_id).order_by('post_likes__created_at')
    return [user.summary() for user in likers]


@storage_errors('list_saved_posts')
def list_saved_posts(user_id):
    saves = SavedItem.objects.filter(user_id=user_id).select_related('post__user')
    return [
        {
            'id': save.pk,
            'saved_at': save.created_at.isoformat(),
            'post': {
                'id': save.post.pk,
                'content': save.post.content,
                'user': save.post.user.summary(),
            },
        }
        for save in saves
    ]


# ============================================================================
# POLLS
# ============================================================================

def _percentage(votes, total):
    if not total:
        return 0
    # Round half up
    return math.floor(votes * 100 / total + 0.5)


def poll_snapshot(post):
    voters = defaultdict(list)
    for option_index, user_id in (
        PollVote.objects.filter(post=post).order_by('pk').values_list('option_index', 'user_id')
    ):
        voters[option_index].append(user_id)

    total_votes = sum(len(ids) for ids in voters.values())
    results = [
        {
            'id': index,
            'text': text,
            'votes': voters[index],
            'vote_count': len(voters[index]),
            'percentage': _percentage(len(voters[index]), total_votes),
        }
        for index, text in enumerate(post.poll_options)
    ]
    return {
        'results': results,
        'total_votes': total_votes,
        'active': post.poll_active,
        'end_date': post.poll_end_date.isoformat() if post.poll_end_date else None,
    }


@storage_errors('vote_poll')
def vote_poll(user_id, post_id, option_index):
    """
    Cast or move ``user_id``'s vote on the poll of ``post_id``.

    Returns:
        dict: the updated poll snapshot (see get_poll_results)

    Raises:
        NotFound: post absent or carries no poll
        InvalidState: poll inactive or past its end date; in the latter
            case poll_active=False is persisted first
        OutOfRange: option_index is not a valid option
    """
    with transaction.atomic():
        post = _lock_target('vote_poll', Post, post_id)
        if not post.has_poll:
            raise NotFound('vote_poll', 'Poll not found', post_id)
        if not post.poll_active:
            raise InvalidState('vote_poll', 'Poll is not active', post_id)

        expired = post.close_poll_if_expired()
        if not expired:
            if not 0 <= option_index < len(post.poll_options):
                raise OutOfRange('vote_poll', f'Poll option {option_index} not found', post_id)

            vote = PollVote.objects.select_for_update().filter(post=post, user_id=user_id).first()
            if vote is None:
                PollVote.objects.create(post=post, user_id=user_id, option_index=option_index)
                emit(poll_voted, Post, actor_id=user_id, post=post, option_index=option_index)
            elif vote.option_index != option_index:
                vote.option_index = option_index
                vote.save(update_fields=['option_index', 'updated_at'])

            snapshot = poll_snapshot(post)

    # Raised after commit so the corrected flag is kept
    if expired:
        logger.info("Poll on post %s expired, marked inactive", post_id)
        raise InvalidState('vote_poll', 'Poll has expired', post_id)

    logger.info("User %s voted option %s on post %s", user_id, option_index, post_id)
    return snapshot


@storage_errors('get_poll_results')
def get_poll_results(post_id):
    post = Post.objects.filter(pk=post_id).first()
    if post is None or not post.has_poll:
        raise NotFound('get_poll_results', 'Post or poll not found', post_id)
    post.close_poll_if_expired()
    return poll_snapshot(post)
