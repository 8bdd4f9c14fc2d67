"""
================================================================================
SOCIALHUB - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models for the social graph and engagement layer

MODULE PURPOSE
================================================================================
This module defines the relational store behind the social graph:
- User model (extended from AbstractUser)
- Posts (with optional single-choice polls), comments and stories
- Social relationships (FriendRequest, Friendship, Follow)
- Engagement edges (PostLike, CommentLike, SavedItem, PollVote)
- Notifications

DATABASE STRUCTURE
================================================================================
1. User
   - User (AbstractUser extension, carries cached follow mirrors)

2. Content Models
   - Post (user-generated content, optional poll)
   - Comment (post comments)
   - Story (24 hour ephemeral content)

3. Social Relationships
   - FriendRequest (pending edge, deleted on accept/reject/cancel)
   - Friendship (symmetric edge stored as two directed rows)
   - Follow (directed follower -> followed edge)

4. Engagement
   - PostLike, CommentLike, SavedItem (toggled join rows)
   - PollVote (one row per voter per poll)

5. Notifications
   - Notification (activity alerts)

MODEL RELATIONSHIPS
================================================================================
User (1) ──────> (N) Post
User (1) ──────> (N) Comment
User (1) ──────> (N) Story
User (1) ──────> (N) Notification

Post (1) ──────> (N) Comment
Post (1) ──────> (N) PollVote

User (N) <─────> (N) User (FriendRequest, Friendship, Follow)
User (N) <─────> (N) Post (PostLike, SavedItem)
User (N) <─────> (N) Comment (CommentLike)

CONSISTENCY RULES
================================================================================
- Follow is the source of truth for the follow graph. User.follower_ids and
  User.following_ids are a projection rebuilt from Follow rows inside the
  same transaction (see relationships.py); nothing writes them directly.
- Friendship rows always exist in pairs (a, b) and (b, a).
- A FriendRequest has no status column: a row exists only while pending.
- Self-referencing requests, follows, friendships and notifications are
  rejected by check constraints.
- PollVote is unique per (post, user), so a voter sits in at most one option.

================================================================================
"""

from datetime import timedelta

import pytz
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import F, Q
from django.utils import timezone as dj_timezone

from .exceptions import InvalidOperation

# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

"""
Timezone choices for user preference selection.
Uses all available timezones from pytz library.
"""
TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.all_timezones]

ROLE_CHOICES = [
    ('user', 'User'),
    ('admin', 'Admin'),
]

DEFAULT_PROFILE_PICTURE = 'https://img.freepik.com/free-psd/3d-illustration-human-avatar-profile_23-2150671142.jpg'
DEFAULT_COVER_IMAGE = 'https://ih1.redbubble.net/cover.4093136.2400x600.jpg'


# ============================================================================
# SECTION 1: USER MODEL
# ============================================================================

class User(AbstractUser):
    """
    Extended User model with social graph features.

    Attributes:
        full_name (CharField): Display name used in notification messages
        bio (CharField): Short profile biography
        profile_picture (URLField): Avatar URL
        cover_image (URLField): Profile banner URL
        location (CharField): Free-form location (optional)
        website (URLField): Personal website (optional)
        role (CharField): 'user' or 'admin'
        timezone (CharField): Preferred timezone for timestamps
        follower_ids (JSONField): Cached ids of users following this user
        following_ids (JSONField): Cached ids of users this user follows

    Related Names:
        posts, comments, stories: authored content
        following: Follow rows where this user is the follower
        followers: Follow rows where this user is followed
        friendships: Friendship rows owned by this user
        sent_friend_requests / received_friend_requests: pending requests
        notifications: Notification rows addressed to this user

    Example:
        user = User.objects.get(username='ada')
        user.summary()
        # {'id': 1, 'username': 'ada', 'full_name': 'Ada L.', ...}
    """

    # --- Profile Information ---
    full_name = models.CharField(
        max_length=100,
        blank=True,
        help_text="Name shown to other users"
    )
    bio = models.CharField(
        max_length=100,
        blank=True,
        help_text="Profile biography or description"
    )
    profile_picture = models.URLField(
        max_length=500,
        default=DEFAULT_PROFILE_PICTURE,
        help_text="User's profile avatar image URL"
    )
    cover_image = models.URLField(
        max_length=500,
        default=DEFAULT_COVER_IMAGE,
        help_text="Profile banner image URL"
    )
    location = models.CharField(
        max_length=100,
        blank=True,
        help_text="Free-form location (optional)"
    )
    website = models.URLField(
        max_length=255,
        blank=True,
        help_text="Personal website (optional)"
    )
    role = models.CharField(
        max_length=10,
        choices=ROLE_CHOICES,
        default='user',
        help_text="Application role"
    )
    timezone = models.CharField(
        max_length=100,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's preferred timezone for display"
    )

    # --- Cached Follow Mirrors (rebuilt from Follow rows) ---
    follower_ids = models.JSONField(
        default=list,
        blank=True,
        help_text="Cached ids of followers, rebuilt from Follow rows"
    )
    following_ids = models.JSONField(
        default=list,
        blank=True,
        help_text="Cached ids of followed users, rebuilt from Follow rows"
    )

    @property
    def display_name(self):
        return self.full_name or self.username

    def summary(self):
        """Public projection used by every list endpoint."""
        return {
            'id': self.pk,
            'username': self.username,
            'full_name': self.full_name,
            'bio': self.bio,
            'profile_picture': self.profile_picture,
        }


# ============================================================================
# SECTION 2: CONTENT MODELS (Posts, Comments, Stories)
# ============================================================================

class PostManager(models.Manager):

    def create_with_poll(self, user, content, options, duration_hours=None):
        """
        Create a post carrying a single-choice poll.

        Args:
            user: Post author
            content: Post text
            options: Sequence of option labels (at least two)
            duration_hours: Hours until the poll closes
                (defaults to settings.POLL_DEFAULT_DURATION_HOURS)

        Raises:
            InvalidOperation: fewer than two options were given
        """
        options = [str(option) for option in options or []]
        if len(options) < 2:
            raise InvalidOperation('create_poll', 'A poll needs at least two options')
        if duration_hours is None:
            duration_hours = settings.POLL_DEFAULT_DURATION_HOURS
        return self.create(
            user=user,
            content=content,
            poll_options=options,
            poll_end_date=dj_timezone.now() + timedelta(hours=duration_hours),
            poll_active=True,
        )


class Post(models.Model):
    """
    User-generated post content with an optional poll.

    The poll is described by three columns: the option labels, an end date
    and an active flag. Votes live in PollVote. Once poll_end_date has
    passed the poll is closed whatever poll_active says; the flag is
    corrected lazily by close_poll_if_expired().

    Related Names:
        comments: Comment objects
        likes: PostLike objects
        saves: SavedItem objects
        poll_votes: PollVote objects

    Example:
        post = Post.objects.create_with_poll(user, "Pets?", ["cats", "dogs"])
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='posts',
        help_text="Author of this post"
    )
    content = models.TextField(
        help_text="Post text content"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Creation timestamp"
    )
    poll_options = models.JSONField(
        null=True,
        blank=True,
        help_text="Poll option labels, null when the post has no poll"
    )
    poll_end_date = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the poll stops accepting votes"
    )
    poll_active = models.BooleanField(
        default=True,
        help_text="Stored poll state, lazily set false after poll_end_date"
    )

    objects = PostManager()

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user} - {self.content[:50]}"

    @property
    def has_poll(self):
        return bool(self.poll_options)

    def poll_expired(self, now=None):
        return bool(self.poll_end_date) and self.poll_end_date < (now or dj_timezone.now())

    def close_poll_if_expired(self, now=None):
        """
        Persist poll_active=False if the poll is still flagged active but
        its end date has passed. Returns True when the flag was flipped.
        """
        if not (self.poll_active and self.poll_expired(now)):
            return False
        Post.objects.filter(pk=self.pk).update(poll_active=False)
        self.poll_active = False
        return True


class Comment(models.Model):
    """
    Comment on a post.

    Related Names:
        likes: CommentLike objects
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Comment author"
    )
    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='comments',
        help_text="Post being commented on"
    )
    content = models.TextField(
        help_text="Comment text content"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Creation timestamp"
    )

    class Meta:
        ordering = ['-created_at']


def default_story_expiry():
    return dj_timezone.now() + timedelta(hours=settings.STORY_LIFETIME_HOURS)


class StoryQuerySet(models.QuerySet):

    def active(self, now=None):
        return self.filter(expires_at__gt=now or dj_timezone.now())

    def expired(self, now=None):
        return self.filter(expires_at__lte=now or dj_timezone.now())

    def purge_expired(self, now=None):
        deleted, _ = self.expired(now).delete()
        return deleted


class Story(models.Model):
    """
    Ephemeral post visible for STORY_LIFETIME_HOURS (24 by default).

    Example:
        Story.objects.active()          # visible stories
        Story.objects.purge_expired()   # number of rows removed
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='stories',
        help_text="Story author"
    )
    content = models.CharField(
        max_length=100,
        blank=True,
        help_text="Story text (max 100 chars)"
    )
    image = models.URLField(
        max_length=500,
        blank=True,
        help_text="Story image URL"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Creation timestamp"
    )
    expires_at = models.DateTimeField(
        default=default_story_expiry,
        help_text="When the story disappears"
    )

    objects = StoryQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name_plural = 'stories'


# ============================================================================
# SECTION 3: SOCIAL RELATIONSHIP MODELS
# ============================================================================

class FriendRequest(models.Model):
    """
    Pending friend request from sender to receiver.

    There is no status field: the row exists while the request is pending
    and is deleted when it is accepted, rejected or cancelled.

    Meta:
        unique_together: one pending request per ordered pair
    """

    sender = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_friend_requests',
        help_text="User who sent the request"
    )
    receiver = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='received_friend_requests',
        help_text="User the request is addressed to"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the request was sent"
    )

    class Meta:
        unique_together = ('sender', 'receiver')
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=~Q(sender=F('receiver')),
                name='friendrequest_not_self',
            ),
        ]


class Friendship(models.Model):
    """
    One direction of a friendship.

    Friendship is symmetric, so accepting a request stores (a, b) and (b, a)
    together and unfriending removes both.
    """

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='friendships',
        help_text="Owner of this friendship row"
    )
    friend = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='friend_of',
        help_text="The friend"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the friendship was established"
    )

    class Meta:
        unique_together = ('user', 'friend')
        constraints = [
            models.CheckConstraint(
                condition=~Q(user=F('friend')),
                name='friendship_not_self',
            ),
        ]


class Follow(models.Model):
    """
    Follower-following relationship between users.

    Represents a one-way follow connection, independent of Friendship.

    Example:
        is_following = Follow.objects.filter(
            follower=request.user,
            followed=profile_user
        ).exists()
    """

    follower = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='following',
        help_text="User who is following"
    )
    followed = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='followers',
        help_text="User being followed"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the follow happened"
    )

    class Meta:
        unique_together = ('follower', 'followed')
        constraints = [
            models.CheckConstraint(
                condition=~Q(follower=F('followed')),
                name='follow_not_self',
            ),
        ]


# ============================================================================
# SECTION 4: ENGAGEMENT MODELS
# ============================================================================

class PostLike(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='post_likes')
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'post')


class CommentLike(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='comment_likes')
    comment = models.ForeignKey(Comment, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'comment')


class SavedItem(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='saved_items')
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='saves')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ('user', 'post')
        ordering = ['-created_at']


class PollVote(models.Model):
    """
    A user's single vote on a post's poll.

    Moving a vote to another option updates option_index in place, so the
    (post, user) uniqueness keeps each voter in exactly one option.
    """

    post = models.ForeignKey(
        Post,
        on_delete=models.CASCADE,
        related_name='poll_votes',
        help_text="Post whose poll was voted on"
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='poll_votes',
        help_text="Voter"
    )
    option_index = models.PositiveSmallIntegerField(
        help_text="Index into Post.poll_options"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ('post', 'user')


# ============================================================================
# SECTION 5: NOTIFICATION MODELS
# ============================================================================

class Notification(models.Model):
    """
    User activity notification.

    Write-once apart from is_read. Never addressed to its own actor.

    Attributes:
        recipient (ForeignKey): User receiving the notification
        actor (ForeignKey): User who performed the action
        message (CharField): Rendered text, e.g. "Ada started following you"
        navigate_link (CharField): Client route to open, e.g. "/posts/12"
        is_read (BooleanField): Read status
        created_at (DateTimeField): Creation timestamp

    Meta:
        ordering: Newest first (descending created_at)
    """

    recipient = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="User receiving this notification"
    )
    actor = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='sent_notifications',
        help_text="User who performed the action"
    )
    message = models.CharField(
        max_length=255,
        help_text="Notification text"
    )
    navigate_link = models.CharField(
        max_length=255,
        default='/',
        help_text="Client route opened when the notification is clicked"
    )
    is_read = models.BooleanField(
        default=False,
        help_text="Whether notification has been read"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Notification creation timestamp"
    )

    class Meta:
        ordering = ['-created_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=~Q(actor=F('recipient')),
                name='notification_not_self',
            ),
        ]
