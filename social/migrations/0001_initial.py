import django.contrib.auth.models
import django.contrib.auth.validators
import django.db.models.deletion
import django.utils.timezone
import pytz
from django.conf import settings
from django.db import migrations, models

import social.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("auth", "0012_alter_user_first_name_max_length"),
    ]

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("password", models.CharField(max_length=128, verbose_name="password")),
                ("last_login", models.DateTimeField(blank=True, null=True, verbose_name="last login")),
                ("is_superuser", models.BooleanField(default=False, help_text="Designates that this user has all permissions without explicitly assigning them.", verbose_name="superuser status")),
                ("username", models.CharField(error_messages={"unique": "A user with that username already exists."}, help_text="Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.", max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name="username")),
                ("first_name", models.CharField(blank=True, max_length=150, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=150, verbose_name="last name")),
                ("email", models.EmailField(blank=True, max_length=254, verbose_name="email address")),
                ("is_staff", models.BooleanField(default=False, help_text="Designates whether the user can log into this admin site.", verbose_name="staff status")),
                ("is_active", models.BooleanField(default=True, help_text="Designates whether this user should be treated as active. Unselect this instead of deleting accounts.", verbose_name="active")),
                ("date_joined", models.DateTimeField(default=django.utils.timezone.now, verbose_name="date joined")),
                ("full_name", models.CharField(blank=True, help_text="Name shown to other users", max_length=100)),
                ("bio", models.CharField(blank=True, help_text="Profile biography or description", max_length=100)),
                ("profile_picture", models.URLField(default=social.models.DEFAULT_PROFILE_PICTURE, help_text="User's profile avatar image URL", max_length=500)),
                ("cover_image", models.URLField(default=social.models.DEFAULT_COVER_IMAGE, help_text="Profile banner image URL", max_length=500)),
                ("location", models.CharField(blank=True, help_text="Free-form location (optional)", max_length=100)),
                ("website", models.URLField(blank=True, help_text="Personal website (optional)", max_length=255)),
                ("role", models.CharField(choices=[("user", "User"), ("admin", "Admin")], default="user", help_text="Application role", max_length=10)),
                ("timezone", models.CharField(choices=[(tz, tz) for tz in pytz.all_timezones], default="UTC", help_text="User's preferred timezone for display", max_length=100)),
                ("follower_ids", models.JSONField(blank=True, default=list, help_text="Cached ids of followers, rebuilt from Follow rows")),
                ("following_ids", models.JSONField(blank=True, default=list, help_text="Cached ids of followed users, rebuilt from Follow rows")),
                ("groups", models.ManyToManyField(blank=True, help_text="The groups this user belongs to. A user will get all permissions granted to each of their groups.", related_name="user_set", related_query_name="user", to="auth.group", verbose_name="groups")),
                ("user_permissions", models.ManyToManyField(blank=True, help_text="Specific permissions for this user.", related_name="user_set", related_query_name="user", to="auth.permission", verbose_name="user permissions")),
            ],
            options={
                "verbose_name": "user",
                "verbose_name_plural": "users",
                "abstract": False,
            },
            managers=[
                ("objects", django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name="Post",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField(help_text="Post text content")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")),
                ("poll_options", models.JSONField(blank=True, help_text="Poll option labels, null when the post has no poll", null=True)),
                ("poll_end_date", models.DateTimeField(blank=True, help_text="When the poll stops accepting votes", null=True)),
                ("poll_active", models.BooleanField(default=True, help_text="Stored poll state, lazily set false after poll_end_date")),
                ("user", models.ForeignKey(help_text="Author of this post", on_delete=django.db.models.deletion.CASCADE, related_name="posts", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Comment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.TextField(help_text="Comment text content")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")),
                ("post", models.ForeignKey(help_text="Post being commented on", on_delete=django.db.models.deletion.CASCADE, related_name="comments", to="social.post")),
                ("user", models.ForeignKey(help_text="Comment author", on_delete=django.db.models.deletion.CASCADE, related_name="comments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Story",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("content", models.CharField(blank=True, help_text="Story text (max 100 chars)", max_length=100)),
                ("image", models.URLField(blank=True, help_text="Story image URL", max_length=500)),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Creation timestamp")),
                ("expires_at", models.DateTimeField(default=social.models.default_story_expiry, help_text="When the story disappears")),
                ("user", models.ForeignKey(help_text="Story author", on_delete=django.db.models.deletion.CASCADE, related_name="stories", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "verbose_name_plural": "stories",
            },
        ),
        migrations.CreateModel(
            name="FriendRequest",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="When the request was sent")),
                ("receiver", models.ForeignKey(help_text="User the request is addressed to", on_delete=django.db.models.deletion.CASCADE, related_name="received_friend_requests", to=settings.AUTH_USER_MODEL)),
                ("sender", models.ForeignKey(help_text="User who sent the request", on_delete=django.db.models.deletion.CASCADE, related_name="sent_friend_requests", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "unique_together": {("sender", "receiver")},
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("sender", models.F("receiver")), _negated=True), name="friendrequest_not_self"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Friendship",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="When the friendship was established")),
                ("friend", models.ForeignKey(help_text="The friend", on_delete=django.db.models.deletion.CASCADE, related_name="friend_of", to=settings.AUTH_USER_MODEL)),
                ("user", models.ForeignKey(help_text="Owner of this friendship row", on_delete=django.db.models.deletion.CASCADE, related_name="friendships", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("user", "friend")},
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("user", models.F("friend")), _negated=True), name="friendship_not_self"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Follow",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="When the follow happened")),
                ("followed", models.ForeignKey(help_text="User being followed", on_delete=django.db.models.deletion.CASCADE, related_name="followers", to=settings.AUTH_USER_MODEL)),
                ("follower", models.ForeignKey(help_text="User who is following", on_delete=django.db.models.deletion.CASCADE, related_name="following", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("follower", "followed")},
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("follower", models.F("followed")), _negated=True), name="follow_not_self"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PostLike",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("post", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="likes", to="social.post")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="post_likes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("user", "post")},
            },
        ),
        migrations.CreateModel(
            name="CommentLike",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("comment", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="likes", to="social.comment")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="comment_likes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("user", "comment")},
            },
        ),
        migrations.CreateModel(
            name="SavedItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("post", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saves", to="social.post")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saved_items", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "unique_together": {("user", "post")},
            },
        ),
        migrations.CreateModel(
            name="PollVote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("option_index", models.PositiveSmallIntegerField(help_text="Index into Post.poll_options")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("post", models.ForeignKey(help_text="Post whose poll was voted on", on_delete=django.db.models.deletion.CASCADE, related_name="poll_votes", to="social.post")),
                ("user", models.ForeignKey(help_text="Voter", on_delete=django.db.models.deletion.CASCADE, related_name="poll_votes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "unique_together": {("post", "user")},
            },
        ),
        migrations.CreateModel(
            name="Notification",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("message", models.CharField(help_text="Notification text", max_length=255)),
                ("navigate_link", models.CharField(default="/", help_text="Client route opened when the notification is clicked", max_length=255)),
                ("is_read", models.BooleanField(default=False, help_text="Whether notification has been read")),
                ("created_at", models.DateTimeField(auto_now_add=True, help_text="Notification creation timestamp")),
                ("actor", models.ForeignKey(help_text="User who performed the action", on_delete=django.db.models.deletion.CASCADE, related_name="sent_notifications", to=settings.AUTH_USER_MODEL)),
                ("recipient", models.ForeignKey(help_text="User receiving this notification", on_delete=django.db.models.deletion.CASCADE, related_name="notifications", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("actor", models.F("recipient")), _negated=True), name="notification_not_self"),
                ],
            },
        ),
    ]
