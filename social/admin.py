from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from django.urls import reverse
from django.utils.html import format_html

from .models import (
    User, Post, Comment, Story, FriendRequest, Friendship, Follow,
    PostLike, CommentLike, SavedItem, PollVote, Notification
)
from .relationships import rebuild_follow_mirrors

# ==================== ADMIN CLASSES ====================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ('username', 'full_name', 'email', 'role', 'is_staff', 'date_joined')
    search_fields = ('username', 'full_name', 'email')
    list_filter = BaseUserAdmin.list_filter + ('role',)
    readonly_fields = ('follower_ids', 'following_ids')
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {'fields': ('full_name', 'bio', 'profile_picture', 'cover_image',
                                'location', 'website', 'role', 'timezone')}),
        ('Follow mirrors', {'fields': ('follower_ids', 'following_ids')}),
    )
    actions = ['rebuild_mirrors']

    @admin.action(description="Rebuild follow mirrors")
    def rebuild_mirrors(self, request, queryset):
        user_ids = list(queryset.values_list('pk', flat=True))
        for user_id in user_ids:
            rebuild_follow_mirrors(user_id)
        self.message_user(request, f"{len(user_ids)} users resynced")


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ('id', 'user_link', 'created_at', 'content_short', 'poll_active')
    list_filter = ('poll_active',)
    search_fields = ('content', 'user__username')

    @admin.display(description='User', ordering='user__username')
    def user_link(self, obj):
        url = reverse("admin:social_user_change", args=[obj.user.id])
        return format_html('<a href="{}">{}</a>', url, obj.user.username)

    @admin.display(description='Content')
    def content_short(self, obj):
        if obj.content:
            return obj.content[:80] + '...' if len(obj.content) > 80 else obj.content
        return "(no content)"


@admin.register(Comment)
class CommentAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'post', 'created_at')
    search_fields = ('content', 'user__username', 'post__id')


@admin.register(Story)
class StoryAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'created_at', 'expires_at')
    actions = ['purge_expired']

    @admin.action(description="Delete expired stories")
    def purge_expired(self, request, queryset):
        deleted = Story.objects.purge_expired()
        self.message_user(request, f"{deleted} expired stories deleted")


@admin.register(FriendRequest)
class FriendRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'sender', 'receiver', 'created_at')
    search_fields = ('sender__username', 'receiver__username')


@admin.register(Friendship)
class FriendshipAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'friend', 'created_at')
    search_fields = ('user__username', 'friend__username')


@admin.register(Follow)
class FollowAdmin(admin.ModelAdmin):
    list_display = ('id', 'follower', 'followed', 'created_at')
    search_fields = ('follower__username', 'followed__username')


@admin.register(PostLike, CommentLike, SavedItem)
class EngagementAdmin(admin.ModelAdmin):
    list_display = ('id', 'user', 'created_at')
    search_fields = ('user__username',)


@admin.register(PollVote)
class PollVoteAdmin(admin.ModelAdmin):
    list_display = ('id', 'post', 'user', 'option_index', 'updated_at')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('id', 'recipient', 'actor', 'message', 'created_at', 'is_read')
    list_filter = ('is_read', 'created_at')
    search_fields = ('recipient__username', 'actor__username', 'message')


# Unregister Django's default Group
admin.site.unregister(Group)

admin.site.site_header = "SocialHub Admin"
admin.site.site_title = "SocialHub Admin Portal"
admin.site.index_title = "Welcome"
