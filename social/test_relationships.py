from unittest.mock import patch

from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase

from . import relationships
from .exceptions import Conflict, InvalidOperation, NotFound, StorageError
from .models import Follow, FriendRequest, Friendship, Notification, User


class RelationshipTestCase(TestCase):

    def setUp(self):
        self.alice = User.objects.create_user(username='alice', password='pw', full_name='Alice Adams')
        self.bob = User.objects.create_user(username='bob', password='pw', full_name='Bob Brown')
        self.carol = User.objects.create_user(username='carol', password='pw')


class FriendRequestTests(RelationshipTestCase):
    """Tests for the friend request lifecycle"""

    def test_send_creates_request_and_notifies_receiver(self):
        with self.captureOnCommitCallbacks(execute=True):
            request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        self.assertTrue(
            FriendRequest.objects.filter(pk=request_id, sender=self.alice, receiver=self.bob).exists()
        )
        notification = Notification.objects.get(recipient=self.bob)
        self.assertEqual(notification.actor, self.alice)
        self.assertEqual(notification.message, "Alice Adams sent you a friend request")
        self.assertEqual(notification.navigate_link, f"/profile/{self.alice.pk}")
        self.assertFalse(notification.is_read)

    def test_send_to_self_is_rejected(self):
        with self.assertRaises(InvalidOperation) as ctx:
            relationships.send_friend_request(self.alice.pk, self.alice.pk)

        self.assertEqual(ctx.exception.operation, 'send_friend_request')
        self.assertEqual(FriendRequest.objects.count(), 0)
        self.assertEqual(Notification.objects.count(), 0)

    def test_duplicate_pending_request_conflicts(self):
        relationships.send_friend_request(self.alice.pk, self.bob.pk)

        with self.assertRaises(Conflict):
            relationships.send_friend_request(self.alice.pk, self.bob.pk)
        self.assertEqual(FriendRequest.objects.count(), 1)

    def test_request_between_friends_conflicts(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)
        relationships.accept_friend_request(request_id, self.bob.pk)

        with self.assertRaises(Conflict):
            relationships.send_friend_request(self.bob.pk, self.alice.pk)

    def test_request_to_unknown_user_not_found(self):
        with self.assertRaises(NotFound) as ctx:
            relationships.send_friend_request(self.alice.pk, 999999)
        self.assertEqual(ctx.exception.entity_id, 999999)

    def test_accept_creates_symmetric_friendship(self):
        with self.captureOnCommitCallbacks(execute=True):
            request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)
            relationships.accept_friend_request(request_id, self.bob.pk)

        self.assertFalse(FriendRequest.objects.filter(pk=request_id).exists())
        self.assertTrue(Friendship.objects.filter(user=self.alice, friend=self.bob).exists())
        self.assertTrue(Friendship.objects.filter(user=self.bob, friend=self.alice).exists())
        self.assertTrue(relationships.is_friend(self.alice.pk, self.bob.pk))
        self.assertTrue(relationships.is_friend(self.bob.pk, self.alice.pk))

        notification = Notification.objects.get(recipient=self.alice)
        self.assertEqual(notification.message, "Bob Brown accepted your friend request")

    def test_accept_requires_receiver(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        with self.assertRaises(NotFound):
            relationships.accept_friend_request(request_id, self.alice.pk)
        self.assertTrue(FriendRequest.objects.filter(pk=request_id).exists())
        self.assertEqual(Friendship.objects.count(), 0)

    def test_accept_clears_reverse_pending_request(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)
        relationships.send_friend_request(self.bob.pk, self.alice.pk)

        relationships.accept_friend_request(request_id, self.bob.pk)

        self.assertEqual(FriendRequest.objects.count(), 0)
        self.assertEqual(Friendship.objects.count(), 2)

    def test_accept_failure_leaves_no_one_sided_friendship(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)
        real_get_or_create = Friendship.objects.get_or_create
        calls = []

        def fail_on_second(**kwargs):
            if calls:
                raise DatabaseError("connection lost")
            calls.append(kwargs)
            return real_get_or_create(**kwargs)

        with patch.object(Friendship.objects, 'get_or_create', side_effect=fail_on_second):
            with self.assertRaises(StorageError):
                relationships.accept_friend_request(request_id, self.bob.pk)

        self.assertEqual(Friendship.objects.count(), 0)
        self.assertTrue(FriendRequest.objects.filter(pk=request_id).exists())

    def test_reject_deletes_request_without_side_effects(self):
        with self.captureOnCommitCallbacks(execute=True):
            request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)
        relationships.reject_friend_request(request_id, self.bob.pk)

        self.assertFalse(FriendRequest.objects.exists())
        self.assertFalse(Friendship.objects.exists())
        # Only the "sent you a friend request" notification
        self.assertEqual(Notification.objects.count(), 1)

    def test_reject_by_sender_not_found(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        with self.assertRaises(NotFound):
            relationships.reject_friend_request(request_id, self.alice.pk)
        self.assertTrue(FriendRequest.objects.filter(pk=request_id).exists())

    def test_cancel_by_sender(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        relationships.cancel_sent_request(request_id, self.alice.pk)

        self.assertFalse(FriendRequest.objects.exists())
        # The pair can start over once the request is gone
        relationships.send_friend_request(self.alice.pk, self.bob.pk)

    def test_cancel_by_receiver_not_found(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        with self.assertRaises(NotFound):
            relationships.cancel_sent_request(request_id, self.bob.pk)

    def test_sent_and_received_lists(self):
        request_id = relationships.send_friend_request(self.alice.pk, self.bob.pk)

        sent = relationships.list_sent_requests(self.alice.pk)
        received = relationships.list_received_requests(self.bob.pk)

        self.assertEqual([r['id'] for r in sent], [request_id])
        self.assertEqual(sent[0]['user']['username'], 'bob')
        self.assertEqual(received[0]['user']['username'], 'alice')
        self.assertEqual(relationships.list_received_requests(self.alice.pk), [])


class FriendshipTests(RelationshipTestCase):
    """Tests for unfriending and friend lists"""

    def befriend(self, a, b):
        request_id = relationships.send_friend_request(a.pk, b.pk)
        relationships.accept_friend_request(request_id, b.pk)

    def test_unfriend_removes_both_directions(self):
        self.befriend(self.alice, self.bob)

        relationships.unfriend(self.bob.pk, self.alice.pk)

        self.assertFalse(relationships.is_friend(self.alice.pk, self.bob.pk))
        self.assertFalse(relationships.is_friend(self.bob.pk, self.alice.pk))
        self.assertEqual(Friendship.objects.count(), 0)

    def test_unfriend_is_idempotent(self):
        relationships.unfriend(self.alice.pk, self.bob.pk)
        relationships.unfriend(self.alice.pk, self.bob.pk)
        self.assertEqual(Friendship.objects.count(), 0)

    def test_list_friends(self):
        self.befriend(self.alice, self.bob)
        self.befriend(self.carol, self.alice)

        friends = relationships.list_friends(self.alice.pk)

        self.assertEqual(sorted(f['username'] for f in friends), ['bob', 'carol'])
        self.assertEqual(set(friends[0]), {'id', 'username', 'full_name', 'bio', 'profile_picture'})
        self.assertEqual([f['username'] for f in relationships.list_friends(self.bob.pk)], ['alice'])

    def test_list_friends_unknown_user(self):
        with self.assertRaises(NotFound):
            relationships.list_friends(999999)


class FollowTests(RelationshipTestCase):
    """Tests for follow edges and their cached mirrors"""

    def test_follow_creates_edge_mirrors_and_notification(self):
        with self.captureOnCommitCallbacks(execute=True):
            relationships.follow_user(self.alice.pk, self.bob.pk)

        self.assertTrue(Follow.objects.filter(follower=self.alice, followed=self.bob).exists())
        self.alice.refresh_from_db()
        self.bob.refresh_from_db()
        self.assertEqual(self.alice.following_ids, [self.bob.pk])
        self.assertEqual(self.bob.follower_ids, [self.alice.pk])

        notification = Notification.objects.get(recipient=self.bob)
        self.assertEqual(notification.message, "Alice Adams started following you")

    def test_follow_self_is_rejected(self):
        with self.assertRaises(InvalidOperation):
            relationships.follow_user(self.alice.pk, self.alice.pk)

        self.assertFalse(Follow.objects.exists())
        self.alice.refresh_from_db()
        self.assertEqual(self.alice.following_ids, [])

    def test_duplicate_follow_conflicts(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)

        with self.assertRaises(Conflict):
            relationships.follow_user(self.alice.pk, self.bob.pk)

        self.bob.refresh_from_db()
        self.assertEqual(self.bob.follower_ids, [self.alice.pk])

    def test_follow_unknown_user_not_found(self):
        with self.assertRaises(NotFound):
            relationships.follow_user(self.alice.pk, 999999)
        self.assertFalse(Follow.objects.exists())

    def test_unfollow_removes_edge_and_mirrors(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)

        relationships.unfollow_user(self.alice.pk, self.bob.pk)

        self.assertFalse(Follow.objects.exists())
        self.alice.refresh_from_db()
        self.bob.refresh_from_db()
        self.assertEqual(self.alice.following_ids, [])
        self.assertEqual(self.bob.follower_ids, [])

    def test_unfollow_without_edge_not_found(self):
        with self.assertRaises(NotFound):
            relationships.unfollow_user(self.alice.pk, self.bob.pk)

    def test_mirrors_track_edges_across_operations(self):
        relationships.follow_user(self.carol.pk, self.bob.pk)
        relationships.follow_user(self.alice.pk, self.bob.pk)
        relationships.follow_user(self.bob.pk, self.alice.pk)
        relationships.unfollow_user(self.alice.pk, self.bob.pk)

        for user in (self.alice, self.bob, self.carol):
            user.refresh_from_db()
            self.assertEqual(
                user.follower_ids,
                list(Follow.objects.filter(followed=user).order_by('pk').values_list('follower_id', flat=True)),
            )
            self.assertEqual(
                user.following_ids,
                list(Follow.objects.filter(follower=user).order_by('pk').values_list('followed_id', flat=True)),
            )
        self.assertEqual(self.bob.follower_ids, [self.carol.pk])

    def test_rebuild_follow_mirrors_repairs_drift(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)
        User.objects.filter(pk=self.bob.pk).update(follower_ids=[12345, self.carol.pk])

        user = relationships.rebuild_follow_mirrors(self.bob.pk)

        self.assertEqual(user.follower_ids, [self.alice.pk])
        self.bob.refresh_from_db()
        self.assertEqual(self.bob.follower_ids, [self.alice.pk])

    def test_follow_failure_rolls_back_edge(self):
        with patch('social.relationships._sync_follow_mirrors', side_effect=DatabaseError("deadlock")):
            with self.assertRaises(StorageError) as ctx:
                relationships.follow_user(self.alice.pk, self.bob.pk)

        self.assertEqual(ctx.exception.operation, 'follow_user')
        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        self.assertFalse(Follow.objects.exists())

    def test_notification_failure_keeps_follow(self):
        with patch('social.receivers.notify', side_effect=DatabaseError("notifications down")):
            with self.assertLogs('social.signals', level='ERROR'):
                with self.captureOnCommitCallbacks(execute=True):
                    relationships.follow_user(self.alice.pk, self.bob.pk)

        self.assertTrue(Follow.objects.filter(follower=self.alice, followed=self.bob).exists())
        self.assertFalse(Notification.objects.exists())

    def test_follow_status(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)

        self.assertEqual(
            relationships.get_follow_status(self.alice.pk, self.bob.pk),
            {'is_following': True, 'is_followed_by': False},
        )
        self.assertEqual(
            relationships.get_follow_status(self.bob.pk, self.alice.pk),
            {'is_following': False, 'is_followed_by': True},
        )

    def test_follower_and_following_lists(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)
        relationships.follow_user(self.carol.pk, self.bob.pk)

        followers = relationships.list_followers(self.bob.pk)
        following = relationships.list_following(self.alice.pk)

        self.assertEqual(sorted(u['username'] for u in followers), ['alice', 'carol'])
        self.assertEqual([u['username'] for u in following], ['bob'])
        self.assertEqual(relationships.list_following(self.bob.pk), [])

    def test_lists_for_unknown_user(self):
        with self.assertRaises(NotFound):
            relationships.list_followers(999999)
        with self.assertRaises(NotFound):
            relationships.list_following(999999)

    def test_follow_is_independent_of_friendship(self):
        relationships.follow_user(self.alice.pk, self.bob.pk)
        self.assertFalse(relationships.is_friend(self.alice.pk, self.bob.pk))


class RelationshipConstraintTests(RelationshipTestCase):
    """The database refuses duplicate and self-referencing edges"""

    def assertRejected(self, model, **fields):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                model.objects.create(**fields)

    def test_friend_request_unique_per_ordered_pair(self):
        FriendRequest.objects.create(sender=self.alice, receiver=self.bob)

        self.assertRejected(FriendRequest, sender=self.alice, receiver=self.bob)
        # The reverse direction is a different pair
        FriendRequest.objects.create(sender=self.bob, receiver=self.alice)
        self.assertEqual(FriendRequest.objects.count(), 2)

    def test_follow_unique_per_ordered_pair(self):
        Follow.objects.create(follower=self.alice, followed=self.bob)

        self.assertRejected(Follow, follower=self.alice, followed=self.bob)
        Follow.objects.create(follower=self.bob, followed=self.alice)
        self.assertEqual(Follow.objects.count(), 2)

    def test_friendship_unique_per_direction(self):
        Friendship.objects.create(user=self.alice, friend=self.bob)
        self.assertRejected(Friendship, user=self.alice, friend=self.bob)

    def test_self_edges_rejected(self):
        self.assertRejected(FriendRequest, sender=self.alice, receiver=self.alice)
        self.assertRejected(Follow, follower=self.alice, followed=self.alice)
        self.assertRejected(Friendship, user=self.alice, friend=self.alice)
