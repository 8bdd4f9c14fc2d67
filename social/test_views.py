import json
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse

from .models import Follow, FriendRequest, Friendship, Notification, Post, User


@override_settings(SECURE_SSL_REDIRECT=False)
class ApiTestCase(TestCase):

    def setUp(self):
        self.alice = User.objects.create_user(username='alice', password='pw', full_name='Alice Adams')
        self.bob = User.objects.create_user(username='bob', password='pw', full_name='Bob Brown')
        self.client.force_login(self.alice)

    def post_json(self, url, data=None):
        return self.client.post(url, json.dumps(data or {}), content_type='application/json')


class FriendRequestViewTests(ApiTestCase):

    def test_send_and_accept(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.post_json(reverse('send_friend_request'), {'receiver_id': self.bob.pk})
        self.assertEqual(response.status_code, 201)
        request_id = response.json()['request_id']
        self.assertTrue(FriendRequest.objects.filter(pk=request_id).exists())

        self.client.force_login(self.bob)
        received = self.client.get(reverse('received_requests')).json()['requests']
        self.assertEqual([r['id'] for r in received], [request_id])

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(reverse('accept_friend_request', args=[request_id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Friendship.objects.count(), 2)
        self.assertEqual(Notification.objects.filter(recipient=self.alice).count(), 1)

    def test_self_request_is_bad_request(self):
        response = self.post_json(reverse('send_friend_request'), {'receiver_id': self.alice.pk})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {
            'error': 'You cannot send a friend request to yourself',
            'operation': 'send_friend_request',
            'id': self.alice.pk,
        })

    def test_malformed_body_is_bad_request(self):
        response = self.client.post(reverse('send_friend_request'), 'not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)

        response = self.post_json(reverse('send_friend_request'), {'receiver_id': 'bob'})
        self.assertEqual(response.status_code, 400)

    def test_duplicate_request_conflicts(self):
        self.post_json(reverse('send_friend_request'), {'receiver_id': self.bob.pk})
        response = self.post_json(reverse('send_friend_request'), {'receiver_id': self.bob.pk})

        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['operation'], 'send_friend_request')

    def test_accept_someone_elses_request_not_found(self):
        response = self.post_json(reverse('send_friend_request'), {'receiver_id': self.bob.pk})
        request_id = response.json()['request_id']

        response = self.client.post(reverse('accept_friend_request', args=[request_id]))

        self.assertEqual(response.status_code, 404)

    def test_get_not_allowed_on_writes(self):
        response = self.client.get(reverse('send_friend_request'))
        self.assertEqual(response.status_code, 405)

    def test_login_required(self):
        self.client.logout()
        response = self.post_json(reverse('send_friend_request'), {'receiver_id': self.bob.pk})
        self.assertEqual(response.status_code, 302)
        self.assertFalse(FriendRequest.objects.exists())


class FollowViewTests(ApiTestCase):

    def test_follow_unfollow_cycle(self):
        response = self.client.post(reverse('follow_user', args=[self.bob.pk]))
        self.assertEqual(response.status_code, 201)

        status = self.client.get(reverse('follow_status', args=[self.bob.pk])).json()
        self.assertEqual(status, {'is_following': True, 'is_followed_by': False})

        followers = self.client.get(reverse('followers_list', args=[self.bob.pk])).json()['users']
        self.assertEqual([u['username'] for u in followers], ['alice'])

        response = self.client.post(reverse('unfollow_user', args=[self.bob.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Follow.objects.exists())

    def test_duplicate_follow_conflicts(self):
        self.client.post(reverse('follow_user', args=[self.bob.pk]))
        response = self.client.post(reverse('follow_user', args=[self.bob.pk]))
        self.assertEqual(response.status_code, 409)

    def test_follow_self_is_bad_request(self):
        response = self.client.post(reverse('follow_user', args=[self.alice.pk]))
        self.assertEqual(response.status_code, 400)

    def test_unfollow_without_edge_not_found(self):
        response = self.client.post(reverse('unfollow_user', args=[self.bob.pk]))
        self.assertEqual(response.status_code, 404)


class EngagementViewTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.post = Post.objects.create_with_poll(self.bob, "Pets?", ["cats", "dogs"])

    def test_toggle_post_like(self):
        response = self.client.post(reverse('toggle_post_like', args=[self.post.pk]))
        self.assertEqual(response.json(), {'liked': True, 'count': 1})

        response = self.client.post(reverse('toggle_post_like', args=[self.post.pk]))
        self.assertEqual(response.json(), {'liked': False, 'count': 0})

    def test_toggle_save(self):
        response = self.client.post(reverse('toggle_save', args=[self.post.pk]))
        self.assertEqual(response.json(), {'saved': True, 'count': 1})

        saves = self.client.get(reverse('saved_posts')).json()['saves']
        self.assertEqual([s['post']['id'] for s in saves], [self.post.pk])

    def test_vote_and_results(self):
        response = self.client.post(reverse('vote_poll', args=[self.post.pk, 1]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['results'][1]['votes'], [self.alice.pk])

        results = self.client.get(reverse('poll_results', args=[self.post.pk])).json()
        self.assertEqual(results['total_votes'], 1)
        self.assertEqual(results['results'][1]['percentage'], 100)

    def test_vote_out_of_range(self):
        response = self.client.post(reverse('vote_poll', args=[self.post.pk, 7]))

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {
            'error': 'Poll option 7 not found',
            'operation': 'vote_poll',
            'id': self.post.pk,
        })

    def test_like_missing_post(self):
        response = self.client.post(reverse('toggle_post_like', args=[999999]))
        self.assertEqual(response.status_code, 404)


class NotificationViewTests(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.first = Notification.objects.create(recipient=self.alice, actor=self.bob, message="one")
        self.second = Notification.objects.create(recipient=self.alice, actor=self.bob, message="two")

    def test_list(self):
        body = self.client.get(reverse('notifications')).json()

        self.assertEqual([n['id'] for n in body['notifications']], [self.second.pk, self.first.pk])
        self.assertEqual(body['unread'], 2)

    def test_mark_read_and_read_all(self):
        response = self.client.post(reverse('mark_notification_read', args=[self.first.pk]))
        self.assertEqual(response.json(), {'success': True})

        response = self.client.post(reverse('mark_all_notifications_read'))
        self.assertEqual(response.json(), {'success': True, 'updated': 1})

    def test_delete_other_users_notification(self):
        theirs = Notification.objects.create(recipient=self.bob, actor=self.alice, message="x")

        response = self.client.post(reverse('delete_notification', args=[theirs.pk]))

        self.assertEqual(response.status_code, 404)
        self.assertTrue(Notification.objects.filter(pk=theirs.pk).exists())

    def test_storage_failure_renders_json(self):
        with patch.object(Notification.objects, 'filter', side_effect=DatabaseError("connection lost")):
            response = self.client.get(reverse('notifications'))

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['error'], 'Storage failure')
