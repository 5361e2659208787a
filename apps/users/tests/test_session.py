from django.contrib.auth import get_user_model
from rest_framework.test import APITestCase, RequestsClient

from apps.users.session import (
    AuthError,
    AuthSession,
    SIGNED_IN,
    SIGNED_OUT,
    TOKEN_REFRESHED,
    refresh_access_token,
    sign_in_with_password,
)

User = get_user_model()

BASE_URL = 'http://testserver'


class AuthSessionTests(APITestCase):

    def setUp(self):
        self.events = []
        self.auth = AuthSession()
        self.unsubscribe = self.auth.on_auth_state_change(lambda event, session: self.events.append(event))

    def test_anonymous_by_default(self):
        self.assertFalse(self.auth.is_authenticated)
        self.assertIsNone(self.auth.current_user_id())
        self.assertEqual(self.auth.auth_headers(), {})

    def test_sign_in_and_out_emit_events(self):
        self.auth.sign_in('42', access='a', refresh='r')
        self.assertTrue(self.auth.is_authenticated)
        self.assertEqual(self.auth.current_user_id(), '42')
        self.assertEqual(self.auth.auth_headers(), {'Authorization': 'Bearer a'})

        self.auth.token_refreshed('b')
        self.assertEqual(self.auth.refresh, 'r')

        self.auth.sign_out()
        self.assertIsNone(self.auth.current_user_id())
        self.assertEqual(self.events, [SIGNED_IN, TOKEN_REFRESHED, SIGNED_OUT])

    def test_unsubscribe_stops_events(self):
        self.unsubscribe()
        self.auth.sign_in('42')
        self.assertEqual(self.events, [])

    def test_for_user_issues_tokens(self):
        user = User.objects.create_user(username='baker', email='baker@example.com', password='secret123')

        session = AuthSession.for_user(user)

        self.assertEqual(session.current_user_id(), str(user.id))
        self.assertTrue(session.access)
        self.assertTrue(session.refresh)


class PasswordSignInTests(APITestCase):

    def setUp(self):
        self.user = User.objects.create_user(username='baker', email='baker@example.com', password='secret123')
        self.http = RequestsClient()
        self.auth = AuthSession()

    def test_sign_in_with_password(self):
        sign_in_with_password(self.auth, self.http, BASE_URL, 'baker@example.com', 'secret123')

        self.assertEqual(self.auth.current_user_id(), str(self.user.id))
        self.assertTrue(self.auth.access)

    def test_rejected_sign_in_raises(self):
        with self.assertRaises(AuthError):
            sign_in_with_password(self.auth, self.http, BASE_URL, 'baker', 'wrong-password1')
        self.assertFalse(self.auth.is_authenticated)

    def test_refresh_access_token(self):
        sign_in_with_password(self.auth, self.http, BASE_URL, 'baker', 'secret123')
        events = []
        self.auth.on_auth_state_change(lambda event, session: events.append(event))

        refresh_access_token(self.auth, self.http, BASE_URL)

        self.assertEqual(events, [TOKEN_REFRESHED])
        self.assertTrue(self.auth.access)

    def test_refresh_without_token_raises(self):
        with self.assertRaises(AuthError):
            refresh_access_token(self.auth, self.http, BASE_URL)
