"""
Client-side authentication session.

Holds "who is signed in" for a storefront client and broadcasts auth state
changes to subscribers (the cart store listens to resync or clear itself).
"""
import logging
from typing import Callable, List, Optional

import requests
from rest_framework_simplejwt.tokens import RefreshToken

logger = logging.getLogger(__name__)

SIGNED_IN = 'SIGNED_IN'
SIGNED_OUT = 'SIGNED_OUT'
TOKEN_REFRESHED = 'TOKEN_REFRESHED'

AuthListener = Callable[[str, "AuthSession"], None]


class AuthError(Exception):
    """Raised when a sign-in or token refresh is rejected."""


class AuthSession:
    """Current user id and JWT pair, plus an auth state event feed."""

    def __init__(self):
        self._user_id: Optional[str] = None
        self.access: Optional[str] = None
        self.refresh: Optional[str] = None
        self._listeners: List[AuthListener] = []

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def current_user_id(self) -> Optional[str]:
        return self._user_id

    def on_auth_state_change(self, listener: AuthListener) -> Callable[[], None]:
        """Registers ``listener(event, session)``; returns the unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def sign_in(self, user_id, access: Optional[str] = None, refresh: Optional[str] = None):
        self._user_id = str(user_id)
        self.access = access
        self.refresh = refresh
        logger.info("Session signed in as %s", self._user_id)
        self._emit(SIGNED_IN)

    def token_refreshed(self, access: str, refresh: Optional[str] = None):
        self.access = access
        if refresh:
            self.refresh = refresh
        self._emit(TOKEN_REFRESHED)

    def sign_out(self):
        self._user_id = None
        self.access = None
        self.refresh = None
        logger.info("Session signed out")
        self._emit(SIGNED_OUT)

    def auth_headers(self) -> dict:
        if not self.access:
            return {}
        return {'Authorization': f'Bearer {self.access}'}

    def _emit(self, event: str):
        for listener in list(self._listeners):
            listener(event, self)

    @classmethod
    def for_user(cls, user) -> "AuthSession":
        """Server-side session for ``user`` with freshly issued tokens."""
        session = cls()
        refresh = RefreshToken.for_user(user)
        session.sign_in(user.id, access=str(refresh.access_token), refresh=str(refresh))
        return session


def sign_in_with_password(auth: AuthSession, http: requests.Session, base_url: str,
                          email_or_username: str, password: str, timeout=None) -> AuthSession:
    """Obtains a token pair from the API and signs ``auth`` in with it."""
    try:
        response = http.post(
            f"{base_url.rstrip('/')}/api/token/",
            json={'email_or_username': email_or_username, 'password': password},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthError(f"Sign in failed: {e}") from e

    if response.status_code != 200:
        raise AuthError(f"Sign in rejected ({response.status_code})")

    data = response.json()
    auth.sign_in(data['user']['id'], access=data['access'], refresh=data['refresh'])
    return auth


def refresh_access_token(auth: AuthSession, http: requests.Session, base_url: str, timeout=None) -> AuthSession:
    """Exchanges the refresh token for a new access token."""
    if not auth.refresh:
        raise AuthError("No refresh token in session")
    try:
        response = http.post(
            f"{base_url.rstrip('/')}/api/token/refresh/",
            json={'refresh': auth.refresh},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise AuthError(f"Token refresh failed: {e}") from e

    if response.status_code != 200:
        raise AuthError(f"Token refresh rejected ({response.status_code})")

    data = response.json()
    auth.token_refreshed(data['access'], data.get('refresh'))
    return auth
