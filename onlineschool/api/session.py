"""
Authentication session management.

This module handles obtaining a bearer token, tracking login state and
loading the current user.
"""

import logging
from datetime import datetime
from enum import Enum
from typing import Optional

from .client import ApiClient
from .endpoints import endpoints
from ..models.result import ErrorKind, Result
from ..models.user import User
from ..utils.config import SecureString
from ..utils.logger import mask_token


logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Session states."""

    NOT_LOGGED_IN = "not_logged_in"
    LOGGED_IN = "logged_in"
    EXPIRED = "expired"


class AuthSession:
    """
    Tracks the bearer token and the logged-in user.

    A token is considered expired when the backend answers 401/403 to the
    current-user lookup; both tokens are then dropped.

    Examples:
        >>> session = AuthSession(client)
        >>> result = session.login("teacher1", SecureString("password"))
        >>> if result.is_success:
        ...     print(f"Hello {session.user.display_name}")
    """

    def __init__(self, client: ApiClient):
        """
        Initialize AuthSession.

        Args:
            client: ApiClient whose Authorization header this session manages
        """
        self.client = client
        self._state = SessionState.NOT_LOGGED_IN
        self._refresh_token: Optional[SecureString] = None
        self._user: Optional[User] = None
        self._login_time: Optional[datetime] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_logged_in(self) -> bool:
        return self._state == SessionState.LOGGED_IN

    @property
    def user(self) -> Optional[User]:
        return self._user

    def login(self, username: str, password: SecureString) -> Result[User]:
        """
        Exchange credentials for tokens and load the current user.

        Args:
            username: Login username
            password: Login password (SecureString)

        Returns:
            Result[User] for the logged-in user
        """
        if not username or not username.strip():
            return Result.failure("Username is required")

        if not password or not password.get_value():
            return Result.failure("Password is required")

        logger.info(f"Logging in as: {username}")

        token_result = self.client.post(
            endpoints.auth.token,
            {"username": username, "password": password.get_value()}
        )
        if token_result.is_failure:
            logger.warning(f"Login failed for {username}: {token_result.message}")
            return Result.failure(
                token_result.message,
                token_result.error,
                kind=token_result.kind,
                status_code=token_result.status_code
            )

        body = token_result.value or {}
        access = body.get("access")
        if not access:
            return Result.failure(
                "Login response did not contain an access token",
                kind=ErrorKind.TRANSPORT
            )

        refresh = body.get("refresh")
        self._refresh_token = SecureString(refresh) if refresh else None
        return self.use_token(SecureString(access))

    def use_token(self, access: SecureString) -> Result[User]:
        """
        Adopt an existing access token and verify it against ``/api/me/``.

        Returns:
            Result[User]; on an AUTH failure the token is discarded
        """
        self.client.set_token(access)
        logger.debug(f"Using access token {mask_token(access.get_value())}")

        me_result = self.client.get(endpoints.auth.me)
        if me_result.is_failure:
            if me_result.kind == ErrorKind.AUTH:
                logger.warning("Access token rejected, clearing session")
                self._expire()
            return Result.failure(
                me_result.message,
                me_result.error,
                kind=me_result.kind,
                status_code=me_result.status_code
            )

        user_result = me_result.map(User.from_dict)
        if user_result.is_failure:
            return user_result

        self._user = user_result.value
        self._state = SessionState.LOGGED_IN
        self._login_time = datetime.now()
        logger.info(f"Logged in as {self._user.username} ({self._user.role})")
        return Result.success(self._user, "Login successful")

    def _expire(self):
        self.client.clear_token()
        self._refresh_token = None
        self._user = None
        self._login_time = None
        self._state = SessionState.EXPIRED

    def logout(self):
        """Drop both tokens and the cached user."""
        self.client.clear_token()
        self._refresh_token = None
        self._user = None
        self._login_time = None
        self._state = SessionState.NOT_LOGGED_IN
        logger.info("Logged out")

    def get_session_info(self) -> dict:
        """Session details for debugging. Never includes token values."""
        return {
            "state": self._state.value,
            "logged_in": self.is_logged_in,
            "username": self._user.username if self._user else None,
            "role": self._user.role if self._user else None,
            "login_time": self._login_time.isoformat() if self._login_time else None,
            "has_refresh_token": self._refresh_token is not None,
        }
