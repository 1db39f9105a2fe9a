"""
Unit tests for AuthSession.

Tests login, token adoption and session state with a mocked client.
"""

import pytest
from unittest.mock import Mock

from onlineschool.api.client import ApiError
from onlineschool.api.session import AuthSession, SessionState
from onlineschool.models.result import ErrorKind, Result
from onlineschool.utils.config import SecureString


ME = {
    "id": 5,
    "username": "teacher1",
    "email": "teacher1@example.uz",
    "role": "teacher",
    "full_name": "Malika Yusupova",
    "timezone": "Asia/Tashkent",
}


class TestAuthSession:
    """Test suite for AuthSession."""

    @pytest.fixture
    def mock_client(self):
        return Mock()

    @pytest.fixture
    def session(self, mock_client):
        return AuthSession(mock_client)

    def test_initial_state(self, session):
        assert session.state == SessionState.NOT_LOGGED_IN
        assert not session.is_logged_in
        assert session.user is None

    def test_login_success(self, session, mock_client):
        mock_client.post.return_value = Result.success({"access": "acc.tok.en", "refresh": "ref"})
        mock_client.get.return_value = Result.success(ME)

        result = session.login("teacher1", SecureString("secret"))

        assert result.is_success
        assert session.is_logged_in
        assert session.user.display_name == "Malika Yusupova"
        assert session.user.is_teacher
        mock_client.post.assert_called_once_with(
            "/api/token/",
            {"username": "teacher1", "password": "secret"}
        )
        mock_client.set_token.assert_called_once_with(SecureString("acc.tok.en"))
        mock_client.get.assert_called_once_with("/api/me/")

    def test_login_requires_username(self, session, mock_client):
        result = session.login("  ", SecureString("secret"))

        assert result.is_failure
        mock_client.post.assert_not_called()

    def test_login_requires_password(self, session, mock_client):
        result = session.login("teacher1", SecureString(""))

        assert result.is_failure
        mock_client.post.assert_not_called()

    def test_login_rejected(self, session, mock_client):
        mock_client.post.return_value = Result.failure(
            "No active account found with the given credentials",
            ApiError(401, "No active account found with the given credentials"),
            kind=ErrorKind.AUTH,
            status_code=401
        )

        result = session.login("teacher1", SecureString("wrong"))

        assert result.is_failure
        assert result.kind == ErrorKind.AUTH
        assert result.message == "No active account found with the given credentials"
        assert not session.is_logged_in

    def test_login_response_without_token(self, session, mock_client):
        mock_client.post.return_value = Result.success({})

        result = session.login("teacher1", SecureString("secret"))

        assert result.is_failure
        assert result.kind == ErrorKind.TRANSPORT

    def test_use_token_rejected_expires_session(self, session, mock_client):
        mock_client.get.return_value = Result.failure(
            "Given token not valid",
            ApiError(401, "Given token not valid"),
            kind=ErrorKind.AUTH,
            status_code=401
        )

        result = session.use_token(SecureString("expired.token"))

        assert result.is_failure
        assert session.state == SessionState.EXPIRED
        mock_client.clear_token.assert_called_once()

    def test_use_token_network_failure_keeps_state(self, session, mock_client):
        mock_client.get.return_value = Result.failure("Network error", ConnectionError())

        result = session.use_token(SecureString("some.token"))

        assert result.is_failure
        assert session.state == SessionState.NOT_LOGGED_IN

    def test_logout(self, session, mock_client):
        mock_client.get.return_value = Result.success(ME)
        session.use_token(SecureString("good.token"))

        session.logout()

        assert session.state == SessionState.NOT_LOGGED_IN
        assert session.user is None

    def test_session_info_has_no_tokens(self, session, mock_client):
        mock_client.post.return_value = Result.success({"access": "acc.tok.en", "refresh": "ref.tok.en"})
        mock_client.get.return_value = Result.success(ME)
        session.login("teacher1", SecureString("secret"))

        info = session.get_session_info()

        assert info["logged_in"]
        assert info["role"] == "teacher"
        assert info["has_refresh_token"]
        assert "acc.tok.en" not in str(info)
