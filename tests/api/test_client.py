"""
Unit tests for ApiClient.

Tests request handling with a mocked requests session.
"""

import pytest
import requests
from unittest.mock import MagicMock, Mock

from onlineschool.api.client import (
    ApiClient,
    ApiError,
    extract_error_message,
    failure_message,
    kind_for_status,
)
from onlineschool.models.result import ErrorKind, Result
from onlineschool.utils.config import SecureString


def make_response(status_code=200, body=None, content=b"x", reason="OK", json_error=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = reason
    response.content = content
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


class TestApiClient:
    """Test suite for ApiClient."""

    @pytest.fixture
    def mock_session(self):
        session = MagicMock()
        session.headers = {}
        return session

    @pytest.fixture
    def client(self, mock_session):
        return ApiClient("http://test.local:8000/", session=mock_session)

    def test_initialization(self, client, mock_session):
        assert client.base_url == "http://test.local:8000"
        assert client.timeout is None
        assert not client.has_token
        assert mock_session.headers["Accept"] == "application/json"

    def test_set_and_clear_token(self, client, mock_session):
        client.set_token(SecureString("abc.def.ghi"))

        assert client.has_token
        assert mock_session.headers["Authorization"] == "Bearer abc.def.ghi"

        client.clear_token()

        assert not client.has_token
        assert "Authorization" not in mock_session.headers

    def test_get_success(self, client, mock_session):
        mock_session.request.return_value = make_response(200, [{"lesson_id": 1}])

        result = client.get("/api/teacher/lesson-history/")

        assert result.is_success
        assert result.value == [{"lesson_id": 1}]
        mock_session.request.assert_called_once_with(
            "GET",
            "http://test.local:8000/api/teacher/lesson-history/",
            json=None,
            params=None,
            timeout=None
        )

    def test_patch_sends_json_body(self, client, mock_session):
        mock_session.request.return_value = make_response(200, {"status": "COMPLETED"})

        client.patch("/api/teacher/lesson-history/7/", {"status": "COMPLETED"})

        args, kwargs = mock_session.request.call_args
        assert args[0] == "PATCH"
        assert kwargs["json"] == {"status": "COMPLETED"}

    def test_timeout_is_passed_through(self, mock_session):
        client = ApiClient("http://test.local", timeout=5.0, session=mock_session)
        mock_session.request.return_value = make_response(200, {})

        client.get("/api/me/")

        assert mock_session.request.call_args[1]["timeout"] == 5.0

    def test_empty_body_decodes_to_none(self, client, mock_session):
        mock_session.request.return_value = make_response(204, content=b"")

        result = client.delete("/api/homework/3/delete/")

        assert result.is_success
        assert result.value is None

    def test_server_error_message_kept_verbatim(self, client, mock_session):
        mock_session.request.return_value = make_response(
            409,
            {"error": "Lesson is already completed"},
            reason="Conflict"
        )

        result = client.patch("/api/teacher/lesson-history/7/", {"status": "COMPLETED"})

        assert result.is_failure
        assert result.message == "Lesson is already completed"
        assert result.kind == ErrorKind.BUSINESS_RULE
        assert result.status_code == 409
        assert isinstance(result.error, ApiError)
        assert result.error.server_message == "Lesson is already completed"

    def test_error_without_body(self, client, mock_session):
        mock_session.request.return_value = make_response(
            500, content=b"", reason="Internal Server Error"
        )

        result = client.get("/api/homework/library/")

        assert result.is_failure
        assert result.kind == ErrorKind.SERVER
        assert result.message == "HTTP 500 Internal Server Error"
        assert result.error.server_message is None

    def test_network_error(self, client, mock_session):
        mock_session.request.side_effect = requests.ConnectionError("refused")

        result = client.get("/api/me/")

        assert result.is_failure
        assert result.kind == ErrorKind.TRANSPORT
        assert "Network error" in result.message

    def test_non_json_success_body(self, client, mock_session):
        mock_session.request.return_value = make_response(
            200, content=b"<html>", json_error=ValueError("no json")
        )

        result = client.get("/api/me/")

        assert result.is_failure
        assert result.kind == ErrorKind.TRANSPORT

    def test_context_manager_closes_session(self, mock_session):
        with ApiClient("http://test.local", session=mock_session):
            pass

        mock_session.close.assert_called_once()


class TestErrorHelpers:

    @pytest.mark.parametrize("status,kind", [
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.AUTH),
        (403, ErrorKind.AUTH),
        (404, ErrorKind.NOT_FOUND),
        (409, ErrorKind.BUSINESS_RULE),
        (422, ErrorKind.BUSINESS_RULE),
        (502, ErrorKind.SERVER),
    ])
    def test_kind_for_status(self, status, kind):
        assert kind_for_status(status) == kind

    def test_extract_error_prefers_error_key(self):
        assert extract_error_message({"error": "A", "detail": "B"}) == "A"
        assert extract_error_message({"detail": "B"}) == "B"
        assert extract_error_message({"other": 1}) is None
        assert extract_error_message(["error"]) is None

    def test_failure_message_uses_server_text(self):
        result = Result.failure(
            "Lesson is already completed",
            ApiError(409, "Lesson is already completed"),
            kind=ErrorKind.BUSINESS_RULE
        )

        assert failure_message(result, "fallback") == "Lesson is already completed"

    def test_failure_message_falls_back(self):
        network = Result.failure("Network error", requests.ConnectionError())
        bare_500 = Result.failure("HTTP 500", ApiError(500), kind=ErrorKind.SERVER)

        assert failure_message(network, "Try again") == "Try again"
        assert failure_message(bare_500, "Try again") == "Try again"

    def test_failure_message_keeps_client_validation(self):
        result = Result.failure("Select a lesson")

        assert failure_message(result, "Try again") == "Select a lesson"
