"""
OnlineSchool backend access.

This module provides the HTTP client, the endpoint table and the
authentication session.

Usage:
    >>> from onlineschool.api import ApiClient, AuthSession
    >>> from onlineschool.utils.config import SecureString
    >>>
    >>> client = ApiClient("http://127.0.0.1:8000")
    >>> session = AuthSession(client)
    >>> session.login("teacher1", SecureString("password"))
"""

from .client import ApiClient, ApiError, failure_message
from .endpoints import Endpoints, endpoints
from .interfaces import ApiTransport
from .session import AuthSession, SessionState

__all__ = [
    "ApiClient",
    "ApiError",
    "ApiTransport",
    "AuthSession",
    "Endpoints",
    "SessionState",
    "endpoints",
    "failure_message",
]
