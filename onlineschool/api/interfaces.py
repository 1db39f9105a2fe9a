"""
Abstract interface for the backend transport.

Workflows depend on ApiTransport rather than on the concrete requests
based client, so unit tests can hand them a Mock.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..models.result import Result


class ApiTransport(ABC):
    """
    Abstract interface for REST calls.

    Implementations must never raise for HTTP or network errors; every
    outcome is returned as a Result whose ``message`` carries the
    server's ``error`` text when there is one.
    """

    @abstractmethod
    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Result[Any]:
        """
        Send a GET request.

        Args:
            path: Endpoint path, e.g. "/api/homework/library/"
            params: Optional query parameters

        Returns:
            Result containing the decoded JSON body
        """
        pass

    @abstractmethod
    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Result[Any]:
        """Send a POST request with a JSON body."""
        pass

    @abstractmethod
    def patch(self, path: str, payload: Dict[str, Any]) -> Result[Any]:
        """Send a PATCH request with a JSON body."""
        pass

    @abstractmethod
    def delete(self, path: str) -> Result[Any]:
        """Send a DELETE request. The value is None for an empty body."""
        pass
