"""
Configuration management with environment variables.

This module provides centralized configuration management
with validation and type safety.
"""

import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


DEFAULT_API_URL = "http://127.0.0.1:8000"
DEFAULT_TIMEZONE = "Asia/Tashkent"


class SecureString:
    """
    Wrapper for sensitive strings that prevents accidental exposure.

    Used for passwords and bearer tokens.

    Examples:
        >>> token = SecureString("eyJhbGciOi...")
        >>> str(token)
        '********'
        >>> token.get_value()
        'eyJhbGciOi...'
    """

    def __init__(self, value: str):
        self._value = value

    def get_value(self) -> str:
        """
        Get the actual value (use with caution).

        Warning:
            This exposes the sensitive value. Use only to build a request
            and never log the result.
        """
        return self._value

    def __bool__(self) -> bool:
        return bool(self._value)

    def __str__(self) -> str:
        """Return masked string representation."""
        return "********"

    def __repr__(self) -> str:
        """Return masked repr."""
        return "SecureString(********)"

    def __eq__(self, other) -> bool:
        """Compare SecureString values."""
        if isinstance(other, SecureString):
            return self._value == other._value
        return False


class Config:
    """
    Application configuration manager.

    Loads configuration from environment variables (and a ``.env`` file
    if present) and provides validated access to the values.

    Attributes:
        api_url: Base URL of the OnlineSchool backend
        username: Login username (optional if an access token is given)
        password: Login password, wrapped in SecureString
        access_token: Pre-issued bearer token, wrapped in SecureString
        timezone: IANA timezone used when displaying timestamps
        request_timeout: Per-request timeout in seconds, None for no timeout
        output_dir: Directory for logs and exported reports
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Examples:
        >>> config = Config()
        >>> if config.validate():
        ...     print(f"Backend: {config.api_url}")
    """

    @staticmethod
    def _validate_url(url: str, name: str) -> str:
        """
        Validate URL format and scheme.

        Raises:
            ValueError: If URL is invalid
        """
        parsed = urlparse(url)

        if not parsed.scheme:
            raise ValueError(f"{name} must include URL scheme (http/https)")

        if parsed.scheme not in ['http', 'https']:
            raise ValueError(f"{name} must use http or https scheme, got: {parsed.scheme}")

        if not parsed.netloc:
            raise ValueError(f"{name} must have a valid host")

        return url.rstrip('/')

    @staticmethod
    def _parse_timeout(raw: Optional[str]) -> Optional[float]:
        if raw is None or raw.strip() == "":
            return None
        try:
            return float(raw)
        except ValueError:
            raise ValueError(f"ONLINESCHOOL_REQUEST_TIMEOUT must be a number, got: {raw}")

    def __init__(self):
        """Initialize configuration by loading environment variables."""
        load_dotenv()

        url = os.getenv("ONLINESCHOOL_API_URL", DEFAULT_API_URL)
        self._api_url = self._validate_url(url, "ONLINESCHOOL_API_URL")

        # Credentials
        self._username = os.getenv("ONLINESCHOOL_USERNAME")

        pwd = os.getenv("ONLINESCHOOL_PASSWORD")
        self._password = SecureString(pwd) if pwd else None

        token = os.getenv("ONLINESCHOOL_ACCESS_TOKEN")
        self._access_token = SecureString(token) if token else None

        # Display and transport
        self._timezone = os.getenv("ONLINESCHOOL_TIMEZONE", DEFAULT_TIMEZONE)
        self._request_timeout = self._parse_timeout(os.getenv("ONLINESCHOOL_REQUEST_TIMEOUT"))

        # Output settings
        self._output_dir = Path(os.getenv("OUTPUT_DIR", "output"))
        self._log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def api_url(self) -> str:
        """Get backend base URL (no trailing slash)."""
        return self._api_url

    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def password(self) -> Optional[SecureString]:
        """
        Get login password (wrapped in SecureString).

        Warning:
            Never log or print the unwrapped value.
        """
        return self._password

    @property
    def access_token(self) -> Optional[SecureString]:
        """Get pre-issued bearer token (wrapped in SecureString)."""
        return self._access_token

    @property
    def timezone(self) -> str:
        return self._timezone

    @property
    def request_timeout(self) -> Optional[float]:
        """Per-request timeout in seconds; None means requests never time out."""
        return self._request_timeout

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def log_level(self) -> str:
        return self._log_level

    @property
    def has_credentials(self) -> bool:
        """True if either a token or a username/password pair is configured."""
        return bool(self._access_token) or bool(self._username and self._password)

    def validate(self) -> bool:
        """
        Validate configuration values.

        Returns:
            True if all configuration is valid

        Raises:
            ValueError: If validation fails, listing every problem found
        """
        errors = []

        if self._username is not None and not self._username.strip():
            errors.append("ONLINESCHOOL_USERNAME must not be blank")

        if self._username and not self._password and not self._access_token:
            errors.append(
                "ONLINESCHOOL_PASSWORD is required when ONLINESCHOOL_USERNAME is set "
                "(or provide ONLINESCHOOL_ACCESS_TOKEN)"
            )

        try:
            ZoneInfo(self._timezone)
        except (ZoneInfoNotFoundError, ValueError):
            errors.append(f"ONLINESCHOOL_TIMEZONE is not a known timezone: {self._timezone}")

        if self._request_timeout is not None and self._request_timeout <= 0:
            errors.append("ONLINESCHOOL_REQUEST_TIMEOUT must be positive")

        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self._log_level not in valid_levels:
            errors.append(
                f"LOG_LEVEL must be one of: {', '.join(valid_levels)}"
            )

        if errors:
            error_msg = "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            raise ValueError(error_msg)

        return True

    def create_output_directories(self):
        """Create output directories if they don't exist."""
        directories = [
            self.output_dir / "logs",
            self.output_dir / "reports",
        ]

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)
