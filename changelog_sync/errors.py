"""Error types raised by the changelog sync system."""

from typing import Any


class ChangelogSyncError(Exception):
    """Base exception for anything that goes wrong while syncing a changelog."""


class InvalidConfigError(ChangelogSyncError):
    """Raised when static configuration is missing or malformed."""


class InvalidCredentialsError(ChangelogSyncError):
    """Raised when the credentials for the remote API are missing or blank."""


class UnexpectedResponseError(ChangelogSyncError):
    """Exception raised when the remote API answers in a way we can't use."""

    def __init__(self, message: str, status_code: int | None = None, body: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
