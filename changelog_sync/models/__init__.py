"""Data models for changelog sync."""

from .config import (
    DEFAULT_TITLE,
    SUPPORTED_VCS,
    ChangelogSettings,
    Credentials,
    SyncConfig,
)
from .remote import BranchSet

__all__ = [
    "BranchSet",
    "ChangelogSettings",
    "Credentials",
    "DEFAULT_TITLE",
    "SUPPORTED_VCS",
    "SyncConfig",
]
