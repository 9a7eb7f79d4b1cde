"""Turning changelog entries from a host application into commits."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from ..errors import InvalidConfigError
from ..models.config import SUPPORTED_VCS, ChangelogSettings
from .formatter import format_entry
from .repository import RepositorySync

logger = logging.getLogger(__name__)


@dataclass
class ChangelogEntry:
    """A new changelog text entered by someone."""

    author_label: str  # Human readable, already resolved by the host
    raw_text: str | None  # None when the triggering change did not touch the entry
    commit_message: str | None = None  # Falls back to the settings template


def build_heading(author_label: str, now: datetime | None = None) -> str:
    """Build the Markdown heading of an entry, e.g. `## 19/10/2026, 14:03:00 UTC by jane`."""
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).strftime("%d/%m/%Y, %H:%M:%S UTC")
    return f"## {stamp} by {author_label}"


class ChangelogWriter:
    """Formats incoming entries and publishes them to the configured repository."""

    def __init__(
        self,
        settings: ChangelogSettings,
        repository: RepositorySync | None = None,
    ) -> None:
        """Initialize and configure the repository sync.

        Args:
            settings: Loaded changelog settings
            repository: Unconfigured RepositorySync (created if not provided)

        Raises:
            InvalidConfigError: On an unsupported VCS or invalid settings
            InvalidCredentialsError: On blank credentials
        """
        if settings.vcs not in SUPPORTED_VCS:
            raise InvalidConfigError(f"VCS provider '{settings.vcs}' is unknown")

        self.settings = settings
        self.repository = repository or RepositorySync(
            title=settings.title,
            timeout=settings.request_timeout,
        )
        logger.debug("Applying config to %s repository sync", settings.vcs)
        self.repository.configure(settings.credentials, settings.config, settings.file_path)

    def submit(self, entry: ChangelogEntry, now: datetime | None = None) -> bool:
        """Format an entry and publish it.

        Returns:
            True if the entry was committed
        """
        if entry.raw_text is None:
            logger.warning(
                "Change by %s carried no changelog text; nothing to publish", entry.author_label
            )
            return False

        lines = format_entry(entry.raw_text, build_heading(entry.author_label, now))
        message = entry.commit_message or self.settings.commit_message_for(entry.author_label)
        return self.repository.publish(lines, message)
