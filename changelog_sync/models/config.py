"""Configuration and data models for the changelog sync system."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from ..errors import InvalidConfigError, InvalidCredentialsError

DEFAULT_TITLE = "# Directus Changelog"
DEFAULT_COMMIT_MESSAGE_TEMPLATE = "Content update from Directus CMS by {author}"
DEFAULT_REQUEST_TIMEOUT = 30.0

SUPPORTED_VCS = ("bitbucket",)

ENV_PREFIX = "VERSION_CONTROL_CHANGELOG_"


@dataclass(frozen=True)
class SyncConfig:
    """Identifies the one file location the changelog is written to."""

    server_url: str  # Without trailing slash
    project_name: str  # Project (or user) that owns the repository
    repository_name: str
    branch_name: str  # Working branch, created on demand

    def validate(self) -> None:
        """Reject the whole config if any field is blank.

        Raises:
            InvalidConfigError: Naming every blank field
        """
        blank = [
            name
            for name in ("server_url", "project_name", "repository_name", "branch_name")
            if not str(getattr(self, name) or "").strip()
        ]
        if blank:
            raise InvalidConfigError(
                f"SyncConfig values cannot be empty: {', '.join(blank)}"
            )


@dataclass(frozen=True)
class Credentials:
    """User and password (or access token) for the remote API."""

    user: str
    password: str = field(repr=False)

    def validate(self) -> None:
        """Raise InvalidCredentialsError unless both values are set."""
        if not (self.user or "").strip() or not (self.password or "").strip():
            raise InvalidCredentialsError("Credentials need both user and password set")


@dataclass
class ChangelogSettings:
    """Everything needed to publish changelog entries to one repository."""

    config: SyncConfig
    credentials: Credentials
    file_path: str
    vcs: str = "bitbucket"
    title: str = DEFAULT_TITLE
    commit_message_template: str = DEFAULT_COMMIT_MESSAGE_TEMPLATE
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def commit_message_for(self, author_label: str) -> str:
        """Render the default commit message for an author."""
        return self.commit_message_template.format(author=author_label)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ChangelogSettings":
        """Load settings from VERSION_CONTROL_CHANGELOG_* environment variables.

        A `.env` file in the working directory is loaded first when reading
        from the process environment.

        Raises:
            InvalidConfigError: On a missing value or unknown VCS
            InvalidCredentialsError: On missing credentials
        """
        if environ is None:
            load_dotenv()
            environ = os.environ

        vcs = _vcs_kind(_require(environ, "VCS", "no VCS to connect to"))
        config = SyncConfig(
            server_url=_require(environ, "VCS_SERVER_URL").rstrip("/"),
            project_name=_require(environ, "VCS_PROJECT"),
            repository_name=_require(environ, "VCS_REPOSITORY"),
            branch_name=_require(environ, "VCS_BRANCH"),
        )
        file_path = _require(environ, "VCS_FILENAME")

        return cls(
            config=config,
            credentials=_credentials_from_env(environ, vcs),
            file_path=file_path,
            vcs=vcs,
            title=environ.get(f"{ENV_PREFIX}TITLE") or DEFAULT_TITLE,
        )

    @classmethod
    def load(
        cls,
        config_path: Path,
        environ: Mapping[str, str] | None = None,
    ) -> "ChangelogSettings":
        """Load repository settings from YAML and credentials from the environment.

        Credentials are never read from the YAML file.
        """
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidConfigError(f"Config file {config_path} must contain a mapping")

        if environ is None:
            load_dotenv()
            environ = os.environ

        vcs = _vcs_kind(str(data.get("vcs", "bitbucket")))
        config = SyncConfig(
            server_url=str(data.get("server_url", "")).rstrip("/"),
            project_name=str(data.get("project", "")),
            repository_name=str(data.get("repository", "")),
            branch_name=str(data.get("branch", "")),
        )
        config.validate()

        file_path = str(data.get("file", ""))
        if not file_path.strip():
            raise InvalidConfigError(f"Config file {config_path} has no changelog 'file' set")

        try:
            request_timeout = float(data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise InvalidConfigError(f"Invalid request_timeout: {data.get('request_timeout')!r}") from e

        return cls(
            config=config,
            credentials=_credentials_from_env(environ, vcs),
            file_path=file_path,
            vcs=vcs,
            title=data.get("title") or DEFAULT_TITLE,
            commit_message_template=data.get("commit_message_template")
            or DEFAULT_COMMIT_MESSAGE_TEMPLATE,
            request_timeout=request_timeout,
        )

    def save(self, config_path: Path) -> None:
        """Save the non-secret settings to a YAML file."""
        data: dict[str, Any] = {
            "vcs": self.vcs,
            "server_url": self.config.server_url,
            "project": self.config.project_name,
            "repository": self.config.repository_name,
            "branch": self.config.branch_name,
            "file": self.file_path,
            "title": self.title,
            "commit_message_template": self.commit_message_template,
            "request_timeout": self.request_timeout,
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def _require(environ: Mapping[str, str], suffix: str, reason: str = "") -> str:
    """Read a required environment value, raising InvalidConfigError if blank."""
    name = f"{ENV_PREFIX}{suffix}"
    value = environ.get(name, "")
    if not value.strip():
        message = f"Configuration {name} is missing"
        if reason:
            message += f"; {reason}"
        raise InvalidConfigError(message)
    return value


def _vcs_kind(value: str) -> str:
    """Normalize and check the VCS selector."""
    vcs = value.strip().lower()
    if vcs not in SUPPORTED_VCS:
        raise InvalidConfigError(f"VCS provider '{value}' is unknown; supported: {', '.join(SUPPORTED_VCS)}")
    return vcs


def _credentials_from_env(environ: Mapping[str, str], vcs: str) -> Credentials:
    """Read the VCS specific credential pair."""
    prefix = f"{ENV_PREFIX}{vcs.upper()}_"
    user = environ.get(f"{prefix}USER", "")
    password = environ.get(f"{prefix}PASSWORD", "")

    if not user.strip():
        raise InvalidCredentialsError(f"Configuration {prefix}USER is missing or empty")
    if not password.strip():
        raise InvalidCredentialsError(f"Configuration {prefix}PASSWORD is missing or empty")

    return Credentials(user=user, password=password)
