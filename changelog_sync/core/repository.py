"""Publishing changelog entries to a remote repository through its REST API."""

import logging

import requests

from ..errors import ChangelogSyncError, InvalidConfigError, UnexpectedResponseError
from ..models.config import DEFAULT_REQUEST_TIMEOUT, DEFAULT_TITLE, Credentials, SyncConfig
from ..models.remote import BranchSet
from .auth import BasicAuth
from .client import BitbucketClient
from .formatter import prepend_entry

logger = logging.getLogger(__name__)


class RepositorySync:
    """Writes new changelog entries into one file on one branch, without a clone.

    Each publish discovers branch, commit and file state fresh from the
    server. The parent commit sent with an update is the only guard against
    concurrent writers; the server rejects a push on a stale parent.
    """

    def __init__(
        self,
        title: str = DEFAULT_TITLE,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize an unconfigured sync.

        Args:
            title: Title line kept at the top of the changelog
            session: Optional requests session handed to the client
            timeout: Transport timeout in seconds
        """
        self.title = title
        self._session = session
        self._timeout = timeout
        self._client: BitbucketClient | None = None
        self.config: SyncConfig | None = None
        self.file_path = ""

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> BitbucketClient:
        """Get the client; only available after configure()."""
        if self._client is None:
            raise ChangelogSyncError("RepositorySync is not configured; call configure() first")
        return self._client

    def configure(self, credentials: Credentials, config: SyncConfig, target_file_path: str) -> None:
        """Validate and apply configuration. Must be called once before publish().

        Raises:
            InvalidConfigError: On blank config values or file path
            InvalidCredentialsError: On blank user or password
            ChangelogSyncError: When already configured
        """
        if self._client is not None:
            raise ChangelogSyncError("RepositorySync is already configured")

        config.validate()
        if not (target_file_path or "").strip():
            raise InvalidConfigError("Changelog file path cannot be empty")
        credentials.validate()

        self.config = config
        self.file_path = target_file_path
        self._client = BitbucketClient(
            BasicAuth(credentials, config.server_url),
            config,
            session=self._session,
            timeout=self._timeout,
        )
        logger.debug(
            "Configured changelog sync for %s/%s on branch %s",
            config.project_name,
            config.repository_name,
            config.branch_name,
        )

    def publish(self, new_lines: list[str], commit_message: str) -> bool:
        """Prepend new lines to the changelog and commit the result.

        Never raises for remote or runtime failures; they are logged and
        reported as False.

        Args:
            new_lines: Formatted entry lines, inserted below the title
            commit_message: Message of the resulting commit

        Returns:
            True if the new content was committed
        """
        client = self.client

        try:
            self._publish(client, new_lines, commit_message)
        except UnexpectedResponseError as e:
            logger.error("Publishing changelog %s failed: %s", self.file_path, e)
            if e.body is not None:
                logger.debug("Raw response body: %s", e.body)
            return False
        except Exception:
            logger.exception("Publishing changelog %s failed unexpectedly", self.file_path)
            return False

        logger.info("Published changelog entry to %s on %s", self.file_path, self.branch_name)
        return True

    @property
    def branch_name(self) -> str:
        return self.config.branch_name if self.config else ""

    def _publish(self, client: BitbucketClient, new_lines: list[str], commit_message: str) -> None:
        """Run discovery, merge and push in order; any failure raises."""
        logger.debug("Fetching list of branches in repository")
        branches = client.list_branches()

        base_commit: str | None = self._resolve_base_commit(client, branches)

        logger.debug("Fetching list of files on branch %s", self.branch_name)
        files = client.list_files(self.branch_name)

        if self.file_path in files:
            logger.debug("Fetching current changelog content")
            current = client.get_file_lines(self.file_path, self.branch_name)
        else:
            logger.debug("Changelog %s does not exist yet; it will be created", self.file_path)
            current = []
            # Creating a file with a parent commit is rejected by the server
            base_commit = None

        content = prepend_entry(current, new_lines, self.title)

        logger.debug("Committing changelog to branch %s", self.branch_name)
        client.edit_file(
            self.file_path,
            self.branch_name,
            "\n".join(content),
            commit_message,
            source_commit_id=base_commit,
        )

    def _resolve_base_commit(self, client: BitbucketClient, branches: BranchSet) -> str:
        """Get the head commit of the working branch, creating the branch if needed."""
        if self.branch_name in branches:
            logger.debug("Fetching latest commit on branch %s", self.branch_name)
            return client.get_latest_commit_id(self.branch_name)

        if not branches.base_branch:
            raise UnexpectedResponseError(
                f"Branch {self.branch_name} does not exist and the repository has no default branch"
            )

        logger.debug(
            "Branch %s not found; creating it from %s", self.branch_name, branches.base_branch
        )
        commit_id = client.get_latest_commit_id(branches.base_branch)
        client.create_branch(self.branch_name, commit_id)
        return commit_id
