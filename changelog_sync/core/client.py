"""HTTP client wrapper for the Bitbucket Server REST API."""

import logging
from typing import Any

import requests

from ..errors import ChangelogSyncError, UnexpectedResponseError
from ..models.config import DEFAULT_REQUEST_TIMEOUT, SyncConfig
from ..models.remote import BranchSet
from .auth import BasicAuth

logger = logging.getLogger(__name__)


class BitbucketClient:
    """HTTP client for one Bitbucket Server repository."""

    # API version prefix
    API_PATH = "/rest/api/1.0"

    # Branch listings are never paged; more than this many branches is an error
    BRANCH_PAGE_LIMIT = 1000
    PAGE_SIZE = 1000

    def __init__(
        self,
        auth: BasicAuth,
        config: SyncConfig,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> None:
        """Initialize client for the repository named in config.

        Args:
            auth: BasicAuth for the server
            config: Identifies project and repository
            session: Optional requests session (created if not provided)
            timeout: Transport timeout in seconds
        """
        self.auth = auth
        self.config = config
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def repo_path(self) -> str:
        """API path of the configured repository."""
        return (
            f"{self.API_PATH}/projects/{self.config.project_name}"
            f"/repos/{self.config.repository_name}"
        )

    def _request(
        self,
        method: str,
        path: str,
        query_params: dict[str, str] | None = None,
        json_data: dict[str, Any] | None = None,
        form_data: dict[str, str] | None = None,
        expected_status: tuple[int, ...] = (200,),
    ) -> dict[str, Any]:
        """Make an authenticated request to the Bitbucket API.

        Args:
            method: HTTP method
            path: API path (without base URL)
            query_params: Optional query parameters
            json_data: Optional JSON body data
            form_data: Optional multipart form fields (mutually exclusive with json_data)
            expected_status: Status codes treated as success

        Returns:
            Parsed JSON response

        Raises:
            UnexpectedResponseError: On any other status or an undecodable body
            ChangelogSyncError: When the request itself fails
        """
        headers = self.auth.get_headers(content_type=None if form_data is not None else "application/json")
        url = self.auth.get_full_url(path, query_params)

        # requests builds a multipart body from (filename, value) tuples
        files = {name: (None, value) for name, value in form_data.items()} if form_data is not None else None

        logger.debug("%s %s", method, url)
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                json=json_data,
                files=files,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ChangelogSyncError(f"Request failed: {method} {url}: {e}") from e

        if response.status_code not in expected_status:
            error_msg = f"API error {response.status_code} for {method} {path}"
            raise UnexpectedResponseError(error_msg, response.status_code, response.text[:2000])

        # Handle empty responses
        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise UnexpectedResponseError(
                f"Invalid JSON in response to {method} {path}", response.status_code, response.text[:2000]
            ) from e

        if not isinstance(data, dict):
            raise UnexpectedResponseError(f"Expected a JSON object from {method} {path}", response.status_code, data)
        return data

    def get(
        self,
        path: str,
        query_params: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """Make a GET request."""
        return self._request("GET", path, query_params)

    # -------------------------------------------------------------------------
    # Branch Operations
    # -------------------------------------------------------------------------

    def list_branches(self) -> BranchSet:
        """List all branches of the repository in a single request.

        Returns:
            BranchSet with the default branch and all branch names

        Raises:
            UnexpectedResponseError: If the server reports more than one page
        """
        path = f"{self.repo_path}/branches"
        response = self.get(path, {"start": "0", "limit": str(self.BRANCH_PAGE_LIMIT)})

        if not response.get("isLastPage", True):
            raise UnexpectedResponseError(
                f"Found more than {self.BRANCH_PAGE_LIMIT} branches in the repository; "
                "please clean up branches to reactivate changelog writing"
            )
        return BranchSet.from_values(response.get("values", []))

    def create_branch(self, branch_name: str, start_point: str) -> dict[str, Any]:
        """Create a branch pointing at a commit.

        Args:
            branch_name: Name of the new branch
            start_point: Commit id the branch starts from

        Returns:
            Branch metadata from the server
        """
        path = f"{self.repo_path}/branches"
        return self._request(
            "POST",
            path,
            json_data={"name": branch_name, "startPoint": start_point},
            expected_status=(200, 201),
        )

    def get_latest_commit_id(self, ref: str) -> str:
        """Get the id of the newest commit reachable from a ref.

        Args:
            ref: Branch name or commit id

        Returns:
            Commit id string
        """
        path = f"{self.repo_path}/commits"
        response = self.get(path, {"until": ref, "limit": "0", "start": "0"})

        values = response.get("values") or []
        if not values or not values[0].get("id"):
            raise UnexpectedResponseError(f"No commit found for ref '{ref}'", body=response)
        return values[0]["id"]

    # -------------------------------------------------------------------------
    # File Operations
    # -------------------------------------------------------------------------

    def _get_paged(self, path: str, ref: str, key: str) -> list[Any]:
        """Collect the `key` array of every page of a paged listing, in order."""
        items: list[Any] = []
        start = 0

        while True:
            page = self.get(path, {"at": ref, "start": str(start), "limit": str(self.PAGE_SIZE)})
            items.extend(page.get(key) or [])

            if page.get("isLastPage", True):
                return items

            next_start = page.get("nextPageStart")
            if next_start is None or int(next_start) <= start:
                raise UnexpectedResponseError(
                    f"Paged response for {path} has no usable nextPageStart", body=page
                )
            start = int(next_start)

    def list_files(self, ref: str) -> list[str]:
        """List every file path in the repository at a ref.

        Args:
            ref: Branch name or commit id

        Returns:
            Repository-relative file paths across all pages
        """
        return self._get_paged(f"{self.repo_path}/files", ref, "values")

    def get_file_lines(self, file_path: str, ref: str) -> list[str]:
        """Read a text file at a ref as a list of lines.

        Args:
            file_path: Repository-relative path
            ref: Branch name or commit id

        Returns:
            The file's lines, without line terminators
        """
        lines = self._get_paged(f"{self.repo_path}/browse/{file_path}", ref, "lines")
        return [line.get("text", "") for line in lines]

    def edit_file(
        self,
        file_path: str,
        branch: str,
        content: str,
        message: str,
        source_commit_id: str | None = None,
    ) -> dict[str, Any]:
        """Create or update a file on a branch as a new commit.

        Args:
            file_path: Repository-relative path
            branch: Branch to commit to
            content: Full new file content
            message: Commit message
            source_commit_id: Expected parent commit; only for existing files

        Returns:
            Commit metadata from the server
        """
        form = {
            "branch": branch,
            "content": content,
            "message": message,
        }
        # Bitbucket rejects a parent commit when the file does not exist yet
        if source_commit_id is not None:
            form["sourceCommitId"] = source_commit_id

        return self._request("PUT", f"{self.repo_path}/browse/{file_path}", form_data=form)

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    def verify_connection(self) -> BranchSet:
        """Verify API connectivity and authentication by listing branches.

        Raises:
            UnexpectedResponseError: On auth failure or unexpected answers
            ChangelogSyncError: On connection failure
        """
        return self.list_branches()
