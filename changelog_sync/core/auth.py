"""HTTP Basic authentication for the Bitbucket Server API."""

import base64
from urllib.parse import quote, urlencode

from ..models.config import Credentials


class BasicAuth:
    """Builds Basic auth headers and request URLs for one server."""

    def __init__(self, credentials: Credentials, base_url: str) -> None:
        """Initialize authentication with credentials.

        Args:
            credentials: User and password (or access token)
            base_url: Server URL; a trailing slash is dropped
        """
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")

    def _encode_credentials(self) -> str:
        """Encode the current credential pair as `user:password` in base64."""
        pair = f"{self.credentials.user}:{self.credentials.password}"
        return base64.b64encode(pair.encode("utf-8")).decode("ascii")

    def get_headers(self, content_type: str | None = "application/json") -> dict[str, str]:
        """Generate authentication headers for an API request.

        The Authorization header is derived from the held credentials on
        every call.

        Args:
            content_type: Content-Type header value, or None to let the
                transport set it (multipart bodies)

        Returns:
            Dictionary of headers including Authorization
        """
        headers = {
            "Authorization": f"Basic {self._encode_credentials()}",
            "Accept": "application/json",
        }
        if content_type:
            headers["Content-Type"] = content_type
        return headers

    def get_full_url(self, path: str, query_params: dict[str, str] | None = None) -> str:
        """Build full URL from base URL, path, and query params.

        Args:
            path: API path (e.g., /rest/api/1.0/projects)
            query_params: Optional query parameters

        Returns:
            Full URL string
        """
        url = f"{self.base_url}{quote(path, safe='/')}"
        if query_params:
            url += "?" + urlencode(sorted(query_params.items()))
        return url
