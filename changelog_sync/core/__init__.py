"""Core sync functionality."""

from .auth import BasicAuth
from .client import BitbucketClient
from .formatter import format_entry, merge, prepend_entry
from .repository import RepositorySync
from .writer import ChangelogEntry, ChangelogWriter, build_heading

__all__ = [
    "BasicAuth",
    "BitbucketClient",
    "ChangelogEntry",
    "ChangelogWriter",
    "RepositorySync",
    "build_heading",
    "format_entry",
    "merge",
    "prepend_entry",
]
