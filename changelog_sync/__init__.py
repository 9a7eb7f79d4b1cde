"""Write changelog entries into a file in a remote repository, without a clone."""

__version__ = "0.1.0"
