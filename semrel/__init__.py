"""semrel: semantic-version release preparation for git repositories."""

__version__ = "0.3.0"
