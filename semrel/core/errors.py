"""Process exit codes.

The CLI maps every failure to one of these codes. Values are part of the
command-line contract and must stay stable:
- 0: Success, including "nothing to release"
- 1: User error (invalid version, malformed manifest/changelog, bad config)
- 2: Environment error (not a git work tree)
- 3: Tool error (git failed or retries were exhausted)
- 5: I/O error (artifact could not be read or written)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    TOOL_ERROR = 3
    IO_ERROR = 5
