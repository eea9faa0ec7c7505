"""
Error model and exit code contract for git-recent.

Recoverable failures are absorbed close to where they happen; only a picker that
cannot start or run turns into a non-zero exit status.
"""

from dataclasses import dataclass
from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    RUNTIME_ERROR = 1


@dataclass
class GitRecentError(Exception):
    """Base error carrying a message, exit code and optional next step."""

    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


@dataclass
class RefListingError(GitRecentError):
    """The branch enumeration call failed (git missing, not a repository...)."""


@dataclass
class CheckoutError(GitRecentError):
    """`git checkout` could not be started or exited with a non-zero status."""

    returncode: int | None = None


@dataclass
class TerminalUnavailableError(GitRecentError):
    """The interactive loop needs a terminal on stdin."""


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
