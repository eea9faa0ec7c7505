"""
Branch reference discovery.

Asks git for local and remote-tracking branches ordered by most recent commit and
turns its output into `BranchEntry` records for the picker. Parsing is tolerant:
a line that does not look like ``<ref> (<age>) <author>`` is skipped rather than
failing the whole listing.
"""

import logging as py_logging
import re
import subprocess
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from pydantic import ValidationError
from rich.text import Text

from .errors import RefListingError
from .models import BranchEntry

logger = py_logging.getLogger(__name__)

MAX_REFS = 150
REMOTE_PREFIX = "origin/"
REF_PATTERNS = ("refs/heads", "refs/remotes")
REF_FORMAT = (
    "%(color:yellow)%(refname:short)%(color:reset) "
    "(%(color:green)%(committerdate:relative)%(color:reset)) "
    "%(authorname)"
)

# name, then "(<age>)", then the first word after it
LINE_PATTERN = re.compile(r"(.*)\s[(](.*)[)]\s(\w+)")

Runner = Callable[..., subprocess.CompletedProcess]


@dataclass
class BranchListResult:
    branches: list[BranchEntry] = field(default_factory=list)
    error: RefListingError | None = None


def build_listing_command() -> list[str]:
    return [
        "git",
        "for-each-ref",
        "--sort=-committerdate",
        f"--count={MAX_REFS}",
        f"--format={REF_FORMAT}",
        *REF_PATTERNS,
    ]


def strip_ansi(line: str) -> str:
    """Drop any colour escapes git embedded in the line."""
    return Text.from_ansi(line).plain


def parse_line(line: str) -> BranchEntry | None:
    """Parse one listing line, or return None if it does not have the expected shape."""
    match = LINE_PATTERN.search(line)
    if match is None:
        return None

    name, age, author = match.groups()
    try:
        return BranchEntry(name=name.strip(), relative_age=age, author=author)
    except ValidationError:
        return None


def parse_refs(lines: str | Iterable[str]) -> list[BranchEntry]:
    """Turn raw listing output into entries, skipping blanks, remote aliases and junk."""
    if isinstance(lines, str):
        lines = lines.splitlines()

    branches: list[BranchEntry] = []
    for raw_line in lines:
        line = strip_ansi(raw_line)
        if not line.strip():
            continue
        if line.startswith(REMOTE_PREFIX):
            continue

        entry = parse_line(line)
        if entry is None:
            logger.debug("Skipping unparseable ref line: %r", line)
            continue
        branches.append(entry)

    return branches


def list_branches(runner: Runner = subprocess.run) -> BranchListResult:
    """List branches by recency.

    Never raises for git failures: the error is returned alongside an empty list
    so the caller can still start the picker.
    """
    cmd = build_listing_command()
    logger.debug("Listing branches cmd=%s", cmd)

    try:
        completed = runner(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        logger.warning("Could not run git: %s", exc)
        return BranchListResult(
            error=RefListingError(
                f"Could not run git: {exc}",
                hint="Make sure git is installed and on PATH.",
            )
        )

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        logger.warning("Branch listing failed returncode=%s stderr=%s", completed.returncode, stderr)
        return BranchListResult(
            error=RefListingError(
                stderr or f"git for-each-ref exited with status {completed.returncode}",
                hint="Run git-recent from inside a git repository.",
            )
        )

    branches = parse_refs(completed.stdout or "")
    logger.debug("Discovered %s branches", len(branches))
    return BranchListResult(branches=branches)
