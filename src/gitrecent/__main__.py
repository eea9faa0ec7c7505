"""
git-recent - Main entry point.

Pick a recently used branch and check it out.
"""

import argparse
import sys
from collections.abc import Callable, Sequence
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from rich.console import Console

from .discovery import BranchListResult, list_branches
from .errors import ExitCode, GitRecentError, user_facing_error
from .logging import LOG_LEVELS, configure_logging
from .picker import SelectionState, pick_branch

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def _package_version() -> str:
    try:
        return version("git-recent")
    except PackageNotFoundError:
        return "unknown"


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-recent",
        description="Pick a branch by recency and check it out.",
    )
    parser.add_argument("--log-level", type=_log_level_type, default="WARN")
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write debug logs to this file",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser


def main(
    argv: Sequence[str] | None = None,
    *,
    lister: Callable[[], BranchListResult] = list_branches,
    picker: Callable[..., SelectionState] = pick_branch,
) -> int:
    """Main entry point for git-recent."""
    try:
        namespace = build_parser().parse_args(argv)
    except SystemExit as exc:
        return int(exc.code or 0)

    logger = configure_logging(namespace.log_level, log_file=namespace.log_file)

    result = lister()
    if result.error is not None:
        # Still start the picker; the user can only quit from an empty list
        logger.warning("Could not list branches: %s", result.error)

    console = Console()
    try:
        state = picker(result.branches, console=console)
    except KeyboardInterrupt:
        return int(ExitCode.SUCCESS)
    except GitRecentError as exc:
        logger.debug("Picker failed", exc_info=True)
        Console(stderr=True).print(
            user_facing_error(exc.message, hint=exc.hint),
            style="bold red",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return int(exc.code)
    except Exception as e:
        logger.debug("Picker failed", exc_info=True)
        Console(stderr=True).print(
            f"Error running program: {e}",
            style="bold red",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
        return int(ExitCode.RUNTIME_ERROR)

    if state.chosen is not None and state.terminal_error is None:
        logger.info("Checked out %s", state.chosen.name)
    elif state.terminal_error is not None:
        logger.debug("Checkout failed: %s", state.terminal_error)
    return int(ExitCode.SUCCESS)


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
