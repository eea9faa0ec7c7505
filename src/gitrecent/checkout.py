"""Switch the working tree to a branch by running ``git checkout``."""

import logging as py_logging
import subprocess
from collections.abc import Callable

from .errors import CheckoutError

logger = py_logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]


def build_checkout_command(name: str) -> list[str]:
    return ["git", "checkout", name]


def run_checkout(name: str, runner: Runner = subprocess.run) -> None:
    """Run the checkout with stdout/stderr attached to the terminal.

    Blocks until git exits. Raises `CheckoutError` if git cannot be started or
    exits with a non-zero status.
    """
    cmd = build_checkout_command(name)
    logger.debug("Running %s", cmd)

    try:
        completed = runner(cmd, check=False)
    except OSError as exc:
        raise CheckoutError(f"could not run git checkout: {exc}") from exc

    if completed.returncode != 0:
        logger.debug("Checkout of %s failed returncode=%s", name, completed.returncode)
        raise CheckoutError(
            f"git checkout {name}: exit status {completed.returncode}",
            returncode=completed.returncode,
        )

    logger.debug("Checked out %s", name)
