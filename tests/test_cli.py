from __future__ import annotations

import pytest

from gitrecent import __main__ as cli
from gitrecent.discovery import BranchListResult
from gitrecent.errors import ExitCode, RefListingError, TerminalUnavailableError
from gitrecent.models import BranchEntry, Phase
from gitrecent.picker import SelectionState


def _done_state(branches: list[BranchEntry], **kwargs: object) -> SelectionState:
    return SelectionState(items=tuple(branches), quitting=True, phase=Phase.DONE, **kwargs)


def test_help_lists_flags() -> None:
    help_text = cli.build_parser().format_help()

    assert "--log-level" in help_text
    assert "--log-file" in help_text
    assert "--version" in help_text


def test_listed_branches_are_handed_to_picker(branches: list[BranchEntry]) -> None:
    seen: list[list[BranchEntry]] = []

    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        seen.append(items)
        return _done_state(items, chosen=items[0])

    code = cli.main([], lister=lambda: BranchListResult(branches=branches), picker=picker)

    assert code == 0
    assert seen == [branches]


def test_checkout_failure_still_exits_zero(branches: list[BranchEntry]) -> None:
    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        return _done_state(items, chosen=items[0], terminal_error=RuntimeError("exit status 1"))

    code = cli.main([], lister=lambda: BranchListResult(branches=branches), picker=picker)

    assert code == 0


def test_listing_failure_starts_picker_with_no_branches(capsys: pytest.CaptureFixture) -> None:
    seen: list[list[BranchEntry]] = []

    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        seen.append(items)
        return _done_state(items)

    result = BranchListResult(error=RefListingError("fatal: not a git repository"))
    code = cli.main([], lister=lambda: result, picker=picker)

    assert code == 0
    assert seen == [[]]
    assert "not a git repository" in capsys.readouterr().err


def test_unexpected_picker_failure_exits_one(capsys: pytest.CaptureFixture) -> None:
    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        raise RuntimeError("render blew up")

    code = cli.main([], lister=BranchListResult, picker=picker)

    assert code == 1
    assert "Error running program: render blew up" in capsys.readouterr().err


def test_missing_terminal_is_reported_with_next_step(capsys: pytest.CaptureFixture) -> None:
    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        raise TerminalUnavailableError(
            "stdin is not a terminal", hint="Run git-recent from an interactive terminal."
        )

    code = cli.main([], lister=BranchListResult, picker=picker)

    err = capsys.readouterr().err
    assert code == int(ExitCode.RUNTIME_ERROR)
    assert "Error: stdin is not a terminal." in err
    assert "Next step: Run git-recent from an interactive terminal." in err


def test_interrupt_escaping_the_picker_exits_zero() -> None:
    def picker(items: list[BranchEntry], **_: object) -> SelectionState:
        raise KeyboardInterrupt

    assert cli.main([], lister=BranchListResult, picker=picker) == 0


def test_invalid_log_level_is_rejected() -> None:
    code = cli.main(["--log-level", "chatty"], lister=BranchListResult)

    assert code == 2
