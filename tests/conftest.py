from __future__ import annotations

import io

import pytest
from rich.console import Console

from gitrecent.models import BranchEntry


def make_branches(count: int) -> list[BranchEntry]:
    return [
        BranchEntry(name=f"feature/{i}", relative_age=f"{i + 1} hours ago", author="alice")
        for i in range(count)
    ]


@pytest.fixture
def branches() -> list[BranchEntry]:
    return [
        BranchEntry(name="main", relative_age="2 days ago", author="alice"),
        BranchEntry(name="feature/x", relative_age="5 hours ago", author="bob"),
        BranchEntry(name="fix/login", relative_age="3 weeks ago", author="carol"),
    ]


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=80, color_system=None, force_terminal=False)
