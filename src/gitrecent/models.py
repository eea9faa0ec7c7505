"""
Data models for the branch picker.

`BranchEntry` is the immutable, validated record produced by the reference
lister. The event classes are the only things the picker loop ever consumes.
"""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BranchEntry(BaseModel):
    """One selectable reference, as listed by git."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)  # checkout argument
    relative_age: str  # e.g. "3 days ago", display only
    author: str  # last committer, display only


class Phase(str, Enum):
    """Where the picker is in its lifecycle."""

    BROWSING = "browsing"
    EXECUTING = "executing"  # checkout in flight
    DONE = "done"


@dataclass(frozen=True)
class KeyPressed:
    """A decoded keypress such as "j", "enter", "up" or "ctrl+c"."""

    key: str


@dataclass(frozen=True)
class Resized:
    """The terminal width changed (or is being reported for the first time)."""

    width: int


@dataclass(frozen=True)
class CheckoutFinished:
    """Completion of the checkout subprocess; `error` is None on success."""

    error: Exception | None = None


Event = KeyPressed | Resized | CheckoutFinished
