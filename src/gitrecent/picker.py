"""
Interactive branch picker.

Shows recent branches in a paginated list, lets the user move around with the
keyboard and checks out the branch they confirm. All state changes go through
`BranchPicker.update`, one event at a time; the checkout runs on a worker thread
and reports back through the same event stream, so the loop itself never needs a
lock.
"""

import contextlib
import logging as py_logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from rich.console import Console, RenderableType
from rich.live import Live
from rich.text import Text

from .checkout import run_checkout
from .listview import DEFAULT_HELP, DEFAULT_WIDTH, ListView
from .models import BranchEntry, CheckoutFinished, Event, KeyPressed, Phase, Resized
from .terminal import EventSource, TerminalSession
from .theme import DEFAULT_THEME, Theme

logger = py_logging.getLogger(__name__)

KEY_MAPPINGS = {
    "quit": ("q", "esc", "ctrl+c"),
    "select": ("enter",),
}

HELP_ENTRIES = (*DEFAULT_HELP, ("enter", "checkout"), ("q", "quit"))


class Action(str, Enum):
    """What the loop should do after an event has been applied."""

    CONTINUE = "continue"
    CHECKOUT = "checkout"
    QUIT = "quit"


class Events(Protocol):
    watch_input: bool

    def next_event(self) -> Event: ...

    def post(self, event: Event) -> None: ...


@dataclass
class SelectionState:
    """Mutable picker state. Frozen in practice once `quitting` is set."""

    items: tuple[BranchEntry, ...]
    chosen: BranchEntry | None = None
    terminal_error: Exception | None = None
    quitting: bool = False
    phase: Phase = Phase.BROWSING


class BranchRowRenderer:
    """Render one branch row: marker, faded age, then the name."""

    def __init__(self, theme: Theme = DEFAULT_THEME):
        self.theme = theme

    def __call__(self, items: Sequence[BranchEntry], index: int, is_cursor: bool) -> Text:
        entry = items[index]
        if not isinstance(entry, BranchEntry):
            return Text()

        if is_cursor:
            marker, style = self.theme.selected_marker, self.theme.selected_item_style
        else:
            marker, style = self.theme.item_marker, self.theme.item_style

        row = Text(marker)
        row.append(f"({entry.relative_age})", style=self.theme.faded_style)
        row.append(f" {entry.name}", style=style)
        return row


class BranchPicker:
    """Selection controller: browse, confirm, check out, done."""

    def __init__(
        self,
        branches: Sequence[BranchEntry],
        *,
        console: Console | None = None,
        theme: Theme = DEFAULT_THEME,
        checkout: Callable[[str], None] = run_checkout,
        width: int = DEFAULT_WIDTH,
    ):
        self.console = console or Console()
        self.theme = theme
        self._checkout = checkout
        self._checkout_started = False
        self.state = SelectionState(items=tuple(branches))
        self.list: ListView[BranchEntry] = ListView(
            self.state.items,
            BranchRowRenderer(theme),
            width=width,
            theme=theme,
            help_entries=HELP_ENTRIES,
            empty_message="No branches.",
        )

    @property
    def cursor_index(self) -> int:
        return self.list.cursor

    def update(self, event: Event) -> Action:
        """Apply one event to the state and say what the loop should do next."""
        if self.state.phase is Phase.DONE:
            return Action.QUIT

        if isinstance(event, Resized):
            self.list.set_width(event.width)
            return Action.CONTINUE

        if isinstance(event, CheckoutFinished):
            if self.state.phase is not Phase.EXECUTING:
                logger.debug("Ignoring checkout completion while %s", self.state.phase.value)
                return Action.CONTINUE
            if event.error is not None:
                self.state.terminal_error = event.error
            return self._finish()

        if isinstance(event, KeyPressed) and self.state.phase is Phase.BROWSING:
            return self._handle_keypress(event.key)

        return Action.CONTINUE

    def _handle_keypress(self, key: str) -> Action:
        if key in KEY_MAPPINGS["quit"]:
            return self._finish()
        if key in KEY_MAPPINGS["select"]:
            return self._confirm()
        self.list.handle_key(key)
        return Action.CONTINUE

    def _confirm(self) -> Action:
        selected = self.list.current_selection()
        if not isinstance(selected, BranchEntry):
            return self._finish()

        self.state.chosen = selected
        self.state.phase = Phase.EXECUTING
        return Action.CHECKOUT

    def _finish(self) -> Action:
        self.state.quitting = True
        self.state.phase = Phase.DONE
        logger.debug(
            "Picker done chosen=%s error=%s",
            self.state.chosen.name if self.state.chosen else None,
            self.state.terminal_error,
        )
        return Action.QUIT

    def render(self) -> RenderableType:
        """Build the current view: the error once a checkout failed, else the list."""
        if self.state.terminal_error is not None:
            return Text(f"\n error: {self.state.terminal_error}", style=self.theme.error_style)
        return Text.assemble("\n", self.list.render())

    def run(self, events: Events | None = None) -> SelectionState:
        """Run the event loop until the picker is done and return the final state."""
        with contextlib.ExitStack() as stack:
            session: TerminalSession | None = None
            if events is None:
                session = stack.enter_context(TerminalSession())
                events = stack.enter_context(
                    EventSource(session.fd, lambda: self.console.size.width)
                )
            executor = stack.enter_context(
                ThreadPoolExecutor(max_workers=1, thread_name_prefix="git-checkout")
            )
            live = stack.enter_context(
                Live(self.render(), console=self.console, auto_refresh=False, screen=True)
            )

            while self.state.phase is not Phase.DONE:
                try:
                    self._step(events, live, session, executor)
                except KeyboardInterrupt:
                    self._handle_interrupt()

        if self.state.terminal_error is not None:
            self.console.print(self.render())
        return self.state

    def _step(
        self,
        events: Events,
        live: Live,
        session: TerminalSession | None,
        executor: ThreadPoolExecutor,
    ) -> None:
        """Consume one event and carry out whatever it asks for."""
        action = self.update(events.next_event())
        if action is Action.CHECKOUT:
            # The subprocess owns the screen and the tty until it exits
            live.stop()
            if session is not None:
                session.suspend()
            events.watch_input = False
            self._start_checkout(executor, events)
        elif action is Action.CONTINUE and live.is_started:
            live.update(self.render(), refresh=True)

    def _handle_interrupt(self) -> None:
        """Ctrl+C can land anywhere in a step; map it onto the current phase."""
        if self.state.phase is Phase.BROWSING:
            self.update(KeyPressed("ctrl+c"))
        elif self.state.phase is Phase.EXECUTING and not self._checkout_started:
            # git never ran, so no completion will ever arrive
            logger.debug("Interrupted before checkout started")
            self._finish()
        # Otherwise git got the same signal and reports back itself

    def _start_checkout(self, executor: ThreadPoolExecutor, events: Events) -> None:
        branch = self.state.chosen
        if branch is None:
            raise RuntimeError("checkout requested without a chosen branch")
        logger.debug("Starting checkout of %s", branch.name)

        def checkout_and_report(name: str) -> None:
            try:
                self._checkout(name)
            except Exception as exc:
                events.post(CheckoutFinished(error=exc))
            else:
                events.post(CheckoutFinished())

        executor.submit(checkout_and_report, branch.name)
        self._checkout_started = True


def pick_branch(
    branches: Sequence[BranchEntry],
    console: Console | None = None,
    theme: Theme = DEFAULT_THEME,
) -> SelectionState:
    """Launch the interactive branch picker."""
    return BranchPicker(branches, console=console, theme=theme).run()
