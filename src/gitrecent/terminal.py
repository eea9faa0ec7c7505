"""
Terminal input for the picker loop.

`TerminalSession` owns the tty mode for the life of the picker, `read_key` turns
raw bytes into key names, and `EventSource` merges keypresses, width changes and
events posted from other threads into one ordered stream.
"""

import os
import select
import sys
import termios
import threading
import tty
from collections import deque
from collections.abc import Callable
from typing import TextIO

from .errors import TerminalUnavailableError
from .models import Event, KeyPressed, Resized

ESC_SEQUENCE_TIMEOUT_MS = 25
POLL_INTERVAL_SECONDS = 0.1

CONTROL_KEYS = {
    b"\r": "enter",
    b"\n": "enter",
    b"\x03": "ctrl+c",
    b"\t": "tab",
    b"\x7f": "backspace",
    b"\x08": "backspace",
}

ESCAPE_SEQUENCES = {
    "[A": "up",
    "[B": "down",
    "[C": "right",
    "[D": "left",
    "[H": "home",
    "[F": "end",
    "OA": "up",
    "OB": "down",
    "OC": "right",
    "OD": "left",
    "OH": "home",
    "OF": "end",
    "[1~": "home",
    "[4~": "end",
    "[5~": "pgup",
    "[6~": "pgdown",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def read_key(fd: int) -> str:
    """Read one keypress from `fd` and return its name ("" on EOF)."""
    ch = os.read(fd, 1)
    if not ch:
        return ""
    if ch in CONTROL_KEYS:
        return CONTROL_KEYS[ch]
    if ch != b"\x1b":
        return ch.decode("utf-8", errors="replace")

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "esc"
    if seq not in (b"[", b"O"):
        return "alt+" + seq.decode("utf-8", errors="replace")

    # CSI / SS3: parameter bytes until a final byte in 0x40-0x7e
    body = seq
    while True:
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        body += nxt
        if 0x40 <= nxt[0] <= 0x7E:
            break

    text = body.decode("ascii", errors="replace")
    return ESCAPE_SEQUENCES.get(text, "\x1b" + text)


class TerminalSession:
    """Keep stdin in cbreak mode (no echo, unbuffered) while the picker runs."""

    def __init__(self, stdin: TextIO | None = None):
        stream = stdin or sys.stdin
        try:
            self.fd = stream.fileno()
        except (AttributeError, ValueError, OSError) as exc:
            raise TerminalUnavailableError(
                "stdin has no file descriptor",
                hint="Run git-recent from an interactive terminal.",
            ) from exc
        if not os.isatty(self.fd):
            raise TerminalUnavailableError(
                "stdin is not a terminal",
                hint="Run git-recent from an interactive terminal.",
            )
        self._saved_attrs: list | None = None

    def __enter__(self) -> "TerminalSession":
        self._saved_attrs = termios.tcgetattr(self.fd)
        tty.setcbreak(self.fd, termios.TCSANOW)
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.restore()

    def suspend(self) -> None:
        """Hand the terminal back in its original mode, e.g. to a subprocess."""
        self.restore()

    def restore(self) -> None:
        if self._saved_attrs is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved_attrs)


class EventSource:
    """Ordered stream of picker events.

    Keys are read from `fd` only while `watch_input` is set. Other threads hand
    events in through `post`, which wakes the waiting loop via a pipe. A width
    change is reported as `Resized`, including the initial width.
    """

    def __init__(
        self,
        fd: int,
        width_probe: Callable[[], int],
        *,
        poll_interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.fd = fd
        self.watch_input = True
        self.poll_interval = poll_interval
        self._width_probe = width_probe
        self._last_width: int | None = None
        self._pending: deque[Event] = deque()
        self._lock = threading.Lock()
        self._wake_read, self._wake_write = os.pipe()

    def __enter__(self) -> "EventSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def post(self, event: Event) -> None:
        """Queue an event from any thread."""
        with self._lock:
            self._pending.append(event)
        os.write(self._wake_write, b"\0")

    def next_event(self) -> Event:
        """Block until the next event is available."""
        while True:
            with self._lock:
                if self._pending:
                    return self._pending.popleft()

            width = self._width_probe()
            if width != self._last_width:
                self._last_width = width
                return Resized(width)

            readers = [self._wake_read]
            if self.watch_input:
                readers.append(self.fd)
            ready, _, _ = select.select(readers, [], [], self.poll_interval)

            if self._wake_read in ready:
                os.read(self._wake_read, 512)
                continue
            if self.fd in ready:
                key = read_key(self.fd)
                if not key:
                    raise EOFError("stdin was closed")
                return KeyPressed(key)

    def close(self) -> None:
        for fd in (self._wake_read, self._wake_write):
            try:
                os.close(fd)
            except OSError:
                pass
