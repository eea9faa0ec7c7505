from __future__ import annotations

import io
import os
import threading
from collections.abc import Iterator

import pytest

from gitrecent.errors import TerminalUnavailableError
from gitrecent.models import CheckoutFinished, KeyPressed, Resized
from gitrecent.terminal import EventSource, TerminalSession, read_key


@pytest.fixture
def pipe() -> Iterator[tuple[int, int]]:
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    for fd in (read_fd, write_fd):
        try:
            os.close(fd)
        except OSError:
            pass


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (b"j", "j"),
        (b"G", "G"),
        (b"\r", "enter"),
        (b"\n", "enter"),
        (b"\x03", "ctrl+c"),
        (b"\x1b[A", "up"),
        (b"\x1b[B", "down"),
        (b"\x1bOD", "left"),
        (b"\x1b[5~", "pgup"),
        (b"\x1b[6~", "pgdown"),
        (b"\x1b[H", "home"),
        (b"\x1b[4~", "end"),
    ],
)
def test_read_key_decodes(pipe: tuple[int, int], raw: bytes, expected: str) -> None:
    read_fd, write_fd = pipe
    os.write(write_fd, raw)

    assert read_key(read_fd) == expected


def test_lone_escape_is_esc(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    os.write(write_fd, b"\x1b")

    assert read_key(read_fd) == "esc"


def test_read_key_returns_empty_on_eof(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    os.close(write_fd)

    assert read_key(read_fd) == ""


def test_first_event_reports_width(pipe: tuple[int, int]) -> None:
    read_fd, _ = pipe
    with EventSource(read_fd, lambda: 91, poll_interval=0.01) as events:
        assert events.next_event() == Resized(91)


def test_width_changes_become_resize_events(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    widths = iter([80, 80, 100, 100])
    with EventSource(read_fd, lambda: next(widths), poll_interval=0.01) as events:
        assert events.next_event() == Resized(80)
        os.write(write_fd, b"k")
        assert events.next_event() == KeyPressed("k")
        assert events.next_event() == Resized(100)


def test_posted_events_wake_the_loop(pipe: tuple[int, int]) -> None:
    read_fd, _ = pipe
    with EventSource(read_fd, lambda: 80, poll_interval=1.0) as events:
        events.next_event()
        events.watch_input = False
        finished = CheckoutFinished()
        threading.Timer(0.05, events.post, args=(finished,)).start()

        assert events.next_event() is finished


def test_input_is_not_read_while_unwatched(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    os.write(write_fd, b"q")
    with EventSource(read_fd, lambda: 80, poll_interval=0.01) as events:
        events.next_event()
        events.watch_input = False
        events.post(CheckoutFinished())

        assert isinstance(events.next_event(), CheckoutFinished)
    assert os.read(read_fd, 1) == b"q"


def test_closed_input_raises_eof(pipe: tuple[int, int]) -> None:
    read_fd, write_fd = pipe
    os.close(write_fd)
    with EventSource(read_fd, lambda: 80, poll_interval=0.01) as events:
        events.next_event()
        with pytest.raises(EOFError):
            events.next_event()


def test_session_requires_a_terminal(pipe: tuple[int, int]) -> None:
    read_fd, _ = pipe
    with os.fdopen(os.dup(read_fd)) as stream:
        with pytest.raises(TerminalUnavailableError):
            TerminalSession(stream)


def test_session_rejects_streams_without_descriptor() -> None:
    with pytest.raises(TerminalUnavailableError):
        TerminalSession(io.StringIO())
