"""
Paginated single-selection list.

A small, reusable list widget: it owns the item sequence and the cursor, knows how
to move the cursor in response to keys, and renders one page of rows plus a
pagination indicator and a help footer. What a row looks like is up to the
``render_item`` callable passed in, so the widget never inspects its items.
"""

from collections.abc import Callable, Sequence
from enum import Enum
from typing import Generic, TypeVar

from rich.text import Text

from .theme import DEFAULT_THEME, Theme

T = TypeVar("T")

# (items, index, is_cursor) -> one styled line
ItemRenderer = Callable[[Sequence[T], int, bool], Text]

# Layout constants
LIST_HEIGHT = 14  # fixed, independent of the terminal height
PAGINATION_HEIGHT = 2  # indicator + padding
HELP_HEIGHT = 2  # footer + padding
DEFAULT_WIDTH = 20


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    FIRST = "first"
    LAST = "last"


KEY_MAPPINGS: dict[Direction, tuple[str, ...]] = {
    Direction.UP: ("up", "k"),
    Direction.DOWN: ("down", "j"),
    Direction.PAGE_UP: ("left", "h", "pgup", "b", "u"),
    Direction.PAGE_DOWN: ("right", "l", "pgdown", "f", "d"),
    Direction.FIRST: ("home", "g"),
    Direction.LAST: ("end", "G"),
}

DEFAULT_HELP: tuple[tuple[str, str], ...] = (
    ("↑/k", "up"),
    ("↓/j", "down"),
    ("←/h", "prev page"),
    ("→/l", "next page"),
    ("g/G", "first/last"),
)


def direction_for_key(key: str) -> Direction | None:
    for direction, keys in KEY_MAPPINGS.items():
        if key in keys:
            return direction
    return None


class ListView(Generic[T]):
    """Scrollable list of opaque items with a cursor that never wraps."""

    def __init__(
        self,
        items: Sequence[T],
        render_item: ItemRenderer,
        *,
        width: int = DEFAULT_WIDTH,
        height: int = LIST_HEIGHT,
        theme: Theme = DEFAULT_THEME,
        help_entries: Sequence[tuple[str, str]] = DEFAULT_HELP,
        empty_message: str = "No items.",
    ):
        self._render_item = render_item
        self.width = max(1, width)
        self.height = height
        self.theme = theme
        self.help_entries = tuple(help_entries)
        self.empty_message = empty_message
        self._items: tuple[T, ...] = ()
        self._cursor = 0
        self.set_items(items)

    @property
    def items(self) -> tuple[T, ...]:
        return self._items

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def per_page(self) -> int:
        return max(1, self.height - PAGINATION_HEIGHT - HELP_HEIGHT)

    @property
    def page(self) -> int:
        return self._cursor // self.per_page

    @property
    def total_pages(self) -> int:
        return max(1, -(-len(self._items) // self.per_page))

    def set_items(self, items: Sequence[T]) -> None:
        """Replace the items and put the cursor back on the first one."""
        self._items = tuple(items)
        self._cursor = 0

    def set_width(self, width: int) -> None:
        self.width = max(1, width)

    def move_cursor(self, direction: Direction) -> bool:
        """Move the cursor, clamping at both ends. Returns True if it moved."""
        if not self._items:
            return False

        last = len(self._items) - 1
        current = self._cursor
        if direction is Direction.UP:
            target = current - 1
        elif direction is Direction.DOWN:
            target = current + 1
        elif direction is Direction.PAGE_UP:
            target = current - self.per_page
        elif direction is Direction.PAGE_DOWN:
            target = current + self.per_page
        elif direction is Direction.FIRST:
            target = 0
        else:
            target = last

        self._cursor = min(max(target, 0), last)
        return self._cursor != current

    def handle_key(self, key: str) -> bool:
        """Apply a navigation key. Returns False if the key is not a navigation key."""
        direction = direction_for_key(key)
        if direction is None:
            return False
        self.move_cursor(direction)
        return True

    def current_selection(self) -> T | None:
        if not self._items:
            return None
        return self._items[self._cursor]

    def render(self, width: int | None = None) -> Text:
        """Render the visible page, the pagination row and the help footer."""
        width = self.width if width is None else max(1, width)

        lines: list[Text] = []
        if not self._items:
            lines.append(Text(self.empty_message, style=self.theme.empty_style))
        else:
            start = self.page * self.per_page
            end = min(start + self.per_page, len(self._items))
            for index in range(start, end):
                line = self._render_item(self._items, index, index == self._cursor)
                line.truncate(width, overflow="ellipsis")
                lines.append(line)

        # Pad so the footer stays put on a short last page
        while len(lines) < self.per_page:
            lines.append(Text())

        lines.append(self._render_pagination(width))
        lines.append(Text())
        lines.append(self._render_help(width))
        lines.append(Text())
        return Text("\n").join(lines)

    def _render_pagination(self, width: int) -> Text:
        total = self.total_pages
        if total <= 1:
            return Text()

        if total * len(self.theme.page_dot) > width:
            return Text(f"{self.page + 1}/{total}", style=self.theme.active_page_style)

        dots = Text()
        for page in range(total):
            style = (
                self.theme.active_page_style if page == self.page else self.theme.inactive_page_style
            )
            dots.append(self.theme.page_dot, style=style)
        return dots

    def _render_help(self, width: int) -> Text:
        help_text = Text()
        for i, (key, description) in enumerate(self.help_entries):
            if i:
                help_text.append(" • ", style=self.theme.help_separator_style)
            help_text.append(key, style=self.theme.help_key_style)
            help_text.append(f" {description}", style=self.theme.help_text_style)
        help_text.truncate(width, overflow="ellipsis")
        return help_text
