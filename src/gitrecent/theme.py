"""Styles for the branch list, built once and handed to the renderers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """Rich style strings and marker glyphs used by the picker."""

    item_style: str = "color(36)"
    selected_item_style: str = "bold color(50)"
    faded_style: str = "dim"
    empty_style: str = "dim"
    item_marker: str = "☆ "
    selected_marker: str = "★ "

    # Pagination dots
    active_page_style: str = "color(252)"
    inactive_page_style: str = "color(238)"
    page_dot: str = "•"

    # Help footer
    help_key_style: str = "color(244)"
    help_text_style: str = "color(240)"
    help_separator_style: str = "color(238)"

    error_style: str = "bold red"


DEFAULT_THEME = Theme()
