"""Semantic style helpers for the TUI screens."""

from __future__ import annotations

import os
from dataclasses import dataclass

@dataclass(frozen=True)
class TuiTheme:
    """Semantic palette tokens for Rich renderables."""

    name: str
    accent_rich: str
    info_rich: str
    success_rich: str
    warning_rich: str
    error_rich: str
    muted_rich: str
    highlight_rich: str


_BASE_THEME = TuiTheme(
    name="default",
    accent_rich="color(130)",  # warm rust
    info_rich="color(24)",     # deep blue
    success_rich="color(28)",  # dark green
    warning_rich="color(136)",  # ochre
    error_rich="color(124)",   # brick red
    muted_rich="grey50",
    highlight_rich="bold black on yellow",
)

_THEMES: dict[str, TuiTheme] = {
    "default": _BASE_THEME,
    "mono": TuiTheme(
        name="mono",
        accent_rich="bold",
        info_rich="default",
        success_rich="default",
        warning_rich="bold",
        error_rich="bold",
        muted_rich="dim",
        highlight_rich="reverse",
    ),
}

_current_theme: TuiTheme = _BASE_THEME


def set_theme(name: str | None = None) -> TuiTheme:
    """Select the active theme by name, or from $ARK_MANAGER_THEME."""
    global _current_theme

    key = (name or os.environ.get("ARK_MANAGER_THEME") or "default").strip().lower()
    _current_theme = _THEMES.get(key, _BASE_THEME)
    return _current_theme


def get_theme() -> TuiTheme:
    """Return current active theme."""
    return _current_theme


def cursor_prefix(is_current: bool) -> str:
    """Return the standard row cursor prefix."""
    if not is_current:
        return "  "
    theme = get_theme()
    return f"[{theme.accent_rich}]❯[/{theme.accent_rich}] "


def tab_label(title: str, is_active: bool) -> str:
    """Render a menu tab with its hotkey (first letter) underlined."""
    theme = get_theme()
    first, rest = title[:1], title[1:]
    head = f"[underline {theme.warning_rich}]{first}[/underline {theme.warning_rich}]"
    if is_active:
        return f"[bold {theme.accent_rich}]{head}{rest}[/bold {theme.accent_rich}]"
    return f"{head}{rest}"


def status_style(text: str) -> str:
    """Style the status line; errors stand out."""
    theme = get_theme()
    lowered = text.lower()
    if any(word in lowered for word in ("error", "fail", "unavailable", "corrupt", "must be")):
        color = theme.error_rich
    else:
        color = theme.info_rich
    return f"[{color}]{text}[/{color}]"


def keybinding_hint(actions: list[str]) -> str:
    """Return a standardized dim keybinding hint line."""
    theme = get_theme()
    joined = " · ".join(actions)
    return f"[{theme.muted_rich}]{joined}[/{theme.muted_rich}]"
