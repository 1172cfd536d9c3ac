"""Keyboard input helpers.

Raw keys from readchar are turned into Symbols here, so the dispatcher only
ever sees what a key means, never which key it was.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum

import readchar

# Characters the edit buffer accepts. Everything else is dropped.
EDIT_ALPHABET = frozenset(string.ascii_lowercase + string.digits + " ")


class Symbol(str, Enum):
    """Input symbols understood by the dispatcher."""

    QUIT = "quit"
    HOME = "home"
    SERVERS = "servers"
    NEXT = "next"
    PREVIOUS = "previous"
    OPEN = "open"
    CONFIRM = "confirm"
    BACK = "back"
    ADD = "add"
    DELETE = "delete"
    EDIT = "edit"
    OPEN_MODS = "open_mods"
    TOGGLE = "toggle"
    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "status"
    BACKSPACE = "backspace"
    CANCEL = "cancel"
    TEXT = "text"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class KeyInput:
    """A translated key press. ``text`` is set only for Symbol.TEXT."""

    symbol: Symbol
    text: str = ""


def is_enter(key: str) -> bool:
    """Check if key is Enter/Return."""
    return key in (readchar.key.ENTER, "\r", "\n")


def is_escape(key: str) -> bool:
    """Check if key is Escape (handles terminal variations)."""
    return key in (readchar.key.ESC, "\x1b", "\x1b\x1b")


def is_up(key: str) -> bool:
    """Check if key is up arrow or vim 'k'."""
    return key == "k" or key == readchar.key.UP


def is_down(key: str) -> bool:
    """Check if key is down arrow or vim 'j'."""
    return key == "j" or key == readchar.key.DOWN


def is_backspace(key: str) -> bool:
    """Check if key is backspace (handles terminal variations)."""
    return key in (readchar.key.BACKSPACE, "\x7f", "\b")


def is_interrupt(key: str) -> bool:
    return key == readchar.key.CTRL_C


def is_editable_char(key: str) -> bool:
    """Check if key belongs to the edit buffer alphabet (a-z, 0-9, space)."""
    return len(key) == 1 and key in EDIT_ALPHABET


# Single-letter commands outside of edit mode
_COMMAND_KEYS: dict[str, Symbol] = {
    "q": Symbol.QUIT,
    "h": Symbol.HOME,
    "s": Symbol.SERVERS,
    "b": Symbol.BACK,
    "a": Symbol.ADD,
    "d": Symbol.DELETE,
    "e": Symbol.EDIT,
    "m": Symbol.OPEN_MODS,
    "t": Symbol.TOGGLE,
    "u": Symbol.START,
    "x": Symbol.STOP,
    "r": Symbol.RESTART,
    "i": Symbol.STATUS,
}


def translate(key: str, editing: bool = False) -> KeyInput:
    """Map a raw key to a KeyInput.

    While editing, letters are text rather than commands, so the same key
    can mean different things depending on ``editing``.
    """
    if is_interrupt(key):
        return KeyInput(Symbol.QUIT)

    if editing:
        if is_enter(key):
            return KeyInput(Symbol.CONFIRM)
        if is_backspace(key):
            return KeyInput(Symbol.BACKSPACE)
        if is_escape(key):
            return KeyInput(Symbol.CANCEL)
        if is_editable_char(key):
            return KeyInput(Symbol.TEXT, key)
        return KeyInput(Symbol.UNKNOWN)

    if is_enter(key):
        return KeyInput(Symbol.CONFIRM)
    if is_down(key):
        return KeyInput(Symbol.NEXT)
    if is_up(key):
        return KeyInput(Symbol.PREVIOUS)
    if is_escape(key):
        return KeyInput(Symbol.BACK)
    return KeyInput(_COMMAND_KEYS.get(key, Symbol.UNKNOWN))
