"""Cursor arithmetic for lists that can grow and shrink under the cursor.

A cursor is an index into a collection, or None when the collection is
empty. Every function here returns a cursor that is valid for the size it
was given.
"""

from __future__ import annotations

from .types import Server

Cursor = int | None


def clamp(cursor: Cursor, size: int) -> Cursor:
    """Pull ``cursor`` back into ``[0, size)``, or None for an empty list."""
    if size <= 0:
        return None
    if cursor is None:
        return 0
    return max(0, min(cursor, size - 1))


def reset(size: int) -> Cursor:
    """Cursor for a freshly opened list: first element, or None."""
    return 0 if size > 0 else None


def step(cursor: Cursor, size: int, delta: int) -> Cursor:
    """Move ``cursor`` by ``delta`` with wrap-around.

    Moving inside an empty list is a no-op that keeps the cursor at None.
    """
    if size <= 0:
        return None
    current = clamp(cursor, size)
    return (current + delta) % size


def after_delete(removed: int, new_size: int) -> Cursor:
    """Cursor after removing the element at ``removed``.

    Removing index i > 0 selects i - 1. Removing index 0 keeps the cursor on
    the new first element, or None if the list is now empty.
    """
    if new_size <= 0:
        return None
    if removed > 0:
        return min(removed - 1, new_size - 1)
    return 0


def mod_count_for(servers: list[Server], server_cursor: Cursor) -> int:
    if server_cursor is None or not 0 <= server_cursor < len(servers):
        return 0
    return len(servers[server_cursor].mods)
