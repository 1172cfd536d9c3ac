"""Navigation state owned by the main loop.

One NavigationState exists per run. Only the dispatcher mutates it; the
renderer reads it.
"""

from __future__ import annotations

from dataclasses import dataclass

from .fields import fields_for
from .selection import Cursor, clamp, mod_count_for, reset
from .types import RecordKind, Screen, Server


@dataclass
class NavigationState:
    """Where the user is and what is selected."""

    screen: Screen = Screen.HOME
    server_cursor: Cursor = None
    mod_cursor: Cursor = None
    server_field_cursor: int = 0
    mod_field_cursor: int = 0
    editing_server: bool = False
    editing_mod: bool = False
    scratch_server_field: str = ""
    scratch_mod_field: str = ""
    status: str = ""

    @classmethod
    def initial(cls, servers: list[Server]) -> "NavigationState":
        state = cls(server_cursor=reset(len(servers)))
        state.mod_cursor = reset(mod_count_for(servers, state.server_cursor))
        return state

    @property
    def editing(self) -> bool:
        return self.editing_server or self.editing_mod

    @property
    def editing_kind(self) -> RecordKind | None:
        if self.editing_server:
            return RecordKind.SERVER
        if self.editing_mod:
            return RecordKind.MOD
        return None

    # Per-kind accessors used by the edit buffer protocol

    def field_cursor(self, kind: RecordKind) -> int:
        if kind is RecordKind.SERVER:
            return self.server_field_cursor
        return self.mod_field_cursor

    def set_field_cursor(self, kind: RecordKind, value: int) -> None:
        value %= len(fields_for(kind))
        if kind is RecordKind.SERVER:
            self.server_field_cursor = value
        else:
            self.mod_field_cursor = value

    def scratch(self, kind: RecordKind) -> str:
        if kind is RecordKind.SERVER:
            return self.scratch_server_field
        return self.scratch_mod_field

    def set_scratch(self, kind: RecordKind, value: str) -> None:
        if kind is RecordKind.SERVER:
            self.scratch_server_field = value
        else:
            self.scratch_mod_field = value

    def set_editing(self, kind: RecordKind, active: bool) -> None:
        # Never both at once
        self.editing_server = active and kind is RecordKind.SERVER
        self.editing_mod = active and kind is RecordKind.MOD

    def revalidate(self, servers: list[Server]) -> None:
        """Clamp both cursors against a fresh snapshot of the collection."""
        self.server_cursor = clamp(self.server_cursor, len(servers))
        self.mod_cursor = clamp(self.mod_cursor, mod_count_for(servers, self.server_cursor))
