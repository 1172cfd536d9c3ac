"""Command dispatch: apply one input symbol to the navigation state.

Transitions live in a table keyed by (screen, symbol). A pair missing from
the table is a no-op, so every input is safe on every screen. Collection
sizes are always read from the store at dispatch time, because add and
delete change the store underneath the cursors.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import fields
from typing import Callable, Protocol

from .edit_buffer import EditBuffer
from .errors import SelectionInvalid, StoreError
from .events import ServiceResult
from .keys import KeyInput, Symbol
from .selection import after_delete, mod_count_for, reset, step
from .state import NavigationState
from .store import RecordStore
from .types import RecordKind, Screen, Server, ServiceAction

logger = logging.getLogger(__name__)

Handler = Callable[[NavigationState], None]


class ServiceSubmitter(Protocol):
    def submit(self, action: ServiceAction, service_name: str, server_name: str): ...


_SERVICE_SYMBOLS: dict[Symbol, ServiceAction] = {
    Symbol.START: ServiceAction.START,
    Symbol.STOP: ServiceAction.STOP,
    Symbol.RESTART: ServiceAction.RESTART,
    Symbol.STATUS: ServiceAction.STATUS,
}


def _restore(state: NavigationState, snapshot: NavigationState) -> None:
    for f in fields(NavigationState):
        setattr(state, f.name, getattr(snapshot, f.name))


def _selected_server(state: NavigationState, servers: list[Server]) -> Server:
    if state.server_cursor is None or not 0 <= state.server_cursor < len(servers):
        raise SelectionInvalid("No server selected")
    return servers[state.server_cursor]


class Dispatcher:
    """Route inputs to the edit buffer or to per-screen handlers.

    Args:
        store: Record store consulted for sizes and used for mutations.
        services: Optional background runner for service actions.
    """

    def __init__(self, store: RecordStore, services: ServiceSubmitter | None = None):
        self.store = store
        self.services = services
        self.edit_buffer = EditBuffer(store)
        self._table: dict[tuple[Screen, Symbol], Handler] = self._build_table()

    def _build_table(self) -> dict[tuple[Screen, Symbol], Handler]:
        table: dict[tuple[Screen, Symbol], Handler] = {
            # Servers list
            (Screen.SERVERS, Symbol.NEXT): lambda s: self._move_server(s, +1),
            (Screen.SERVERS, Symbol.PREVIOUS): lambda s: self._move_server(s, -1),
            (Screen.SERVERS, Symbol.OPEN): self._open_server,
            (Screen.SERVERS, Symbol.CONFIRM): self._open_server,
            (Screen.SERVERS, Symbol.ADD): self._add_server,
            (Screen.SERVERS, Symbol.DELETE): self._delete_server,
            # Server detail
            (Screen.SERVER_DETAIL, Symbol.EDIT): self._edit_server,
            (Screen.SERVER_DETAIL, Symbol.BACK): lambda s: self._go(s, Screen.SERVERS),
            (Screen.SERVER_DETAIL, Symbol.OPEN_MODS): self._open_mods,
            # Server edit
            (Screen.SERVER_EDIT, Symbol.NEXT): lambda s: self._move_field(s, RecordKind.SERVER, +1),
            (Screen.SERVER_EDIT, Symbol.PREVIOUS): lambda s: self._move_field(s, RecordKind.SERVER, -1),
            (Screen.SERVER_EDIT, Symbol.CONFIRM): lambda s: self.edit_buffer.begin(s, RecordKind.SERVER),
            (Screen.SERVER_EDIT, Symbol.BACK): lambda s: self._go(s, Screen.SERVER_DETAIL),
            # Mod list
            (Screen.MOD_LIST, Symbol.NEXT): lambda s: self._move_mod(s, +1),
            (Screen.MOD_LIST, Symbol.PREVIOUS): lambda s: self._move_mod(s, -1),
            (Screen.MOD_LIST, Symbol.OPEN): self._open_mod,
            (Screen.MOD_LIST, Symbol.CONFIRM): self._open_mod,
            (Screen.MOD_LIST, Symbol.BACK): lambda s: self._go(s, Screen.SERVER_DETAIL),
            (Screen.MOD_LIST, Symbol.ADD): self._add_mod,
            (Screen.MOD_LIST, Symbol.DELETE): self._delete_mod,
            # Mod detail
            (Screen.MOD_DETAIL, Symbol.EDIT): self._edit_mod,
            (Screen.MOD_DETAIL, Symbol.BACK): lambda s: self._go(s, Screen.MOD_LIST),
            (Screen.MOD_DETAIL, Symbol.TOGGLE): self._toggle_mod,
            # Mod edit
            (Screen.MOD_EDIT, Symbol.NEXT): lambda s: self._move_field(s, RecordKind.MOD, +1),
            (Screen.MOD_EDIT, Symbol.PREVIOUS): lambda s: self._move_field(s, RecordKind.MOD, -1),
            (Screen.MOD_EDIT, Symbol.CONFIRM): lambda s: self.edit_buffer.begin(s, RecordKind.MOD),
            (Screen.MOD_EDIT, Symbol.BACK): lambda s: self._go(s, Screen.MOD_DETAIL),
        }
        for screen in (Screen.SERVERS, Screen.SERVER_DETAIL):
            for symbol, action in _SERVICE_SYMBOLS.items():
                table[(screen, symbol)] = lambda s, a=action: self._service_action(s, a)
        return table

    def handles(self, screen: Screen, symbol: Symbol) -> bool:
        """Whether (screen, symbol) has a transition (global keys excluded)."""
        return (screen, symbol) in self._table

    # ── entry points ────────────────────────────────────────────────────

    def handle(self, state: NavigationState, inp: KeyInput | Symbol) -> bool:
        """Apply one input.

        Returns:
            True if the program should exit.
        """
        if isinstance(inp, Symbol):
            inp = KeyInput(inp)

        if inp.symbol is Symbol.QUIT:
            return True

        if state.editing:
            self.edit_buffer.handle(state, inp)
            return False

        if inp.symbol is Symbol.HOME:
            state.screen = Screen.HOME
            return False
        if inp.symbol is Symbol.SERVERS:
            state.screen = Screen.SERVERS
            return False

        handler = self._table.get((state.screen, inp.symbol))
        if handler is None:
            return False

        snapshot = copy.copy(state)
        try:
            handler(state)
        except SelectionInvalid as e:
            logger.debug(f"Ignored {inp.symbol} on {state.screen}: {e}")
            _restore(state, snapshot)
        except StoreError as e:
            logger.warning(f"{inp.symbol} on {state.screen} failed: {e}")
            _restore(state, snapshot)
            state.status = str(e)
        return False

    def apply_service_result(self, state: NavigationState, result: ServiceResult) -> None:
        text = result.text or "(no output)"
        state.status = f"{result.server_name}: {result.action} → {text}"

    # ── handlers ────────────────────────────────────────────────────────

    def _go(self, state: NavigationState, screen: Screen) -> None:
        state.screen = screen

    def _move_server(self, state: NavigationState, delta: int) -> None:
        servers = self.store.load()
        new_cursor = step(state.server_cursor, len(servers), delta)
        if new_cursor != state.server_cursor:
            state.server_cursor = new_cursor
            state.mod_cursor = reset(mod_count_for(servers, new_cursor))

    def _open_server(self, state: NavigationState) -> None:
        _selected_server(state, self.store.load())
        state.screen = Screen.SERVER_DETAIL

    def _add_server(self, state: NavigationState) -> None:
        servers = self.store.add_server()
        state.revalidate(servers)
        state.status = f"Added server {servers[-1].id}"

    def _delete_server(self, state: NavigationState) -> None:
        if state.server_cursor is None:
            raise SelectionInvalid("No server to delete")
        removed = state.server_cursor
        servers = self.store.remove_server(removed)
        state.server_cursor = after_delete(removed, len(servers))
        state.mod_cursor = reset(mod_count_for(servers, state.server_cursor))

    def _edit_server(self, state: NavigationState) -> None:
        _selected_server(state, self.store.load())
        state.screen = Screen.SERVER_EDIT

    def _open_mods(self, state: NavigationState) -> None:
        servers = self.store.load()
        _selected_server(state, servers)
        state.mod_cursor = reset(mod_count_for(servers, state.server_cursor))
        state.screen = Screen.MOD_LIST

    def _move_field(self, state: NavigationState, kind: RecordKind, delta: int) -> None:
        state.set_field_cursor(kind, state.field_cursor(kind) + delta)

    def _move_mod(self, state: NavigationState, delta: int) -> None:
        count = self.store.mod_count(state.server_cursor)
        state.mod_cursor = step(state.mod_cursor, count, delta)

    def _open_mod(self, state: NavigationState) -> None:
        self._require_mod(state)
        state.screen = Screen.MOD_DETAIL

    def _add_mod(self, state: NavigationState) -> None:
        if state.server_cursor is None:
            raise SelectionInvalid("No server to add a mod to")
        servers = self.store.add_mod(state.server_cursor)
        state.revalidate(servers)

    def _delete_mod(self, state: NavigationState) -> None:
        if state.server_cursor is None or state.mod_cursor is None:
            raise SelectionInvalid("No mod to delete")
        removed = state.mod_cursor
        servers = self.store.remove_mod(state.server_cursor, removed)
        state.mod_cursor = after_delete(removed, mod_count_for(servers, state.server_cursor))

    def _edit_mod(self, state: NavigationState) -> None:
        self._require_mod(state)
        state.screen = Screen.MOD_EDIT

    def _toggle_mod(self, state: NavigationState) -> None:
        # Declared on the mod detail screen but not wired to any state yet
        logger.debug("Mod toggle is not implemented")

    def _require_mod(self, state: NavigationState) -> None:
        count = self.store.mod_count(state.server_cursor)
        if state.mod_cursor is None or not 0 <= state.mod_cursor < count:
            raise SelectionInvalid("No mod selected")

    def _service_action(self, state: NavigationState, action: ServiceAction) -> None:
        server = _selected_server(state, self.store.load())
        service_name = server.service_name.strip()
        if not service_name:
            state.status = f"{server.name}: no service configured"
            return
        if self.services is None:
            state.status = "Service control is unavailable"
            return
        self.services.submit(action, service_name, server.name)
        state.status = f"{server.name}: {action} {service_name}…"
