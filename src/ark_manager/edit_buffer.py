"""Scratch-buffer editing shared by servers and mods.

An edit session starts on confirm in an edit screen, collects typed
characters into the scratch buffer of the record kind being edited, and
commits the buffer into the field under the field cursor on the next
confirm. The field tables in fields.py decide the target attribute and
its type, so the same code serves both record kinds.
"""

from __future__ import annotations

import logging

from .errors import FieldTypeError, SelectionInvalid, StoreError
from .fields import FieldDescriptor, fields_for
from .keys import KeyInput, Symbol
from .state import NavigationState
from .store import RecordStore
from .types import RecordKind

logger = logging.getLogger(__name__)


def _target_indexes(state: NavigationState, kind: RecordKind) -> tuple[int, int | None]:
    """Return (server_index, mod_index) for the record being edited."""
    if state.server_cursor is None:
        raise SelectionInvalid("No server selected")
    if kind is RecordKind.MOD:
        if state.mod_cursor is None:
            raise SelectionInvalid("No mod selected")
        return state.server_cursor, state.mod_cursor
    return state.server_cursor, None


def current_field(state: NavigationState, kind: RecordKind) -> FieldDescriptor:
    return fields_for(kind)[state.field_cursor(kind)]


class EditBuffer:
    """Edit session handling for one NavigationState."""

    def __init__(self, store: RecordStore):
        self.store = store

    def begin(self, state: NavigationState, kind: RecordKind) -> None:
        """Start capturing text for the field under the cursor.

        Raises:
            SelectionInvalid: there is no record to edit.
        """
        _target_indexes(state, kind)
        state.set_scratch(kind, "")
        state.set_editing(kind, True)
        state.status = ""

    def handle(self, state: NavigationState, inp: KeyInput) -> None:
        """Apply one input to the active edit session."""
        kind = state.editing_kind
        if kind is None:
            return

        if inp.symbol is Symbol.TEXT:
            state.set_scratch(kind, state.scratch(kind) + inp.text)
        elif inp.symbol is Symbol.BACKSPACE:
            # Accepted but intentionally inert
            pass
        elif inp.symbol is Symbol.CANCEL:
            state.set_editing(kind, False)
            state.set_scratch(kind, "")
            state.status = "Edit cancelled"
        elif inp.symbol is Symbol.CONFIRM:
            self.commit(state, kind)

    def commit(self, state: NavigationState, kind: RecordKind) -> bool:
        """Write the scratch buffer into the store.

        Returns:
            True if the field was saved and the session ended. On a type
            error or store error the session stays open and the record is
            left untouched.
        """
        descriptor = current_field(state, kind)
        buffer = state.scratch(kind)

        try:
            value = descriptor.coerce(buffer)
        except FieldTypeError as e:
            logger.info(f"Rejected {kind} edit: {e}")
            state.status = f"{descriptor.label} must be a non-negative number"
            return False

        try:
            server_index, mod_index = _target_indexes(state, kind)
            self.store.set_field(server_index, mod_index, descriptor.name, value)
        except SelectionInvalid as e:
            # Record vanished underneath the session; nothing left to edit
            logger.debug(f"Dropping {kind} edit: {e}")
            state.set_editing(kind, False)
            return False
        except StoreError as e:
            logger.warning(f"Could not save {kind} {descriptor.name}: {e}")
            state.status = str(e)
            return False

        state.set_editing(kind, False)
        state.status = f"Saved {descriptor.label}"
        logger.debug(f"Saved {kind} {descriptor.name}={value!r}")
        return True
