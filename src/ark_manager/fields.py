"""Editable field tables for each record kind.

The edit screens, the renderer and the commit routine all index into
these tables, so adding an editable attribute means adding one row here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .errors import FieldTypeError
from .types import Mod, RecordKind, Server


@dataclass(frozen=True)
class FieldDescriptor:
    """One editable attribute of a record kind."""

    name: str
    label: str
    type: type

    def get(self, record: Server | Mod) -> Any:
        return getattr(record, self.name)

    def coerce(self, buffer: str) -> Any:
        """Convert a scratch buffer to this field's type.

        Raises:
            FieldTypeError: integer field given anything but ASCII digits.
        """
        if self.type is int:
            if not buffer or not (buffer.isascii() and buffer.isdigit()):
                raise FieldTypeError(self.name, buffer, "a non-negative integer")
            return int(buffer)
        return buffer


SERVER_FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor("id", "ID", int),
    FieldDescriptor("name", "Name", str),
    FieldDescriptor("category", "Category", str),
    FieldDescriptor("age", "Age", int),
    FieldDescriptor("service_name", "Service", str),
)

# description and enabled are shown on the detail screen but not editable
MOD_FIELDS: tuple[FieldDescriptor, ...] = (
    FieldDescriptor("id", "ID", int),
    FieldDescriptor("name", "Name", str),
    FieldDescriptor("category", "Category", str),
    FieldDescriptor("age", "Age", int),
)

_FIELDS_BY_KIND: dict[RecordKind, tuple[FieldDescriptor, ...]] = {
    RecordKind.SERVER: SERVER_FIELDS,
    RecordKind.MOD: MOD_FIELDS,
}


def fields_for(kind: RecordKind) -> tuple[FieldDescriptor, ...]:
    return _FIELDS_BY_KIND[kind]
