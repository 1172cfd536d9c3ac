"""Error types shared by the store, dispatcher and process control."""

from __future__ import annotations

from pathlib import Path


class ArkManagerError(RuntimeError):
    """Base error for ark-manager operations."""


class StoreError(ArkManagerError):
    """Base error for record store failures."""


class StoreUnavailable(StoreError):
    """Raised when the backing file is missing or cannot be read/written."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Store unavailable: {path} ({reason})")


class StoreCorrupt(StoreError):
    """Raised when the backing file cannot be decoded into records."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Store corrupt: {path} ({reason})")


class SelectionInvalid(ArkManagerError):
    """Raised when an operation needs a cursor that points at nothing."""


class FieldTypeError(ArkManagerError):
    """Raised when a scratch buffer cannot be coerced to its field type."""

    def __init__(self, field_name: str, buffer: str, expected: str):
        self.field_name = field_name
        self.buffer = buffer
        self.expected = expected
        super().__init__(f"{field_name} expects {expected}, got {buffer!r}")


class ProcessInvocationFailed(ArkManagerError):
    """Raised when the service manager could not be run at all."""

    def __init__(self, command: list[str], reason: str):
        self.command = command
        self.reason = reason
        super().__init__(f"Could not run {' '.join(command)}: {reason}")
