"""Type definitions for ark-manager.

Shared enums and record dataclasses used by the store, the dispatcher and
the renderer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Before 3.11 fromisoformat only takes 3 or 6 fractional digits
_FRACTION = re.compile(r"\.(\d+)")


def _parse_timestamp(raw: Any) -> datetime:
    if not isinstance(raw, str):
        raise TypeError(f"created_at must be a string, got {type(raw).__name__}")
    text = _FRACTION.sub(
        lambda m: "." + (m.group(1) + "000000")[:6],
        raw.replace("Z", "+00:00"),
        count=1,
    )
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _require_int(data: dict[str, Any], key: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"{key} must be a non-negative integer, got {value!r}")
    return value


def _require_str(data: dict[str, Any], key: str, default: str | None = None) -> str:
    value = data.get(key, default) if default is not None else data[key]
    if not isinstance(value, str):
        raise ValueError(f"{key} must be a string, got {value!r}")
    return value


class Screen(str, Enum):
    """Screens of the navigation state machine."""

    HOME = "home"
    SERVERS = "servers"
    SERVER_DETAIL = "server_detail"
    SERVER_EDIT = "server_edit"
    MOD_LIST = "mod_list"
    MOD_DETAIL = "mod_detail"
    MOD_EDIT = "mod_edit"

    def __str__(self) -> str:
        return self.value


class RecordKind(str, Enum):
    """Record kinds that share the edit buffer protocol."""

    SERVER = "server"
    MOD = "mod"

    def __str__(self) -> str:
        return self.value


class ServiceAction(str, Enum):
    """Actions understood by the external service manager."""

    START = "start"
    STOP = "stop"
    RESTART = "restart"
    STATUS = "is-active"

    def __str__(self) -> str:
        return self.value


@dataclass
class Mod:
    """A mod installed on a single server."""

    id: int = 0
    name: str = ""
    category: str = ""
    description: str = ""
    enabled: bool = False
    age: int = 0
    created_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def named(cls, name: str, id: int = 0) -> "Mod":
        return cls(id=id, name=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "enabled": self.enabled,
            "age": self.age,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Mod":
        """Build a Mod from decoded JSON.

        Raises:
            KeyError, TypeError or ValueError when the data does not match
            the schema.
        """
        if not isinstance(data, dict):
            raise TypeError(f"mod must be an object, got {type(data).__name__}")
        enabled = data.get("enabled", False)
        if not isinstance(enabled, bool):
            raise ValueError(f"enabled must be a boolean, got {enabled!r}")
        return cls(
            id=_require_int(data, "id"),
            name=_require_str(data, "name"),
            category=_require_str(data, "category", ""),
            description=_require_str(data, "description", ""),
            enabled=enabled,
            age=_require_int(data, "age"),
            created_at=_parse_timestamp(data["created_at"]),
        )


@dataclass
class Server:
    """A game server and the mods it runs."""

    id: int = 0
    name: str = ""
    category: str = ""
    age: int = 0
    service_name: str = ""
    created_at: datetime = field(default_factory=_utcnow)
    mods: list[Mod] = field(default_factory=list)

    @classmethod
    def named(cls, name: str, id: int = 0) -> "Server":
        return cls(id=id, name=name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "age": self.age,
            "service_name": self.service_name,
            "created_at": self.created_at.isoformat(),
            "mods": [m.to_dict() for m in self.mods],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Server":
        """Build a Server (and its mods) from decoded JSON."""
        if not isinstance(data, dict):
            raise TypeError(f"server must be an object, got {type(data).__name__}")
        mods = data.get("mods", [])
        if not isinstance(mods, list):
            raise TypeError("mods must be a list")
        return cls(
            id=_require_int(data, "id"),
            name=_require_str(data, "name"),
            category=_require_str(data, "category", ""),
            age=_require_int(data, "age"),
            service_name=_require_str(data, "service_name", ""),
            created_at=_parse_timestamp(data["created_at"]),
            mods=[Mod.from_dict(m) for m in mods],
        )


def next_id(records: list[Server] | list[Mod]) -> int:
    """Return an id one past the largest id in ``records`` (0 when empty)."""
    if not records:
        return 0
    return max(r.id for r in records) + 1
