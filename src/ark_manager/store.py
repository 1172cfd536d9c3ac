"""JSON record store.

The whole collection is read and rewritten on every mutation. Writes go to
a temp file in the same directory and are renamed into place, so a crash
never leaves a half-written store behind. There is no locking: one
interactive writer is assumed.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from .errors import SelectionInvalid, StoreCorrupt, StoreUnavailable
from .types import Mod, Server, next_id

logger = logging.getLogger(__name__)

NEW_SERVER_NAME = "New Server"
NEW_MOD_NAME = "New Mod"


def _atomic_write_text(path: Path, content: str) -> None:
    """Write content to path atomically (temp file + rename)."""
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
        os.write(fd, content.encode("utf-8"))
        os.fsync(fd)
        os.close(fd)
        fd = None
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class RecordStore:
    """Load and save the full server collection from a JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def init(self, force: bool = False) -> bool:
        """Create an empty store.

        Returns:
            True if a file was written, False if one already existed.
        """
        if self.exists() and not force:
            return False
        self.save([])
        return True

    def load(self) -> list[Server]:
        """Read the full collection.

        Raises:
            StoreUnavailable: file missing or unreadable.
            StoreCorrupt: content is not a list of valid server records.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise StoreUnavailable(self.path, "file not found") from None
        except (OSError, UnicodeDecodeError) as e:
            raise StoreUnavailable(self.path, str(e)) from e

        try:
            data: Any = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StoreCorrupt(self.path, f"invalid JSON: {e}") from e

        if not isinstance(data, list):
            raise StoreCorrupt(self.path, "top level must be a list of servers")
        try:
            return [Server.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise StoreCorrupt(self.path, f"schema mismatch: {e}") from e

    def save(self, servers: list[Server]) -> None:
        """Rewrite the full collection.

        Raises:
            StoreUnavailable: the file could not be written.
        """
        content = json.dumps([s.to_dict() for s in servers], indent=2, ensure_ascii=False)
        try:
            _atomic_write_text(self.path, content + "\n")
        except OSError as e:
            raise StoreUnavailable(self.path, str(e)) from e
        logger.debug(f"Saved {len(servers)} server(s) to {self.path}")

    # ── read helpers ────────────────────────────────────────────────────

    def server_count(self) -> int:
        return len(self.load())

    def mod_count(self, server_index: int | None) -> int:
        """Number of mods on the server at ``server_index`` (0 if none)."""
        servers = self.load()
        if server_index is None or not 0 <= server_index < len(servers):
            return 0
        return len(servers[server_index].mods)

    # ── read-modify-write mutations ─────────────────────────────────────

    def add_server(self) -> list[Server]:
        servers = self.load()
        servers.append(Server.named(NEW_SERVER_NAME, id=next_id(servers)))
        self.save(servers)
        return servers

    def remove_server(self, index: int | None) -> list[Server]:
        servers = self.load()
        _check_index(index, len(servers), "server")
        removed = servers.pop(index)
        self.save(servers)
        logger.info(f"Removed server {removed.id} ({removed.name})")
        return servers

    def add_mod(self, server_index: int | None) -> list[Server]:
        servers = self.load()
        _check_index(server_index, len(servers), "server")
        mods = servers[server_index].mods
        mods.append(Mod.named(NEW_MOD_NAME, id=next_id(mods)))
        self.save(servers)
        return servers

    def remove_mod(self, server_index: int | None, mod_index: int | None) -> list[Server]:
        servers = self.load()
        _check_index(server_index, len(servers), "server")
        mods = servers[server_index].mods
        _check_index(mod_index, len(mods), "mod")
        removed = mods.pop(mod_index)
        self.save(servers)
        logger.info(f"Removed mod {removed.id} ({removed.name}) from server {server_index}")
        return servers

    def set_field(
        self,
        server_index: int | None,
        mod_index: int | None,
        field_name: str,
        value: Any,
    ) -> list[Server]:
        """Set one attribute on a server (``mod_index`` None) or one of its mods."""
        servers = self.load()
        _check_index(server_index, len(servers), "server")
        target: Server | Mod = servers[server_index]
        if mod_index is not None:
            mods = servers[server_index].mods
            _check_index(mod_index, len(mods), "mod")
            target = mods[mod_index]
        setattr(target, field_name, value)
        self.save(servers)
        return servers


def _check_index(index: int | None, size: int, what: str) -> None:
    if index is None or not 0 <= index < size:
        raise SelectionInvalid(f"No {what} selected (index={index}, size={size})")
