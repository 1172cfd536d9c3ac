"""CLI interface for ark-manager.

Running without a subcommand opens the interactive TUI.
"""

from __future__ import annotations

import argparse
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config, theme
from .errors import ProcessInvocationFailed, StoreError
from .store import RecordStore
from .types import Server, ServiceAction

console = Console(highlight=False)
logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _setup_logging(cfg: dict, debug: bool) -> None:
    """Log to a file; the TUI owns the terminal."""
    level = logging.DEBUG if (debug or cfg.get("debug")) else logging.WARNING
    log_path = config.get_log_path(cfg)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)


def _store_from_args(args, cfg: dict) -> RecordStore:
    return RecordStore(config.get_db_path(cfg, override=args.db))


def _fail(message: str, code: int = 1) -> None:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(code)


def _find_server(servers: list[Server], name_or_id: str) -> Server | None:
    for server in servers:
        if server.name == name_or_id or str(server.id) == name_or_id:
            return server
    return None


def cmd_tui(args, cfg: dict) -> None:
    """Run the interactive menu."""
    from .app import App

    store = _store_from_args(args, cfg)
    try:
        app = App(store, cfg, console=console)
    except StoreError as e:
        logger.error(str(e))
        hint = ""
        if not store.exists():
            hint = "\nRun 'ark-manager init' to create an empty store."
        _fail(f"{e}{hint}")
        return
    app.run()


def cmd_init(args, cfg: dict) -> None:
    """Create an empty store, and a default config file if there is none."""
    config_path = config.get_config_path()
    if not config_path.exists():
        try:
            config.save_config(cfg)
        except OSError as e:
            logger.warning(f"Could not write {config_path}: {e}")
        else:
            console.print(f"Config: {config_path}")

    store = _store_from_args(args, cfg)
    try:
        created = store.init(force=args.force)
    except StoreError as e:
        _fail(str(e))
        return
    if not created:
        console.print(f"Already initialized: {store.path}")
        console.print("Use --force to overwrite.")
        return
    console.print(f"Initialized: {store.path}")


def cmd_list(args, cfg: dict) -> None:
    """Print servers and their mods."""
    store = _store_from_args(args, cfg)
    try:
        servers = store.load()
    except StoreError as e:
        _fail(str(e))
        return

    if not servers:
        console.print("[dim]No servers.[/dim]")
        return

    table = Table(title=str(store.path))
    for column in ("ID", "Name", "Category", "Age", "Service", "Mods"):
        table.add_column(column)
    for server in servers:
        mods = ", ".join(
            f"{m.name}" + ("" if m.enabled else " (off)") for m in server.mods
        )
        table.add_row(
            str(server.id),
            escape(server.name),
            escape(server.category),
            str(server.age),
            escape(server.service_name),
            escape(mods),
        )
    console.print(table)


def cmd_status(args, cfg: dict) -> None:
    """Show the service manager's view of one server."""
    from .service import ProcessControl

    store = _store_from_args(args, cfg)
    try:
        servers = store.load()
    except StoreError as e:
        _fail(str(e))
        return

    server = _find_server(servers, args.server)
    if server is None:
        _fail(f"Server not found: {args.server}")
        return
    if not server.service_name.strip():
        _fail(f"{server.name}: no service configured")
        return

    control = ProcessControl(
        manager=config.get_service_manager(cfg),
        timeout=config.get_service_timeout(cfg),
    )
    try:
        text = control.invoke(ServiceAction.STATUS, server.service_name.strip())
    except ProcessInvocationFailed as e:
        _fail(str(e))
        return
    console.print(f"{escape(server.name)}: {escape(text or '(no output)')}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ark-manager",
        description="Terminal menu for ARK servers and their mods",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--db", metavar="PATH", help="Store file (overrides config and $ARK_MANAGER_DB)")
    parser.add_argument("--debug", action="store_true", help="Verbose logging to the log file")

    subparsers = parser.add_subparsers(dest="command")

    init_p = subparsers.add_parser("init", help="Create an empty store")
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing store")
    init_p.set_defaults(func=cmd_init)

    list_p = subparsers.add_parser("list", help="List servers and mods")
    list_p.set_defaults(func=cmd_list)

    status_p = subparsers.add_parser("status", help="Show service status for a server")
    status_p.add_argument("server", help="Server name or id")
    status_p.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = config.load_config()
    _setup_logging(cfg, args.debug)
    theme.set_theme(cfg.get("theme"))

    try:
        if args.command is None:
            cmd_tui(args, cfg)
        else:
            args.func(args, cfg)
    except KeyboardInterrupt:
        print()
        sys.exit(130)


if __name__ == "__main__":
    main()
