"""Frame rendering for the TUI.

Pure functions of (NavigationState, record snapshot). Nothing here touches
the store or changes the state; cursors are clamped locally before use.
"""

from __future__ import annotations

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from . import __version__
from .fields import FieldDescriptor, fields_for
from .selection import clamp
from .state import NavigationState
from .theme import cursor_prefix, get_theme, keybinding_hint, status_style, tab_label
from .types import Mod, RecordKind, Screen, Server

# Tabs shown per screen; the first letter of each is its key
MENU_TITLES: dict[Screen, list[str]] = {
    Screen.HOME: ["Home", "Servers", "Quit"],
    Screen.SERVERS: ["Home", "Servers", "Add", "Delete", "Quit"],
    Screen.SERVER_DETAIL: ["Home", "Servers", "Mods", "Edit", "Back", "Quit"],
    Screen.SERVER_EDIT: ["Home", "Servers", "Back", "Quit"],
    Screen.MOD_LIST: ["Home", "Servers", "Mods", "Add", "Delete", "Back", "Quit"],
    Screen.MOD_DETAIL: ["Home", "Servers", "Mods", "Toggle", "Edit", "Back", "Quit"],
    Screen.MOD_EDIT: ["Home", "Servers", "Mods", "Back", "Quit"],
}

_ACTIVE_TAB: dict[Screen, str] = {
    Screen.HOME: "Home",
    Screen.SERVERS: "Servers",
    Screen.SERVER_DETAIL: "Servers",
    Screen.SERVER_EDIT: "Servers",
    Screen.MOD_LIST: "Mods",
    Screen.MOD_DETAIL: "Mods",
    Screen.MOD_EDIT: "Mods",
}

_SERVICE_HINTS = ["u start", "x stop", "r restart", "i status"]

_HINTS: dict[Screen, list[str]] = {
    Screen.HOME: ["s servers", "q quit"],
    Screen.SERVERS: ["↑↓/jk nav", "enter open", "a add", "d delete", *_SERVICE_HINTS, "q quit"],
    Screen.SERVER_DETAIL: ["e edit", "m mods", *_SERVICE_HINTS, "b back"],
    Screen.SERVER_EDIT: ["↑↓/jk field", "enter edit", "b back"],
    Screen.MOD_LIST: ["↑↓/jk nav", "enter open", "a add", "d delete", "b back"],
    Screen.MOD_DETAIL: ["e edit", "t toggle", "b back"],
    Screen.MOD_EDIT: ["↑↓/jk field", "enter edit", "b back"],
}

_EDITING_HINT = ["type a-z 0-9 space", "enter save", "esc cancel"]


def _fmt(value: object) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d %H:%M:%S %Z")
    return str(value)


def _current_server(state: NavigationState, servers: list[Server]) -> Server | None:
    index = clamp(state.server_cursor, len(servers))
    return servers[index] if index is not None else None


def _current_mod(state: NavigationState, server: Server | None) -> Mod | None:
    if server is None:
        return None
    index = clamp(state.mod_cursor, len(server.mods))
    return server.mods[index] if index is not None else None


def render_tabs(screen: Screen) -> Text:
    active = _ACTIVE_TAB[screen]
    parts = [tab_label(title, title == active) for title in MENU_TITLES[screen]]
    return Text.from_markup(" | ".join(parts))


def render_home() -> RenderableType:
    theme = get_theme()
    banner = Text.from_markup(
        f"\nWelcome\n\nto\n\n[bold {theme.info_rich}]ark-manager[/bold {theme.info_rich}]\n\n"
        f"[{theme.muted_rich}]v{__version__}[/{theme.muted_rich}]\n",
        justify="center",
    )
    return Panel(Align.center(banner), title="Home", box=box.SQUARE)


def _record_list(title: str, names: list[str], cursor: int | None, empty_hint: str) -> Panel:
    theme = get_theme()
    lines = []
    for i, name in enumerate(names):
        label = escape(name) or "(unnamed)"
        if i == cursor:
            lines.append(f"{cursor_prefix(True)}[{theme.highlight_rich}]{label}[/{theme.highlight_rich}]")
        else:
            lines.append(f"{cursor_prefix(False)}{label}")
    if not lines:
        lines.append(f"[{theme.muted_rich}]{empty_hint}[/{theme.muted_rich}]")
    return Panel(Text.from_markup("\n".join(lines)), title=title, box=box.SQUARE)


def _summary_table(title: str, headers: list[str], row: list[str] | None) -> Panel:
    table = Table(box=box.SIMPLE_HEAD, expand=True)
    for header in headers:
        table.add_column(header, style="bold" if header == "Name" else None)
    if row is not None:
        table.add_row(*[escape(cell) for cell in row])
    return Panel(table, title=title, box=box.SQUARE)


def _split(left: RenderableType, right: RenderableType) -> Table:
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(ratio=4)
    grid.add_row(left, right)
    return grid


def render_servers(state: NavigationState, servers: list[Server]) -> RenderableType:
    cursor = clamp(state.server_cursor, len(servers))
    server = _current_server(state, servers)
    row = None
    if server is not None:
        row = [
            _fmt(server.id),
            server.name,
            server.category,
            _fmt(server.age),
            server.service_name,
            _fmt(server.created_at),
            str(len(server.mods)),
        ]
    return _split(
        _record_list("Servers", [s.name for s in servers], cursor, "No servers. Press a to add one."),
        _summary_table(
            "Server Detail",
            ["ID", "Name", "Category", "Age", "Service", "Created At", "Mods"],
            row,
        ),
    )


def _detail_table(title: str, rows: list[tuple[str, str]]) -> Panel:
    table = Table(box=None, show_header=False, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    for label, value in rows:
        table.add_row(f"{label}:", escape(value))
    return Panel(table, title=title, box=box.SQUARE)


def _missing(what: str) -> Panel:
    theme = get_theme()
    return Panel(
        Text.from_markup(f"[{theme.warning_rich}]No {what} selected[/{theme.warning_rich}]"),
        box=box.SQUARE,
    )


def render_server_detail(state: NavigationState, servers: list[Server]) -> RenderableType:
    server = _current_server(state, servers)
    if server is None:
        return _missing("server")
    return _detail_table(
        "Server Detail",
        [
            ("ID", _fmt(server.id)),
            ("Name", server.name),
            ("Category", server.category),
            ("Age", _fmt(server.age)),
            ("Service", server.service_name),
            ("Created At", _fmt(server.created_at)),
            ("Mods", ", ".join(m.name for m in server.mods)),
        ],
    )


def render_mods(state: NavigationState, servers: list[Server]) -> RenderableType:
    server = _current_server(state, servers)
    if server is None:
        return _missing("server")
    cursor = clamp(state.mod_cursor, len(server.mods))
    mod = _current_mod(state, server)
    row = None
    if mod is not None:
        row = [_fmt(mod.id), mod.name, mod.category, _fmt(mod.age), _fmt(mod.created_at)]
    return _split(
        _record_list(
            f"Mods · {escape(server.name)}",
            [m.name for m in server.mods],
            cursor,
            "No mods. Press a to add one.",
        ),
        _summary_table("Mod Detail", ["ID", "Name", "Category", "Age", "Created At"], row),
    )


def render_mod_detail(state: NavigationState, servers: list[Server]) -> RenderableType:
    mod = _current_mod(state, _current_server(state, servers))
    if mod is None:
        return _missing("mod")
    return _detail_table(
        "Mod Detail",
        [
            ("ID", _fmt(mod.id)),
            ("Name", mod.name),
            ("Category", mod.category),
            ("Description", mod.description),
            ("Enabled", _fmt(mod.enabled)),
            ("Age", _fmt(mod.age)),
            ("Created At", _fmt(mod.created_at)),
        ],
    )


def render_edit(
    state: NavigationState,
    kind: RecordKind,
    record: Server | Mod | None,
) -> RenderableType:
    """Editable field table with the field cursor and the live scratch buffer."""
    if record is None:
        return _missing(str(kind))
    theme = get_theme()
    cursor = state.field_cursor(kind)
    editing = state.editing_kind is kind

    table = Table(box=None, show_header=False, padding=(0, 1))
    table.add_column(width=2)
    table.add_column(style="bold")
    table.add_column()
    descriptor: FieldDescriptor
    for i, descriptor in enumerate(fields_for(kind)):
        is_current = i == cursor
        value = escape(_fmt(descriptor.get(record)))
        if is_current and editing:
            buffer = escape(state.scratch(kind))
            value = f"[{theme.accent_rich}]{buffer}█[/{theme.accent_rich}]"
        elif is_current:
            value = f"[{theme.highlight_rich}]{value or ' '}[/{theme.highlight_rich}]"
        table.add_row(
            Text.from_markup(cursor_prefix(is_current)),
            f"{descriptor.label}:",
            Text.from_markup(value),
        )
    title = "Edit Server" if kind is RecordKind.SERVER else "Edit Mod"
    return Panel(table, title=title, box=box.SQUARE)


def render_body(state: NavigationState, servers: list[Server]) -> RenderableType:
    screen = state.screen
    if screen is Screen.HOME:
        return render_home()
    if screen is Screen.SERVERS:
        return render_servers(state, servers)
    if screen is Screen.SERVER_DETAIL:
        return render_server_detail(state, servers)
    if screen is Screen.SERVER_EDIT:
        return render_edit(state, RecordKind.SERVER, _current_server(state, servers))
    if screen is Screen.MOD_LIST:
        return render_mods(state, servers)
    if screen is Screen.MOD_DETAIL:
        return render_mod_detail(state, servers)
    return render_edit(state, RecordKind.MOD, _current_mod(state, _current_server(state, servers)))


def render_footer(state: NavigationState, error: str | None = None) -> Text:
    lines = []
    message = error or state.status
    if message:
        lines.append(status_style(escape(message)))
    hints = _EDITING_HINT if state.editing else _HINTS[state.screen]
    lines.append(keybinding_hint(hints))
    return Text.from_markup("\n".join(lines))


def render(
    state: NavigationState,
    servers: list[Server] | None,
    error: str | None = None,
) -> RenderableType:
    """Render one full frame.

    Args:
        state: Current navigation state.
        servers: Snapshot of the collection, or None if it could not be read.
        error: Message shown instead of the status line (e.g. a store error).
    """
    theme = get_theme()
    tabs = Panel(render_tabs(state.screen), title="Menu", box=box.SQUARE)
    body = render_body(state, servers if servers is not None else [])
    return Panel(
        Group(tabs, body, render_footer(state, error)),
        title=f"[bold {theme.accent_rich}]ark-manager[/bold {theme.accent_rich}]",
        border_style=theme.muted_rich,
        box=box.ROUNDED,
    )
