"""Tests for command dispatch and the navigation state machine."""

from __future__ import annotations

import pytest

from ark_manager.events import ServiceResult
from ark_manager.keys import KeyInput, Symbol
from ark_manager.types import Screen, ServiceAction


def _servers_screen(session, servers):
    store, dispatcher, state = session(servers)
    dispatcher.handle(state, Symbol.SERVERS)
    return store, dispatcher, state


class TestGlobalKeys:
    def test_initial_state(self, session, server_factory):
        _, _, state = session([server_factory("Alpha")])
        assert state.screen is Screen.HOME
        assert state.server_cursor == 0
        assert state.mod_cursor is None

    def test_quit_from_any_screen(self, session):
        _, dispatcher, state = session()
        for screen in Screen:
            state.screen = screen
            assert dispatcher.handle(state, Symbol.QUIT) is True

    def test_home_and_servers(self, session):
        _, dispatcher, state = session()
        assert dispatcher.handle(state, Symbol.SERVERS) is False
        assert state.screen is Screen.SERVERS
        dispatcher.handle(state, Symbol.HOME)
        assert state.screen is Screen.HOME

    def test_unknown_pairs_are_noops(self, session, server_factory):
        store, dispatcher, state = session([server_factory("Alpha", mods=["m"])])
        for screen in Screen:
            for symbol in Symbol:
                if symbol in (Symbol.QUIT, Symbol.HOME, Symbol.SERVERS):
                    continue
                if dispatcher.handles(screen, symbol):
                    continue
                state.screen = screen
                before = (state.server_cursor, state.mod_cursor, state.editing)
                assert dispatcher.handle(state, symbol) is False
                assert state.screen is screen
                assert (state.server_cursor, state.mod_cursor, state.editing) == before
        assert store.saves == 0


class TestServerList:
    def test_next_previous_wrap(self, session, server_factory):
        _, dispatcher, state = _servers_screen(
            session, [server_factory("A", id=0), server_factory("B", id=1), server_factory("C", id=2)]
        )
        dispatcher.handle(state, Symbol.PREVIOUS)
        assert state.server_cursor == 2
        dispatcher.handle(state, Symbol.NEXT)
        assert state.server_cursor == 0

    def test_next_previous_round_trip_from_every_cursor(self, session, server_factory):
        _, dispatcher, state = _servers_screen(
            session, [server_factory(n, id=i) for i, n in enumerate("ABCD")]
        )
        for cursor in range(4):
            state.server_cursor = cursor
            dispatcher.handle(state, Symbol.NEXT)
            dispatcher.handle(state, Symbol.PREVIOUS)
            assert state.server_cursor == cursor

    def test_open(self, session, server_factory):
        _, dispatcher, state = _servers_screen(session, [server_factory("A")])
        dispatcher.handle(state, Symbol.CONFIRM)
        assert state.screen is Screen.SERVER_DETAIL

    def test_add_keeps_cursor_target(self, session, server_factory):
        store, dispatcher, state = _servers_screen(
            session, [server_factory("A", id=0), server_factory("B", id=1)]
        )
        state.server_cursor = 1
        dispatcher.handle(state, Symbol.ADD)
        servers = store.load()
        assert len(servers) == 3
        assert state.server_cursor == 1
        assert servers[state.server_cursor].name == "B"

    def test_add_to_empty_selects_new_server(self, session):
        store, dispatcher, state = _servers_screen(session, [])
        assert state.server_cursor is None
        dispatcher.handle(state, Symbol.ADD)
        assert state.server_cursor == 0
        assert store.server_count() == 1

    def test_delete_only_server(self, session, server_factory):
        store, dispatcher, state = _servers_screen(session, [server_factory("A")])
        dispatcher.handle(state, Symbol.DELETE)
        assert store.load() == []
        assert state.server_cursor is None

    def test_delete_first_keeps_cursor_on_new_first(self, session, server_factory):
        store, dispatcher, state = _servers_screen(
            session, [server_factory("A", id=0), server_factory("B", id=1)]
        )
        dispatcher.handle(state, Symbol.DELETE)
        assert state.server_cursor == 0
        assert store.load()[0].name == "B"

    def test_delete_later_shifts_left(self, session, server_factory):
        store, dispatcher, state = _servers_screen(
            session, [server_factory(n, id=i) for i, n in enumerate("ABC")]
        )
        state.server_cursor = 2
        dispatcher.handle(state, Symbol.DELETE)
        assert state.server_cursor == 1
        assert [s.name for s in store.load()] == ["A", "B"]

    def test_changing_server_resets_mod_cursor(self, session, server_factory):
        _, dispatcher, state = _servers_screen(
            session,
            [server_factory("A", id=0, mods=["1", "2", "3"]), server_factory("B", id=1)],
        )
        state.mod_cursor = 2
        dispatcher.handle(state, Symbol.NEXT)
        assert state.server_cursor == 1
        assert state.mod_cursor is None
        dispatcher.handle(state, Symbol.NEXT)
        assert state.mod_cursor == 0

    def test_empty_collection_actions_are_noops(self, session):
        store, dispatcher, state = _servers_screen(session, [])
        for symbol in (Symbol.NEXT, Symbol.PREVIOUS, Symbol.OPEN, Symbol.CONFIRM, Symbol.DELETE):
            dispatcher.handle(state, symbol)
            assert state.server_cursor is None
            assert state.screen is Screen.SERVERS
        assert store.saves == 0
        assert state.status == ""


class TestServerDetail:
    def test_transitions(self, session, server_factory):
        _, dispatcher, state = _servers_screen(session, [server_factory("A", mods=["m"])])
        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, Symbol.EDIT)
        assert state.screen is Screen.SERVER_EDIT
        dispatcher.handle(state, Symbol.BACK)
        assert state.screen is Screen.SERVER_DETAIL
        dispatcher.handle(state, Symbol.OPEN_MODS)
        assert state.screen is Screen.MOD_LIST
        assert state.mod_cursor == 0
        dispatcher.handle(state, Symbol.BACK)
        dispatcher.handle(state, Symbol.BACK)
        assert state.screen is Screen.SERVERS

    def test_open_mods_on_server_without_mods(self, session, server_factory):
        _, dispatcher, state = _servers_screen(session, [server_factory("A")])
        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, Symbol.OPEN_MODS)
        assert state.screen is Screen.MOD_LIST
        assert state.mod_cursor is None

    def test_stale_mod_cursor_is_reset_on_open_mods(self, session, server_factory):
        _, dispatcher, state = _servers_screen(session, [server_factory("A", mods=["m"])])
        dispatcher.handle(state, Symbol.OPEN)
        state.mod_cursor = 9
        dispatcher.handle(state, Symbol.OPEN_MODS)
        assert state.mod_cursor == 0

    def test_edit_without_server_is_noop(self, session):
        _, dispatcher, state = session([])
        state.screen = Screen.SERVER_DETAIL
        dispatcher.handle(state, Symbol.EDIT)
        dispatcher.handle(state, Symbol.OPEN_MODS)
        assert state.screen is Screen.SERVER_DETAIL


class TestServiceActions:
    def test_submits_action_for_selected_server(self, session, server_factory, fake_services):
        _, dispatcher, state = _servers_screen(
            session, [server_factory("Alpha", service_name="arkserver")]
        )
        dispatcher.handle(state, Symbol.RESTART)
        assert fake_services.calls == [(ServiceAction.RESTART, "arkserver", "Alpha")]
        assert "arkserver" in state.status

    @pytest.mark.parametrize(
        "symbol,action",
        [
            (Symbol.START, ServiceAction.START),
            (Symbol.STOP, ServiceAction.STOP),
            (Symbol.STATUS, ServiceAction.STATUS),
        ],
    )
    def test_available_on_detail_screen(self, session, server_factory, fake_services, symbol, action):
        _, dispatcher, state = _servers_screen(
            session, [server_factory("Alpha", service_name="arkserver")]
        )
        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, symbol)
        assert fake_services.calls == [(action, "arkserver", "Alpha")]

    def test_blank_service_name_is_reported(self, session, server_factory, fake_services):
        _, dispatcher, state = _servers_screen(session, [server_factory("Alpha")])
        dispatcher.handle(state, Symbol.START)
        assert fake_services.calls == []
        assert "no service configured" in state.status

    def test_empty_collection(self, session, fake_services):
        _, dispatcher, state = _servers_screen(session, [])
        dispatcher.handle(state, Symbol.START)
        assert fake_services.calls == []

    def test_result_becomes_status(self, session):
        _, dispatcher, state = session([])
        dispatcher.apply_service_result(
            state, ServiceResult(action=ServiceAction.STATUS, server_name="Alpha", text="active")
        )
        assert "Alpha" in state.status
        assert "active" in state.status


class TestModList:
    def _mods_screen(self, session, server_factory, mods):
        store, dispatcher, state = _servers_screen(session, [server_factory("Alpha", mods=mods)])
        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, Symbol.OPEN_MODS)
        return store, dispatcher, state

    def test_navigation_wraps(self, session, server_factory):
        _, dispatcher, state = self._mods_screen(session, server_factory, ["a", "b"])
        dispatcher.handle(state, Symbol.NEXT)
        assert state.mod_cursor == 1
        dispatcher.handle(state, Symbol.NEXT)
        assert state.mod_cursor == 0
        dispatcher.handle(state, Symbol.PREVIOUS)
        assert state.mod_cursor == 1

    def test_open_detail_and_back(self, session, server_factory):
        _, dispatcher, state = self._mods_screen(session, server_factory, ["a"])
        dispatcher.handle(state, Symbol.CONFIRM)
        assert state.screen is Screen.MOD_DETAIL
        dispatcher.handle(state, Symbol.EDIT)
        assert state.screen is Screen.MOD_EDIT
        dispatcher.handle(state, Symbol.BACK)
        assert state.screen is Screen.MOD_DETAIL
        dispatcher.handle(state, Symbol.BACK)
        assert state.screen is Screen.MOD_LIST

    def test_open_empty_is_noop(self, session, server_factory):
        store, dispatcher, state = self._mods_screen(session, server_factory, [])
        for symbol in (Symbol.NEXT, Symbol.PREVIOUS, Symbol.OPEN, Symbol.DELETE):
            dispatcher.handle(state, symbol)
        assert state.screen is Screen.MOD_LIST
        assert state.mod_cursor is None
        assert store.saves == 0

    def test_delete_policy(self, session, server_factory):
        store, dispatcher, state = self._mods_screen(session, server_factory, ["a", "b", "c"])
        state.mod_cursor = 2
        dispatcher.handle(state, Symbol.DELETE)
        assert state.mod_cursor == 1
        assert [m.name for m in store.load()[0].mods] == ["a", "b"]

    def test_toggle_is_declared_but_inert(self, session, server_factory):
        store, dispatcher, state = self._mods_screen(session, server_factory, ["a"])
        dispatcher.handle(state, Symbol.OPEN)
        assert dispatcher.handles(Screen.MOD_DETAIL, Symbol.TOGGLE)
        dispatcher.handle(state, Symbol.TOGGLE)
        assert store.load()[0].mods[0].enabled is False
        assert store.saves == 0


class TestEditScreens:
    def test_server_field_cursor_wraps_over_five(self, session, server_factory):
        _, dispatcher, state = session([server_factory("A")])
        state.screen = Screen.SERVER_EDIT
        for _ in range(5):
            dispatcher.handle(state, Symbol.NEXT)
        assert state.server_field_cursor == 0
        dispatcher.handle(state, Symbol.PREVIOUS)
        assert state.server_field_cursor == 4

    def test_mod_field_cursor_wraps_over_four(self, session, server_factory):
        _, dispatcher, state = session([server_factory("A", mods=["m"])])
        state.screen = Screen.MOD_EDIT
        dispatcher.handle(state, Symbol.PREVIOUS)
        assert state.mod_field_cursor == 3
        dispatcher.handle(state, Symbol.NEXT)
        assert state.mod_field_cursor == 0

    def test_confirm_starts_editing_and_routes_everything_to_buffer(self, session, server_factory):
        store, dispatcher, state = session([server_factory("A")])
        state.screen = Screen.SERVER_EDIT
        state.server_field_cursor = 1
        dispatcher.handle(state, Symbol.CONFIRM)
        assert state.editing_server and not state.editing_mod
        assert state.scratch_server_field == ""

        dispatcher.handle(state, KeyInput(Symbol.TEXT, "x"))
        dispatcher.handle(state, Symbol.HOME)
        dispatcher.handle(state, Symbol.BACK)
        assert state.screen is Screen.SERVER_EDIT
        assert state.scratch_server_field == "x"
        assert store.saves == 0

    def test_server_edit_commit(self, session, server_factory):
        store, dispatcher, state = session([server_factory("A", service_name="old")])
        state.screen = Screen.SERVER_EDIT
        state.server_field_cursor = 4
        dispatcher.handle(state, Symbol.CONFIRM)
        for ch in "arkserver":
            dispatcher.handle(state, KeyInput(Symbol.TEXT, ch))
        dispatcher.handle(state, Symbol.CONFIRM)
        assert not state.editing
        assert store.load()[0].service_name == "arkserver"
        assert store.saves == 1

    def test_invalid_integer_leaves_file_untouched(self, session, server_factory, db_path):
        store, dispatcher, state = session([server_factory("A", age=3)])
        before = db_path.read_bytes()
        state.screen = Screen.SERVER_EDIT
        state.server_field_cursor = 3
        dispatcher.handle(state, Symbol.CONFIRM)
        for ch in "1a":
            dispatcher.handle(state, KeyInput(Symbol.TEXT, ch))
        dispatcher.handle(state, Symbol.CONFIRM)
        assert state.editing_server
        assert state.scratch_server_field == "1a"
        assert db_path.read_bytes() == before
        assert store.saves == 0

    def test_store_error_on_mutation_leaves_state(self, session, server_factory, db_path):
        store, dispatcher, state = _servers_screen(session, [server_factory("A")])
        db_path.write_text("garbage")
        dispatcher.handle(state, Symbol.DELETE)
        assert state.server_cursor == 0
        assert state.screen is Screen.SERVERS
        assert "corrupt" in state.status.lower()


class TestEndToEnd:
    def test_mod_add_delete_edit(self, session, server_factory):
        store, dispatcher, state = session([server_factory("Alpha")])
        dispatcher.handle(state, Symbol.SERVERS)
        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, Symbol.OPEN_MODS)

        dispatcher.handle(state, Symbol.ADD)
        dispatcher.handle(state, Symbol.ADD)
        mods = store.load()[0].mods
        assert len(mods) == 2
        second_id = mods[1].id

        assert state.mod_cursor == 0
        dispatcher.handle(state, Symbol.DELETE)
        mods = store.load()[0].mods
        assert len(mods) == 1
        assert mods[0].id == second_id

        dispatcher.handle(state, Symbol.OPEN)
        dispatcher.handle(state, Symbol.EDIT)
        dispatcher.handle(state, Symbol.NEXT)
        assert state.mod_field_cursor == 1
        dispatcher.handle(state, Symbol.CONFIRM)
        for ch in "boot":
            dispatcher.handle(state, KeyInput(Symbol.TEXT, ch))
        dispatcher.handle(state, Symbol.CONFIRM)

        assert store.load()[0].mods[0].name == "boot"
        assert not state.editing_mod

    def test_empty_collection_never_writes(self, session):
        store, dispatcher, state = session([])
        dispatcher.handle(state, Symbol.SERVERS)
        for symbol in (Symbol.NEXT, Symbol.PREVIOUS, Symbol.OPEN, Symbol.DELETE):
            dispatcher.handle(state, symbol)
        assert state.server_cursor is None
        assert store.saves == 0
