"""Main loop for the interactive TUI."""

from __future__ import annotations

import logging
from typing import Any

from rich.console import Console, RenderableType
from rich.live import Live

from . import config
from .dispatch import Dispatcher
from .errors import StoreError
from .events import Event, EventChannel, InputPump, KeyPressed, ServiceResult, TerminalMode, Ticker
from .keys import translate
from .render import render
from .service import ProcessControl, ServiceRunner
from .state import NavigationState
from .store import RecordStore

logger = logging.getLogger(__name__)


class App:
    """Owns the navigation state and processes one event at a time.

    Args:
        store: Record store for the session.
        cfg: Loaded configuration dict.
        console: Rich console to draw on.
        channel: Event queue; created if not given.
    """

    def __init__(
        self,
        store: RecordStore,
        cfg: dict[str, Any] | None = None,
        console: Console | None = None,
        channel: EventChannel | None = None,
    ):
        self.store = store
        self.cfg = cfg if cfg is not None else config.load_config()
        self.console = console or Console(highlight=False)
        self.channel = channel or EventChannel()

        # Fails fast with StoreUnavailable/StoreCorrupt
        servers = store.load()
        self.state = NavigationState.initial(servers)

        control = ProcessControl(
            manager=config.get_service_manager(self.cfg),
            timeout=config.get_service_timeout(self.cfg),
        )
        self.services = ServiceRunner(control, self.channel.post)
        self.dispatcher = Dispatcher(store, self.services)

    def frame(self) -> RenderableType:
        try:
            servers = self.store.load()
        except StoreError as e:
            logger.warning(f"Could not read store for redraw: {e}")
            return render(self.state, None, error=str(e))
        return render(self.state, servers)

    def process(self, event: Event) -> bool:
        """Apply one event. Returns True when the app should exit."""
        if isinstance(event, KeyPressed):
            return self.dispatcher.handle(self.state, translate(event.key, self.state.editing))
        if isinstance(event, ServiceResult):
            self.dispatcher.apply_service_result(self.state, event)
        # Ticks carry no transition
        return False

    def run(self) -> None:
        """Block in the event loop until quit. Restores the terminal on exit.

        Ctrl+C arrives either as a key (while readchar holds raw mode) or as
        SIGINT in this thread; both end the session normally.
        """
        tick_rate = config.get_tick_rate(self.cfg)
        pump = InputPump(self.channel)
        ticker = Ticker(self.channel, tick_rate)
        with TerminalMode():
            try:
                with Live(
                    self.frame(),
                    console=self.console,
                    screen=True,
                    auto_refresh=False,
                    transient=True,
                ) as live:
                    pump.start()
                    ticker.start()
                    while True:
                        # Timeout keeps SIGINT deliverable while idle
                        event = self.channel.get(timeout=tick_rate)
                        if event is None:
                            continue
                        if self.process(event):
                            break
                        live.update(self.frame(), refresh=True)
            except KeyboardInterrupt:
                logger.info("Interrupted, quitting")
            finally:
                ticker.stop()
                pump.stop()
                self.services.shutdown()
        logger.info("Exited cleanly")
