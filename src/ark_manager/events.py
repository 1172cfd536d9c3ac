"""Events consumed by the main loop, and the thread that produces input events.

Everything the main loop reacts to arrives through one queue: key presses,
ticks, and results of background service actions. The main loop
handles one event at a time.
"""

from __future__ import annotations

import logging
import queue
import sys
import threading
from dataclasses import dataclass
from typing import Callable, Union

import readchar

from .types import ServiceAction

try:
    import termios
    import tty
except ImportError:  # Windows
    termios = None
    tty = None

logger = logging.getLogger(__name__)

# What a key read raises once stdin is gone (closed pipe, hung-up tty)
_READ_ERRORS: tuple[type[BaseException], ...] = (EOFError, OSError, ValueError)
if termios is not None:
    _READ_ERRORS += (termios.error,)


@dataclass(frozen=True)
class KeyPressed:
    key: str


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class ServiceResult:
    """Text outcome of a background service action."""

    action: ServiceAction
    server_name: str
    text: str


Event = Union[KeyPressed, Tick, ServiceResult]


class EventChannel:
    """Thread-safe FIFO of events for the main loop."""

    def __init__(self):
        self._queue: queue.Queue[Event] = queue.Queue()

    def post(self, event: Event) -> None:
        self._queue.put(event)

    def get(self, timeout: float | None = None) -> Event | None:
        """Block for the next event; None if ``timeout`` expires first."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None


class InputPump:
    """Background thread that blocks on readchar and posts each key.

    readchar switches the terminal into raw mode for the duration of each
    read, so the read itself is the only place a key can be picked up.
    Ticks come from a separate Ticker so a parked read never delays them.
    """

    def __init__(
        self,
        channel: EventChannel,
        read_key: Callable[[], str] = readchar.readkey,
    ):
        self.channel = channel
        self._read_key = read_key
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="input-pump", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 0.1) -> None:
        # A read in flight cannot be interrupted; the daemon thread dies with the process
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                key = self._read_key()
            except KeyboardInterrupt:
                key = readchar.key.CTRL_C
            except _READ_ERRORS as e:
                logger.debug(f"stdin closed, stopping input pump: {e}")
                key = ""

            if self._stop.is_set():
                return
            if not key:
                # End of input means nobody can press q any more
                self.channel.post(KeyPressed(readchar.key.CTRL_C))
                return
            self.channel.post(KeyPressed(key))


class Ticker:
    """Background timer that posts a Tick every ``interval`` seconds."""

    def __init__(self, channel: EventChannel, interval: float):
        self.channel = channel
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="ticker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.interval + 0.1)

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.channel.post(Tick())


class TerminalMode:
    """Hold the terminal in cbreak mode for the session and restore it on exit.

    Keys are not echoed between reads, and Ctrl+C still raises SIGINT. The
    saved attributes are also what gets restored if the input thread is
    stopped while readchar has the terminal in raw mode.
    """

    def __init__(self, stream=None):
        self.stream = stream or sys.stdin
        self._saved = None
        self._fd: int | None = None

    def __enter__(self) -> "TerminalMode":
        if termios is None:
            return self
        try:
            self._fd = self.stream.fileno()
            self._saved = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        except (termios.error, OSError, ValueError, AttributeError):
            # Not a tty (tests, pipes): nothing to restore
            self._saved = None
        return self

    def __exit__(self, *exc) -> bool:
        if self._saved is not None and self._fd is not None:
            try:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            except (termios.error, OSError) as e:
                logger.warning(f"Could not restore terminal mode: {e}")
        return False
