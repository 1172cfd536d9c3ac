"""Service manager integration (systemctl by default).

ProcessControl runs one action synchronously and returns its text output.
ServiceRunner runs actions on a worker pool and posts the outcome as a
ServiceResult event, so the UI thread never waits on the service manager.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable

from .errors import ProcessInvocationFailed
from .events import Event, ServiceResult
from .types import ServiceAction

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class ProcessControl:
    """Invoke ``<manager> <action> <service>`` and capture what it says."""

    def __init__(self, manager: str = "systemctl", timeout: float = DEFAULT_TIMEOUT):
        self.manager = manager
        self.timeout = timeout

    def command(self, action: ServiceAction, service_name: str) -> list[str]:
        return [self.manager, str(action), service_name]

    def invoke(self, action: ServiceAction, service_name: str) -> str:
        """Run the action and return stdout, or stderr when stdout is empty.

        Raises:
            ProcessInvocationFailed: the manager is missing, could not be
                started, or did not finish within the timeout.
        """
        cmd = self.command(action, service_name)
        executable = shutil.which(self.manager) or self.manager
        logger.info(f"Running {' '.join(cmd)}")
        try:
            result = subprocess.run(
                [executable, *cmd[1:]],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise ProcessInvocationFailed(cmd, f"{self.manager} not found") from None
        except subprocess.TimeoutExpired:
            raise ProcessInvocationFailed(cmd, f"timed out after {self.timeout:g}s") from None
        except OSError as e:
            raise ProcessInvocationFailed(cmd, str(e)) from e

        output = (result.stdout or "").strip()
        if not output:
            output = (result.stderr or "").strip()
        logger.debug(f"{' '.join(cmd)} exited {result.returncode}: {output!r}")
        return output


class ServiceRunner:
    """Run service actions off the UI thread.

    Args:
        control: ProcessControl used for each invocation.
        post: Callback that enqueues an event for the main loop. Called
            from a worker thread.
    """

    def __init__(
        self,
        control: ProcessControl,
        post: Callable[[Event], None],
        max_workers: int = 2,
    ):
        self.control = control
        self.post = post
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="service")

    def submit(self, action: ServiceAction, service_name: str, server_name: str) -> Future:
        return self._executor.submit(self._run, action, service_name, server_name)

    def _run(self, action: ServiceAction, service_name: str, server_name: str) -> None:
        try:
            text = self.control.invoke(action, service_name)
        except ProcessInvocationFailed as e:
            logger.warning(str(e))
            text = str(e)
        self.post(ServiceResult(action=action, server_name=server_name, text=text))

    def shutdown(self) -> None:
        # Running invocations are bounded by the subprocess timeout
        self._executor.shutdown(wait=False, cancel_futures=True)
