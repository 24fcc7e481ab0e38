"""Run several services together and stop them as one."""

from __future__ import annotations

import logging
import queue
import threading
import time
from abc import ABC, abstractmethod

_log = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05
DEFAULT_GRACEFUL_SHUTDOWN_TIMEOUT = 5.0


class ServerError(Exception):
    """Raised when the manager cannot start or stop its services."""


class Runnable(ABC):
    """A service the manager can start; ``str()`` gives its name."""

    name: str = ""

    def __str__(self) -> str:
        return self.name

    @abstractmethod
    def start(self, stop: threading.Event) -> None:
        """Start the service; it should wind down once ``stop`` is set."""

    @abstractmethod
    def attempt(self) -> bool:
        """Tell whether the service may still be started."""


class Server:
    """Starts its runnables together and shuts them down gracefully.

    Runnables are keyed by name, so adding one with a name already present
    replaces the earlier one.  A ``graceful_shutdown_timeout`` of zero does
    not wait for the runnables to end; a negative one waits without limit.
    """

    def __init__(self, graceful_shutdown_timeout: float = DEFAULT_GRACEFUL_SHUTDOWN_TIMEOUT) -> None:
        self.graceful_shutdown_timeout = graceful_shutdown_timeout
        self._services: dict[str, Runnable] = {}
        self._lock = threading.Lock()

    def add(self, *args: Runnable) -> None:
        """Add runnables, keyed by their names."""
        for runnable in args:
            self._services[str(runnable)] = runnable

    def start(self, stop: threading.Event | None = None) -> None:
        """Run every service until ``stop`` is set or one of them fails.

        The first error raised by a service is raised again once the others
        have been stopped.
        """
        if stop is None:
            stop = threading.Event()
        with self._lock:
            internal = threading.Event()
            errors: queue.SimpleQueue[Exception] = queue.SimpleQueue()
            threads: list[threading.Thread] = []
            error: Exception | None
            services = list(self._services.values())
            if not all(service.attempt() for service in services):
                error = ServerError(
                    "can't accept new runnable as stop procedure is already engaged"
                )
            else:
                threads = [self._start_runnable(service, internal, errors) for service in services]
                error = self._wait(stop, errors)

            finished = threading.Event()
            try:
                stop_error = self._engage_stop_procedure(internal, threads, errors, finished)
            finally:
                finished.set()

        if stop_error is not None and error is not None:
            raise ServerError(f"{stop_error}, {error}") from error
        if stop_error is not None:
            raise stop_error
        if error is not None:
            raise error

    @staticmethod
    def _start_runnable(
        runnable: Runnable,
        internal: threading.Event,
        errors: queue.SimpleQueue[Exception],
    ) -> threading.Thread:
        def run() -> None:
            try:
                runnable.start(internal)
            except Exception as exc:  # noqa: BLE001 - reported to the manager
                errors.put(exc)

        thread = threading.Thread(target=run, name=f"runnable-{runnable}", daemon=True)
        thread.start()
        return thread

    @staticmethod
    def _wait(stop: threading.Event, errors: queue.SimpleQueue[Exception]) -> Exception | None:
        while True:
            try:
                return errors.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                pass
            if stop.is_set():
                return None

    def _engage_stop_procedure(
        self,
        internal: threading.Event,
        threads: list[threading.Thread],
        errors: queue.SimpleQueue[Exception],
        finished: threading.Event,
    ) -> ServerError | None:
        internal.set()

        def drain() -> None:
            while not finished.is_set():
                try:
                    exc = errors.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                _log.error("error received after stop sequence was engaged: %s", exc)

        threading.Thread(target=drain, name="stop-drain", daemon=True).start()

        timeout = self.graceful_shutdown_timeout
        if timeout == 0:
            return None
        deadline = time.monotonic() + timeout if timeout > 0 else None
        for thread in threads:
            remaining = None if deadline is None else max(deadline - time.monotonic(), 0.0)
            thread.join(remaining)
        if any(thread.is_alive() for thread in threads):
            return ServerError(
                "failed waiting for all runnables to end within grace period of "
                f"{timeout}s: deadline exceeded"
            )
        return None