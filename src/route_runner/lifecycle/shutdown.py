"""
Shutdown coordination.

Termination requests (SIGINT / SIGTERM, interpreter exit, the console's
``exit`` command) all converge on :meth:`ShutdownCoordinator.shutdown`,
which runs ``LifecycleManager.stop()`` and then sets the exit event the
main loop waits on.

Signal handlers only record the request and set the exit event; the main
loop runs the stop through :meth:`ShutdownCoordinator.complete_pending_stop`.
A handler never takes the manager lock, so a second signal arriving while
the main thread is draining cannot block on it.

``stop()`` is idempotent and serialized, so a console command racing a
signal results in one stop sequence; the second caller observes
``stopped`` and returns.
"""

from __future__ import annotations

import atexit
import signal
import threading
from types import FrameType
from typing import Any

from route_runner.core.logging import LogContext, get_logger
from route_runner.lifecycle.manager import LifecycleManager

logger = get_logger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Routes process-termination requests through the lifecycle manager."""

    def __init__(self, manager: LifecycleManager):
        self._manager = manager
        self._exit = threading.Event()
        self._previous_handlers: dict[int, Any] = {}
        self._atexit_registered = False
        self._stop_reason: str | None = None

    @property
    def exit_requested(self) -> bool:
        return self._exit.is_set()

    @property
    def stop_requested(self) -> bool:
        """True once a signal has asked for a stop."""
        return self._stop_reason is not None

    def install(self, signals: tuple[signal.Signals, ...] = DEFAULT_SIGNALS, register_atexit: bool = True) -> bool:
        """Install termination handlers. Returns False off the main thread."""
        if register_atexit and not self._atexit_registered:
            atexit.register(self._on_exit)
            self._atexit_registered = True

        try:
            for sig in signals:
                self._previous_handlers[sig] = signal.signal(sig, self._handle_signal)
        except (ValueError, OSError):
            logger.debug("shutdown.signals_skipped", reason="not in main thread")
            return False
        return True

    def uninstall(self) -> None:
        """Restore previous signal handlers and drop the exit hook."""
        for sig, handler in self._previous_handlers.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError):
                pass  # Not in main thread
        self._previous_handlers.clear()
        if self._atexit_registered:
            atexit.unregister(self._on_exit)
            self._atexit_registered = False

    def shutdown(self, reason: str) -> None:
        """Stop the manager, then release the main loop."""
        with LogContext(component="shutdown"):
            logger.info("shutdown.invoked", reason=reason, state=self._manager.state.value)
            try:
                self._manager.stop()
            except Exception:
                logger.exception("shutdown.stop_failed", reason=reason)
            finally:
                self.request_exit()

    def request_exit(self) -> None:
        """Signal the main control loop to exit without stopping anything."""
        self._exit.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until exit is requested; True once it has been."""
        return self._exit.wait(timeout)

    def complete_pending_stop(self) -> bool:
        """Run the stop a signal requested. Returns False if none is pending.

        Must be called from the main loop, never from a signal handler.
        """
        reason = self._stop_reason
        if reason is None:
            return False
        self.shutdown(reason=reason)
        return True

    def _handle_signal(self, signum: int, frame: FrameType | None) -> None:
        name = signal.Signals(signum).name
        if self._stop_reason is None:
            self._stop_reason = f"signal:{name}"
            logger.info("shutdown.signal_received", signal=name)
        else:
            logger.info("shutdown.signal_repeated", signal=name, pending=self._stop_reason)
        self._exit.set()

    def _on_exit(self) -> None:
        self.shutdown(reason="atexit")
