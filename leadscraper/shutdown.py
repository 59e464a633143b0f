"""Cooperative graceful-shutdown flag driven by process signals."""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import Optional

LOGGER = logging.getLogger(__name__)

SHUTDOWN_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """Process-wide stop request observed at task, page and listing boundaries.

    Setting the flag never cancels in-flight requests; it only stops new work
    from being admitted.
    """

    def __init__(self) -> None:
        self._requested = False
        self._reason: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._loop_signals: list[signal.Signals] = []
        self._previous_handlers: dict[signal.Signals, object] = {}

    @property
    def requested(self) -> bool:
        return self._requested

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def request(self, reason: str = "requested") -> None:
        if self._requested:
            return
        self._requested = True
        self._reason = reason
        LOGGER.warning("Shutdown %s; finishing in-flight work before exit", reason)

    def _on_signal(self, signum: int, _frame=None) -> None:
        self.request(f"signal {signal.Signals(signum).name} received")

    def install(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        loop = loop or asyncio.get_running_loop()
        self._loop = loop
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
                self._loop_signals.append(sig)
            except (NotImplementedError, RuntimeError):
                self._previous_handlers[sig] = signal.signal(sig, self._on_signal)

    def uninstall(self) -> None:
        if self._loop is not None:
            for sig in self._loop_signals:
                self._loop.remove_signal_handler(sig)
        for sig, handler in self._previous_handlers.items():
            signal.signal(sig, handler)
        self._loop = None
        self._loop_signals = []
        self._previous_handlers = {}
