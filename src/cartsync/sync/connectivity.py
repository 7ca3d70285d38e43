"""Connectivity monitoring.

The engine calls ``refresh()`` before every cycle and subscribes to
transitions so that regaining the network triggers an automatic sync.
``currently_connected()`` only reports the last-known state.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import Callable
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

ConnectivityCallback = Callable[[bool], None]


class ConnectivityMonitor:
    """Base monitor: tracks last-known state and notifies on transitions."""

    def __init__(self, connected: bool = True) -> None:
        self._connected = connected
        self._callbacks: list[ConnectivityCallback] = []
        self._lock = threading.Lock()

    def currently_connected(self) -> bool:
        """Return the last-known connectivity state."""
        return self._connected

    def refresh(self) -> bool:
        """Bring the state up to date and return it."""
        return self.currently_connected()

    def subscribe(self, callback: ConnectivityCallback) -> Callable[[], None]:
        """Register a transition callback. Returns a function that unsubscribes it."""
        with self._lock:
            self._callbacks.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return unsubscribe

    def _update(self, connected: bool) -> None:
        """Record a new state; callbacks fire only when it actually changed."""
        with self._lock:
            changed = connected != self._connected
            self._connected = connected
            callbacks = list(self._callbacks)
        if not changed:
            return
        logger.info("Network state changed: %s", "online" if connected else "offline")
        for callback in callbacks:
            try:
                callback(connected)
            except Exception:
                logger.exception("Connectivity callback failed")


class ManualConnectivityMonitor(ConnectivityMonitor):
    """Monitor whose state is pushed in from outside (OS events, tests)."""

    def set_connected(self, connected: bool) -> None:
        self._update(connected)


class ProbeConnectivityMonitor(ConnectivityMonitor):
    """Monitor that probes the remote host with a TCP connect.

    ``refresh()`` connects so the engine's pre-cycle check reflects the network
    right now. ``poll()`` and the optional background thread emit
    transitions for subscribers.
    """

    def __init__(
        self,
        host: str,
        port: int = 443,
        timeout: float = 3.0,
        interval: float = 30.0,
    ) -> None:
        super().__init__(connected=False)
        self.host = host
        self.port = port
        self.timeout = timeout
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @classmethod
    def for_url(cls, url: str, timeout: float = 3.0, interval: float = 30.0) -> ProbeConnectivityMonitor:
        """Build a monitor probing the host of a service URL."""
        parsed = urlparse(url)
        port = parsed.port or (80 if parsed.scheme == "http" else 443)
        return cls(parsed.hostname or "", port=port, timeout=timeout, interval=interval)

    def probe(self) -> bool:
        """Attempt one TCP connection to the probe target."""
        if not self.host:
            return False
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout):
                return True
        except OSError as e:
            logger.debug("Probe of %s:%d failed: %s", self.host, self.port, e)
            return False

    def poll(self) -> bool:
        """Probe now, record the result and notify on a transition."""
        connected = self.probe()
        self._update(connected)
        return connected

    def refresh(self) -> bool:
        return self.poll()

    def start(self) -> None:
        """Start polling in a daemon thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity-probe", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the polling thread."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.timeout + 1)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.is_set():
            self.poll()
            self._stop.wait(self.interval)
