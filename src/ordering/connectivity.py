"""Backend connectivity monitor.

Polls the API's ``/health`` endpoint on a background thread so the
storefront can show whether it is online. Each probe has a short timeout
and a failed probe only flips the status; cart and checkout calls never
wait on the monitor.
"""

import threading
from collections.abc import Callable
from enum import Enum

import requests
import structlog

logger = structlog.get_logger(__name__)

PROBE_TIMEOUT_SECONDS = 3.0
PROBE_INTERVAL_SECONDS = 60.0


class ConnectionStatus(Enum):
    CHECKING = "checking"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ConnectivityMonitor:
    def __init__(
        self,
        api_url: str,
        session: requests.Session | None = None,
        timeout: float = PROBE_TIMEOUT_SECONDS,
        interval: float = PROBE_INTERVAL_SECONDS,
    ) -> None:
        self.health_url = f"{api_url.rstrip('/')}/health"
        self.session = session or requests.Session()
        self.timeout = timeout
        self.interval = interval
        self.status = ConnectionStatus.CHECKING
        self._listeners: list[Callable[[ConnectionStatus], None]] = []
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def on_change(self, listener: Callable[[ConnectionStatus], None]) -> None:
        self._listeners.append(listener)

    def check_now(self) -> ConnectionStatus:
        """Probe once and update the status."""
        try:
            response = self.session.get(self.health_url, timeout=self.timeout)
            status = ConnectionStatus.CONNECTED if response.ok else ConnectionStatus.DISCONNECTED
        except requests.RequestException as exc:
            logger.debug("Health probe failed", url=self.health_url, error=str(exc))
            status = ConnectionStatus.DISCONNECTED

        if status != self.status:
            logger.info("Connectivity changed", previous=self.status.value, current=status.value)
            self.status = status
            for listener in list(self._listeners):
                try:
                    listener(status)
                except Exception:
                    logger.exception("Connectivity listener failed", status=status.value)
        return status

    def _run(self) -> None:
        while not self._stop.is_set():
            self.check_now()
            self._stop.wait(self.interval)

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="connectivity-monitor", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=self.timeout + 1)
            self._thread = None
