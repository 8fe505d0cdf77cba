"""Client worker — background thread hosting the asyncio loop.

Runs the BackendClient and the SimulationStore off the UI thread so that
network I/O never blocks the presentation layer. Intents go in through
``post()`` (thread-safe); snapshots come out through ``state_changed``.
"""

from __future__ import annotations

import asyncio
import logging
import threading

import httpx
from PyQt6.QtCore import Qt, QThread, pyqtSignal

from haui.config import ClientConfig, get_config
from haui.core.client import BackendClient
from haui.core.intents import Intent, RefreshList
from haui.core.state import AppState
from haui.core.store import SimulationStore

logger = logging.getLogger(__name__)


class ClientWorker(QThread):
    """Background thread owning the backend client and the state store.

    Signals:
        state_changed(object): New AppState snapshot.
        error_occurred(str): User-visible failure message.

    Usage:
        worker = ClientWorker(get_config())
        worker.state_changed.connect(window.render)
        worker.start()
        worker.post(SelectSimulation(sim_id))
        ...
        worker.stop()
        worker.wait()
    """

    state_changed = pyqtSignal(object)    # AppState
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        config: ClientConfig | None = None,
        refresh_on_start: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self._config = config if config is not None else get_config()
        self._refresh_on_start = refresh_on_start
        self._transport = transport
        self._lock = threading.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stop_event: asyncio.Event | None = None
        self._store: SimulationStore | None = None
        self._backlog: list[Intent] = []
        self._stop_requested = False

    @property
    def store(self) -> SimulationStore | None:
        """Store instance while the thread runs (worker-thread use only)."""
        return self._store

    def post(self, intent: Intent) -> None:
        """Queue an intent for the store. Safe to call from any thread.

        Intents posted before the loop is running are delivered in order
        once it starts.
        """
        with self._lock:
            # The loop stays open while _loop is set, so schedule under the lock
            if self._loop is None:
                self._backlog.append(intent)
                return
            self._loop.call_soon_threadsafe(self._dispatch, intent)

    def stop(self) -> None:
        """Ask the loop to finish outstanding requests and exit."""
        with self._lock:
            self._stop_requested = True
            if self._loop is not None and self._stop_event is not None:
                self._loop.call_soon_threadsafe(self._stop_event.set)

    def run(self) -> None:
        """Execute the asyncio loop in the background thread."""
        try:
            asyncio.run(self._main())
        except Exception as e:
            logger.exception("Client worker crashed")
            self.error_occurred.emit(str(e))

    async def _main(self) -> None:
        stop_event = asyncio.Event()
        async with BackendClient(
            self._config.endpoint,
            timeout=self._config.timeout,
            transport=self._transport,
        ) as client:
            store = SimulationStore(client)
            # Relay in the worker thread; receivers pick their own connection
            store.state_changed.connect(
                self._relay_state, Qt.ConnectionType.DirectConnection,
            )
            store.error_occurred.connect(
                self._relay_error, Qt.ConnectionType.DirectConnection,
            )
            self._store = store

            with self._lock:
                self._loop = asyncio.get_running_loop()
                self._stop_event = stop_event
                backlog, self._backlog = self._backlog, []
                stop_requested = self._stop_requested

            logger.info("Client worker started (endpoint %s)", client.endpoint)
            self.state_changed.emit(store.state)
            if self._refresh_on_start:
                store.dispatch(RefreshList())
            for intent in backlog:
                store.dispatch(intent)
            if stop_requested:
                stop_event.set()

            await stop_event.wait()

            with self._lock:
                self._loop = None
                self._stop_event = None
            # Bounded by the client timeout
            await store.wait_idle()
            self._store = None
        logger.info("Client worker stopped")

    def _dispatch(self, intent: Intent) -> None:
        if self._store is not None:
            self._store.dispatch(intent)

    def _relay_state(self, state: AppState) -> None:
        self.state_changed.emit(state)

    def _relay_error(self, message: str) -> None:
        self.error_occurred.emit(message)
