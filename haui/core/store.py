"""Simulation store — single owner of the application state.

Owns the one ``AppState`` instance. Every change goes through
``dispatch(intent)``, which runs the pure reducer, emits the new snapshot
and launches the resulting backend effects as asyncio tasks. When a task
finishes, its outcome is dispatched back as a result intent; failures
become ``OperationFailed`` and never escape into the event loop.

All methods must be called from the thread running the asyncio loop.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from PyQt6.QtCore import QObject, pyqtSignal

from haui.core.client import BackendClient
from haui.core.errors import DecodeError, HaUiError, NotFound, RemoteError, TransportError
from haui.core.i18n import t
from haui.core.intents import (
    Effect,
    FetchSimulation,
    FetchSimulations,
    FetchText,
    Intent,
    Operation,
    OperationFailed,
    ReadFile,
    ReplaceBuffer,
    SimulationFetched,
    SimulationsFetched,
    SubmitSimulation,
    Submitted,
    TextFetched,
)
from haui.core.serializers import pretty_json
from haui.core.state import AppState, initial_state, reduce

logger = logging.getLogger(__name__)

# English labels; translated via operations.<value>
_OPERATION_LABELS: dict[Operation, str] = {
    Operation.LIST: "loading simulations",
    Operation.SELECT: "loading simulation",
    Operation.SOURCE: "loading source",
    Operation.LOG: "loading log",
    Operation.DEVICE_LOG: "loading device log",
    Operation.SUBMIT: "submitting simulation",
    Operation.OPEN_FILE: "opening file",
}


def describe_failure(operation: Operation, exc: Exception) -> str:
    """User-visible message for a failed operation."""
    label = t(f"operations.{operation.value}", _OPERATION_LABELS[operation])
    if isinstance(exc, NotFound):
        template = t("errors.not_found", "Not found ({operation}): {detail}")
    elif isinstance(exc, RemoteError):
        template = t("errors.remote", "Server error ({operation}): {detail}")
    elif isinstance(exc, TransportError):
        template = t("errors.transport", "Backend unreachable ({operation}): {detail}")
    elif isinstance(exc, DecodeError):
        template = t("errors.decode", "Invalid response ({operation}): {detail}")
    elif operation is Operation.OPEN_FILE:
        template = t("errors.open_file", "Could not open file: {detail}")
    else:
        template = "{operation}: {detail}"
    return template.format(operation=label, detail=exc)


def _operation_of(effect: Effect) -> Operation:
    match effect:
        case FetchSimulations():
            return Operation.LIST
        case FetchSimulation():
            return Operation.SELECT
        case FetchText(kind=kind):
            return kind
        case SubmitSimulation():
            return Operation.SUBMIT
        case ReadFile():
            return Operation.OPEN_FILE
    raise TypeError(f"Unknown effect: {effect!r}")


class SimulationStore(QObject):
    """Central state owner between the backend client and the UI.

    The presentation layer connects to ``state_changed`` to render
    snapshots and calls ``dispatch`` with user intents.

    Usage::

        store = SimulationStore(client)
        store.state_changed.connect(render)
        store.dispatch(RefreshList())
        await store.wait_idle()
    """

    # New immutable snapshot (AppState)
    state_changed = pyqtSignal(object)
    # User-visible failure message (also stored in last_error)
    error_occurred = pyqtSignal(str)

    def __init__(
        self,
        client: BackendClient,
        state: AppState | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._client = client
        self._state = state if state is not None else initial_state()
        self._tasks: set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def state(self) -> AppState:
        """Current snapshot (immutable)."""
        return self._state

    @property
    def pending(self) -> int:
        """Number of backend operations in flight."""
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, intent: Intent) -> list[asyncio.Task]:
        """Apply ``intent`` and launch its effects.

        Returns:
            Task handles of the launched backend operations.
        """
        new_state, effects = reduce(self._state, intent)
        if new_state is not self._state:
            self._state = new_state
            self.state_changed.emit(new_state)

        tasks: list[asyncio.Task] = []
        for effect in effects:
            if isinstance(effect, ReadFile):
                # Local file read: synchronous, no suspension point
                self._read_file(effect.path)
            else:
                tasks.append(self._launch(effect))
        return tasks

    async def wait_idle(self) -> None:
        """Wait until no backend operation is in flight (chained ones included)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def _launch(self, effect: Effect) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(self._run(effect))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, effect: Effect) -> None:
        try:
            result = await self._perform(effect)
        except HaUiError as exc:
            operation = _operation_of(effect)
            logger.warning("%s failed: %s", operation.value, exc)
            result = self._failure(operation, exc)
        self.dispatch(result)

    async def _perform(self, effect: Effect) -> Intent:
        client = self._client
        match effect:
            case FetchSimulations(generation=generation):
                overviews = await client.list_simulations()
                return SimulationsFetched(generation, tuple(overviews))

            case FetchSimulation(sim_id=sim_id):
                return SimulationFetched(sim_id, await client.get_simulation(sim_id))

            case FetchText(sim_id=sim_id, generation=generation, kind=Operation.SOURCE):
                source = await client.get_simulation_source(sim_id)
                return TextFetched(sim_id, generation, pretty_json(source))

            case FetchText(sim_id=sim_id, generation=generation, kind=Operation.LOG):
                return TextFetched(sim_id, generation, await client.get_log(sim_id))

            case FetchText(sim_id=sim_id, generation=generation, device_name=name):
                text = await client.get_device_log(sim_id, name)
                return TextFetched(sim_id, generation, text)

            case SubmitSimulation(simulation=simulation):
                return Submitted(await client.submit(simulation))

        raise TypeError(f"Unknown effect: {effect!r}")

    def _read_file(self, path: Path) -> None:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Cannot read %s: %s", path, exc)
            self.dispatch(self._failure(Operation.OPEN_FILE, exc))
            return
        self.dispatch(ReplaceBuffer(text))

    def _failure(self, operation: Operation, exc: Exception) -> OperationFailed:
        message = describe_failure(operation, exc)
        self.error_occurred.emit(message)
        return OperationFailed(operation, message)
