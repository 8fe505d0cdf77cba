"""Application state and its pure reducer.

``reduce(state, intent)`` returns the next immutable ``AppState`` plus the
effects the store must run. Nothing here performs I/O except loading the
bundled default document once.

Race guard: results are applied in completion order, so every result
intent is checked against the current state before it is committed:

  - a list is applied only if it answers the latest refresh
  - a detail is applied only if its id is the latest requested selection
  - text is applied only if its id is the selected simulation and it
    answers the latest text request made since the last selection
"""

from __future__ import annotations

import dataclasses
import functools
import logging
from dataclasses import dataclass
from uuid import UUID

from haui.constants import DEFAULT_SIMULATION_PATH
from haui.core.errors import DecodeError, ValidationError
from haui.core.i18n import t
from haui.core.intents import (
    EditBuffer,
    Effect,
    FetchSimulation,
    FetchSimulations,
    FetchText,
    Intent,
    OpenFile,
    Operation,
    OperationFailed,
    ReadFile,
    RefreshList,
    ReplaceBuffer,
    ResetBuffer,
    SelectSimulation,
    ShowDeviceLog,
    ShowLog,
    ShowSource,
    SimulationFetched,
    SimulationsFetched,
    Submit,
    SubmitSimulation,
    Submitted,
    TextFetched,
)
from haui.core.serializers import loads_simulation
from haui.models.results import SimulationDetail, SimulationOverview, SubmittedSimulation
from haui.models.simulation import Simulation

logger = logging.getLogger(__name__)


@functools.cache
def default_simulation_text() -> str:
    """Template document used to seed a new submission buffer."""
    return DEFAULT_SIMULATION_PATH.read_text(encoding="utf-8")


@dataclass(frozen=True)
class AppState:
    """Snapshot of everything the presentation layer renders.

    Attributes:
        simulation_list: Overviews, newest first.
        selected: Currently displayed simulation (id, detail).
        displayed_text: Source or log text tied to ``selected``.
        editor_buffer: Submission buffer.
        last_error: Last failure message, kept until the next attempt.
        last_submission: Acknowledgement of the last successful submit.
        pending_selection: Id of the most recently requested selection.
        list_generation: Number of refreshes issued.
        text_generation: Number of text fetches issued.
    """
    simulation_list: tuple[SimulationOverview, ...] = ()
    selected: tuple[UUID, SimulationDetail] | None = None
    displayed_text: str | None = None
    editor_buffer: str = ""
    last_error: str | None = None
    last_submission: SubmittedSimulation | None = None
    pending_selection: UUID | None = None
    list_generation: int = 0
    text_generation: int = 0

    @property
    def selected_id(self) -> UUID | None:
        return self.selected[0] if self.selected is not None else None

    @property
    def selected_detail(self) -> SimulationDetail | None:
        return self.selected[1] if self.selected is not None else None


def initial_state() -> AppState:
    return AppState(editor_buffer=default_simulation_text())


def validate_buffer(text: str) -> Simulation:
    """Decode the editor buffer as a Simulation.

    Raises:
        ValidationError: buffer is not JSON or does not match the schema.
    """
    try:
        return loads_simulation(text)
    except DecodeError as exc:
        raise ValidationError(str(exc)) from exc


def sort_overviews(overviews) -> tuple[SimulationOverview, ...]:
    """Newest first."""
    return tuple(sorted(overviews, key=lambda o: o.timestamp, reverse=True))


def _splice(buffer: str, edit: EditBuffer) -> str:
    pos = max(0, min(edit.position, len(buffer)))
    end = max(pos, min(pos + edit.removed, len(buffer)))
    return buffer[:pos] + edit.inserted + buffer[end:]


def _request_text(
    state: AppState, sim_id: UUID, kind: Operation, device_name: str | None = None,
) -> tuple[AppState, list[Effect]]:
    generation = state.text_generation + 1
    new_state = dataclasses.replace(
        state, text_generation=generation, last_error=None,
    )
    return new_state, [FetchText(sim_id, generation, kind, device_name)]


def reduce(state: AppState, intent: Intent) -> tuple[AppState, list[Effect]]:
    """Apply one intent. Returns (next state, effects to run)."""
    replace = dataclasses.replace

    match intent:
        # -- list --
        case RefreshList():
            generation = state.list_generation + 1
            return (
                replace(state, list_generation=generation, last_error=None),
                [FetchSimulations(generation)],
            )

        case SimulationsFetched(generation=generation, overviews=overviews):
            if generation != state.list_generation:
                logger.debug("Dropping stale list (generation %d < %d)",
                             generation, state.list_generation)
                return state, []
            return replace(state, simulation_list=sort_overviews(overviews)), []

        # -- selection --
        case SelectSimulation(sim_id=sim_id):
            # Text requested for any earlier selection is abandoned, even if
            # the same id is selected again later
            next_state = replace(
                state,
                pending_selection=sim_id,
                text_generation=state.text_generation + 1,
                last_error=None,
            )
            return next_state, [FetchSimulation(sim_id)]

        case SimulationFetched(sim_id=sim_id, detail=detail):
            if sim_id != state.pending_selection:
                logger.debug("Dropping detail for abandoned selection %s", sim_id)
                return state, []
            return replace(state, selected=(sim_id, detail), displayed_text=None), []

        # -- text display --
        case ShowSource(sim_id=sim_id):
            return _request_text(state, sim_id, Operation.SOURCE)

        case ShowLog(sim_id=sim_id):
            return _request_text(state, sim_id, Operation.LOG)

        case ShowDeviceLog(sim_id=sim_id, device_name=device_name):
            return _request_text(state, sim_id, Operation.DEVICE_LOG, device_name)

        case TextFetched(sim_id=sim_id, generation=generation, text=text):
            if sim_id != state.selected_id or generation != state.text_generation:
                logger.debug("Dropping stale text for %s (generation %d)",
                             sim_id, generation)
                return state, []
            return replace(state, displayed_text=text), []

        # -- editor buffer --
        case EditBuffer():
            return replace(state, editor_buffer=_splice(state.editor_buffer, intent)), []

        case ReplaceBuffer(text=text):
            return replace(state, editor_buffer=text), []

        case ResetBuffer():
            return replace(state, editor_buffer=default_simulation_text()), []

        case OpenFile(path=path):
            return replace(state, last_error=None), [ReadFile(path)]

        # -- submission --
        case Submit():
            try:
                simulation = validate_buffer(state.editor_buffer)
            except ValidationError as exc:
                message = t(
                    "errors.validation", "Failed parsing simulation: {detail}",
                ).format(detail=exc)
                return replace(state, last_error=message), []
            return replace(state, last_error=None), [SubmitSimulation(simulation)]

        case Submitted(submission=submission):
            # Chain a refresh so the new simulation shows up in the list
            next_state, effects = reduce(
                replace(state, last_submission=submission), RefreshList(),
            )
            return next_state, effects

        # -- failures --
        case OperationFailed(message=message):
            return replace(state, last_error=message), []

        case _:
            raise TypeError(f"Unknown intent: {intent!r}")
