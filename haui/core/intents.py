"""Intents and effects exchanged with the state reducer.

Intents are the only way to change application state. User intents come
from the presentation layer; result intents are posted by the store when
an asynchronous backend operation completes. Effects are descriptions of
work the reducer asks the store to perform; they carry everything the
matching result intent has to echo back (simulation id, generation).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union
from uuid import UUID

from haui.models.results import SimulationDetail, SimulationOverview, SubmittedSimulation
from haui.models.simulation import Simulation


class Operation(Enum):
    """Backend operation kinds (used for text fetches and error reporting)."""
    LIST = "list"
    SELECT = "select"
    SOURCE = "source"
    LOG = "log"
    DEVICE_LOG = "device_log"
    SUBMIT = "submit"
    OPEN_FILE = "open_file"


# ── User intents ──


@dataclass(frozen=True)
class RefreshList:
    pass


@dataclass(frozen=True)
class SelectSimulation:
    sim_id: UUID


@dataclass(frozen=True)
class ShowSource:
    sim_id: UUID


@dataclass(frozen=True)
class ShowLog:
    sim_id: UUID


@dataclass(frozen=True)
class ShowDeviceLog:
    sim_id: UUID
    device_name: str


@dataclass(frozen=True)
class EditBuffer:
    """Keystroke-level splice of the editor buffer.

    Attributes:
        position: Character offset of the edit.
        removed: Number of characters removed at ``position``.
        inserted: Text inserted at ``position``.
    """
    position: int
    removed: int = 0
    inserted: str = ""


@dataclass(frozen=True)
class ReplaceBuffer:
    text: str


@dataclass(frozen=True)
class ResetBuffer:
    pass


@dataclass(frozen=True)
class OpenFile:
    path: Path


@dataclass(frozen=True)
class Submit:
    pass


# ── Result intents ──


@dataclass(frozen=True)
class SimulationsFetched:
    generation: int
    overviews: tuple[SimulationOverview, ...]


@dataclass(frozen=True)
class SimulationFetched:
    sim_id: UUID
    detail: SimulationDetail


@dataclass(frozen=True)
class TextFetched:
    sim_id: UUID
    generation: int
    text: str


@dataclass(frozen=True)
class Submitted:
    submission: SubmittedSimulation


@dataclass(frozen=True)
class OperationFailed:
    operation: Operation
    message: str


Intent = Union[
    RefreshList,
    SelectSimulation,
    ShowSource,
    ShowLog,
    ShowDeviceLog,
    EditBuffer,
    ReplaceBuffer,
    ResetBuffer,
    OpenFile,
    Submit,
    SimulationsFetched,
    SimulationFetched,
    TextFetched,
    Submitted,
    OperationFailed,
]


# ── Effects ──


@dataclass(frozen=True)
class FetchSimulations:
    generation: int


@dataclass(frozen=True)
class FetchSimulation:
    sim_id: UUID


@dataclass(frozen=True)
class FetchText:
    """Fetch source, full log or device log for ``sim_id``."""
    sim_id: UUID
    generation: int
    kind: Operation
    device_name: str | None = None


@dataclass(frozen=True)
class SubmitSimulation:
    simulation: Simulation


@dataclass(frozen=True)
class ReadFile:
    path: Path


Effect = Union[FetchSimulations, FetchSimulation, FetchText, SubmitSimulation, ReadFile]
