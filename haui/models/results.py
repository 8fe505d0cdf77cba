"""Backend response models.

These are read-only shapes the backend returns. ``SimulationDetail`` is
deliberately not a ``Simulation``: retrieval carries only device names
plus the computed report, never the full device definitions.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class Report:
    """Computed result of a simulation.

    Attributes:
        result: Net energy balance [Wh].
    """
    result: int

    def format(self) -> str:
        return f"{self.result} Wh"


@dataclass(frozen=True)
class SimulationOverview:
    """Listing row — id and creation time only."""
    id: UUID
    timestamp: datetime


@dataclass(frozen=True)
class SimulationDetail:
    """Stored simulation as returned by ``GET /simulation/{id}``.

    Attributes:
        devices: Device names in submission order.
        res: Computed report.
    """
    devices: tuple[str, ...]
    res: Report


@dataclass(frozen=True)
class SubmittedSimulation:
    """Acknowledgement of ``PUT /simulation`` with the immediate report."""
    id: UUID
    report: Report
