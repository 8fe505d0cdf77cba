"""Models — simulation submission and backend response value types."""

from haui.models.results import (
    Report,
    SimulationDetail,
    SimulationOverview,
    SubmittedSimulation,
)
from haui.models.simulation import (
    AnyDeviceType,
    Device,
    DeviceKind,
    Simulation,
    SolarPanel,
    StableDevice,
    Store,
)

__all__ = [
    "AnyDeviceType",
    "Device",
    "DeviceKind",
    "Report",
    "Simulation",
    "SimulationDetail",
    "SimulationOverview",
    "SolarPanel",
    "StableDevice",
    "Store",
    "SubmittedSimulation",
]
