"""Simulation submission data models.

A Simulation is what the operator writes in the editor buffer and PUTs to
the backend: a time window plus an ordered list of devices. Every device
carries exactly one behaviour variant.

Device types:
  - SolarPanel: production computed by the backend (time of day, weather).
  - StableDevice: constant per-tick production (negative = consumption).
  - Store: storage bounded by a per-tick charge rate and a capacity.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Union


class DeviceKind(Enum):
    """Device type discriminator (the wire ``type`` field)."""
    SOLAR_PANEL = "SolarPanel"
    STABLE_DEVICE = "StableDevice"
    STORE = "Store"


@dataclass(frozen=True)
class SolarPanel:
    """Solar panel — no client-visible parameters."""
    kind: ClassVar[DeviceKind] = DeviceKind.SOLAR_PANEL


@dataclass(frozen=True)
class StableDevice:
    """Constant producer or consumer.

    Attributes:
        produces: Energy per tick [Wh]. Sign gives the direction.
    """
    kind: ClassVar[DeviceKind] = DeviceKind.STABLE_DEVICE
    produces: int


@dataclass(frozen=True)
class Store:
    """Bounded energy store (battery).

    Attributes:
        max_charge_per_tick: Charge/discharge limit per tick [Wh], >= 0.
        max_capacity: Absolute capacity [Wh], >= 0.
    """
    kind: ClassVar[DeviceKind] = DeviceKind.STORE
    max_charge_per_tick: int
    max_capacity: int


AnyDeviceType = Union[SolarPanel, StableDevice, Store]


@dataclass(frozen=True)
class Device:
    """One named actor of a simulation.

    Name uniqueness within a simulation is enforced by the backend only.
    """
    name: str
    device_type: AnyDeviceType

    @property
    def kind(self) -> DeviceKind:
        return self.device_type.kind


@dataclass(frozen=True)
class Simulation:
    """Submission shape of a simulation.

    Attributes:
        start_time: Start of the simulated window (timezone-aware, UTC).
        end_time: End of the simulated window. Ordering is checked by
            the backend, not here.
        devices: Devices in submission order.
    """
    start_time: datetime
    end_time: datetime
    devices: tuple[Device, ...] = ()

    @property
    def device_names(self) -> list[str]:
        return [d.name for d in self.devices]
