"""Serialization utilities — domain model ↔ JSON wire format.

Device types use a flattened, tag-discriminated encoding: the variant's
own fields sit next to ``name`` and a ``type`` key names the variant.
Keys are camelCase on the wire. Decoding never fills in defaults; every
field is mandatory and unknown keys are ignored.
"""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from haui.constants import I32_MAX, I32_MIN, I64_MAX, I64_MIN, PRETTY_INDENT, U32_MAX
from haui.core.errors import DecodeError
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

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Full date, "T", full time; the offset is checked after parsing
_RFC3339 = re.compile(
    r"[0-9]{4}-[0-9]{2}-[0-9]{2}[Tt][0-9]{2}:[0-9]{2}:[0-9]{2}(?:\.[0-9]+)?"
    r"(?:[Zz]|[+-][0-9]{2}:[0-9]{2})?"
)


# =====================================================================
# Primitive field readers
# =====================================================================


def _require_object(data: Any, path: str) -> dict:
    if not isinstance(data, dict):
        raise DecodeError(f"expected object, got {type(data).__name__}", path)
    return data


def _require(data: dict, key: str, path: str) -> Any:
    if key not in data:
        raise DecodeError(f"missing field {key!r}", path)
    return data[key]


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _read_int(data: dict, key: str, path: str, lo: int, hi: int) -> int:
    value = _require(data, key, path)
    where = _join(path, key)
    # bool is an int subclass; JSON true/false is never a number here
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"expected integer, got {type(value).__name__}", where)
    if not lo <= value <= hi:
        raise DecodeError(f"{value} outside [{lo}, {hi}]", where)
    return value


def _read_str(data: dict, key: str, path: str) -> str:
    value = _require(data, key, path)
    if not isinstance(value, str):
        raise DecodeError(
            f"expected string, got {type(value).__name__}", _join(path, key),
        )
    return value


def _read_list(data: dict, key: str, path: str) -> list:
    value = _require(data, key, path)
    if not isinstance(value, list):
        raise DecodeError(
            f"expected array, got {type(value).__name__}", _join(path, key),
        )
    return value


def _read_uuid(data: dict, key: str, path: str) -> UUID:
    raw = _read_str(data, key, path)
    try:
        return UUID(raw)
    except ValueError:
        raise DecodeError(f"invalid UUID {raw!r}", _join(path, key)) from None


def _read_timestamp(data: dict, key: str, path: str) -> datetime:
    """RFC 3339 timestamp with an explicit offset, normalised to UTC."""
    raw = _read_str(data, key, path)
    where = _join(path, key)
    if _RFC3339.fullmatch(raw) is None:
        raise DecodeError(f"invalid timestamp {raw!r}", where)
    try:
        value = datetime.fromisoformat(raw.upper())
    except ValueError:
        raise DecodeError(f"invalid timestamp {raw!r}", where) from None
    if value.tzinfo is None:
        raise DecodeError(f"timestamp {raw!r} has no UTC offset", where)
    return value.astimezone(timezone.utc)


def _read_millis(data: dict, key: str, path: str) -> datetime:
    """Millisecond Unix epoch → aware UTC datetime."""
    millis = _read_int(data, key, path, I64_MIN, I64_MAX)
    try:
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError:
        raise DecodeError(
            f"{millis} ms is not a representable timestamp", _join(path, key),
        ) from None


def format_timestamp(value: datetime) -> str:
    """Encode an aware datetime as RFC 3339 in UTC (``Z`` suffix)."""
    if value.tzinfo is None:
        raise ValueError("cannot encode a naive datetime")
    text = value.astimezone(timezone.utc).isoformat()
    return text.removesuffix("+00:00") + "Z"


# =====================================================================
# Device union serialization
# =====================================================================


def device_type_to_dict(device_type: AnyDeviceType) -> dict:
    """Serialize a device variant to its flattened wire fields (incl. ``type``)."""
    d: dict[str, Any] = {"type": device_type.kind.value}
    match device_type:
        case SolarPanel():
            pass
        case StableDevice(produces=produces):
            d["produces"] = produces
        case Store(max_charge_per_tick=rate, max_capacity=capacity):
            d["maxChargePerTick"] = rate
            d["maxCapacity"] = capacity
        case _:
            raise TypeError(f"Unknown device type: {type(device_type)!r}")
    return d


def dict_to_device_type(d: dict, path: str = "") -> AnyDeviceType:
    """Peek the ``type`` discriminator, then decode the matching variant."""
    tag = _read_str(d, "type", path)
    try:
        kind = DeviceKind(tag)
    except ValueError:
        raise DecodeError(f"unknown device type {tag!r}", _join(path, "type")) from None

    match kind:
        case DeviceKind.SOLAR_PANEL:
            return SolarPanel()
        case DeviceKind.STABLE_DEVICE:
            return StableDevice(produces=_read_int(d, "produces", path, I32_MIN, I32_MAX))
        case DeviceKind.STORE:
            return Store(
                max_charge_per_tick=_read_int(d, "maxChargePerTick", path, 0, U32_MAX),
                max_capacity=_read_int(d, "maxCapacity", path, 0, U32_MAX),
            )


def device_to_dict(device: Device) -> dict:
    """Serialize a Device: ``name`` plus the flattened variant fields."""
    d: dict[str, Any] = {"name": device.name}
    d.update(device_type_to_dict(device.device_type))
    return d


def dict_to_device(data: Any, path: str = "") -> Device:
    d = _require_object(data, path)
    return Device(
        name=_read_str(d, "name", path),
        device_type=dict_to_device_type(d, path),
    )


# =====================================================================
# Simulation serialization
# =====================================================================


def simulation_to_dict(simulation: Simulation) -> dict:
    """Serialize a Simulation to the submission wire shape."""
    return {
        "startTime": format_timestamp(simulation.start_time),
        "endTime": format_timestamp(simulation.end_time),
        "devices": [device_to_dict(d) for d in simulation.devices],
    }


def dict_to_simulation(data: Any) -> Simulation:
    """Deserialize the submission wire shape.

    Raises:
        DecodeError: on any structural or schema violation.
    """
    d = _require_object(data, "")
    devices = _read_list(d, "devices", "")
    return Simulation(
        start_time=_read_timestamp(d, "startTime", ""),
        end_time=_read_timestamp(d, "endTime", ""),
        devices=tuple(
            dict_to_device(item, f"devices[{i}]") for i, item in enumerate(devices)
        ),
    )


def dumps_simulation(simulation: Simulation, indent: int | None = None) -> str:
    return json.dumps(simulation_to_dict(simulation), indent=indent)


def loads_simulation(text: str) -> Simulation:
    """Parse JSON text and decode it as a Simulation."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"invalid JSON: {exc}") from exc
    return dict_to_simulation(data)


# =====================================================================
# Response serialization
# =====================================================================


def dict_to_report(data: Any, path: str = "") -> Report:
    d = _require_object(data, path)
    return Report(result=_read_int(d, "result", path, I64_MIN, I64_MAX))


def dict_to_overview(data: Any, path: str = "") -> SimulationOverview:
    d = _require_object(data, path)
    return SimulationOverview(
        id=_read_uuid(d, "id", path),
        timestamp=_read_millis(d, "timestamp", path),
    )


def dict_to_overviews(data: Any) -> list[SimulationOverview]:
    if not isinstance(data, list):
        raise DecodeError(f"expected array, got {type(data).__name__}")
    return [dict_to_overview(item, f"[{i}]") for i, item in enumerate(data)]


def dict_to_detail(data: Any) -> SimulationDetail:
    d = _require_object(data, "")
    names = _read_list(d, "devices", "")
    for i, name in enumerate(names):
        if not isinstance(name, str):
            raise DecodeError(
                f"expected string, got {type(name).__name__}", f"devices[{i}]",
            )
    return SimulationDetail(
        devices=tuple(names),
        res=dict_to_report(_require(d, "res", ""), "res"),
    )


def dict_to_submitted(data: Any) -> SubmittedSimulation:
    d = _require_object(data, "")
    return SubmittedSimulation(
        id=_read_uuid(d, "id", ""),
        report=dict_to_report(_require(d, "report", ""), "report"),
    )


# =====================================================================
# Display
# =====================================================================


def pretty_json(text: str) -> str:
    """Re-indent arbitrary JSON text for display; key order is preserved.

    Raises:
        DecodeError: if ``text`` is not JSON.
    """
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"source is not valid JSON: {exc}") from exc
    return json.dumps(value, indent=PRETTY_INDENT, ensure_ascii=False)
