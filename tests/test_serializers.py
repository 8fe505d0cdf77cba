"""Tests for haui.core.serializers — wire codec for simulations and responses.

Covers:
  - Simulation round-trip for every device variant, boundary values included
  - Flattened camelCase device encoding with ``type`` discriminator
  - Discriminator and field-kind rejection (DecodeError)
  - Millisecond epoch timestamps in overviews
  - Response shapes (detail, submitted, report)
"""

import json
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from haui.constants import DEFAULT_SIMULATION_PATH, I32_MAX, I32_MIN, U32_MAX
from haui.core.errors import DecodeError
from haui.core.serializers import (
    device_to_dict,
    dict_to_detail,
    dict_to_device,
    dict_to_overview,
    dict_to_overviews,
    dict_to_simulation,
    dict_to_submitted,
    dumps_simulation,
    format_timestamp,
    loads_simulation,
    pretty_json,
    simulation_to_dict,
)
from haui.models.results import Report
from haui.models.simulation import (
    Device,
    DeviceKind,
    Simulation,
    SolarPanel,
    StableDevice,
    Store,
)

SIM_ID = "4f7c0b0e-8d4c-4f3e-9a55-1c2d3e4f5a6b"


# ── Helpers ──────────────────────────────────────────────────────────

def _make_simulation(*devices: Device) -> Simulation:
    return Simulation(
        start_time=datetime(2024, 6, 1, tzinfo=timezone.utc),
        end_time=datetime(2024, 6, 2, 12, 30, tzinfo=timezone.utc),
        devices=devices,
    )


def _sim_dict(**overrides) -> dict:
    d = {
        "startTime": "2024-06-01T00:00:00Z",
        "endTime": "2024-06-02T00:00:00Z",
        "devices": [{"name": "roof", "type": "SolarPanel"}],
    }
    d.update(overrides)
    return d


# ── Round-trip ───────────────────────────────────────────────────────

class TestSimulationRoundTrip:

    @pytest.mark.parametrize("device_type", [
        SolarPanel(),
        StableDevice(produces=0),
        StableDevice(produces=-150),
        StableDevice(produces=I32_MIN),
        StableDevice(produces=I32_MAX),
        Store(max_charge_per_tick=0, max_capacity=0),
        Store(max_charge_per_tick=500, max_capacity=U32_MAX),
    ])
    def test_single_device_round_trip(self, device_type):
        sim = _make_simulation(Device("dev", device_type))
        assert dict_to_simulation(simulation_to_dict(sim)) == sim

    def test_mixed_devices_keep_order(self):
        sim = _make_simulation(
            Device("battery", Store(max_charge_per_tick=10, max_capacity=100)),
            Device("roof", SolarPanel()),
            Device("fridge", StableDevice(produces=-3)),
        )
        restored = dict_to_simulation(simulation_to_dict(sim))
        assert restored == sim
        assert restored.device_names == ["battery", "roof", "fridge"]

    def test_empty_device_list(self):
        sim = _make_simulation()
        assert dict_to_simulation(simulation_to_dict(sim)) == sim

    def test_text_round_trip(self):
        sim = _make_simulation(Device("fridge", StableDevice(produces=7)))
        assert loads_simulation(dumps_simulation(sim, indent=2)) == sim

    def test_bundled_template_decodes(self):
        sim = loads_simulation(DEFAULT_SIMULATION_PATH.read_text(encoding="utf-8"))
        kinds = {d.kind for d in sim.devices}
        assert kinds == {DeviceKind.SOLAR_PANEL, DeviceKind.STABLE_DEVICE, DeviceKind.STORE}


# ── Wire shape ───────────────────────────────────────────────────────

class TestWireShape:

    def test_solar_panel_has_only_name_and_type(self):
        assert device_to_dict(Device("roof", SolarPanel())) == {
            "name": "roof", "type": "SolarPanel",
        }

    def test_stable_device_flattened(self):
        assert device_to_dict(Device("fridge", StableDevice(produces=-150))) == {
            "name": "fridge", "type": "StableDevice", "produces": -150,
        }

    def test_store_fields_camel_case(self):
        d = device_to_dict(Device("bat", Store(max_charge_per_tick=5, max_capacity=9)))
        assert d == {
            "name": "bat", "type": "Store", "maxChargePerTick": 5, "maxCapacity": 9,
        }

    def test_simulation_keys(self):
        d = simulation_to_dict(_make_simulation())
        assert set(d) == {"startTime", "endTime", "devices"}
        assert d["startTime"] == "2024-06-01T00:00:00Z"
        assert d["endTime"] == "2024-06-02T12:30:00Z"

    def test_offset_normalised_to_utc(self):
        sim = dict_to_simulation(_sim_dict(startTime="2024-06-01T02:00:00+02:00"))
        assert sim.start_time == datetime(2024, 6, 1, tzinfo=timezone.utc)
        assert sim.start_time.utcoffset() == timedelta(0)

    def test_format_timestamp_rejects_naive(self):
        with pytest.raises(ValueError):
            format_timestamp(datetime(2024, 6, 1))

    def test_unknown_keys_ignored(self):
        sim = dict_to_simulation(_sim_dict(comment="ignored"))
        assert len(sim.devices) == 1


# ── Rejection ────────────────────────────────────────────────────────

class TestDeviceRejection:

    def test_unknown_discriminator(self):
        with pytest.raises(DecodeError, match="unknown device type"):
            dict_to_device({"name": "x", "type": "WindTurbine"})

    def test_missing_discriminator(self):
        with pytest.raises(DecodeError, match="'type'"):
            dict_to_device({"name": "x", "produces": 3})

    def test_discriminator_wrong_kind(self):
        with pytest.raises(DecodeError):
            dict_to_device({"name": "x", "type": 1})

    def test_missing_variant_field(self):
        with pytest.raises(DecodeError, match="maxCapacity"):
            dict_to_device({"name": "x", "type": "Store", "maxChargePerTick": 1})

    def test_snake_case_variant_field_not_accepted(self):
        with pytest.raises(DecodeError):
            dict_to_device({
                "name": "x", "type": "Store",
                "max_charge_per_tick": 1, "max_capacity": 1,
            })

    @pytest.mark.parametrize("value", ["5", 5.0, True, None, [5]])
    def test_produces_wrong_kind(self, value):
        with pytest.raises(DecodeError, match="expected integer"):
            dict_to_device({"name": "x", "type": "StableDevice", "produces": value})

    def test_store_negative_capacity(self):
        with pytest.raises(DecodeError, match="outside"):
            dict_to_device({
                "name": "x", "type": "Store", "maxChargePerTick": 0, "maxCapacity": -1,
            })

    def test_produces_overflow(self):
        with pytest.raises(DecodeError, match="outside"):
            dict_to_device({"name": "x", "type": "StableDevice", "produces": I32_MAX + 1})

    def test_missing_name(self):
        with pytest.raises(DecodeError, match="'name'"):
            dict_to_device({"type": "SolarPanel"})

    def test_device_not_object(self):
        with pytest.raises(DecodeError, match="expected object"):
            dict_to_device(["SolarPanel"])

    def test_error_path_points_at_device(self):
        data = _sim_dict(devices=[
            {"name": "ok", "type": "SolarPanel"},
            {"name": "bad", "type": "Nope"},
        ])
        with pytest.raises(DecodeError) as exc_info:
            dict_to_simulation(data)
        assert exc_info.value.path == "devices[1].type"


class TestSimulationRejection:

    def test_missing_devices(self):
        data = _sim_dict()
        del data["devices"]
        with pytest.raises(DecodeError, match="'devices'"):
            dict_to_simulation(data)

    def test_missing_start_time(self):
        data = _sim_dict()
        del data["startTime"]
        with pytest.raises(DecodeError, match="'startTime'"):
            dict_to_simulation(data)

    def test_naive_timestamp(self):
        with pytest.raises(DecodeError, match="offset"):
            dict_to_simulation(_sim_dict(startTime="2024-06-01T00:00:00"))

    @pytest.mark.parametrize("raw", [
        "2024-06-01T00:00+00:00",   # seconds omitted
        "2024-06-01",               # date only
        "20240601T000000Z",         # basic format
        "2024-W22-6T00:00:00Z",     # week date
        "2024-06-01T00:00:00+0000", # offset without colon
    ])
    def test_non_rfc3339_timestamp(self, raw):
        with pytest.raises(DecodeError, match="invalid timestamp"):
            dict_to_simulation(_sim_dict(startTime=raw))

    def test_lowercase_separators_accepted(self):
        sim = dict_to_simulation(_sim_dict(startTime="2024-06-01t00:00:00.5z"))
        assert sim.start_time == datetime(2024, 6, 1, 0, 0, 0, 500_000, tzinfo=timezone.utc)

    def test_garbage_timestamp(self):
        with pytest.raises(DecodeError, match="invalid timestamp"):
            dict_to_simulation(_sim_dict(endTime="tomorrow"))

    def test_not_an_object(self):
        with pytest.raises(DecodeError):
            dict_to_simulation([1, 2, 3])

    def test_invalid_json_text(self):
        with pytest.raises(DecodeError, match="invalid JSON"):
            loads_simulation("{not json")


# ── Responses ────────────────────────────────────────────────────────

class TestOverview:

    def test_millisecond_timestamp(self):
        ov = dict_to_overview({"id": SIM_ID, "timestamp": 1_717_200_000_123})
        assert ov.id == UUID(SIM_ID)
        assert ov.timestamp == datetime(
            2024, 6, 1, 0, 0, 0, 123_000, tzinfo=timezone.utc,
        )

    def test_epoch_zero(self):
        ov = dict_to_overview({"id": SIM_ID, "timestamp": 0})
        assert ov.timestamp == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_unrepresentable_timestamp(self):
        with pytest.raises(DecodeError, match="representable"):
            dict_to_overview({"id": SIM_ID, "timestamp": 2 ** 62})

    def test_float_timestamp_rejected(self):
        with pytest.raises(DecodeError):
            dict_to_overview({"id": SIM_ID, "timestamp": 1.5})

    def test_invalid_uuid(self):
        with pytest.raises(DecodeError, match="invalid UUID"):
            dict_to_overview({"id": "not-a-uuid", "timestamp": 0})

    def test_list_requires_array(self):
        with pytest.raises(DecodeError, match="expected array"):
            dict_to_overviews({"id": SIM_ID, "timestamp": 0})

    def test_list_preserves_backend_order(self):
        rows = [
            {"id": "00000000-0000-0000-0000-00000000000%d" % i, "timestamp": ts}
            for i, ts in enumerate([100, 300, 200])
        ]
        assert [o.timestamp.microsecond // 1000 for o in dict_to_overviews(rows)] == [
            100, 300, 200,
        ]


class TestDetailAndSubmission:

    def test_detail(self):
        detail = dict_to_detail({"devices": ["roof", "fridge"], "res": {"result": -42}})
        assert detail.devices == ("roof", "fridge")
        assert detail.res == Report(result=-42)

    def test_detail_missing_report(self):
        with pytest.raises(DecodeError, match="'res'"):
            dict_to_detail({"devices": []})

    def test_detail_device_names_must_be_strings(self):
        with pytest.raises(DecodeError) as exc_info:
            dict_to_detail({"devices": ["a", {"name": "b"}], "res": {"result": 0}})
        assert exc_info.value.path == "devices[1]"

    def test_submitted(self):
        sub = dict_to_submitted({"id": SIM_ID, "report": {"result": 1234}})
        assert sub.id == UUID(SIM_ID)
        assert sub.report.result == 1234
        assert sub.report.format() == "1234 Wh"

    def test_report_result_wrong_kind(self):
        with pytest.raises(DecodeError) as exc_info:
            dict_to_submitted({"id": SIM_ID, "report": {"result": "12"}})
        assert exc_info.value.path == "report.result"


class TestPrettyJson:

    def test_reindents_and_keeps_key_order(self):
        text = pretty_json('{"b":1,"a":[1,2]}')
        assert text == '{\n  "b": 1,\n  "a": [\n    1,\n    2\n  ]\n}'
        assert json.loads(text) == {"b": 1, "a": [1, 2]}

    def test_non_ascii_preserved(self):
        assert pretty_json('{"name":"Wärmepumpe"}') == '{\n  "name": "Wärmepumpe"\n}'

    def test_invalid_source(self):
        with pytest.raises(DecodeError):
            pretty_json("not json at all")
