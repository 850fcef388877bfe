import json

import pytest

from errors import InvalidPayloadJSON
from normalizer import FLAT, RELAY, is_present, normalize, select_payload

NOW = 1_704_067_200_000


def relayed(data, **extra):
    event = {
        "device": "dht1",
        "coreid": "abc",
        "event": "temp",
        "data": data if isinstance(data, str) else json.dumps(data),
        "published_at": "2024-01-01T00:00:00Z",
    }
    event.update(extra)
    return event


def test_relayed_event_is_flattened():
    event = relayed('{"temp":21.5,"humidity":""}')

    assert normalize(event, now=NOW) == {
        "device": "dht1",
        "deviceId": "abc",
        "event": "temp",
        "temp": 21.5,
        "time": NOW,
    }


def test_flat_telemetry_is_copied():
    assert normalize({"device": "dht2", "temp": 18}, now=NOW) == {
        "device": "dht2",
        "temp": 18,
        "time": NOW,
    }


def test_malformed_data_fails():
    with pytest.raises(InvalidPayloadJSON, match="Failed to parse data JSON"):
        normalize({"device": "dht3", "data": "not-json", "published_at": "x"})


@pytest.mark.parametrize("data", ["[1, 2]", "42", '"text"', "null"])
def test_data_must_decode_to_object(data):
    with pytest.raises(InvalidPayloadJSON):
        normalize(relayed(data), now=NOW)


def test_falsy_readings_are_kept():
    record = normalize(relayed({"temp": 0, "ok": False, "note": None}), now=NOW)

    assert record["temp"] == 0
    assert record["ok"] is False
    assert "note" not in record


def test_payload_overrides_synthetic_fields():
    record = normalize(
        relayed({"device": "renamed", "deviceId": "xyz", "event": "humidity"}),
        now=NOW,
    )

    assert record["device"] == "renamed"
    assert record["deviceId"] == "xyz"
    assert record["event"] == "humidity"


def test_payload_never_overrides_time():
    record = normalize(relayed({"time": 5}), now=NOW)

    assert record["time"] == NOW


def test_data_without_published_at_is_not_parsed():
    record = normalize({"device": "dht4", "data": '{"temp": 1}'}, now=NOW)

    assert record == {"device": "dht4", "time": NOW}


def test_published_at_without_data_falls_back_to_event():
    record = normalize(
        {"device": "dht5", "published_at": "x", "humidity": 40.1}, now=NOW
    )

    assert record == {"device": "dht5", "humidity": 40.1, "time": NOW}


def test_null_data_falls_back_to_event():
    payload = select_payload({"device": "d", "data": None, "published_at": "x", "t": 1})

    assert payload == {"device": "d", "t": 1}


def test_missing_device_is_kept_as_none():
    record = normalize({"temp": 3}, now=NOW)

    assert record["device"] is None
    assert record["temp"] == 3


def test_null_coreid_and_event_are_skipped():
    record = normalize(
        relayed({"temp": 1}, coreid=None, event=None), now=NOW
    )

    assert "deviceId" not in record
    assert "event" not in record


def test_renormalizing_differs_only_in_time():
    event = relayed({"temp": 21.5, "humidity": 40})

    first = normalize(event, now=NOW)
    second = normalize(event, now=NOW + 60_000)

    assert first.pop("time") != second.pop("time")
    assert first == second


def test_wall_clock_is_used_by_default(monkeypatch):
    monkeypatch.setattr("normalizer.time.time", lambda: 1_700_000_000.25)

    assert normalize({"device": "d"})["time"] == 1_700_000_000_250


def test_flat_policy_drops_relay_keys_without_parsing():
    event = relayed({"temp": 21.5}, humidity="", heat_index=23.1)

    record = normalize(event, now=NOW, policy=FLAT)

    assert record == {
        "device": "dht1",
        "coreid": "abc",
        "event": "temp",
        "heat_index": 23.1,
        "time": NOW,
    }


def test_flat_policy_ignores_malformed_data():
    record = normalize(
        {"device": "dht3", "data": "not-json", "published_at": "x"},
        now=NOW,
        policy=FLAT,
    )

    assert record == {"device": "dht3", "time": NOW}


def test_unknown_policy_is_rejected():
    with pytest.raises(ValueError):
        normalize({"device": "d"}, now=NOW, policy="nested")


def test_is_present():
    assert is_present(0)
    assert is_present(False)
    assert is_present("0")
    assert not is_present(None)
    assert not is_present("")


def test_relay_policy_is_default():
    assert normalize({"device": "d"}, now=NOW) == normalize(
        {"device": "d"}, now=NOW, policy=RELAY
    )


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_numbers_in_data_fail(token):
    with pytest.raises(InvalidPayloadJSON, match="invalid JSON number"):
        normalize(relayed('{"temp": %s}' % token), now=NOW)


def test_empty_value_dropped_without_relay():
    assert normalize({"device": "d", "humidity": "", "temp": 0}, now=NOW) == {
        "device": "d",
        "temp": 0,
        "time": NOW,
    }
