# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0
"""Flattens an inbound device event into the row written to DynamoDB.

Two payload policies are supported:

* ``relay`` -- events forwarded by a webhook relay carry ``published_at`` and a
  JSON-encoded ``data`` string holding the actual telemetry. ``coreid`` is
  stored as ``deviceId`` and ``event`` is kept as-is.
* ``flat`` -- every key of the event is copied except ``data`` and
  ``published_at``, which are dropped without being parsed.

In both cases ``time`` is the write time in epoch milliseconds and values that
are ``None`` or ``""`` are left out of the record.
"""

import json
import time

from errors import InvalidPayloadJSON

RELAY = "relay"
FLAT = "flat"
POLICIES = frozenset({RELAY, FLAT})

RELAY_KEYS = ("data", "published_at")
TIME_KEY = "time"


def now_ms():
    return int(time.time() * 1000)


def is_present(value):
    # 0 and False are real readings
    return value is not None and value != ""


def is_defined(event, key):
    return event.get(key) is not None


def reject_constant(token):
    raise ValueError(f"invalid JSON number: {token}")


def loads(text):
    """json.loads without the NaN and Infinity extensions."""
    return json.loads(text, parse_constant=reject_constant)


def parse_payload(data):
    try:
        payload = loads(data)
    except (TypeError, ValueError) as e:
        raise InvalidPayloadJSON(str(e)) from e
    if not isinstance(payload, dict):
        raise InvalidPayloadJSON(
            f"expected a JSON object, got {type(payload).__name__}"
        )
    return payload


def select_payload(event):
    """Return the mapping whose fields become columns of the record."""
    if all(is_defined(event, key) for key in RELAY_KEYS):
        return parse_payload(event["data"])
    return {k: v for k, v in event.items() if k not in RELAY_KEYS}


def merge_present(item, payload):
    for key, value in payload.items():
        if key == TIME_KEY or not is_present(value):
            continue
        item[key] = value
    return item


def normalize(event, now=None, policy=RELAY):
    """Build the stored record for ``event``.

    ``now`` pins the timestamp in epoch milliseconds; the wall clock is used
    when it is omitted. Raises :class:`InvalidPayloadJSON` when a relayed
    ``data`` field cannot be decoded into a JSON object.
    """
    item = {
        TIME_KEY: now_ms() if now is None else now,
        "device": event.get("device"),
    }

    if policy == FLAT:
        payload = {k: v for k, v in event.items() if k not in RELAY_KEYS}
        return merge_present(item, payload)
    if policy != RELAY:
        raise ValueError(f"unknown payload policy: {policy!r}")

    if is_defined(event, "coreid"):
        item["deviceId"] = event["coreid"]
    if is_defined(event, "event"):
        item["event"] = event["event"]

    return merge_present(item, select_payload(event))
