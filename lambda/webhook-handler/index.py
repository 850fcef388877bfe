# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import base64
import json
import logging

import boto3

from config import HandlerConfig
from errors import DhtLoggerError, InvalidPayloadJSON, StorageWriteFailed
from normalizer import RELAY, loads, normalize
from store import DynamoDBStore

logger = logging.getLogger()
logger.setLevel(logging.INFO)

_recorder = None


class EventRecorder:
    """Normalizes one inbound event and writes it as a single row."""

    def __init__(self, store, policy=RELAY, clock=None):
        self.store = store
        self.policy = policy
        self.clock = clock

    def record(self, event):
        now = self.clock() if self.clock else None
        item = normalize(event, now=now, policy=self.policy)
        logger.info(json.dumps({
            "event": "item_normalized",
            "device": item.get("device"),
            "keys": sorted(item),
        }, default=str))
        self.store.put_item(item)
        return item


def get_recorder():
    global _recorder
    if _recorder is None:
        config = HandlerConfig.from_env()
        logger.setLevel(config.log_level)
        store = DynamoDBStore(config.table_name, boto3.client("dynamodb"))
        _recorder = EventRecorder(store, policy=config.payload_policy)
    return _recorder


def is_gateway_event(event):
    return isinstance(event, dict) and "requestContext" in event and "body" in event


def decode_body(event):
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        body = base64.b64decode(body).decode("utf-8")
    try:
        inbound = loads(body)
    except ValueError as e:
        raise InvalidPayloadJSON(str(e)) from e
    if not isinstance(inbound, dict):
        raise InvalidPayloadJSON("request body must be a JSON object")
    return inbound


def record(event, request_id):
    recorder = get_recorder()
    item = recorder.record(event)
    logger.info(json.dumps({
        "event": "dynamodb_write_success",
        "request_id": request_id,
        "table": recorder.store.table_name,
        "device": item.get("device"),
    }, default=str))
    return item


def respond(status_code, payload):
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }


def handler(event, context):
    request_id = getattr(context, "aws_request_id", None)
    gateway = is_gateway_event(event)

    logger.info(json.dumps({
        "event": "request_received",
        "request_id": request_id,
        "source": "apigateway" if gateway else "invoke",
    }))

    if not gateway:
        if not isinstance(event, dict):
            raise InvalidPayloadJSON("event must be a JSON object")
        record(event, request_id)
        return {"success": True}

    try:
        inbound = decode_body(event)
        record(inbound, request_id)
        return respond(200, {"success": True})
    except InvalidPayloadJSON as e:
        logger.error(json.dumps({
            "event": "json_parse_error",
            "error_type": type(e).__name__,
            "error_message": str(e),
            "request_id": request_id,
        }))
        return respond(400, {"error": str(e)})
    except StorageWriteFailed as e:
        return respond(502, {"error": str(e)})
    except DhtLoggerError as e:
        logger.error(json.dumps({
            "event": "error",
            "error_type": type(e).__name__,
            "error_message": str(e),
            "request_id": request_id,
        }))
        return respond(500, {"error": str(e)})
    except Exception as e:
        logger.error(json.dumps({
            "event": "error",
            "error_type": type(e).__name__,
            "error_message": str(e),
            "request_id": request_id,
        }))
        return respond(500, {"error": "Internal server error"})
