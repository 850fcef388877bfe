# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import json
import logging
from decimal import Decimal, DecimalException

from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import BotoCoreError, ClientError

from errors import InvalidPayloadJSON, StorageWriteFailed
from normalizer import reject_constant

logger = logging.getLogger()

_serializer = TypeSerializer()


def to_attribute_values(record):
    # DynamoDB rejects binary floats, round-trip through JSON to get Decimals
    try:
        record = json.loads(
            json.dumps(record), parse_float=Decimal, parse_constant=reject_constant
        )
        return {k: _serializer.serialize(v) for k, v in record.items()}
    except (TypeError, ValueError, DecimalException) as e:
        # numbers DynamoDB cannot hold: NaN, Infinity, more than 38 digits
        raise InvalidPayloadJSON(f"value cannot be stored: {e!r}") from e


class DynamoDBStore:
    """Writes stored records to one table through a low-level DynamoDB client."""

    def __init__(self, table_name, client):
        self.table_name = table_name
        self.client = client

    def put_item(self, record):
        try:
            response = self.client.put_item(
                TableName=self.table_name,
                Item=to_attribute_values(record),
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(json.dumps({
                "event": "dynamodb_write_error",
                "error_type": type(e).__name__,
                "error_message": str(e),
                "table": self.table_name,
            }))
            raise StorageWriteFailed(self.table_name, e) from e
        return response
