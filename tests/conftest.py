import pytest
from botocore.exceptions import ClientError

import index


class FakeDynamoDBClient:
    """Records put_item calls instead of talking to DynamoDB."""

    def __init__(self, error_code=None):
        self.error_code = error_code
        self.calls = []

    def put_item(self, **kwargs):
        if self.error_code:
            raise ClientError(
                {"Error": {"Code": self.error_code, "Message": "table is unhappy"}},
                "PutItem",
            )
        self.calls.append(kwargs)
        return {"ResponseMetadata": {"HTTPStatusCode": 200}}


class FakeContext:
    aws_request_id = "req-123"
    function_name = "dht_logger_webhook"


@pytest.fixture
def fake_client():
    return FakeDynamoDBClient()


@pytest.fixture
def context():
    return FakeContext()


@pytest.fixture(autouse=True)
def reset_recorder(monkeypatch):
    monkeypatch.setattr(index, "_recorder", None)
