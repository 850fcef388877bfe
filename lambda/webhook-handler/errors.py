# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0


class DhtLoggerError(Exception):
    """Base class for failures reported back to the invoker."""


class ConfigurationError(DhtLoggerError):
    pass


class InvalidPayloadJSON(DhtLoggerError):
    def __init__(self, detail):
        self.detail = detail
        super().__init__(f"Failed to parse data JSON: {detail}")


class StorageWriteFailed(DhtLoggerError):
    def __init__(self, table_name, cause):
        self.table_name = table_name
        self.cause = cause
        super().__init__(f"ERROR: Dynamo failed: {cause}")
