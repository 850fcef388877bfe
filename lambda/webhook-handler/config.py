# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import logging
import os
from dataclasses import dataclass

from errors import ConfigurationError
from normalizer import POLICIES, RELAY


@dataclass(frozen=True)
class HandlerConfig:
    table_name: str
    payload_policy: str = RELAY
    log_level: str = "INFO"

    def __post_init__(self):
        if not self.table_name:
            raise ConfigurationError("TABLE_NAME is not set")
        if self.payload_policy not in POLICIES:
            raise ConfigurationError(
                f"Unknown PAYLOAD_POLICY {self.payload_policy!r}, "
                f"expected one of {', '.join(sorted(POLICIES))}"
            )
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigurationError(f"Unknown LOG_LEVEL {self.log_level!r}")

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        return cls(
            table_name=environ.get("TABLE_NAME", ""),
            payload_policy=environ.get("PAYLOAD_POLICY", RELAY).strip().lower(),
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )
