#!/usr/bin/env python3
# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import aws_cdk as cdk

from stacks.dht_logger_stack import DhtLoggerStack

app = cdk.App()
DhtLoggerStack(
    app,
    "DhtLoggerStack",
    payload_policy=app.node.try_get_context("payload_policy") or "relay",
)

app.synth()
