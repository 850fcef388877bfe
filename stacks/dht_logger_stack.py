# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from aws_cdk import (
    Stack,
    aws_dynamodb as dynamodb_,
    aws_lambda as lambda_,
    aws_apigateway as apigw_,
    aws_logs as logs,
    Duration,
    RemovalPolicy,
)
from constructs import Construct

TABLE_NAME = "dht_readings"
HANDLER_ASSET = "lambda/webhook-handler"


class DhtLoggerStack(Stack):
    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        payload_policy: str = "relay",
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # One row per reading, ordered by write time within a device
        self.table = dynamodb_.Table(
            self,
            TABLE_NAME,
            partition_key=dynamodb_.Attribute(
                name="device", type=dynamodb_.AttributeType.STRING
            ),
            sort_key=dynamodb_.Attribute(
                name="time", type=dynamodb_.AttributeType.NUMBER
            ),
            billing_mode=dynamodb_.BillingMode.PAY_PER_REQUEST,
            point_in_time_recovery=True,
            removal_policy=RemovalPolicy.RETAIN,
        )

        self.handler = lambda_.Function(
            self,
            "WebhookHandler",
            function_name="dht_logger_webhook",
            runtime=lambda_.Runtime.PYTHON_3_12,
            code=lambda_.Code.from_asset(HANDLER_ASSET),
            handler="index.handler",
            memory_size=256,
            timeout=Duration.seconds(10),
            log_retention=logs.RetentionDays.ONE_YEAR,
            tracing=lambda_.Tracing.ACTIVE,
            environment={
                "TABLE_NAME": self.table.table_name,
                "PAYLOAD_POLICY": payload_policy,
                "LOG_LEVEL": "INFO",
            },
        )

        # PutItem only, the handler never reads back
        self.table.grant_write_data(self.handler)

        api_log_group = logs.LogGroup(
            self,
            "ApiGatewayAccessLogs",
            retention=logs.RetentionDays.ONE_YEAR,
        )

        # Webhook relays POST the device event as the request body
        self.api = apigw_.LambdaRestApi(
            self,
            "Endpoint",
            handler=self.handler,
            proxy=False,
            cloud_watch_role=True,
            deploy_options=apigw_.StageOptions(
                throttling_rate_limit=50,
                throttling_burst_limit=100,
                access_log_destination=apigw_.LogGroupLogDestination(api_log_group),
                access_log_format=apigw_.AccessLogFormat.json_with_standard_fields(
                    caller=True,
                    http_method=True,
                    ip=True,
                    protocol=True,
                    request_time=True,
                    resource_path=True,
                    response_length=True,
                    status=True,
                    user=True,
                ),
                tracing_enabled=True,
            ),
        )
        readings = self.api.root.add_resource("readings")
        readings.add_method("POST", api_key_required=True)

        usage_plan = self.api.add_usage_plan(
            "UsagePlan",
            name="DeviceWebhookPlan",
            throttle=apigw_.ThrottleSettings(
                rate_limit=10,
                burst_limit=20,
            ),
            quota=apigw_.QuotaSettings(
                limit=50000,
                period=apigw_.Period.DAY,
            ),
        )
        usage_plan.add_api_stage(stage=self.api.deployment_stage)

        api_key = self.api.add_api_key(
            "ApiKey",
            api_key_name="DeviceWebhookKey",
        )
        usage_plan.add_api_key(api_key)
