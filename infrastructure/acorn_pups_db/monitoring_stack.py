"""
Monitoring Stack
================
CloudWatch dashboard for every table, plus alarms where the policy asks for them.

Per table, all Sum over 5 minutes in AWS/DynamoDB:
  ConsumedReadCapacityUnits / ConsumedWriteCapacityUnits  traffic
  ReadThrottles / WriteThrottles                          saturation
  SystemErrors                                            errors

Alarms come from alarms.ALARM_RULES and exist only when
policy.alarms_enabled. Dev tables throttle during load tests and nobody
should be paged for that.

This stack only takes TableHandle values. The app adds an explicit
dependency on the DynamoDB stack, so the tables exist before any metric or
alarm that names them.
"""
from __future__ import annotations

from typing import Mapping

import aws_cdk as cdk
from aws_cdk import aws_cloudwatch as cw
from constructs import Construct

from . import naming
from .alarms import ALARM_RULES, NAMESPACE, PERIOD_MINUTES, STATISTIC, AlarmRule
from .environment import EnvironmentPolicy
from .handles import TableHandle
from .logger import get_logger

logger = get_logger(__name__)

CAPACITY_METRICS = ("ConsumedReadCapacityUnits", "ConsumedWriteCapacityUnits")
THROTTLE_METRICS = ("ReadThrottles", "WriteThrottles")
ERROR_METRICS = ("SystemErrors",)
TABLE_METRICS = CAPACITY_METRICS + THROTTLE_METRICS + ERROR_METRICS

_COMPARISON_OPERATORS = {
    "GreaterThanOrEqualToThreshold": cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
    "GreaterThanThreshold": cw.ComparisonOperator.GREATER_THAN_THRESHOLD,
}

_MISSING_DATA = {
    "notBreaching": cw.TreatMissingData.NOT_BREACHING,
    "breaching": cw.TreatMissingData.BREACHING,
}


def table_metric(table_name: str, metric_name: str) -> cw.Metric:
    return cw.Metric(
        namespace=NAMESPACE,
        metric_name=metric_name,
        dimensions_map={"TableName": table_name},
        statistic=STATISTIC,
        period=cdk.Duration.minutes(PERIOD_MINUTES),
    )


class MonitoringStack(cdk.Stack):
    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        policy: EnvironmentPolicy,
        handles: Mapping[str, TableHandle],
        **kwargs,
    ):
        super().__init__(scope, id, **kwargs)

        self.policy = policy
        self.metrics: dict[str, dict[str, cw.Metric]] = {}
        self.alarms: dict[str, list[cw.Alarm]] = {}

        self.dashboard = cw.Dashboard(
            self, "AcornPupsDatabaseDashboard",
            dashboard_name=naming.dashboard_name(policy.environment),
        )

        for entity, handle in handles.items():
            metrics = {name: table_metric(handle.name, name) for name in TABLE_METRICS}
            self.metrics[entity] = metrics

            if policy.alarms_enabled:
                self.alarms[entity] = [
                    self._create_alarm(handle, rule, metrics[rule.metric_name])
                    for rule in ALARM_RULES
                ]

            self.dashboard.add_widgets(
                cw.GraphWidget(
                    title=f"{handle.display_name} - Consumed Capacity",
                    left=[metrics["ConsumedReadCapacityUnits"]],
                    right=[metrics["ConsumedWriteCapacityUnits"]],
                    width=12,
                    height=6,
                ),
                cw.GraphWidget(
                    title=f"{handle.display_name} - Throttles & Errors",
                    left=[metrics["ReadThrottles"], metrics["WriteThrottles"]],
                    right=[metrics["SystemErrors"]],
                    width=12,
                    height=6,
                ),
            )

        if policy.detailed_monitoring and self.metrics:
            self.dashboard.add_widgets(
                cw.SingleValueWidget(
                    title="Throttled requests (all tables)",
                    metrics=[
                        m for metrics in self.metrics.values()
                        for name, m in metrics.items() if name in THROTTLE_METRICS
                    ],
                    width=24,
                    height=6,
                )
            )

        self.dashboard.add_widgets(
            cw.TextWidget(markdown=self._overview_markdown(handles), width=24, height=8)
        )

        logger.info(
            "Monitoring stack declared",
            extra={
                "stack": self.stack_name,
                "environment": policy.environment,
                "tables": len(self.metrics),
                "alarms": sum(len(a) for a in self.alarms.values()),
            },
        )

    def _create_alarm(self, handle: TableHandle, rule: AlarmRule, metric: cw.Metric) -> cw.Alarm:
        return cw.Alarm(
            self, f"{handle.output_prefix}{rule.construct_suffix}Alarm",
            alarm_name=naming.alarm_name(handle.entity, rule.suffix),
            alarm_description=rule.description.format(table=handle.display_name),
            metric=metric,
            threshold=rule.threshold,
            evaluation_periods=rule.evaluation_periods,
            comparison_operator=_COMPARISON_OPERATORS[rule.comparison.value],
            treat_missing_data=_MISSING_DATA[rule.missing_data.value],
        )

    def _overview_markdown(self, handles: Mapping[str, TableHandle]) -> str:
        lines = [
            "# Acorn Pups Database Monitoring Dashboard",
            "",
            f"Environment: **{self.policy.environment}**, "
            f"backup retention {self.policy.retention_days} days",
            "",
            "## Tables",
        ]
        lines += [f"- **{h.display_name}**" for h in handles.values()]
        lines += [
            "",
            "## Key Metrics",
            "- **Consumed Capacity**: Read/write units consumed",
            "- **Throttles**: Requests that were throttled",
            "- **System Errors**: Service-side errors",
            "",
            "## Alarm Thresholds",
        ]
        if self.policy.alarms_enabled:
            lines += [
                f"- **{rule.metric_name}**: >= {rule.threshold:g} in "
                f"{rule.evaluation_periods} x {PERIOD_MINUTES} min period(s)"
                for rule in ALARM_RULES
            ]
        else:
            lines.append("- Alarms disabled in this environment")
        return "\n".join(lines)
