"""
App wiring
==========
Environment tag -> policy -> DynamoDbStack -> MonitoringStack.

The policy is resolved before any stack is created, so an unknown
environment never produces a partial cloud assembly.
"""
from __future__ import annotations

from typing import Mapping

import aws_cdk as cdk

from . import naming
from .dynamodb_stack import DynamoDbStack
from .environment import DEFAULT_POLICIES, EnvironmentPolicy, resolve_policy
from .logger import get_logger
from .monitoring_stack import MonitoringStack

logger = get_logger(__name__)


def build_app(
    app: cdk.App,
    environment: str,
    *,
    env: cdk.Environment | None = None,
    policies: Mapping[str, EnvironmentPolicy] = DEFAULT_POLICIES,
) -> tuple[DynamoDbStack, MonitoringStack]:
    policy = resolve_policy(environment, policies)
    logger.info(
        "Deploying database infrastructure",
        extra={"environment": policy.environment, "retention_days": policy.retention_days},
    )

    dynamodb_stack = DynamoDbStack(
        app, naming.dynamodb_stack_id(policy.environment),
        policy=policy,
        env=env,
    )
    monitoring_stack = MonitoringStack(
        app, naming.monitoring_stack_id(policy.environment),
        policy=policy,
        handles=dynamodb_stack.handles,
        env=env,
    )
    monitoring_stack.add_dependency(dynamodb_stack)

    for key, value in (
        ("Project", naming.APP_NAMESPACE),
        ("Environment", policy.environment),
        ("Service", "Database"),
        ("ManagedBy", "CDK"),
    ):
        cdk.Tags.of(app).add(key, value)

    return dynamodb_stack, monitoring_stack
