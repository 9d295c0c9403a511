"""Acorn Pups database infrastructure: DynamoDB schema, provisioning, parameter publishing and monitoring."""

from .dynamodb_stack import DynamoDbStack
from .environment import EnvironmentPolicy, resolve_policy
from .monitoring_stack import MonitoringStack
from .parameters import ParameterPublisher

__all__ = [
    "DynamoDbStack",
    "EnvironmentPolicy",
    "MonitoringStack",
    "ParameterPublisher",
    "resolve_policy",
]
