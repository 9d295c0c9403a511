"""
DynamoDB Stack
==============
All Acorn Pups tables, built from the schema catalog by one generic function.

Per-environment behaviour comes from the EnvironmentPolicy only:
  - point-in-time recovery   policy.durable_recovery_enabled
  - deletion protection      policy.deletion_protected
  - removal policy           RETAIN if policy.retain_on_teardown else DESTROY
  - billing mode             on-demand everywhere (no capacity planning for
                             bursty device traffic)

All-or-nothing: if any table declaration is rejected the stack raises and
nothing is synthesized. CloudFormation rolls back a failed deploy as a unit,
so a half-built schema is never left behind either.

Every table's name and ARN is published to Parameter Store and as a stack
export (see parameters.py).
"""
from __future__ import annotations

from typing import Iterable

import aws_cdk as cdk
from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct

from . import naming
from .environment import EnvironmentPolicy
from .errors import AcornPupsDbError, ProvisioningError
from .handles import TableHandle
from .logger import get_logger
from .parameters import ParameterPublisher, PublishedOutput
from .schema import CATALOG, AttributeKind, KeyAttribute, TableSpec, validate_catalog

logger = get_logger(__name__)

_ATTRIBUTE_TYPES = {
    AttributeKind.STRING: dynamodb.AttributeType.STRING,
    AttributeKind.NUMBER: dynamodb.AttributeType.NUMBER,
    AttributeKind.BINARY: dynamodb.AttributeType.BINARY,
}

_BILLING_MODES = {
    "PAY_PER_REQUEST": dynamodb.BillingMode.PAY_PER_REQUEST,
}


def _attribute(key: KeyAttribute) -> dynamodb.Attribute:
    return dynamodb.Attribute(name=key.name, type=_ATTRIBUTE_TYPES[key.type])


class DynamoDbStack(cdk.Stack):
    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        policy: EnvironmentPolicy,
        catalog: Iterable[TableSpec] = CATALOG,
        **kwargs,
    ):
        # Schema errors surface before a single construct exists.
        catalog = validate_catalog(catalog)
        super().__init__(scope, id, **kwargs)

        self.catalog = catalog
        self.policy = policy
        self.tables: dict[str, dynamodb.Table] = {}
        self.handles: dict[str, TableHandle] = {}

        for spec in self.catalog:
            try:
                table = self._provision_table(spec)
            except AcornPupsDbError:
                raise
            except Exception as e:
                logger.error(
                    "Table declaration rejected",
                    extra={"entity": spec.entity, "environment": policy.environment},
                )
                raise ProvisioningError(spec.entity, str(e)) from e

            self.tables[spec.entity] = table
            # table_name is explicit, so the literal name never needs a cross-stack import
            self.handles[spec.entity] = TableHandle(
                entity=spec.entity,
                display_name=spec.display_name,
                name=naming.table_name(spec.entity, policy.environment),
                arn=table.table_arn,
            )

        self.parameter_publisher = ParameterPublisher(
            self,
            environment=policy.environment,
            stack_name=self.stack_name,
        )
        self.outputs: list[PublishedOutput] = self.parameter_publisher.publish_table_handles(
            list(self.handles.values())
        )

        logger.info(
            "DynamoDB stack declared",
            extra={
                "stack": self.stack_name,
                "environment": policy.environment,
                "tables": len(self.tables),
                "parameters": len(self.outputs),
            },
        )

    def _provision_table(self, spec: TableSpec) -> dynamodb.Table:
        """One catalog entry -> one dynamodb.Table, GSIs included."""
        policy = self.policy
        table = dynamodb.Table(
            self, spec.construct_id,
            table_name=naming.table_name(spec.entity, policy.environment),
            partition_key=_attribute(spec.partition_key),
            sort_key=_attribute(spec.sort_key) if spec.sort_key else None,
            billing_mode=_BILLING_MODES[policy.billing_mode],
            point_in_time_recovery_specification=dynamodb.PointInTimeRecoverySpecification(
                point_in_time_recovery_enabled=policy.durable_recovery_enabled,
            ),
            deletion_protection=policy.deletion_protected,
            time_to_live_attribute=spec.time_to_live_attribute,
            removal_policy=(
                cdk.RemovalPolicy.RETAIN if policy.retain_on_teardown else cdk.RemovalPolicy.DESTROY
            ),
        )

        for index in spec.secondary_indexes:
            table.add_global_secondary_index(
                index_name=index.name,
                partition_key=_attribute(index.partition_key),
                sort_key=_attribute(index.sort_key) if index.sort_key else None,
                projection_type=dynamodb.ProjectionType.ALL,
            )

        logger.debug(
            "Declared table",
            extra={
                "entity": spec.entity,
                "table_name": naming.table_name(spec.entity, policy.environment),
                "secondary_indexes": [index.name for index in spec.secondary_indexes],
            },
        )
        return table
