"""
Parameter Publisher
===================
Every value another stack might need is written twice:

  1. a CloudFormation output with an export name, for stacks that can take a
     hard Fn::ImportValue dependency on us;
  2. an SSM String parameter at a well-known path, for everything else.

Path (2) is what makes independent deployment work: a consumer only needs the
environment name and the convention in `naming.py` to find a table. It never
needs our stack name, and it never blocks our stack from being updated the way
an export does.

Paths are unique per run. Publishing the same path twice is a caller bug and
raises PublicationError; we never rename to make it fit.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import aws_cdk as cdk
from aws_cdk import aws_ssm as ssm
from constructs import Construct
from pydantic import BaseModel, ConfigDict

from . import naming
from .errors import PublicationError
from .handles import TableHandle
from .logger import get_logger

logger = get_logger(__name__)


class OutputSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_id: str
    value: str
    description: str
    export_name: str | None = None
    parameter_path: str | None = None


@dataclass(frozen=True)
class PublishedOutput:
    output_id: str
    parameter_path: str
    export_name: str | None
    parameter: ssm.StringParameter
    output: cdk.CfnOutput | None


class ParameterPublisher:
    """
    Parameters
    ----------
    scope:       construct (normally the stack) the parameters and outputs live in
    environment: environment tag used in derived paths
    stack_name:  stack identity used in derived paths and parameter descriptions
    """

    def __init__(self, scope: Construct, *, environment: str, stack_name: str):
        self.scope = scope
        self.environment = environment
        self.stack_name = stack_name
        self._published: list[PublishedOutput] = []
        self._paths: set[str] = set()
        self._ids: set[str] = set()

    @property
    def published(self) -> list[PublishedOutput]:
        return list(self._published)

    def parameter_path(self, output_id: str) -> str:
        return naming.output_parameter_path(self.environment, self.stack_name, output_id)

    def publish(
        self,
        output_id: str,
        value: str,
        description: str,
        export_name: str | None = None,
        parameter_path: str | None = None,
    ) -> PublishedOutput:
        """Create the SSM parameter and the CfnOutput for one value."""
        path = parameter_path or self.parameter_path(output_id)
        parameter = self._create_string_parameter(output_id, value, description, path)
        output = cdk.CfnOutput(
            self.scope, output_id,
            value=value,
            description=description,
            export_name=export_name,
        )
        return self._record(PublishedOutput(output_id, path, export_name, parameter, output))

    def publish_many(self, outputs: Iterable[OutputSpec]) -> list[PublishedOutput]:
        """Publish in input order. Duplicates are not merged; they raise."""
        return [
            self.publish(
                spec.output_id,
                spec.value,
                spec.description,
                export_name=spec.export_name,
                parameter_path=spec.parameter_path,
            )
            for spec in outputs
        ]

    def create_parameter(
        self,
        parameter_id: str,
        value: str,
        description: str,
        parameter_path: str | None = None,
    ) -> PublishedOutput:
        """Parameter only, no CloudFormation output."""
        path = parameter_path or self.parameter_path(parameter_id)
        parameter = self._create_string_parameter(parameter_id, value, description, path)
        return self._record(PublishedOutput(parameter_id, path, None, parameter, None))

    def table_outputs(self, handles: Sequence[TableHandle]) -> list[OutputSpec]:
        """Name + ARN output specs for each table, on the dynamodb-tables paths."""
        specs = []
        for handle in handles:
            for attribute, value, label in (
                ("name", handle.name, "Name"),
                ("arn", handle.arn, "ARN"),
            ):
                specs.append(OutputSpec(
                    output_id=f"{handle.output_prefix}Table{attribute.title()}",
                    value=value,
                    description=f"{label} of the {handle.display_name} DynamoDB table",
                    export_name=naming.table_export_name(handle.entity, attribute, self.environment),
                    parameter_path=naming.table_parameter_path(self.environment, handle.entity, attribute),
                ))
        return specs

    def publish_table_handles(self, handles: Sequence[TableHandle]) -> list[PublishedOutput]:
        return self.publish_many(self.table_outputs(handles))

    # ------------------------------------------------------------------

    def _claim(self, construct_id: str, path: str) -> None:
        if path in self._paths:
            raise PublicationError(path, construct_id)
        if construct_id in self._ids:
            raise PublicationError(path, construct_id, reason="output id already used")

    def _create_string_parameter(
        self, construct_id: str, value: str, description: str, path: str
    ) -> ssm.StringParameter:
        self._claim(construct_id, path)
        parameter = ssm.StringParameter(
            self.scope, f"{construct_id}Parameter",
            parameter_name=path,
            string_value=value,
            description=f"[{self.stack_name}] {description}",
            tier=ssm.ParameterTier.STANDARD,
            allowed_pattern=".*",
        )
        self._paths.add(path)
        self._ids.add(construct_id)
        return parameter

    def _record(self, published: PublishedOutput) -> PublishedOutput:
        self._published.append(published)
        logger.debug(
            "Published parameter",
            extra={
                "output_id": published.output_id,
                "parameter_path": published.parameter_path,
                "export_name": published.export_name,
            },
        )
        return published
