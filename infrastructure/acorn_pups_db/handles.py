"""Resolved table identity, passed by value between stacks and to consumers."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from . import naming


class TableHandle(BaseModel):
    """
    name is always the literal table name. arn is a CloudFormation token inside
    a CDK app and a plain string when resolved from Parameter Store.
    """
    model_config = ConfigDict(frozen=True)

    entity: str
    display_name: str
    name: str
    arn: str

    @property
    def output_prefix(self) -> str:
        return naming.output_prefix(self.entity)
