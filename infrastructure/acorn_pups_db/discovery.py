"""
Table Discovery (consumer side)
===============================
How other deployments find our tables: read the well-known Parameter Store
paths for an environment. No stack names, no exports, no CloudFormation
dependency on this repo.

Usage:
  from acorn_pups_db.discovery import TableLocator
  devices = TableLocator("prod").resolve("devices")
  boto3.resource("dynamodb").Table(devices.name)
"""
from __future__ import annotations

import boto3
from botocore.exceptions import ClientError

from . import naming
from .errors import ParameterLookupError
from .handles import TableHandle
from .logger import get_logger
from .schema import CATALOG, get_table_spec

logger = get_logger(__name__)


class TableLocator:
    def __init__(self, environment: str, ssm_client=None):
        self.environment = environment
        self._ssm = ssm_client or boto3.client("ssm")

    def _get(self, path: str) -> str:
        try:
            response = self._ssm.get_parameter(Name=path)
        except ClientError as e:
            if e.response["Error"]["Code"] == "ParameterNotFound":
                raise ParameterLookupError(path) from e
            raise
        return response["Parameter"]["Value"]

    def resolve(self, entity: str) -> TableHandle:
        spec = get_table_spec(entity)
        handle = TableHandle(
            entity=entity,
            display_name=spec.display_name,
            name=self._get(naming.table_parameter_path(self.environment, entity, "name")),
            arn=self._get(naming.table_parameter_path(self.environment, entity, "arn")),
        )
        logger.debug("Resolved table", extra={"entity": entity, "table_name": handle.name})
        return handle

    def resolve_all(self) -> dict[str, TableHandle]:
        return {spec.entity: self.resolve(spec.entity) for spec in CATALOG}
