"""
Naming Conventions
==================
Every physical name and registry path this app produces is built here.
Consumers in other repos hard-code these formats, so they must not drift:

  table           acorn-pups-<entity>-<env>
  table param     /acorn-pups/<env>/dynamodb-tables/<entity>/{name|arn}
  output param    /acorn-pups/<env>/cfn-outputs/<stack>/<kebab-output-id>
  export          acorn-pups-<entity>-table-{name|arn}-<env>
  dashboard       acorn-pups-database-<env>
  stacks          acorn-pups-db-<env>-dynamodb / acorn-pups-db-<env>-monitoring
"""
from __future__ import annotations

import re

APP_NAMESPACE = "acorn-pups"

TABLE_ATTRIBUTES = ("name", "arn")

_UPPER = re.compile(r"([A-Z])")


def kebab_case(name: str) -> str:
    """
    PascalCase -> kebab-case: a dash before every uppercase letter, lowercase,
    then drop one leading dash.

    "UsersTableName" -> "users-table-name"; "users-table-name" is unchanged.
    Digits stay attached to the preceding word ("Output1" -> "output1").
    """
    return _UPPER.sub(r"-\1", name).lower().removeprefix("-")


def output_prefix(entity: str) -> str:
    """'device-users' -> 'DeviceUsers'; stem of output ids and construct ids."""
    return "".join(part.title() for part in entity.split("-"))


def table_name(entity: str, environment: str) -> str:
    return f"{APP_NAMESPACE}-{entity}-{environment}"


def table_parameter_path(environment: str, entity: str, attribute: str) -> str:
    if attribute not in TABLE_ATTRIBUTES:
        raise ValueError(f"attribute must be one of {TABLE_ATTRIBUTES}, got {attribute!r}")
    return f"/{APP_NAMESPACE}/{environment}/dynamodb-tables/{entity}/{attribute}"


def output_parameter_path(environment: str, stack_name: str, output_id: str) -> str:
    return f"/{APP_NAMESPACE}/{environment}/cfn-outputs/{stack_name}/{kebab_case(output_id)}"


def table_export_name(entity: str, attribute: str, environment: str) -> str:
    if attribute not in TABLE_ATTRIBUTES:
        raise ValueError(f"attribute must be one of {TABLE_ATTRIBUTES}, got {attribute!r}")
    return f"{APP_NAMESPACE}-{entity}-table-{attribute}-{environment}"


def dashboard_name(environment: str) -> str:
    return f"{APP_NAMESPACE}-database-{environment}"


def stack_prefix(environment: str) -> str:
    return f"{APP_NAMESPACE}-db-{environment}"


def dynamodb_stack_id(environment: str) -> str:
    return f"{stack_prefix(environment)}-dynamodb"


def monitoring_stack_id(environment: str) -> str:
    return f"{stack_prefix(environment)}-monitoring"


def alarm_name(entity: str, suffix: str) -> str:
    return f"{APP_NAMESPACE}-{entity}-{suffix}"
