"""
Unit tests for consumer-side table discovery against mocked Parameter Store.
"""
import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from acorn_pups_db.discovery import TableLocator
from acorn_pups_db.errors import ParameterLookupError
from acorn_pups_db.schema import CATALOG


def _publish(ssm, environment, entity):
    base = f"/acorn-pups/{environment}/dynamodb-tables/{entity}"
    ssm.put_parameter(Name=f"{base}/name", Value=f"acorn-pups-{entity}-{environment}", Type="String")
    ssm.put_parameter(
        Name=f"{base}/arn",
        Value=f"arn:aws:dynamodb:us-east-1:123456789012:table/acorn-pups-{entity}-{environment}",
        Type="String",
    )


@mock_aws
def test_resolve_single_table():
    ssm = boto3.client("ssm", region_name="us-east-1")
    _publish(ssm, "prod", "devices")

    handle = TableLocator("prod", ssm_client=ssm).resolve("devices")

    assert handle.entity == "devices"
    assert handle.display_name == "Devices"
    assert handle.name == "acorn-pups-devices-prod"
    assert handle.arn.endswith(":table/acorn-pups-devices-prod")


@mock_aws
def test_resolve_all_tables():
    ssm = boto3.client("ssm", region_name="us-east-1")
    for spec in CATALOG:
        _publish(ssm, "dev", spec.entity)

    handles = TableLocator("dev").resolve_all()

    assert list(handles) == [spec.entity for spec in CATALOG]
    assert handles["device-logs"].name == "acorn-pups-device-logs-dev"


@mock_aws
def test_environments_are_isolated():
    ssm = boto3.client("ssm", region_name="us-east-1")
    _publish(ssm, "dev", "users")

    with pytest.raises(ParameterLookupError) as exc:
        TableLocator("prod", ssm_client=ssm).resolve("users")
    assert exc.value.path == "/acorn-pups/prod/dynamodb-tables/users/name"
    assert isinstance(exc.value.__cause__, ClientError)


@mock_aws
def test_missing_arn_is_reported():
    ssm = boto3.client("ssm", region_name="us-east-1")
    ssm.put_parameter(Name="/acorn-pups/dev/dynamodb-tables/users/name", Value="acorn-pups-users-dev", Type="String")

    with pytest.raises(ParameterLookupError, match="users/arn"):
        TableLocator("dev", ssm_client=ssm).resolve("users")


def test_other_client_errors_propagate():
    class DeniedSsm:
        def get_parameter(self, Name):
            raise ClientError(
                {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "GetParameter"
            )

    with pytest.raises(ClientError):
        TableLocator("dev", ssm_client=DeniedSsm()).resolve("users")
