"""
Pytest configuration and shared fixtures.
CDK stacks are asserted on their synthesized templates (aws_cdk.assertions).
Parameter Store consumers use moto (AWS mocks in-process).
"""
import aws_cdk as cdk
import pytest

from acorn_pups_db.environment import resolve_policy
from acorn_pups_db.handles import TableHandle
from acorn_pups_db.schema import CATALOG


@pytest.fixture(autouse=True)
def aws_env(monkeypatch):
    """Set fake AWS credentials so boto3 doesn't error in tests."""
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "test")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "test")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def app():
    return cdk.App()


@pytest.fixture
def test_policy():
    """The dev bundle under the 'test' tag, as used for ephemeral test stacks."""
    return resolve_policy("dev").for_environment("test")


@pytest.fixture
def prod_policy():
    return resolve_policy("prod")


@pytest.fixture
def literal_handles():
    """Handles as a consumer would see them after resolution: plain strings, no tokens."""
    return {
        spec.entity: TableHandle(
            entity=spec.entity,
            display_name=spec.display_name,
            name=f"acorn-pups-{spec.entity}-test",
            arn=f"arn:aws:dynamodb:us-east-1:123456789012:table/acorn-pups-{spec.entity}-test",
        )
        for spec in CATALOG
    }
