"""
Environment Policy Resolver
===========================
The only place that looks at the raw environment tag. Every stack receives an
EnvironmentPolicy and reads its fields; nothing else compares "prod" strings.

An unknown tag is a hard stop. Silently defaulting "staging" to dev would
turn off point-in-time recovery and deletion protection on a table someone
believes is protected.

A bundle tagged "prod" must keep every protection on. That is checked on
construction, so relabelling a dev bundle as prod fails instead of
deploying unprotected production tables.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Literal, Mapping

from pydantic import BaseModel, ConfigDict, model_validator

from .errors import ConfigurationError

PRODUCTION = "prod"

_PRODUCTION_PROTECTIONS = (
    "durable_recovery_enabled",
    "deletion_protected",
    "alarms_enabled",
    "retain_on_teardown",
)


class EnvironmentPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    environment: str
    durable_recovery_enabled: bool  # DynamoDB point-in-time recovery
    deletion_protected: bool
    retention_days: int
    alarms_enabled: bool
    detailed_monitoring: bool
    retain_on_teardown: bool  # RemovalPolicy.RETAIN vs DESTROY
    billing_mode: Literal["PAY_PER_REQUEST"] = "PAY_PER_REQUEST"

    @model_validator(mode="after")
    def _production_keeps_protections(self) -> EnvironmentPolicy:
        if self.environment == PRODUCTION:
            disabled = [knob for knob in _PRODUCTION_PROTECTIONS if not getattr(self, knob)]
            if disabled:
                raise ConfigurationError(
                    self.environment,
                    detail=f"production policy must enable {', '.join(disabled)}",
                )
        return self

    def for_environment(self, environment: str) -> EnvironmentPolicy:
        """Same knobs under another tag (e.g. an ephemeral 'test' stack built from the dev bundle)."""
        return EnvironmentPolicy.model_validate({**self.model_dump(), "environment": environment})


DEFAULT_POLICIES: Mapping[str, EnvironmentPolicy] = MappingProxyType({
    "dev": EnvironmentPolicy(
        environment="dev",
        durable_recovery_enabled=False,
        deletion_protected=False,
        retention_days=7,
        alarms_enabled=False,
        detailed_monitoring=False,
        retain_on_teardown=False,
    ),
    PRODUCTION: EnvironmentPolicy(
        environment=PRODUCTION,
        durable_recovery_enabled=True,
        deletion_protected=True,
        retention_days=30,
        alarms_enabled=True,
        detailed_monitoring=True,
        retain_on_teardown=True,
    ),
})


def resolve_policy(
    environment: str | None,
    policies: Mapping[str, EnvironmentPolicy] = DEFAULT_POLICIES,
) -> EnvironmentPolicy:
    try:
        policy = policies[environment]
    except KeyError:
        raise ConfigurationError(str(environment), policies.keys()) from None
    if policy.environment != environment:
        raise ConfigurationError(
            environment,
            policies.keys(),
            detail=f"policy registered under this tag is labelled '{policy.environment}'",
        )
    return policy
