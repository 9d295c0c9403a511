"""
Error taxonomy
==============
Every failure in this package is terminal for the run. Nothing here is
retried: transient AWS faults are retried by CloudFormation and the SDK,
not by us.

  ConfigurationError    unknown environment tag, raised before any stack exists
  SchemaValidationError bad catalog entry or malformed key segment
  ProvisioningError     a table declaration was rejected; remaining tables skipped
  PublicationError      the same parameter path was written twice in one run
  ParameterLookupError  a consumer asked for a parameter that is not there
"""
from __future__ import annotations

from typing import Iterable


class AcornPupsDbError(Exception):
    """Base class for all errors raised by acorn_pups_db."""


class ConfigurationError(AcornPupsDbError):
    """Raised when the environment tag does not map to a usable policy bundle."""
    def __init__(self, environment: str, allowed: Iterable[str] = (), detail: str | None = None):
        self.environment = environment
        self.allowed = tuple(sorted(allowed))
        if detail is None:
            detail = f"Must be one of: {', '.join(repr(a) for a in self.allowed)}"
        self.detail = detail
        super().__init__(f"Invalid environment: '{environment}'. {detail}")


class SchemaValidationError(AcornPupsDbError):
    """Raised at catalog-load time, never after a provider call."""
    def __init__(self, entity: str, detail: str):
        self.entity = entity
        self.detail = detail
        super().__init__(f"[{entity}] {detail}")


class ProvisioningError(AcornPupsDbError):
    """Raised when the table provider rejects a declaration."""
    def __init__(self, entity: str, detail: str):
        self.entity = entity
        self.detail = detail
        super().__init__(f"Failed to provision table '{entity}': {detail}")


class PublicationError(AcornPupsDbError):
    """Raised when a parameter path or output id is published twice in the same run."""
    def __init__(self, path: str, output_id: str | None = None, reason: str = "path already published"):
        self.path = path
        self.output_id = output_id
        suffix = f" (output '{output_id}')" if output_id else ""
        super().__init__(f"Cannot publish {path}{suffix}: {reason} in this run")


class ParameterLookupError(AcornPupsDbError):
    """Raised by consumers when a well-known parameter path does not resolve."""
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Parameter not found: {path}")
