"""
Schema Catalog
==============
The seven Acorn Pups tables, declared as data.

Design principles applied:
1. One table per entity group, PK/SK on every table (single-table style
   within the group: Devices holds both METADATA and SETTINGS records)
2. At most two GSIs per table; every GSI projects ALL attributes so a
   secondary query never needs a follow-up GetItem
3. TTL on invitations and device logs (both are write-once, expire-later)
4. The catalog is the only list of tables. The provisioning stack, the
   parameter publisher, the monitoring stack and the consumer-side locator
   all iterate over it; nothing enumerates tables by hand.

Validation runs at import time, so a malformed catalog fails before any
construct is created.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field

from . import naming
from .errors import SchemaValidationError
from .key_patterns import KEY_PATTERNS
from .models import (
    DeviceInvitation,
    DeviceLog,
    DeviceMetadata,
    DeviceSettings,
    DeviceStatus,
    DeviceUserPermission,
    UserEndpoint,
    UserProfile,
    attribute_names,
)

MAX_SECONDARY_INDEXES = 2

_ENTITY_NAME = re.compile(r"^[a-z][a-z0-9]*(-[a-z0-9]+)*$")


class AttributeKind(str, Enum):
    STRING = "S"
    NUMBER = "N"
    BINARY = "B"


class KeyAttribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    type: AttributeKind = AttributeKind.STRING


class SecondaryIndex(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    partition_key: KeyAttribute
    sort_key: KeyAttribute | None = None
    projection: str = "ALL"

    @property
    def attributes(self) -> tuple[KeyAttribute, ...]:
        return (self.partition_key,) + ((self.sort_key,) if self.sort_key else ())


class TableSpec(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    entity: str
    display_name: str
    description: str
    partition_key: KeyAttribute = KeyAttribute(name="PK")
    sort_key: KeyAttribute | None = KeyAttribute(name="SK")
    secondary_indexes: tuple[SecondaryIndex, ...] = ()
    record_types: tuple[type[BaseModel], ...] = Field(min_length=1)
    time_to_live_attribute: str | None = None

    @property
    def output_prefix(self) -> str:
        return naming.output_prefix(self.entity)

    @property
    def construct_id(self) -> str:
        return f"{self.output_prefix}Table"

    @property
    def record_attributes(self) -> frozenset[str]:
        names: set[str] = set()
        for record_type in self.record_types:
            names |= attribute_names(record_type)
        return frozenset(names)

    def attribute_definitions(self) -> dict[str, AttributeKind]:
        """Every attribute used in a key schema, table or index, with its type."""
        defs = {self.partition_key.name: self.partition_key.type}
        if self.sort_key:
            defs[self.sort_key.name] = self.sort_key.type
        for index in self.secondary_indexes:
            for attr in index.attributes:
                defs[attr.name] = attr.type
        return defs


def _gsi(name: str, partition: str, sort: str | None = None) -> SecondaryIndex:
    return SecondaryIndex(
        name=name,
        partition_key=KeyAttribute(name=partition),
        sort_key=KeyAttribute(name=sort) if sort else None,
    )


CATALOG: tuple[TableSpec, ...] = (
    TableSpec(
        entity="users",
        display_name="Users",
        description="User profiles and preferences",
        secondary_indexes=(_gsi("GSI1", "email", "user_id"),),
        record_types=(UserProfile,),
    ),
    TableSpec(
        entity="devices",
        display_name="Devices",
        description="Device metadata and settings",
        secondary_indexes=(
            _gsi("GSI1", "owner_user_id", "device_id"),
            _gsi("GSI2", "serial_number", "device_id"),
        ),
        record_types=(DeviceMetadata, DeviceSettings),
    ),
    TableSpec(
        entity="device-users",
        display_name="Device Users",
        description="Device sharing and permissions",
        secondary_indexes=(_gsi("GSI1", "user_id", "device_id"),),
        record_types=(DeviceUserPermission,),
    ),
    TableSpec(
        entity="invitations",
        display_name="Invitations",
        description="Device sharing invitations",
        secondary_indexes=(
            _gsi("GSI1", "device_id", "created_at"),
            _gsi("GSI2", "invited_email", "created_at"),
        ),
        record_types=(DeviceInvitation,),
        time_to_live_attribute="ttl",
    ),
    TableSpec(
        entity="device-status",
        display_name="Device Status",
        description="Device health and status reports",
        record_types=(DeviceStatus,),
    ),
    TableSpec(
        entity="user-endpoints",
        display_name="User Endpoints",
        description="Push notification endpoints per user device",
        record_types=(UserEndpoint,),
    ),
    TableSpec(
        entity="device-logs",
        display_name="Device Logs",
        description="Firmware ERROR and FATAL logs",
        record_types=(DeviceLog,),
        time_to_live_attribute="ttl",
    ),
)


def validate_table(spec: TableSpec) -> None:
    if not _ENTITY_NAME.match(spec.entity):
        raise SchemaValidationError(spec.entity, "entity name must be kebab-case")

    if len(spec.secondary_indexes) > MAX_SECONDARY_INDEXES:
        raise SchemaValidationError(
            spec.entity,
            f"{len(spec.secondary_indexes)} secondary indexes declared, "
            f"at most {MAX_SECONDARY_INDEXES} allowed",
        )

    index_names = [index.name for index in spec.secondary_indexes]
    if len(set(index_names)) != len(index_names):
        raise SchemaValidationError(spec.entity, f"duplicate index names: {index_names}")

    available = spec.record_attributes
    for index in spec.secondary_indexes:
        if index.projection != "ALL":
            raise SchemaValidationError(
                spec.entity, f"index {index.name} must project ALL, got {index.projection!r}"
            )
        for attr in index.attributes:
            if attr.name not in available:
                raise SchemaValidationError(
                    spec.entity,
                    f"index {index.name} uses attribute '{attr.name}' "
                    f"which no record type of this table defines",
                )

    if spec.time_to_live_attribute and spec.time_to_live_attribute not in available:
        raise SchemaValidationError(
            spec.entity, f"TTL attribute '{spec.time_to_live_attribute}' is not a record attribute"
        )

    # Every key pattern writes an SK, so its table must declare one.
    if spec.sort_key is None:
        for pattern in KEY_PATTERNS.values():
            if pattern.table == spec.entity:
                raise SchemaValidationError(
                    spec.entity, f"{pattern.kind} needs a sort key but the table declares none"
                )


def validate_catalog(catalog: Iterable[TableSpec] = CATALOG) -> tuple[TableSpec, ...]:
    """
    Validate every entry and the catalog as a whole. Returns the catalog as
    a tuple so callers can validate and iterate in one step.
    """
    catalog = tuple(catalog)
    seen: set[str] = set()
    for spec in catalog:
        if spec.entity in seen:
            raise SchemaValidationError(spec.entity, "entity declared more than once")
        seen.add(spec.entity)
        validate_table(spec)

    return catalog


def _check_key_pattern_coverage(catalog: tuple[TableSpec, ...]) -> None:
    declared = {spec.entity for spec in catalog}
    for pattern in KEY_PATTERNS.values():
        if pattern.table not in declared:
            raise SchemaValidationError(
                pattern.table, f"key pattern {pattern.kind} targets a table missing from the catalog"
            )


def get_table_spec(entity: str, catalog: Iterable[TableSpec] = CATALOG) -> TableSpec:
    for spec in catalog:
        if spec.entity == entity:
            return spec
    raise SchemaValidationError(entity, "no such table in the catalog")


def describe_catalog(catalog: Iterable[TableSpec] = CATALOG) -> list[dict[str, Any]]:
    """
    JSON-friendly view of the schema, for docs and for diffing two deployments.
    Record models are reported by class name.
    """
    described = []
    for spec in catalog:
        described.append({
            "entity": spec.entity,
            "display_name": spec.display_name,
            "description": spec.description,
            "partition_key": spec.partition_key.model_dump(mode="json"),
            "sort_key": spec.sort_key.model_dump(mode="json") if spec.sort_key else None,
            "secondary_indexes": [index.model_dump(mode="json") for index in spec.secondary_indexes],
            "time_to_live_attribute": spec.time_to_live_attribute,
            "record_types": [record_type.__name__ for record_type in spec.record_types],
            "key_patterns": {
                p.kind: {"pk": p.pk.prefix, "sk": p.sk.prefix}
                for p in KEY_PATTERNS.values() if p.table == spec.entity
            },
        })
    return described


validate_catalog(CATALOG)
_check_key_pattern_coverage(CATALOG)
