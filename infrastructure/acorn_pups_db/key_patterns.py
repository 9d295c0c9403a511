"""
Key Pattern Registry
====================
Composite primary keys for every record variant.

  Entity          PK                         SK
  UserProfile     USER#{user_id}             PROFILE
  DeviceMetadata  DEVICE#{device_id}         METADATA
  DeviceSettings  DEVICE#{device_id}         SETTINGS
  DeviceUser      DEVICE#{device_id}         USER#{user_id}
  Invitation      INVITATION#{invitation_id} METADATA
  DeviceStatus    DEVICE#{device_id}         STATUS#{status_type}
  UserEndpoint    USER#{user_id}             ENDPOINT#{device_fingerprint}
  DeviceLog       DEVICE#{device_id}         LOG#{timestamp}#{log_id}

Injectivity: identifier segments may not contain "#", so a key splits back
into exactly the segments it was built from. Kinds sharing a table use
distinct SK prefixes, so a Query on one PK never mixes record types up.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .errors import SchemaValidationError
from .models import StatusType

SEPARATOR = "#"


@dataclass(frozen=True)
class KeyPair:
    pk: str
    sk: str

    def as_item(self) -> dict[str, str]:
        return {"PK": self.pk, "SK": self.sk}


@dataclass(frozen=True)
class KeyTemplate:
    """A fixed prefix followed by zero or more '#'-joined identifier fields."""
    prefix: str
    fields: tuple[str, ...] = ()

    def render(self, kind: str, values: Mapping[str, str]) -> str:
        segments = [self.prefix]
        for field_name in self.fields:
            segments.append(_segment(kind, field_name, values[field_name]))
        return SEPARATOR.join(segments)


@dataclass(frozen=True)
class KeyPattern:
    kind: str
    table: str  # catalog entity the records live in
    pk: KeyTemplate
    sk: KeyTemplate

    @property
    def fields(self) -> tuple[str, ...]:
        return self.pk.fields + tuple(f for f in self.sk.fields if f not in self.pk.fields)

    def key(self, **values: str) -> KeyPair:
        expected = set(self.fields)
        missing = expected - values.keys()
        extra = values.keys() - expected
        if missing or extra:
            raise SchemaValidationError(
                self.kind,
                f"expected natural keys {sorted(expected)}, "
                f"missing={sorted(missing)} unexpected={sorted(extra)}",
            )
        return KeyPair(pk=self.pk.render(self.kind, values), sk=self.sk.render(self.kind, values))


# Segments restricted to an enumeration.
_ENUM_FIELDS = {"status_type": StatusType}


def _segment(kind: str, field_name: str, value) -> str:
    if field_name in _ENUM_FIELDS:
        enum_type = _ENUM_FIELDS[field_name]
        try:
            value = enum_type(value).value
        except ValueError:
            raise SchemaValidationError(
                kind, f"{field_name} must be one of {[e.value for e in enum_type]}, got {value!r}"
            ) from None
    if not isinstance(value, str):
        raise SchemaValidationError(kind, f"{field_name} must be a string, got {type(value).__name__}")
    if not value.strip():
        raise SchemaValidationError(kind, f"{field_name} must not be empty")
    if SEPARATOR in value:
        raise SchemaValidationError(kind, f"{field_name} must not contain '{SEPARATOR}': {value!r}")
    return value


KEY_PATTERNS: dict[str, KeyPattern] = {
    p.kind: p
    for p in (
        KeyPattern("UserProfile", "users",
                   KeyTemplate("USER", ("user_id",)), KeyTemplate("PROFILE")),
        KeyPattern("DeviceMetadata", "devices",
                   KeyTemplate("DEVICE", ("device_id",)), KeyTemplate("METADATA")),
        KeyPattern("DeviceSettings", "devices",
                   KeyTemplate("DEVICE", ("device_id",)), KeyTemplate("SETTINGS")),
        KeyPattern("DeviceUser", "device-users",
                   KeyTemplate("DEVICE", ("device_id",)), KeyTemplate("USER", ("user_id",))),
        KeyPattern("Invitation", "invitations",
                   KeyTemplate("INVITATION", ("invitation_id",)), KeyTemplate("METADATA")),
        KeyPattern("DeviceStatus", "device-status",
                   KeyTemplate("DEVICE", ("device_id",)), KeyTemplate("STATUS", ("status_type",))),
        KeyPattern("UserEndpoint", "user-endpoints",
                   KeyTemplate("USER", ("user_id",)), KeyTemplate("ENDPOINT", ("device_fingerprint",))),
        KeyPattern("DeviceLog", "device-logs",
                   KeyTemplate("DEVICE", ("device_id",)), KeyTemplate("LOG", ("timestamp", "log_id"))),
    )
}


def key_for(kind: str, **natural_keys: str) -> KeyPair:
    try:
        pattern = KEY_PATTERNS[kind]
    except KeyError:
        raise SchemaValidationError(kind, f"unknown entity kind; known: {sorted(KEY_PATTERNS)}") from None
    return pattern.key(**natural_keys)


def sk_prefixes_for_table(table: str) -> dict[str, str]:
    """Map each record kind stored in `table` to its SK prefix."""
    return {p.kind: p.sk.prefix for p in KEY_PATTERNS.values() if p.table == table}


def validate_key_patterns(patterns: Mapping[str, KeyPattern] = KEY_PATTERNS) -> None:
    """Reject registries where two kinds on one table could produce the same SK."""
    by_table: dict[str, dict[str, str]] = {}
    for pattern in patterns.values():
        for template in (pattern.pk, pattern.sk):
            if not template.prefix or SEPARATOR in template.prefix:
                raise SchemaValidationError(pattern.kind, f"malformed key prefix {template.prefix!r}")
        seen = by_table.setdefault(pattern.table, {})
        for other_kind, prefix in seen.items():
            if prefix == pattern.sk.prefix:
                raise SchemaValidationError(
                    pattern.kind,
                    f"SK prefix {prefix!r} collides with {other_kind} on table '{pattern.table}'",
                )
        seen[pattern.kind] = pattern.sk.prefix


# ---------------------------------------------------------------------------
# Per-entity helpers
# ---------------------------------------------------------------------------

def user_profile_key(user_id: str) -> KeyPair:
    return key_for("UserProfile", user_id=user_id)


def device_metadata_key(device_id: str) -> KeyPair:
    return key_for("DeviceMetadata", device_id=device_id)


def device_settings_key(device_id: str) -> KeyPair:
    return key_for("DeviceSettings", device_id=device_id)


def device_user_key(device_id: str, user_id: str) -> KeyPair:
    return key_for("DeviceUser", device_id=device_id, user_id=user_id)


def invitation_key(invitation_id: str) -> KeyPair:
    return key_for("Invitation", invitation_id=invitation_id)


def device_status_key(device_id: str, status_type: StatusType | str) -> KeyPair:
    return key_for("DeviceStatus", device_id=device_id, status_type=status_type)


def user_endpoint_key(user_id: str, device_fingerprint: str) -> KeyPair:
    return key_for("UserEndpoint", user_id=user_id, device_fingerprint=device_fingerprint)


def device_log_key(device_id: str, timestamp: str, log_id: str) -> KeyPair:
    return key_for("DeviceLog", device_id=device_id, timestamp=timestamp, log_id=log_id)


validate_key_patterns()
