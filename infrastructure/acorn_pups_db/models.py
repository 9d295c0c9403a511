"""
Acorn Pups Record Shapes
========================
Every record variant stored in the seven tables, as Pydantic models.

These models are the schema's documentation and the reference the catalog
validates its secondary indexes against: an index attribute that no record
variant carries can never be populated, so it is rejected at load time.
Nothing in this package reads or writes records; the application runtime owns
the data.

Identity notes:
  user_id            the Cognito sub, used verbatim. Never regenerated.
  device_id          permanent for the life of the hardware.
  device_instance_id regenerated on every factory reset.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class StatusType(str, Enum):
    CURRENT = "CURRENT"
    HEALTH = "HEALTH"
    CONNECTIVITY = "CONNECTIVITY"


class NotificationSound(str, Enum):
    DEFAULT = "default"
    SILENT = "silent"
    CUSTOM = "custom"


class Platform(str, Enum):
    IOS = "ios"
    ANDROID = "android"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    FATAL = "FATAL"


class LogComponent(str, Enum):
    RF = "RF"
    MQTT = "MQTT"
    WIFI = "WIFI"
    BUTTON = "BUTTON"
    SYSTEM = "SYSTEM"
    GENERAL = "GENERAL"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, use_enum_values=True)


# ---------------------------------------------------------------------------
# Users table
# ---------------------------------------------------------------------------

class UserProfile(_Record):
    user_id: str
    email: str
    full_name: str
    phone: str | None = None
    timezone: str
    created_at: str
    updated_at: str
    last_login: str | None = None
    is_active: bool = True
    push_notifications: bool = True
    preferred_language: str = "en"
    sound_alerts: bool = True
    vibration_alerts: bool = True


# ---------------------------------------------------------------------------
# Devices table (two record variants under one partition)
# ---------------------------------------------------------------------------

class DeviceMetadata(_Record):
    device_id: str
    device_instance_id: str
    serial_number: str
    mac_address: str
    device_name: str
    owner_user_id: str
    firmware_version: str
    hardware_version: str
    is_online: bool = False
    last_seen: str
    wifi_ssid: str
    signal_strength: int
    created_at: str
    updated_at: str
    last_reset_at: str | None = None
    is_active: bool = True


class DeviceSettings(_Record):
    device_id: str
    sound_enabled: bool = True
    sound_volume: int = Field(ge=0, le=10)
    led_brightness: int = Field(ge=0, le=10)
    notification_cooldown: int = Field(ge=0)
    quiet_hours_enabled: bool = False
    quiet_hours_start: str
    quiet_hours_end: str


# ---------------------------------------------------------------------------
# DeviceUsers table
# ---------------------------------------------------------------------------

class DeviceUserPermission(_Record):
    device_id: str
    user_id: str
    notifications_permission: bool
    settings_permission: bool
    notifications_enabled: bool = True
    notification_sound: NotificationSound = NotificationSound.DEFAULT
    notification_vibration: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str
    quiet_hours_end: str
    custom_notification_sound: str | None = None
    device_nickname: str | None = None
    invited_by: str
    invited_at: str
    accepted_at: str


# ---------------------------------------------------------------------------
# Invitations table (TTL: ~1 year)
# ---------------------------------------------------------------------------

class DeviceInvitation(_Record):
    invitation_id: str
    device_id: str
    invited_email: str
    invited_by: str
    invitation_token: str
    expires_at: str
    created_at: str
    accepted_at: str | None = None
    declined_at: str | None = None
    is_accepted: bool = False
    is_expired: bool = False
    ttl: int  # unix seconds


# ---------------------------------------------------------------------------
# DeviceStatus table: one live record per (device, status_type)
# ---------------------------------------------------------------------------

class DeviceStatus(_Record):
    device_id: str
    status_type: StatusType
    timestamp: str
    signal_strength: int
    is_online: bool
    memory_usage: int
    cpu_temperature: float
    uptime: int
    error_count: int = 0
    last_error_message: str | None = None
    firmware_version: str


# ---------------------------------------------------------------------------
# UserEndpoints table: push notification targets, one per phone
# ---------------------------------------------------------------------------

class UserEndpoint(_Record):
    user_id: str
    device_fingerprint: str
    expo_push_token: str
    platform: Platform
    device_info: str
    is_active: bool = True
    created_at: str
    last_used: str
    updated_at: str


# ---------------------------------------------------------------------------
# DeviceLogs table: only ERROR and FATAL are shipped by firmware (TTL: 30 days)
# ---------------------------------------------------------------------------

class DeviceLog(_Record):
    device_id: str
    log_id: str
    timestamp: str
    level: LogLevel
    component: LogComponent
    message: str
    metadata: dict[str, Any] | None = None
    created_at: str
    ttl: int  # unix seconds


def attribute_names(record_type: type[BaseModel]) -> frozenset[str]:
    return frozenset(record_type.model_fields)
