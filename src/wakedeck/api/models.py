"""Pydantic request/response models for the Wakedeck API."""

import ipaddress
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from wakedeck.core.mac import normalize_mac
from wakedeck.storage.devices import MAX_NAME_LENGTH

DeviceStatus = Literal["online", "offline", "unknown"]


def _check_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Device name is required")
    if len(value) > MAX_NAME_LENGTH:
        raise ValueError("Device name is too long")
    return value


def _check_ip(value: str) -> str:
    value = value.strip()
    try:
        ipaddress.IPv4Address(value)
    except ValueError:
        raise ValueError("Invalid IPv4 address") from None
    return value


class DeviceCreate(BaseModel):
    name: str
    mac: str
    ip: str

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _check_name(v)

    @field_validator("mac")
    @classmethod
    def check_mac(cls, v: str) -> str:
        return normalize_mac(v)

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v: str) -> str:
        return _check_ip(v)


class DeviceUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    mac: Optional[str] = None
    ip: Optional[str] = None
    status: Optional[DeviceStatus] = None
    last_woken: Optional[str] = Field(default=None, alias="lastWoken")

    # Defaults are not validated, so this only fires on an explicit null.
    @field_validator("name", "mac", "ip", "status", "last_woken", mode="before")
    @classmethod
    def check_not_null(cls, v: object) -> object:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_name(v)

    @field_validator("mac")
    @classmethod
    def check_mac(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else normalize_mac(v)

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _check_ip(v)

    @field_validator("last_woken")
    @classmethod
    def check_last_woken(cls, v: Optional[str]) -> Optional[str]:
        if v:
            try:
                datetime.fromisoformat(v.replace("Z", "+00:00"))
            except ValueError:
                raise ValueError("Invalid date format for lastWoken") from None
        return v

    @model_validator(mode="after")
    def check_not_empty(self) -> "DeviceUpdate":
        if not self.model_fields_set:
            raise ValueError("At least one field must be provided for update")
        return self


class WakeRequest(BaseModel):
    mac: str
    ip: str
    port: int = Field(default=9, ge=1, le=65535)

    @field_validator("mac")
    @classmethod
    def check_mac(cls, v: str) -> str:
        return normalize_mac(v)

    @field_validator("ip")
    @classmethod
    def check_ip(cls, v: str) -> str:
        return _check_ip(v)


class DeviceResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    mac: str
    ip: str
    status: DeviceStatus
    last_woken: Optional[str] = Field(default=None, alias="lastWoken")


class HealthResponse(BaseModel):
    status: str
    version: str
