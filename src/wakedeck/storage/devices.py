"""JSON-file device registry."""

import json
import logging
import os
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from wakedeck.core.mac import normalize_mac

logger = logging.getLogger(__name__)

DEVICE_STATUSES = ("online", "offline", "unknown")
MAX_NAME_LENGTH = 100


class StorageError(Exception):
    """Base class for device registry failures."""


class DeviceNotFoundError(StorageError):
    """Raised when no device has the requested id."""

    def __init__(self, device_id: str) -> None:
        self.device_id = device_id
        super().__init__(f"Device not found: {device_id}")


class DuplicateDeviceError(StorageError):
    """Raised when another device already uses the MAC address."""

    def __init__(self, mac: str) -> None:
        self.mac = mac
        super().__init__("A device with that MAC address already exists")


@dataclass
class Device:
    """A registered device that can be woken."""

    id: str
    name: str
    mac: str
    ip: str
    status: str = "unknown"
    # ISO-8601 timestamp of the last successful dispatch, not of the device waking.
    last_woken: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "mac": self.mac,
            "ip": self.ip,
            "status": self.status,
        }
        if self.last_woken:
            d["lastWoken"] = self.last_woken
        return d

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Device":
        status = raw.get("status", "unknown")
        last_woken = raw.get("lastWoken")
        return cls(
            id=str(raw["id"]),
            name=str(raw["name"]),
            mac=str(raw["mac"]),
            ip=str(raw["ip"]),
            status=status if status in DEVICE_STATUSES else "unknown",
            last_woken=str(last_woken) if last_woken else None,
        )


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise ValueError("Device name is required")
    if len(cleaned) > MAX_NAME_LENGTH:
        raise ValueError("Device name is too long")
    return cleaned


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class DeviceStore:
    """
    Device registry persisted as a JSON array in a single data file.

    Every operation reads the file afresh and writes it back atomically,
    so the file on disk is always the source of truth.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path).expanduser()

    def _ensure_file(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.path.write_text("[]", encoding="utf-8")

    def read_devices(self) -> list[Device]:
        """
        Load all devices from the data file, creating it if missing.

        Returns:
            List of devices; empty for a blank or unreadable file, with
            malformed entries skipped
        """
        self._ensure_file()
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Failed to parse %s: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Ignoring %s: expected a JSON array", self.path)
            return []
        devices: list[Device] = []
        for i, entry in enumerate(data):
            try:
                devices.append(Device.from_dict(entry))
            except (TypeError, KeyError, AttributeError) as exc:
                logger.warning("Skipping malformed entry %d in %s: %r", i, self.path, exc)
        return devices

    def write_devices(self, devices: list[Device]) -> None:
        """Atomically replace the data file with the given devices."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump([d.to_dict() for d in devices], f, indent=2)
            os.replace(tmp, self.path)
        except Exception:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
            raise

    def get(self, device_id: str) -> Device:
        device = next((d for d in self.read_devices() if d.id == device_id), None)
        if device is None:
            raise DeviceNotFoundError(device_id)
        return device

    def find(self, key: str) -> Optional[Device]:
        """Look a device up by id, then by exact name."""
        devices = self.read_devices()
        for d in devices:
            if d.id == key:
                return d
        return next((d for d in devices if d.name == key), None)

    def add(self, name: str, mac: str, ip: str) -> Device:
        """
        Register a new device.

        Raises:
            ValueError: If the name is empty or too long
            InvalidAddressError: If the MAC address is malformed
            DuplicateDeviceError: If the MAC address is already registered
        """
        clean_name = _clean_name(name)
        normalized = normalize_mac(mac)
        devices = self.read_devices()
        if any(d.mac == normalized for d in devices):
            raise DuplicateDeviceError(normalized)

        device = Device(
            id=str(uuid.uuid4()),
            name=clean_name,
            mac=normalized,
            ip=ip.strip(),
        )
        devices.append(device)
        self.write_devices(devices)
        logger.info("Registered device %s (%s, %s)", device.name, device.mac, device.ip)
        return device

    def upsert(self, device: Device) -> Device:
        devices = self.read_devices()
        idx = next((i for i, d in enumerate(devices) if d.id == device.id), None)
        if idx is None:
            devices.append(device)
        else:
            devices[idx] = device
        self.write_devices(devices)
        return device

    def update(
        self,
        device_id: str,
        *,
        name: Optional[str] = None,
        mac: Optional[str] = None,
        ip: Optional[str] = None,
        status: Optional[str] = None,
        last_woken: Optional[str] = None,
    ) -> Device:
        """
        Apply a partial update; fields left as None are unchanged.

        Raises:
            DeviceNotFoundError: If no device has the id
            DuplicateDeviceError: If the new MAC belongs to another device
            InvalidAddressError: If the new MAC is malformed
            ValueError: For an invalid name or status
        """
        devices = self.read_devices()
        idx = next((i for i, d in enumerate(devices) if d.id == device_id), None)
        if idx is None:
            raise DeviceNotFoundError(device_id)

        device = devices[idx]
        if mac is not None:
            normalized = normalize_mac(mac)
            if any(d.id != device_id and d.mac == normalized for d in devices):
                raise DuplicateDeviceError(normalized)
            device.mac = normalized
        if name is not None:
            device.name = _clean_name(name)
        if ip is not None:
            device.ip = ip.strip()
        if status is not None:
            if status not in DEVICE_STATUSES:
                raise ValueError(f"Invalid status '{status}'")
            device.status = status
        if last_woken is not None:
            device.last_woken = last_woken

        self.write_devices(devices)
        return device

    def delete(self, device_id: str) -> bool:
        devices = self.read_devices()
        remaining = [d for d in devices if d.id != device_id]
        if len(remaining) == len(devices):
            return False
        self.write_devices(remaining)
        logger.info("Removed device %s", device_id)
        return True

    def mark_woken(self, device_id: str, when: Optional[str] = None) -> Device:
        """
        Record a successful dispatch: status becomes online, last_woken is set.

        The online status is optimistic. A magic packet has no acknowledgement,
        so this only reflects that the packet left this host.
        """
        return self.update(device_id, status="online", last_woken=when or _utcnow_iso())
