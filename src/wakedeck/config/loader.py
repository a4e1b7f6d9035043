"""YAML configuration loader and validator."""

import ipaddress
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

DEFAULT_CONFIG = Path.home() / ".config" / "wakedeck" / "config.yaml"
DEFAULT_DATA_FILE = Path.home() / ".local" / "share" / "wakedeck" / "devices.data"


@dataclass
class Settings:
    """Runtime settings resolved from the ``settings`` section of the config."""

    data_file: Path = DEFAULT_DATA_FILE
    broadcast_ip: str = "255.255.255.255"
    wol_port: int = 9


def load_config(path: Path) -> Optional[dict[str, Any]]:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML config file

    Returns:
        Parsed configuration dictionary, or None if file is empty

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
    """
    with open(path) as f:
        result: Optional[dict[str, Any]] = yaml.safe_load(f)
        return result


def validate_config(config: dict[str, Any]) -> list[str]:
    """
    Validate a loaded configuration dictionary.

    Returns:
        List of validation error messages (empty list = valid)
    """
    errors: list[str] = []

    if not isinstance(config, dict):
        return ["Config root must be a YAML mapping"]

    settings = config.get("settings", {})
    if settings is None:
        return errors
    if not isinstance(settings, dict):
        errors.append("'settings' must be a mapping")
        return errors

    broadcast = settings.get("broadcast_ip")
    if broadcast is not None:
        try:
            ipaddress.IPv4Address(str(broadcast))
        except ValueError:
            errors.append(f"settings: invalid broadcast_ip '{broadcast}'")

    port = settings.get("wol_port")
    if port is not None:
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            errors.append(f"settings: wol_port must be an integer 1-65535, got '{port}'")

    data_file = settings.get("data_file")
    if data_file is not None and not isinstance(data_file, str):
        errors.append("settings: data_file must be a path string")

    return errors


def settings_from_config(config: Optional[dict[str, Any]]) -> Settings:
    """
    Construct Settings from a validated config dict, filling in defaults.

    Args:
        config: Parsed config dictionary, or None for all defaults
    """
    raw = (config or {}).get("settings") or {}
    defaults = Settings()
    data_file = raw.get("data_file")
    return Settings(
        data_file=Path(data_file).expanduser() if data_file else defaults.data_file,
        broadcast_ip=str(raw.get("broadcast_ip", defaults.broadcast_ip)),
        wol_port=int(raw.get("wol_port", defaults.wol_port)),
    )
