"""MAC address normalization shared by the registry and the packet builder."""

import re

from wakedeck.core.errors import InvalidAddressError

_NON_HEX_RE = re.compile(r"[^0-9A-Fa-f]")


def normalize_mac(value: str) -> str:
    """
    Normalize a MAC address to the canonical ``XX:XX:XX:XX:XX:XX`` form.

    Every non-hex character is stripped before the length check, so
    ``00:11:22:33:44:55``, ``00-11-22-33-44-55`` and ``001122334455`` all
    normalize to the same string.

    Args:
        value: MAC address in any separator style and any case

    Returns:
        Uppercase, colon-separated MAC address

    Raises:
        InvalidAddressError: If the cleaned string is not exactly 12 hex digits
    """
    cleaned = _NON_HEX_RE.sub("", value or "").upper()
    if len(cleaned) != 12:
        raise InvalidAddressError(value)
    return ":".join(cleaned[i : i + 2] for i in range(0, 12, 2))


def mac_to_bytes(value: str) -> bytes:
    """Return the 6 raw hardware-address bytes for a MAC address."""
    return bytes.fromhex(normalize_mac(value).replace(":", ""))
