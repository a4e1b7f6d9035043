"""Wake-on-LAN core: MAC normalization, packet construction, UDP dispatch."""

from wakedeck.core.errors import (
    InvalidAddressError,
    InvalidTargetError,
    SendError,
    SocketError,
    WakeError,
)
from wakedeck.core.mac import mac_to_bytes, normalize_mac
from wakedeck.core.wol import broadcast_packet, build_magic_packet, send_magic_packet

__all__ = [
    "InvalidAddressError",
    "InvalidTargetError",
    "SendError",
    "SocketError",
    "WakeError",
    "broadcast_packet",
    "build_magic_packet",
    "mac_to_bytes",
    "normalize_mac",
    "send_magic_packet",
]
