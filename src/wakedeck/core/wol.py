"""Wake-on-LAN magic packet construction and UDP dispatch."""

import ipaddress
import socket

from wakeonlan import create_magic_packet

from wakedeck.core.errors import InvalidTargetError, SendError, SocketError
from wakedeck.core.mac import normalize_mac

BROADCAST_IP = "255.255.255.255"
DEFAULT_PORT = 9


def build_magic_packet(mac_address: str) -> bytes:
    """
    Build the 102-byte Wake-on-LAN payload for a MAC address.

    The layout is 6 bytes of ``0xFF`` followed by the 6 hardware-address
    bytes repeated 16 times. Each call returns a new ``bytes`` object.

    Args:
        mac_address: MAC address in any accepted separator style

    Returns:
        The magic packet

    Raises:
        InvalidAddressError: If the MAC address is malformed
    """
    return create_magic_packet(normalize_mac(mac_address))


def validate_target(ip_address: str, port: int) -> None:
    """Raise InvalidTargetError unless ip_address is IPv4 and port is 1-65535."""
    try:
        ipaddress.IPv4Address(ip_address)
    except ValueError as exc:
        raise InvalidTargetError(f"Invalid IPv4 address: {ip_address!r}") from exc
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise InvalidTargetError(f"Invalid UDP port: {port!r} (expected 1-65535)")


def broadcast_packet(packet: bytes, ip_address: str, port: int) -> None:
    """
    Send a packet once over an ephemeral, broadcast-enabled UDP socket.

    The socket is bound to an OS-assigned local port and closed on every
    exit path. A normal return only means the OS accepted the datagram.

    Raises:
        SocketError: If the socket cannot be opened, bound or set to broadcast
        SendError: If the OS rejects the send
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    except OSError as exc:
        raise SocketError(f"Could not open UDP socket: {exc}") from exc

    with sock:
        try:
            sock.bind(("", 0))
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        except OSError as exc:
            raise SocketError(f"Could not enable broadcast on UDP socket: {exc}") from exc

        try:
            sock.sendto(packet, (ip_address, port))
        except OSError as exc:
            raise SendError(f"Failed to send magic packet to {ip_address}:{port}: {exc}") from exc


def send_magic_packet(
    mac_address: str, ip_address: str = BROADCAST_IP, port: int = DEFAULT_PORT
) -> None:
    """
    Send a Wake-on-LAN magic packet to wake a remote machine.

    All input is validated before any socket is opened.

    Args:
        mac_address: MAC address of the target machine (e.g., "AA:BB:CC:DD:EE:FF")
        ip_address: Unicast or broadcast IPv4 address (default: 255.255.255.255)
        port: UDP port for the WOL packet (default: 9)

    Raises:
        InvalidAddressError: If the MAC address is malformed
        InvalidTargetError: If the IP address or port is invalid
        SocketError: If the socket cannot be prepared
        SendError: If the OS rejects the send
    """
    packet = build_magic_packet(mac_address)
    validate_target(ip_address, port)
    broadcast_packet(packet, ip_address, port)
