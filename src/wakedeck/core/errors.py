"""Exception taxonomy for the Wake-on-LAN core."""


class WakeError(Exception):
    """Base class for every failure raised by the wake core."""


class InvalidAddressError(WakeError, ValueError):
    """Raised when a MAC address does not clean up to exactly 12 hex digits."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Invalid MAC address: {value!r}")


class InvalidTargetError(WakeError, ValueError):
    """Raised for a malformed IPv4 destination or an out-of-range UDP port."""


class SocketError(WakeError):
    """Raised when the UDP socket cannot be opened, bound or set to broadcast."""


class SendError(WakeError):
    """Raised when the OS rejects the transmit of the magic packet."""
