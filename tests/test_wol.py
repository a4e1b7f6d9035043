"""Tests for Wake-on-LAN packet construction and dispatch."""

import socket
from unittest.mock import MagicMock, patch

import pytest

from wakedeck.core.errors import InvalidAddressError, InvalidTargetError, SendError, SocketError
from wakedeck.core.wol import broadcast_packet, build_magic_packet, send_magic_packet

MAC = "00:11:22:33:44:55"
MAC_BYTES = bytes.fromhex("001122334455")


class TestBuildMagicPacket:
    """Tests for build_magic_packet."""

    def test_known_vector(self) -> None:
        packet = build_magic_packet(MAC)
        assert packet == b"\xff" * 6 + MAC_BYTES * 16

    def test_length_is_102(self) -> None:
        assert len(build_magic_packet("AA:BB:CC:DD:EE:FF")) == 102

    def test_header_is_six_ff_bytes(self) -> None:
        assert build_magic_packet(MAC)[:6] == b"\xff" * 6

    def test_mac_repeats_at_every_offset(self) -> None:
        packet = build_magic_packet("DE:AD:BE:EF:00:01")
        expected = bytes.fromhex("DEADBEEF0001")
        offsets = list(range(6, 102, 6))
        assert len(offsets) == 16
        for offset in offsets:
            assert packet[offset : offset + 6] == expected

    def test_deterministic(self) -> None:
        assert build_magic_packet(MAC) == build_magic_packet(MAC)

    def test_separator_style_does_not_change_packet(self) -> None:
        assert build_magic_packet("00-11-22-33-44-55") == build_magic_packet("001122334455")

    def test_sequential_packets_are_independent(self) -> None:
        first = build_magic_packet("00:11:22:33:44:55")
        second = build_magic_packet("66:77:88:99:AA:BB")
        assert first == b"\xff" * 6 + MAC_BYTES * 16
        assert second == b"\xff" * 6 + bytes.fromhex("66778899AABB") * 16

    def test_invalid_mac_raises(self) -> None:
        with pytest.raises(InvalidAddressError):
            build_magic_packet("0011")


class TestBroadcastPacket:
    """Tests for broadcast_packet with a mocked socket."""

    @patch("wakedeck.core.wol.socket.socket")
    def test_configures_socket_and_sends_once(self, mock_socket: MagicMock) -> None:
        sock = mock_socket.return_value
        packet = build_magic_packet(MAC)

        broadcast_packet(packet, "255.255.255.255", 9)

        mock_socket.assert_called_once_with(socket.AF_INET, socket.SOCK_DGRAM)
        sock.bind.assert_called_once_with(("", 0))
        sock.setsockopt.assert_called_once_with(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
        sock.sendto.assert_called_once_with(packet, ("255.255.255.255", 9))
        sock.__exit__.assert_called_once()

    @patch("wakedeck.core.wol.socket.socket", side_effect=OSError("no sockets"))
    def test_open_failure_raises_socket_error(self, mock_socket: MagicMock) -> None:
        with pytest.raises(SocketError):
            broadcast_packet(b"\xff" * 102, "255.255.255.255", 9)

    @patch("wakedeck.core.wol.socket.socket")
    def test_broadcast_flag_failure_raises_socket_error(self, mock_socket: MagicMock) -> None:
        sock = mock_socket.return_value
        sock.setsockopt.side_effect = PermissionError("broadcast not permitted")

        with pytest.raises(SocketError) as excinfo:
            broadcast_packet(b"\xff" * 102, "255.255.255.255", 9)

        assert isinstance(excinfo.value.__cause__, PermissionError)
        sock.sendto.assert_not_called()
        sock.__exit__.assert_called_once()

    @patch("wakedeck.core.wol.socket.socket")
    def test_bind_failure_raises_socket_error(self, mock_socket: MagicMock) -> None:
        mock_socket.return_value.bind.side_effect = OSError("address in use")
        with pytest.raises(SocketError):
            broadcast_packet(b"\xff" * 102, "255.255.255.255", 9)
        mock_socket.return_value.__exit__.assert_called_once()

    @patch("wakedeck.core.wol.socket.socket")
    def test_send_failure_raises_send_error(self, mock_socket: MagicMock) -> None:
        sock = mock_socket.return_value
        sock.sendto.side_effect = OSError(101, "Network is unreachable")

        with pytest.raises(SendError) as excinfo:
            broadcast_packet(b"\xff" * 102, "10.0.0.255", 9)

        assert "10.0.0.255:9" in str(excinfo.value)
        sock.__exit__.assert_called_once()

    @patch("wakedeck.core.wol.socket.socket")
    def test_failed_send_does_not_affect_next_send(self, mock_socket: MagicMock) -> None:
        first, second = MagicMock(), MagicMock()
        first.sendto.side_effect = OSError("boom")
        mock_socket.side_effect = [first, second]

        with pytest.raises(SendError):
            broadcast_packet(b"a" * 102, "255.255.255.255", 9)
        broadcast_packet(b"b" * 102, "255.255.255.255", 9)

        second.sendto.assert_called_once_with(b"b" * 102, ("255.255.255.255", 9))


class TestSendMagicPacket:
    """Tests for send_magic_packet."""

    @patch("wakedeck.core.wol.socket.socket")
    def test_defaults_to_limited_broadcast_port_9(self, mock_socket: MagicMock) -> None:
        send_magic_packet(MAC)
        mock_socket.return_value.sendto.assert_called_once_with(
            b"\xff" * 6 + MAC_BYTES * 16, ("255.255.255.255", 9)
        )

    @patch("wakedeck.core.wol.socket.socket")
    def test_custom_broadcast_and_port(self, mock_socket: MagicMock) -> None:
        send_magic_packet("00-11-22-33-44-55", ip_address="192.168.1.255", port=7)
        mock_socket.return_value.sendto.assert_called_once_with(
            b"\xff" * 6 + MAC_BYTES * 16, ("192.168.1.255", 7)
        )

    @patch("wakedeck.core.wol.socket.socket")
    def test_two_sends_carry_their_own_mac(self, mock_socket: MagicMock) -> None:
        send_magic_packet("00:11:22:33:44:55")
        send_magic_packet("66:77:88:99:AA:BB")

        sent = [c.args[0] for c in mock_socket.return_value.sendto.call_args_list]
        assert sent[0] == b"\xff" * 6 + MAC_BYTES * 16
        assert sent[1] == b"\xff" * 6 + bytes.fromhex("66778899AABB") * 16

    @patch("wakedeck.core.wol.socket.socket")
    def test_invalid_mac_opens_no_socket(self, mock_socket: MagicMock) -> None:
        with pytest.raises(InvalidAddressError):
            send_magic_packet("0011")
        mock_socket.assert_not_called()

    @pytest.mark.parametrize("ip", ["999.1.1.1", "host.local", "", "fe80::1"])
    @patch("wakedeck.core.wol.socket.socket")
    def test_invalid_ip_opens_no_socket(self, mock_socket: MagicMock, ip: str) -> None:
        with pytest.raises(InvalidTargetError):
            send_magic_packet(MAC, ip_address=ip)
        mock_socket.assert_not_called()

    @pytest.mark.parametrize("port", [0, -1, 65536, True])
    @patch("wakedeck.core.wol.socket.socket")
    def test_invalid_port_opens_no_socket(self, mock_socket: MagicMock, port: int) -> None:
        with pytest.raises(InvalidTargetError):
            send_magic_packet(MAC, port=port)
        mock_socket.assert_not_called()

    @pytest.mark.parametrize("port", [1, 7, 9, 65535])
    @patch("wakedeck.core.wol.socket.socket")
    def test_port_range_bounds_accepted(self, mock_socket: MagicMock, port: int) -> None:
        send_magic_packet(MAC, port=port)
        assert mock_socket.return_value.sendto.call_args.args[1] == ("255.255.255.255", port)


class TestLoopbackDelivery:
    """A real datagram over loopback carries the exact magic packet."""

    def test_listener_receives_magic_packet(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as listener:
            listener.bind(("127.0.0.1", 0))
            listener.settimeout(2.0)
            port = listener.getsockname()[1]

            send_magic_packet("aa-bb-cc-dd-ee-ff", ip_address="127.0.0.1", port=port)

            data, _ = listener.recvfrom(1024)

        assert data == b"\xff" * 6 + bytes.fromhex("AABBCCDDEEFF") * 16
