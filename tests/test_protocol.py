import socket
import struct

import pytest

from tpnet.protocol import (
    OpCode,
    Package,
    create_connection,
    decode_values,
    encode_message,
    recv_exact,
    send_message,
    send_package,
)


def test_frames_carry_opcode_wire_values():
    message_op = struct.unpack("<i", encode_message("x")[:4])[0]
    package_op = struct.unpack("<i", Package().serialize()[:4])[0]
    assert (message_op, package_op) == (0, 1)
    assert (OpCode(message_op), OpCode(package_op)) == (OpCode.MESSAGE, OpCode.PACKAGE)


def test_encode_message_wire_bytes():
    assert encode_message("hi") == b"\x00\x00\x00\x00\x03\x00\x00\x00hi\x00"


def test_empty_package_serializes_to_header_only():
    assert Package().serialize() == b"\x01\x00\x00\x00\x00\x00\x00\x00"


def test_package_round_trip():
    package = Package()
    package.add("uno")
    package.add(b"\x01\x02")
    frame = package.serialize()
    op, size = struct.unpack("<ii", frame[:8])
    assert op == OpCode.PACKAGE
    assert size == len(frame) - 8
    assert decode_values(frame[8:]) == [b"uno\0", b"\x01\x02"]


def test_decode_empty_payload():
    assert decode_values(b"") == []


def test_decode_truncated_length():
    with pytest.raises(ValueError):
        decode_values(b"\x01\x00")


def test_decode_item_longer_than_payload():
    with pytest.raises(ValueError):
        decode_values(struct.pack("<i", 10) + b"abc")


def test_send_message_over_socket():
    left, right = socket.socketpair()
    with left, right:
        send_message("hola", left)
        assert recv_exact(right, len(encode_message("hola"))) == encode_message("hola")


def test_send_package_over_socket():
    package = Package()
    package.add("a")
    left, right = socket.socketpair()
    with left, right:
        send_package(package, left)
        frame = package.serialize()
        assert recv_exact(right, len(frame)) == frame


def test_recv_exact_raises_on_close():
    left, right = socket.socketpair()
    with right:
        left.sendall(b"ab")
        left.close()
        with pytest.raises(ConnectionError):
            recv_exact(right, 4)


def test_create_connection_reaches_listener():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    with listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen(1)
        port = listener.getsockname()[1]
        client = create_connection("127.0.0.1", port)
        peer, _ = listener.accept()
        with client, peer:
            send_message("x", client)
            assert recv_exact(peer, 10) == encode_message("x")