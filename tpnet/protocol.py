"""Wire format shared by the client and the server.

Every frame is ``op_code`` (int32) followed by ``size`` (int32) and ``size``
bytes of payload. A package payload is a sequence of items, each one an
int32 length followed by that many bytes.
"""

from __future__ import annotations

import socket
import struct
from dataclasses import dataclass, field
from enum import IntEnum

_INT = struct.Struct("<i")
_HEADER = struct.Struct("<ii")


class OpCode(IntEnum):
    """Operation carried by a frame."""

    MESSAGE = 0
    PACKAGE = 1


def _as_item(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8") + b"\0"
    return bytes(value)


@dataclass
class Package:
    """A frame whose payload is a list of length-prefixed items."""

    op_code: OpCode = OpCode.PACKAGE
    stream: bytearray = field(default_factory=bytearray)

    def add(self, value: bytes | str) -> None:
        """Append an item; text is stored NUL-terminated."""
        item = _as_item(value)
        self.stream += _INT.pack(len(item))
        self.stream += item

    def serialize(self) -> bytes:
        """Return the full frame as sent on the wire."""
        return _HEADER.pack(int(self.op_code), len(self.stream)) + bytes(self.stream)


def encode_message(text: str) -> bytes:
    """Return the frame carrying ``text`` as a single message."""
    body = _as_item(text)
    return _HEADER.pack(int(OpCode.MESSAGE), len(body)) + body


def decode_values(payload: bytes) -> list[bytes]:
    """Split a package payload into its items."""
    view = memoryview(payload)
    values: list[bytes] = []
    while view:
        if len(view) < _INT.size:
            raise ValueError("truncated item length")
        (size,) = _INT.unpack(view[: _INT.size])
        view = view[_INT.size :]
        if size < 0 or size > len(view):
            raise ValueError(f"invalid item size {size}")
        values.append(bytes(view[:size]))
        view = view[size:]
    return values


def create_connection(host: str, port: int | str) -> socket.socket:
    """Open a TCP connection to ``host``:``port`` over IPv4."""
    family, socktype, proto, _, address = socket.getaddrinfo(
        host, str(port), socket.AF_INET, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )[0]
    sock = socket.socket(family, socktype, proto)
    try:
        sock.connect(address)
    except OSError:
        sock.close()
        raise
    return sock


def send_message(text: str, sock: socket.socket) -> None:
    """Send ``text`` as a message frame."""
    sock.sendall(encode_message(text))


def send_package(package: Package, sock: socket.socket) -> None:
    """Send a package frame."""
    sock.sendall(package.serialize())


def recv_exact(sock: socket.socket, size: int) -> bytes:
    """Read exactly ``size`` bytes, raising ConnectionError on early close."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = sock.recv(remaining)
        if not chunk:
            raise ConnectionError("connection closed by peer")
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)