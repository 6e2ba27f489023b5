"""TCP server that logs the messages and packages a client sends."""

from __future__ import annotations

import argparse
import logging
import socket
import sys

from .protocol import OpCode, decode_values, recv_exact

PORT = 4444
_INT_SIZE = 4

_log = logging.getLogger(__name__)


def _c_string(data: bytes) -> str:
    return data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


def start_server(host: str | None = None, port: int | str = PORT) -> socket.socket:
    """Create an IPv4 listening socket bound to ``host``:``port``."""
    family, socktype, proto, _, address = socket.getaddrinfo(
        host, str(port), socket.AF_INET, socket.SOCK_STREAM, 0, socket.AI_PASSIVE
    )[0]
    server = socket.socket(family, socktype, proto)
    try:
        server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        server.bind(address)
        server.listen(socket.SOMAXCONN)
    except OSError:
        server.close()
        raise
    _log.debug("Listo para escuchar a mi cliente")
    return server


def wait_client(server_sock: socket.socket, logger: logging.Logger) -> socket.socket:
    """Accept one client connection."""
    client, _ = server_sock.accept()
    logger.info("Se conecto un cliente!")
    return client


def receive_operation(sock: socket.socket) -> int:
    """Read the next op code; on disconnect close the socket and return -1."""
    try:
        raw = recv_exact(sock, _INT_SIZE)
    except (ConnectionError, OSError):
        sock.close()
        return -1
    return int.from_bytes(raw, "little", signed=True)


def receive_buffer(sock: socket.socket) -> bytes:
    """Read a size-prefixed payload."""
    size = int.from_bytes(recv_exact(sock, _INT_SIZE), "little", signed=True)
    if size < 0:
        raise ValueError(f"invalid buffer size {size}")
    return recv_exact(sock, size)


def receive_message(sock: socket.socket) -> str:
    """Read a message payload and return its text."""
    return _c_string(receive_buffer(sock))


def receive_package(sock: socket.socket) -> list[str]:
    """Read a package payload and return its items as text."""
    return [_c_string(value) for value in decode_values(receive_buffer(sock))]


def serve(client_sock: socket.socket, logger: logging.Logger) -> int:
    """Handle frames until the client disconnects; return the exit status."""
    while True:
        op = receive_operation(client_sock)
        try:
            if op == OpCode.MESSAGE:
                logger.info("Me llego el mensaje %s", receive_message(client_sock))
                continue
            if op == OpCode.PACKAGE:
                values = receive_package(client_sock)
                logger.info("Me llegaron los siguientes valores:\n")
                for value in values:
                    logger.info("%s", value)
                continue
        except ConnectionError:
            client_sock.close()
            op = -1
        if op == -1:
            logger.error("el cliente se desconecto. Terminando servidor")
            return 1
        logger.warning("Operacion desconocida. No quieras meter la pata")


def _make_logger(path: str) -> logging.Logger:
    logger = logging.Logger("Servidor", logging.DEBUG)
    formatter = logging.Formatter(
        "[%(levelname)s] %(asctime)s %(name)s/(%(process)d:%(thread)d): %(message)s"
    )
    for handler in (logging.FileHandler(path), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def main(argv: list[str] | None = None) -> int:
    """Run the server on one client until it disconnects."""
    parser = argparse.ArgumentParser(description="Log what a client sends.")
    parser.add_argument("--port", default=str(PORT))
    parser.add_argument("--log-file", default="log.log")
    args = parser.parse_args(argv)

    logger = _make_logger(args.log_file)
    try:
        with start_server(None, args.port) as server:
            logger.info("Servidor listo para recibir al cliente")
            with wait_client(server, logger) as client:
                return serve(client, logger)
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


if __name__ == "__main__":
    sys.exit(main())