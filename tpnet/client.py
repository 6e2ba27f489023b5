"""Client that logs console input and sends it to the server."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Iterable, Iterator
from pathlib import Path

from .protocol import Package, create_connection, send_message, send_package


def start_logger(path: str | Path = "cliente.log") -> logging.Logger:
    """Create the client logger writing to ``path`` and to the console."""
    logger = logging.Logger("CLIENTE_LOGGER", logging.INFO)
    formatter = logging.Formatter(
        "[%(levelname)s] %(asctime)s %(name)s/(%(process)d:%(thread)d): %(message)s"
    )
    for handler in (logging.FileHandler(path), logging.StreamHandler(sys.stdout)):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def load_config(path: str | Path = "client/cliente.config") -> dict[str, str]:
    """Read a KEY=VALUE config file; lines starting with '#' are ignored."""
    config: dict[str, str] = {}
    with open(path, encoding="utf-8") as handle:
        for line in handle:
            line = line.rstrip("\r\n")
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            config[key] = value
    return config


def read_console(logger: logging.Logger, lines: Iterable[str]) -> list[str]:
    """Log lines until an empty one; the first line is always logged."""
    logged: list[str] = []
    iterator = iter(lines)
    first = next(iterator, "")
    logger.info("%s", first)
    logged.append(first)
    if first == "":
        return logged
    for line in iterator:
        if line == "":
            break
        logger.info("%s", line)
        logged.append(line)
    return logged


def build_package(lines: Iterable[str]) -> Package:
    """Collect lines up to the first empty one into a package."""
    package = Package()
    for line in lines:
        if line == "":
            break
        package.add(line)
    return package


def _prompt_lines() -> Iterator[str]:
    while True:
        try:
            yield input("> ")
        except EOFError:
            return


def main(argv: list[str] | None = None) -> int:
    """Log, read the console and send the config key and lines to the server."""
    parser = argparse.ArgumentParser(description="Send console lines to the server.")
    parser.add_argument("--config", default="client/cliente.config")
    parser.add_argument("--log-file", default="cliente.log")
    args = parser.parse_args(argv)

    try:
        logger = start_logger(args.log_file)
    except OSError as error:
        print(f"No se pudo crear una instancia de logger: {error}", file=sys.stderr)
        return 1
    try:
        logger.info("Hola! Soy un log")
        try:
            config = load_config(args.config)
        except OSError as error:
            print(f"No se pudo encontrar el archivo en el config: {error}", file=sys.stderr)
            return 1
        missing = [key for key in ("IP", "PUERTO", "CLAVE") if key not in config]
        if missing:
            logger.error("Faltan claves en la config: %s", ", ".join(missing))
            return 1
        value = config["CLAVE"]
        logger.info("Valor de la config: %s", value)

        lines = _prompt_lines()
        read_console(logger, lines)

        with create_connection(config["IP"], config["PUERTO"]) as connection:
            send_message(value, connection)
            send_package(build_package(lines), connection)
        return 0
    finally:
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)


if __name__ == "__main__":
    sys.exit(main())