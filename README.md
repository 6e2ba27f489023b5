# tpnet

A minimal TCP client and server that talk over a simple binary protocol.

Every frame begins with two little-endian signed 32-bit integers, the
operation code and the payload size, followed by the payload:

- `MESSAGE` (0): the payload is one NUL-terminated UTF-8 string.
- `PACKAGE` (1): the payload is a sequence of values. Each value is a
  little-endian 32-bit length followed by that many bytes. Text values are
  stored NUL-terminated.

## Installation

```
pip install .
```

## Running

Start the server first:

```
tpnet-server [--port PORT] [--log-file PATH]
```

It listens on port 4444 by default and writes its log to `log.log` and to
standard output. It accepts a single client, logs every message and package
that client sends, warns about unknown operation codes, and exits with status 1
when the client disconnects.

Then start the client:

```
tpnet-client [--config PATH] [--log-file PATH]
```

The configuration file defaults to `client/cliente.config` and the log file to
`cliente.log`. The configuration is made of `KEY=value` lines; empty lines and
lines starting with `#` are ignored. The keys `IP`, `PUERTO` and `CLAVE` are
required:

```
IP=127.0.0.1
PUERTO=4444
CLAVE=hello
```

The client logs the `CLAVE` value, then logs each line you type at the `> `
prompt until you enter an empty line. It then connects to the server and sends
the `CLAVE` value as a message. Next it reads more lines, again ending at an
empty line or end of input, and sends them to the server as one package.

## Library use

```python
from tpnet.protocol import Package, create_connection, send_message, send_package

sock = create_connection("127.0.0.1", "4444")
send_message("hello", sock)

package = Package()
package.add("first")
package.add("second")
send_package(package, sock)
sock.close()
```

`tpnet.protocol` also provides `encode_message`, `Package.serialize`,
`decode_values` (splits a package payload back into its values, raising
`ValueError` on malformed data) and `recv_exact`.

On the server side, `tpnet.server` provides `start_server`, `wait_client`,
`receive_operation`, `receive_buffer`, `receive_message`, `receive_package`
and `serve`, which runs the receive loop until the client disconnects.

`tpnet.client` provides `start_logger`, `load_config`, `read_console` and
`build_package`.

## Limitations

The server handles exactly one client connection and then stops; it does not
accept further clients or send anything back. Connections are IPv4 only.

## Tests

```
pip install .[test]
pytest
```