"""TCP line-protocol listener.

One thread per connection (``socketserver.ThreadingTCPServer``). Each
connection gets its own session. The handler reads one line, hands it to
the CommandEngine and writes back:

    <response>\\n\\x04\\n

The EOT byte (4) on its own line marks the end of a response, since
responses can span several lines.
"""

from __future__ import annotations

import socketserver

from tabdb.application import CommandEngine
from tabdb.infrastructure.logging import (
    bind_connection_context,
    clear_connection_context,
    get_logger,
)

END_OF_TRANSMISSION = "\x04"
DEFAULT_MAX_LINE_BYTES = 1048576

logger = get_logger(__name__)


def frame_response(response: str) -> bytes:
    """Encode a response followed by the EOT terminator line."""
    return f"{response}\n{END_OF_TRANSMISSION}\n".encode("utf-8")


class CommandRequestHandler(socketserver.StreamRequestHandler):
    """Serves one client connection until it disconnects."""

    server: CommandServer

    def handle(self) -> None:
        engine = self.server.engine
        session_id = engine.create_session()
        host, port = self.client_address[:2]
        bind_connection_context(peer=f"{host}:{port}", session_id=session_id)
        logger.info("connection_opened")
        try:
            self._serve(engine, session_id)
        except ConnectionError as e:
            logger.info("connection_lost", error=str(e))
        finally:
            engine.close_session(session_id)
            logger.info("connection_closed")
            clear_connection_context()

    def _serve(self, engine: CommandEngine, session_id: str) -> None:
        limit = self.server.max_line_bytes
        while True:
            raw = self.rfile.readline(limit + 1)
            if not raw:
                return
            if len(raw) > limit and not raw.endswith(b"\n"):
                self._discard_rest_of_line()
                response = f"[ERROR] Command longer than {limit} bytes"
            else:
                line = raw.decode("utf-8", errors="replace")
                response = engine.handle_command(line, session_id)
            self.wfile.write(frame_response(response))
            self.wfile.flush()

    def _discard_rest_of_line(self) -> None:
        while True:
            chunk = self.rfile.readline(65536)
            if not chunk or chunk.endswith(b"\n"):
                return


class CommandServer(socketserver.ThreadingTCPServer):
    """Threaded TCP server bound to a CommandEngine."""

    allow_reuse_address = True
    daemon_threads = True

    def __init__(
        self,
        address: tuple[str, int],
        engine: CommandEngine,
        max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
    ) -> None:
        self.engine = engine
        self.max_line_bytes = max_line_bytes
        super().__init__(address, CommandRequestHandler)


def run_tcp_server(
    engine: CommandEngine,
    host: str = "0.0.0.0",
    port: int = 8888,
    max_line_bytes: int = DEFAULT_MAX_LINE_BYTES,
) -> None:
    """Serve the line protocol until interrupted."""
    with CommandServer((host, port), engine, max_line_bytes) as server:
        logger.info("tcp_server_listening", host=host, port=server.server_address[1])
        server.serve_forever()
