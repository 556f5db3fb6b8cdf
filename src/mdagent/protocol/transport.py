"""StdioServer — the newline-delimited JSON-RPC loop.

Reads one request per line, answers with exactly one response line, and
flushes before reading the next line, so responses come out in request
order. Blank lines are skipped; end of input stops the loop.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import IO, TYPE_CHECKING, TextIO

from mdagent.errors import RequestDecodeError
from mdagent.protocol.models import (
    ENCODING_ERROR_LINE,
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
)

if TYPE_CHECKING:
    from mdagent.protocol.dispatcher import MethodDispatcher

logger = logging.getLogger(__name__)


class StdioServer:
    """Serves a :class:`MethodDispatcher` over stdin/stdout.

    Input is read as raw bytes (the ``buffer`` of a text stream when it has
    one), so a line that is not valid UTF-8 gets a -32700 reply instead of
    ending the loop.

    Usage::

        server = StdioServer(dispatcher)
        asyncio.run(server.serve())
    """

    def __init__(
        self,
        dispatcher: MethodDispatcher,
        *,
        stdin: IO[bytes] | TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        source = stdin if stdin is not None else sys.stdin
        self._stdin: IO[bytes] | TextIO = getattr(source, "buffer", source)
        self._stdout = stdout if stdout is not None else sys.stdout
        encoding = getattr(self._stdout, "encoding", None)
        self._encoding = encoding if isinstance(encoding, str) else "utf-8"

    async def serve(self) -> None:
        """Handle lines until end of input."""
        logger.info("Serving JSON-RPC on stdio")
        while True:
            line = await asyncio.to_thread(self._stdin.readline)
            if not line:
                break
            if isinstance(line, bytes):
                line = line.rstrip(b"\r\n")
            else:
                line = line.rstrip("\r\n")
            if not line:
                continue
            response = await self.handle_line(line)
            self.write(response)
        logger.info("End of input, shutting down")

    async def handle_line(self, line: str | bytes) -> JsonRpcResponse:
        """Decode and dispatch one line; undecodable input gets a -32700 reply."""
        try:
            request = JsonRpcRequest.decode(line)
        except RequestDecodeError as exc:
            logger.warning("Could not decode request: %s", exc)
            return JsonRpcResponse.failure(None, JsonRpcError.parse_error(str(exc)))
        return await self._dispatcher.dispatch(request)

    def write(self, response: JsonRpcResponse) -> None:
        """Write *response* as one line and flush.

        Falls back to :data:`ENCODING_ERROR_LINE` when the response cannot be
        serialized or cannot be represented in the output encoding.
        """
        try:
            text = response.encode()
            text.encode(self._encoding)
        except (TypeError, ValueError):
            logger.exception("Could not encode response for id=%r", response.id)
            text = ENCODING_ERROR_LINE
        self._stdout.write(text + "\n")
        self._stdout.flush()
