"""Transcription service entry point.

Runs a small HTTP listener next to the dispatcher: the web layer calls
POST /dispatch/<id> after creating a pending record, and GET /health serves
platform health checks. SIGTERM stops the listener and waits a bounded time for
in-flight transcriptions.
"""

import asyncio
import logging
import os
import re
import signal
from asyncio import StreamReader, StreamWriter

from transcriber.asr.registry import get_transcription_engine
from transcriber.dispatcher import TranscriptionDispatcher
from transcriber.observability.logger import setup_logging
from transcriber.storage.record_client import RecordClient

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_SECONDS = 25

_DISPATCH_PATH = re.compile(r"^/dispatch/(\d+)/?$")

_REASONS = {
    200: "OK",
    202: "Accepted",
    400: "Bad Request",
    404: "Not Found",
}


def _route(request_line: str, dispatcher: TranscriptionDispatcher) -> tuple[int, str]:
    """Map an HTTP request line to a (status code, body) pair."""
    parts = request_line.split()
    if len(parts) < 2:
        return 400, "bad request"
    method, path = parts[0].upper(), parts[1]

    if method == "GET" and path in ("/", "/health"):
        return 200, "ok"

    match = _DISPATCH_PATH.match(path)
    if method == "POST" and match:
        dispatcher.trigger(int(match.group(1)))
        return 202, "accepted"

    return 404, "not found"


def _make_handler(dispatcher: TranscriptionDispatcher):
    async def _handle(reader: StreamReader, writer: StreamWriter) -> None:
        """Minimal HTTP/1.1 handler; request bodies are ignored."""
        try:
            try:
                request_line = (await reader.readline()).decode("latin-1")
                while True:
                    header = await reader.readline()
                    if header in (b"\r\n", b"\n", b""):
                        break
                status, body = _route(request_line, dispatcher)
            except ValueError:
                # readline() past the stream limit
                logger.warning("Rejected request with an oversized request line or header")
                status, body = 400, "bad request"
            response = (
                f"HTTP/1.1 {status} {_REASONS[status]}\r\n"
                "Content-Type: text/plain\r\n"
                f"Content-Length: {len(body)}\r\n"
                "Connection: close\r\n"
                "\r\n"
                f"{body}"
            )
            writer.write(response.encode())
            await writer.drain()
        except ConnectionError:
            logger.warning("Client disconnected before response was sent")
        finally:
            writer.close()

    return _handle


async def _run(dispatcher: TranscriptionDispatcher, record_client: RecordClient) -> None:
    """Serve dispatch requests until a shutdown signal arrives."""
    port = int(os.environ.get("PORT", "8080"))
    server = await asyncio.start_server(_make_handler(dispatcher), "0.0.0.0", port)
    logger.info("Dispatch server listening on port %d", port)

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def _shutdown() -> None:
        logger.info("Received shutdown signal")
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _shutdown)

    await stop_event.wait()
    server.close()
    await server.wait_closed()

    if not await dispatcher.drain(SHUTDOWN_TIMEOUT_SECONDS):
        logger.warning(
            "Shutdown timeout of %ss reached; unfinished transcriptions stay in 'processing'",
            SHUTDOWN_TIMEOUT_SECONDS,
        )
    await record_client.close()


def main() -> None:
    """Build the dispatcher from the environment and serve."""
    setup_logging()
    logger.info("Transcription service starting")

    record_client = RecordClient()
    engine = get_transcription_engine(os.environ.get("TRANSCRIPTION_PROVIDER", "groq"))
    dispatcher = TranscriptionDispatcher(record_client, engine)

    asyncio.run(_run(dispatcher, record_client))


if __name__ == "__main__":
    main()
