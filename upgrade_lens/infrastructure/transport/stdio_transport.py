"""
Line-delimited JSON-RPC over stdin/stdout.

Three cooperating pieces share one event loop:
- a reader thread doing blocking ``readline`` calls and pushing lines onto
  an ``asyncio.Queue`` (end of input pushes a sentinel);
- a heartbeat task emitting ``notifications/heartbeat`` when the session
  has been idle for a full interval;
- the dispatch loop, which hands each line to the dispatcher and writes
  the reply before consuming the next one.
"""

import asyncio
import json
import logging
import sys
import threading
import time
from typing import Callable, Optional, TextIO

from upgrade_lens.infrastructure.mcp.dispatcher import McpDispatcher

logger = logging.getLogger(__name__)

_END_OF_INPUT = object()


class StdioTransport:
    """Serves one dispatcher over a pair of text streams."""

    MIN_HEARTBEAT_INTERVAL = 10
    DEFAULT_HEARTBEAT_INTERVAL = 30

    def __init__(
        self,
        dispatcher: McpDispatcher,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        heartbeat_interval: float = DEFAULT_HEARTBEAT_INTERVAL,
        poll_interval: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.dispatcher = dispatcher
        self.input_stream = input_stream if input_stream is not None else sys.stdin
        self.output_stream = output_stream if output_stream is not None else sys.stdout
        self.heartbeat_interval = max(self.MIN_HEARTBEAT_INTERVAL, heartbeat_interval)
        self.poll_interval = poll_interval
        self._clock = clock
        self._wall_clock = wall_clock
        self._last_activity = clock()

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        self._last_activity = self._clock()

        reader = threading.Thread(
            target=self._read_lines,
            args=(loop, queue),
            name="stdio-reader",
            daemon=True,
        )
        reader.start()
        heartbeat = asyncio.create_task(self._heartbeat())

        logger.info(
            "Stdio transport started: heartbeat_interval=%ss", self.heartbeat_interval
        )

        try:
            while True:
                line = await queue.get()
                if line is _END_OF_INPUT:
                    logger.info("End of input reached, stopping stdio transport")
                    break

                message = line.strip()
                if not message:
                    continue

                self._last_activity = self._clock()
                reply = self.dispatcher.handle(message)
                if reply is not None:
                    self._write(reply)
        finally:
            heartbeat.cancel()
            await asyncio.gather(heartbeat, return_exceptions=True)
            self._close_streams()

    def _read_lines(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
        try:
            for line in iter(self.input_stream.readline, ""):
                loop.call_soon_threadsafe(queue.put_nowait, line)
        except (OSError, ValueError) as e:
            logger.warning("Stdin read failed: %s", e)
        except RuntimeError:
            # Event loop already closed; nobody is listening any more.
            return

        try:
            loop.call_soon_threadsafe(queue.put_nowait, _END_OF_INPUT)
        except RuntimeError:
            return

    async def _heartbeat(self) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            if self._clock() - self._last_activity >= self.heartbeat_interval:
                self._write(self.heartbeat_message())
                self._last_activity = self._clock()

    def heartbeat_message(self) -> str:
        return json.dumps(
            {
                "jsonrpc": "2.0",
                "method": "notifications/heartbeat",
                "params": {"timestamp": int(self._wall_clock())},
            }
        )

    def _write(self, content: str) -> None:
        self.output_stream.write(content + "\n")
        self.output_stream.flush()

    def _close_streams(self) -> None:
        for stream in (self.input_stream, self.output_stream):
            try:
                stream.close()
            except (OSError, ValueError) as e:
                logger.debug("Failed to close stream: %s", e)
