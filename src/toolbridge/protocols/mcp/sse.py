"""Event-stream framing for streamable HTTP replies.

:class:`EventStreamDecoder` is a restartable line framer: feed it byte
chunks split at arbitrary boundaries and it returns only payloads from
complete lines, holding any incomplete tail (including a partially received
UTF-8 sequence) until the next chunk arrives.
"""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import AsyncIterable
from typing import Any

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"

_SKIP = object()


class EventStreamDecoder:
    """Incremental ``data:`` line decoder.

    Usage::

        decoder = EventStreamDecoder()
        for chunk in chunks:
            payloads = decoder.feed(chunk)
        decoder.close()
        decoder.last  # last successfully parsed payload, or None
    """

    def __init__(self) -> None:
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.last: Any = None

    @property
    def buffer(self) -> str:
        """The incomplete trailing fragment carried over to the next chunk."""
        return self._buffer

    def feed(self, chunk: bytes) -> list[Any]:
        """Consume *chunk* and return every payload completed by it."""
        self._buffer += self._utf8.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def close(self) -> list[Any]:
        """Flush at end of stream, treating any tail as a final line."""
        self._buffer += self._utf8.decode(b"", final=True)
        tail, self._buffer = self._buffer, ""
        return self._parse_lines([tail] if tail else [])

    def _parse_lines(self, lines: list[str]) -> list[Any]:
        payloads: list[Any] = []
        for line in lines:
            payload = self._parse_line(line)
            if payload is not _SKIP:
                self.last = payload
                payloads.append(payload)
        return payloads

    @staticmethod
    def _parse_line(line: str) -> Any:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return _SKIP
        raw = line[len(DATA_PREFIX) :].strip()
        try:
            payload = json.loads(raw)
        except ValueError:
            logger.debug("Skipping unparseable event-stream line: %.80s", raw)
            return _SKIP
        # Only JSON objects are envelopes; bare scalars such as sentinels are ignored.
        return payload if isinstance(payload, dict) else _SKIP


async def read_event_stream(chunks: AsyncIterable[bytes]) -> Any:
    """Drain *chunks* and return the last parsed payload (``None`` if none parsed)."""
    decoder = EventStreamDecoder()
    async for chunk in chunks:
        decoder.feed(chunk)
    decoder.close()
    return decoder.last
