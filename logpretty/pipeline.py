"""Streaming line pipeline: bytes in, rendered blocks out.

Chunks are split on b"\\n"; a trailing fragment without a terminator is kept
until the next chunk (or end of input) completes it. Everything is a
generator, so a slow consumer simply stops pulling and reading pauses.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Iterable, Iterator

from logpretty.formatter import RecordFormatter
from logpretty.records import NotJson, classify

logger = logging.getLogger(__name__)

TERMINATOR = b"\n"
DEFAULT_CHUNK_SIZE = 64 * 1024


class PipelineState(Enum):
    IDLE = "idle"
    BUFFERING = "buffering"
    DRAINING = "draining"
    DONE = "done"


class PipelineClosedError(Exception):
    """Raised when input is fed to a pipeline that has already finished."""


@dataclass
class PipelineStats:
    lines: int = 0
    records: int = 0
    passthrough: int = 0
    format_errors: int = 0


class LinePipeline:
    def __init__(self, formatter: RecordFormatter):
        self.formatter = formatter
        self.stats = PipelineStats()
        self._buffer = b""
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        return self._state

    def feed(self, chunk: bytes) -> Iterator[bytes]:
        """Emit a rendered block for every line completed by this chunk."""
        if self._state in (PipelineState.DRAINING, PipelineState.DONE):
            raise PipelineClosedError("cannot feed a finished pipeline")
        lines = []
        if chunk:
            *lines, self._buffer = (self._buffer + chunk).split(TERMINATOR)
            self._state = PipelineState.BUFFERING if self._buffer else PipelineState.IDLE
        return map(self.process_line, lines)

    def finish(self) -> Iterator[bytes]:
        """Flush a trailing unterminated line, then close the pipeline."""
        if self._state in (PipelineState.DRAINING, PipelineState.DONE):
            return iter(())
        self._state = PipelineState.DRAINING
        remainder, self._buffer = self._buffer, b""
        return self._drain(remainder)

    def _drain(self, remainder: bytes) -> Iterator[bytes]:
        # DRAINING until the flushed line has been taken by the consumer
        if remainder:
            yield self.process_line(remainder)
        self._state = PipelineState.DONE

    def transform(self, chunks: Iterable[bytes]) -> Iterator[bytes]:
        for chunk in chunks:
            yield from self.feed(chunk)
        yield from self.finish()

    def process_line(self, line: bytes) -> bytes:
        """Render one complete line. A formatting failure falls back to the raw line."""
        self.stats.lines += 1
        try:
            result = classify(line)
            if isinstance(result, NotJson):
                self.stats.passthrough += 1
                return line + TERMINATOR
            rendered = self.formatter.format(result.record)
        except Exception:
            self.stats.format_errors += 1
            logger.exception("Failed to render line, passing it through")
            return line + TERMINATOR

        self.stats.records += 1
        return rendered.encode("utf-8")


def read_chunks(stream: BinaryIO, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks as soon as they are available until EOF."""
    read = getattr(stream, "read1", stream.read)
    while True:
        chunk = read(chunk_size)
        if not chunk:
            return
        yield chunk
