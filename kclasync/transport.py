"""Transports carrying protocol messages between the daemon and a processor."""

from __future__ import annotations

import abc
import asyncio
import sys
import time
from pathlib import Path
from typing import IO

from .messages import InputMessage, MessageError, OutputMessage, encode_message, parse_message


class Transport(abc.ABC):
    """A bidirectional channel to the MultiLang daemon."""

    @abc.abstractmethod
    async def write_error(self, error: str) -> None:
        """Report an error message to the daemon's error stream."""

    @abc.abstractmethod
    async def write_message(self, message: OutputMessage) -> None:
        """Send one message to the daemon."""

    @abc.abstractmethod
    async def read_message(self) -> InputMessage:
        """Receive the next message from the daemon."""


class StdTransport(Transport):
    """Talks to the daemon through standard input, output and error.

    Lines that cannot be decoded are saved in ``failures_dir`` under a
    millisecond timestamp before the decoding error is raised.
    """

    def __init__(
        self,
        stdin: IO | None = None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
        failures_dir: str | Path = "failures",
    ) -> None:
        self._stdin = stdin if stdin is not None else sys.stdin
        self._stdout = stdout if stdout is not None else sys.stdout
        self._stderr = stderr if stderr is not None else sys.stderr
        self._failures_dir = Path(failures_dir)

    async def write_error(self, error: str) -> None:
        self._stderr.write(f"\n{error}\n")
        self._stderr.flush()

    async def write_message(self, message: OutputMessage) -> None:
        self._stdout.write(f"\n{encode_message(message)}\n")
        self._stdout.flush()

    async def read_message(self) -> InputMessage:
        line = await asyncio.to_thread(self._stdin.readline)
        if not line:
            raise EOFError("input stream closed")
        try:
            return parse_message(line)
        except MessageError as exc:
            self._record_failure(exc, line)
            raise

    def _record_failure(self, error: Exception, line: str | bytes) -> None:
        text = line if isinstance(line, str) else line.decode("utf-8", "replace")
        timestamp = str(time.time_ns() // 1_000_000)
        self._failures_dir.mkdir(parents=True, exist_ok=True)
        path = self._failures_dir / timestamp
        with path.open("w", encoding="utf-8") as handle:
            try:
                handle.write(f"{error}\n\n{text}\n")
            except OSError as exc:
                print(f"Failed to write to file {path}: {exc}", file=sys.stderr)