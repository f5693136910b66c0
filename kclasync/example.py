"""A minimal record processor that checkpoints after every batch."""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import logging
import sys

from .checkpoint import Checkpointer
from .messages import (
    InitializeMessage,
    LeaseLostMessage,
    ProcessRecordsMessage,
    ShardEndedMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
)
from .processor import Processor
from .runner import run
from .transport import StdTransport

logger = logging.getLogger(__name__)


class ExampleProcessor(Processor):
    """Decodes each record, checkpoints each batch and stops on any other event."""

    def __init__(self) -> None:
        super().__init__()
        self.shard_id: str | None = None
        self.records_seen = 0
        self.stopped_by: str | None = None

    def _log_stop(self, detail: str | None = None) -> None:
        logger.info(
            "Stopping on %s for shard %s%s",
            self.stopped_by,
            self.shard_id,
            f": {detail}" if detail else "",
        )

    async def initialize(self, msg: InitializeMessage) -> None:
        self.shard_id = msg.shard_id
        self.records_seen = 0
        self.stopped_by = None
        logger.debug("Initialized for shard %s", msg.shard_id)

    async def process_records(self, msg: ProcessRecordsMessage, checkpointer: Checkpointer) -> None:
        for record in msg.records:
            with contextlib.suppress(ValueError):
                record.to_bytes()
            self.records_seen += 1

        try:
            await checkpointer.checkpoint(None, None)
        except Exception as exc:
            raise RuntimeError("checkpoint failed") from exc

    async def shutdown(self, msg: ShutdownMessage, checkpointer: Checkpointer) -> None:
        self.stopped_by = "shutdown"
        self._log_stop(msg.reason)
        raise RuntimeError(self.stopped_by)

    async def shutdown_requested(
        self, msg: ShutdownRequestedMessage, checkpointer: Checkpointer
    ) -> None:
        self.stopped_by = "shutdown requested"
        self._log_stop()
        raise RuntimeError(self.stopped_by)

    async def lease_lost(self, msg: LeaseLostMessage) -> None:
        self.stopped_by = "lease lost"
        self._log_stop()
        raise RuntimeError(self.stopped_by)

    async def shard_ended(self, msg: ShardEndedMessage) -> None:
        self.stopped_by = "shard ended"
        self._log_stop()
        raise RuntimeError(self.stopped_by)


def main(argv: list[str] | None = None) -> int:
    """Run the example processor over standard input and output."""
    parser = argparse.ArgumentParser(description="Example KCL record processor.")
    parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, stream=sys.stderr)

    try:
        asyncio.run(run(StdTransport(), ExampleProcessor()))
    except Exception as exc:
        logger.error("Failed execution: %r", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())