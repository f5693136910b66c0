"""The interface a record processor implements."""

from __future__ import annotations

import abc

from .checkpoint import Checkpointer
from .messages import (
    InitializeMessage,
    LeaseLostMessage,
    ProcessRecordsMessage,
    ShardEndedMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
)


class Processor(abc.ABC):
    """Handles the messages the daemon sends for one shard.

    Raising from any handler stops the processing loop.
    """

    @abc.abstractmethod
    async def initialize(self, msg: InitializeMessage) -> None:
        """Called once the shard is assigned."""

    @abc.abstractmethod
    async def process_records(self, msg: ProcessRecordsMessage, checkpointer: Checkpointer) -> None:
        """Called with each batch of records."""

    @abc.abstractmethod
    async def shutdown(self, msg: ShutdownMessage, checkpointer: Checkpointer) -> None:
        """Called when the processor is shut down."""

    @abc.abstractmethod
    async def shutdown_requested(
        self, msg: ShutdownRequestedMessage, checkpointer: Checkpointer
    ) -> None:
        """Called when a graceful shutdown is requested."""

    @abc.abstractmethod
    async def lease_lost(self, msg: LeaseLostMessage) -> None:
        """Called when the lease on the shard is lost."""

    @abc.abstractmethod
    async def shard_ended(self, msg: ShardEndedMessage) -> None:
        """Called when the end of the shard is reached."""