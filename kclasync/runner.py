"""The main processing loop."""

from __future__ import annotations

from typing import NoReturn

from .checkpoint import Checkpointer
from .messages import (
    InitializeMessage,
    InputMessage,
    LeaseLostMessage,
    ProcessRecordsMessage,
    ShardEndedMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
    StatusMessage,
)
from .processor import Processor
from .transport import Transport


class UnexpectedMessageError(Exception):
    """The daemon sent a message that is not valid at this point."""

    def __init__(self, message: InputMessage) -> None:
        super().__init__(f"unexpected message: {message.id}")
        self.message = message


async def run(transport: Transport, processor: Processor) -> NoReturn:
    """Dispatch messages to ``processor`` and acknowledge each one.

    Runs until the transport, the processor or the protocol raises.
    """
    while True:
        message = await transport.read_message()
        checkpointer = Checkpointer(transport)

        match message:
            case InitializeMessage():
                await processor.initialize(message)
            case ProcessRecordsMessage():
                await processor.process_records(message, checkpointer)
            case ShutdownMessage():
                await processor.shutdown(message, checkpointer)
            case ShutdownRequestedMessage():
                await processor.shutdown_requested(message, checkpointer)
            case LeaseLostMessage():
                await processor.lease_lost(message)
            case ShardEndedMessage():
                await processor.shard_ended(message)
            case _:
                raise UnexpectedMessageError(message)

        await transport.write_message(StatusMessage.from_message(message))