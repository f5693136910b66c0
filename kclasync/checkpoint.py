"""Checkpointing progress through the daemon."""

from __future__ import annotations

from .messages import CheckpointMessage, CheckpointRequest, InputMessage
from .transport import Transport


class CheckpointError(Exception):
    """Base class for checkpoint failures reported by the protocol."""


class CheckpointFailed(CheckpointError):
    """The daemon answered the checkpoint request with an error."""

    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to checkpoint: {reason}")
        self.reason = reason


class InvalidCheckpointState(CheckpointError):
    """The daemon answered the checkpoint request with some other message."""

    def __init__(self, message: InputMessage) -> None:
        super().__init__(f"invalid state: {message.id}")
        self.message = message


class Checkpointer:
    """Sends checkpoint requests over a transport and checks the reply."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def checkpoint(
        self,
        sequence_number: str | None = None,
        sub_sequence_number: int | None = None,
    ) -> None:
        """Checkpoint at the given position, or at the latest record if none is given."""
        await self._transport.write_message(CheckpointRequest(sequence_number, sub_sequence_number))
        response = await self._transport.read_message()
        if not isinstance(response, CheckpointMessage):
            raise InvalidCheckpointState(response)
        if response.error is not None:
            raise CheckpointFailed(response.error)