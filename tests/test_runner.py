import pytest

from kclasync.messages import (
    CheckpointMessage,
    CheckpointRequest,
    InitializeMessage,
    LeaseLostMessage,
    ProcessRecordsMessage,
    ShardEndedMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
    StatusMessage,
)
from kclasync.processor import Processor
from kclasync.runner import UnexpectedMessageError, run
from kclasync.transport import Transport


class FakeTransport(Transport):
    def __init__(self, incoming):
        self.incoming = list(incoming)
        self.written = []

    async def write_error(self, error):
        pass

    async def write_message(self, message):
        self.written.append(message)

    async def read_message(self):
        if not self.incoming:
            raise EOFError("no more messages")
        return self.incoming.pop(0)


class RecordingProcessor(Processor):
    def __init__(self, checkpoint_on_records=False, fail_on=None):
        self.calls = []
        self.checkpoint_on_records = checkpoint_on_records
        self.fail_on = fail_on

    def _note(self, name):
        self.calls.append(name)
        if name == self.fail_on:
            raise KeyError(name)

    async def initialize(self, msg):
        self._note("initialize")

    async def process_records(self, msg, checkpointer):
        self._note("process_records")
        if self.checkpoint_on_records:
            await checkpointer.checkpoint()

    async def shutdown(self, msg, checkpointer):
        self._note("shutdown")

    async def shutdown_requested(self, msg, checkpointer):
        self._note("shutdown_requested")

    async def lease_lost(self, msg):
        self._note("lease_lost")

    async def shard_ended(self, msg):
        self._note("shard_ended")


@pytest.mark.asyncio
async def test_dispatch_and_acknowledge():
    incoming = [
        InitializeMessage("s1"),
        ProcessRecordsMessage([]),
        ShutdownRequestedMessage(),
        LeaseLostMessage(),
        ShardEndedMessage(),
        ShutdownMessage("TERMINATE"),
    ]
    transport = FakeTransport(incoming)
    processor = RecordingProcessor()
    with pytest.raises(EOFError):
        await run(transport, processor)
    assert processor.calls == [
        "initialize",
        "process_records",
        "shutdown_requested",
        "lease_lost",
        "shard_ended",
        "shutdown",
    ]
    assert [m.response_for for m in transport.written] == [m.id for m in incoming]


@pytest.mark.asyncio
async def test_checkpoint_inside_handler():
    transport = FakeTransport([ProcessRecordsMessage([]), CheckpointMessage()])
    with pytest.raises(EOFError):
        await run(transport, RecordingProcessor(checkpoint_on_records=True))
    assert transport.written == [CheckpointRequest(), StatusMessage("processRecords")]


@pytest.mark.asyncio
async def test_unexpected_checkpoint_message():
    stray = CheckpointMessage("1")
    transport = FakeTransport([stray])
    with pytest.raises(UnexpectedMessageError) as info:
        await run(transport, RecordingProcessor())
    assert info.value.message is stray
    assert transport.written == []


@pytest.mark.asyncio
async def test_processor_error_stops_without_ack():
    transport = FakeTransport([InitializeMessage("s1"), LeaseLostMessage()])
    with pytest.raises(KeyError):
        await run(transport, RecordingProcessor(fail_on="lease_lost"))
    assert transport.written == [StatusMessage("initialize")]