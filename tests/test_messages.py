import base64
import json

import pytest

from kclasync.messages import (
    CheckpointMessage,
    CheckpointRequest,
    InitializeMessage,
    LeaseLostMessage,
    MessageError,
    ProcessRecordsMessage,
    Record,
    ShardEndedMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
    StatusMessage,
    encode_message,
    parse_message,
)


def test_parse_initialize():
    line = '{"action":"initialize","shardId":"shard-1","sequenceNumber":"42","subSequenceNumber":3}'
    assert parse_message(line) == InitializeMessage("shard-1", "42", 3)


def test_parse_initialize_missing_optionals():
    assert parse_message('{"action":"initialize","shardId":"shard-1"}') == InitializeMessage("shard-1")


def test_parse_initialize_missing_shard_id():
    with pytest.raises(MessageError):
        parse_message('{"action":"initialize"}')


def test_parse_process_records_and_decode():
    payload = base64.b64encode(b"hello").decode()
    line = json.dumps(
        {
            "action": "processRecords",
            "records": [
                {
                    "data": payload,
                    "partitionKey": "pk",
                    "sequenceNumber": "7",
                    "approximateArrivalTimestamp": 1000,
                }
            ],
            "millisBehindLatest": 12,
        }
    )
    message = parse_message(line)
    assert isinstance(message, ProcessRecordsMessage)
    assert message.millis_behind_latest == 12
    assert message.records == [Record(payload, "pk", "7", None, 1000)]
    assert message.records[0].to_bytes() == b"hello"


def test_parse_bytes_input():
    assert parse_message(b'{"action":"leaseLost"}') == LeaseLostMessage()


def test_record_invalid_base64():
    with pytest.raises(ValueError):
        Record("not base64!!", "pk", "1").to_bytes()


@pytest.mark.parametrize(
    "action, kind",
    [
        ("checkpoint", CheckpointMessage),
        ("shutdown", ShutdownMessage),
        ("shutdownRequested", ShutdownRequestedMessage),
        ("leaseLost", LeaseLostMessage),
        ("shardEnded", ShardEndedMessage),
    ],
)
def test_action_selects_type_and_id(action, kind):
    message = parse_message(json.dumps({"action": action}))
    assert type(message) is kind
    assert message.id == action


def test_extra_fields_ignored():
    assert parse_message('{"action":"shutdownRequested","extra":1}') == ShutdownRequestedMessage()


def test_null_optionals_are_none():
    message = parse_message('{"action":"checkpoint","sequenceNumber":null,"error":null}')
    assert message == CheckpointMessage(None, None, None)


@pytest.mark.parametrize(
    "line",
    [
        "not json",
        "[1, 2]",
        '{"shardId":"x"}',
        '{"action":"bogus"}',
        '{"action":5}',
        '{"action":"initialize","shardId":1}',
        '{"action":"initialize","shardId":"x","subSequenceNumber":-1}',
        '{"action":"initialize","shardId":"x","subSequenceNumber":true}',
        '{"action":"initialize","shardId":"x","subSequenceNumber":1.5}',
        '{"action":"processRecords"}',
        '{"action":"processRecords","records":"x"}',
        '{"action":"processRecords","records":[{"data":"x"}]}',
        '{"action":"shutdown","reason":3}',
    ],
)
def test_invalid_messages(line):
    with pytest.raises(MessageError):
        parse_message(line)


@pytest.mark.parametrize(
    "message",
    [
        CheckpointMessage("9", 1, "oops"),
        CheckpointMessage(),
        InitializeMessage("shard-2", "5", 0),
        ProcessRecordsMessage([Record("YQ==", "k", "1", 2, 3)], 4),
        ProcessRecordsMessage([]),
        ShutdownMessage("TERMINATE"),
        ShutdownMessage(),
        ShutdownRequestedMessage(),
        LeaseLostMessage(),
        ShardEndedMessage(),
    ],
)
def test_round_trip(message):
    assert parse_message(json.dumps(message.to_dict())) == message


def test_record_omits_unset_fields():
    data = Record("YQ==", "k", "1").to_dict()
    assert "subSequenceNumber" not in data
    assert "approximateArrivalTimestamp" not in data


def test_checkpoint_request_dict():
    assert CheckpointRequest().to_dict() == {"action": "checkpoint", "sequenceNumber": None}
    assert CheckpointRequest("10", 2).to_dict() == {
        "action": "checkpoint",
        "sequenceNumber": "10",
        "subSequenceNumber": 2,
    }


def test_encode_checkpoint_wire_format():
    assert encode_message(CheckpointRequest()) == '{"action":"checkpoint","sequenceNumber":null}'


def test_status_from_message():
    status = StatusMessage.from_message(ShardEndedMessage())
    assert status.to_dict() == {"action": "status", "responseFor": "shardEnded"}


def test_encode_status_wire_format():
    status = StatusMessage.from_message(LeaseLostMessage())
    assert encode_message(status) == '{"action":"status","responseFor":"leaseLost"}'