"""Messages exchanged with the KCL MultiLang daemon over its line protocol."""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Union

_U64_MAX = 2**64 - 1


class MessageError(ValueError):
    """Raised when a message from the daemon cannot be decoded."""


def _require_str(data: Mapping[str, Any], key: str) -> str:
    if key not in data:
        raise MessageError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise MessageError(f"field `{key}` must be a string")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    raise MessageError(f"field `{key}` must be a string or null")


def _optional_u64(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= _U64_MAX:
        raise MessageError(f"field `{key}` must be an unsigned 64-bit integer")
    return value


def _put_if_set(out: dict[str, Any], key: str, value: Any) -> None:
    if value is not None:
        out[key] = value


# Messages sent to the daemon.


@dataclass
class CheckpointRequest:
    """Asks the daemon to checkpoint at a sequence number (or the latest one)."""

    sequence_number: str | None = None
    sub_sequence_number: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": "checkpoint", "sequenceNumber": self.sequence_number}
        _put_if_set(out, "subSequenceNumber", self.sub_sequence_number)
        return out


@dataclass
class StatusMessage:
    """Acknowledges that a message from the daemon has been handled."""

    response_for: str

    @classmethod
    def from_message(cls, message: InputMessage) -> StatusMessage:
        return cls(response_for=message.id)

    def to_dict(self) -> dict[str, Any]:
        return {"action": "status", "responseFor": self.response_for}


OutputMessage = Union[CheckpointRequest, StatusMessage]


# Messages received from the daemon.


class _Incoming:
    ACTION: ClassVar[str]

    @property
    def id(self) -> str:
        """The action name that identifies this kind of message."""
        return self.ACTION


@dataclass
class CheckpointMessage(_Incoming):
    """The daemon's answer to a checkpoint request."""

    ACTION: ClassVar[str] = "checkpoint"

    sequence_number: str | None = None
    sub_sequence_number: int | None = None
    error: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CheckpointMessage:
        return cls(
            sequence_number=_optional_str(data, "sequenceNumber"),
            sub_sequence_number=_optional_u64(data, "subSequenceNumber"),
            error=_optional_str(data, "error"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": self.ACTION, "sequenceNumber": self.sequence_number}
        _put_if_set(out, "subSequenceNumber", self.sub_sequence_number)
        _put_if_set(out, "error", self.error)
        return out


@dataclass
class InitializeMessage(_Incoming):
    """Sent once when the processor is assigned a shard."""

    ACTION: ClassVar[str] = "initialize"

    shard_id: str
    sequence_number: str | None = None
    sub_sequence_number: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> InitializeMessage:
        return cls(
            shard_id=_require_str(data, "shardId"),
            sequence_number=_optional_str(data, "sequenceNumber"),
            sub_sequence_number=_optional_u64(data, "subSequenceNumber"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": self.ACTION, "shardId": self.shard_id}
        _put_if_set(out, "sequenceNumber", self.sequence_number)
        _put_if_set(out, "subSequenceNumber", self.sub_sequence_number)
        return out


@dataclass
class Record:
    """A single Kinesis record with base64 encoded payload."""

    base64_data: str
    partition_key: str
    sequence_number: str
    sub_sequence_number: int | None = None
    approximate_arrival_timestamp_ms: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Record:
        if not isinstance(data, Mapping):
            raise MessageError("record must be a JSON object")
        return cls(
            base64_data=_require_str(data, "data"),
            partition_key=_require_str(data, "partitionKey"),
            sequence_number=_require_str(data, "sequenceNumber"),
            sub_sequence_number=_optional_u64(data, "subSequenceNumber"),
            approximate_arrival_timestamp_ms=_optional_u64(data, "approximateArrivalTimestamp"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "data": self.base64_data,
            "partitionKey": self.partition_key,
            "sequenceNumber": self.sequence_number,
        }
        _put_if_set(out, "subSequenceNumber", self.sub_sequence_number)
        _put_if_set(out, "approximateArrivalTimestamp", self.approximate_arrival_timestamp_ms)
        return out

    def to_bytes(self) -> bytes:
        """Decode the payload; raises ``binascii.Error`` on malformed base64."""
        return base64.b64decode(self.base64_data, validate=True)


@dataclass
class ProcessRecordsMessage(_Incoming):
    """A batch of records to process."""

    ACTION: ClassVar[str] = "processRecords"

    records: list[Record] = field(default_factory=list)
    millis_behind_latest: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProcessRecordsMessage:
        if "records" not in data:
            raise MessageError("missing field `records`")
        records = data["records"]
        if not isinstance(records, list):
            raise MessageError("field `records` must be a list")
        return cls(
            records=[Record.from_dict(item) for item in records],
            millis_behind_latest=_optional_u64(data, "millisBehindLatest"),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "action": self.ACTION,
            "records": [record.to_dict() for record in self.records],
        }
        _put_if_set(out, "millisBehindLatest", self.millis_behind_latest)
        return out


@dataclass
class ShutdownMessage(_Incoming):
    """The processor is being shut down."""

    ACTION: ClassVar[str] = "shutdown"

    reason: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ShutdownMessage:
        return cls(reason=_optional_str(data, "reason"))

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"action": self.ACTION}
        _put_if_set(out, "reason", self.reason)
        return out


@dataclass
class _EmptyMessage(_Incoming):
    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.ACTION}


@dataclass
class ShutdownRequestedMessage(_EmptyMessage):
    """A graceful shutdown has been requested."""

    ACTION: ClassVar[str] = "shutdownRequested"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ShutdownRequestedMessage:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.ACTION}


@dataclass
class LeaseLostMessage(_EmptyMessage):
    """The lease on the shard has been lost."""

    ACTION: ClassVar[str] = "leaseLost"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LeaseLostMessage:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.ACTION}


@dataclass
class ShardEndedMessage(_EmptyMessage):
    """The end of the shard has been reached."""

    ACTION: ClassVar[str] = "shardEnded"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ShardEndedMessage:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {"action": self.ACTION}


InputMessage = Union[
    CheckpointMessage,
    InitializeMessage,
    ProcessRecordsMessage,
    ShutdownMessage,
    ShutdownRequestedMessage,
    LeaseLostMessage,
    ShardEndedMessage,
]

_INPUT_TYPES: dict[str, Any] = {
    kind.ACTION: kind
    for kind in (
        CheckpointMessage,
        InitializeMessage,
        ProcessRecordsMessage,
        ShutdownMessage,
        ShutdownRequestedMessage,
        LeaseLostMessage,
        ShardEndedMessage,
    )
}


def parse_message(line: str | bytes) -> InputMessage:
    """Decode one JSON line received from the daemon."""
    try:
        data = json.loads(line)
    except ValueError as exc:
        raise MessageError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise MessageError("message must be a JSON object")
    if "action" not in data:
        raise MessageError("missing field `action`")
    action = data["action"]
    kind = _INPUT_TYPES.get(action) if isinstance(action, str) else None
    if kind is None:
        raise MessageError(f"unknown action: {action!r}")
    return kind.from_dict(data)


def encode_message(message: OutputMessage) -> str:
    """Encode a message for the daemon as compact JSON."""
    return json.dumps(message.to_dict(), separators=(",", ":"))