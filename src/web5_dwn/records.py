"""
Records API: write, read, query and delete records on a DWN.

Message construction, signing and validation happen on the node side; this
module only tags the caller's message with its `messageType`, submits it and
wraps the reply in Record handles.
"""

from __future__ import annotations

from typing import Any, Optional

from web5_dwn.errors import RecordNotFoundError
from web5_dwn.models.reply import DwnReply, DwnRequest, Status
from web5_dwn.record import Record
from web5_dwn.transport.base import Transport
from web5_dwn.utils import base64url_decode, data_to_bytes


class RecordsResult:
    __slots__ = ("status", "message", "record", "entries")

    def __init__(self, status: Status, message: Optional[dict[str, Any]] = None,
                 record: Optional[Record] = None, entries: Optional[list[Record]] = None):
        self.status = status
        self.message = message
        self.record = record
        self.entries = entries

    def __repr__(self) -> str:
        return f"RecordsResult(status={self.status.code}, record={self.record!r})"


class RecordsAPI:
    def __init__(self, transport: Transport, endpoint: str):
        self._transport = transport
        self._endpoint = endpoint

    async def send(self, message_type: str, target: str, author: str,
                   message: Optional[dict[str, Any]] = None, data: Optional[Any] = None) -> DwnReply:
        request = DwnRequest(
            target=target,
            author=author,
            message={**(message or {}), "messageType": message_type},
            data=data,
        )
        return await self._transport.send(self._endpoint, request)

    async def write(self, target: str, *, author: str, data: Any = None,
                    message: Optional[dict[str, Any]] = None) -> RecordsResult:
        """Write a record. `data` may be str, bytes, or a JSON-able dict/list."""
        message = dict(message or {})
        data_bytes = None
        if data is not None:
            data_bytes, message["dataFormat"] = data_to_bytes(data, message.get("dataFormat"))
        reply = await self.send("RecordsWrite", target, author, message, data_bytes)

        record = None
        if reply.message is not None and reply.status.ok:
            record = Record.from_fields(self, {
                **reply.message,
                "encodedData": data_bytes,
                "author": author,
                "target": target,
            })
        return RecordsResult(reply.status, reply.message, record=record)

    async def read(self, target: str, *, author: str, message: dict[str, Any]) -> RecordsResult:
        """Read a record. Over HTTP the payload is a one-shot stream."""
        reply = await self.send("RecordsRead", target, author, message)
        record = None
        if reply.record is not None:
            record = Record.from_fields(self, {**reply.record, "author": author, "target": target})
        return RecordsResult(reply.status, reply.message, record=record)

    async def query(self, target: str, *, author: str, message: Optional[dict[str, Any]] = None) -> RecordsResult:
        """Query records. Entries without inline data fetch it on first read."""
        reply = await self.send("RecordsQuery", target, author, message)
        entries = [
            Record.from_fields(self, {**entry, "author": author, "target": target})
            for entry in reply.entries or []
        ]
        return RecordsResult(reply.status, reply.message, entries=entries)

    async def delete(self, target: str, *, author: str, message: dict[str, Any]) -> RecordsResult:
        reply = await self.send("RecordsDelete", target, author, message)
        return RecordsResult(reply.status, reply.message)

    async def fetch_data(self, target: str, *, author: str, record_id: str) -> Any:
        """Read the payload of `record_id` for a Record built without data."""
        reply = await self.send("RecordsRead", target, author, {"recordId": record_id})
        if not reply.status.ok or reply.record is None:
            raise RecordNotFoundError(record_id, reply.status)
        data = reply.record.get("data")
        if data is None:
            data = reply.record.get("encodedData")
        if isinstance(data, str):
            return base64url_decode(data)
        if data is None:
            raise RecordNotFoundError(record_id, reply.status)
        return data
