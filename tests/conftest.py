"""Shared fixtures: an in-memory DWN node reachable through LoopbackTransport."""

from typing import Any, Optional

import pytest

from web5_dwn import DataStream, LoopbackTransport, ProtocolsAPI, RecordsAPI
from web5_dwn.utils import base64url_encode

ALICE = "did:example:alice"
BOB = "did:example:bob"


class FakeNode:
    """Answers the messages this SDK sends, keeping records in a dict.

    `stream_reads` makes RecordsRead return the payload as a one-shot stream
    (as the HTTP transport does); otherwise payloads come back as bytes.
    """

    def __init__(self, stream_reads: bool = True, inline_query_data: bool = True):
        self.stream_reads = stream_reads
        self.inline_query_data = inline_query_data
        self.records: dict[str, tuple[dict[str, Any], bytes]] = {}
        self.protocols: list[dict[str, Any]] = []
        self.received: list[tuple[str, dict[str, Any], Optional[Any]]] = []

    def count(self, message_type: str) -> int:
        return sum(1 for _, message, _ in self.received if message["messageType"] == message_type)

    async def process_message(self, target: str, message: dict[str, Any], data: Optional[Any]) -> dict[str, Any]:
        self.received.append((target, message, data))
        handler = getattr(self, "_" + message["messageType"])
        return handler(message, data)

    def _RecordsWrite(self, message, data):
        record_id = f"bafyrecord{len(self.records) + 1}"
        descriptor = {
            "interface": "Records",
            "method": "Write",
            "dataCid": f"bafydata{len(self.records) + 1}",
            "dataSize": len(data or b""),
            "dateCreated": "2023-05-01T12:00:00.000000Z",
            "dateModified": "2023-05-01T12:00:00.000000Z",
        }
        for key in ("dataFormat", "schema", "protocol", "protocolPath", "parentId", "recipient", "published"):
            if key in message:
                descriptor[key] = message[key]
        if message.get("published"):
            descriptor["datePublished"] = "2023-05-01T12:00:00.000000Z"
        entry = {
            "recordId": record_id,
            "contextId": record_id if "protocol" in message else None,
            "descriptor": descriptor,
            "authorization": {"signature": "opaque"},
        }
        entry = {k: v for k, v in entry.items() if v is not None}
        self.records[record_id] = (entry, data or b"")
        return {"status": {"code": 202, "detail": "Accepted"}, "message": entry}

    def _RecordsRead(self, message, data):
        found = self.records.get(message.get("recordId"))
        if found is None:
            return {"status": {"code": 404, "detail": "Not Found"}}
        entry, payload = found
        body = DataStream.from_bytes(payload, chunk_size=4) if self.stream_reads else payload
        return {"status": {"code": 200, "detail": "OK"}, "record": {**entry, "data": body}}

    def _RecordsQuery(self, message, data):
        filter_ = message.get("filter", {})
        entries = []
        for entry, payload in self.records.values():
            if any(entry["descriptor"].get(k) != v for k, v in filter_.items()):
                continue
            if self.inline_query_data:
                entry = {**entry, "encodedData": base64url_encode(payload)}
            entries.append(entry)
        return {"status": {"code": 200, "detail": "OK"}, "entries": entries}

    def _RecordsDelete(self, message, data):
        if self.records.pop(message.get("recordId"), None) is None:
            return {"status": {"code": 404, "detail": "Not Found"}}
        return {"status": {"code": 202, "detail": "Accepted"}}

    def _ProtocolsConfigure(self, message, data):
        entry = {"descriptor": {
            "interface": "Protocols",
            "method": "Configure",
            "protocol": message["protocol"],
            "definition": message["definition"],
        }}
        self.protocols.append(entry)
        return {"status": {"code": 202, "detail": "Accepted"}, "message": entry}

    def _ProtocolsQuery(self, message, data):
        return {"status": {"code": 200, "detail": "OK"}, "entries": list(self.protocols)}


@pytest.fixture
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture
def records(node: FakeNode) -> RecordsAPI:
    return RecordsAPI(LoopbackTransport(node), "app://dwn")


@pytest.fixture
def protocols(node: FakeNode) -> ProtocolsAPI:
    return ProtocolsAPI(LoopbackTransport(node), "app://dwn")
