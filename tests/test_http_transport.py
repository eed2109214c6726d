"""HttpTransport against httpx.MockTransport."""

import base64
import json

import httpx
import pytest

from web5_dwn import (
    DataStream,
    DecodeError,
    DwnRequest,
    HttpTransport,
    ProtocolError,
    Record,
    StreamExhaustedError,
    TransportError,
)
from web5_dwn.models.envelope import JsonRpcErrorCode
from web5_dwn.transport.envelope import build_error, build_success

ENDPOINT = "https://dwn.example.com/"
ALICE = "did:example:alice"

RECORD = {
    "recordId": "bafyrecord1",
    "descriptor": {
        "interface": "Records",
        "method": "Write",
        "dataFormat": "application/json",
        "dataSize": 17,
        "dateCreated": "2023-05-01T12:00:00.000000Z",
        "dateModified": "2023-05-01T12:00:00.000000Z",
    },
}
OK = {"code": 200, "detail": "OK"}


def make_transport(handler) -> HttpTransport:
    return HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def make_request(**overrides) -> DwnRequest:
    fields = {"target": ALICE, "author": ALICE, "message": {"messageType": "RecordsRead", "recordId": "bafyrecord1"}}
    fields.update(overrides)
    return DwnRequest(**fields)


def body_reply(reply: dict) -> httpx.Response:
    return httpx.Response(200, json=build_success("ignored", {"reply": reply}))


def b64url(obj) -> str:
    return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()


class TestRequestEncoding:

    @pytest.mark.asyncio
    async def test_envelope_in_header_and_data_in_body(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return body_reply({"status": {"code": 202, "detail": "Accepted"}})

        transport = make_transport(handler)
        reply = await transport.send(ENDPOINT, make_request(data=b"Hello, world!"))

        assert reply.status.code == 202
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.content == b"Hello, world!"
        assert request.headers["cache-control"] == "no-cache"
        envelope = json.loads(request.headers["dwn-request"])
        assert envelope["jsonrpc"] == "2.0"
        assert envelope["method"] == "dwn.processMessage"
        assert isinstance(envelope["id"], str)
        assert envelope["params"] == {
            "messageType": "RecordsRead",
            "recordId": "bafyrecord1",
            "author": ALICE,
            "target": ALICE,
        }
        await transport.close()

    @pytest.mark.asyncio
    async def test_explicit_identity_overrides_message_keys(self):
        seen = []

        def handler(request):
            seen.append(json.loads(request.headers["dwn-request"]))
            return body_reply({"status": OK})

        transport = make_transport(handler)
        await transport.send(ENDPOINT, make_request(message={"author": "did:example:mallory", "target": "did:x"}))
        assert seen[0]["params"]["author"] == ALICE
        assert seen[0]["params"]["target"] == ALICE

    @pytest.mark.asyncio
    async def test_fresh_correlation_id_per_send(self):
        ids = []

        def handler(request):
            ids.append(json.loads(request.headers["dwn-request"])["id"])
            return body_reply({"status": OK})

        transport = make_transport(handler)
        await transport.send(ENDPOINT, make_request())
        await transport.send(ENDPOINT, make_request())
        assert len(set(ids)) == 2

    @pytest.mark.asyncio
    async def test_streams_request_payload(self):
        seen = []

        def handler(request):
            seen.append(request.content)
            return body_reply({"status": OK})

        payload = b"x" * 200_000
        transport = make_transport(handler)
        await transport.send(ENDPOINT, make_request(data=DataStream.from_bytes(payload)))
        assert seen[0] == payload

    @pytest.mark.asyncio
    async def test_bytearray_payload_sent_as_raw_bytes(self):
        seen = []

        def handler(request):
            seen.append(request.content)
            return body_reply({"status": OK})

        transport = make_transport(handler)
        await transport.send(ENDPOINT, make_request(data=bytearray(b"Hello, world!")))
        assert seen[0] == b"Hello, world!"

    @pytest.mark.asyncio
    async def test_reply_cookies_not_sent_on_later_requests(self):
        seen = []

        def handler(request):
            seen.append(request.headers.get("cookie"))
            return httpx.Response(
                200,
                json=build_success("ignored", {"reply": {"status": OK}}),
                headers={"set-cookie": "session=abc; Path=/"},
            )

        async with HttpTransport(transport=httpx.MockTransport(handler)) as transport:
            await transport.send(ENDPOINT, make_request())
            await transport.send(ENDPOINT, make_request(target="did:example:bob"))
        assert seen == [None, None]


class TestReplyDemultiplexing:

    @pytest.mark.asyncio
    async def test_reply_embedded_in_body(self):
        entries = [RECORD, {**RECORD, "recordId": "bafyrecord2"}]
        transport = make_transport(lambda request: body_reply({"status": OK, "entries": entries}))
        reply = await transport.send(ENDPOINT, make_request())
        assert reply.status.code == 200
        assert reply.entries == entries
        assert reply.record is None

    @pytest.mark.asyncio
    async def test_body_without_entries(self):
        transport = make_transport(lambda request: body_reply({"status": {"code": 202, "detail": "Accepted"}}))
        reply = await transport.send(ENDPOINT, make_request())
        assert reply.entries is None
        assert reply.message is None

    @pytest.mark.asyncio
    async def test_dwn_response_header_with_body_stream(self):
        header = json.dumps(build_success("1", {"reply": {"status": OK, "record": RECORD}}))
        transport = make_transport(
            lambda request: httpx.Response(200, headers={"dwn-response": header}, content=b'{"hello": "world"}')
        )
        reply = await transport.send(ENDPOINT, make_request())

        assert reply.record["recordId"] == "bafyrecord1"
        stream = reply.record["data"]
        assert isinstance(stream, DataStream)
        assert await stream.read_all() == b'{"hello": "world"}'

    @pytest.mark.asyncio
    async def test_legacy_header_record_reads_from_body(self):
        transport = make_transport(lambda request: httpx.Response(
            200,
            headers={"WEB5-RESPONSE": b64url({"status": OK, "record": RECORD})},
            content=b'{"hello": "world"}',
        ))
        reply = await transport.send(ENDPOINT, make_request())
        assert reply.entries is None

        record = Record.from_fields(None, {**reply.record, "author": ALICE, "target": ALICE})
        assert record.id == "bafyrecord1"
        assert await record.data.json() == {"hello": "world"}
        with pytest.raises(StreamExhaustedError):
            await record.data.json()

    @pytest.mark.asyncio
    async def test_legacy_header_takes_priority(self):
        current = json.dumps(build_success("1", {"reply": {"status": {"code": 500, "detail": "wrong"}}}))
        transport = make_transport(lambda request: httpx.Response(
            200,
            headers={"WEB5-RESPONSE": b64url({"status": OK, "record": RECORD}), "dwn-response": current},
            content=b"payload",
        ))
        reply = await transport.send(ENDPOINT, make_request())
        assert reply.status.code == 200

    @pytest.mark.asyncio
    async def test_header_reply_without_record(self):
        header = json.dumps(build_success("1", {"reply": {"status": {"code": 404, "detail": "Not Found"}}}))
        transport = make_transport(lambda request: httpx.Response(200, headers={"dwn-response": header}))
        reply = await transport.send(ENDPOINT, make_request())
        assert reply.status.code == 404
        assert reply.record is None


class TestFailures:

    @pytest.mark.asyncio
    async def test_http_500_fails_before_decoding(self):
        # The garbage header would raise DecodeError if it were looked at.
        transport = make_transport(
            lambda request: httpx.Response(500, headers={"dwn-response": "{not json"}, content=b"oops")
        )
        with pytest.raises(TransportError) as exc_info:
            await transport.send(ENDPOINT, make_request())
        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_http_4xx_is_not_retryable(self):
        transport = make_transport(lambda request: httpx.Response(404))
        with pytest.raises(TransportError) as exc_info:
            await transport.send(ENDPOINT, make_request())
        assert exc_info.value.status_code == 404
        assert not exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        transport = make_transport(handler)
        with pytest.raises(TransportError) as exc_info:
            await transport.send(ENDPOINT, make_request())
        assert exc_info.value.retryable
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow")

        transport = make_transport(handler)
        with pytest.raises(TransportError, match="timed out"):
            await transport.send(ENDPOINT, make_request())

    @pytest.mark.asyncio
    async def test_malformed_dwn_response_header(self):
        transport = make_transport(lambda request: httpx.Response(200, headers={"dwn-response": "{not json"}))
        with pytest.raises(DecodeError):
            await transport.send(ENDPOINT, make_request())

    @pytest.mark.asyncio
    async def test_malformed_legacy_header(self):
        not_json = base64.urlsafe_b64encode(b"definitely not json").decode()
        transport = make_transport(lambda request: httpx.Response(200, headers={"WEB5-RESPONSE": not_json}))
        with pytest.raises(DecodeError):
            await transport.send(ENDPOINT, make_request())

    @pytest.mark.asyncio
    async def test_malformed_body(self):
        transport = make_transport(lambda request: httpx.Response(200, content=b"<html>gateway</html>"))
        with pytest.raises(DecodeError):
            await transport.send(ENDPOINT, make_request())

    @pytest.mark.asyncio
    async def test_body_without_reply(self):
        transport = make_transport(lambda request: httpx.Response(200, json=build_success("1", {"other": 1})))
        with pytest.raises(DecodeError):
            await transport.send(ENDPOINT, make_request())

    @pytest.mark.asyncio
    async def test_json_rpc_error_body(self):
        transport = make_transport(lambda request: httpx.Response(
            200, json=build_error("1", JsonRpcErrorCode.UNAUTHORIZED, "signature invalid", data={"kid": "#dwn"}),
        ))
        with pytest.raises(ProtocolError) as exc_info:
            await transport.send(ENDPOINT, make_request())
        assert exc_info.value.code == JsonRpcErrorCode.UNAUTHORIZED
        assert exc_info.value.data == {"kid": "#dwn"}

    @pytest.mark.asyncio
    async def test_json_rpc_error_header(self):
        header = json.dumps(build_error("1", JsonRpcErrorCode.FORBIDDEN, "forbidden"))
        transport = make_transport(lambda request: httpx.Response(200, headers={"dwn-response": header}))
        with pytest.raises(ProtocolError) as exc_info:
            await transport.send(ENDPOINT, make_request())
        assert exc_info.value.code == -50403
