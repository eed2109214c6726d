"""
HTTP transport for DWN message submission.

The JSON-RPC request travels in the `dwn-request` header so the request body is
free to carry the raw record payload. Replies come back one of three ways,
tried in this order:

1. `WEB5-RESPONSE` header: base64url JSON reply, body is the record payload.
   Legacy user-agent format, slated for removal.
2. `dwn-response` header: JSON-RPC envelope, body is the record payload.
3. No header: the whole JSON-RPC envelope is the body.

For (1) and (2) the body is left unread and handed to the reply's record as a
DataStream, so large payloads are never buffered before the caller asks.
"""

import logging
import uuid
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Awaitable, Callable, Optional

import httpx
from pydantic import ValidationError

from web5_dwn.errors import DecodeError, TransportError
from web5_dwn.models.reply import DwnReply, DwnRequest
from web5_dwn.stream import DataStream
from web5_dwn.transport.base import DWN_PROCESS_MESSAGE, Transport
from web5_dwn.transport.envelope import build_request, parse_response
from web5_dwn.utils import base64url_decode

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:3000"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "web5-dwn-python/0.1.0"

# Retrying these may succeed; other 4xx will not.
RETRYABLE_STATUS_CODES = {408, 425, 429}


class HttpTransport(Transport):
    DWN_MESSAGE_HEADER = "dwn-request"
    DWN_RESPONSE_HEADER = "dwn-response"
    WEB5_RESPONSE_HEADER = "WEB5-RESPONSE"

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            # Node replies never set session state for later requests.
            cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
            transport=transport,
        )
        # Header strategies in priority order; the JSON body is the fallback.
        self._header_parsers: list[Callable[[httpx.Response], Awaitable[Optional[DwnReply]]]] = [
            self._reply_from_web5_header,
            self._reply_from_dwn_header,
        ]

    async def send(self, endpoint: str, request: DwnRequest) -> DwnReply:
        request_id = str(uuid.uuid4())
        # Explicit author/target win over same-named keys inside the message.
        dwn_request = build_request(request_id, DWN_PROCESS_MESSAGE, {
            **request.message,
            "author": request.author,
            "target": request.target,
        })

        http_request = self._client.build_request(
            "POST",
            endpoint,
            headers={
                self.DWN_MESSAGE_HEADER: self.encode_message(dwn_request),
                "Cache-Control": "no-cache",
            },
            content=bytes(request.data) if isinstance(request.data, bytearray) else request.data,
        )

        logger.debug("POST %s id=%s", endpoint, request_id)
        try:
            response = await self._client.send(http_request, stream=True)
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {endpoint} timed out: {e}", retryable=True) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {endpoint} failed: {e}", retryable=True) from e

        if not response.is_success:
            await response.aclose()
            status = response.status_code
            raise TransportError(
                f"HTTP {status} from {endpoint}",
                status_code=status,
                retryable=status >= 500 or status in RETRYABLE_STATUS_CODES,
            )

        try:
            for parse in self._header_parsers:
                reply = await parse(response)
                if reply is not None:
                    return reply
            return await self._reply_from_body(response)
        except BaseException:
            await response.aclose()
            raise

    async def _reply_from_web5_header(self, response: httpx.Response) -> Optional[DwnReply]:
        header = response.headers.get(self.WEB5_RESPONSE_HEADER)
        if not header:
            return None
        logger.debug("Node replied with deprecated %s header", self.WEB5_RESPONSE_HEADER)
        reply = self.decode_message(base64url_decode(header))
        return await self._with_body_stream(reply, response)

    async def _reply_from_dwn_header(self, response: httpx.Response) -> Optional[DwnReply]:
        header = response.headers.get(self.DWN_RESPONSE_HEADER)
        if not header:
            return None
        envelope = parse_response(self.decode_message(header))
        return await self._with_body_stream(self._unwrap_reply(envelope.result), response)

    async def _reply_from_body(self, response: httpx.Response) -> DwnReply:
        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(f"Reading response body failed: {e}", retryable=True) from e
        finally:
            await response.aclose()
        envelope = parse_response(self.decode_message(body))
        return self._validate_reply(self._unwrap_reply(envelope.result))

    async def _with_body_stream(self, reply: Any, response: httpx.Response) -> DwnReply:
        if not isinstance(reply, dict):
            raise DecodeError(f"Expected a reply object, got {type(reply).__name__}")
        record = reply.get("record")
        if record is None:
            # No record to own the body, release the connection.
            await response.aclose()
        elif not isinstance(record, dict):
            raise DecodeError(f"Expected a record object, got {type(record).__name__}")
        else:
            reply = {**reply, "record": {**record, "data": DataStream.from_response(response)}}
        return self._validate_reply(reply)

    @staticmethod
    def _unwrap_reply(result: Any) -> Any:
        if not isinstance(result, dict) or "reply" not in result:
            raise DecodeError("JSON-RPC result carries no 'reply'")
        return result["reply"]

    @staticmethod
    def _validate_reply(reply: Any) -> DwnReply:
        try:
            return DwnReply.model_validate(reply)
        except ValidationError as e:
            raise DecodeError(f"Malformed DWN reply: {e}") from e

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
