"""
In-process transport for a node living in the same event loop.
"""

import logging
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from web5_dwn.errors import DecodeError, TransportError, Web5Error
from web5_dwn.models.reply import DwnReply, DwnRequest
from web5_dwn.transport.base import Transport

logger = logging.getLogger(__name__)


class Node(Protocol):
    async def process_message(self, target: str, message: dict[str, Any], data: Optional[Any]) -> dict[str, Any]:
        ...


class LoopbackTransport(Transport):
    """Hands requests straight to `node.process_message`; `endpoint` is ignored."""

    def __init__(self, node: Node):
        self._node = node

    async def send(self, endpoint: str, request: DwnRequest) -> DwnReply:
        # Round trip through the codec so unserializable messages fail as they would over HTTP.
        message = self.decode_message(self.encode_message({
            **request.message,
            "author": request.author,
            "target": request.target,
        }))

        logger.debug("Loopback %s -> %s", request.author, request.target)
        try:
            reply = await self._node.process_message(request.target, message, request.data)
        except Web5Error:
            raise
        except Exception as e:
            raise TransportError(f"Node failed to process message: {e}") from e

        try:
            return DwnReply.model_validate(reply)
        except ValidationError as e:
            raise DecodeError(f"Malformed DWN reply: {e}") from e
