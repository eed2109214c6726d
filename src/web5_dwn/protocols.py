"""
Protocols API: install and list protocol definitions on a DWN.
"""

from typing import Any, Optional

from web5_dwn.models.reply import DwnReply, DwnRequest
from web5_dwn.transport.base import Transport


class ProtocolsAPI:
    def __init__(self, transport: Transport, endpoint: str):
        self._transport = transport
        self._endpoint = endpoint

    async def configure(self, target: str, *, author: str, message: dict[str, Any]) -> DwnReply:
        """Install a protocol. `message` carries `protocol` and `definition`."""
        return await self._send("ProtocolsConfigure", target, author, message)

    async def query(self, target: str, *, author: str, message: Optional[dict[str, Any]] = None) -> DwnReply:
        return await self._send("ProtocolsQuery", target, author, message)

    async def _send(self, message_type: str, target: str, author: str,
                    message: Optional[dict[str, Any]]) -> DwnReply:
        request = DwnRequest(
            target=target,
            author=author,
            message={**(message or {}), "messageType": message_type},
        )
        return await self._transport.send(self._endpoint, request)
