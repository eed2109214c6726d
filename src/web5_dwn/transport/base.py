"""
Transport contract.

A transport turns a DwnRequest into a DwnReply. Callers never branch on which
transport they hold: HTTP, in-process loopback, or anything else implementing
this class.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Union

from web5_dwn.errors import DecodeError
from web5_dwn.models.reply import DwnReply, DwnRequest

DWN_PROCESS_MESSAGE = "dwn.processMessage"


class Transport(ABC):
    def encode_message(self, message: Any) -> str:
        """Serialize a structured message to wire text."""
        try:
            return json.dumps(message)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Message is not JSON serializable: {e}") from e

    def decode_message(self, text: Union[str, bytes]) -> Any:
        """Parse wire text back into a structured message."""
        try:
            return json.loads(text)
        except ValueError as e:
            raise DecodeError(f"Malformed JSON: {e}") from e

    @abstractmethod
    async def send(self, endpoint: str, request: DwnRequest) -> DwnReply:
        """Submit `request` to the node at `endpoint`.

        The only operation allowed to perform I/O. Raises TransportError when
        the node cannot be reached, DecodeError when its reply is malformed and
        ProtocolError when it answers with a JSON-RPC error.
        """

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
