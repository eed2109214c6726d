"""
Payload conversion helpers.
"""

import base64
import binascii
import json
from typing import Any, Optional

from web5_dwn.errors import DecodeError


def data_to_bytes(data: Any, data_format: Optional[str] = None) -> tuple[bytes, str]:
    """Convert a record payload to bytes and infer its data format.

    str -> text/plain, dict/list -> application/json, bytes -> application/octet-stream.
    An explicit `data_format` always wins.
    """
    if isinstance(data, (bytes, bytearray)):
        return bytes(data), data_format or "application/octet-stream"
    if isinstance(data, str):
        return data.encode("utf-8"), data_format or "text/plain"
    if isinstance(data, (dict, list)):
        return json.dumps(data).encode("utf-8"), data_format or "application/json"
    raise TypeError(f"Unsupported data type: {type(data).__name__}")


def base64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def base64url_decode(text: str) -> bytes:
    try:
        return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid base64url data: {e}") from e
