"""
web5-dwn error types.

TransportError and DecodeError are raised by transports, ProtocolError when a
well-formed JSON-RPC response carries an `error` member, StreamExhaustedError
by a record's data accessor once its one-shot stream has been read.
"""

from typing import Any, Optional

_NO_DATA: Any = object()


class Web5Error(Exception):
    def __init__(self, code: Any, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class TransportError(Web5Error):
    """Connection failure, timeout or non-2xx HTTP status."""

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = False):
        super().__init__("transport_error", message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code
        self.retryable = retryable


class DecodeError(Web5Error):
    """Malformed envelope header, JSON body or payload. Never retryable."""

    retryable = False

    def __init__(self, message: str):
        super().__init__("decode_error", message)


class ProtocolError(Web5Error):
    """JSON-RPC error member. `has_data` is False when the member carried no `data` at all."""

    def __init__(self, code: int, message: str, data: Any = _NO_DATA):
        self.has_data = data is not _NO_DATA
        super().__init__(code, message, {"data": data} if self.has_data else None)
        self.data = data if self.has_data else None


class StreamExhaustedError(Web5Error):
    def __init__(self, message: str = "Data stream has already been consumed"):
        super().__init__("stream_exhausted", message)


class MissingNodeError(Web5Error):
    """A record with no inline data has no node to fetch it from."""

    def __init__(self, record_id: str):
        super().__init__("missing_node", f"Record {record_id} has no data and no node to fetch it from",
                         {"record_id": record_id})
        self.record_id = record_id


class RecordNotFoundError(Web5Error):
    """The node did not return data for a record being fetched lazily."""

    def __init__(self, record_id: str, status: Any = None):
        detail = f" ({status.code} {status.detail})" if status is not None else ""
        super().__init__("record_not_found", f"Record {record_id} has no data on the node{detail}",
                         {"record_id": record_id})
        self.record_id = record_id
        self.status = status
