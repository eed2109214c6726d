"""
Envelope construction and parsing.

Builders return plain dicts ready for `json.dumps`. Optional members that were
not supplied are left out of the dict entirely rather than set to None.
"""

from typing import Any

from pydantic import ValidationError

from web5_dwn.errors import DecodeError, ProtocolError
from web5_dwn.models.envelope import JsonRpcError, JsonRpcId, JsonRpcRequest, JsonRpcResponse

_UNSET: Any = object()


def build_request(id: JsonRpcId, method: str, params: Any = None) -> dict[str, Any]:
    """Build a JSON-RPC request as a dict."""
    request = JsonRpcRequest(jsonrpc="2.0", id=id, method=method, params=params)
    return request.model_dump(exclude_unset=True)


def build_notification(method: str, params: Any = None) -> dict[str, Any]:
    """Build a JSON-RPC notification. Notifications carry no `id`."""
    notification = JsonRpcRequest(jsonrpc="2.0", method=method, params=params)
    return notification.model_dump(exclude_unset=True)


def build_success(id: JsonRpcId, result: Any = None) -> dict[str, Any]:
    response = JsonRpcResponse(jsonrpc="2.0", id=id, result=result)
    return response.model_dump(exclude_unset=True, exclude={"error"})


def build_error(id: JsonRpcId, code: int, message: str, data: Any = _UNSET) -> dict[str, Any]:
    """Build a JSON-RPC error response.

    `data` is only emitted when passed, so callers can tell "no extra data"
    apart from an explicit `null`.
    """
    fields: dict[str, Any] = {"code": int(code), "message": message}
    if data is not _UNSET:
        fields["data"] = data
    response = JsonRpcResponse(jsonrpc="2.0", id=id, error=JsonRpcError(**fields))
    return response.model_dump(exclude_unset=True, exclude={"result"})


def parse_response(raw: Any) -> JsonRpcResponse:
    """Parse a JSON-RPC response object.

    Raises DecodeError if the object is not a valid response and ProtocolError
    if it is a valid error response.
    """
    try:
        response = JsonRpcResponse.model_validate(raw)
    except ValidationError as e:
        raise DecodeError(f"Malformed JSON-RPC response: {e}") from e
    if response.error is not None:
        err = response.error
        if "data" in err.model_fields_set:
            raise ProtocolError(err.code, err.message, err.data)
        raise ProtocolError(err.code, err.message)
    return response
