"""
JSON-RPC 2.0 envelope models.
"""

from enum import IntEnum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, model_validator

JsonRpcId = Union[str, int, float, None]


class JsonRpcErrorCode(IntEnum):
    # JSON-RPC 2.0 pre-defined errors
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    PARSE_ERROR = -32700

    # App defined errors, mirror HTTP 4xx statuses
    BAD_REQUEST = -50400
    UNAUTHORIZED = -50401
    FORBIDDEN = -50403


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: JsonRpcId = None  # unset for notifications
    method: str
    params: Optional[Any] = None


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None  # left unset when the caller passed no data


class JsonRpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    id: JsonRpcId = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None

    @model_validator(mode="after")
    def _result_xor_error(self) -> "JsonRpcResponse":
        has_result = "result" in self.model_fields_set
        has_error = "error" in self.model_fields_set and self.error is not None
        if has_result == has_error:
            raise ValueError("response must carry exactly one of 'result' or 'error'")
        return self

    @property
    def is_error(self) -> bool:
        return self.error is not None
