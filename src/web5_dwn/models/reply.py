"""
Logical request/reply models exchanged with a transport.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Status(BaseModel):
    code: int
    detail: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.code < 300


class DwnRequest(BaseModel):
    """A message submission on behalf of `author` against the node of `target`."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    target: str
    author: str
    message: dict[str, Any] = Field(default_factory=dict)
    data: Optional[Any] = None  # bytes, DataStream or any async iterable of bytes


class DwnReply(BaseModel):
    status: Status
    message: Optional[dict[str, Any]] = None
    record: Optional[dict[str, Any]] = None  # `data` may hold a live DataStream
    entries: Optional[list[dict[str, Any]]] = None  # query replies only
