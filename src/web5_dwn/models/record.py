"""
Record descriptor model. Field names follow the node's camelCase wire format.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RecordDescriptor(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    interface: Optional[str] = None
    method: Optional[str] = None
    protocol: Optional[str] = None
    protocol_path: Optional[str] = None
    schema_uri: Optional[str] = Field(default=None, alias="schema")
    recipient: Optional[str] = None
    parent_id: Optional[str] = None
    data_cid: Optional[str] = None
    data_format: Optional[str] = None
    data_size: Optional[int] = None
    date_created: Optional[str] = None
    date_modified: Optional[str] = None
    date_published: Optional[str] = None
    published: Optional[bool] = None
