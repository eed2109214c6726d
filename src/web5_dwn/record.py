"""
Record: read-only view of a DWN record message plus its payload accessor.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Union

from web5_dwn.data import BytesSource, PendingSource, RecordData, to_source
from web5_dwn.errors import MissingNodeError
from web5_dwn.models.record import RecordDescriptor
from web5_dwn.utils import base64url_decode

if TYPE_CHECKING:
    from web5_dwn.records import RecordsAPI


class Record:
    __slots__ = (
        "_dwn", "_id", "_author", "_target", "_context_id",
        "_descriptor", "_attestation", "_encryption", "_data",
    )

    def __init__(
        self,
        dwn: Optional[RecordsAPI],
        *,
        author: str,
        target: str,
        descriptor: Union[RecordDescriptor, dict[str, Any]],
        record_id: str,
        context_id: Optional[str] = None,
        encoded_data: Optional[bytes] = None,
        data: Optional[Any] = None,
        attestation: Optional[dict[str, Any]] = None,
        encryption: Optional[dict[str, Any]] = None,
    ):
        self._dwn = dwn
        self._id = record_id
        self._author = author
        self._target = target
        self._context_id = context_id
        self._descriptor = (
            descriptor if isinstance(descriptor, RecordDescriptor)
            else RecordDescriptor.model_validate(descriptor)
        )
        self._attestation = attestation
        self._encryption = encryption

        if encoded_data is not None:
            source = BytesSource(bytes(encoded_data))
        elif data is not None:
            source = to_source(data)
        else:
            source = PendingSource(self._fetch_data)
        self._data = RecordData(source)

    @classmethod
    def from_fields(cls, dwn: Optional[RecordsAPI], fields: dict[str, Any]) -> Record:
        """Build a record from a wire-shaped message bag.

        Accepts the node's camelCase keys. `encodedData` may be bytes or
        base64url text; keys such as `authorization` are ignored.
        """
        encoded = fields.get("encodedData")
        if isinstance(encoded, str):
            encoded = base64url_decode(encoded)
        return cls(
            dwn,
            author=fields["author"],
            target=fields["target"],
            descriptor=fields.get("descriptor") or {},
            record_id=fields["recordId"],
            context_id=fields.get("contextId"),
            encoded_data=encoded,
            data=fields.get("data"),
            attestation=fields.get("attestation"),
            encryption=fields.get("encryption"),
        )

    async def _fetch_data(self) -> Any:
        if self._dwn is None:
            raise MissingNodeError(self._id)
        return await self._dwn.fetch_data(self._target, author=self._author, record_id=self._id)

    @property
    def data(self) -> RecordData:
        return self._data

    @property
    def id(self) -> str:
        return self._id

    @property
    def author(self) -> str:
        return self._author

    @property
    def target(self) -> str:
        return self._target

    @property
    def context_id(self) -> Optional[str]:
        return self._context_id

    @property
    def descriptor(self) -> RecordDescriptor:
        return self._descriptor

    @property
    def attestation(self) -> Optional[dict[str, Any]]:
        return self._attestation

    @property
    def encryption(self) -> Optional[dict[str, Any]]:
        return self._encryption

    @property
    def interface(self) -> Optional[str]:
        return self._descriptor.interface

    @property
    def method(self) -> Optional[str]:
        return self._descriptor.method

    @property
    def protocol(self) -> Optional[str]:
        return self._descriptor.protocol

    @property
    def protocol_path(self) -> Optional[str]:
        return self._descriptor.protocol_path

    @property
    def schema(self) -> Optional[str]:
        return self._descriptor.schema_uri

    @property
    def recipient(self) -> Optional[str]:
        return self._descriptor.recipient

    @property
    def parent_id(self) -> Optional[str]:
        return self._descriptor.parent_id

    @property
    def data_cid(self) -> Optional[str]:
        return self._descriptor.data_cid

    @property
    def data_format(self) -> Optional[str]:
        return self._descriptor.data_format

    @property
    def data_size(self) -> Optional[int]:
        return self._descriptor.data_size

    @property
    def date_created(self) -> Optional[str]:
        return self._descriptor.date_created

    @property
    def date_modified(self) -> Optional[str]:
        return self._descriptor.date_modified

    @property
    def date_published(self) -> Optional[str]:
        return self._descriptor.date_published

    @property
    def published(self) -> Optional[bool]:
        return self._descriptor.published

    def to_json(self) -> dict[str, Any]:
        """Flat wire-shaped view. Fields that are None are left out."""
        fields = {
            "attestation": self._attestation,
            "author": self._author,
            "contextId": self._context_id,
            "dataCid": self.data_cid,
            "dataFormat": self.data_format,
            "dataSize": self.data_size,
            "dateCreated": self.date_created,
            "dateModified": self.date_modified,
            "datePublished": self.date_published,
            "encryption": self._encryption,
            "interface": self.interface,
            "method": self.method,
            "parentId": self.parent_id,
            "protocol": self.protocol,
            "protocolPath": self.protocol_path,
            "published": self.published,
            "recipient": self.recipient,
            "recordId": self._id,
            "schema": self.schema,
            "target": self._target,
        }
        return {k: v for k, v in fields.items() if v is not None}

    def __repr__(self) -> str:
        return f"Record(id={self._id!r}, data_format={self.data_format!r})"
