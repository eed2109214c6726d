"""
web5-dwn: Decentralized Web Node client for Python.

Submit records and protocol messages to a DWN over HTTP or in-process,
and read record payloads as bytes, text or JSON.
"""

from web5_dwn.data import DataState, RecordData
from web5_dwn.errors import (
    DecodeError,
    MissingNodeError,
    ProtocolError,
    RecordNotFoundError,
    StreamExhaustedError,
    TransportError,
    Web5Error,
)
from web5_dwn.models.envelope import JsonRpcErrorCode
from web5_dwn.models.reply import DwnReply, DwnRequest, Status
from web5_dwn.protocols import ProtocolsAPI
from web5_dwn.record import Record
from web5_dwn.records import RecordsAPI, RecordsResult
from web5_dwn.stream import DataStream
from web5_dwn.transport.base import Transport
from web5_dwn.transport.http import HttpTransport
from web5_dwn.transport.loopback import LoopbackTransport

__version__ = "0.1.0"
__all__ = [
    "DataState",
    "DataStream",
    "DecodeError",
    "DwnReply",
    "DwnRequest",
    "HttpTransport",
    "JsonRpcErrorCode",
    "LoopbackTransport",
    "MissingNodeError",
    "ProtocolError",
    "ProtocolsAPI",
    "Record",
    "RecordData",
    "RecordNotFoundError",
    "RecordsAPI",
    "RecordsResult",
    "Status",
    "StreamExhaustedError",
    "Transport",
    "TransportError",
    "Web5Error",
]
