"""fbtransport - Async transport over the Firebase Realtime Database."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("fbtransport")
except PackageNotFoundError:
    __version__ = "0+local"
from fbtransport._codec import decode, encode
from fbtransport.config import TransportConfig
from fbtransport.exceptions import (
    InvalidArgumentError,
    StoreError,
    TransportConfigError,
    TransportError,
)
from fbtransport.models import ChildEvent, ChildSnapshot, JsonValue, Record, Scope
from fbtransport.subscription import Subscription
from fbtransport.transport import PathTransport

__all__ = [
    "__version__",
    "ChildEvent",
    "ChildSnapshot",
    "InvalidArgumentError",
    "JsonValue",
    "PathTransport",
    "Record",
    "Scope",
    "StoreError",
    "Subscription",
    "TransportConfig",
    "TransportConfigError",
    "TransportError",
    "decode",
    "encode",
]
