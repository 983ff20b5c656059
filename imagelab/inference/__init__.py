"""Hosted inference client and result normalisation."""

from .client import ReplicateClient
from .fetcher import FetchResponse, HttpFetcher
from .results import (
    ByteStream,
    ImagePayload,
    StreamResult,
    Unrecognized,
    UrlResult,
    classify,
    normalize,
)

__all__ = [
    "ByteStream",
    "FetchResponse",
    "HttpFetcher",
    "ImagePayload",
    "ReplicateClient",
    "StreamResult",
    "Unrecognized",
    "UrlResult",
    "classify",
    "normalize",
]
