"""Normalisation of inference outputs into deliverable image payloads.

Hosted models answer in several shapes: a URL string, a list whose first
element is a URL or a byte stream, an object carrying ``image_url`` or a
byte stream on its own. :func:`classify` reduces any of them to one of the
variants below and :func:`normalize` materialises the image bytes.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import AsyncIterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Callable, Union

from imagelab.exceptions import EmptyPayloadError, StreamConsumedError, UnrecognizedShapeError
from imagelab.imgproc import preprocess
from imagelab.inference.fetcher import HttpFetcher

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/png"

_EXTENSIONS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/webp": "webp",
    "image/gif": "gif",
}


class ByteStream:
    """Single-pass wrapper around a chunked byte source.

    The source may be an async iterable, a plain iterator or a file-like
    object exposing ``read``. It can be drained exactly once.
    """

    def __init__(self, source: Any) -> None:
        self._source = source
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    async def read_all(self) -> bytes:
        """Drain every chunk in order and return them as one buffer."""

        if self._consumed:
            raise StreamConsumedError("Byte stream has already been consumed.")
        self._consumed = True

        source = self._source
        if hasattr(source, "read"):
            data = source.read()
            if inspect.isawaitable(data):
                data = await data
            return _chunk_bytes(data) if data is not None else b""

        chunks: list[bytes] = []
        if isinstance(source, AsyncIterable):
            async for chunk in source:
                chunks.append(_chunk_bytes(chunk))
        else:
            for chunk in source:
                chunks.append(_chunk_bytes(chunk))
        return b"".join(chunks)


def _chunk_bytes(chunk: Any) -> bytes:
    """Convert one stream chunk to bytes; iterating a ``bytes`` object yields ints."""

    if isinstance(chunk, (bytes, bytearray, memoryview)):
        return bytes(chunk)
    if isinstance(chunk, int) and not isinstance(chunk, bool) and 0 <= chunk <= 255:
        return bytes([chunk])
    if isinstance(chunk, Sequence) and not isinstance(chunk, str):
        try:
            return bytes(chunk)
        except (TypeError, ValueError) as exc:
            logger.error("Stream chunk sequence is not made of byte values")
            raise UnrecognizedShapeError() from exc
    logger.error("Stream chunk of type %s is not bytes-like", type(chunk).__name__)
    raise UnrecognizedShapeError()


def is_stream(value: Any) -> bool:
    """Return ``True`` when *value* can be drained as a byte stream."""

    if isinstance(value, (str, bytes, bytearray, Mapping)):
        return False
    if isinstance(value, (ByteStream, AsyncIterable, Iterator)):
        return True
    return callable(getattr(value, "read", None))


@dataclass(frozen=True, slots=True)
class UrlResult:
    url: str


@dataclass(frozen=True, slots=True)
class StreamResult:
    stream: ByteStream


@dataclass(frozen=True, slots=True)
class Unrecognized:
    raw: Any


InferenceResult = Union[UrlResult, StreamResult, Unrecognized]


@dataclass(frozen=True, slots=True)
class ImagePayload:
    """Image bytes together with the media type they are delivered as."""

    data: bytes
    media_type: str = DEFAULT_MEDIA_TYPE

    def __post_init__(self) -> None:
        if not self.data:
            raise EmptyPayloadError("Image payload cannot be empty.")

    @property
    def extension(self) -> str:
        return _EXTENSIONS.get(self.media_type, self.media_type.rsplit("/", 1)[-1])

    def to_data_uri(self) -> str:
        return preprocess.to_data_uri(self.data, self.media_type)


def _as_stream(value: Any) -> ByteStream:
    return value if isinstance(value, ByteStream) else ByteStream(value)


def classify(output: Any) -> InferenceResult:
    """Map a raw model output onto a result variant; the first match wins."""

    if isinstance(output, str):
        return UrlResult(output)

    if isinstance(output, Sequence) and not isinstance(output, (bytes, bytearray)):
        if not output:
            return Unrecognized(output)
        first = output[0]
        if isinstance(first, str):
            return UrlResult(first)
        if is_stream(first):
            return StreamResult(_as_stream(first))
        return Unrecognized(output)

    if isinstance(output, Mapping) and "image_url" in output:
        image_url = output["image_url"]
        if isinstance(image_url, str):
            return UrlResult(image_url)
        return Unrecognized(output)

    if is_stream(output):
        return StreamResult(_as_stream(output))

    return Unrecognized(output)


async def normalize(
    output: Any,
    fetcher: HttpFetcher,
    *,
    media_type: str = DEFAULT_MEDIA_TYPE,
    transform: Callable[[bytes], bytes] | None = None,
) -> ImagePayload:
    """Turn any supported model output into an :class:`ImagePayload`.

    URL variants trigger exactly one download through *fetcher*; stream
    variants are drained. The optional *transform* runs on the materialised
    bytes (for example a re-encode to WebP) and *media_type* declares the
    resulting format, since the remote content type is never inspected.
    """

    result = classify(output)
    if isinstance(result, UrlResult):
        logger.info("Fetching result image from %s", result.url)
        response = await fetcher.fetch(result.url)
        logger.info("Fetch answered %s %s", response.status_code, response.reason)
        response.raise_for_status()
        data = response.content
    elif isinstance(result, StreamResult):
        logger.info("Draining result byte stream")
        data = await result.stream.read_all()
    else:
        logger.error("Unknown output structure: %r", result.raw)
        raise UnrecognizedShapeError()

    if not data:
        logger.error("Result image resolved to zero bytes")
        raise UnrecognizedShapeError()

    if transform is not None:
        data = await asyncio.to_thread(transform, data)

    logger.info("Result image materialised: %d bytes as %s", len(data), media_type)
    return ImagePayload(data=data, media_type=media_type)
