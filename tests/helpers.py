"""Fakes and builders shared by several test modules."""

from __future__ import annotations

from io import BytesIO

from PIL import Image

from imagelab.inference.fetcher import FetchResponse


class FakeFetcher:
    """Records requested URLs and answers every fetch with a canned response."""

    def __init__(self, response: FetchResponse | None = None) -> None:
        self.response = response or FetchResponse(status_code=200, content=b"remote-image", reason="OK")
        self.requested: list[str] = []

    async def fetch(self, url: str) -> FetchResponse:
        self.requested.append(url)
        return self.response

    async def close(self) -> None:
        return None


def make_image_bytes(size: tuple[int, int] = (64, 32), fmt: str = "PNG", mode: str = "RGBA") -> bytes:
    color = (200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)
    buffer = BytesIO()
    Image.new(mode, size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()
