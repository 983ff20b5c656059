"""Persistence of result images under the public uploads directory."""

from __future__ import annotations

import asyncio
import logging
import tempfile
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from imagelab.inference.results import ImagePayload

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


def content_type_for(filename: str) -> str:
    """Media type used when serving a stored file back to the browser."""

    return "image/png" if filename.endswith(".png") else "image/jpeg"


class UploadStorage:
    """Writes payloads to disk and resolves public filenames back to paths."""

    def __init__(self, root: Path) -> None:
        self._root = root

    def ensure_root(self) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        return self._root

    async def save(self, payload: ImagePayload) -> str:
        """Store *payload* under a unique name and return its public URL path."""

        self.ensure_root()
        filename = f"{uuid.uuid4().hex}.{payload.extension}"
        path = self._root / filename
        await asyncio.to_thread(path.write_bytes, payload.data)
        logger.info("Image saved to %s", path)
        return f"{PUBLIC_PREFIX}/{filename}"

    def resolve(self, filename: str) -> Path | None:
        """Return the stored file for *filename*, or ``None`` if it is not servable."""

        root = self._root.resolve()
        candidate = (root / filename).resolve()
        if candidate.parent != root or not candidate.is_file():
            return None
        return candidate


@asynccontextmanager
async def temporary_upload(data: bytes, original_name: str) -> AsyncIterator[Path]:
    """Write *data* to a temp file that is removed however the block exits."""

    safe_name = Path(original_name or "upload").name
    path = Path(tempfile.gettempdir()) / f"{uuid.uuid4().hex}-{safe_name}"
    logger.info("Saving temporary file to %s", path)
    await asyncio.to_thread(path.write_bytes, data)
    try:
        yield path
    finally:
        try:
            path.unlink()
            logger.info("Temporary file removed: %s", path)
        except OSError as exc:
            logger.error("Could not remove temporary file %s: %s", path, exc)
