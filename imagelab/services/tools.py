"""Image tools: restoration, stickers, text-to-image and instruction edits."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from imagelab.exceptions import InferenceError
from imagelab.imgproc.preprocess import (
    RESTORE_POLICY,
    STICKER_POLICY,
    TRANSFORM_POLICY,
    EncodePolicy,
    reencode,
    resize_and_encode,
    to_data_uri,
)
from imagelab.inference import models
from imagelab.inference.client import ReplicateClient
from imagelab.inference.fetcher import HttpFetcher
from imagelab.inference.results import normalize
from imagelab.storage.uploads import UploadStorage, temporary_upload

logger = logging.getLogger(__name__)


class ImageToolService:
    """Coordinates preprocessing, model calls and result delivery for every tool."""

    def __init__(self, client: ReplicateClient, fetcher: HttpFetcher, storage: UploadStorage) -> None:
        self._client = client
        self._fetcher = fetcher
        self._storage = storage

    async def _prepare(self, upload: bytes, policy: EncodePolicy) -> tuple[bytes, str]:
        resized = await asyncio.to_thread(resize_and_encode, upload, policy)
        data_uri = to_data_uri(resized, policy.media_type)
        logger.info("Upload resized to %s (%d bytes, data URI length %d)", policy.fmt, len(resized), len(data_uri))
        return resized, data_uri

    async def restore(self, upload: bytes) -> str:
        """Restore faces with GFPGAN and return the public path of the saved result."""

        _, data_uri = await self._prepare(upload, RESTORE_POLICY)
        output = await self._client.run(models.GFPGAN.ref, models.GFPGAN.build_input(img=data_uri))
        payload = await normalize(output, self._fetcher)
        return await self._storage.save(payload)

    async def face_to_sticker(self, upload: bytes) -> str:
        """Turn a portrait into a sticker and return it as a data URI."""

        _, data_uri = await self._prepare(upload, STICKER_POLICY)
        output = await self._client.run(models.FACE_TO_STICKER.ref, models.FACE_TO_STICKER.build_input(image=data_uri))
        payload = await normalize(output, self._fetcher)
        return payload.to_data_uri()

    async def generate(self, prompt: str) -> str:
        """Generate an image from *prompt* and return it as a data URI."""

        output = await self._client.run(models.SDXL_LIGHTNING.ref, models.SDXL_LIGHTNING.build_input(prompt=prompt))
        payload = await normalize(output, self._fetcher)
        return payload.to_data_uri()

    async def transform(self, upload: bytes, filename: str, prompt: str) -> str:
        """Edit an image following *prompt*; the result is delivered as WebP."""

        resized, data_uri = await self._prepare(upload, TRANSFORM_POLICY)
        async with temporary_upload(resized, filename):
            output = await self._client.run(
                models.INSTRUCT_PIX2PIX.ref,
                models.INSTRUCT_PIX2PIX.build_input(image=data_uri, prompt=prompt),
            )
            payload = await normalize(
                output,
                self._fetcher,
                media_type=TRANSFORM_POLICY.media_type,
                transform=reencode(TRANSFORM_POLICY.fmt, TRANSFORM_POLICY.quality),
            )
        return payload.to_data_uri()

    async def codeformer(self, image: str, **options: Any) -> str:
        """Run CodeFormer on an image URL or data URI and return the result URL."""

        output = await self._client.run(models.CODEFORMER.ref, models.CODEFORMER.build_input(image=image, **options))
        if isinstance(output, str):
            return output
        raise InferenceError("Unexpected output format from Replicate API")
