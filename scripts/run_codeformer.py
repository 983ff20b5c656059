"""Run CodeFormer once against a sample image and print the result URL."""

from __future__ import annotations

import argparse
import asyncio
from pathlib import Path

from imagelab.config.settings import get_settings
from imagelab.inference.client import ReplicateClient
from imagelab.inference.fetcher import HttpFetcher
from imagelab.monitoring.logging import configure_logging
from imagelab.services.tools import ImageToolService
from imagelab.storage.uploads import UploadStorage

SAMPLE_IMAGE = "https://replicate.delivery/mgxm/7534e8f1-ee01-4d66-ae40-36343e5eb44a/003.png"


async def _run(image: str, fidelity: float) -> str:
    settings = get_settings()
    client = ReplicateClient(settings)
    fetcher = HttpFetcher(timeout=settings.request_timeout)
    tools = ImageToolService(client, fetcher, UploadStorage(Path(settings.uploads_dir)))
    try:
        return await tools.codeformer(image, codeformer_fidelity=fidelity)
    finally:
        await fetcher.close()
        await client.close()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("image", nargs="?", default=SAMPLE_IMAGE, help="image URL or data URI")
    parser.add_argument("--fidelity", type=float, default=0.1)
    args = parser.parse_args()

    configure_logging()
    result = asyncio.run(_run(args.image, args.fidelity))
    print(f"CodeFormer result: {result}")


if __name__ == "__main__":
    main()
