"""Check that the configured Replicate token can reach the API.

Exits with status 1 when any check fails so it can gate deployments.
"""

from __future__ import annotations

import asyncio
import sys

from imagelab.config.settings import get_settings
from imagelab.integrations import IntegrationCheckResult, run_all_checks


def describe(result: IntegrationCheckResult) -> str:
    mark = "OK" if result.success else "FAIL"
    return f"[{mark}] {result.name}: {result.message}"


def main() -> int:
    if not get_settings().replicate_api_token:
        print("REPLICATE_API_TOKEN is not set; nothing to check.", file=sys.stderr)
        return 1

    results = asyncio.run(run_all_checks())
    for result in results:
        print(describe(result))
    return 0 if all(result.success for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())
