"""Async wrapper around the Replicate HTTP API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Mapping

import httpx
from httpx_sse import SSEError, aconnect_sse

from imagelab.config.settings import Settings
from imagelab.exceptions import InferenceError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset({"succeeded", "failed", "canceled"})


class ReplicateClient:
    """Runs hosted models and returns their raw, shape-agnostic output."""

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.replicate_base_url.rstrip("/"),
            timeout=settings.request_timeout,
            headers={"Authorization": f"Bearer {settings.replicate_api_token}"},
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self._settings.replicate_api_token)

    async def close(self) -> None:
        """Close the underlying HTTP client."""

        await self._client.aclose()

    async def _request_json(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        if not self.configured:
            raise InferenceError("REPLICATE_API_TOKEN no está configurado.", status_code=401)
        try:
            response = await self._client.request(method, endpoint, json=json_body, headers=headers)
            response.raise_for_status()
            if not response.content:
                return {}
            return response.json()
        except httpx.TimeoutException as exc:  # pragma: no cover - network safeguard
            raise InferenceError("Tiempo de espera agotado al contactar con Replicate.") from exc
        except httpx.HTTPStatusError as exc:
            raise InferenceError(
                f"Replicate devolvió el error {exc.response.status_code}: {exc.response.text}",
                status_code=exc.response.status_code,
            ) from exc

    async def _create_prediction(
        self,
        model_ref: str,
        inputs: Mapping[str, Any],
        *,
        stream: bool = False,
    ) -> dict[str, Any]:
        model, _, version = model_ref.partition(":")
        body: dict[str, Any] = {"input": dict(inputs)}
        if stream:
            body["stream"] = True
        if version:
            body["version"] = version
            endpoint = "/predictions"
        else:
            endpoint = f"/models/{model}/predictions"
        headers = None if stream else {"Prefer": "wait"}
        prediction = await self._request_json("POST", endpoint, json_body=body, headers=headers)
        logger.info("Prediction %s created for %s (%s)", prediction.get("id"), model, prediction.get("status"))
        return prediction

    async def _wait_for(self, prediction: dict[str, Any]) -> dict[str, Any]:
        while prediction.get("status") not in TERMINAL_STATUSES:
            await asyncio.sleep(self._settings.poll_interval)
            urls = prediction.get("urls") or {}
            endpoint = urls.get("get") or f"/predictions/{prediction['id']}"
            prediction = await self._request_json("GET", endpoint)
        return prediction

    async def run(self, model_ref: str, inputs: Mapping[str, Any]) -> Any:
        """Run *model_ref* to completion and return its ``output`` untouched."""

        prediction = await self._wait_for(await self._create_prediction(model_ref, inputs))
        status = prediction.get("status")
        if status != "succeeded":
            raise InferenceError(f"La predicción terminó con estado {status}: {prediction.get('error')}")
        output = prediction.get("output")
        logger.info("Prediction %s succeeded with output type %s", prediction.get("id"), type(output).__name__)
        return output

    async def stream_text(self, model_ref: str, inputs: Mapping[str, Any]) -> AsyncIterator[str]:
        """Yield text tokens produced by a streaming language model."""

        prediction = await self._create_prediction(model_ref, inputs, stream=True)
        stream_url = (prediction.get("urls") or {}).get("stream")
        if not stream_url:
            raise InferenceError(f"El modelo {model_ref} no admite streaming.")

        async with aconnect_sse(self._client, "GET", stream_url) as event_source:
            response = event_source.response
            if response.status_code >= 400:
                body = await response.aread()
                raise InferenceError(
                    f"Replicate devolvió el error {response.status_code}: {body.decode(errors='replace')}",
                    status_code=response.status_code,
                )
            try:
                async for sse in event_source.aiter_sse():
                    if sse.event == "output":
                        yield sse.data
                    elif sse.event == "error":
                        raise InferenceError(sse.data)
                    elif sse.event == "done":
                        break
            except SSEError as exc:
                raise InferenceError(f"Respuesta de streaming inválida: {exc}") from exc

    async def ping(self) -> bool:
        """Return ``True`` when the account endpoint answers."""

        account = await self._request_json("GET", "/account")
        return bool(account)
