"""Tests for the HTTP form handlers."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import pytest_mock
from fastapi.testclient import TestClient

from imagelab.api.main import create_app
from imagelab.api.routes import get_chat_bot, get_tools
from imagelab.config.settings import get_settings
from imagelab.inference.client import ReplicateClient
from imagelab.inference.fetcher import HttpFetcher
from imagelab.exceptions import (
    ChatTimeoutError,
    ConfigurationError,
    EmptyReplyError,
    FetchFailedError,
    InferenceError,
)
from tests.helpers import make_image_bytes


@pytest.fixture(autouse=True)
def _setup_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("REPLICATE_API_TOKEN", "test-token")
    monkeypatch.setenv("UPLOADS_DIR", str(tmp_path / "uploads"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def tools(mocker: pytest_mock.MockerFixture):
    fake = mocker.Mock()
    fake.restore = mocker.AsyncMock(return_value="/uploads/abc.png")
    fake.face_to_sticker = mocker.AsyncMock(return_value="data:image/png;base64,AAA")
    fake.generate = mocker.AsyncMock(return_value="data:image/png;base64,BBB")
    fake.transform = mocker.AsyncMock(return_value="data:image/webp;base64,CCC")
    return fake


@pytest.fixture
def bot(mocker: pytest_mock.MockerFixture):
    fake = mocker.Mock()
    fake.reply = mocker.AsyncMock(return_value="¡Hola!")
    return fake


@pytest.fixture
def client(tools, bot):
    app = create_app()
    app.dependency_overrides[get_tools] = lambda: tools
    app.dependency_overrides[get_chat_bot] = lambda: bot
    with TestClient(app) as test_client:
        yield test_client


def _image_file() -> dict:
    return {"image": ("selfie.png", make_image_bytes(), "image/png")}


def test_health_returns_ok(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_restore_returns_public_path(client: TestClient, tools) -> None:
    response = client.post("/restore", files=_image_file())

    assert response.status_code == 200
    assert response.json() == {"outputImage": "/uploads/abc.png"}
    tools.restore.assert_awaited_once()


@pytest.mark.parametrize("path", ["/restore", "/face-to-sticker", "/transform-image"])
def test_missing_image_is_rejected(client: TestClient, path: str) -> None:
    response = client.post(path, data={"prompt": "x"})

    assert response.status_code == 400
    assert response.json() == {"error": "No se proporcionó ninguna imagen."}


def test_processing_error_is_reported(client: TestClient, tools) -> None:
    tools.face_to_sticker.side_effect = FetchFailedError(404, "Not Found")

    response = client.post("/face-to-sticker", files=_image_file())

    assert response.status_code == 500
    assert response.json()["error"].startswith("Error al procesar la imagen: ")
    assert "404 Not Found" in response.json()["error"]


def test_generate_requires_prompt(client: TestClient, tools) -> None:
    missing = client.post("/generate", data={"prompt": ""})
    ok = client.post("/generate", data={"prompt": "a red fox"})

    assert missing.status_code == 400
    assert missing.json() == {"error": "No se proporcionó ningún prompt."}
    assert ok.json() == {"outputImage": "data:image/png;base64,BBB"}
    tools.generate.assert_awaited_once_with("a red fox")


def test_transform_passes_filename_and_prompt(client: TestClient, tools) -> None:
    no_prompt = client.post("/transform-image", files=_image_file())
    response = client.post("/transform-image", files=_image_file(), data={"prompt": "add snow"})

    assert no_prompt.status_code == 400
    assert response.json() == {"outputImage": "data:image/webp;base64,CCC"}
    _, filename, prompt = tools.transform.await_args.args
    assert filename == "selfie.png" and prompt == "add snow"


def test_chat_welcome_and_reply(client: TestClient, bot) -> None:
    history = json.dumps([{"role": "bot", "content": "¡Bienvenido!"}])

    welcome = client.get("/chat-bot")
    response = client.post("/chat-bot", data={"message": "hola", "history": history})

    assert "initialMessage" in welcome.json()
    assert response.json() == {"response": "¡Hola!"}
    message, turns = bot.reply.await_args.args
    assert message == "hola" and turns[0].role == "bot"


def test_chat_requires_message_and_valid_history(client: TestClient) -> None:
    assert client.post("/chat-bot", data={"message": ""}).status_code == 400
    assert client.post("/chat-bot", data={"message": "hola", "history": "{oops"}).status_code == 400


@pytest.mark.parametrize(
    ("error", "status_code", "message"),
    [
        (ChatTimeoutError("slow"), 504, "El bot está tardando demasiado en responder. Por favor, inténtalo de nuevo."),
        (EmptyReplyError("blank"), 500, "El bot devolvió una respuesta vacía. Por favor, inténtalo de nuevo."),
        (ConfigurationError("Token de API no configurado"), 500, "Token de API no configurado"),
        (InferenceError("bad token", status_code=401), 401, "Token de API inválido"),
        (RuntimeError("boom"), 500, "Ocurrió un error inesperado. Por favor, inténtalo de nuevo más tarde."),
    ],
)
def test_chat_error_mapping(client: TestClient, bot, error: Exception, status_code: int, message: str) -> None:
    bot.reply.side_effect = error

    response = client.post("/chat-bot", data={"message": "hola"})

    assert response.status_code == status_code
    assert response.json() == {"error": message}


def test_chat_rejected_model_version_maps_to_422(client: TestClient, bot) -> None:
    bot.reply.side_effect = InferenceError("bad version", status_code=422)

    response = client.post("/chat-bot", data={"message": "hola"})

    assert response.status_code == 422
    assert response.json()["error"].startswith("Versión del modelo o error de permiso inválido.")


def test_uploads_are_served_with_content_type(client: TestClient, tmp_path: Path) -> None:
    (tmp_path / "uploads" / "result.png").write_bytes(b"\x89PNG")

    found = client.get("/uploads/result.png")
    missing = client.get("/uploads/nothing.png")

    assert found.status_code == 200
    assert found.headers["content-type"] == "image/png"
    assert found.content == b"\x89PNG"
    assert missing.status_code == 404
    assert missing.json() == {"error": "Archivo no encontrado"}


def test_lifespan_closes_http_clients(mocker: pytest_mock.MockerFixture) -> None:
    client_close = mocker.spy(ReplicateClient, "close")
    fetcher_close = mocker.spy(HttpFetcher, "close")

    with TestClient(create_app()) as test_client:
        assert test_client.get("/health").status_code == 200
        assert client_close.call_count == 0

    assert client_close.call_count == 1
    assert fetcher_close.call_count == 1
