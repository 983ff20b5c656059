"""Form handlers for the image tools, the chat bot and stored uploads."""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse
from pydantic import TypeAdapter, ValidationError

from imagelab.chat.bot import WELCOME_MESSAGE, ChatBot, ChatMessage
from imagelab.exceptions import ChatTimeoutError, ConfigurationError, EmptyReplyError, InferenceError
from imagelab.services.tools import ImageToolService
from imagelab.storage.uploads import UploadStorage, content_type_for

logger = logging.getLogger(__name__)

router = APIRouter()

_history_adapter = TypeAdapter(list[ChatMessage])

MISSING_IMAGE = "No se proporcionó ninguna imagen."
MISSING_PROMPT = "No se proporcionó ningún prompt."


def get_tools(request: Request) -> ImageToolService:
    return request.app.state.tools


def get_chat_bot(request: Request) -> ChatBot:
    return request.app.state.chat_bot


def get_storage(request: Request) -> UploadStorage:
    return request.app.state.storage


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _has_file(upload: UploadFile | None) -> bool:
    return upload is not None and bool(upload.filename)


@router.post("/restore", tags=["tools"])
async def restore_image(
    image: UploadFile | None = File(default=None),
    tools: ImageToolService = Depends(get_tools),
):
    """Restore faces in an uploaded photo; the result is stored under /uploads."""

    if not _has_file(image):
        return _error(MISSING_IMAGE, status.HTTP_400_BAD_REQUEST)
    logger.info("Image received: %s", image.filename)
    try:
        output = await tools.restore(await image.read())
    except Exception as exc:
        logger.exception("Error while processing the image")
        return _error(f"Error al procesar la imagen: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"outputImage": output}


@router.post("/face-to-sticker", tags=["tools"])
async def face_to_sticker(
    image: UploadFile | None = File(default=None),
    tools: ImageToolService = Depends(get_tools),
):
    """Turn an uploaded portrait into a sticker returned inline."""

    if not _has_file(image):
        return _error(MISSING_IMAGE, status.HTTP_400_BAD_REQUEST)
    logger.info("Image received: %s", image.filename)
    try:
        output = await tools.face_to_sticker(await image.read())
    except Exception as exc:
        logger.exception("Error while processing the image")
        return _error(f"Error al procesar la imagen: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"outputImage": output}


@router.post("/generate", tags=["tools"])
async def generate_image(
    prompt: str | None = Form(default=None),
    tools: ImageToolService = Depends(get_tools),
):
    """Generate an image from a text prompt."""

    if not prompt:
        return _error(MISSING_PROMPT, status.HTTP_400_BAD_REQUEST)
    logger.info("Prompt received: %s", prompt)
    try:
        output = await tools.generate(prompt)
    except Exception as exc:
        logger.exception("Error while processing the prompt")
        return _error(f"Error al procesar el prompt: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"outputImage": output}


@router.post("/transform-image", tags=["tools"])
async def transform_image(
    image: UploadFile | None = File(default=None),
    prompt: str | None = Form(default=None),
    tools: ImageToolService = Depends(get_tools),
):
    """Edit an uploaded image following a text instruction."""

    if not _has_file(image):
        return _error(MISSING_IMAGE, status.HTTP_400_BAD_REQUEST)
    if not prompt:
        return _error(MISSING_PROMPT, status.HTTP_400_BAD_REQUEST)
    logger.info("Image received: %s, prompt: %s", image.filename, prompt)
    try:
        output = await tools.transform(await image.read(), image.filename, prompt)
    except Exception as exc:
        logger.exception("Error while processing the image")
        return _error(f"Error al procesar la imagen: {exc}", status.HTTP_500_INTERNAL_SERVER_ERROR)
    return {"outputImage": output}


@router.get("/chat-bot", tags=["chat"])
async def chat_welcome() -> dict[str, str]:
    return {"initialMessage": WELCOME_MESSAGE}


@router.post("/chat-bot", tags=["chat"])
async def chat_reply(
    message: str | None = Form(default=None),
    history: str = Form(default="[]"),
    bot: ChatBot = Depends(get_chat_bot),
):
    """Answer a chat message, keeping the submitted conversation history as context."""

    if not message:
        return _error("El mensaje es obligatorio", status.HTTP_400_BAD_REQUEST)
    try:
        turns = _history_adapter.validate_json(history)
    except ValidationError:
        return _error("El historial de la conversación no es válido.", status.HTTP_400_BAD_REQUEST)

    try:
        response = await bot.reply(message, turns)
    except ChatTimeoutError:
        return _error(
            "El bot está tardando demasiado en responder. Por favor, inténtalo de nuevo.",
            status.HTTP_504_GATEWAY_TIMEOUT,
        )
    except EmptyReplyError:
        return _error(
            "El bot devolvió una respuesta vacía. Por favor, inténtalo de nuevo.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except ConfigurationError as exc:
        logger.error("Chat bot is not configured: %s", exc)
        return _error(str(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    except InferenceError as exc:
        logger.exception("Error while generating the bot reply")
        if exc.status_code == 422:
            return _error(
                "Versión del modelo o error de permiso inválido. "
                "Por favor, verifica tu token de API y la versión del modelo.",
                422,
            )
        if exc.status_code == status.HTTP_401_UNAUTHORIZED:
            return _error("Token de API inválido", status.HTTP_401_UNAUTHORIZED)
        return _error(
            "Ocurrió un error inesperado. Por favor, inténtalo de nuevo más tarde.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    except Exception:
        logger.exception("Error while generating the bot reply")
        return _error(
            "Ocurrió un error inesperado. Por favor, inténtalo de nuevo más tarde.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    return {"response": response}


@router.get("/uploads/{filename}", tags=["uploads"])
async def serve_upload(filename: str, storage: UploadStorage = Depends(get_storage)):
    """Serve a stored result image."""

    path = storage.resolve(filename)
    if path is None:
        return _error("Archivo no encontrado", status.HTTP_404_NOT_FOUND)
    return FileResponse(path, media_type=content_type_for(filename))
