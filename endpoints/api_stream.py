# endpoints/api_stream.py
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse, StreamingResponse
from dependency_injector.wiring import inject, Provide

from containers import Container
from dtos import ModelInfoDTO, StreamRequestDTO
from services.auth_service import AuthService
from services.completion_service import CompletionService
from services.providers import ModelRegistry
from .utils import get_session_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/chat")
@inject
async def chat_stream(
    request: Request,
    payload: StreamRequestDTO,
    auth: AuthService = Depends(Provide[Container.auth_service]),
    completion: CompletionService = Depends(Provide[Container.completion_service])
):
    """
    Стриминг ответа модели. Сессия здесь не проверяется, она нужна
    только чтобы сохранить готовый ответ в чат.
    """
    user_id = get_session_user_id(request, auth)
    try:
        stream = await completion.start_stream(payload, user_id)
    except Exception:
        logger.exception("Chat API error")
        return PlainTextResponse("Internal Server Error", status_code=500)

    return StreamingResponse(stream, media_type="text/plain; charset=utf-8")

@router.get("/models", response_model=list[ModelInfoDTO])
@inject
async def list_models(
    registry: ModelRegistry = Depends(Provide[Container.model_registry])
):
    return registry.catalogue()
