# endpoints/api_chats.py
from fastapi import APIRouter, Depends, Request
from dependency_injector.wiring import inject, Provide

from containers import Container
from dtos import ChatCreateDTO, ChatUpdateDTO, MessageBatchDTO, MessageCreateDTO
from services.auth_service import AuthService
from services.chat_service import ChatService
from .utils import get_session_user_id, to_response

router = APIRouter(prefix="/api/chats")


@router.get("")
@inject
async def list_chats(
    request: Request,
    auth: AuthService = Depends(Provide[Container.auth_service]),
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    user_id = get_session_user_id(request, auth)
    return to_response(await chats.list_chats(user_id))

@router.post("")
@inject
async def create_chat(
    payload: ChatCreateDTO,
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    return to_response(await chats.create_chat(payload))

@router.get("/{chat_id}")
@inject
async def get_chat(
    request: Request,
    chat_id: int,
    auth: AuthService = Depends(Provide[Container.auth_service]),
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    user_id = get_session_user_id(request, auth)
    return to_response(await chats.get_chat(user_id, chat_id))

@router.put("/{chat_id}")
@inject
async def update_chat(
    chat_id: int,
    payload: ChatUpdateDTO,
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    return to_response(await chats.update_chat(chat_id, payload))

@router.delete("/{chat_id}")
@inject
async def delete_chat(
    chat_id: int,
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    return to_response(await chats.delete_chat(chat_id))

@router.post("/{chat_id}/messages")
@inject
async def save_message(
    request: Request,
    chat_id: int,
    payload: MessageCreateDTO,
    auth: AuthService = Depends(Provide[Container.auth_service]),
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    user_id = get_session_user_id(request, auth)
    return to_response(await chats.save_message(user_id, payload, chat_id))

@router.post("/{chat_id}/messages/batch")
@inject
async def save_messages(
    request: Request,
    chat_id: int,
    payload: MessageBatchDTO,
    auth: AuthService = Depends(Provide[Container.auth_service]),
    chats: ChatService = Depends(Provide[Container.chat_service])
):
    user_id = get_session_user_id(request, auth)
    return to_response(await chats.save_messages(user_id, payload, chat_id))
