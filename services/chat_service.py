# services/chat_service.py
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dtos import (
    ChatCreateDTO, ChatDTO, ChatSummaryDTO, ChatUpdateDTO, MessageBatchDTO,
    MessageCreateDTO, MessageDTO, derive_chat_title,
)
from errors import AuthError, NotFoundError, ValidationError, action
from models import MessageRole
from repositories.chat_repo import ChatRepository
from repositories.message_repo import MessageRepository

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Not authenticated"
# Чужой и несуществующий чат неразличимы для клиента
CHAT_NOT_ACCESSIBLE = "Chat not found or access denied"


def _require_user(user_id: Optional[int]) -> int:
    if user_id is None:
        raise AuthError(NOT_AUTHENTICATED)
    return user_id


class ChatService:
    """
    Действия над чатами и сообщениями. Каждый метод открывает свою
    сессию БД и возвращает ActionResponse.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @action
    async def list_chats(self, user_id: Optional[int]) -> List[ChatSummaryDTO]:
        user_id = _require_user(user_id)
        async with self.session_factory() as session:
            chats = await ChatRepository(session).list_chats_for_user(user_id)
        return [ChatSummaryDTO.model_validate(c) for c in chats]

    @action
    async def get_chat(self, user_id: Optional[int], chat_id: int) -> ChatDTO:
        user_id = _require_user(user_id)
        async with self.session_factory() as session:
            chat = await ChatRepository(session).get_owned_chat(chat_id, user_id)
            if chat is None:
                raise NotFoundError("Chat not found")
            messages = await MessageRepository(session).get_messages_for_chat(chat.id)
        return ChatDTO(
            id=chat.id,
            title=chat.title,
            model=chat.model,
            created_at=chat.created_at,
            updated_at=chat.updated_at,
            messages=[MessageDTO.model_validate(m) for m in messages],
        )

    @action
    async def create_chat(self, payload: ChatCreateDTO) -> ChatSummaryDTO:
        # user_id приходит от вызывающего кода и здесь не сверяется с сессией
        async with self.session_factory() as session:
            chat = await ChatRepository(session).create_chat(
                user_id=payload.user_id, title=payload.title, model=payload.model
            )
        return ChatSummaryDTO.model_validate(chat)

    @action
    async def update_chat(self, chat_id: int, payload: ChatUpdateDTO) -> ChatSummaryDTO:
        # NOTE: обновление не ограничено владельцем чата, см. DESIGN.md
        if payload.title is not None:
            title = payload.title
        else:
            title = derive_chat_title(payload.message or "")
        if not title.strip():
            raise ValidationError("Title is required")

        async with self.session_factory() as session:
            chat = await ChatRepository(session).update_chat(chat_id, title, payload.model)
        if chat is None:
            raise NotFoundError("Record not found")
        return ChatSummaryDTO.model_validate(chat)

    @action
    async def delete_chat(self, chat_id: int) -> None:
        # NOTE: удаление без проверки сессии и владельца, см. DESIGN.md
        async with self.session_factory() as session:
            deleted = await ChatRepository(session).delete_chat(chat_id)
        if not deleted:
            raise NotFoundError("Record not found")
        logger.info("Deleted chat %s", chat_id)

    @action
    async def save_message(
        self, user_id: Optional[int], payload: MessageCreateDTO, chat_id: int
    ) -> MessageDTO:
        user_id = _require_user(user_id)
        async with self.session_factory() as session:
            chat = await ChatRepository(session).get_owned_chat(chat_id, user_id)
            if chat is None:
                raise NotFoundError(CHAT_NOT_ACCESSIBLE)
            message = await MessageRepository(session).add_message(
                chat, MessageRole(payload.role.value), payload.content
            )
        return MessageDTO.model_validate(message)

    @action
    async def save_messages(
        self, user_id: Optional[int], payload: MessageBatchDTO, chat_id: int
    ) -> List[MessageDTO]:
        user_id = _require_user(user_id)
        async with self.session_factory() as session:
            chat = await ChatRepository(session).get_owned_chat(chat_id, user_id)
            if chat is None:
                raise NotFoundError(CHAT_NOT_ACCESSIBLE)
            messages = await MessageRepository(session).add_messages(
                chat, [(MessageRole(m.role.value), m.content) for m in payload.messages]
            )
        return [MessageDTO.model_validate(m) for m in messages]
