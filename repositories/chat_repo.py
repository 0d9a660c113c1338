# repositories/chat_repo.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from models import Chat, utcnow
from typing import List, Optional

class ChatRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_chat(self, user_id: int, title: str, model: str) -> Chat:
        chat = Chat(user_id=user_id, title=title, model=model)
        self.session.add(chat)
        await self.session.commit()
        await self.session.refresh(chat)
        return chat

    async def list_chats_for_user(self, user_id: int) -> List[Chat]:
        q = await self.session.execute(
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(Chat.created_at.desc(), Chat.id.desc())
        )
        return list(q.scalars().all())

    async def get_chat(self, chat_id: int) -> Optional[Chat]:
        q = await self.session.execute(select(Chat).where(Chat.id == chat_id))
        return q.scalars().first()

    async def get_owned_chat(self, chat_id: int, user_id: int) -> Optional[Chat]:
        """Чат по id, только если он принадлежит user_id."""
        q = await self.session.execute(
            select(Chat).where(Chat.id == chat_id, Chat.user_id == user_id)
        )
        return q.scalars().first()

    async def update_chat(self, chat_id: int, title: str, model: Optional[str] = None) -> Optional[Chat]:
        chat = await self.get_chat(chat_id)
        if chat is None:
            return None
        chat.title = title
        if model is not None:
            chat.model = model
        chat.updated_at = utcnow()
        await self.session.commit()
        await self.session.refresh(chat)
        return chat

    async def delete_chat(self, chat_id: int) -> bool:
        result = await self.session.execute(delete(Chat).where(Chat.id == chat_id))
        await self.session.commit()
        return result.rowcount > 0
