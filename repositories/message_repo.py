from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from models import Chat, Message, MessageRole, utcnow
from typing import Iterable, List, Tuple


class MessageRepository:
    """
    Репозиторий для управления сообщениями в базе данных.
    Любая запись сообщения обновляет updated_at у чата.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add_message(self, chat: Chat, role: MessageRole, content: str) -> Message:
        """Сохраняет новое сообщение и сдвигает время обновления чата."""
        message = Message(chat_id=chat.id, role=role, content=content)
        self.session.add(message)
        chat.updated_at = utcnow()
        await self.session.commit()
        await self.session.refresh(message)
        return message

    async def add_messages(self, chat: Chat, items: Iterable[Tuple[MessageRole, str]]) -> List[Message]:
        """
        Пакетная вставка в одной транзакции: либо сохраняются все сообщения
        вместе с новым updated_at, либо ничего.
        """
        messages = []
        try:
            for role, content in items:
                message = Message(chat_id=chat.id, role=role, content=content)
                self.session.add(message)
                await self.session.flush()
                messages.append(message)
            chat.updated_at = utcnow()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise
        return messages

    async def get_messages_for_chat(self, chat_id: int) -> List[Message]:
        # Порядок переписки: по времени создания, при равенстве по id
        stmt = (
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list((await self.session.scalars(stmt)).all())
