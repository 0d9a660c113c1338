# models.py
import enum
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Enum, Text
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    # SQLite хранит наивные даты, поэтому держим всё в UTC без tzinfo
    return datetime.now(timezone.utc).replace(tzinfo=None)


class MessageRole(enum.Enum):
    USER = "user"
    ASSISTANT = "assistant"

class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(String(128), nullable=False)
    name = Column(String(150), nullable=True)

    chats = relationship("Chat", back_populates="user", passive_deletes=True, lazy="raise")

class Chat(Base):
    __tablename__ = "chats"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    model = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    user = relationship("User", back_populates="chats", lazy="raise")
    # Сообщения читаются через MessageRepository, ленивой загрузки нет
    messages = relationship(
        "Message",
        back_populates="chat",
        passive_deletes=True,
        lazy="raise",
        order_by=lambda: [Message.created_at, Message.id],
    )

class Message(Base):
    __tablename__ = "messages"
    id = Column(Integer, primary_key=True, index=True)
    role = Column(
        Enum(MessageRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    chat_id = Column(Integer, ForeignKey("chats.id", ondelete="CASCADE"), nullable=False, index=True)

    chat = relationship("Chat", back_populates="messages", lazy="raise")
