from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Generic, List, Literal, Optional, TypeVar
from datetime import datetime
from enum import Enum

T = TypeVar("T")

TITLE_MAX_LENGTH = 50


class MessageRoleStr(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def derive_chat_title(text: str) -> str:
    """Заголовок чата из текста сообщения: первые 50 символов и '...'."""
    if len(text) > TITLE_MAX_LENGTH:
        return text[:TITLE_MAX_LENGTH] + "..."
    return text

# ======================
# Input DTOs
# ======================

class RegisterDTO(BaseModel):
    email: str = ""
    password: str = ""
    name: Optional[str] = None

class LoginDTO(BaseModel):
    email: str = ""
    password: str = ""

class ProfileUpdateDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    current_password: Optional[str] = Field(None, alias="currentPassword")
    new_password: Optional[str] = Field(None, alias="newPassword")

class ChatCreateDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    user_id: int = Field(..., alias="userId")
    title: str = Field(..., max_length=255)
    model: str = Field(..., min_length=1, max_length=100)

class ChatUpdateDTO(BaseModel):
    # Заголовок можно передать напрямую или получить из текста сообщения
    model_config = ConfigDict(protected_namespaces=())

    title: Optional[str] = Field(None, max_length=255)
    message: Optional[str] = None
    model: Optional[str] = Field(None, min_length=1, max_length=100)

class MessageCreateDTO(BaseModel):
    role: MessageRoleStr = MessageRoleStr.USER
    content: str

class MessageBatchDTO(BaseModel):
    messages: List[MessageCreateDTO]

class StreamMessageDTO(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str

class StreamRequestDTO(BaseModel):
    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    messages: List[StreamMessageDTO]
    chat_id: Optional[int] = Field(None, alias="chatId")
    model: Optional[str] = None

# ======================
# Output DTOs
# ======================

class UserDTO(BaseModel):
    id: int
    email: str
    name: Optional[str] = None

    model_config = {"from_attributes": True}

class MessageDTO(BaseModel):
    id: int
    role: MessageRoleStr
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("role", mode="before")
    @classmethod
    def _unwrap_role(cls, v):
        # ORM отдаёт models.MessageRole, DTO хранит строковый вариант
        return getattr(v, "value", v)

class ChatSummaryDTO(BaseModel):
    id: int
    title: str
    model: str

    model_config = {"from_attributes": True, "protected_namespaces": ()}

class ChatDTO(ChatSummaryDTO):
    created_at: datetime
    updated_at: datetime
    messages: List[MessageDTO] = []

class ModelInfoDTO(BaseModel):
    id: str
    name: str
    provider: str

class SessionCookie(BaseModel):
    """Инструкция для HTTP-слоя: какую cookie выставить или стереть."""
    key: str
    value: str
    max_age: int
    httponly: bool = True
    samesite: Literal["lax", "strict", "none"] = "lax"
    secure: bool = False

class LoginResult(BaseModel):
    user: UserDTO
    cookie: SessionCookie

class ActionResponse(BaseModel, Generic[T]):
    """Единый ответ слоя действий: либо data, либо текст ошибки."""
    success: bool
    data: Optional[T] = None
    error: Optional[str] = None
    kind: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResponse":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, kind: str, error: str) -> "ActionResponse":
        return cls(success=False, error=error, kind=kind)
