# services/completion_service.py
import logging
from typing import Any, AsyncIterator, List, Optional, Tuple

from langchain_core.language_models.chat_models import BaseChatModel

from dtos import MessageCreateDTO, MessageRoleStr, StreamRequestDTO
from services.chat_service import ChatService
from services.providers import ModelRegistry

logger = logging.getLogger(__name__)


def chunk_text(chunk: Any) -> str:
    """Текст из AIMessageChunk; content бывает строкой или списком блоков."""
    content = getattr(chunk, "content", chunk)
    if isinstance(content, str):
        return content
    parts = []
    for block in content or []:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class CompletionService:
    """
    Прокси стриминга: пересылает историю сообщений модели и отдаёт
    фрагменты ответа по мере поступления. После завершения ответ
    сохраняется в чат, если указан chat_id.
    """

    def __init__(self, chat_service: ChatService, model_registry: ModelRegistry):
        self.chat_service = chat_service
        self.model_registry = model_registry

    async def start_stream(self, payload: StreamRequestDTO, user_id: Optional[int]) -> AsyncIterator[str]:
        """
        Открывает поток у провайдера и дожидается первого фрагмента.
        Ошибка до первого фрагмента пробрасывается вызывающему (ответ 500).
        """
        llm = self.model_registry.get_chat_model(payload.model)
        history = [(m.role, m.content) for m in payload.messages]
        relay = self._relay(llm, history, payload.chat_id, user_id)
        try:
            first = await relay.__anext__()
        except StopAsyncIteration:
            first = None
        return self._prepend(first, relay)

    @staticmethod
    async def _prepend(first: Optional[str], rest: AsyncIterator[str]) -> AsyncIterator[str]:
        if first is not None:
            yield first
        async for chunk in rest:
            yield chunk

    async def _relay(
        self,
        llm: BaseChatModel,
        history: List[Tuple[str, str]],
        chat_id: Optional[int],
        user_id: Optional[int],
    ) -> AsyncIterator[str]:
        parts: List[str] = []
        try:
            async for chunk in llm.astream(history):
                text = chunk_text(chunk)
                if not text:
                    continue
                parts.append(text)
                yield text
        except Exception:
            if not parts:
                raise
            # Клиент уже получил часть ответа, статус изменить нельзя
            logger.exception("LLM stream failed after %d chunks", len(parts))
            return

        final_text = "".join(parts)
        if chat_id and final_text:
            await self._persist_reply(chat_id, final_text, user_id)

    async def _persist_reply(self, chat_id: int, text: str, user_id: Optional[int]) -> None:
        result = await self.chat_service.save_message(
            user_id,
            MessageCreateDTO(role=MessageRoleStr.ASSISTANT, content=text),
            chat_id,
        )
        if not result.success:
            logger.warning("Assistant reply for chat %s not saved: %s", chat_id, result.error)
