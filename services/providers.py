# services/providers.py
from dataclasses import dataclass
from typing import Callable, Dict, List, Literal, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI

from config import Settings
from dtos import ModelInfoDTO

ProviderName = Literal["openai", "deepseek"]
ModelName = Literal["gpt-4o", "gpt-4o-mini", "deepseek-chat", "deepseek-reasoner"]

DEFAULT_MODEL: ModelName = "deepseek-chat"


@dataclass(frozen=True)
class ModelBinding:
    id: ModelName
    provider: ProviderName
    display_name: str


MODELS: Dict[str, ModelBinding] = {
    "gpt-4o": ModelBinding("gpt-4o", "openai", "GPT-4o"),
    "gpt-4o-mini": ModelBinding("gpt-4o-mini", "openai", "GPT-4o Mini"),
    "deepseek-chat": ModelBinding("deepseek-chat", "deepseek", "DeepSeek Chat"),
    "deepseek-reasoner": ModelBinding("deepseek-reasoner", "deepseek", "DeepSeek Reasoner"),
}


def _openai(binding: ModelBinding, settings: Settings) -> BaseChatModel:
    return ChatOpenAI(
        model=binding.id,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        streaming=True,
    )


def _deepseek(binding: ModelBinding, settings: Settings) -> BaseChatModel:
    # DeepSeek совместим с OpenAI API, отличается только адрес и ключ
    return ChatOpenAI(
        model=binding.id,
        api_key=settings.deepseek_api_key,
        base_url=settings.deepseek_base_url,
        streaming=True,
    )


PROVIDERS: Dict[ProviderName, Callable[[ModelBinding, Settings], BaseChatModel]] = {
    "openai": _openai,
    "deepseek": _deepseek,
}


class ModelRegistry:
    """Статическая таблица моделей: имя -> провайдер -> клиент LangChain."""

    def __init__(self, settings: Settings):
        self.settings = settings
        default = settings.default_model
        self.default_model = default if default in MODELS else DEFAULT_MODEL

    def resolve(self, name: Optional[str]) -> ModelBinding:
        # Неизвестное имя молча заменяется моделью по умолчанию
        return MODELS.get(name or self.default_model, MODELS[self.default_model])

    def get_chat_model(self, name: Optional[str]) -> BaseChatModel:
        binding = self.resolve(name)
        return PROVIDERS[binding.provider](binding, self.settings)

    def catalogue(self) -> List[ModelInfoDTO]:
        return [
            ModelInfoDTO(id=b.id, name=b.display_name, provider=b.provider)
            for b in MODELS.values()
        ]
