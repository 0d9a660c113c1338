# containers.py
from dependency_injector import containers, providers
from config import Settings
from db import make_engine, make_session_factory
from services.auth_service import AuthService
from services.chat_service import ChatService
from services.completion_service import CompletionService
from services.providers import ModelRegistry


class Container(containers.DeclarativeContainer):
    """
    Контейнер зависимостей приложения.
    """

    # --- Провайдеры ---

    # 1. Настройки (в тестах подменяются через override)
    settings = providers.Singleton(Settings)

    # 2. База данных
    # Один движок на процесс; сессия открывается на каждое действие
    # внутри сервиса через session_factory.
    engine = providers.Singleton(make_engine, database_url=settings.provided.database_url)

    session_factory = providers.Singleton(make_session_factory, engine=engine)

    # 3. Сервисы
    # Factory создает новый экземпляр при каждом запросе.
    auth_service: providers.Factory[AuthService] = providers.Factory(
        AuthService,
        session_factory=session_factory,
        settings=settings,
    )

    chat_service: providers.Factory[ChatService] = providers.Factory(
        ChatService,
        session_factory=session_factory,
    )

    model_registry: providers.Singleton[ModelRegistry] = providers.Singleton(
        ModelRegistry,
        settings=settings,
    )

    completion_service: providers.Factory[CompletionService] = providers.Factory(
        CompletionService,
        chat_service=chat_service,
        model_registry=model_registry,
    )

# Создаем единственный экземпляр контейнера для всего приложения
container = Container()
