import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

from config import Settings
from containers import container
from db import init_db
from dtos import LoginDTO, RegisterDTO


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret="test-secret-for-session-tokens-0123456789",
        bcrypt_rounds=4,
        environment="test",
        openai_api_key="sk-test",
        deepseek_api_key="sk-test",
    )


@pytest.fixture
async def app_container(settings):
    container.settings.override(providers.Object(settings))
    container.reset_singletons()
    engine = container.engine()
    await init_db(engine)
    yield container
    await engine.dispose()
    container.settings.reset_override()
    container.reset_singletons()


@pytest.fixture
def auth_service(app_container):
    return app_container.auth_service()


@pytest.fixture
def chat_service(app_container):
    return app_container.chat_service()


@pytest.fixture
def session_factory(app_container):
    return app_container.session_factory()


@pytest.fixture
def make_user(auth_service):
    """Регистрирует пользователя и возвращает (user_id, token)."""
    async def _make_user(email="ann@example.com", password="secret1", name="Ann"):
        registered = await auth_service.register(RegisterDTO(email=email, password=password, name=name))
        assert registered.success, registered.error
        logged_in = await auth_service.login(LoginDTO(email=email, password=password))
        assert logged_in.success, logged_in.error
        return registered.data.id, logged_in.data.cookie.value

    return _make_user


@pytest.fixture
async def client(app_container):
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
