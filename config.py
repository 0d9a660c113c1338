# config.py
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Настройки приложения. Любое поле можно переопределить через
    переменные окружения (CHAT_ префикс) или файл .env.
    """
    model_config = SettingsConfigDict(env_prefix="CHAT_", env_file=".env", extra="ignore")

    app_name: str = "LLM Chat"
    environment: str = "development"
    log_level: str = "INFO"

    database_url: str = "sqlite+aiosqlite:///./chat_app.db"

    # Сессия (JWT в cookie)
    jwt_secret: str = "change-me-to-a-long-random-secret-value"
    jwt_algorithm: str = "HS256"
    session_ttl_days: int = 7
    cookie_name: str = "token"
    bcrypt_rounds: int = 12

    # Провайдеры моделей
    default_model: str = "deepseek-chat"
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    deepseek_api_key: Optional[str] = None
    deepseek_base_url: str = "https://api.deepseek.com/v1"

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def session_max_age(self) -> int:
        return self.session_ttl_days * 24 * 60 * 60
