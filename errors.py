# errors.py
import functools
import logging
from typing import Any, Awaitable, Callable

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from dtos import ActionResponse

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """Ошибка слоя действий; текст сообщения уходит клиенту как есть."""
    kind = "store"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(ActionError):
    kind = "validation"

class ConflictError(ActionError):
    kind = "conflict"

class AuthError(ActionError):
    kind = "auth"

class NotFoundError(ActionError):
    kind = "not_found"

class StoreError(ActionError):
    kind = "store"


def translate_store_error(exc: SQLAlchemyError) -> ActionError:
    """Переводит ошибку ORM/драйвера в понятное пользователю сообщение."""
    if isinstance(exc, IntegrityError):
        text = str(exc.orig).lower()
        if "unique" in text or "duplicate" in text:
            return ConflictError("Record already exists")
        if "foreign key" in text:
            return StoreError("Foreign key constraint failed")
    return StoreError("Database error")


def action(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[ActionResponse]]:
    """
    Оборачивает метод сервиса: результат или любая ошибка превращаются
    в ActionResponse, наружу ничего не пробрасывается.
    """
    @functools.wraps(func)
    async def wrapper(*args, **kwargs) -> ActionResponse:
        try:
            data = await func(*args, **kwargs)
        except ActionError as e:
            return ActionResponse.fail(e.kind, e.message)
        except SQLAlchemyError as e:
            logger.warning("Store error in %s: %s", func.__qualname__, e)
            translated = translate_store_error(e)
            return ActionResponse.fail(translated.kind, translated.message)
        except Exception:
            logger.exception("Unexpected error in %s", func.__qualname__)
            return ActionResponse.fail(StoreError.kind, "Unexpected error")
        return ActionResponse.ok(data)

    return wrapper
