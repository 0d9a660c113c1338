# endpoints/utils.py
from fastapi import Request
from fastapi.responses import JSONResponse, Response
from typing import Optional

from dtos import ActionResponse, SessionCookie
from services.auth_service import AuthService

# HTTP-статус для каждого вида ошибки слоя действий
STATUS_BY_KIND = {
    "validation": 400,
    "auth": 401,
    "not_found": 404,
    "conflict": 409,
    "store": 500,
}


def get_session_user_id(request: Request, auth_service: AuthService) -> Optional[int]:
    """
    Извлекает ID пользователя из cookie сессии. Нет cookie или токен
    недействителен - None (анонимный запрос).
    """
    return auth_service.resolve_user_id(request.cookies.get(auth_service.cookie_name))


def to_response(result: ActionResponse) -> JSONResponse:
    status_code = 200 if result.success else STATUS_BY_KIND.get(result.kind, 500)
    return JSONResponse(result.model_dump(mode="json"), status_code=status_code)


def apply_cookie(response: Response, cookie: SessionCookie) -> Response:
    response.set_cookie(
        cookie.key,
        cookie.value,
        max_age=cookie.max_age,
        httponly=cookie.httponly,
        samesite=cookie.samesite,
        secure=cookie.secure,
    )
    return response
