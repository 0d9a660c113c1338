# endpoints/api_auth.py
from fastapi import APIRouter, Depends, Request
from dependency_injector.wiring import inject, Provide

from containers import Container
from dtos import ActionResponse, LoginDTO, ProfileUpdateDTO, RegisterDTO
from services.auth_service import AuthService
from .utils import apply_cookie, get_session_user_id, to_response

router = APIRouter(prefix="/api/auth")


@router.post("/register")
@inject
async def register(
    payload: RegisterDTO,
    auth: AuthService = Depends(Provide[Container.auth_service])
):
    return to_response(await auth.register(payload))

@router.post("/login")
@inject
async def login(
    payload: LoginDTO,
    auth: AuthService = Depends(Provide[Container.auth_service])
):
    result = await auth.login(payload)
    if not result.success:
        return to_response(result)
    response = to_response(ActionResponse.ok(result.data.user))
    return apply_cookie(response, result.data.cookie)

@router.post("/logout")
@inject
async def logout(
    auth: AuthService = Depends(Provide[Container.auth_service])
):
    result = await auth.logout()
    response = to_response(ActionResponse.ok())
    if result.success:
        apply_cookie(response, result.data)
    return response

@router.get("/me")
@inject
async def me(
    request: Request,
    auth: AuthService = Depends(Provide[Container.auth_service])
):
    return to_response(await auth.current_user(request.cookies.get(auth.cookie_name)))

@router.put("/profile")
@inject
async def update_profile(
    request: Request,
    payload: ProfileUpdateDTO,
    auth: AuthService = Depends(Provide[Container.auth_service])
):
    user_id = get_session_user_id(request, auth)
    return to_response(await auth.update_profile(user_id, payload))
