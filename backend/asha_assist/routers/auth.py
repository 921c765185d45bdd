from fastapi import APIRouter, Depends

from asha_assist.schemas.auth import LoginRequest, RegisterRequest, TokenResponse
from asha_assist.services.auth_service import AuthService, get_auth_service

router = APIRouter()


@router.post("/register", status_code=201)
async def register(body: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)):
    """New accounts always get the field-worker role."""
    await auth_service.register(
        username=body.username,
        password=body.password,
        full_name=body.full_name,
    )
    return {"message": "User registered successfully!"}


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, auth_service: AuthService = Depends(get_auth_service)):
    token = await auth_service.login(body.username, body.password)
    return TokenResponse(access_token=token)
