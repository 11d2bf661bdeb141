from fastapi import APIRouter, Depends

from docshare.deps import get_auth_service
from docshare.models import User
from docshare.schemas_auth import AuthResponse, MeResponse, UserCreate, UserLogin, UserResponse
from docshare.security import get_current_user
from docshare.services.auth import AuthService

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(user_data: UserCreate, auth: AuthService = Depends(get_auth_service)):
    """Регистрация нового пользователя"""
    user, token = auth.register(user_data.email, user_data.password, user_data.full_name)
    return AuthResponse(
        message="User registered successfully",
        user=UserResponse.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
async def login(credentials: UserLogin, auth: AuthService = Depends(get_auth_service)):
    """Авторизация пользователя"""
    user, token = auth.login(credentials.email, credentials.password)
    return AuthResponse(
        message="Login successful",
        user=UserResponse.model_validate(user),
        token=token,
    )


@router.get("/me", response_model=MeResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Информация о текущем пользователе"""
    return MeResponse(user=UserResponse.model_validate(current_user))
