"""
Pydantic модели для auth endpoint'ов.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Any, Optional


class RegisterRequest(BaseModel):
    """
    Схема для регистрации пользователя.

    Что клиент отправляет при регистрации:
    POST /auth/register
    {
        "name": "bob",
        "password": "secret1",
        "email": "bob@example.com"
    }
    """
    name: str = Field(..., min_length=3, max_length=50, description="Имя пользователя")
    password: str = Field(..., min_length=6, description="Пароль (минимум 6 символов)")
    email: EmailStr = Field(..., description="Email пользователя")


class LoginRequest(BaseModel):
    """Схема для входа пользователя"""
    name: str = Field(..., min_length=1, description="Имя пользователя")
    password: str = Field(..., min_length=1, description="Пароль")


class AccountData(BaseModel):
    """
    Данные аккаунта после регистрации.

    ⚠️ ВАЖНО: НЕ возвращаем пароль, соль и хеш!
    """
    user_id: int
    username: str
    email: str

    model_config = ConfigDict(from_attributes=True)  # Позволяет создавать из SQLAlchemy объекта Account


class LoginData(BaseModel):
    user_id: int
    username: str

    model_config = ConfigDict(from_attributes=True)


class Envelope(BaseModel):
    """
    Общий конверт ответа:
    {"code": 200, "message": "...", "data": {...}}
    """
    code: int
    message: str
    data: Optional[Any] = None


class RegisterResponse(Envelope):
    data: AccountData


class LoginResponse(Envelope):
    data: LoginData
