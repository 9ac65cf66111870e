# touristguide/models/user.py
from datetime import datetime
from typing import List, Optional
from pydantic import Field
from .base import BaseSchema, id_field
from .enums import UserRole


class User(BaseSchema):
    """Пользователь (автор места или отзыва)"""
    id: str = id_field()
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.USER
    liked_places: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class AuthData(BaseSchema):
    """Поле `data` ответа /auth/login и /auth/register"""
    id: str = id_field()
    name: str
    email: str
    role: UserRole = UserRole.USER
    token: str = Field(..., min_length=1)
