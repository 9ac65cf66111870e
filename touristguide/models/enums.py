# touristguide/models/enums.py
from enum import Enum


class UserRole(str, Enum):
    """Роли пользователей"""
    USER = "user"
    ADMIN = "admin"


class ModerationState(str, Enum):
    """Состояние места в очереди модерации"""
    PENDING = "pending"
    APPROVED = "approved"
    DELETED = "deleted"
