# touristguide/utils/validation.py
"""
Проверки ввода до сетевого вызова.

Каждая функция либо возвращает очищенное значение, либо бросает
ValidationError с именем поля.
"""

import re
from typing import Optional

from ..errors import ValidationError

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
MIN_PASSWORD_LENGTH = 6
MIN_RATING = 1
MAX_RATING = 5


def require_text(field: str, value: Optional[str], message: Optional[str] = None) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(field, message or f"Please enter {field.replace('_', ' ')}")
    return cleaned


def validate_email(email: Optional[str]) -> str:
    cleaned = require_text("email", email, "Please enter email")
    if not EMAIL_RE.match(cleaned):
        raise ValidationError("email", "Please enter a valid email")
    return cleaned


def validate_password(password: Optional[str], check_length: bool = True) -> str:
    # Пароль не обрезаем: пробелы могут быть частью пароля
    if not password:
        raise ValidationError("password", "Please enter password")
    if check_length and len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return password


def validate_password_match(password: str, confirm_password: Optional[str]) -> None:
    if password != confirm_password:
        raise ValidationError("confirm_password", "Passwords do not match")


def validate_rating(rating: Optional[int]) -> int:
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("rating", "Please provide rating and comment")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError("rating", f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def validate_comment(comment: Optional[str]) -> str:
    return require_text("comment", comment, "Please provide rating and comment")


def validate_category(category_id: Optional[str]) -> str:
    return require_text("category", category_id, "Please select a category")
