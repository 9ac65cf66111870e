# touristguide/models/category.py
from typing import Optional
from .base import BaseSchema, id_field


class Category(BaseSchema):
    """Категория мест (справочник, управляется сервером)"""
    id: str = id_field()
    name: str = ""
    icon: Optional[str] = None
    description: Optional[str] = None
    is_active: bool = True
