# touristguide/models/__init__.py
from .base import BaseSchema, parse_list
from .enums import UserRole, ModerationState
from .category import Category
from .user import User, AuthData
from .place import Place, PlacePermissions, PlaceView, parse_places
from .review import Review, LikeState

__all__ = [
    'BaseSchema',
    'parse_list',
    'UserRole',
    'ModerationState',
    'Category',
    'User',
    'AuthData',
    'Place',
    'PlacePermissions',
    'PlaceView',
    'parse_places',
    'Review',
    'LikeState'
]
