# touristguide/controllers/__init__.py
from .base import Controller
from .auth import AuthController
from .feed import PlaceFeedController
from .moderation import ModerationController
from .engagement import PlaceEngagementController
from .places import PlaceDraft, PlaceEditor, MyPlacesController, LikedPlacesController

__all__ = [
    'Controller',
    'AuthController',
    'PlaceFeedController',
    'ModerationController',
    'PlaceEngagementController',
    'PlaceDraft',
    'PlaceEditor',
    'MyPlacesController',
    'LikedPlacesController'
]
