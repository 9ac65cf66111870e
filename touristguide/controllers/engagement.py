# touristguide/controllers/engagement.py
import asyncio
import logging
from typing import List, Optional

from pydantic import ValidationError as SchemaError

from ..errors import AccessDeniedError
from ..models import LikeState, PlaceView, Review, parse_list
from ..notifications import NotificationService
from ..utils.responses import Ok, describe
from ..utils.session import SessionStore
from ..utils.validation import validate_comment, validate_rating
from .base import Controller

logger = logging.getLogger(__name__)


class PlaceEngagementController(Controller):
    """Экран места: детали, лайк, отзывы"""

    def __init__(
        self,
        gateway,
        session: SessionStore,
        place_id: str,
        notifier: Optional[NotificationService] = None,
    ):
        super().__init__(gateway, session, notifier)
        self.place_id = place_id
        self.place: Optional[PlaceView] = None
        self.reviews: List[Review] = []
        self.is_liked = False
        self.likes_count = 0

    async def load(self) -> None:
        """Детали места, отзывы и статус лайка"""
        await asyncio.gather(self.load_place(), self.load_reviews(), self.load_like_status())

    async def load_place(self) -> bool:
        seq = self._next_request("place")
        outcome = await self.gateway.get_place(self.place_id)
        if not self._is_current("place", seq):
            return False
        if isinstance(outcome, Ok) and isinstance(outcome.data, dict):
            try:
                self.place = PlaceView.from_payload(outcome.data)
            except SchemaError as e:
                logger.error(f"Некорректные данные места {self.place_id}: {e}")
                self.notifier.toast("Failed to load place details")
                return False
            self.likes_count = self.place.place.likes_count
            return True
        self.notifier.toast(describe(outcome, "Failed to load place details"))
        return False

    async def load_reviews(self) -> bool:
        seq = self._next_request("reviews")
        outcome = await self.gateway.get_reviews(self.place_id)
        if not self._is_current("reviews", seq):
            return False
        if isinstance(outcome, Ok):
            data = outcome.data if isinstance(outcome.data, list) else []
            self.reviews = parse_list(Review, data, logger)
            return True
        logger.warning(f"Не удалось загрузить отзывы места {self.place_id}: {outcome}")
        return False

    async def load_like_status(self) -> bool:
        seq = self._next_request("like")
        outcome = await self.gateway.get_like_status(self.place_id)
        if not self._is_current("like", seq):
            return False
        if isinstance(outcome, Ok) and isinstance(outcome.data, dict):
            self.is_liked = LikeState.model_validate(outcome.data).is_liked
            return True
        logger.warning(f"Не удалось загрузить статус лайка {self.place_id}: {outcome}")
        return False

    async def toggle_like(self) -> Optional[LikeState]:
        """Переключить лайк. Ответ сервера заменяет локальное состояние целиком."""
        seq = self._next_request("like")
        outcome = await self.gateway.toggle_like(self.place_id)
        if not self._is_current("like", seq):
            return None
        if not isinstance(outcome, Ok) or not isinstance(outcome.data, dict):
            self.notifier.toast(describe(outcome, "Failed to update like"))
            return None
        try:
            state = LikeState.model_validate(outcome.data)
        except SchemaError as e:
            logger.error(f"Некорректный ответ на лайк {self.place_id}: {e}")
            self.notifier.toast("Failed to update like")
            return None
        self.is_liked = state.is_liked
        self.likes_count = state.likes_count
        self.notifier.toast(outcome.message or "Success")
        return state

    def can_modify_review(self, review: Review) -> bool:
        """Редактировать и удалять отзыв может только автор"""
        user_id = self.session.get_user_id()
        return bool(user_id) and review.user.id == user_id

    def _check_author(self, review_id: str) -> None:
        review = next((r for r in self.reviews if r.id == review_id), None)
        # Неизвестный отзыв - решает сервер
        if review is not None and not self.can_modify_review(review):
            raise AccessDeniedError("Only the author can modify this review")

    async def _reload(self) -> None:
        # Средний рейтинг и число отзывов пересчитывает сервер
        await asyncio.gather(self.load_reviews(), self.load_place())

    async def add_review(self, rating: int, comment: str) -> bool:
        rating = validate_rating(rating)
        comment = validate_comment(comment)

        outcome = await self.gateway.add_review(self.place_id, rating, comment)
        if self.closed:
            return False
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to add review"))
            return False

        self.notifier.toast("Review added successfully")
        await self._reload()
        return True

    async def update_review(self, review_id: str, rating: int, comment: str) -> bool:
        rating = validate_rating(rating)
        comment = validate_comment(comment)
        self._check_author(review_id)

        outcome = await self.gateway.update_review(review_id, rating, comment)
        if self.closed:
            return False
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to update review"))
            return False

        self.notifier.toast("Review updated")
        await self._reload()
        return True

    async def delete_review(self, review_id: str) -> bool:
        self._check_author(review_id)

        outcome = await self.gateway.delete_review(review_id)
        if self.closed:
            return False
        if not isinstance(outcome, Ok):
            self.notifier.toast(describe(outcome, "Failed to delete review"))
            return False

        self.notifier.toast("Review deleted")
        await self._reload()
        return True
