# touristguide/controllers/moderation.py
"""
Модерация мест (только администратор).

Состояния места: pending -> approved, pending -> deleted. Обратных переходов
нет. После любой мутации очередь перезапрашивается с сервера: локальное
состояние не считается истиной.
"""

import logging
from typing import Dict, List, Optional

from ..models import ModerationState, PlaceView, parse_places
from ..notifications import NotificationService
from ..utils.responses import HardFail, Ok, SoftFail, TransportError, describe, is_success_biased
from ..utils.session import SessionStore
from .base import Controller

logger = logging.getLogger(__name__)

TERMINAL_STATES = (ModerationState.APPROVED, ModerationState.DELETED)


class ModerationController(Controller):
    """Очередь мест на модерацию: approve / delete"""

    def __init__(self, gateway, session: SessionStore, notifier: Optional[NotificationService] = None):
        super().__init__(gateway, session, notifier)
        self.pending: List[PlaceView] = []
        self.states: Dict[str, ModerationState] = {}

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    def state_of(self, place_id: str) -> Optional[ModerationState]:
        return self.states.get(place_id)

    async def list_pending(self) -> List[PlaceView]:
        """Получить очередь на модерацию"""
        self._require_admin()
        seq = self._next_request("pending")
        outcome = await self.gateway.get_pending_places()
        if not self._is_current("pending", seq):
            return self.pending

        if isinstance(outcome, Ok):
            data = outcome.data if isinstance(outcome.data, list) else []
            self.pending = [view for view in parse_places(data) if not view.place.is_approved]
            for view in self.pending:
                # Сервер вернул место в очереди: прежний локальный статус неверен
                self.states[view.id] = ModerationState.PENDING
            logger.info(f"🟡 На модерации: {len(self.pending)} мест")
        elif isinstance(outcome, SoftFail):
            # Голая строка вместо списка: показываем пустую очередь
            logger.warning(f"Очередь модерации: неожиданный ответ ({outcome.reason}): {outcome.message}")
            self.pending = []
            self.notifier.toast(f"{outcome.message} ({outcome.status})")
        else:
            self.notifier.toast(describe(outcome, "Failed to load pending places"))
        return self.pending

    def _check_transition(self, place_id: str, target: ModerationState) -> bool:
        current = self.states.get(place_id)
        if current in TERMINAL_STATES:
            logger.warning(f"Место {place_id} уже в состоянии {current.value}, переход в {target.value} невозможен")
            self.notifier.toast(f"Place is already {current.value}")
            return False
        return True

    async def approve(self, place_id: str) -> bool:
        """Одобрить место. HTTP 2xx важнее двусмысленного тела ответа."""
        self._require_admin()
        if not self._check_transition(place_id, ModerationState.APPROVED):
            return False

        outcome = await self.gateway.approve_place(place_id)
        if self.closed:
            return False

        approved = is_success_biased(outcome)
        if approved:
            self.states[place_id] = ModerationState.APPROVED
            self.pending = [view for view in self.pending if view.id != place_id]
            logger.info(f"✅ Место {place_id} одобрено")
            self.notifier.toast("Place approved successfully")
        elif isinstance(outcome, (HardFail, TransportError)):
            logger.warning(f"❌ Ошибка одобрения места {place_id}: {outcome}")
            self.notifier.toast(describe(outcome, "Failed to approve place"))
        else:
            logger.warning(f"❌ Одобрение места {place_id} не подтверждено: {outcome}")
            self.notifier.toast(f"Approve failed: {outcome.message}")

        # Истина на сервере - перечитываем очередь в любом случае
        await self.list_pending()
        return approved

    async def delete(self, place_id: str) -> bool:
        """Отклонить (удалить) место"""
        self._require_admin()
        if not self._check_transition(place_id, ModerationState.DELETED):
            return False

        outcome = await self.gateway.delete_place(place_id)
        if self.closed:
            return False

        if not isinstance(outcome, Ok):
            logger.warning(f"❌ Ошибка удаления места {place_id}: {outcome}")
            self.notifier.toast(describe(outcome, "Failed to delete place"))
            return False

        self.states[place_id] = ModerationState.DELETED
        self.forget(place_id)
        self._notify_removed(place_id)
        logger.info(f"🗑 Место {place_id} удалено")
        self.notifier.toast("Place deleted successfully")
        return True

    def forget(self, place_id: str) -> None:
        self.pending = [view for view in self.pending if view.id != place_id]
