# touristguide/controllers/base.py
import logging
from typing import Callable, Dict, List, Optional

from ..errors import AccessDeniedError
from ..notifications import NotificationService
from ..utils.session import SessionStore

logger = logging.getLogger(__name__)

RemovalListener = Callable[[str], None]


class Controller:
    """
    Общая основа экранных контроллеров.

    Один логический поток на экран. Для каждого участка состояния ведётся
    счётчик запросов: применяется только ответ на последний выданный запрос.
    После close() любые завершившиеся запросы отбрасываются.
    """

    def __init__(self, gateway, session: SessionStore, notifier: Optional[NotificationService] = None):
        self.gateway = gateway
        self.session = session
        self.notifier = notifier or NotificationService()
        self._sequences: Dict[str, int] = {}
        self._closed = False
        self._removal_listeners: List[RemovalListener] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def _next_request(self, key: str) -> int:
        self._sequences[key] = self._sequences.get(key, 0) + 1
        return self._sequences[key]

    def _is_current(self, key: str, seq: int) -> bool:
        if self._closed:
            logger.debug(f"{type(self).__name__}: ответ '{key}' отброшен, экран закрыт")
            return False
        if self._sequences.get(key) != seq:
            logger.debug(f"{type(self).__name__}: устаревший ответ '{key}' #{seq} отброшен")
            return False
        return True

    def _require_admin(self) -> None:
        if not self.session.is_admin():
            raise AccessDeniedError("Admin access required")

    def add_removal_listener(self, listener: RemovalListener) -> None:
        """Подписка на удаление места (чтобы убрать его из других экранов)"""
        self._removal_listeners.append(listener)

    def _notify_removed(self, place_id: str) -> None:
        for listener in self._removal_listeners:
            listener(place_id)

    def close(self) -> None:
        """Экран закрыт: незавершённые ответы больше не применяются"""
        self._closed = True
