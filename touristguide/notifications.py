# touristguide/notifications.py
import logging
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

Sink = Callable[[str], None]


class NotificationService:
    """Короткие уведомления пользователю (toast). UI подключает свой sink."""

    def __init__(self, sink: Optional[Sink] = None):
        self.sink = sink
        self.history: List[str] = []

    def toast(self, message: str) -> None:
        """Показать уведомление"""
        self.history.append(message)
        logger.info(f"🔔 {message}")
        if self.sink is None:
            return
        try:
            self.sink(message)
        except Exception as e:
            # Сломанный UI не должен ронять контроллер
            logger.error(f"Ошибка отправки уведомления: {e}")

    @property
    def last(self) -> Optional[str]:
        return self.history[-1] if self.history else None
