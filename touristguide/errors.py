# touristguide/errors.py
"""
Исключения клиента.

Сетевые ошибки сюда не входят: HTTP-клиент возвращает их как значения
(см. utils/responses.py). Исключения бросаются только до сетевого вызова.
"""


class TouristGuideError(Exception):
    """Базовое исключение клиента"""


class ValidationError(TouristGuideError):
    """Ввод отклонён на клиенте, запрос не отправлялся"""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class AccessDeniedError(TouristGuideError):
    """Действие доступно только администратору (или автору)"""
