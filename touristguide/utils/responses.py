# touristguide/utils/responses.py
"""
Нормализация ответов бэкенда.

Бэкенд отвечает непоследовательно: конверт {success, message, data},
голая строка, пустое тело. Любой исход HTTP-вызова сводится к одному из
четырёх значений: Ok, SoftFail, HardFail, TransportError.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

GENERIC_SOFT_FAIL = "Server returned an unexpected response"

# Причины SoftFail
EMPTY = "empty"
NOT_JSON = "not_json"
UNEXPECTED_SHAPE = "unexpected_shape"
NEGATIVE = "negative"

NEGATIVE_KEYWORD = "error"
POSITIVE_KEYWORDS = ("success", "approved")


@dataclass(frozen=True)
class Ok:
    payload: Dict[str, Any]
    status: int = 200

    @property
    def data(self) -> Any:
        return self.payload.get("data")

    @property
    def message(self) -> Optional[str]:
        return self.payload.get("message")


@dataclass(frozen=True)
class SoftFail:
    message: str
    status: int = 200
    body: Optional[str] = None
    reason: str = NOT_JSON


@dataclass(frozen=True)
class HardFail:
    code: int
    message: str


@dataclass(frozen=True)
class TransportError:
    cause: str


Outcome = Union[Ok, SoftFail, HardFail, TransportError]


def is_success_status(status: int) -> bool:
    return 200 <= status < 300


def _message_from(data: Dict[str, Any]) -> Optional[str]:
    for key in ("message", "detail", "error"):
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError):
        return None


def normalize(status: Optional[int], body: Optional[str]) -> Outcome:
    """Классифицирует сырой HTTP-ответ. Никогда не бросает исключений."""
    if status is None:
        return TransportError(cause="No response from server")

    text = (body or "").strip()

    if not is_success_status(status):
        parsed = _parse_json(text) if text else None
        message = None
        if isinstance(parsed, dict):
            message = _message_from(parsed)
        elif isinstance(parsed, str) and parsed.strip():
            message = parsed.strip()
        if message is None:
            message = text[:200] if text else f"HTTP {status}"
        return HardFail(code=status, message=message)

    if not text:
        return SoftFail(message=GENERIC_SOFT_FAIL, status=status, body=body, reason=EMPTY)

    parsed = _parse_json(text)
    if isinstance(parsed, dict):
        if "success" not in parsed:
            return SoftFail(
                message=_message_from(parsed) or GENERIC_SOFT_FAIL,
                status=status,
                body=body,
                reason=UNEXPECTED_SHAPE,
            )
        if parsed.get("success") is True:
            return Ok(payload=parsed, status=status)
        return SoftFail(
            message=_message_from(parsed) or GENERIC_SOFT_FAIL,
            status=status,
            body=body,
            reason=NEGATIVE,
        )

    # Голая строка: либо не JSON вовсе, либо JSON-литерал ("Place approved")
    message = parsed.strip() if isinstance(parsed, str) and parsed.strip() else text[:200]
    return SoftFail(message=message, status=status, body=body, reason=NOT_JSON)


def is_success_biased(outcome: Outcome) -> bool:
    """
    Решение для мутаций с ненадёжным телом ответа (approve).

    HTTP 2xx важнее двусмысленного текста: неудача засчитывается только если
    в теле есть "error" и нет ни "success", ни "approved". Явный конверт
    с success=false остаётся неудачей.
    """
    if isinstance(outcome, Ok):
        return True
    if not isinstance(outcome, SoftFail):
        return False
    if outcome.reason == NEGATIVE:
        return False
    lowered = (outcome.body or "").lower()
    if NEGATIVE_KEYWORD in lowered:
        return any(word in lowered for word in POSITIVE_KEYWORDS)
    return True


def describe(outcome: Outcome, fallback: str) -> str:
    """Текст для уведомления пользователя"""
    if isinstance(outcome, (SoftFail, HardFail)) and outcome.message:
        if isinstance(outcome, HardFail):
            return f"{fallback}: {outcome.code} - {outcome.message}"
        return outcome.message
    if isinstance(outcome, TransportError):
        return f"Error: {outcome.cause}"
    return fallback
