# touristguide/utils/session.py
"""
Хранилище сессии.

Плоское key-value хранилище учётных данных: токен, id, имя, email, роль.
Если задан путь, данные сохраняются в JSON и переживают перезапуск до
явного выхода.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, NamedTuple, Optional, Union

logger = logging.getLogger(__name__)

KEY_TOKEN = "token"
KEY_USER_ID = "user_id"
KEY_USER_NAME = "user_name"
KEY_USER_EMAIL = "user_email"
KEY_USER_ROLE = "user_role"
KEY_IS_LOGGED_IN = "is_logged_in"

AUTH_KEYS = (KEY_TOKEN, KEY_USER_ID, KEY_USER_NAME, KEY_USER_EMAIL, KEY_USER_ROLE)


class Session(NamedTuple):
    token: Optional[str]
    user_id: Optional[str]
    user_name: Optional[str]
    user_email: Optional[str]
    user_role: Optional[str]


class SessionStore:
    """Единственный экземпляр на процесс; пишет только login/logout"""

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"⚠️ Не удалось прочитать сессию из {self.path}: {e}")
            return
        if isinstance(data, dict):
            self._data = data
            logger.info(f"💾 Сессия загружена из {self.path}")

    def _save(self) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"❌ Не удалось сохранить сессию в {self.path}: {e}")
            raise

    def save_auth_data(self, token: str, user_id: str, name: str, email: str, role: str) -> None:
        self._data.update({
            KEY_TOKEN: token,
            KEY_USER_ID: user_id,
            KEY_USER_NAME: name,
            KEY_USER_EMAIL: email,
            KEY_USER_ROLE: role,
            KEY_IS_LOGGED_IN: True,
        })
        self._save()
        logger.info(f"✅ Сессия сохранена для пользователя {user_id} (роль: {role})")

    def get_token(self) -> Optional[str]:
        return self._data.get(KEY_TOKEN)

    def get_user_id(self) -> Optional[str]:
        return self._data.get(KEY_USER_ID)

    def get_user_name(self) -> Optional[str]:
        return self._data.get(KEY_USER_NAME)

    def get_user_email(self) -> Optional[str]:
        return self._data.get(KEY_USER_EMAIL)

    def get_user_role(self) -> Optional[str]:
        return self._data.get(KEY_USER_ROLE)

    def is_logged_in(self) -> bool:
        return bool(self._data.get(KEY_IS_LOGGED_IN, False))

    def is_admin(self) -> bool:
        return self.get_user_role() == "admin"

    def snapshot(self) -> Session:
        return Session(*(self._data.get(key) for key in AUTH_KEYS))

    def clear_auth_data(self) -> None:
        for key in AUTH_KEYS:
            self._data.pop(key, None)
        self._data[KEY_IS_LOGGED_IN] = False
        self._save()
        logger.info("🚪 Сессия очищена")
