"""
Пользователи бота (in-memory).

Бот не хранит данных между перезапусками: всё долговечное живёт на бэкенде
веб-приложения. Здесь только то, что нужно для роутинга и отображения:
язык, текущий стейт SM, сегмент аудитории, подписка на напоминания.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config import AudienceSegment
from i18n import detect_language

logger = logging.getLogger(__name__)


@dataclass
class ChatUser:
    """Пользователь Telegram-чата."""
    chat_id: int
    language: str = "en"
    audience_segment: str = AudienceSegment.GENERAL
    current_state: Optional[str] = None
    first_name: Optional[str] = None
    reminders: bool = True


class UserStore:
    """Реестр пользователей по chat_id."""

    def __init__(self):
        self._users: dict[int, ChatUser] = {}

    def get(self, chat_id: int) -> Optional[ChatUser]:
        return self._users.get(chat_id)

    def get_or_create(self, chat_id: int, language_code: Optional[str] = None) -> ChatUser:
        """Вернуть пользователя, создав при первом обращении.

        Язык определяется по language_code из Telegram только при создании.
        """
        user = self._users.get(chat_id)
        if user is None:
            user = ChatUser(chat_id=chat_id, language=detect_language(language_code))
            self._users[chat_id] = user
            logger.info(f"[Users] Новый пользователь chat_id={chat_id}, lang={user.language}")
        return user

    def apply_profile(self, user: ChatUser, profile: Optional[dict]) -> None:
        """Обновить пользователя данными /api/auth/me."""
        if not profile:
            return
        segment = profile.get('audienceSegment')
        if segment in AudienceSegment.ALL:
            user.audience_segment = segment
        user.first_name = profile.get('firstName') or user.first_name

    def with_reminders(self) -> list[ChatUser]:
        """Пользователи, подписанные на ежедневное напоминание."""
        return [u for u in self._users.values() if u.reminders]

    def __len__(self) -> int:
        return len(self._users)


# Глобальный экземпляр
users = UserStore()
