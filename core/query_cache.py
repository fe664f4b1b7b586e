"""
Кеш GET-запросов к API.

Ключ запроса: кортеж (chat_id, путь, *параметры), например
(42, "/api/vision/sessions", 7, "wheel"). Запись свежая stale_time секунд:
fetch() в это время отдаёт её без запроса. Устаревшая запись перечитывается
при следующем fetch(). Записи, к которым не обращались gc_time секунд,
удаляются в gc().

Мутации инвалидируют записи по префиксу ключа: invalidate((42, "/api/daily-tasks/progress"))
сбрасывает прогресс за все даты.

Одновременные fetch() одного ключа не объединяются: каждый сходит в сеть.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from config import QUERY_STALE_TIME, QUERY_GC_TIME

logger = logging.getLogger(__name__)

QueryKey = tuple


@dataclass
class _Entry:
    value: Any
    fetched_at: float
    used_at: float
    invalidated: bool = False


class QueryCache:
    """Кеш результатов запросов с устареванием и сборкой мусора."""

    def __init__(
        self,
        stale_time: float = QUERY_STALE_TIME,
        gc_time: float = QUERY_GC_TIME,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.stale_time = stale_time
        self.gc_time = gc_time
        self._clock = clock
        self._entries: dict[QueryKey, _Entry] = {}

    def _is_fresh(self, entry: _Entry, now: float) -> bool:
        return not entry.invalidated and now - entry.fetched_at < self.stale_time

    async def fetch(self, key: QueryKey, loader: Callable[[], Awaitable[Any]], force: bool = False) -> Any:
        """Вернуть данные по ключу, при необходимости загрузив их.

        Ошибка loader() пробрасывается; старая запись при этом не трогается.
        """
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and not force and self._is_fresh(entry, now):
            entry.used_at = now
            logger.debug(f"[Cache] HIT {key}")
            return entry.value

        logger.debug(f"[Cache] MISS {key}")
        value = await loader()
        now = self._clock()
        self._entries[key] = _Entry(value=value, fetched_at=now, used_at=now)
        return value

    def get(self, key: QueryKey) -> Optional[Any]:
        """Закешированное значение без загрузки (даже устаревшее)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        entry.used_at = self._clock()
        return entry.value

    def set(self, key: QueryKey, value: Any) -> None:
        now = self._clock()
        self._entries[key] = _Entry(value=value, fetched_at=now, used_at=now)

    def is_stale(self, key: QueryKey) -> bool:
        entry = self._entries.get(key)
        return entry is None or not self._is_fresh(entry, self._clock())

    def invalidate(self, prefix: QueryKey) -> int:
        """Пометить устаревшими все записи, чей ключ начинается с prefix.

        Returns:
            Количество затронутых записей
        """
        count = 0
        for key, entry in self._entries.items():
            if key[:len(prefix)] == tuple(prefix):
                entry.invalidated = True
                count += 1
        if count:
            logger.debug(f"[Cache] INVALIDATE {prefix}: {count}")
        return count

    def gc(self) -> int:
        """Удалить записи, не использовавшиеся дольше gc_time."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if now - entry.used_at >= self.gc_time]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"[Cache] GC: удалено {len(expired)} записей")
        return len(expired)

    def drop_chat(self, chat_id: int) -> None:
        """Удалить все записи чата (logout)."""
        for key in [k for k in self._entries if k and k[0] == chat_id]:
            del self._entries[key]

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
