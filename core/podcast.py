"""
Очередь выпусков подкаста с автопереходом.

Когда выпуск заканчивается (или пользователь жмёт «Следующий»),
очередь переходит к следующему; после последнего: останавливается.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from config import PODCAST_PATH
from core.tools import load_yaml

logger = logging.getLogger(__name__)


@dataclass
class Episode:
    id: str
    number: int
    title: str
    theme: str
    duration: str
    scripture: str
    description: str


@lru_cache(maxsize=None)
def load_podcast() -> dict:
    return load_yaml(PODCAST_PATH)


def load_episodes() -> list[Episode]:
    return [
        Episode(
            id=item['id'],
            number=int(item['number']),
            title=item['title'],
            theme=item.get('theme', ''),
            duration=item.get('duration', ''),
            scripture=item.get('scripture', ''),
            description=item.get('description', ''),
        )
        for item in load_podcast().get('episodes', [])
    ]


class PodcastQueue:
    """Плеер: текущий выпуск и состояние воспроизведения."""

    def __init__(self, episodes: list[Episode]):
        self.episodes = list(episodes)
        self.current: Optional[int] = None
        self.playing = False

    @property
    def episode(self) -> Optional[Episode]:
        if self.current is None:
            return None
        return self.episodes[self.current]

    def play(self, episode_id: str) -> Episode:
        for index, episode in enumerate(self.episodes):
            if episode.id == episode_id:
                self.current = index
                self.playing = True
                return episode
        raise KeyError(f"Выпуск не найден: {episode_id}")

    def pause(self) -> None:
        self.playing = False

    def on_ended(self) -> Optional[Episode]:
        """Выпуск закончился: следующий или None (конец очереди)."""
        if self.current is None:
            return None
        if self.current + 1 < len(self.episodes):
            self.current += 1
            self.playing = True
            logger.debug(f"[Podcast] Автопереход к {self.episodes[self.current].id}")
            return self.episodes[self.current]
        self.playing = False
        return None

    def next(self) -> Optional[Episode]:
        return self.on_ended()

    def stop(self) -> None:
        """Вернуться к списку выпусков."""
        self.current = None
        self.playing = False
