"""
Стейт: Подкаст.

Список выпусков и плеер с очередью: «Слушать», «Пауза», «Следующий»
и «Дослушал» (автопереход к следующему выпуску; после последнего
очередь останавливается).
"""

from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from core import callback_protocol
from core.podcast import PodcastQueue, load_podcast, load_episodes
from core.tools import localized
from integrations.telegram.keyboards import btn, btn_menu
from states.base import BaseState

SCOPE = "pc"


class PodcastState(BaseState):
    """Подкаст с очередью выпусков."""

    name = "community.podcast"
    display_name = {"ru": "Подкаст", "en": "Podcast"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.podcast = load_podcast()
        self.episodes = load_episodes()
        self._queues: dict[int, PodcastQueue] = {}

    def _queue(self, user) -> PodcastQueue:
        if user.chat_id not in self._queues:
            self._queues[user.chat_id] = PodcastQueue(self.episodes)
        return self._queues[user.chat_id]

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._queues[user.chat_id] = PodcastQueue(self.episodes)
        await self._show(user)
        return None

    async def exit(self, user) -> dict:
        self._queues.pop(user.chat_id, None)
        return {}

    async def handle(self, user, message: Message) -> Optional[str]:
        await self.send(user, self.t('tools.use_buttons', user))
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        scope, action, payload = callback_protocol.decode(callback.data or "")
        if scope != SCOPE:
            await callback.answer()
            return None

        queue = self._queue(user)
        if action == "play":
            try:
                queue.play(payload)
            except KeyError:
                await callback.answer(self.t('podcast.not_found', user))
                return None
            await callback.answer()
        elif action == "pause":
            queue.pause()
            await callback.answer()
        elif action in ("next", "ended"):
            upcoming = queue.on_ended()
            if upcoming is None:
                await callback.answer(self.t('podcast.queue_end', user))
            else:
                await callback.answer(self.t('podcast.up_next', user, title=upcoming.title))
        elif action == "list":
            queue.stop()
            await callback.answer()
        else:
            await callback.answer()
            return None

        await self._show(user, callback)
        return None

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        queue = self._queue(user)
        lang = user.language
        episode = queue.episode
        rows = []

        if episode is None:
            lines = [
                f"🎧 *{self.podcast['title']}*",
                f"_{localized(self.podcast.get('tagline'), lang)}_", "",
            ]
            for item in self.episodes:
                lines.append(f"*#{item.number} {item.title}* · {item.duration}")
                lines.append(f"   {item.theme}")
                rows.append([btn(f"▶️ #{item.number} {item.title}"[:60], SCOPE, "play", item.id)])
        else:
            status = self.t('podcast.playing', user) if queue.playing else self.t('podcast.paused', user)
            lines = [
                f"🎧 *#{episode.number} {episode.title}*",
                f"{status} · {episode.duration}", "",
                f"_{episode.theme}_",
                f"📖 {episode.scripture}", "",
                episode.description,
            ]
            toggle = (btn(f"⏸ {self.t('podcast.pause', user)}", SCOPE, "pause") if queue.playing
                      else btn(f"▶️ {self.t('podcast.play', user)}", SCOPE, "play", episode.id))
            rows.append([toggle, btn(f"⏭ {self.t('podcast.next', user)}", SCOPE, "next")])
            rows.append([btn(f"✔️ {self.t('podcast.finished', user)}", SCOPE, "ended")])
            rows.append([btn(f"📃 {self.t('podcast.all_episodes', user)}", SCOPE, "list")])

        rows.append([btn_menu(lang)])
        await self.render(user, "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows),
                          callback, parse_mode="Markdown")
