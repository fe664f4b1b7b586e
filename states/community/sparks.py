"""
Стейт: Искры дня (Daily Sparks).

Избранные искры (GET /api/sparks/featured): первые четыре, в компактном
виде одна. Просмотр искры: ссылка на веб-приложение.
"""

from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton

from config import WEB_APP_URL
from core import callback_protocol
from core.community import featured
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import btn, btn_menu
from states.base import BaseState

SCOPE = "spk"


class SparksState(BaseState):
    """Искры дня."""

    name = "community.sparks"
    display_name = {"ru": "Искры дня", "en": "Daily Sparks"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # chat_id → компактный вид
        self._compact: dict[int, bool] = {}

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._compact[user.chat_id] = False
        await self._show(user)
        return None

    async def exit(self, user) -> dict:
        self._compact.pop(user.chat_id, None)
        return {}

    async def handle(self, user, message: Message) -> Optional[str]:
        await self.send(user, self.t('tools.use_buttons', user))
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        scope, action, _ = callback_protocol.decode(callback.data or "")
        await callback.answer()
        if scope != SCOPE:
            return None
        if action == "compact":
            self._compact[user.chat_id] = not self._compact.get(user.chat_id, False)
        elif action == "tasks":
            return "tasks"
        elif action != "refresh":
            return None
        await self._show(user, callback)
        return None

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        compact = self._compact.get(user.chat_id, False)
        sparks = featured(await self.backend.featured_sparks(user.chat_id), compact=compact)

        lines = [f"✨ *{self.t('sparks.title', user)}*", ""]
        rows = []
        if not sparks:
            lines.append(self.t('sparks.empty', user))
        for spark in sparks:
            lines.append(f"✨ {escape_md(spark.get('title'))}")
            if spark.get('scriptureReference'):
                lines.append(f"📖 {escape_md(spark['scriptureReference'])}")
            if spark.get('description') and not compact:
                lines.append(escape_md(spark['description']))
            lines.append("")
            rows.append([InlineKeyboardButton(
                text=f"▶️ {(spark.get('title') or '')[:40]}",
                url=f"{WEB_APP_URL}/sparks/{spark['id']}",
            )])

        toggle_key = 'sparks.show_all' if compact else 'sparks.show_less'
        rows.append([
            btn(self.t(toggle_key, user), SCOPE, "compact"),
            btn(f"📅 {self.t('service.daily', user)}", SCOPE, "tasks"),
        ])
        rows.append([btn_menu(user.language)])
        await self.render(user, "\n".join(lines).strip(), InlineKeyboardMarkup(inline_keyboard=rows),
                          callback, parse_mode="Markdown")
