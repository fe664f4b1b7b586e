"""
Стейт: Главное меню.

Кнопки разделов строятся из реестра сервисов. Разделы «Инструменты»
и «Сообщество» открываются подменю в том же сообщении.
"""

from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from core import callback_protocol
from core.registry import registry
from core.services import CATEGORY_DAILY, CATEGORY_TOOLS, CATEGORY_COMMUNITY
from integrations.telegram.keyboards import btn
from states.base import BaseState

SCOPE = "menu"


class MenuState(BaseState):
    """Главное меню с разделами."""

    name = "common.menu"
    display_name = {"ru": "Главное меню", "en": "Main menu"}

    def _home_keyboard(self, user) -> InlineKeyboardMarkup:
        daily = registry.build_menu(user, CATEGORY_DAILY).inline_keyboard
        return InlineKeyboardMarkup(inline_keyboard=[
            *daily,
            [btn(f"🧭 {self.t('menu.tools', user)}", SCOPE, "cat", CATEGORY_TOOLS)],
            [btn(f"🤝 {self.t('menu.community', user)}", SCOPE, "cat", CATEGORY_COMMUNITY)],
        ])

    async def enter(self, user, context: dict = None) -> Optional[str]:
        await self.send(user, self.t('menu.title', user), reply_markup=self._home_keyboard(user))
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        await self.send(user, self.t('menu.use_buttons', user), reply_markup=self._home_keyboard(user))
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        await callback.answer()
        _, action, payload = callback_protocol.decode(callback.data or "")

        if action == "cat" and payload in (CATEGORY_TOOLS, CATEGORY_COMMUNITY):
            keyboard = registry.build_menu(
                user, payload,
                extra_rows=[[btn(self.t('buttons.back', user), SCOPE, "home")]],
            )
            await self.render(user, self.t(f'menu.{payload}_title', user), keyboard, callback)
            return None

        if action == "home":
            await self.render(user, self.t('menu.title', user), self._home_keyboard(user), callback)
        return None
