"""
Стейт: SWOT Builder.

Доска первой сессии запуска продукта. Обзор показывает четыре квадранта;
в квадранте пользователь добавляет пункты текстом, удаляет их и пишет
размышление о вере к пункту. Сохранение: вся доска целиком.
"""

import logging
from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup, InlineKeyboardButton

from config import WEB_APP_URL
from core.swot import SwotBoard, QUADRANTS
from core.tools import load_tool, localized, find_by_key
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import btn, btn_menu
from states.tools.base import ToolState

logger = logging.getLogger(__name__)


class SwotData:
    def __init__(self, session_id: int, board: SwotBoard):
        self.session_id = session_id
        self.board = board
        # Открытый квадрант (None: обзор)
        self.quadrant: Optional[str] = None
        # ID пункта, к которому ждём размышление
        self.reflecting: Optional[str] = None


class SwotState(ToolState):
    """SWOT-анализ сессии запуска."""

    name = "tools.swot"
    display_name = {"ru": "SWOT-анализ", "en": "SWOT Builder"}
    scope = "swt"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tool = load_tool("swot")

    async def enter(self, user, context: dict = None) -> Optional[str]:
        sessions = await self.backend.launch_sessions(user.chat_id)
        if not sessions:
            await self.send(
                user,
                self.t('swot.no_session', user),
                reply_markup=InlineKeyboardMarkup(inline_keyboard=[
                    [InlineKeyboardButton(text=self.t('swot.open_web', user), url=f"{WEB_APP_URL}/product-launch")],
                    [btn_menu(user.language)],
                ]),
            )
            return None

        session_id = sessions[0]['id']
        detail = await self.backend.launch_session(user.chat_id, session_id) or {}
        swot = (detail.get('tools') or {}).get('swot')
        self._user_data[user.chat_id] = SwotData(session_id, SwotBoard.from_payload(swot))
        await self._show(user)
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        """Текст: новый пункт открытого квадранта или размышление к пункту."""
        data: Optional[SwotData] = self._get_data(user)
        if data is None or data.quadrant is None:
            return await super().handle(user, message)

        text = message.text or ""
        if data.reflecting:
            data.board.update_reflection(data.quadrant, data.reflecting, text)
            data.reflecting = None
        elif data.board.add(data.quadrant, text) is None:
            await self.send(user, self.t('swot.empty_item', user))
            return None
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        data: Optional[SwotData] = self._get_data(user)
        action, payload = self._decode(callback)
        if data is None:
            await callback.answer()
            return "exit"

        if action == "q" and payload in QUADRANTS:
            data.quadrant = payload
            data.reflecting = None
        elif action == "rm" and data.quadrant:
            data.board.remove(data.quadrant, payload)
        elif action == "refl" and data.quadrant:
            if data.board.find(data.quadrant, payload) is None:
                await callback.answer()
                return None
            data.reflecting = payload
            await callback.answer()
            quadrant = find_by_key(self.tool['quadrants'], data.quadrant)
            await self.send(user, localized(quadrant['faith_question'], user.language))
            return None
        elif action == "save":
            await self._save(user, callback, data)
            await self._show(user, callback)
            return None
        elif action == "back":
            if data.quadrant is None:
                await callback.answer()
                return "exit"
            data.quadrant = None
            data.reflecting = None
        else:
            await callback.answer()
            return None

        await callback.answer()
        await self._show(user, callback)
        return None

    # =========================================
    # Экраны
    # =========================================

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        data: SwotData = self._get_data(user)
        if data.quadrant is None:
            text, markup = self._overview(user, data.board)
        else:
            text, markup = self._quadrant(user, data.board, data.quadrant)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    def _overview(self, user, board: SwotBoard) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        lines = [
            f"📊 *{localized(self.tool['title'], lang)}*", "",
            localized(self.tool['intro'], lang), f"_{self.tool['scripture']}_", "",
        ]
        rows = []
        for quadrant in self.tool['quadrants']:
            items = board.items[quadrant['key']]
            title = f"{quadrant['icon']} {localized(quadrant['title'], lang)}"
            lines.append(f"*{title}* ({len(items)})")
            for item in items:
                lines.append(f"• {escape_md(item['item'])}")
            lines.append("")
            rows.append([btn(f"{title} ({len(items)})", self.scope, "q", quadrant['key'])])

        lines.append(self.t('swot.total', user, count=board.total))
        if board.has_changes:
            lines.append(f"⚠️ {self.t('swot.unsaved', user)}")
        rows.append([btn(f"💾 {self.t('buttons.save', user)}", self.scope, "save")])
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(lang)])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    def _quadrant(self, user, board: SwotBoard, key: str) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        quadrant = find_by_key(self.tool['quadrants'], key)
        lines = [
            f"{quadrant['icon']} *{localized(quadrant['title'], lang)}*", "",
            localized(quadrant['prompt'], lang),
            f"_{quadrant['scripture']}_", "",
        ]
        rows = []
        for i, item in enumerate(board.items[key], start=1):
            lines.append(f"{i}. {escape_md(item['item'])}")
            if item.get('faithReflection'):
                lines.append(f"   🙏 {escape_md(item['faithReflection'])}")
            rows.append([
                btn(f"🙏 {i}", self.scope, "refl", item['id']),
                btn(f"🗑 {i}", self.scope, "rm", item['id']),
            ])
        lines += ["", self.t('swot.add_hint', user)]
        rows.append([btn(self.t('buttons.back', user), self.scope, "back")])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    # =========================================
    # Сохранение
    # =========================================

    async def _save(self, user, callback: CallbackQuery, data: SwotData) -> None:
        payload = data.board.to_payload()

        async def request():
            return await self.backend.save_swot(user.chat_id, data.session_id, payload)

        if await self._persist(user, callback, request):
            data.board.mark_saved()
            logger.info(f"[SWOT] Сохранено для {user.chat_id}: {data.board.total} пунктов")
