"""
Стейт: Wheel of Life.

Фазы: assess → focus.
В assess пользователь выбирает сферу и ставит оценку 1–10 (и по желанию
заметку текстом). Когда оценены все 8 сфер, можно перейти к выбору до трёх
фокусных сфер; две самые низкие подсвечиваются. Прошлое сохранение
подгружается при входе.
"""

import logging
from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from config import WHEEL_MAX_FOCUS
from core.tools import load_tool, localized, find_by_key, format_score_bar
from core.wheel import WheelBoard, PHASE_ASSESS, PHASE_FOCUS
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import btn, btn_menu, rating_rows
from states.tools.base import ToolState

logger = logging.getLogger(__name__)


class WheelData:
    def __init__(self, categories: list[str]):
        self.board = WheelBoard(categories)
        # Выбранная сфера для оценки
        self.selected: Optional[str] = categories[0] if categories else None
        # Ждём текст заметки для выбранной сферы
        self.awaiting_note = False
        self.saved = False

    def select_next_unscored(self) -> None:
        for key in self.board.categories:
            if key not in self.board.scores:
                self.selected = key
                return


class WheelState(ToolState):
    """Колесо баланса."""

    name = "tools.wheel"
    display_name = {"ru": "Колесо баланса", "en": "Wheel of Life"}
    scope = "whl"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tool = load_tool("wheel")
        self.categories = [item['key'] for item in self.tool['categories']]

    async def enter(self, user, context: dict = None) -> Optional[str]:
        data = WheelData(self.categories)
        session = await self.backend.current_session(user.chat_id)
        if session:
            data.board.load(await self.backend.get_wheel(user.chat_id, session['id']))
            data.select_next_unscored()
        self._user_data[user.chat_id] = data
        await self._show(user)
        return None

    async def handle(self, user, message: Message) -> Optional[str]:
        """Текст: заметка к выбранной сфере."""
        data: Optional[WheelData] = self._get_data(user)
        if data is None or not data.awaiting_note or data.selected is None:
            return await super().handle(user, message)
        data.board.set_note(data.selected, message.text or "")
        data.awaiting_note = False
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        data: Optional[WheelData] = self._get_data(user)
        if data is None:
            data = self._user_data[user.chat_id] = WheelData(self.categories)
        board = data.board
        action, payload = self._decode(callback)

        assessing = board.phase == PHASE_ASSESS
        focusing = board.phase == PHASE_FOCUS and board.all_scored

        if action == "cat" and assessing and payload in self.categories:
            data.selected = payload
            data.awaiting_note = False
        elif action == "rate" and assessing and data.selected:
            board.rate(data.selected, int(payload))
            data.select_next_unscored()
        elif action == "note" and assessing and data.selected:
            data.awaiting_note = True
            await callback.answer()
            await self.send(user, self.t('wheel.note_prompt', user, area=self._label(user, data.selected)))
            return None
        elif action == "next":
            if not board.to_focus():
                await callback.answer(self.t('wheel.rate_all', user))
                return None
        elif action == "back":
            if not board.back():
                await callback.answer()
                return "exit"
        elif action == "focus" and focusing and payload in self.categories:
            if not board.toggle_focus(payload):
                await callback.answer(self.t('wheel.focus_limit', user, count=WHEEL_MAX_FOCUS))
                return None
        elif action == "save" and focusing:
            if not board.can_save:
                await callback.answer(self.t('wheel.select_focus', user))
                return None
            data.saved = await self._save(user, callback, board)
            await self._show(user, callback)
            return None
        elif action == "habits" and data.saved:
            await callback.answer()
            return "habits"
        else:
            await callback.answer()
            return None

        await callback.answer()
        await self._show(user, callback)
        return None

    # =========================================
    # Экраны
    # =========================================

    def _label(self, user, key: str) -> str:
        category = find_by_key(self.tool['categories'], key)
        return f"{category['icon']} {localized(category['label'], user.language)}"

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        data: WheelData = self._get_data(user)
        if data.board.phase == PHASE_ASSESS:
            text, markup = self._assess(user, data)
        else:
            text, markup = self._focus(user, data)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    def _assess(self, user, data: WheelData) -> tuple[str, InlineKeyboardMarkup]:
        board = data.board
        lang = user.language
        lines = [
            f"🎡 *{localized(self.tool['title'], lang)}*", "",
            localized(self.tool['intro'], lang), "",
        ]
        rows = []
        for key in self.categories:
            score = board.scores.get(key)
            marker = "👉 " if key == data.selected else ""
            value = f"{score}/10" if score is not None else "—"
            lines.append(f"{marker}{self._label(user, key)}: {value}")
            if key in board.notes:
                lines.append(f"   📝 {escape_md(board.notes[key])}")
            rows.append([btn(f"{marker}{self._label(user, key)} · {value}", self.scope, "cat", key)])

        if data.selected:
            lines += ["", self.t('wheel.rate_selected', user, area=self._label(user, data.selected))]
            rows += rating_rows(self.scope, board.scores.get(data.selected))
            rows.append([btn(self.t('wheel.add_note', user), self.scope, "note")])

        next_text = self.t('wheel.choose_focus', user)
        if not board.all_scored:
            next_text = f"🔒 {next_text}"
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn(next_text, self.scope, "next")])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    def _focus(self, user, data: WheelData) -> tuple[str, InlineKeyboardMarkup]:
        board = data.board
        lowest = board.lowest()
        lines = [
            f"🎯 *{self.t('wheel.focus_title', user)}*", "",
            self.t('wheel.average', user, score=f"{board.average():.1f}"), "",
        ]
        for key in self.categories:
            score = board.scores.get(key, 0)
            flag = f" ⬇️ {self.t('wheel.lowest', user)}" if key in lowest else ""
            lines.append(f"{self._label(user, key)}: {score}/10{flag}")
            lines.append(f"`{format_score_bar(score)}`")
        lines += ["", self.t('wheel.focus_hint', user, count=WHEEL_MAX_FOCUS),
                  self.t('wheel.selected', user, count=len(board.focus), total=WHEEL_MAX_FOCUS)]

        rows = []
        for key in self.categories:
            mark = "✅" if key in board.focus else "▫️"
            rows.append([btn(f"{mark} {self._label(user, key)}", self.scope, "focus", key)])
        save_text = self.t('buttons.save', user)
        if not board.can_save:
            save_text = f"🔒 {save_text}"
        rows.append([btn(save_text, self.scope, "save")])
        if data.saved:
            rows.append([btn(self.t('wheel.to_habits', user), self.scope, "habits")])
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(user.language)])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    # =========================================
    # Сохранение
    # =========================================

    async def _save(self, user, callback: CallbackQuery, board: WheelBoard) -> bool:
        payload = board.to_payload()

        async def request():
            session_id = await self._session_id(user)
            return await self.backend.save_wheel(user.chat_id, session_id, payload)

        saved = await self._persist(user, callback, request)
        if saved:
            logger.info(f"[Wheel] Сохранено для {user.chat_id}: фокус {board.focus}")
        return saved
