"""
Стейт: Character Strengths.

Фазы: intro → rating → top5 → results.
24 сильные стороны, рейтинг 1–10 (пропущенный = 5). После последнего
вопроса предлагается top-5 по рейтингу; пользователь может заменить
выбор (не больше пяти). Сохраняются ровно пять: это фиксирует результат.
"""

import logging
from typing import Optional

from aiogram.types import CallbackQuery, InlineKeyboardMarkup

from config import DEFAULT_RATING, STRENGTHS_TOP_N
from core.summaries import top_n
from core.tools import load_tool, localized, find_by_key, format_progress_bar
from core.wizard import Wizard, EXIT
from integrations.telegram.keyboards import btn, btn_menu, kb_rating, kb_intro
from states.tools.base import ToolState

logger = logging.getLogger(__name__)

PHASES = ["intro", "rating", "top5", "results"]

# Сколько кандидатов показывать на экране выбора
CANDIDATES_SHOWN = 12

MEDALS = ["🥇", "🥈", "🥉", "🏅", "🎖"]


class StrengthsData:
    def __init__(self, keys: list[str]):
        self.keys = keys
        self.wizard = Wizard(
            PHASES,
            keys,
            summarize=lambda answers: top_n(answers.as_dict(), keys, STRENGTHS_TOP_N),
            results_phase="top5",
            prefill=DEFAULT_RATING,
        )
        self.top5: list[str] = []

    def toggle(self, key: str) -> bool:
        """Переключить выбор. Returns: False если лимит исчерпан."""
        if key in self.top5:
            self.top5.remove(key)
            return True
        if len(self.top5) >= STRENGTHS_TOP_N:
            return False
        self.top5.append(key)
        return True

    def candidates(self) -> list[str]:
        return top_n(self.wizard.answers.as_dict(), self.keys, CANDIDATES_SHOWN)

    def to_payload(self) -> dict:
        answers = self.wizard.answers
        return {
            'strengths': [
                {
                    'strengthKey': key,
                    'rank': i + 1,
                    'selfRating': answers.answer_or_default(key),
                    'isSignature': i < STRENGTHS_TOP_N,
                }
                for i, key in enumerate(self.top5)
            ],
        }


class StrengthsState(ToolState):
    """Сильные стороны характера."""

    name = "tools.strengths"
    display_name = {"ru": "Сильные стороны", "en": "Character Strengths"}
    scope = "str"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tool = load_tool("strengths")
        self.keys = [item['key'] for item in self.tool['strengths']]

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._user_data[user.chat_id] = StrengthsData(self.keys)
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        data: Optional[StrengthsData] = self._get_data(user)
        if data is None:
            data = self._user_data[user.chat_id] = StrengthsData(self.keys)
        wizard = data.wizard
        action, payload = self._decode(callback)

        if action == "start" and wizard.phase == wizard.intro_phase:
            wizard.start()
        elif action == "rate" and wizard.phase == "rating":
            wizard.record(int(payload))
        elif action == "next":
            was_last = wizard.is_last_question
            if not wizard.next():
                await callback.answer(self.t('tools.answer_first', user))
                return None
            if was_last and wizard.phase == "top5":
                data.top5 = list(wizard.summary)
        elif action == "back":
            if wizard.back() == EXIT:
                await callback.answer()
                return "exit"
        elif action == "toggle" and wizard.phase == "top5" and payload in self.keys:
            if not data.toggle(payload):
                await callback.answer(self.t('strengths.limit', user, count=STRENGTHS_TOP_N))
                return None
        elif action == "save" and wizard.phase == "top5":
            if len(data.top5) != STRENGTHS_TOP_N:
                await callback.answer(self.t('strengths.select_exactly', user, count=STRENGTHS_TOP_N))
                return None
            if await self._save(user, callback, data):
                wizard.go("results")
                await self._show(user, callback)
            return None
        elif action == "coach" and wizard.phase == "results":
            await self._coach(user, callback, "strengths", self._analysis_data(data))
            return None
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
        data: StrengthsData = self._get_data(user)
        phase = data.wizard.phase
        if phase == "intro":
            text = (
                f"💪 *{localized(self.tool['title'], user.language)}*\n\n"
                f"{localized(self.tool['intro'], user.language)}\n\n"
                f"{self.t('tools.minutes', user, minutes=self.tool['minutes'])}"
            )
            markup = kb_intro(self.scope, user.language)
        elif phase == "rating":
            text, markup = self._question(user, data.wizard)
        elif phase == "top5":
            text, markup = self._top5(user, data)
        else:
            text, markup = self._results(user, data)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    def _question(self, user, wizard: Wizard) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        strength = find_by_key(self.tool['strengths'], wizard.current_key)
        current = wizard.index + 1
        text = (
            f"{self.t('tools.question_of', user, current=current, total=wizard.total)}\n"
            f"{format_progress_bar(current, wizard.total)}\n\n"
            f"{strength['icon']} *{localized(strength['name'], lang)}*\n"
            f"_{strength['category']}_\n\n"
            f"{localized(strength['desc'], lang)}\n\n"
            f"{self.t('strengths.how_much', user)}"
        )
        next_key = 'buttons.see_top' if wizard.is_last_question else 'buttons.next'
        return text, kb_rating(self.scope, lang, wizard.current_answer(), True, next_key)

    def _top5(self, user, data: StrengthsData) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        answers = data.wizard.answers
        lines = [
            f"👑 *{self.t('strengths.top5_title', user)}*", "",
            self.t('strengths.top5_hint', user), "",
            self.t('strengths.selected', user, count=len(data.top5), total=STRENGTHS_TOP_N),
        ]
        rows = []
        for key in data.candidates():
            strength = find_by_key(self.tool['strengths'], key)
            mark = "✅" if key in data.top5 else "▫️"
            label = f"{mark} {strength['icon']} {localized(strength['name'], lang)} ({answers.answer_or_default(key)})"
            rows.append([btn(label, self.scope, "toggle", key)])

        save_text = self.t('buttons.save', user)
        if len(data.top5) != STRENGTHS_TOP_N:
            save_text = f"🔒 {save_text}"
        rows.append([btn(save_text, self.scope, "save")])
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(lang)])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    def _results(self, user, data: StrengthsData) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        lines = [f"🏆 *{self.t('strengths.results_title', user)}*", ""]
        for i, key in enumerate(data.top5):
            strength = find_by_key(self.tool['strengths'], key)
            lines.append(f"{MEDALS[i]} *{localized(strength['name'], lang)}*")
            lines.append(f"   {localized(strength['desc'], lang)}")
        markup = InlineKeyboardMarkup(inline_keyboard=[
            [btn(self.t('buttons.coach', user), self.scope, "coach")],
            [btn_menu(lang)],
        ])
        return "\n".join(lines), markup

    # =========================================
    # Сохранение
    # =========================================

    async def _save(self, user, callback: CallbackQuery, data: StrengthsData) -> bool:
        payload = data.to_payload()

        async def request():
            session_id = await self._session_id(user)
            return await self.backend.save_strengths(user.chat_id, session_id, payload)

        saved = await self._persist(user, callback, request)
        if saved:
            logger.info(f"[Strengths] Сохранено для {user.chat_id}: {data.top5}")
        return saved

    def _analysis_data(self, data: StrengthsData) -> dict:
        answers = data.wizard.answers
        return {
            'topStrengths': [
                {'key': key, 'rating': answers.answer_or_default(key)} for key in data.top5
            ],
            'allStrengths': [
                {'key': key, 'rating': rating} for key, rating in answers.as_dict().items()
            ],
        }
