"""
Стейт: EQ Micro-Skills.

Фазы: intro → assessment → results → practice.
4 домена × 3 вопроса, рейтинг 1-10. В результатах: среднее по домену
и метка; домены со средним < 6 отмечены как зона роста.
В practice пользователь выбирает микро-практики (любое число, минимум одна
для сохранения).
"""

import logging
from typing import Optional

from aiogram.types import CallbackQuery, InlineKeyboardMarkup

from core.summaries import domain_averages, score_label, is_growth_area, overall_score
from core.tools import (
    load_tool, localized, eq_question_keys, eq_question, practice_key,
    format_progress_bar, format_score_bar,
)
from core.wizard import Wizard, EXIT
from integrations.telegram.keyboards import btn, btn_menu, kb_rating, kb_intro
from states.tools.base import ToolState

logger = logging.getLogger(__name__)

PHASES = ["intro", "assessment", "results", "practice"]


class EqData:
    """Прогресс EQ: мастер + выбранные практики."""

    def __init__(self, tool: dict):
        self.wizard = Wizard(
            PHASES,
            eq_question_keys(tool),
            summarize=lambda answers: domain_averages(answers.as_dict(), tool['domains']),
        )
        self.practices: list[str] = []

    def toggle_practice(self, key: str) -> bool:
        """Переключить практику. Returns: True если выбрана."""
        if key in self.practices:
            self.practices.remove(key)
            return False
        self.practices.append(key)
        return True


class EqState(ToolState):
    """Оценка эмоционального интеллекта."""

    name = "tools.eq"
    display_name = {"ru": "Микронавыки EQ", "en": "EQ Micro-Skills"}
    scope = "eq"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tool = load_tool("eq")
        self.practice_keys = {
            practice_key(domain['key'], i)
            for domain in self.tool['domains']
            for i in range(len(domain['practices']))
        }

    @staticmethod
    def _in_practice(data: EqData) -> bool:
        """Практики выбираются только после рассчитанных результатов."""
        return data.wizard.phase == "practice" and data.wizard.summary is not None

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._user_data[user.chat_id] = EqData(self.tool)
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        data: Optional[EqData] = self._get_data(user)
        if data is None:
            data = self._user_data[user.chat_id] = EqData(self.tool)
        wizard = data.wizard
        action, payload = self._decode(callback)

        if action == "start" and wizard.phase == wizard.intro_phase:
            wizard.start()
        elif action == "rate" and wizard.phase == "assessment":
            wizard.record(int(payload))
        elif action == "next":
            if not wizard.next():
                await callback.answer(self.t('tools.answer_first', user))
                return None
        elif action == "back":
            if wizard.back() == EXIT:
                await callback.answer()
                return "exit"
        elif action == "practice" and wizard.phase == "results" and wizard.summary is not None:
            wizard.go("practice")
        elif action == "toggle" and self._in_practice(data) and payload in self.practice_keys:
            data.toggle_practice(payload)
        elif action == "save" and self._in_practice(data):
            if not data.practices:
                await callback.answer(self.t('eq.select_practice', user))
                return None
            await self._save(user, callback, data)
            return None
        elif action == "coach" and wizard.phase in ("results", "practice") and wizard.summary is not None:
            await self._coach(user, callback, "eq", self._analysis_data(data))
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
        data: EqData = self._get_data(user)
        phase = data.wizard.phase
        if phase == "intro":
            text, markup = self._intro(user)
        elif phase == "assessment":
            text, markup = self._question(user, data.wizard)
        elif phase == "results":
            text, markup = self._results(user, data.wizard.summary)
        else:
            text, markup = self._practice(user, data)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    def _intro(self, user) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        lines = [f"🧠 *{localized(self.tool['title'], lang)}*", "", localized(self.tool['intro'], lang), ""]
        for domain in self.tool['domains']:
            lines.append(f"{domain['icon']} {localized(domain['name'], lang)}")
        lines += ["", f"_{self.tool['scripture']}_", "",
                  self.t('tools.minutes', user, minutes=self.tool['minutes'])]
        return "\n".join(lines), kb_intro(self.scope, lang)

    def _question(self, user, wizard: Wizard) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        domain, question = eq_question(self.tool, wizard.current_key)
        current = wizard.index + 1
        text = (
            f"{self.t('tools.question_of', user, current=current, total=wizard.total)}\n"
            f"{format_progress_bar(current, wizard.total)}\n\n"
            f"{domain['icon']} *{localized(domain['name'], lang)}*\n\n"
            f"{localized(question, lang)}\n\n"
            f"_{self.t('tools.rate_hint', user)}_"
        )
        next_key = 'buttons.results' if wizard.is_last_question else 'buttons.next'
        markup = kb_rating(self.scope, lang, wizard.current_answer(), wizard.has_answer(), next_key)
        return text, markup

    def _results(self, user, averages: dict) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        lines = [
            f"🧠 *{self.t('eq.results_title', user)}*", "",
            self.t('eq.overall', user, score=f"{overall_score(averages):.1f}"), "",
        ]
        for domain in self.tool['domains']:
            score = averages.get(domain['key'], 0)
            label = self.t(f"eq.labels.{score_label(score)}", user)
            lines.append(f"{domain['icon']} *{localized(domain['name'], lang)}* — {score:.1f} ({label})")
            lines.append(f"`{format_score_bar(score)}`")
        markup = InlineKeyboardMarkup(inline_keyboard=[
            [btn(self.t('eq.choose_practices', user), self.scope, "practice")],
            [btn(self.t('buttons.coach', user), self.scope, "coach")],
            [btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(lang)],
        ])
        return "\n".join(lines), markup

    def _practice(self, user, data: EqData) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        averages = data.wizard.summary or {}
        lines = [f"🌱 *{self.t('eq.practice_title', user)}*", "", self.t('eq.practice_hint', user), ""]
        rows = []
        for domain in self.tool['domains']:
            header = f"{domain['icon']} *{localized(domain['name'], lang)}*"
            if is_growth_area(averages.get(domain['key'], 0)):
                header += f" — {self.t('eq.labels.growth_area', user)}"
            lines.append(header)
            for i, practice in enumerate(domain['practices']):
                key = practice_key(domain['key'], i)
                mark = "✅" if key in data.practices else "▫️"
                name = localized(practice['name'], lang)
                lines.append(f"{mark} {name} ({practice['minutes']} min) — {localized(practice['desc'], lang)}")
                rows.append([btn(f"{mark} {name}", self.scope, "toggle", key)])
            lines.append("")

        lines.append(self.t('eq.selected', user, count=len(data.practices)))
        save_text = self.t('buttons.save', user)
        if not data.practices:
            save_text = f"🔒 {save_text}"
        rows.append([btn(save_text, self.scope, "save")])
        rows.append([btn(self.t('buttons.back', user), self.scope, "back"), btn_menu(lang)])
        return "\n".join(lines), InlineKeyboardMarkup(inline_keyboard=rows)

    # =========================================
    # Сохранение
    # =========================================

    async def _save(self, user, callback: CallbackQuery, data: EqData) -> None:
        payload = {
            'scores': data.wizard.summary,
            'practices': list(data.practices),
        }

        async def request():
            session_id = await self._session_id(user)
            return await self.backend.save_eq(user.chat_id, session_id, payload)

        if await self._persist(user, callback, request):
            logger.info(f"[EQ] Сохранено для {user.chat_id}: {len(data.practices)} практик")

    def _analysis_data(self, data: EqData) -> dict:
        return {
            'scores': data.wizard.summary or {},
            'answers': data.wizard.answers.as_dict(),
            'practices': list(data.practices),
        }
