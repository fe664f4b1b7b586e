"""
Стейт: Communication Styles.

Фазы: intro → quiz → results.
На каждый вопрос: по варианту на стиль. «Далее» на последнем вопросе
считает профиль и сохраняет его; результаты показываются после успешного
сохранения.
"""

import logging
from typing import Optional

from aiogram.types import CallbackQuery, InlineKeyboardMarkup

from core.summaries import style_profile
from core.tools import load_tool, localized, find_by_key, format_progress_bar
from core.wizard import Wizard, AnswerAccumulator, EXIT
from integrations.telegram.keyboards import btn, btn_menu, kb_intro, nav_row
from states.tools.base import ToolState

logger = logging.getLogger(__name__)

PHASES = ["intro", "quiz", "results"]


class StylesState(ToolState):
    """Стиль общения."""

    name = "tools.styles"
    display_name = {"ru": "Стили общения", "en": "Communication Styles"}
    scope = "sty"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tool = load_tool("styles")
        self.styles = [profile['key'] for profile in self.tool['profiles']]
        self.question_keys = [str(q['id']) for q in self.tool['questions']]

    def _new_wizard(self) -> Wizard:
        return Wizard(
            PHASES,
            self.question_keys,
            summarize=lambda answers: style_profile(answers.as_dict(), self.styles),
            accumulator=AnswerAccumulator(default=None, bounds=None),
        )

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._user_data[user.chat_id] = self._new_wizard()
        await self._show(user)
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        wizard: Optional[Wizard] = self._get_data(user)
        if wizard is None:
            wizard = self._user_data[user.chat_id] = self._new_wizard()
        action, payload = self._decode(callback)

        if action == "start" and wizard.phase == wizard.intro_phase:
            wizard.start()
        elif action == "pick" and wizard.phase == "quiz":
            if payload not in self.styles:
                await callback.answer()
                return None
            wizard.record(payload)
        elif action == "next":
            was_last = wizard.is_last_question
            if not wizard.next():
                await callback.answer(self.t('tools.answer_first', user))
                return None
            if was_last and wizard.phase == "results":
                if not await self._save(user, callback, wizard.summary):
                    # остаёмся на последнем вопросе
                    wizard.back()
                    return None
                await self._show(user, callback)
                return None
        elif action == "back":
            if wizard.back() == EXIT:
                await callback.answer()
                return "exit"
        elif action == "coach" and wizard.phase == "results":
            await self._coach(user, callback, "styles", self._analysis_data(wizard))
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
        wizard: Wizard = self._get_data(user)
        lang = user.language
        if wizard.phase == "intro":
            lines = [f"💬 *{localized(self.tool['title'], lang)}*", "", localized(self.tool['intro'], lang), ""]
            for profile in self.tool['profiles']:
                lines.append(f"{profile['icon']} {localized(profile['name'], lang)} — {localized(profile['subtitle'], lang)}")
            lines += ["", self.t('tools.minutes', user, minutes=self.tool['minutes'])]
            text, markup = "\n".join(lines), kb_intro(self.scope, lang)
        elif wizard.phase == "quiz":
            text, markup = self._question(user, wizard)
        else:
            text, markup = self._results(user, wizard.summary)
        await self.render(user, text, markup, callback, parse_mode="Markdown")

    def _question(self, user, wizard: Wizard) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        question = self.tool['questions'][wizard.index]
        current = wizard.index + 1
        text = (
            f"{self.t('tools.question_of', user, current=current, total=wizard.total)}\n"
            f"{format_progress_bar(current, wizard.total)}\n\n"
            f"*{localized(question['question'], lang)}*"
        )
        selected = wizard.current_answer()
        rows = []
        for option in question['options']:
            mark = "🔘" if option['style'] == selected else "⚪"
            rows.append([btn(f"{mark} {localized(option['text'], lang)}", self.scope, "pick", option['style'])])
        next_key = 'buttons.results' if wizard.is_last_question else 'buttons.next'
        rows.append(nav_row(self.scope, lang, wizard.has_answer(), next_key))
        return text, InlineKeyboardMarkup(inline_keyboard=rows)

    def _results(self, user, profile: dict) -> tuple[str, InlineKeyboardMarkup]:
        lang = user.language
        primary = find_by_key(self.tool['profiles'], profile['primary'])
        secondary = find_by_key(self.tool['profiles'], profile['secondary'])
        lines = [
            f"{primary['icon']} *{localized(primary['name'], lang)}*",
            f"_{localized(primary['subtitle'], lang)}_", "",
            f"*{self.t('styles.traits', user)}:* {', '.join(primary['traits'])}", "",
            f"*{self.t('styles.strengths', user)}:*",
            *[f"• {item}" for item in primary['strengths']], "",
            f"*{self.t('styles.challenges', user)}:*",
            *[f"• {item}" for item in primary['challenges']], "",
            f"*{self.t('styles.communicating_with', user)}:* {primary['communicating_with']}",
            f"*{self.t('styles.under_stress', user)}:* {primary['under_stress']}", "",
            self.t('styles.secondary', user, style=f"{secondary['icon']} {localized(secondary['name'], lang)}"),
            "",
        ]
        for style in self.styles:
            lines.append(f"{style}: {profile['scores'][style]}")
        markup = InlineKeyboardMarkup(inline_keyboard=[
            [btn(self.t('buttons.coach', user), self.scope, "coach")],
            [btn_menu(lang)],
        ])
        return "\n".join(lines), markup

    # =========================================
    # Сохранение
    # =========================================

    async def _save(self, user, callback: CallbackQuery, profile: dict) -> bool:
        payload = {
            'primaryStyle': profile['primary'],
            'secondaryStyle': profile['secondary'],
            'scores': profile['scores'],
        }

        async def request():
            session_id = await self._session_id(user)
            return await self.backend.save_style(user.chat_id, session_id, payload)

        saved = await self._persist(user, callback, request)
        if saved:
            logger.info(f"[Styles] Сохранено для {user.chat_id}: {profile['primary']}/{profile['secondary']}")
        return saved

    def _analysis_data(self, wizard: Wizard) -> dict:
        profile = wizard.summary or {}
        return {
            'primaryStyle': profile.get('primary'),
            'secondaryStyle': profile.get('secondary'),
            'scores': profile.get('scores', {}),
        }
