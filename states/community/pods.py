"""
Стейт: Молитвенные группы (Prayer Pods).

Список групп с фильтром по фокусу, отметка «уже в группе» по my-pods
и вступление. После вступления оба списка перечитываются.
"""

import logging
from typing import Optional

from aiogram.types import Message, CallbackQuery, InlineKeyboardMarkup

from config import POD_FOCUS_OPTIONS
from core import callback_protocol
from core.community import FOCUS_ALL, filter_by_focus, joined_ids
from core.error_classifier import REQUEST_ERRORS
from integrations.telegram.formatting import escape_md
from integrations.telegram.keyboards import btn, btn_menu
from states.base import BaseState

logger = logging.getLogger(__name__)

SCOPE = "pod"

# Кнопок фильтра в строке
FILTER_COLUMNS = 3


class PodsState(BaseState):
    """Молитвенные группы."""

    name = "community.pods"
    display_name = {"ru": "Молитвенные группы", "en": "Prayer Pods"}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # chat_id → выбранный фокус
        self._focus: dict[int, str] = {}

    async def enter(self, user, context: dict = None) -> Optional[str]:
        self._focus[user.chat_id] = FOCUS_ALL
        await self._show(user)
        return None

    async def exit(self, user) -> dict:
        self._focus.pop(user.chat_id, None)
        return {}

    async def handle(self, user, message: Message) -> Optional[str]:
        await self.send(user, self.t('tools.use_buttons', user))
        return None

    async def handle_callback(self, user, callback: CallbackQuery) -> Optional[str]:
        scope, action, payload = callback_protocol.decode(callback.data or "")
        if scope != SCOPE:
            await callback.answer()
            return None

        if action == "focus" and (payload == FOCUS_ALL or payload in POD_FOCUS_OPTIONS):
            self._focus[user.chat_id] = payload
            await callback.answer()
        elif action == "join":
            await self._join(user, callback, int(payload))
        else:
            await callback.answer()
            return None

        await self._show(user, callback)
        return None

    async def _join(self, user, callback: CallbackQuery, pod_id: int) -> None:
        try:
            await self.backend.join_pod(user.chat_id, pod_id)
        except REQUEST_ERRORS as e:
            await self.notify.report_error(user, e, callback, action_key='pods.join_failed')
            return
        logger.info(f"[Pods] chat_id={user.chat_id} вступил в группу {pod_id}")
        await self.notify.success(user.chat_id, self.t('pods.joined', user), callback)

    def _focus_label(self, user, focus: str) -> str:
        return self.t(f'pods.focus.{focus}', user)

    async def _show(self, user, callback: Optional[CallbackQuery] = None) -> None:
        focus = self._focus.get(user.chat_id, FOCUS_ALL)
        pods = await self.backend.prayer_pods(user.chat_id)
        my_pods = await self.backend.my_pods(user.chat_id)
        joined = joined_ids(my_pods)
        visible = filter_by_focus(pods, focus)

        lines = [f"🙏 *{self.t('pods.title', user)}*", ""]
        if my_pods:
            lines.append(f"*{self.t('pods.my_pods', user)}*")
            for pod in my_pods:
                lines.append(f"• {escape_md(pod.get('name'))}")
            lines.append("")
        lines.append(self.t('pods.filter', user, focus=self._focus_label(user, focus)))
        lines.append("")

        rows = []
        if not visible:
            lines.append(self.t('pods.empty', user))
        for pod in visible:
            lock = " 🔒" if pod.get('isPrivate') else ""
            lines.append(f"▪️ {escape_md(pod.get('name'))}{lock}")
            lines.append(escape_md(pod.get('description') or self.t('pods.default_description', user,
                                                                  focus=self._focus_label(user, pod.get('focus', 'general')))))
            details = [self._focus_label(user, pod.get('focus', 'general'))]
            if pod.get('capacity'):
                details.append(self.t('pods.capacity', user, count=pod['capacity']))
            if pod.get('meetingSchedule'):
                details.append(f"🕒 {escape_md(pod['meetingSchedule'])}")
            lines.append(" · ".join(details))
            lines.append("")
            if pod.get('id') in joined:
                rows.append([btn(f"✅ {self.t('pods.already_joined', user)}: {(pod.get('name') or '')[:30]}",
                                 SCOPE, "noop")])
            else:
                rows.append([btn(f"➕ {self.t('pods.join', user)}: {(pod.get('name') or '')[:30]}",
                                 SCOPE, "join", pod['id'])])

        options = [FOCUS_ALL, *POD_FOCUS_OPTIONS]
        filter_buttons = [
            btn(("• " if option == focus else "") + self._focus_label(user, option), SCOPE, "focus", option)
            for option in options
        ]
        for i in range(0, len(filter_buttons), FILTER_COLUMNS):
            rows.append(filter_buttons[i:i + FILTER_COLUMNS])
        rows.append([btn_menu(user.language)])
        await self.render(user, "\n".join(lines).strip(), InlineKeyboardMarkup(inline_keyboard=rows),
                          callback, parse_mode="Markdown")
