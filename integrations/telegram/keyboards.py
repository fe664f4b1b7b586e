"""
Клавиатуры для Telegram бота.

Общие блоки для стейтов: шкала оценки 1–10, навигация
Назад/Далее, кнопка «В меню», ссылка на вход.
"""

from typing import Optional

from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton

from config import RATING_MIN, RATING_MAX
from core import callback_protocol
from i18n import t

MENU_CALLBACK = "nav:menu"


def btn(text: str, scope: str, action: str, payload: str | int = "") -> InlineKeyboardButton:
    """Кнопка по протоколу callback_data."""
    return InlineKeyboardButton(text=text, callback_data=callback_protocol.encode(scope, action, payload))


def btn_menu(lang: str = 'en') -> InlineKeyboardButton:
    return InlineKeyboardButton(text=t('buttons.menu', lang), callback_data=MENU_CALLBACK)


# ============= ОЦЕНКА =============

def rating_rows(scope: str, selected: Optional[int] = None, action: str = "rate") -> list[list[InlineKeyboardButton]]:
    """Две строки кнопок 1–5 и 6–10; выбранная отмечена точкой."""
    buttons = [
        btn(f"•{value}•" if value == selected else str(value), scope, action, value)
        for value in range(RATING_MIN, RATING_MAX + 1)
    ]
    half = len(buttons) // 2
    return [buttons[:half], buttons[half:]]


def nav_row(scope: str, lang: str = 'en', can_next: bool = True,
            next_key: str = 'buttons.next') -> list[InlineKeyboardButton]:
    """Назад / Далее. Далее без ответа показывается как неактивная."""
    next_text = t(next_key, lang) if can_next else f"🔒 {t(next_key, lang)}"
    return [
        btn(t('buttons.back', lang), scope, "back"),
        btn(next_text, scope, "next"),
    ]


def kb_rating(scope: str, lang: str = 'en', selected: Optional[int] = None,
              can_next: bool = False, next_key: str = 'buttons.next') -> InlineKeyboardMarkup:
    """Шкала 1–10 + навигация."""
    return InlineKeyboardMarkup(inline_keyboard=[
        *rating_rows(scope, selected),
        nav_row(scope, lang, can_next, next_key),
    ])


# ============= ОБЩИЕ =============

def kb_intro(scope: str, lang: str = 'en') -> InlineKeyboardMarkup:
    """Начать / В меню."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [btn(t('buttons.start', lang), scope, "start")],
        [btn_menu(lang)],
    ])


def kb_login(lang: str, url: str) -> InlineKeyboardMarkup:
    """Ссылка на вход в веб-приложение."""
    return InlineKeyboardMarkup(inline_keyboard=[
        [InlineKeyboardButton(text=t('buttons.login', lang), url=url)],
    ])


def kb_back_to_menu(lang: str = 'en') -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[[btn_menu(lang)]])
