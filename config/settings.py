"""
Настройки бота: токены, адреса бэкенда, константы инструментов.

Все значения читаются из переменных окружения при импорте.
Статический контент (инструменты, задачи, подкаст) лежит в YAML рядом.
"""

import logging
import os
from datetime import timedelta, timezone
from pathlib import Path

# ============= ТОКЕНЫ И АДРЕСА =============

BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")

# Бэкенд веб-приложения (JSON-over-HTTP)
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:5000").rstrip("/")
# Веб-приложение (для ссылок «войти» и «открыть на сайте»)
WEB_APP_URL = os.getenv("WEB_APP_URL", API_BASE_URL).rstrip("/")

# Cookie сессии, которую веб-приложение передаёт через /start <token>
SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "connect.sid")
CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"

# Таймаут одного HTTP-запроса (секунды). Ретраев нет.
API_TIMEOUT = float(os.getenv("API_TIMEOUT", "15"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def validate_env() -> None:
    """Проверить обязательные переменные окружения."""
    if not BOT_TOKEN:
        raise ValueError("TELEGRAM_BOT_TOKEN не установлен!")
    if not API_BASE_URL.startswith(("http://", "https://")):
        raise ValueError(f"API_BASE_URL должен быть http(s) URL, получено: {API_BASE_URL}")


def get_logger(name: str) -> logging.Logger:
    """Логгер модуля (формат задаётся в bot.py)."""
    return logging.getLogger(name)


# ============= ВРЕМЯ =============

def _parse_offset(value: str) -> timezone:
    """'+3' / '-5' / '0' → timezone."""
    try:
        hours = float(value)
    except ValueError:
        return timezone.utc
    return timezone(timedelta(hours=hours))


# Смещение пользовательской «даты дня» от UTC (задачи дня считаются по нему)
APP_TZ = _parse_offset(os.getenv("TIMEZONE_OFFSET", "0"))

# Ежедневное напоминание о задачах (ЧЧ:ММ в APP_TZ)
REMINDER_TIME = os.getenv("REMINDER_TIME", "08:00")

# ============= ПУТИ =============

BASE_DIR = Path(__file__).parent.parent
CONFIG_DIR = BASE_DIR / "config"
TOOLS_DIR = CONFIG_DIR / "tools"
TRANSITIONS_PATH = CONFIG_DIR / "transitions.yaml"
DAILY_TASKS_PATH = CONFIG_DIR / "daily_tasks.yaml"
PODCAST_PATH = CONFIG_DIR / "podcast.yaml"

# ============= КЭШ ЗАПРОСОВ =============

QUERY_STALE_TIME = 5 * 60      # данные считаются свежими 5 минут
QUERY_GC_TIME = 30 * 60        # неиспользуемые записи удаляются через 30 минут

# ============= ИНСТРУМЕНТЫ =============

RATING_MIN = 1
RATING_MAX = 10
DEFAULT_RATING = 5             # «середина шкалы» для пропущенных ответов

STRENGTHS_TOP_N = 5
WHEEL_MAX_FOCUS = 3
WHEEL_LOWEST_HIGHLIGHT = 2
HABIT_WINDOW_DAYS = 7
HABIT_STREAK_BADGE = 3         # показывать «🔥 N дней» начиная с 3

# ============= ЗАДАЧИ ДНЯ =============


class Tier:
    """Уровни задач дня (группировка в UI, не приоритет)."""
    ESSENTIAL = "essential"
    BONUS = "bonus"
    STRETCH = "stretch"

    ALL = (ESSENTIAL, BONUS, STRETCH)


class AudienceSegment:
    GENERAL = "general"
    GEN_Z_STUDENT = "gen-z-student"
    YOUNG_PROFESSIONAL = "young-professional"
    COUPLE = "couple"
    PARENT = "parent"
    SENIOR = "senior"

    ALL = (GENERAL, GEN_Z_STUDENT, YOUNG_PROFESSIONAL, COUPLE, PARENT, SENIOR)


DAILY_POINTS_GOAL = 50
DEFAULT_EXPANDED_TIERS = [Tier.ESSENTIAL, Tier.BONUS]

# ============= СООБЩЕСТВО =============

FEATURED_SPARKS_LIMIT = 4
POD_FOCUS_OPTIONS = [
    "general", "spiritual-growth", "healing", "relationships", "career",
    "missions", "campus", "anxiety", "identity",
]
