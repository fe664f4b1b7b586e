"""
Модуль конфигурации бота.

Содержит:
- settings.py: токены, адреса бэкенда, константы инструментов
- *.yaml: статический контент (инструменты, задачи дня, подкаст, переходы)
"""

from .settings import (
    # Токены и адреса
    BOT_TOKEN,
    API_BASE_URL,
    WEB_APP_URL,
    SESSION_COOKIE_NAME,
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    API_TIMEOUT,
    LOG_LEVEL,
    validate_env,

    # Логирование
    get_logger,

    # Время
    APP_TZ,
    REMINDER_TIME,

    # Пути
    BASE_DIR,
    CONFIG_DIR,
    TOOLS_DIR,
    TRANSITIONS_PATH,
    DAILY_TASKS_PATH,
    PODCAST_PATH,

    # Кэш запросов
    QUERY_STALE_TIME,
    QUERY_GC_TIME,

    # Инструменты
    RATING_MIN,
    RATING_MAX,
    DEFAULT_RATING,
    STRENGTHS_TOP_N,
    WHEEL_MAX_FOCUS,
    WHEEL_LOWEST_HIGHLIGHT,
    HABIT_WINDOW_DAYS,
    HABIT_STREAK_BADGE,

    # Задачи дня
    Tier,
    AudienceSegment,
    DAILY_POINTS_GOAL,
    DEFAULT_EXPANDED_TIERS,

    # Сообщество
    FEATURED_SPARKS_LIMIT,
    POD_FOCUS_OPTIONS,
)

__all__ = [
    'BOT_TOKEN',
    'API_BASE_URL',
    'WEB_APP_URL',
    'SESSION_COOKIE_NAME',
    'CSRF_COOKIE_NAME',
    'CSRF_HEADER_NAME',
    'API_TIMEOUT',
    'LOG_LEVEL',
    'validate_env',
    'get_logger',
    'APP_TZ',
    'REMINDER_TIME',
    'BASE_DIR',
    'CONFIG_DIR',
    'TOOLS_DIR',
    'TRANSITIONS_PATH',
    'DAILY_TASKS_PATH',
    'PODCAST_PATH',
    'QUERY_STALE_TIME',
    'QUERY_GC_TIME',
    'RATING_MIN',
    'RATING_MAX',
    'DEFAULT_RATING',
    'STRENGTHS_TOP_N',
    'WHEEL_MAX_FOCUS',
    'WHEEL_LOWEST_HIGHLIGHT',
    'HABIT_WINDOW_DAYS',
    'HABIT_STREAK_BADGE',
    'Tier',
    'AudienceSegment',
    'DAILY_POINTS_GOAL',
    'DEFAULT_EXPANDED_TIERS',
    'FEATURED_SPARKS_LIMIT',
    'POD_FOCUS_OPTIONS',
]
