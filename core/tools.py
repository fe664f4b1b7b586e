"""
Определения инструментов самооценки (config/tools/*.yaml) и форматирование.

Содержимое инструментов: статические данные: вопросы, домены, сферы.
Файлы читаются один раз и кешируются на время жизни процесса.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

import yaml

from config import TOOLS_DIR, RATING_MAX

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> dict:
    """Прочитать YAML-файл данных."""
    if not path.exists():
        raise FileNotFoundError(f"Файл данных не найден: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


@lru_cache(maxsize=None)
def load_tool(tool_id: str) -> dict:
    """Загрузить инструмент из YAML по ID.

    Args:
        tool_id: 'eq', 'strengths', 'styles', 'wheel', 'swot'
    """
    data = load_yaml(TOOLS_DIR / f"{tool_id}.yaml")
    logger.debug(f"[Tools] Загружен инструмент {tool_id}")
    return data


def localized(field: Any, lang: str, default: str = '') -> str:
    """Строка на языке пользователя из поля {en: ..., ru: ...}.

    Простая строка возвращается как есть; нет языка: английский.
    """
    if field is None:
        return default
    if isinstance(field, str):
        return field
    return field.get(lang) or field.get('en') or default


# --- EQ ---

def eq_question_keys(tool: dict) -> list[str]:
    """Ключи вопросов EQ в порядке показа: "<domain>:<index>"."""
    return [
        f"{domain['key']}:{i}"
        for domain in tool['domains']
        for i in range(len(domain['questions']))
    ]


def eq_question(tool: dict, key: str) -> tuple[dict, dict]:
    """Домен и вопрос по ключу "<domain>:<index>"."""
    domain_key, index = key.rsplit(':', 1)
    domain = find_by_key(tool['domains'], domain_key)
    if domain is None:
        raise KeyError(f"Неизвестный домен EQ: {domain_key}")
    return domain, domain['questions'][int(index)]


def practice_key(domain_key: str, index: int) -> str:
    return f"{domain_key}-{index}"


# --- общие ---

def find_by_key(items: list[dict], key: str) -> Optional[dict]:
    for item in items:
        if item.get('key') == key:
            return item
    return None


def format_progress_bar(current: int, total: int, length: int = 12) -> str:
    """Прогресс-бар для текущего вопроса.

    Args:
        current: текущий вопрос (1-based)
        total: всего вопросов
        length: длина полоски в символах
    """
    if total <= 0:
        return "░" * length
    filled = round(current / total * length)
    return "▓" * filled + "░" * (length - filled)


def format_score_bar(score: float, max_score: int = RATING_MAX) -> str:
    """Визуальная полоска баллов 0..max_score."""
    filled = max(0, min(max_score, round(score)))
    return "█" * filled + "░" * (max_score - filled)
