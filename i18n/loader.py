"""
Модуль загрузки локализации из YAML

Архитектура:
- schema.yaml: мастер-файл, у каждого листа есть en и ru

Английский: язык-источник веб-приложения, поэтому он же fallback.

Использование:
    from i18n import t

    message = t('menu.title', 'en')
    message = t('daily.completed', 'ru', points=15)
"""

import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Путь к директории i18n
I18N_DIR = Path(__file__).parent

# Языки, хранящиеся в schema.yaml
BASE_LANGUAGES = ['en', 'ru']

# Поддерживаемые языки
SUPPORTED_LANGUAGES = ['en', 'ru']

# Язык-источник и fallback
FALLBACK_LANGUAGE = 'en'


class I18n:
    """Система локализации с валидацией и fallback"""

    def __init__(self, schema_path: Optional[Path] = None):
        self.schema_path = schema_path or I18N_DIR / 'schema.yaml'
        self.schema: dict[str, Any] = {}
        self.translations: dict[str, dict[str, str]] = {}
        self._load_schema()
        self._validate()

    def _load_schema(self) -> None:
        """Загрузить schema.yaml с базовыми языками"""
        if not self.schema_path.exists():
            logger.warning(f"[i18n] Schema file not found: {self.schema_path}")
            return

        with open(self.schema_path, 'r', encoding='utf-8') as f:
            self.schema = yaml.safe_load(f) or {}

        for lang in BASE_LANGUAGES:
            self.translations[lang] = {}
            self._extract_translations(self.schema, lang, self.translations[lang])

    def _extract_translations(
        self,
        data: dict,
        lang: str,
        result: dict[str, str],
        prefix: str = ''
    ) -> None:
        """Извлечь переводы для языка из вложенной структуры schema"""
        for key, value in data.items():
            full_key = f"{prefix}{key}" if prefix else key

            if isinstance(value, dict):
                # Если есть ключ языка: это лист с переводом
                if lang in value:
                    translation = value[lang]
                    if translation:
                        result[full_key] = translation
                elif not set(value) & set(BASE_LANGUAGES):
                    self._extract_translations(value, lang, result, f"{full_key}.")

    def _validate(self) -> None:
        """Проверить полноту переводов"""
        source_keys = self.get_all_keys()
        if not source_keys:
            logger.warning("[i18n] No source translations loaded!")
            return

        for lang in self.translations:
            missing = self.get_missing_keys(lang)
            if missing:
                logger.info(
                    f"[i18n] Language '{lang}': {len(source_keys) - len(missing)}/{len(source_keys)} keys "
                    f"({len(missing)} missing)"
                )

    def t(self, key: str, lang: str = FALLBACK_LANGUAGE, **kwargs) -> str:
        """
        Получить перевод по ключу

        Args:
            key: ключ перевода (например 'menu.title')
            lang: код языка ('en', 'ru')
            **kwargs: параметры для форматирования

        Returns:
            Переведённая строка или ключ если перевод не найден
        """
        text = self.translations.get(lang, {}).get(key)

        if text is None:
            text = self.translations.get(FALLBACK_LANGUAGE, {}).get(key)
            if text is not None and lang != FALLBACK_LANGUAGE:
                logger.debug(f"[i18n] Fallback to English for key '{key}' (lang={lang})")

        if text is None:
            logger.warning(f"[i18n] Translation not found: '{key}'")
            return key

        if kwargs:
            try:
                text = text.format(**kwargs)
            except KeyError as e:
                logger.warning(f"[i18n] Missing placeholder {e} in '{key}'")

        return text

    def get_all_keys(self) -> set[str]:
        """Все ключи языка-источника"""
        return set(self.translations.get(FALLBACK_LANGUAGE, {}).keys())

    def get_missing_keys(self, lang: str) -> set[str]:
        """Недостающие ключи для языка"""
        return self.get_all_keys() - set(self.translations.get(lang, {}).keys())

    def get_stats(self) -> dict[str, dict[str, int]]:
        """Статистика по языкам"""
        total = len(self.get_all_keys())
        return {
            lang: {
                'translated': len(trans),
                'total': total,
                'missing': len(self.get_missing_keys(lang)),
            }
            for lang, trans in self.translations.items()
        }


# Глобальный экземпляр
_i18n: Optional[I18n] = None


def get_i18n() -> I18n:
    """Получить глобальный экземпляр I18n (lazy loading)"""
    global _i18n
    if _i18n is None:
        _i18n = I18n()
    return _i18n


def t(key: str, lang: str = FALLBACK_LANGUAGE, **kwargs) -> str:
    """
    Получить перевод по ключу (короткий алиас)

    Example:
        t('menu.title', 'ru')
        t('daily.completed', 'en', points=10)
    """
    return get_i18n().t(key, lang, **kwargs)


def detect_language(language_code: Optional[str]) -> str:
    """Определяет язык по коду из Telegram"""
    if not language_code:
        return FALLBACK_LANGUAGE

    code = language_code.lower()[:2]

    if code in SUPPORTED_LANGUAGES:
        return code

    # Маппинг похожих языков
    mapping = {
        'uk': 'ru',
        'be': 'ru',
        'kk': 'ru',
    }

    return mapping.get(code, FALLBACK_LANGUAGE)


def get_language_name(lang: str) -> str:
    """Возвращает название языка"""
    names = {
        'ru': '🇷🇺 Русский',
        'en': '🇬🇧 English',
    }
    return names.get(lang, lang)
