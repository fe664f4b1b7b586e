"""
Форматирование текста для Telegram (parse_mode="Markdown").

Пользовательский и серверный текст вставляется в разметку экранов,
поэтому служебные символы Markdown экранируются.
"""

import re

_MARKDOWN_SPECIAL = re.compile(r"([_*`\[])")


def escape_md(text) -> str:
    """Экранировать _ * ` [ для legacy Markdown.

    Результат ставится вне *...* и _..._: внутри сущности legacy Markdown
    экранирование не поддерживает.
    """
    if text is None:
        return ""
    return _MARKDOWN_SPECIAL.sub(r"\\\1", str(text))
