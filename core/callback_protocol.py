"""
Единый протокол callback_data для inline кнопок.

Формат: {scope}:{action}:{payload}
Примеры:
  - "service:eq"           : вход в инструмент из меню
  - "eq:rate:7"            : оценка 7 на текущий вопрос EQ
  - "daily:done:journal-entry": выполнить задачу дня
  - "pods:join:12"         : вступить в молитвенную группу

payload может содержать ":" (разбор делится максимум на 3 части).
"""

# Ограничение Telegram на callback_data
MAX_CALLBACK_BYTES = 64


def encode(scope: str, action: str, payload: str | int = "") -> str:
    """Кодирует callback_data по протоколу.

    Raises:
        ValueError: если строка длиннее 64 байт
    """
    payload = str(payload) if payload != "" else ""
    data = f"{scope}:{action}:{payload}" if payload else f"{scope}:{action}"
    if len(data.encode("utf-8")) > MAX_CALLBACK_BYTES:
        raise ValueError(f"callback_data длиннее {MAX_CALLBACK_BYTES} байт: {data}")
    return data


def decode(callback_data: str) -> tuple[str, str, str]:
    """Декодирует callback_data.

    Returns:
        (scope, action, payload); если формат не совпадает: ("", "", callback_data).
    """
    parts = callback_data.split(":", 2)
    if len(parts) == 3:
        return parts[0], parts[1], parts[2]
    if len(parts) == 2:
        return parts[0], parts[1], ""
    return "", "", callback_data


def matches(callback_data: str, scope: str) -> bool:
    """Относится ли callback к указанной области."""
    decoded_scope, _, _ = decode(callback_data)
    return decoded_scope == scope


def is_protocol(callback_data: str) -> bool:
    return ":" in callback_data
