"""
Интеграции с внешними сервисами.

- telegram/: клавиатуры и утилиты Telegram
"""
