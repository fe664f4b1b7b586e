"""
Клавиатуры и утилиты Telegram.
"""
