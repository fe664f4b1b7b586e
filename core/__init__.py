"""
Ядро бота: общие компоненты.

Содержит:
- machine.py, dispatcher.py, registry.py: State Machine и роутинг разделов
- wizard.py, summaries.py: мастер самооценки и расчёт итогов
- query_cache.py, mutations.py: кеш запросов и изменяющие запросы
- daily_tasks.py, habits.py, wheel.py, swot.py, community.py, podcast.py: логика разделов
- error_classifier.py, notifications.py: ошибки API и toast-уведомления
- scheduler.py: ежедневное напоминание (APScheduler)
"""
