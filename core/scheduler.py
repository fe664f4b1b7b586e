"""
Планировщик: ежедневное напоминание о задачах дня и уборка кеша.

Напоминание уходит пользователям, которые не отключили его (/reminders)
и у которых есть сессия веб-приложения.
"""

import logging
import os
from typing import Optional

import aiohttp
from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from clients.api import ApiError
from config import APP_TZ, REMINDER_TIME, DAILY_POINTS_GOAL
from core.daily_tasks import DailyProgress, available_tasks, load_task_library, next_essential, today_iso
from core.users import UserStore
from i18n import t

logger = logging.getLogger(__name__)

# Уборка неиспользуемых записей кеша (минуты)
CACHE_GC_INTERVAL_MINUTES = 10

# --- Module state ---
_scheduler: Optional[AsyncIOScheduler] = None


def parse_reminder_time(value: str) -> tuple[int, int]:
    """'08:00' → (8, 0)."""
    hour, _, minute = value.partition(":")
    hour, minute = int(hour), int(minute or 0)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"REMINDER_TIME вне диапазона: {value}")
    return hour, minute


def reminder_text(user, progress: DailyProgress, library) -> str:
    """Текст напоминания: очки за день и следующая главная задача."""
    lang = user.language
    lines = [
        t('reminders.daily_title', lang),
        t('daily.points', lang, points=progress.total_points, goal=DAILY_POINTS_GOAL),
    ]
    task = next_essential(available_tasks(library, user.audience_segment), progress)
    if task is not None:
        lines.append(t('reminders.next_task', lang, task=task.title_for(lang)))
    lines.append(t('reminders.open_today', lang))
    return "\n".join(lines)


async def send_daily_reminders(bot: Bot, backend, store: UserStore) -> int:
    """Разослать напоминания. Returns: сколько отправлено."""
    day = today_iso()
    library = load_task_library()
    sent = 0
    for user in store.with_reminders():
        if not backend.api.has_session(user.chat_id):
            continue
        try:
            payload = await backend.daily_progress(user.chat_id, day, force=True)
            progress = DailyProgress.from_payload(payload, day)
            await bot.send_message(user.chat_id, reminder_text(user, progress, library))
            sent += 1
        except ApiError as e:
            logger.warning(f"[Scheduler] Прогресс недоступен для {user.chat_id}: {e}")
        except (aiohttp.ClientError, TimeoutError, TelegramAPIError) as e:
            logger.error(f"[Scheduler] Напоминание не отправлено {user.chat_id}: {e}")
    logger.info(f"[Scheduler] Напоминания отправлены: {sent}")
    return sent


def collect_cache_garbage(cache) -> None:
    removed = cache.gc()
    if removed:
        logger.debug(f"[Scheduler] Кеш: удалено {removed} записей")


def init_scheduler(bot: Bot, backend, store: UserStore) -> Optional[AsyncIOScheduler]:
    """Инициализировать и вернуть планировщик.

    Args:
        bot: Telegram bot
        backend: clients.backend.BackendAPI
        store: хранилище пользователей чата
    """
    # DISABLE_SCHEDULER=true: отключает scheduler (для тестовых инстансов)
    if os.getenv("DISABLE_SCHEDULER", "false").lower() == "true":
        logger.info("[Scheduler] DISABLE_SCHEDULER=true: планировщик отключён")
        return None

    global _scheduler
    hour, minute = parse_reminder_time(REMINDER_TIME)

    _scheduler = AsyncIOScheduler(timezone=APP_TZ)
    _scheduler.add_job(send_daily_reminders, 'cron', hour=hour, minute=minute, args=[bot, backend, store])
    _scheduler.add_job(collect_cache_garbage, 'interval', minutes=CACHE_GC_INTERVAL_MINUTES, args=[backend.cache])
    _scheduler.start()

    logger.info(f"[Scheduler] Планировщик инициализирован (напоминание в {hour:02d}:{minute:02d})")
    return _scheduler


def get_scheduler() -> Optional[AsyncIOScheduler]:
    return _scheduler
