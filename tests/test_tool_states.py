"""
Сценарии стейтов-инструментов с фейковыми Telegram и бэкендом.

Старые сообщения сохраняют свои кнопки, поэтому отдельно проверяется,
что нажатие не в своей фазе ничего не сохраняет.
"""

import asyncio

import aiohttp
import pytest

from clients.api import ApiError
from core.daily_tasks import today_iso
from i18n import get_i18n
from states.tools import EqState, StrengthsState, StylesState, WheelState, HabitsState, SwotState
from states.tools.base import format_insights

SAVED = "✅ Saved!"
SAVE_FAILED = "⚠️ Failed to save. Please try again."


class FakeBot:
    def __init__(self):
        self.sent = []

    async def send_message(self, chat_id, text, **kwargs):
        self.sent.append(text)


class FakeMessage:
    def __init__(self):
        self.edits = []

    async def edit_text(self, text, **kwargs):
        self.edits.append((text, kwargs.get('reply_markup')))


class FakeText:
    def __init__(self, text):
        self.text = text


class FakeCallback:
    def __init__(self, data):
        self.data = data
        self.message = FakeMessage()
        self.answers = []

    async def answer(self, text=None, show_alert=False):
        self.answers.append(text)

    @property
    def screen(self):
        return self.message.edits[-1][0]


class FakeBackend:
    """Бэкенд в памяти. fail: True (HTTP 500) или исключение для всех записей."""

    def __init__(self, fail=False, session=None, wheel=None, habits=None, logs=None,
                 launch_sessions=None, launch_detail=None):
        self.fail = fail
        self.session = session
        self.wheel = wheel
        self.habits = habits or []
        self.logs = logs or {}
        self.launch = launch_sessions or []
        self.launch_detail = launch_detail
        self.saved = []
        self.analyzed = []

    async def _write(self, name, *args):
        if isinstance(self.fail, BaseException):
            raise self.fail
        if self.fail:
            raise ApiError(500, "down")
        self.saved.append((name, *args))

    # --- чтение ---

    async def ensure_session(self, chat_id):
        return self.session or {'id': 7}

    async def current_session(self, chat_id):
        return self.session

    async def get_wheel(self, chat_id, session_id):
        return self.wheel

    async def list_habits(self, chat_id, session_id):
        return self.habits

    async def habit_logs(self, chat_id, habit_id):
        return self.logs.get(habit_id, [])

    async def launch_sessions(self, chat_id):
        return self.launch

    async def launch_session(self, chat_id, session_id):
        return self.launch_detail

    async def analyze(self, chat_id, session_id, tool, data):
        self.analyzed.append(tool)
        return {}

    # --- запись ---

    async def save_strengths(self, chat_id, session_id, payload):
        await self._write('save_strengths', session_id, payload)

    async def save_eq(self, chat_id, session_id, payload):
        await self._write('save_eq', session_id, payload)

    async def save_style(self, chat_id, session_id, payload):
        await self._write('save_style', session_id, payload)

    async def save_wheel(self, chat_id, session_id, payload):
        await self._write('save_wheel', session_id, payload)

    async def create_habit(self, chat_id, session_id, title, frequency, target_per_week):
        await self._write('create_habit', session_id, title, frequency, target_per_week)

    async def delete_habit(self, chat_id, session_id, habit_id):
        await self._write('delete_habit', session_id, habit_id)

    async def log_habit(self, chat_id, habit_id, day, completed):
        await self._write('log_habit', habit_id, day, completed)

    async def save_swot(self, chat_id, session_id, swot):
        await self._write('save_swot', session_id, swot)


def _press(state, user, data):
    callback = FakeCallback(data)
    event = asyncio.run(state.handle_callback(user, callback))
    return callback, event


def _type(state, user, text):
    return asyncio.run(state.handle(user, FakeText(text)))


def _make(state_cls, backend=None):
    bot = FakeBot()
    backend = backend or FakeBackend()
    return state_cls(bot, backend, get_i18n()), bot, backend


# =========================================
# Character Strengths
# =========================================

def _through_questions(state, user):
    asyncio.run(state.enter(user))
    _press(state, user, "str:start")
    _press(state, user, "str:rate:9")
    for _ in state.keys:
        _press(state, user, "str:next")


class TestStrengthsFlow:

    def test_last_next_preselects_top5(self, user):
        state, _, _ = _make(StrengthsState)
        _through_questions(state, user)
        data = state._get_data(user)
        assert data.wizard.phase == "top5"
        assert data.top5[0] == state.keys[0]
        assert len(data.top5) == 5

    def test_save_requires_exactly_five(self, user):
        state, _, backend = _make(StrengthsState)
        _through_questions(state, user)
        _press(state, user, f"str:toggle:{state.keys[0]}")
        callback, _ = _press(state, user, "str:save")
        assert callback.answers == ["Select exactly 5 strengths."]
        assert backend.saved == []

    def test_toggle_limit(self, user):
        state, _, _ = _make(StrengthsState)
        _through_questions(state, user)
        callback, _ = _press(state, user, f"str:toggle:{state.keys[-1]}")
        assert callback.answers == ["You can choose up to 5."]

    def test_save_success_shows_results(self, user):
        state, _, backend = _make(StrengthsState)
        _through_questions(state, user)
        callback, _ = _press(state, user, "str:save")

        name, session_id, payload = backend.saved[0]
        assert (name, session_id) == ('save_strengths', 7)
        first = payload['strengths'][0]
        assert first == {'strengthKey': state.keys[0], 'rank': 1, 'selfRating': 9, 'isSignature': True}
        assert callback.answers == [SAVED]
        assert state._get_data(user).wizard.phase == "results"

    def test_save_failure_keeps_selection(self, user):
        state, _, _ = _make(StrengthsState, FakeBackend(fail=True))
        _through_questions(state, user)
        callback, _ = _press(state, user, "str:save")
        assert callback.answers == [SAVE_FAILED]
        data = state._get_data(user)
        assert data.wizard.phase == "top5"
        assert len(data.top5) == 5

    def test_back_from_intro_exits(self, user):
        state, _, _ = _make(StrengthsState)
        asyncio.run(state.enter(user))
        _, event = _press(state, user, "str:back")
        assert event == "exit"

    def test_foreign_scope_ignored(self, user):
        state, _, _ = _make(StrengthsState)
        asyncio.run(state.enter(user))
        callback, event = _press(state, user, "eq:start")
        assert event is None
        assert state._get_data(user).wizard.phase == "intro"

    def test_stale_toggle_and_save_from_intro(self, user):
        state, _, backend = _make(StrengthsState)
        asyncio.run(state.enter(user))
        _press(state, user, f"str:toggle:{state.keys[0]}")
        _press(state, user, "str:save")
        assert state._get_data(user).top5 == []
        assert backend.saved == []

    def test_coach_only_after_save(self, user):
        state, _, backend = _make(StrengthsState)
        _through_questions(state, user)
        _press(state, user, "str:coach")
        assert backend.analyzed == []


# =========================================
# EQ Micro-Skills
# =========================================

def _eq_to_results(state, user, rating=4):
    asyncio.run(state.enter(user))
    _press(state, user, "eq:start")
    for _ in state._get_data(user).wizard.question_keys:
        _press(state, user, f"eq:rate:{rating}")
        _press(state, user, "eq:next")


class TestEqFlow:

    def test_next_without_rating(self, user):
        state, _, _ = _make(EqState)
        asyncio.run(state.enter(user))
        _press(state, user, "eq:start")
        callback, _ = _press(state, user, "eq:next")
        assert callback.answers == ["Choose an answer first."]
        assert state._get_data(user).wizard.index == 0

    def test_results_hold_domain_averages(self, user):
        state, _, _ = _make(EqState)
        _eq_to_results(state, user, rating=4)
        wizard = state._get_data(user).wizard
        assert wizard.phase == "results"
        assert set(wizard.summary) == {domain['key'] for domain in state.tool['domains']}
        assert set(wizard.summary.values()) == {4.0}

    def test_save_sends_scores_and_practices(self, user):
        state, _, backend = _make(EqState)
        _eq_to_results(state, user, rating=4)
        _press(state, user, "eq:practice")
        _press(state, user, "eq:toggle:self_awareness-0")
        callback, _ = _press(state, user, "eq:save")

        name, session_id, payload = backend.saved[0]
        assert (name, session_id) == ('save_eq', 7)
        assert payload['practices'] == ['self_awareness-0']
        assert payload['scores'] == state._get_data(user).wizard.summary
        assert callback.answers == [SAVED]

    def test_save_needs_a_practice(self, user):
        state, _, backend = _make(EqState)
        _eq_to_results(state, user)
        _press(state, user, "eq:practice")
        callback, _ = _press(state, user, "eq:save")
        assert callback.answers == ["Select at least one practice."]
        assert backend.saved == []

    def test_unknown_practice_ignored(self, user):
        state, _, _ = _make(EqState)
        _eq_to_results(state, user)
        _press(state, user, "eq:practice")
        _press(state, user, "eq:toggle:nonexistent-9")
        assert state._get_data(user).practices == []

    def test_practice_buttons_from_intro_do_nothing(self, user):
        state, _, backend = _make(EqState)
        asyncio.run(state.enter(user))
        _press(state, user, "eq:practice")
        _press(state, user, "eq:toggle:self_awareness-0")
        callback, _ = _press(state, user, "eq:save")

        data = state._get_data(user)
        assert data.wizard.phase == "intro"
        assert data.practices == []
        assert callback.answers == [None]
        assert backend.saved == []

    def test_old_results_message_after_reentry(self, user):
        state, _, backend = _make(EqState)
        _eq_to_results(state, user)
        asyncio.run(state.enter(user))
        _press(state, user, "eq:practice")
        _press(state, user, "eq:toggle:self_awareness-0")
        _press(state, user, "eq:save")
        assert state._get_data(user).wizard.summary is None
        assert backend.saved == []

    def test_back_to_questions_blocks_practice(self, user):
        state, _, _ = _make(EqState)
        _eq_to_results(state, user)
        _press(state, user, "eq:back")
        _press(state, user, "eq:practice")
        assert state._get_data(user).wizard.phase == "assessment"

    @pytest.mark.parametrize("error", [asyncio.TimeoutError(), aiohttp.ClientConnectionError()])
    def test_network_failure_is_a_toast(self, user, error):
        state, _, _ = _make(EqState, FakeBackend(fail=error))
        _eq_to_results(state, user)
        _press(state, user, "eq:practice")
        _press(state, user, "eq:toggle:self_awareness-0")
        callback, event = _press(state, user, "eq:save")
        assert event is None
        assert callback.answers == [SAVE_FAILED]
        assert state._get_data(user).wizard.phase == "practice"


# =========================================
# Communication Styles
# =========================================

def _styles_answer_all(state, user, style="driver"):
    asyncio.run(state.enter(user))
    _press(state, user, "sty:start")
    callback = None
    for _ in state.question_keys:
        _press(state, user, f"sty:pick:{style}")
        callback, _ = _press(state, user, "sty:next")
    return callback


class TestStylesFlow:

    def test_last_answer_saves_profile(self, user):
        state, _, backend = _make(StylesState)
        callback = _styles_answer_all(state, user, "driver")

        name, session_id, payload = backend.saved[0]
        assert (name, session_id) == ('save_style', 7)
        assert payload['primaryStyle'] == "driver"
        assert payload['secondaryStyle'] == "expressive"
        assert payload['scores']['driver'] == len(state.question_keys)
        assert callback.answers == [SAVED]
        assert state._get_data(user).phase == "results"

    def test_failed_save_stays_on_last_question(self, user):
        state, _, backend = _make(StylesState, FakeBackend(fail=True))
        callback = _styles_answer_all(state, user)

        wizard = state._get_data(user)
        assert callback.answers == [SAVE_FAILED]
        assert wizard.phase == "quiz"
        assert wizard.is_last_question
        assert backend.saved == []

    def test_unknown_style_ignored(self, user):
        state, _, _ = _make(StylesState)
        asyncio.run(state.enter(user))
        _press(state, user, "sty:start")
        _press(state, user, "sty:pick:bogus")
        assert not state._get_data(user).has_answer()

    def test_coach_before_results_ignored(self, user):
        state, _, backend = _make(StylesState)
        asyncio.run(state.enter(user))
        _press(state, user, "sty:coach")
        assert backend.analyzed == []


# =========================================
# Wheel of Life
# =========================================

def _wheel_rate_all(state, user, score=5):
    for key in state.categories:
        _press(state, user, f"whl:cat:{key}")
        _press(state, user, f"whl:rate:{score}")


class TestWheelFlow:

    def test_prefill_from_last_save(self, user):
        saved = {
            'categories': [{'categoryKey': 'health_energy', 'score': 3, 'notes': 'walk_daily *more'}],
            'focusAreas': ['health_energy'],
        }
        state, bot, _ = _make(WheelState, FakeBackend(session={'id': 7}, wheel=saved))
        asyncio.run(state.enter(user))

        data = state._get_data(user)
        assert data.board.scores == {'health_energy': 3}
        assert data.board.focus == ['health_energy']
        assert data.selected == 'relationships'
        assert "📝 walk\\_daily \\*more" in bot.sent[-1]
        assert "_walk_daily" not in bot.sent[-1]

    def test_note_text_is_escaped(self, user):
        state, _, _ = _make(WheelState)
        asyncio.run(state.enter(user))
        _press(state, user, "whl:note")
        _type(state, user, "less *screen_time")
        callback, _ = _press(state, user, f"whl:cat:{state.categories[0]}")
        assert "📝 less \\*screen\\_time" in callback.screen

    def test_focus_locked_until_all_scored(self, user):
        state, _, _ = _make(WheelState)
        asyncio.run(state.enter(user))
        _press(state, user, "whl:rate:6")
        callback, _ = _press(state, user, "whl:next")
        assert callback.answers == ["Rate every area first."]
        assert state._get_data(user).board.phase == "assess"

    def test_focus_and_save_ignored_while_assessing(self, user):
        state, _, backend = _make(WheelState)
        asyncio.run(state.enter(user))
        _press(state, user, "whl:focus:finances")
        _press(state, user, "whl:save")
        assert state._get_data(user).board.focus == []
        assert backend.saved == []

    def test_at_most_three_focus_areas(self, user):
        state, _, _ = _make(WheelState)
        asyncio.run(state.enter(user))
        _wheel_rate_all(state, user)
        _press(state, user, "whl:next")
        for key in state.categories[:3]:
            _press(state, user, f"whl:focus:{key}")
        callback, _ = _press(state, user, f"whl:focus:{state.categories[3]}")
        assert callback.answers == ["You can choose up to 3 areas."]
        assert state._get_data(user).board.focus == state.categories[:3]

    def test_save_then_hand_off_to_habits(self, user):
        state, _, backend = _make(WheelState)
        asyncio.run(state.enter(user))
        _wheel_rate_all(state, user, score=7)
        _press(state, user, "whl:next")

        _, event = _press(state, user, "whl:habits")
        assert event is None

        _press(state, user, "whl:focus:finances")
        callback, _ = _press(state, user, "whl:save")
        name, session_id, payload = backend.saved[0]
        assert name == 'save_wheel'
        assert payload['focusAreas'] == ['finances']
        assert len(payload['categories']) == len(state.categories)
        assert callback.answers == [SAVED]

        _, event = _press(state, user, "whl:habits")
        assert event == "habits"

    def test_save_needs_focus_area(self, user):
        state, _, backend = _make(WheelState)
        asyncio.run(state.enter(user))
        _wheel_rate_all(state, user)
        _press(state, user, "whl:next")
        callback, _ = _press(state, user, "whl:save")
        assert callback.answers == ["Choose at least one focus area."]
        assert backend.saved == []


# =========================================
# Vision Habits
# =========================================

class TestHabitsFlow:

    def _backend(self, **kwargs):
        today = today_iso()
        return FakeBackend(
            session={'id': 7},
            habits=[{'id': 3, 'title': 'Pray_daily *x'}],
            logs={3: [{'date': today, 'completed': True}]},
            **kwargs,
        )

    def test_list_escapes_title(self, user):
        state, bot, _ = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        assert "📌 Pray\\_daily \\*x" in bot.sent[-1]

    def test_create_habit(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "hab:new")
        _type(state, user, "Read psalms")
        callback, _ = _press(state, user, "hab:create")

        assert backend.saved == [('create_habit', 7, 'Read psalms', 'daily', 7)]
        assert callback.answers == ["✅ Habit created!"]
        data = state._get_data(user)
        assert data.view == "list"
        assert data.form.title == ""

    def test_old_create_button_does_not_duplicate(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "hab:new")
        _type(state, user, "Read psalms")
        _press(state, user, "hab:create")
        _press(state, user, "hab:create")
        assert len(backend.saved) == 1

    def test_create_needs_title(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "hab:new")
        callback, _ = _press(state, user, "hab:create")
        assert callback.answers == ["Send the habit title first."]
        assert backend.saved == []

    def test_weekly_target(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "hab:new")
        _press(state, user, "hab:freq:weekly")
        _press(state, user, "hab:target:3")
        _type(state, user, "Fast")
        _press(state, user, "hab:create")
        assert backend.saved == [('create_habit', 7, 'Fast', 'weekly', 3)]

    def test_log_toggles_current_mark(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        day = today_iso()
        _press(state, user, f"hab:log:3:{day}")
        assert backend.saved == [('log_habit', 3, day, False)]

    def test_log_failure_is_a_toast(self, user):
        state, _, _ = _make(HabitsState, self._backend(fail=aiohttp.ClientConnectionError()))
        asyncio.run(state.enter(user))
        callback, event = _press(state, user, f"hab:log:3:{today_iso()}")
        assert event is None
        assert callback.answers[0] == "⚠️ Failed to update the day."

    def test_delete(self, user):
        state, _, backend = _make(HabitsState, self._backend())
        asyncio.run(state.enter(user))
        callback, _ = _press(state, user, "hab:del:3")
        assert backend.saved == [('delete_habit', 7, 3)]
        assert callback.answers[0] == "✅ Habit deleted."


# =========================================
# SWOT Builder
# =========================================

class TestSwotFlow:

    def _backend(self, items=None, **kwargs):
        swot = {'strengths': items if items is not None else [{'id': 'strengths-1', 'item': 'Kind_hearted'}]}
        return FakeBackend(
            launch_sessions=[{'id': 11}],
            launch_detail={'tools': {'swot': swot}},
            **kwargs,
        )

    def test_without_launch_session_links_to_web(self, user):
        state, bot, _ = _make(SwotState, FakeBackend())
        asyncio.run(state.enter(user))
        assert state._get_data(user) is None
        assert len(bot.sent) == 1

    def test_added_item_marks_unsaved(self, user):
        state, _, _ = _make(SwotState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "swt:q:strengths")
        _type(state, user, "Prayer team")
        callback, _ = _press(state, user, "swt:back")

        board = state._get_data(user).board
        assert board.total == 2
        assert board.has_changes
        assert "Unsaved changes" in callback.screen
        assert "Kind\\_hearted" in callback.screen

    def test_save_sends_whole_board(self, user):
        state, _, backend = _make(SwotState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "swt:q:strengths")
        _type(state, user, "Prayer team")
        _press(state, user, "swt:back")
        callback, _ = _press(state, user, "swt:save")

        name, session_id, payload = backend.saved[0]
        assert (name, session_id) == ('save_swot', 11)
        assert [item['item'] for item in payload['strengths']] == ['Kind_hearted', 'Prayer team']
        assert payload['weaknesses'] == []
        assert callback.answers == [SAVED]
        assert not state._get_data(user).board.has_changes

    def test_failed_save_keeps_unsaved_flag(self, user):
        state, _, _ = _make(SwotState, self._backend(fail=True))
        asyncio.run(state.enter(user))
        _press(state, user, "swt:q:threats")
        _type(state, user, "Burnout")
        _press(state, user, "swt:back")
        callback, _ = _press(state, user, "swt:save")
        assert callback.answers == [SAVE_FAILED]
        assert state._get_data(user).board.has_changes

    def test_reflection_shown_outside_italics(self, user):
        items = [{'id': 'strengths-1', 'item': 'Kind', 'faithReflection': "God's *grace_"}]
        state, _, _ = _make(SwotState, self._backend(items=items))
        asyncio.run(state.enter(user))
        callback, _ = _press(state, user, "swt:q:strengths")
        assert "🙏 God's \\*grace\\_" in callback.screen
        assert "_God" not in callback.screen

    def test_reflection_for_removed_item_ignored(self, user):
        state, _, _ = _make(SwotState, self._backend())
        asyncio.run(state.enter(user))
        _press(state, user, "swt:q:strengths")
        _press(state, user, "swt:rm:strengths-1")
        _press(state, user, "swt:refl:strengths-1")
        assert state._get_data(user).reflecting is None


def test_coach_encouragement_not_in_italics():
    text = format_insights({'encouragement': 'Keep_going *'}, lambda key: key)
    assert "💛 Keep\\_going \\*" in text
    assert "_Keep" not in text
