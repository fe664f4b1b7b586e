"""
Тесты реестра сервисов и согласованности с таблицей переходов.
"""

import pytest
import yaml

from config import TRANSITIONS_PATH
from core.registry import ServiceRegistry, registry
from core.services import ServiceDescriptor, CATEGORIES
from core.services_init import register_all_services


def _service(service_id, **kwargs):
    return ServiceDescriptor(id=service_id, i18n_key=f"service.{service_id}", icon="*",
                             entry_state=f"tools.{service_id}", **kwargs)


@pytest.fixture(scope="module")
def full_registry():
    if not registry.get_all():
        register_all_services()
    return registry


class TestServiceRegistry:

    def test_resolve_command_and_alias(self):
        reg = ServiceRegistry()
        reg.register(_service("daily", command="/today", commands=["/tasks"]))
        assert reg.resolve_command("today").id == "daily"
        assert reg.resolve_command("/tasks").id == "daily"
        assert reg.resolve_command("unknown") is None

    def test_duplicate_id_rejected(self):
        reg = ServiceRegistry()
        reg.register(_service("eq"))
        with pytest.raises(ValueError):
            reg.register(_service("eq"))

    def test_duplicate_command_rejected(self):
        reg = ServiceRegistry()
        reg.register(_service("eq", command="/eq"))
        with pytest.raises(ValueError):
            reg.register(_service("eq2", command="/eq"))

    def test_resolve_callback(self):
        reg = ServiceRegistry()
        reg.register(_service("wheel"))
        assert reg.resolve_callback("service:wheel").id == "wheel"
        assert reg.resolve_callback("eq:start") is None

    def test_menu_sorted_and_hidden_skipped(self, user):
        reg = ServiceRegistry()
        reg.register(_service("b", order=20))
        reg.register(_service("a", order=10))
        reg.register(_service("hidden", order=5, visible=False))
        markup = reg.build_menu(user, columns=2)
        row = markup.inline_keyboard[0]
        assert [button.callback_data for button in row] == ["service:a", "service:b"]


class TestRegisteredServices:

    def test_every_category_has_services(self, full_registry, user):
        for category in CATEGORIES:
            assert full_registry.for_user(user, category), category

    def test_entry_states_have_transitions(self, full_registry):
        with open(TRANSITIONS_PATH, encoding="utf-8") as f:
            transitions = yaml.safe_load(f)["states"]
        for service in full_registry.get_all():
            assert service.entry_state in transitions, service.entry_state
            assert "exit" in transitions[service.entry_state]["events"]

    def test_all_states_registered(self, full_registry):
        from core.machine import StateMachine
        from i18n import get_i18n
        from states.registry import register_all_states

        machine = StateMachine()
        register_all_states(machine, bot=None, backend=None, i18n=get_i18n())
        for service in full_registry.get_all():
            assert machine.get_state(service.entry_state) is not None
        for name in ("common.start", "common.menu", "common.error"):
            assert machine.get_state(name) is not None
