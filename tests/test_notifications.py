"""Notification permission gate."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from conftest import FakePrompter, make_store
from eggprofit.models.launch import PersistedLaunchState
from eggprofit.notifications import PROMPT_COOLDOWN, NotificationPermissionGate, should_prompt

NOW = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)


class TestShouldPrompt:
    def test_fresh_state_prompts(self):
        assert should_prompt(PersistedLaunchState(), NOW) is True

    @pytest.mark.parametrize("field", ["accepted_notifications", "system_declined_notifications"])
    def test_decided_flags_suppress(self, field):
        assert should_prompt(PersistedLaunchState(**{field: True}), NOW) is False

    def test_within_cooldown(self):
        state = PersistedLaunchState(last_notification_prompt_at=NOW - timedelta(days=1))
        assert should_prompt(state, NOW) is False

    def test_cooldown_elapsed(self):
        state = PersistedLaunchState(last_notification_prompt_at=NOW - timedelta(days=3, seconds=1))
        assert should_prompt(state, NOW) is True

    def test_cooldown_elapsed_but_already_accepted(self):
        state = PersistedLaunchState(
            last_notification_prompt_at=NOW - timedelta(days=10), accepted_notifications=True,
        )
        assert should_prompt(state, NOW) is False

    def test_naive_timestamp_is_utc(self):
        state = PersistedLaunchState(last_notification_prompt_at=datetime(2026, 10, 18, 9, 0))
        assert should_prompt(state, NOW) is False

    def test_custom_cooldown(self):
        state = PersistedLaunchState(last_notification_prompt_at=NOW - timedelta(hours=2))
        assert should_prompt(state, NOW, cooldown=timedelta(hours=1)) is True
        assert PROMPT_COOLDOWN == timedelta(days=3)


class TestRunPrompt:
    @pytest.mark.asyncio
    async def test_skip_records_decline_time(self):
        store = make_store()
        prompter = FakePrompter(accept=False)
        assert await NotificationPermissionGate(store).run_prompt(prompter) is None
        assert prompter.permission_requests == 0
        assert store.state.last_notification_prompt_at is not None
        assert store.state.accepted_notifications is False

    @pytest.mark.asyncio
    async def test_grant(self):
        store = make_store()
        gate = NotificationPermissionGate(store)
        assert await gate.run_prompt(FakePrompter(accept=True, grant=True)) is True
        assert store.state.accepted_notifications is True
        assert gate.should_prompt() is False

    @pytest.mark.asyncio
    async def test_system_denial(self):
        store = make_store()
        gate = NotificationPermissionGate(store)
        assert await gate.run_prompt(FakePrompter(accept=True, grant=False)) is False
        assert store.state.accepted_notifications is False
        assert store.state.system_declined_notifications is True
        assert gate.should_prompt() is False

    @pytest.mark.asyncio
    async def test_timeout_counts_as_decline(self):
        class SlowPrompter(FakePrompter):
            async def ask(self) -> bool:
                await asyncio.sleep(10)
                return True

        store = make_store()
        prompter = SlowPrompter()
        gate = NotificationPermissionGate(store, timeout=0.01)
        assert await gate.run_prompt(prompter) is None
        assert prompter.permission_requests == 0
        assert store.state.last_notification_prompt_at is not None

    @pytest.mark.asyncio
    async def test_failing_prompt_counts_as_decline(self):
        class FailingPrompter(FakePrompter):
            async def ask(self) -> bool:
                raise RuntimeError("prompt could not be shown")

        store = make_store()
        prompter = FailingPrompter()
        assert await NotificationPermissionGate(store).run_prompt(prompter) is None
        assert prompter.permission_requests == 0
        assert store.state.last_notification_prompt_at is not None

    @pytest.mark.asyncio
    async def test_decline_starts_cooldown(self):
        store = make_store()
        gate = NotificationPermissionGate(store)
        await gate.record_decline(NOW)
        assert gate.should_prompt(NOW + timedelta(days=2)) is False
        assert gate.should_prompt(NOW + timedelta(days=4)) is True
