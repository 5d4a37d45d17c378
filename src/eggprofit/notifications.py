"""
Notification permission gate.

Decides from persisted flags and a cooldown whether to prompt, and records
the outcome. Never blocks forward progress longer than one user interaction.
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

from eggprofit.models.launch import PersistedLaunchState
from eggprofit.storage import LaunchStateStore

logger = logging.getLogger(__name__)

PROMPT_COOLDOWN = timedelta(days=3)


class NotificationPrompter(Protocol):
    async def ask(self) -> bool:
        """Show the custom prompt; True if the user chose to allow."""
        ...

    async def request_permission(self) -> bool:
        """Run the system permission request; True if granted."""
        ...


def should_prompt(
    state: PersistedLaunchState, now: datetime, cooldown: timedelta = PROMPT_COOLDOWN,
) -> bool:
    last = state.last_notification_prompt_at
    if last is not None:
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        if now - last < cooldown:
            return False
    if state.accepted_notifications or state.system_declined_notifications:
        return False
    return True


class NotificationPermissionGate:
    def __init__(self, store: LaunchStateStore, cooldown: timedelta = PROMPT_COOLDOWN,
                 timeout: Optional[float] = None):
        self._store = store
        self._cooldown = cooldown
        self._timeout = timeout

    def should_prompt(self, now: Optional[datetime] = None) -> bool:
        return should_prompt(self._store.state, now or datetime.now(timezone.utc), self._cooldown)

    async def record_decline(self, now: Optional[datetime] = None) -> None:
        await self._store.update(last_notification_prompt_at=now or datetime.now(timezone.utc))

    async def record_permission_result(self, granted: bool) -> None:
        if granted:
            await self._store.update(accepted_notifications=True)
        else:
            await self._store.update(accepted_notifications=False, system_declined_notifications=True)

    async def run_prompt(self, prompter: NotificationPrompter) -> Optional[bool]:
        """Drive one prompt interaction. Returns the permission outcome, or
        None when the user skipped (or the prompt timed out)."""
        try:
            accepted = await asyncio.wait_for(prompter.ask(), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.info("Notification prompt timed out, treating as skipped")
            accepted = False
        except Exception as e:
            logger.warning(f"Notification prompt failed, treating as skipped: {e}")
            accepted = False
        if not accepted:
            await self.record_decline()
            return None
        granted = await prompter.request_permission()
        await self.record_permission_result(granted)
        logger.info(f"Notification permission granted={granted}")
        return granted
