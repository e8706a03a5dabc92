from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Callable, List, Optional, Set

from .errors import NotificationSinkError, StoreError
from .models import ReminderEntity, notify_instant, same_minute
from .notifier import Notifier, get_notifier
from .repositories import ReminderStore

logger = logging.getLogger(__name__)


def format_body(entity: ReminderEntity) -> str:
    """Notification body: description followed by the reminder's date and time."""
    return f"{entity['description']}\nDate: {entity['date'].isoformat()}\nTime: {entity['time'].isoformat()}"


# PUBLIC_INTERFACE
class NotificationScheduler:
    """
    Decides which reminders have reached their notify minute and delivers them
    at most once.

    Per reminder: Pending -> Due (check_due matched the minute) -> Delivered
    (deliver succeeded). Delivered is terminal. `should_notify` only holds
    during the matching minute; a reminder whose notification failed is
    remembered in memory and retried by later ticks.
    """

    def __init__(self, notifier: Notifier, clock: Callable[[], datetime] = datetime.now) -> None:
        self._notifier = notifier
        self._clock = clock
        # Ids whose notification failed; retried by tick after their minute
        self._retry: Set[str] = set()

    def check_due(self, store: ReminderStore, now: Optional[datetime] = None) -> List[ReminderEntity]:
        """
        Recompute `should_notify` for every reminder: true iff its notify
        instant falls in the same local minute as `now` (date, hour and
        minute; seconds ignored) and it has not been delivered.

        Returns:
            Copies of all reminders that are due after the check.
        """
        now = now or self._clock()
        with store.exclusive():
            due: List[ReminderEntity] = []
            for item in store.list():
                if not item["did_notify"] and same_minute(notify_instant(item), now):
                    store.mark_due(item["id"])
                    due.append(store.get(item["id"]))  # type: ignore[arg-type]
                elif item["should_notify"]:
                    store.clear_due(item["id"])
        if due:
            logger.info("%d reminder(s) due at %s", len(due), now.strftime("%Y-%m-%d %H:%M"))
        return due

    def deliver(self, store: ReminderStore, reminder_id: str) -> bool:
        """
        Show the notification for a reminder, mark it delivered and persist.

        Returns:
            True if the reminder was delivered by this call. False if it does
            not exist, was already delivered, or the notification failed (it
            is then retried by later ticks of this process).
        """
        with store.exclusive():
            item = store.get(reminder_id)
            if item is None:
                self._retry.discard(reminder_id)
                logger.warning("Reminder %s not found; nothing delivered", reminder_id)
                return False
            if item["did_notify"]:
                self._retry.discard(reminder_id)
                logger.debug("Reminder %s already delivered", reminder_id)
                return False

            try:
                self._notifier.notify(item["title"], format_body(item))
            except NotificationSinkError as e:
                self._retry.add(reminder_id)
                logger.warning("Reminder %s not delivered, will retry: %s", reminder_id, e)
                return False

            self._retry.discard(reminder_id)
            store.mark_delivered(reminder_id)
            logger.info("Delivered reminder %s (%s)", reminder_id, item["title"])
            try:
                store.save()
            except StoreError as e:
                # Delivered state stays in memory; the store remains dirty
                logger.error("Delivered state of reminder %s not persisted: %s", reminder_id, e)
            return True

    def tick(self, store: ReminderStore, now: Optional[datetime] = None) -> List[str]:
        """
        One polling step: check which reminders are due, then deliver each of
        them along with any whose notification failed earlier. Return the ids
        delivered by this tick.
        """
        delivered: List[str] = []
        with store.exclusive():
            if store.dirty and not store.writes_halted:
                # Retry a save that failed earlier
                try:
                    store.save()
                except StoreError as e:
                    logger.error("Retrying save failed: %s", e)
            ids = [item["id"] for item in self.check_due(store, now)]
            ids += [i for i in sorted(self._retry) if i not in ids]
            for reminder_id in ids:
                if self.deliver(store, reminder_id):
                    delivered.append(reminder_id)
        return delivered


@lru_cache(maxsize=1)
def get_scheduler() -> NotificationScheduler:
    """Return the process-wide scheduler wired to the configured notifier."""
    return NotificationScheduler(get_notifier())
