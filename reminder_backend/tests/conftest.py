import os
import tempfile
from datetime import date, datetime, time
from typing import List, Tuple

import pytest

# Keep tests off the desktop and away from the working directory's reminder file
os.environ.setdefault("NOTIFY_BACKEND", "log")
os.environ.setdefault("NOTIFY_POLL_SECONDS", "0")
os.environ.setdefault("REMINDERS_FILE", os.path.join(tempfile.mkdtemp(), "output.json"))

from src.api.errors import NotificationSinkError  # noqa: E402
from src.api.notifier import Notifier  # noqa: E402
from src.api.repositories import ReminderStore  # noqa: E402
from src.api.schemas import ReminderCreate  # noqa: E402

DAY = date(2025, 3, 10)


class RecordingNotifier(Notifier):
    """Collects notifications instead of showing them."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, str]] = []

    def notify(self, title: str, message: str) -> None:
        self.sent.append((title, message))


class FailingNotifier(Notifier):
    def __init__(self) -> None:
        self.attempts = 0

    def notify(self, title: str, message: str) -> None:
        self.attempts += 1
        raise NotificationSinkError("no notification daemon")


def make_reminder(
    title="Dentist",
    description="Check-up",
    day=DAY,
    at=time(14, 0),
    notify_when=1,
) -> ReminderCreate:
    return ReminderCreate(title=title, description=description, date=day, time=at, notify_when=notify_when)


@pytest.fixture
def reminders_path(tmp_path):
    return str(tmp_path / "output.json")


@pytest.fixture
def store(reminders_path):
    return ReminderStore.load(reminders_path)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def fixed_now():
    return datetime(2025, 3, 10, 13, 0, 0)
