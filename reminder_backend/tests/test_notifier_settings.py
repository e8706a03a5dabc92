import logging

import pytest

from src.api import notifier as notifier_module
from src.api.errors import NotificationSinkError
from src.api.notifier import LogNotifier, PlyerNotifier, get_notifier
from src.api.settings import get_settings


class _FakePlyer:
    def __init__(self, error=None):
        self.calls = []
        self.error = error

    def notify(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error


class TestPlyerNotifier:
    def test_passes_fields_to_backend(self, monkeypatch):
        fake = _FakePlyer()
        monkeypatch.setattr(notifier_module, "notification", fake)
        PlyerNotifier("Reminder App", app_icon="bell.png", timeout=6).notify("Dentist", "Check-up")
        assert fake.calls == [
            {
                "title": "Dentist",
                "message": "Check-up",
                "app_name": "Reminder App",
                "app_icon": "bell.png",
                "timeout": 6,
            }
        ]

    def test_backend_failure_is_wrapped(self, monkeypatch):
        monkeypatch.setattr(notifier_module, "notification", _FakePlyer(error=NotImplementedError("no backend")))
        with pytest.raises(NotificationSinkError):
            PlyerNotifier("Reminder App").notify("Dentist", "Check-up")


class TestLogNotifier:
    def test_logs_notification(self, caplog):
        with caplog.at_level(logging.INFO, logger="src.api.notifier"):
            LogNotifier().notify("Dentist", "Check-up\nDate: 2025-03-10")
        assert "Dentist" in caplog.text
        assert "Check-up | Date: 2025-03-10" in caplog.text


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in [
            "REMINDERS_FILE",
            "NOTIFY_BACKEND",
            "NOTIFY_TIMEOUT_SECONDS",
            "NOTIFY_POLL_SECONDS",
            "CORS_ALLOW_ORIGINS",
            "LOG_LEVEL",
        ]:
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.reminders_file == "./output.json"
        assert s.notify_backend == "desktop"
        assert s.notify_timeout_seconds == 6
        assert s.notify_poll_seconds == 1.0
        assert s.cors_allow_origins == ["*"]
        assert s.log_level == "INFO"

    def test_invalid_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("NOTIFY_BACKEND", "carrier-pigeon")
        monkeypatch.setenv("NOTIFY_TIMEOUT_SECONDS", "soon")
        monkeypatch.setenv("NOTIFY_POLL_SECONDS", "-5")
        monkeypatch.setenv("LOG_LEVEL", "loud")
        s = get_settings()
        assert s.notify_backend == "desktop"
        assert s.notify_timeout_seconds == 6
        assert s.notify_poll_seconds == 0.0
        assert s.log_level == "INFO"

    def test_origins_list(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test,")
        assert get_settings().cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_notifier_factory(self, monkeypatch):
        monkeypatch.setenv("NOTIFY_BACKEND", "log")
        assert isinstance(get_notifier(), LogNotifier)
        monkeypatch.setenv("NOTIFY_BACKEND", "desktop")
        assert isinstance(get_notifier(), PlyerNotifier)
