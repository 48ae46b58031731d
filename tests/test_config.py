"""
Unit tests — settings parsing (config.py) and sink selection (main.py).
"""
from __future__ import annotations

from registry.config import Settings
from registry.services.event_service import LoggingEventSink, TelegramEventSink


class TestDatabaseUrl:
    def test_postgresql_prefix_rewritten(self) -> None:
        s = Settings(DATABASE_URL="postgresql://u:p@db:5432/carnivals")
        assert s.async_database_url == "postgresql+asyncpg://u:p@db:5432/carnivals"

    def test_legacy_postgres_prefix_rewritten(self) -> None:
        s = Settings(DATABASE_URL="postgres://u:p@db/carnivals")
        assert s.async_database_url == "postgresql+asyncpg://u:p@db/carnivals"

    def test_async_url_untouched(self) -> None:
        s = Settings(DATABASE_URL="sqlite+aiosqlite:///./carnivals.db")
        assert s.async_database_url == "sqlite+aiosqlite:///./carnivals.db"


class TestNotifications:
    def test_chat_ids_parsed(self) -> None:
        s = Settings(NOTIFY_CHAT_IDS="123, -100456, abc,")
        assert s.notify_chat_ids_list == [123, -100456]

    def test_disabled_without_token(self) -> None:
        s = Settings(BOT_TOKEN=None, NOTIFY_CHAT_IDS="123")
        assert s.notifications_enabled is False

    def test_disabled_without_chats(self) -> None:
        s = Settings(BOT_TOKEN="42:abc", NOTIFY_CHAT_IDS="")
        assert s.notifications_enabled is False

    def test_enabled(self) -> None:
        s = Settings(BOT_TOKEN="42:abc", NOTIFY_CHAT_IDS="123")
        assert s.notifications_enabled is True


class TestBuildEventSink:
    def test_logging_sink_by_default(self, monkeypatch) -> None:
        from registry import main

        monkeypatch.setattr(main, "settings", Settings(BOT_TOKEN=None, NOTIFY_CHAT_IDS=""))
        assert isinstance(main.build_event_sink(), LoggingEventSink)

    def test_telegram_sink_when_configured(self, monkeypatch) -> None:
        from registry import main

        monkeypatch.setattr(
            main, "settings",
            Settings(BOT_TOKEN="123456:ABCdefGhIJKlmnoPQRstuVWXyz", NOTIFY_CHAT_IDS="111,222"),
        )
        sink = main.build_event_sink()
        assert isinstance(sink, TelegramEventSink)
        assert sink.chat_ids == [111, 222]
