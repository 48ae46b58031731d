"""
Unit tests — event sinks (event_service.py).

The Telegram sink is exercised against a mocked aiogram Bot; no network.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

from aiogram.exceptions import (
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramNetworkError,
    TelegramRetryAfter,
)
from aiogram.methods import SendMessage

from registry.services.event_service import (
    AttendanceCreated,
    CarnivalClaimed,
    CarnivalImported,
    LoggingEventSink,
    PlayerAssigned,
    TelegramEventSink,
    emit,
    format_event,
)
from registry.services.registration_service import (
    assign_player,
    list_assignments,
    register_club_attendance,
)
from registry.services.roster_service import add_player, list_players
from registry.validators import PlayerAttributes, PlayerIdentity


def _claimed() -> CarnivalClaimed:
    return CarnivalClaimed(
        carnival_id=7,
        title="Coolangatta Masters Carnival",
        user_id=3,
        club_id=2,
        original_contact_email="events@mysideline.example",
    )


class TestFormatEvent:
    def test_claimed_mentions_original_contact(self) -> None:
        text = format_event(_claimed())
        assert "Coolangatta Masters Carnival" in text
        assert "events@mysideline.example" in text

    def test_imported_vs_resynced(self) -> None:
        assert "imported" in format_event(CarnivalImported(1, "Cup", "MS-1", True))
        assert "re-synced" in format_event(CarnivalImported(1, "Cup", "MS-1", False))

    def test_assignment_without_team(self) -> None:
        assert "no team yet" in format_event(PlayerAssigned(4, 5, 6, None))
        assert "team 2" in format_event(PlayerAssigned(4, 5, 6, 2))


class TestSinks:
    async def test_emit_without_sink_is_noop(self) -> None:
        await emit(None, _claimed())

    async def test_logging_sink(self, caplog) -> None:
        with caplog.at_level(logging.INFO, logger="registry.services.event_service"):
            await LoggingEventSink().publish(AttendanceCreated(1, 2, 3, 2))
        assert "AttendanceCreated" in caplog.text

    async def test_telegram_sink_posts_to_every_chat(self) -> None:
        bot = AsyncMock()
        sink = TelegramEventSink(bot, [111, -100222])

        await sink.publish(_claimed())

        assert bot.send_message.await_count == 2
        chat_ids = [call.kwargs["chat_id"] for call in bot.send_message.await_args_list]
        assert chat_ids == [111, -100222]

    async def test_telegram_delivery_errors_swallowed(self, caplog) -> None:
        method = SendMessage(chat_id=111, text="x")
        bot = AsyncMock()
        bot.send_message.side_effect = [
            TelegramForbiddenError(method=method, message="bot was blocked by the user"),
            TelegramBadRequest(method=method, message="chat not found"),
            None,
        ]
        sink = TelegramEventSink(bot, [111, 222, 333])

        with caplog.at_level(logging.WARNING, logger="registry.services.event_service"):
            await sink.publish(_claimed())

        assert bot.send_message.await_count == 3
        assert "chat_id=111" in caplog.text
        assert "chat_id=222" in caplog.text

    async def test_telegram_network_errors_swallowed(self, caplog) -> None:
        method = SendMessage(chat_id=111, text="x")
        bot = AsyncMock()
        bot.send_message.side_effect = [
            TelegramNetworkError(method=method, message="HTTP Client says - timeout"),
            TelegramRetryAfter(method=method, message="Too Many Requests", retry_after=5),
            None,
        ]
        sink = TelegramEventSink(bot, [111, 222, 333])

        with caplog.at_level(logging.WARNING, logger="registry.services.event_service"):
            await sink.publish(_claimed())

        assert bot.send_message.await_count == 3
        assert "chat_id=222" in caplog.text


class _BrokenSink:
    async def publish(self, event) -> None:
        raise RuntimeError("audit store unavailable")


def _identity(first: str = "Sam") -> PlayerIdentity:
    return PlayerIdentity(first_name=first, last_name="Taylor", date_of_birth=date(1980, 3, 14))


class TestDeliveryNeverFailsOperations:
    async def test_emit_logs_sink_failure(self, caplog) -> None:
        with caplog.at_level(logging.ERROR, logger="registry.services.event_service"):
            await emit(_BrokenSink(), _claimed())
        assert "CarnivalClaimed" in caplog.text

    async def test_add_player_survives_broken_sink(self, async_session, club) -> None:
        await add_player(
            async_session, club, _identity(), PlayerAttributes(email="sam@example.com"),
            events=_BrokenSink(),
        )
        await async_session.commit()
        assert len(await list_players(async_session, club)) == 1

    async def test_assignment_survives_telegram_timeout(self, async_session, carnival, club) -> None:
        bot = AsyncMock()
        bot.send_message.side_effect = TelegramNetworkError(
            method=SendMessage(chat_id=111, text="x"), message="HTTP Client says - timeout"
        )
        sink = TelegramEventSink(bot, [111])

        cc = await register_club_attendance(async_session, carnival, club, number_of_teams=2, events=sink)
        player = await add_player(
            async_session, club, _identity(), PlayerAttributes(email="sam@example.com"), events=sink
        )
        assignment = await assign_player(async_session, cc, player, team_number=2, events=sink)
        await async_session.commit()

        assert [a.id for a in await list_assignments(async_session, cc)] == [assignment.id]
        assert bot.send_message.await_count == 3


class TestTimestamps:
    def test_occurred_at_is_naive_utc(self) -> None:
        before = datetime.now(timezone.utc).replace(tzinfo=None)
        event = _claimed()
        assert event.occurred_at.tzinfo is None
        assert before <= event.occurred_at <= datetime.now(timezone.utc).replace(tzinfo=None)
