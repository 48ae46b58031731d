"""
Domain events and the sinks that deliver them.

Services publish events through an injected ``EventSink``; they never depend
on delivery succeeding. The Telegram sink posts a short note to the
organisers' chats; the logging sink is the default for local runs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Optional, Protocol, Union

from aiogram import Bot
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError

from registry.models.base import utcnow

logger = logging.getLogger(__name__)


# ── Events ────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class CarnivalImported:
    carnival_id: int
    title: str
    my_sideline_id: Optional[str]
    created: bool
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CarnivalClaimed:
    carnival_id: int
    title: str
    user_id: int
    club_id: Optional[int]
    original_contact_email: Optional[str]
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class PlayerRegistered:
    club_id: int
    club_player_id: int
    full_name: str
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class AttendanceCreated:
    carnival_id: int
    club_id: int
    carnival_club_id: int
    number_of_teams: int
    occurred_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class PlayerAssigned:
    carnival_club_id: int
    club_player_id: int
    assignment_id: int
    team_number: Optional[int]
    occurred_at: datetime = field(default_factory=utcnow)


DomainEvent = Union[
    CarnivalImported, CarnivalClaimed, PlayerRegistered, AttendanceCreated, PlayerAssigned
]


class EventSink(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


async def emit(events: Optional[EventSink], event: DomainEvent) -> None:
    """Publish to the sink, if any. A failing sink never fails the operation."""
    if events is None:
        return
    try:
        await events.publish(event)
    except Exception:
        logger.exception("Event sink failed to publish %s", type(event).__name__)


# ── Sinks ─────────────────────────────────────────────────────────────────────

class LoggingEventSink:
    """Writes every event to the application log."""

    def __init__(self, level: int = logging.INFO) -> None:
        self.level = level

    async def publish(self, event: DomainEvent) -> None:
        logger.log(self.level, "event %s: %s", type(event).__name__, event)


def format_event(event: DomainEvent) -> str:
    """Short Markdown line describing an event for a Telegram chat."""
    if isinstance(event, CarnivalClaimed):
        line = f"🏆 *{event.title}* claimed by user `{event.user_id}`"
        if event.original_contact_email:
            line += f"\n_Original MySideline contact: {event.original_contact_email}_"
        return line
    if isinstance(event, CarnivalImported):
        verb = "imported" if event.created else "re-synced"
        return f"📥 *{event.title}* {verb} from MySideline"
    if isinstance(event, AttendanceCreated):
        return (
            f"📋 Club `{event.club_id}` registered for carnival `{event.carnival_id}` "
            f"with {event.number_of_teams} team(s)"
        )
    if isinstance(event, PlayerAssigned):
        team = f"team {event.team_number}" if event.team_number else "no team yet"
        return f"👤 Player `{event.club_player_id}` added to registration `{event.carnival_club_id}` ({team})"
    if isinstance(event, PlayerRegistered):
        return f"🆕 {event.full_name} joined club `{event.club_id}`"
    return str(event)


class TelegramEventSink:
    """
    Posts events to a set of Telegram chats.
    Any Telegram API failure is logged for that chat; the remaining chats
    are still tried.
    """

    def __init__(self, bot: Bot, chat_ids: Iterable[int]) -> None:
        self.bot = bot
        self.chat_ids = list(chat_ids)

    async def publish(self, event: DomainEvent) -> None:
        text = format_event(event)
        for chat_id in self.chat_ids:
            try:
                await self.bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    parse_mode=ParseMode.MARKDOWN,
                )
            except TelegramAPIError as e:
                logger.warning("Could not notify chat_id=%d: %s", chat_id, e)
