"""
Carnival service — importing, creating and editing carnivals.

Imported carnivals start unclaimed and remember the organiser email that
came with the feed in ``original_my_sideline_contact_email``. That column is
written once, at import, and is never touched again; the operational
``organiser_contact_email`` may change freely.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.exceptions import ImmutableFieldError
from registry.models.base import utcnow
from registry.models.models import Carnival, User
from registry.services.event_service import CarnivalImported, EventSink, emit
from registry.validators import CarnivalData, CarnivalPatch, MySidelineFeedRecord

logger = logging.getLogger(__name__)

# Provenance and ownership columns; never writable through edit_carnival
IMMUTABLE_FIELDS = frozenset({
    "original_my_sideline_contact_email",
    "my_sideline_id",
    "my_sideline_subtitle",
    "claimed_by_user_id",
    "claimed_at",
})

# Carnival columns a re-import may fill when they are still empty
_FEED_FILLABLE = (
    "title",
    "subtitle",
    "event_date",
    "state",
    "location_address_part1",
    "location_address_part2",
    "location_address_part3",
    "location_address_part4",
    "organiser_contact_name",
    "organiser_contact_email",
    "my_sideline_subtitle",
)


async def get_carnival(session: AsyncSession, carnival_id: int) -> Optional[Carnival]:
    result = await session.execute(select(Carnival).where(Carnival.id == carnival_id))
    return result.scalar_one_or_none()


async def get_by_my_sideline_id(
    session: AsyncSession,
    my_sideline_id: str,
) -> Optional[Carnival]:
    result = await session.execute(
        select(Carnival).where(Carnival.my_sideline_id == my_sideline_id)
    )
    return result.scalar_one_or_none()


async def list_carnivals(
    session: AsyncSession,
    unclaimed_only: bool = False,
    include_inactive: bool = False,
) -> List[Carnival]:
    q = select(Carnival).order_by(Carnival.event_date.asc().nullslast(), Carnival.id)
    if unclaimed_only:
        q = q.where(Carnival.claimed_by_user_id.is_(None))
    if not include_inactive:
        q = q.where(Carnival.is_active.is_(True))
    result = await session.execute(q)
    return list(result.scalars().all())


async def import_carnival(
    session: AsyncSession,
    feed: MySidelineFeedRecord,
    events: Optional[EventSink] = None,
) -> Carnival:
    """
    Store a carnival from the MySideline feed.

    A feed record whose my_sideline_id is already known updates that carnival
    instead: only empty columns are filled and the sync time is refreshed.
    The carnival stays in whatever claim state it was in.
    """
    synced_at = utcnow()

    existing = None
    if feed.my_sideline_id:
        existing = await get_by_my_sideline_id(session, feed.my_sideline_id)

    if existing is not None:
        filled = _fill_empty_fields(existing, feed)
        existing.last_my_sideline_sync = synced_at
        await session.flush()
        logger.info(
            "Re-synced carnival %d from MySideline (%d empty field(s) filled)",
            existing.id, len(filled),
        )
        await emit(events, CarnivalImported(existing.id, existing.title, existing.my_sideline_id, False))
        return existing

    carnival = Carnival(
        title=feed.title,
        subtitle=feed.subtitle,
        my_sideline_subtitle=feed.subtitle,
        my_sideline_id=feed.my_sideline_id,
        event_date=feed.event_date,
        state=feed.state,
        location_address_part1=feed.location_address_part1,
        location_address_part2=feed.location_address_part2,
        location_address_part3=feed.location_address_part3,
        location_address_part4=feed.location_address_part4,
        organiser_contact_name=feed.organiser_contact_name,
        organiser_contact_email=feed.organiser_contact_email,
        original_my_sideline_contact_email=feed.organiser_contact_email,
        claimed_by_user_id=None,
        is_manually_entered=False,
        last_my_sideline_sync=synced_at,
    )
    session.add(carnival)
    await session.flush()

    logger.info("Imported carnival %d %r from MySideline", carnival.id, carnival.title)
    await emit(events, CarnivalImported(carnival.id, carnival.title, carnival.my_sideline_id, True))
    return carnival


def _fill_empty_fields(carnival: Carnival, feed: MySidelineFeedRecord) -> List[str]:
    filled = []
    for name in _FEED_FILLABLE:
        source = "subtitle" if name == "my_sideline_subtitle" else name
        value = getattr(feed, source)
        if value is not None and not getattr(carnival, name):
            setattr(carnival, name, value)
            filled.append(name)
    # Set once; a carnival imported without an email may learn it later
    if carnival.original_my_sideline_contact_email is None and feed.organiser_contact_email:
        carnival.original_my_sideline_contact_email = feed.organiser_contact_email
        filled.append("original_my_sideline_contact_email")
    return filled


async def create_carnival(
    session: AsyncSession,
    organiser: User,
    attrs: CarnivalData,
) -> Carnival:
    """Organiser-entered carnival: owned from the start, nothing to preserve."""
    carnival = Carnival(
        **attrs.model_dump(exclude_none=True),
        is_manually_entered=True,
        club_id=organiser.club_id,
        claimed_by_user_id=organiser.id,
        claimed_at=utcnow(),
        original_my_sideline_contact_email=None,
    )
    if carnival.organiser_contact_email is None:
        carnival.organiser_contact_email = organiser.email
    if carnival.organiser_contact_name is None:
        carnival.organiser_contact_name = organiser.display_name
    session.add(carnival)
    await session.flush()
    logger.info("Carnival %d %r created by user %d", carnival.id, carnival.title, organiser.id)
    return carnival


async def edit_carnival(
    session: AsyncSession,
    carnival: Carnival,
    patch: Mapping[str, Any],
) -> Carnival:
    """
    Apply organiser edits. Any provenance or ownership column in the patch
    raises ImmutableFieldError, even when its value would not change.
    """
    immutable = IMMUTABLE_FIELDS.intersection(patch)
    if immutable:
        raise ImmutableFieldError(immutable)

    changes = CarnivalPatch(**patch).model_dump(exclude_unset=True)
    if "title" in changes and changes["title"] is None:
        raise ValueError("title cannot be cleared")
    for name in ("team_registration_fee", "per_player_fee", "is_active"):
        if name in changes and changes[name] is None:
            raise ValueError(f"{name} cannot be cleared")

    for name, value in changes.items():
        setattr(carnival, name, value)
    await session.flush()
    return carnival
