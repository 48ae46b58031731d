"""
Sponsor service — club-scoped sponsors.

A sponsor is identified by (name, club, state, location), so the same
business can back several clubs, or one club in several places.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.exceptions import DuplicateSponsor
from registry.models.models import Club, Sponsor, SponsorshipLevel
from registry.session import add_or_raise
from registry.validators import SponsorData

logger = logging.getLogger(__name__)


def sort_sponsors(sponsors: Iterable[Sponsor]) -> List[Sponsor]:
    """Gold first, In-Kind last; ties broken by display_order, then age."""
    return sorted(
        sponsors,
        key=lambda s: (s.level_priority, s.display_order, s.created_at, s.id),
    )


async def find_sponsor(
    session: AsyncSession,
    club: Club,
    data: SponsorData,
) -> Optional[Sponsor]:
    result = await session.execute(
        select(Sponsor).where(
            Sponsor.club_id == club.id,
            Sponsor.sponsor_name == data.sponsor_name,
            Sponsor.state == data.state,
            Sponsor.location == data.location,
        )
    )
    return result.scalar_one_or_none()


async def add_sponsor(
    session: AsyncSession,
    club: Club,
    name: str,
    state: Optional[str] = None,
    location: Optional[str] = None,
    level: str = SponsorshipLevel.SUPPORTING,
    display_order: int = 999,
) -> Sponsor:
    """
    Add a sponsor to a club.
    Raises DuplicateSponsor if the same (name, club, state, location) exists.
    """
    data = SponsorData(
        sponsor_name=name, state=state, location=location, sponsorship_level=level
    )
    conflict = DuplicateSponsor(data.sponsor_name, club.id, data.state, data.location)
    if await find_sponsor(session, club, data) is not None:
        raise conflict

    sponsor = Sponsor(
        club_id=club.id,
        sponsor_name=data.sponsor_name,
        state=data.state,
        location=data.location,
        sponsorship_level=data.sponsorship_level,
        display_order=display_order,
        is_active=True,
    )
    await add_or_raise(session, sponsor, conflict)

    logger.info(
        "Sponsor %d %r (%s) added to club %d",
        sponsor.id, sponsor.sponsor_name, sponsor.sponsorship_level, club.id,
    )
    return sponsor


async def list_sponsors(
    session: AsyncSession,
    club: Club,
    include_inactive: bool = False,
) -> List[Sponsor]:
    q = select(Sponsor).where(Sponsor.club_id == club.id)
    if not include_inactive:
        q = q.where(Sponsor.is_active.is_(True))
    result = await session.execute(q)
    return sort_sponsors(result.scalars().all())
