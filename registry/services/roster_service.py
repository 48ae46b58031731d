"""
Roster service — club players.

A player's identity within a club is (first name, last name, date of birth).
Identity fields never change in place: a corrected name or DOB becomes a new
roster row and the old one is deactivated, so carnival assignments keep
pointing at the record they were made against.
"""
from __future__ import annotations

import logging
from typing import Any, List, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from registry.exceptions import IdentityConflict, ImmutableFieldError
from registry.models.models import Club, ClubPlayer
from registry.services.event_service import EventSink, PlayerRegistered, emit
from registry.session import add_or_raise
from registry.validators import PlayerAttributes, PlayerIdentity, PlayerPatch

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = frozenset({"club_id", "first_name", "last_name", "date_of_birth"})


async def find_by_identity(
    session: AsyncSession,
    club: Club,
    identity: PlayerIdentity,
) -> Optional[ClubPlayer]:
    result = await session.execute(
        select(ClubPlayer).where(
            ClubPlayer.club_id == club.id,
            ClubPlayer.first_name == identity.first_name,
            ClubPlayer.last_name == identity.last_name,
            ClubPlayer.date_of_birth == identity.date_of_birth,
        )
    )
    return result.scalar_one_or_none()


async def add_player(
    session: AsyncSession,
    club: Club,
    identity: PlayerIdentity,
    attributes: PlayerAttributes,
    events: Optional[EventSink] = None,
) -> ClubPlayer:
    """
    Add a player to a club's roster.
    Raises IdentityConflict if the identity is already taken, whatever the email.
    """
    conflict = IdentityConflict(
        club.id, identity.first_name, identity.last_name, identity.date_of_birth
    )
    if await find_by_identity(session, club, identity) is not None:
        raise conflict

    player = ClubPlayer(
        club_id=club.id,
        first_name=identity.first_name,
        last_name=identity.last_name,
        date_of_birth=identity.date_of_birth,
        email=attributes.email,
        shorts=attributes.shorts,
        notes=attributes.notes,
        is_active=True,
    )
    await add_or_raise(session, player, conflict)

    logger.info("Player %d (%s) added to club %d", player.id, player.full_name, club.id)
    await emit(events, PlayerRegistered(club.id, player.id, player.full_name))
    return player


async def get_player(session: AsyncSession, player_id: int) -> Optional[ClubPlayer]:
    result = await session.execute(select(ClubPlayer).where(ClubPlayer.id == player_id))
    return result.scalar_one_or_none()


async def list_players(
    session: AsyncSession,
    club: Club,
    include_inactive: bool = False,
) -> List[ClubPlayer]:
    q = (
        select(ClubPlayer)
        .where(ClubPlayer.club_id == club.id)
        .order_by(ClubPlayer.last_name, ClubPlayer.first_name, ClubPlayer.id)
    )
    if not include_inactive:
        q = q.where(ClubPlayer.is_active.is_(True))
    result = await session.execute(q)
    return list(result.scalars().all())


async def update_player(
    session: AsyncSession,
    player: ClubPlayer,
    patch: Mapping[str, Any],
) -> ClubPlayer:
    """
    Change a player's mutable attributes (email, shorts, notes, is_active).
    Email is free to match any other player's. Identity fields are rejected.
    """
    immutable = IDENTITY_FIELDS.intersection(patch)
    if immutable:
        raise ImmutableFieldError(immutable)

    changes = PlayerPatch(**patch).model_dump(exclude_unset=True)
    for name, value in changes.items():
        if value is None and name in ("email", "shorts", "is_active"):
            raise ValueError(f"{name} cannot be cleared")
        setattr(player, name, value)
    await session.flush()
    return player


async def deactivate_player(session: AsyncSession, player: ClubPlayer) -> ClubPlayer:
    player.is_active = False
    await session.flush()
    logger.info("Player %d deactivated", player.id)
    return player


async def replace_player_identity(
    session: AsyncSession,
    player: ClubPlayer,
    new_identity: PlayerIdentity,
    events: Optional[EventSink] = None,
) -> ClubPlayer:
    """
    Correct a player's name or date of birth.

    The existing row is deactivated and a fresh row with the new identity is
    created, carrying over email, shorts and notes. Raises IdentityConflict
    (with nothing changed) if the new identity is already on the roster.
    """
    club = await session.get(Club, player.club_id)
    attributes = PlayerAttributes(email=player.email, shorts=player.shorts, notes=player.notes)

    conflict = IdentityConflict(
        player.club_id, new_identity.first_name, new_identity.last_name,
        new_identity.date_of_birth,
    )
    if await find_by_identity(session, club, new_identity) is not None:
        raise conflict

    player.is_active = False
    replacement = await add_player(session, club, new_identity, attributes, events=events)
    logger.info("Player %d replaced by %d after identity change", player.id, replacement.id)
    return replacement
