"""
Claim service — an organiser taking ownership of an imported carnival.

Carnivals move one way only, UNCLAIMED → CLAIMED. The transition is a single
conditional UPDATE guarded on ``claimed_by_user_id IS NULL`` so two
organisers racing for the same carnival cannot both win.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from registry.exceptions import AlreadyClaimed
from registry.models.base import utcnow
from registry.models.models import Carnival, ClaimState, User
from registry.services.event_service import CarnivalClaimed, EventSink, emit
from registry.validators import normalise_email

logger = logging.getLogger(__name__)


def can_claim(carnival: Carnival) -> bool:
    return carnival.claim_state == ClaimState.UNCLAIMED


async def claim_carnival(
    session: AsyncSession,
    carnival: Carnival,
    user: User,
    contact_email_override: Optional[str] = None,
    events: Optional[EventSink] = None,
) -> Carnival:
    """
    Claim an unclaimed carnival for ``user``.

    The user's club becomes the hosting club. ``contact_email_override``, when
    given, replaces the operational contact email; the original MySideline
    contact email is left exactly as imported.
    Raises AlreadyClaimed, changing nothing, if someone owns it already.
    """
    values = {
        "claimed_by_user_id": user.id,
        "claimed_at": utcnow(),
    }
    if user.club_id is not None:
        values["club_id"] = user.club_id
    if contact_email_override is not None:
        values["organiser_contact_email"] = normalise_email(contact_email_override)

    result = await session.execute(
        update(Carnival)
        .where(
            Carnival.id == carnival.id,
            Carnival.claimed_by_user_id.is_(None),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    await session.refresh(carnival)

    if result.rowcount == 0:
        logger.warning(
            "User %d tried to claim carnival %d already owned by user %s",
            user.id, carnival.id, carnival.claimed_by_user_id,
        )
        raise AlreadyClaimed(carnival.id, carnival.claimed_by_user_id)

    logger.info("Carnival %d %r claimed by user %d", carnival.id, carnival.title, user.id)
    await emit(
        events,
        CarnivalClaimed(
            carnival_id=carnival.id,
            title=carnival.title,
            user_id=user.id,
            club_id=carnival.club_id,
            original_contact_email=carnival.original_my_sideline_contact_email,
        ),
    )
    return carnival
