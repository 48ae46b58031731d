"""
Integration tests — carnival claiming via claim_service.

Coverage:
  - Unclaimed → claimed sets owner, hosting club and optional contact override
  - The original MySideline contact email survives every claim
  - A second claim fails with AlreadyClaimed and changes nothing
  - The guard holds even when the caller's in-memory copy is stale
"""
from __future__ import annotations

import pytest
from sqlalchemy import update

from registry.exceptions import AlreadyClaimed
from registry.models.models import Carnival, ClaimState
from registry.services.claim_service import can_claim, claim_carnival
from registry.services.event_service import CarnivalClaimed


class TestClaimCarnival:
    async def test_claim_unclaimed(self, async_session, carnival, organiser, events) -> None:
        assert can_claim(carnival) is True

        await claim_carnival(async_session, carnival, organiser, events=events)
        await async_session.commit()

        assert carnival.claimed_by_user_id == organiser.id
        assert carnival.claimed_at is not None
        assert carnival.club_id == organiser.club_id
        assert carnival.claim_state == ClaimState.CLAIMED
        assert carnival.original_my_sideline_contact_email == "events@mysideline.example"
        assert carnival.organiser_contact_email == "events@mysideline.example"
        assert can_claim(carnival) is False

        claimed = events.of_type(CarnivalClaimed)
        assert len(claimed) == 1
        assert claimed[0].user_id == organiser.id
        assert claimed[0].original_contact_email == "events@mysideline.example"

    async def test_contact_override_leaves_original(self, async_session, carnival, organiser) -> None:
        await claim_carnival(
            async_session, carnival, organiser, contact_email_override=" Pat@Club.example "
        )
        await async_session.commit()

        assert carnival.organiser_contact_email == "pat@club.example"
        assert carnival.original_my_sideline_contact_email == "events@mysideline.example"

    async def test_second_claim_fails(
        self, async_session, carnival, organiser, other_organiser, events
    ) -> None:
        await claim_carnival(async_session, carnival, organiser)
        await async_session.commit()

        with pytest.raises(AlreadyClaimed) as exc_info:
            await claim_carnival(async_session, carnival, other_organiser, events=events)
        assert exc_info.value.claimed_by_user_id == organiser.id

        assert carnival.claimed_by_user_id == organiser.id
        assert carnival.club_id == organiser.club_id
        assert events.of_type(CarnivalClaimed) == []

    async def test_same_user_cannot_claim_twice(self, async_session, carnival, organiser) -> None:
        await claim_carnival(async_session, carnival, organiser)
        with pytest.raises(AlreadyClaimed):
            await claim_carnival(async_session, carnival, organiser)

    async def test_stale_copy_cannot_win(
        self, async_session, carnival, organiser, other_organiser
    ) -> None:
        """Another writer claimed it behind our back; our object still says unclaimed."""
        await async_session.execute(
            update(Carnival)
            .where(Carnival.id == carnival.id)
            .values(claimed_by_user_id=other_organiser.id)
            .execution_options(synchronize_session=False)
        )
        await async_session.commit()
        assert carnival.claimed_by_user_id is None

        with pytest.raises(AlreadyClaimed):
            await claim_carnival(async_session, carnival, organiser)
        assert carnival.claimed_by_user_id == other_organiser.id

    async def test_user_without_club_keeps_hosting_club(self, async_session, carnival, organiser) -> None:
        organiser.club_id = None
        await async_session.commit()

        await claim_carnival(async_session, carnival, organiser)
        assert carnival.claimed_by_user_id == organiser.id
        assert carnival.club_id is None
