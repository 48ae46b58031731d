"""
Registration service — club attendance at carnivals and team assignments.

All functions receive an AsyncSession and only flush; the caller's
transaction (see registry.session.transaction) decides whether the work is
committed. Every rule that spans rows is checked here:

  - one CarnivalClub per (carnival, club)
  - one CarnivalClubPlayer per (attendance, roster player)
  - a roster player can only join their own club's attendance
  - team_number is None or within 1..number_of_teams of the attendance
  - number_of_teams cannot drop below a team somebody is placed in

Fee liability follows confirmed commitment: only active, confirmed
assignments are charged the per-player fee, and the hosting club pays
nothing for attending its own carnival.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from registry.exceptions import (
    ClubMismatch,
    DuplicateAssignment,
    DuplicateAttendance,
    TeamCountReductionBlocked,
    TeamNumberOutOfRange,
)
from registry.models.models import (
    ApprovalStatus,
    AttendanceStatus,
    Carnival,
    CarnivalClub,
    CarnivalClubPlayer,
    Club,
    ClubPlayer,
)
from registry.services.event_service import AttendanceCreated, EventSink, PlayerAssigned, emit
from registry.session import add_or_raise

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


@dataclass(frozen=True)
class FeeBreakdown:
    team_fee_total: Decimal
    player_fee_total: Decimal
    grand_total: Decimal
    is_fee_exempt: bool = False


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    confirmed: int
    tentative: int
    unavailable: int


# ── Helpers ───────────────────────────────────────────────────────────────────

def _require_positive_int(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def _check_team_number(team_number: Optional[int], number_of_teams: int) -> None:
    if team_number is None:
        return
    if isinstance(team_number, bool) or not isinstance(team_number, int):
        raise ValueError(f"team_number must be an integer or None, got {team_number!r}")
    if not 1 <= team_number <= number_of_teams:
        raise TeamNumberOutOfRange(team_number, number_of_teams)


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(_CENTS)


async def _lock_attendance(session: AsyncSession, carnival_club_id: int) -> CarnivalClub:
    """Re-read the attendance row (locked where the backend supports it)."""
    result = await session.execute(
        select(CarnivalClub)
        .where(CarnivalClub.id == carnival_club_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ── Attendance ────────────────────────────────────────────────────────────────

async def get_attendance(
    session: AsyncSession,
    carnival: Carnival,
    club: Club,
) -> Optional[CarnivalClub]:
    result = await session.execute(
        select(CarnivalClub).where(
            CarnivalClub.carnival_id == carnival.id,
            CarnivalClub.club_id == club.id,
        )
    )
    return result.scalar_one_or_none()


async def register_club_attendance(
    session: AsyncSession,
    carnival: Carnival,
    club: Club,
    number_of_teams: int = 1,
    events: Optional[EventSink] = None,
) -> CarnivalClub:
    """
    Register a club to attend a carnival.
    Raises DuplicateAttendance if the club is already registered.
    """
    _require_positive_int(number_of_teams, "number_of_teams")

    conflict = DuplicateAttendance(carnival.id, club.id)
    if await get_attendance(session, carnival, club) is not None:
        raise conflict

    is_host = carnival.club_id is not None and carnival.club_id == club.id
    carnival_club = CarnivalClub(
        carnival_id=carnival.id,
        club_id=club.id,
        number_of_teams=number_of_teams,
        is_active=True,
        approval_status=ApprovalStatus.APPROVED if is_host else ApprovalStatus.PENDING,
    )
    await add_or_raise(session, carnival_club, conflict)

    logger.info(
        "Club %d registered for carnival %d with %d team(s)",
        club.id, carnival.id, number_of_teams,
    )
    await emit(
        events,
        AttendanceCreated(carnival.id, club.id, carnival_club.id, number_of_teams),
    )
    return carnival_club


async def change_number_of_teams(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    new_count: int,
) -> CarnivalClub:
    """
    Change how many teams a club brings.

    Shrinking never silently unassigns anyone: if any assignment sits in a
    team above ``new_count`` the call raises TeamCountReductionBlocked with
    their ids and nothing is changed.
    """
    _require_positive_int(new_count, "number_of_teams")
    carnival_club = await _lock_attendance(session, carnival_club.id)

    if new_count < carnival_club.number_of_teams:
        result = await session.execute(
            select(CarnivalClubPlayer.id)
            .where(
                CarnivalClubPlayer.carnival_club_id == carnival_club.id,
                CarnivalClubPlayer.team_number > new_count,
            )
            .order_by(CarnivalClubPlayer.id)
        )
        conflicting = list(result.scalars().all())
        if conflicting:
            raise TeamCountReductionBlocked(new_count, conflicting)

    old_count = carnival_club.number_of_teams
    carnival_club.number_of_teams = new_count
    await session.flush()
    logger.info(
        "Attendance %d teams changed %d -> %d", carnival_club.id, old_count, new_count
    )
    return carnival_club


async def approve_attendance(session: AsyncSession, carnival_club: CarnivalClub) -> CarnivalClub:
    carnival_club.approval_status = ApprovalStatus.APPROVED
    carnival_club.rejection_reason = None
    await session.flush()
    return carnival_club


async def reject_attendance(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    reason: Optional[str] = None,
) -> CarnivalClub:
    carnival_club.approval_status = ApprovalStatus.REJECTED
    carnival_club.rejection_reason = reason.strip() if reason else None
    await session.flush()
    return carnival_club


async def withdraw_attendance(session: AsyncSession, carnival_club: CarnivalClub) -> CarnivalClub:
    """Mark the attendance inactive; its assignments are kept as history."""
    carnival_club.is_active = False
    await session.flush()
    logger.info("Attendance %d withdrawn", carnival_club.id)
    return carnival_club


async def remove_attendance(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    confirm_cascade: bool = False,
) -> None:
    """
    Delete an attendance together with every player assignment under it.
    The caller must pass confirm_cascade=True.
    """
    if not confirm_cascade:
        raise ValueError("Removing an attendance deletes its player assignments; pass confirm_cascade=True")
    carnival_club_id = carnival_club.id
    await session.delete(carnival_club)
    await session.flush()
    logger.info("Attendance %d removed with its assignments", carnival_club_id)


async def list_attendances(
    session: AsyncSession,
    carnival: Carnival,
    include_inactive: bool = False,
) -> List[CarnivalClub]:
    q = (
        select(CarnivalClub)
        .where(CarnivalClub.carnival_id == carnival.id)
        .options(selectinload(CarnivalClub.club))
        .order_by(CarnivalClub.registered_at, CarnivalClub.id)
    )
    if not include_inactive:
        q = q.where(CarnivalClub.is_active.is_(True))
    result = await session.execute(q)
    return list(result.scalars().all())


# ── Player assignments ────────────────────────────────────────────────────────

async def get_assignment(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    club_player: ClubPlayer,
) -> Optional[CarnivalClubPlayer]:
    result = await session.execute(
        select(CarnivalClubPlayer).where(
            CarnivalClubPlayer.carnival_club_id == carnival_club.id,
            CarnivalClubPlayer.club_player_id == club_player.id,
        )
    )
    return result.scalar_one_or_none()


async def assign_player(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    club_player: ClubPlayer,
    team_number: Optional[int] = None,
    notes: Optional[str] = None,
    events: Optional[EventSink] = None,
) -> CarnivalClubPlayer:
    """
    Add a roster player to a club's attendance, optionally straight into a team.

    Raises DuplicateAssignment (even for a withdrawn earlier assignment),
    ClubMismatch, or TeamNumberOutOfRange.
    """
    conflict = DuplicateAssignment(carnival_club.id, club_player.id)
    if await get_assignment(session, carnival_club, club_player) is not None:
        raise conflict
    if club_player.club_id != carnival_club.club_id:
        raise ClubMismatch(club_player.club_id, carnival_club.club_id)

    carnival_club = await _lock_attendance(session, carnival_club.id)
    _check_team_number(team_number, carnival_club.number_of_teams)

    assignment = CarnivalClubPlayer(
        carnival_club_id=carnival_club.id,
        club_player_id=club_player.id,
        team_number=team_number,
        is_active=True,
        attendance_status=AttendanceStatus.CONFIRMED,
        notes=notes.strip() if notes else None,
    )
    await add_or_raise(session, assignment, conflict)

    logger.info(
        "Player %d assigned to attendance %d (team %s)",
        club_player.id, carnival_club.id, team_number,
    )
    await emit(
        events,
        PlayerAssigned(carnival_club.id, club_player.id, assignment.id, team_number),
    )
    return assignment


async def reassign_team(
    session: AsyncSession,
    assignment: CarnivalClubPlayer,
    new_team_number: Optional[int],
) -> CarnivalClubPlayer:
    """Move a player to another team (or back to unassigned). No-op if unchanged."""
    carnival_club = await _lock_attendance(session, assignment.carnival_club_id)
    _check_team_number(new_team_number, carnival_club.number_of_teams)
    if assignment.team_number == new_team_number:
        return assignment

    assignment.team_number = new_team_number
    await session.flush()
    logger.info("Assignment %d moved to team %s", assignment.id, new_team_number)
    return assignment


async def set_attendance_status(
    session: AsyncSession,
    assignment: CarnivalClubPlayer,
    status: str,
) -> CarnivalClubPlayer:
    """Any status may follow any other. is_active and team_number are untouched."""
    if status not in AttendanceStatus.ALL:
        raise ValueError(
            f"attendance status must be one of {', '.join(AttendanceStatus.ALL)}, got {status!r}"
        )
    assignment.attendance_status = status
    await session.flush()
    return assignment


async def withdraw_player(
    session: AsyncSession,
    assignment: CarnivalClubPlayer,
) -> CarnivalClubPlayer:
    """Withdraw a player; the row stays so the history of who was picked survives."""
    assignment.is_active = False
    await session.flush()
    logger.info("Assignment %d withdrawn", assignment.id)
    return assignment


async def reinstate_player(
    session: AsyncSession,
    assignment: CarnivalClubPlayer,
) -> CarnivalClubPlayer:
    assignment.is_active = True
    await session.flush()
    return assignment


async def remove_player(
    session: AsyncSession,
    assignment: CarnivalClubPlayer,
    confirm: bool = False,
) -> None:
    """Permanently delete an assignment. The caller must pass confirm=True."""
    if not confirm:
        raise ValueError("Removing a player assignment is permanent; pass confirm=True")
    assignment_id = assignment.id
    await session.delete(assignment)
    await session.flush()
    logger.info("Assignment %d removed", assignment_id)


async def list_assignments(
    session: AsyncSession,
    carnival_club: CarnivalClub,
    include_inactive: bool = False,
) -> List[CarnivalClubPlayer]:
    q = (
        select(CarnivalClubPlayer)
        .where(CarnivalClubPlayer.carnival_club_id == carnival_club.id)
        .options(selectinload(CarnivalClubPlayer.club_player))
        .order_by(CarnivalClubPlayer.team_number.asc().nullslast(), CarnivalClubPlayer.id)
    )
    if not include_inactive:
        q = q.where(CarnivalClubPlayer.is_active.is_(True))
    result = await session.execute(q)
    return list(result.scalars().all())


async def get_team_sheet(
    session: AsyncSession,
    carnival_club: CarnivalClub,
) -> Dict[Optional[int], List[CarnivalClubPlayer]]:
    """
    Active assignments grouped by team. Every team 1..number_of_teams is
    present (possibly empty); unassigned players are under the ``None`` key.
    """
    sheet: Dict[Optional[int], List[CarnivalClubPlayer]] = {
        n: [] for n in range(1, carnival_club.number_of_teams + 1)
    }
    sheet[None] = []
    for assignment in await list_assignments(session, carnival_club):
        sheet.setdefault(assignment.team_number, []).append(assignment)
    return sheet


async def get_attendance_stats(
    session: AsyncSession,
    carnival_club: CarnivalClub,
) -> AttendanceStats:
    result = await session.execute(
        select(CarnivalClubPlayer.attendance_status, func.count(CarnivalClubPlayer.id))
        .where(
            CarnivalClubPlayer.carnival_club_id == carnival_club.id,
            CarnivalClubPlayer.is_active.is_(True),
        )
        .group_by(CarnivalClubPlayer.attendance_status)
    )
    counts = {status: count for status, count in result.all()}
    return AttendanceStats(
        total=sum(counts.values()),
        confirmed=counts.get(AttendanceStatus.CONFIRMED, 0),
        tentative=counts.get(AttendanceStatus.TENTATIVE, 0),
        unavailable=counts.get(AttendanceStatus.UNAVAILABLE, 0),
    )


# ── Fees ──────────────────────────────────────────────────────────────────────

async def compute_fees(session: AsyncSession, carnival_club: CarnivalClub) -> FeeBreakdown:
    """
    team_fee_total   = team registration fee × number of teams
    player_fee_total = per-player fee × active confirmed assignments
    The hosting club is exempt from both.
    """
    carnival = await session.get(Carnival, carnival_club.carnival_id)

    if carnival.club_id is not None and carnival.club_id == carnival_club.club_id:
        zero = _money(0)
        return FeeBreakdown(zero, zero, zero, is_fee_exempt=True)

    confirmed = await session.scalar(
        select(func.count(CarnivalClubPlayer.id)).where(
            CarnivalClubPlayer.carnival_club_id == carnival_club.id,
            CarnivalClubPlayer.is_active.is_(True),
            CarnivalClubPlayer.attendance_status == AttendanceStatus.CONFIRMED,
        )
    )

    team_fee_total = _money(carnival.team_registration_fee) * carnival_club.number_of_teams
    player_fee_total = _money(carnival.per_player_fee) * (confirmed or 0)
    return FeeBreakdown(
        team_fee_total=team_fee_total,
        player_fee_total=player_fee_total,
        grand_total=team_fee_total + player_fee_total,
    )
