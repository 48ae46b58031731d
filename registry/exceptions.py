"""
Domain failures raised by the registry services.

Every error carries a developer-facing ``message`` and a ``user_message``
suitable for showing back to the organiser as validation feedback, plus the
offending ids/values as attributes.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence


class RegistryError(Exception):
    """Base exception for recoverable registry failures."""

    def __init__(self, message: str, user_message: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.user_message = user_message or message


# ── Conflicts ────────────────────────────────────────────────────────────────

class ConflictError(RegistryError):
    """The request collides with an existing record."""


class IdentityConflict(ConflictError):
    def __init__(self, club_id: int, first_name: str, last_name: str, date_of_birth: date) -> None:
        self.club_id = club_id
        self.identity = (first_name, last_name, date_of_birth)
        super().__init__(
            f"Player {first_name} {last_name} ({date_of_birth.isoformat()}) "
            f"already exists in club {club_id}",
            f"{first_name} {last_name} born {date_of_birth.isoformat()} is already on this club's roster.",
        )


class DuplicateAttendance(ConflictError):
    def __init__(self, carnival_id: int, club_id: int) -> None:
        self.carnival_id = carnival_id
        self.club_id = club_id
        super().__init__(
            f"Club {club_id} is already registered for carnival {carnival_id}",
            "This club is already registered for this carnival.",
        )


class DuplicateAssignment(ConflictError):
    def __init__(self, carnival_club_id: int, club_player_id: int) -> None:
        self.carnival_club_id = carnival_club_id
        self.club_player_id = club_player_id
        super().__init__(
            f"Player {club_player_id} is already assigned to attendance {carnival_club_id}",
            "This player has already been added to the club's carnival registration.",
        )


class DuplicateSponsor(ConflictError):
    def __init__(self, sponsor_name: str, club_id: int, state: str, location: str) -> None:
        self.sponsor_name = sponsor_name
        self.club_id = club_id
        self.state = state
        self.location = location
        super().__init__(
            f"Sponsor {sponsor_name!r} already exists for club {club_id} "
            f"(state={state!r}, location={location!r})",
            f"{sponsor_name} is already listed as a sponsor of this club for that location.",
        )


class AlreadyClaimed(ConflictError):
    def __init__(self, carnival_id: int, claimed_by_user_id: Optional[int]) -> None:
        self.carnival_id = carnival_id
        self.claimed_by_user_id = claimed_by_user_id
        super().__init__(
            f"Carnival {carnival_id} is already claimed by user {claimed_by_user_id}",
            "This carnival already has an owner.",
        )


# ── Range / consistency ──────────────────────────────────────────────────────

class ConsistencyError(RegistryError):
    """The request would break a cross-entity rule."""


class TeamNumberOutOfRange(ConsistencyError):
    def __init__(self, team_number: int, number_of_teams: int) -> None:
        self.team_number = team_number
        self.number_of_teams = number_of_teams
        super().__init__(
            f"Team number {team_number} outside 1..{number_of_teams}",
            f"Team number must be between 1 and {number_of_teams}.",
        )


class ClubMismatch(ConsistencyError):
    def __init__(self, player_club_id: int, attendance_club_id: int) -> None:
        self.player_club_id = player_club_id
        self.attendance_club_id = attendance_club_id
        super().__init__(
            f"Player belongs to club {player_club_id}, attendance is for club {attendance_club_id}",
            "Only players from the registered club can be added.",
        )


class TeamCountReductionBlocked(ConsistencyError):
    def __init__(self, new_count: int, conflicting_ids: Sequence[int]) -> None:
        self.new_count = new_count
        self.conflicting_ids = list(conflicting_ids)
        super().__init__(
            f"Cannot reduce to {new_count} team(s); assignments {self.conflicting_ids} "
            f"are placed in higher teams",
            f"Move or unassign {len(self.conflicting_ids)} player(s) before reducing to {new_count} team(s).",
        )


# ── Immutability ─────────────────────────────────────────────────────────────

class ImmutableFieldError(RegistryError):
    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = sorted(fields)
        super().__init__(
            f"Immutable field(s) in update: {', '.join(self.fields)}",
            "Some of these details cannot be changed.",
        )
