from registry.models.base import Base, engine, AsyncSessionFactory
from registry.models.models import (
    User,
    Club,
    ClubPlayer,
    Carnival,
    CarnivalClub,
    CarnivalClubPlayer,
    Sponsor,
    AUSTRALIAN_STATES,
    ShortsColour,
    AttendanceStatus,
    ApprovalStatus,
    ClaimState,
    SponsorshipLevel,
)

__all__ = [
    "Base",
    "engine",
    "AsyncSessionFactory",
    "User",
    "Club",
    "ClubPlayer",
    "Carnival",
    "CarnivalClub",
    "CarnivalClubPlayer",
    "Sponsor",
    "AUSTRALIAN_STATES",
    "ShortsColour",
    "AttendanceStatus",
    "ApprovalStatus",
    "ClaimState",
    "SponsorshipLevel",
]
