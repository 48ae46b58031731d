"""
ORM models for the carnival registration system.

Domain overview
---------------
Club           — an organisation fielding players at carnivals
  ├─ ClubPlayer — roster entry, identity = (club, first name, last name, DOB)
  └─ Sponsor    — club-scoped sponsor, identity = (name, club, state, location)
Carnival       — a scheduled event, either imported from MySideline or
                 created directly by an organiser
  └─ CarnivalClub — one club's attendance (may bring several teams)
       └─ CarnivalClubPlayer — one roster player assigned to that attendance
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from registry.models.base import Base

# ─────────────────────────── Constants ────────────────────────────────────────

AUSTRALIAN_STATES = ("ACT", "NSW", "NT", "QLD", "SA", "TAS", "VIC", "WA")


class ShortsColour:
    UNRESTRICTED = "Unrestricted"
    RED          = "Red"
    YELLOW       = "Yellow"
    BLUE         = "Blue"
    GREEN        = "Green"

    ALL = (UNRESTRICTED, RED, YELLOW, BLUE, GREEN)


class AttendanceStatus:
    CONFIRMED   = "confirmed"
    TENTATIVE   = "tentative"
    UNAVAILABLE = "unavailable"

    ALL = (CONFIRMED, TENTATIVE, UNAVAILABLE)


class ApprovalStatus:
    PENDING  = "pending"   # Waiting on the hosting club
    APPROVED = "approved"
    REJECTED = "rejected"

    ALL = (PENDING, APPROVED, REJECTED)


class ClaimState:
    UNCLAIMED = "unclaimed"  # Imported from MySideline, no organiser yet
    CLAIMED   = "claimed"    # Owned by an organiser; there is no way back


class SponsorshipLevel:
    GOLD       = "Gold"
    SILVER     = "Silver"
    BRONZE     = "Bronze"
    SUPPORTING = "Supporting"
    IN_KIND    = "In-Kind"

    ALL = (GOLD, SILVER, BRONZE, SUPPORTING, IN_KIND)

    # Lower number sorts first
    PRIORITY: dict[str, int] = {
        GOLD:       1,
        SILVER:     2,
        BRONZE:     3,
        SUPPORTING: 4,
        IN_KIND:    5,
    }


MASTERS_MIN_AGE = 35


# ─────────────────────────── Models ───────────────────────────────────────────

class User(Base):
    """Organiser / club delegate. Authentication lives elsewhere."""
    __tablename__ = "users"

    id:         Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str]           = mapped_column(String(100))
    last_name:  Mapped[str]           = mapped_column(String(100))
    email:      Mapped[str]           = mapped_column(String(254))
    club_id:    Mapped[Optional[int]] = mapped_column(ForeignKey("clubs.id"), nullable=True)
    created_at: Mapped[datetime]      = mapped_column(DateTime, default=func.now())

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Club(Base):
    __tablename__ = "clubs"

    id:         Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    name:       Mapped[str]           = mapped_column(String(255), unique=True)
    state:      Mapped[Optional[str]] = mapped_column(String(3), nullable=True)
    is_active:  Mapped[bool]          = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime]      = mapped_column(DateTime, default=func.now())

    players:  Mapped[List["ClubPlayer"]] = relationship(
        back_populates="club", cascade="all, delete-orphan"
    )
    sponsors: Mapped[List["Sponsor"]] = relationship(
        back_populates="club", cascade="all, delete-orphan"
    )


class ClubPlayer(Base):
    """
    A roster entry. Email is not unique: family members or
    teammates may share one address.
    """
    __tablename__ = "club_players"
    __table_args__ = (
        UniqueConstraint(
            "club_id", "first_name", "last_name", "date_of_birth",
            name="uq_club_players_identity",
        ),
    )

    id:            Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    club_id:       Mapped[int]           = mapped_column(ForeignKey("clubs.id"), index=True)
    first_name:    Mapped[str]           = mapped_column(String(50))
    last_name:     Mapped[str]           = mapped_column(String(50))
    date_of_birth: Mapped[date]          = mapped_column(Date)
    email:         Mapped[str]           = mapped_column(String(254), index=True)
    is_active:     Mapped[bool]          = mapped_column(Boolean, default=True)
    registered_at: Mapped[datetime]      = mapped_column(DateTime, default=func.now())
    shorts:        Mapped[str]           = mapped_column(String(20), default=ShortsColour.UNRESTRICTED)
    notes:         Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    club:        Mapped["Club"]                     = relationship(back_populates="players")
    assignments: Mapped[List["CarnivalClubPlayer"]] = relationship(back_populates="club_player")

    @property
    def identity(self) -> tuple[str, str, date]:
        return (self.first_name, self.last_name, self.date_of_birth)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def initials(self) -> str:
        first = self.first_name[:1].upper()
        last  = self.last_name[:1].upper()
        return f"{first}.{last}."

    def age(self, on: Optional[date] = None) -> int:
        on = on or date.today()
        dob = self.date_of_birth
        years = on.year - dob.year
        if (on.month, on.day) < (dob.month, dob.day):
            years -= 1
        return years

    @property
    def is_masters_eligible(self) -> bool:
        return self.age() >= MASTERS_MIN_AGE


class Carnival(Base):
    """A carnival, imported from MySideline or entered by an organiser."""
    __tablename__ = "carnivals"

    id:                    Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    title:                 Mapped[str]           = mapped_column(String(255))
    subtitle:              Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    event_date:            Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    state:                 Mapped[Optional[str]] = mapped_column(String(3), nullable=True)

    location_address_part1: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    location_address_part2: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    location_address_part3: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    location_address_part4: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    organiser_contact_name:  Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    organiser_contact_email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True)

    team_registration_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))
    per_player_fee:        Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0.00"))

    # ── MySideline provenance ────────────────────────────────────────────────
    my_sideline_id:        Mapped[Optional[str]]      = mapped_column(String(64), unique=True, nullable=True)
    my_sideline_subtitle:  Mapped[Optional[str]]      = mapped_column(String(255), nullable=True)
    last_my_sideline_sync: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    # Set once at import time, never overwritten
    original_my_sideline_contact_email: Mapped[Optional[str]] = mapped_column(String(254), nullable=True)
    is_manually_entered:   Mapped[bool]               = mapped_column(Boolean, default=False)

    # ── Ownership ────────────────────────────────────────────────────────────
    club_id:            Mapped[Optional[int]]      = mapped_column(ForeignKey("clubs.id"), nullable=True)
    claimed_by_user_id: Mapped[Optional[int]]      = mapped_column(ForeignKey("users.id"), nullable=True)
    claimed_at:         Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    is_active:  Mapped[bool]     = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    attendances: Mapped[List["CarnivalClub"]] = relationship(
        back_populates="carnival", cascade="all, delete-orphan"
    )

    @property
    def claim_state(self) -> str:
        if self.claimed_by_user_id is None:
            return ClaimState.UNCLAIMED
        return ClaimState.CLAIMED

    @property
    def location_parts(self) -> list[str]:
        parts = [
            self.location_address_part1,
            self.location_address_part2,
            self.location_address_part3,
            self.location_address_part4,
        ]
        return [p for p in parts if p]


class CarnivalClub(Base):
    """A club's attendance at a carnival."""
    __tablename__ = "carnival_clubs"
    __table_args__ = (
        UniqueConstraint("carnival_id", "club_id", name="uq_carnival_clubs_carnival_club"),
        CheckConstraint("number_of_teams >= 1", name="ck_carnival_clubs_number_of_teams"),
    )

    id:               Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    carnival_id:      Mapped[int]           = mapped_column(ForeignKey("carnivals.id", ondelete="CASCADE"), index=True)
    club_id:          Mapped[int]           = mapped_column(ForeignKey("clubs.id", ondelete="CASCADE"), index=True)
    number_of_teams:  Mapped[int]           = mapped_column(Integer, default=1)
    is_active:        Mapped[bool]          = mapped_column(Boolean, default=True)
    approval_status:  Mapped[str]           = mapped_column(String(20), default=ApprovalStatus.PENDING)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    registered_at:    Mapped[datetime]      = mapped_column(DateTime, default=func.now())

    carnival: Mapped["Carnival"]                 = relationship(back_populates="attendances")
    club:     Mapped["Club"]                     = relationship()
    players:  Mapped[List["CarnivalClubPlayer"]] = relationship(
        back_populates="carnival_club", cascade="all, delete-orphan"
    )


class CarnivalClubPlayer(Base):
    """
    A roster player assigned to a club's attendance.
    team_number is None while the player is not yet placed in a team.
    """
    __tablename__ = "carnival_club_players"
    __table_args__ = (
        UniqueConstraint(
            "carnival_club_id", "club_player_id",
            name="uq_carnival_club_players_assignment",
        ),
        CheckConstraint("team_number >= 1", name="ck_carnival_club_players_team_number"),
    )

    id:                Mapped[int]           = mapped_column(Integer, primary_key=True, autoincrement=True)
    carnival_club_id:  Mapped[int]           = mapped_column(
        ForeignKey("carnival_clubs.id", ondelete="CASCADE"), index=True
    )
    club_player_id:    Mapped[int]           = mapped_column(
        ForeignKey("club_players.id", ondelete="CASCADE"), index=True
    )
    is_active:         Mapped[bool]          = mapped_column(Boolean, default=True)
    attendance_status: Mapped[str]           = mapped_column(String(20), default=AttendanceStatus.CONFIRMED)
    team_number:       Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    added_at:          Mapped[datetime]      = mapped_column(DateTime, default=func.now())
    notes:             Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    carnival_club: Mapped["CarnivalClub"] = relationship(back_populates="players")
    club_player:   Mapped["ClubPlayer"]   = relationship(back_populates="assignments")

    @property
    def counts_towards_fees(self) -> bool:
        return self.is_active and self.attendance_status == AttendanceStatus.CONFIRMED


class Sponsor(Base):
    """
    Club-scoped sponsor. The same business may sponsor several clubs, or one
    club in several places, so the name alone is not an identity.
    """
    __tablename__ = "sponsors"
    __table_args__ = (
        UniqueConstraint(
            "sponsor_name", "club_id", "state", "location",
            name="uq_sponsors_identity",
        ),
    )

    id:                Mapped[int]      = mapped_column(Integer, primary_key=True, autoincrement=True)
    sponsor_name:      Mapped[str]      = mapped_column(String(255))
    club_id:           Mapped[int]      = mapped_column(ForeignKey("clubs.id"), index=True)
    # Empty string rather than NULL so the unique constraint covers them
    state:             Mapped[str]      = mapped_column(String(3), default="")
    location:          Mapped[str]      = mapped_column(String(255), default="")
    sponsorship_level: Mapped[str]      = mapped_column(String(20), default=SponsorshipLevel.SUPPORTING)
    display_order:     Mapped[int]      = mapped_column(Integer, default=999)
    is_active:         Mapped[bool]     = mapped_column(Boolean, default=True)
    created_at:        Mapped[datetime] = mapped_column(DateTime, default=func.now())

    club: Mapped["Club"] = relationship(back_populates="sponsors")

    @property
    def level_priority(self) -> int:
        return SponsorshipLevel.PRIORITY.get(self.sponsorship_level, 999)
