"""
Input validation for service payloads — Pydantic v2 models.

Names are capitalised, emails lowercased, states upper-cased and fees
quantised to cents before anything is written.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from registry.models.models import AUSTRALIAN_STATES

# Letters, spaces, hyphens and apostrophes; must start and end with a letter
_NAME_RE = re.compile(r"^[^\W\d_](?:[^\W\d_]|[\s\-'])*[^\W\d_]$|^[^\W\d_]$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

MIN_PLAYER_AGE = 16
MAX_PLAYER_AGE = 100


def _normalise_name(v: str) -> str:
    v = v.strip()
    if not v or len(v) > 50:
        raise ValueError("Name must be between 1 and 50 characters")
    if not _NAME_RE.match(v):
        raise ValueError("Name may only contain letters, spaces, hyphens and apostrophes")
    return v[0].upper() + v[1:].lower()


def normalise_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip().lower()
    if len(v) < 5 or len(v) > 254 or not _EMAIL_RE.match(v):
        raise ValueError("Email must be a valid email address")
    return v


def _normalise_state(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip().upper()
    if v not in AUSTRALIAN_STATES:
        raise ValueError(f"State must be one of: {', '.join(AUSTRALIAN_STATES)}")
    return v


def _normalise_fee(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is None:
        return None
    if v < 0:
        raise ValueError("Fees cannot be negative")
    return v.quantize(Decimal("0.01"))


def _strip_or_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


# ── Roster ────────────────────────────────────────────────────────────────────

class PlayerIdentity(BaseModel):
    """
    The (first name, last name, date of birth) part of a player's identity.
    Together with the club it uniquely determines a roster entry.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    date_of_birth: date

    @field_validator("first_name", "last_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _normalise_name(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date) -> date:
        today = date.today()
        if v > today:
            raise ValueError("Date of birth cannot be in the future")
        age = today.year - v.year
        if age < MIN_PLAYER_AGE or age > MAX_PLAYER_AGE:
            raise ValueError(
                f"Player must be between {MIN_PLAYER_AGE} and {MAX_PLAYER_AGE} years old"
            )
        return v


class PlayerAttributes(BaseModel):
    """Mutable roster attributes supplied when a player is added."""

    email: str
    shorts: Literal["Unrestricted", "Red", "Yellow", "Blue", "Green"] = "Unrestricted"
    notes: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalise_email(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        v = _strip_or_none(v)
        if v and len(v) > 1000:
            raise ValueError("Notes cannot exceed 1000 characters")
        return v


class PlayerPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: Optional[str] = None
    shorts: Optional[Literal["Unrestricted", "Red", "Yellow", "Blue", "Green"]] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return normalise_email(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v: Optional[str]) -> Optional[str]:
        v = _strip_or_none(v)
        if v and len(v) > 1000:
            raise ValueError("Notes cannot exceed 1000 characters")
        return v


# ── Carnivals ────────────────────────────────────────────────────────────────

class MySidelineFeedRecord(BaseModel):
    """One event as delivered by the MySideline import collaborator."""

    title: str
    subtitle: Optional[str] = None
    my_sideline_id: Optional[str] = None
    organiser_contact_name: Optional[str] = None
    organiser_contact_email: Optional[str] = None
    event_date: Optional[datetime] = None
    state: Optional[str] = None
    location_address_part1: Optional[str] = None
    location_address_part2: Optional[str] = None
    location_address_part3: Optional[str] = None
    location_address_part4: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator(
        "subtitle", "my_sideline_id", "organiser_contact_name",
        "location_address_part1", "location_address_part2",
        "location_address_part3", "location_address_part4",
    )
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @field_validator("organiser_contact_email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return normalise_email(_strip_or_none(v))

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        return _normalise_state(_strip_or_none(v))


class CarnivalPatch(BaseModel):
    """Organiser-editable carnival fields; every field optional."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    subtitle: Optional[str] = None
    event_date: Optional[datetime] = None
    state: Optional[str] = None
    location_address_part1: Optional[str] = None
    location_address_part2: Optional[str] = None
    location_address_part3: Optional[str] = None
    location_address_part4: Optional[str] = None
    organiser_contact_name: Optional[str] = None
    organiser_contact_email: Optional[str] = None
    team_registration_fee: Optional[Decimal] = None
    per_player_fee: Optional[Decimal] = None
    is_active: Optional[bool] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        return v

    @field_validator(
        "subtitle", "organiser_contact_name",
        "location_address_part1", "location_address_part2",
        "location_address_part3", "location_address_part4",
    )
    @classmethod
    def strip_text(cls, v: Optional[str]) -> Optional[str]:
        return _strip_or_none(v)

    @field_validator("organiser_contact_email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return normalise_email(_strip_or_none(v))

    @field_validator("state")
    @classmethod
    def validate_state(cls, v: Optional[str]) -> Optional[str]:
        return _normalise_state(_strip_or_none(v))

    @field_validator("team_registration_fee", "per_player_fee")
    @classmethod
    def validate_fee(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return _normalise_fee(v)


class CarnivalData(CarnivalPatch):
    """Payload for a carnival created directly by an organiser."""

    title: str
    team_registration_fee: Decimal = Decimal("0.00")
    per_player_fee: Decimal = Decimal("0.00")


# ── Sponsors ─────────────────────────────────────────────────────────────────

class SponsorData(BaseModel):
    """
    Four-part sponsor identity plus tier. Missing state/location become empty
    strings so they take part in the composite key.
    """

    sponsor_name: str
    state: str = ""
    location: str = ""
    sponsorship_level: Literal["Gold", "Silver", "Bronze", "Supporting", "In-Kind"] = "Supporting"

    @field_validator("sponsor_name")
    @classmethod
    def validate_sponsor_name(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 255:
            raise ValueError("Sponsor name must be between 1 and 255 characters")
        return v

    @field_validator("state", mode="before")
    @classmethod
    def validate_state(cls, v: Optional[str]) -> str:
        v = _strip_or_none(v)
        return _normalise_state(v) if v else ""

    @field_validator("location", mode="before")
    @classmethod
    def validate_location(cls, v: Optional[str]) -> str:
        return _strip_or_none(v) or ""
