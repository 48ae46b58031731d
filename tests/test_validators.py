"""
Unit tests — Input validation (validators.py).

Tests Pydantic v2 models for robustness against malformed caller input:
  - PlayerIdentity: names, date of birth bounds
  - PlayerAttributes / PlayerPatch: email, shorts colour, notes
  - MySidelineFeedRecord / CarnivalData: state codes, fees
  - SponsorData: empty identity parts

All tests are synchronous; no database session required.
"""
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest
from pydantic import ValidationError

from registry.validators import (
    CarnivalData,
    CarnivalPatch,
    MySidelineFeedRecord,
    PlayerAttributes,
    PlayerIdentity,
    PlayerPatch,
    SponsorData,
)


def _identity(**kwargs) -> PlayerIdentity:
    defaults = dict(first_name="Sam", last_name="Taylor", date_of_birth=date(1980, 3, 14))
    defaults.update(kwargs)
    return PlayerIdentity(**defaults)


# ─────────────────────────── PlayerIdentity ───────────────────────────────────

class TestPlayerIdentityNames:
    """Names accept letters, spaces, hyphens and apostrophes."""

    def test_simple_name(self) -> None:
        assert _identity().first_name == "Sam"

    def test_case_normalised(self) -> None:
        i = _identity(first_name="sAM", last_name="taylor")
        assert (i.first_name, i.last_name) == ("Sam", "Taylor")

    def test_whitespace_stripped(self) -> None:
        assert _identity(first_name="  Sam  ").first_name == "Sam"

    def test_apostrophe_and_hyphen(self) -> None:
        assert _identity(last_name="o'neil-smith").last_name == "O'neil-smith"

    def test_single_letter(self) -> None:
        assert _identity(first_name="j").first_name == "J"

    def test_fifty_chars_ok(self) -> None:
        assert len(_identity(last_name="a" * 50).last_name) == 50


class TestPlayerIdentityInvalidNames:
    @pytest.mark.parametrize("name", ["", "   ", "a" * 51, "Sam3", "Sam!", "-Sam", "Sam'"])
    def test_rejected(self, name: str) -> None:
        with pytest.raises(ValidationError):
            _identity(first_name=name)


class TestPlayerIdentityDateOfBirth:
    def test_future_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _identity(date_of_birth=date.today() + timedelta(days=1))

    def test_too_young_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _identity(date_of_birth=date(date.today().year - 10, 1, 1))

    def test_too_old_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _identity(date_of_birth=date(date.today().year - 101, 1, 1))

    def test_identity_is_frozen(self) -> None:
        i = _identity()
        with pytest.raises(ValidationError):
            i.first_name = "Alex"


# ─────────────────────────── Player attributes ───────────────────────────────

class TestPlayerAttributes:
    def test_email_lowercased(self) -> None:
        assert PlayerAttributes(email=" Sam@Example.COM ").email == "sam@example.com"

    @pytest.mark.parametrize("email", ["not-an-email", "a@b", "@example.com", "sam@ex ample.com"])
    def test_bad_email(self, email: str) -> None:
        with pytest.raises(ValidationError):
            PlayerAttributes(email=email)

    def test_shorts_default(self) -> None:
        assert PlayerAttributes(email="s@example.com").shorts == "Unrestricted"

    def test_shorts_unknown(self) -> None:
        with pytest.raises(ValidationError):
            PlayerAttributes(email="s@example.com", shorts="Purple")

    def test_notes_limit(self) -> None:
        with pytest.raises(ValidationError):
            PlayerAttributes(email="s@example.com", notes="x" * 1001)

    def test_blank_notes_become_none(self) -> None:
        assert PlayerAttributes(email="s@example.com", notes="   ").notes is None

    def test_patch_forbids_identity_fields(self) -> None:
        with pytest.raises(ValidationError):
            PlayerPatch(first_name="Alex")


# ─────────────────────────── Carnivals ───────────────────────────────────────

class TestCarnivalPayloads:
    def test_feed_state_uppercased(self) -> None:
        assert MySidelineFeedRecord(title="Cup", state=" nsw ").state == "NSW"

    def test_feed_bad_state(self) -> None:
        with pytest.raises(ValidationError):
            MySidelineFeedRecord(title="Cup", state="XYZ")

    def test_feed_blank_title(self) -> None:
        with pytest.raises(ValidationError):
            MySidelineFeedRecord(title="   ")

    def test_feed_blank_email_is_none(self) -> None:
        assert MySidelineFeedRecord(title="Cup", organiser_contact_email="  ").organiser_contact_email is None

    def test_fees_default_zero(self) -> None:
        d = CarnivalData(title="Cup")
        assert d.team_registration_fee == Decimal("0.00")
        assert d.per_player_fee == Decimal("0.00")

    def test_fee_quantized(self) -> None:
        assert CarnivalData(title="Cup", team_registration_fee="49.999").team_registration_fee == Decimal("50.00")

    def test_negative_fee(self) -> None:
        with pytest.raises(ValidationError):
            CarnivalPatch(per_player_fee=Decimal("-1"))

    def test_patch_rejects_unknown_field(self) -> None:
        with pytest.raises(ValidationError):
            CarnivalPatch(original_colour="red")


# ─────────────────────────── Sponsors ────────────────────────────────────────

class TestSponsorData:
    def test_missing_parts_become_empty(self) -> None:
        d = SponsorData(sponsor_name="Bakery", state=None, location=None)
        assert (d.state, d.location) == ("", "")

    def test_state_normalised(self) -> None:
        assert SponsorData(sponsor_name="Bakery", state="vic").state == "VIC"

    def test_blank_name(self) -> None:
        with pytest.raises(ValidationError):
            SponsorData(sponsor_name="  ")
