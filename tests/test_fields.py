"""Tests for src/data/fields.py."""

from __future__ import annotations

import pytest

from src.data.fields import (
    INT_COLUMN_MAX,
    infer_status,
    parse_date,
    parse_float,
    parse_int,
    parse_website_url,
    parse_weight,
    split_display_name,
    to_str_or_none,
)


class TestToStrOrNone:
    """Tests for scalar stringification."""

    def test_none(self) -> None:
        """None stays None."""
        assert to_str_or_none(None) is None

    def test_string_passthrough(self) -> None:
        """Strings are returned unchanged, empty ones included."""
        assert to_str_or_none("Rex") == "Rex"
        assert to_str_or_none("") == ""

    def test_int(self) -> None:
        """Integers are stringified."""
        assert to_str_or_none(42) == "42"

    def test_integral_float(self) -> None:
        """Integral floats should not gain a trailing .0."""
        assert to_str_or_none(42.0) == "42"

    def test_fractional_float(self) -> None:
        """Fractional floats keep their decimals."""
        assert to_str_or_none(1.5) == "1.5"

    def test_booleans_lowercase(self) -> None:
        """Booleans render as JSON literals."""
        assert to_str_or_none(True) == "true"
        assert to_str_or_none(False) == "false"


class TestParseWeight:
    """Tests for weight extraction."""

    def test_lbs_suffix(self) -> None:
        """A unit suffix is ignored."""
        assert parse_weight("68 lbs") == 68

    def test_decimal(self) -> None:
        """The first decimal number in free text is taken."""
        assert parse_weight("about 12.5 pounds") == 12.5

    def test_no_number(self) -> None:
        """Text without digits has no weight."""
        assert parse_weight("unknown") is None

    @pytest.mark.parametrize("value", ["", None])
    def test_falsy(self, value: str | None) -> None:
        """Empty input has no weight."""
        assert parse_weight(value) is None


class TestParseDate:
    """Tests for date normalization."""

    def test_iso_datetime(self) -> None:
        """The time part is dropped."""
        assert parse_date("2019-05-04T00:00:00") == "2019-05-04"

    def test_us_format(self) -> None:
        """Month-first dates are understood."""
        assert parse_date("05/04/2019") == "2019-05-04"

    def test_zone_converted_to_utc(self) -> None:
        """Offsets are applied before the date is taken."""
        assert parse_date("2019-05-04T23:30:00-05:00") == "2019-05-05"

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("0001-01-01T00:00:00", "0001-01-01"),
            ("0001-01-01", "0001-01-01"),
            ("0999-12-31", "0999-12-31"),
        ],
    )
    def test_early_years_zero_padded(self, value: str, expected: str) -> None:
        """Years below 1000 keep four digits."""
        assert parse_date(value) == expected

    def test_invalid(self) -> None:
        """Unparseable text yields None."""
        assert parse_date("not a date") is None

    @pytest.mark.parametrize("value", ["", None])
    def test_falsy(self, value: str | None) -> None:
        """Empty input yields None."""
        assert parse_date(value) is None


class TestParseWebsiteUrl:
    """Tests for website extraction from HTML anchors."""

    def test_anchor(self) -> None:
        """The href of an anchor is extracted."""
        html = '<a href="https://example.com/ccas" target="_blank">Visit</a>'
        assert parse_website_url(html) == "https://example.com/ccas"

    def test_anchor_case_insensitive(self) -> None:
        """Upper-case markup is matched too."""
        assert parse_website_url('<A HREF="https://x.org">x</A>') == "https://x.org"

    def test_plain_text_unchanged(self) -> None:
        """Text without an anchor is returned as is."""
        assert parse_website_url("www.example.com") == "www.example.com"

    def test_falsy(self) -> None:
        """Empty input yields None."""
        assert parse_website_url("") is None
        assert parse_website_url(None) is None


class TestInferStatus:
    """Tests for the narrow status heuristic."""

    def test_available_any_case(self) -> None:
        """The adoption phrase matches regardless of case."""
        assert infer_status("Mindy is Available for Adoption now!") == "available"
        assert infer_status("AVAILABLE FOR ADOPTION") == "available"

    def test_other_text(self) -> None:
        """Other wording is unknown."""
        assert infer_status("Adoption pending") is None

    def test_none(self) -> None:
        """Missing text is unknown."""
        assert infer_status(None) is None


class TestSplitDisplayName:
    """Tests for display name derivation."""

    def test_strips_parenthetical(self) -> None:
        """A trailing id suffix is removed."""
        assert split_display_name("Mindy (A1042472)") == "Mindy"

    def test_plain_name(self) -> None:
        """Names without a suffix are unchanged."""
        assert split_display_name("Rex") == "Rex"

    def test_absent(self) -> None:
        """A missing name becomes the empty string."""
        assert split_display_name(None) == ""

    def test_inner_parenthetical_kept(self) -> None:
        """Only a trailing suffix is removed."""
        assert split_display_name("Mr (Big) Boots") == "Mr (Big) Boots"

    def test_trims_whitespace(self) -> None:
        """Surrounding whitespace is trimmed."""
        assert split_display_name("  Rex (A1)  ") == "Rex"


class TestNumericCoercions:
    """Tests for parse_int and parse_float."""

    def test_parse_int(self) -> None:
        """Whole numbers parse from strings and floats."""
        assert parse_int("12") == 12
        assert parse_int(7.0) == 7

    def test_parse_int_invalid(self) -> None:
        """Non-numeric input yields None."""
        assert parse_int("soon") is None
        assert parse_int("") is None
        assert parse_int(None) is None

    def test_parse_int_fractional(self) -> None:
        """Fractions are not truncated into a different number."""
        assert parse_int("12.5") is None

    def test_parse_int_out_of_column_range(self) -> None:
        """Values the integer column cannot hold yield None."""
        assert parse_int("1e30") is None
        assert parse_int(INT_COLUMN_MAX + 1) is None
        assert parse_int(INT_COLUMN_MAX) == INT_COLUMN_MAX

    def test_parse_float(self) -> None:
        """Decimal strings parse to floats."""
        assert parse_float("37.9479") == pytest.approx(37.9479)
        assert parse_float("12.5") == 12.5

    def test_parse_float_invalid(self) -> None:
        """Non-numeric and non-finite input yields None."""
        assert parse_float("north") is None
        assert parse_float("nan") is None
