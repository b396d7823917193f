"""Tests for field normalizers."""

from datetime import date, datetime

import pytest

from silver_etl.config import (
    COUNTRY_LABELS,
    GENDER_LABELS,
    MARITAL_STATUS_LABELS,
    PRODUCT_LINE_LABELS,
)
from silver_etl.transform.normalize import (
    code_to_label,
    future_date_guard,
    parse_int_date,
    rewrite_separator,
    split_key,
    strip_prefix,
    strip_separator,
    to_date,
    trim,
)


class TestTrim:
    """Tests for whitespace trimming."""

    def test_trim_padded(self):
        """Test leading and trailing whitespace is removed."""
        assert trim("  Jon \t") == "Jon"

    def test_trim_clean_is_identity(self):
        """Test clean input is unchanged."""
        assert trim("Jon") == "Jon"

    def test_trim_none(self):
        """Test None passes through."""
        assert trim(None) is None


class TestCodeToLabel:
    """Tests for code to label mapping."""

    @pytest.mark.parametrize("code,expected", [
        ("S", "Single"),
        ("m", "Married"),
        (" s ", "Single"),
        ("X", "n/a"),
        ("", "n/a"),
        (None, "n/a"),
    ])
    def test_marital_status(self, code, expected):
        """Test marital status codes."""
        assert code_to_label(code, MARITAL_STATUS_LABELS, "n/a") == expected

    @pytest.mark.parametrize("code,expected", [
        ("F", "Female"),
        ("female", "Female"),
        (" MALE ", "Male"),
        ("m", "Male"),
        ("unknown", "Other"),
        (None, "Other"),
    ])
    def test_gender_synonyms(self, code, expected):
        """Test gender codes and spelled-out synonyms."""
        assert code_to_label(code, GENDER_LABELS, "Other") == expected

    @pytest.mark.parametrize("code,expected", [
        ("M", "Mountain"),
        ("R", "Road"),
        ("S", "Other Sales"),
        ("t ", "Touring"),
        ("Z", "n/a"),
    ])
    def test_product_line(self, code, expected):
        """Test product line codes."""
        assert code_to_label(code, PRODUCT_LINE_LABELS, "n/a") == expected

    @pytest.mark.parametrize("code,expected", [
        ("DE", "Germany"),
        ("US", "United States"),
        ("USA", "United States"),
        (" Australia ", "Australia"),
        ("", "n/a"),
        ("   ", "n/a"),
        (None, "n/a"),
    ])
    def test_country_passthrough(self, code, expected):
        """Test country aliases, passthrough and empty fallback."""
        assert code_to_label(code, COUNTRY_LABELS, "n/a", passthrough=True) == expected


class TestKeyRewrites:
    """Tests for id prefix and separator helpers."""

    def test_strip_prefix_present(self):
        """Test NAS marker is removed."""
        assert strip_prefix("NASAW00011000", "NAS") == "AW00011000"

    def test_strip_prefix_absent(self):
        """Test ids without the marker are unchanged."""
        assert strip_prefix("AW00011000", "NAS") == "AW00011000"

    def test_strip_prefix_only_at_start(self):
        """Test marker elsewhere in the id is kept."""
        assert strip_prefix("AWNAS1", "NAS") == "AWNAS1"

    def test_strip_separator(self):
        """Test every separator occurrence is removed."""
        assert strip_separator("AW-000-11000", "-") == "AW00011000"
        assert strip_separator(None, "-") is None

    def test_rewrite_separator_first_chars_only(self):
        """Test only the first characters are kept and rewritten."""
        assert rewrite_separator("CO-RF-FR-R92B-58", "-", "_", 5) == "CO_RF"

    def test_split_key_with_skipped_separator(self):
        """Test compound product key split into prefix and local key."""
        assert split_key("CO-RF-FR-R92B-58", 6, prefix_length=5) == ("CO-RF", "FR-R92B-58")

    def test_split_key_default_prefix(self):
        """Test prefix defaults to everything before the offset."""
        assert split_key("ABCDEF", 2) == ("AB", "CDEF")

    def test_split_key_none(self):
        """Test None compound key."""
        assert split_key(None, 6) == (None, None)


class TestParseIntDate:
    """Tests for YYYYMMDD integer dates."""

    def test_valid_date(self):
        """Test a valid 8-digit date."""
        assert parse_int_date(20101229) == date(2010, 12, 29)

    @pytest.mark.parametrize("value", [0, -20101229, 5489, 201012290, None])
    def test_rejected_encodings(self, value):
        """Test zero, negative and wrong-length values are null."""
        assert parse_int_date(value) is None

    def test_invalid_calendar_day_is_null(self):
        """Test 8 digits that are not a real date (Feb 30) are null."""
        assert parse_int_date(20230230) is None

    def test_invalid_month_is_null(self):
        """Test month 13 is null."""
        assert parse_int_date(20231301) is None

    def test_digit_string(self):
        """Test digit strings are accepted."""
        assert parse_int_date("20110105") == date(2011, 1, 5)

    def test_never_raises_on_garbage(self):
        """Test non-numeric input is null."""
        assert parse_int_date("2011-01-05") is None
        assert parse_int_date(2011.5) is None
        assert parse_int_date(True) is None


class TestToDate:
    """Tests for date coercion."""

    def test_datetime_to_date(self):
        """Test datetimes lose their time part."""
        assert to_date(datetime(2011, 7, 1, 10, 30)) == date(2011, 7, 1)

    def test_iso_string(self):
        """Test ISO strings."""
        assert to_date("2011-07-01") == date(2011, 7, 1)

    def test_unparseable(self):
        """Test garbage is null."""
        assert to_date("not a date") is None
        assert to_date(None) is None


class TestFutureDateGuard:
    """Tests for future date nulling."""

    def test_future_is_null(self):
        """Test dates after today are nulled."""
        assert future_date_guard(date(2999, 1, 1), date(2025, 1, 1)) is None

    def test_today_is_kept(self):
        """Test today itself is not in the future."""
        assert future_date_guard(date(2025, 1, 1), date(2025, 1, 1)) == date(2025, 1, 1)

    def test_past_is_kept(self):
        """Test past dates are kept."""
        assert future_date_guard(date(1971, 10, 6), date(2025, 1, 1)) == date(1971, 10, 6)
