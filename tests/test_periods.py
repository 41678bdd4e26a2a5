"""Tests for month-key calendar helpers."""

from datetime import date

import pytest

from finplan.core.exceptions import ErrorKind, InvalidMonthError
from finplan.engine.periods import (
    add_months,
    count_months_spanned,
    format_month,
    iterate_months,
    month_bounds,
    months_between,
    parse_month,
)


class TestMonthKeys:
    """Tests for format_month / parse_month."""

    def test_format_pads_month(self) -> None:
        assert format_month(date(2025, 3, 17)) == "2025-03"

    def test_parse_returns_first_day(self) -> None:
        assert parse_month("2025-11") == date(2025, 11, 1)

    @pytest.mark.parametrize("key", ["2025-13", "2025-00", "25-01", "2025/01", "", "2025-1"])
    def test_parse_rejects_malformed_keys(self, key: str) -> None:
        with pytest.raises(InvalidMonthError) as exc:
            parse_month(key)
        assert exc.value.kind == ErrorKind.INVALID_MONTH

    def test_invalid_month_is_value_error(self) -> None:
        """Callers catching ValueError also see bad month keys."""
        with pytest.raises(ValueError):
            parse_month("nope")

    def test_month_bounds_are_half_open(self) -> None:
        assert month_bounds("2024-12") == (date(2024, 12, 1), date(2025, 1, 1))


class TestMonthArithmetic:
    """Tests for add_months and months_between."""

    def test_add_months_clamps_day(self) -> None:
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_add_months_crosses_year(self) -> None:
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_add_negative_months(self) -> None:
        assert add_months(date(2025, 1, 10), -1) == date(2024, 12, 10)

    def test_months_between_full_year(self) -> None:
        assert months_between(date(2025, 1, 1), date(2026, 1, 1)) == 12

    def test_months_between_counts_whole_months_only(self) -> None:
        assert months_between(date(2024, 1, 15), date(2024, 2, 14)) == 0
        assert months_between(date(2024, 1, 15), date(2024, 2, 15)) == 1

    def test_months_between_negative(self) -> None:
        assert months_between(date(2025, 3, 1), date(2025, 1, 1)) == -2


class TestIterateMonths:
    """Tests for iterate_months and count_months_spanned."""

    def test_includes_partial_months(self) -> None:
        months = list(iterate_months(date(2025, 1, 15), date(2025, 3, 2)))
        assert months == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]

    def test_single_month(self) -> None:
        assert list(iterate_months(date(2025, 5, 5), date(2025, 5, 5))) == [date(2025, 5, 1)]

    def test_empty_when_end_before_start(self) -> None:
        assert list(iterate_months(date(2025, 5, 1), date(2025, 3, 1))) == []

    def test_count_matches_iteration(self) -> None:
        start, end = date(2025, 1, 1), date(2026, 1, 1)
        assert count_months_spanned(start, end) == len(list(iterate_months(start, end))) == 13

    def test_count_empty_range(self) -> None:
        assert count_months_spanned(date(2025, 2, 1), date(2025, 1, 1)) == 0
