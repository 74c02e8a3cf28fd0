"""Tests for recurrence expansion into UTC occurrences."""

from dataclasses import replace
from datetime import date, timedelta

import pytest

from scheduling_factories import make_request, utc
from tutorcenter.core.exceptions import (
    EmptyWeekdaySelection,
    InvalidDateRange,
    OccurrenceLimitExceeded,
)
from tutorcenter.domain.recurrence import check_expansion_limits, enumerate_occurrences


class TestEnumerateOccurrences:
    def test_mondays_and_wednesdays_over_two_weeks(self):
        occurrences = enumerate_occurrences(make_request())

        assert [occ.local_date for occ in occurrences] == [
            date(2025, 1, 6),
            date(2025, 1, 8),
            date(2025, 1, 13),
            date(2025, 1, 15),
        ]
        assert occurrences[0].start_at == utc(2025, 1, 6, 15, 0)
        assert occurrences[0].end_at == utc(2025, 1, 6, 16, 0)
        assert occurrences[-1].end_at == utc(2025, 1, 15, 16, 0)

    def test_expansion_is_repeatable(self):
        request = make_request()
        assert enumerate_occurrences(request) == enumerate_occurrences(request)

    def test_sorted_by_start(self):
        occurrences = enumerate_occurrences(make_request(weekdays=[7, 1, 4]))
        starts = [occ.start_at for occ in occurrences]
        assert starts == sorted(starts)

    def test_single_day_range(self):
        occurrences = enumerate_occurrences(
            make_request(start_date="2025-01-08", end_date="2025-01-08", weekdays=[3])
        )
        assert len(occurrences) == 1

    def test_no_matching_weekday_yields_nothing(self):
        occurrences = enumerate_occurrences(
            make_request(start_date="2025-01-06", end_date="2025-01-10", weekdays=[6, 7])
        )
        assert occurrences == []

    def test_offset_follows_dst_change(self):
        occurrences = enumerate_occurrences(
            make_request(start_date="2025-03-03", end_date="2025-03-12")
        )
        assert [occ.start_at for occ in occurrences] == [
            utc(2025, 3, 3, 15, 0),
            utc(2025, 3, 5, 15, 0),
            utc(2025, 3, 10, 14, 0),
            utc(2025, 3, 12, 14, 0),
        ]

    def test_start_inside_spring_forward_gap(self):
        occurrences = enumerate_occurrences(
            make_request(
                start_date="2025-03-09",
                end_date="2025-03-09",
                weekdays=[7],
                start_time="02:30",
                end_time="03:30",
            )
        )
        assert len(occurrences) == 1
        assert occurrences[0].start_at == utc(2025, 3, 9, 7, 0)
        assert occurrences[0].end_at == utc(2025, 3, 9, 7, 30)

    def test_session_inside_gap_keeps_its_duration(self):
        occurrences = enumerate_occurrences(
            make_request(
                start_date="2025-03-09",
                end_date="2025-03-09",
                weekdays=[7],
                start_time="02:15",
                end_time="02:45",
            )
        )
        assert len(occurrences) == 1
        assert occurrences[0].start_at == utc(2025, 3, 9, 7, 0)
        assert occurrences[0].end_at == utc(2025, 3, 9, 7, 30)

    def test_gap_day_does_not_drop_the_rest_of_the_month(self):
        occurrences = enumerate_occurrences(
            make_request(
                start_date="2025-03-01",
                end_date="2025-03-31",
                weekdays=[7],
                start_time="02:00",
                end_time="02:30",
            )
        )
        assert [occ.local_date for occ in occurrences] == [
            date(2025, 3, 2),
            date(2025, 3, 9),
            date(2025, 3, 16),
            date(2025, 3, 23),
            date(2025, 3, 30),
        ]
        assert occurrences[0].start_at == utc(2025, 3, 2, 7, 0)
        assert occurrences[1].start_at == utc(2025, 3, 9, 7, 0)
        assert occurrences[1].end_at == utc(2025, 3, 9, 7, 30)
        assert occurrences[2].start_at == utc(2025, 3, 16, 6, 0)
        assert all(occ.end_at - occ.start_at == timedelta(minutes=30) for occ in occurrences)

    def test_empty_weekdays(self):
        request = replace(make_request(), weekdays=frozenset())
        with pytest.raises(EmptyWeekdaySelection):
            enumerate_occurrences(request)

    def test_end_before_start(self):
        request = make_request(start_date="2025-01-19", end_date="2025-01-06")
        with pytest.raises(InvalidDateRange) as exc_info:
            enumerate_occurrences(request)
        assert exc_info.value.details["field"] == "endDate"


class TestExpansionLimits:
    def test_occurrence_ceiling(self):
        with pytest.raises(OccurrenceLimitExceeded) as exc_info:
            enumerate_occurrences(make_request(), max_occurrences=3)
        assert exc_info.value.details["requested"] == 4
        assert exc_info.value.details["unit"] == "occurrences"

    def test_exactly_at_ceiling(self):
        assert len(enumerate_occurrences(make_request(), max_occurrences=4)) == 4

    def test_range_ceiling_checked_before_expansion(self):
        request = make_request(start_date="2025-01-01", end_date="2034-12-31", weekdays=[1])
        with pytest.raises(OccurrenceLimitExceeded) as exc_info:
            check_expansion_limits(request, max_occurrences=None, max_range_days=731)
        assert exc_info.value.details["unit"] == "days"

    def test_daily_for_a_year_fits_default_ceiling(self):
        request = make_request(
            start_date="2025-01-01", end_date="2025-12-31", weekdays=[1, 2, 3, 4, 5, 6, 7]
        )
        assert check_expansion_limits(request, max_occurrences=366, max_range_days=731) == 365
