"""
Tests for calendar flattening and date windows
"""
import datetime as dt

from cozi_reader.integrations.cozi import CalendarMonth, flatten, months_touched, week_window
from cozi_reader.integrations.cozi.calendar import as_date, parse_day

from conftest import calendar_item, month_payload


def make_month(days, items) -> CalendarMonth:
    return CalendarMonth.model_validate(month_payload(2024, 3, days, items))


# ============================================
# FLATTENING
# ============================================

class TestFlatten:
    """Test day/item map flattening"""

    def test_one_entry_per_reference(self):
        """Test each (day, item id) reference yields exactly one entry"""
        month = make_month(
            {
                "2024-03-04": ["a", "b"],
                "2024-03-05": ["c"],
            },
            [
                calendar_item("a", "2024-03-04"),
                calendar_item("b", "2024-03-04"),
                calendar_item("c", "2024-03-05"),
            ],
        )

        entries = list(flatten(month))

        assert [(e.date.isoformat(), e.item.id) for e in entries] == [
            ("2024-03-04", "a"),
            ("2024-03-04", "b"),
            ("2024-03-05", "c"),
        ]

    def test_multi_day_item_listed_on_each_day(self):
        """Test an item referenced from two days appears once per day"""
        month = make_month(
            {"2024-03-09": ["trip"], "2024-03-10": ["trip"]},
            [calendar_item("trip", "2024-03-09", dateSpan=2)],
        )

        entries = list(flatten(month))

        assert [e.date for e in entries] == [dt.date(2024, 3, 9), dt.date(2024, 3, 10)]
        assert all(e.item.id == "trip" for e in entries)

    def test_unknown_reference_skipped(self):
        """Test a reference with no matching item is silently dropped"""
        month = make_month(
            {"2024-03-04": ["missing", "a"]},
            [calendar_item("a", "2024-03-04")],
        )

        assert [e.item.id for e in flatten(month)] == ["a"]

    def test_reference_without_id_skipped(self):
        """Test references lacking an id and null day lists are ignored"""
        payload = month_payload(2024, 3, {}, [calendar_item("a", "2024-03-04")])
        payload["days"] = {"2024-03-04": [{"itemId": "bogus"}, {"id": "a"}], "2024-03-05": None}
        month = CalendarMonth.model_validate(payload)

        assert [(e.date.isoformat(), e.item.id) for e in flatten(month)] == [("2024-03-04", "a")]

    def test_unparsable_day_skipped(self):
        """Test day keys that are not dates are ignored"""
        month = make_month(
            {"not-a-day": ["a"], "2024-03-04": ["a"]},
            [calendar_item("a", "2024-03-04")],
        )

        assert [e.date for e in flatten(month)] == [dt.date(2024, 3, 4)]

    def test_day_order_follows_document(self):
        """Test days are emitted in the document's key order"""
        month = make_month(
            {"2024-03-20": ["b"], "2024-03-02": ["a"]},
            [calendar_item("a", "2024-03-02"), calendar_item("b", "2024-03-20")],
        )

        assert [e.item.id for e in flatten(month)] == ["b", "a"]

    def test_empty_month(self):
        """Test an empty or null month flattens to nothing"""
        assert list(flatten(CalendarMonth.model_validate({"days": None, "items": None}))) == []

    def test_flattened_month_is_reiterable(self):
        """Test the lazy view can be iterated more than once"""
        month = make_month({"2024-03-04": ["a"]}, [calendar_item("a", "2024-03-04")])
        flattened = flatten(month)

        assert list(flattened) == list(flattened)
        assert len(list(flattened)) == 1


# ============================================
# DATES
# ============================================

class TestDates:
    """Test day parsing and week windows"""

    def test_parse_day_accepts_datetime_strings(self):
        """Test timestamp-style keys are reduced to their date"""
        assert parse_day("2024-03-05") == dt.date(2024, 3, 5)
        assert parse_day("2024-03-05T00:00:00") == dt.date(2024, 3, 5)

    def test_parse_day_rejects_garbage(self):
        """Test invalid keys parse to None"""
        assert parse_day("tomorrow") is None
        assert parse_day("2024-02-30") is None
        assert parse_day("") is None

    def test_as_date_drops_time(self):
        """Test datetimes are bucketed by calendar date"""
        assert as_date(dt.datetime(2024, 3, 5, 23, 59)) == dt.date(2024, 3, 5)
        assert as_date(dt.date(2024, 3, 5)) == dt.date(2024, 3, 5)

    def test_week_window_midweek(self):
        """Test a Wednesday maps to its Monday-start week"""
        assert week_window(dt.date(2024, 3, 6)) == (dt.date(2024, 3, 4), dt.date(2024, 3, 11))

    def test_week_window_monday_and_sunday(self):
        """Test Monday starts its own week and Sunday ends the previous one"""
        assert week_window(dt.date(2024, 3, 4))[0] == dt.date(2024, 3, 4)
        assert week_window(dt.date(2024, 3, 10))[0] == dt.date(2024, 3, 4)

    def test_months_touched_single_month(self):
        """Test a week inside one month touches one month"""
        assert months_touched(dt.date(2024, 3, 4), dt.date(2024, 3, 11)) == [(2024, 3)]

    def test_months_touched_across_month_boundary(self):
        """Test a week straddling a month end touches both months"""
        assert months_touched(dt.date(2024, 2, 26), dt.date(2024, 3, 4)) == [(2024, 2), (2024, 3)]

    def test_months_touched_across_year_boundary(self):
        """Test December and the following January are both fetched"""
        assert months_touched(dt.date(2024, 12, 30), dt.date(2025, 1, 6)) == [(2024, 12), (2025, 1)]

    def test_months_touched_window_ending_on_first(self):
        """Test an exclusive end on the 1st does not pull in that month"""
        assert months_touched(dt.date(2024, 4, 24), dt.date(2024, 5, 1)) == [(2024, 4)]
