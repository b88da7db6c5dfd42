"""
Unit tests for the recency filter and date sort.
"""
from datetime import timedelta

from visitreport.services.visits.filters import (
    FilterPolicy,
    apply_policy,
    filter_recent,
    sort_by_visit_date,
)

from tests.conftest import NOW, make_visit


def names(rows):
    return [row.visitor_name for row in rows]


def test_filter_keeps_rows_inside_window():
    rows = [
        make_visit(1, hours_ago=1),
        make_visit(2, hours_ago=23.9),
        make_visit(3, hours_ago=24),
        make_visit(4, hours_ago=25),
    ]

    assert names(filter_recent(rows, NOW)) == ["Visitor 01", "Visitor 02", "Visitor 03"]


def test_filter_excludes_rows_without_timestamp_and_future_rows():
    rows = [make_visit(1, hours_ago=None), make_visit(2, hours_ago=-1), make_visit(3, hours_ago=0)]

    assert names(filter_recent(rows, NOW)) == ["Visitor 03"]


def test_filter_is_idempotent():
    rows = [make_visit(i, hours_ago=i * 5) for i in range(1, 8)]

    once = filter_recent(rows, NOW)
    assert filter_recent(once, NOW) == once


def test_filter_honours_custom_window():
    rows = [make_visit(1, hours_ago=2), make_visit(2, hours_ago=47)]

    assert names(filter_recent(rows, NOW, timedelta(hours=48))) == ["Visitor 01", "Visitor 02"]
    assert names(filter_recent(rows, NOW, timedelta(hours=1))) == []


def test_sort_latest_first():
    rows = [make_visit(1, hours_ago=3), make_visit(2, hours_ago=1), make_visit(3, hours_ago=2)]

    assert names(sort_by_visit_date(rows)) == ["Visitor 02", "Visitor 03", "Visitor 01"]


def test_sort_places_rows_without_timestamp_last():
    rows = [
        make_visit(1, hours_ago=None),
        make_visit(2, hours_ago=5),
        make_visit(3, hours_ago=None),
        make_visit(4, hours_ago=1),
    ]

    assert names(sort_by_visit_date(rows)) == ["Visitor 04", "Visitor 02", "Visitor 01", "Visitor 03"]


def test_sort_orders_timestampless_rows_by_display_date():
    rows = [
        make_visit(1, hours_ago=None, visit_date="2/10/2026"),
        make_visit(2, hours_ago=None, visit_date="15/10/2026"),
        make_visit(3, hours_ago=None, visit_date="9/1/2027"),
    ]

    assert names(sort_by_visit_date(rows)) == ["Visitor 03", "Visitor 02", "Visitor 01"]


def test_sort_is_stable_for_unorderable_rows():
    rows = [
        make_visit(1, hours_ago=None),
        make_visit(2, hours_ago=None, visit_date="not a date"),
        make_visit(3, hours_ago=None),
    ]

    assert names(sort_by_visit_date(rows)) == ["Visitor 01", "Visitor 02", "Visitor 03"]


def test_sort_is_stable_for_equal_timestamps():
    rows = [make_visit(i, hours_ago=2) for i in range(1, 5)]

    assert names(sort_by_visit_date(rows)) == names(rows)


def test_policy_none_returns_rows_untouched():
    rows = [make_visit(1, hours_ago=48), make_visit(2, hours_ago=None), make_visit(3, hours_ago=1)]

    assert apply_policy(rows, FilterPolicy.NONE, NOW) == rows


def test_policy_recent_filters_then_sorts():
    rows = [make_visit(1, hours_ago=48), make_visit(2, hours_ago=5), make_visit(3, hours_ago=1)]

    assert names(apply_policy(rows, FilterPolicy.RECENT, NOW)) == ["Visitor 03", "Visitor 02"]
