import json
from datetime import date

import pytest

from timecard.models import ApprovalStatus, HoursBreakdown
from timecard.overtime import DailyTierRule
from timecard.service import build_view
from timecard.summary import aggregate, build_day_summaries, summarize


def test_two_days_aggregate_per_day_tiers(make_shift):
    events = make_shift("2024-03-04", 9) + make_shift("2024-03-05", 13)

    totals = summarize(events)

    assert totals.total == pytest.approx(22)
    assert totals.regular == pytest.approx(16)
    assert totals.overtime == pytest.approx(5)
    assert totals.double_time == pytest.approx(1)


def test_daily_tiers_are_not_pooled_across_days(make_shift):
    # Two 6h days stay regular even though together they exceed 8h.
    totals = summarize(make_shift("2024-03-04", 6) + make_shift("2024-03-05", 6))

    assert totals == HoursBreakdown(total=12, regular=12, overtime=0, double_time=0)


def test_aggregate_equals_bucket_sums_in_any_order(make_shift):
    events = []
    for n, hours in enumerate([7.3, 9.1, 12.7, 3.3, 14.05]):
        events += make_shift(date(2024, 3, 4 + n), hours)
    summaries = build_day_summaries(events)

    forward = aggregate(summaries)
    backward = aggregate(list(reversed(summaries)))

    assert forward == backward
    assert forward.regular == pytest.approx(sum(s.hours.regular for s in summaries))
    assert forward.overtime == pytest.approx(sum(s.hours.overtime for s in summaries))
    assert forward.double_time == pytest.approx(sum(s.hours.double_time for s in summaries))
    assert forward.regular + forward.overtime + forward.double_time == pytest.approx(forward.total)


def test_empty_selection_is_zero():
    assert summarize([]) == HoursBreakdown.zero()


def test_day_summaries_carry_hours_and_status(make_shift):
    events = make_shift("2024-03-04", 10, status=ApprovalStatus.SUBMITTED) + make_shift("2024-03-05", 4)

    summaries = build_day_summaries(events)

    assert [s.work_date for s in summaries] == [date(2024, 3, 5), date(2024, 3, 4)]
    assert summaries[0].status is ApprovalStatus.DRAFT
    assert summaries[1].status is ApprovalStatus.SUBMITTED
    assert summaries[1].hours.overtime == pytest.approx(2)


def test_custom_rule_flows_through(make_shift):
    totals = summarize(make_shift("2024-03-04", 11), DailyTierRule(daily_threshold=10, double_time_threshold=10.5))

    assert (totals.regular, totals.overtime, totals.double_time) == pytest.approx((10, 0.5, 0.5))


def test_view_is_plain_serializable_data(make_shift, make_event):
    events = make_shift("2024-03-05", 9, job="Harbor Bridge") + [make_event("clock_in", "2024-03-06", "07:00")]

    view = build_view(events, "week", "", date(2024, 3, 6))
    payload = json.loads(json.dumps(view.to_dict()))

    assert payload["start"] == "2024-03-03"
    assert payload["end"] == "2024-03-09"
    assert [d["date"] for d in payload["days"]] == ["2024-03-06", "2024-03-05"]
    assert payload["days"][0]["hours"]["total"] == 0
    assert payload["days"][1]["hours"]["overtime"] == pytest.approx(1)
    assert payload["days"][1]["events"][0]["job"]["name"] == "Harbor Bridge"
    assert payload["totals"]["regular"] == pytest.approx(8)
    assert payload["record_count"] == 3


def test_breakdowns_add_bucket_by_bucket(make_shift):
    newer, older = build_day_summaries(make_shift("2024-03-04", 9) + make_shift("2024-03-05", 13))

    combined = HoursBreakdown.zero() + newer.hours + older.hours

    assert combined.total == pytest.approx(22)
    assert (combined.regular, combined.overtime, combined.double_time) == pytest.approx((16, 5, 1))
    assert combined.to_dict() == pytest.approx(aggregate([newer, older]).to_dict())
