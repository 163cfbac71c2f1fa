from datetime import date, datetime, timedelta, timezone

import pytest

from app.services.performance import (
    build_analytics_report,
    calculate_monthly_score,
    calculate_overall_stats,
    calculate_weekly_score,
    filter_months,
    generate_monthly_data,
    monthly_objective_score,
    round2,
    round_half_up,
    weekly_view,
)
from app.services.week_windows import WeekWindow, month_week_windows
from factories import make_task, planned_done, utc

# Second week of January 2025
WEEK = WeekWindow(week=2, start=date(2025, 1, 5), end=date(2025, 1, 11))
NOW = utc(2025, 3, 1)


def test_empty_week_scores_zero_and_is_not_sent():
    score = calculate_weekly_score([], WEEK, NOW)

    assert (score.dp, score.rh, score.wo) == (0, 0, 0)
    assert score.total == 0
    assert score.percentage == 0
    assert score.status == "not_sent"
    assert score.tasks == []


def test_golden_two_task_week():
    created = utc(2025, 1, 7, 9, 0)
    tasks = [
        planned_done(created),
        make_task(created + timedelta(hours=1)),
    ]

    score = calculate_weekly_score(tasks, WEEK, NOW)

    assert score.dp == 20
    assert score.rh == 10
    assert score.wo == 15
    assert score.total == pytest.approx(20 * 0.4 + 10 * 0.2 + 15 * 0.4)
    assert score.percentage == pytest.approx(16.0)
    assert score.status == "completed"
    assert [t.id for t in score.tasks] == [t.id for t in tasks]


def test_weight_formula_is_applied_to_already_scaled_components():
    # dp=40, rh=15, wo=40 must total 35, not 95
    created = utc(2025, 1, 6, 8, 0)
    tasks = [planned_done(created, priority="high") for _ in range(3)]
    tasks.append(planned_done(created, completed_at=None))

    score = calculate_weekly_score(tasks, WEEK, NOW)

    assert (score.dp, score.rh, score.wo) == (40, 15, 40)
    assert score.total == pytest.approx(35.0)
    assert score.percentage == pytest.approx(35.0)


def test_completed_without_timestamp_earns_no_report_credit():
    created = utc(2025, 1, 6)
    tasks = [make_task(created, completed=True, completed_at=None)]

    score = calculate_weekly_score(tasks, WEEK, NOW)

    assert score.rh == 0
    assert score.wo == 30


def test_planning_needs_both_description_and_estimate():
    created = utc(2025, 1, 6)
    tasks = [
        make_task(created, description="only text"),
        make_task(created, estimated_time=2),
        make_task(created, description="", estimated_time=2),
        make_task(created, description="both", estimated_time=0),
    ]

    assert calculate_weekly_score(tasks, WEEK, NOW).dp == 0


def test_high_priority_bonus_and_cap():
    created = utc(2025, 1, 6)
    tasks = [
        make_task(created, priority="high", completed=True, completed_at=created),
        make_task(created, priority="high"),
        make_task(created, priority="low", completed=True, completed_at=created),
        make_task(created, priority="low"),
    ]

    # 2/4 * 30 + 1/2 * 10 = 20
    assert calculate_weekly_score(tasks, WEEK, NOW).wo == 20


def test_rounding_is_half_up():
    created = utc(2025, 1, 6)
    tasks = [planned_done(created)] + [make_task(created) for _ in range(7)]

    score = calculate_weekly_score(tasks, WEEK, NOW)

    # 1/8 of 20 is 2.5 and 1/8 of 40 is 5; Python's round() would give 2
    assert score.rh == 3
    assert score.dp == 5
    assert round_half_up(0.5) == 1
    assert round2(7.385) == pytest.approx(7.39)


def test_only_tasks_created_inside_the_window_count():
    tasks = [
        planned_done(utc(2025, 1, 4, 23, 59)),   # Saturday before
        planned_done(utc(2025, 1, 11, 23, 59)),  # last second of the week
        make_task(utc(2025, 1, 12, 0, 0)),       # next Sunday
    ]

    score = calculate_weekly_score(tasks, WEEK, NOW)

    assert len(score.tasks) == 1
    assert score.percentage == pytest.approx(40 * 0.4 + 20 * 0.2 + 30 * 0.4)


def test_status_depends_on_the_as_of_clock():
    created = utc(2025, 1, 6)
    tasks = [make_task(created, deadline=utc(2025, 1, 10, 17, 0))]

    assert calculate_weekly_score(tasks, WEEK, utc(2025, 1, 9)).status == "completed"
    assert calculate_weekly_score(tasks, WEEK, utc(2025, 1, 11)).status == "late"


def test_completed_or_undated_tasks_are_never_late():
    created = utc(2025, 1, 6)
    tasks = [
        planned_done(created, deadline=utc(2025, 1, 7)),
        make_task(created, deadline=None),
    ]

    assert calculate_weekly_score(tasks, WEEK, NOW).status == "completed"


def test_more_completions_never_lower_rh_or_wo():
    created = utc(2025, 1, 6)
    previous = None
    for done in range(5):
        tasks = [planned_done(created, priority="high") for _ in range(done)]
        tasks += [make_task(created, priority="high") for _ in range(4 - done)]
        score = calculate_weekly_score(tasks, WEEK, NOW)
        if previous is not None:
            assert score.rh >= previous.rh
            assert score.wo >= previous.wo
        previous = score


def test_timezone_aware_input_is_bucketed_by_utc_date():
    # 06:00 on Sunday in UTC+7 is still Saturday in UTC
    created = datetime(2025, 1, 5, 6, 0, tzinfo=timezone(timedelta(hours=7)))
    task = make_task(created)

    assert task.created_at == utc(2025, 1, 4, 23, 0)
    assert calculate_weekly_score([task], WEEK, NOW).tasks == []


def test_naive_datetimes_are_read_as_utc():
    task = make_task(datetime(2025, 1, 6, 12, 0))

    assert task.created_at.tzinfo is not None
    assert len(calculate_weekly_score([task], WEEK, NOW).tasks) == 1


def test_golden_month():
    created = utc(2025, 1, 7, 9, 0)
    tasks = [planned_done(created), make_task(created)]

    month = calculate_monthly_score(tasks, 2025, 1, NOW)

    assert month.month == "January"
    assert month.month_index == 1
    assert len(month.weekly_data) == 5
    second = month.weekly_data[1]
    assert (second.week, second.dp, second.rh, second.wo) == (2, 20, 10, 15)

    # empty weeks count as 0 in the mean
    staff = 16.0 / 5
    mo = 45  # 0.5 * 80 + one category * 5
    structural = staff * 0.8 + mo * 0.2
    assert month.staff == pytest.approx(round2(staff))
    assert month.structural == pytest.approx(round2(structural))
    assert month.average == pytest.approx(round2((staff + structural) / 2))


def test_month_filter_happens_before_week_filter():
    # 30 December 2024 sits in January's first window but belongs to December
    december_task = planned_done(utc(2024, 12, 30, 10, 0))

    january = calculate_monthly_score([december_task], 2025, 1, NOW)
    december = calculate_monthly_score([december_task], 2024, 12, NOW)

    assert january.weekly_data[0].tasks == []
    assert january.staff == 0
    assert december.weekly_data[-1].tasks == [december_task]
    assert december.staff > 0


def test_diversity_bonus_is_capped_at_twenty():
    created = utc(2025, 1, 6)
    tasks = [make_task(created, category=f"cat-{i}") for i in range(10)]

    assert monthly_objective_score(tasks) == 20
    done = [planned_done(created, category=f"cat-{i}") for i in range(10)]
    assert monthly_objective_score(done) == 100
    assert monthly_objective_score([]) == 0


def test_monthly_aggregation_is_idempotent():
    created = utc(2025, 1, 7)
    tasks = [planned_done(created), make_task(created, deadline=utc(2025, 1, 8))]
    before = [t.model_dump() for t in tasks]

    first = calculate_monthly_score(tasks, 2025, 1, NOW)
    second = calculate_monthly_score(tasks, 2025, 1, NOW)

    assert first.model_dump_json() == second.model_dump_json()
    assert [t.model_dump() for t in tasks] == before


def test_year_without_tasks_degrades_to_defaults():
    months = generate_monthly_data([], 2025, NOW)
    stats = calculate_overall_stats(months)

    assert [m.month_index for m in months] == list(range(1, 13))
    assert all(m.weekly_data for m in months)
    assert all(w.status == "not_sent" for m in months for w in m.weekly_data)
    assert stats.overall_score == 0
    assert stats.weekly_average == 0
    assert stats.monthly_target == 95.0
    assert stats.achievement == "C"


def test_overall_stats_without_any_weeks():
    stats = calculate_overall_stats([])

    assert stats.overall_score == 0
    assert stats.achievement == "C"
    assert stats.monthly_target == 95.0


def test_weekly_average_is_flat_across_weeks():
    created_jan = utc(2025, 1, 7)
    tasks = [planned_done(created_jan)]
    months = generate_monthly_data(tasks, 2025, NOW)
    stats = calculate_overall_stats(months)

    all_weeks = [w.percentage for m in months for w in m.weekly_data]
    assert stats.weekly_average == pytest.approx(round2(sum(all_weeks) / len(all_weeks)))
    assert stats.overall_score == pytest.approx(round2(sum(m.average for m in months) / 12))


def test_every_emitted_score_stays_within_bounds():
    created = utc(2025, 1, 6)
    tasks = [planned_done(created, priority="high") for _ in range(20)]
    months = generate_monthly_data(tasks, 2025, NOW)

    for month in months:
        for value in (month.staff, month.structural, month.average):
            assert 0 <= value <= 100
        for week in month.weekly_data:
            assert 0 <= week.percentage <= 100
            assert 0 <= week.dp <= 40
            assert 0 <= week.rh <= 20
            assert 0 <= week.wo <= 40


def test_month_filter_and_weekly_view():
    months = generate_monthly_data([], 2025, NOW)

    march = filter_months(months, 3)
    assert [m.month for m in march] == ["March"]
    assert filter_months(months, None) == months

    view = weekly_view(march)
    assert view[0].month == "March"
    assert view[0].weeks == march[0].weekly_data


def test_report_keeps_overall_stats_for_the_whole_year():
    tasks = [planned_done(utc(2025, 1, 7)), planned_done(utc(2025, 5, 14))]

    full = build_analytics_report(tasks, 2025, now=NOW)
    may = build_analytics_report(tasks, 2025, month=5, now=NOW)

    assert len(full.monthly_data) == 12
    assert [m.month for m in may.monthly_data] == ["May"]
    assert len(may.weekly_data) == 1
    assert may.overall == full.overall
    assert may.distribution.total_weeks == len(month_week_windows(2025, 5))
    assert may.task_count == 2
    assert may.as_of == NOW
    assert may.formulas["weekly"] == "DP40% + RH20% + WO40%"
