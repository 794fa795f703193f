"""Tests for priority scoring."""

from datetime import date, datetime, timedelta, timezone

import pytest

from nextaction.core.scoring import priority_label, priority_score, sort_by_score
from nextaction.core.tasks import Task, TaskStatus


@pytest.fixture
def today():
    return date(2025, 1, 15)


@pytest.fixture
def now():
    return datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def make_task(now):
    def _make(**kwargs) -> Task:
        kwargs.setdefault("title", "Test")
        kwargs.setdefault("created_at", now)
        return Task(**kwargs)

    return _make


def _score(task, today, now, all_tasks=None, **kwargs):
    return priority_score(task, all_tasks or [task], as_of=today, now=now, **kwargs)


class TestPriorityScore:
    def test_plain_inbox_task(self, make_task, today, now):
        assert _score(make_task(), today, now) == 55

    def test_completed_scores_zero(self, make_task, today, now):
        task = make_task(due_date=today, starred=True)
        task.mark_complete()
        assert _score(task, today, now) == 0

    def test_due_today_starred_next(self, make_task, today, now):
        task = make_task(due_date=today, starred=True, status=TaskStatus.NEXT)
        assert _score(task, today, now) == 95

    @pytest.mark.parametrize(
        "days,expected",
        [(-3, 25), (0, 20), (1, 15), (3, 10), (7, 5), (8, 0)],
    )
    def test_due_date_points(self, days, expected, make_task, today, now):
        task = make_task(status=TaskStatus.SOMEDAY, due_date=today + timedelta(days=days))
        assert _score(task, today, now) == 50 + expected

    def test_clamped_to_100(self, make_task, today, now):
        task = make_task(
            due_date=today - timedelta(days=1),
            starred=True,
            status=TaskStatus.NEXT,
            energy="high",
            time=10,
        )
        assert _score(task, today, now) == 100

    def test_deferred_task_is_penalized(self, make_task, today, now):
        task = make_task(status=TaskStatus.SOMEDAY, defer_date=today + timedelta(days=2))
        assert _score(task, today, now) == 30

    def test_dependencies(self, make_task, today, now):
        prereq = make_task(id="a")
        task = make_task(status=TaskStatus.SOMEDAY, waiting_for_task_ids=["a"])
        assert _score(task, today, now, all_tasks=[prereq, task]) == 40

        prereq.mark_complete()
        assert _score(task, today, now, all_tasks=[prereq, task]) == 60

    def test_energy_and_time(self, make_task, today, now):
        quick = make_task(status=TaskStatus.SOMEDAY, energy="high", time=15)
        long_low = make_task(status=TaskStatus.SOMEDAY, energy="low", time=90)
        tiny = make_task(status=TaskStatus.SOMEDAY, time=5)

        assert _score(quick, today, now) == 61
        assert _score(long_low, today, now) == 45
        assert _score(tiny, today, now) == 55

    def test_active_project(self, make_task, today, now):
        task = make_task(status=TaskStatus.NEXT, project_id="p1")
        assert _score(task, today, now, active_project_ids={"p1"}) == 65
        assert _score(task, today, now) == 60

    @pytest.mark.parametrize("age,bonus", [(3, 0), (8, 3), (15, 5), (31, 7)])
    def test_age_bonus(self, age, bonus, make_task, today, now):
        task = make_task(status=TaskStatus.SOMEDAY, created_at=now - timedelta(days=age))
        assert _score(task, today, now) == 50 + bonus


class TestLabelsAndSorting:
    @pytest.mark.parametrize(
        "score,label",
        [(100, "Urgent"), (80, "Urgent"), (79, "High"), (40, "Medium"), (20, "Low"), (5, "Very Low")],
    )
    def test_priority_label(self, score, label):
        assert priority_label(score) == label

    def test_sort_by_score(self, make_task, today):
        low = make_task(id="low", status=TaskStatus.SOMEDAY)
        high = make_task(id="high", due_date=today, starred=True)
        mid = make_task(id="mid", status=TaskStatus.NEXT)

        ordered = sort_by_score([low, high, mid], as_of=today)
        assert [t.id for t in ordered] == ["high", "mid", "low"]

    def test_ties_keep_order(self, make_task, today):
        tasks = [make_task(id=str(i)) for i in range(5)]
        assert [t.id for t in sort_by_score(tasks, as_of=today)] == ["0", "1", "2", "3", "4"]
