"""Chronicle pattern analysis tests"""

from datetime import date

import pytest

from src.core.chronicle.analysis import (
    build_timeline,
    compute_insights,
    compute_streak_clusters,
    fill_absent_days,
)
from src.core.chronicle.models import CompactWorldEvent, DailyLog, StreakCluster


def _log(day, rating, completed=0, stats=(), xp=0, events=()):
    return DailyLog(
        log_date=date(2024, 1, day),
        day_rating=rating,
        quests_completed=completed,
        stats_touched=list(stats),
        xp_earned=xp,
        world_events=list(events),
    )


@pytest.fixture()
def week():
    return [
        _log(1, "steady", 1, ["physical"], 100),
        _log(2, "absent"),
        _log(3, "recovery", 2, ["physical", "cognitive"], 200),
        _log(4, "strong", 3, ["physical"], 300),
    ]


class TestFillAbsentDays:
    def test_gaps_become_absent(self):
        logs = [_log(1, "steady", 1), _log(4, "light")]
        filled = fill_absent_days(logs, date(2024, 1, 1), date(2024, 1, 5))
        assert [log.log_date.day for log in filled] == [1, 2, 3, 4, 5]
        assert [log.day_rating for log in filled] == ["steady", "absent", "absent", "light", "absent"]

    def test_range_bounds_trim_rows(self):
        logs = [_log(1, "steady", 1), _log(9, "steady", 1)]
        filled = fill_absent_days(logs, date(2024, 1, 2), date(2024, 1, 3))
        assert all(log.day_rating == "absent" for log in filled)


class TestInsights:
    def test_too_few_logs(self):
        assert compute_insights([_log(1, "strong", 3, ["physical"])] * 2) == []

    def test_full_insight_set(self, week):
        insights = compute_insights(week)
        assert [i.insight_id for i in insights] == [
            "strongest-district",
            "growth-area",
            "avg-xp",
            "recovery-strength",
            "active-days",
            "strong-days",
        ]
        by_id = {i.insight_id: i for i in insights}
        assert by_id["strongest-district"].label == "Strongest District: The Forge"
        assert by_id["strongest-district"].detail == "Most consistent engagement (3 active days)"
        assert by_id["growth-area"].label == "Growth Area: The Archive"
        assert by_id["growth-area"].tone == "gentle"
        assert by_id["avg-xp"].label == "Average Pace: +200 XP/day"
        assert by_id["recovery-strength"].label == "Recovery Strength: 1 comeback"
        assert by_id["active-days"].label == "3 active days"
        assert by_id["active-days"].detail == "Out of 4 days this period"
        assert by_id["strong-days"].label == "1 strong day"

    def test_average_pace_rounds_half_up(self):
        logs = [_log(1, "steady", 1, xp=149), _log(2, "steady", 1, xp=100), _log(3, "absent")]
        by_id = {i.insight_id: i for i in compute_insights(logs)}
        assert by_id["avg-xp"].label == "Average Pace: +125 XP/day"

    def test_quiet_period(self):
        logs = [_log(1, "absent"), _log(2, "neutral"), _log(3, "absent")]
        insights = compute_insights(logs)
        assert [i.insight_id for i in insights] == ["active-days"]
        assert insights[0].label == "1 active days"


class TestStreakClusters:
    def test_runs_split_on_inactive_days(self, week):
        assert compute_streak_clusters(week) == [
            StreakCluster(date(2024, 1, 1), date(2024, 1, 1), 1, False),
            StreakCluster(date(2024, 1, 3), date(2024, 1, 4), 2, True),
        ]

    def test_unsorted_input(self, week):
        assert compute_streak_clusters(list(reversed(week))) == compute_streak_clusters(week)

    def test_light_day_breaks_run(self):
        logs = [_log(1, "steady", 1), _log(2, "light"), _log(3, "steady", 1)]
        assert [c.length for c in compute_streak_clusters(logs)] == [1, 1]


class TestTimeline:
    def test_newest_day_first_with_categories(self):
        logs = [
            _log(1, "light", events=[CompactWorldEvent("BUILD", "Iron Anvil Raised", "forge")]),
            _log(2, "light", events=[CompactWorldEvent("DECAY", "The Forge Cracks", "forge")]),
            _log(3, "light", events=[CompactWorldEvent("ERA", "Era of Growth")]),
        ]
        items = build_timeline(logs)
        assert [item.log_date.day for item in items] == [3, 2, 1]
        assert [item.category for item in items] == ["milestone", "decay", "structure"]
        assert items[-1].item_id == "2024-01-01-BUILD-Iron Anvil Raised"
        assert items[-1].district_id == "forge"

    def test_no_events(self, week):
        assert build_timeline(week) == []
