"""Quest reset engine tests"""

import math
import random
from datetime import date

from src.core.calendar import CalendarWindow
from src.core.quest.models import Quest
from src.core.quest.reset_logic import STREAK_BROKEN_MESSAGE, reset_all
from src.core.quest.rewards import MAX_PENALTY_RATE


def _run(quests, today: date):
    w = CalendarWindow.for_date(today)
    return reset_all(quests, w.today, w.yesterday, w.start_of_week, w.start_of_month)


def _daily(**overrides) -> Quest:
    fields = dict(
        quest_id="d1",
        title="Meditate",
        cadence="DAILY",
        xp_reward=100,
        created_at=date(2024, 1, 1),
    )
    fields.update(overrides)
    return Quest(**fields)


class TestDaily:
    def test_missed_daily_penalty(self):
        # created 01-01, never completed, evaluated 01-03
        result = _run([_daily()], date(2024, 1, 3))

        assert result.total_penalty == 10
        assert result.streak_broken is True
        assert result.quests[0].status == "PENDING"
        assert result.quests[0].last_penalty_at == date(2024, 1, 3)
        assert result.messages[0] == STREAK_BROKEN_MESSAGE
        assert "MISSED PROTOCOL: Meditate (-10 XP)" in result.messages

    def test_completed_today_untouched(self):
        quest = _daily(status="COMPLETED", last_completed_at=date(2024, 1, 3))
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0] is quest
        assert result.total_penalty == 0
        assert result.changed_quest_ids == []

    def test_completed_yesterday_fresh_slate(self):
        quest = _daily(status="COMPLETED", last_completed_at=date(2024, 1, 2))
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0].status == "PENDING"
        assert result.total_penalty == 0
        assert result.streak_broken is False
        assert result.changed_quest_ids == ["d1"]

    def test_created_today_not_penalized(self):
        result = _run([_daily(created_at=date(2024, 1, 3))], date(2024, 1, 3))
        assert result.total_penalty == 0
        assert result.streak_broken is False

    def test_missing_created_at_counts_as_today(self):
        result = _run([_daily(created_at=None)], date(2024, 1, 3))
        assert result.total_penalty == 0

    def test_stale_completion_penalized_and_reset(self):
        quest = _daily(status="COMPLETED", last_completed_at=date(2023, 12, 28))
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0].status == "PENDING"
        assert result.total_penalty == 10


class TestWeeklyEpic:
    # 2024-01-03 is a Wednesday; week and month both start 2024-01-01

    def test_weekly_missed_keeps_status(self):
        quest = Quest(
            quest_id="w1",
            title="Deep clean",
            cadence="WEEKLY",
            xp_reward=250,
            created_at=date(2023, 12, 20),
        )
        result = _run([quest], date(2024, 1, 3))
        assert result.total_penalty == 50
        assert result.streak_broken is False
        assert result.quests[0].status == "PENDING"
        assert result.messages == ["WEEKLY FAILURE: Deep clean (-50 XP)"]

    def test_weekly_completed_last_week_reopens(self):
        quest = Quest(
            quest_id="w1",
            title="Deep clean",
            cadence="WEEKLY",
            xp_reward=250,
            status="COMPLETED",
            created_at=date(2023, 12, 20),
            last_completed_at=date(2023, 12, 29),
        )
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0].status == "PENDING"
        assert result.total_penalty == 0

    def test_weekly_completed_this_week_untouched(self):
        quest = Quest(
            quest_id="w1",
            title="Deep clean",
            cadence="WEEKLY",
            status="COMPLETED",
            created_at=date(2023, 12, 20),
            last_completed_at=date(2024, 1, 2),
        )
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0] is quest

    def test_epic_missed_month(self):
        quest = Quest(
            quest_id="e1",
            title="Ship side project",
            cadence="EPIC",
            xp_reward=500,
            created_at=date(2024, 1, 10),
        )
        result = _run([quest], date(2024, 2, 5))
        assert result.total_penalty == 150
        assert result.messages == ["EPIC FAILURE: Ship side project (-150 XP)"]

    def test_legendary_never_resets(self):
        quest = Quest(
            quest_id="l1",
            title="Write a novel",
            cadence="LEGENDARY",
            xp_reward=1000,
            status="COMPLETED",
            created_at=date(2020, 1, 1),
            last_completed_at=date(2021, 1, 1),
        )
        result = _run([quest], date(2024, 1, 3))
        assert result.quests[0] is quest
        assert result.total_penalty == 0


class TestBatchProperties:
    def test_second_pass_same_day_is_free(self):
        first = _run([_daily()], date(2024, 1, 3))
        second = _run(first.quests, date(2024, 1, 3))
        assert second.total_penalty == 0
        assert second.changed_quest_ids == []

    def test_weekly_penalized_once_per_window(self):
        quest = Quest(
            quest_id="w1", title="Review", cadence="WEEKLY", xp_reward=250,
            created_at=date(2023, 12, 20),
        )
        first = _run([quest], date(2024, 1, 2))
        later = _run(first.quests, date(2024, 1, 5))
        assert first.total_penalty == 50
        assert later.total_penalty == 0

    def test_five_day_gap_equals_one_day_gap(self):
        quests = [
            _daily(quest_id="a"),
            _daily(quest_id="b", status="COMPLETED", last_completed_at=date(2024, 1, 1)),
        ]
        long_gap = _run(quests, date(2024, 1, 6))
        short_gap = _run(quests, date(2024, 1, 2))

        assert [q.status for q in long_gap.quests] == ["PENDING", "PENDING"]
        assert long_gap.total_penalty == 20
        assert short_gap.total_penalty == 10  # b was done "yesterday"
        # the missed quest is charged once, not once per day
        only_missed = _run([_daily(quest_id="a")], date(2024, 1, 6))
        assert only_missed.total_penalty == _run([_daily(quest_id="a")], date(2024, 1, 2)).total_penalty

    def test_order_does_not_change_totals(self):
        quests = [
            _daily(quest_id="a"),
            _daily(quest_id="b", xp_reward=300),
            Quest(quest_id="w", title="W", cadence="WEEKLY", xp_reward=250,
                  created_at=date(2023, 12, 1)),
        ]
        forward = _run(quests, date(2024, 1, 3))
        backward = _run(list(reversed(quests)), date(2024, 1, 3))
        assert forward.total_penalty == backward.total_penalty
        assert forward.streak_broken == backward.streak_broken

    def test_penalty_never_exceeds_max_rate_bound(self):
        rng = random.Random(7)
        cadences = ["DAILY", "WEEKLY", "EPIC", "LEGENDARY"]
        for _ in range(50):
            quests = []
            for i in range(rng.randint(1, 12)):
                completed = rng.choice([None, date(2024, 1, rng.randint(1, 28))])
                quests.append(
                    Quest(
                        quest_id=f"q{i}",
                        title=f"Quest {i}",
                        cadence=rng.choice(cadences),
                        xp_reward=rng.randint(0, 2000),
                        status=rng.choice(["PENDING", "COMPLETED"]),
                        created_at=date(2023, 12, rng.randint(1, 31)),
                        last_completed_at=completed,
                    )
                )
            result = _run(quests, date(2024, 2, rng.randint(1, 29)))
            bound = sum(math.ceil(MAX_PENALTY_RATE * q.xp_reward) for q in quests)
            assert result.total_penalty <= bound

    def test_inputs_not_mutated(self):
        quest = _daily()
        _run([quest], date(2024, 1, 3))
        assert quest.last_penalty_at is None
