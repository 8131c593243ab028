"""Reminder planning tests"""

from datetime import datetime

from src.core.reminders import ReminderPreferences, plan_reminders


def _tags(reminders):
    return [r.tag for r in reminders]


def test_daily_reminder_at_nine_pm():
    # Wednesday
    reminders = plan_reminders(datetime(2024, 1, 3, 21, 0), {"DAILY": ["Meditate"]})
    assert _tags(reminders) == ["daily-reminder"]
    assert reminders[0].body == '"Meditate": still pending. 3 hours left!'


def test_daily_reminder_counts_multiple():
    reminders = plan_reminders(datetime(2024, 1, 3, 21, 15), {"DAILY": ["a", "b", "c"]})
    assert reminders[0].body.startswith("3 daily quests")


def test_nothing_outside_reminder_hour():
    assert plan_reminders(datetime(2024, 1, 3, 18, 0), {"DAILY": ["a"]}) == []


def test_nothing_when_all_done():
    assert plan_reminders(datetime(2024, 1, 3, 21, 0), {}) == []


def test_weekly_only_on_friday():
    pending = {"WEEKLY": ["Review"]}
    assert _tags(plan_reminders(datetime(2024, 1, 5, 21, 0), pending)) == ["weekly-reminder"]
    assert plan_reminders(datetime(2024, 1, 4, 21, 0), pending) == []


def test_epic_five_days_before_month_end():
    pending = {"EPIC": ["Ship it"]}
    # January has 31 days
    assert _tags(plan_reminders(datetime(2024, 1, 26, 21, 0), pending)) == ["monthly-reminder"]
    assert plan_reminders(datetime(2024, 1, 25, 21, 0), pending) == []


def test_weekly_recap_sunday_evening():
    reminders = plan_reminders(datetime(2024, 1, 7, 20, 0), {})
    assert _tags(reminders) == ["weekly-recap"]
    assert reminders[0].kind == "weekly_recap"


def test_preferences_disable_reminders():
    prefs = ReminderPreferences(quest_reminders=False, weekly_recap=False)
    assert plan_reminders(datetime(2024, 1, 3, 21, 0), {"DAILY": ["a"]}, prefs) == []
    assert plan_reminders(datetime(2024, 1, 7, 20, 0), {}, prefs) == []
