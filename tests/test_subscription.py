"""Tests for tiers, quota and monthly resets."""

from datetime import datetime

from genstudio import subscription as subs


def _free(used=0, reset=datetime(2026, 11, 1)):
    return subs.SubscriptionStatus(subs.FREE, used, 10, reset)


def test_initialize_subscription_resets_next_month():
    status = subs.initialize_subscription(datetime(2026, 12, 15, 9, 30))
    assert status.tier == subs.FREE
    assert status.generations_used == 0
    assert status.generations_limit == 10
    assert status.reset_date == datetime(2027, 1, 1)


def test_usage_percentage():
    assert subs.usage_percentage(3, 10) == 30
    assert subs.usage_percentage(1, 8) == 13
    assert subs.usage_percentage(25, 10) == 100
    assert subs.usage_percentage(5, None) == 0
    assert subs.usage_percentage(0, 0) == 100


def test_can_generate_respects_quota_and_count():
    assert subs.can_generate(_free(9))
    assert not subs.can_generate(_free(10))
    assert not subs.can_generate(_free(8), count=3)
    pro = subs.upgrade(_free(10))
    assert subs.can_generate(pro, count=100)
    assert subs.remaining_generations(pro) is None
    assert subs.remaining_generations(_free(12)) == 0


def test_upgrade_prompt_at_eighty_percent():
    assert not subs.should_show_upgrade_prompt(_free(7))
    assert subs.should_show_upgrade_prompt(_free(8))
    assert not subs.should_show_upgrade_prompt(subs.upgrade(_free(9)))


def test_features_by_tier():
    assert not subs.has_feature(_free(), "video_generation")
    assert subs.has_feature(subs.upgrade(_free()), "video_generation")
    assert subs.has_feature(subs.upgrade(_free()), "background_removal")
    assert not subs.has_feature(_free(), "teleportation")


def test_monthly_reset_only_when_due():
    status = _free(7, reset=datetime(2026, 11, 1))
    assert subs.reset_monthly_usage(status, datetime(2026, 10, 31, 23, 59)) is status

    refreshed = subs.reset_monthly_usage(status, datetime(2026, 11, 3))
    assert refreshed.generations_used == 0
    assert refreshed.reset_date == datetime(2026, 12, 1)


def test_reset_date_string_and_round_trip():
    status = _free(4)
    assert subs.reset_date_string(status.reset_date) == "Nov 1, 2026"
    assert subs.SubscriptionStatus.from_dict(status.to_dict()) == status


def test_record_generations():
    assert subs.record_generations(_free(2), 3).generations_used == 5
