"""Tests for the SM-2 scheduler: next review, label mapping, triage and session size."""

from datetime import datetime, timedelta, timezone

import pytest

from prepcards.application.scheduler import (
    compute_next_review,
    get_due_card_ids,
    map_response_to_quality,
    recommend_session_size,
    triage_cards,
)
from prepcards.domain.errors import (
    IntervalOverflowError,
    InvalidArgumentError,
    InvalidQualityError,
    InvalidTimestampError,
    UnknownResponseLabelError,
)
from prepcards.domain.models import MasteryRecord, Quality, ResponseLabel


def _record(card_id: str, next_review_at: datetime, level: int = 1) -> MasteryRecord:
    return MasteryRecord(card_id=card_id, level=level, next_review_at=next_review_at)


class TestComputeNextReview:
    """Tests for the schedule transition."""

    def test_first_successful_review(self, now):
        result = compute_next_review(0, 2.5, 4, now=now)

        assert result.level == 1
        assert result.interval_days == 1
        assert result.ease_factor == pytest.approx(2.5)
        assert result.next_review_at == now + timedelta(days=1)

    def test_second_successful_review(self, now):
        result = compute_next_review(1, 2.5, 4, now=now)

        assert result.level == 2
        assert result.interval_days == 6
        assert result.next_review_at == now + timedelta(days=6)

    def test_forgetting_resets_card(self, now):
        result = compute_next_review(2, 2.5, 2, now=now)

        assert result.level == 0
        assert result.ease_factor == pytest.approx(2.3)
        assert result.interval_days == 0
        assert result.next_review_at == now

    def test_later_levels_scale_with_new_ease(self, now):
        # Ease rises to 2.6, interval = round(5 * 2.6)
        result = compute_next_review(5, 2.5, 5, now=now)

        assert result.ease_factor == pytest.approx(2.6)
        assert result.interval_days == 13
        assert result.level == 6

    def test_interval_rounds_half_up(self, now):
        # 5 * 2.5 = 12.5
        result = compute_next_review(5, 2.5, 4, now=now)
        assert result.interval_days == 13

    @pytest.mark.parametrize(
        "quality,expected_ease",
        [(3, 2.36), (4, 2.5), (5, 2.6)],
    )
    def test_ease_adjustment_by_quality(self, now, quality, expected_ease):
        result = compute_next_review(3, 2.5, quality, now=now)
        assert result.ease_factor == pytest.approx(expected_ease)

    @pytest.mark.parametrize("quality", [0, 1, 2])
    @pytest.mark.parametrize("ease", [1.3, 1.4, 2.0, 2.5, 3.1])
    def test_forgetting_floor_and_reset(self, now, quality, ease):
        result = compute_next_review(4, ease, quality, now=now)

        assert result.ease_factor >= 1.3
        assert result.level == 0
        assert result.interval_days == 0

    @pytest.mark.parametrize("quality", [3, 4, 5])
    @pytest.mark.parametrize("level", [0, 1, 2, 7])
    def test_remembering_floor_and_increment(self, now, quality, level):
        result = compute_next_review(level, 1.3, quality, now=now)

        assert result.ease_factor >= 1.3
        assert result.level == level + 1

    def test_ease_below_floor_is_clamped(self, now):
        result = compute_next_review(2, 1.0, 3, now=now)
        assert result.ease_factor == 1.3

    def test_deterministic_for_same_inputs(self, now):
        assert compute_next_review(3, 2.2, 4, now=now) == compute_next_review(3, 2.2, 4, now=now)

    def test_accepts_quality_enum(self, now):
        result = compute_next_review(0, 2.5, Quality.PERFECT, now=now)
        assert result.ease_factor == pytest.approx(2.6)

    @pytest.mark.parametrize("quality", [-1, 6, 10, 3.5, True, "4"])
    def test_rejects_out_of_range_quality(self, now, quality):
        with pytest.raises(InvalidQualityError):
            compute_next_review(0, 2.5, quality, now=now)

    def test_rejects_negative_level(self, now):
        with pytest.raises(InvalidArgumentError):
            compute_next_review(-1, 2.5, 4, now=now)

    @pytest.mark.parametrize(
        "level, ease",
        [
            (999_999_999, 2.5),  # past timedelta's day limit
            (1_000_000, 2.5),  # representable interval, but past year 9999
            (5, float("inf")),
        ],
    )
    def test_rejects_unrepresentable_interval(self, now, level, ease):
        with pytest.raises(IntervalOverflowError):
            compute_next_review(level, ease, 4, now=now)

    def test_overflow_is_an_argument_error(self, now):
        with pytest.raises(InvalidArgumentError):
            compute_next_review(999_999_999, 2.5, 4, now=now)

    def test_forgetting_never_overflows(self, now):
        result = compute_next_review(999_999_999, 2.5, 0, now=now)
        assert result.next_review_at == now

    def test_defaults_to_system_clock(self):
        before = datetime.now()
        result = compute_next_review(0, 2.5, 1)
        after = datetime.now()

        assert before <= result.next_review_at <= after


class TestMapResponseToQuality:
    """Tests for answer button -> quality."""

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("dont-know", 0),
            ("hard", 3),
            ("good", 4),
            ("easy", 5),
        ],
    )
    def test_known_labels(self, label, expected):
        assert map_response_to_quality(label) == expected

    def test_enum_members(self):
        assert map_response_to_quality(ResponseLabel.EASY) is Quality.PERFECT
        assert map_response_to_quality(ResponseLabel.DONT_KNOW) is Quality.BLACKOUT

    def test_covers_exactly_four_labels(self):
        qualities = {map_response_to_quality(label) for label in ResponseLabel}
        assert qualities == {0, 3, 4, 5}

    def test_dont_know_spelling(self):
        assert map_response_to_quality("don't know") == 0
        assert map_response_to_quality("Dont_Know") == 0

    @pytest.mark.parametrize("label", ["again", "medium", "", "goodish", None, 4])
    def test_rejects_unknown_labels(self, label):
        with pytest.raises(UnknownResponseLabelError):
            map_response_to_quality(label)


class TestTriageCards:
    """Tests for overdue / due today / new partitioning."""

    def test_scenario_future_card_is_excluded(self, now):
        progress = {"a": _record("a", now - timedelta(days=1))}
        progress["c"] = _record("c", now + timedelta(days=1))

        result = triage_cards(["a", "b", "c"], progress, now=now)

        assert result.overdue == ["a"]
        assert result.due_today == []
        assert result.new == ["b"]

    def test_future_card_is_not_treated_as_new(self, now):
        progress = {"c": _record("c", now + timedelta(days=3), level=0)}

        result = triage_cards(["c"], progress, now=now)

        assert "c" not in result.new
        assert "c" not in result.overdue
        assert "c" not in result.due_today

    def test_due_today_uses_calendar_day(self, now):
        progress = {
            "early": _record("early", now.replace(hour=0, minute=0)),
            "late": _record("late", now.replace(hour=23, minute=59)),
            "midnight_tomorrow": _record("midnight_tomorrow", datetime(2024, 3, 16)),
            "end_of_yesterday": _record("end_of_yesterday", datetime(2024, 3, 14, 23, 59)),
        }

        result = triage_cards(list(progress), progress, now=now)

        assert result.due_today == ["early", "late"]
        assert result.overdue == ["end_of_yesterday"]
        assert result.new == []

    def test_preserves_input_order(self, now):
        past = now - timedelta(days=10)
        progress = {cid: _record(cid, past) for cid in ["z", "m", "a"]}

        result = triage_cards(["m", "new1", "z", "new2", "a"], progress, now=now)

        assert result.overdue == ["m", "z", "a"]
        assert result.new == ["new1", "new2"]

    def test_partitions_are_disjoint(self, now):
        progress = {
            "o": _record("o", now - timedelta(days=2)),
            "t": _record("t", now),
            "f": _record("f", now + timedelta(days=2)),
        }
        result = triage_cards(["o", "t", "f", "n"], progress, now=now)

        groups = [set(result.overdue), set(result.due_today), set(result.new)]
        assert not (groups[0] & groups[1])
        assert not (groups[0] & groups[2])
        assert not (groups[1] & groups[2])
        assert result.total_due == 2

    def test_ignores_progress_for_cards_outside_candidates(self, now):
        progress = {"other": _record("other", now - timedelta(days=1))}
        result = triage_cards(["a"], progress, now=now)

        assert result.overdue == []
        assert result.new == ["a"]

    def test_accepts_iso_strings_in_mappings(self, now):
        progress = {"a": {"next_review_at": "2024-03-14T08:00:00", "level": 2}}
        result = triage_cards(["a"], progress, now=now)
        assert result.overdue == ["a"]

    def test_aware_timestamps_use_now_zone(self):
        now = datetime(2024, 3, 15, 1, 0, tzinfo=timezone.utc)
        eastern = timezone(timedelta(hours=-5))
        # 23:30 on the 14th in UTC-5 is 04:30 on the 15th in UTC
        progress = {"a": _record("a", datetime(2024, 3, 14, 23, 30, tzinfo=eastern))}

        result = triage_cards(["a"], progress, now=now)

        assert result.due_today == ["a"]

    @pytest.mark.parametrize("bad", [None, "", "yesterday", 12345])
    def test_rejects_malformed_timestamps(self, now, bad):
        progress = {"a": {"next_review_at": bad, "level": 1}}
        with pytest.raises(InvalidTimestampError, match="'a'"):
            triage_cards(["a"], progress, now=now)

    def test_empty_inputs(self, now):
        result = triage_cards([], {}, now=now)
        assert (result.overdue, result.due_today, result.new) == ([], [], [])


class TestRecommendSessionSize:
    """Tests for the session size heuristic."""

    def test_overdue_backlog_is_capped(self):
        assert recommend_session_size(30, 10, 5) == 30
        assert recommend_session_size(100, 0, 0) == 30

    def test_overdue_at_target(self):
        assert recommend_session_size(25, 10, 10) == 25
        assert recommend_session_size(27, 10, 10) == 27

    def test_fills_remaining_with_new_cards(self):
        assert recommend_session_size(5, 5, 100) == 25

    def test_fills_remaining_with_due_today(self):
        assert recommend_session_size(10, 40, 100) == 25

    def test_small_deck_takes_everything(self):
        assert recommend_session_size(2, 3, 4) == 9
        assert recommend_session_size(0, 0, 0) == 0

    def test_monotonic_and_bounded(self):
        counts = range(0, 45, 3)
        for o in counts:
            for d in counts:
                for n in counts:
                    size = recommend_session_size(o, d, n)
                    assert size <= 30
                    assert recommend_session_size(o + 1, d, n) >= size
                    assert recommend_session_size(o, d + 1, n) >= size
                    assert recommend_session_size(o, d, n + 1) >= size

    def test_rejects_negative_counts(self):
        with pytest.raises(InvalidArgumentError, match="due_today_count"):
            recommend_session_size(1, -1, 0)


class TestGetDueCardIds:
    """Tests for the exact-instant due check."""

    def test_compares_instants(self, now):
        progress = {
            "past": _record("past", now - timedelta(minutes=1)),
            "exact": _record("exact", now),
            "later_today": _record("later_today", now + timedelta(hours=1)),
        }
        assert get_due_card_ids(progress, now=now) == ["past", "exact"]

    def test_mixed_naive_and_aware(self):
        now = datetime.now(timezone.utc)
        progress = {"a": _record("a", datetime.now() - timedelta(days=1))}
        assert get_due_card_ids(progress, now=now) == ["a"]
