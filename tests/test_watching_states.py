import pytest

from app.exceptions import ReviewNotAllowedError, UnknownStatusError
from app.models.series_watch import WatchingStatus
from app.services.watching_states import (
    FinishedState,
    InProgressState,
    ToWatchState,
    Transition,
    WatchingStateResolver,
    classify,
)


class TestClassify:
    @pytest.mark.parametrize("total,watched", [(0, 0), (10, 0), (10, -1), (0, -5), (1, 0)])
    def test_nothing_watched_is_to_watch(self, total, watched):
        assert classify(total, watched) == WatchingStatus.ToWatch

    @pytest.mark.parametrize("total,watched", [(2, 1), (10, 1), (10, 9), (100, 50)])
    def test_partially_watched_is_in_progress(self, total, watched):
        assert classify(total, watched) == WatchingStatus.InProgress

    @pytest.mark.parametrize("total,watched", [(1, 1), (10, 10), (10, 12), (3, 300)])
    def test_everything_watched_is_finished(self, total, watched):
        assert classify(total, watched) == WatchingStatus.Finished

    def test_watched_with_no_episodes_counts_as_finished(self):
        assert classify(0, 1) == WatchingStatus.Finished


class TestToWatchState:
    def test_stays_when_nothing_watched(self):
        assert ToWatchState().compute_transition(1, 1, 10, 0) == Transition(WatchingStatus.ToWatch, 0, 10)

    def test_moves_to_in_progress(self):
        assert ToWatchState().compute_transition(1, 1, 10, 1) == Transition(WatchingStatus.InProgress, 1, 10)

    def test_jumps_straight_to_finished(self):
        assert ToWatchState().compute_transition(1, 1, 4, 4) == Transition(WatchingStatus.Finished, 4, 4)

    def test_does_not_allow_review(self):
        with pytest.raises(ReviewNotAllowedError) as exc_info:
            ToWatchState().validate_review_eligibility()
        assert exc_info.value.current_status == WatchingStatus.ToWatch


class TestInProgressState:
    @pytest.mark.parametrize("watched,expected", [
        (0, WatchingStatus.ToWatch),
        (5, WatchingStatus.InProgress),
        (10, WatchingStatus.Finished),
    ])
    def test_follows_episode_counts_both_ways(self, watched, expected):
        transition = InProgressState().compute_transition(1, 1, 10, watched)
        assert transition == Transition(expected, watched, 10)

    def test_does_not_allow_review(self):
        with pytest.raises(ReviewNotAllowedError) as exc_info:
            InProgressState().validate_review_eligibility()
        assert exc_info.value.current_status == WatchingStatus.InProgress
        assert "InProgress" in str(exc_info.value)


class TestFinishedState:
    def test_reviewed_series_stays_finished_with_full_counts(self):
        transition = FinishedState(finished_is_sticky=False).compute_transition(1, 1, 10, 7, has_review=True)
        assert transition == Transition(WatchingStatus.Finished, 10, 10)

    def test_reviewed_series_stays_finished_even_when_everything_unwatched(self):
        transition = FinishedState().compute_transition(1, 1, 10, 0, has_review=True)
        assert transition == Transition(WatchingStatus.Finished, 10, 10)

    def test_reviewed_inconsistency_is_logged(self, log_messages):
        FinishedState().compute_transition(3, 4, 10, 7, has_review=True)
        warnings = [r for r in log_messages if r["level"].name == "WARNING"]
        assert len(warnings) == 1
        assert "user=3 series=4" in warnings[0]["message"]

    def test_reviewed_series_keeps_observed_counts_when_complete(self):
        transition = FinishedState().compute_transition(1, 1, 10, 10, has_review=True)
        assert transition == Transition(WatchingStatus.Finished, 10, 10)

    def test_unwatching_everything_returns_to_to_watch(self):
        transition = FinishedState().compute_transition(1, 1, 10, 0)
        assert transition == Transition(WatchingStatus.ToWatch, 0, 10)

    def test_sticky_keeps_finished_on_partial_unwatch(self):
        transition = FinishedState(finished_is_sticky=True).compute_transition(1, 1, 10, 6)
        assert transition == Transition(WatchingStatus.Finished, 10, 10)

    def test_permissive_falls_back_to_in_progress(self):
        transition = FinishedState(finished_is_sticky=False).compute_transition(1, 1, 10, 6)
        assert transition == Transition(WatchingStatus.InProgress, 6, 10)

    def test_new_episodes_added_after_finishing(self):
        # Series grew from 10 to 12 episodes; sticky keeps it Finished
        transition = FinishedState().compute_transition(1, 1, 12, 10)
        assert transition == Transition(WatchingStatus.Finished, 12, 12)

    def test_overcount_stays_finished_with_observed_counts(self):
        transition = FinishedState().compute_transition(1, 1, 10, 11)
        assert transition == Transition(WatchingStatus.Finished, 11, 10)

    def test_allows_review(self):
        assert FinishedState().validate_review_eligibility() is None

    def test_only_finished_needs_review_lookup(self):
        assert FinishedState.checks_review
        assert not ToWatchState.checks_review
        assert not InProgressState.checks_review


class TestWatchingStateResolver:
    @pytest.fixture
    def resolver(self):
        return WatchingStateResolver.default()

    @pytest.mark.parametrize("status,handler_cls", [
        (WatchingStatus.ToWatch, ToWatchState),
        (WatchingStatus.InProgress, InProgressState),
        (WatchingStatus.Finished, FinishedState),
    ])
    def test_resolves_each_status(self, resolver, status, handler_cls):
        handler = resolver.resolve(status)
        assert isinstance(handler, handler_cls)
        assert handler.name == status

    def test_resolves_stored_string_values(self, resolver):
        assert isinstance(resolver.resolve("InProgress"), InProgressState)

    @pytest.mark.parametrize("status", ["Abandoned", "finished", "", None, 2])
    def test_unknown_status(self, resolver, status):
        with pytest.raises(UnknownStatusError) as exc_info:
            resolver.resolve(status)
        assert exc_info.value.status == status

    def test_sticky_flag_reaches_finished_handler(self):
        assert WatchingStateResolver.default(finished_is_sticky=False).resolve("Finished").finished_is_sticky is False
        assert WatchingStateResolver.default().resolve("Finished").finished_is_sticky is True

    def test_rejects_handler_in_wrong_slot(self):
        with pytest.raises(ValueError):
            WatchingStateResolver(InProgressState(), ToWatchState(), FinishedState())
