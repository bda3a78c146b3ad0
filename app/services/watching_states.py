"""
Series watching state machine.

Each status has a handler that knows which transitions are valid from it:

    ToWatch    → InProgress | Finished
    InProgress → ToWatch | Finished
    Finished   → ToWatch (every episode un-watched, no review)
               → InProgress (only when Finished is not sticky, no review)

Once the user has reviewed the series, Finished never changes again.

Handlers only decide; SeriesWatchingStateService loads the record, asks the
handler for a Transition and persists it.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Union

from loguru import logger

from app.exceptions import ReviewNotAllowedError, UnknownStatusError
from app.models.series_watch import WatchingStatus


@dataclass(frozen=True)
class Transition:
    """Outcome of a handler decision: the status and counts to persist."""
    status: WatchingStatus
    watched_episodes: int
    total_episodes: int


def classify(total_episodes: int, watched_episodes: int) -> WatchingStatus:
    """
    Map episode counts to a status.

    ``watched_episodes <= 0`` wins over everything, so an empty series is
    ToWatch. Overcounts (watched > total) are Finished.
    """
    if watched_episodes <= 0:
        return WatchingStatus.ToWatch
    if watched_episodes >= total_episodes:
        return WatchingStatus.Finished
    return WatchingStatus.InProgress


class BaseWatchingState:
    """Transition rules valid from a single status."""

    name: WatchingStatus
    # Whether compute_transition needs to know if the user reviewed the series
    checks_review: bool = False

    def compute_transition(
        self,
        user_id: int,
        series_id: int,
        total_episodes: int,
        watched_episodes: int,
        has_review: bool = False,
    ) -> Transition:
        raise NotImplementedError

    def validate_review_eligibility(self) -> None:
        raise ReviewNotAllowedError(self.name)

    def _log_decision(self, user_id, series_id, total_episodes, watched_episodes, target):
        logger.debug(
            f"{self.__class__.__name__}: user={user_id} series={series_id} "
            f"watched={watched_episodes}/{total_episodes} -> {target.value}"
        )

    def __repr__(self):
        return f"<{self.__class__.__name__}>"


class ToWatchState(BaseWatchingState):
    name = WatchingStatus.ToWatch

    def compute_transition(self, user_id, series_id, total_episodes, watched_episodes, has_review=False):
        if watched_episodes <= 0:
            target = WatchingStatus.ToWatch
        else:
            # Straight to Finished is fine when a whole series is marked at once
            target = classify(total_episodes, watched_episodes)

        self._log_decision(user_id, series_id, total_episodes, watched_episodes, target)
        return Transition(target, watched_episodes, total_episodes)


class InProgressState(BaseWatchingState):
    name = WatchingStatus.InProgress

    def compute_transition(self, user_id, series_id, total_episodes, watched_episodes, has_review=False):
        target = classify(total_episodes, watched_episodes)
        self._log_decision(user_id, series_id, total_episodes, watched_episodes, target)
        return Transition(target, watched_episodes, total_episodes)


class FinishedState(BaseWatchingState):
    """
    Finished is the only state that allows reviews, and the only one that
    refuses some transitions.

    With a review on record the status is pinned: counts that say otherwise
    are treated as stale and the record keeps showing a fully watched series.
    Without a review, un-watching everything returns to ToWatch; un-watching
    only some episodes either keeps Finished (``finished_is_sticky``) or falls
    back to InProgress.
    """
    name = WatchingStatus.Finished
    checks_review = True

    def __init__(self, finished_is_sticky: bool = True):
        self.finished_is_sticky = finished_is_sticky

    def compute_transition(self, user_id, series_id, total_episodes, watched_episodes, has_review=False):
        if has_review:
            if watched_episodes < total_episodes:
                logger.warning(
                    f"Reviewed series reports fewer watched episodes than it has: "
                    f"user={user_id} series={series_id} watched={watched_episodes}/{total_episodes}. "
                    f"Keeping Finished."
                )
                return Transition(WatchingStatus.Finished, total_episodes, total_episodes)
            self._log_decision(user_id, series_id, total_episodes, watched_episodes, WatchingStatus.Finished)
            return Transition(WatchingStatus.Finished, watched_episodes, total_episodes)

        target = classify(total_episodes, watched_episodes)

        if target is WatchingStatus.ToWatch and watched_episodes == 0:
            self._log_decision(user_id, series_id, total_episodes, watched_episodes, target)
            return Transition(WatchingStatus.ToWatch, watched_episodes, total_episodes)

        if target is WatchingStatus.InProgress:
            if self.finished_is_sticky:
                logger.debug(
                    f"FinishedState: user={user_id} series={series_id} "
                    f"watched={watched_episodes}/{total_episodes}, staying Finished"
                )
                return Transition(WatchingStatus.Finished, total_episodes, total_episodes)
            self._log_decision(user_id, series_id, total_episodes, watched_episodes, target)
            return Transition(WatchingStatus.InProgress, watched_episodes, total_episodes)

        self._log_decision(user_id, series_id, total_episodes, watched_episodes, WatchingStatus.Finished)
        return Transition(WatchingStatus.Finished, watched_episodes, total_episodes)

    def validate_review_eligibility(self) -> None:
        return None

    def __repr__(self):
        return f"<FinishedState sticky={self.finished_is_sticky}>"


class WatchingStateResolver:
    """Maps a status to the handler responsible for transitions out of it."""

    def __init__(
        self,
        to_watch: BaseWatchingState,
        in_progress: BaseWatchingState,
        finished: BaseWatchingState,
    ):
        self._handlers: Dict[WatchingStatus, BaseWatchingState] = {
            WatchingStatus.ToWatch: to_watch,
            WatchingStatus.InProgress: in_progress,
            WatchingStatus.Finished: finished,
        }
        for status, handler in self._handlers.items():
            if handler.name is not status:
                raise ValueError(f"{handler!r} cannot handle {status.value}")

    @classmethod
    def default(cls, finished_is_sticky: bool = True) -> "WatchingStateResolver":
        return cls(ToWatchState(), InProgressState(), FinishedState(finished_is_sticky))

    def resolve(self, status: Union[WatchingStatus, str, None]) -> BaseWatchingState:
        key: Optional[WatchingStatus]
        if isinstance(status, WatchingStatus):
            key = status
        else:
            try:
                key = WatchingStatus(status)
            except ValueError:
                key = None

        if key is None:
            logger.error(f"Cannot resolve watching state handler for status {status!r}")
            raise UnknownStatusError(status)
        return self._handlers[key]
