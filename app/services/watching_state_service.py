"""
Series watching state service.

Loads (or creates) the SeriesWatchingState row for a user/series pair,
lets the handler for its current status decide the next status, and
persists the result in the same transaction.
"""
from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import SeriesTrackerError
from app.models.series import Episode, Season
from app.models.series_watch import EpisodeWatchHistory, SeriesWatchingState, WatchingStatus
from app.services.series_watch_service import (
    EpisodeWatchService,
    SeriesRatingService,
    get_series_or_raise,
    get_user_or_raise,
)
from app.services.watching_states import WatchingStateResolver, classify


class SeriesWatchingStateService:

    def __init__(
        self,
        db: Session,
        resolver: Optional[WatchingStateResolver] = None,
        finished_is_sticky: Optional[bool] = None,
    ):
        self.db = db
        if resolver is None:
            if finished_is_sticky is None:
                finished_is_sticky = settings.FINISHED_IS_STICKY
            resolver = WatchingStateResolver.default(finished_is_sticky)
        self.resolver = resolver

    def get_status(self, user_id: int, series_id: int) -> WatchingStatus:
        """Live status from the current episode counts. Never writes."""
        self._ensure_exists(user_id, series_id)
        total, watched = EpisodeWatchService.count_series_episodes(user_id, series_id, self.db)
        return classify(total, watched)

    def update_status(self, user_id: int, series_id: int) -> WatchingStatus:
        """
        Recompute and persist the watching state for a user/series pair.

        Called after every episode progress change. The load, the decision and
        the write happen in one transaction; on failure nothing is written.
        """
        self._ensure_exists(user_id, series_id)

        target: Optional[WatchingStatus] = None
        try:
            state = self._get_or_create_state(user_id, series_id)
            handler = self.resolver.resolve(state.status)

            total, watched = EpisodeWatchService.count_series_episodes(user_id, series_id, self.db)
            has_review = handler.checks_review and SeriesRatingService.has_reviewed(
                user_id, series_id, self.db
            )

            transition = handler.compute_transition(user_id, series_id, total, watched, has_review)
            target = transition.status
            previous = state.status

            state.status = transition.status.value
            state.watched_episodes_count = transition.watched_episodes
            state.total_episodes_count = transition.total_episodes
            state.last_updated = datetime.utcnow()
            self.db.commit()
        except SQLAlchemyError:
            logger.exception(
                f"Failed to persist watching state: user={user_id} series={series_id} "
                f"status={target.value if target else 'unresolved'}"
            )
            self.db.rollback()
            raise
        except SeriesTrackerError:
            self.db.rollback()
            raise

        if previous != target.value:
            logger.info(f"Watching state user={user_id} series={series_id}: {previous} -> {target.value}")
        return target

    def validate_review_creation(self, user_id: int, series_id: int) -> None:
        """Raise ReviewNotAllowedError unless the persisted status is Finished."""
        state = self.get_state(user_id, series_id)
        if state is None:
            self.update_status(user_id, series_id)
            state = self.get_state(user_id, series_id)

        handler = self.resolver.resolve(state.status)
        handler.validate_review_eligibility()

    def get_state(self, user_id: int, series_id: int) -> Optional[SeriesWatchingState]:
        return self._query_state(user_id, series_id).first()

    def list_states(self) -> List[SeriesWatchingState]:
        return (
            self.db.query(SeriesWatchingState)
            .order_by(SeriesWatchingState.user_id, SeriesWatchingState.series_id)
            .all()
        )

    def backfill_states(self) -> dict:
        """
        Recompute the watching state of every user/series pair that has at
        least one completed episode. A failing pair is logged and counted but
        does not stop the run.
        """
        pairs = (
            self.db.query(EpisodeWatchHistory.user_id, Season.series_id)
            .join(Episode, EpisodeWatchHistory.episode_id == Episode.id)
            .join(Season, Episode.season_id == Season.id)
            .filter(EpisodeWatchHistory.completed.is_(True))
            .distinct()
            .order_by(EpisodeWatchHistory.user_id, Season.series_id)
            .all()
        )

        processed = 0
        errors = 0
        for user_id, series_id in pairs:
            try:
                self.update_status(user_id, series_id)
                processed += 1
            except (SeriesTrackerError, SQLAlchemyError) as e:
                errors += 1
                logger.warning(f"Backfill failed for user={user_id} series={series_id}: {e}")

        logger.info(f"Watching state backfill: {processed}/{len(pairs)} processed, {errors} errors")
        return {"processed": processed, "errors": errors, "total": len(pairs)}

    # ── internals ────────────────────────────────────────────────────────────

    def _ensure_exists(self, user_id: int, series_id: int):
        get_user_or_raise(user_id, self.db)
        get_series_or_raise(series_id, self.db)

    def _query_state(self, user_id: int, series_id: int):
        return self.db.query(SeriesWatchingState).filter(
            SeriesWatchingState.user_id == user_id,
            SeriesWatchingState.series_id == series_id,
        )

    def _get_or_create_state(self, user_id: int, series_id: int) -> SeriesWatchingState:
        state = self._query_state(user_id, series_id).with_for_update().first()
        if state is not None:
            return state

        now = datetime.utcnow()
        state = SeriesWatchingState(
            user_id=user_id,
            series_id=series_id,
            status=WatchingStatus.ToWatch.value,
            watched_episodes_count=0,
            total_episodes_count=0,
            created_at=now,
            last_updated=now,
        )
        self.db.add(state)
        try:
            self.db.flush()
        except IntegrityError:
            # A concurrent request inserted the row first; use theirs
            self.db.rollback()
            logger.debug(f"Watching state for user={user_id} series={series_id} created concurrently")
            return self._query_state(user_id, series_id).with_for_update().one()

        logger.debug(f"Created watching state for user={user_id} series={series_id}")
        return state
