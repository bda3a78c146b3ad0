"""
Series watch service.
Tracks episode-level progress and series reviews, and keeps the
per-series watching state in step with both.
"""
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session
from sqlalchemy import func, distinct
from datetime import datetime
from loguru import logger

from app.exceptions import InvalidArgumentError
from app.models.user import User
from app.models.series_watch import EpisodeWatchHistory, SeriesRating
from app.models.series import Episode, Season, Series


def get_user_or_raise(user_id: int, db: Session) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise InvalidArgumentError(f"User {user_id} not found")
    return user


def get_series_or_raise(series_id: int, db: Session) -> Series:
    series = db.query(Series).filter(Series.id == series_id).first()
    if not series:
        raise InvalidArgumentError(f"Series {series_id} not found")
    return series


class EpisodeWatchService:

    @staticmethod
    def update_progress(
        user_id: int,
        episode_id: int,
        last_position: int,
        watch_percentage: float,
        completed: bool,
        db: Session,
    ) -> EpisodeWatchHistory:
        """
        Save or update playback position for an episode, then refresh the
        watching state of the episode's series.

        The progress row is committed before the state refresh. If the refresh
        fails the error propagates but the progress is kept; repeating the same
        call is safe and recomputes the state.
        """
        from app.services.watching_state_service import SeriesWatchingStateService

        get_user_or_raise(user_id, db)
        episode = db.query(Episode).filter(Episode.id == episode_id).first()
        if not episode:
            raise InvalidArgumentError(f"Episode {episode_id} not found")
        series_id = episode.season.series_id

        record = db.query(EpisodeWatchHistory).filter(
            EpisodeWatchHistory.user_id == user_id,
            EpisodeWatchHistory.episode_id == episode_id,
        ).first()

        if record:
            record.last_position = last_position
            record.watch_percentage = watch_percentage
            record.completed = completed
            record.watched_at = datetime.utcnow()
        else:
            record = EpisodeWatchHistory(
                user_id=user_id,
                episode_id=episode_id,
                last_position=last_position,
                watch_percentage=watch_percentage,
                completed=completed,
            )
            db.add(record)
            # Increment episode view count on first watch
            episode.view_count = (episode.view_count or 0) + 1

        db.commit()

        SeriesWatchingStateService(db).update_status(user_id, series_id)

        db.refresh(record)
        return record

    @staticmethod
    def get_progress(user_id: int, episode_id: int, db: Session) -> Optional[EpisodeWatchHistory]:
        return db.query(EpisodeWatchHistory).filter(
            EpisodeWatchHistory.user_id == user_id,
            EpisodeWatchHistory.episode_id == episode_id,
        ).first()

    @staticmethod
    def get_series_progress(user_id: int, series_id: int, db: Session) -> List[EpisodeWatchHistory]:
        """Return watch records for every episode in a series the user has touched."""
        return (
            db.query(EpisodeWatchHistory)
            .join(Episode, EpisodeWatchHistory.episode_id == Episode.id)
            .join(Season, Episode.season_id == Season.id)
            .filter(Season.series_id == series_id, EpisodeWatchHistory.user_id == user_id)
            .order_by(Season.season_number, Episode.episode_number)
            .all()
        )

    @staticmethod
    def count_series_episodes(user_id: int, series_id: int, db: Session) -> Tuple[int, int]:
        """
        Return ``(total, watched)`` for a series.

        ``watched`` counts distinct episodes of the series with a completed
        progress row; partially watched episodes do not count.
        """
        total = (
            db.query(func.count(Episode.id))
            .select_from(Episode)
            .join(Season, Episode.season_id == Season.id)
            .filter(Season.series_id == series_id)
            .scalar()
        ) or 0

        watched = (
            db.query(func.count(distinct(EpisodeWatchHistory.episode_id)))
            .select_from(EpisodeWatchHistory)
            .join(Episode, EpisodeWatchHistory.episode_id == Episode.id)
            .join(Season, Episode.season_id == Season.id)
            .filter(
                Season.series_id == series_id,
                EpisodeWatchHistory.user_id == user_id,
                EpisodeWatchHistory.completed.is_(True),
            )
            .scalar()
        ) or 0

        return total, watched


class SeriesRatingService:

    @staticmethod
    def has_reviewed(user_id: int, series_id: int, db: Session) -> bool:
        return db.query(SeriesRating.id).filter(
            SeriesRating.user_id == user_id,
            SeriesRating.series_id == series_id,
        ).first() is not None

    @staticmethod
    def rate_series(user_id: int, series_id: int, rating: int, review: Optional[str], db: Session) -> SeriesRating:
        """Create or update the user's review. The series must be Finished."""
        from app.services.watching_state_service import SeriesWatchingStateService

        if not 1 <= rating <= 5:
            raise InvalidArgumentError("Rating must be 1-5")

        get_user_or_raise(user_id, db)
        get_series_or_raise(series_id, db)

        SeriesWatchingStateService(db).validate_review_creation(user_id, series_id)

        record = db.query(SeriesRating).filter(
            SeriesRating.user_id == user_id,
            SeriesRating.series_id == series_id,
        ).first()

        if record:
            record.rating = rating
            record.review = review
            record.updated_at = datetime.utcnow()
        else:
            record = SeriesRating(
                user_id=user_id, series_id=series_id, rating=rating, review=review
            )
            db.add(record)

        db.commit()
        db.refresh(record)
        logger.info(f"User {user_id} rated series {series_id}: {rating}/5")
        return record

    @staticmethod
    def get_average_rating(series_id: int, db: Session) -> dict:
        ratings = db.query(SeriesRating).filter(SeriesRating.series_id == series_id).all()
        if not ratings:
            return {"average_rating": None, "total_ratings": 0}
        avg = sum(r.rating for r in ratings) / len(ratings)
        return {"average_rating": round(avg, 1), "total_ratings": len(ratings)}
