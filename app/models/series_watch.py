"""
Per-user series tracking: episode progress, series reviews and the
watching state that ties them together.
"""
from enum import Enum

from sqlalchemy import Column, Integer, Float, Boolean, DateTime, ForeignKey, UniqueConstraint, Text, String
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base


class WatchingStatus(str, Enum):
    """
    A user's progress through a series.

        ToWatch:    no episode watched yet
        InProgress: at least one episode watched, but not all
        Finished:   every episode watched; the only state that allows a review
    """
    ToWatch = "ToWatch"
    InProgress = "InProgress"
    Finished = "Finished"


class EpisodeWatchHistory(Base):
    __tablename__ = "episode_watch_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    episode_id = Column(Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=False)

    # Playback state
    watch_percentage = Column(Float, default=0.0)   # 0.0 – 100.0
    last_position = Column(Integer, default=0)       # seconds
    completed = Column(Boolean, default=False)

    watched_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    user = relationship("User", backref="episode_watch_history")
    episode = relationship("Episode", backref="watch_history")

    __table_args__ = (
        UniqueConstraint("user_id", "episode_id", name="unique_user_episode_watch"),
    )

    def __repr__(self):
        return f"<EpisodeWatchHistory user={self.user_id} ep={self.episode_id}>"


class SeriesRating(Base):
    """A user's review of a whole series. Only allowed once the series is Finished."""
    __tablename__ = "series_ratings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)   # 1-5 stars
    review = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", backref="series_ratings")
    series = relationship("Series", backref="ratings")

    __table_args__ = (
        UniqueConstraint("user_id", "series_id", name="unique_user_series_rating"),
    )


class SeriesWatchingState(Base):
    """
    Snapshot of a user's watching status for one series.

    Written only by SeriesWatchingStateService.update_status. ``status`` is kept
    as a plain string so an unexpected value is reported when it is resolved,
    not when the row is loaded.
    """
    __tablename__ = "series_watching_states"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False)

    status = Column(String(20), nullable=False, default=WatchingStatus.ToWatch.value)
    watched_episodes_count = Column(Integer, nullable=False, default=0)
    total_episodes_count = Column(Integer, nullable=False, default=0)

    # Optimistic concurrency: SQLAlchemy bumps this on every UPDATE and raises
    # StaleDataError if another writer got there first.
    version = Column(Integer, nullable=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_updated = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", backref="series_watching_states")
    series = relationship("Series", backref="watching_states")

    __table_args__ = (
        UniqueConstraint("user_id", "series_id", name="unique_user_series_watching_state"),
    )
    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return (f"<SeriesWatchingState user={self.user_id} series={self.series_id} "
                f"status={self.status} {self.watched_episodes_count}/{self.total_episodes_count}>")
