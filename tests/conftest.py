# tests/conftest.py
import itertools
import os

# Point the app at a throwaway in-memory database before anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["FINISHED_IS_STICKY"] = "true"

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from app.database import Base, SessionLocal, engine, get_db
from app.models import Episode, EpisodeWatchHistory, Season, Series, SeriesRating, User
from app.utils.logging import setup_logger

setup_logger("DEBUG")


@pytest.fixture()
def db():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def client(db):
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def log_messages():
    """Collect loguru records emitted while the test runs."""
    messages = []
    sink_id = logger.add(lambda message: messages.append(message.record), level="DEBUG")
    yield messages
    logger.remove(sink_id)


@pytest.fixture()
def make_user(db):
    counter = itertools.count(1)

    def _make(username=None):
        n = next(counter)
        user = User(username=username or f"viewer{n}", email=f"viewer{n}@example.com")
        db.add(user)
        db.commit()
        return user

    return _make


@pytest.fixture()
def make_series(db):
    """Create a series with ``episodes`` episodes spread over ``seasons`` seasons."""

    def _make(episodes=10, seasons=1, title="Test Series"):
        series = Series(title=title)
        per_season, extra = divmod(episodes, seasons)
        for number in range(1, seasons + 1):
            count = per_season + (1 if number <= extra else 0)
            season = Season(season_number=number)
            season.episodes = [
                Episode(episode_number=n, title=f"S{number}E{n}") for n in range(1, count + 1)
            ]
            series.seasons.append(season)
        db.add(series)
        db.commit()
        return series

    return _make


@pytest.fixture()
def episodes_of(db):
    def _episodes(series):
        return (
            db.query(Episode)
            .join(Season, Episode.season_id == Season.id)
            .filter(Season.series_id == series.id)
            .order_by(Season.season_number, Episode.episode_number)
            .all()
        )

    return _episodes


@pytest.fixture()
def mark_watched(db):
    """Write episode progress rows directly, bypassing the watching state update."""

    def _mark(user, episodes, completed=True):
        for episode in episodes:
            record = db.query(EpisodeWatchHistory).filter(
                EpisodeWatchHistory.user_id == user.id,
                EpisodeWatchHistory.episode_id == episode.id,
            ).first()
            if record is None:
                record = EpisodeWatchHistory(user_id=user.id, episode_id=episode.id)
                db.add(record)
            record.completed = completed
            record.watch_percentage = 100.0 if completed else 0.0
        db.commit()

    return _mark


@pytest.fixture()
def add_review(db):
    """Insert a review row without going through the Finished check."""

    def _add(user, series, rating=5, review="Great"):
        record = SeriesRating(user_id=user.id, series_id=series.id, rating=rating, review=review)
        db.add(record)
        db.commit()
        return record

    return _add
