"""
Series, Season, Episode catalogue models
"""
from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.database import Base


class Series(Base):
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text)
    release_year = Column(Integer)
    language = Column(String(50), default="English")
    country = Column(String(50))
    poster_url = Column(String(500))

    is_featured = Column(Boolean, default=False)
    status = Column(String(50), default="active")  # active, inactive

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    seasons = relationship("Season", back_populates="series", cascade="all, delete-orphan",
                           order_by="Season.season_number")

    def __repr__(self):
        return f"<Series {self.title}>"


class Season(Base):
    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, index=True)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False)
    season_number = Column(Integer, nullable=False)
    title = Column(String(255))
    release_year = Column(Integer)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    series = relationship("Series", back_populates="seasons")
    episodes = relationship("Episode", back_populates="season", cascade="all, delete-orphan",
                            order_by="Episode.episode_number")

    def __repr__(self):
        return f"<Season series_id={self.series_id} season={self.season_number}>"


class Episode(Base):
    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False)
    episode_number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    duration = Column(Integer)          # seconds
    view_count = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    season = relationship("Season", back_populates="episodes")

    def __repr__(self):
        return f"<Episode season_id={self.season_id} ep={self.episode_number}>"
