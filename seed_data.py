"""
Script to seed the database with a demo user and a few series
Run this from the project root directory:
    python seed_data.py
"""
import sys
import os

# Ensure we can import from app
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.database import SessionLocal, create_tables
from app.models.series import Series, Season, Episode
from app.models.user import User


def seed_users():
    """Create a demo viewer and an admin if they don't exist"""
    db = SessionLocal()

    users_data = [
        {"username": "admin", "email": "admin@example.com", "full_name": "Admin User", "is_admin": True},
        {"username": "viewer", "email": "viewer@example.com", "full_name": "Demo Viewer", "is_admin": False},
    ]

    print("👤 Creating users...")
    for user_data in users_data:
        existing = db.query(User).filter(User.username == user_data["username"]).first()
        if not existing:
            db.add(User(**user_data))
            print(f"  ✓ Created user: {user_data['username']}")
        else:
            print(f"  ⊙ User already exists: {user_data['username']}")

    db.commit()
    db.close()
    print()


def seed_series():
    """Create sample series with seasons and episodes"""
    db = SessionLocal()

    series_data = [
        {"title": "The Long Night", "release_year": 2019, "seasons": [8, 8]},
        {"title": "Harbour Lights", "release_year": 2021, "seasons": [6]},
        {"title": "Short Stories", "release_year": 2023, "seasons": [2]},
    ]

    print("📺 Creating series...")
    created_count = 0

    for data in series_data:
        existing = db.query(Series).filter(Series.title == data["title"]).first()
        if existing:
            print(f"  ⊙ Series already exists: {data['title']}")
            continue

        series = Series(title=data["title"], release_year=data["release_year"])
        for season_number, episode_count in enumerate(data["seasons"], start=1):
            season = Season(season_number=season_number, title=f"Season {season_number}")
            season.episodes = [
                Episode(episode_number=n, title=f"Episode {n}")
                for n in range(1, episode_count + 1)
            ]
            series.seasons.append(season)

        db.add(series)
        created_count += 1
        total = sum(data["seasons"])
        print(f"  ✓ Created series: {data['title']} ({total} episodes)")

    db.commit()
    db.close()
    print(f"✅ Created {created_count} new series\n")


if __name__ == "__main__":
    print("=" * 50)
    print("🌱 SEEDING DATABASE")
    print("=" * 50 + "\n")

    create_tables()
    seed_users()
    seed_series()

    print("=" * 50)
    print("✅ SEEDING COMPLETE")
    print("=" * 50)
