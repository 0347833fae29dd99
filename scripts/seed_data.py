"""
Data Seeder for the timesheet.
Populates the database with demo users, activities and a week of entries.
"""

import asyncio
import random
import sys
from datetime import date, timedelta
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from timesheet.domain.models import AppUser, TimeEntry, UserRole
from timesheet.infra.config import get_settings
from timesheet.infra.db import init_db
from timesheet.infra.repository import ActivityRepository, TimeEntryRepository, UserRepository


async def reset_database(db_path: Path):
    """Delete the existing database file to ensure a fresh seed"""
    if db_path.exists():
        print(f"Removing existing database at: {db_path}")
        try:
            db_path.unlink()
        except PermissionError:
            print("ERROR: Could not remove database. It might be in use.")
            sys.exit(1)


async def seed():
    settings = get_settings()
    await reset_database(settings.data_dir / 'timesheet.db')
    print("Starting data seeding...")

    await init_db(settings.get_db_url())

    user_repo = UserRepository()
    activity_repo = ActivityRepository()
    entry_repo = TimeEntryRepository(timezone=settings.preferences.timezone)

    # 1. Users
    users = [
        AppUser(uid="admin", email="admin@example.com", display_name="Alex Admin", role=UserRole.ADMIN),
        AppUser(uid="jane", email="jane@example.com", display_name="Jane Smith"),
        AppUser(uid="john", email="john@example.com", display_name="John Doe"),
    ]
    for user in users:
        print(f"Creating user: {user.display_name}")
        await user_repo.create(user)

    # 2. Activities
    for label, color in [("Meeting", "#10B981"), ("Development", "#3B82F6"), ("Support", "#F59E0B")]:
        await activity_repo.create(label, color)
    activities = await activity_repo.get_all()

    # 3. One work week of entries, the last one left open
    start = date.today() - timedelta(days=date.today().weekday())
    for offset in range(5):
        day = (start + timedelta(days=offset)).strftime("%Y-%m-%d")
        for user in users[1:]:
            await entry_repo.create(TimeEntry(
                user_id=user.uid, date=day, activity="meeting",
                start_time="09:00", end_time="09:30", notes="Daily standup",
            ))
            await entry_repo.create(TimeEntry(
                user_id=user.uid, date=day, activity=random.choice(activities).id,
                start_time="09:30", end_time="12:00",
            ))
            await entry_repo.create(TimeEntry(
                user_id=user.uid, date=day, activity="development",
                start_time="13:00", end_time=None if offset == 4 else "17:00",
            ))
        print(f"Generated entries for {day}")

    print("Seeding complete.")


if __name__ == "__main__":
    asyncio.run(seed())
