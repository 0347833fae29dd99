"""
Repository Pattern Implementation.

Architecture Decision: Why Repository Pattern?
Separates data access logic from the export core. Makes it easy to:
- Switch database implementations
- Mock data for testing
- Change data sources (local DB to a hosted document store)

TimeEntryRepository is the only place that knows stored times are canonical
(UTC): it converts local -> canonical on write and canonical -> local on read,
using the entry's own date.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from timesheet.domain.models import Activity, AppSettings, AppUser, TimeEntry, activity_id_from_label
from timesheet.infra.db import ActivityModel, SettingsModel, TimeEntryModel, UserModel, get_engine
from timesheet.services.timezone_service import parse_date, resolve_zone, to_canonical, to_local

logger = logging.getLogger(__name__)


class _Repository:
    def __init__(self, session: Optional[AsyncSession] = None):
        self.session = session

    async def _get_session(self) -> AsyncSession:
        """Get session - either injected or create new one"""
        if self.session:
            return self.session
        engine = get_engine()
        return engine.get_session()


class UserRepository(_Repository):
    """
    Handles AppUser persistence.
    """

    async def create(self, user: AppUser) -> AppUser:
        session = await self._get_session()
        async with session:
            model = UserModel(
                uid=user.uid,
                email=user.email,
                display_name=user.display_name,
                role=user.role.value,
                created_at=user.created_at,
                created_by=user.created_by,
            )
            session.add(model)
            await session.commit()
            return user

    async def get_all(self) -> List[AppUser]:
        session = await self._get_session()
        async with session:
            result = await session.execute(select(UserModel).order_by(UserModel.display_name))
            return [AppUser.model_validate(m) for m in result.scalars().all()]

    async def get_by_id(self, uid: str) -> Optional[AppUser]:
        session = await self._get_session()
        async with session:
            model = await session.get(UserModel, uid)
            return AppUser.model_validate(model) if model else None

    async def lookup(self) -> Dict[str, str]:
        """uid -> display name, falling back to the email"""
        return {user.uid: user.display_name or user.email for user in await self.get_all()}


class ActivityRepository(_Repository):
    """
    Handles Activity persistence. Ids are derived from labels.
    """

    DEFAULT_LABEL = "Meeting"
    DEFAULT_COLOR = "#10B981"

    async def get_all(self) -> List[Activity]:
        """All activities ordered by label; seeds the default one when none exist"""
        session = await self._get_session()
        async with session:
            result = await session.execute(select(ActivityModel).order_by(ActivityModel.label))
            activities = [Activity.model_validate(m) for m in result.scalars().all()]

        if not activities:
            logger.info(f"No activities found, creating default '{self.DEFAULT_LABEL}'")
            activities = [await self.create(self.DEFAULT_LABEL, self.DEFAULT_COLOR)]
        return activities

    async def create(self, label: str, color: str) -> Activity:
        """Create (or overwrite) the activity derived from `label`"""
        activity = Activity(id=activity_id_from_label(label), label=label, color=color)
        session = await self._get_session()
        async with session:
            await session.merge(ActivityModel(
                id=activity.id,
                label=activity.label,
                color=activity.color,
                created_at=datetime.now(),
            ))
            await session.commit()
        return activity

    async def update(self, activity_id: str, label: Optional[str] = None,
                     color: Optional[str] = None) -> Optional[Activity]:
        """Change label and/or color; the id stays the same"""
        session = await self._get_session()
        async with session:
            model = await session.get(ActivityModel, activity_id)
            if model is None:
                return None
            if label is not None:
                model.label = label
            if color is not None:
                model.color = color
            model.updated_at = datetime.now()
            await session.commit()
            return Activity.model_validate(model)

    async def delete(self, activity_id: str) -> None:
        session = await self._get_session()
        async with session:
            await session.execute(delete(ActivityModel).where(ActivityModel.id == activity_id))
            await session.commit()


class TimeEntryRepository(_Repository):
    """
    Handles all TimeEntry-related database operations.

    Entries going in and coming out carry local times in `timezone`.
    """

    UPDATABLE_FIELDS = ("activity", "start_time", "end_time", "notes", "date")

    def __init__(self, session: Optional[AsyncSession] = None, timezone: str = "UTC"):
        super().__init__(session)
        resolve_zone(timezone)
        self.timezone = timezone

    def _to_domain(self, model: TimeEntryModel) -> TimeEntry:
        """Convert a stored row to a domain entry with local times"""
        return TimeEntry(
            id=str(model.id),
            user_id=model.user_id,
            date=model.date,
            activity=model.activity,
            start_time=to_local(model.date, model.start_time, self.timezone),
            end_time=to_local(model.date, model.end_time, self.timezone) if model.end_time else None,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    async def create(self, entry: TimeEntry) -> TimeEntry:
        """Create a new time entry from local times"""
        session = await self._get_session()
        async with session:
            now = datetime.now()
            model = TimeEntryModel(
                user_id=entry.user_id,
                date=entry.date,
                activity=entry.activity,
                start_time=to_canonical(entry.date, entry.start_time, self.timezone),
                end_time=to_canonical(entry.date, entry.end_time, self.timezone) if entry.end_time else None,
                notes=entry.notes or None,
                created_at=now,
                updated_at=now,
            )
            session.add(model)
            await session.commit()
            await session.refresh(model)
            return entry.model_copy(update={"id": str(model.id), "created_at": now, "updated_at": now})

    async def update(self, entry_id: str, changes: Dict[str, Any]) -> Optional[TimeEntry]:
        """
        Apply a partial update.

        Both stored times are re-anchored to the entry's final date, so a
        time left out of `changes` keeps its local value when the date moves.

        Args:
            entry_id: Entry to change
            changes: Subset of UPDATABLE_FIELDS; times are local

        Returns:
            The updated entry, or None if it does not exist

        Raises:
            ValueError: for fields outside UPDATABLE_FIELDS
            InvalidInputError: for a malformed date or time; nothing is written
        """
        unknown = set(changes) - set(self.UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        session = await self._get_session()
        async with session:
            model = await session.get(TimeEntryModel, int(entry_id))
            if model is None:
                return None

            current = self._to_domain(model)
            date = changes.get("date") or current.date
            parse_date(date)
            start_time = changes.get("start_time") or current.start_time
            end_time = changes["end_time"] if "end_time" in changes else current.end_time

            # Convert everything before touching the row
            canonical_start = to_canonical(date, start_time, self.timezone)
            canonical_end = to_canonical(date, end_time, self.timezone) if end_time else None

            model.date = date
            model.start_time = canonical_start
            model.end_time = canonical_end
            if "activity" in changes:
                model.activity = changes["activity"]
            if "notes" in changes:
                model.notes = changes["notes"] or None
            model.updated_at = datetime.now()
            await session.commit()
            return self._to_domain(model)

    async def delete(self, entry_id: str) -> None:
        """Delete a time entry by ID"""
        session = await self._get_session()
        async with session:
            await session.execute(delete(TimeEntryModel).where(TimeEntryModel.id == int(entry_id)))
            await session.commit()

    async def get_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        session = await self._get_session()
        async with session:
            model = await session.get(TimeEntryModel, int(entry_id))
            return self._to_domain(model) if model else None

    async def _query(self, stmt) -> List[TimeEntry]:
        session = await self._get_session()
        async with session:
            result = await session.execute(stmt)
            return [self._to_domain(m) for m in result.scalars().all()]

    async def get_user_entries(self, user_id: str, date: Optional[str] = None) -> List[TimeEntry]:
        """A user's entries, optionally for one date, sorted by local start time"""
        stmt = select(TimeEntryModel).where(TimeEntryModel.user_id == user_id)
        if date:
            stmt = stmt.where(TimeEntryModel.date == date)
        entries = await self._query(stmt)
        return sorted(entries, key=lambda e: e.start_time)

    async def get_all_entries(self, date: Optional[str] = None) -> List[TimeEntry]:
        """Everyone's entries, optionally for one date, sorted by local start time"""
        stmt = select(TimeEntryModel)
        if date:
            stmt = stmt.where(TimeEntryModel.date == date)
        entries = await self._query(stmt)
        return sorted(entries, key=lambda e: e.start_time)

    async def fetch_entries(self, start_date: str, end_date: str,
                            user_id: Optional[str] = None) -> List[TimeEntry]:
        """
        Entries dated within the inclusive range, optionally for one user.

        Sorted by date, user id, then local start time.
        """
        stmt = select(TimeEntryModel).where(
            TimeEntryModel.date >= start_date,
            TimeEntryModel.date <= end_date,
        )
        if user_id:
            stmt = stmt.where(TimeEntryModel.user_id == user_id)
        entries = await self._query(stmt)
        return sorted(entries, key=lambda e: (e.date, e.user_id, e.start_time))


class SettingsRepository(_Repository):
    """
    Application settings stored as a single row.
    """

    SETTINGS_KEY = "appConfig"

    async def get(self) -> AppSettings:
        """Current settings, or the defaults when none were saved yet"""
        session = await self._get_session()
        async with session:
            model = await session.get(SettingsModel, self.SETTINGS_KEY)
            return AppSettings.model_validate(model) if model else AppSettings()

    async def update(self, updated_by: str, allow_user_edits: Optional[bool] = None) -> AppSettings:
        """Merge the given values into the stored settings"""
        session = await self._get_session()
        async with session:
            model = await session.get(SettingsModel, self.SETTINGS_KEY)
            if model is None:
                model = SettingsModel(key=self.SETTINGS_KEY, allow_user_edits=True)
                session.add(model)
            if allow_user_edits is not None:
                model.allow_user_edits = allow_user_edits
            model.updated_at = datetime.now()
            model.updated_by = updated_by
            await session.commit()
            return AppSettings.model_validate(model)
