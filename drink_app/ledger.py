"""
Consumption ledger: the persisted drink log plus the user profile,
with BAC and caffeine estimates computed from it.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from drink_app import calculations
from drink_app.drinks import Category, Entry
from drink_app.profile import UserProfile
from drink_app.storage import DRINKS_KEY, PROFILE_KEY, KeyValueStore, StorageError
from drink_app.validation import validate_entry, validate_profile

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class Ledger:
    """Owns the entries and the profile.

    State in memory is replaced only after the store accepted the write, so a
    StorageError from the store leaves the ledger unchanged.
    """

    def __init__(self, store: KeyValueStore, clock: Clock = datetime.now) -> None:
        self.store = store
        self.clock = clock
        self._entries: List[Entry] = []
        self._profile = UserProfile()
        self.reload()

    # Persistence

    def reload(self) -> None:
        """Read entries and profile from the store.

        A StorageError propagates and leaves the current state untouched; only
        unreadable data falls back to defaults.
        """
        try:
            entries = self._load_entries()
            profile = self._load_profile()
        except StorageError:
            logger.exception("Failed to load drink log and profile")
            raise
        self._entries = entries
        self._profile = profile

    def _load_entries(self) -> List[Entry]:
        raw = self.store.get(DRINKS_KEY)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Stored drink log is not a list; starting empty")
            return []
        try:
            entries = [Entry.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError):
            logger.warning("Stored drink log is unreadable; starting empty", exc_info=True)
            return []
        valid = []
        for entry in entries:
            error = validate_entry(entry)
            if error:
                logger.warning("Dropping stored %s entry %r: %s", entry.category.value, entry.name, error)
                continue
            valid.append(entry)
        return valid

    def _load_profile(self) -> UserProfile:
        raw = self.store.get(PROFILE_KEY)
        if not isinstance(raw, dict):
            return UserProfile()
        try:
            profile = UserProfile.from_dict(raw)
        except (TypeError, ValueError):
            logger.warning("Stored profile is unreadable; using defaults", exc_info=True)
            return UserProfile()
        error = validate_profile(profile)
        if error:
            logger.warning("Stored profile is invalid (%s); using defaults", error)
            return UserProfile()
        return profile

    def _commit_entries(self, entries: List[Entry]) -> None:
        try:
            self.store.set(DRINKS_KEY, [e.to_dict() for e in entries])
        except StorageError:
            logger.exception("Failed to save drink log (%d entries)", len(entries))
            raise
        self._entries = entries

    # CRUD

    @property
    def entries(self) -> List[Entry]:
        return list(self._entries)

    @property
    def profile(self) -> UserProfile:
        return self._profile

    def get(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self._entries if e.id == entry_id), None)

    def add(self, entry: Entry) -> Optional[str]:
        """Validate and store an entry. Returns an error message, or None on success."""
        error = validate_entry(entry)
        if error:
            logger.info("Rejected %s entry %r: %s", entry.category.value, entry.name, error)
            return error
        self._commit_entries(self._entries + [entry])
        return None

    def remove(self, entry_id: str) -> bool:
        remaining = [e for e in self._entries if e.id != entry_id]
        if len(remaining) == len(self._entries):
            return False
        self._commit_entries(remaining)
        return True

    def remove_all(self, category: Category) -> int:
        category = Category(category)
        remaining = [e for e in self._entries if e.category is not category]
        removed = len(self._entries) - len(remaining)
        self._commit_entries(remaining)
        return removed

    def update_timestamp(self, entry_id: str, new_timestamp: datetime) -> bool:
        for i, e in enumerate(self._entries):
            if e.id == entry_id:
                updated = list(self._entries)
                updated[i] = e.with_timestamp(new_timestamp)
                self._commit_entries(updated)
                return True
        return False

    def update_profile(self, profile: UserProfile) -> Optional[str]:
        error = validate_profile(profile)
        if error:
            return error
        try:
            self.store.set(PROFILE_KEY, profile.to_dict())
        except StorageError:
            logger.exception("Failed to save profile")
            raise
        self._profile = profile
        return None

    # Queries

    def query(
        self,
        category: Category,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Entry]:
        return calculations.entries_between(self._entries, Category(category), start, end)

    def today(self, category: Category) -> List[Entry]:
        midnight = calculations.start_of_day(self.clock())
        return self.query(category, midnight, midnight + timedelta(days=1))

    def recent(self, category: Category, hours: float = calculations.BAC_WINDOW_HOURS) -> List[Entry]:
        return self.query(category, self.clock() - timedelta(hours=hours))

    # Estimates

    def current_bac(self) -> float:
        return calculations.bac_at(self._entries, self._profile, self.clock())

    def sober_time(self) -> Optional[datetime]:
        return calculations.sober_time(self._entries, self._profile, self.clock())

    def current_caffeine(self) -> float:
        return calculations.caffeine_at(self._entries, self._profile, self.clock())

    def clean_time(self) -> Optional[datetime]:
        return calculations.clean_time(self._entries, self._profile, self.clock())

    def total_standard_drinks(self) -> float:
        return calculations.total_standard_drinks(self._entries, self.clock())

    def total_caffeine_today(self) -> float:
        return calculations.total_caffeine_today(self._entries, self.clock())

    def bac_curve(self, hours_back: float = 2.0, hours_ahead: float = 12.0, step_hours: float = 0.25):
        now = self.clock()
        return calculations.bac_curve(
            self._entries,
            self._profile,
            now - timedelta(hours=hours_back),
            now + timedelta(hours=hours_ahead),
            step_hours=step_hours,
        )

    def caffeine_curve(self, hours_back: float = 2.0, hours_ahead: float = 12.0, step_hours: float = 0.25):
        now = self.clock()
        return calculations.caffeine_curve(
            self._entries,
            self._profile,
            now - timedelta(hours=hours_back),
            now + timedelta(hours=hours_ahead),
            step_hours=step_hours,
        )
