"""BAC and caffeine estimates over a list of logged entries.

Model:
- Alcohol: BAC (per-mille) = [grams / (body_weight_g * r)] * 1000, with r from
  sex and BMI. Metabolized grams (elimination rate * kg * hours since first
  drink) are subtracted before dividing.
- Sober time: peak BAC with the plain Widmark r, eliminated at 0.15 per-mille/hour.
- Caffeine: first-order decay with an age-dependent half-life,
  T1/2 = 5 * 1.008^(age - 20) hours.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple

from drink_app.drinks import Category, Entry
from drink_app.profile import UserProfile

BAC_WINDOW_HOURS = 24.0

# Per-mille per hour, used for the sober-time estimate.
BAC_ELIMINATION_PER_HOUR = 0.15

# Caffeine level (mg) considered "clean".
CAFFEINE_CLEAN_MG = 5.0


def _hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600.0


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def entries_between(
    entries: Iterable[Entry],
    category: Category,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Entry]:
    """Entries of one category with start <= timestamp <= end (open bounds when None)."""
    return [
        e for e in entries
        if e.category is category
        and (start is None or e.timestamp >= start)
        and (end is None or e.timestamp <= end)
    ]


def recent_alcohol(entries: Iterable[Entry], now: datetime, hours: float = BAC_WINDOW_HOURS) -> List[Entry]:
    return entries_between(entries, Category.ALCOHOL, now - timedelta(hours=hours), now)


def todays_caffeine(entries: Iterable[Entry], now: datetime) -> List[Entry]:
    return entries_between(entries, Category.CAFFEINE, start_of_day(now), now)


def total_alcohol_grams(entries: Iterable[Entry]) -> float:
    return sum(e.alcohol_grams for e in entries)


def bac_from_grams(grams: float, weight_kg: float, distribution_factor: float) -> float:
    """BAC (per-mille) from grams of ethanol, with no elimination."""
    return grams / (weight_kg * 1000.0 * distribution_factor) * 1000.0


def bac_at(entries: Iterable[Entry], profile: UserProfile, now: datetime) -> float:
    """Estimated BAC (per-mille) at `now` from alcohol logged in the trailing 24h."""
    recent = recent_alcohol(entries, now)
    if not recent:
        return 0.0

    grams = total_alcohol_grams(recent)
    first = min(e.timestamp for e in recent)
    # Elapsed time counts whole minutes.
    minutes = int((now - first).total_seconds() // 60)
    hours = minutes / 60.0
    metabolized = profile.weight_kg * profile.sex.elimination_rate * hours
    remaining = max(0.0, grams - metabolized)
    return max(0.0, bac_from_grams(remaining, profile.weight_kg, profile.distribution_factor))


def sober_time(entries: Iterable[Entry], profile: UserProfile, now: datetime) -> Optional[datetime]:
    """When BAC is expected to reach zero, or None if already sober."""
    recent = recent_alcohol(entries, now)
    if not recent:
        return None

    peak = bac_from_grams(total_alcohol_grams(recent), profile.weight_kg, profile.sex.widmark_r)
    latest = max(e.timestamp for e in recent)
    sober_at = latest + timedelta(hours=peak / BAC_ELIMINATION_PER_HOUR)
    return sober_at if sober_at > now else None


def caffeine_half_life(age: int) -> float:
    """Caffeine half-life in hours for a given age."""
    return 5.0 * math.pow(1.008, age - 20)


def caffeine_at(entries: Iterable[Entry], profile: UserProfile, now: datetime) -> float:
    """Caffeine (mg) still in the body at `now` from today's entries."""
    todays = todays_caffeine(entries, now)
    if not todays:
        return 0.0

    k = math.log(2) / caffeine_half_life(profile.age)
    level = 0.0
    for e in todays:
        if e.caffeine_mg is None:
            continue
        level += e.caffeine_mg * math.exp(-k * _hours_between(e.timestamp, now))
    return max(0.0, level)


def clean_time(entries: Iterable[Entry], profile: UserProfile, now: datetime) -> Optional[datetime]:
    """When caffeine drops below 5 mg, or None if already clean."""
    todays = todays_caffeine(entries, now)
    if not todays:
        return None

    total = sum(e.caffeine_mg or 0.0 for e in todays)
    if total <= CAFFEINE_CLEAN_MG:
        return None

    latest = max(e.timestamp for e in todays)
    hours = math.log(total / CAFFEINE_CLEAN_MG) * caffeine_half_life(profile.age) / math.log(2)
    clean_at = latest + timedelta(hours=hours)
    return clean_at if clean_at > now else None


def total_standard_drinks(entries: Iterable[Entry], now: datetime) -> float:
    return sum(e.standard_drinks for e in recent_alcohol(entries, now))


def total_caffeine_today(entries: Iterable[Entry], now: datetime) -> float:
    return sum(e.caffeine_mg or 0.0 for e in todays_caffeine(entries, now))


def _curve(fn, entries: List[Entry], profile: UserProfile, start: datetime, end: datetime, step_hours: float) -> List[Tuple[datetime, float]]:
    if step_hours <= 0:
        raise ValueError("step_hours must be > 0")
    points: List[Tuple[datetime, float]] = []
    t = start
    step = timedelta(hours=step_hours)
    while t <= end:
        points.append((t, fn(entries, profile, t)))
        t += step
    return points


def bac_curve(
    entries: Iterable[Entry],
    profile: UserProfile,
    start: datetime,
    end: datetime,
    step_hours: float = 0.25,
) -> List[Tuple[datetime, float]]:
    """Return (time, bac_permille) pairs for graphing."""
    return _curve(bac_at, list(entries), profile, start, end, step_hours)


def caffeine_curve(
    entries: Iterable[Entry],
    profile: UserProfile,
    start: datetime,
    end: datetime,
    step_hours: float = 0.25,
) -> List[Tuple[datetime, float]]:
    """Return (time, caffeine_mg) pairs for graphing."""
    return _curve(caffeine_at, list(entries), profile, start, end, step_hours)
