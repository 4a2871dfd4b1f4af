"""Input validation for entries and profiles.

Each validator returns a user-displayable error message, or None when the
input is acceptable.
"""

import math
from typing import Optional

from drink_app.drinks import Category, Entry, from_ml, to_ml
from drink_app.profile import MAX_AGE, MAX_HEIGHT_CM, MAX_WEIGHT_KG, MIN_AGE, UserProfile

MAX_DRINK_SIZE_ML = 2500.0
MAX_ALCOHOL_PERCENTAGE = 100.0
MAX_CAFFEINE_MG = 250.0
MIN_DISTRIBUTION_FACTOR = 0.1


def validate_drink_size(amount: float, unit: str) -> Optional[str]:
    if not math.isfinite(amount):
        return "Drink size must be a number"
    amount_ml = to_ml(amount, unit)
    if amount_ml > MAX_DRINK_SIZE_ML:
        max_in_unit = from_ml(MAX_DRINK_SIZE_ML, unit)
        return f"Drink size cannot exceed {max_in_unit:.0f} {unit}"
    if amount_ml <= 0:
        return "Drink size must be greater than 0"
    return None


def validate_alcohol_percentage(percentage: float) -> Optional[str]:
    if not math.isfinite(percentage):
        return "Alcohol percentage must be a number"
    if percentage > MAX_ALCOHOL_PERCENTAGE:
        return f"Alcohol percentage cannot exceed {MAX_ALCOHOL_PERCENTAGE:.0f}%"
    if percentage < 0:
        return "Alcohol percentage cannot be negative"
    return None


def validate_caffeine_content(caffeine_mg: float) -> Optional[str]:
    if not math.isfinite(caffeine_mg):
        return "Caffeine content must be a number"
    if caffeine_mg > MAX_CAFFEINE_MG:
        return f"Caffeine content cannot exceed {MAX_CAFFEINE_MG:.0f}mg"
    if caffeine_mg < 0:
        return "Caffeine content cannot be negative"
    return None


def validate_entry(entry: Entry) -> Optional[str]:
    """Check size first, then the field that belongs to the entry's category."""
    error = validate_drink_size(entry.amount, entry.unit)
    if error:
        return error

    if entry.category is Category.ALCOHOL:
        if entry.caffeine_mg is not None:
            return "Caffeine content is only allowed on caffeine entries"
        if entry.alcohol_percentage is not None:
            return validate_alcohol_percentage(entry.alcohol_percentage)
        return None

    if entry.alcohol_percentage is not None:
        return "Alcohol percentage is only allowed on alcohol entries"
    if entry.caffeine_mg is not None:
        return validate_caffeine_content(entry.caffeine_mg)
    return None


def validate_profile(profile: UserProfile) -> Optional[str]:
    if profile.age < MIN_AGE or profile.age > MAX_AGE:
        return f"Age must be between {MIN_AGE} and {MAX_AGE}"
    if not math.isfinite(profile.weight_kg) or not 0 < profile.weight_kg < MAX_WEIGHT_KG:
        return f"Weight must be greater than 0 and below {MAX_WEIGHT_KG:.0f} kg"
    if not math.isfinite(profile.height_cm) or not 0 < profile.height_cm < MAX_HEIGHT_CM:
        return f"Height must be greater than 0 and below {MAX_HEIGHT_CM:.0f} cm"
    # Searle r drops below 0.1 above roughly BMI 67 (female) / 76 (male).
    if profile.distribution_factor < MIN_DISTRIBUTION_FACTOR:
        return "Weight and height give a BMI outside the range the BAC estimate supports"
    return None
