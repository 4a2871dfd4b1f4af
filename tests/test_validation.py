"""Tests for entry and profile validation."""
from drink_app.drinks import Category, Entry, alcohol_entry, caffeine_entry
from drink_app.profile import UserProfile
from drink_app.validation import (
    validate_alcohol_percentage,
    validate_caffeine_content,
    validate_drink_size,
    validate_entry,
    validate_profile,
)


def test_drink_size_limits_in_ml():
    assert validate_drink_size(2500, "ml") is None
    assert validate_drink_size(2501, "ml") == "Drink size cannot exceed 2500 ml"
    assert validate_drink_size(0, "ml") == "Drink size must be greater than 0"
    assert validate_drink_size(-5, "ml") == "Drink size must be greater than 0"


def test_drink_size_limit_reported_in_entry_unit():
    assert validate_drink_size(250, "cl") is None
    assert validate_drink_size(251, "cl") == "Drink size cannot exceed 250 cl"
    assert validate_drink_size(90, "fl oz") == "Drink size cannot exceed 85 fl oz"
    assert validate_drink_size(84, "OZ") is None


def test_unknown_unit_treated_as_ml():
    assert validate_drink_size(2600, "cup") == "Drink size cannot exceed 2500 cup"


def test_alcohol_percentage_range():
    assert validate_alcohol_percentage(0) is None
    assert validate_alcohol_percentage(100) is None
    assert validate_alcohol_percentage(100.5) == "Alcohol percentage cannot exceed 100%"
    assert validate_alcohol_percentage(-1) == "Alcohol percentage cannot be negative"


def test_caffeine_content_range():
    assert validate_caffeine_content(250) is None
    assert validate_caffeine_content(251) == "Caffeine content cannot exceed 250mg"
    assert validate_caffeine_content(-0.1) == "Caffeine content cannot be negative"


def test_validate_entry_checks_size_before_content():
    entry = alcohol_entry("Huge", 3000, 150)
    assert validate_entry(entry) == "Drink size cannot exceed 2500 ml"


def test_validate_entry_category_fields():
    assert validate_entry(alcohol_entry("Beer", 500, 5)) is None
    assert validate_entry(caffeine_entry("Espresso", 30, 70)) is None
    assert validate_entry(caffeine_entry("Energy", 500, 300)) == "Caffeine content cannot exceed 250mg"

    mixed = Entry(category=Category.ALCOHOL, name="Irish coffee", amount=200, alcohol_percentage=10, caffeine_mg=60)
    assert validate_entry(mixed) == "Caffeine content is only allowed on caffeine entries"
    wrong = Entry(category=Category.CAFFEINE, name="Cola", amount=330, alcohol_percentage=5)
    assert validate_entry(wrong) == "Alcohol percentage is only allowed on alcohol entries"


def test_validate_profile_ranges():
    assert validate_profile(UserProfile()) is None
    assert validate_profile(UserProfile(age=17)) == "Age must be between 18 and 122"
    assert validate_profile(UserProfile(age=123)) == "Age must be between 18 and 122"
    assert "Weight" in validate_profile(UserProfile(weight_kg=0))
    assert "Weight" in validate_profile(UserProfile(weight_kg=500))
    assert "Height" in validate_profile(UserProfile(height_cm=300))


def test_non_finite_numbers_rejected():
    nan, inf = float("nan"), float("inf")
    assert validate_drink_size(nan, "ml") == "Drink size must be a number"
    assert validate_drink_size(inf, "ml") == "Drink size must be a number"
    assert validate_alcohol_percentage(nan) == "Alcohol percentage must be a number"
    assert validate_alcohol_percentage(-inf) == "Alcohol percentage must be a number"
    assert validate_caffeine_content(nan) == "Caffeine content must be a number"
    assert validate_caffeine_content(inf) == "Caffeine content must be a number"
    assert validate_entry(alcohol_entry("Beer", 500, nan)) == "Alcohol percentage must be a number"
    assert validate_entry(caffeine_entry("Cola", 330, nan)) == "Caffeine content must be a number"


def test_validate_profile_rejects_non_finite_measurements():
    assert "Weight" in validate_profile(UserProfile(weight_kg=float("nan")))
    assert "Height" in validate_profile(UserProfile(height_cm=float("inf")))


def test_validate_profile_rejects_bmi_without_positive_distribution_factor():
    heavy = UserProfile(weight_kg=499, height_cm=150)
    assert heavy.distribution_factor < 0
    assert "BMI" in validate_profile(heavy)
    assert "BMI" in validate_profile(UserProfile(weight_kg=240, height_cm=170))
    assert validate_profile(UserProfile(weight_kg=150, height_cm=170)) is None
