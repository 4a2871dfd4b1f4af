"""User profile: body measurements and the physiological constants derived from them."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

MIN_AGE = 18
MAX_AGE = 122
MAX_WEIGHT_KG = 500.0
MAX_HEIGHT_CM = 300.0

DEFAULT_AGE = 25
DEFAULT_WEIGHT_KG = 70.0
DEFAULT_HEIGHT_CM = 170.0


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"

    @property
    def widmark_r(self) -> float:
        """Plain Widmark distribution ratio, independent of BMI."""
        return 0.68 if self is Sex.MALE else 0.55

    @property
    def elimination_rate(self) -> float:
        """Alcohol elimination in g per kg body mass per hour."""
        return 0.1 if self is Sex.MALE else 0.085


@dataclass
class UserProfile:
    age: int = DEFAULT_AGE
    sex: Sex = Sex.MALE
    weight_kg: float = DEFAULT_WEIGHT_KG
    height_cm: float = DEFAULT_HEIGHT_CM

    def __post_init__(self) -> None:
        self.sex = Sex(self.sex)

    @property
    def bmi(self) -> float:
        height_m = self.height_cm / 100.0
        return self.weight_kg / (height_m * height_m)

    @property
    def distribution_factor(self) -> float:
        """BMI-adjusted Widmark r (Searle, 2014)."""
        if self.sex is Sex.MALE:
            return 1.0181 - 0.01213 * self.bmi
        return 0.9367 - 0.01240 * self.bmi

    def to_dict(self) -> dict[str, Any]:
        return {
            "age": self.age,
            "sex": self.sex.value,
            "weight_kg": self.weight_kg,
            "height_cm": self.height_cm,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "UserProfile":
        return cls(
            age=int(raw.get("age", DEFAULT_AGE)),
            sex=Sex(raw.get("sex", Sex.MALE.value)),
            weight_kg=float(raw.get("weight_kg", DEFAULT_WEIGHT_KG)),
            height_cm=float(raw.get("height_cm", DEFAULT_HEIGHT_CM)),
        )


def bmi_category(bmi: float) -> str:
    """Return 'underweight', 'normal', 'overweight', or 'obese'."""
    if bmi < 18.5:
        return "underweight"
    if bmi < 25:
        return "normal"
    if bmi < 30:
        return "overweight"
    return "obese"
