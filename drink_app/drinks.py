"""Drink-log entries, volume units and alcohol content helpers.

Standard drink = 14 g ethanol.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional

# Standard drink in grams of pure ethanol.
STANDARD_DRINK_GRAMS = 14.0

# Ethanol density (g/mL) for volume x ABV -> grams.
ETHANOL_DENSITY = 0.789

# Milliliters per unit. Unknown units are treated as ml.
ML_PER_UNIT = {
    "ml": 1.0,
    "cl": 10.0,
    "oz": 29.5735,
    "fl oz": 29.5735,
}

UNITS = list(ML_PER_UNIT)


class Category(str, Enum):
    ALCOHOL = "alcohol"
    CAFFEINE = "caffeine"


def to_ml(amount: float, unit: str) -> float:
    return amount * ML_PER_UNIT.get(unit.strip().lower(), 1.0)


def from_ml(amount_ml: float, unit: str) -> float:
    return amount_ml / ML_PER_UNIT.get(unit.strip().lower(), 1.0)


def grams_from_volume_abv(volume_ml: float, percentage: float) -> float:
    """Convert milliliters and ABV in percent (0 to 100) to grams of ethanol."""
    return volume_ml * (percentage / 100.0) * ETHANOL_DENSITY


@dataclass
class Entry:
    """A single logged drink."""

    category: Category
    name: str
    amount: float
    unit: str = "ml"
    timestamp: datetime = field(default_factory=datetime.now)
    alcohol_percentage: Optional[float] = None
    caffeine_mg: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.category = Category(self.category)

    @property
    def volume_ml(self) -> float:
        return to_ml(self.amount, self.unit)

    @property
    def alcohol_grams(self) -> float:
        if self.category is not Category.ALCOHOL or self.alcohol_percentage is None:
            return 0.0
        return grams_from_volume_abv(self.volume_ml, self.alcohol_percentage)

    @property
    def standard_drinks(self) -> float:
        return self.alcohol_grams / STANDARD_DRINK_GRAMS

    def with_timestamp(self, timestamp: datetime) -> "Entry":
        return replace(self, timestamp=timestamp)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "category": self.category.value,
            "name": self.name,
            "amount": self.amount,
            "unit": self.unit,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.alcohol_percentage is not None:
            out["alcohol_percentage"] = self.alcohol_percentage
        if self.caffeine_mg is not None:
            out["caffeine_mg"] = self.caffeine_mg
        return out

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Entry":
        """Build an entry from its JSON form. Raises KeyError/ValueError on bad input."""
        pct = raw.get("alcohol_percentage")
        caffeine = raw.get("caffeine_mg")
        return cls(
            id=str(raw["id"]),
            category=Category(raw["category"]),
            name=str(raw["name"]),
            amount=float(raw["amount"]),
            unit=str(raw.get("unit", "ml")),
            timestamp=datetime.fromisoformat(raw["timestamp"]),
            alcohol_percentage=float(pct) if pct is not None else None,
            caffeine_mg=float(caffeine) if caffeine is not None else None,
        )


def alcohol_entry(name: str, amount: float, percentage: float, unit: str = "ml", timestamp: Optional[datetime] = None) -> Entry:
    return Entry(
        category=Category.ALCOHOL,
        name=name,
        amount=amount,
        unit=unit,
        timestamp=timestamp or datetime.now(),
        alcohol_percentage=percentage,
    )


def caffeine_entry(name: str, amount: float, caffeine_mg: float, unit: str = "ml", timestamp: Optional[datetime] = None) -> Entry:
    return Entry(
        category=Category.CAFFEINE,
        name=name,
        amount=amount,
        unit=unit,
        timestamp=timestamp or datetime.now(),
        caffeine_mg=caffeine_mg,
    )
