from datetime import datetime

import pytest

from drink_app.drinks import alcohol_entry, caffeine_entry
from drink_app.ledger import Ledger
from drink_app.limits import bac_level, get_intake_summary, progress_level
from drink_app.storage import MemoryKeyValueStore

NOW = datetime(2026, 3, 14, 21, 0)


def test_bac_level_bands():
    assert bac_level(0.0) == "low"
    assert bac_level(0.19) == "low"
    assert bac_level(0.2) == "moderate"
    assert bac_level(0.5) == "high"
    assert bac_level(0.8) == "very_high"


def test_progress_level_bands():
    assert progress_level(1.0, 4.0) == "ok"
    assert progress_level(2.0, 4.0) == "elevated"
    assert progress_level(3.2, 4.0) == "over"
    assert progress_level(5.0, 0.0) == "ok"


def test_intake_summary():
    ledger = Ledger(MemoryKeyValueStore(), clock=lambda: NOW)
    for _ in range(2):
        ledger.add(alcohol_entry("Wine Glass", 200, 14.0, timestamp=NOW))
    ledger.add(caffeine_entry("Monster", 500, 160, timestamp=NOW))

    summary = get_intake_summary(ledger)
    # 2 x 200 ml x 14% x 0.789 g/ml = 44.184 g
    assert summary["alcohol"]["standard_drinks"] == pytest.approx(44.184 / 14, abs=0.01)
    assert summary["alcohol"]["progress"] == "elevated"
    assert summary["alcohol"]["bac_level"] == "very_high"
    assert summary["caffeine"]["level_mg"] == 160.0
    assert summary["caffeine"]["progress"] == "ok"
