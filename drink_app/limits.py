"""Daily intake limits and BAC level bands.

Bands are coarse guidance for display only; they are not medical or legal advice.
"""

# Recommended daily maximums.
MAX_STANDARD_DRINKS_PER_DAY = 4.0
MAX_CAFFEINE_MG_PER_DAY = 400.0


def progress_level(value: float, max_value: float) -> str:
    """Return 'ok', 'elevated', or 'over' for value as a share of max_value."""
    share = value / max_value if max_value > 0 else 0.0
    if share < 0.5:
        return "ok"
    if share < 0.8:
        return "elevated"
    return "over"


def bac_level(bac_permille: float) -> str:
    """Return 'low', 'moderate', 'high', or 'very_high'."""
    if bac_permille < 0.2:
        return "low"
    if bac_permille < 0.5:
        return "moderate"
    if bac_permille < 0.8:
        return "high"
    return "very_high"


def get_intake_summary(ledger) -> dict:
    """Current estimates for a ledger plus the bands they fall into."""
    bac = ledger.current_bac()
    sober_at = ledger.sober_time()
    caffeine = ledger.current_caffeine()
    clean_at = ledger.clean_time()
    standard_drinks = ledger.total_standard_drinks()
    caffeine_today = ledger.total_caffeine_today()

    return {
        "alcohol": {
            "bac_permille": round(bac, 3),
            "bac_level": bac_level(bac),
            "sober_at": sober_at.isoformat() if sober_at else None,
            "standard_drinks": round(standard_drinks, 2),
            "max_standard_drinks": MAX_STANDARD_DRINKS_PER_DAY,
            "progress": progress_level(standard_drinks, MAX_STANDARD_DRINKS_PER_DAY),
        },
        "caffeine": {
            "level_mg": round(caffeine, 1),
            "clean_at": clean_at.isoformat() if clean_at else None,
            "consumed_today_mg": round(caffeine_today, 1),
            "max_mg": MAX_CAFFEINE_MG_PER_DAY,
            "progress": progress_level(caffeine_today, MAX_CAFFEINE_MG_PER_DAY),
        },
    }
