"""
BAC and caffeine over time. Produces image files or returns data for any frontend.
"""

from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from drink_app.ledger import Ledger

# Points are (hours relative to now, value).
Points = List[Tuple[float, float]]


def _relative(points: List[Tuple[datetime, float]], now: datetime) -> Points:
    return [(round((t - now).total_seconds() / 3600.0, 2), round(v, 4)) for t, v in points]


def bac_curve_data(ledger: Ledger, hours_back: float = 2.0, hours_ahead: float = 12.0, step_hours: float = 0.25) -> Points:
    """(hours_from_now, bac_permille) pairs."""
    now = ledger.clock()
    return _relative(ledger.bac_curve(hours_back, hours_ahead, step_hours), now)


def caffeine_curve_data(ledger: Ledger, hours_back: float = 2.0, hours_ahead: float = 12.0, step_hours: float = 0.25) -> Points:
    """(hours_from_now, caffeine_mg) pairs."""
    now = ledger.clock()
    return _relative(ledger.caffeine_curve(hours_back, hours_ahead, step_hours), now)


def _save_plot(points: Points, output_path: str, title: str, ylabel: str, color: str, threshold: float, threshold_label: str) -> str:
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except ImportError:
        raise ImportError("matplotlib is required for saving graphs. pip install matplotlib")

    if not points:
        times, values = [0.0], [0.0]
    else:
        times, values = zip(*points)

    fig, ax = plt.subplots(figsize=(10, 5))
    ax.plot(times, values, color=color, linewidth=2, label=ylabel)
    ax.fill_between(times, values, alpha=0.2, color=color)
    ax.axhline(y=threshold, color="#dc2626", linestyle="--", linewidth=1, label=threshold_label)
    ax.axvline(x=0, color="#6b7280", linewidth=1)
    ax.set_xlabel("Hours from now")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend(loc="upper right")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path


def save_bac_graph(ledger: Ledger, output_path: str = "bac_graph.png", hours_ahead: float = 12.0) -> str:
    """Plot the BAC curve and save it. Returns the path written."""
    points = bac_curve_data(ledger, hours_ahead=hours_ahead)
    return _save_plot(points, output_path, "BAC over time", "BAC (‰)", "#2563eb", 0.5, "0.5‰")


def save_caffeine_graph(ledger: Ledger, output_path: str = "caffeine_graph.png", hours_ahead: float = 12.0) -> str:
    """Plot the caffeine curve and save it. Returns the path written."""
    points = caffeine_curve_data(ledger, hours_ahead=hours_ahead)
    return _save_plot(points, output_path, "Caffeine over time", "Caffeine (mg)", "#ea580c", 5.0, "Clean (5 mg)")
