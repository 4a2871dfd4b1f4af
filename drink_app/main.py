"""
Drink tracker CLI demo. Run from project root: python -m drink_app.main
Prints current BAC and caffeine estimates for the stored log, and optionally saves graphs.
"""

import argparse
import sys
from datetime import datetime, timedelta

from drink_app import config
from drink_app.app_logging import configure_logging
from drink_app.drinks import alcohol_entry, caffeine_entry
from drink_app.graph import bac_curve_data, save_bac_graph, save_caffeine_graph
from drink_app.ledger import Ledger
from drink_app.storage import MemoryKeyValueStore, SqliteKeyValueStore


def _fmt(moment, empty: str) -> str:
    return moment.strftime("%Y-%m-%d %H:%M") if moment else empty


def main():
    parser = argparse.ArgumentParser(description="Drink tracker: BAC and caffeine estimates from the drink log")
    parser.add_argument("--db", type=str, default=None, help="SQLite file (default: DRINK_DB_PATH or instance/drinks.db)")
    parser.add_argument("--demo", action="store_true", help="Use an in-memory log with demo drinks (2 beers, 1 espresso)")
    parser.add_argument("--graph", type=str, metavar="PREFIX", help="Save PREFIX_bac.png and PREFIX_caffeine.png")
    args = parser.parse_args()

    configure_logging(config.log_level())

    if args.demo:
        ledger = Ledger(MemoryKeyValueStore())
        now = datetime.now()
        ledger.add(alcohol_entry("Beer 12º", 500, 5.1, timestamp=now - timedelta(hours=1)))
        ledger.add(alcohol_entry("Beer 12º", 500, 5.1, timestamp=now - timedelta(minutes=20)))
        ledger.add(caffeine_entry("Espresso", 30, 70, timestamp=now - timedelta(hours=2)))
        print("Demo log: 2 beers (1h and 20min ago), 1 espresso (2h ago)")
    else:
        ledger = Ledger(SqliteKeyValueStore(args.db or config.db_path()))

    p = ledger.profile
    print(f"Profile: {p.age}y {p.sex.value}, {p.weight_kg} kg, {p.height_cm} cm (BMI {p.bmi:.1f})")
    print(f"BAC now: {ledger.current_bac():.3f}‰  sober at: {_fmt(ledger.sober_time(), 'already sober')}")
    print(f"Caffeine now: {ledger.current_caffeine():.1f} mg  clean at: {_fmt(ledger.clean_time(), 'already clean')}")
    print(f"Standard drinks (24h): {ledger.total_standard_drinks():.2f}")

    curve = bac_curve_data(ledger, hours_ahead=8.0)
    print(f"BAC curve points: {len(curve)} from -2h to +8h")

    if args.graph:
        try:
            print(f"Graph saved: {save_bac_graph(ledger, output_path=f'{args.graph}_bac.png')}")
            print(f"Graph saved: {save_caffeine_graph(ledger, output_path=f'{args.graph}_caffeine.png')}")
        except ImportError:
            print("matplotlib not installed. pip install matplotlib", file=sys.stderr)
            sys.exit(1)

    return 0


if __name__ == "__main__":
    sys.exit(main() or 0)
