"""Drink tracker Flask app.

Run from project root:
    python app.py
"""

import os
from datetime import datetime, timedelta
from typing import Any

from flask import Flask, current_app, jsonify, request

from drink_app import config
from drink_app.app_logging import configure_logging
from drink_app.catalog import CatalogService, build_catalog_service
from drink_app.drinks import UNITS, Category, Entry
from drink_app.graph import bac_curve_data, caffeine_curve_data
from drink_app.ledger import Ledger
from drink_app.limits import get_intake_summary
from drink_app.profile import UserProfile, bmi_category
from drink_app.storage import SqliteKeyValueStore, StorageError

MAX_HOURS_AGO = 24.0
MAX_NAME_LENGTH = 80
LEDGER_KEY = "drink_ledger"
CATALOG_KEY = "drink_catalog"


def _parse_category(value: Any) -> Category | None:
    try:
        return Category(str(value).strip().lower())
    except ValueError:
        return None


def _parse_optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _clamp_float(value: Any, default: float, min_value: float, max_value: float) -> float:
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        parsed = default
    return max(min_value, min(max_value, parsed))


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    # Entries are stored in naive local time.
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _ledger() -> Ledger:
    return current_app.extensions[LEDGER_KEY]


def _catalog() -> CatalogService:
    return current_app.extensions[CATALOG_KEY]


def _profile_payload(profile: UserProfile) -> dict[str, Any]:
    return {
        **profile.to_dict(),
        "bmi": round(profile.bmi, 1),
        "bmi_category": bmi_category(profile.bmi),
        "distribution_factor": round(profile.distribution_factor, 4),
    }


def _entry_payload(entry: Entry) -> dict[str, Any]:
    return {**entry.to_dict(), "volume_ml": round(entry.volume_ml, 1), "standard_drinks": round(entry.standard_drinks, 2)}


def _entry_from_request(data: dict[str, Any]) -> tuple[Entry | None, str | None]:
    hours_ago = _clamp_float(data.get("hours_ago"), 0.0, 0.0, MAX_HOURS_AGO)
    timestamp = _parse_datetime(data.get("timestamp")) or (_ledger().clock() - timedelta(hours=hours_ago))

    if data.get("catalog_id"):
        drink = next((d for d in _catalog().drinks if d.id == data["catalog_id"]), None)
        if drink is None:
            return None, "Unknown catalog drink"
        return drink.to_entry(timestamp), None

    category = _parse_category(data.get("category"))
    if category is None:
        return None, "Category must be alcohol or caffeine"
    name = str(data.get("name", "")).strip() or category.value.title()
    if len(name) > MAX_NAME_LENGTH:
        return None, f"Name must be {MAX_NAME_LENGTH} characters or fewer"
    unit = str(data.get("unit", "ml")).strip().lower() or "ml"
    if unit not in UNITS:
        return None, f"Unit must be one of: {', '.join(UNITS)}"
    try:
        amount = float(data.get("amount"))
        alcohol_percentage = _parse_optional_float(data.get("alcohol_percentage"))
        caffeine_mg = _parse_optional_float(data.get("caffeine_mg"))
    except (TypeError, ValueError):
        return None, "Amount, alcohol_percentage and caffeine_mg must be numbers"

    entry = Entry(
        category=category,
        name=name,
        amount=amount,
        unit=unit,
        timestamp=timestamp,
        alcohol_percentage=alcohol_percentage,
        caffeine_mg=caffeine_mg,
    )
    return entry, None


def create_app(ledger: Ledger | None = None, catalog: CatalogService | None = None) -> Flask:
    configure_logging(config.log_level())
    app = Flask(__name__)

    if ledger is None or catalog is None:
        store = SqliteKeyValueStore(config.db_path())
        ledger = ledger or Ledger(store)
        catalog = catalog or build_catalog_service(
            store,
            remote_url=config.catalog_url(),
            cache_ttl=config.catalog_cache_ttl(),
            timeout_seconds=config.catalog_timeout_seconds(),
        )
    app.extensions[LEDGER_KEY] = ledger
    app.extensions[CATALOG_KEY] = catalog

    @app.errorhandler(StorageError)
    def storage_error(exc: StorageError):
        app.logger.error("Storage failure: %s", exc)
        return jsonify({"error": "Could not save data. Changes were not applied."}), 500

    @app.route("/healthz")
    def healthz():
        return jsonify({"ok": True})

    @app.route("/api/profile")
    def api_profile():
        return jsonify(_profile_payload(_ledger().profile))

    @app.route("/api/profile", methods=["POST"])
    def api_profile_save():
        data = request.get_json() or {}
        try:
            profile = UserProfile.from_dict(data)
        except (TypeError, ValueError):
            return jsonify({"error": "Age, weight_kg, height_cm must be numbers and sex male or female"}), 400
        error = _ledger().update_profile(profile)
        if error:
            return jsonify({"error": error}), 400
        return jsonify({"ok": True, "profile": _profile_payload(profile)})

    @app.route("/api/entries")
    def api_entries():
        category = _parse_category(request.args.get("category", ""))
        if category is None:
            return jsonify({"error": "category must be alcohol or caffeine"}), 400
        start = _parse_datetime(request.args.get("start"))
        end = _parse_datetime(request.args.get("end"))
        if request.args.get("today") == "1":
            items = _ledger().today(category)
        else:
            items = _ledger().query(category, start, end)
        return jsonify({"items": [_entry_payload(e) for e in items]})

    @app.route("/api/entries", methods=["POST"])
    def api_entry_add():
        entry, error = _entry_from_request(request.get_json() or {})
        if error is None:
            error = _ledger().add(entry)
        if error:
            return jsonify({"error": error}), 400
        return jsonify({"ok": True, "entry": _entry_payload(entry)})

    @app.route("/api/entries/<entry_id>", methods=["DELETE"])
    def api_entry_remove(entry_id: str):
        if not _ledger().remove(entry_id):
            return jsonify({"error": "Entry not found"}), 404
        return jsonify({"ok": True})

    @app.route("/api/entries/<entry_id>/timestamp", methods=["POST"])
    def api_entry_timestamp(entry_id: str):
        data = request.get_json() or {}
        timestamp = _parse_datetime(data.get("timestamp"))
        if timestamp is None:
            return jsonify({"error": "timestamp must be an ISO-8601 date-time"}), 400
        if not _ledger().update_timestamp(entry_id, timestamp):
            return jsonify({"error": "Entry not found"}), 404
        return jsonify({"ok": True, "entry": _entry_payload(_ledger().get(entry_id))})

    @app.route("/api/entries/clear", methods=["POST"])
    def api_entries_clear():
        data = request.get_json() or {}
        category = _parse_category(data.get("category", ""))
        if category is None:
            return jsonify({"error": "category must be alcohol or caffeine"}), 400
        removed = _ledger().remove_all(category)
        return jsonify({"ok": True, "removed": removed})

    @app.route("/api/state")
    def api_state():
        ledger = _ledger()
        hours_ahead = _clamp_float(request.args.get("hours_ahead"), 12.0, 1.0, 48.0)
        return jsonify({
            "profile": _profile_payload(ledger.profile),
            **get_intake_summary(ledger),
            "alcohol_count": len(ledger.recent(Category.ALCOHOL)),
            "caffeine_count": len(ledger.today(Category.CAFFEINE)),
            "bac_curve": [{"t": t, "bac": v} for t, v in bac_curve_data(ledger, hours_ahead=hours_ahead)],
            "caffeine_curve": [{"t": t, "mg": v} for t, v in caffeine_curve_data(ledger, hours_ahead=hours_ahead)],
        })

    @app.route("/api/catalog")
    def api_catalog():
        category = request.args.get("category")
        catalog = _catalog()
        if category:
            parsed = _parse_category(category)
            if parsed is None:
                return jsonify({"error": "category must be alcohol or caffeine"}), 400
            drinks = catalog.for_category(parsed)
        else:
            drinks = catalog.drinks
        updated = catalog.last_updated
        return jsonify({
            "items": [d.to_dict() for d in drinks],
            "last_updated": updated.isoformat() if updated else None,
        })

    @app.route("/api/catalog/refresh", methods=["POST"])
    def api_catalog_refresh():
        data = request.get_json(silent=True) or {}
        source = _catalog().refresh(force=bool(data.get("force", False)))
        return jsonify({"ok": True, "source": source, "count": len(_catalog().drinks)})

    return app


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    create_app().run(host="0.0.0.0", port=port, debug=os.environ.get("FLASK_DEBUG", "0") == "1")
