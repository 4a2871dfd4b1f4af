"""
Reference drink catalog: popular drinks with volume, ABV or caffeine content.

Sources are tried in order (remote deployment, local cache, built-in list);
the first non-empty result wins.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Protocol

import httpx

from drink_app.drinks import Category, Entry
from drink_app.storage import CATALOG_CACHE_KEY, CATALOG_UPDATED_KEY, KeyValueStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL = timedelta(hours=24)

# snake_case field -> remote field name
_REMOTE_FIELDS = {
    "image_name": "imageName",
    "volume_ml": "volume",
    "category": "drinkType",
    "alcohol_percentage": "alcoholPercentage",
    "caffeine_mg": "caffeineContent",
}


class CatalogError(Exception):
    """The remote catalog could not be queried or returned an error."""


@dataclass
class ReferenceDrink:
    name: str
    image_name: str
    volume_ml: float
    category: Category
    alcohol_percentage: Optional[float] = None
    caffeine_mg: Optional[float] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        self.category = Category(self.category)

    def to_entry(self, timestamp: Optional[datetime] = None) -> Entry:
        return Entry(
            category=self.category,
            name=self.name,
            amount=self.volume_ml,
            unit="ml",
            timestamp=timestamp or datetime.now(),
            alcohol_percentage=self.alcohol_percentage if self.category is Category.ALCOHOL else None,
            caffeine_mg=self.caffeine_mg if self.category is Category.CAFFEINE else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "image_name": self.image_name,
            "volume_ml": self.volume_ml,
            "category": self.category.value,
            "alcohol_percentage": self.alcohol_percentage,
            "caffeine_mg": self.caffeine_mg,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ReferenceDrink":
        return cls(
            id=str(raw.get("id") or uuid.uuid4()),
            name=str(raw["name"]),
            image_name=str(raw.get("image_name", "")),
            volume_ml=float(raw["volume_ml"]),
            category=Category(raw["category"]),
            alcohol_percentage=raw.get("alcohol_percentage"),
            caffeine_mg=raw.get("caffeine_mg"),
        )

    @classmethod
    def from_remote(cls, raw: Dict[str, Any]) -> "ReferenceDrink":
        kind = Category.ALCOHOL if raw.get("drinkType") == "alcohol" else Category.CAFFEINE
        return cls(
            id=str(raw.get("_id") or uuid.uuid4()),
            name=str(raw["name"]),
            image_name=str(raw.get("imageName", "")),
            volume_ml=float(raw["volume"]),
            category=kind,
            alcohol_percentage=raw.get("alcoholPercentage"),
            caffeine_mg=raw.get("caffeineContent"),
        )

    def to_remote_args(self) -> Dict[str, Any]:
        args: Dict[str, Any] = {
            "name": self.name,
            "imageName": self.image_name,
            "volume": self.volume_ml,
            "drinkType": self.category.value,
        }
        if self.alcohol_percentage is not None:
            args["alcoholPercentage"] = self.alcohol_percentage
        if self.caffeine_mg is not None:
            args["caffeineContent"] = self.caffeine_mg
        return args


def _a(name: str, image: str, ml: float, abv: float) -> ReferenceDrink:
    return ReferenceDrink(name=name, image_name=image, volume_ml=ml, category=Category.ALCOHOL, alcohol_percentage=abv)


def _c(name: str, image: str, ml: float, mg: float) -> ReferenceDrink:
    return ReferenceDrink(name=name, image_name=image, volume_ml=ml, category=Category.CAFFEINE, caffeine_mg=mg)


# Shipped with the app; used when offline with no cache.
BUILT_IN_DRINKS: List[ReferenceDrink] = [
    # Beer / wine
    _a("Beer 10º", "gambrinus", 500, 4.1),
    _a("Beer 11º", "kozel", 500, 4.6),
    _a("Beer 12º", "radegast", 500, 5.1),
    _a("Wine Glass", "wine_glass", 200, 14.0),
    _a("Wine Bottle", "wine_bottle", 750, 14.0),
    _a("Champagne", "champagne", 150, 11.0),
    _a("Cider", "cider", 400, 4.5),
    # Spirits (40 ml shot)
    _a("Vodka", "vodka", 40, 40.0),
    _a("Absinth", "absinth", 40, 70.0),
    _a("Whiskey", "whiskey", 40, 45.0),
    _a("Rum", "rum", 40, 40.0),
    _a("Green", "green", 40, 20.0),
    _a("Jägermeister", "jager", 40, 35.0),
    _a("B Lemond", "lemond", 40, 20.0),
    # Mixed
    _a("Gin Tonic", "gin_tonic", 250, 11.0),
    _a("Moscow Mule", "moscow_mule", 200, 10.0),
    _a("Cuba Libre", "cuba_libre", 200, 11.0),
    _a("Mojito", "mojito", 250, 9.0),
    # Energy drinks
    _c("Red Bull", "red_bull", 250, 80),
    _c("Monster", "monster", 500, 160),
    _c("Monster Ultra", "monster_ultra", 500, 150),
    _c("Crazy Wolf", "crazy_wolf", 500, 150),
    _c("Tiger", "tiger", 250, 80),
    _c("Rockstar", "rockstar", 500, 160),
    _c("Big Shock", "big_shock", 500, 160),
    # Coffee / tea
    _c("Espresso", "espresso", 30, 70),
    _c("Double Espresso", "double_espresso", 60, 140),
    _c("Cappuccino", "cappuccino", 170, 70),
    _c("Caffe Latte", "latte", 220, 70),
    _c("Flat White", "flat_white", 170, 100),
    _c("Green Tea", "greeen", 300, 40),
    _c("Black Tea", "black", 300, 70),
    _c("Americano", "kafe", 200, 71),
    # Soft drinks
    _c("Coca-Cola", "coca_cola", 500, 48),
    _c("Pepsi", "pepsi", 500, 54),
    _c("Kofola", "kofola", 500, 75),
]


@dataclass
class ConvexCatalogClient:
    """HTTP client for the catalog deployment's query/mutation endpoints."""

    base_url: str
    http_client: httpx.Client

    @classmethod
    def create(cls, base_url: str, timeout_seconds: float = 10.0) -> "ConvexCatalogClient":
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.Client(timeout=timeout_seconds))

    def _call(self, kind: str, path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/api/{kind}"
        try:
            response = self.http_client.post(url, json={"path": path, "args": args or {}, "format": "json"})
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise CatalogError(f"{path} failed: {exc}") from exc
        if not isinstance(body, dict) or body.get("status") != "success":
            message = body.get("errorMessage") if isinstance(body, dict) else None
            raise CatalogError(message or f"{path} returned an error")
        return body.get("value")

    def query(self, path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        return self._call("query", path, args)

    def mutation(self, path: str, args: Optional[Dict[str, Any]] = None) -> Any:
        return self._call("mutation", path, args)

    def _drinks(self, value: Any) -> List[ReferenceDrink]:
        if not isinstance(value, list):
            raise CatalogError("Expected a list of drinks")
        try:
            return [ReferenceDrink.from_remote(item) for item in value]
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Malformed drink in catalog: {exc}") from exc

    def get_all_drinks(self) -> List[ReferenceDrink]:
        return self._drinks(self.query("popularDrinks:getAllDrinks"))

    def get_drinks_by_type(self, category: Category) -> List[ReferenceDrink]:
        return self._drinks(self.query("popularDrinks:getDrinksByType", {"drinkType": Category(category).value}))

    def get_drink_by_name(self, name: str) -> Optional[ReferenceDrink]:
        value = self.query("popularDrinks:getDrinkByName", {"name": name})
        if value is None:
            return None
        return self._drinks([value])[0]

    def add_drink(self, drink: ReferenceDrink) -> str:
        return str(self.mutation("popularDrinks:addDrink", drink.to_remote_args()))

    def update_drink_by_name(self, name: str, **fields: Any) -> Any:
        args = _remote_updates(fields)
        args["name"] = name
        return self.mutation("popularDrinks:updateDrinkByName", args)

    def update_drink_by_id(self, drink_id: str, **fields: Any) -> Any:
        args = _remote_updates(fields)
        args["id"] = drink_id
        return self.mutation("popularDrinks:updateDrinkById", args)

    def seed_drinks(self, drinks: Optional[List[ReferenceDrink]] = None) -> List[str]:
        """Insert each drink (the built-in list by default). Returns the new remote ids."""
        return [self.add_drink(d) for d in (BUILT_IN_DRINKS if drinks is None else drinks)]

    def close(self) -> None:
        self.http_client.close()


def _remote_updates(fields: Dict[str, Any]) -> Dict[str, Any]:
    unknown = set(fields) - set(_REMOTE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown drink fields: {', '.join(sorted(unknown))}")
    out: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if key == "category":
            value = Category(value).value
        out[_REMOTE_FIELDS[key]] = value
    return out


# Providers


class CatalogProvider(Protocol):
    name: str
    remote: bool
    cache_result: bool

    def fetch(self) -> List[ReferenceDrink]:
        """Return drinks, or raise CatalogError."""


class RemoteCatalogProvider:
    name = "remote"
    remote = True
    cache_result = True

    def __init__(self, client: ConvexCatalogClient) -> None:
        self.client = client

    def fetch(self) -> List[ReferenceDrink]:
        return self.client.get_all_drinks()


class CachedCatalogProvider:
    name = "cache"
    remote = False
    cache_result = False

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def fetch(self) -> List[ReferenceDrink]:
        try:
            raw = self.store.get(CATALOG_CACHE_KEY)
        except StorageError as exc:
            raise CatalogError(f"Cached catalog could not be read: {exc}") from exc
        if not isinstance(raw, list):
            return []
        try:
            return [ReferenceDrink.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as exc:
            raise CatalogError(f"Cached catalog is unreadable: {exc}") from exc


class BuiltInCatalogProvider:
    name = "built-in"
    remote = False
    cache_result = True

    def fetch(self) -> List[ReferenceDrink]:
        return list(BUILT_IN_DRINKS)


# Service


class CatalogService:
    """Holds the current catalog and refreshes it through the provider chain."""

    def __init__(
        self,
        store: KeyValueStore,
        providers: Optional[List[CatalogProvider]] = None,
        cache_ttl: timedelta = DEFAULT_CACHE_TTL,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.providers: List[CatalogProvider] = providers or [CachedCatalogProvider(store), BuiltInCatalogProvider()]
        self.cache_ttl = cache_ttl
        self.clock = clock
        self._drinks: List[ReferenceDrink] = []
        self._load_local()

    @property
    def drinks(self) -> List[ReferenceDrink]:
        return list(self._drinks)

    @property
    def remote_enabled(self) -> bool:
        return any(p.remote for p in self.providers)

    def for_category(self, category: Category) -> List[ReferenceDrink]:
        category = Category(category)
        return [d for d in self._drinks if d.category is category]

    def _load_local(self) -> None:
        try:
            cached = CachedCatalogProvider(self.store).fetch()
        except CatalogError:
            logger.warning("Discarding unreadable catalog cache")
            cached = []
        if cached:
            self._drinks = cached
            logger.info("Loaded %d drinks from cache", len(cached))
            return
        self._drinks = BuiltInCatalogProvider().fetch()
        self._save_cache()
        logger.info("Loaded %d built-in drinks (no cache available)", len(self._drinks))

    def _save_cache(self) -> None:
        try:
            self.store.set(CATALOG_CACHE_KEY, [d.to_dict() for d in self._drinks])
            self.store.set(CATALOG_UPDATED_KEY, self.clock().isoformat())
        except StorageError:
            logger.warning("Could not cache catalog; keeping it in memory only", exc_info=True)

    @property
    def last_updated(self) -> Optional[datetime]:
        raw = self.store.get(CATALOG_UPDATED_KEY)
        if not isinstance(raw, str):
            return None
        try:
            return datetime.fromisoformat(raw)
        except ValueError:
            return None

    @property
    def is_cache_expired(self) -> bool:
        updated = self.last_updated
        if updated is None:
            return True
        return self.clock() - updated > self.cache_ttl

    def update_drinks(self, drinks: List[ReferenceDrink]) -> None:
        self._drinks = list(drinks)
        self._save_cache()
        logger.info("Catalog updated and cached: %d drinks", len(self._drinks))

    def clear_cache_and_reload(self) -> None:
        self.store.delete(CATALOG_CACHE_KEY)
        self.store.delete(CATALOG_UPDATED_KEY)
        self.update_drinks(BuiltInCatalogProvider().fetch())

    def refresh(self, force: bool = False) -> Optional[str]:
        """Try the providers in order. Returns the name of the one used, or None if skipped."""
        if not self.remote_enabled:
            logger.info("Remote catalog disabled; using cached/built-in drinks")
            return None
        if not force and not self.is_cache_expired:
            logger.info("Catalog cache is fresh; skipping refresh")
            return None

        for provider in self.providers:
            try:
                drinks = provider.fetch()
            except CatalogError as exc:
                logger.warning("Catalog source %s failed: %s", provider.name, exc)
                continue
            if not drinks:
                logger.warning("Catalog source %s returned no drinks", provider.name)
                continue
            if provider.cache_result:
                self.update_drinks(drinks)
            else:
                self._drinks = list(drinks)
            logger.info("Using %d drinks from %s", len(drinks), provider.name)
            return provider.name

        # Only reached when the chain has no built-in provider.
        logger.error("No catalog source returned drinks; keeping current list")
        return None


def build_catalog_service(
    store: KeyValueStore,
    remote_url: str = "",
    cache_ttl: timedelta = DEFAULT_CACHE_TTL,
    timeout_seconds: float = 10.0,
) -> CatalogService:
    providers: List[CatalogProvider] = []
    if remote_url:
        providers.append(RemoteCatalogProvider(ConvexCatalogClient.create(remote_url, timeout_seconds)))
    providers += [CachedCatalogProvider(store), BuiltInCatalogProvider()]
    return CatalogService(store, providers, cache_ttl=cache_ttl)
