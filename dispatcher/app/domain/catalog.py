"""Reference tables the order factory draws from. Passed in explicitly, never read from module state."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class City:
    city: str
    state: str
    state_name: str
    zip_code: str
    street: str
    latitude: float
    longitude: float


@dataclass(frozen=True)
class OrderCatalog:
    first_names: tuple[str, ...]
    last_names: tuple[str, ...]
    cities: tuple[City, ...]
    # variants[i] is the size label of print_ready_files[i]
    variants: tuple[str, ...]
    print_ready_files: tuple[str, ...]
    product_id: int = 8779236999337
    product_title: str = "DTF GANG SHEET BUILDER"
    vendor: str = "DTFsheet and custom shirts"
    currency: str = "USD"
    shipping_price: str = "4.90"
    shipping_code: str = "Economy"

    def __post_init__(self) -> None:
        for name in ("first_names", "last_names", "cities", "variants"):
            if not getattr(self, name):
                raise ValueError(f"catalog.{name} must not be empty")
        if len(self.variants) != len(self.print_ready_files):
            raise ValueError("catalog.variants and catalog.print_ready_files must have the same length")


DEFAULT_FIRST_NAMES = ("John", "Jane", "Michael", "Sarah", "David", "Emily", "Robert", "Lisa", "James", "Mary")
DEFAULT_LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
)
DEFAULT_CITIES = (
    City("New York", "NY", "New York", "10003", "20 Cooper Square", 40.7295, -73.9911),
    City("Brooklyn", "NY", "New York", "11201", "6 Metrotech Center", 40.6934, -73.9866),
    City("Houston", "TX", "Texas", "77001", "1234 Main Street", 29.7604, -95.3698),
    City("Glen Allen", "VA", "Virginia", "23060", "10260 W Broad St", 37.6660, -77.5064),
)
DEFAULT_VARIANTS = (
    "22x5", "22x10", "22x20", "22x30", "22x40", "22x50", "22x60", "22x70", "22x80", "22x90",
    "22x100", "22x110", "22x120", "22x130", "22x140", "22x150", "22x160", "22x170", "22x180", "22x190",
    "22x200", "22x250", "22x300", "22x400", "22x500", "22x600", "22x750", "22x1000",
)


def build_default_catalog(asset_base_url: str) -> OrderCatalog:
    """Sample print files are named tmp-img-ABC-<n>-<variant>.png under `asset_base_url`."""
    base = asset_base_url.rstrip("/")
    files = tuple(
        f"{base}/tmp-img-ABC-{n}-{variant}.png" for n, variant in enumerate(DEFAULT_VARIANTS, start=1)
    )
    return OrderCatalog(
        first_names=DEFAULT_FIRST_NAMES,
        last_names=DEFAULT_LAST_NAMES,
        cities=DEFAULT_CITIES,
        variants=DEFAULT_VARIANTS,
        print_ready_files=files,
    )
