from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

_BUNDLED_DATA = Path(__file__).resolve().parent.parent / "data" / "coffee_shops.json"


def _default_data_path() -> Path:
    override = os.getenv("COFFEESHOPS_DATA_PATH")
    return Path(override) if override else _BUNDLED_DATA


@dataclass(frozen=True)
class CatalogConfig:
    """
    Where the seed catalog is read from.
    """

    data_path: Path = field(default_factory=_default_data_path)


DEFAULT_CATALOG_CONFIG = CatalogConfig()
