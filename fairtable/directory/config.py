from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


def _listings_csv_from_env() -> Path | None:
    value = os.getenv("FAIRTABLE_LISTINGS_CSV", "").strip()
    return Path(value) if value else None


@dataclass(frozen=True)
class DirectoryConfig:
    api_key: str = os.getenv("GOOGLE_PLACES_API_KEY", "")
    base_url: str = "https://places.googleapis.com/v1/places"
    page_size: int = 24
    search_radius_meters: float = 5000.0
    max_cuisine_queries: int = 4
    timeout: float = 10.0
    listings_csv: Path | None = _listings_csv_from_env()


DEFAULT_DIRECTORY_CONFIG = DirectoryConfig()
