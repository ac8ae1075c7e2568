from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

LISTING_COLUMNS = [
    "placeId",
    "name",
    "priceLevel",
    "rating",
    "userRatingsTotal",
    "types",
    "address",
    "lat",
    "lng",
    "isOpenNow",
]


def _split_types(value: Any) -> list[str]:
    if not isinstance(value, str):
        return []
    separator = "|" if "|" in value else ","
    return [t.strip() for t in value.split(separator) if t.strip()]


def _parse_flag(value: Any) -> bool | None:
    if not isinstance(value, str):
        return None
    return {"true": True, "false": False}.get(value.strip().lower())


def _load(path: Path) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str)

    for column in LISTING_COLUMNS:
        if column not in df.columns:
            df[column] = pd.NA

    for column in ("priceLevel", "rating", "userRatingsTotal", "lat", "lng"):
        df[column] = pd.to_numeric(df[column], errors="coerce")

    df["isOpenNow"] = df["isOpenNow"].map(_parse_flag)
    df["types"] = df["types"].apply(_split_types)
    return df[LISTING_COLUMNS]


def load_listings(path: Path) -> list[dict[str, Any]]:
    """
    Read raw listings from a CSV file, one row per listing.

    ``types`` is a ``|`` or ``,`` separated list. Empty cells become ``None``
    so the normalizer treats them as absent. The file is read on every call.
    """
    df = _load(path)
    records: list[dict[str, Any]] = []
    for row in df.to_dict(orient="records"):
        records.append({
            key: (None if not isinstance(value, list) and pd.isna(value) else value)
            for key, value in row.items()
        })
    return records
