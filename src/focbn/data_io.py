from __future__ import annotations
import logging
from pathlib import Path

import pandas as pd

from .config import INTERIM, PROC, STRICT_CSV, STRICT_COLUMNS, MONTHS

logger = logging.getLogger(__name__)


def save_interim(df: pd.DataFrame, name: str) -> Path:
    """
    Write an intermediate table (e.g. the merged, pre-policy nitrogen records)
    to the interim directory as parquet and return its path.
    """
    INTERIM.mkdir(parents=True, exist_ok=True)
    path = INTERIM / name
    df.to_parquet(path, index=False)
    return path

def load_interim(name: str) -> pd.DataFrame:
    return pd.read_parquet(INTERIM / name)


def write_strict_csv(df: pd.DataFrame, path: str | Path | None = None) -> Path:
    """
    Write the cleaned nitrogen dataset as CSV with ISO dates and full float precision.

    Canonical columns come first in a fixed order; any extra columns
    (e.g. ``station_name``) follow.
    """
    path = Path(path) if path else PROC / STRICT_CSV
    path.parent.mkdir(parents=True, exist_ok=True)
    cols = [c for c in STRICT_COLUMNS if c in df.columns]
    cols += [c for c in df.columns if c not in cols]
    df[cols].to_csv(path, index=False, date_format="%Y-%m-%d")
    logger.info("Wrote %d records to %s", len(df), path)
    return path

def read_strict_csv(path: str | Path | None = None) -> pd.DataFrame:
    """Read the cleaned dataset back with its dtypes restored."""
    path = Path(path) if path else PROC / STRICT_CSV
    df = pd.read_csv(
        path,
        dtype={"station": str, "time": str, "station_name": str},
        parse_dates=["date"],
        float_precision="round_trip",
    )
    df["month"] = pd.Categorical(df["month"], categories=list(MONTHS), ordered=True)
    df["error_flag"] = df["error_flag"].astype(bool)
    for col in ("year", "day_of_year"):
        df[col] = df[col].astype(int)
    return df
