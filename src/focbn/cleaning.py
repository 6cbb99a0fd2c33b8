from __future__ import annotations
import logging
import math
from datetime import datetime, time

import pandas as pd

from .config import SURFACE_DEPTH_M

logger = logging.getLogger(__name__)


def rename_columns(df: pd.DataFrame, mapping: dict[str, str]) -> pd.DataFrame:
    """
    Strip whitespace from raw headers and rename them to canonical names.

    Args:
        df: Raw table as read from the workbook
        mapping: Raw header -> canonical name

    Returns:
        DataFrame restricted to the mapped columns. Expected columns that are
        absent are added as all-null, except ``station`` and ``date``.

    Raises:
        KeyError: If the station or date column is missing
    """
    df = df.copy()
    df.columns = df.columns.astype(str).str.strip()
    missing = [raw for raw in mapping if raw not in df.columns]
    required = [raw for raw in missing if mapping[raw] in ("station", "date")]
    if required:
        raise KeyError(f"Key columns not found: {required}. Available: {list(df.columns)[:20]}")
    if missing:
        logger.warning("Columns missing from source, filled with nulls: %s", missing)
    out = df.rename(columns=mapping)
    for raw in missing:
        out[mapping[raw]] = None
    return out[list(mapping.values())]

def harmonize_ids(df: pd.DataFrame, id_col="station") -> pd.DataFrame:
    """
    Standardize ID column values by converting to uppercase strings and stripping whitespace.
    Missing and blank IDs become null.
    """
    df = df.copy()
    if id_col in df.columns:
        ids = df[id_col].astype("string").str.strip().str.upper()
        blank = ids.fillna("").eq("")
        df[id_col] = ids.astype(object).where(~blank, None)
    return df

def coerce_numeric(df: pd.DataFrame, cols: list[str]) -> pd.DataFrame:
    """Cast columns to float; anything unparseable becomes NaN."""
    df = df.copy()
    for col in cols:
        if col not in df.columns:
            continue
        before = df[col].notna().sum()
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
        lost = before - df[col].notna().sum()
        if lost:
            logger.warning("%d non-numeric values in %r set to null", lost, col)
    return df

def parse_dates(df: pd.DataFrame, col: str = "date") -> pd.DataFrame:
    """Parse a column to day-precision timestamps; unparseable dates become NaT."""
    df = df.copy()
    df[col] = pd.to_datetime(df[col], errors="coerce").dt.normalize()
    return df


def normalize_timestamp(value) -> str | None:
    """
    Convert a raw sample time to an "HH:MM" string.

    Spreadsheet exports mix text times ("09:15") with Excel day fractions
    (0.385) and full serial datetimes (43617.385). Text containing a colon is
    returned unchanged, so the function is idempotent on its own output.
    Numeric values above 0.9999 have their whole-day part removed. Numeric
    and datetime times are both rounded half-up to the minute, so 1/3 gives
    "08:00" rather than "07:60" and 09:14:45 gives "09:15". Null or
    unparseable input gives None.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        if ":" in value:
            return value
        if not value:
            return None
    elif isinstance(value, (datetime, time)):
        # pd.NaT is a datetime instance
        if pd.isna(value):
            return None
        return _format_minutes(value.hour * 60 + value.minute
                               + (value.second + value.microsecond / 1e6) / 60)

    try:
        frac = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(frac) or math.isinf(frac) or frac < 0:
        return None
    if frac > 0.9999:
        frac -= math.floor(frac)
    return _format_minutes(frac * 24 * 60)

def _format_minutes(minutes: float) -> str:
    # half-up to the whole minute, 24:00 wraps to 00:00
    minutes = math.floor(minutes + 0.5)
    hour, minute = divmod(minutes, 60)
    return f"{hour % 24:02d}:{minute:02d}"

def normalize_time_column(df: pd.DataFrame, col: str = "time") -> pd.DataFrame:
    df = df.copy()
    if col in df.columns:
        df[col] = df[col].astype(object).map(normalize_timestamp)
    return df


def filter_surface(df: pd.DataFrame, depth_col: str = "din_depth",
                   max_depth: float = SURFACE_DEPTH_M) -> pd.DataFrame:
    """
    Keep samples collected at or above ``max_depth`` meters.

    Rows with unknown depth are dropped. Only the nitrogen species table is
    filtered this way; the total nitrogen table is treated as surface-only
    and is merged without a depth filter.
    """
    keep = df[depth_col] <= max_depth
    logger.info(
        "Depth filter on %r: kept %d of %d rows (%d with unknown depth)",
        depth_col, int(keep.sum()), len(df), int(df[depth_col].isna().sum()),
    )
    return df.loc[keep].copy()

def drop_missing_keys(df: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    """Drop rows where any join key is null."""
    bad = df[keys].isna().any(axis=1)
    if bad.any():
        logger.warning("Dropped %d rows with null %s", int(bad.sum()), keys)
    return df.loc[~bad].copy()
