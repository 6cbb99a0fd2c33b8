"""
Analysis subsets re-derived from the strict dataset.

Each helper returns a new frame; the strict dataset itself is never modified.
"""
from __future__ import annotations
import logging
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .config import RECENT_YEARS, SUMMER_MONTHS

logger = logging.getLogger(__name__)


def recent_years(df: pd.DataFrame, n_years: int = RECENT_YEARS,
                 last_year: Optional[int] = None) -> pd.DataFrame:
    """The ``n_years`` calendar years ending at ``last_year`` (default: latest in data)."""
    if last_year is None:
        if df["year"].dropna().empty:
            return df.iloc[0:0].copy()
        last_year = int(df["year"].max())
    keep = (df["year"] > last_year - n_years) & (df["year"] <= last_year)
    return df.loc[keep].reset_index(drop=True)

def restrict_months(df: pd.DataFrame, months: Iterable[str] = SUMMER_MONTHS) -> pd.DataFrame:
    months = list(months)
    return df.loc[df["month"].isin(months)].reset_index(drop=True)

def for_trend(df: pd.DataFrame, field: str, stations: Iterable[str]) -> pd.DataFrame:
    """Rows at trend stations with a non-null ``field``."""
    keep = df["station"].isin(set(stations)) & df[field].notna()
    return df.loc[keep].reset_index(drop=True)

def positive_log(df: pd.DataFrame, field: str) -> pd.DataFrame:
    """
    Add ``log_<field>`` and keep only rows where ``field`` is positive.

    Zero values (non-detects) have no logarithm and are excluded here.
    """
    values = df[field]
    bad = values.notna() & (values <= 0)
    if bad.any():
        logger.info("Excluded %d non-positive %s values from log-scale analysis",
                    int(bad.sum()), field)
    out = df.loc[values > 0].copy()
    out[f"log_{field}"] = np.log(out[field])
    return out.reset_index(drop=True)
