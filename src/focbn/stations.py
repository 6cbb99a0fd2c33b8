"""
Station code -> display name lookup.

Codes map many-to-one onto short names from the monitoring sites workbook.
A code missing from the lookup gets a null name rather than an error.
"""
from __future__ import annotations
import logging
from typing import Mapping, Optional

import pandas as pd

logger = logging.getLogger(__name__)


def attach_station_names(df: pd.DataFrame, lookup: Optional[Mapping[str, str]],
                         col: str = "station_name") -> pd.DataFrame:
    df = df.copy()
    lookup = dict(lookup or {})
    df[col] = df["station"].map(lookup)
    unmapped = sorted(df.loc[df[col].isna(), "station"].dropna().unique())
    if unmapped:
        logger.warning("No display name for stations: %s", unmapped)
    return df

def ordered_by_median(df: pd.DataFrame, field: str) -> list[str]:
    """Station codes ordered by ascending median of ``field`` (stations without data last)."""
    med = df.groupby("station")[field].median()
    return list(med.sort_values(na_position="last", kind="mergesort").index)
