from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional

import numpy as np
import pandas as pd

from .config import PROC, SUMMARY_CSV
from .stations import attach_station_names

logger = logging.getLogger(__name__)


def geometric_mean(values) -> float:
    """
    Geometric mean of the non-null values.

    Undefined (NaN) when there are no values or any value is <= 0; zeros and
    negatives are never dropped or shifted to make the log defined.
    """
    x = np.asarray(values, dtype=float)
    x = x[~np.isnan(x)]
    if x.size == 0 or np.any(x <= 0):
        return np.nan
    return float(10 ** np.mean(np.log10(x)))

def summarize_by_station(df: pd.DataFrame, field: str,
                         lookup: Optional[Mapping[str, str]] = None) -> pd.DataFrame:
    """
    Per-station descriptive statistics of ``field`` for mapping.

    Args:
        df: Strict dataset or a subset of it
        field: Numeric column to summarize
        lookup: Station code -> display name

    Returns:
        One row per station with non-null data, columns
        ``station, <field>_mn, _sd, _n, _md, _iqr, _p90, _gm, station_name``,
        sorted by ascending median.
    """
    if field not in df.columns:
        raise KeyError(f"Field {field!r} not found. Available: {list(df.columns)}")
    data = df.loc[df[field].notna(), ["station", field]]
    g = data.groupby("station")[field]
    out = pd.DataFrame({
        f"{field}_mn": g.mean(),
        f"{field}_sd": g.std(ddof=1),
        f"{field}_n": g.count(),
        f"{field}_md": g.median(),
        f"{field}_iqr": g.quantile(0.75) - g.quantile(0.25),
        f"{field}_p90": g.quantile(0.90),
        f"{field}_gm": g.agg(geometric_mean),
    }).reset_index()
    out = attach_station_names(out, lookup)
    return out.sort_values(f"{field}_md", kind="mergesort").reset_index(drop=True)

def write_summaries(df: pd.DataFrame, fields: Iterable[str],
                    lookup: Optional[Mapping[str, str]] = None,
                    out_dir: Path = PROC) -> list[Path]:
    """Write one summary CSV per field; returns the written paths."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for field in fields:
        path = out_dir / SUMMARY_CSV.format(field=field)
        summarize_by_station(df, field, lookup).to_csv(path, index=False)
        logger.info("Wrote %s", path)
        paths.append(path)
    return paths
