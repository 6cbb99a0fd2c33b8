"""
Ammonium outlier policy used to build the "strict" nitrogen dataset.

One global ammonium cutoff is taken over all post-2000 records. Station-level
sample sizes are too small for stable percentiles, so the threshold is shared.
Records at or above the cutoff, or flagged with DIN > TN, lose every
ammonium-dependent value; TN and NOx are kept.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .config import NH4_QUANTILE, LAST_UNRELIABLE_YEAR, NH4_DEPENDENT
from .transform import drop_empty_records

logger = logging.getLogger(__name__)


@dataclass
class StrictResult:
    data: pd.DataFrame
    threshold: float
    n_flagged: int


def drop_early_years(df: pd.DataFrame, last_year: int = LAST_UNRELIABLE_YEAR) -> pd.DataFrame:
    """Exclude records collected in or before ``last_year``."""
    keep = df["year"] > last_year
    logger.info("Excluded %d records from %d or earlier", int((~keep).sum()), last_year)
    return df.loc[keep].reset_index(drop=True)

def nh4_threshold(df: pd.DataFrame, q: float = NH4_QUANTILE) -> float:
    """Quantile ``q`` of all non-null ``nh4`` values (linear interpolation)."""
    if not 0 <= q <= 1:
        raise ValueError(f"Quantile must be within [0, 1], got {q}")
    values = df["nh4"].dropna()
    if values.empty:
        return np.nan
    return float(values.quantile(q))

def apply_outlier_policy(df: pd.DataFrame, threshold: float) -> pd.DataFrame:
    """
    Null ammonium-dependent fields where ``nh4 >= threshold`` or ``error_flag``.

    Returns a new DataFrame; ``df`` is not modified. Records left with no TN,
    NOx or NH4 value are dropped.
    """
    df = df.copy()
    suspect = (df["nh4"] >= threshold).fillna(False) | df["error_flag"].astype(bool)
    df.loc[suspect, NH4_DEPENDENT] = np.nan
    logger.info("NH4 threshold %.4g uM: nulled ammonium-derived fields on %d records",
                threshold, int(suspect.sum()))
    return drop_empty_records(df)

def make_strict(df: pd.DataFrame, q: float = NH4_QUANTILE,
                last_year: int = LAST_UNRELIABLE_YEAR) -> StrictResult:
    """Early-year exclusion, global threshold, then the outlier policy."""
    recent = drop_early_years(df, last_year=last_year)
    threshold = nh4_threshold(recent, q=q)
    n_flagged = int(((recent["nh4"] >= threshold) | recent["error_flag"]).sum())
    strict = apply_outlier_policy(recent, threshold)
    return StrictResult(data=strict, threshold=threshold, n_flagged=n_flagged)
