from __future__ import annotations
import logging

import numpy as np
import pandas as pd

from .config import N_ATOMIC_MASS

logger = logging.getLogger(__name__)


def molar_to_mass(values: pd.Series) -> pd.Series:
    """
    Micromolar concentration -> mg/L as elemental nitrogen.
    Nulls stay null.
    """
    return values.astype(float) * N_ATOMIC_MASS / 1000

def add_derived_fields(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add mass-unit nitrogen fields, organic N by difference and the lab error flag.

    ``organic_n`` is ``tn - din_n`` and is not clamped at zero; small negative
    values are expected from independent lab measurements. ``error_flag`` is
    True only when both ``din_n`` and ``tn`` are present and ``din_n > tn``.
    Rows with no ``tn``, ``nox_n`` or ``nh4_n`` are dropped.
    """
    df = df.copy()
    df["din_n"] = molar_to_mass(df["din"])
    df["nox_n"] = molar_to_mass(df["nox"])
    df["nh4_n"] = molar_to_mass(df["nh4"])
    df["organic_n"] = df["tn"].astype(float) - df["din_n"]

    both = df["din_n"].notna() & df["tn"].notna()
    df["error_flag"] = np.where(both, df["din_n"] > df["tn"], False).astype(bool)
    if df["error_flag"].any():
        logger.info("%d records have DIN greater than TN", int(df["error_flag"].sum()))
    return drop_empty_records(df)

def drop_empty_records(df: pd.DataFrame) -> pd.DataFrame:
    """Drop records carrying none of tn, nox_n, nh4_n."""
    empty = df[["tn", "nox_n", "nh4_n"]].isna().all(axis=1)
    if empty.any():
        logger.info("Dropped %d records with no TN, NOx or NH4 value", int(empty.sum()))
    return df.loc[~empty].reset_index(drop=True)
