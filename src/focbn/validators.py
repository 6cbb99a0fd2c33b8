from __future__ import annotations
from typing import Optional

import pandas as pd
import pandera as pa
from pandera import Column, DataFrameSchema, Check

from .config import MONTHS

_NUMERIC = ["tn_depth", "din_depth", "tn", "nox", "nh4", "din",
            "nox_n", "nh4_n", "din_n", "organic_n"]


def _error_flag_consistent(df: pd.DataFrame) -> pd.Series:
    # flagged rows keep tn; din_n is either nulled by the outlier policy or above tn
    implied = df["tn"].notna() & (df["din_n"].isna() | (df["din_n"] > df["tn"]))
    return ~df["error_flag"] | implied

def _nh4_nulled_above(threshold: float):
    def check(df: pd.DataFrame) -> pd.Series:
        return ~((df["nh4"] >= threshold) & df["nh4_n"].notna())
    return check

def _has_signal(df: pd.DataFrame) -> pd.Series:
    return df[["tn", "nox_n", "nh4_n"]].notna().any(axis=1)


def strict_schema(threshold: Optional[float] = None) -> DataFrameSchema:
    checks = [
        Check(_error_flag_consistent, error="error_flag set without din_n > tn"),
        Check(_has_signal, error="record without tn, nox_n or nh4_n"),
    ]
    if threshold is not None and not pd.isna(threshold):
        checks.append(Check(_nh4_nulled_above(threshold),
                            error=f"nh4_n retained where nh4 >= {threshold}"))
    columns = {
        "station": Column(str, nullable=False),
        "date": Column(pa.DateTime, nullable=False),
        "year": Column(int, Check.gt(1900)),
        "month": Column(pa.Category, Check.isin(list(MONTHS))),
        "day_of_year": Column(int, Check.in_range(1, 366)),
        "error_flag": Column(bool, nullable=False),
    }
    columns.update({c: Column(float, nullable=True) for c in _NUMERIC})
    return DataFrameSchema(columns, checks=checks, strict=False, coerce=False)

def validate_strict(df: pd.DataFrame, threshold: Optional[float] = None) -> pd.DataFrame:
    return strict_schema(threshold).validate(df, lazy=True)
