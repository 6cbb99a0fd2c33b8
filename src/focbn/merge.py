from __future__ import annotations
import logging

import pandas as pd

from .config import KEYS, MONTHS
from .cleaning import drop_missing_keys

logger = logging.getLogger(__name__)

# -------------------------------
# Join species + total nitrogen
# -------------------------------

def _report_duplicate_keys(df: pd.DataFrame, name: str, keys: list[str]) -> None:
    dups = df.duplicated(subset=keys, keep=False)
    if dups.any():
        first = df.loc[dups, keys].drop_duplicates().head(10).to_records(index=False).tolist()
        logger.warning("%s has %d rows sharing a %s key (first 10): %s",
                       name, int(dups.sum()), keys, first)

def merge_nitrogen(species: pd.DataFrame, tn: pd.DataFrame,
                   keys: list[str] = KEYS) -> pd.DataFrame:
    """
    Full outer join of the species and total nitrogen tables on station + date.

    A row survives if either source has it; fields from the absent side are
    null. Rows with a null key are dropped from both sides first, since a null
    key would otherwise match every other null key. Joined rows with no nitrate,
    ammonium or total nitrogen value are dropped.
    """
    species = drop_missing_keys(species, keys)
    tn = drop_missing_keys(tn, keys)
    _report_duplicate_keys(species, "species table", keys)
    _report_duplicate_keys(tn, "total nitrogen table", keys)

    merged = pd.merge(species, tn, on=keys, how="outer", sort=True)
    no_signal = merged[["nox", "nh4", "tn"]].isna().all(axis=1)
    logger.info("Merged %d species and %d TN rows into %d; dropped %d with no N data",
                len(species), len(tn), len(merged), int(no_signal.sum()))
    return merged.loc[~no_signal].reset_index(drop=True)

def add_calendar_fields(df: pd.DataFrame, date_col: str = "date") -> pd.DataFrame:
    """
    Add ``year``, ``month`` (ordered Jan..Dec categorical) and 1-based
    ``day_of_year`` derived from the date column.
    """
    df = df.copy()
    dates = pd.to_datetime(df[date_col])
    df["year"] = dates.dt.year.astype(int)
    df["month"] = pd.Categorical(
        [MONTHS[m - 1] for m in dates.dt.month.astype(int)],
        categories=list(MONTHS), ordered=True,
    )
    df["day_of_year"] = dates.dt.dayofyear.astype(int)
    return df

# -------------------------------
# Coverage
# -------------------------------

def coverage_report(species: pd.DataFrame, tn: pd.DataFrame,
                    keys: list[str] = KEYS) -> pd.DataFrame:
    """
    Per-station count of sampling dates contributed by each source and by both.
    """
    sp = species[keys].dropna().drop_duplicates().assign(species=True)
    t = tn[keys].dropna().drop_duplicates().assign(tn=True)
    both = pd.merge(sp, t, on=keys, how="outer")
    both[["species", "tn"]] = both[["species", "tn"]].fillna(False).astype(bool)
    both["both"] = both["species"] & both["tn"]
    out = both.groupby(keys[0])[["species", "tn", "both"]].sum().astype(int)
    return out.sort_index()
