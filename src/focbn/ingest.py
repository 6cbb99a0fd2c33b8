from __future__ import annotations
import logging
from pathlib import Path

import pandas as pd

from .config import (
    RAW_SPECIES_XLSX, RAW_TN_XLSX, RAW_STATION_NAMES_XLSX,
    SPECIES_COLUMNS, TN_COLUMNS, STATION_NAME_COLUMNS,
)
from .cleaning import rename_columns, harmonize_ids, coerce_numeric, parse_dates

logger = logging.getLogger(__name__)


def _read_table(path) -> pd.DataFrame:
    path = Path(path)
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path)
    return pd.read_excel(path, engine="openpyxl")

def read_species_raw(path: str | Path | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_SPECIES_XLSX)

def read_tn_raw(path: str | Path | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_TN_XLSX)

def read_station_names_raw(path: str | Path | None = None) -> pd.DataFrame:
    return _read_table(path or RAW_STATION_NAMES_XLSX)


def load_species(path: str | Path | None = None) -> pd.DataFrame:
    """
    Load the nitrogen-species workbook with canonical column names.

    Concentrations stay in micromolar; the source Month/Year columns are
    dropped because calendar fields are re-derived from ``date`` after the merge.
    """
    df = rename_columns(read_species_raw(path), SPECIES_COLUMNS)
    df = harmonize_ids(df, id_col="station")
    df = parse_dates(df, "date")
    df = coerce_numeric(df, ["din_depth", "nox", "si", "nh4", "po4", "din"])
    logger.info("Loaded %d nitrogen species rows", len(df))
    return df.drop(columns=["src_month", "src_year"], errors="ignore")

def load_tn(path: str | Path | None = None) -> pd.DataFrame:
    """Load the total nitrogen workbook (TN in mg/L) with canonical column names."""
    df = rename_columns(read_tn_raw(path), TN_COLUMNS)
    df = harmonize_ids(df, id_col="station")
    df = parse_dates(df, "date")
    df = coerce_numeric(df, ["tn_depth", "tn"])
    logger.info("Loaded %d total nitrogen rows", len(df))
    return df.drop(columns=["src_month", "src_year"], errors="ignore")

def load_station_names(path: str | Path | None = None) -> dict[str, str]:
    df = rename_columns(read_station_names_raw(path), STATION_NAME_COLUMNS)
    df = harmonize_ids(df, id_col="station")
    df = df.dropna(subset=["station_name"]).drop_duplicates(subset="station")
    return dict(zip(df["station"], df["station_name"]))
