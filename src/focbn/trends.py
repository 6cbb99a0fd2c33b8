from __future__ import annotations
import logging

import pandas as pd

from .config import TREND_MIN_YEARS, TREND_RECENT_WINDOW, TREND_MIN_RECENT_YEARS

logger = logging.getLogger(__name__)


def years_sampled(df: pd.DataFrame, field: str) -> pd.DataFrame:
    """Distinct (station, year) pairs with at least one non-null ``field`` value."""
    if field not in df.columns:
        raise KeyError(f"Field {field!r} not found. Available: {list(df.columns)}")
    return df.loc[df[field].notna(), ["station", "year"]].drop_duplicates()

def trend_stations(
    df: pd.DataFrame,
    field: str,
    current_year: int | None = None,
    min_years: int = TREND_MIN_YEARS,
    recent_window: int = TREND_RECENT_WINDOW,
    min_recent_years: int = TREND_MIN_RECENT_YEARS,
) -> set[str]:
    """
    Stations with enough history in ``field`` to estimate a trend.

    A station qualifies when it has data in at least ``min_years`` distinct
    years and in at least ``min_recent_years`` of the ``recent_window`` years
    ending at ``current_year`` (default: last year in ``df``).
    """
    sampled = years_sampled(df, field)
    if sampled.empty:
        return set()
    if current_year is None:
        current_year = int(df["year"].max())

    recent = (sampled["year"] > current_year - recent_window) & (sampled["year"] <= current_year)
    counts = pd.DataFrame({
        "n_years": sampled.groupby("station")["year"].nunique(),
        "n_recent": recent.groupby(sampled["station"]).sum(),
    })
    ok = (counts["n_years"] >= min_years) & (counts["n_recent"] >= min_recent_years)
    stations = set(counts.index[ok])
    logger.info("%d of %d stations qualify for %s trends", len(stations), len(counts), field)
    return stations
