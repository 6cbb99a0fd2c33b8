from __future__ import annotations
import logging
from pathlib import Path
from typing import Iterable, Mapping, Optional

import matplotlib.pyplot as plt
import pandas as pd

from .config import PROC, FIGURES, RECENT_YEARS, SUMMARY_FIELDS, STRICT_COLUMNS
from .ingest import load_species, load_tn
from .cleaning import normalize_time_column, filter_surface
from .merge import merge_nitrogen, add_calendar_fields
from .transform import add_derived_fields
from .outliers import make_strict, StrictResult
from .validators import validate_strict
from .data_io import save_interim, write_strict_csv
from .subsets import recent_years, restrict_months, for_trend
from .summary import write_summaries
from .trends import trend_stations
from .models import fit_linear, fit_robust, fit_gam, marginal_means, station_trends, TREND_TERMS
from .plotting import (
    plot_tn_vs_din, plot_station_boxplots, plot_marginal_means,
    plot_station_series, save_figure,
)

logger = logging.getLogger(__name__)


def make_strict_dataset(species_path=None, tn_path=None, out_path=None) -> StrictResult:
    # ---- Nitrogen species ----
    species = load_species(species_path)
    species = normalize_time_column(species, "time")
    species = filter_surface(species, "din_depth")

    # ---- Total nitrogen (surface samples only, not depth filtered) ----
    tn = load_tn(tn_path)

    # ---- Merge + derived fields ----
    merged = merge_nitrogen(species, tn)
    merged = add_calendar_fields(merged)
    merged = add_derived_fields(merged)
    save_interim(merged, "focb_n_data_merged.parquet")

    # ---- Strict dataset ----
    result = make_strict(merged)
    result.data = result.data[STRICT_COLUMNS]
    validate_strict(result.data, result.threshold)
    write_strict_csv(result.data, out_path)
    return result

def make_summaries(strict: pd.DataFrame, lookup: Optional[Mapping[str, str]] = None,
                   fields: Iterable[str] = SUMMARY_FIELDS,
                   n_years: int = RECENT_YEARS, out_dir: Path = PROC) -> list[Path]:
    recent = recent_years(strict, n_years=n_years)
    return write_summaries(recent, fields, lookup, out_dir=out_dir)

def make_models(strict: pd.DataFrame, field: str = "tn",
                n_years: int = RECENT_YEARS) -> dict[str, pd.DataFrame]:
    """
    Station marginal means under each model family on recent data, plus
    per-station trends over the full record at trend stations.
    """
    recent = recent_years(strict, n_years=n_years)
    summer = restrict_months(recent)
    out = {
        "ols": marginal_means(fit_linear(recent, field)),
        "rlm": marginal_means(fit_robust(recent, field)),
        "gam": marginal_means(fit_gam(recent, field)),
        "ols_summer": marginal_means(fit_linear(summer, field)),
    }
    stations = trend_stations(strict, field)
    if stations:
        trend_data = for_trend(strict, field, stations)
        out["trend"] = station_trends(fit_linear(trend_data, field, terms=TREND_TERMS))
    else:
        logger.warning("No stations qualify for %s trend analysis", field)
    return out

def make_figures(strict: pd.DataFrame, lookup: Optional[Mapping[str, str]] = None,
                 model_tables: Optional[dict[str, pd.DataFrame]] = None,
                 out_dir: Path = FIGURES) -> list[Path]:
    recent = recent_years(strict)
    paths = []
    figures = [
        ("tn_vs_din", plot_tn_vs_din(strict)[0]),
        ("tn_by_station", plot_station_boxplots(recent, "tn", lookup, log=True)[0]),
        ("din_by_station", plot_station_boxplots(recent, "din_n", lookup, log=True)[0]),
    ]
    for kind, table in (model_tables or {}).items():
        if kind == "trend":
            continue
        figures.append((f"tn_emmeans_{kind}",
                        plot_marginal_means(table, lookup=lookup, label="TN (mg/L)")[0]))
    stations = trend_stations(strict, "tn")
    if stations:
        figures.append(("tn_trend_stations",
                        plot_station_series(strict, "tn", stations, lookup)[0]))
    for name, fig in figures:
        paths.append(save_figure(fig, name, out_dir=out_dir))
        plt.close(fig)
    logger.info("Wrote %d figures to %s", len(paths), out_dir)
    return paths
