from __future__ import annotations
from pathlib import Path
from typing import Mapping, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from .config import FIGURES
from .stations import ordered_by_median


def _labels(stations: Sequence[str], lookup: Optional[Mapping[str, str]]) -> list[str]:
    lookup = lookup or {}
    return [lookup.get(s, s) for s in stations]

def save_figure(fig, name: str, out_dir: Path = FIGURES) -> Path:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / f"{name}.pdf"
    fig.savefig(path, bbox_inches="tight")
    return path


def plot_tn_vs_din(df: pd.DataFrame, ax=None):
    """TN against DIN (both mg/L) with a 1:1 line; DIN > TN records in red."""
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(6, 6))
        created_fig = True
    else:
        fig = ax.figure

    d = df.dropna(subset=["tn", "din_n"])
    flagged = d["error_flag"].astype(bool)
    ax.scatter(d.loc[~flagged, "din_n"], d.loc[~flagged, "tn"], s=8,
               color="#64748b", alpha=0.6, label="DIN <= TN")
    ax.scatter(d.loc[flagged, "din_n"], d.loc[flagged, "tn"], s=10,
               color="#ef4444", label=f"DIN > TN ({int(flagged.sum())})")
    top = float(np.nanmax([d["tn"].max(), d["din_n"].max(), 0.1])) if len(d) else 1.0
    ax.plot([0, top], [0, top], color="#111827", lw=1, ls="--", label="1:1")
    ax.set_xlabel("DIN (mg/L as N)")
    ax.set_ylabel("TN (mg/L)")
    ax.legend(loc="upper left")

    if created_fig:
        fig.tight_layout()
    return fig, ax

def plot_station_boxplots(df: pd.DataFrame, field: str,
                          lookup: Optional[Mapping[str, str]] = None,
                          ax=None, log: bool = False):
    """Distribution of ``field`` per station, stations ordered by median."""
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(6, 8))
        created_fig = True
    else:
        fig = ax.figure

    d = df.dropna(subset=[field])
    order = ordered_by_median(d, field)
    values = [d.loc[d["station"] == s, field].to_numpy() for s in order]
    ax.boxplot(values, orientation="horizontal", showfliers=True)
    ax.set_yticks(range(1, len(order) + 1))
    ax.set_yticklabels(_labels(order, lookup))
    ax.set_xlabel(field)
    if log:
        ax.set_xscale("log")

    if created_fig:
        fig.tight_layout()
    return fig, ax

def plot_marginal_means(means: pd.DataFrame, by: str = "station",
                        lookup: Optional[Mapping[str, str]] = None,
                        ax=None, label: str = "Marginal mean"):
    """Point estimates with confidence intervals from ``models.marginal_means``."""
    created_fig = False
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(6, 8))
        created_fig = True
    else:
        fig = ax.figure

    m = means.sort_values("emmean").reset_index(drop=True)
    y = np.arange(len(m))
    ax.errorbar(m["emmean"], y,
                xerr=[m["emmean"] - m["lower"], m["upper"] - m["emmean"]],
                fmt="o", color="#1d4ed8", ecolor="#93c5fd", capsize=2)
    ax.set_yticks(y)
    ax.set_yticklabels(_labels(list(m[by]), lookup) if by == "station" else list(m[by]))
    ax.set_xlabel(label)

    if created_fig:
        fig.tight_layout()
    return fig, ax

def plot_station_series(df: pd.DataFrame, field: str, stations: Sequence[str],
                        lookup: Optional[Mapping[str, str]] = None, ncols: int = 3):
    """Small multiples of ``field`` over time for the given stations."""
    stations = sorted(stations)
    n = max(len(stations), 1)
    nrows = int(np.ceil(n / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(4 * ncols, 2.5 * nrows),
                             sharey=True, squeeze=False)
    for ax, station in zip(axes.flat, stations):
        d = df.loc[(df["station"] == station) & df[field].notna()].sort_values("date")
        ax.plot(d["date"], d[field], "o", ms=3, color="#0f766e", alpha=0.7)
        yearly = d.groupby("year")[field].median()
        ax.plot(pd.to_datetime(yearly.index.astype(str) + "-07-01"), yearly.values,
                color="#111827", lw=1)
        ax.set_title(_labels([station], lookup)[0], fontsize=9)
    for ax in list(axes.flat)[len(stations):]:
        ax.set_visible(False)
    fig.supylabel(field)
    fig.tight_layout()
    return fig, axes
