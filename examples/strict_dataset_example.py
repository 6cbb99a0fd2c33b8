"""
Simple usage example for the strict nitrogen dataset.

Reads an existing focb_n_data_strict.csv, picks trend stations and prints
recent-year station summaries and TN marginal means.
"""

from pathlib import Path

from focbn.data_io import read_strict_csv
from focbn.subsets import recent_years
from focbn.summary import summarize_by_station
from focbn.trends import trend_stations
from focbn.models import fit_linear, marginal_means


def simple_usage_example(path="../data/processed/focb_n_data_strict.csv"):
    print("=== Strict nitrogen dataset - Usage Example ===\n")

    if not Path(path).exists():
        print(f"Error: Data file not found at {path}")
        print("Run `python -m focbn` first to build the strict dataset.")
        return

    strict = read_strict_csv(path)
    print(f"1. Loaded {len(strict)} records from {strict['station'].nunique()} stations")

    for field in ("tn", "din_n"):
        stations = trend_stations(strict, field)
        print(f"2. {field}: {len(stations)} trend stations: {sorted(stations)}")

    recent = recent_years(strict)
    summary = summarize_by_station(recent, "tn")
    print("\n3. Recent TN by station (lowest median first):")
    print(summary[["station", "tn_n", "tn_md", "tn_gm"]].to_string(index=False))

    means = marginal_means(fit_linear(recent, "tn"))
    print("\n4. TN marginal means (station + month model):")
    for _, row in means.iterrows():
        print(f"   {row['station']}: {row['emmean']:.3f} mg/L ({row['lower']:.3f} - {row['upper']:.3f})")


if __name__ == "__main__":
    simple_usage_example()
