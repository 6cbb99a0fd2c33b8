"""
FOCB nitrogen: cleaning, summary and trend tools for Friends of Casco Bay
nutrient monitoring data.

Modules:
- ingest / cleaning / merge / transform: raw workbooks to the merged record table
- outliers: ammonium outlier policy producing the strict dataset
- trends / subsets / summary / models: analysis subsets, station statistics and model fits
- plotting: comparison and trend figures
"""

from .cleaning import normalize_timestamp, filter_surface
from .merge import merge_nitrogen, add_calendar_fields
from .transform import molar_to_mass, add_derived_fields
from .outliers import nh4_threshold, apply_outlier_policy, make_strict, StrictResult
from .trends import trend_stations
from .summary import geometric_mean, summarize_by_station
from .data_io import write_strict_csv, read_strict_csv

__all__ = [
    "normalize_timestamp",
    "filter_surface",
    "merge_nitrogen",
    "add_calendar_fields",
    "molar_to_mass",
    "add_derived_fields",
    "nh4_threshold",
    "apply_outlier_policy",
    "make_strict",
    "StrictResult",
    "trend_stations",
    "geometric_mean",
    "summarize_by_station",
    "write_strict_csv",
    "read_strict_csv",
]

__version__ = "0.1.0"
