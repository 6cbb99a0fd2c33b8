from __future__ import annotations
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
DATA = ROOT / "data"
RAW = DATA / "raw"
INTERIM = DATA / "interim"
PROC = DATA / "processed"
FIGURES = ROOT / "figures"

# raw Excel filenames (adjust to yours)
RAW_SPECIES_XLSX = RAW / "FOCB DIN All Current Sites.xlsx"
RAW_TN_XLSX = RAW / "FOCB TN All Current Sites.xlsx"
RAW_STATION_NAMES_XLSX = RAW / "FOCB Monitoring Sites SHORT NAMES.xlsx"

STRICT_CSV = "focb_n_data_strict.csv"
SUMMARY_CSV = "{field}_summary_recent.csv"

# raw header -> canonical name
SPECIES_COLUMNS = {
    "Station": "station",
    "Date": "date",
    "Time": "time",
    "Sample Depth(m)": "din_depth",
    "NO3+NO2": "nox",
    "Si(OH)4": "si",
    "NH4": "nh4",
    "PO4": "po4",
    "DIN(uM)": "din",
    "Month": "src_month",
    "Year": "src_year",
}
TN_COLUMNS = {
    "SiteID": "station",
    "Date": "date",
    "Depth (m)": "tn_depth",
    "TN(mg/l)": "tn",
    "Month": "src_month",
    "Year": "src_year",
}
STATION_NAME_COLUMNS = {"Station_ID": "station", "Alt_Name": "station_name"}

# keys
KEYS = ["station", "date"]

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
          "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
SUMMER_MONTHS = ("Jun", "Jul", "Aug", "Sep")

N_ATOMIC_MASS = 14.007      # g/mol
SURFACE_DEPTH_M = 1.0
NH4_QUANTILE = 0.95
LAST_UNRELIABLE_YEAR = 2000

TREND_MIN_YEARS = 10
TREND_RECENT_WINDOW = 5
TREND_MIN_RECENT_YEARS = 2
RECENT_YEARS = 5

# columns nulled together by the ammonium outlier policy
NH4_DEPENDENT = ["nh4", "nh4_n", "din", "din_n", "organic_n"]

STRICT_COLUMNS = [
    "station", "date", "time", "year", "month", "day_of_year",
    "tn_depth", "din_depth", "tn", "nox", "nh4", "din",
    "nox_n", "nh4_n", "din_n", "organic_n", "error_flag",
]

SUMMARY_FIELDS = ("tn", "din_n", "nox_n", "nh4_n", "organic_n")
