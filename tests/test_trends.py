import numpy as np
import pandas as pd
from focbn.trends import trend_stations, years_sampled

def _station(code, years, value=1.0):
    return pd.DataFrame({"station": code, "year": list(years), "tn": value, "din_n": value})

def _data():
    old = _station("OLD", range(2001, 2011))             # 10 years, none recent
    full = _station("FULL", range(2007, 2021))           # 14 years, 5 recent
    one_recent = _station("ONE", range(2006, 2017))      # 11 years, only 2016 recent
    short = _station("SHORT", range(2015, 2021))         # 6 years
    df = pd.concat([old, full, one_recent, short], ignore_index=True)
    # duplicate samples in one year count once
    return pd.concat([df, _station("SHORT", [2016, 2016])], ignore_index=True)

def test_recency_rule_excludes_old_history():
    assert trend_stations(_data(), "tn", current_year=2020) == {"FULL"}

def test_default_current_year_is_last_in_data():
    assert trend_stations(_data(), "tn") == {"FULL"}

def test_window_moves_with_current_year():
    assert trend_stations(_data(), "tn", current_year=2012) == {"OLD", "FULL", "ONE"}

def test_fields_evaluated_independently():
    df = _data()
    df.loc[df["station"] == "FULL", "din_n"] = np.nan
    assert trend_stations(df, "tn", current_year=2020) == {"FULL"}
    assert trend_stations(df, "din_n", current_year=2020) == set()

def test_null_years_do_not_count():
    df = _station("GAPS", range(2007, 2021))
    df.loc[df["year"] >= 2017, "tn"] = np.nan
    assert len(years_sampled(df, "tn")) == 10
    assert trend_stations(df, "tn", current_year=2020) == set()
