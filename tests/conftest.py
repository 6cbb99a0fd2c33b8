import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from focbn.config import MONTHS


@pytest.fixture
def synthetic_tn():
    """Three stations, June-September, 2011-2020; station A rises 5%/yr on the log scale."""
    rng = np.random.default_rng(42)
    base = {"A": np.log(0.30), "B": np.log(0.45), "C": np.log(0.60)}
    slope = {"A": 0.05, "B": 0.0, "C": 0.0}
    month_effect = {6: 0.0, 7: 0.05, 8: 0.10, 9: -0.05}
    rows = []
    for station in base:
        for year in range(2011, 2021):
            for month in month_effect:
                for day in (5, 20):
                    date = pd.Timestamp(year=year, month=month, day=day)
                    mu = base[station] + slope[station] * (year - 2016) + month_effect[month]
                    rows.append({
                        "station": station,
                        "date": date,
                        "year": year,
                        "month": MONTHS[month - 1],
                        "day_of_year": date.dayofyear,
                        "tn": float(np.exp(mu + rng.normal(0, 0.05))),
                    })
    df = pd.DataFrame(rows)
    df["month"] = pd.Categorical(df["month"], categories=list(MONTHS), ordered=True)
    return df
