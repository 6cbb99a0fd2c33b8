import numpy as np
import pandas as pd
import pytest
from focbn.models import (
    fit_linear, fit_robust, fit_gam, marginal_means, station_trends, TREND_TERMS,
)
from focbn.subsets import recent_years, restrict_months, positive_log, for_trend

def test_subsets(synthetic_tn):
    recent = recent_years(synthetic_tn, n_years=5)
    assert sorted(recent["year"].unique()) == [2016, 2017, 2018, 2019, 2020]
    summer = restrict_months(synthetic_tn, ["Jul", "Aug"])
    assert set(summer["month"]) == {"Jul", "Aug"}
    only_a = for_trend(synthetic_tn, "tn", {"A"})
    assert set(only_a["station"]) == {"A"}
    assert len(synthetic_tn) > len(recent)

def test_recent_years_empty_frame():
    empty = pd.DataFrame({"station": pd.Series(dtype=object), "year": pd.Series(dtype=float)})
    out = recent_years(empty)
    assert out.empty and list(out.columns) == ["station", "year"]

def test_positive_log_excludes_non_detects():
    df = pd.DataFrame({"tn": [0.0, 1.0, np.nan, np.e]})
    out = positive_log(df, "tn")
    assert out["log_tn"].tolist() == pytest.approx([0.0, 1.0])

def test_linear_marginal_means_recover_station_levels(synthetic_tn):
    data = recent_years(synthetic_tn, n_years=1)   # 2020 only
    model = fit_linear(data, "tn")
    means = marginal_means(model).set_index("station")
    assert list(means.index) == ["A", "B", "C"]
    assert (means["lower"] < means["emmean"]).all() and (means["emmean"] < means["upper"]).all()
    # A in 2020 is 0.30 * exp(0.05 * 4); month effects average to 0.025
    assert means.loc["A", "emmean"] == pytest.approx(0.30 * np.exp(0.2 + 0.025), rel=0.05)
    assert means.loc["B", "emmean"] == pytest.approx(0.45 * np.exp(0.025), rel=0.05)
    assert means.loc["C", "emmean"] == pytest.approx(0.60 * np.exp(0.025), rel=0.05)

def test_marginal_means_on_log_scale(synthetic_tn):
    model = fit_linear(synthetic_tn, "tn")
    logged = marginal_means(model, back_transform=False)
    natural = marginal_means(model)
    assert np.allclose(np.exp(logged["emmean"]), natural["emmean"])

def test_marginal_means_by_month(synthetic_tn):
    means = marginal_means(fit_linear(synthetic_tn, "tn"), by="month")
    assert means["month"].tolist() == ["Jun", "Jul", "Aug", "Sep"]
    assert means.set_index("month")["emmean"].idxmax() == "Aug"

def test_marginal_means_rejects_numeric_by(synthetic_tn):
    model = fit_linear(synthetic_tn, "tn", terms=("station", "year"))
    with pytest.raises(ValueError):
        marginal_means(model, by="year")

def test_robust_fit(synthetic_tn):
    data = recent_years(synthetic_tn, n_years=1).copy()
    data.loc[0, "tn"] = 50.0    # gross outlier
    means = marginal_means(fit_robust(data, "tn")).set_index("station")
    assert means.loc["B", "emmean"] == pytest.approx(0.45 * np.exp(0.025), rel=0.05)

def test_gam_fit(synthetic_tn):
    model = fit_gam(recent_years(synthetic_tn, n_years=3), "tn")
    assert model.kind == "gam" and model.smooth == "day_of_year"
    assert model.design_info is not None
    means = marginal_means(model).set_index("station")
    assert list(means.index) == ["A", "B", "C"]
    assert means["emmean"].is_monotonic_increasing
    assert (means["lower"] < means["upper"]).all()

def test_station_trends(synthetic_tn):
    model = fit_linear(synthetic_tn, "tn", terms=TREND_TERMS)
    trends = station_trends(model).set_index("station")
    assert trends.loc["A", "slope"] == pytest.approx(0.05, abs=0.01)
    assert trends.loc["B", "slope"] == pytest.approx(0.0, abs=0.01)
    assert trends.loc["A", "p_value"] < 0.001
    assert trends.loc["A", "pct_per_unit"] == pytest.approx(100 * (np.exp(trends.loc["A", "slope"]) - 1))

def test_empty_subset_rejected(synthetic_tn):
    with pytest.raises(ValueError):
        fit_linear(synthetic_tn.assign(tn=0.0), "tn")

def test_models_carry_patsy_design(synthetic_tn):
    data = recent_years(synthetic_tn, n_years=2)
    for model in (fit_linear(data, "tn"), fit_robust(data, "tn")):
        assert model.design_info is not None
        assert "station[T.B]" in model.design_info.column_names
        assert len(marginal_means(model)) == 3
