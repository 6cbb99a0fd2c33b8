import numpy as np
import pandas as pd
import pytest
from focbn.summary import geometric_mean, summarize_by_station, write_summaries
from focbn.stations import attach_station_names, ordered_by_median

def test_geometric_mean_powers_of_ten():
    assert geometric_mean([0.1, 1.0, 10.0]) == pytest.approx(1.0, abs=1e-12)

def test_geometric_mean_ignores_nulls():
    assert geometric_mean([2.0, np.nan, 8.0]) == pytest.approx(4.0)

@pytest.mark.parametrize("values", [[0.0, 1.0], [-1.0, 2.0], [], [np.nan]])
def test_geometric_mean_undefined(values):
    assert np.isnan(geometric_mean(values))

def _data():
    return pd.DataFrame({
        "station": ["HIGH"] * 4 + ["LOW"] * 3 + ["ZERO"] * 2 + ["EMPTY"],
        "tn": [1.0, 2.0, 3.0, 4.0, 0.1, 0.2, 0.3, 0.0, 0.5, np.nan],
    })

def test_summary_columns_and_order():
    out = summarize_by_station(_data(), "tn", {"HIGH": "Up River", "LOW": "Outer Bay"})
    assert list(out.columns) == [
        "station", "tn_mn", "tn_sd", "tn_n", "tn_md", "tn_iqr", "tn_p90", "tn_gm", "station_name",
    ]
    # ascending median; stations without data are omitted
    assert out["station"].tolist() == ["LOW", "ZERO", "HIGH"]

def test_summary_statistics():
    out = summarize_by_station(_data(), "tn").set_index("station")
    high = out.loc["HIGH"]
    assert high["tn_n"] == 4
    assert high["tn_mn"] == pytest.approx(2.5)
    assert high["tn_sd"] == pytest.approx(np.std([1, 2, 3, 4], ddof=1))
    assert high["tn_md"] == pytest.approx(2.5)
    assert high["tn_iqr"] == pytest.approx(1.5)
    assert high["tn_p90"] == pytest.approx(3.7)
    assert high["tn_gm"] == pytest.approx(24 ** 0.25)
    # a zero value leaves the geometric mean undefined, not coerced
    assert np.isnan(out.loc["ZERO", "tn_gm"])

def test_summary_unmapped_station_has_null_name():
    out = summarize_by_station(_data(), "tn", {"HIGH": "Up River"}).set_index("station")
    assert out.loc["HIGH", "station_name"] == "Up River"
    assert pd.isna(out.loc["LOW", "station_name"])

def test_summary_unknown_field():
    with pytest.raises(KeyError):
        summarize_by_station(_data(), "tp")

def test_write_summaries(tmp_path):
    df = _data().assign(din_n=0.1)
    paths = write_summaries(df, ["tn", "din_n"], {"HIGH": "Up River"}, out_dir=tmp_path)
    assert [p.name for p in paths] == ["tn_summary_recent.csv", "din_n_summary_recent.csv"]
    back = pd.read_csv(paths[0])
    assert back.columns[-1] == "station_name"
    assert len(back) == 3

def test_station_lookup_many_to_one():
    df = pd.DataFrame({"station": ["A1", "A2", "B"]})
    out = attach_station_names(df, {"A1": "Harbor", "A2": "Harbor"})
    assert out["station_name"].tolist()[:2] == ["Harbor", "Harbor"]
    assert pd.isna(out["station_name"].iloc[2])

def test_ordered_by_median():
    assert ordered_by_median(_data(), "tn") == ["LOW", "ZERO", "HIGH", "EMPTY"]
