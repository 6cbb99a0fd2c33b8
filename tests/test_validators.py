import numpy as np
import pandas as pd
import pytest
import pandera.errors
from focbn.merge import add_calendar_fields
from focbn.transform import add_derived_fields
from focbn.outliers import make_strict
from focbn.validators import validate_strict

def _strict():
    df = pd.DataFrame({
        "station": ["A", "A", "B", "B"],
        "date": pd.to_datetime(["2019-05-01", "2019-06-01", "2019-05-01", "2020-02-29"]),
        "tn_depth": 0.2,
        "din_depth": 0.5,
        "tn": [0.3, 0.4, 0.05, 0.5],
        "nox": [2.0, 3.0, 1.0, 4.0],
        "nh4": [0.5, 1.0, 20.0, 1.5],
    })
    df["din"] = df["nox"] + df["nh4"]
    return make_strict(add_derived_fields(add_calendar_fields(df)))

def test_valid_strict_dataset_passes():
    result = _strict()
    validate_strict(result.data, result.threshold)

def test_inconsistent_error_flag_rejected():
    data = _strict().data.copy()
    data.loc[0, "error_flag"] = True
    with pytest.raises(pandera.errors.SchemaErrors):
        validate_strict(data)

def test_leaked_ammonium_rejected():
    result = _strict()
    data = result.data.copy()
    data.loc[0, "nh4"] = result.threshold + 1
    data.loc[0, "nh4_n"] = 0.1
    with pytest.raises(pandera.errors.SchemaErrors):
        validate_strict(data, result.threshold)

def test_bad_day_of_year_rejected():
    data = _strict().data.copy()
    data.loc[1, "day_of_year"] = 0
    with pytest.raises(pandera.errors.SchemaErrors):
        validate_strict(data)

def test_flagged_record_with_nulled_din_passes():
    result = _strict()
    flagged = result.data[result.data["error_flag"]]
    assert len(flagged) == 1
    assert flagged["din_n"].isna().all() and flagged["tn"].notna().all()
    validate_strict(result.data, result.threshold)

def test_flagged_record_without_tn_rejected():
    data = _strict().data.copy()
    idx = data.index[data["error_flag"]][0]
    data.loc[idx, "tn"] = np.nan
    with pytest.raises(pandera.errors.SchemaErrors):
        validate_strict(data)
