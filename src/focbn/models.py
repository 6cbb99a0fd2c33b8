"""
Model fitting over analysis subsets of the strict dataset.

Three model families are fit to log-transformed concentrations with statsmodels:

- fit_linear: ordinary least squares
- fit_robust: robust M-estimation (Huber T norm)
- fit_gam: Gaussian GAM with a B-spline smooth of day of year

Marginal means average model predictions over an equally weighted reference
grid of the other factors, with numeric covariates held at their mean.
Confidence intervals come from the model covariance of that linear
combination of coefficients.
"""
from __future__ import annotations
import itertools
import logging
import re
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np
import pandas as pd
import patsy
import statsmodels.api as sm
from scipy import stats
from statsmodels.gam.api import GLMGam, BSplines

from .subsets import positive_log

logger = logging.getLogger(__name__)

DEFAULT_TERMS = ("station", "month")
TREND_TERMS = ("station * year", "month")


@dataclass
class FittedModel:
    kind: str
    field: str
    formula: str
    data: pd.DataFrame
    result: object
    design_info: object = None
    smooth: Optional[str] = None

    @property
    def response(self) -> str:
        return f"log_{self.field}"

    def __repr__(self):
        smooth_str = f", smooth='{self.smooth}'" if self.smooth else ""
        return f"FittedModel(kind='{self.kind}', formula='{self.formula}'{smooth_str}, n={len(self.data)})"


def _variables(terms: Sequence[str], data: pd.DataFrame) -> list[str]:
    """Data columns referenced by the formula terms, in order of appearance."""
    names = re.findall(r"[A-Za-z_][A-Za-z0-9_]*", " ".join(terms))
    out = []
    for name in names:
        if name in data.columns and name not in out:
            out.append(name)
    return out

def _prepare(df: pd.DataFrame, field: str, variables: list[str]) -> pd.DataFrame:
    if field not in df.columns:
        raise KeyError(f"Field {field!r} not found. Available: {list(df.columns)}")
    data = positive_log(df, field).dropna(subset=variables)
    for col in variables:
        if isinstance(data[col].dtype, pd.CategoricalDtype):
            data[col] = data[col].cat.remove_unused_categories()
    if data.empty:
        raise ValueError(f"No usable {field} observations to fit")
    return data.reset_index(drop=True)

def _formula(field: str, terms: Sequence[str]) -> str:
    return f"log_{field} ~ " + (" + ".join(terms) if terms else "1")

def _design(formula: str, data: pd.DataFrame):
    # patsy design kept on the fitted model to rebuild rows for reference grids
    y, X = patsy.dmatrices(formula, data, return_type="dataframe", NA_action="raise")
    return y.iloc[:, 0], X


def fit_linear(df: pd.DataFrame, field: str, terms: Sequence[str] = DEFAULT_TERMS) -> FittedModel:
    data = _prepare(df, field, _variables(terms, df))
    formula = _formula(field, terms)
    y, X = _design(formula, data)
    result = sm.OLS(y, X).fit()
    logger.info("OLS %s: n=%d, R2=%.3f", formula, len(data), result.rsquared)
    return FittedModel("ols", field, formula, data, result, X.design_info)

def fit_robust(df: pd.DataFrame, field: str, terms: Sequence[str] = DEFAULT_TERMS) -> FittedModel:
    data = _prepare(df, field, _variables(terms, df))
    formula = _formula(field, terms)
    y, X = _design(formula, data)
    result = sm.RLM(y, X, M=sm.robust.norms.HuberT()).fit()
    logger.info("RLM %s: n=%d", formula, len(data))
    return FittedModel("rlm", field, formula, data, result, X.design_info)

def fit_gam(
    df: pd.DataFrame,
    field: str,
    terms: Sequence[str] = ("station",),
    smooth: str = "day_of_year",
    df_smooth: int = 5,
    alpha: float = 1.0,
) -> FittedModel:
    """
    Gaussian GAM: parametric ``terms`` plus a cubic B-spline smooth of ``smooth``.

    Args:
        df: Strict dataset or subset
        field: Concentration column, modeled on the log scale
        terms: Parametric formula terms
        smooth: Numeric column entering through the spline
        df_smooth: Spline basis dimension
        alpha: Smoothing penalty weight
    """
    variables = _variables(terms, df) + [smooth]
    data = _prepare(df, field, variables)
    data[smooth] = data[smooth].astype(float)
    formula = _formula(field, terms)
    splines = BSplines(data[[smooth]], df=[df_smooth], degree=[3])
    y, X = _design(formula, data)
    result = GLMGam(y, X, smoother=splines, alpha=[alpha]).fit()
    logger.info("GAM %s + s(%s): n=%d", formula, smooth, len(data))
    return FittedModel("gam", field, formula, data, result, X.design_info, smooth=smooth)

# -------------------------------
# Reference grid / marginal means
# -------------------------------

def _grid_levels(model: FittedModel) -> dict[str, list]:
    rhs = model.formula.split("~", 1)[1]
    levels = {}
    for col in _variables([rhs], model.data):
        s = model.data[col]
        if isinstance(s.dtype, pd.CategoricalDtype):
            levels[col] = list(s.cat.categories)
        elif not pd.api.types.is_numeric_dtype(s):
            levels[col] = sorted(s.unique())
    return levels

def _reference_grid(model: FittedModel, by: str) -> pd.DataFrame:
    levels = _grid_levels(model)
    if by not in levels:
        raise ValueError(f"'{by}' is not a factor in {model.formula}. Factors: {list(levels)}")
    names = list(levels)
    grid = pd.DataFrame(list(itertools.product(*levels.values())), columns=names)
    for col in names:
        s = model.data[col]
        if isinstance(s.dtype, pd.CategoricalDtype):
            grid[col] = pd.Categorical(grid[col], categories=s.cat.categories,
                                       ordered=s.cat.ordered)
    numeric = [c for c in _variables([model.formula.split("~", 1)[1]], model.data)
               if c not in levels]
    if model.smooth:
        numeric.append(model.smooth)
    for col in numeric:
        grid[col] = float(model.data[col].mean())
    return grid

def _design_rows(model: FittedModel, grid: pd.DataFrame) -> np.ndarray:
    (X,) = patsy.build_design_matrices([model.design_info], grid, return_type="dataframe")
    X = np.asarray(X, dtype=float)
    if model.smooth:
        basis = model.result.model.smoother.transform(grid[[model.smooth]].to_numpy(dtype=float))
        X = np.column_stack([X, basis])
    return X

def _linear_combination(model: FittedModel, L: np.ndarray, level: float):
    params = np.asarray(model.result.params, dtype=float)
    cov = np.asarray(model.result.cov_params(), dtype=float)
    est = L @ params
    se = np.sqrt(np.einsum("ij,jk,ik->i", L, cov, L))
    if model.kind == "ols":
        crit = stats.t.ppf(0.5 + level / 2, model.result.df_resid)
    else:
        crit = stats.norm.ppf(0.5 + level / 2)
    return est, se, est - crit * se, est + crit * se

def marginal_means(model: FittedModel, by: str = "station",
                   back_transform: bool = True, level: float = 0.95) -> pd.DataFrame:
    """
    Estimated marginal means of the response for each level of ``by``.

    Returns:
        DataFrame with ``by, emmean, se, lower, upper``. With ``back_transform``
        the estimate and interval are exponentiated to concentration units;
        ``se`` stays on the log scale.
    """
    grid = _reference_grid(model, by)
    X = _design_rows(model, grid)
    groups = grid[by].astype(object).to_numpy()
    order = _grid_levels(model)[by]
    L = np.vstack([X[groups == g].mean(axis=0) for g in order])
    est, se, lo, hi = _linear_combination(model, L, level)
    out = pd.DataFrame({by: order, "emmean": est, "se": se, "lower": lo, "upper": hi})
    if back_transform:
        out[["emmean", "lower", "upper"]] = np.exp(out[["emmean", "lower", "upper"]])
    return out

def station_trends(model: FittedModel, by: str = "station", var: str = "year",
                   level: float = 0.95) -> pd.DataFrame:
    """
    Slope of the log response on ``var`` for each level of ``by``.

    For a ``station * year`` model this is the per-station trend; ``pct_per_unit``
    is the equivalent percent change in concentration per unit of ``var``.
    """
    if var not in model.data.columns:
        raise KeyError(f"{var!r} not in model data")
    grid = _reference_grid(model, by)
    step = grid.assign(**{var: grid[var] + 1.0})
    dX = _design_rows(model, step) - _design_rows(model, grid)
    groups = grid[by].astype(object).to_numpy()
    order = _grid_levels(model)[by]
    L = np.vstack([dX[groups == g].mean(axis=0) for g in order])
    est, se, lo, hi = _linear_combination(model, L, level)
    out = pd.DataFrame({by: order, "slope": est, "se": se, "lower": lo, "upper": hi})
    z = est / np.where(se > 0, se, np.nan)
    out["p_value"] = 2 * stats.norm.sf(np.abs(z))
    out["pct_per_unit"] = 100 * (np.exp(out["slope"]) - 1)
    return out
