"""
Filters, summary statistics and post-production helpers for a dataset.

All functions take a dataset built by pipeline.merge() / build_dataset()
and return new DataFrames.

MISSING VALUES:
    summary_statistics() excludes missing values by default (dropna=True),
    so spread and quantiles are computed over reported days only.
    filter_dataset() never drops rows: missing values stay in the subset.
"""

from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

DayRange = Union[Tuple[int, int], Iterable[int]]

STAT_COLUMNS = ["count", "mean", "median", "sd", "q1", "q3", "iqr", "max"]


def filter_dataset(
    dataset: pd.DataFrame,
    country: Optional[Union[str, List[str]]] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    days: Optional[DayRange] = None,
) -> pd.DataFrame:
    """
    Select rows by country and calendar parts.

    Args:
        dataset: Dataset with country, date, year, month and day columns
        country: Country name or list of names
        year: Calendar year, e.g. 2021
        month: Month number 1-12
        days: Inclusive (start, end) tuple, e.g. (24, 30), or any iterable
            of day numbers

    Returns:
        Matching rows ordered by (country, date)

    Example:
        >>> filter_dataset(dataset, country="Philippines", year=2021, month=9, days=(24, 30))
    """
    mask = pd.Series(True, index=dataset.index)

    if country is not None:
        countries = [country] if isinstance(country, str) else list(country)
        mask &= dataset["country"].isin(countries)
    if year is not None:
        mask &= dataset["year"] == year
    if month is not None:
        mask &= dataset["month"] == month
    if days is not None:
        if isinstance(days, tuple) and len(days) == 2:
            start, end = days
            mask &= dataset["day"].between(start, end)
        else:
            mask &= dataset["day"].isin(list(days))

    result = dataset.loc[mask]
    return result.sort_values(["country", "date"], kind="mergesort").reset_index(drop=True)


def _describe(values: pd.Series, dropna: bool) -> dict:
    q1 = values.quantile(0.25) if dropna or not values.isna().any() else float("nan")
    q3 = values.quantile(0.75) if dropna or not values.isna().any() else float("nan")
    return {
        "count": int(values.count()),
        "mean": values.mean(skipna=dropna),
        "median": values.median(skipna=dropna),
        # ddof=1: a single observation gives NaN rather than 0
        "sd": values.std(skipna=dropna),
        "q1": q1,
        "q3": q3,
        "iqr": q3 - q1,
        "max": values.max(skipna=dropna),
    }


def summary_statistics(
    dataset: pd.DataFrame,
    column: str = "new_cases",
    by: Optional[str] = "country",
    dropna: bool = True,
) -> pd.DataFrame:
    """
    Descriptive statistics of one column, per group.

    Args:
        dataset: Dataset (or a filtered subset of it)
        column: Numeric column, e.g. 'new_cases' or 'new_deaths'
        by: Grouping column, or None for a single overall row
        dropna: Exclude missing values (default). With dropna=False any
            missing value makes the affected statistics NaN.

    Returns:
        DataFrame with columns count, mean, median, sd, q1, q3, iqr, max
        (plus the grouping column). For a one-element group sd is NaN and
        iqr is 0.
    """
    values = pd.to_numeric(dataset[column], errors="coerce").astype("float64")

    if by is None:
        return pd.DataFrame([_describe(values, dropna)], columns=STAT_COLUMNS)

    rows = []
    for key, group in values.groupby(dataset[by], sort=True):
        row = {by: key}
        row.update(_describe(group, dropna))
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=[by] + STAT_COLUMNS)
    return pd.DataFrame(rows, columns=[by] + STAT_COLUMNS)


def latest(dataset: pd.DataFrame, column: str = "confirmed") -> pd.DataFrame:
    """Keep the most recent row per country with a non-missing `column`."""
    df = dataset.dropna(subset=[column])
    if df.empty:
        return df.reset_index(drop=True)
    idx = df.groupby("country")["date"].idxmax()
    return df.loc[idx].sort_values("country").reset_index(drop=True)


def to_wide(dataset: pd.DataFrame, value: str = "new_cases") -> pd.DataFrame:
    """
    Pivot a dataset to dates as rows and countries as columns.

    Useful for plotting several countries side by side.
    """
    wide = dataset.pivot_table(
        index="date",
        columns="country",
        values=value,
        aggfunc="first",
    )
    wide.columns.name = None
    return wide.reset_index()
