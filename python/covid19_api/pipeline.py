"""
Derived-metric pipeline

Turns full country histories into one normalized long-form dataset:

    full_history()  ->  to_case_records()  ->  derive_daily()  ->  merge()

DAILY METRICS:
    The API only reports cumulative totals. Daily values are computed as the
    first difference against a synthetic leading zero:

        new_cases[i] = confirmed[i] - confirmed[i-1],  confirmed[-1] = 0

    so the running sum of new_cases reproduces the cumulative series exactly.

All functions here are pure: they return new DataFrames and never modify
their inputs.
"""

import logging
from typing import Iterable, List, Optional

import pandas as pd

from covid19_api.client import DuplicateKeyError
from covid19_api.config import CASE_RECORD_COLUMNS, DATASET_COLUMNS, get_default_countries

_logger = logging.getLogger(__name__)

KEY_COLUMNS = ["country", "date"]


def _empty_dataset() -> pd.DataFrame:
    df = pd.DataFrame({col: pd.Series(dtype="int64") for col in DATASET_COLUMNS})
    df["country"] = df["country"].astype(object)
    df["date"] = pd.to_datetime(df["date"])
    return df


def _parse_dates(values: pd.Series) -> pd.Series:
    """Parse API timestamps into timezone-naive midnight dates."""
    dates = pd.to_datetime(values, utc=True)
    return dates.dt.tz_localize(None).dt.normalize()


def to_case_records(history: pd.DataFrame) -> pd.DataFrame:
    """
    Project a native /total/country history onto the CaseRecord columns.

    Native API names (Country, Date, Confirmed, ...) are renamed to
    lowercase; frames that already use CaseRecord columns pass through.
    Dates are parsed and rows sorted by (country, date).

    Args:
        history: DataFrame returned by full_history() or an equivalent frame

    Returns:
        DataFrame with columns country, date, confirmed, deaths, recovered, active
    """
    df = history.rename(columns=CASE_RECORD_COLUMNS)
    columns = list(CASE_RECORD_COLUMNS.values())

    missing = [c for c in ["country", "date", "confirmed", "deaths"] if c not in df.columns]
    if missing:
        raise KeyError(f"History is missing required columns: {missing}")

    for col in ["recovered", "active"]:
        if col not in df.columns:
            df[col] = pd.NA

    df = df[columns].copy()
    df["date"] = _parse_dates(df["date"])

    return df.sort_values(KEY_COLUMNS, kind="mergesort").reset_index(drop=True)


def derive_daily(history: pd.DataFrame) -> pd.DataFrame:
    """
    Add daily new cases/deaths and calendar parts to a cumulative history.

    Args:
        history: Cumulative history ordered by date, with native or
            CaseRecord column names. Several countries may be present;
            differences are taken within each country.

    Returns:
        DataFrame with the CaseRecord columns plus new_cases, new_deaths,
        year, month and day. An empty history yields an empty frame with
        the same columns.

    Example:
        >>> df = derive_daily(history)   # confirmed: 0, 0, 5, 5, 12
        >>> df['new_cases'].tolist()
        [0, 0, 5, 0, 7]
    """
    if history is None or len(history) == 0:
        return _empty_dataset()

    df = to_case_records(history)
    by_country = df.groupby("country", sort=False)

    df["new_cases"] = df["confirmed"] - by_country["confirmed"].shift(1, fill_value=0)
    df["new_deaths"] = df["deaths"] - by_country["deaths"].shift(1, fill_value=0)
    df["year"] = df["date"].dt.year
    df["month"] = df["date"].dt.month
    df["day"] = df["date"].dt.day

    return df[DATASET_COLUMNS]


def merge(histories: Iterable[pd.DataFrame]) -> pd.DataFrame:
    """
    Combine derived per-country histories into one dataset.

    Args:
        histories: Frames produced by derive_daily()

    Returns:
        Dataset sorted by (country, date)

    Raises:
        DuplicateKeyError: If a (country, date) pair occurs more than once,
            e.g. when the same country is merged twice
    """
    frames = [h for h in histories if h is not None and len(h) > 0]
    if not frames:
        return _empty_dataset()

    result = pd.concat(frames, ignore_index=True)

    dup_mask = result.duplicated(subset=KEY_COLUMNS, keep="first")
    if dup_mask.any():
        keys = [
            (row.country, row.date.date() if hasattr(row.date, "date") else row.date)
            for row in result.loc[dup_mask, KEY_COLUMNS].itertuples(index=False)
        ]
        raise DuplicateKeyError(keys)

    return result.sort_values(KEY_COLUMNS, kind="mergesort").reset_index(drop=True)


def build_dataset(data, countries: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Fetch, derive and merge the full history of several countries.

    Args:
        data: Covid19Data instance used to fetch histories
        countries: Country names or slugs. Defaults to the configured
            comparison countries.

    Returns:
        Dataset covering every requested country
    """
    if countries is None:
        countries = get_default_countries()

    derived = []
    for country in countries:
        history = data.full_history(country)
        if history.empty:
            _logger.warning(f"No history returned for '{country}'")
        derived.append(derive_daily(history))

    dataset = merge(derived)
    _logger.info(
        f"Built dataset with {len(dataset)} rows for {len(countries)} countries"
    )
    return dataset
