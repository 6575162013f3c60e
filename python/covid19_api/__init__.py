"""
covid19_api: Python library for COVID-19 country statistics via covid19api.com

This library provides a simplified interface for fetching daily COVID-19
figures per country and turning them into an analysis-ready dataset.

Main features:
- Validated accessors: every country name or slug is checked against the
  API's country directory before a request is made
- Fixed output schemas for first-case, date-range and summary queries
- Daily new cases/deaths derived from the cumulative series
- Merged multi-country dataset with calendar parts for filtering
- Summary statistics (mean, median, SD, quartiles, IQR, max)
- YAML cache of the country directory for offline work

DAILY METRICS:
    The API only reports cumulative totals. Daily values are the first
    difference of the cumulative series against a leading zero:

    confirmed:  0, 0, 5, 5, 12
    new_cases:  0, 0, 5, 0, 7

    so cumsum(new_cases) == confirmed for every country.

Basic usage:
    >>> from covid19_api import get_dataset, summary_statistics, filter_dataset
    >>>
    >>> # Philippines and two neighbours, full history
    >>> df = get_dataset(["Philippines", "Indonesia", "Malaysia"])
    >>>
    >>> # Last week of September 2021
    >>> week = filter_dataset(df, country="Philippines", year=2021, month=9, days=(24, 30))
    >>>
    >>> # Spread of daily new cases per country
    >>> summary_statistics(df, "new_cases")

For API details, see: https://documenter.getpostman.com/view/10808728/SzS8rjbc
"""

__version__ = "0.1.0"

import logging
from typing import List, Optional

import pandas as pd

from covid19_api.client import (
    Covid19APIClient,
    Covid19APIError,
    UnknownCountryError,
    NetworkError,
    HttpStatusError,
    ParseError,
    DuplicateKeyError,
)

from covid19_api.config import (
    COVID19_API_BASE_URL,
    DEFAULT_COUNTRIES,
    ENDPOINTS,
    VARIABLE_FIELDS,
    get_settings,
)

from covid19_api.countries import (
    Country,
    CountryDirectory,
)

from covid19_api.accessors import Covid19Data

from covid19_api.pipeline import (
    to_case_records,
    derive_daily,
    merge,
    build_dataset,
)

from covid19_api.stats import (
    filter_dataset,
    summary_statistics,
    latest,
    to_wide,
)

_logger = logging.getLogger(__name__)


# =============================================================================
# Module-level accessors
# =============================================================================

# Module-level instance (lazy initialization)
_data: Optional[Covid19Data] = None


def _get_data() -> Covid19Data:
    global _data

    if _data is None:
        _data = Covid19Data()
    return _data


def set_default(data: Optional[Covid19Data]) -> None:
    """Replace the instance used by the module-level functions.

    Pass None to go back to a lazily created default instance.
    """
    global _data
    _data = data
    _logger.debug(f"Default instance set to {data!r}")


def reload_countries() -> int:
    """Refresh the cached country directory. Returns the number of countries."""
    return len(_get_data().directory.reload())


def list_countries() -> pd.DataFrame:
    """
    List all countries known to the API.

    Returns:
        DataFrame with columns Country, Slug, ISO2

    Example:
        >>> from covid19_api import list_countries
        >>> list_countries().head()
    """
    return _get_data().list_countries()


def resolve_slug(name: str) -> str:
    """
    Get the API slug for an exact, case-sensitive country name.

    Raises:
        UnknownCountryError: If the name is not in the directory

    Example:
        >>> resolve_slug("Philippines")
        'philippines'
    """
    return _get_data().resolve_slug(name)


def first_case(country: str) -> pd.DataFrame:
    """First confirmed case of a country (Country, Cases, Status, Date)."""
    return _get_data().first_case(country)


def cumulative_in_range(country: str, date_from: str, date_to: str) -> pd.DataFrame:
    """
    Cumulative confirmed cases between two dates.

    Example:
        >>> cumulative_in_range("philippines", "2021-09-24", "2021-09-30")
    """
    return _get_data().cumulative_in_range(country, date_from, date_to)


def variable_in_range(country: str, date_from: str, date_to: str, field: str) -> pd.DataFrame:
    """
    One variable ('confirmed', 'deaths', 'recovered' or 'active') between two dates.

    Example:
        >>> variable_in_range("philippines", "2021-09-24", "2021-09-30", "deaths")
    """
    return _get_data().variable_in_range(country, date_from, date_to, field)


def snapshot(names: List[str]) -> pd.DataFrame:
    """
    Latest figures for several countries from the /summary endpoint.

    Example:
        >>> snapshot(["Philippines", "China", "Mexico", "USA", "Canada"])
    """
    return _get_data().snapshot(names)


def full_history(country: str) -> pd.DataFrame:
    """Complete daily history of a country with all native API fields."""
    return _get_data().full_history(country)


def get_dataset(countries: Optional[List[str]] = None) -> pd.DataFrame:
    """
    Fetch, derive and merge the daily history of several countries.

    Args:
        countries: Country names or slugs. Defaults to DEFAULT_COUNTRIES
            (Philippines, Indonesia, Malaysia).

    Returns:
        DataFrame with columns country, date, confirmed, deaths, recovered,
        active, new_cases, new_deaths, year, month, day
    """
    return _get_data().history_dataset(countries)


__all__ = [
    # Primary API
    "list_countries",
    "resolve_slug",
    "first_case",
    "cumulative_in_range",
    "variable_in_range",
    "snapshot",
    "full_history",
    "get_dataset",
    "reload_countries",
    "set_default",
    # Classes
    "Covid19Data",
    "Covid19APIClient",
    "Country",
    "CountryDirectory",
    # Pipeline
    "to_case_records",
    "derive_daily",
    "merge",
    "build_dataset",
    # Statistics
    "filter_dataset",
    "summary_statistics",
    "latest",
    "to_wide",
    # Config
    "COVID19_API_BASE_URL",
    "DEFAULT_COUNTRIES",
    "ENDPOINTS",
    "VARIABLE_FIELDS",
    "get_settings",
    # Exceptions
    "Covid19APIError",
    "UnknownCountryError",
    "NetworkError",
    "HttpStatusError",
    "ParseError",
    "DuplicateKeyError",
]
