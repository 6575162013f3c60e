"""
Validated accessors for the COVID-19 API

Every accessor checks its country argument against the CountryDirectory
before any request is made, calls exactly one endpoint, and projects the
JSON response onto a fixed column set.

Basic usage:
    >>> from covid19_api import Covid19Data
    >>> data = Covid19Data()
    >>> data.first_case("philippines")
    >>> data.variable_in_range("philippines", "2021-09-24", "2021-09-30", "deaths")
    >>> data.snapshot(["Philippines", "China", "Mexico", "USA", "Canada"])
"""

import logging
from typing import Any, List, Optional

import pandas as pd

from covid19_api.client import Covid19APIClient, ParseError, UnknownCountryError
from covid19_api.config import (
    ENDPOINTS,
    SNAPSHOT_COLUMNS,
    STATUS_COLUMNS,
    format_date,
    resolve_field,
)
from covid19_api.countries import CountryDirectory
from covid19_api.pipeline import build_dataset

_logger = logging.getLogger(__name__)


def _records_frame(payload: Any, url: str) -> pd.DataFrame:
    """Convert a JSON list of records into a DataFrame."""
    if payload is None:
        payload = []
    if not isinstance(payload, list):
        raise ParseError(
            f"Expected a list of records from {url}, got {type(payload).__name__}"
        )
    return pd.DataFrame(payload)


def _project(df: pd.DataFrame, columns: List[str], url: str) -> pd.DataFrame:
    """Select a fixed column set, keeping the column order."""
    if df.empty:
        _logger.warning(f"Empty response from {url}")
        return pd.DataFrame(columns=columns)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ParseError(f"Response from {url} is missing fields: {missing}")
    return df[columns].reset_index(drop=True)


class Covid19Data:
    """Validated access to country-level COVID-19 statistics.

    Args:
        client: API client. A default Covid19APIClient is created if omitted.
        directory: Country directory used for validation. Defaults to one
            backed by `client`, loaded on first use.
    """

    def __init__(
        self,
        client: Optional[Covid19APIClient] = None,
        directory: Optional[CountryDirectory] = None,
    ):
        self.client = client if client is not None else Covid19APIClient()
        if directory is None:
            directory = CountryDirectory(client=self.client)
        self.directory = directory

    def _slug(self, country: str) -> str:
        slug = self.directory.to_slug(country)
        if slug != country:
            _logger.debug(f"Resolved '{country}' to slug '{slug}'")
        return slug

    def _fetch(self, endpoint: str, params: Optional[dict] = None) -> pd.DataFrame:
        payload = self.client.get(endpoint, params)
        return _records_frame(payload, endpoint)

    # -------------------------------------------------------------------------
    # Directory accessors
    # -------------------------------------------------------------------------

    def list_countries(self) -> pd.DataFrame:
        """
        List every country known to the API.

        Returns:
            DataFrame with columns Country, Slug, ISO2, sorted by Country
        """
        return self.directory.to_frame()

    def resolve_slug(self, name: str) -> str:
        """
        Get the API slug for an exact country name.

        Example:
            >>> data.resolve_slug("United States of America")
            'united-states'
        """
        return self.directory.resolve(name)

    # -------------------------------------------------------------------------
    # Per-country accessors
    # -------------------------------------------------------------------------

    def first_case(self, country: str) -> pd.DataFrame:
        """
        Get the first day a country reported a confirmed case.

        Args:
            country: Country slug (e.g. 'philippines') or exact country name

        Returns:
            One-row DataFrame with columns Country, Cases, Status, Date
            (empty if the API has no records)

        Raises:
            UnknownCountryError: If the country is not in the directory
        """
        slug = self._slug(country)
        endpoint = ENDPOINTS["day_one"].format(slug=slug)
        df = _project(self._fetch(endpoint), STATUS_COLUMNS, endpoint)
        return df.head(1)

    def cumulative_in_range(self, country: str, date_from: str, date_to: str) -> pd.DataFrame:
        """
        Get cumulative confirmed cases for a country between two dates.

        Dates are passed to the API as given (e.g. '2021-09-24'), with a
        midnight UTC suffix appended. They are not validated locally: a
        malformed date surfaces as an HttpStatusError or an empty result.

        Returns:
            DataFrame with columns Country, Cases, Status, Date
        """
        slug = self._slug(country)
        endpoint = ENDPOINTS["total_confirmed"].format(slug=slug)
        params = {"from": format_date(date_from), "to": format_date(date_to)}
        return _project(self._fetch(endpoint, params), STATUS_COLUMNS, endpoint)

    def variable_in_range(
        self,
        country: str,
        date_from: str,
        date_to: str,
        field: str,
    ) -> pd.DataFrame:
        """
        Get one variable for a country between two dates.

        Args:
            country: Country slug or exact country name
            date_from: Start date string, e.g. '2021-09-24'
            date_to: End date string, e.g. '2021-09-30'
            field: 'confirmed', 'deaths', 'recovered' or 'active'
                (case-insensitive)

        Returns:
            DataFrame with columns Country, <Field>, Date

        Raises:
            ValueError: If the field is not one of the supported variables
            UnknownCountryError: If the country is not in the directory
        """
        native = resolve_field(field)
        slug = self._slug(country)
        endpoint = ENDPOINTS["by_country"].format(slug=slug)
        params = {"from": format_date(date_from), "to": format_date(date_to)}
        return _project(self._fetch(endpoint, params), ["Country", native, "Date"], endpoint)

    def full_history(self, country: str) -> pd.DataFrame:
        """
        Get the complete daily history of a country with all native fields.

        Returns:
            DataFrame with the API's fields (Country, CountryCode, Province,
            City, CityCode, Lat, Lon, Confirmed, Deaths, Recovered, Active, Date)
        """
        slug = self._slug(country)
        endpoint = ENDPOINTS["total"].format(slug=slug)
        df = self._fetch(endpoint)
        if df.empty:
            _logger.warning(f"Empty response from {endpoint}")
        return df

    # -------------------------------------------------------------------------
    # Cross-country accessors
    # -------------------------------------------------------------------------

    def snapshot(self, names: List[str]) -> pd.DataFrame:
        """
        Compare the latest figures of several countries.

        Names are matched exactly against the Country field of the /summary
        response (not the directory), so they must use the summary's spelling.

        Args:
            names: Country names, e.g. ["Philippines", "China", "Mexico", "USA", "Canada"]

        Returns:
            DataFrame with columns Country, NewConfirmed, TotalConfirmed,
            NewDeaths, TotalDeaths, Date; one row per name, in input order

        Raises:
            ValueError: If `names` is empty
            UnknownCountryError: For the first name missing from the summary
        """
        names = [names] if isinstance(names, str) else list(names)
        if not names:
            raise ValueError("snapshot() needs at least one country name")

        endpoint = ENDPOINTS["summary"]
        payload = self.client.get(endpoint)
        if not isinstance(payload, dict) or not isinstance(payload.get("Countries"), list):
            raise ParseError(f"Response from {endpoint} has no 'Countries' list")

        summary = _project(_records_frame(payload["Countries"], endpoint), SNAPSHOT_COLUMNS, endpoint)
        by_name = summary.drop_duplicates(subset="Country", keep="first").set_index("Country", drop=False)

        missing = next((name for name in names if name not in by_name.index), None)
        if missing is not None:
            raise UnknownCountryError(missing, f"'{missing}' is not in the {endpoint} response")

        return by_name.loc[names, SNAPSHOT_COLUMNS].reset_index(drop=True)

    def history_dataset(self, countries: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Build the merged daily dataset for several countries.

        See pipeline.build_dataset().
        """
        return build_dataset(self, countries)
