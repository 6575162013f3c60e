"""
Country directory for the COVID-19 API

Loads the list of known countries and their API slugs once, then answers
name -> slug lookups from memory. The directory can also be written to and
restored from a YAML cache file for offline work and test fixtures.

Usage:
    >>> from covid19_api import Covid19APIClient, CountryDirectory
    >>> directory = CountryDirectory(client=Covid19APIClient())
    >>> directory.resolve("Philippines")
    'philippines'
    >>> directory.save("countries.yaml")
    >>> offline = CountryDirectory.from_file("countries.yaml")
"""

import logging
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Union

import pandas as pd
import yaml

from covid19_api.client import ParseError, UnknownCountryError
from covid19_api.config import ENDPOINTS

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Country:
    """A country as listed by the /countries endpoint"""
    name: str
    slug: str
    iso2: Optional[str] = None


def _parse_countries(payload: Any) -> List[Country]:
    """Convert a /countries response into Country records."""
    if not isinstance(payload, list):
        raise ParseError(
            f"Expected a list of countries, got {type(payload).__name__}"
        )

    countries = []
    for item in payload:
        if not isinstance(item, dict) or "Country" not in item or "Slug" not in item:
            raise ParseError(f"Malformed country entry: {item!r}")
        countries.append(
            Country(
                name=str(item["Country"]),
                slug=str(item["Slug"]),
                iso2=item.get("ISO2"),
            )
        )
    return countries


class CountryDirectory:
    """Cached lookup table of countries and their API slugs.

    The directory is loaded lazily on first use and is read-only afterwards;
    call reload() to refresh it from the API. Pass `countries` to build a
    fixed directory that never touches the network.

    Example:
        >>> directory = CountryDirectory(countries=[Country("Philippines", "philippines")])
        >>> directory.is_known_slug("philippines")
        True
    """

    def __init__(self, client=None, countries: Optional[Iterable[Country]] = None):
        if client is None and countries is None:
            raise ValueError("CountryDirectory needs either a client or a list of countries")
        self.client = client
        self._countries: Optional[FrozenSet[Country]] = None
        self._by_name: Dict[str, str] = {}
        self._slugs: FrozenSet[str] = frozenset()
        if countries is not None:
            self._install(countries)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    def _install(self, countries: Iterable[Country]) -> None:
        by_slug: Dict[str, Country] = {}
        for country in countries:
            by_slug.setdefault(country.slug, country)
        self._countries = frozenset(by_slug.values())
        self._by_name = {c.name: c.slug for c in sorted(by_slug.values(), key=lambda c: c.slug)}
        self._slugs = frozenset(by_slug)

    def load(self) -> FrozenSet[Country]:
        """Load the directory from the API unless it is already loaded.

        Returns:
            Set of known countries

        Raises:
            NetworkError, HttpStatusError: The endpoint could not be queried
            ParseError: The response is not a list of countries
        """
        if self._countries is not None:
            _logger.debug("Country directory already loaded")
            return self._countries
        return self.reload()

    def reload(self) -> FrozenSet[Country]:
        """Fetch the country list again and replace the cached directory."""
        if self.client is None:
            raise ValueError("This directory was built from a fixed country list and cannot reload")
        payload = self.client.get(ENDPOINTS["countries"])
        countries = _parse_countries(payload)
        self._install(countries)
        _logger.info(f"Loaded {len(self._slugs)} countries")
        return self._countries

    @property
    def countries(self) -> FrozenSet[Country]:
        return self.load()

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def resolve(self, name: str) -> str:
        """Return the slug for an exact, case-sensitive country name.

        Raises:
            UnknownCountryError: If the name is not in the directory
        """
        self.load()
        try:
            return self._by_name[name]
        except (KeyError, TypeError):
            raise UnknownCountryError(name) from None

    def is_known_slug(self, slug: str) -> bool:
        self.load()
        return slug in self._slugs

    def is_known_name(self, name: str) -> bool:
        self.load()
        return name in self._by_name

    def to_slug(self, country: str) -> str:
        """Accept either a known slug or a known country name and return the slug."""
        if self.is_known_slug(country):
            return country
        return self.resolve(country)

    def to_frame(self) -> pd.DataFrame:
        """Directory as a DataFrame with columns Country, Slug, ISO2."""
        rows = [
            {"Country": c.name, "Slug": c.slug, "ISO2": c.iso2}
            for c in self.load()
        ]
        df = pd.DataFrame(rows, columns=["Country", "Slug", "ISO2"])
        return df.sort_values(["Country", "Slug"]).reset_index(drop=True)

    def __len__(self) -> int:
        return len(self.load())

    def __contains__(self, name: str) -> bool:
        return self.is_known_name(name)

    # -------------------------------------------------------------------------
    # YAML cache
    # -------------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> Path:
        """Write the directory to a YAML cache file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        source = getattr(self.client, "base_url", None)
        data = {
            "metadata_version": "1.0",
            "synced_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "source": f"{source}{ENDPOINTS['countries']}" if source else "fixed",
            "total_countries": len(self.load()),
            "countries": [asdict(c) for c in sorted(self.load(), key=lambda c: c.name)],
        }
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)
        return path

    @classmethod
    def from_file(cls, path: Union[str, Path], client=None) -> "CountryDirectory":
        """Restore a directory saved with save().

        Args:
            path: YAML cache file
            client: Optional client, only needed if reload() will be called later

        Raises:
            ParseError: If the file is not a valid directory cache
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ParseError(f"Invalid YAML in {path}: {e}") from e

        entries = data.get("countries") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ParseError(f"{path} does not contain a 'countries' list")

        countries = []
        for entry in entries:
            if not isinstance(entry, dict) or "name" not in entry or "slug" not in entry:
                raise ParseError(f"Malformed country entry in {path}: {entry!r}")
            countries.append(Country(name=entry["name"], slug=entry["slug"], iso2=entry.get("iso2")))

        directory = cls(client=client, countries=countries)
        _logger.info(f"Loaded {len(countries)} countries from {path}")
        return directory
