"""
Configuration for the COVID-19 API
==================================

API endpoint templates, column schemas, and default comparison countries.

This module provides both:
1. Hardcoded defaults for the public covid19api.com service
2. Support for overriding settings from a YAML file

The YAML file is optional - hardcoded values are used whenever it is absent.
"""

from typing import Any, Dict, List, Optional
import os

import yaml


# ============================================================================
# API Configuration
# ============================================================================

COVID19_API_BASE_URL = "https://api.covid19api.com"
DEFAULT_TIMEOUT = 60
USER_AGENT = "covid19data/0.1.0"

# Environment variable pointing at a YAML settings file
CONFIG_ENV_VAR = "COVID19_API_CONFIG"


# ============================================================================
# Endpoints
# ============================================================================

ENDPOINTS = {
    "countries": "/countries",
    "day_one": "/dayone/country/{slug}/status/confirmed",
    "total_confirmed": "/total/country/{slug}/status/confirmed",
    "by_country": "/country/{slug}",
    "summary": "/summary",
    "total": "/total/country/{slug}",
}

# Dates are sent as midnight UTC timestamps
DATE_SUFFIX = "T00:00:00Z"


# ============================================================================
# Column Schemas
# ============================================================================

# Projection of the /dayone and /total .../status/confirmed responses
STATUS_COLUMNS = ["Country", "Cases", "Status", "Date"]

# Projection of the /summary response
SNAPSHOT_COLUMNS = [
    "Country",
    "NewConfirmed",
    "TotalConfirmed",
    "NewDeaths",
    "TotalDeaths",
    "Date",
]

# Fields selectable through variable_in_range(), keyed by lowercase alias
VARIABLE_FIELDS = {
    "confirmed": "Confirmed",
    "deaths": "Deaths",
    "recovered": "Recovered",
    "active": "Active",
}

# Native /total/country/{slug} fields -> CaseRecord columns
CASE_RECORD_COLUMNS = {
    "Country": "country",
    "Date": "date",
    "Confirmed": "confirmed",
    "Deaths": "deaths",
    "Recovered": "recovered",
    "Active": "active",
}

DERIVED_COLUMNS = ["new_cases", "new_deaths", "year", "month", "day"]

DATASET_COLUMNS = list(CASE_RECORD_COLUMNS.values()) + DERIVED_COLUMNS


# ============================================================================
# Comparison Countries
# ============================================================================

# The Philippines and two of its neighbours
DEFAULT_COUNTRIES = ["Philippines", "Indonesia", "Malaysia"]


# ============================================================================
# Helper Functions
# ============================================================================

def resolve_field(field: str) -> str:
    """
    Map a field name onto the native API field it selects.

    Args:
        field: Alias such as 'deaths' or a native name such as 'Deaths'

    Returns:
        Native field name

    Raises:
        ValueError: If the field is not part of the schema

    Example:
        >>> resolve_field('recovered')
        'Recovered'
    """
    key = str(field).lower()
    if key in VARIABLE_FIELDS:
        return VARIABLE_FIELDS[key]
    raise ValueError(
        f"Unknown field '{field}'. Choose one of: {sorted(VARIABLE_FIELDS.values())}"
    )


def format_date(date: str) -> str:
    """Append the midnight UTC suffix to an opaque date string."""
    return f"{date}{DATE_SUFFIX}"


def _load_settings_file(path: str) -> Dict[str, Any]:
    """Load the settings mapping from YAML, or {} if the file is missing."""
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def get_settings(path: Optional[str] = None) -> Dict[str, Any]:
    """Get client settings, preferring values from a YAML file if available.

    Args:
        path: Settings file. Defaults to the file named by COVID19_API_CONFIG.

    Returns:
        Dictionary with base_url, timeout, user_agent and default_countries

    Example:
        >>> settings = get_settings()
        >>> settings['base_url']
        'https://api.covid19api.com'
    """
    settings = {
        "base_url": COVID19_API_BASE_URL,
        "timeout": DEFAULT_TIMEOUT,
        "user_agent": USER_AGENT,
        "default_countries": list(DEFAULT_COUNTRIES),
    }

    path = path or os.environ.get(CONFIG_ENV_VAR)
    if path:
        overrides = _load_settings_file(path)
        for key in settings:
            if key in overrides:
                settings[key] = overrides[key]

    settings["base_url"] = str(settings["base_url"]).rstrip("/")
    return settings


def get_default_countries(path: Optional[str] = None) -> List[str]:
    """Names of the countries compared by default."""
    return list(get_settings(path)["default_countries"])
