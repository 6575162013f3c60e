"""
Philippines vs. Neighbours Demo for covid19_api Python Package
==============================================================

This script walks through the accessors and the dataset pipeline:

- first_case: first confirmed case per country
- variable_in_range: one variable over a date window
- snapshot: latest cross-country comparison
- get_dataset: merged daily history with derived new cases/deaths
- filter_dataset / summary_statistics: tables for the report
"""

import logging

from covid19_api import (
    DEFAULT_COUNTRIES,
    UnknownCountryError,
    filter_dataset,
    first_case,
    get_dataset,
    snapshot,
    summary_statistics,
    to_wide,
    variable_in_range,
)


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 70)
    print("covid19_api Philippines Comparison Demo")
    print("=" * 70)

    # =========================================================================
    # 1. FIRST CASE
    # =========================================================================
    print("\n1. First confirmed case")
    for country in DEFAULT_COUNTRIES:
        print(first_case(country).to_string(index=False))

    # =========================================================================
    # 2. VARIABLE IN RANGE
    # =========================================================================
    print("\n2. Deaths in the Philippines, 24-30 September 2021")
    print(variable_in_range("philippines", "2021-09-24", "2021-09-30", "deaths").to_string())

    # =========================================================================
    # 3. SNAPSHOT
    # =========================================================================
    print("\n3. Snapshot")
    try:
        print(snapshot(["Philippines", "China", "Mexico", "Canada"]).to_string())
    except UnknownCountryError as e:
        print(f"Snapshot failed: {e}")

    # =========================================================================
    # 4. DATASET + STATISTICS
    # =========================================================================
    df = get_dataset(DEFAULT_COUNTRIES)
    print(f"\n4. Dataset shape: {df.shape}")

    week = filter_dataset(df, country="Philippines", year=2021, month=9, days=(24, 30))
    print(week[["country", "date", "new_cases", "new_deaths"]].to_string())

    print("\n--- New cases per country ---")
    print(summary_statistics(df, "new_cases").to_string())

    print("\n--- New deaths per country, 2021 ---")
    print(summary_statistics(filter_dataset(df, year=2021), "new_deaths").to_string())

    print("\n--- Wide format (last 5 days) ---")
    print(to_wide(df, "new_cases").tail().to_string())


if __name__ == "__main__":
    main()
