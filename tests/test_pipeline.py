"""Tests for the derived-metric pipeline."""

import pandas as pd
import pytest

from covid19_api import DuplicateKeyError, derive_daily, merge, to_case_records
from covid19_api.config import DATASET_COLUMNS


def history(make_history, country="Philippines", confirmed=(0, 0, 5, 5, 12), deaths=None):
    return pd.DataFrame(make_history(country, list(confirmed), deaths and list(deaths)))


def test_to_case_records_renames_and_parses(make_history):
    df = to_case_records(history(make_history))
    assert list(df.columns) == ["country", "date", "confirmed", "deaths", "recovered", "active"]
    assert df.loc[0, "date"] == pd.Timestamp("2021-09-01")
    assert df["date"].dt.tz is None


def test_to_case_records_requires_core_columns():
    with pytest.raises(KeyError):
        to_case_records(pd.DataFrame({"Country": ["Philippines"], "Date": ["2021-09-01"]}))


def test_to_case_records_does_not_modify_input(make_history):
    raw = history(make_history)
    before = raw.copy()
    to_case_records(raw)
    pd.testing.assert_frame_equal(raw, before)


def test_derive_daily_first_difference(make_history):
    df = derive_daily(history(make_history))
    assert df["new_cases"].tolist() == [0, 0, 5, 0, 7]


def test_derive_daily_reconstructs_cumulative(make_history):
    raw = history(make_history, confirmed=(3, 7, 7, 20, 21), deaths=(0, 1, 1, 2, 4))
    df = derive_daily(raw)

    assert df["new_cases"].cumsum().tolist() == df["confirmed"].tolist()
    assert df["new_deaths"].cumsum().tolist() == df["deaths"].tolist()
    assert df["new_cases"].sum() == 21
    assert df["new_deaths"].tolist() == [0, 1, 0, 1, 2]


def test_derive_daily_calendar_parts(make_history):
    df = derive_daily(history(make_history))
    assert df["year"].unique().tolist() == [2021]
    assert df["month"].unique().tolist() == [9]
    assert df["day"].tolist() == [1, 2, 3, 4, 5]


def test_derive_daily_empty():
    df = derive_daily(pd.DataFrame())
    assert df.empty
    assert list(df.columns) == DATASET_COLUMNS


def test_derive_daily_orders_by_date(make_history):
    raw = history(make_history).iloc[::-1]
    df = derive_daily(raw)
    assert df["new_cases"].tolist() == [0, 0, 5, 0, 7]


def test_derive_daily_differences_within_country(make_history):
    raw = pd.concat([
        history(make_history, "Philippines", (1, 2)),
        history(make_history, "Malaysia", (10, 15)),
    ])
    df = derive_daily(raw)
    by_country = df.set_index(["country", "day"])["new_cases"]
    assert by_country[("Malaysia", 1)] == 10
    assert by_country[("Malaysia", 2)] == 5
    assert by_country[("Philippines", 1)] == 1


def test_merge_disjoint_countries(make_history):
    ph = derive_daily(history(make_history, "Philippines"))
    my = derive_daily(history(make_history, "Malaysia", (1, 2, 3)))

    df = merge([ph, my])

    assert len(df) == len(ph) + len(my)
    assert df["country"].tolist() == ["Malaysia"] * 3 + ["Philippines"] * 5
    assert not df.duplicated(subset=["country", "date"]).any()
    assert df.index.tolist() == list(range(8))


def test_merge_shared_key_fails(make_history):
    ph = derive_daily(history(make_history, "Philippines"))
    overlap = derive_daily(history(make_history, "Philippines", (1, 2)))

    with pytest.raises(DuplicateKeyError) as excinfo:
        merge([ph, overlap])
    assert len(excinfo.value.keys) == 2
    assert excinfo.value.keys[0][0] == "Philippines"


def test_merge_nothing():
    df = merge([])
    assert df.empty
    assert list(df.columns) == DATASET_COLUMNS
