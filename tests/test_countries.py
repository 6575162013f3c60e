"""Tests for the country directory."""

import pytest

from covid19_api import Country, CountryDirectory, ParseError, UnknownCountryError


def test_resolve_known_countries(directory):
    assert directory.resolve("Philippines") == "philippines"
    assert directory.resolve("United States of America") == "united-states"


def test_resolve_is_stable(directory):
    assert {directory.resolve("Malaysia") for _ in range(3)} == {"malaysia"}


@pytest.mark.parametrize("name", ["philippines", "PHILIPPINES", "Philippine", "", "Atlantis"])
def test_resolve_unknown_or_wrong_case(directory, name):
    with pytest.raises(UnknownCountryError) as excinfo:
        directory.resolve(name)
    assert excinfo.value.country == name


def test_unknown_country_is_lookup_error(directory):
    with pytest.raises(LookupError):
        directory.resolve("Atlantis")


def test_is_known_slug(directory):
    assert directory.is_known_slug("indonesia")
    assert not directory.is_known_slug("Indonesia")


def test_to_slug_accepts_name_or_slug(directory):
    assert directory.to_slug("united-states") == "united-states"
    assert directory.to_slug("United States of America") == "united-states"
    with pytest.raises(UnknownCountryError):
        directory.to_slug("usa")


def test_load_hits_network_once(fake_client):
    directory = CountryDirectory(client=fake_client)
    directory.resolve("Philippines")
    directory.is_known_slug("malaysia")
    directory.load()
    assert fake_client.endpoints() == ["/countries"]
    assert len(directory) == 4


def test_reload_refreshes(make_client):
    client = make_client()
    directory = CountryDirectory(client=client)
    directory.load()

    client.responses["/countries"] = [{"Country": "Viet Nam", "Slug": "vietnam", "ISO2": "VN"}]
    directory.reload()

    assert directory.resolve("Viet Nam") == "vietnam"
    assert not directory.is_known_slug("philippines")
    assert client.endpoints() == ["/countries", "/countries"]


@pytest.mark.parametrize("payload", [{"message": "oops"}, [{"Country": "Philippines"}], ["philippines"]])
def test_malformed_countries_response(make_client, payload):
    directory = CountryDirectory(client=make_client({"/countries": payload}))
    with pytest.raises(ParseError):
        directory.load()


def test_fixed_directory_cannot_reload(directory):
    with pytest.raises(ValueError):
        directory.reload()


def test_needs_client_or_countries():
    with pytest.raises(ValueError):
        CountryDirectory()


def test_duplicate_slugs_are_collapsed():
    directory = CountryDirectory(
        countries=[Country("Philippines", "philippines"), Country("Philippines", "philippines")]
    )
    assert len(directory) == 1


def test_to_frame_sorted_by_name(directory):
    df = directory.to_frame()
    assert list(df.columns) == ["Country", "Slug", "ISO2"]
    assert df["Country"].tolist() == sorted(df["Country"].tolist())


def test_yaml_cache(tmp_path, fake_client):
    directory = CountryDirectory(client=fake_client)
    path = directory.save(tmp_path / "cache" / "countries.yaml")

    restored = CountryDirectory.from_file(path)
    assert restored.countries == directory.countries
    assert restored.resolve("Indonesia") == "indonesia"
    assert "source: https://api.example.test/countries" in path.read_text(encoding="utf-8")
    assert "total_countries: 4" in path.read_text(encoding="utf-8")


def test_yaml_cache_malformed(tmp_path):
    path = tmp_path / "countries.yaml"
    path.write_text("countries:\n  - name: Philippines\n", encoding="utf-8")
    with pytest.raises(ParseError):
        CountryDirectory.from_file(path)
