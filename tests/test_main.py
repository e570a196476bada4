"""Tests for configuration loading and the command line run."""

import pytest
import requests

import main


class FakeClient:
    def __init__(self, listings=None, error=None):
        self.listings = listings or []
        self.error = error

    def fetch_all(self):
        if self.error:
            raise self.error
        return self.listings


LISTINGS = [
    {"id": "rec1", "title": "Town flat", "beds": 2, "price": 300000, "address": "St. Johns",
     "location": "St. Johns", "created_at": "2024-01-01"},
    {"id": "rec2", "title": "Harbour cottage", "beds": 3, "price": 600000, "sqft": 2000,
     "address": "Falmouth Harbour", "location": "Falmouth", "created_at": "2024-02-01"},
    {"id": "rec3", "title": "Marina villa", "beds": 4, "price": 800000, "sqft": 3200,
     "address": "English Harbour", "location": "English Harbour", "created_at": "2024-03-01"},
]


@pytest.fixture
def no_config_file(tmp_path, monkeypatch):
    monkeypatch.setattr(main, "CONFIG_PATH", tmp_path / "missing.yaml")
    for name in ("PROPERTY_TYPE", "SEARCH_BEDROOMS", "SEARCH_PRICE_RANGE", "SEARCH_LOCATION",
                 "MAX_LISTINGS", "TOP_MOVERS_LIMIT"):
        monkeypatch.delenv(name, raising=False)


def use_client(monkeypatch, client):
    monkeypatch.setattr(
        main.AirtableClient, "for_property_type", classmethod(lambda cls, property_type: client)
    )


def test_load_config_from_environment(no_config_file, monkeypatch):
    monkeypatch.setenv("SEARCH_BEDROOMS", "3")
    monkeypatch.setenv("SEARCH_PRICE_RANGE", "500000-1000000")
    monkeypatch.setenv("TOP_MOVERS_LIMIT", "3")

    config = main.load_config()

    assert config["property_type"] == "residential"
    assert config["bedrooms"] == "3"
    assert config["price_range"] == "500000-1000000"
    assert config["location"] == ""
    assert config["max_listings"] == 10
    assert config["top_movers_limit"] == 3


def test_load_config_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text('property_type: commercial\nlocation: harbour\nprice_range: "0-500000"\n')

    config = main.load_config(path)

    assert config["property_type"] == "commercial"
    assert config["location"] == "harbour"
    assert config["price_range"] == "0-500000"
    assert config["top_movers_limit"] == 5


@pytest.mark.parametrize(
    "config",
    [{"bedrooms": "three"}, {"price_range": "500000"}, {"price_range": "cheap-expensive"}],
)
def test_validate_config_rejects_malformed_criteria(config):
    with pytest.raises(ValueError):
        main.validate_config(config)


def test_validate_config_accepts_empty_and_valid_criteria():
    main.validate_config({"bedrooms": "", "price_range": "", "location": ""})
    main.validate_config({"bedrooms": "2", "price_range": "0-500000", "location": "bay"})


def test_format_listing():
    line = main.format_listing(LISTINGS[1])

    assert line == "Harbour cottage | $600,000 | 3 bd | $300/sqft"
    assert main.format_listing({"location": "jolly harbour"}) == "Jolly Harbour | Price on request"


def test_main_reports_filtered_listings(no_config_file, monkeypatch, capsys):
    monkeypatch.setenv("SEARCH_BEDROOMS", "3")
    monkeypatch.setenv("SEARCH_LOCATION", "harbour")
    use_client(monkeypatch, FakeClient(LISTINGS))

    assert main.main() == 0

    out = capsys.readouterr().out
    assert "After filtering: 2 listings match criteria" in out
    assert "Map: 2 listings placed, 0 without a known location" in out
    assert "1. Marina villa | $800,000" in out
    assert "Town flat" not in out
    assert "Total market value: $1,400,000" in out


def test_main_rejects_bad_price_range(no_config_file, monkeypatch, capsys):
    monkeypatch.setenv("SEARCH_PRICE_RANGE", "lots")
    use_client(monkeypatch, FakeClient(LISTINGS))

    assert main.main() == 1
    assert "Configuration error" in capsys.readouterr().out


def test_main_handles_fetch_errors(no_config_file, monkeypatch, capsys):
    use_client(monkeypatch, FakeClient(error=requests.ConnectionError("offline")))

    assert main.main() == 1
    assert "Error fetching listings: offline" in capsys.readouterr().out


def test_validate_config_rejects_non_text_location(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("location: 1234\n")
    config = main.load_config(path)

    with pytest.raises(ValueError, match="location"):
        main.validate_config(config)


def test_main_reports_non_text_location_as_configuration_error(tmp_path, monkeypatch, capsys):
    path = tmp_path / "config.yaml"
    path.write_text("location: 1234\n")
    monkeypatch.setattr(main, "CONFIG_PATH", path)
    use_client(monkeypatch, FakeClient(LISTINGS))

    assert main.main() == 1
    assert "Configuration error: location must be text" in capsys.readouterr().out
