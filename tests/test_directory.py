import pytest

from shelf_inventory.directory import LibraryDirectory, LocationDirectory


def test_default_tables_load_from_package_data():
    libraries = LibraryDirectory.load_default()
    locations = LocationDirectory.load_default()
    assert "12" in libraries
    assert len(libraries) > 1000
    assert len(locations) > 10


def test_prefix_match_returns_owning_library(libraries):
    assert libraries.match_prefix("103500012345") == ("35", "Harbour Branch")
    assert libraries.match_prefix("999900012345") is None


def test_custom_library_is_visible_to_next_lookup(libraries):
    assert libraries.match_prefix("999988887777") is None
    libraries.add("8999", "Mobile Library")
    assert libraries.match_prefix("999988887777") == ("8999", "Mobile Library")
    assert libraries.name_for("8999") == "Mobile Library"


def test_library_codes_must_be_numeric(libraries):
    with pytest.raises(ValueError):
        libraries.add("X1", "Broken")


def test_custom_location_overrides_name(locations):
    locations.add("GEN", "Main Stacks")
    assert locations.name_for("GEN") == "Main Stacks"


def test_override_csv_path(tmp_path):
    path = tmp_path / "libraries.csv"
    path.write_text("code,name\n7,Seaside Library\n", encoding="utf-8")
    libraries = LibraryDirectory.load_default(path)
    assert libraries.items() == [("7", "Seaside Library")]
