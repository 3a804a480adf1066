"""Tests for search parameter construction."""

from pathlib import Path
from typing import Any

import pytest

from conftest import FORMULARY_DRUG_PROFILE, SEARCH_PARAMETER_BUNDLE
from search_parameters import (
    build_profile_search_parameters,
    build_resource_chaining,
    build_search_parameters,
    catalog_entries,
    load_ig_search_parameters,
    snake_to_camel,
)


def _names(params: list[dict[str, Any]]) -> list[str]:
    return [p["name"] for p in params]


def test_snake_to_camel() -> None:
    assert snake_to_camel("general-practitioner") == "generalPractitioner"
    assert snake_to_camel("address_city") == "addressCity"
    assert snake_to_camel("family") == "family"


class TestCatalog:
    def test_entries_are_unwrapped(self) -> None:
        entries = catalog_entries(SEARCH_PARAMETER_BUNDLE)
        assert entries[0]["name"] == "_id"
        assert len(entries) == len(SEARCH_PARAMETER_BUNDLE["entry"])

    def test_rejects_non_bundle(self) -> None:
        with pytest.raises(ValueError, match="entry"):
            catalog_entries({"resourceType": "Bundle"})


class TestBuildSearchParameters:
    def test_resource_and_common_parameters(self, catalog: list[dict[str, Any]]) -> None:
        params = build_search_parameters("Patient", catalog)
        assert _names(params) == ["_id", "_profile", "family", "general-practitioner"]
        assert params[2] == {
            "name": "family",
            "in": "query",
            "type": "string",
            "description": "A portion of the family name",
        }

    def test_other_resource(self, catalog: list[dict[str, Any]]) -> None:
        assert _names(build_search_parameters("Observation", catalog)) == ["_id", "_profile", "code"]

    def test_chaining_is_off_by_default(self, catalog: list[dict[str, Any]]) -> None:
        params = build_search_parameters("Patient", catalog)
        assert not any(":" in name for name in _names(params))

    def test_chained_reference_parameters(self, catalog: list[dict[str, Any]]) -> None:
        params = build_search_parameters("Patient", catalog, chain_references=True)
        assert _names(params) == [
            "_id",
            "_profile",
            "family",
            "general-practitioner",
            "generalPractitioner:Practitioner.family",
            "generalPractitioner:Organization.name",
        ]

    def test_multiple_resources_description_is_narrowed(self, catalog: list[dict[str, Any]]) -> None:
        chained = build_resource_chaining(catalog, "Location", "location:Location")
        assert chained == [
            {
                "name": "location:Location.name",
                "in": "query",
                "type": "string",
                "description": "A portion of the location's name",
            }
        ]

    def test_chaining_skips_reference_parameters(self, catalog: list[dict[str, Any]]) -> None:
        chained = build_resource_chaining(catalog, "Organization", "org:Organization")
        assert _names(chained) == ["org:Organization.name"]

    def test_duplicate_names_collapse(self, catalog: list[dict[str, Any]]) -> None:
        catalog.append({"name": "_id", "base": ["DomainResource"], "type": "token"})
        assert _names(build_search_parameters("Patient", catalog)).count("_id") == 1


class TestProfileSearchParameters:
    def test_profile_parameter_and_ig_parameters(
        self, catalog: list[dict[str, Any]], schema_files: dict[str, Path]
    ) -> None:
        ig_params = load_ig_search_parameters(schema_files["profile_dir"])
        params = build_profile_search_parameters(FORMULARY_DRUG_PROFILE, catalog, ig_params)
        assert _names(params) == ["_profile", "DrugName"]
        profile_param = params[0]
        assert profile_param["required"] is True
        assert profile_param["default"] == FORMULARY_DRUG_PROFILE["url"]
        assert profile_param["description"] == "Profiles this resource claims to conform to"

    def test_ig_parameters_are_sorted_by_file(self, schema_files: dict[str, Path]) -> None:
        ig_params = load_ig_search_parameters(schema_files["profile_dir"])
        assert _names(ig_params) == ["DrugName", "identifier"]

    def test_missing_profile_dir_yields_nothing(self, tmp_path: Path) -> None:
        assert load_ig_search_parameters(tmp_path / "nowhere") == []
