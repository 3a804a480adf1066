"""Shared fixtures: a small FHIR-shaped JSON Schema and SearchParameter catalog."""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any

import pytest

from fhir_schema import ReferenceResolver, SchemaIndex


def _ref(name: str) -> dict[str, str]:
    return {"$ref": f"#/definitions/{name}"}


def _array_of(name: str) -> dict[str, Any]:
    return {"items": _ref(name), "type": "array"}


FHIR_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-06/schema#",
    "id": "http://hl7.org/fhir/json-schema/4.0",
    "description": "see http://hl7.org/fhir/json.html#schema for information about the FHIR Json Schemas",
    "definitions": {
        "Patient": {
            "description": "Demographics and other administrative information about an individual.",
            "properties": {
                "resourceType": {"description": "This is a Patient resource", "const": "Patient"},
                "id": _ref("id"),
                "language": _ref("code"),
                "text": _ref("Narrative"),
                "contained": _array_of("ResourceList"),
                "extension": _array_of("Extension"),
                "identifier": _array_of("Identifier"),
                "active": _ref("boolean"),
                "_active": _ref("Element"),
                "gender": {"enum": ["male", "female", "other", "unknown"]},
            },
            "additionalProperties": False,
            "required": ["resourceType"],
        },
        "MedicationKnowledge": {
            "description": "Information about a medication that is used to support knowledge.",
            "properties": {
                "resourceType": {"description": "This is a MedicationKnowledge resource", "const": "MedicationKnowledge"},
                "status": _ref("code"),
                "synonym": _array_of("string"),
            },
        },
        "id": {"pattern": "^[A-Za-z0-9\\-\\.]{1,64}$", "type": "string", "description": "Any combination of letters"},
        "boolean": {"pattern": "^true|false$", "type": "boolean", "description": "Value of 'true' or 'false'"},
        "string": {"pattern": "^[ \\r\\n\\t\\S]+$", "type": "string", "description": "A sequence of Unicode characters"},
        "uri": {"pattern": "^\\S*$", "type": "string", "description": "String of characters used to identify a name"},
        "code": {
            "description": "A string which has at least one character and no leading or trailing whitespace",
            "$ref": "#/definitions/string",
        },
        "xhtml": {"description": "xhtml - escaped html (see specfication)"},
        "Element": {
            "description": "Base definition for all elements in a resource.",
            "properties": {"id": _ref("string"), "extension": _array_of("Extension")},
        },
        "Narrative": {
            "description": "A human-readable summary of the resource.",
            "properties": {
                "status": {"enum": ["generated", "extensions", "additional", "empty"]},
                "div": _ref("xhtml"),
            },
        },
        "Extension": {
            "description": "Optional Extension Element - found in all resources.",
            "properties": {
                "url": _ref("uri"),
                "valueString": _ref("string"),
                "_valueString": _ref("Element"),
                "valueAddress": _ref("Address"),
                "valueIdentifier": _ref("Identifier"),
            },
        },
        "Address": {
            "description": "An address expressed using postal conventions.",
            "properties": {"city": _ref("string")},
        },
        "Identifier": {
            "description": "An identifier intended for computation.",
            "properties": {
                "system": _ref("uri"),
                "value": _ref("string"),
                "assigner": _ref("Reference"),
            },
        },
        "Reference": {
            "description": "A reference from one resource to another.",
            "properties": {
                "reference": _ref("string"),
                "identifier": _ref("Identifier"),
                "display": _ref("string"),
            },
        },
        "ResourceList": {"oneOf": [_ref("Patient"), _ref("MedicationKnowledge")]},
    },
}


SEARCH_PARAMETER_BUNDLE: dict[str, Any] = {
    "resourceType": "Bundle",
    "id": "searchParams",
    "type": "collection",
    "entry": [
        {"resource": {"name": "_id", "base": ["Resource"], "type": "token", "description": "Logical id of this artifact"}},
        {"resource": {"name": "_profile", "base": ["Resource"], "type": "uri", "description": "Profiles this resource claims to conform to"}},
        {
            "resource": {
                "name": "family",
                "base": ["Patient", "Practitioner"],
                "type": "string",
                "description": "A portion of the family name",
            }
        },
        {
            "resource": {
                "name": "general-practitioner",
                "base": ["Patient"],
                "type": "reference",
                "target": ["Practitioner", "Organization"],
                "description": "Patient's nominated general practitioner",
            }
        },
        {
            "resource": {
                "name": "name",
                "base": ["Organization", "Location"],
                "type": "string",
                "description": (
                    "Multiple Resources: \r\n\r\n"
                    "* [Organization](organization.html): A portion of the organization's name\r\n"
                    "* [Location](location.html): A portion of the location's name"
                ),
            }
        },
        {
            "resource": {
                "name": "partof",
                "base": ["Organization"],
                "type": "reference",
                "target": ["Organization"],
                "description": "An organization of which this organization forms a part",
            }
        },
        {"resource": {"name": "code", "base": ["Observation"], "type": "token", "description": "The code of the observation"}},
    ],
}


FORMULARY_DRUG_PROFILE: dict[str, Any] = {
    "resourceType": "StructureDefinition",
    "id": "usdf-FormularyDrug",
    "url": "http://hl7.org/fhir/us/Davinci-drug-formulary/StructureDefinition/usdf-FormularyDrug",
    "version": "1.0.0",
    "name": "FormularyDrug",
    "description": "Drug information which is part of a formulary.",
    "type": "MedicationKnowledge",
}


IG_SEARCH_PARAMETERS: dict[str, dict[str, Any]] = {
    "SearchParameter-usdf-DrugName.json": {
        "resourceType": "SearchParameter",
        "name": "DrugName",
        "base": ["MedicationKnowledge"],
        "type": "string",
        "description": "Search for a drug by name",
    },
    "SearchParameter-usdf-PlanID.json": {
        "resourceType": "SearchParameter",
        "name": "identifier",
        "base": ["InsurancePlan"],
        "type": "token",
        "description": "Search for a plan by identifier",
    },
}


def write_json(path: Path, doc: Any) -> Path:
    path.write_text(json.dumps(doc), encoding="utf-8")
    return path


@pytest.fixture
def fhir_schema() -> dict[str, Any]:
    return deepcopy(FHIR_SCHEMA)


@pytest.fixture
def schema_index(fhir_schema: dict[str, Any]) -> SchemaIndex:
    return SchemaIndex(fhir_schema, source="fhir.schema.json")


@pytest.fixture
def resolver(schema_index: SchemaIndex) -> ReferenceResolver:
    return ReferenceResolver(schema_index)


@pytest.fixture
def catalog() -> list[dict[str, Any]]:
    return [deepcopy(e["resource"]) for e in SEARCH_PARAMETER_BUNDLE["entry"]]


@pytest.fixture
def schema_files(tmp_path: Path) -> dict[str, Path]:
    schemas = tmp_path / "schemas"
    schemas.mkdir()
    profiles = schemas / "Davinci-drug-formulary"
    profiles.mkdir()
    write_json(profiles / "StructureDefinition-usdf-FormularyDrug.json", FORMULARY_DRUG_PROFILE)
    for name, doc in IG_SEARCH_PARAMETERS.items():
        write_json(profiles / name, doc)
    return {
        "schema": write_json(schemas / "fhir.schema.json", FHIR_SCHEMA),
        "search_parameters": write_json(schemas / "search-parameters.json", SEARCH_PARAMETER_BUNDLE),
        "profile_dir": profiles,
        "output": tmp_path / "outputs",
    }
