"""
Turn FHIR SearchParameter definitions into Swagger 2.0 query parameters.

Two sources are supported:
  - the core SearchParameter bundle shipped with the FHIR spec
    (`{"entry": [{"resource": {...}}, ...]}`)
  - an implementation guide directory holding one `SearchParameter-*.json`
    file per parameter (used for profile-based generation)
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from fhir_schema import Json, load_document

SearchParameter = Dict[str, Any]
QueryParameter = Dict[str, Any]

MULTIPLE_RESOURCES_PREFIX = "Multiple Resources:"
PROFILE_PARAMETER = "_profile"


def snake_to_camel(name: str) -> str:
    # "general-practitioner" -> "generalPractitioner"
    return re.sub(r"[-_][a-z]", lambda m: m.group(0)[1].upper(), name)


def catalog_entries(bundle: Json) -> List[SearchParameter]:
    if not isinstance(bundle, dict):
        raise ValueError("Search parameter bundle must be an object at the top-level.")
    entries = bundle.get("entry")
    if not isinstance(entries, list):
        raise ValueError("Search parameter bundle is missing an 'entry' list.")
    resources: List[SearchParameter] = []
    for entry in entries:
        if isinstance(entry, dict) and isinstance(entry.get("resource"), dict):
            resources.append(entry["resource"])
    return resources


def load_catalog(path: Path) -> List[SearchParameter]:
    return catalog_entries(load_document(path))


def load_ig_search_parameters(profile_dir: Path) -> List[SearchParameter]:
    params: List[SearchParameter] = []
    for path in sorted(profile_dir.glob("SearchParameter-*.json")):
        doc = load_document(path)
        if isinstance(doc, dict):
            params.append(doc)
    return params


def _bases(entry: SearchParameter) -> List[str]:
    base = entry.get("base") or []
    return [base] if isinstance(base, str) else list(base)


def query_parameter(name: str, description: Optional[str]) -> QueryParameter:
    param: QueryParameter = {"name": name, "in": "query", "type": "string"}
    if description is not None:
        param["description"] = description
    return param


def _target_description(description: Optional[str], target: str) -> Optional[str]:
    if not description or not description.startswith(MULTIPLE_RESOURCES_PREFIX):
        return description
    # "Multiple Resources: \r\n\r\n* [Patient](patient.html): A patient identifier\r\n* ..."
    for line in re.split(r"\r?\n\* ", description):
        if line.startswith(f"[{target}]") and ":" in line:
            return line.split(":", 1)[1].strip()
    return description


def build_resource_chaining(entries: List[SearchParameter], target: str, prefix: str) -> List[QueryParameter]:
    params: List[QueryParameter] = []
    for entry in entries:
        if target not in _bases(entry) or entry.get("type") == "reference":
            continue
        params.append(
            query_parameter(f"{prefix}.{entry.get('name')}", _target_description(entry.get("description"), target))
        )
    return params


def _dedupe(params: List[QueryParameter]) -> List[QueryParameter]:
    # Swagger 2.0 requires unique (name, in) pairs per operation.
    seen: set[tuple[str, str]] = set()
    out: List[QueryParameter] = []
    for param in params:
        key = (str(param.get("name")), str(param.get("in")))
        if key in seen:
            continue
        seen.add(key)
        out.append(param)
    return out


def build_search_parameters(
    resource_type: str,
    entries: List[SearchParameter],
    *,
    chain_references: bool = False,
) -> List[QueryParameter]:
    params: List[QueryParameter] = []
    for entry in entries:
        name = entry.get("name")
        if not isinstance(name, str) or not name:
            continue
        bases = _bases(entry)
        if resource_type in bases or name.startswith("_"):
            params.append(query_parameter(name, entry.get("description")))

        if chain_references and resource_type in bases and entry.get("type") == "reference":
            for target in entry.get("target") or []:
                params.extend(build_resource_chaining(entries, target, f"{snake_to_camel(name)}:{target}"))
    return _dedupe(params)


def build_profile_search_parameters(
    profile: Dict[str, Any],
    entries: List[SearchParameter],
    ig_parameters: List[SearchParameter],
) -> List[QueryParameter]:
    params: List[QueryParameter] = []
    for entry in entries:
        if entry.get("name") != PROFILE_PARAMETER:
            continue
        param = query_parameter(PROFILE_PARAMETER, entry.get("description"))
        param["required"] = True
        if profile.get("url"):
            param["default"] = profile["url"]
        params.append(param)

    resource_type = profile.get("type")
    for entry in ig_parameters:
        if resource_type in _bases(entry) and isinstance(entry.get("name"), str):
            params.append(query_parameter(entry["name"], entry.get("description")))
    return _dedupe(params)
