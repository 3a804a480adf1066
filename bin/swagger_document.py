"""
Assemble Swagger 2.0 documents for FHIR resources.

The definitions come from `fhir_definitions.expand_resource` plus the pinned
fragments in `fhir_fragments`; this module adds the info block, the REST paths
FHIR servers expose for a resource type (CRUD, search, history), and the
optional Bearer security scheme.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fhir_definitions import DEFAULT_ROUNDS, expand_resource
from fhir_fragments import append_static_definitions
from fhir_schema import ReferenceResolver, ResourceNotFoundError
from search_parameters import QueryParameter

SwaggerDoc = Dict[str, Any]

DEFAULT_HOST = "hapi.fhir.org"
OPERATION_OUTCOME = "OperationOutcome"
BUNDLE = "Bundle"

PRODUCES: List[str] = [
    "application/json",
    "application/xml",
    "application/fhir+xml",
    "application/fhir+json",
]

PROFILE_PRODUCES: List[str] = [
    "text/plain",
    "application/json",
    "application/fhir+json",
    "application/json+fhir",
    "text/json",
    "application/xml",
    "application/fhir+xml",
    "application/xml+fhir",
    "text/xml",
    "text/xml+fhir",
    "application/octet-stream",
]

SECURITY_DEFINITIONS: Dict[str, Any] = {
    "Bearer": {
        "name": "Authorization",
        "in": "header",
        "type": "apiKey",
        "description": "Authorization header using the Bearer scheme. Example :: 'Authorization: Bearer {token}'",
    },
}

HISTORY_PARAMETERS: List[QueryParameter] = [
    {"name": "_since", "in": "query", "type": "string"},
    {"name": "_count", "in": "query", "type": "string"},
]


def _schema_ref(name: str) -> Dict[str, str]:
    return {"$ref": f"#/definitions/{name}"}


def _response(description: str, element: Optional[str]) -> Dict[str, Any]:
    out: Dict[str, Any] = {"description": description}
    if element:
        out["schema"] = _schema_ref(element)
    return out


def get_response(success: Optional[str], error400: Optional[str], error500: Optional[str]) -> Dict[str, Any]:
    return {
        "200": _response("Success", success),
        "400": _response("Unexpected Error", error400),
        "500": _response("Unexpected Error", error500),
        "default": _response("Unexpected Error", error500),
    }


def _path_parameter(name: str) -> Dict[str, Any]:
    return {"name": name, "in": "path", "type": "string", "required": True}


def _body_parameter(resource_type: str) -> Dict[str, Any]:
    return {"name": "body", "in": "body", "schema": _schema_ref(resource_type)}


def build_paths(resource_type: str, search_parameters: List[QueryParameter]) -> Dict[str, Any]:
    tags = [resource_type]
    op_out = OPERATION_OUTCOME
    history = [dict(p) for p in HISTORY_PARAMETERS]

    return {
        f"/{resource_type}": {
            "post": {
                "tags": tags,
                "parameters": [_body_parameter(resource_type)],
                "responses": get_response(resource_type, op_out, op_out),
            },
            "get": {
                "tags": tags,
                "parameters": list(search_parameters),
                "responses": get_response(BUNDLE, op_out, op_out),
            },
        },
        f"/{resource_type}/{{id}}": {
            "parameters": [_path_parameter("id")],
            "get": {
                "tags": tags,
                "parameters": [],
                "responses": get_response(resource_type, op_out, op_out),
            },
            "put": {
                "tags": tags,
                "parameters": [_body_parameter(resource_type)],
                "responses": get_response(resource_type, op_out, op_out),
            },
            "delete": {
                "tags": tags,
                "parameters": [],
                "responses": get_response(op_out, op_out, op_out),
            },
        },
        f"/{resource_type}/_history": {
            "get": {
                "tags": tags,
                "parameters": history,
                "responses": get_response(BUNDLE, op_out, op_out),
            },
        },
        f"/{resource_type}/{{id}}/_history": {
            "get": {
                "tags": tags,
                "parameters": [_path_parameter("id")] + [dict(p) for p in HISTORY_PARAMETERS],
                "responses": get_response(BUNDLE, op_out, op_out),
            },
        },
        f"/{resource_type}/{{id}}/_history/{{vid}}": {
            "get": {
                "tags": tags,
                "parameters": [_path_parameter("id"), _path_parameter("vid")],
                "responses": get_response(resource_type, op_out, op_out),
            },
        },
    }


def build_profile_paths(profile_id: str, profile: Dict[str, Any], search_parameters: List[QueryParameter]) -> Dict[str, Any]:
    resource_type = profile["type"]
    return {
        f"/{resource_type}": {
            "get": {
                "tags": [profile.get("name") or profile_id],
                "summary": f"Get {profile_id}",
                "parameters": list(search_parameters),
                "responses": get_response(BUNDLE, OPERATION_OUTCOME, OPERATION_OUTCOME),
            },
        },
    }


def apply_security(doc: SwaggerDoc) -> SwaggerDoc:
    doc["securityDefinitions"] = {k: dict(v) for k, v in SECURITY_DEFINITIONS.items()}
    doc["security"] = [{"Bearer": []}]
    return doc


def _definitions_for(resolver: ReferenceResolver, resource_type: str, rounds: int) -> Dict[str, Any]:
    definitions, _tags = expand_resource(resolver, resource_type, rounds=rounds)
    return append_static_definitions(definitions)


def build_resource_document(
    resolver: ReferenceResolver,
    resource_type: str,
    *,
    search_parameters: List[QueryParameter],
    host: str = DEFAULT_HOST,
    rounds: int = DEFAULT_ROUNDS,
    security: bool = False,
) -> SwaggerDoc:
    root = resolver.index.lookup(resource_type)
    if root is None:
        raise ResourceNotFoundError(f"No FHIR resource found for {resource_type} in {resolver.index.source}.")

    doc: SwaggerDoc = {
        "swagger": "2.0",
        "info": {
            "title": f"{resource_type}FHIRAPI",
            "version": resolver.index.version,
            "description": root.get("description", ""),
        },
        "host": host,
        "basePath": f"/{resource_type.lower()}-api",
        "produces": list(PRODUCES),
        "definitions": _definitions_for(resolver, resource_type, rounds),
        "paths": build_paths(resource_type, search_parameters),
    }
    if security:
        apply_security(doc)
    return doc


def build_profile_document(
    resolver: ReferenceResolver,
    profile_id: str,
    profile: Dict[str, Any],
    *,
    search_parameters: List[QueryParameter],
    host: str = DEFAULT_HOST,
    rounds: int = DEFAULT_ROUNDS,
    security: bool = False,
) -> SwaggerDoc:
    resource_type = profile.get("type")
    if not isinstance(resource_type, str) or not resource_type:
        raise ResourceNotFoundError(f"Profile {profile_id} does not declare a base FHIR 'type'.")

    doc: SwaggerDoc = {
        "swagger": "2.0",
        "info": {
            "title": f"{profile_id}FHIRAPI",
            "version": profile.get("version", ""),
            "description": profile.get("description", ""),
        },
        "host": host,
        "basePath": "/",
        "produces": list(PROFILE_PRODUCES),
        "definitions": _definitions_for(resolver, resource_type, rounds),
        "paths": build_profile_paths(profile_id, profile, search_parameters),
    }
    if security:
        apply_security(doc)
    return doc
