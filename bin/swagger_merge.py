"""
Merge several generated Swagger 2.0 documents into one.

Every input keeps its own `basePath` by prefixing it onto its paths; the merged
document is served from `/`. Profile documents all share `basePath: "/"` and a
`GET /{type}` path, so callers pass an explicit prefix per document (the
profile id) to keep two profiles of the same base type apart.

Definitions with the same name are expected to be identical. `Extension` is
the exception: which `value[x]` properties keep their `$ref` depends on what
each traversal discovered first, so its properties are unioned, preferring a
`$ref` over the plain string fallback. For any other mismatch the first
document wins and a warning is printed.
"""

import sys
from copy import deepcopy
from typing import Any, Optional

TRAVERSAL_DEPENDENT_DEFINITIONS = frozenset({"Extension"})


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


def _join_base_path(base_path: Optional[str], path: str) -> str:
    base = (base_path or "").rstrip("/")
    return f"{base}{path}" if base else path


def _union_properties(kept: dict[str, Any], other: dict[str, Any]) -> None:
    kept_props = kept.setdefault("properties", {})
    for key, prop in (other.get("properties") or {}).items():
        current = kept_props.get(key)
        if current is None:
            kept_props[key] = deepcopy(prop)
        elif isinstance(prop, dict) and "$ref" in prop and "$ref" not in current:
            kept_props[key] = deepcopy(prop)


def merge_swagger_documents(
    docs: list[dict[str, Any]],
    *,
    prefixes: Optional[list[Optional[str]]] = None,
    title: str = "FHIRAPI",
    version: Optional[str] = None,
    description: str = "",
    host: Optional[str] = None,
) -> dict[str, Any]:
    if not docs:
        raise ValueError("Nothing to merge: no Swagger documents were provided.")
    if prefixes is not None and len(prefixes) != len(docs):
        raise ValueError(f"Expected {len(docs)} path prefixes, got {len(prefixes)}.")

    first = docs[0]
    merged: dict[str, Any] = {
        "swagger": "2.0",
        "info": {
            "title": title,
            "version": version if version is not None else first.get("info", {}).get("version", ""),
            "description": description,
        },
        "host": host if host is not None else first.get("host"),
        "basePath": "/",
        "produces": [],
        "definitions": {},
        "paths": {},
    }

    produces: list[str] = merged["produces"]
    definitions: dict[str, Any] = merged["definitions"]
    paths: dict[str, Any] = merged["paths"]
    security_definitions: dict[str, Any] = {}
    security: list[Any] = []

    for position, doc in enumerate(docs):
        source = doc.get("info", {}).get("title", "<untitled>")
        prefix = prefixes[position] if prefixes is not None else None

        for mime in doc.get("produces") or []:
            if mime not in produces:
                produces.append(mime)

        for name, schema in (doc.get("definitions") or {}).items():
            if name not in definitions:
                # Copied so unioning never writes back into an input document.
                definitions[name] = deepcopy(schema) if name in TRAVERSAL_DEPENDENT_DEFINITIONS else schema
            elif definitions[name] == schema:
                continue
            elif name in TRAVERSAL_DEPENDENT_DEFINITIONS and isinstance(schema, dict):
                _union_properties(definitions[name], schema)
            else:
                _eprint(f"warning: definition {name!r} from {source} differs from an earlier document; keeping the first.")

        for path, item in (doc.get("paths") or {}).items():
            full_path = _join_base_path(prefix, _join_base_path(doc.get("basePath"), path))
            if full_path in paths:
                raise RuntimeError(f"Path {full_path!r} from {source} conflicts with an earlier document.")
            paths[full_path] = item

        for name, scheme in (doc.get("securityDefinitions") or {}).items():
            security_definitions.setdefault(name, scheme)
        for requirement in doc.get("security") or []:
            if requirement not in security:
                security.append(requirement)

    if security_definitions:
        merged["securityDefinitions"] = security_definitions
    if security:
        merged["security"] = security
    return merged
