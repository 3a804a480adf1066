"""
Load the FHIR JSON Schema and resolve `#/definitions/<Name>` references against it.

The schema document is treated as read-only once loaded: everything handed out
by `ReferenceResolver.resolve` is a deep copy, so callers are free to patch the
returned nodes while building Swagger output.
"""

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, Union

import yaml


Json = Union[dict[str, Any], list[Any], str, int, float, bool, None]
SchemaNode = dict[str, Any]

XHTML_TYPE = "xhtml"


class ResourceNotFoundError(RuntimeError):
    pass


class DanglingReferenceError(RuntimeError):
    pass


def load_document(path: Path) -> Json:
    suffix = path.suffix.lower()
    with path.open("r", encoding="utf-8") as f:
        if suffix in (".json",):
            return json.load(f)
        if suffix in (".yaml", ".yml"):
            return yaml.safe_load(f)
        # Try JSON as a last resort.
        return json.load(f)


def ref_target_name(ref: str) -> str:
    """
    Name a `$ref` points at: everything after the last '/'.
      "#/definitions/Identifier" -> "Identifier"
    """
    return ref[ref.rfind("/") + 1 :]


def property_ref(prop: Any) -> Optional[str]:
    """
    The `$ref` carried by a property node, looking through `items` for arrays.

    A property with `items` but no `items.$ref` (e.g. an array of enum strings)
    has no reference, even if it also carries a top-level `$ref`.
    """
    if not isinstance(prop, dict):
        return None
    items = prop.get("items")
    if items:
        ref = items.get("$ref") if isinstance(items, dict) else None
    else:
        ref = prop.get("$ref")
    return ref if isinstance(ref, str) and ref else None


class SchemaIndex:
    def __init__(self, document: Json, *, source: str = "<memory>") -> None:
        if not isinstance(document, dict):
            raise RuntimeError(f"FHIR schema {source} must be an object at the top-level.")
        definitions = document.get("definitions")
        if not isinstance(definitions, dict):
            raise RuntimeError(f"FHIR schema {source} is missing a 'definitions' object.")
        self.source = source
        self._document = document
        self._definitions: dict[str, Any] = definitions

    @classmethod
    def from_file(cls, path: Path) -> "SchemaIndex":
        try:
            doc = load_document(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise RuntimeError(f"Failed to load FHIR schema {path}: {e}") from e
        return cls(doc, source=str(path))

    @property
    def version(self) -> str:
        # "http://hl7.org/fhir/json-schema/4.0" -> "4.0"
        schema_id = self._document.get("id")
        if not isinstance(schema_id, str) or not schema_id:
            return ""
        return ref_target_name(schema_id)

    def names(self) -> list[str]:
        return list(self._definitions.keys())

    def lookup(self, name: str) -> Optional[SchemaNode]:
        node = self._definitions.get(name)
        return node if isinstance(node, dict) else None

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None


class ReferenceResolver:
    def __init__(self, index: SchemaIndex) -> None:
        self.index = index

    def resolve(self, ref: str) -> tuple[str, SchemaNode]:
        name = ref_target_name(ref)
        return name, self.resolve_name(name, context=f"$ref '{ref}'")

    def resolve_name(self, name: str, *, context: Optional[str] = None) -> SchemaNode:
        found = self.index.lookup(name)
        if found is None:
            where = f" (from {context})" if context else ""
            raise DanglingReferenceError(f"Definition '{name}'{where} not found in {self.index.source}.")

        node = deepcopy(found)
        # Swagger 2.0 ignores or rejects siblings next to $ref; keep the reference.
        if "$ref" in node:
            node.pop("description", None)
        if name == XHTML_TYPE:
            node["type"] = "string"
        return node
