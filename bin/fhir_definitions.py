"""
Build a self-contained Swagger `definitions` map for one FHIR resource.

Starting from the root resource's properties, every `#/definitions/...`
reference is resolved and copied into the output map, then the copied
definitions are walked in turn. The walk runs a fixed number of rounds rather
than to a fixed point, so references nested deeper than `rounds` levels below
the root's direct references are left dangling in the output.

Each property passes through a table of adaptation rules first. They patch the
places where the FHIR JSON Schema uses constructs Swagger 2.0 cannot express.
"""

from collections.abc import Iterator
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fhir_schema import (
    ReferenceResolver,
    ResourceNotFoundError,
    SchemaNode,
    property_ref,
    ref_target_name,
)


DEFAULT_ROUNDS = 3

EXTENSION_TYPE = "Extension"
PRIMITIVE_REF_TARGETS: frozenset[str] = frozenset({"string", "number", "boolean"})

Definitions = dict[str, SchemaNode]


class TagSet:
    """Insertion-ordered set of definition names already discovered."""

    def __init__(self) -> None:
        self._names: dict[str, None] = {}

    def add(self, name: str) -> bool:
        if name in self._names:
            return False
        self._names[name] = None
        return True

    def snapshot(self) -> list[str]:
        return list(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"TagSet({self.snapshot()!r})"


@dataclass
class PropertyContext:
    owner: str
    key: str
    properties: dict[str, Any]
    tags: TagSet
    definitions: Definitions

    @property
    def node(self) -> Any:
        return self.properties.get(self.key)

    def emitted_properties(self) -> dict[str, Any]:
        owner_def = self.definitions.get(self.owner)
        if isinstance(owner_def, dict) and isinstance(owner_def.get("properties"), dict):
            return owner_def["properties"]
        return self.properties


@dataclass(frozen=True)
class AdaptationRule:
    name: str
    matches: Callable[[str], bool]
    # Returns True when the property was removed and needs no further handling.
    apply: Callable[[PropertyContext], bool]
    owner: Optional[str] = None

    def applies_to(self, owner: str, key: str) -> bool:
        if self.owner is not None and self.owner != owner:
            return False
        return self.matches(key)


def _drop_const(ctx: PropertyContext) -> bool:
    node = ctx.node
    if isinstance(node, dict):
        node.pop("const", None)
        node["type"] = "string"
    return False


def _drop_property(ctx: PropertyContext) -> bool:
    ctx.properties.pop(ctx.key, None)
    return True


def _drop_emitted_property(ctx: PropertyContext) -> bool:
    ctx.emitted_properties().pop(ctx.key, None)
    ctx.properties.pop(ctx.key, None)
    return True


def _simplify_extension_value(ctx: PropertyContext) -> bool:
    node = ctx.emitted_properties().get(ctx.key)
    if not isinstance(node, dict):
        return False
    ref = node.get("$ref")
    if not isinstance(ref, str) or not ref:
        return False
    target = ref_target_name(ref)
    if target in PRIMITIVE_REF_TARGETS or target in ctx.tags:
        return False
    node["type"] = "string"
    del node["$ref"]
    return False


ADAPTATION_RULES: tuple[AdaptationRule, ...] = (
    AdaptationRule("resource-type-const", lambda key: key == "resourceType", _drop_const),
    AdaptationRule("contained", lambda key: key.lower().endswith("contained"), _drop_property),
    AdaptationRule("primitive-extension", lambda key: key.startswith("_"), _drop_emitted_property),
    AdaptationRule(
        "extension-value-choice",
        lambda key: key.startswith("value"),
        _simplify_extension_value,
        owner=EXTENSION_TYPE,
    ),
)


class DefinitionExpander:
    def __init__(
        self,
        resolver: ReferenceResolver,
        *,
        rounds: int = DEFAULT_ROUNDS,
        rules: tuple[AdaptationRule, ...] = ADAPTATION_RULES,
    ) -> None:
        if rounds < 0:
            raise ValueError(f"rounds must be non-negative (got {rounds}).")
        self.resolver = resolver
        self.rounds = rounds
        self.rules = rules

    def transform_property(
        self,
        owner: str,
        key: str,
        properties: dict[str, Any],
        tags: TagSet,
        definitions: Definitions,
    ) -> None:
        ctx = PropertyContext(owner=owner, key=key, properties=properties, tags=tags, definitions=definitions)
        for rule in self.rules:
            if rule.applies_to(owner, key) and rule.apply(ctx):
                return

        ref = property_ref(properties.get(key))
        if ref is None:
            return
        target = ref_target_name(ref)
        if not tags.add(target):
            return
        _name, resolved = self.resolver.resolve(ref)
        # The root (or anything emitted earlier) keeps its already patched copy.
        definitions.setdefault(target, resolved)

    def walk(self, owner: str, tags: TagSet, definitions: Definitions) -> None:
        node = definitions.get(owner)
        if not isinstance(node, dict):
            return
        properties = node.get("properties")
        if not isinstance(properties, dict):
            return
        # Rules delete keys while we iterate.
        for key in list(properties.keys()):
            if key in properties:
                self.transform_property(owner, key, properties, tags, definitions)

    def expand(self, root_name: str, root_node: SchemaNode) -> tuple[Definitions, TagSet]:
        definitions: Definitions = {root_name: deepcopy(root_node)}
        tags = TagSet()
        self.walk(root_name, tags, definitions)

        walked: set[str] = {root_name}
        for _ in range(self.rounds):
            pending = [name for name in tags.snapshot() if name not in walked]
            if not pending:
                break
            for name in pending:
                walked.add(name)
                self.walk(name, tags, definitions)
        return definitions, tags


def expand_resource(
    resolver: ReferenceResolver,
    root_name: str,
    *,
    rounds: int = DEFAULT_ROUNDS,
) -> tuple[Definitions, TagSet]:
    root_node = resolver.index.lookup(root_name)
    if root_node is None:
        raise ResourceNotFoundError(f"No FHIR resource found for {root_name} in {resolver.index.source}.")
    return DefinitionExpander(resolver, rounds=rounds).expand(root_name, root_node)
