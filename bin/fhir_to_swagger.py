#!/usr/bin/env python3
"""
Generate Swagger 2.0 API definitions for FHIR resources.

For every resource name given on the command line, the FHIR JSON Schema
definition is dereferenced into a self-contained `definitions` map, the REST
paths and search parameters FHIR servers expose are added, and the result is
written to `<output>/<resource-lowercased>-output.json`.

Usage:
    python bin/fhir_to_swagger.py Patient Observation --output outputs
    python bin/fhir_to_swagger.py Patient Practitioner --combine --security
    python bin/fhir_to_swagger.py usdf-FormularyDrug --profile-dir schemas/Davinci-drug-formulary

With `--profile-dir`, each name is an implementation-guide profile id and is
read from `StructureDefinition-<id>.json` in that directory; its base FHIR type
drives the schema expansion and the IG's own SearchParameter files are used.

A resource that cannot be generated (unknown name, dangling `$ref`, unreadable
profile) is reported and skipped; the other resources are still written.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

import yaml

from fhir_definitions import DEFAULT_ROUNDS
from fhir_schema import ReferenceResolver, ResourceNotFoundError, SchemaIndex, load_document
from search_parameters import (
    SearchParameter,
    build_profile_search_parameters,
    build_search_parameters,
    load_catalog,
    load_ig_search_parameters,
)
from swagger_document import DEFAULT_HOST, build_profile_document, build_resource_document
from swagger_merge import merge_swagger_documents

DEFAULT_SCHEMA = Path("schemas") / "fhir.schema.json"
DEFAULT_SEARCH_PARAMETERS = Path("schemas") / "search-parameters.json"
DEFAULT_OUTPUT_DIR = Path("outputs")
COMBINED_NAME = "combined"


def _eprint(*args: object) -> None:
    print(*args, file=sys.stderr)


class _NoAliasDumper(yaml.SafeDumper):
    # Shared fragments would otherwise be emitted as &id001 anchors.
    def ignore_aliases(self, data: Any) -> bool:
        return True


def dump_document(doc: Any, *, fmt: str = "json", pretty: bool = True) -> str:
    if fmt == "yaml":
        return yaml.dump(doc, Dumper=_NoAliasDumper, sort_keys=False, allow_unicode=True)
    indent = 2 if pretty else None
    return json.dumps(doc, indent=indent, ensure_ascii=True, sort_keys=False) + ("\n" if indent else "")


def output_path(output_dir: Path, name: str, fmt: str) -> Path:
    suffix = "yaml" if fmt == "yaml" else "json"
    return output_dir / f"{name.lower()}-output.{suffix}"


def write_document(doc: Any, path: Path, *, fmt: str, pretty: bool) -> Path:
    path.write_text(dump_document(doc, fmt=fmt, pretty=pretty), encoding="utf-8")
    return path


def load_profile(profile_dir: Path, profile_id: str) -> dict[str, Any]:
    path = profile_dir / f"StructureDefinition-{profile_id}.json"
    if not path.exists():
        raise ResourceNotFoundError(f"No profile found for {profile_id} (expected {path}).")
    profile = load_document(path)
    if not isinstance(profile, dict):
        raise ValueError(f"Profile {path} must be an object at the top-level.")
    return profile


def _parse_args(argv: Optional[list[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Generate Swagger 2.0 definitions for FHIR resources from the FHIR JSON Schema."
    )
    p.add_argument(
        "resources",
        nargs="*",
        help="FHIR resource names (e.g. Patient), or profile ids when --profile-dir is given.",
    )
    p.add_argument(
        "-o",
        "--output",
        default=str(DEFAULT_OUTPUT_DIR),
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    p.add_argument(
        "--schema",
        default=str(DEFAULT_SCHEMA),
        help=f"Path to the FHIR JSON Schema (JSON or YAML, default: {DEFAULT_SCHEMA}).",
    )
    p.add_argument(
        "--search-parameters",
        default=str(DEFAULT_SEARCH_PARAMETERS),
        help=f"Path to the FHIR SearchParameter bundle (default: {DEFAULT_SEARCH_PARAMETERS}).",
    )
    p.add_argument(
        "--profile-dir",
        default=None,
        help=(
            "Implementation guide directory holding StructureDefinition-<id>.json and SearchParameter-*.json "
            "files. Resource names are then treated as profile ids."
        ),
    )
    p.add_argument(
        "--combine",
        action="store_true",
        help=f"Also merge all generated documents into {COMBINED_NAME}-output.json.",
    )
    p.add_argument(
        "--security",
        action="store_true",
        help="Add a Bearer (Authorization header) security definition.",
    )
    p.add_argument(
        "--chain-references",
        action="store_true",
        help="Expand reference search parameters into chained parameters (e.g. subject:Patient.name).",
    )
    p.add_argument(
        "--rounds",
        type=int,
        default=DEFAULT_ROUNDS,
        help="Number of dereferencing rounds after the root resource (default: %(default)s).",
    )
    p.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help="Value for the Swagger 'host' field (default: %(default)s).",
    )
    p.add_argument(
        "--format",
        choices=["json", "yaml"],
        default="json",
        help="Output format.",
    )
    p.add_argument(
        "--no-pretty",
        action="store_true",
        help="Emit compact JSON instead of pretty-printed output.",
    )
    p.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only print warnings and errors.",
    )
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    if not args.resources:
        _eprint(
            "error: no resource defined. Use the following pattern to invoke the tool:\n\n"
            "    fhir-to-swagger <ResourceName> [<ResourceName> ...] --output <OutputDirectory>"
        )
        return 2
    if args.rounds < 0:
        _eprint(f"error: --rounds must be non-negative (got {args.rounds}).")
        return 2

    def progress(msg: str) -> None:
        if not args.quiet:
            print(msg)

    try:
        index = SchemaIndex.from_file(Path(args.schema))
        catalog: list[SearchParameter] = load_catalog(Path(args.search_parameters))
        profile_dir = Path(args.profile_dir) if args.profile_dir else None
        ig_parameters = load_ig_search_parameters(profile_dir) if profile_dir else []
    except (RuntimeError, OSError, ValueError, yaml.YAMLError) as e:
        _eprint(f"error: {e}")
        return 1

    resolver = ReferenceResolver(index)
    output_dir = Path(args.output)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        _eprint(f"error: cannot create output directory {output_dir}: {e}")
        return 1

    pretty = not args.no_pretty
    generated: list[dict[str, Any]] = []
    generated_names: list[str] = []
    failed: list[str] = []

    requested = list(dict.fromkeys(args.resources))
    for name in requested:
        progress(f"generating {name}")
        try:
            if profile_dir is not None:
                profile = load_profile(profile_dir, name)
                doc = build_profile_document(
                    resolver,
                    name,
                    profile,
                    search_parameters=build_profile_search_parameters(profile, catalog, ig_parameters),
                    host=args.host,
                    rounds=args.rounds,
                    security=args.security,
                )
            else:
                doc = build_resource_document(
                    resolver,
                    name,
                    search_parameters=build_search_parameters(
                        name, catalog, chain_references=args.chain_references
                    ),
                    host=args.host,
                    rounds=args.rounds,
                    security=args.security,
                )
            written = write_document(doc, output_path(output_dir, name, args.format), fmt=args.format, pretty=pretty)
        except (RuntimeError, OSError, ValueError, yaml.YAMLError) as e:
            _eprint(f"error: skipping {name}: {e}")
            failed.append(name)
            continue
        generated.append(doc)
        generated_names.append(name)
        progress(f"wrote {written}")

    if args.combine and generated:
        try:
            # Profile documents all live at "/"; file each one under its profile id.
            prefixes = [f"/{n}" for n in generated_names] if profile_dir is not None else None
            merged = merge_swagger_documents(generated, prefixes=prefixes, host=args.host)
            written = write_document(
                merged, output_path(output_dir, COMBINED_NAME, args.format), fmt=args.format, pretty=pretty
            )
        except (RuntimeError, OSError) as e:
            _eprint(f"error: failed to combine outputs: {e}")
            return 1
        progress(f"wrote {written}")

    if failed:
        _eprint(f"warning: {len(failed)} of {len(requested)} resources failed: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
