from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from protoc_postman.assembler import assemble
from protoc_postman.errors import ConversionError, SchemaLoadError
from protoc_postman.exporter.postman_collection import render_collection
from protoc_postman.loader import find_inputs, load_schema_sets
from protoc_postman.models import BodyOptions, Header


def parse_headers(values: Sequence[str]) -> List[Header]:
    """Parse `Key:Value[,Key:Value...]` strings into headers.

    Only the first ':' separates key and value, so values such as URLs
    keep their colons. Empty entries are ignored.
    """
    headers: List[Header] = []
    for value in values:
        for item in value.split(","):
            if not item.strip():
                continue
            key, sep, val = item.partition(":")
            if not sep or not key.strip():
                raise ValueError(f"header format is wrong: '{item}'. Expected HeaderName:HeaderValue")
            headers.append(Header(key=key.strip(), value=val.strip()))
    return headers


def parse_import_paths(values: Sequence[str]) -> List[str]:
    paths: List[str] = []
    for value in values:
        paths.extend(os.path.abspath(p) for p in value.split(",") if p)
    return paths


def run(
    inputs: Sequence[str],
    import_paths: Sequence[str],
    name: str = "",
    base_url: str = "",
    headers: Sequence[Header] = (),
    out: Optional[str] = None,
    options: Optional[BodyOptions] = None,
) -> str:
    """Main pipeline: load descriptors, resolve endpoints, render the collection.

    Returns the rendered collection; it is also written to `out` when given.
    """
    files = find_inputs(inputs)
    if not files:
        raise SchemaLoadError(f"No .proto or descriptor set files found under {', '.join(inputs)}")
    print(f"Found {len(files)} input file(s)", file=sys.stderr)

    schema_sets = load_schema_sets(files, import_paths)
    for f, fds in zip(files, schema_sets):
        print(f"  Loaded {f}: {len(fds.file)} file descriptor(s)", file=sys.stderr)

    endpoints = assemble(schema_sets, base_url, headers, options)
    print(f"Resolved {len(endpoints)} endpoint(s)", file=sys.stderr)

    collection = render_collection(name, endpoints)
    if out:
        out_dir = os.path.dirname(out)
        if out_dir:
            os.makedirs(out_dir, exist_ok=True)
        Path(out).write_text(collection, encoding="utf-8")
        print(f"Generated: {out}", file=sys.stderr)
    return collection


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(
        description="Generate a Postman collection from .proto files or compiled descriptor sets",
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help=".proto files, descriptor set files (.pb, .protoset) or directories to scan",
    )
    parser.add_argument("-n", "--name", default="", help="Collection name")
    parser.add_argument(
        "-i",
        "--import-path",
        action="append",
        default=[],
        help="Comma-separated proto import directories (default: current directory)",
    )
    parser.add_argument("-b", "--base-url", default="", help="Request base URL, e.g. https://example.com")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        help="Request headers, e.g. -H Content-Type:application/json,X-Api-Key:ABC",
    )
    parser.add_argument("-o", "--out", required=False, help="Write the collection to this file instead of stdout")
    parser.add_argument(
        "--enum-names",
        action="store_true",
        help="Emit the zero-value name of enum fields instead of 0",
    )
    parser.add_argument(
        "--indent",
        type=int,
        required=False,
        help="Indent request bodies with this many spaces (default: tab)",
    )
    args = parser.parse_args(argv)

    try:
        headers = parse_headers(args.header)
    except ValueError as e:
        parser.error(str(e))

    import_paths = parse_import_paths(args.import_path) or [os.getcwd()]
    options = BodyOptions(
        indent="\t" if args.indent is None else " " * args.indent,
        enums_as_ints=not args.enum_names,
    )

    try:
        collection = run(
            args.inputs,
            import_paths,
            name=args.name,
            base_url=args.base_url,
            headers=headers,
            out=args.out,
            options=options,
        )
    except (ConversionError, SchemaLoadError) as e:
        print(f"FATAL: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.out:
        sys.stdout.write(collection)


if __name__ == "__main__":
    main()
