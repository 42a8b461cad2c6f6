from __future__ import annotations

import os
import subprocess
import tempfile
from pathlib import Path
from typing import List, Sequence

from google.api import annotations_pb2  # noqa: F401  registers the google.api.http extension
from google.protobuf import descriptor_pb2 as d2
from google.protobuf.message import DecodeError

from protoc_postman.errors import SchemaLoadError

PROTO_EXTENSIONS = (".proto",)
# Picked up by directory scans; any other non-.proto file is read as a
# descriptor set only when passed explicitly.
DESCRIPTOR_SET_EXTENSIONS = (".pb", ".protoset", ".desc")


def compile_proto(proto_path: str, import_paths: Sequence[str]) -> d2.FileDescriptorSet:
    """Compile a .proto with protoc and return its descriptor set, imports included."""
    proto_path = os.path.abspath(proto_path)
    includes = [os.path.abspath(inc) for inc in import_paths if inc]
    # protoc rejects inputs outside every --proto_path; fall back to the file's directory
    if not any(proto_path.startswith(inc.rstrip(os.sep) + os.sep) for inc in includes):
        includes.append(os.path.dirname(proto_path))

    # de-dup while preserving order
    seen = set()
    inc_args: List[str] = []
    for inc in includes:
        if inc and inc not in seen:
            seen.add(inc)
            inc_args.extend(["-I", inc])

    with tempfile.TemporaryDirectory() as td:
        desc_path = os.path.join(td, "descriptor_set.pb")
        cmd = ["protoc", "--include_imports", f"--descriptor_set_out={desc_path}"] + inc_args + [proto_path]
        try:
            subprocess.run(cmd, check=True, capture_output=True)
        except FileNotFoundError as e:
            raise SchemaLoadError(
                "'protoc' not found. Please install Protocol Buffers compiler and ensure it is in PATH."
            ) from e
        except subprocess.CalledProcessError as e:
            raise SchemaLoadError(f"protoc failed: {e.stderr.decode('utf-8', errors='ignore')}") from e

        return read_descriptor_set(desc_path)


def read_descriptor_set(path: str) -> d2.FileDescriptorSet:
    """Parse an already compiled binary FileDescriptorSet."""
    fds = d2.FileDescriptorSet()
    try:
        fds.ParseFromString(Path(path).read_bytes())
    except OSError as e:
        raise SchemaLoadError(f"cannot read descriptor set '{path}': {e}") from e
    except DecodeError as e:
        raise SchemaLoadError(f"'{path}' is not a valid descriptor set: {e}") from e
    return fds


def _is_input(path: Path) -> bool:
    return path.suffix.lower() in PROTO_EXTENSIONS + DESCRIPTOR_SET_EXTENSIONS


def find_inputs(paths: Sequence[str]) -> List[str]:
    """Expand directories into their schema files; plain files keep the given order."""
    results: List[str] = []
    for p in paths:
        if os.path.isdir(p):
            # Sort for deterministic output
            results.extend(sorted(str(f) for f in Path(p).rglob("*") if f.is_file() and _is_input(f)))
        else:
            results.append(p)
    return results


def load_schema_set(path: str, import_paths: Sequence[str]) -> d2.FileDescriptorSet:
    if path.lower().endswith(PROTO_EXTENSIONS):
        return compile_proto(path, import_paths)
    return read_descriptor_set(path)


def load_schema_sets(paths: Sequence[str], import_paths: Sequence[str]) -> List[d2.FileDescriptorSet]:
    return [load_schema_set(p, import_paths) for p in find_inputs(paths)]
