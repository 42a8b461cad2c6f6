from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Sequence

from jinja2 import Environment, FileSystemLoader

from protoc_postman.models import Endpoint, Header

COLLECTION_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


def _get_template_env() -> Environment:
    template_dir = Path(__file__).parent.parent / "templates"
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        keep_trailing_newline=True,
    )
    # Keep header and URL keys in the order they are built
    env.policies["json.dumps_kwargs"] = {"sort_keys": False}
    return env


def _header(h: Header) -> Dict[str, str]:
    return {"key": h.key, "value": h.value, "type": "text", "name": h.key}


def path_segments(path: str) -> List[str]:
    """Split a path template on "/" outside of {...} variables."""
    segments: List[str] = []
    current = ""
    depth = 0
    for ch in path:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        if ch == "/" and depth == 0:
            if current:
                segments.append(current)
            current = ""
            continue
        current += ch
    if current:
        segments.append(current)
    return segments


def _url(endpoint: Endpoint) -> Dict[str, Any]:
    return {
        "raw": endpoint.base_url.rstrip("/") + endpoint.path,
        "host": [endpoint.base_url],
        "path": path_segments(endpoint.path),
    }


def build_item(endpoint: Endpoint) -> Dict[str, Any]:
    """View model of one collection item."""
    return {
        "name": f"{endpoint.service}/{endpoint.method}",
        "method": endpoint.verb,
        "headers": [_header(h) for h in endpoint.headers],
        "body": endpoint.body,
        "url": _url(endpoint),
    }


def build_collection(name: str, endpoints: Sequence[Endpoint]) -> Dict[str, Any]:
    return {
        "collection_id": "",
        "name": name,
        "schema": COLLECTION_SCHEMA,
        "items": [build_item(e) for e in endpoints],
    }


def render_collection(name: str, endpoints: Sequence[Endpoint]) -> str:
    """Render endpoints as a Postman v2.1 collection JSON document."""
    env = _get_template_env()
    template = env.get_template("collection.json.j2")
    return template.render(**build_collection(name, endpoints))

