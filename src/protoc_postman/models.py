from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

HTTP_VERBS: Tuple[str, ...] = ("GET", "PUT", "POST", "DELETE", "PATCH")

# Body selectors of a google.api.HttpRule
BODY_NONE = ""
BODY_ALL = "*"


def to_json_name(name: str) -> str:
    """Derive the JSON name protoc assigns to a field: foo_bar_baz -> fooBarBaz."""
    out = []
    upper_next = False
    for ch in name:
        if ch == "_":
            upper_next = True
        elif upper_next:
            out.append(ch.upper())
            upper_next = False
        else:
            out.append(ch)
    return "".join(out)


@dataclass(frozen=True)
class Header:
    key: str
    value: str


@dataclass(frozen=True)
class Binding:
    verb: str
    path: str
    body: str = BODY_NONE


@dataclass(frozen=True)
class BodyOptions:
    indent: str = "\t"
    enums_as_ints: bool = True
    max_depth: int = 32


@dataclass(frozen=True)
class Endpoint:
    base_url: str
    verb: str
    path: str
    body: str = ""
    headers: Tuple[Header, ...] = field(default_factory=tuple)
    service: str = ""
    method: str = ""
