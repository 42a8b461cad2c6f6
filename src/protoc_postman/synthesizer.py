from __future__ import annotations

import json
from typing import Any, Dict, Optional, Set, Tuple

from google.protobuf import descriptor_pb2 as d2

from protoc_postman.descriptor_index import DescriptorIndex
from protoc_postman.errors import UnsupportedFieldTypeError
from protoc_postman.models import BodyOptions, to_json_name

FDP = d2.FieldDescriptorProto

# Wire type -> JSON placeholder
SCALAR_DEFAULTS: Dict[int, Any] = {
    FDP.TYPE_DOUBLE: 0.0,
    FDP.TYPE_FLOAT: 0.0,
    FDP.TYPE_INT32: 0,
    FDP.TYPE_INT64: 0,
    FDP.TYPE_UINT32: 0,
    FDP.TYPE_UINT64: 0,
    FDP.TYPE_SINT32: 0,
    FDP.TYPE_SINT64: 0,
    FDP.TYPE_FIXED32: 0,
    FDP.TYPE_FIXED64: 0,
    FDP.TYPE_SFIXED32: 0,
    FDP.TYPE_SFIXED64: 0,
    FDP.TYPE_BOOL: False,
    FDP.TYPE_STRING: "",
    FDP.TYPE_BYTES: "",
}


def json_name_of(fd: d2.FieldDescriptorProto) -> str:
    if fd.HasField("json_name"):
        return fd.json_name
    return to_json_name(fd.name)


class BodySynthesizer:
    """Builds placeholder JSON request bodies from message descriptors.

    Every field is emitted under its JSON name with the zero value of its
    type. Message fields are expanded inline, once, even when repeated.

    Expansion is bounded three ways: a message already being expanded
    further up the tree becomes an empty object, a recursive message
    (one that can reach itself) is expanded at most once per body, and
    nesting never goes deeper than `options.max_depth`.
    """

    def __init__(self, index: DescriptorIndex, options: Optional[BodyOptions] = None):
        self.index = index
        self.options = options or BodyOptions()
        self._recursive: Dict[str, bool] = {}

    def synthesize(self, msg: d2.DescriptorProto, full_name: Optional[str] = None) -> Dict[str, Any]:
        if full_name is None:
            full_name = self.index.name_of(msg)
        ancestors: Tuple[str, ...] = (full_name,) if full_name else ()
        expanded: Set[str] = set(ancestors)
        return self._build(msg, ancestors, expanded)

    def is_recursive(self, full_name: str) -> bool:
        """Whether a message type can reach itself through its message fields."""
        if full_name not in self._recursive:
            self._recursive[full_name] = full_name in self._reachable_from(full_name)
        return self._recursive[full_name]

    def _reachable_from(self, full_name: str) -> Set[str]:
        reached: Set[str] = set()
        pending = [full_name]
        while pending:
            current = pending.pop()
            if current not in self.index:
                continue
            for fd in self.index.resolve(current).field:
                if fd.type == FDP.TYPE_MESSAGE and fd.type_name not in reached:
                    reached.add(fd.type_name)
                    pending.append(fd.type_name)
        return reached

    def _build(self, msg: d2.DescriptorProto, ancestors: Tuple[str, ...], expanded: Set[str]) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        for fd in msg.field:
            body[json_name_of(fd)] = self._value(fd, msg, ancestors, expanded)
        return body

    def _value(
        self,
        fd: d2.FieldDescriptorProto,
        owner: d2.DescriptorProto,
        ancestors: Tuple[str, ...],
        expanded: Set[str],
    ) -> Any:
        if fd.type == FDP.TYPE_MESSAGE:
            nested = self.index.resolve(fd.type_name)
            if fd.type_name in ancestors or len(ancestors) >= self.options.max_depth:
                return {}
            if self.is_recursive(fd.type_name):
                if fd.type_name in expanded:
                    return {}
                expanded.add(fd.type_name)
            return self._build(nested, ancestors + (fd.type_name,), expanded)
        if fd.type == FDP.TYPE_ENUM:
            if self.options.enums_as_ints:
                return 0
            enum = self.index.resolve_enum(fd.type_name)
            return enum.value[0].name if enum.value else 0
        if fd.type in SCALAR_DEFAULTS:
            return SCALAR_DEFAULTS[fd.type]
        raise UnsupportedFieldTypeError(
            f"Unsupported field type {FDP.Type.Name(fd.type)} for field '{fd.name}' in message '{owner.name}'"
        )

    def to_json(self, value: Any) -> str:
        return json.dumps(value, indent=self.options.indent)

    def json_body(self, full_name: str) -> str:
        """Resolve, synthesize and serialize the body for a qualified message name."""
        msg = self.index.resolve(full_name)
        return self.to_json(self.synthesize(msg, full_name))
