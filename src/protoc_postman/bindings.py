from __future__ import annotations

from typing import List, Optional

from google.api import annotations_pb2, http_pb2
from google.protobuf import descriptor_pb2 as d2

from protoc_postman.descriptor_index import DescriptorIndex
from protoc_postman.errors import SelectorError
from protoc_postman.models import BODY_ALL, BODY_NONE, HTTP_VERBS, Binding

FDP = d2.FieldDescriptorProto


def http_rule(method: d2.MethodDescriptorProto) -> Optional[http_pb2.HttpRule]:
    """Return the google.api.http annotation of a method, or None when absent."""
    if not method.options.HasExtension(annotations_pb2.http):
        return None
    return method.options.Extensions[annotations_pb2.http]


def pattern_of(rule: http_pb2.HttpRule) -> Optional[Binding]:
    """Verb and path template of a rule, ignoring its body selector.

    Returns None for `custom` patterns or a rule without any pattern.
    """
    kind = rule.WhichOneof("pattern")
    if kind is None or kind.upper() not in HTTP_VERBS:
        return None
    return Binding(verb=kind.upper(), path=getattr(rule, kind))


class HttpBindingResolver:
    """Decides the (verb, path, body selector) bindings of each RPC method."""

    def __init__(self, index: DescriptorIndex):
        self.index = index

    def bindings(self, service: d2.ServiceDescriptorProto, method: d2.MethodDescriptorProto) -> List[Binding]:
        rule = http_rule(method)
        if rule is None:
            return [Binding(verb="POST", path=f"/{service.name}/{method.name}", body=BODY_ALL)]

        result: List[Binding] = []
        primary = pattern_of(rule)
        if primary is not None:
            result.append(Binding(primary.verb, primary.path, rule.body))

        # Additional bindings reuse the body selector of the outer rule.
        for extra in rule.additional_bindings:
            pattern = pattern_of(extra)
            if pattern is None:
                continue
            result.append(Binding(pattern.verb, pattern.path, rule.body))
        return result

    def body_type_name(self, method: d2.MethodDescriptorProto, binding: Binding) -> Optional[str]:
        """Qualified name of the message sent as the body of a binding.

        None means the binding carries no body.
        """
        if binding.body == BODY_NONE:
            return None
        input_type = self.index.resolve(method.input_type)
        if binding.body == BODY_ALL:
            return method.input_type

        for fd in input_type.field:
            if fd.name != binding.body:
                continue
            if fd.type != FDP.TYPE_MESSAGE:
                raise SelectorError(
                    f"body field '{binding.body}' of '{method.input_type}' is not a message field"
                )
            return fd.type_name

        raise SelectorError(
            f"body field '{binding.body}' not found in '{method.input_type}'. "
            f"Available fields: {[fd.name for fd in input_type.field]}"
        )
