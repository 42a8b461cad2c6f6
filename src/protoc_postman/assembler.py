from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from google.protobuf import descriptor_pb2 as d2

from protoc_postman.bindings import HttpBindingResolver
from protoc_postman.descriptor_index import DescriptorIndex, qualify
from protoc_postman.errors import ConversionError
from protoc_postman.models import BodyOptions, Endpoint, Header
from protoc_postman.synthesizer import BodySynthesizer


class EndpointAssembler:
    """Walks files, services and methods in declaration order and emits endpoints."""

    def __init__(
        self,
        schema_sets: Iterable[d2.FileDescriptorSet],
        base_url: str,
        headers: Sequence[Header] = (),
        options: Optional[BodyOptions] = None,
    ):
        self.index = DescriptorIndex(schema_sets)
        self.synthesizer = BodySynthesizer(self.index, options)
        self.resolver = HttpBindingResolver(self.index)
        self.base_url = base_url
        self.headers = tuple(headers)

    def assemble(self) -> List[Endpoint]:
        endpoints: List[Endpoint] = []
        for proto_file in self.index.files():
            for service in proto_file.service:
                for method in service.method:
                    endpoints.extend(self.endpoints_for(proto_file, service, method))
        return endpoints

    def endpoints_for(
        self,
        proto_file: d2.FileDescriptorProto,
        service: d2.ServiceDescriptorProto,
        method: d2.MethodDescriptorProto,
    ) -> List[Endpoint]:
        """Endpoints of a single method, one per HTTP binding.

        Any ConversionError is re-raised as the same type, prefixed with
        the service and method that caused it.
        """
        location = f"{qualify(proto_file.package, service.name)[1:]}/{method.name}"
        try:
            # The input type must resolve even when no binding sends a body.
            self.index.resolve(method.input_type)
            endpoints = []
            for binding in self.resolver.bindings(service, method):
                body_type = self.resolver.body_type_name(method, binding)
                body = self.synthesizer.json_body(body_type) if body_type is not None else ""
                endpoints.append(
                    Endpoint(
                        base_url=self.base_url,
                        verb=binding.verb,
                        path=binding.path,
                        body=body,
                        headers=self.headers,
                        service=service.name,
                        method=method.name,
                    )
                )
            return endpoints
        except ConversionError as e:
            raise type(e)(f"{location}: {e}") from e


def assemble(
    schema_sets: Iterable[d2.FileDescriptorSet],
    base_url: str,
    headers: Sequence[Header] = (),
    options: Optional[BodyOptions] = None,
) -> List[Endpoint]:
    """Resolve every RPC method of the schema sets into HTTP endpoints.

    Fails on the first unresolvable type or body selector; no partial
    list is ever returned.
    """
    return EndpointAssembler(schema_sets, base_url, headers, options).assemble()
