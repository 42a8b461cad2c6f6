from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from google.protobuf import descriptor_pb2 as d2

from protoc_postman.errors import ResolutionError


def qualify(package: str, name: str) -> str:
    """Fully-qualified type name as protoc writes it in type references."""
    if package:
        return f".{package}.{name}"
    return f".{name}"


class DescriptorIndex:
    """Name lookup over the messages and enums of one or more descriptor sets.

    The maps are built once on construction and never mutated afterwards.
    When two files declare the same qualified name the first one wins.
    """

    def __init__(self, schema_sets: Iterable[d2.FileDescriptorSet]):
        self._files: List[d2.FileDescriptorProto] = []
        self._messages: Dict[str, d2.DescriptorProto] = {}
        self._enums: Dict[str, d2.EnumDescriptorProto] = {}

        seen_files = set()
        for fds in schema_sets:
            for proto_file in fds.file:
                if proto_file.name in seen_files:
                    continue
                seen_files.add(proto_file.name)
                self._files.append(proto_file)
                prefix = f".{proto_file.package}" if proto_file.package else ""
                for enum in proto_file.enum_type:
                    self._enums.setdefault(f"{prefix}.{enum.name}", enum)
                for message in proto_file.message_type:
                    self._add_message(prefix, message)

    def _add_message(self, prefix: str, message: d2.DescriptorProto) -> None:
        full_name = f"{prefix}.{message.name}"
        self._messages.setdefault(full_name, message)
        for enum in message.enum_type:
            self._enums.setdefault(f"{full_name}.{enum.name}", enum)
        for nested in message.nested_type:
            self._add_message(full_name, nested)

    def resolve(self, full_name: str) -> d2.DescriptorProto:
        message = self._messages.get(full_name)
        if message is None:
            raise ResolutionError(f"message type '{full_name}' not found")
        return message

    def resolve_enum(self, full_name: str) -> d2.EnumDescriptorProto:
        enum = self._enums.get(full_name)
        if enum is None:
            raise ResolutionError(f"enum type '{full_name}' not found")
        return enum

    def name_of(self, message: d2.DescriptorProto) -> Optional[str]:
        """Qualified name of an indexed message object, or None if it is not indexed."""
        for full_name, candidate in self._messages.items():
            if candidate is message:
                return full_name
        return None

    def files(self) -> Iterator[d2.FileDescriptorProto]:
        return iter(self._files)

    def __contains__(self, full_name: str) -> bool:
        return full_name in self._messages
