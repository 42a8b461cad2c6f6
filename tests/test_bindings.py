import pytest
from google.api import http_pb2

from descriptor_builders import (
    FDP,
    make_field,
    make_file,
    make_message,
    make_method,
    make_rule,
    make_service,
    make_set,
)
from protoc_postman.bindings import HttpBindingResolver, http_rule, pattern_of
from protoc_postman.descriptor_index import DescriptorIndex
from protoc_postman.errors import NotFoundError, ResolutionError, SelectorError
from protoc_postman.models import Binding


def _make_resolver() -> HttpBindingResolver:
    request = make_message("UpdateUserRequest", [
        make_field("name", FDP.TYPE_STRING, 1),
        make_field("address", FDP.TYPE_MESSAGE, 2, type_name=".users.Address"),
    ])
    address = make_message("Address", [make_field("city", FDP.TYPE_STRING, 1)])
    proto = make_file("users.proto", package="users", messages=[request, address])
    return HttpBindingResolver(DescriptorIndex([make_set(proto)]))


def _bindings(method):
    return _make_resolver().bindings(make_service("UserService", [method]), method)


class TestDefaultBinding:
    def test_unannotated_method_posts_to_service_path(self):
        method = make_method("UpdateUser", ".users.UpdateUserRequest")
        assert _bindings(method) == [Binding("POST", "/UserService/UpdateUser", "*")]

    def test_http_rule_absent(self):
        assert http_rule(make_method("UpdateUser", ".users.UpdateUserRequest")) is None


class TestAnnotatedBindings:
    @pytest.mark.parametrize("verb", ["GET", "PUT", "POST", "DELETE", "PATCH"])
    def test_primary_binding_verbs(self, verb):
        rule = make_rule(verb, "/v1/users/{name}")
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert _bindings(method) == [Binding(verb, "/v1/users/{name}", "")]

    def test_primary_then_additional_in_declared_order(self):
        rule = make_rule("PATCH", "/v1/users/{name}", body="*", additional=[
            make_rule("PUT", "/v1/users/{name}"),
            make_rule("POST", "/v1/users/{name}:update"),
        ])
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert _bindings(method) == [
            Binding("PATCH", "/v1/users/{name}", "*"),
            Binding("PUT", "/v1/users/{name}", "*"),
            Binding("POST", "/v1/users/{name}:update", "*"),
        ]

    def test_additional_bindings_use_outer_body_selector(self):
        rule = make_rule("POST", "/v1/users", body="address", additional=[
            make_rule("PUT", "/v1/users", body="*"),
        ])
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert [b.body for b in _bindings(method)] == ["address", "address"]

    def test_custom_pattern_dropped(self):
        rule = http_pb2.HttpRule(custom=http_pb2.CustomHttpPattern(kind="HEAD", path="/v1/users"))
        rule.additional_bindings.add(get="/v1/users")
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert _bindings(method) == [Binding("GET", "/v1/users", "")]

    def test_custom_additional_binding_skipped_in_order(self):
        rule = make_rule("GET", "/a", additional=[make_rule("PUT", "/b")])
        rule.additional_bindings.add(custom=http_pb2.CustomHttpPattern(kind="HEAD", path="/c"))
        rule.additional_bindings.add(post="/d")
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)

        bindings = _bindings(method)
        assert [(b.verb, b.path) for b in bindings] == [("GET", "/a"), ("PUT", "/b"), ("POST", "/d")]
        # 1 primary + 3 additional, minus the unrecognized one
        assert len(bindings) == 1 + len(rule.additional_bindings) - 1

    def test_rule_without_pattern_yields_only_additional(self):
        rule = make_rule(body="*", additional=[make_rule("DELETE", "/v1/users/{name}")])
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert _bindings(method) == [Binding("DELETE", "/v1/users/{name}", "*")]

    def test_rule_with_only_custom_patterns_yields_nothing(self):
        rule = http_pb2.HttpRule(custom=http_pb2.CustomHttpPattern(kind="OPTIONS", path="/x"))
        method = make_method("UpdateUser", ".users.UpdateUserRequest", rule=rule)
        assert _bindings(method) == []

    def test_pattern_of(self):
        assert pattern_of(make_rule("GET", "/a/{id}")) == Binding("GET", "/a/{id}")
        assert pattern_of(http_pb2.HttpRule()) is None


class TestBodyTypeName:
    def _method(self):
        return make_method("UpdateUser", ".users.UpdateUserRequest")

    def test_no_body(self):
        resolver = _make_resolver()
        assert resolver.body_type_name(self._method(), Binding("GET", "/x", "")) is None

    def test_whole_input(self):
        resolver = _make_resolver()
        assert resolver.body_type_name(self._method(), Binding("POST", "/x", "*")) == ".users.UpdateUserRequest"

    def test_named_message_field(self):
        resolver = _make_resolver()
        assert resolver.body_type_name(self._method(), Binding("POST", "/x", "address")) == ".users.Address"

    def test_missing_field_raises(self):
        resolver = _make_resolver()
        with pytest.raises(SelectorError, match="nickname"):
            resolver.body_type_name(self._method(), Binding("POST", "/x", "nickname"))

    def test_scalar_field_raises(self):
        resolver = _make_resolver()
        with pytest.raises(SelectorError, match="not a message field"):
            resolver.body_type_name(self._method(), Binding("POST", "/x", "name"))

    def test_selector_error_is_not_found_error(self):
        resolver = _make_resolver()
        with pytest.raises(NotFoundError):
            resolver.body_type_name(self._method(), Binding("POST", "/x", "nickname"))

    def test_missing_input_type_raises(self):
        resolver = _make_resolver()
        method = make_method("Lost", ".users.Nowhere")
        with pytest.raises(ResolutionError):
            resolver.body_type_name(method, Binding("POST", "/x", "*"))
