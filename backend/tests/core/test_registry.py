"""Registry — tests for name lookup, route matching, and registration rules.

Tests cover:
    - register/lookup round trip, renaming on register
    - Duplicate names and duplicate routes rejected
    - Frozen registry rejects registration
    - Unknown names and routes raise NotFoundError (NOT_FOUND, not INTERNAL)
    - Route matching: static, trailing slash, ANY, path params, static precedence
    - list() is name-sorted; mount() namespaces names
"""

import pytest
from pydantic import BaseModel

from rpc_starter.core.domain_types import ErrorKind
from rpc_starter.core.errors import (
    DuplicateNameError,
    DuplicateRouteError,
    NotFoundError,
    RegistryError,
    RegistryFrozenError,
)
from rpc_starter.core.procedure import define_procedure
from rpc_starter.core.registry import Registry
from rpc_starter.core.result import success


class Out(BaseModel):
    ok: bool


def _noop():
    return success({"ok": True})


def _proc(name="p", method=None, path=None):
    return define_procedure(name, _noop, output=Out, method=method, path=path)


# ─── register / lookup ───────────────────────────────────────────

def test_lookup_returns_registered_procedure():
    registry = Registry()
    registry.register("greet", _proc("greet"))
    assert registry.lookup("greet").name == "greet"


def test_register_renames_procedure_to_registered_name():
    registry = Registry()
    stored = registry.register("alias", _proc("original"))
    assert stored.name == "alias"
    assert registry.lookup("alias") is stored


def test_duplicate_name_rejected():
    registry = Registry()
    registry.register("greet", _proc())
    with pytest.raises(DuplicateNameError):
        registry.register("greet", _proc())


def test_duplicate_route_rejected():
    registry = Registry()
    registry.register("a", _proc(method="GET", path="/x"))
    with pytest.raises(DuplicateRouteError) as exc_info:
        registry.register("b", _proc(method="GET", path="/x/"))
    assert exc_info.value.existing == "a"


def test_same_path_different_method_allowed():
    registry = Registry()
    registry.register("read", _proc(method="GET", path="/x"))
    registry.register("write", _proc(method="POST", path="/x"))
    assert len(registry) == 2


def test_frozen_registry_rejects_registration():
    registry = Registry().freeze()
    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register("late", _proc())


def test_registration_errors_are_value_errors():
    assert issubclass(RegistryError, ValueError)


def test_lookup_unknown_name_is_not_found():
    with pytest.raises(NotFoundError) as exc_info:
        Registry().lookup("missing")
    assert exc_info.value.kind is ErrorKind.NOT_FOUND
    assert exc_info.value.http_status == 404


# ─── match_route ─────────────────────────────────────────────────

def test_match_static_route():
    registry = Registry()
    registry.register("todos", _proc(method="GET", path="/todos"))
    procedure, params = registry.match_route("GET", "/todos")
    assert procedure.name == "todos"
    assert params == {}


def test_match_ignores_trailing_slash_and_method_case():
    registry = Registry()
    registry.register("todos", _proc(method="GET", path="/todos"))
    procedure, _ = registry.match_route("get", "/todos/")
    assert procedure.name == "todos"


def test_method_mismatch_is_not_found():
    registry = Registry()
    registry.register("greet", _proc(method="POST", path="/greet"))
    with pytest.raises(NotFoundError):
        registry.match_route("GET", "/greet")


def test_unknown_method_is_not_found():
    registry = Registry()
    registry.register("greet", _proc(method="POST", path="/greet"))
    with pytest.raises(NotFoundError):
        registry.match_route("TRACE", "/greet")


def test_any_route_matches_every_method():
    registry = Registry()
    registry.register("echo", _proc(method="ANY", path="/echo"))
    for method in ("GET", "POST", "DELETE"):
        assert registry.match_route(method, "/echo")[0].name == "echo"


def test_path_params_extracted():
    registry = Registry()
    registry.register("item", _proc(method="GET", path="/items/{item_id}/tags/{tag}"))
    procedure, params = registry.match_route("GET", "/items/42/tags/red")
    assert procedure.name == "item"
    assert params == {"item_id": "42", "tag": "red"}


def test_path_param_does_not_span_segments():
    registry = Registry()
    registry.register("item", _proc(method="GET", path="/items/{item_id}"))
    with pytest.raises(NotFoundError):
        registry.match_route("GET", "/items/1/2")


def test_static_route_wins_over_param_route():
    registry = Registry()
    registry.register("by_id", _proc(method="GET", path="/items/{item_id}"))
    registry.register("latest", _proc(method="GET", path="/items/latest"))
    assert registry.match_route("GET", "/items/latest")[0].name == "latest"
    assert registry.match_route("GET", "/items/9")[0].name == "by_id"


def test_unknown_route_is_not_found():
    with pytest.raises(NotFoundError) as exc_info:
        Registry().match_route("GET", "/nowhere")
    assert "/nowhere" in exc_info.value.message


# ─── list / mount ────────────────────────────────────────────────

def test_list_is_sorted_by_name():
    registry = Registry()
    for name in ("zeta", "alpha", "mid"):
        registry.register(name, _proc(name))
    assert [name for name, _ in registry.list()] == ["alpha", "mid", "zeta"]
    assert list(registry) == ["alpha", "mid", "zeta"]


def test_routed_excludes_rpc_only_procedures():
    registry = Registry()
    registry.register("rpc_only", _proc())
    registry.register("rest", _proc(method="GET", path="/rest"))
    assert [p.name for p in registry.routed()] == ["rest"]


def test_mount_namespaces_names():
    todos = Registry()
    todos.register("list", _proc())
    todos.register("get", _proc(method="GET", path="/todos/{id}"))
    root = Registry()
    root.mount("todos", todos)
    assert "todos.list" in root
    assert "list" not in root
    assert root.match_route("GET", "/todos/3")[0].name == "todos.get"
