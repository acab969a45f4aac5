"""Procedure Registry — name → Procedure mapping plus the REST route index.

Invariants:
    - Names are unique; routes (method, path) are unique
    - lookup() is a dict lookup; static routes are a dict lookup too
    - Once frozen, the registry rejects every mutation (read-only for dispatch)
    - list() is name-sorted: insertion order never leaks into exports

Design Decisions:
    - Built once at startup and injected (app.state), never a module-level singleton
    - Static routes win over parameterised routes; among parameterised routes
      the first registered match wins
    - mount() gives nested namespacing by name ("todos.list"); REST paths are
      taken as declared
"""

from dataclasses import replace
from typing import Iterator

from rpc_starter.core.domain_types import HttpMethod
from rpc_starter.core.errors import (
    DuplicateNameError,
    DuplicateRouteError,
    NotFoundError,
    RegistryFrozenError,
)
from rpc_starter.core.procedure import Procedure, normalize_path


class Registry:
    """Procedures by name and by route. Explicit registration, no auto-discovery."""

    def __init__(self):
        self._entries: dict[str, Procedure] = {}
        self._static_routes: dict[tuple[HttpMethod, str], Procedure] = {}
        self._pattern_routes: list[Procedure] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, name: str, procedure: Procedure) -> Procedure:
        """Add a procedure under `name`. Returns the stored (possibly renamed) copy."""
        if self._frozen:
            raise RegistryFrozenError(name)
        if name in self._entries:
            raise DuplicateNameError(name)
        if procedure.name != name:
            procedure = replace(procedure, name=name)
        if procedure.route is not None:
            self._index_route(procedure)
        self._entries[name] = procedure
        return procedure

    def mount(self, prefix: str, other: "Registry") -> None:
        """Register every procedure of `other` as "{prefix}.{name}"."""
        for name, procedure in other.list():
            self.register(f"{prefix}.{name}", procedure)

    def freeze(self) -> "Registry":
        self._frozen = True
        return self

    def lookup(self, name: str) -> Procedure:
        procedure = self._entries.get(name)
        if procedure is None:
            raise NotFoundError("Procedure", name)
        return procedure

    def match_route(self, method: str, path: str) -> tuple[Procedure, dict[str, str]]:
        """Resolve an HTTP method + path to a procedure and its path parameters."""
        path = normalize_path(path)
        try:
            verb = HttpMethod(method.upper())
        except ValueError:
            raise NotFoundError("Route", f"{method} {path}") from None
        for key in ((verb, path), (HttpMethod.ANY, path)):
            procedure = self._static_routes.get(key)
            if procedure is not None:
                return procedure, {}
        for procedure in self._pattern_routes:
            route = procedure.route
            if route.method not in (verb, HttpMethod.ANY):
                continue
            match = route.pattern.match(path)
            if match:
                return procedure, match.groupdict()
        raise NotFoundError("Route", f"{verb.value} {path}")

    def routed(self) -> list[Procedure]:
        """Procedures with a REST route, ordered by (path, method)."""
        return sorted(
            (p for p in self._entries.values() if p.route is not None),
            key=lambda p: (p.route.path, p.route.method.value),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def _index_route(self, procedure: Procedure) -> None:
        route = procedure.route
        key = (route.method, route.path)
        existing = self._static_routes.get(key) or next(
            (p for p in self._pattern_routes
             if (p.route.method, p.route.path) == key),
            None,
        )
        if existing is not None:
            raise DuplicateRouteError(route.method.value, route.path, existing.name)
        if route.is_static:
            self._static_routes[key] = procedure
        else:
            self._pattern_routes.append(procedure)

    def list(self) -> list[tuple[str, Procedure]]:
        return sorted(self._entries.items())
