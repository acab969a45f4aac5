"""OpenAPI Exporter — walks the Registry and emits an OpenAPI 3.1 document.

Invariants:
    - Only procedures with a declared route appear; RPC-only procedures are omitted
    - Deterministic: paths sorted, methods sorted, components sorted, no timestamps
    - Pydantic $defs are hoisted into components.schemas and referenced by $ref
    - Every declared error kind (plus 400 when an input exists) references ErrorResponse

Design Decisions:
    - Schemas come from pydantic TypeAdapter.json_schema(): the validator and
      the document can never disagree
    - GET/DELETE inputs become query parameters, other methods a JSON requestBody
    - ANY routes are documented as POST (OpenAPI has no wildcard method)
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import TypeAdapter

from rpc_starter.core.domain_types import ErrorKind, HttpMethod
from rpc_starter.core.procedure import Procedure
from rpc_starter.core.registry import Registry

OPENAPI_VERSION = "3.1.1"
REF_TEMPLATE = "#/components/schemas/{model}"
ERROR_RESPONSE = "ErrorResponse"


def generate_openapi(
    registry: Registry,
    *,
    title: str,
    version: str,
    description: str | None = None,
    servers: Iterable[Mapping[str, str]] = (),
    security_schemes: Mapping[str, Any] | None = None,
    default_security: Iterable[str] | None = None,
) -> dict:
    """Build the document for every REST-routed procedure in `registry`."""
    components: dict[str, Any] = {ERROR_RESPONSE: _error_response_schema()}
    paths: dict[str, dict[str, Any]] = {}
    for procedure in registry.routed():
        route = procedure.route
        verb = "post" if route.method is HttpMethod.ANY else route.method.value.lower()
        paths.setdefault(route.path, {})[verb] = _operation(procedure, components)

    info: dict[str, Any] = {"title": title, "version": version}
    if description:
        info["description"] = description
    document: dict[str, Any] = {"openapi": OPENAPI_VERSION, "info": info}
    server_list = [dict(s) for s in servers]
    if server_list:
        document["servers"] = server_list
    document["paths"] = {
        path: dict(sorted(ops.items())) for path, ops in sorted(paths.items())
    }
    document["components"] = {"schemas": dict(sorted(components.items()))}
    if security_schemes:
        document["components"]["securitySchemes"] = {
            k: dict(v) for k, v in sorted(security_schemes.items())
        }
    if default_security is not None:
        document["security"] = _security(default_security)
    return document


def _operation(procedure: Procedure, components: dict[str, Any]) -> dict:
    route = procedure.route
    operation: dict[str, Any] = {"operationId": procedure.name}
    if procedure.summary:
        operation["summary"] = procedure.summary
    if procedure.description:
        operation["description"] = procedure.description
    if procedure.tags:
        operation["tags"] = list(procedure.tags)

    input_schema = (
        _hoist(procedure.input_adapter, components, "validation")
        if procedure.input_adapter else None
    )
    properties = input_schema.get("properties", {}) if input_schema else {}
    required = set(input_schema.get("required", [])) if input_schema else set()

    parameters = [
        {
            "name": name, "in": "path", "required": True,
            "schema": properties.get(name, {"type": "string"}),
        }
        for name in route.param_names
    ]
    if input_schema is not None:
        if route.method.has_body:
            operation["requestBody"] = {
                "required": True,
                "content": {"application/json": {
                    "schema": _as_component(input_schema, components),
                }},
            }
        else:
            parameters.extend(
                {
                    "name": name, "in": "query", "required": name in required,
                    "schema": schema,
                }
                for name, schema in properties.items()
                if name not in route.param_names
            )
    if parameters:
        operation["parameters"] = parameters

    output_schema = _hoist(procedure.output_adapter, components, "serialization")
    operation["responses"] = {
        "200": {
            "description": "Successful response",
            "content": {"application/json": {
                "schema": _as_component(output_schema, components),
            }},
        },
        **_error_responses(procedure),
    }
    if procedure.security is not None:
        operation["security"] = _security(procedure.security)
    return operation


def _hoist(adapter: TypeAdapter, components: dict[str, Any], mode: str) -> dict:
    """JSON schema for `adapter` with nested definitions moved into components."""
    schema = adapter.json_schema(ref_template=REF_TEMPLATE, mode=mode)
    components.update(schema.pop("$defs", {}))
    return schema


def _as_component(schema: dict, components: dict[str, Any]) -> dict:
    """Named object schemas (pydantic models) become $refs; others stay inline."""
    name = schema.get("title")
    if schema.get("type") == "object" and name:
        components[name] = schema
        return {"$ref": REF_TEMPLATE.format(model=name)}
    return schema


def _error_responses(procedure: Procedure) -> dict[str, Any]:
    kinds = set(procedure.errors)
    if procedure.input_schema is not None:
        kinds.add(ErrorKind.BAD_REQUEST)
    return {
        str(kind.http_status): {
            "description": kind.value,
            "content": {"application/json": {
                "schema": {"$ref": REF_TEMPLATE.format(model=ERROR_RESPONSE)},
            }},
        }
        for kind in sorted(kinds, key=lambda k: k.http_status)
    }


def _security(names: Iterable[str]) -> list[dict[str, list]]:
    return [{name: []} for name in names]


def _error_response_schema() -> dict:
    return {
        "type": "object",
        "required": ["error"],
        "properties": {
            "error": {
                "type": "object",
                "required": ["code", "message"],
                "properties": {
                    "code": {"type": "string", "enum": [k.value for k in ErrorKind]},
                    "message": {"type": "string"},
                    "category": {"type": "string"},
                    "severity": {"type": "string"},
                    "details": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "field": {"type": "string"},
                                "message": {"type": "string"},
                                "type": {"type": "string"},
                            },
                        },
                    },
                },
            },
        },
    }
