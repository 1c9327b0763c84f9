# loader.py
"""
Schema loading: turns a schema source into the operation catalog.

Two retrieval paths:
- a live endpoint, introspected with a fixed query over HTTP (requests)
- a static document on disk, either SDL (graphql.build_schema) or a saved
  introspection result in JSON (graphql.build_client_schema)

Both end up in the same catalog builder so the canonical order is always
Query fields, then Mutation fields, then Subscription fields.
"""

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

import requests
from graphql import GraphQLError, GraphQLSchema, build_client_schema, build_schema

from config import EndpointSource, SchemaSource, SdlSource, get_request_settings
from models import OperationDescriptor, OperationKind


class SchemaUnavailable(RuntimeError):
    """The schema could not be retrieved, parsed or built."""


class EmptyCatalogError(SchemaUnavailable):
    """The schema was loaded but exposes no operations."""


# Only names and deprecation flags of the three root types are needed.
INTROSPECTION_QUERY = """
query {
  __schema {
    queryType {
      name
      fields {
        name
        isDeprecated
      }
    }
    mutationType {
      name
      kind
      fields {
        name
        isDeprecated
      }
    }
    subscriptionType {
      name
      kind
      fields {
        name
        isDeprecated
      }
    }
  }
}
"""

# (name, is_deprecated) pairs for one root type
RootFields = List[Tuple[str, bool]]


# ----------------------------
# Catalog construction
#
# Keyed by operation name. A name present in more than one root type keeps the
# kind of the last root type processed, but stays at the position where it
# was first inserted.
# ----------------------------
def build_operation_catalog(
    query_fields: Iterable[Tuple[str, bool]],
    mutation_fields: Iterable[Tuple[str, bool]],
    subscription_fields: Iterable[Tuple[str, bool]],
) -> List[OperationDescriptor]:
    catalog: Dict[str, OperationDescriptor] = {}
    for kind, fields in (
        (OperationKind.QUERY, query_fields),
        (OperationKind.MUTATION, mutation_fields),
        (OperationKind.SUBSCRIPTION, subscription_fields),
    ):
        for name, is_deprecated in fields:
            catalog[name] = OperationDescriptor(
                name=name, kind=kind, is_deprecated=is_deprecated
            )
    return list(catalog.values())


# ----------------------------
# Endpoint introspection
# ----------------------------
def fetch_introspection(url: str) -> Dict[str, Any]:
    """
    POST the introspection query to `url` and return the `__schema` payload.

    There is no retry loop; a failure aborts the analysis and the caller can
    simply run again.

    Raises:
        SchemaUnavailable: on transport errors, non-success status codes,
            non-JSON bodies or a payload without `data.__schema`
    """
    settings = get_request_settings()
    headers = {"Content-Type": "application/json", **settings.headers}

    try:
        response = requests.post(
            url,
            json={"query": INTROSPECTION_QUERY},
            headers=headers,
            timeout=settings.timeout,
        )
    except requests.RequestException as e:
        raise SchemaUnavailable(f"Introspection request to {url} failed: {e}") from e

    if not response.ok:
        raise SchemaUnavailable(
            f"Introspection failed: {response.status_code} {response.reason}"
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise SchemaUnavailable("Introspection response is not valid JSON") from e

    # token lacks the correct scope, or the server rejected the query
    if isinstance(payload, dict) and payload.get("errors") and not payload.get("data"):
        raise SchemaUnavailable(f"Introspection returned errors: {payload['errors']}")

    data = payload.get("data") if isinstance(payload, dict) else None
    schema = data.get("__schema") if isinstance(data, dict) else None
    if not isinstance(schema, dict):
        raise SchemaUnavailable("Invalid introspection response structure")
    return schema


def _introspected_root_fields(root_type: Optional[Dict[str, Any]]) -> RootFields:
    if not root_type:
        return []
    try:
        fields = root_type.get("fields") or []
        return [(f["name"], bool(f.get("isDeprecated", False))) for f in fields]
    except (KeyError, TypeError, AttributeError) as e:
        raise SchemaUnavailable("Invalid introspection response structure") from e


def catalog_from_introspection(schema: Dict[str, Any]) -> List[OperationDescriptor]:
    return build_operation_catalog(
        _introspected_root_fields(schema.get("queryType")),
        _introspected_root_fields(schema.get("mutationType")),
        _introspected_root_fields(schema.get("subscriptionType")),
    )


# ----------------------------
# Static documents
# ----------------------------
def is_field_deprecated(field: Any) -> bool:
    # Treat as deprecated if either is_deprecated is True or deprecation_reason is set
    return bool(
        getattr(field, "is_deprecated", False)
        or getattr(field, "deprecation_reason", None)
    )


def _schema_root_fields(root_type: Any) -> RootFields:
    if root_type is None:
        return []
    return [(name, is_field_deprecated(f)) for name, f in root_type.fields.items()]


def catalog_from_schema(schema: GraphQLSchema) -> List[OperationDescriptor]:
    return build_operation_catalog(
        _schema_root_fields(schema.query_type),
        _schema_root_fields(schema.mutation_type),
        _schema_root_fields(schema.subscription_type),
    )


def build_schema_from_text(text: str, is_json: bool = False) -> GraphQLSchema:
    """
    Build a schema from SDL text, or from a saved introspection result when
    `is_json` is set (both `{"data": {...}}` and the bare payload are accepted).
    """
    try:
        if is_json:
            document = json.loads(text)
            if not isinstance(document, dict):
                raise SchemaUnavailable("Introspection JSON must be an object")
            return build_client_schema(document.get("data", document))
        return build_schema(text)
    except SchemaUnavailable:
        raise
    except (GraphQLError, TypeError, ValueError, KeyError) as e:
        raise SchemaUnavailable(f"Could not build schema: {e}") from e


def load_schema_file(path: str) -> GraphQLSchema:
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaUnavailable(f"Could not read schema file {path}: {e}") from e
    return build_schema_from_text(text, is_json=path.lower().endswith(".json"))


def build_catalog(schema_source: SchemaSource) -> List[OperationDescriptor]:
    """
    Produce the operation catalog for a schema source.

    The returned list may be empty; callers decide whether that is fatal.

    Raises:
        SchemaUnavailable: if the schema cannot be retrieved or built
    """
    if isinstance(schema_source, SdlSource):
        return catalog_from_schema(load_schema_file(schema_source.path))
    if isinstance(schema_source, EndpointSource):
        return catalog_from_introspection(fetch_introspection(schema_source.url))
    raise SchemaUnavailable(f"Unsupported schema source: {schema_source!r}")
