"""
Unit tests for schema loading and catalog construction
"""
import json
from unittest.mock import Mock, patch

import pytest
import requests

from config import EndpointSource, SdlSource
from loader import (
    INTROSPECTION_QUERY,
    SchemaUnavailable,
    build_catalog,
    build_operation_catalog,
    catalog_from_introspection,
)
from models import OperationKind


def introspection_payload():
    return {
        "data": {
            "__schema": {
                "queryType": {
                    "name": "Query",
                    "fields": [
                        {"name": "getUsers", "isDeprecated": False},
                        {"name": "getUser", "isDeprecated": True},
                    ],
                },
                "mutationType": {
                    "name": "Mutation",
                    "kind": "OBJECT",
                    "fields": [{"name": "createUser", "isDeprecated": False}],
                },
                "subscriptionType": None,
            }
        }
    }


def mock_response(status_code=200, payload=None, reason="OK"):
    response = Mock()
    response.ok = 200 <= status_code < 300
    response.status_code = status_code
    response.reason = reason
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload
    return response


class TestBuildOperationCatalog:
    """Name-keyed catalog construction"""

    def test_canonical_order_is_query_mutation_subscription(self):
        catalog = build_operation_catalog(
            [("a", False), ("b", False)], [("c", False)], [("d", False)]
        )
        assert [(d.name, d.kind) for d in catalog] == [
            ("a", OperationKind.QUERY),
            ("b", OperationKind.QUERY),
            ("c", OperationKind.MUTATION),
            ("d", OperationKind.SUBSCRIPTION),
        ]

    def test_descriptors_start_unlocated(self):
        (descriptor,) = build_operation_catalog([("a", False)], [], [])
        assert descriptor.found is False
        assert descriptor.located_path == ""
        assert descriptor.located_line == -1

    def test_name_collision_keeps_last_kind(self):
        catalog = build_operation_catalog([("foo", False), ("bar", False)], [("foo", False)], [])
        assert [(d.name, d.kind) for d in catalog] == [
            ("foo", OperationKind.MUTATION),
            ("bar", OperationKind.QUERY),
        ]


class TestSdlSource:
    """Static schema documents"""

    def test_build_catalog_from_sdl(self, sample_sdl_path):
        catalog = build_catalog(SdlSource(str(sample_sdl_path)))

        assert [(d.name, d.kind) for d in catalog] == [
            ("getUsers", OperationKind.QUERY),
            ("getUser", OperationKind.QUERY),
            ("createUser", OperationKind.MUTATION),
            ("deleteUser", OperationKind.MUTATION),
            ("onUserCreated", OperationKind.SUBSCRIPTION),
        ]

    def test_deprecation_flag_is_collected(self, sample_sdl_path):
        catalog = {d.name: d for d in build_catalog(SdlSource(str(sample_sdl_path)))}
        assert catalog["deleteUser"].is_deprecated is True
        assert catalog["createUser"].is_deprecated is False

    def test_query_and_mutation_with_same_name(self, tmp_path):
        path = tmp_path / "schema.graphql"
        path.write_text(
            "type Query { foo: String }\ntype Mutation { foo: String }\n",
            encoding="utf-8",
        )

        catalog = build_catalog(SdlSource(str(path)))

        assert len(catalog) == 1
        assert catalog[0].name == "foo"
        assert catalog[0].kind == OperationKind.MUTATION

    def test_schema_without_mutations(self, tmp_path):
        path = tmp_path / "schema.graphql"
        path.write_text("type Query { hello: String }\n", encoding="utf-8")
        assert [d.name for d in build_catalog(SdlSource(str(path)))] == ["hello"]

    def test_invalid_sdl_raises(self, tmp_path):
        path = tmp_path / "schema.graphql"
        path.write_text("type Query { hello: ", encoding="utf-8")
        with pytest.raises(SchemaUnavailable):
            build_catalog(SdlSource(str(path)))

    def test_unknown_type_raises(self, tmp_path):
        path = tmp_path / "schema.graphql"
        path.write_text("type Query { hello: Missing }", encoding="utf-8")
        with pytest.raises(SchemaUnavailable):
            build_catalog(SdlSource(str(path)))

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(SchemaUnavailable, match="Could not read schema file"):
            build_catalog(SdlSource(str(tmp_path / "missing.graphql")))

    def test_saved_introspection_json(self, tmp_path):
        from graphql import build_schema, introspection_from_schema

        schema = build_schema("type Query { a: String }\ntype Mutation { b: String }")
        path = tmp_path / "schema.json"
        path.write_text(json.dumps({"data": introspection_from_schema(schema)}), encoding="utf-8")

        catalog = build_catalog(SdlSource(str(path)))

        assert [(d.name, d.kind) for d in catalog] == [
            ("a", OperationKind.QUERY),
            ("b", OperationKind.MUTATION),
        ]


class TestEndpointSource:
    """Introspection over HTTP"""

    @patch("loader.requests.post")
    def test_build_catalog_from_endpoint(self, mock_post):
        mock_post.return_value = mock_response(payload=introspection_payload())

        catalog = build_catalog(EndpointSource("https://api.example.com/graphql"))

        assert [(d.name, d.kind, d.is_deprecated) for d in catalog] == [
            ("getUsers", OperationKind.QUERY, False),
            ("getUser", OperationKind.QUERY, True),
            ("createUser", OperationKind.MUTATION, False),
        ]
        args, kwargs = mock_post.call_args
        assert args[0] == "https://api.example.com/graphql"
        assert kwargs["json"] == {"query": INTROSPECTION_QUERY}
        assert kwargs["headers"]["Content-Type"] == "application/json"

    @patch("loader.requests.post")
    def test_auth_header_from_environment(self, mock_post, monkeypatch):
        monkeypatch.setenv("GRAPHQL_AUTH_HEADER", "Authorization")
        monkeypatch.setenv("GRAPHQL_AUTH_TOKEN", "Bearer abc")
        mock_post.return_value = mock_response(payload=introspection_payload())

        build_catalog(EndpointSource("https://api.example.com/graphql"))

        assert mock_post.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"

    @patch("loader.requests.post")
    def test_non_success_status_raises(self, mock_post):
        mock_post.return_value = mock_response(status_code=500, reason="Server Error")
        with pytest.raises(SchemaUnavailable, match="500"):
            build_catalog(EndpointSource("https://api.example.com/graphql"))

    @patch("loader.requests.post")
    def test_transport_error_raises(self, mock_post):
        mock_post.side_effect = requests.ConnectionError("Network error")
        with pytest.raises(SchemaUnavailable, match="Network error"):
            build_catalog(EndpointSource("https://invalid-endpoint.com/graphql"))
        assert mock_post.call_count == 1

    @patch("loader.requests.post")
    def test_non_json_body_raises(self, mock_post):
        mock_post.return_value = mock_response(payload=ValueError("no json"))
        with pytest.raises(SchemaUnavailable, match="not valid JSON"):
            build_catalog(EndpointSource("https://api.example.com/graphql"))

    @pytest.mark.parametrize(
        "payload",
        [{}, {"data": None}, {"data": {}}, {"errors": [{"message": "denied"}]}, []],
    )
    @patch("loader.requests.post")
    def test_invalid_payload_raises(self, mock_post, payload):
        mock_post.return_value = mock_response(payload=payload)
        with pytest.raises(SchemaUnavailable):
            build_catalog(EndpointSource("https://api.example.com/graphql"))

    def test_malformed_fields_raise(self):
        with pytest.raises(SchemaUnavailable):
            catalog_from_introspection({"queryType": {"fields": [{"isDeprecated": False}]}})
