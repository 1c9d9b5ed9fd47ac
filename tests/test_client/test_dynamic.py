"""Tests for swagctl.client.dynamic."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from swagctl.client.dynamic import DynamicClient, validate_arguments
from swagctl.exceptions import InputValidationError, InvalidUsageError
from swagctl.models import (
    APIInfo,
    APIOperation,
    HTTPMethod,
    ParsedSpec,
    RequestConfig,
    ServerInfo,
)
from swagctl.output import OutputManager, set_output


def _recorder() -> tuple[list[httpx.Request], httpx.MockTransport]:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    return seen, httpx.MockTransport(handler)


@pytest.fixture(autouse=True)
def _quiet_output() -> None:
    set_output(OutputManager(no_color=True, quiet=True))


@pytest.fixture
def recorded() -> tuple[list[httpx.Request], httpx.MockTransport]:
    return _recorder()


# ---------------------------------------------------------------------------
# Generation and introspection
# ---------------------------------------------------------------------------


class TestGeneration:
    def test_generate_from_file(self, petstore_file: Path) -> None:
        client = DynamicClient.generate(str(petstore_file))
        assert client.spec.info.title == "Swagger Petstore"

    def test_operations_sorted_by_path_then_method(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec)
        assert client.operations == [
            "list_pets",
            "create_pets",
            "delete_pets_pet_id",
            "show_pet_by_id",
        ]
        assert list(client) == client.operations
        assert len(client) == 4

    def test_contains_method_name_and_operation_id(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec)
        assert "show_pet_by_id" in client
        assert "showPetById" in client
        assert "nope" not in client

    def test_attribute_access(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec)
        assert callable(client.list_pets)
        assert "list_pets" in dir(client)
        with pytest.raises(AttributeError):
            client.nope
        with pytest.raises(AttributeError):
            client._private_thing

    def test_item_access(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec)
        assert callable(client["createPets"])
        with pytest.raises(KeyError):
            client["nope"]

    def test_unknown_operation(self, petstore_spec: ParsedSpec) -> None:
        with pytest.raises(InvalidUsageError, match="No such method 'nope'"):
            DynamicClient(petstore_spec).operation("nope")

    def test_duplicate_names_keep_first(self) -> None:
        spec = ParsedSpec(
            info=APIInfo(title="Dup", version="1"),
            servers=[ServerInfo(url="http://x")],
            operations=[
                APIOperation(path="/b", method=HTTPMethod.GET, operation_id="doIt"),
                APIOperation(path="/a", method=HTTPMethod.GET, operation_id="do_it"),
            ],
            spec_version="3.0.0",
        )
        client = DynamicClient(spec)
        assert client.operations == ["do_it"]
        assert client.operation("do_it").path == "/a"


# ---------------------------------------------------------------------------
# Base URL
# ---------------------------------------------------------------------------


class TestBaseUrl:
    def test_default_from_servers(self, petstore_spec: ParsedSpec) -> None:
        assert DynamicClient(petstore_spec).base_url == "http://petstore.example.com/v1"

    def test_swagger2_default(self, swagger2_spec: ParsedSpec) -> None:
        assert DynamicClient(swagger2_spec).base_url == "http://petstore.example.com/v1"

    def test_config_override(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec, config=RequestConfig(base_url="https://staging.example.com/"))
        assert client.base_url == "https://staging.example.com"

    def test_setter_rejects_relative(self, petstore_spec: ParsedSpec) -> None:
        client = DynamicClient(petstore_spec)
        with pytest.raises(InvalidUsageError, match="Invalid base URL"):
            client.base_url = "/v2"

    def test_relative_server_resolved_against_url_source(self) -> None:
        spec = ParsedSpec(
            info=APIInfo(title="Rel", version="1"),
            servers=[ServerInfo(url="/api/v3")],
            spec_version="3.0.0",
            source="https://docs.example.com/specs/openapi.json",
        )
        assert DynamicClient(spec).base_url == "https://docs.example.com/api/v3"

    def test_call_without_absolute_base_url(self) -> None:
        spec = ParsedSpec(
            info=APIInfo(title="Rel", version="1"),
            servers=[ServerInfo(url="/api")],
            operations=[APIOperation(path="/ping", method=HTTPMethod.GET, operation_id="ping")],
            spec_version="3.0.0",
            source="spec.json",
        )
        with pytest.raises(InvalidUsageError, match="SWAGGER_BASE_URL"):
            DynamicClient(spec).call("ping")


# ---------------------------------------------------------------------------
# Calling operations (OpenAPI 3)
# ---------------------------------------------------------------------------


class TestCallOpenAPI3:
    def test_query_parameters(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        client = DynamicClient(petstore_spec, transport=transport)
        response = client.list_pets({"limit": 10, "status": "sold"})
        assert response.status_code == 200
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/v1/pets"
        assert dict(seen[0].url.params) == {"limit": "10", "status": "sold"}

    def test_path_parameter_quoted(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        client = DynamicClient(petstore_spec, transport=transport)
        client("show_pet_by_id", {"petId": "a b/c"})
        assert seen[0].url.raw_path == b"/v1/pets/a%20b%2Fc"

    def test_operation_id_alias_call(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        DynamicClient(petstore_spec, transport=transport)["showPetById"]({"petId": 7})
        assert seen[0].url.path == "/v1/pets/7"

    def test_body_from_properties(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        DynamicClient(petstore_spec, transport=transport).create_pets({"name": "Rex", "tag": "dog"})
        assert seen[0].method == "POST"
        assert json.loads(seen[0].content) == {"name": "Rex", "tag": "dog"}

    def test_explicit_body(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        DynamicClient(petstore_spec, transport=transport).create_pets({"body": {"name": "Tom"}})
        assert json.loads(seen[0].content) == {"name": "Tom"}

    def test_validation_errors_block_request(self, petstore_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        client = DynamicClient(petstore_spec, transport=transport)
        with pytest.raises(InputValidationError) as exc_info:
            client.list_pets({"limit": "ten", "status": "lost"})
        assert exc_info.value.errors == [
            "/limit: Expected integer - got string.",
            "/status: Not in enum list: available, pending, sold.",
        ]
        assert seen == []

    def test_missing_path_parameter(self, petstore_spec: ParsedSpec) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            DynamicClient(petstore_spec).show_pet_by_id({})
        assert exc_info.value.errors == ["/petId: Missing property."]

    def test_missing_required_body(self, petstore_spec: ParsedSpec) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            DynamicClient(petstore_spec).create_pets({"unrelated": 1})
        assert exc_info.value.errors == ["/body: Missing property."]

    def test_dry_run_sends_nothing(self, petstore_spec: ParsedSpec) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("request must not be sent")

        client = DynamicClient(petstore_spec, dry_run=True, transport=httpx.MockTransport(handler))
        assert client.list_pets().json()["dry_run"] is True


# ---------------------------------------------------------------------------
# Calling operations (Swagger 2)
# ---------------------------------------------------------------------------


class TestCallSwagger2:
    def test_named_body_parameter(self, swagger2_spec: ParsedSpec, recorded) -> None:
        seen, transport = recorded
        DynamicClient(swagger2_spec, transport=transport).add_pet({"pet": {"name": "Rex"}})
        assert json.loads(seen[0].content) == {"name": "Rex"}

    def test_missing_named_body(self, swagger2_spec: ParsedSpec) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            DynamicClient(swagger2_spec).add_pet({})
        assert exc_info.value.errors == ["/pet: Missing property."]

    def test_multipart_upload(self, swagger2_spec: ParsedSpec, recorded, tmp_path: Path) -> None:
        photo = tmp_path / "rex.jpg"
        photo.write_bytes(b"\xff\xd8jpeg-data")
        seen, transport = recorded

        DynamicClient(swagger2_spec, transport=transport).upload_photo(
            {"petId": "1", "file": str(photo), "caption": "Good boy"}
        )

        request = seen[0]
        assert request.url.path == "/v1/pets/1/photo"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b"jpeg-data" in request.content
        assert b'filename="rex.jpg"' in request.content
        assert b"Good boy" in request.content

    def test_missing_upload_file(self, swagger2_spec: ParsedSpec, recorded, tmp_path: Path) -> None:
        seen, transport = recorded
        missing = tmp_path / "missing.jpg"
        with pytest.raises(InputValidationError) as exc_info:
            DynamicClient(swagger2_spec, transport=transport, dry_run=True).upload_photo(
                {"petId": "1", "file": str(missing)}
            )
        assert exc_info.value.errors == [f"/file: File not found: {missing}."]
        assert seen == []

    def test_unreadable_upload_file(
        self, swagger2_spec: ParsedSpec, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        photo = tmp_path / "rex.jpg"
        photo.write_bytes(b"jpeg")

        def denied(self: Path) -> bytes:
            raise PermissionError(13, "Permission denied")

        monkeypatch.setattr(Path, "read_bytes", denied)
        with pytest.raises(InvalidUsageError, match="Cannot read file for 'file'"):
            DynamicClient(swagger2_spec).build_request("upload_photo", {"petId": "1", "file": str(photo)})


# ---------------------------------------------------------------------------
# validate_arguments
# ---------------------------------------------------------------------------


class TestValidateArguments:
    def _op(self, spec: ParsedSpec, name: str) -> APIOperation:
        return DynamicClient(spec).operation(name)

    def test_numeric_strings_accepted(self, petstore_spec: ParsedSpec) -> None:
        assert validate_arguments(self._op(petstore_spec, "list_pets"), {"limit": "25"}) == []

    def test_numbers_accepted_for_string(self, petstore_spec: ParsedSpec) -> None:
        assert validate_arguments(self._op(petstore_spec, "show_pet_by_id"), {"petId": 42}) == []

    def test_bool_is_not_integer(self, petstore_spec: ParsedSpec) -> None:
        errors = validate_arguments(self._op(petstore_spec, "list_pets"), {"limit": True})
        assert errors == ["/limit: Expected integer - got boolean."]

    def test_object_rejected_for_string(self, petstore_spec: ParsedSpec) -> None:
        errors: list[Any] = validate_arguments(
            self._op(petstore_spec, "show_pet_by_id"), {"petId": {"a": 1}}
        )
        assert errors == ["/petId: Expected string - got object."]
