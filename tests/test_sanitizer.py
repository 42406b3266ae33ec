import copy
import json
from pathlib import Path

import yaml

from postman_sync.sanitizer.resolver import FORMAT_DEFAULTS
from postman_sync.sanitizer.sanitize import Sanitizer, sanitize_collection
from postman_sync.sanitizer.walker import walk_json

FIXTURES = Path(__file__).parent / "fixtures"

OPENAPI_SPEC = {
    "components": {
        "schemas": {
            "User": {
                "type": "object",
                "properties": {
                    "id": {"type": "string", "format": "uuid"},
                    "email": {"type": "string", "format": "email"},
                    "name": {"type": "string"},
                    "createdAt": {"type": "string", "format": "date-time"},
                },
            },
            "Pet": {
                "type": "object",
                "properties": {
                    "name": {"type": "string", "example": "Buddy"},
                    "age": {"type": "integer", "minimum": 0},
                    "status": {"type": "string", "enum": ["available", "pending", "sold"]},
                },
            },
        }
    }
}


def _request(name: str, method: str, path: list[str], body: dict | None = None, **extra) -> dict:
    request = {"method": method, "url": {"path": path}}
    if body is not None:
        request["body"] = {"mode": "raw", "raw": json.dumps(body, indent=2)}
    return {"name": name, "request": request, **extra}


def _raw(item: dict) -> dict:
    return json.loads(item["request"]["body"]["raw"])


class TestWalkJson:
    def test_visits_every_scalar_with_its_field_name(self):
        seen = []
        data = {"a": 1, "b": {"c": "x"}, "d": [True, {"e": None}]}
        walk_json(data, lambda name, value: seen.append((name, value)) or value)
        assert seen == [("a", 1), ("c", "x"), ("d", True), ("e", None)]

    def test_rebuilds_structure_with_replacements(self):
        data = {"tags": ["a", "b"], "n": 2}
        result = walk_json(data, lambda name, value: value * 2)
        assert result == {"tags": ["aa", "bb"], "n": 4}
        assert data == {"tags": ["a", "b"], "n": 2}

    def test_top_level_scalar(self):
        assert walk_json(5, lambda name, value: (name, value)) == (None, 5)


class TestSanitizeRequestBody:
    def test_replaces_placeholders(self):
        collection = {"item": [_request("Create User", "POST", ["users"], {
            "name": "ut labore sint tempor",
            "email": "xhWusLJP6pS@dtZnVkyxTktuLkmofguN.jrxq",
        })]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        body = _raw(result["item"][0])
        assert body["name"] != "ut labore sint tempor"
        assert body["email"] == "user@example.com"

    def test_preserves_valid_values(self):
        collection = {"item": [_request("Create Pet", "POST", ["pets"], {
            "name": "Buddy", "species": "dog", "age": 3,
        })]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        assert _raw(result["item"][0]) == {"name": "Buddy", "species": "dog", "age": 3}

    def test_clean_body_is_left_byte_identical(self):
        raw = '{"name":"Buddy",   "age": 3}'
        collection = {"item": [{
            "name": "Create Pet",
            "request": {"method": "POST", "url": {"path": ["pets"]}, "body": {"mode": "raw", "raw": raw}},
        }]}

        first = sanitize_collection(copy.deepcopy(collection), OPENAPI_SPEC)
        second = sanitize_collection(copy.deepcopy(first), OPENAPI_SPEC)
        assert first == collection
        assert json.dumps(second) == json.dumps(collection)

    def test_sanitizing_twice_is_stable(self):
        collection = {"item": [_request("Create User", "POST", ["users"], {
            "name": "Duis nulla", "createdAt": "1966-07-04T19:09:56.846Z",
        })]}

        once = sanitize_collection(collection, OPENAPI_SPEC)
        once_raw = once["item"][0]["request"]["body"]["raw"]
        twice = sanitize_collection(copy.deepcopy(once), OPENAPI_SPEC)
        assert twice["item"][0]["request"]["body"]["raw"] == once_raw

    def test_nested_folders_and_objects(self):
        collection = {"item": [{
            "name": "Users",
            "item": [_request("Create User", "POST", ["users"], {
                "name": "Duis nulla",
                "profile": {"email": "9ZcGNifob9M@uyoD.ugb", "scores": [5, 78171233]},
            })],
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        body = _raw(result["item"][0]["item"][0])
        assert body["name"] != "Duis nulla"
        assert body["profile"]["email"] == "user@example.com"
        # no schema and no name default for "scores": placeholder stays
        assert body["profile"]["scores"] == [5, 78171233]

    def test_user_values_map(self):
        collection = {"item": [_request("Create Pet", "POST", ["pets"], {
            "name": "ut labore sint tempor", "age": 78171233,
        })]}
        user_map = {
            "fieldDefaults": {"name": "Custom Pet"},
            "endpointOverrides": {"POST:/pets": {"age": 5}},
        }

        result = sanitize_collection(collection, OPENAPI_SPEC, user_map)
        body = _raw(result["item"][0])
        assert body["name"] == "Custom Pet"
        assert body["age"] == 5

    def test_non_json_body_is_skipped(self):
        raw = '{"name": {{petName}}}'
        collection = {"item": [{
            "name": "Create Pet",
            "request": {"method": "POST", "url": {"path": ["pets"]}, "body": {"mode": "raw", "raw": raw}},
        }]}

        sanitizer = Sanitizer(OPENAPI_SPEC)
        result = sanitizer.run(collection)
        assert result["item"][0]["request"]["body"]["raw"] == raw
        assert sanitizer.stats.skipped_bodies == 1

    def test_non_raw_bodies_are_ignored(self):
        body = {"mode": "formdata", "formdata": [{"key": "name", "value": "lorem ipsum"}]}
        collection = {"item": [{
            "name": "Upload",
            "request": {"method": "POST", "url": {"path": ["files"]}, "body": body},
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        assert result["item"][0]["request"]["body"]["formdata"][0]["value"] == "lorem ipsum"


class TestReferencedSchemas:
    SPEC = {"components": {"schemas": {
        "Status": {"type": "string", "enum": ["available", "pending"]},
        "Tag": {"type": "string", "example": "friendly"},
        "Pet": {"type": "object", "properties": {
            "status": {"$ref": "#/components/schemas/Status"},
            "tags": {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}},
        }},
    }}}

    def test_ref_enum_beats_field_name_default(self):
        collection = {"item": [_request("Create Pet", "POST", ["pets"], {"status": "dolor sit amet"})]}

        result = sanitize_collection(collection, self.SPEC)
        assert _raw(result["item"][0]) == {"status": "available"}

    def test_ref_array_items(self):
        collection = {"item": [_request("Create Pet", "POST", ["pets"], {"tags": ["dolor sit amet", "cats"]})]}

        result = sanitize_collection(collection, self.SPEC)
        assert _raw(result["item"][0]) == {"tags": ["friendly", "cats"]}


class TestSanitizeResponses:
    def test_response_example_bodies(self):
        collection = {"item": [{
            "name": "List Users",
            "request": {"method": "GET", "url": {"path": ["users"]}},
            "response": [{
                "body": json.dumps([{
                    "id": "urn:uuid:36a23258-2561-a45b-0feb-223506c7ee66",
                    "email": "9ZcGNifob9M@uyoD.ugb",
                    "name": "aliquip",
                    "createdAt": "1959-10-25T17:44:56.486Z",
                }], indent=2),
            }],
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        body = json.loads(result["item"][0]["response"][0]["body"])
        assert body[0]["id"] == FORMAT_DEFAULTS["uuid"]
        assert body[0]["email"] == "user@example.com"
        assert body[0]["name"] != "aliquip"
        assert body[0]["createdAt"] == "2025-01-15T10:30:00.000Z"

    def test_original_request_body_in_response(self):
        original = {"method": "POST", "url": {"path": ["pets"]},
                    "body": {"mode": "raw", "raw": json.dumps({"status": "dolor sit amet"})}}
        collection = {"item": [{
            "name": "Create Pet",
            "request": {"method": "POST", "url": {"path": ["pets"]}},
            "response": [{"name": "Created", "originalRequest": original, "body": "plain text"}],
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        response = result["item"][0]["response"][0]
        assert json.loads(response["originalRequest"]["body"]["raw"]) == {"status": "available"}
        assert response["body"] == "plain text"


class TestSanitizePathVariables:
    def test_random_uuid_path_variable(self):
        collection = {"item": [{
            "name": "Get Pet",
            "request": {
                "method": "GET",
                "url": {
                    "path": ["pets", ":petId"],
                    "variable": [{"key": "petId", "value": "urn:uuid:36a23258-2561-a45b-0feb-223506c7ee66"}],
                },
            },
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        value = result["item"][0]["request"]["url"]["variable"][0]["value"]
        assert "urn:uuid:" not in value
        assert isinstance(value, str)

    def test_authentic_path_variable_untouched(self):
        variable = {"key": "petId", "value": "42"}
        collection = {"item": [{
            "name": "Get Pet",
            "request": {"method": "GET", "url": {"path": ["pets", ":petId"], "variable": [variable]}},
        }]}

        result = sanitize_collection(collection, OPENAPI_SPEC)
        assert result["item"][0]["request"]["url"]["variable"][0] == {"key": "petId", "value": "42"}


class TestSanitizeWithOperationSchemas:
    """Field schemas of the owning operation take precedence over the global scan."""

    def _spec(self) -> dict:
        return yaml.safe_load((FIXTURES / "petstore.yaml").read_text(encoding="utf-8"))

    def test_request_body_uses_operation_schema(self):
        collection = {"item": [_request("Create a pet", "POST", ["v1", "pets"], {
            "name": "ut labore sint tempor", "weight": 78171233, "vaccinated": True,
        })]}

        result = sanitize_collection(collection, self._spec())
        # Pet.name would give "Buddy"; the NewPet request body declares "Rex"
        assert _raw(result["item"][0]) == {"name": "Rex", "weight": 2, "vaccinated": True}

    def test_path_parameter_schema(self):
        collection = {"item": [{
            "name": "Info for a specific pet",
            "request": {
                "method": "GET",
                "url": {
                    "path": ["v1", "pets", ":petId"],
                    "variable": [{"key": "petId", "value": "urn:uuid:36a23258-2561-a45b-0feb-223506c7ee66"}],
                },
            },
        }]}

        result = sanitize_collection(collection, self._spec())
        assert result["item"][0]["request"]["url"]["variable"][0]["value"] == FORMAT_DEFAULTS["uuid"]

    def test_array_items_schema(self):
        collection = {"item": [_request("Register an owner", "POST", ["owners"], {
            "name": "Lorem ipsum",
            "email": "9ZcGNifob9M@uyoD.ugb",
            "tags": ["dolor sit", "friendly"],
        })]}

        result = sanitize_collection(collection, self._spec())
        assert _raw(result["item"][0]) == {
            "name": "John Doe",
            "email": "user@example.com",
            "tags": ["friendly", "friendly"],
        }

    def test_fixture_collection(self):
        collection = json.loads((FIXTURES / "candidate.postman.json").read_text(encoding="utf-8"))
        sanitizer = Sanitizer(self._spec())
        sanitizer.run(collection)
        pet = collection["item"][0]["item"][1]
        assert pet["request"]["url"]["variable"][0]["value"] == FORMAT_DEFAULTS["uuid"]
        assert sanitizer.stats.replaced == 1
        assert sanitizer.stats.endpoints == {"GET:/pets/{petId}"}


class TestEmptyInput:
    def test_none_and_empty(self):
        assert sanitize_collection(None, {}) is None
        assert sanitize_collection({}, {}) == {}

    def test_collection_without_items(self):
        assert sanitize_collection({"info": {"name": "x"}}, None) == {"info": {"name": "x"}}
