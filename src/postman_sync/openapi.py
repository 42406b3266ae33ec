"""OpenAPI / Swagger schema lookups used by the value sanitizer.

Supports OpenAPI 3.x (``components``) and Swagger 2.0 (``definitions``,
inline parameter types). Every lookup degrades to an empty result instead
of raising: the specification is consulted for hints, not validated.
"""

HTTP_METHODS = ("get", "post", "put", "delete", "patch", "head", "options", "trace")


def build_schema_map(spec: dict | None) -> dict[str, dict[str, dict]]:
    """Flatten declared object schemas into ``{schema_name: {field: descriptor}}``."""
    if not isinstance(spec, dict):
        return {}

    schemas = (spec.get("components") or {}).get("schemas")
    if not isinstance(schemas, dict):
        schemas = spec.get("definitions")
    if not isinstance(schemas, dict):
        return {}

    result = {}
    for name, schema in schemas.items():
        properties = _collect_properties(spec, schema)
        if properties:
            result[name] = properties
    return result


def find_field_schema(field_name: str, schema_map: dict[str, dict[str, dict]]) -> dict | None:
    """Return the first descriptor any schema declares for ``field_name``."""
    for fields in schema_map.values():
        if field_name in fields:
            return fields[field_name]
    return None


def find_operation(spec: dict | None, endpoint_key: str) -> tuple[dict, dict] | None:
    """Locate the (path item, operation) pair matching an endpoint key.

    Falls back to a suffix match so that server or basePath prefixes the
    converter folds into the request path (``/v1/pets``) still find ``/pets``.
    """
    if not isinstance(spec, dict) or ":" not in endpoint_key:
        return None
    paths = spec.get("paths")
    if not isinstance(paths, dict):
        return None

    method, _, key_path = endpoint_key.partition(":")
    method = method.lower()
    key_segments = _segments(key_path)

    suffix_match = None
    for path, path_item in paths.items():
        if not isinstance(path_item, dict) or not isinstance(path_item.get(method), dict):
            continue
        spec_segments = _segments(path)
        if spec_segments == key_segments:
            return path_item, path_item[method]
        if (
            suffix_match is None
            and spec_segments
            and len(spec_segments) < len(key_segments)
            and key_segments[-len(spec_segments):] == spec_segments
        ):
            suffix_match = (path_item, path_item[method])
    return suffix_match


def parameter_schemas(spec: dict | None, endpoint_key: str) -> dict[str, dict]:
    """Descriptors of the path-level and operation-level parameters, by name."""
    found = find_operation(spec, endpoint_key)
    if found is None:
        return {}
    path_item, operation = found

    result = {}
    # operation-level parameters override path-level ones with the same name
    for param in list(path_item.get("parameters") or []) + list(operation.get("parameters") or []):
        param = _resolve_ref(spec, param)
        if not isinstance(param, dict) or "name" not in param:
            continue
        schema = param.get("schema")
        if isinstance(schema, dict):
            descriptor = dict(_resolve_descriptor(spec, schema))
        else:
            # Swagger 2.0 declares type/format inline on the parameter
            descriptor = {k: v for k, v in param.items() if k not in ("name", "in", "required", "description")}
        if "example" in param and "example" not in descriptor:
            descriptor["example"] = param["example"]
        result[param["name"]] = descriptor
    return result


def operation_field_schemas(spec: dict | None, endpoint_key: str) -> dict[str, dict]:
    """Properties of the operation's JSON request body schema, if it has one."""
    found = find_operation(spec, endpoint_key)
    if found is None:
        return {}
    _, operation = found

    schema = None
    body = _resolve_ref(spec, operation.get("requestBody"))
    if isinstance(body, dict):
        content = body.get("content") or {}
        schema = _json_schema(content)
    else:
        for param in operation.get("parameters") or []:
            param = _resolve_ref(spec, param)
            if isinstance(param, dict) and param.get("in") == "body":
                schema = param.get("schema")
                break

    return _collect_properties(spec, _unwrap_array(spec, schema))


def response_field_schemas(spec: dict | None, endpoint_key: str) -> dict[str, dict]:
    """Properties of every JSON response schema the operation declares."""
    found = find_operation(spec, endpoint_key)
    if found is None:
        return {}
    _, operation = found

    properties = {}
    responses = operation.get("responses") or {}
    for response in responses.values():
        response = _resolve_ref(spec, response)
        if not isinstance(response, dict):
            continue
        schema = _json_schema(response.get("content") or {}) or response.get("schema")
        for name, descriptor in _collect_properties(spec, _unwrap_array(spec, schema)).items():
            properties.setdefault(name, descriptor)
    return properties


def _json_schema(content: dict):
    """Schema of the JSON media type, else of the first media type declared."""
    for content_type in ("application/json", *content.keys()):
        if isinstance(content.get(content_type), dict):
            return content[content_type].get("schema")
    return None


def _unwrap_array(spec: dict, schema):
    schema = _resolve_ref(spec, schema)
    if isinstance(schema, dict) and schema.get("type") == "array":
        return _resolve_ref(spec, schema.get("items"))
    return schema


def _collect_properties(spec: dict, schema) -> dict[str, dict]:
    schema = _resolve_ref(spec, schema)
    if not isinstance(schema, dict):
        return {}

    properties = {}
    for part in schema.get("allOf") or []:
        properties.update(_collect_properties(spec, part))
    if isinstance(schema.get("properties"), dict):
        for name, descriptor in schema["properties"].items():
            descriptor = _resolve_descriptor(spec, descriptor)
            if isinstance(descriptor, dict):
                properties[name] = descriptor
    return properties


def _resolve_descriptor(spec: dict, descriptor, depth: int = 0):
    """Inline a property descriptor: follow its ``$ref``, merge ``allOf`` parts, resolve array items."""
    descriptor = _resolve_ref(spec, descriptor)
    if not isinstance(descriptor, dict) or depth > 10:
        return descriptor

    resolved = {}
    for part in descriptor.get("allOf") or []:
        part = _resolve_descriptor(spec, part, depth + 1)
        if isinstance(part, dict):
            resolved.update(part)
    # keys declared next to allOf override the merged parts
    resolved.update({k: v for k, v in descriptor.items() if k != "allOf"})
    if isinstance(resolved.get("items"), dict):
        resolved["items"] = _resolve_descriptor(spec, resolved["items"], depth + 1)
    return resolved


def _resolve_ref(spec: dict, node, depth: int = 0):
    """Follow a local ``$ref`` (``#/components/...`` or ``#/definitions/...``)."""
    if not isinstance(node, dict) or "$ref" not in node or depth > 10:
        return node
    ref = node["$ref"]
    if not isinstance(ref, str) or not ref.startswith("#/"):
        return node

    target = spec
    for part in ref[2:].split("/"):
        part = part.replace("~1", "/").replace("~0", "~")
        if not isinstance(target, dict) or part not in target:
            return node
        target = target[part]
    return _resolve_ref(spec, target, depth + 1)


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s]
