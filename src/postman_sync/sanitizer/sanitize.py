"""Replaces generator placeholders in a collection with realistic values.

Walks every request of a collection and inspects the raw JSON request
body, each saved response example and the URL path variables. Values that
look authentic are never touched; placeholders are replaced through
``resolve_value`` and kept as they are when nothing resolves.
"""

import json
import logging
from dataclasses import dataclass, field

from postman_sync.collection import endpoint_key, iter_requests
from postman_sync.models import UserValueMap
from postman_sync.openapi import (
    build_schema_map,
    find_field_schema,
    operation_field_schemas,
    parameter_schemas,
    response_field_schemas,
)
from postman_sync.sanitizer.heuristics import is_random_value
from postman_sync.sanitizer.resolver import resolve_value
from postman_sync.sanitizer.walker import walk_json

logger = logging.getLogger(__name__)


@dataclass
class SanitizeStats:
    replaced: int = 0
    unresolved: int = 0
    skipped_bodies: int = 0
    endpoints: set[str] = field(default_factory=set)


class Sanitizer:
    """Sanitizes collections against one OpenAPI document and value map."""

    def __init__(self, spec: dict | None, value_map: UserValueMap | dict | None = None):
        self.spec = spec
        self.schema_map = build_schema_map(spec)
        if isinstance(value_map, dict):
            value_map = UserValueMap.model_validate(value_map)
        self.value_map = value_map
        self.stats = SanitizeStats()

    def run(self, collection: dict | None) -> dict | None:
        """Sanitize ``collection`` in place and return it."""
        if not collection:
            return collection

        for item in iter_requests(collection.get("item", [])):
            self._sanitize_request(item)

        logger.info(
            "Sanitized %d value(s) across %d endpoint(s), %d left unresolved",
            self.stats.replaced, len(self.stats.endpoints), self.stats.unresolved,
        )
        return collection

    def _sanitize_request(self, item: dict) -> None:
        req = item.get("request")
        if not isinstance(req, dict):
            return
        key = endpoint_key(item)

        request_fields = operation_field_schemas(self.spec, key)
        self._sanitize_body(req.get("body"), key, request_fields)
        self._sanitize_path_variables(req.get("url"), key)

        response_fields = response_field_schemas(self.spec, key)
        for response in item.get("response") or []:
            if not isinstance(response, dict):
                continue
            if isinstance(response.get("body"), str):
                response["body"] = self._sanitize_json_text(response["body"], key, response_fields)
            original = response.get("originalRequest")
            if isinstance(original, dict):
                self._sanitize_body(original.get("body"), key, request_fields)

    def _sanitize_body(self, body, key: str, fields: dict[str, dict]) -> None:
        if not isinstance(body, dict) or body.get("mode") != "raw":
            return
        if isinstance(body.get("raw"), str):
            body["raw"] = self._sanitize_json_text(body["raw"], key, fields)

    def _sanitize_json_text(self, text: str, key: str, fields: dict[str, dict]) -> str:
        """Sanitize a JSON document held in a string; non-JSON text is returned as is."""
        if not text.strip():
            return text
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            self.stats.skipped_bodies += 1
            logger.debug("Skipping non-JSON body for %s", key)
            return text

        before = self.stats.replaced
        data = walk_json(data, lambda name, value: self._sanitize_leaf(name, value, key, fields))
        if self.stats.replaced == before:
            # untouched bodies keep their original formatting
            return text
        return json.dumps(data, indent=2, ensure_ascii=False)

    def _sanitize_path_variables(self, url, key: str) -> None:
        if not isinstance(url, dict):
            return
        params = parameter_schemas(self.spec, key)
        for variable in url.get("variable") or []:
            if not isinstance(variable, dict) or "key" not in variable:
                continue
            value = self._sanitize_leaf(variable["key"], variable.get("value"), key, params)
            if value is not variable.get("value"):
                variable["value"] = value if isinstance(value, str) else json.dumps(value)

    def _sanitize_leaf(self, name: str | None, value, key: str, fields: dict[str, dict]):
        if not is_random_value(value):
            return value

        descriptor = self._field_schema(name, fields)
        replacement = resolve_value(name, descriptor, self.value_map, key)
        if replacement is None:
            self.stats.unresolved += 1
            logger.debug("No replacement for %s.%s, keeping %r", key, name, value)
            return value

        self.stats.replaced += 1
        self.stats.endpoints.add(key)
        logger.debug("%s: %s %r -> %r", key, name, value, replacement)
        return replacement

    def _field_schema(self, name: str | None, fields: dict[str, dict]) -> dict | None:
        if name is None:
            return None
        descriptor = fields.get(name) or find_field_schema(name, self.schema_map)
        # a scalar under an array-typed field is one of its items
        if isinstance(descriptor, dict) and descriptor.get("type") == "array":
            items = descriptor.get("items")
            return items if isinstance(items, dict) else None
        return descriptor


def sanitize_collection(
    collection: dict | None,
    spec: dict | None,
    value_map: UserValueMap | dict | None = None,
) -> dict | None:
    """Replace generator placeholders in ``collection`` with realistic values."""
    return Sanitizer(spec, value_map).run(collection)
