"""Replacement value resolution for flagged placeholder fields."""

import math
from types import MappingProxyType
from typing import Any

from postman_sync.models import FieldSchema, UserValueMap

FORMAT_DEFAULTS = MappingProxyType({
    "uuid": "550e8400-e29b-41d4-a716-446655440000",
    "email": "user@example.com",
    "date-time": "2025-01-15T10:30:00.000Z",
    "date": "2025-01-15",
    "time": "10:30:00",
    "uri": "https://example.com",
    "url": "https://example.com",
    "hostname": "api.example.com",
    "ipv4": "192.168.1.1",
    "ipv6": "2001:db8::1",
    "password": "P@ssw0rd123",
    "byte": "U3dhZ2dlciByb2Nrcw==",
    "phone": "+1-555-123-4567",
})

FIELD_NAME_DEFAULTS = MappingProxyType({
    "id": 1,
    "email": "user@example.com",
    "name": "John Doe",
    "firstName": "John",
    "lastName": "Doe",
    "fullName": "John Doe",
    "username": "johndoe",
    "password": "P@ssw0rd123",
    "age": 25,
    "phone": "+1-555-123-4567",
    "phoneNumber": "+1-555-123-4567",
    "address": "123 Main St",
    "street": "123 Main St",
    "city": "Springfield",
    "state": "IL",
    "country": "US",
    "zip": "62701",
    "zipCode": "62701",
    "postalCode": "62701",
    "company": "Acme Corp",
    "title": "Sample Title",
    "description": "Sample description",
    "summary": "Sample summary",
    "comment": "Looks good",
    "message": "Hello, world!",
    "url": "https://example.com",
    "website": "https://example.com",
    "avatar": "https://example.com/avatar.png",
    "image": "https://example.com/image.png",
    "photoUrl": "https://example.com/photo.png",
    "status": "active",
    "type": "default",
    "role": "user",
    "category": "general",
    "tag": "sample",
    "color": "blue",
    "price": 9.99,
    "amount": 100,
    "quantity": 1,
    "count": 1,
    "currency": "USD",
    "language": "en",
    "locale": "en-US",
    "timezone": "UTC",
    "token": "sample-token",
    "createdAt": "2025-01-15T10:30:00.000Z",
    "updatedAt": "2025-01-15T10:30:00.000Z",
    "date": "2025-01-15",
    "birthDate": "1990-05-20",
    "dateOfBirth": "1990-05-20",
})

_NAME_DEFAULTS_LOWER = MappingProxyType({k.lower(): v for k, v in FIELD_NAME_DEFAULTS.items()})
_SUFFIX_NAMES = tuple(sorted(FIELD_NAME_DEFAULTS, key=len, reverse=True))

TYPE_FALLBACK_NUMBER = 1
TYPE_FALLBACK_BOOLEAN = True
SHORT_SUFFIX_LENGTH = 2


def resolve_value(
    field_name: str | None,
    field_schema: FieldSchema | dict | None = None,
    value_map: UserValueMap | dict | None = None,
    endpoint_key: str | None = None,
) -> Any:
    """Resolve a realistic value for a field; first match wins.

    Order: endpoint override, field default, schema example, first enum
    value, format default, field-name default, type fallback. Returns None
    when nothing applies.
    """
    schema = FieldSchema.from_raw(field_schema)
    user_map = _as_value_map(value_map)

    if user_map is not None and field_name is not None:
        if endpoint_key:
            overrides = user_map.endpoint_overrides.get(endpoint_key, {})
            if field_name in overrides:
                return overrides[field_name]
        if field_name in user_map.field_defaults:
            return user_map.field_defaults[field_name]

    if schema.has_example:
        return schema.example

    if schema.enum:
        return schema.enum[0]

    if schema.format in FORMAT_DEFAULTS:
        return FORMAT_DEFAULTS[schema.format]

    if field_name:
        found, value = lookup_field_name(field_name)
        if found:
            return value

    return _type_fallback(schema)


def lookup_field_name(field_name: str) -> tuple[bool, Any]:
    """Case-insensitive exact match, then the longest known name the field ends with.

    Suffixes match case-insensitively (``petName``, ``petname``). Names of
    ``SHORT_SUFFIX_LENGTH`` letters or fewer need a word boundary so
    that ``paid`` does not resolve as ``id``.
    """
    lowered = field_name.lower()
    if lowered in _NAME_DEFAULTS_LOWER:
        return True, _NAME_DEFAULTS_LOWER[lowered]

    for known in _SUFFIX_NAMES:
        size = len(known)
        if len(field_name) <= size or not lowered.endswith(known.lower()):
            continue
        if size > SHORT_SUFFIX_LENGTH or _at_word_boundary(field_name, size):
            return True, FIELD_NAME_DEFAULTS[known]
    return False, None


def _at_word_boundary(field_name: str, size: int) -> bool:
    head = field_name[-size]
    before = field_name[-size - 1]
    return head.isupper() or before in "_-." or before.isdigit()


def _type_fallback(schema: FieldSchema):
    if schema.type in ("integer", "number"):
        if schema.minimum is None and schema.maximum is None:
            return None
        value = TYPE_FALLBACK_NUMBER
        if schema.minimum is not None:
            value = max(value, schema.minimum)
        if schema.maximum is not None:
            value = min(value, schema.maximum)
        if schema.type == "integer":
            value = math.ceil(value)
        return value
    if schema.type == "boolean":
        return TYPE_FALLBACK_BOOLEAN
    return None


def _as_value_map(value_map) -> UserValueMap | None:
    if value_map is None or isinstance(value_map, UserValueMap):
        return value_map
    return UserValueMap.model_validate(value_map)
