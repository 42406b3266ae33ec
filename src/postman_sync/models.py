"""Typed value objects shared by the sanitizer, the merger and the CLI.

Collections and specifications themselves stay plain JSON structures so
that fields we do not know about survive a read-modify-write cycle.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldSchema(BaseModel):
    """Descriptor of a single property declared in an OpenAPI schema."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = None
    format: str | None = None
    example: Any = None
    enum: list[Any] | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None

    @classmethod
    def from_raw(cls, raw: "dict | FieldSchema | None") -> "FieldSchema":
        if isinstance(raw, FieldSchema):
            return raw
        if not isinstance(raw, dict):
            return cls()
        data = dict(raw)
        # Swagger/OpenAPI allow a list of types; the first non-null one is enough here.
        if isinstance(data.get("type"), list):
            types = [t for t in data["type"] if t != "null"]
            data["type"] = types[0] if types else None
        if not isinstance(data.get("enum"), list):
            data.pop("enum", None)
        for bound in ("minimum", "maximum"):
            if isinstance(data.get(bound), bool) or not isinstance(data.get(bound), (int, float)):
                data.pop(bound, None)
        if not isinstance(data.get("format"), str):
            data.pop("format", None)
        if not isinstance(data.get("type"), str):
            data.pop("type", None)
        return cls.model_validate(data)

    @property
    def has_example(self) -> bool:
        return "example" in self.model_fields_set and self.example is not None


class UserValueMap(BaseModel):
    """User-supplied replacement values.

    ``endpoint_overrides[key][field]`` outranks ``field_defaults[field]``,
    which outranks every built-in heuristic.
    """

    model_config = ConfigDict(populate_by_name=True)

    field_defaults: dict[str, Any] = Field(default_factory=dict, alias="fieldDefaults")
    endpoint_overrides: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="endpointOverrides"
    )


class MergeOptions(BaseModel):
    """Collection-level preservation toggles for the merger."""

    preserve_tests: bool = True
    preserve_prerequest: bool = True
    preserve_variables: bool = True


class ConversionOptions(BaseModel):
    """Options handed to the external OpenAPI to Postman converter."""

    folder_strategy: str = "tags"  # tags / paths
    include_auth: bool = True
    parameters_resolution: str = "Example"
    optimize_conversion: bool = True
    stack_limit: int = 50


class DiffReport(BaseModel):
    """Endpoints added, removed and preserved between two collections."""

    added: list[str] = []
    removed: list[str] = []
    preserved: list[str] = []

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)
