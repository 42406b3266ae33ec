"""Reading and writing the JSON/YAML documents a sync run works on."""

import json
import logging
from pathlib import Path

import requests
import yaml
from pydantic import ValidationError

from postman_sync.errors import MalformedInputError, MissingInputError, SpecLoadError
from postman_sync.models import UserValueMap

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30


def read_json(file_path: Path) -> dict:
    """Read and parse a JSON file."""
    try:
        text = file_path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise MissingInputError(f"File not found: {file_path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedInputError(f"Failed to read {file_path}: {e}") from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedInputError(f"Failed to parse JSON file {file_path}: {e}") from e


def write_json(file_path: Path, data) -> None:
    """Write JSON with two-space indentation, creating parent directories."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def load_collection(file_path: Path) -> dict:
    """Load a Postman collection and check that it has an item list."""
    data = read_json(file_path)
    if not isinstance(data, dict) or not isinstance(data.get("item"), list):
        raise MalformedInputError(f"Not a Postman collection (no 'item' list): {file_path}")
    return data


def load_openapi(source: str | Path) -> dict:
    """Load an OpenAPI/Swagger document from a file path or an http(s) URL."""
    source_str = str(source)
    if source_str.startswith(("http://", "https://")):
        text = _fetch(source_str)
    else:
        path = Path(source)
        if not path.exists():
            raise MissingInputError(f"Input file not found: {path}")
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedInputError(f"Failed to read OpenAPI document {path}: {e}") from e

    # YAML is a superset of JSON, so one parser covers both
    try:
        doc = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise MalformedInputError(f"Failed to parse OpenAPI document {source_str}: {e}") from e

    if not isinstance(doc, dict):
        raise MalformedInputError(f"OpenAPI document must be a mapping: {source_str}")
    if "openapi" not in doc and "swagger" not in doc:
        raise MalformedInputError(
            f"Invalid OpenAPI specification: missing \"openapi\" or \"swagger\" field in {source_str}"
        )
    return doc


def spec_version(doc: dict) -> str:
    return str(doc.get("openapi") or doc.get("swagger"))


def load_value_map(file_path: Path) -> UserValueMap | None:
    """Load a user value map; a missing file means built-in defaults only."""
    if not file_path.exists():
        logger.warning("Values map file not found: %s, using built-in defaults only", file_path)
        return None

    data = read_json(file_path)
    try:
        return UserValueMap.model_validate(data)
    except ValidationError as e:
        raise MalformedInputError(f"Invalid values map {file_path}: {e}") from e


def _fetch(url: str) -> str:
    try:
        response = requests.get(url, timeout=FETCH_TIMEOUT)
    except requests.RequestException as e:
        raise SpecLoadError(f"Failed to fetch {url}: {e}") from e
    if response.status_code != 200:
        raise SpecLoadError(f"HTTP {response.status_code}: Failed to fetch {url}")
    return response.text
