"""Postman Collection v2.1 tree helpers.

Collections are kept as parsed JSON. A node with an ``item`` list is a
folder, anything else is a request.
"""

import re
from collections.abc import Iterator

HOST_PREFIX = re.compile(r"^https?://[^/]+")


def is_folder(node: dict) -> bool:
    return isinstance(node.get("item"), list)


def iter_requests(items: list[dict]) -> Iterator[dict]:
    """Yield request leaves depth-first (supports nested folders)."""
    for item in items or []:
        if is_folder(item):
            yield from iter_requests(item["item"])
        else:
            yield item


def count_requests(items: list[dict]) -> int:
    return sum(1 for _ in iter_requests(items))


def endpoint_key(item: dict) -> str:
    """Build the ``METHOD:/path/{var}`` key identifying a request across versions.

    The method is upper-cased and ``:var`` path segments become ``{var}``, so
    ``GET`` + ``['pets', ':petId']`` gives ``GET:/pets/{petId}``.
    """
    req = item.get("request") or {}
    if isinstance(req, str):
        # v2.1 allows a bare URL string as the request
        req = {"url": req}

    method = req.get("method")
    method = method.upper() if isinstance(method, str) and method else "GET"

    segments = [_normalize_segment(s) for s in _path_segments(req.get("url"))]
    return f"{method}:/" + "/".join(s for s in segments if s)


def display_paths(items: list[dict], prefix: str = "") -> list[str]:
    """Return ``Folder/Sub/Request name`` strings for every request, in tree order."""
    paths = []
    for item in items or []:
        name = item.get("name", "")
        if is_folder(item):
            paths.extend(display_paths(item["item"], f"{prefix}{name}/"))
        else:
            paths.append(f"{prefix}{name}")
    return paths


def script_lines(event: dict | None) -> list[str]:
    script = (event or {}).get("script") or {}
    exec_ = script.get("exec")
    if isinstance(exec_, str):
        return [exec_]
    if isinstance(exec_, list):
        return [line for line in exec_ if isinstance(line, str)]
    return []


def has_script(event: dict | None) -> bool:
    """True if the event carries at least one non-blank script line."""
    return any(line.strip() for line in script_lines(event))


def is_empty_script(event: dict | None) -> bool:
    return not has_script(event)


def find_event(events: list[dict], listen: str) -> int:
    """Index of the first event of the given listen type, or -1."""
    for i, event in enumerate(events):
        if event.get("listen") == listen:
            return i
    return -1


def override_base_url(collection: dict, base_url: str) -> dict:
    """Replace the scheme+host of every request URL with ``base_url``."""
    host = re.sub(r"^https?://", "", base_url)
    for item in iter_requests(collection.get("item", [])):
        req = item.get("request")
        if not isinstance(req, dict) or not req.get("url"):
            continue
        url = req["url"]
        if isinstance(url, str):
            req["url"] = HOST_PREFIX.sub(base_url, url)
        elif isinstance(url, dict) and isinstance(url.get("raw"), str):
            url["raw"] = HOST_PREFIX.sub(base_url, url["raw"])
            url["host"] = [host]
    return collection


def add_variables(collection: dict, variables: dict) -> dict:
    """Append ``{key, value, type: string}`` entries to the collection variables."""
    target = collection.setdefault("variable", [])
    for key, value in variables.items():
        target.append({"key": key, "value": value, "type": "string"})
    return collection


def _path_segments(url) -> list[str]:
    if isinstance(url, str):
        return _segments_from_raw(url)
    if not isinstance(url, dict):
        return []

    path = url.get("path")
    if isinstance(path, list):
        return [_segment_value(s) for s in path]
    if isinstance(path, str):
        return path.split("/")
    if isinstance(url.get("raw"), str):
        return _segments_from_raw(url["raw"])
    return []


def _segments_from_raw(raw: str) -> list[str]:
    raw = raw.split("?", 1)[0].split("#", 1)[0]
    raw = HOST_PREFIX.sub("", raw)
    segments = raw.split("/")
    # "{{baseUrl}}/pets" keeps the host in a variable
    if segments and segments[0].startswith("{{"):
        segments = segments[1:]
    return segments


def _segment_value(segment) -> str:
    if isinstance(segment, dict):
        return str(segment.get("value", ""))
    return str(segment)


def _normalize_segment(segment: str) -> str:
    if segment.startswith(":") and len(segment) > 1:
        return "{" + segment[1:] + "}"
    return segment
