"""Merges a regenerated collection into the previous one, keeping its scripts.

Requests are matched across versions by endpoint key (method + normalized
path), not by name or folder. The candidate's structure and request
definitions always win; non-empty ``prerequest``/``test`` scripts from the
previous version are carried over wherever the candidate has none.
"""

import copy
import logging

from postman_sync.collection import (
    endpoint_key,
    find_event,
    has_script,
    is_empty_script,
    is_folder,
    iter_requests,
)
from postman_sync.models import MergeOptions

logger = logging.getLogger(__name__)


def build_request_index(items: list[dict]) -> dict[str, dict]:
    """Map endpoint key -> request for every request leaf. Duplicate keys: last wins."""
    index: dict[str, dict] = {}
    for item in iter_requests(items):
        key = endpoint_key(item)
        if key in index:
            logger.debug("Duplicate endpoint key %s, keeping the last one", key)
        index[key] = item
    return index


def merge_request(candidate: dict, previous: dict) -> dict:
    """Copy of ``candidate`` with the previous request's non-empty scripts spliced in."""
    merged = copy.deepcopy(candidate)

    previous_events = previous.get("event") or []
    if not previous_events:
        return merged

    created = not isinstance(merged.get("event"), list)
    if created:
        merged["event"] = []
    events = merged["event"]
    for event in previous_events:
        if not has_script(event):
            continue
        index = find_event(events, event.get("listen"))
        if index == -1:
            events.append(copy.deepcopy(event))
        elif is_empty_script(events[index]):
            events[index] = copy.deepcopy(event)
        # a generated non-empty script is kept as is
    if created and not events:
        del merged["event"]
    return merged


def merge_items(items: list[dict], index: dict[str, dict]) -> list[dict]:
    """Walk the candidate tree and merge every request that has a previous match."""
    merged = []
    for item in items:
        if is_folder(item):
            folder = {k: copy.deepcopy(v) for k, v in item.items() if k != "item"}
            folder["item"] = merge_items(item["item"], index)
            merged.append(folder)
            continue

        previous = index.get(endpoint_key(item))
        if previous is None:
            merged.append(copy.deepcopy(item))
        else:
            merged.append(merge_request(item, previous))
    return merged


def merge_collections(
    candidate: dict,
    previous: dict | None,
    options: MergeOptions | None = None,
) -> dict:
    """Merge a freshly generated collection with the previously saved one.

    With no previous collection the candidate is returned as is (first run).
    ``candidate`` itself is never modified.
    """
    if previous is None:
        return candidate
    options = options or MergeOptions()

    index = build_request_index(previous.get("item", []))
    logger.debug("Found %d existing endpoints", len(index))

    merged = {k: copy.deepcopy(v) for k, v in candidate.items() if k != "item"}
    merged["info"] = merged.get("info") or {}
    previous_id = (previous.get("info") or {}).get("_postman_id")
    if previous_id:
        # keeps the collection linked to the same Postman workspace entry
        merged["info"]["_postman_id"] = previous_id
    merged["item"] = merge_items(candidate.get("item", []), index)

    if options.preserve_prerequest:
        _preserve_collection_event(merged, previous, "prerequest")
    if options.preserve_tests:
        _preserve_collection_event(merged, previous, "test")
    if options.preserve_variables:
        _preserve_variables(merged, previous)

    return merged


def _preserve_collection_event(merged: dict, previous: dict, listen: str) -> None:
    previous_events = previous.get("event") or []
    index = find_event(previous_events, listen)
    if index == -1:
        return

    events = list(merged.get("event") or [])
    if find_event(events, listen) == -1:
        events.append(copy.deepcopy(previous_events[index]))
        merged["event"] = events
        logger.info("Preserved collection-level %s script", listen)


def _preserve_variables(merged: dict, previous: dict) -> None:
    previous_vars = previous.get("variable") or []
    if not previous_vars:
        return

    variables = list(merged.get("variable") or [])
    known = {v.get("key") for v in variables}
    for variable in previous_vars:
        if variable.get("key") not in known:
            variables.append(copy.deepcopy(variable))
            known.add(variable.get("key"))
            logger.debug("Preserved variable: %s", variable.get("key"))
    merged["variable"] = variables
