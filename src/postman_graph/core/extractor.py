"""Request extraction from collection item trees.

Flattens the nested folder hierarchy of a Postman collection into a list of
request records, depth-first in encounter order.
"""

import hashlib
from typing import Any, List, Sequence

from .entities import (
    CollectionItem,
    FolderItem,
    PostmanEntity,
    RequestItem,
    parse_items,
)


class RequestRecord(PostmanEntity):
    """A single request pulled out of a collection tree."""
    id: str
    name: str
    method: str
    url: str
    parent_folder: str = ""


def synthesize_request_id(scope: str, position: str) -> str:
    """Derive a stable id for an item that has none.

    Args:
        scope: Owning collection id (keeps ids distinct across collections)
        position: Dotted index path of the item within the tree (e.g. "0.2.1")
    """
    digest = hashlib.sha1(f"{scope}:{position}".encode("utf-8")).hexdigest()
    return f"req_{digest[:9]}"


def _coerce(items: Any) -> List[CollectionItem]:
    if not isinstance(items, list):
        return []
    return parse_items(items)


def extract_requests(
    items: Any,
    parent_folder: str = "",
    *,
    scope: str = "",
) -> List[RequestRecord]:
    """Extract request records from a collection item tree.

    Args:
        items: Item list (raw dicts or decoded items). Anything that is not a
            list yields an empty result.
        parent_folder: Name of the enclosing folder ("" at the top level)
        scope: Collection id used when an item id has to be synthesized

    Returns:
        Request records in depth-first encounter order. Each record's
        ``parent_folder`` is the name of its immediate folder.
    """
    return _walk(_coerce(items), parent_folder, scope, "")


def _walk(
    items: Sequence[CollectionItem],
    parent_folder: str,
    scope: str,
    prefix: str,
) -> List[RequestRecord]:
    requests: List[RequestRecord] = []

    for index, item in enumerate(items):
        position = f"{prefix}{index}"
        if isinstance(item, RequestItem):
            requests.append(
                RequestRecord(
                    id=item.id or synthesize_request_id(scope, position),
                    name=item.name,
                    method=item.request.resolved_method,
                    url=item.request.resolved_url,
                    parent_folder=parent_folder,
                )
            )
        elif isinstance(item, FolderItem):
            requests.extend(_walk(item.item, item.name, scope, f"{position}."))

    return requests


def extract_folders(items: Any) -> List[str]:
    """Collect folder names recursively, first appearance wins."""
    folders: List[str] = []
    seen = set()

    def visit(level: Sequence[CollectionItem]) -> None:
        for item in level:
            if isinstance(item, FolderItem):
                if item.name not in seen:
                    seen.add(item.name)
                    folders.append(item.name)
                visit(item.item)

    visit(_coerce(items))
    return folders
