"""JSON-LD serialization of a fetched dataset.

A read-only projection: the dataset is never mutated, and the document can be
produced independently of the graph model.
"""

from typing import Any, Dict, List

from .entities import CollectionDetail, CombinedDataset
from .extractor import extract_requests

DOCUMENT_NAME = "Postman Workspace Knowledge Graph"
DOCUMENT_DESCRIPTION = (
    "Linked data representation of Postman workspaces, collections, and requests"
)
UNKNOWN_CREATOR = "Unknown User"

CONTEXT: Dict[str, str] = {
    "@vocab": "http://schema.org/",
    "postman": "http://postman.com/schema/",
    "workspace": "postman:workspace",
    "collection": "postman:collection",
    "request": "postman:request",
    "environment": "postman:environment",
}


def _collection_part(collection: CollectionDetail) -> Dict[str, Any]:
    info = collection.info
    requests = extract_requests(collection.item, scope=info.id)
    return {
        "@type": "collection",
        "@id": f"postman:collection:{info.id}",
        "name": info.name,
        "description": info.description or "",
        "hasPart": [
            {
                "@type": "request",
                "@id": f"postman:request:{request.id}",
                "name": request.name,
                "method": request.method,
                "url": request.url,
                "parentFolder": request.parent_folder,
            }
            for request in requests
        ],
    }


def to_linked_document(dataset: CombinedDataset) -> Dict[str, Any]:
    """Build the JSON-LD document for a dataset.

    ``hasPart`` lists workspaces, then detailed collections (each with its
    requests nested), then environments.
    """
    parts: List[Dict[str, Any]] = []

    for workspace in dataset.workspaces:
        parts.append({
            "@type": "workspace",
            "@id": f"postman:workspace:{workspace.id}",
            "name": workspace.name,
            "description": workspace.description or "",
            "type": workspace.type,
        })

    for collection in dataset.detailed_collections:
        parts.append(_collection_part(collection))

    for environment in dataset.environments:
        parts.append({
            "@type": "environment",
            "@id": f"postman:environment:{environment.id}",
            "name": environment.name,
        })

    return {
        "@context": dict(CONTEXT),
        "@type": "Dataset",
        "name": DOCUMENT_NAME,
        "description": DOCUMENT_DESCRIPTION,
        "dateCreated": dataset.timestamp,
        "creator": {
            "@type": "Person",
            "name": dataset.user.username or UNKNOWN_CREATOR,
        },
        "hasPart": parts,
    }
