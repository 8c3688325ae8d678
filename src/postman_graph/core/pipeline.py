"""Load pipeline: fetch -> graph model + linked-data document.

The host (CLI or any other front end) calls :func:`run_pipeline` once per load;
each call replaces the previous result entirely.
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

from pydantic import BaseModel, Field

from .client import PostmanClient
from .entities import CombinedDataset
from .extractor import extract_requests
from .graph import GraphData, build_graph
from .linked_data import to_linked_document

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "postman-knowledge-graph"


@dataclass
class KnowledgeGraphResult:
    """Both views of one load cycle."""
    dataset: CombinedDataset
    graph: GraphData
    document: Dict[str, Any]


class DatasetStats(BaseModel):
    """Summary counts for a dataset."""
    user: str = "Unknown"
    workspaces: int = 0
    collections: int = 0
    detailed_collections: int = 0
    environments: int = 0
    total_requests: int = 0
    request_methods: Dict[str, int] = Field(default_factory=dict)


async def run_pipeline(client: PostmanClient) -> KnowledgeGraphResult:
    """Fetch all data and build the graph and JSON-LD views.

    Errors from the fetch step propagate unchanged.
    """
    dataset = await client.load_all()
    return build_result(dataset)


def build_result(dataset: CombinedDataset) -> KnowledgeGraphResult:
    """Transform an already-fetched dataset into both views."""
    graph = build_graph(dataset)
    document = to_linked_document(dataset)
    logger.info(
        f"Knowledge graph ready: {len(graph.nodes)} nodes, {len(graph.edges)} edges, "
        f"{len(document['hasPart'])} linked-data parts"
    )
    return KnowledgeGraphResult(dataset=dataset, graph=graph, document=document)


def has_entities(dataset: CombinedDataset) -> bool:
    """True if there is at least one workspace, collection or environment."""
    return bool(dataset.workspaces or dataset.collections or dataset.environments)


def dataset_stats(dataset: CombinedDataset) -> DatasetStats:
    """Count entities, and requests by method over the detailed collections."""
    methods: Counter = Counter()
    for collection in dataset.detailed_collections:
        for request in extract_requests(collection.item, scope=collection.info.id):
            methods[request.method] += 1

    return DatasetStats(
        user=dataset.user.username or "Unknown",
        workspaces=len(dataset.workspaces),
        collections=len(dataset.collections),
        detailed_collections=len(dataset.detailed_collections),
        environments=len(dataset.environments),
        total_requests=sum(methods.values()),
        request_methods=dict(methods),
    )


def export_filename(timestamp: str) -> str:
    """File name for an export, dated by the dataset timestamp (YYYY-MM-DD)."""
    day = timestamp.split("T")[0] if timestamp else datetime.now().date().isoformat()
    return f"{EXPORT_PREFIX}-{day}.json"


def write_export(document: Dict[str, Any], directory: Path) -> Path:
    """Write the JSON-LD document to a dated file in ``directory``."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(document.get("dateCreated", ""))
    path.write_text(json.dumps(document, indent=2), encoding="utf-8")
    logger.info(f"Exported linked data to {path}")
    return path
