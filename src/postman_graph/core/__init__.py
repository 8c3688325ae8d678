"""Core transformation and fetch logic.

- entities.py: typed API records with centralized defaults
- extractor.py: collection tree -> flat request records
- graph.py: dataset -> typed nodes and edges
- linked_data.py: dataset -> JSON-LD document
- client.py: Postman API client and load orchestration
- pipeline.py: fetch -> transform in one call
"""

from .client import PostmanClient
from .entities import CombinedDataset
from .errors import AuthError, HttpError, NetworkError, PostmanAPIError, describe_error
from .extractor import RequestRecord, extract_folders, extract_requests
from .graph import GraphData, GraphEdge, GraphNode, NodeKind, RelationType, build_graph
from .linked_data import to_linked_document
from .pipeline import KnowledgeGraphResult, dataset_stats, run_pipeline

__all__ = [
    "PostmanClient",
    "CombinedDataset",
    "AuthError",
    "HttpError",
    "NetworkError",
    "PostmanAPIError",
    "describe_error",
    "RequestRecord",
    "extract_folders",
    "extract_requests",
    "GraphData",
    "GraphEdge",
    "GraphNode",
    "NodeKind",
    "RelationType",
    "build_graph",
    "to_linked_document",
    "KnowledgeGraphResult",
    "dataset_stats",
    "run_pipeline",
]
