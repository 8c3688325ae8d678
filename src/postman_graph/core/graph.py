"""Graph model builder.

Converts a fetched dataset into typed nodes and typed, directed edges for a
force-directed layout. Node ids are namespaced by kind (``workspace_<id>``,
``collection_<id>``, ...) since API ids are only unique within their kind.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .entities import CombinedDataset
from .extractor import extract_folders, extract_requests

logger = logging.getLogger(__name__)


class NodeKind(str, Enum):
    """Categories of nodes in the knowledge graph."""
    USER = "user"
    WORKSPACE = "workspace"
    COLLECTION = "collection"
    REQUEST = "request"
    ENVIRONMENT = "environment"


class RelationType(str, Enum):
    """Directed relationships between nodes."""
    OWNS = "owns"          # user -> workspace
    CONTAINS = "contains"  # collection -> request
    MANAGES = "manages"    # user -> environment


class GraphNode(BaseModel):
    """A typed vertex. Kind-specific attributes are None on other kinds."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Globally unique id, namespaced by kind")
    name: str = Field(..., description="Display label")
    kind: NodeKind = Field(..., description="Entity kind")

    # user
    full_name: Optional[str] = None
    email: Optional[str] = None
    # workspace / collection
    description: Optional[str] = None
    workspace_type: Optional[str] = None
    request_count: Optional[int] = None
    folders: Optional[List[str]] = None
    # request
    method: Optional[str] = None
    url: Optional[str] = None
    parent_folder: Optional[str] = None


class GraphEdge(BaseModel):
    """A directed, typed connection between two nodes."""
    source: str = Field(..., description="ID of the source node")
    target: str = Field(..., description="ID of the target node")
    relation: RelationType


class GraphData(BaseModel):
    """The node/edge payload handed to the presentation layer."""
    nodes: List[GraphNode] = Field(default_factory=list)
    edges: List[GraphEdge] = Field(default_factory=list)

    def node_ids(self) -> set:
        return {node.id for node in self.nodes}

    def nodes_of(self, kind: NodeKind) -> List[GraphNode]:
        return [node for node in self.nodes if node.kind == kind]

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_payload(self) -> dict:
        """JSON-ready dict with camelCase attributes and unset ones dropped."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def build_graph(dataset: CombinedDataset) -> GraphData:
    """Build the knowledge graph for one dataset.

    Always starts from an empty node/edge set. Nodes are emitted before any
    edge that references them: user, workspaces, collections, requests,
    environments.

    Args:
        dataset: Result of one load cycle

    Returns:
        GraphData with nodes and edges
    """
    nodes: List[GraphNode] = []
    edges: List[GraphEdge] = []
    index: Dict[str, GraphNode] = {}

    def add(node: GraphNode) -> GraphNode:
        nodes.append(node)
        # Lookups resolve to the first node with a given id
        index.setdefault(node.id, node)
        return node

    user = dataset.user
    user_id: Optional[str] = None
    if user.username:
        user_id = f"user_{user.id or 'main'}"
        add(GraphNode(
            id=user_id,
            name=user.username,
            kind=NodeKind.USER,
            full_name=user.full_name or user.username,
            email=user.email or "",
        ))

    for workspace in dataset.workspaces:
        workspace_id = f"workspace_{workspace.id}"
        add(GraphNode(
            id=workspace_id,
            name=workspace.name,
            kind=NodeKind.WORKSPACE,
            description=workspace.description or "",
            workspace_type=workspace.type,
        ))
        if user_id:
            edges.append(GraphEdge(source=user_id, target=workspace_id, relation=RelationType.OWNS))

    for collection in dataset.collections:
        add(GraphNode(
            id=f"collection_{collection.id}",
            name=collection.name,
            kind=NodeKind.COLLECTION,
            description=collection.description or "",
            request_count=0,
        ))

    for detail in dataset.detailed_collections:
        collection_id = f"collection_{detail.info.id}"
        requests = extract_requests(detail.item, scope=detail.info.id)

        collection_node = index.get(collection_id)
        if collection_node is not None:
            collection_node.request_count = len(requests)
            collection_node.folders = extract_folders(detail.item)
        elif requests:
            logger.warning(
                f"Detailed collection {detail.info.id!r} has no summary node; "
                f"emitting {len(requests)} requests without 'contains' edges"
            )

        for request in requests:
            request_id = f"request_{request.id}"
            add(GraphNode(
                id=request_id,
                name=request.name,
                kind=NodeKind.REQUEST,
                method=request.method,
                url=request.url,
                parent_folder=request.parent_folder,
            ))
            if collection_node is not None:
                edges.append(GraphEdge(
                    source=collection_id, target=request_id, relation=RelationType.CONTAINS
                ))

    for environment in dataset.environments:
        environment_id = f"environment_{environment.id}"
        add(GraphNode(id=environment_id, name=environment.name, kind=NodeKind.ENVIRONMENT))
        if user_id:
            edges.append(GraphEdge(source=user_id, target=environment_id, relation=RelationType.MANAGES))

    logger.debug(f"Graph built: {len(nodes)} nodes, {len(edges)} edges")
    return GraphData(nodes=nodes, edges=edges)
