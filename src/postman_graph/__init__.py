"""postman-graph: Postman workspace metadata as a knowledge graph and JSON-LD."""

__version__ = "0.1.0"
