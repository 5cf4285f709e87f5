"""Blueprint graph analysis.

Graphs are immutable snapshots; every analysis is a pure function:
    validate_graph(graph) -> ValidationResult
    resolve_variables(graph, variables) -> {variable_id: VariableResolution}

Node-type knowledge lives in a NodeCatalog that callers pass in explicitly.
"""

from nodeflow.core.catalog import (
    DEFAULT_CATALOG,
    NodeCatalog,
    NodeTypeSpec,
    build_catalog,
)
from nodeflow.core.graph import (
    Edge,
    Graph,
    LegacyEdge,
    Node,
    Port,
    VariableDeclaration,
    effective_kind,
)
from nodeflow.core.kinds import DataKind, EdgeKind, NodeCategory, NodeKind, PortDirection
from nodeflow.core.records import GraphRecordError, graph_from_records, variables_from_records
from nodeflow.core.resolver import VariableResolution, resolution_to_dict, resolve_variables
from nodeflow.core.validation import (
    ValidationIssue,
    ValidationResult,
    find_cycle,
    reachable,
    validate_graph,
)

__all__ = [
    # Kinds
    "NodeKind",
    "NodeCategory",
    "EdgeKind",
    "DataKind",
    "PortDirection",
    # Graph model
    "Graph",
    "Node",
    "Port",
    "Edge",
    "LegacyEdge",
    "VariableDeclaration",
    "effective_kind",
    # Catalog
    "NodeCatalog",
    "NodeTypeSpec",
    "DEFAULT_CATALOG",
    "build_catalog",
    # Records
    "GraphRecordError",
    "graph_from_records",
    "variables_from_records",
    # Analysis
    "ValidationIssue",
    "ValidationResult",
    "validate_graph",
    "reachable",
    "find_cycle",
    "VariableResolution",
    "resolve_variables",
    "resolution_to_dict",
]
