"""Structural validation for blueprint graphs.

Reachability and cycle analysis over control edges, and the rule battery
that decides whether a graph may be handed to a code generator.
"""

from nodeflow.core.validation.cycles import cyclic_members, cyclic_nodes, find_cycle
from nodeflow.core.validation.reachability import control_adjacency, reachable, reachable_from
from nodeflow.core.validation.structural import (
    IssueSeverity,
    ValidationIssue,
    ValidationResult,
    validate_graph,
)

__all__ = [
    "IssueSeverity",
    "ValidationIssue",
    "ValidationResult",
    "control_adjacency",
    "cyclic_members",
    "cyclic_nodes",
    "find_cycle",
    "reachable",
    "reachable_from",
    "validate_graph",
]
