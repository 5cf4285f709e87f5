"""Node-type catalog.

Static metadata for every node type the editor can place: its structural
kind, palette category and default port layout. Analysis passes receive a
:class:`NodeCatalog` explicitly; nothing here is looked up from module state
at analysis time.

Port layouts follow the editor's built-in package so that records saved
without port lists can be completed by :mod:`nodeflow.core.records`.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Final

from pyrsistent import PMap, pmap

from nodeflow.core.graph import Node, Port
from nodeflow.core.kinds import DataKind, NodeCategory, NodeKind, PortDirection


@dataclass(frozen=True)
class NodeTypeSpec:
    """Static specification for one node type.

    Attributes:
        type_name: Catalog key (``"Branch"``, ``"SetVariable"``, ...).
        kind: Structural kind nodes of this type are analyzed as.
        category: Palette category.
        inputs: Default input ports.
        outputs: Default output ports.
    """

    type_name: str
    kind: NodeKind
    category: NodeCategory
    inputs: tuple[Port, ...] = ()
    outputs: tuple[Port, ...] = ()


ReadWritePair = tuple[NodeKind, NodeKind]


@dataclass(frozen=True)
class NodeCatalog:
    """Read-only registry of node types.

    Attributes:
        types: Mapping of type name to :class:`NodeTypeSpec`.
        read_write_pairs: ``(source kind, target kind)`` pairs whose data edges
            are the idiomatic variable read-into-write pattern.
    """

    types: PMap = field(default_factory=pmap)
    read_write_pairs: frozenset[ReadWritePair] = frozenset()

    def get(self, type_name: str) -> NodeTypeSpec | None:
        return self.types.get(type_name)

    def __contains__(self, type_name: object) -> bool:
        return type_name in self.types

    def category_of(self, node: Node) -> NodeCategory:
        """Category of ``node``: the catalog entry wins, otherwise the kind decides."""
        spec = self.types.get(node.type_name)
        if spec is not None:
            return spec.category
        return node.kind.category

    def is_variable(self, node: Node) -> bool:
        return self.category_of(node) is NodeCategory.VARIABLE

    def is_read_into_write(self, source: Node, target: Node) -> bool:
        return (source.kind, target.kind) in self.read_write_pairs

    def with_types(self, specs: Iterable[NodeTypeSpec]) -> NodeCatalog:
        """Return a new catalog extended with ``specs``. Original unchanged.

        Re-registering an identical spec is a no-op; a different spec under an
        existing name raises ``ValueError``.
        """
        merged = dict(self.types)
        for spec in specs:
            existing = merged.get(spec.type_name)
            if existing is not None and existing != spec:
                raise ValueError(f"Node type {spec.type_name!r} is already registered")
            merged[spec.type_name] = spec
        return NodeCatalog(types=pmap(merged), read_write_pairs=self.read_write_pairs)

    def with_read_write_pairs(self, pairs: Iterable[ReadWritePair]) -> NodeCatalog:
        return NodeCatalog(types=self.types, read_write_pairs=self.read_write_pairs | set(pairs))


# ---------------------------------------------------------------------------
# Helper factories: keep catalog entries concise
# ---------------------------------------------------------------------------


def _in(port_id: str, data_kind: DataKind = DataKind.CONTROL) -> Port:
    return Port(port_id, data_kind, PortDirection.INPUT)


def _out(port_id: str, data_kind: DataKind = DataKind.CONTROL) -> Port:
    return Port(port_id, data_kind, PortDirection.OUTPUT)


_EXEC_IN = _in("exec-in")
_EXEC_OUT = _out("exec-out")


def _flow(type_name: str, inputs: tuple[Port, ...], outputs: tuple[Port, ...]) -> NodeTypeSpec:
    return NodeTypeSpec(type_name, NodeKind.CUSTOM, NodeCategory.FLOW, inputs, outputs)


def _binary(
    type_name: str, category: NodeCategory, operand: DataKind, result: DataKind
) -> NodeTypeSpec:
    return NodeTypeSpec(
        type_name,
        NodeKind.CUSTOM,
        category,
        (_in("a", operand), _in("b", operand)),
        (_out("result", result),),
    )


def _build_specs() -> tuple[NodeTypeSpec, ...]:
    loop_outputs = (_out("loop-body"), _out("completed"))
    return (
        # --- Flow control -----------------------------------------------------
        NodeTypeSpec("Start", NodeKind.ENTRY, NodeCategory.FLOW, (), (_EXEC_OUT,)),
        NodeTypeSpec("End", NodeKind.EXIT, NodeCategory.FLOW, (_EXEC_IN,), ()),
        NodeTypeSpec(
            "Return", NodeKind.EXIT, NodeCategory.FLOW, (_EXEC_IN, _in("value", DataKind.ANY)), ()
        ),
        _flow("Branch", (_EXEC_IN, _in("condition", DataKind.BOOL)), (_out("true"), _out("false"))),
        _flow(
            "ForLoop",
            (_EXEC_IN, _in("first", DataKind.INT32), _in("last", DataKind.INT32)),
            (_out("loop-body"), _out("index", DataKind.INT32), _out("completed")),
        ),
        _flow("WhileLoop", (_EXEC_IN, _in("condition", DataKind.BOOL)), loop_outputs),
        _flow("DoWhile", (_EXEC_IN, _in("condition", DataKind.BOOL)), loop_outputs),
        _flow(
            "ForEach",
            (_EXEC_IN, _in("array", DataKind.ARRAY)),
            (
                _out("loop-body"),
                _out("element", DataKind.ANY),
                _out("index", DataKind.INT32),
                _out("completed"),
            ),
        ),
        _flow(
            "Switch",
            (_EXEC_IN, _in("selection", DataKind.INT32)),
            (_out("case-0"), _out("case-1"), _out("default")),
        ),
        _flow("Break", (_EXEC_IN,), ()),
        _flow("Continue", (_EXEC_IN,), ()),
        _flow("Sequence", (_EXEC_IN,), (_out("then-0"), _out("then-1"))),
        # --- Functions --------------------------------------------------------
        NodeTypeSpec(
            "Function", NodeKind.OPERATION, NodeCategory.FUNCTION, (_EXEC_IN,), (_EXEC_OUT,)
        ),
        NodeTypeSpec(
            "FunctionCall",
            NodeKind.OPERATION,
            NodeCategory.FUNCTION,
            (_EXEC_IN, _in("target", DataKind.OBJECT)),
            (_EXEC_OUT, _out("return", DataKind.ANY)),
        ),
        NodeTypeSpec("Event", NodeKind.OPERATION, NodeCategory.FUNCTION, (), (_EXEC_OUT,)),
        # --- Variables --------------------------------------------------------
        NodeTypeSpec(
            "Variable", NodeKind.VARIABLE, NodeCategory.VARIABLE, (), (_out("value", DataKind.ANY),)
        ),
        NodeTypeSpec(
            "GetVariable",
            NodeKind.VARIABLE_GET,
            NodeCategory.VARIABLE,
            (),
            (_out("value", DataKind.ANY),),
        ),
        NodeTypeSpec(
            "SetVariable",
            NodeKind.VARIABLE_ASSIGN,
            NodeCategory.VARIABLE,
            (_EXEC_IN, _in("value", DataKind.ANY)),
            (_EXEC_OUT, _out("value", DataKind.ANY)),
        ),
        # --- Math -------------------------------------------------------------
        _binary("Add", NodeCategory.MATH, DataKind.FLOAT, DataKind.FLOAT),
        _binary("Subtract", NodeCategory.MATH, DataKind.FLOAT, DataKind.FLOAT),
        _binary("Multiply", NodeCategory.MATH, DataKind.FLOAT, DataKind.FLOAT),
        _binary("Divide", NodeCategory.MATH, DataKind.FLOAT, DataKind.FLOAT),
        _binary("Modulo", NodeCategory.MATH, DataKind.INT32, DataKind.INT32),
        # --- Comparison -------------------------------------------------------
        _binary("Equal", NodeCategory.COMPARISON, DataKind.ANY, DataKind.BOOL),
        _binary("NotEqual", NodeCategory.COMPARISON, DataKind.ANY, DataKind.BOOL),
        _binary("Greater", NodeCategory.COMPARISON, DataKind.FLOAT, DataKind.BOOL),
        _binary("Less", NodeCategory.COMPARISON, DataKind.FLOAT, DataKind.BOOL),
        _binary("GreaterEqual", NodeCategory.COMPARISON, DataKind.FLOAT, DataKind.BOOL),
        _binary("LessEqual", NodeCategory.COMPARISON, DataKind.FLOAT, DataKind.BOOL),
        # --- Logic ------------------------------------------------------------
        _binary("And", NodeCategory.LOGIC, DataKind.BOOL, DataKind.BOOL),
        _binary("Or", NodeCategory.LOGIC, DataKind.BOOL, DataKind.BOOL),
        NodeTypeSpec(
            "Not",
            NodeKind.CUSTOM,
            NodeCategory.LOGIC,
            (_in("a", DataKind.BOOL),),
            (_out("result", DataKind.BOOL),),
        ),
        # --- I/O --------------------------------------------------------------
        NodeTypeSpec(
            "Print",
            NodeKind.CUSTOM,
            NodeCategory.IO,
            (_EXEC_IN, _in("string", DataKind.STRING)),
            (_EXEC_OUT,),
        ),
        NodeTypeSpec(
            "Input",
            NodeKind.CUSTOM,
            NodeCategory.IO,
            (_EXEC_IN, _in("prompt", DataKind.STRING)),
            (_EXEC_OUT, _out("value", DataKind.STRING)),
        ),
        # --- Other ------------------------------------------------------------
        NodeTypeSpec("Comment", NodeKind.CUSTOM, NodeCategory.OTHER),
        NodeTypeSpec(
            "Reroute",
            NodeKind.CUSTOM,
            NodeCategory.OTHER,
            (_in("in", DataKind.ANY),),
            (_out("out", DataKind.ANY),),
        ),
        NodeTypeSpec("Custom", NodeKind.CUSTOM, NodeCategory.OTHER, (_EXEC_IN,), (_EXEC_OUT,)),
    )


_VARIABLE_READ_WRITE: Final[tuple[ReadWritePair, ...]] = (
    (NodeKind.VARIABLE_GET, NodeKind.VARIABLE_ASSIGN),
)


def build_catalog(
    specs: Iterable[NodeTypeSpec],
    read_write_pairs: Iterable[ReadWritePair] = _VARIABLE_READ_WRITE,
) -> NodeCatalog:
    """Build a catalog from specs; duplicate names follow :meth:`NodeCatalog.with_types`."""
    return NodeCatalog(read_write_pairs=frozenset(read_write_pairs)).with_types(specs)


# ---------------------------------------------------------------------------
# DEFAULT_CATALOG: the editor's built-in node package
# ---------------------------------------------------------------------------

DEFAULT_CATALOG: Final[NodeCatalog] = build_catalog(_build_specs())

# Coarse node types written by older graph records.
LEGACY_TYPE_KINDS: Final[Mapping[str, NodeKind]] = pmap(
    {
        "Start": NodeKind.ENTRY,
        "End": NodeKind.EXIT,
        "Function": NodeKind.OPERATION,
        "Variable": NodeKind.VARIABLE,
        "Custom": NodeKind.CUSTOM,
    }
)


__all__ = [
    "DEFAULT_CATALOG",
    "LEGACY_TYPE_KINDS",
    "NodeCatalog",
    "NodeTypeSpec",
    "ReadWritePair",
    "build_catalog",
]
