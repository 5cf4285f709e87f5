"""Tagged kinds for blueprint graphs.

Node, edge and port kinds are closed enums; every dispatch on them goes
through ``match`` so adding a member surfaces every site that must handle it.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pyrsistent import pvector


class NodeKind(Enum):
    """Structural role of a node in a blueprint graph."""

    ENTRY = "entry"
    EXIT = "exit"
    OPERATION = "operation"
    VARIABLE = "variable"
    VARIABLE_GET = "variable_get"
    VARIABLE_ASSIGN = "variable_assign"
    CUSTOM = "custom"

    @property
    def category(self) -> NodeCategory:
        """Category a node of this kind belongs to when the catalog has no entry."""
        match self:
            case NodeKind.ENTRY | NodeKind.EXIT:
                return NodeCategory.FLOW
            case NodeKind.OPERATION:
                return NodeCategory.FUNCTION
            case NodeKind.VARIABLE | NodeKind.VARIABLE_GET | NodeKind.VARIABLE_ASSIGN:
                return NodeCategory.VARIABLE
            case NodeKind.CUSTOM:
                return NodeCategory.OTHER

    @property
    def binds_variable(self) -> bool:
        """True for kinds that reference a declared variable."""
        match self:
            case NodeKind.VARIABLE | NodeKind.VARIABLE_GET | NodeKind.VARIABLE_ASSIGN:
                return True
            case NodeKind.ENTRY | NodeKind.EXIT | NodeKind.OPERATION | NodeKind.CUSTOM:
                return False


class NodeCategory(Enum):
    """Palette category of a node type."""

    FLOW = "flow"
    FUNCTION = "function"
    VARIABLE = "variable"
    MATH = "math"
    COMPARISON = "comparison"
    LOGIC = "logic"
    IO = "io"
    OTHER = "other"


class EdgeKind(Enum):
    """Control edges sequence execution; data edges carry values."""

    CONTROL = "control"
    DATA = "data"

    @classmethod
    def parse(cls, text: str) -> EdgeKind:
        """Parse a serialized edge kind (``"execution"`` is the legacy spelling)."""
        if text in ("control", "execution"):
            return cls.CONTROL
        if text == "data":
            return cls.DATA
        raise ValueError(f"Unknown edge kind {text!r}")


class PortDirection(Enum):
    INPUT = "input"
    OUTPUT = "output"


class DataKind(Enum):
    """Data kind of a port or variable.

    ``CONTROL`` is reserved for execution ports; every other member is a data kind.
    """

    CONTROL = "execution"
    BOOL = "bool"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    VECTOR = "vector"
    OBJECT = "object"
    ARRAY = "array"
    ANY = "any"

    @classmethod
    def parse(cls, text: str | None) -> DataKind:
        """Parse a serialized data kind; unrecognized names become ``ANY``."""
        if text == "control":
            return cls.CONTROL
        # Older records spell object ports as "pointer" or "class".
        if text in ("pointer", "class"):
            return cls.OBJECT
        try:
            return cls(text)
        except ValueError:
            return cls.ANY

    @property
    def is_control(self) -> bool:
        return self is DataKind.CONTROL

    def zero_value(self) -> Any:
        """Value a variable of this kind holds before any assignment."""
        match self:
            case DataKind.BOOL:
                return False
            case DataKind.INT32 | DataKind.INT64 | DataKind.FLOAT | DataKind.DOUBLE:
                return 0
            case DataKind.STRING:
                return ""
            case DataKind.VECTOR:
                return pvector([0, 0, 0])
            case DataKind.OBJECT | DataKind.ARRAY | DataKind.ANY | DataKind.CONTROL:
                return None


__all__ = [
    "DataKind",
    "EdgeKind",
    "NodeCategory",
    "NodeKind",
    "PortDirection",
]
