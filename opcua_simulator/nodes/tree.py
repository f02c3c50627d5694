"""
In-memory address-space model.

Folders and variables created from a hierarchy definition, plus the
variable index the simulation engine iterates over.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional, Union
from uuid import UUID

from ..hierarchy.definitions import SemanticType


class IdentityScheme(str, Enum):
    """How a node is addressed in the server namespace."""
    STRING = "string"
    GUID = "guid"


class TagStatus(str, Enum):
    """Quality of a variable's current value."""
    GOOD = "good"
    BAD = "bad"


@dataclass(frozen=True)
class NodeId:
    """Node identifier within a namespace."""
    identifier: Union[str, UUID]
    namespace_index: int = 0

    @property
    def scheme(self) -> IdentityScheme:
        if isinstance(self.identifier, UUID):
            return IdentityScheme.GUID
        return IdentityScheme.STRING

    def __str__(self) -> str:
        kind = "g" if self.scheme == IdentityScheme.GUID else "s"
        return f"ns={self.namespace_index};{kind}={self.identifier}"


@dataclass(frozen=True)
class Sample:
    """A variable's value, status and timestamp, replaced as one unit."""
    value: Any
    status: TagStatus
    timestamp: datetime


class IdentityKey(NamedTuple):
    """Lookup key for the variable index."""
    name: str
    is_static: bool
    max_value: int


class DuplicateIdentityError(ValueError):
    """Raised when a variable's identity key is already in the index."""


class Folder:
    """A named grouping node owning an ordered list of children."""

    def __init__(
        self,
        name: str,
        node_id: NodeId,
        parent: Optional["Folder"] = None,
    ):
        self._name = name
        self._node_id = node_id
        self._parent = parent
        self._children: List[Union["Folder", "Variable"]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def display_name(self) -> str:
        return self._name

    @property
    def node_id(self) -> NodeId:
        return self._node_id

    @property
    def parent(self) -> Optional["Folder"]:
        return self._parent

    @property
    def children(self) -> List[Union["Folder", "Variable"]]:
        return list(self._children)

    @property
    def folders(self) -> List["Folder"]:
        return [c for c in self._children if isinstance(c, Folder)]

    @property
    def variables(self) -> List["Variable"]:
        return [c for c in self._children if isinstance(c, Variable)]

    def add_child(self, node: Union["Folder", "Variable"]) -> None:
        """
        Attach a child node.

        Raises:
            ValueError: If the node was constructed with a different parent.
        """
        if node.parent is not self:
            raise ValueError(
                f"Node '{node.name}' belongs to another parent, "
                f"cannot attach it to '{self.name}'"
            )
        self._children.append(node)

    def walk(self) -> Iterator[Union["Folder", "Variable"]]:
        """Depth-first traversal starting with this folder."""
        yield self
        for child in self._children:
            if isinstance(child, Folder):
                yield from child.walk()
            else:
                yield child

    @property
    def path(self) -> str:
        if self._parent is None:
            return self._name
        return f"{self._parent.path}/{self._name}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "node_id": str(self._node_id),
            "children": [child.to_dict() for child in self._children],
        }

    def __repr__(self) -> str:
        return f"Folder(name={self._name}, children={len(self._children)})"


class Variable:
    """
    A typed leaf holding a simulated value.

    Identity, type, parent and the static flag are fixed at construction.
    Only the sample (value, status, timestamp) changes afterwards.
    """

    # Every variable is exposed read/write
    writable = True

    def __init__(
        self,
        name: str,
        node_id: NodeId,
        data_type: SemanticType,
        parent: Folder,
        display_name: Optional[str] = None,
        browse_name: Optional[str] = None,
        is_static: bool = False,
        max_value: int = 100,
        value: Any = None,
        status: TagStatus = TagStatus.GOOD,
        timestamp: Optional[datetime] = None,
    ):
        if max_value < 0:
            raise ValueError(f"max_value must be non-negative, got {max_value}")

        self._name = name
        self._node_id = node_id
        self._data_type = data_type
        self._parent = parent
        self._display_name = display_name or name
        self._browse_name = browse_name or name
        self._is_static = is_static
        self._max_value = max_value
        self._sample = Sample(
            value=value,
            status=status,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def node_id(self) -> NodeId:
        return self._node_id

    @property
    def scheme(self) -> IdentityScheme:
        return self._node_id.scheme

    @property
    def data_type(self) -> SemanticType:
        return self._data_type

    @property
    def parent(self) -> Folder:
        return self._parent

    @property
    def display_name(self) -> str:
        return self._display_name

    @property
    def browse_name(self) -> str:
        return self._browse_name

    @property
    def is_static(self) -> bool:
        return self._is_static

    @property
    def max_value(self) -> int:
        return self._max_value

    @property
    def key(self) -> IdentityKey:
        return IdentityKey(self._name, self._is_static, self._max_value)

    @property
    def sample(self) -> Sample:
        return self._sample

    @property
    def value(self) -> Any:
        return self._sample.value

    @property
    def status(self) -> TagStatus:
        return self._sample.status

    @property
    def timestamp(self) -> datetime:
        return self._sample.timestamp

    def update(self, value: Any, status: TagStatus, timestamp: datetime) -> None:
        """Replace value, status and timestamp together."""
        self._sample = Sample(value=value, status=status, timestamp=timestamp)

    def touch(self, timestamp: datetime) -> None:
        """Set a null value and new timestamp, keeping the current status."""
        self._sample = Sample(value=None, status=self._sample.status, timestamp=timestamp)

    def mark_bad(self, timestamp: datetime) -> None:
        """Drop the value and flag the variable as Bad."""
        self.update(None, TagStatus.BAD, timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self._name,
            "node_id": str(self._node_id),
            "data_type": self._data_type.value,
            "display_name": self._display_name,
            "is_static": self._is_static,
            "max_value": self._max_value,
            "value": self._sample.value,
            "status": self._sample.status.value,
        }

    def __repr__(self) -> str:
        return (
            f"Variable("
            f"name={self._name}, "
            f"type={self._data_type.value}, "
            f"status={self._sample.status.value})"
        )


class NodeTree:
    """
    Address-space tree rooted at a single folder.

    Keeps an index of variables by identity key. Iteration yields
    variables in insertion order.
    """

    def __init__(self, root: Folder):
        self.root = root
        self._variables: Dict[IdentityKey, Variable] = {}

    def add_variable(self, variable: Variable) -> None:
        """
        Index a variable.

        Raises:
            DuplicateIdentityError: If the identity key is already taken.
        """
        key = variable.key
        if key in self._variables:
            raise DuplicateIdentityError(
                f"Variable {key} is already registered"
            )
        self._variables[key] = variable

    def get(self, key: IdentityKey) -> Optional[Variable]:
        return self._variables.get(key)

    def find(self, name: str) -> List[Variable]:
        """Get all indexed variables with the given name."""
        return [v for v in self._variables.values() if v.name == name]

    def iter_folders(self) -> Iterator[Folder]:
        for node in self.root.walk():
            if isinstance(node, Folder):
                yield node

    @property
    def variables(self) -> List[Variable]:
        return list(self._variables.values())

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._variables.values()))

    def __len__(self) -> int:
        return len(self._variables)

    def __contains__(self, key: IdentityKey) -> bool:
        return key in self._variables

    def to_dict(self) -> Dict[str, Any]:
        return self.root.to_dict()

    def summary(self) -> str:
        """Human-readable summary of the tree."""
        folders = sum(1 for _ in self.iter_folders())
        static = sum(1 for v in self._variables.values() if v.is_static)
        return (
            f"Node tree '{self.root.name}': {folders} folders, "
            f"{len(self)} variables ({static} static)"
        )
