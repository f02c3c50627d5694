"""
Hierarchy definitions for the simulated address space.

Dataclasses describing folders and variables as declared in a
hierarchy definition file, before any node is created.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

DEFAULT_FOLDER_NAME = "UnnamedFolder"
DEFAULT_VARIABLE_NAME = "UnnamedVariable"
DEFAULT_DATA_TYPE = "String"
DEFAULT_MAX_VALUE = 100


class SemanticType(str, Enum):
    """Declared data types of simulated variables."""
    BOOLEAN = "Boolean"
    INTEGER = "Integer"  # Shared counter
    DOUBLE = "Double"
    FLOAT = "Float"
    DATETIME = "DateTime"
    STRING = "String"

    # Sized integers
    SBYTE = "SByte"
    BYTE = "Byte"
    INT16 = "Int16"
    UINT16 = "UInt16"
    INT32 = "Int32"
    UINT32 = "UInt32"
    INT64 = "Int64"
    UINT64 = "UInt64"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["SemanticType"]:
        """
        Look up a type by name, ignoring case.

        Returns:
            The matching type, or None if the name is not recognized.
        """
        if not value:
            return None
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return None


@dataclass
class VariableDef:
    """A variable as declared in the hierarchy definition."""
    name: str
    data_type: SemanticType = SemanticType.STRING
    declared_type: str = DEFAULT_DATA_TYPE
    initial_value: str = ""
    display_name: Optional[str] = None
    is_static: bool = False
    max_value: int = DEFAULT_MAX_VALUE

    def __post_init__(self):
        if isinstance(self.data_type, str):
            self.data_type = SemanticType(self.data_type)
        if self.display_name is None:
            self.display_name = self.name

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "data_type": self.data_type.value,
            "declared_type": self.declared_type,
            "initial_value": self.initial_value,
            "display_name": self.display_name,
            "is_static": self.is_static,
            "max_value": self.max_value,
        }


@dataclass
class FolderDef:
    """
    A folder as declared in the hierarchy definition.

    Children keep the order in which they appear in the document.
    """
    name: str = DEFAULT_FOLDER_NAME
    children: List[Union["FolderDef", VariableDef]] = field(default_factory=list)

    @property
    def folders(self) -> List["FolderDef"]:
        return [c for c in self.children if isinstance(c, FolderDef)]

    @property
    def variables(self) -> List[VariableDef]:
        return [c for c in self.children if isinstance(c, VariableDef)]

    def iter_variables(self) -> Iterator[VariableDef]:
        """Yield every variable in this folder and its sub-folders."""
        for child in self.children:
            if isinstance(child, FolderDef):
                yield from child.iter_variables()
            else:
                yield child

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class HierarchyDefinition:
    """Parsed hierarchy: the top-level folders placed under the root."""
    folders: List[FolderDef] = field(default_factory=list)
    source: Optional[Path] = None

    def iter_variables(self) -> Iterator[VariableDef]:
        for folder in self.folders:
            yield from folder.iter_variables()

    @property
    def is_empty(self) -> bool:
        return not self.folders

    def to_dict(self) -> Dict[str, Any]:
        return {"folders": [folder.to_dict() for folder in self.folders]}
