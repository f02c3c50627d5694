"""
Hierarchy definitions and loading.
"""
from .definitions import (
    DEFAULT_DATA_TYPE,
    DEFAULT_FOLDER_NAME,
    DEFAULT_MAX_VALUE,
    DEFAULT_VARIABLE_NAME,
    FolderDef,
    HierarchyDefinition,
    SemanticType,
    VariableDef,
)
from .loader import HierarchyLoadError, HierarchyLoader

__all__ = [
    "DEFAULT_DATA_TYPE",
    "DEFAULT_FOLDER_NAME",
    "DEFAULT_MAX_VALUE",
    "DEFAULT_VARIABLE_NAME",
    "FolderDef",
    "HierarchyDefinition",
    "SemanticType",
    "VariableDef",
    "HierarchyLoadError",
    "HierarchyLoader",
]
