"""
Address-space node model and tree construction.
"""
from .tree import (
    DuplicateIdentityError,
    Folder,
    IdentityKey,
    IdentityScheme,
    NodeId,
    NodeTree,
    Sample,
    TagStatus,
    Variable,
)
from .builder import ROOT_FOLDER_NAME, BuildReport, TreeBuilder, parse_guid

__all__ = [
    "DuplicateIdentityError",
    "Folder",
    "IdentityKey",
    "IdentityScheme",
    "NodeId",
    "NodeTree",
    "Sample",
    "TagStatus",
    "Variable",
    "ROOT_FOLDER_NAME",
    "BuildReport",
    "TreeBuilder",
    "parse_guid",
]
