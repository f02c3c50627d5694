"""
Tree builder.

Turns a parsed hierarchy definition into a NodeTree and registers
every node with the address space.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Set, TYPE_CHECKING
from uuid import UUID

from ..codec import convert
from ..hierarchy.definitions import FolderDef, HierarchyDefinition, VariableDef
from .tree import Folder, IdentityKey, NodeId, NodeTree, TagStatus, Variable

if TYPE_CHECKING:
    from ..address_space.base import AddressSpaceSink

logger = logging.getLogger(__name__)

ROOT_FOLDER_NAME = "Demo"


@dataclass
class BuildReport:
    """Summary of a tree build."""
    folders: int = 0
    variables: int = 0
    skipped: List[str] = field(default_factory=list)
    conversion_failures: List[str] = field(default_factory=list)
    duplicate_node_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "folders": self.folders,
            "variables": self.variables,
            "skipped": list(self.skipped),
            "conversion_failures": list(self.conversion_failures),
            "duplicate_node_ids": list(self.duplicate_node_ids),
        }


def parse_guid(name: str) -> Optional[UUID]:
    """Return the GUID a name spells, or None."""
    try:
        return UUID(name.strip())
    except (ValueError, AttributeError):
        return None


class TreeBuilder:
    """
    Builds the node tree from a hierarchy definition.

    A node that fails to build is logged and skipped; a skipped folder
    takes its subtree with it. The build itself always completes.

    Structural node ids are derived from the node name. When a name is
    reused anywhere in the hierarchy, the later node falls back to an id
    built from its full path; if that is taken as well the node is
    skipped.
    """

    def __init__(
        self,
        sink: "AddressSpaceSink",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the builder.

        Args:
            sink: Address space that receives every created node.
            clock: Source of build timestamps. Defaults to UTC now.
        """
        self.sink = sink
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._issued: Set[NodeId] = set()
        self.report = BuildReport()

    async def build(self, definition: HierarchyDefinition) -> NodeTree:
        """
        Create and register all nodes.

        Args:
            definition: Parsed hierarchy.

        Returns:
            The populated NodeTree.
        """
        self.report = BuildReport()
        self._issued = set()

        root = Folder(ROOT_FOLDER_NAME, self._structural_id(ROOT_FOLDER_NAME))
        await self.sink.register_folder(root)
        self._issued.add(root.node_id)
        tree = NodeTree(root)

        if definition.is_empty:
            logger.warning("Hierarchy has no folders, tree contains only the root")

        for folder_def in definition.folders:
            await self._add_folder(folder_def, root, tree)

        logger.info(
            f"Node creation completed: {self.report.folders} folders, "
            f"{self.report.variables} variables, "
            f"{len(self.report.skipped)} skipped"
        )
        return tree

    async def _add_folder(
        self,
        folder_def: FolderDef,
        parent: Folder,
        tree: NodeTree,
    ) -> None:
        path = f"{parent.path}/{folder_def.name}"
        node_id = self._claim_id(self._structural_id(folder_def.name), path)
        if node_id is None:
            return
        folder = Folder(folder_def.name, node_id, parent)

        try:
            await self.sink.register_folder(folder)
        except Exception as e:
            logger.error(f"Failed to register folder '{folder_def.name}', skipping subtree: {e}")
            self.report.skipped.append(path)
            return

        self._issued.add(folder.node_id)
        parent.add_child(folder)
        self.report.folders += 1

        for child in folder_def.children:
            if isinstance(child, FolderDef):
                await self._add_folder(child, folder, tree)
            else:
                await self._add_variable(child, folder, tree)

    async def _add_variable(
        self,
        var_def: VariableDef,
        parent: Folder,
        tree: NodeTree,
    ) -> None:
        path = f"{parent.path}/{var_def.name}"
        value, ok = convert(var_def.initial_value, var_def.data_type)
        if not ok:
            logger.warning(
                f"Failed to convert '{var_def.initial_value}' to "
                f"{var_def.data_type.value} for '{var_def.name}'. Defaulting to null."
            )
            self.report.conversion_failures.append(path)

        key = IdentityKey(var_def.name, var_def.is_static, var_def.max_value)
        existing = tree.get(key)
        if existing is not None:
            logger.warning(
                f"Duplicate variable {tuple(key)} in '{parent.path}', "
                f"already defined in '{existing.parent.path}', skipping"
            )
            self.report.skipped.append(path)
            return

        guid = parse_guid(var_def.name)
        if guid is not None:
            node_id = self._claim_id(NodeId(guid, self.sink.namespace_index), path)
            browse_name = var_def.display_name
        else:
            node_id = self._claim_id(self._structural_id(var_def.name), path)
            browse_name = var_def.name
        if node_id is None:
            return

        variable = Variable(
            name=var_def.name,
            node_id=node_id,
            data_type=var_def.data_type,
            parent=parent,
            display_name=var_def.display_name,
            browse_name=browse_name,
            is_static=var_def.is_static,
            max_value=var_def.max_value,
            value=value,
            status=TagStatus.GOOD,
            timestamp=self._clock(),
        )

        try:
            await self.sink.register_variable(variable)
        except Exception as e:
            logger.error(f"Failed to register variable '{var_def.name}', skipping: {e}")
            self.report.skipped.append(path)
            return

        self._issued.add(node_id)
        tree.add_variable(variable)
        parent.add_child(variable)
        self.report.variables += 1

    def _claim_id(self, node_id: NodeId, path: str) -> Optional[NodeId]:
        """
        Pick the node id for a new node.

        Returns:
            The given id if it is free, otherwise the id built from the
            node's path. None if that is taken too.
        """
        if node_id not in self._issued:
            return node_id

        self.report.duplicate_node_ids.append(str(node_id))
        qualified = self._structural_id(path)
        if qualified in self._issued:
            logger.warning(f"Duplicate node id {node_id} for '{path}', skipping")
            self.report.skipped.append(path)
            return None

        logger.warning(f"Duplicate node id {node_id} for '{path}', using {qualified}")
        return qualified

    def _structural_id(self, name: str) -> NodeId:
        return NodeId(name, self.sink.namespace_index)
