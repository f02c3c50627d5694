"""
asyncua-backed address space.

Registers simulated folders and variables in an asyncua server and
writes their samples so subscriptions receive data changes.
"""
import logging
from typing import Dict, Optional

from asyncua import Node, Server, ua

from ..hierarchy.definitions import SemanticType
from ..nodes.tree import Folder, NodeId, TagStatus, Variable
from .base import AddressSpaceSink

logger = logging.getLogger(__name__)

VARIANT_TYPES: Dict[SemanticType, ua.VariantType] = {
    SemanticType.BOOLEAN: ua.VariantType.Boolean,
    SemanticType.INTEGER: ua.VariantType.Int64,
    SemanticType.DOUBLE: ua.VariantType.Double,
    SemanticType.FLOAT: ua.VariantType.Float,
    SemanticType.DATETIME: ua.VariantType.DateTime,
    SemanticType.STRING: ua.VariantType.String,
    SemanticType.SBYTE: ua.VariantType.SByte,
    SemanticType.BYTE: ua.VariantType.Byte,
    SemanticType.INT16: ua.VariantType.Int16,
    SemanticType.UINT16: ua.VariantType.UInt16,
    SemanticType.INT32: ua.VariantType.Int32,
    SemanticType.UINT32: ua.VariantType.UInt32,
    SemanticType.INT64: ua.VariantType.Int64,
    SemanticType.UINT64: ua.VariantType.UInt64,
}

DATA_TYPE_IDS: Dict[SemanticType, int] = {
    SemanticType.BOOLEAN: ua.ObjectIds.Boolean,
    SemanticType.INTEGER: ua.ObjectIds.Integer,
    SemanticType.DOUBLE: ua.ObjectIds.Double,
    SemanticType.FLOAT: ua.ObjectIds.Float,
    SemanticType.DATETIME: ua.ObjectIds.DateTime,
    SemanticType.STRING: ua.ObjectIds.String,
    SemanticType.SBYTE: ua.ObjectIds.SByte,
    SemanticType.BYTE: ua.ObjectIds.Byte,
    SemanticType.INT16: ua.ObjectIds.Int16,
    SemanticType.UINT16: ua.ObjectIds.UInt16,
    SemanticType.INT32: ua.ObjectIds.Int32,
    SemanticType.UINT32: ua.ObjectIds.UInt32,
    SemanticType.INT64: ua.ObjectIds.Int64,
    SemanticType.UINT64: ua.ObjectIds.UInt64,
}


class AsyncuaAddressSpace(AddressSpaceSink):
    """
    Address space backed by an asyncua Server.

    The root folder is placed under the server's Objects folder; every
    other node is placed under its registered parent.
    """

    def __init__(
        self,
        server: Server,
        namespace_index: int,
        objects_node: Optional[Node] = None,
    ):
        """
        Initialize the address space.

        Args:
            server: Initialized asyncua server.
            namespace_index: Namespace for all simulated nodes.
            objects_node: Node to place the root under. Defaults to the
                server's Objects folder.
        """
        self.server = server
        self.namespace_index = namespace_index
        self._objects = objects_node or server.nodes.objects
        self._nodes: Dict[NodeId, Node] = {}

    @classmethod
    async def create(cls, server: Server, namespace_uri: str) -> "AsyncuaAddressSpace":
        """Register the simulator namespace and build an address space for it."""
        namespace_index = await server.register_namespace(namespace_uri)
        logger.info(f"Registered namespace {namespace_uri} (ns={namespace_index})")
        return cls(server, namespace_index)

    def get_node(self, node_id: NodeId) -> Optional[Node]:
        """Get the asyncua node registered for a simulator node id."""
        return self._nodes.get(node_id)

    async def register_folder(self, folder: Folder) -> None:
        parent = self._parent_node(folder.parent)
        node = await parent.add_folder(
            self.to_ua_node_id(folder.node_id),
            ua.QualifiedName(folder.name, self.namespace_index),
        )
        self._nodes[folder.node_id] = node
        logger.debug(f"Registered folder {folder.path} as {node.nodeid}")

    async def register_variable(self, variable: Variable) -> None:
        parent = self._parent_node(variable.parent)
        node = await parent.add_variable(
            self.to_ua_node_id(variable.node_id),
            ua.QualifiedName(variable.browse_name, self.namespace_index),
            self.to_variant(variable),
            datatype=ua.NodeId(DATA_TYPE_IDS[variable.data_type]),
        )

        if variable.display_name != variable.browse_name:
            await node.write_attribute(
                ua.AttributeIds.DisplayName,
                ua.DataValue(ua.Variant(
                    ua.LocalizedText(variable.display_name),
                    ua.VariantType.LocalizedText,
                )),
            )

        if variable.writable:
            await node.set_writable()

        self._nodes[variable.node_id] = node
        await self.server.write_attribute_value(node.nodeid, self.to_data_value(variable))
        logger.debug(f"Registered variable {variable.name} as {node.nodeid}")

    async def notify_changed(self, variable: Variable) -> None:
        node = self._nodes.get(variable.node_id)
        if node is None:
            raise KeyError(f"Variable {variable.node_id} is not registered")
        await self.server.write_attribute_value(node.nodeid, self.to_data_value(variable))

    def _parent_node(self, parent: Optional[Folder]) -> Node:
        if parent is None:
            return self._objects
        node = self._nodes.get(parent.node_id)
        if node is None:
            raise KeyError(f"Parent folder {parent.node_id} is not registered")
        return node

    @staticmethod
    def to_ua_node_id(node_id: NodeId) -> ua.NodeId:
        return ua.NodeId(node_id.identifier, node_id.namespace_index)

    @staticmethod
    def to_variant(variable: Variable) -> ua.Variant:
        if variable.value is None:
            return ua.Variant()
        return ua.Variant(variable.value, VARIANT_TYPES[variable.data_type])

    def to_data_value(self, variable: Variable) -> ua.DataValue:
        sample = variable.sample
        status = ua.StatusCodes.Good if sample.status == TagStatus.GOOD else ua.StatusCodes.Bad
        return ua.DataValue(
            Value=self.to_variant(variable),
            StatusCode=ua.StatusCode(status),
            SourceTimestamp=sample.timestamp,
            ServerTimestamp=sample.timestamp,
        )
