"""
Address-space sink interface.

The protocol server side implements this to expose simulated nodes
and publish their changes to clients.
"""
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..nodes.tree import Folder, Variable


class AddressSpaceSink(ABC):
    """
    Abstract base class for address-space collaborators.

    Nodes are registered parent-first, so a sink can always resolve the
    parent of the node it is given.
    """

    namespace_index: int = 0

    @abstractmethod
    async def register_folder(self, folder: "Folder") -> None:
        """
        Expose a folder.

        Args:
            folder: The folder to register. Its parent, if any, is
                already registered.
        """
        pass

    @abstractmethod
    async def register_variable(self, variable: "Variable") -> None:
        """
        Expose a variable with its current sample.

        Args:
            variable: The variable to register.
        """
        pass

    @abstractmethod
    async def notify_changed(self, variable: "Variable") -> None:
        """
        Publish a variable's current sample to subscribed clients.

        Args:
            variable: The variable that was updated.
        """
        pass
