"""
Address-space collaborators for exposing simulated nodes.
"""
from .base import AddressSpaceSink
from .asyncua_sink import AsyncuaAddressSpace

__all__ = [
    "AddressSpaceSink",
    "AsyncuaAddressSpace",
]
