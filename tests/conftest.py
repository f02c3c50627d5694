"""
Shared pytest fixtures for simulator tests.

Provides fixtures for:
- A recording address space
- A deterministic clock
- Sample hierarchy definitions
"""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Set

import pytest

from opcua_simulator.address_space.base import AddressSpaceSink
from opcua_simulator.hierarchy.loader import HierarchyLoader
from opcua_simulator.nodes.tree import Folder, NodeId, Variable


class FakeAddressSpace(AddressSpaceSink):
    """Address space that records every call."""

    def __init__(self, namespace_index: int = 2):
        self.namespace_index = namespace_index
        self.folders: List[Folder] = []
        self.variables: List[Variable] = []
        self.notifications: List[Variable] = []
        self.fail_on: Set[str] = set()

    async def register_folder(self, folder: Folder) -> None:
        if folder.name in self.fail_on:
            raise RuntimeError(f"Cannot register {folder.name}")
        self.folders.append(folder)

    async def register_variable(self, variable: Variable) -> None:
        if variable.name in self.fail_on:
            raise RuntimeError(f"Cannot register {variable.name}")
        self.variables.append(variable)

    async def notify_changed(self, variable: Variable) -> None:
        if variable.name in self.fail_on:
            raise RuntimeError(f"Cannot publish {variable.name}")
        self.notifications.append(variable)

    def registered_ids(self) -> List[NodeId]:
        return [n.node_id for n in self.folders + self.variables]


class StepClock:
    """Clock that advances one second per call."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def sink():
    """Recording address space."""
    return FakeAddressSpace()


@pytest.fixture
def clock():
    """Deterministic clock."""
    return StepClock()


@pytest.fixture
def rng():
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def loader():
    return HierarchyLoader()


# ============================================================================
# Hierarchy Fixtures
# ============================================================================

GUID_NAME = "7c9e6679-7425-40de-944b-e07fc1f90ae7"


@pytest.fixture
def sample_xml():
    """A hierarchy exercising every supported type."""
    return f"""<?xml version="1.0" encoding="utf-8"?>
<OpcUaHierarchy>
  <Folder Name="Demo1">
    <Variable Name="Temp" DataType="Double" InitialValue="21.5" MaxValue="50" />
    <Variable Name="Running" DataType="boolean" InitialValue="True" />
    <Variable Name="Count" DataType="Integer" InitialValue="0" MaxValue="3" />
    <Folder Name="Line1">
      <Variable Name="Speed" DataType="Int32" InitialValue="7" MaxValue="10" />
      <Variable Name="{GUID_NAME}" DisplayName="Pressure" DataType="Double" InitialValue="1.5" />
    </Folder>
    <Variable Name="Serial" DataType="String" InitialValue="SIM-01" IsStatic="true" />
  </Folder>
  <Folder Name="Utilities">
    <Variable Name="Flow" DataType="Float" InitialValue="12.75" />
    <Variable Name="Mode" DataType="Bogus" InitialValue="auto" />
  </Folder>
</OpcUaHierarchy>
"""


@pytest.fixture
def sample_definition(loader, sample_xml):
    """Parsed sample hierarchy."""
    return loader.load_xml(sample_xml)
