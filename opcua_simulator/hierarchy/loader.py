"""
Hierarchy definition loader.

Loads folder/variable hierarchies from XML or YAML files.
"""
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .. import codec
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

logger = logging.getLogger(__name__)

XML_ROOT_TAG = "OpcUaHierarchy"
YAML_ROOT_KEY = "hierarchy"
YAML_SUFFIXES = (".yaml", ".yml")


class HierarchyLoadError(Exception):
    """Raised when a hierarchy document cannot be read at all."""


class HierarchyLoader:
    """
    Loads hierarchy definitions from XML or YAML.

    Individual folders and variables with missing or malformed attributes
    fall back to defaults instead of failing the whole document.
    """

    def load_from_file(self, file_path: Path) -> HierarchyDefinition:
        """
        Load a hierarchy from a file, picking the format by suffix.

        Args:
            file_path: Path to an .xml, .yaml or .yml file.

        Returns:
            Parsed HierarchyDefinition.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            HierarchyLoadError: If the file is not valid XML/YAML.
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"Hierarchy file not found: {file_path}")

        logger.info(f"Loading hierarchy from {file_path}")

        text = file_path.read_text(encoding="utf-8")
        if file_path.suffix.lower() in YAML_SUFFIXES:
            definition = self.load_yaml(text)
        else:
            definition = self.load_xml(text)

        definition.source = file_path
        logger.info(
            f"Loaded {len(definition.folders)} top-level folders, "
            f"{sum(1 for _ in definition.iter_variables())} variables "
            f"from {file_path}"
        )
        return definition

    def load_xml(self, text: str) -> HierarchyDefinition:
        """
        Parse an XML hierarchy document.

        Only Folder elements directly below the OpcUaHierarchy root are
        taken as top-level folders.
        """
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise HierarchyLoadError(f"Invalid hierarchy XML: {e}") from e

        if root.tag != XML_ROOT_TAG:
            logger.warning(
                f"Root element <{XML_ROOT_TAG}> not found (got <{root.tag}>), "
                f"no folders found"
            )
            return HierarchyDefinition()

        folders = []
        for element in root:
            if element.tag == "Folder":
                folders.append(self._parse_xml_folder(element))
            else:
                logger.warning(
                    f"Ignoring <{element.tag}> directly under <{XML_ROOT_TAG}>"
                )

        if not folders:
            logger.warning("No folders found in hierarchy")
        return HierarchyDefinition(folders=folders)

    def load_yaml(self, text: str) -> HierarchyDefinition:
        """
        Parse a YAML hierarchy document.

        Expected layout::

            hierarchy:
              - name: Plant
                variables:
                  - {name: Temp, data_type: Double, max_value: 50}
                folders: [...]
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise HierarchyLoadError(f"Invalid hierarchy YAML: {e}") from e

        if not isinstance(data, dict) or not data.get(YAML_ROOT_KEY):
            logger.warning(f"No '{YAML_ROOT_KEY}' key in document, no folders found")
            return HierarchyDefinition()

        folders_data = data[YAML_ROOT_KEY]
        if not isinstance(folders_data, list):
            logger.warning(f"'{YAML_ROOT_KEY}' must be a list of folders, no folders found")
            return HierarchyDefinition()

        folders = []
        for folder_data in folders_data:
            folder = self._parse_yaml_folder(folder_data)
            if folder is not None:
                folders.append(folder)
        return HierarchyDefinition(folders=folders)

    def _parse_xml_folder(self, element: ET.Element) -> FolderDef:
        """Parse a <Folder> element and everything below it."""
        folder = FolderDef(name=self._name_or_default(
            element.get("Name"), DEFAULT_FOLDER_NAME, "folder"
        ))

        for child in element:
            if child.tag == "Folder":
                folder.children.append(self._parse_xml_folder(child))
            elif child.tag == "Variable":
                folder.children.append(self._parse_variable(
                    name=child.get("Name"),
                    data_type=child.get("DataType"),
                    initial_value=child.get("InitialValue"),
                    display_name=child.get("DisplayName"),
                    is_static=child.get("IsStatic"),
                    max_value=child.get("MaxValue"),
                ))
            else:
                logger.debug(f"Ignoring <{child.tag}> in folder '{folder.name}'")

        return folder

    def _parse_yaml_folder(self, data: Any) -> Optional[FolderDef]:
        """Parse a folder mapping and everything below it."""
        if not isinstance(data, dict):
            logger.warning(f"Skipping folder entry that is not a mapping: {data!r}")
            return None

        folder = FolderDef(name=self._name_or_default(
            data.get("name"), DEFAULT_FOLDER_NAME, "folder"
        ))

        for var_data in data.get("variables") or []:
            if not isinstance(var_data, dict):
                logger.warning(
                    f"Skipping variable entry in '{folder.name}' "
                    f"that is not a mapping: {var_data!r}"
                )
                continue
            folder.children.append(self._parse_variable(
                name=var_data.get("name"),
                data_type=var_data.get("data_type"),
                initial_value=var_data.get("initial_value"),
                display_name=var_data.get("display_name"),
                is_static=var_data.get("is_static"),
                max_value=var_data.get("max_value"),
            ))

        for sub_data in data.get("folders") or []:
            sub_folder = self._parse_yaml_folder(sub_data)
            if sub_folder is not None:
                folder.children.append(sub_folder)

        return folder

    def _parse_variable(
        self,
        name: Any,
        data_type: Any,
        initial_value: Any,
        display_name: Any,
        is_static: Any,
        max_value: Any,
    ) -> VariableDef:
        """
        Build a VariableDef from raw attribute values.

        Any attribute may be None (absent). Defaults are applied and
        logged where the value is missing or malformed.
        """
        var_name = self._name_or_default(name, DEFAULT_VARIABLE_NAME, "variable")

        declared_type = DEFAULT_DATA_TYPE if data_type is None else str(data_type)
        semantic_type = SemanticType.parse(declared_type)
        if semantic_type is None:
            logger.warning(
                f"Unsupported data type: {declared_type} for '{var_name}'. "
                f"Defaulting to String."
            )
            semantic_type = SemanticType.STRING

        return VariableDef(
            name=var_name,
            data_type=semantic_type,
            declared_type=declared_type,
            initial_value="" if initial_value is None else str(initial_value),
            display_name=var_name if display_name is None else str(display_name),
            is_static=self._parse_is_static(is_static, var_name),
            max_value=self._parse_max_value(max_value, var_name),
        )

    def _name_or_default(self, value: Any, default: str, kind: str) -> str:
        if value is None or str(value) == "":
            logger.warning(f"Unnamed {kind}, using '{default}'")
            return default
        return str(value)

    def _parse_is_static(self, value: Any, var_name: str) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        try:
            return codec.parse_bool(str(value))
        except ValueError:
            logger.warning(
                f"Invalid IsStatic '{value}' for '{var_name}', defaulting to false"
            )
            return False

    def _parse_max_value(self, value: Any, var_name: str) -> int:
        if value is None:
            return DEFAULT_MAX_VALUE
        try:
            max_value = int(str(value).strip())
        except ValueError:
            logger.warning(
                f"Invalid MaxValue '{value}' for '{var_name}', "
                f"defaulting to {DEFAULT_MAX_VALUE}"
            )
            return DEFAULT_MAX_VALUE

        if max_value < 0:
            logger.warning(
                f"Negative MaxValue {max_value} for '{var_name}', "
                f"defaulting to {DEFAULT_MAX_VALUE}"
            )
            return DEFAULT_MAX_VALUE
        return max_value
