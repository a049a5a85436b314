"""Extract components and gas properties from Space Engineers SBC files."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from ..errors import GameDataExtractionError, SbcStructureError
from ..models.entities import Component, Components, GasProperties, GasProperty
from .sbc_reader import (
    child_elem, children_elems, first_child_elem, parse_child_float,
    parse_child_float_opt, parse_child_str, read_xml,
)

logger = logging.getLogger("secalc.game_data")

SE_DATA_DIR = Path("Content") / "Data"


def _read_definitions(path: Path, what: str) -> ET.Element:
    """Read an SBC file and return the element under <Definitions>."""
    try:
        root = read_xml(path)
    except OSError as e:
        raise GameDataExtractionError(f"Could not read {what} file", path) from e
    except ET.ParseError as e:
        raise GameDataExtractionError(f"Could not XML parse {what} file", path) from e
    try:
        return first_child_elem(root)
    except SbcStructureError as e:
        raise GameDataExtractionError(f"Unexpected XML structure ({e}) in {what} file", path) from e


def extract_components(se_directory: Path) -> Components:
    return extract_components_from_sbc(Path(se_directory) / SE_DATA_DIR / "Components.sbc")


def extract_components_from_sbc(path: Path) -> Components:
    """
    Extract components from a Components.sbc file.

    Each <Component> gives its subtype ID, display name, mass (kg) and volume (L).
    """
    definitions = _read_definitions(path, "components")
    components = {}
    try:
        for component in children_elems(definitions, "Component"):
            component_id = parse_child_str(child_elem(component, "Id"), "SubtypeId")
            components[component_id] = Component(
                name=parse_child_str(component, "DisplayName"),
                mass=parse_child_float(component, "Mass"),
                volume=parse_child_float(component, "Volume"),
            )
    except SbcStructureError as e:
        raise GameDataExtractionError(f"Unexpected XML structure ({e}) in components file", path) from e

    logger.info(f"Extracted {len(components)} components")
    return Components(components)


def extract_gas_properties(se_directory: Path) -> GasProperties:
    return extract_gas_properties_from_sbc(Path(se_directory) / SE_DATA_DIR / "GasProperties.sbc")


def extract_gas_properties_from_sbc(path: Path) -> GasProperties:
    definitions = _read_definitions(path, "gas properties")
    gas_properties = {}
    try:
        for gas in children_elems(definitions, "Gas"):
            gas_id = parse_child_str(child_elem(gas, "Id"), "SubtypeId")
            energy_density = parse_child_float_opt(gas, "EnergyDensity", 0.0)
            gas_properties[gas_id] = GasProperty(name=gas_id, energy_density=energy_density)
    except SbcStructureError as e:
        raise GameDataExtractionError(f"Unexpected XML structure ({e}) in gas properties file", path) from e

    logger.info(f"Extracted {len(gas_properties)} gas properties")
    return GasProperties(gas_properties)
