"""Extract block definitions from Space Engineers CubeBlocks SBC files."""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import GameDataExtractionError, SbcStructureError
from ..models.entities import (
    BLOCK_CATEGORIES, Battery, Block, BlockData, Blocks, Cockpit, Connector,
    Container, Drill, Generator, GridSize, HydrogenEngine, HydrogenTank,
    JumpDrive, Localization, Railgun, Reactor, Thruster, ThrusterType,
    WheelSuspension,
)
from .block_rules import BlockRules
from .sbc_reader import (
    child_elem, child_elem_opt, children_elems, first_child_elem, parse_attribute_float,
    parse_child_bool_opt, parse_child_float, parse_child_float_opt,
    parse_child_str, parse_child_str_opt, read_xml, size_volume, text_or_err,
    xsi_type,
)

logger = logging.getLogger("secalc.game_data")

SE_DATA_DIR = Path("Content") / "Data"
ENTITY_COMPONENTS_FILE = SE_DATA_DIR / "EntityComponents.sbc"

# Some calculated volumes are multiplied by this number (m^3 -> L).
VOLUME_MULTIPLIER = 1000.0

# Default FuelProductionToCapacityMultiplier in SE's code.
DEFAULT_FUEL_PRODUCTION_TO_CAPACITY_MULTIPLIER = 3600.0

INVENTORY_COMPONENT = "MyObjectBuilder_InventoryComponentDefinition"
CAPACITOR_COMPONENT = "MyObjectBuilder_EntityCapacitorComponentDefinition"

# (component definition type, subtype id) -> <EntityComponent> element
EntityComponentIndex = Dict[Tuple[str, str], ET.Element]


def natural_sort_key(text: str) -> List:
    """Sort key that orders embedded numbers numerically ("Block 2" < "Block 10")."""
    return [(0, int(part), "") if part.isdecimal() else (1, 0, part)
            for part in re.split(r"(\d+)", text) if part]


def _object_builder_type(name: str) -> str:
    prefix = "MyObjectBuilder_"
    return name[len(prefix):] if name.startswith(prefix) else name


def parse_block_id(definition: ET.Element) -> Tuple[str, str]:
    """Get (TypeId, SubtypeId) from a definition's <Id>, in element or attribute form."""
    id_node = child_elem(definition, "Id")
    type_id = parse_child_str_opt(id_node, "TypeId") or id_node.get("Type")
    if not type_id:
        raise SbcStructureError("Missing TypeId", "Id")
    subtype_id = parse_child_str_opt(id_node, "SubtypeId")
    if subtype_id is None:
        subtype_id = id_node.get("Subtype", "")
    return _object_builder_type(type_id), subtype_id


def parse_grid_size(definition: ET.Element) -> GridSize:
    size = text_or_err(child_elem(definition, "CubeSize"))
    try:
        return GridSize(size)
    except ValueError:
        raise SbcStructureError(f"Unrecognized grid size '{size}'", "CubeSize") from None


def parse_block_data(
    definition: ET.Element,
    localization: Localization,
    mod_id: Optional[int],
    rules: BlockRules,
) -> BlockData:
    type_id, subtype_id = parse_block_id(definition)
    block_id = f"{type_id}.{subtype_id}" if mod_id is None else f"{type_id}.{subtype_id}@{mod_id}"
    name = parse_child_str(definition, "DisplayName")
    size = parse_grid_size(definition)

    components: Dict[str, float] = {}
    for component in children_elems(child_elem(definition, "Components"), "Component"):
        component_id = component.get("Subtype")
        if not component_id or component.get("Count") is None:
            continue
        components[component_id] = components.get(component_id, 0.0) + parse_attribute_float(component, "Count")

    has_physics = parse_child_bool_opt(definition, "HasPhysics", True)
    public_text = parse_child_str_opt(definition, "Public")
    public = public_text is None or public_text.lower() != "false"

    localized_name = localization.get(name) or name
    return BlockData(
        id=block_id,
        name=name,
        size=size,
        components=components,
        has_physics=has_physics,
        mod_id=mod_id,
        hidden=rules.is_hidden(public, localized_name, subtype_id, block_id),
        rename=rules.rename(localized_name),
    )


# Block detail parsers

def _entity_component(definition: ET.Element, index: EntityComponentIndex, component_type: str) -> ET.Element:
    _, subtype_id = parse_block_id(definition)
    component = index.get((component_type, subtype_id))
    if component is None:
        raise SbcStructureError(f"No {component_type} for '{subtype_id}'", "EntityComponents")
    return component


def parse_battery(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Battery:
    return Battery(
        capacity=parse_child_float(definition, "MaxStoredPower"),
        input=parse_child_float(definition, "RequiredPowerInput"),
        output=parse_child_float(definition, "MaxPowerOutput"),
    )


def parse_jump_drive(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> JumpDrive:
    # Defaults according to MyObjectBuilder_JumpDriveDefinition.cs
    return JumpDrive(
        capacity=parse_child_float_opt(definition, "PowerNeededForJump", 1.0),
        operational_power_consumption=parse_child_float_opt(definition, "RequiredPowerInput", 4.0),
        power_efficiency=parse_child_float_opt(definition, "PowerEfficiency", 0.8),
        max_jump_distance=parse_child_float_opt(definition, "MaxJumpDistance", 5000.0),
        max_jump_mass=parse_child_float_opt(definition, "MaxJumpMass", 1250000.0),
    )


def parse_railgun(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Railgun:
    capacitor = _entity_component(definition, index, CAPACITOR_COMPONENT)
    return Railgun(
        capacity=parse_child_float(capacitor, "Capacity"),
        operational_power_consumption=parse_child_float(capacitor, "RechargeDraw"),
        idle_power_consumption=0.0002,  # MySmallMissileLauncher.cs
    )


def parse_thruster(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Thruster:
    thruster_type = text_or_err(child_elem(definition, "ThrusterType"))
    try:
        ty = ThrusterType(thruster_type)
    except ValueError:
        raise SbcStructureError(f"Unrecognized thruster type '{thruster_type}'", "ThrusterType") from None

    fuel_gas_id = None
    fuel_converter = child_elem_opt(definition, "FuelConverter")
    if fuel_converter is not None:
        fuel_gas_id = parse_child_str(first_child_elem(fuel_converter), "SubtypeId")

    return Thruster(
        ty=ty,
        fuel_gas_id=fuel_gas_id,
        force=parse_child_float(definition, "ForceMagnitude"),
        max_consumption=parse_child_float(definition, "MaxPowerConsumption"),
        min_consumption=parse_child_float(definition, "MinPowerConsumption"),
        min_planetary_influence=parse_child_float_opt(definition, "MinPlanetaryInfluence", 0.0),
        max_planetary_influence=parse_child_float_opt(definition, "MaxPlanetaryInfluence", 1.0),
        effectiveness_at_min_influence=parse_child_float_opt(definition, "EffectivenessAtMinInfluence", 1.0),
        effectiveness_at_max_influence=parse_child_float_opt(definition, "EffectivenessAtMaxInfluence", 1.0),
        needs_atmosphere_for_influence=parse_child_bool_opt(definition, "NeedsAtmosphereForInfluence", False),
    )


def parse_wheel_suspension(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> WheelSuspension:
    return WheelSuspension(
        force=parse_child_float(definition, "PropulsionForce"),
        operational_power_consumption=parse_child_float(definition, "RequiredPowerInput"),
        idle_power_consumption=parse_child_float(definition, "RequiredIdlePowerInput"),
    )


def parse_hydrogen_engine(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> HydrogenEngine:
    max_power_generation = parse_child_float(definition, "MaxPowerOutput")
    multiplier = parse_child_float_opt(
        definition, "FuelProductionToCapacityMultiplier", DEFAULT_FUEL_PRODUCTION_TO_CAPACITY_MULTIPLIER)
    return HydrogenEngine(
        fuel_capacity=parse_child_float(definition, "FuelCapacity"),
        max_power_generation=max_power_generation,
        max_fuel_consumption=max_power_generation / multiplier,
    )


def parse_reactor(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Reactor:
    max_power_generation = parse_child_float(definition, "MaxPowerOutput")
    multiplier = parse_child_float_opt(
        definition, "FuelProductionToCapacityMultiplier", DEFAULT_FUEL_PRODUCTION_TO_CAPACITY_MULTIPLIER)
    return Reactor(
        max_power_generation=max_power_generation,
        max_fuel_consumption=max_power_generation / multiplier,
    )


def parse_generator(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Generator:
    ice_consumption = parse_child_float(definition, "IceConsumptionPerSecond")
    generator = Generator(
        ice_consumption=ice_consumption,
        inventory_volume_ice=parse_child_float(definition, "InventoryMaxVolume") * VOLUME_MULTIPLIER,
        operational_power_consumption=parse_child_float(definition, "OperationalPowerConsumption"),
        idle_power_consumption=parse_child_float(definition, "StandbyPowerConsumption"),
    )
    for gas_info in children_elems(child_elem(definition, "ProducedGases"), "GasInfo"):
        gas_id = parse_child_str(child_elem(gas_info, "Id"), "SubtypeId")
        generation = ice_consumption * parse_child_float(gas_info, "IceToGasRatio")
        if gas_id == "Oxygen":
            generator.oxygen_generation = generation
        elif gas_id == "Hydrogen":
            generator.hydrogen_generation = generation
        else:
            raise SbcStructureError(f"Unrecognized gas ID '{gas_id}' in generator '{data.id}'", "GasInfo")
    return generator


def parse_hydrogen_tank(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> HydrogenTank:
    return HydrogenTank(
        capacity=parse_child_float(definition, "Capacity"),
        operational_power_consumption=parse_child_float(definition, "OperationalPowerConsumption"),
        idle_power_consumption=parse_child_float(definition, "StandbyPowerConsumption"),
    )


def parse_container(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Container:
    inventory = _entity_component(definition, index, INVENTORY_COMPONENT)
    return Container(
        inventory_volume_any=size_volume(child_elem(inventory, "Size")) * VOLUME_MULTIPLIER,
        store_any=child_elem_opt(inventory, "InputConstraint") is None,
    )


def parse_connector(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Connector:
    # Inventory capacity according to MyShipConnector.cs
    multiplier = data.size.cube_size * 0.8
    return Connector(
        inventory_volume_any=size_volume(child_elem(definition, "Size")) * multiplier ** 3 * VOLUME_MULTIPLIER,
    )


def parse_cockpit(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Cockpit:
    # Inventory capacity according to MyCockpit.cs
    has_inventory = parse_child_bool_opt(definition, "HasInventory", True)
    return Cockpit(has_inventory=has_inventory, inventory_volume_any=VOLUME_MULTIPLIER if has_inventory else 0.0)


def parse_drill(definition: ET.Element, data: BlockData, index: EntityComponentIndex) -> Drill:
    # Inventory and power according to MyShipDrill.cs
    cube_size = data.size.cube_size
    return Drill(
        inventory_volume_ore=size_volume(child_elem(definition, "Size")) * cube_size ** 3 * 0.5 * VOLUME_MULTIPLIER,
        operational_power_consumption=1.0 / 500.0,
        idle_power_consumption=1e-06,
    )


DetailParser = Callable[[ET.Element, BlockData, EntityComponentIndex], object]

# xsi:type -> (category, parser)
DEFINITION_PARSERS: Dict[str, Tuple[str, DetailParser]] = {
    "MyObjectBuilder_BatteryBlockDefinition": ("batteries", parse_battery),
    "MyObjectBuilder_JumpDriveDefinition": ("jump_drives", parse_jump_drive),
    "MyObjectBuilder_WeaponBlockDefinition": ("railguns", parse_railgun),
    "MyObjectBuilder_ThrustDefinition": ("thrusters", parse_thruster),
    "MyObjectBuilder_MotorSuspensionDefinition": ("wheel_suspensions", parse_wheel_suspension),
    "MyObjectBuilder_HydrogenEngineDefinition": ("hydrogen_engines", parse_hydrogen_engine),
    "MyObjectBuilder_ReactorDefinition": ("reactors", parse_reactor),
    "MyObjectBuilder_OxygenGeneratorDefinition": ("generators", parse_generator),
    "MyObjectBuilder_GasTankDefinition": ("hydrogen_tanks", parse_hydrogen_tank),
    "MyObjectBuilder_CargoContainerDefinition": ("containers", parse_container),
    "MyObjectBuilder_ShipConnectorDefinition": ("connectors", parse_connector),
    "MyObjectBuilder_CockpitDefinition": ("cockpits", parse_cockpit),
    "MyObjectBuilder_ShipDrillDefinition": ("drills", parse_drill),
}


def _is_extracted(definition_type: str, definition: ET.Element) -> bool:
    """Filters applied before parsing: only railgun weapons and hydrogen gas tanks."""
    if definition_type == "MyObjectBuilder_WeaponBlockDefinition":
        type_id, subtype_id = parse_block_id(definition)
        return "Railgun" in f"{type_id}.{subtype_id}"
    if definition_type == "MyObjectBuilder_GasTankDefinition":
        stored_gas = child_elem(definition, "StoredGasId")
        return parse_child_str(stored_gas, "SubtypeId") == "Hydrogen"
    return True


def index_entity_components(root: ET.Element, index: EntityComponentIndex):
    """Add every <EntityComponent> under <EntityComponents> to the index."""
    for container in root.findall("EntityComponents"):
        for component in children_elems(container, "EntityComponent"):
            component_type = xsi_type(component)
            id_node = child_elem_opt(component, "Id")
            if not component_type or id_node is None:
                continue
            subtype_id = parse_child_str_opt(id_node, "SubtypeId", "")
            index[(component_type, subtype_id)] = component


class BlocksBuilder:
    """
    Build Blocks from the game's CubeBlocks files and those of mods.

    Hide and rename rules are applied to each block as it is extracted.
    """

    def __init__(self, rules: BlockRules):
        self.rules = rules
        self._blocks: Dict[str, List[Block]] = {name: [] for name in BLOCK_CATEGORIES}

    def update_from_se_dir(self, se_directory: Path, localization: Localization):
        se_directory = Path(se_directory)
        self.update_from_sbc_files(
            se_directory / SE_DATA_DIR,
            lambda path: "CubeBlocks" in path.name,
            [se_directory / ENTITY_COMPONENTS_FILE],
            localization,
            None,
        )

    def update_from_mod(self, se_directory: Path, se_workshop_directory: Path, mod_id: int,
                        localization: Localization):
        search_path = Path(se_workshop_directory) / str(mod_id)
        if not search_path.is_dir():
            logger.warning(f"Mod {mod_id} not found in {se_workshop_directory}")
            return
        self.update_from_sbc_files(
            search_path,
            lambda path: True,
            [Path(se_directory) / ENTITY_COMPONENTS_FILE] + sorted(search_path.rglob("*.sbc")),
            localization,
            mod_id,
        )

    def update_from_sbc_files(
        self,
        search_path: Path,
        search_path_filter: Callable[[Path], bool],
        entity_components_files: List[Path],
        localization: Localization,
        mod_id: Optional[int],
    ):
        """
        Extract blocks from all .sbc files under search_path that pass the filter.

        Raises:
            GameDataExtractionError: If a file can't be read, parsed, or has an unexpected structure
        """
        index: EntityComponentIndex = {}
        for entity_components_file in entity_components_files:
            index_entity_components(self._read(entity_components_file, "EntityComponents"), index)

        sbc_files = sorted(p for p in Path(search_path).rglob("*.sbc") if p.is_file() and search_path_filter(p))
        logger.info(f"Found {len(sbc_files)} block definition files in {search_path}")

        before = sum(len(v) for v in self._blocks.values())
        for sbc_file in sbc_files:
            root = self._read(sbc_file, "CubeBlocks")
            section = child_elem_opt(root, "*")
            if section is None:
                logger.debug(f"Skipping {sbc_file}: no definitions")
                continue
            try:
                for definition in children_elems(section, "Definition"):
                    self._add_definition(definition, localization, mod_id, index)
            except SbcStructureError as e:
                raise GameDataExtractionError(f"Unexpected XML structure ({e}) in CubeBlocks file", sbc_file) from e

        added = sum(len(v) for v in self._blocks.values()) - before
        logger.info(f"Extracted {added} blocks from {search_path}")

    @staticmethod
    def _read(path: Path, what: str) -> ET.Element:
        try:
            return read_xml(path)
        except OSError as e:
            raise GameDataExtractionError(f"Could not read {what} file", path) from e
        except ET.ParseError as e:
            raise GameDataExtractionError(f"Could not XML parse {what} file", path) from e

    def _add_definition(self, definition: ET.Element, localization: Localization,
                        mod_id: Optional[int], index: EntityComponentIndex):
        definition_type = xsi_type(definition)
        if definition_type not in DEFINITION_PARSERS:
            return
        if not _is_extracted(definition_type, definition):
            return

        category, parser = DEFINITION_PARSERS[definition_type]
        data = parse_block_data(definition, localization, mod_id, self.rules)
        details = parser(definition, data, index)
        self._blocks[category].append(Block(data=data, details=details))

    def into_blocks(self, localization: Localization) -> Blocks:
        """Sort each category by display name and key the blocks by ID."""
        blocks = Blocks()
        for category, block_list in self._blocks.items():
            block_list.sort(key=lambda b: natural_sort_key(b.name_for(localization)))
            setattr(blocks, category, {b.id: b for b in block_list})
        return blocks
