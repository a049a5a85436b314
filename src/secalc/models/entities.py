"""Data models for Space Engineers game data."""

import json
from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Dict, Generic, Iterator, List, Optional, TypeVar, IO

from ..errors import GameDataError


class GridSize(Enum):
    """Grid size of a block."""
    SMALL = "Small"
    LARGE = "Large"

    @property
    def cube_size(self) -> float:
        """Cube size in metres as defined by Configuration.sbc."""
        return 0.5 if self is GridSize.SMALL else 2.5

    def __str__(self):
        return self.value


class ThrusterType(Enum):
    """Type of thruster."""
    ION = "Ion"
    ATMOSPHERIC = "Atmospheric"
    HYDROGEN = "Hydrogen"

    def __str__(self):
        return self.value


@dataclass
class Localization:
    """Localized texts keyed by localization key."""
    texts: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> Optional[str]:
        return self.texts.get(key)

    def __len__(self):
        return len(self.texts)


@dataclass
class Component:
    """A block component (steel plate, motor, ...)."""
    name: str
    mass: float  # kg
    volume: float  # L

    def name_for(self, localization: Localization) -> str:
        return localization.get(self.name) or self.name


@dataclass
class Components:
    components: Dict[str, Component] = field(default_factory=dict)

    def get(self, component_id: str) -> Optional[Component]:
        return self.components.get(component_id)


@dataclass
class GasProperty:
    name: str
    energy_density: float = 0.0


@dataclass
class GasProperties:
    gas_properties: Dict[str, GasProperty] = field(default_factory=dict)

    def get(self, gas_id: str) -> Optional[GasProperty]:
        return self.gas_properties.get(gas_id)


@dataclass
class Mod:
    """A workshop mod, identified by its numeric workshop ID."""
    id: int
    name: str

    def to_json(self) -> list:
        return [self.id, self.name]

    @classmethod
    def from_json(cls, value) -> "Mod":
        """
        Read a [workshop_id, name] pair.

        Raises:
            ValueError: If value is not an [int, str] pair
        """
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ValueError(f"Mod must be a [workshop_id, name] pair, got {value!r}")
        mod_id, name = value
        if isinstance(mod_id, bool) or not isinstance(mod_id, int) or not isinstance(name, str):
            raise ValueError(f"Mod must be an integer workshop ID and a name, got {value!r}")
        return cls(id=mod_id, name=name)


@dataclass
class Mods:
    """Mods keyed by ID, in insertion order. Later duplicates replace earlier ones."""
    mods: Dict[int, Mod] = field(default_factory=dict)

    @classmethod
    def from_list(cls, mods: List[Mod]) -> "Mods":
        return cls(mods={m.id: m for m in mods})

    def get(self, mod_id: int) -> Optional[Mod]:
        return self.mods.get(mod_id)

    def __iter__(self) -> Iterator[Mod]:
        return iter(self.mods.values())

    def __len__(self):
        return len(self.mods)


@dataclass
class BlockData:
    """Common block data created from a <Definition> in a CubeBlocks SBC file."""
    id: str  # "TypeId.SubtypeId" or "TypeId.SubtypeId@mod_id"
    name: str  # Localization key or plain display name
    size: GridSize = GridSize.SMALL
    components: Dict[str, float] = field(default_factory=dict)  # component id -> count
    has_physics: bool = True
    mod_id: Optional[int] = None
    hidden: bool = False
    rename: Optional[str] = None

    def name_for(self, localization: Localization) -> str:
        """Display name: the rename if set, otherwise the localized name."""
        if self.rename is not None:
            return self.rename
        return localization.get(self.name) or self.name

    def mass(self, components: Components) -> float:
        """Block mass in kg, the sum of its component masses."""
        if not self.has_physics:
            return 0.0
        mass = 0.0
        for component_id, count in self.components.items():
            component = components.get(component_id)
            if component:
                mass += component.mass * count
        return mass

    def to_json(self) -> dict:
        data = asdict(self)
        data["size"] = self.size.value
        return data

    @classmethod
    def from_json(cls, data: dict) -> "BlockData":
        data = dict(data)
        data["size"] = GridSize(data.get("size", GridSize.SMALL.value))
        return cls(**data)


# Block details

@dataclass
class Battery:
    capacity: float  # MWh
    input: float  # MW
    output: float  # MW


@dataclass
class JumpDrive:
    capacity: float = 1.0  # MWh
    operational_power_consumption: float = 4.0  # MW
    power_efficiency: float = 0.8
    max_jump_distance: float = 5000.0  # m
    max_jump_mass: float = 1250000.0  # kg


@dataclass
class Railgun:
    capacity: float  # MWh
    operational_power_consumption: float  # MW
    idle_power_consumption: float = 0.0002  # MW


@dataclass
class Thruster:
    ty: ThrusterType
    force: float  # N
    # MW for energy-based thrusters. For fuel-based thrusters divide by the
    # fuel's energy density to get L/s, see actual_max_consumption.
    max_consumption: float
    min_consumption: float
    fuel_gas_id: Optional[str] = None
    min_planetary_influence: float = 0.0
    max_planetary_influence: float = 1.0
    effectiveness_at_min_influence: float = 1.0
    effectiveness_at_max_influence: float = 1.0
    needs_atmosphere_for_influence: bool = False

    def _fuel_adjusted(self, consumption: float, gas_properties: GasProperties) -> float:
        if self.fuel_gas_id:
            gas = gas_properties.get(self.fuel_gas_id)
            if gas and gas.energy_density:
                return consumption / gas.energy_density
        return consumption

    def actual_max_consumption(self, gas_properties: GasProperties) -> float:
        return self._fuel_adjusted(self.max_consumption, gas_properties)

    def actual_min_consumption(self, gas_properties: GasProperties) -> float:
        return self._fuel_adjusted(self.min_consumption, gas_properties)

    def effectiveness(self, planetary_influence: float) -> float:
        """Thrust effectiveness at a planetary influence, on the line between min and max influence."""
        low, high = self.min_planetary_influence, self.max_planetary_influence
        influence = min(max(planetary_influence, min(low, high)), max(low, high))
        if low == high:
            return self.effectiveness_at_max_influence
        slope = (self.effectiveness_at_min_influence - self.effectiveness_at_max_influence) / (low - high)
        intercept = self.effectiveness_at_max_influence - slope * high
        return slope * influence + intercept


@dataclass
class WheelSuspension:
    force: float  # N
    operational_power_consumption: float  # MW
    idle_power_consumption: float  # MW


@dataclass
class HydrogenEngine:
    fuel_capacity: float  # L
    max_power_generation: float  # MW
    max_fuel_consumption: float  # L/s


@dataclass
class Reactor:
    max_power_generation: float  # MW
    max_fuel_consumption: float  # #/s


@dataclass
class Generator:
    ice_consumption: float  # #/s
    inventory_volume_ice: float  # L
    operational_power_consumption: float  # MW
    idle_power_consumption: float  # MW
    oxygen_generation: float = 0.0  # L/s
    hydrogen_generation: float = 0.0  # L/s


@dataclass
class HydrogenTank:
    capacity: float  # L
    operational_power_consumption: float  # MW
    idle_power_consumption: float  # MW


@dataclass
class Container:
    inventory_volume_any: float  # L
    store_any: bool


@dataclass
class Connector:
    inventory_volume_any: float  # L


@dataclass
class Cockpit:
    has_inventory: bool
    inventory_volume_any: float  # L


@dataclass
class Drill:
    inventory_volume_ore: float  # L
    operational_power_consumption: float  # MW
    idle_power_consumption: float  # MW


T = TypeVar("T")


@dataclass
class Block(Generic[T]):
    """Block with common data and type-specific details."""
    data: BlockData
    details: T

    @property
    def id(self) -> str:
        return self.data.id

    def name_for(self, localization: Localization) -> str:
        return self.data.name_for(localization)

    def mass(self, components: Components) -> float:
        return self.data.mass(components)

    def to_json(self) -> dict:
        details = asdict(self.details)
        if isinstance(self.details, Thruster):
            details["ty"] = self.details.ty.value
        return {"data": self.data.to_json(), "details": details}


# Category name -> details class, in display order.
BLOCK_CATEGORIES = {
    "batteries": Battery,
    "jump_drives": JumpDrive,
    "railguns": Railgun,
    "thrusters": Thruster,
    "wheel_suspensions": WheelSuspension,
    "hydrogen_engines": HydrogenEngine,
    "reactors": Reactor,
    "generators": Generator,
    "hydrogen_tanks": HydrogenTank,
    "containers": Container,
    "connectors": Connector,
    "cockpits": Cockpit,
    "drills": Drill,
}


def _details_from_json(details_cls, data: dict):
    data = dict(data)
    if details_cls is Thruster:
        data["ty"] = ThrusterType(data["ty"])
    known = {f.name for f in fields(details_cls)}
    return details_cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Blocks:
    """All extracted blocks, one ordered mapping of id -> Block per category."""
    batteries: Dict[str, Block[Battery]] = field(default_factory=dict)
    jump_drives: Dict[str, Block[JumpDrive]] = field(default_factory=dict)
    railguns: Dict[str, Block[Railgun]] = field(default_factory=dict)
    thrusters: Dict[str, Block[Thruster]] = field(default_factory=dict)
    wheel_suspensions: Dict[str, Block[WheelSuspension]] = field(default_factory=dict)
    hydrogen_engines: Dict[str, Block[HydrogenEngine]] = field(default_factory=dict)
    reactors: Dict[str, Block[Reactor]] = field(default_factory=dict)
    generators: Dict[str, Block[Generator]] = field(default_factory=dict)
    hydrogen_tanks: Dict[str, Block[HydrogenTank]] = field(default_factory=dict)
    containers: Dict[str, Block[Container]] = field(default_factory=dict)
    connectors: Dict[str, Block[Connector]] = field(default_factory=dict)
    cockpits: Dict[str, Block[Cockpit]] = field(default_factory=dict)
    drills: Dict[str, Block[Drill]] = field(default_factory=dict)

    def categories(self) -> Iterator[tuple]:
        """Iterate (category name, mapping) pairs in display order."""
        for name in BLOCK_CATEGORIES:
            yield name, getattr(self, name)

    def get(self, block_id: str) -> Optional[Block]:
        """Find a block by ID in any category."""
        for _, blocks in self.categories():
            block = blocks.get(block_id)
            if block:
                return block
        return None

    def __len__(self):
        return sum(len(blocks) for _, blocks in self.categories())

    @staticmethod
    def _visible(blocks: Dict[str, Block], grid_size: GridSize) -> List[BlockData]:
        return [b.data for b in blocks.values() if not b.data.hidden and b.data.size == grid_size]

    def thruster_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.thrusters, grid_size)

    def storage_blocks(self, grid_size: GridSize) -> List[BlockData]:
        cockpits = {k: b for k, b in self.cockpits.items() if b.details.has_inventory}
        return (self._visible(self.containers, grid_size)
                + self._visible(self.connectors, grid_size)
                + self._visible(cockpits, grid_size))

    def power_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return (self._visible(self.hydrogen_engines, grid_size)
                + self._visible(self.reactors, grid_size)
                + self._visible(self.batteries, grid_size))

    def hydrogen_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.generators, grid_size) + self._visible(self.hydrogen_tanks, grid_size)

    def ship_tool_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.drills, grid_size)

    def wheel_suspension_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.wheel_suspensions, grid_size)

    def jump_drive_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.jump_drives, grid_size)

    def railgun_blocks(self, grid_size: GridSize) -> List[BlockData]:
        return self._visible(self.railguns, grid_size)

    def groups(self, grid_size: GridSize) -> Iterator[tuple]:
        """Iterate (group name, visible blocks) pairs for one grid size, in calculator order."""
        yield "thrusters", self.thruster_blocks(grid_size)
        yield "storage", self.storage_blocks(grid_size)
        yield "power", self.power_blocks(grid_size)
        yield "hydrogen", self.hydrogen_blocks(grid_size)
        yield "ship_tools", self.ship_tool_blocks(grid_size)
        yield "wheel_suspensions", self.wheel_suspension_blocks(grid_size)
        yield "jump_drives", self.jump_drive_blocks(grid_size)
        yield "railguns", self.railgun_blocks(grid_size)

    def to_json(self) -> dict:
        return {name: {block_id: block.to_json() for block_id, block in blocks.items()}
                for name, blocks in self.categories()}

    @classmethod
    def from_json(cls, data: dict) -> "Blocks":
        blocks = cls()
        for name, details_cls in BLOCK_CATEGORIES.items():
            category = getattr(blocks, name)
            for block_id, block in data.get(name, {}).items():
                category[block_id] = Block(
                    data=BlockData.from_json(block["data"]),
                    details=_details_from_json(details_cls, block["details"]),
                )
        return blocks


@dataclass
class Data:
    """All game data needed by the calculator."""
    blocks: Blocks = field(default_factory=Blocks)
    components: Components = field(default_factory=Components)
    gas_properties: GasProperties = field(default_factory=GasProperties)
    localization: Localization = field(default_factory=Localization)
    mods: Mods = field(default_factory=Mods)

    def to_dict(self) -> dict:
        return {
            "blocks": self.blocks.to_json(),
            "components": {k: asdict(c) for k, c in self.components.components.items()},
            "gas_properties": {k: asdict(g) for k, g in self.gas_properties.gas_properties.items()},
            "localization": dict(self.localization.texts),
            "mods": [m.to_json() for m in self.mods],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Data":
        return cls(
            blocks=Blocks.from_json(data.get("blocks", {})),
            components=Components({k: Component(**c) for k, c in data.get("components", {}).items()}),
            gas_properties=GasProperties({k: GasProperty(**g) for k, g in data.get("gas_properties", {}).items()}),
            localization=Localization(dict(data.get("localization", {}))),
            mods=Mods.from_list([Mod.from_json(m) for m in data.get("mods", [])]),
        )

    def to_json(self, fp: IO[str]):
        """Write data as pretty-printed JSON."""
        json.dump(self.to_dict(), fp, indent=2)

    @classmethod
    def from_json(cls, fp: IO[str]) -> "Data":
        """
        Read data from JSON.

        Raises:
            GameDataError: If the JSON is malformed or has an unexpected shape
        """
        try:
            return cls.from_dict(json.load(fp))
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            raise GameDataError(f"Could not read game data from JSON: {e}") from e
