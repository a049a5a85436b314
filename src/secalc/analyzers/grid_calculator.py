"""Grid calculations: mass, volume, thrust, power and hydrogen balance."""

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

from ..models.entities import Data, ThrusterType
from ..models.grid import BatteryMode, Direction, HydrogenTankMode, PerDirection

logger = logging.getLogger("secalc.calculator")

MWH_TO_MINUTES = 60.0
LS_TO_MINUTES = 1.0 / 60.0
GRAVITY = 9.81  # m/s^2 at 1g

# Item densities, until they are extracted from the game's PhysicalItems
ICE_WEIGHT_PER_VOLUME = 1.0 / 0.37  # kg/L
ICE_ITEMS_PER_VOLUME = 1.0 / 0.37  # #/L
ORE_WEIGHT_PER_VOLUME = 1.0 / 0.37
ORE_ITEMS_PER_VOLUME = 1.0 / 0.37
STEEL_PLATE_WEIGHT_PER_VOLUME = 20.0 / 3.0
STEEL_PLATE_ITEMS_PER_VOLUME = 1.0 / 3.0

# Hydrogen engine consumption is multiplied by 60 when not full (MyFueledPowerProducer.cs)
HYDROGEN_ENGINE_REFILL_MULTIPLIER = 60.0
# Hydrogen tanks take capacity * 0.05 L/s when not full (MyGasTank.cs)
HYDROGEN_TANK_REFILL_RATIO = 0.05
DEFAULT_JUMP_DRIVE_EFFICIENCY = 0.8


def safe_div(numerator: float, denominator: float) -> float:
    """Float division that yields +-inf (or NaN for 0/0) instead of raising."""
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


@dataclass
class ThrusterAccelerationCalculated:
    force: float = 0.0  # N
    # m/s^2, None when the grid has no mass
    acceleration_empty_no_gravity: Optional[float] = None
    acceleration_empty_gravity: Optional[float] = None
    acceleration_filled_no_gravity: Optional[float] = None
    acceleration_filled_gravity: Optional[float] = None


@dataclass
class PowerCalculated:
    """Power use of one group and of everything up to and including it."""
    consumption: float = 0.0  # MW
    total_consumption: float = 0.0  # MW
    balance: float = 0.0  # +-MW
    # Minutes until batteries are empty, None without discharging batteries
    battery_duration: Optional[float] = None

    @classmethod
    def new(cls, consumption: float, total_consumption: float, generation: float,
            battery_capacity: Optional[float], battery_fill: float, battery_discharging: bool) -> "PowerCalculated":
        battery_duration = None
        if total_consumption != 0 and battery_discharging and battery_capacity is not None:
            battery_duration = safe_div(battery_capacity * (battery_fill / 100.0), total_consumption) * MWH_TO_MINUTES
        return cls(consumption, total_consumption, generation - total_consumption, battery_duration)


@dataclass
class HydrogenCalculated:
    """Hydrogen use of one group and of everything up to and including it."""
    consumption: float = 0.0  # L/s
    total_consumption: float = 0.0  # L/s
    balance: float = 0.0  # +-L/s
    # Minutes until hydrogen tanks are empty, None without providing tanks
    tank_duration: Optional[float] = None

    @classmethod
    def new(cls, consumption: float, total_consumption: float, generation: float,
            tank_capacity: Optional[float], tank_fill: float, tank_enabled: bool) -> "HydrogenCalculated":
        tank_duration = None
        if total_consumption != 0 and tank_enabled and tank_capacity is not None:
            tank_duration = safe_div(tank_capacity * (tank_fill / 100.0), total_consumption) * LS_TO_MINUTES
        return cls(consumption, total_consumption, generation - total_consumption, tank_duration)


def _thruster_accelerations() -> PerDirection:
    return PerDirection({d: ThrusterAccelerationCalculated() for d in Direction})


@dataclass
class GridCalculated:
    """Results of a grid calculation. Durations are in minutes."""
    total_volume_any: float = 0.0  # L
    total_volume_ore: float = 0.0
    total_volume_ice: float = 0.0
    total_volume_ore_only: float = 0.0
    total_volume_ice_only: float = 0.0
    total_mass_empty: float = 0.0  # kg
    total_mass_filled: float = 0.0
    total_items_ore: float = 0.0
    total_items_ice: float = 0.0
    total_items_steel_plate: float = 0.0

    thruster_acceleration: PerDirection = field(default_factory=_thruster_accelerations)
    wheel_force: float = 0.0  # N

    power_generation: float = 0.0  # MW
    power_idle: PowerCalculated = field(default_factory=PowerCalculated)
    power_railgun: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_utility: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_wheel_suspension: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_jump_drive: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_generator: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_up_down_thruster: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_front_back_thruster: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_left_right_thruster: PowerCalculated = field(default_factory=PowerCalculated)
    power_upto_battery: PowerCalculated = field(default_factory=PowerCalculated)

    railgun_capacity: Optional[float] = None  # MWh
    railgun_charge_time: Optional[float] = None

    jump_drive_capacity: Optional[float] = None  # MWh
    jump_drive_charge_time: Optional[float] = None
    jump_drive_max_distance_empty: Optional[float] = None  # km
    jump_drive_max_distance_filled: Optional[float] = None

    battery_capacity: Optional[float] = None  # MWh
    battery_charge_time: Optional[float] = None

    hydrogen_generation: float = 0.0  # L/s
    hydrogen_idle: HydrogenCalculated = field(default_factory=HydrogenCalculated)
    hydrogen_engine: HydrogenCalculated = field(default_factory=HydrogenCalculated)
    hydrogen_upto_up_down_thruster: HydrogenCalculated = field(default_factory=HydrogenCalculated)
    hydrogen_upto_front_back_thruster: HydrogenCalculated = field(default_factory=HydrogenCalculated)
    hydrogen_upto_left_right_thruster: HydrogenCalculated = field(default_factory=HydrogenCalculated)
    hydrogen_upto_tank: HydrogenCalculated = field(default_factory=HydrogenCalculated)

    hydrogen_tank_capacity: Optional[float] = None  # L
    hydrogen_tank_fill_time: Optional[float] = None
    hydrogen_engine_capacity: Optional[float] = None  # L
    hydrogen_engine_fill_time: Optional[float] = None

    def power_resource(self, consumption: float, total_consumption: float, battery_fill: float,
                       battery_discharging: bool) -> PowerCalculated:
        return PowerCalculated.new(consumption, total_consumption, self.power_generation,
                                   self.battery_capacity, battery_fill, battery_discharging)

    def hydrogen_resource(self, consumption: float, total_consumption: float, tank_fill: float,
                          tank_enabled: bool) -> HydrogenCalculated:
        return HydrogenCalculated.new(consumption, total_consumption, self.hydrogen_generation,
                                      self.hydrogen_tank_capacity, tank_fill, tank_enabled)

    def power_stages(self) -> Dict[str, PowerCalculated]:
        """Power groups in cascade order, keyed by label."""
        return {
            "Idle": self.power_idle,
            "Railgun": self.power_railgun,
            "+ Utility": self.power_upto_utility,
            "+ Wheel Suspensions": self.power_upto_wheel_suspension,
            "+ Charge Jump Drives": self.power_upto_jump_drive,
            "+ O2/H2 Generators": self.power_upto_generator,
            "+ Up/Down Thrusters": self.power_upto_up_down_thruster,
            "+ Front/Back Thrusters": self.power_upto_front_back_thruster,
            "+ Left/Right Thrusters": self.power_upto_left_right_thruster,
            "+ Charge Batteries": self.power_upto_battery,
        }

    def hydrogen_stages(self) -> Dict[str, HydrogenCalculated]:
        """Hydrogen groups in cascade order, keyed by label."""
        return {
            "Idle": self.hydrogen_idle,
            "Engines": self.hydrogen_engine,
            "+ Up/Down Thrusters": self.hydrogen_upto_up_down_thruster,
            "+ Front/Back Thrusters": self.hydrogen_upto_front_back_thruster,
            "+ Left/Right Thrusters": self.hydrogen_upto_left_right_thruster,
            "+ Refill Tanks": self.hydrogen_upto_tank,
        }


def _add(total: Optional[float], value: float) -> float:
    return (total or 0.0) + value


def _mapping(value, name: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"'{name}' must be a JSON object")
    return value


def _count(value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"Block count must be a non-negative integer, got {value!r}")
    return value


def _peak(per_direction: PerDirection, a: Direction, b: Direction) -> float:
    return max(per_direction[a], per_direction[b])


@dataclass
class GridCalculator:
    """
    Grid settings and block counts.

    Fill levels and power settings are percentages (0-100). Block counts are
    keyed by block ID; thrusters are counted per direction they push the grid.
    """
    gravity_multiplier: float = 1.0
    container_multiplier: float = 1.0
    planetary_influence: float = 1.0
    additional_mass: float = 0.0  # kg

    thruster_power: float = 100.0
    wheel_power: float = 100.0

    railgun_charging: bool = True
    jump_drive_charging: bool = True
    battery_mode: BatteryMode = BatteryMode.DISCHARGE
    battery_fill: float = 100.0

    hydrogen_tank_mode: HydrogenTankMode = HydrogenTankMode.ON
    hydrogen_tank_fill: float = 100.0
    hydrogen_engine_enabled: bool = True
    hydrogen_engine_fill: float = 100.0

    ice_only_fill: float = 100.0
    ore_only_fill: float = 100.0
    any_fill_with_ice: float = 0.0
    any_fill_with_ore: float = 0.0
    any_fill_with_steel_plates: float = 0.0

    blocks: Dict[str, int] = field(default_factory=dict)
    directional_blocks: Dict[str, PerDirection] = field(default_factory=dict)

    def set_block_count(self, block_id: str, count: int):
        if count:
            self.blocks[block_id] = count
        else:
            self.blocks.pop(block_id, None)

    def set_directional_block_count(self, block_id: str, direction: Direction, count: int):
        counts = self.directional_blocks.setdefault(block_id, PerDirection())
        counts[direction] = count
        if not counts.total():
            del self.directional_blocks[block_id]

    def to_json(self) -> dict:
        data = {}
        for f in fields(self):
            data[f.name] = getattr(self, f.name)
        data["battery_mode"] = self.battery_mode.value
        data["hydrogen_tank_mode"] = self.hydrogen_tank_mode.value
        data["blocks"] = dict(self.blocks)
        data["directional_blocks"] = {k: v.to_json() for k, v in self.directional_blocks.items()}
        return data

    @classmethod
    def from_json(cls, data: dict) -> "GridCalculator":
        """
        Build a calculator from JSON. Missing settings take their defaults, unknown keys are ignored.

        Raises:
            ValueError: If a setting or block count has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Grid must be a JSON object")
        known = {f.name: f for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in known}
        for name, value in values.items():
            ty = known[name].type
            if ty is float:
                if isinstance(value, bool) or not isinstance(value, (int, float)):
                    raise ValueError(f"'{name}' must be a number, got {value!r}")
                values[name] = float(value)
            elif ty is bool and not isinstance(value, bool):
                raise ValueError(f"'{name}' must be true or false, got {value!r}")
        if "battery_mode" in values:
            values["battery_mode"] = BatteryMode(values["battery_mode"])
        if "hydrogen_tank_mode" in values:
            values["hydrogen_tank_mode"] = HydrogenTankMode(values["hydrogen_tank_mode"])
        if "blocks" in values:
            values["blocks"] = {str(k): _count(v) for k, v in _mapping(values["blocks"], "blocks").items()}
        if "directional_blocks" in values:
            values["directional_blocks"] = {
                str(k): PerDirection.from_json({d: _count(c) for d, c in _mapping(v, k).items()})
                for k, v in _mapping(values["directional_blocks"], "directional_blocks").items()
            }
        return cls(**values)

    def calculate(self, data: Data) -> GridCalculated:
        c = GridCalculated()
        blocks = data.blocks
        components = data.components

        power_consumption_idle = 0.0
        power_consumption_railgun = 0.0
        power_consumption_utility = 0.0
        power_consumption_wheel_suspension = 0.0
        power_consumption_jump_drive = 0.0
        power_consumption_generator = 0.0
        power_consumption_thruster = PerDirection(default=0.0)
        power_consumption_battery = 0.0

        hydrogen_consumption_idle = 0.0
        hydrogen_consumption_engine = 0.0
        hydrogen_consumption_thruster = PerDirection(default=0.0)
        hydrogen_consumption_tank = 0.0

        jump_strength = 0.0  # Divide by mass to get max jump distance
        max_jump_distance = 0.0  # Cap on max jump distance
        jump_drive_efficiency_weighted = 0.0

        c.total_mass_empty += self.additional_mass

        def add_any_volume(volume: float):
            c.total_volume_any += volume
            c.total_volume_ore += volume
            c.total_volume_ice += volume

        # Non-directional blocks
        wheel_power_ratio = self.wheel_power / 100.0
        for block_id, count in self.blocks.items():
            if not count:
                continue
            block = blocks.get(block_id)
            if block is None:
                logger.debug(f"Ignoring unknown block '{block_id}'")
                continue
            if block_id in blocks.thrusters:
                logger.debug(f"Thruster '{block_id}' needs a direction, ignoring its count")
                continue
            count = float(count)
            details = block.details
            c.total_mass_empty += block.mass(components) * count

            if block_id in blocks.containers:
                if details.store_any:
                    add_any_volume(details.inventory_volume_any * count * self.container_multiplier)
            elif block_id in blocks.connectors:
                add_any_volume(details.inventory_volume_any * count * self.container_multiplier)
            elif block_id in blocks.cockpits:
                if details.has_inventory:
                    add_any_volume(details.inventory_volume_any * count * self.container_multiplier)
            elif block_id in blocks.wheel_suspensions:
                c.wheel_force += details.force * count * wheel_power_ratio
                power_consumption_idle += details.idle_power_consumption * count
                power_consumption_wheel_suspension += details.operational_power_consumption * count * wheel_power_ratio
            elif block_id in blocks.hydrogen_engines:
                if self.hydrogen_engine_enabled:
                    c.power_generation += details.max_power_generation * count
                    multiplier = HYDROGEN_ENGINE_REFILL_MULTIPLIER if self.hydrogen_engine_fill != 100.0 else 1.0
                    hydrogen_consumption_engine += details.max_fuel_consumption * multiplier * count
                c.hydrogen_engine_capacity = _add(c.hydrogen_engine_capacity, details.fuel_capacity * count)
            elif block_id in blocks.reactors:
                c.power_generation += details.max_power_generation * count
            elif block_id in blocks.batteries:
                if self.battery_mode.is_discharging:
                    c.power_generation += details.output * count
                if self.battery_mode.is_charging:
                    power_consumption_battery += details.input * count
                c.battery_capacity = _add(c.battery_capacity, details.capacity * count)
            elif block_id in blocks.jump_drives:
                c.jump_drive_capacity = _add(c.jump_drive_capacity, details.capacity * count)
                if self.jump_drive_charging:
                    consumption = details.operational_power_consumption * count
                    power_consumption_jump_drive += consumption
                    jump_drive_efficiency_weighted += details.power_efficiency * consumption
                # Formula based on https://www.spaceengineerswiki.com/Jump_drive
                max_jump_drive_distance = details.max_jump_distance / 1000.0  # m -> km
                jump_strength += max_jump_drive_distance * details.max_jump_mass * count
                max_jump_distance += max_jump_drive_distance * count
            elif block_id in blocks.railguns:
                c.railgun_capacity = _add(c.railgun_capacity, details.capacity * count)
                power_consumption_idle += details.idle_power_consumption * count
                if self.railgun_charging:
                    power_consumption_railgun += details.operational_power_consumption * count
            elif block_id in blocks.generators:
                c.total_volume_ice_only += details.inventory_volume_ice * count
                power_consumption_idle += details.idle_power_consumption * count
                power_consumption_generator += details.operational_power_consumption * count
                c.hydrogen_generation += details.hydrogen_generation * count
            elif block_id in blocks.hydrogen_tanks:
                if self.hydrogen_tank_mode.is_refilling:
                    power_consumption_idle += details.idle_power_consumption * count
                    power_consumption_utility += details.operational_power_consumption * count
                    if self.hydrogen_tank_fill != 100.0:
                        hydrogen_consumption_tank += details.capacity * HYDROGEN_TANK_REFILL_RATIO * count
                c.hydrogen_tank_capacity = _add(c.hydrogen_tank_capacity, details.capacity * count)
            elif block_id in blocks.drills:
                c.total_volume_ore_only += details.inventory_volume_ore * count
                power_consumption_idle += details.idle_power_consumption * count
                power_consumption_utility += details.operational_power_consumption * count

        # Directional blocks
        thruster_power_ratio = self.thruster_power / 100.0
        for block_id, count_per_direction in self.directional_blocks.items():
            block = blocks.thrusters.get(block_id)
            if block is None:
                logger.debug(f"Ignoring unknown thruster '{block_id}'")
                continue
            details = block.details
            effectiveness = details.effectiveness(self.planetary_influence)
            for direction, count in count_per_direction.items():
                if not count:
                    continue
                count = float(count)
                c.total_mass_empty += block.mass(components) * count
                c.thruster_acceleration[direction].force += details.force * thruster_power_ratio * effectiveness * count
                min_consumption = details.actual_min_consumption(data.gas_properties) * count
                max_consumption = details.actual_max_consumption(data.gas_properties) * thruster_power_ratio * count
                if details.ty is ThrusterType.HYDROGEN:
                    hydrogen_consumption_idle += min_consumption
                    hydrogen_consumption_thruster[direction] += max_consumption
                else:
                    power_consumption_idle += min_consumption
                    power_consumption_thruster[direction] += max_consumption

        # Filled volumes
        ice_only_volume = c.total_volume_ice_only * (self.ice_only_fill / 100.0)
        ore_only_volume = c.total_volume_ore_only * (self.ore_only_fill / 100.0)
        ice_in_any_volume = c.total_volume_any * (self.any_fill_with_ice / 100.0)
        ore_in_any_volume = c.total_volume_any * (self.any_fill_with_ore / 100.0)
        steel_plates_in_any_volume = c.total_volume_any * (self.any_fill_with_steel_plates / 100.0)

        # Filled mass
        ice_only_mass = ice_only_volume * ICE_WEIGHT_PER_VOLUME
        ore_only_mass = ore_only_volume * ORE_WEIGHT_PER_VOLUME
        any_mass = (ice_in_any_volume * ICE_WEIGHT_PER_VOLUME
                    + ore_in_any_volume * ORE_WEIGHT_PER_VOLUME
                    + steel_plates_in_any_volume * STEEL_PLATE_WEIGHT_PER_VOLUME)
        c.total_mass_filled = c.total_mass_empty + ice_only_mass + ore_only_mass + any_mass

        # Filled items
        c.total_items_ore = (ore_only_volume + ore_in_any_volume) * ORE_ITEMS_PER_VOLUME
        c.total_items_ice = (ice_only_volume + ice_in_any_volume) * ICE_ITEMS_PER_VOLUME
        c.total_items_steel_plate = steel_plates_in_any_volume * STEEL_PLATE_ITEMS_PER_VOLUME

        # Acceleration
        gravity = GRAVITY * self.gravity_multiplier
        for a in c.thruster_acceleration:
            if c.total_mass_empty != 0:
                a.acceleration_empty_no_gravity = a.force / c.total_mass_empty
                a.acceleration_empty_gravity = (a.force - c.total_mass_empty * gravity) / c.total_mass_empty
            if c.total_mass_filled != 0:
                a.acceleration_filled_no_gravity = a.force / c.total_mass_filled
                a.acceleration_filled_gravity = (a.force - c.total_mass_filled * gravity) / c.total_mass_filled

        # Power cascade
        battery_fill = self.battery_fill
        battery_discharging = self.battery_mode.is_discharging
        c.power_idle = c.power_resource(power_consumption_idle, power_consumption_idle, battery_fill, battery_discharging)

        actual_power_consumption_railgun = max(min(power_consumption_railgun, c.power_generation), 0.0)
        total = power_consumption_railgun
        c.power_railgun = c.power_resource(power_consumption_railgun, total, battery_fill, battery_discharging)
        total += power_consumption_utility
        c.power_upto_utility = c.power_resource(power_consumption_utility, total, battery_fill, battery_discharging)
        total += power_consumption_wheel_suspension
        c.power_upto_wheel_suspension = c.power_resource(
            power_consumption_wheel_suspension, total, battery_fill, battery_discharging)
        actual_power_consumption_jump_drive = max(
            min(power_consumption_jump_drive, c.power_upto_wheel_suspension.balance), 0.0)
        total += power_consumption_jump_drive
        c.power_upto_jump_drive = c.power_resource(power_consumption_jump_drive, total, battery_fill, battery_discharging)
        total += power_consumption_generator
        c.power_upto_generator = c.power_resource(power_consumption_generator, total, battery_fill, battery_discharging)
        up_down = _peak(power_consumption_thruster, Direction.UP, Direction.DOWN)
        total += up_down
        c.power_upto_up_down_thruster = c.power_resource(up_down, total, battery_fill, battery_discharging)
        front_back = _peak(power_consumption_thruster, Direction.FRONT, Direction.BACK)
        total += front_back
        c.power_upto_front_back_thruster = c.power_resource(front_back, total, battery_fill, battery_discharging)
        left_right = _peak(power_consumption_thruster, Direction.LEFT, Direction.RIGHT)
        total += left_right
        c.power_upto_left_right_thruster = c.power_resource(left_right, total, battery_fill, battery_discharging)
        actual_power_consumption_battery = max(
            min(power_consumption_battery, c.power_upto_left_right_thruster.balance), 0.0)
        total += power_consumption_battery
        c.power_upto_battery = c.power_resource(power_consumption_battery, total, battery_fill, battery_discharging)

        # Charge times
        if self.railgun_charging and c.railgun_capacity is not None:
            c.railgun_charge_time = safe_div(c.railgun_capacity, actual_power_consumption_railgun) * MWH_TO_MINUTES

        if self.jump_drive_charging and c.jump_drive_capacity is not None:
            efficiency = DEFAULT_JUMP_DRIVE_EFFICIENCY
            if power_consumption_jump_drive:
                efficiency = jump_drive_efficiency_weighted / power_consumption_jump_drive
            c.jump_drive_charge_time = safe_div(
                c.jump_drive_capacity, actual_power_consumption_jump_drive * efficiency) * MWH_TO_MINUTES
        if jump_strength != 0:
            c.jump_drive_max_distance_empty = min(safe_div(jump_strength, c.total_mass_empty), max_jump_distance)
            c.jump_drive_max_distance_filled = min(safe_div(jump_strength, c.total_mass_filled), max_jump_distance)

        if self.battery_mode.is_charging and c.battery_capacity is not None:
            anti_fill = 1.0 - self.battery_fill / 100.0
            c.battery_charge_time = safe_div(
                c.battery_capacity * anti_fill, actual_power_consumption_battery * 0.8) * MWH_TO_MINUTES

        # Hydrogen cascade
        tank_fill = self.hydrogen_tank_fill
        tank_providing = self.hydrogen_tank_mode.is_providing
        c.hydrogen_idle = c.hydrogen_resource(hydrogen_consumption_idle, hydrogen_consumption_idle, tank_fill, tank_providing)

        actual_hydrogen_consumption_engine = max(min(hydrogen_consumption_engine, c.hydrogen_generation), 0.0)
        total = hydrogen_consumption_engine
        c.hydrogen_engine = c.hydrogen_resource(hydrogen_consumption_engine, total, tank_fill, tank_providing)
        up_down = _peak(hydrogen_consumption_thruster, Direction.UP, Direction.DOWN)
        total += up_down
        c.hydrogen_upto_up_down_thruster = c.hydrogen_resource(up_down, total, tank_fill, tank_providing)
        front_back = _peak(hydrogen_consumption_thruster, Direction.FRONT, Direction.BACK)
        total += front_back
        c.hydrogen_upto_front_back_thruster = c.hydrogen_resource(front_back, total, tank_fill, tank_providing)
        left_right = _peak(hydrogen_consumption_thruster, Direction.LEFT, Direction.RIGHT)
        total += left_right
        c.hydrogen_upto_left_right_thruster = c.hydrogen_resource(left_right, total, tank_fill, tank_providing)
        actual_hydrogen_consumption_tank = max(min(hydrogen_consumption_tank, c.hydrogen_generation), 0.0)
        total += hydrogen_consumption_tank
        # Refilling tanks can't drain themselves
        c.hydrogen_upto_tank = c.hydrogen_resource(hydrogen_consumption_tank, total, tank_fill, False)

        # Fill times
        if self.hydrogen_tank_mode.is_refilling and self.hydrogen_tank_fill != 100.0 \
                and c.hydrogen_tank_capacity is not None:
            anti_fill = 1.0 - self.hydrogen_tank_fill / 100.0
            c.hydrogen_tank_fill_time = safe_div(
                c.hydrogen_tank_capacity * anti_fill, actual_hydrogen_consumption_tank) * LS_TO_MINUTES

        if self.hydrogen_engine_enabled and self.hydrogen_engine_fill != 100.0 \
                and c.hydrogen_engine_capacity is not None:
            anti_fill = 1.0 - self.hydrogen_engine_fill / 100.0
            c.hydrogen_engine_fill_time = safe_div(
                c.hydrogen_engine_capacity * anti_fill, actual_hydrogen_consumption_engine) * LS_TO_MINUTES

        logger.debug(f"Calculated grid: {c.total_mass_empty:.1f} kg empty, {c.power_generation:.3f} MW generation")
        return c
