"""Grid-level value types: directions, block modes and durations."""

import math
from enum import Enum
from typing import Dict, Generic, Iterator, List, Tuple, TypeVar

T = TypeVar("T")


class Direction(Enum):
    """Direction a directional block (thruster) faces."""
    UP = "up"
    DOWN = "down"
    FRONT = "front"
    BACK = "back"
    LEFT = "left"
    RIGHT = "right"

    def __str__(self):
        return self.value.capitalize()


class PerDirection(Generic[T]):
    """A value for each of the six directions."""

    def __init__(self, values: Dict[Direction, T] = None, default: T = 0):
        self._values: Dict[Direction, T] = {d: default for d in Direction}
        if values:
            for direction, value in values.items():
                self._values[Direction(direction)] = value

    def __getitem__(self, direction: Direction) -> T:
        return self._values[direction]

    def __setitem__(self, direction: Direction, value: T):
        self._values[direction] = value

    def __iter__(self) -> Iterator[T]:
        return iter(self._values.values())

    def __eq__(self, other):
        if isinstance(other, PerDirection):
            return self._values == other._values
        return NotImplemented

    def __repr__(self):
        return f"PerDirection({self.to_json()!r})"

    def items(self) -> List[Tuple[Direction, T]]:
        return list(self._values.items())

    def total(self):
        return sum(self._values.values())

    def to_json(self) -> Dict[str, T]:
        return {d.value: v for d, v in self._values.items()}

    @classmethod
    def from_json(cls, data: Dict[str, T], default: T = 0) -> "PerDirection[T]":
        return cls({Direction(k.lower()): v for k, v in data.items()}, default=default)


class BatteryMode(Enum):
    AUTO = "Auto"
    RECHARGE = "Recharge"
    DISCHARGE = "Discharge"
    OFF = "Off"

    @property
    def is_charging(self) -> bool:
        return self in (BatteryMode.AUTO, BatteryMode.RECHARGE)

    @property
    def is_discharging(self) -> bool:
        return self in (BatteryMode.AUTO, BatteryMode.DISCHARGE)

    def __str__(self):
        return self.value


class HydrogenTankMode(Enum):
    ON = "On"
    STOCKPILE = "Stockpile"
    OFF = "Off"

    @property
    def is_refilling(self) -> bool:
        return self in (HydrogenTankMode.ON, HydrogenTankMode.STOCKPILE)

    @property
    def is_providing(self) -> bool:
        return self is HydrogenTankMode.ON

    def __str__(self):
        return self.value


SECONDS_TO_MINUTES = 1.0 / 60.0
HOURS_TO_MINUTES = 60.0
DAY_TO_MINUTES = 1440.0
YEAR_TO_MINUTES = 525960.0
MILLENNIUM_TO_MINUTES = 5.256e8


class Duration:
    """A duration in minutes, displayed in the most readable unit."""

    DEFAULT_UNIT = "mins"

    def __init__(self, minutes: float):
        self.minutes = minutes

    @classmethod
    def from_seconds(cls, seconds: float) -> "Duration":
        return cls(seconds * SECONDS_TO_MINUTES)

    @classmethod
    def from_hours(cls, hours: float) -> "Duration":
        return cls(hours * HOURS_TO_MINUTES)

    def value_and_unit(self) -> Tuple[float, str]:
        d = self.minutes
        if math.isinf(d):
            return d, ""
        if d >= MILLENNIUM_TO_MINUTES:
            return d / MILLENNIUM_TO_MINUTES, "millennia"
        if d >= YEAR_TO_MINUTES:
            return d / YEAR_TO_MINUTES, "years"
        if d >= DAY_TO_MINUTES:
            return d / DAY_TO_MINUTES, "days"
        if d >= HOURS_TO_MINUTES:
            return d / HOURS_TO_MINUTES, "hours"
        if d <= 1.0:
            return d / SECONDS_TO_MINUTES, "secs"
        return d, self.DEFAULT_UNIT

    def format(self, precision: int = 2) -> str:
        value, unit = self.value_and_unit()
        if math.isinf(value):
            return "∞" if value > 0 else "-∞"
        return f"{value:,.{precision}f} {unit}"

    def __str__(self):
        return self.format()

    def __eq__(self, other):
        if isinstance(other, Duration):
            return self.minutes == other.minutes
        return NotImplemented
