"""Terminal views for game data and grid calculation results."""

import math
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.panel import Panel
from rich.text import Text

from ..analyzers.grid_calculator import GridCalculated, GridCalculator
from ..models.entities import BlockData, Data, GridSize
from ..models.grid import Direction, Duration

CATEGORY_TITLES = {
    "batteries": "Batteries",
    "jump_drives": "Jump Drives",
    "railguns": "Railguns",
    "thrusters": "Thrusters",
    "wheel_suspensions": "Wheel Suspensions",
    "hydrogen_engines": "Hydrogen Engines",
    "reactors": "Reactors",
    "generators": "O2/H2 Generators",
    "hydrogen_tanks": "Hydrogen Tanks",
    "containers": "Containers",
    "connectors": "Connectors",
    "cockpits": "Cockpits",
    "drills": "Drills",
}

GROUP_TITLES = {
    "thrusters": "Thrusters",
    "storage": "Storage",
    "power": "Power",
    "hydrogen": "Hydrogen",
    "ship_tools": "Ship Tools",
    "wheel_suspensions": "Wheel Suspensions",
    "jump_drives": "Jump Drives",
    "railguns": "Railguns",
}


def format_number(value: Optional[float], unit: str = "", precision: int = 2) -> str:
    """Format a number with thousands separators. None and NaN show as '-'."""
    if value is None or math.isnan(value):
        return "-"
    if math.isinf(value):
        text = "∞" if value > 0 else "-∞"
    else:
        text = f"{value:,.{precision}f}"
    return f"{text} {unit}" if unit else text


def format_duration(minutes: Optional[float]) -> str:
    if minutes is None or math.isnan(minutes):
        return "-"
    return Duration(minutes).format()


def format_balance(value: float, unit: str) -> str:
    """Color a balance green when positive and red when negative."""
    text = format_number(value, unit)
    if value > 0:
        return f"[green]+{text}[/green]"
    if value < 0:
        return f"[red]{text}[/red]"
    return f"[dim]{text}[/dim]"


class BlocksView:
    """
    Lists extracted blocks.

    With a grid size, blocks are listed in the groups the calculator offers
    for that size. Otherwise, or when hidden blocks are included, they are
    listed per category.
    """

    def __init__(self, data: Data, console: Optional[Console] = None):
        self.data = data
        self.console = console or Console()

    def display(self, size: Optional[GridSize] = None, show_hidden: bool = False):
        if size is not None and not show_hidden:
            sections = [(GROUP_TITLES[name], rows) for name, rows in self.data.blocks.groups(size)]
        else:
            sections = []
            for category, blocks in self.data.blocks.categories():
                rows = [b.data for b in blocks.values()
                        if (show_hidden or not b.data.hidden) and (size is None or b.data.size == size)]
                sections.append((CATEGORY_TITLES[category], rows))

        shown = 0
        for title, rows in sections:
            if not rows:
                continue
            self.console.print(f"[yellow]{title}:[/yellow]")
            self.console.print(self._table(rows))
            self.console.print()
            shown += len(rows)

        if not shown:
            self.console.print("[yellow]No blocks to show[/yellow]")

    def _table(self, rows: List[BlockData]) -> Table:
        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Name", style="cyan", min_width=24)
        table.add_column("Size", width=6)
        table.add_column("Mass", justify="right", width=14)
        table.add_column("Mod", style="dim")
        table.add_column("ID", style="dim")

        for block in rows:
            name = escape(block.name_for(self.data.localization))
            if block.hidden:
                name = f"[dim]{name} (hidden)[/dim]"
            mod = self.data.mods.get(block.mod_id) if block.mod_id is not None else None
            table.add_row(
                name,
                str(block.size),
                format_number(block.mass(self.data.components), "kg"),
                mod.name if mod else "",
                block.id,
            )
        return table


class ResultView:
    """Renders a grid calculation result."""

    def __init__(self, calculator: GridCalculator, result: GridCalculated, data: Data,
                 console: Optional[Console] = None):
        self.calculator = calculator
        self.result = result
        self.data = data
        self.console = console or Console()

    def display(self):
        self._display_header()
        self._display_mass_and_volume()
        self._display_thrusters()
        self._display_power()
        self._display_hydrogen()
        self._display_charge_times()

    def _display_header(self):
        calc = self.calculator
        block_count = sum(calc.blocks.values()) + sum(c.total() for c in calc.directional_blocks.values())
        header_text = Text()
        header_text.append("SPACE ENGINEERS GRID CALCULATOR\n", style="bold cyan")
        header_text.append(
            f"Gravity: {calc.gravity_multiplier:g}g | Planetary influence: {calc.planetary_influence:g} | "
            f"Container multiplier: {calc.container_multiplier:g}x\n",
            style="dim"
        )
        header_text.append(
            f"Battery: {calc.battery_mode} ({calc.battery_fill:g}%) | "
            f"Hydrogen tanks: {calc.hydrogen_tank_mode} ({calc.hydrogen_tank_fill:g}%)\n",
            style="dim"
        )
        header_text.append(f"Blocks: {block_count:,}", style="bold green")
        self.console.print(Panel(header_text, border_style="cyan", padding=(1, 2)))
        self.console.print()

    def _display_mass_and_volume(self):
        r = self.result
        table = Table(title="Mass & Volume", show_header=False, box=None, padding=(0, 1), title_justify="left")
        table.add_column("Property", style="cyan", min_width=28)
        table.add_column("Value", justify="right", min_width=16)
        table.add_row("Volume (any)", format_number(r.total_volume_any, "L"))
        table.add_row("Volume (ore)", format_number(r.total_volume_ore, "L"))
        table.add_row("Volume (ice)", format_number(r.total_volume_ice, "L"))
        table.add_row("Volume (ore only)", format_number(r.total_volume_ore_only, "L"))
        table.add_row("Volume (ice only)", format_number(r.total_volume_ice_only, "L"))
        table.add_row("Mass (empty)", format_number(r.total_mass_empty, "kg"))
        table.add_row("Mass (filled)", format_number(r.total_mass_filled, "kg"))
        table.add_row("Items (ore)", format_number(r.total_items_ore, "#", 0))
        table.add_row("Items (ice)", format_number(r.total_items_ice, "#", 0))
        table.add_row("Items (steel plates)", format_number(r.total_items_steel_plate, "#", 0))
        table.add_row("Wheel force", format_number(r.wheel_force, "N"))
        self.console.print(table)
        self.console.print()

    def _display_thrusters(self):
        table = Table(title="Thrusters", show_header=True, box=None, padding=(0, 1), title_justify="left")
        table.add_column("Direction", style="cyan", width=10)
        table.add_column("Force", justify="right", min_width=14)
        table.add_column("Accel. empty", justify="right")
        table.add_column("Accel. empty (g)", justify="right")
        table.add_column("Accel. filled", justify="right")
        table.add_column("Accel. filled (g)", justify="right")
        for direction in Direction:
            a = self.result.thruster_acceleration[direction]
            table.add_row(
                str(direction),
                format_number(a.force, "N"),
                format_number(a.acceleration_empty_no_gravity, "m/s²"),
                format_number(a.acceleration_empty_gravity, "m/s²"),
                format_number(a.acceleration_filled_no_gravity, "m/s²"),
                format_number(a.acceleration_filled_gravity, "m/s²"),
            )
        self.console.print(table)
        self.console.print()

    def _display_power(self):
        self.console.print(f"[bold]Power[/bold] generation: {format_number(self.result.power_generation, 'MW')}")
        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Group", style="cyan", min_width=24)
        table.add_column("Consumption", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Balance", justify="right")
        table.add_column("Battery duration", justify="right")
        for label, stage in self.result.power_stages().items():
            table.add_row(
                label,
                format_number(stage.consumption, "MW"),
                format_number(stage.total_consumption, "MW"),
                format_balance(stage.balance, "MW"),
                format_duration(stage.battery_duration),
            )
        self.console.print(table)
        self.console.print()

    def _display_hydrogen(self):
        self.console.print(f"[bold]Hydrogen[/bold] generation: {format_number(self.result.hydrogen_generation, 'L/s')}")
        table = Table(show_header=True, box=None, padding=(0, 1))
        table.add_column("Group", style="cyan", min_width=24)
        table.add_column("Consumption", justify="right")
        table.add_column("Total", justify="right")
        table.add_column("Balance", justify="right")
        table.add_column("Tank duration", justify="right")
        for label, stage in self.result.hydrogen_stages().items():
            table.add_row(
                label,
                format_number(stage.consumption, "L/s"),
                format_number(stage.total_consumption, "L/s"),
                format_balance(stage.balance, "L/s"),
                format_duration(stage.tank_duration),
            )
        self.console.print(table)
        self.console.print()

    def _display_charge_times(self):
        r = self.result
        table = Table(title="Capacity", show_header=True, box=None, padding=(0, 1), title_justify="left")
        table.add_column("Block", style="cyan", min_width=18)
        table.add_column("Capacity", justify="right")
        table.add_column("Fill time", justify="right")
        table.add_row("Railguns", format_number(r.railgun_capacity, "MWh"), format_duration(r.railgun_charge_time))
        table.add_row("Jump drives", format_number(r.jump_drive_capacity, "MWh"),
                      format_duration(r.jump_drive_charge_time))
        table.add_row("Batteries", format_number(r.battery_capacity, "MWh"), format_duration(r.battery_charge_time))
        table.add_row("Hydrogen tanks", format_number(r.hydrogen_tank_capacity, "L"),
                      format_duration(r.hydrogen_tank_fill_time))
        table.add_row("Hydrogen engines", format_number(r.hydrogen_engine_capacity, "L"),
                      format_duration(r.hydrogen_engine_fill_time))
        self.console.print(table)

        if r.jump_drive_max_distance_empty is not None:
            self.console.print(
                f"Max jump distance: {format_number(r.jump_drive_max_distance_empty, 'km')} empty, "
                f"{format_number(r.jump_drive_max_distance_filled, 'km')} filled"
            )
        self.console.print()
