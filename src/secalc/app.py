"""Main application entry point."""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import ConfigManager, PathDetector
from .errors import GameDataError, SECalcError
from .game_data.data_extractor import GameDataExtractor
from .game_data.extract_config import ExtractConfig
from .grid_store import GridStore
from .models.entities import Data, GridSize
from .ui.views import BlocksView, ResultView

logger = logging.getLogger("secalc")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INTERRUPTED = 130


def _env_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    return Path(value) if value else None


class SECalc:
    """Main application class, one method per command."""

    def __init__(self, console: Optional[Console] = None, grid_store: Optional[GridStore] = None):
        self.console = console or Console()
        self.grid_store = grid_store or GridStore()
        self._config_manager: Optional[ConfigManager] = None

    @property
    def config_manager(self) -> ConfigManager:
        if self._config_manager is None:
            self._config_manager = ConfigManager()
        return self._config_manager

    def load_data(self, data_file: Optional[Path]) -> Data:
        """Load game data from the given file, or the last extracted one."""
        if data_file is None:
            data_file = self.config_manager.get_data_file()
        if data_file is None:
            raise GameDataError("No game data file given and none extracted yet, run extract-game-data first")
        with open(data_file, 'r', encoding='utf-8') as f:
            data = Data.from_json(f)
        logger.info(f"Loaded {len(data.blocks)} blocks from {data_file}")
        return data

    def extract_game_data(self, args) -> int:
        config_file = args.config_file or _env_path("SECALC_EXTRACT_CONFIG_FILE")
        output_file = args.output_file or _env_path("SECALC_EXTRACT_OUTPUT_FILE")
        if config_file is None or output_file is None:
            raise SECalcError("Both an extract config file and an output file are required")

        se_directory = args.se_directory or _env_path("SECALC_EXTRACT_SE_DIRECTORY")
        if se_directory is None:
            se_directory = self.config_manager.get_se_directory() or PathDetector.find_se_directory()
        if se_directory is None:
            raise SECalcError("Space Engineers directory not set and could not be found via Steam")

        workshop_directory = args.se_workshop_directory or _env_path("SECALC_EXTRACT_SE_WORKSHOP_DIRECTORY")
        if workshop_directory is None:
            saved = self.config_manager.get_se_workshop_directory()
            if saved is not None and saved.is_dir():
                workshop_directory = saved
        if workshop_directory is None:
            workshop_directory = PathDetector.infer_workshop_directory(se_directory)
        if workshop_directory is None:
            self.console.print("[yellow]Workshop directory not found, no mods will be extracted[/yellow]")

        config = ExtractConfig.load(config_file)
        self.console.print(f"[cyan]Extracting game data from {se_directory}...[/cyan]")
        extractor = GameDataExtractor(se_directory, workshop_directory, self.config_manager.get_cache_directory())
        data = extractor.extract(config, force_reload=args.force)

        with open(output_file, 'w', encoding='utf-8') as f:
            data.to_json(f)
        self.config_manager.set_data_file(str(Path(output_file).resolve()))

        self.console.print(f"[green]Wrote {len(data.blocks):,} blocks to {output_file}[/green]")
        return EXIT_OK

    def validate_config(self, args) -> int:
        config = ExtractConfig.load(args.config_file)
        problems = config.validate()
        if not problems:
            self.console.print(f"[green]{args.config_file} is valid[/green]")
            return EXIT_OK
        for problem in problems:
            self.console.print(f"[red]{escape(problem)}[/red]")
        return EXIT_ERROR

    def blocks(self, args) -> int:
        data = self.load_data(args.data)
        size = GridSize(args.size.capitalize()) if args.size else None
        BlocksView(data, self.console).display(size=size, show_hidden=args.show_hidden)
        return EXIT_OK

    @staticmethod
    def _saved_grid(operation, name: str, *args):
        try:
            return operation(name, *args)
        except KeyError:
            raise SECalcError(f"No saved grid named '{name}'") from None

    def calculate(self, args) -> int:
        if args.saved:
            calculator = self._saved_grid(self.grid_store.load, args.saved)
        elif args.grid_file:
            calculator = GridStore.import_file(args.grid_file)
        else:
            raise SECalcError("Give a grid file or --saved NAME")

        data = self.load_data(args.data)
        result = calculator.calculate(data)
        ResultView(calculator, result, data, self.console).display()
        return EXIT_OK

    def grids(self, args) -> int:
        if args.grids_command == "list":
            names = self.grid_store.list()
            if not names:
                self.console.print("[yellow]No saved grids[/yellow]")
                return EXIT_OK
            table = Table(show_header=True, box=None, padding=(0, 1))
            table.add_column("Name", style="cyan")
            table.add_column("Blocks", justify="right")
            for name in names:
                calculator = self.grid_store.load(name)
                count = sum(calculator.blocks.values()) + sum(
                    c.total() for c in calculator.directional_blocks.values())
                table.add_row(name, f"{count:,}")
            self.console.print(table)
        elif args.grids_command == "save":
            self.grid_store.save(args.name, GridStore.import_file(args.file))
            self.console.print(f"[green]Saved grid '{args.name}'[/green]")
        elif args.grids_command == "export":
            self._saved_grid(self.grid_store.export_file, args.name, args.file)
            self.console.print(f"[green]Exported grid '{args.name}' to {args.file}[/green]")
        elif args.grids_command == "delete":
            self._saved_grid(self.grid_store.delete, args.name)
            self.console.print(f"[green]Deleted grid '{args.name}'[/green]")
        return EXIT_OK

    def run(self, args) -> int:
        commands = {
            "extract-game-data": self.extract_game_data,
            "validate-config": self.validate_config,
            "blocks": self.blocks,
            "calculate": self.calculate,
            "grids": self.grids,
        }
        return commands[args.command](args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="secalc", description="Space Engineers grid calculator")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging and show tracebacks")
    subparsers = parser.add_subparsers(dest="command", required=True)

    extract = subparsers.add_parser("extract-game-data", help="Extract game data from Space Engineers")
    extract.add_argument("--se-directory", type=Path,
                         help="Space Engineers directory. Found via Steam when not set")
    extract.add_argument("--se-workshop-directory", type=Path,
                         help="Workshop (mod) directory. Inferred from the SE directory when not set")
    extract.add_argument("--force", action="store_true", help="Re-extract even if the cache is current")
    extract.add_argument("config_file", type=Path, nargs="?", help="Extract config JSON file")
    extract.add_argument("output_file", type=Path, nargs="?", help="Game data JSON file to write")

    validate = subparsers.add_parser("validate-config", help="Check an extract config for problems")
    validate.add_argument("config_file", type=Path)

    blocks = subparsers.add_parser("blocks", help="List extracted blocks")
    blocks.add_argument("--data", type=Path, help="Game data JSON file")
    blocks.add_argument("--size", choices=["small", "large"], help="Only show blocks of this grid size")
    blocks.add_argument("--show-hidden", action="store_true", help="Also show hidden blocks")

    calculate = subparsers.add_parser("calculate", help="Calculate a grid")
    calculate.add_argument("grid_file", type=Path, nargs="?", help="Grid JSON file")
    calculate.add_argument("--saved", metavar="NAME", help="Calculate a saved grid instead of a file")
    calculate.add_argument("--data", type=Path, help="Game data JSON file")

    grids = subparsers.add_parser("grids", help="Manage saved grids")
    grids_sub = grids.add_subparsers(dest="grids_command", required=True)
    grids_sub.add_parser("list", help="List saved grids")
    save = grids_sub.add_parser("save", help="Save a grid file under a name")
    save.add_argument("name")
    save.add_argument("file", type=Path)
    export = grids_sub.add_parser("export", help="Write a saved grid to a file")
    export.add_argument("name")
    export.add_argument("file", type=Path)
    delete = grids_sub.add_parser("delete", help="Delete a saved grid")
    delete.add_argument("name")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    app = SECalc()
    try:
        return app.run(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        return EXIT_INTERRUPTED
    except (SECalcError, OSError) as e:
        app.console.print(f"[red]Error: {escape(str(e))}[/red]")
        if args.debug:
            raise
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
