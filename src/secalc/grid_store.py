"""Named grids saved in the user config directory."""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .analyzers.grid_calculator import GridCalculator
from .config import SECalcConfig
from .errors import SECalcError

logger = logging.getLogger("secalc.config")


class GridStore:
    """
    Saved grids, stored together in one JSON file keyed by name.

    Each entry is a GridCalculator in its JSON form, the same format that
    import_file and export_file use for single grid files.
    """

    FILENAME = "grids.json"

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else SECalcConfig.get_config_dir()
        self.path = self.directory / self.FILENAME

    def _read(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except ValueError as e:
            raise SECalcError(f"Saved grids file '{self.path}' is corrupt: {e}") from e
        if not isinstance(data, dict):
            raise SECalcError(f"Saved grids file '{self.path}' is corrupt")
        return data

    def _write(self, grids: Dict[str, dict]):
        self.directory.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(grids, f, indent=2, sort_keys=True)

    def list(self) -> List[str]:
        return sorted(self._read())

    def save(self, name: str, calculator: GridCalculator):
        grids = self._read()
        if name in grids:
            logger.info(f"Overwriting saved grid '{name}'")
        grids[name] = calculator.to_json()
        self._write(grids)
        logger.info(f"Saved grid '{name}' to {self.path}")

    def load(self, name: str) -> GridCalculator:
        """
        Load a saved grid.

        Raises:
            KeyError: If no grid is saved under the name
            SECalcError: If the saved grid is malformed
        """
        grids = self._read()
        if name not in grids:
            raise KeyError(name)
        try:
            return GridCalculator.from_json(grids[name])
        except (TypeError, ValueError) as e:
            raise SECalcError(f"Saved grid '{name}' is malformed: {e}") from e

    def delete(self, name: str):
        grids = self._read()
        if name not in grids:
            raise KeyError(name)
        del grids[name]
        self._write(grids)
        logger.info(f"Deleted saved grid '{name}'")

    @staticmethod
    def import_file(path: Path) -> GridCalculator:
        """Read a single grid JSON file."""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return GridCalculator.from_json(data)
        except (TypeError, ValueError) as e:
            raise SECalcError(f"Could not read grid file '{path}': {e}") from e

    def export_file(self, name: str, path: Path):
        """Write a saved grid to a single grid JSON file."""
        calculator = self.load(name)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump(calculator.to_json(), f, indent=2)
        logger.info(f"Exported grid '{name}' to {path}")
