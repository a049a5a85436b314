"""Extract localized texts from Space Engineers RESX files."""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List

from ..errors import GameDataExtractionError
from ..models.entities import Localization
from .sbc_reader import read_xml

logger = logging.getLogger("secalc.game_data")

SE_LOCALIZATION_FILE = Path("Content") / "Data" / "Localization" / "MyTexts.resx"


def is_neutral_resx(path: Path) -> bool:
    """True for culture-neutral resource files (MyTexts.resx, not MyTexts.de.resx)."""
    return path.suffix.lower() == ".resx" and "." not in path.stem


class LocalizationBuilder:
    """
    Build a Localization from the game's RESX file and those of mods.

    RESX files map keys to texts with entries like
    <data name="DisplayName_Block_LargeThrust"><value>Large Ion Thruster</value></data>.
    Files added later override keys from earlier ones.
    """

    def __init__(self):
        self._texts: Dict[str, str] = {}

    def update_from_se_dir(self, se_directory: Path):
        self.update_from_resx_file(Path(se_directory) / SE_LOCALIZATION_FILE)

    def update_from_mod(self, se_workshop_directory: Path, mod_id: int):
        mod_dir = Path(se_workshop_directory) / str(mod_id)
        if not mod_dir.is_dir():
            logger.warning(f"Mod {mod_id} not found in {se_workshop_directory}")
            return

        resx_files: List[Path] = sorted(p for p in mod_dir.rglob("*") if p.is_file() and is_neutral_resx(p))
        for resx_file in resx_files:
            self.update_from_resx_file(resx_file)

    def update_from_resx_file(self, path: Path):
        try:
            root = read_xml(path)
        except OSError as e:
            raise GameDataExtractionError("Could not read localization file", path) from e
        except ET.ParseError as e:
            raise GameDataExtractionError("Could not XML parse localization file", path) from e

        count = 0
        for node in root.findall("data"):
            name = node.get("name")
            value = node.find("value")
            if name and value is not None and value.text is not None:
                self._texts[name] = value.text
                count += 1

        logger.debug(f"Loaded {count} texts from {path}")

    def into_localization(self) -> Localization:
        logger.info(f"Loaded {len(self._texts)} localized texts")
        return Localization(dict(self._texts))
