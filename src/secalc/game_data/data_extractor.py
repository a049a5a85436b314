"""Extract all calculator game data from a Space Engineers installation."""

import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

from ..errors import GameDataError
from ..models.entities import Data, Mods
from .blocks_extractor import ENTITY_COMPONENTS_FILE, BlocksBuilder
from .components_extractor import SE_DATA_DIR, extract_components, extract_gas_properties
from .extract_config import ExtractConfig
from .localization_extractor import SE_LOCALIZATION_FILE, LocalizationBuilder

logger = logging.getLogger("secalc.game_data")


def extract_from_se_dir(
    se_directory: Path,
    se_workshop_directory: Optional[Path],
    config: ExtractConfig,
) -> Data:
    """
    Extract game data from the SE directory and the configured workshop mods.

    Mods are only extracted when a workshop directory is given.

    Raises:
        ExtractConfigError: If a hide or rename regex is invalid
        GameDataExtractionError: If a game or mod file can't be read or parsed
    """
    se_directory = Path(se_directory)
    rules = config.block_rules()
    mods = Mods.from_list(config.extract_mods)

    if se_workshop_directory is None and len(mods):
        logger.warning(f"No workshop directory, skipping {len(mods)} mods")

    localization_builder = LocalizationBuilder()
    localization_builder.update_from_se_dir(se_directory)
    if se_workshop_directory is not None:
        for mod in mods:
            localization_builder.update_from_mod(se_workshop_directory, mod.id)
    localization = localization_builder.into_localization()

    blocks_builder = BlocksBuilder(rules)
    blocks_builder.update_from_se_dir(se_directory, localization)
    if se_workshop_directory is not None:
        for mod in mods:
            logger.info(f"Extracting mod {mod.id} ({mod.name})")
            blocks_builder.update_from_mod(se_directory, se_workshop_directory, mod.id, localization)
    blocks = blocks_builder.into_blocks(localization)

    components = extract_components(se_directory)
    gas_properties = extract_gas_properties(se_directory)

    logger.info(f"Extracted {len(blocks)} blocks")
    return Data(
        blocks=blocks,
        components=components,
        gas_properties=gas_properties,
        localization=localization,
        mods=mods,
    )


class GameDataExtractor:
    """Extract game data, caching the result between runs."""

    CACHE_FILENAME = "game_data_cache.json"
    KEY_FILES = [
        SE_DATA_DIR / "CubeBlocks",
        SE_DATA_DIR / "Components.sbc",
        SE_DATA_DIR / "GasProperties.sbc",
        ENTITY_COMPONENTS_FILE,
        SE_LOCALIZATION_FILE,
    ]
    FINGERPRINT_SUFFIXES = (".sbc", ".resx")

    def __init__(self, se_directory: Path, se_workshop_directory: Optional[Path] = None,
                 cache_directory: Optional[Path] = None):
        self.se_dir = Path(se_directory)
        self.workshop_dir = Path(se_workshop_directory) if se_workshop_directory else None
        self.cache_dir = Path(cache_directory) if cache_directory else Path.home() / ".cache" / "secalc"
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def _get_cache_path(self) -> Path:
        return self.cache_dir / self.CACHE_FILENAME

    def _get_game_version_fingerprint(self, config: ExtractConfig) -> str:
        """
        Get a fingerprint based on key game and mod file timestamps.

        This allows us to detect when the game or a mod has been updated
        and the cache needs refreshing.

        Directories contribute every .sbc and .resx file below them.
        """
        key_paths = [self.se_dir / f for f in self.KEY_FILES]
        if self.workshop_dir:
            key_paths.extend(self.workshop_dir / str(mod.id) for mod in config.extract_mods)

        timestamps = []
        for path in key_paths:
            if path.is_dir():
                files = [f for f in path.rglob("*") if f.suffix.lower() in self.FINGERPRINT_SUFFIXES and f.is_file()]
            elif path.exists():
                files = [path]
            else:
                continue
            timestamps.extend(f"{f}:{f.stat().st_mtime}" for f in files)

        return "|".join(sorted(timestamps))

    @staticmethod
    def _get_config_hash(config: ExtractConfig) -> str:
        encoded = json.dumps(config.to_dict(), sort_keys=True).encode("utf-8")
        return hashlib.sha256(encoded).hexdigest()

    def _load_from_cache(self, config: ExtractConfig) -> Optional[Data]:
        """Try to load game data from cache."""
        cache_path = self._get_cache_path()

        if not cache_path.exists():
            return None

        try:
            with open(cache_path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if data.get("se_directory") != str(self.se_dir):
                logger.info("Cache is for different SE directory, will re-extract")
                return None

            if data.get("extract_config_hash") != self._get_config_hash(config):
                logger.info("Extract config has changed, will re-extract")
                return None

            if data.get("game_version_fingerprint", "") != self._get_game_version_fingerprint(config):
                logger.info("Game files have been updated, will re-extract")
                return None

            game_data = Data.from_dict(data["data"])
            logger.info(f"Loaded {len(game_data.blocks)} blocks from cache")
            return game_data

        except (json.JSONDecodeError, KeyError, TypeError, ValueError, OSError) as e:
            logger.warning(f"Failed to load cache: {e}")
            return None

    def _save_to_cache(self, config: ExtractConfig, game_data: Data):
        cache_path = self._get_cache_path()
        data = {
            "se_directory": str(self.se_dir),
            "game_version_fingerprint": self._get_game_version_fingerprint(config),
            "extract_config_hash": self._get_config_hash(config),
            "data": game_data.to_dict(),
        }

        try:
            with open(cache_path, 'w', encoding='utf-8') as f:
                json.dump(data, f)
            logger.info(f"Saved {len(game_data.blocks)} blocks to cache")
        except (IOError, OSError, TypeError) as e:
            logger.error(f"Failed to save cache: {e}")

    def extract(self, config: ExtractConfig, force_reload: bool = False) -> Data:
        """
        Extract game data, or load it from cache when nothing has changed.

        Args:
            config: Mods to extract and block hide/rename rules
            force_reload: If True, bypass cache and re-extract from game files
        """
        if not self.se_dir.is_dir():
            raise GameDataError(f"Space Engineers directory not found: {self.se_dir}")

        if not force_reload:
            cached = self._load_from_cache(config)
            if cached is not None:
                return cached

        game_data = extract_from_se_dir(self.se_dir, self.workshop_dir, config)
        self._save_to_cache(config, game_data)
        return game_data
