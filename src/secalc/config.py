"""Configuration management for SE Calculator."""

import json
import logging
import re
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Optional, List

logger = logging.getLogger("secalc.config")

SE_STEAM_APP_ID = "244850"


@dataclass
class SECalcConfig:
    """Configuration settings for SE Calculator."""

    # Paths
    se_directory: Optional[str] = None
    se_workshop_directory: Optional[str] = None
    data_file: Optional[str] = None

    # Cache settings
    cache_directory: Optional[str] = None

    @classmethod
    def get_config_dir(cls) -> Path:
        config_dir = Path.home() / ".config" / "secalc"
        config_dir.mkdir(parents=True, exist_ok=True)
        return config_dir

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the config file."""
        return cls.get_config_dir() / "config.json"

    @classmethod
    def get_cache_path(cls) -> Path:
        """Get the path to the cache directory."""
        cache_dir = Path.home() / ".cache" / "secalc"
        cache_dir.mkdir(parents=True, exist_ok=True)
        return cache_dir

    @classmethod
    def load(cls) -> "SECalcConfig":
        """Load config from file or return defaults."""
        config_path = cls.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, 'r') as f:
                    data = json.load(f)
                logger.info(f"Loaded config from {config_path}")
                # Keys from older versions are dropped
                known = {f.name for f in fields(cls)}
                return cls(**{k: v for k, v in data.items() if k in known})
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Failed to load config: {e}")

        return cls()

    def save(self):
        """Save config to file."""
        config_path = self.get_config_path()

        with open(config_path, 'w') as f:
            json.dump(asdict(self), f, indent=2)

        logger.info(f"Saved config to {config_path}")


class PathDetector:
    """Auto-detect Space Engineers game and workshop paths."""

    # Steam installations, whose libraryfolders.vdf lists all library folders
    STEAM_PATHS = [
        # Windows
        Path("C:/Program Files (x86)/Steam"),
        Path("C:/Program Files/Steam"),
        # Linux native
        Path.home() / ".steam" / "steam",
        Path.home() / ".local" / "share" / "Steam",
        # Flatpak Steam
        Path.home() / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
    ]

    _LIBRARY_PATH = re.compile(r'"path"\s+"((?:[^"\\]|\\.)*)"')

    @classmethod
    def find_steam_libraries(cls) -> List[Path]:
        """Find all Steam library folders, starting with the Steam installations themselves."""
        libraries: List[Path] = []
        for steam_path in cls.STEAM_PATHS:
            if not steam_path.is_dir():
                continue
            if steam_path not in libraries:
                libraries.append(steam_path)

            vdf = steam_path / "steamapps" / "libraryfolders.vdf"
            if not vdf.exists():
                continue
            try:
                text = vdf.read_text(encoding='utf-8', errors='replace')
            except OSError as e:
                logger.warning(f"Failed to read {vdf}: {e}")
                continue
            for match in cls._LIBRARY_PATH.finditer(text):
                library = Path(match.group(1).replace("\\\\", "\\"))
                if library not in libraries:
                    libraries.append(library)
        return libraries

    @classmethod
    def find_se_directory(cls) -> Optional[Path]:
        """Find the Space Engineers installation directory in Steam libraries."""
        for library in cls.find_steam_libraries():
            manifest = library / "steamapps" / f"appmanifest_{SE_STEAM_APP_ID}.acf"
            path = library / "steamapps" / "common" / "SpaceEngineers"
            if (manifest.exists() or path.exists()) and cls.verify_se_directory(path):
                logger.info(f"Found Space Engineers directory: {path}")
                return path

        logger.warning("Could not auto-detect Space Engineers directory")
        return None

    @classmethod
    def verify_se_directory(cls, path: Path) -> bool:
        """Verify that a directory is a Space Engineers installation."""
        return (path / "Content" / "Data").is_dir()

    @classmethod
    def infer_workshop_directory(cls, se_directory: Path) -> Optional[Path]:
        """
        Infer the workshop directory from the SE directory.

        Steam keeps workshop content for a game next to its install:
        <library>/steamapps/common/SpaceEngineers -> <library>/steamapps/workshop/content/244850
        """
        se_directory = Path(se_directory)
        steamapps_dir = se_directory.parent.parent
        if steamapps_dir == se_directory:
            return None
        path = steamapps_dir / "workshop" / "content" / SE_STEAM_APP_ID
        if path.is_dir():
            return path
        logger.info(f"No workshop directory at {path}")
        return None


class ConfigManager:
    """Manage configuration and path detection."""

    def __init__(self, auto_detect: bool = True):
        self.config = SECalcConfig.load()
        if auto_detect:
            self._auto_detect_paths()

    def _auto_detect_paths(self):
        """Auto-detect paths if not configured."""
        changed = False

        if not self.config.se_directory or not Path(self.config.se_directory).exists():
            se_dir = PathDetector.find_se_directory()
            if se_dir:
                self.config.se_directory = str(se_dir)
                changed = True

        if self.config.se_directory and (not self.config.se_workshop_directory
                                         or not Path(self.config.se_workshop_directory).exists()):
            workshop_dir = PathDetector.infer_workshop_directory(Path(self.config.se_directory))
            if workshop_dir:
                self.config.se_workshop_directory = str(workshop_dir)
                changed = True

        if not self.config.cache_directory:
            self.config.cache_directory = str(SECalcConfig.get_cache_path())
            changed = True

        if changed:
            self.config.save()

    def get_se_directory(self) -> Optional[Path]:
        if self.config.se_directory:
            return Path(self.config.se_directory)
        return None

    def get_se_workshop_directory(self) -> Optional[Path]:
        if self.config.se_workshop_directory:
            return Path(self.config.se_workshop_directory)
        return None

    def get_cache_directory(self) -> Path:
        if self.config.cache_directory:
            return Path(self.config.cache_directory)
        return SECalcConfig.get_cache_path()

    def get_data_file(self) -> Optional[Path]:
        """Get the last written game data file if it still exists."""
        if self.config.data_file:
            path = Path(self.config.data_file)
            if path.exists():
                return path
        return None

    def set_data_file(self, path: str):
        """Record the last written game data file."""
        self.config.data_file = path
        self.config.save()
