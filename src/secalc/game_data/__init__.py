"""Game data extraction module for SE Calculator."""

from .block_rules import BlockRules
from .blocks_extractor import BlocksBuilder
from .data_extractor import GameDataExtractor, extract_from_se_dir
from .extract_config import ExtractConfig
from .localization_extractor import LocalizationBuilder

__all__ = ["BlockRules", "BlocksBuilder", "ExtractConfig", "GameDataExtractor", "LocalizationBuilder",
           "extract_from_se_dir"]
