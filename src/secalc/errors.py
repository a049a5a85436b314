"""Exception types raised by SECalc."""

from pathlib import Path
from typing import Optional


class SECalcError(Exception):
    """Base class for all SECalc errors."""


class ExtractConfigError(SECalcError):
    """The extraction configuration could not be read or compiled."""


class SbcStructureError(SECalcError):
    """An SBC/RESX XML document does not have the expected structure."""

    def __init__(self, message: str, element: Optional[str] = None):
        if element:
            message = f"{message} (in <{element}>)"
        super().__init__(message)
        self.element = element


class GameDataExtractionError(SECalcError):
    """Extracting game data from a file failed."""

    def __init__(self, message: str, file: Optional[Path] = None):
        if file is not None:
            message = f"{message} '{file}'"
        super().__init__(message)
        self.file = file


class GameDataError(SECalcError):
    """A game data JSON file could not be read or written."""
