"""Exceptions raised by the Kaori compiler."""

from typing import Optional


class KaoriError(Exception):
    """Base class for all compiler errors."""


class KaoriSyntaxError(KaoriError):
    """Source could not be parsed into a module tree."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        line: int = 0,
        column: int = 0,
    ) -> None:
        self.message = message
        self.file_path = file_path
        self.line = line
        self.column = column
        super().__init__(self.format())

    def format(self) -> str:
        location = self.file_path or "<source>"
        if self.line:
            location = f"{location}:{self.line}:{self.column}"
        return f"{location}: {self.message}"


class ConfigError(KaoriError):
    """Invalid compiler configuration."""
