"""Compiler options and ``[tool.kaori]`` configuration loading."""

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

from kaori_compiler.compiler.exceptions import ConfigError

PROJECT_MARKERS = ("pyproject.toml", "package.json", ".git")


@dataclass
class CompilerOptions:
    # Module specifier used for the generated import
    package_name: str = "kaori.js"
    # Existing imports whose source contains this string count as the support package
    package_match: Optional[str] = "kaori"
    # Keep whitespace-only text without a line break between markup children
    keep_inline_whitespace: bool = True
    source_maps: bool = True
    # None infers the grammar from the file suffix
    typescript: Optional[bool] = None

    def merged(self, **overrides: Any) -> "CompilerOptions":
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "CompilerOptions":
        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}
        for raw_key, value in data.items():
            key = raw_key.replace("-", "_")
            if key not in known:
                raise ConfigError(f"Unknown option '{raw_key}' in [tool.kaori]")
            values[key] = _check_type(raw_key, key, value)
        return cls(**values)


_EXPECTED = {
    "package_name": (str,),
    "package_match": (str, type(None)),
    "keep_inline_whitespace": (bool,),
    "source_maps": (bool,),
    "typescript": (bool, type(None)),
}


def _check_type(raw_key: str, key: str, value: Any) -> Any:
    if not isinstance(value, _EXPECTED[key]):
        expected = " or ".join(t.__name__ for t in _EXPECTED[key] if t is not type(None))
        raise ConfigError(
            f"Option '{raw_key}' in [tool.kaori] must be {expected}, "
            f"got {type(value).__name__}"
        )
    return value


def find_project_root(start: Union[str, Path, None] = None) -> Optional[Path]:
    """Walk upwards from ``start`` to the first directory holding a project marker."""
    current = Path(start or os.getcwd()).resolve()
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        if any((directory / marker).exists() for marker in PROJECT_MARKERS):
            return directory
    return None


def load_options(start: Union[str, Path, None] = None) -> CompilerOptions:
    """Read ``[tool.kaori]`` from the project's pyproject.toml, if any."""
    root = find_project_root(start)
    if root is None:
        return CompilerOptions()

    pyproject = root / "pyproject.toml"
    if not pyproject.exists():
        return CompilerOptions()

    try:
        with open(pyproject, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid {pyproject}: {e}") from e

    table = data.get("tool", {}).get("kaori", {})
    if not isinstance(table, dict):
        raise ConfigError(f"[tool.kaori] in {pyproject} must be a table")
    return CompilerOptions.from_mapping(table)
