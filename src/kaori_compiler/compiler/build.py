"""Compile source files and directory trees to an output directory."""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from kaori_compiler.compiler.codegen.generator import TransformResult, transform
from kaori_compiler.compiler.diagnostics import CompileWarning
from kaori_compiler.config import CompilerOptions

logger = logging.getLogger(__name__)

SOURCE_SUFFIXES = {".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"}
OUTPUT_SUFFIXES = {".jsx": ".js", ".tsx": ".ts"}
SKIP_DIRS = {"node_modules"}


@dataclass
class BuildSummary:
    files: int = 0
    warnings: List[CompileWarning] = field(default_factory=list)
    out_dir: Optional[Path] = None


def compile_file(path: Path, options: Optional[CompilerOptions] = None) -> TransformResult:
    """Compile one file in memory."""
    with open(path, "r", encoding="utf-8") as f:
        source = f.read()
    return transform(source, str(path), options)


def output_name(path: Path) -> str:
    return path.stem + OUTPUT_SUFFIXES.get(path.suffix, path.suffix)


def iter_source_files(root: Path) -> Iterator[Path]:
    """Source files under ``root``, skipping node_modules and dot-directories."""
    if root.is_file():
        yield root
        return

    for path in sorted(root.rglob("*")):
        relative = path.relative_to(root)
        if any(part in SKIP_DIRS or part.startswith(".") for part in relative.parts[:-1]):
            continue
        if path.is_file() and path.suffix in SOURCE_SUFFIXES:
            yield path


class Builder:
    def __init__(self, out_dir: Path, options: Optional[CompilerOptions] = None) -> None:
        self.out_dir = out_dir
        self.options = options or CompilerOptions()

    def build(self, paths: Iterable[Path]) -> BuildSummary:
        summary = BuildSummary(out_dir=self.out_dir)
        for source_path, artifact_path in self._scan(paths):
            result = self.compile_to(source_path, artifact_path)
            summary.files += 1
            summary.warnings.extend(result.warnings)

        logger.info("Compiled %d file(s) into %s", summary.files, self.out_dir)
        return summary

    def _scan(self, paths: Iterable[Path]) -> Iterator[Tuple[Path, Path]]:
        for root in paths:
            root = Path(root)
            base = root.parent if root.is_file() else root
            for source_path in iter_source_files(root):
                yield source_path, self.artifact_path_for(source_path, base)

    def artifact_path_for(self, source_path: Path, base: Path) -> Path:
        relative = source_path.relative_to(base)
        return self.out_dir / relative.parent / output_name(source_path)

    def compile_to(self, source_path: Path, artifact_path: Path) -> TransformResult:
        """Compile one file and write it, plus its source map, to ``artifact_path``."""
        result = compile_file(source_path, self.options)
        code = result.code

        artifact_path.parent.mkdir(parents=True, exist_ok=True)
        if result.map is not None:
            map_path = artifact_path.with_name(artifact_path.name + ".map")
            source_map = dict(result.map)
            source_map["file"] = artifact_path.name
            source_map["sources"] = [
                Path(_relative_to(source_path.resolve(), map_path.parent.resolve())).as_posix()
            ]
            map_path.write_text(json.dumps(source_map), encoding="utf-8")
            if not code.endswith("\n"):
                code += "\n"
            code += f"//# sourceMappingURL={map_path.name}\n"

        artifact_path.write_text(code, encoding="utf-8")
        logger.debug("Wrote %s", artifact_path)
        return result


def _relative_to(path: Path, start: Path) -> str:
    try:
        return os.path.relpath(path, start)
    except ValueError:
        # Different drives on Windows
        return str(path)


def build_paths(
    paths: Iterable[Path],
    out_dir: Path,
    options: Optional[CompilerOptions] = None,
) -> BuildSummary:
    """Compile files and directories into ``out_dir`` keeping their relative layout."""
    return Builder(Path(out_dir), options).build(paths)
