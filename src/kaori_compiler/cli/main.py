"""Main CLI entry point."""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import rich_click as click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from kaori_compiler import __version__
from kaori_compiler.compiler.build import (
    SOURCE_SUFFIXES,
    Builder,
    build_paths,
    compile_file,
    iter_source_files,
)
from kaori_compiler.compiler.exceptions import KaoriError
from kaori_compiler.config import CompilerOptions, load_options

console = Console()

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.STYLE_HELPTEXT_FIRST = True
click.rich_click.STYLE_COMMANDS_TABLE_SHOW_LINES = False
click.rich_click.STYLE_COMMANDS_TABLE_PAD_EDGE = False
click.rich_click.STYLE_COMMANDS_TABLE_BOX = None
click.rich_click.STYLE_OPTIONS_TABLE_BOX = None
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running 'kaori --help' for more information."

# Cyan theme
click.rich_click.STYLE_HEADER_TEXT = "bold cyan"
click.rich_click.STYLE_OPTION = "cyan"
click.rich_click.STYLE_SWITCH = "cyan"
click.rich_click.STYLE_METAVAR = "dim white"
click.rich_click.STYLE_USAGE_COMMAND = "cyan"
click.rich_click.STYLE_USAGE = "dim"

click.rich_click.COMMAND_GROUPS = {
    "kaori": [
        {
            "name": "Commands",
            "commands": ["compile", "check", "watch"],
        }
    ]
}

PATHS = click.Path(exists=True, path_type=Path)


def configure_logging(verbose: bool = False) -> None:
    """Route compiler logs through a RichHandler on the shared console."""
    logger = logging.getLogger("kaori_compiler")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(
            RichHandler(console=console, show_path=False, show_time=False, markup=False)
        )


def resolve_options(
    paths: Tuple[Path, ...],
    package: Optional[str] = None,
    no_source_map: bool = False,
) -> CompilerOptions:
    """File configuration from the first path's project, overridden by flags."""
    options = load_options(paths[0] if paths else None)
    return options.merged(
        package_name=package,
        source_maps=False if no_source_map else None,
    )


def fail(error: KaoriError) -> None:
    console.print(f"[bold red]✗[/] {escape(str(error))}", highlight=False, soft_wrap=True)
    sys.exit(1)


@click.group(
    help=f"""
[bold white on cyan] kaori [/] [bold cyan]v{__version__}[/] Compile JSX into tagged templates.

Run [bold cyan]kaori compile src --out-dir dist[/] to compile a source tree.
"""
)
@click.version_option(__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    configure_logging(verbose)


@cli.command(name="compile")
@click.argument("paths", nargs=-1, required=True, type=PATHS)
@click.option("--out-dir", default=None, type=click.Path(path_type=Path), help="Output directory.")
@click.option("--no-source-map", is_flag=True, help="Do not write source maps.")
@click.option("--package", default=None, help="Module specifier for generated imports.")
def compile_command(
    paths: Tuple[Path, ...],
    out_dir: Optional[Path],
    no_source_map: bool,
    package: Optional[str],
) -> None:
    """Compile files or directories."""
    try:
        options = resolve_options(paths, package, no_source_map)

        if out_dir is None:
            if len(paths) != 1 or not paths[0].is_file():
                raise click.UsageError(
                    "--out-dir is required when compiling directories or several files."
                )
            # Output goes to stdout, so no map file is written
            result = compile_file(paths[0], options.merged(source_maps=False))
            click.echo(result.code, nl=False)
            return

        summary = build_paths(paths, out_dir, options)
    except KaoriError as e:
        fail(e)
        return

    console.print(
        f"✅ Compiled {summary.files} file(s) into [cyan]{summary.out_dir}[/] "
        f"({len(summary.warnings)} warning(s))",
        highlight=False,
    )


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=PATHS)
@click.option("--strict", is_flag=True, help="Exit with status 1 when any warning is found.")
def check(paths: Tuple[Path, ...], strict: bool) -> None:
    """Compile without writing output and report problems."""
    try:
        options = resolve_options(paths, no_source_map=True)
    except KaoriError as e:
        fail(e)
        return

    files = 0
    warnings = 0
    errors: List[KaoriError] = []
    for root in paths:
        for source_path in iter_source_files(root):
            files += 1
            try:
                warnings += len(compile_file(source_path, options).warnings)
            except KaoriError as e:
                errors.append(e)
                console.print(
                    f"[bold red]✗[/] {escape(str(e))}", highlight=False, soft_wrap=True
                )

    console.print(
        f"Checked {files} file(s): {warnings} warning(s), {len(errors)} error(s)",
        highlight=False,
    )
    if errors or (strict and warnings):
        sys.exit(1)


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=PATHS)
@click.option(
    "--out-dir", required=True, type=click.Path(path_type=Path), help="Output directory."
)
@click.option("--no-source-map", is_flag=True, help="Do not write source maps.")
@click.option("--package", default=None, help="Module specifier for generated imports.")
def watch(
    paths: Tuple[Path, ...],
    out_dir: Path,
    no_source_map: bool,
    package: Optional[str],
) -> None:
    """Compile, then recompile files as they change."""
    from watchfiles import Change
    from watchfiles import watch as watch_changes

    try:
        options = resolve_options(paths, package, no_source_map)
        summary = build_paths(paths, out_dir, options)
    except KaoriError as e:
        fail(e)
        return

    console.print(
        f"👀 Watching {len(paths)} path(s), {summary.files} file(s) compiled into "
        f"[cyan]{out_dir}[/]",
        highlight=False,
    )

    builder = Builder(out_dir, options)
    roots = [p.resolve() for p in paths]
    for changes in watch_changes(*paths):
        for change_type, file_path in changes:
            source_path = Path(file_path).resolve()
            if change_type == Change.deleted or source_path.suffix not in SOURCE_SUFFIXES:
                continue

            base = _base_for(source_path, roots)
            if base is None:
                continue
            try:
                builder.compile_to(source_path, builder.artifact_path_for(source_path, base))
            except KaoriError as e:
                console.print(
                    f"[bold red]✗[/] {escape(str(e))}", highlight=False, soft_wrap=True
                )
                continue
            console.print(f"🔁 Recompiled [cyan]{source_path.name}[/]", highlight=False)


def _base_for(source_path: Path, roots: List[Path]) -> Optional[Path]:
    for root in roots:
        if root.is_file():
            if root == source_path:
                return root.parent
        elif root in source_path.parents:
            return root
    return None


if __name__ == "__main__":
    cli()
