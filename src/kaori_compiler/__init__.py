from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("kaori-compiler")
except PackageNotFoundError:
    __version__ = "unknown"

from kaori_compiler.config import CompilerOptions, load_options
from kaori_compiler.compiler.codegen.generator import TransformResult, transform
from kaori_compiler.compiler.diagnostics import CompileWarning
from kaori_compiler.compiler.exceptions import ConfigError, KaoriError, KaoriSyntaxError

__all__ = [
    "transform",
    "TransformResult",
    "CompilerOptions",
    "load_options",
    "CompileWarning",
    "KaoriError",
    "KaoriSyntaxError",
    "ConfigError",
]
