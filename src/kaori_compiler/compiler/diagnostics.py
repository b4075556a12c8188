"""Non-fatal compiler warnings."""

import logging
from dataclasses import dataclass
from typing import List, Optional

logger = logging.getLogger(__name__)

CHILDREN_CONFLICT = "children-conflict"
CLASS_CONFLICT = "class-conflict"


@dataclass
class CompileWarning:
    code: str
    message: str
    file_path: Optional[str] = None
    line: int = 0
    column: int = 0

    def format(self) -> str:
        location = self.file_path or "<source>"
        if self.line:
            location = f"{location}:{self.line}:{self.column}"
        return f"{location}: {self.message}"


class Diagnostics:
    """Collects the warnings of one module transform and logs each once."""

    def __init__(self, file_path: Optional[str] = None) -> None:
        self.file_path = file_path
        self.warnings: List[CompileWarning] = []
        self._seen: set = set()

    def warn(self, code: str, message: str, line: int = 0, column: int = 0) -> None:
        key = (code, line, column)
        if key in self._seen:
            return
        self._seen.add(key)

        warning = CompileWarning(
            code=code,
            message=message,
            file_path=self.file_path,
            line=line,
            column=column,
        )
        self.warnings.append(warning)
        logger.warning(warning.format())

    def children_conflict(self, tag: str, line: int = 0, column: int = 0) -> None:
        self.warn(
            CHILDREN_CONFLICT,
            f"Component '{tag}' has both 'children' prop and children content. "
            "Children content takes priority and the 'children' prop will be ignored.",
            line,
            column,
        )

    def class_conflict(self, tag: str, line: int = 0, column: int = 0) -> None:
        self.warn(
            CLASS_CONFLICT,
            f"Element '<{tag}>' has both 'class' and 'classMap' attributes. "
            "Both will be applied, which may cause conflicts.",
            line,
            column,
        )
