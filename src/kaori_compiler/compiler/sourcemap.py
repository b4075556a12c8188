"""Source Map v3 generation for spliced output."""

from typing import Any, Dict, List, Optional, Tuple

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"


def utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def encode_vlq(value: int) -> str:
    """Base64 VLQ encoding of a signed integer."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    encoded = ""
    while True:
        digit = vlq & 0x1F
        vlq >>= 5
        if vlq:
            digit |= 0x20
        encoded += BASE64_CHARS[digit]
        if not vlq:
            return encoded


class SourceMapBuilder:
    """Tracks the generated position while output text is appended.

    ``add_verbatim`` maps every line of a chunk copied from the source back
    to its origin; ``add_generated`` maps a whole chunk to one source
    position.
    """

    def __init__(self, source_name: str, source_content: Optional[str] = None) -> None:
        self.source_name = source_name
        self.source_content = source_content
        self.parts: List[str] = []
        # Each generated line holds (generated column, source line, source column)
        self.lines: List[List[Tuple[int, int, int]]] = [[]]
        self._column = 0

    @property
    def code(self) -> str:
        return "".join(self.parts)

    def _advance(self, text: str) -> None:
        self.parts.append(text)
        pieces = text.split("\n")
        for _ in pieces[1:]:
            self.lines.append([])
        if len(pieces) > 1:
            self._column = utf16_length(pieces[-1])
        else:
            self._column += utf16_length(text)

    def _mark(self, line: int, column: int) -> None:
        segments = self.lines[-1]
        if segments and segments[-1][0] == self._column:
            segments[-1] = (self._column, line, column)
        else:
            segments.append((self._column, line, column))

    def add_unmapped(self, text: str) -> None:
        self._advance(text)

    def add_generated(self, text: str, line: int, column: int) -> None:
        if text:
            self._mark(line, column)
        self._advance(text)

    def add_verbatim(self, text: str, line: int, column: int) -> None:
        for index, piece in enumerate(text.split("\n")):
            if index > 0:
                self._advance("\n")
                line += 1
                column = 0
            if piece:
                self._mark(line, column)
                self._advance(piece)

    def mappings(self) -> str:
        encoded_lines = []
        prev_source_line = 0
        prev_source_column = 0
        for segments in self.lines:
            prev_column = 0
            encoded = []
            for gen_column, src_line, src_column in segments:
                encoded.append(
                    encode_vlq(gen_column - prev_column)
                    + encode_vlq(0)
                    + encode_vlq(src_line - prev_source_line)
                    + encode_vlq(src_column - prev_source_column)
                )
                prev_column = gen_column
                prev_source_line = src_line
                prev_source_column = src_column
            encoded_lines.append(",".join(encoded))
        return ";".join(encoded_lines)

    def to_dict(self, file: Optional[str] = None) -> Dict[str, Any]:
        source_map: Dict[str, Any] = {
            "version": 3,
            "sources": [self.source_name],
            "names": [],
            "mappings": self.mappings(),
        }
        if file:
            source_map["file"] = file
        if self.source_content is not None:
            source_map["sourcesContent"] = [self.source_content]
        return source_map
