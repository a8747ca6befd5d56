"""
Literal Parser - Extracted from LuaTransformer
Handles decoding of number and string tokens
"""

import re
from typing import Optional, Union

from ...shared.errors import ParseError
from ...shared.nodes import Literal
from ...shared.source_location import SourceLocation

_SIMPLE_ESCAPES = {
    "a": "\a", "b": "\b", "f": "\f", "n": "\n", "r": "\r", "t": "\t", "v": "\v",
    "\\": "\\", '"': '"', "'": "'", "\n": "\n",
}
_ESCAPE_RE = re.compile(r"\\([0-9]{1,3}|.|\n)")
_LONG_OPEN_RE = re.compile(r"\[(=*)\[")


class LiteralParser:
    """Turns NUMBER and STRING token text into Literal nodes"""

    def __init__(self, source_file: str) -> None:
        self.source_file = source_file

    def number(self, text: str, location: Optional[SourceLocation] = None) -> Literal:
        return Literal(value=self.parse_number(text), location=location)

    def string(self, text: str, location: Optional[SourceLocation] = None) -> Literal:
        return Literal(value=self.parse_string(text, location), location=location)

    @staticmethod
    def parse_number(text: str) -> Union[int, float]:
        if text[:2] in ("0x", "0X"):
            return int(text, 16)
        if "." in text or "e" in text or "E" in text:
            return float(text)
        return int(text)

    def parse_string(self, text: str, location: Optional[SourceLocation] = None) -> str:
        """Strip the delimiters of a short or long string and decode escapes"""
        match = _LONG_OPEN_RE.match(text)
        if match:
            width = len(match.group(0))
            body = text[width:-width]
            # A newline right after the opening bracket is not part of the string
            if body.startswith("\r\n"):
                return body[2:]
            if body.startswith("\n"):
                return body[1:]
            return body
        return _ESCAPE_RE.sub(lambda m: self._unescape(m.group(1), location), text[1:-1])

    def _unescape(self, escape: str, location: Optional[SourceLocation]) -> str:
        if escape.isdigit():
            code = int(escape)
            if code > 255:
                raise ParseError(f"decimal escape too large: \\{escape}", self.source_file, location)
            return chr(code)
        if escape in _SIMPLE_ESCAPES:
            return _SIMPLE_ESCAPES[escape]
        raise ParseError(f"invalid escape sequence: \\{escape}", self.source_file, location)
