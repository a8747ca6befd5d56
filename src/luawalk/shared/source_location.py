"""
Source Location

Opaque position metadata attached to nodes by the reference reader. The
walkers carry it around untouched; errors use it to point at the offending
node.
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class SourceLocation:
    """
    Position of a node in its source chunk.

    Lines and columns are 1-based, as reported by lark. end_line/end_column
    are 0 when unknown.
    """
    file: str
    line: int
    column: int
    end_line: int = 0
    end_column: int = 0

    @classmethod
    def from_meta(cls, meta: Any, file: str) -> Optional["SourceLocation"]:
        """Build a location from a lark Meta object, or None for empty matches"""
        if meta is None or getattr(meta, "empty", True):
            return None
        return cls(
            file=file,
            line=meta.line,
            column=meta.column,
            end_line=getattr(meta, "end_line", 0) or 0,
            end_column=getattr(meta, "end_column", 0) or 0,
        )

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
