"""
Error Reporting

Exception taxonomy for the walkers and the reference reader, plus a
rustc-style diagnostic renderer used by the command line.

- MalformedTreeError: a node outside the closed vocabulary, or a binder
  without its identifier slot. Always fatal.
- ScopeImbalanceError: Scope.pop() with no saved snapshot.
- ParseError: syntax error in the reference reader.

Errors raised by visitors are never wrapped; they reach the caller as-is.
"""

import os
from typing import Any, List, Optional, Sequence

from ..utils.config import ERROR_CONTEXT_LIMIT, ERROR_POINTER_CHAR
from .source_location import SourceLocation


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("LUAWALK_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return True

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


def describe(value: Any) -> str:
    """Short human name for a node or a stray slot value"""
    kind = getattr(value, "kind", None)
    if kind is not None and hasattr(kind, "value"):
        name = getattr(value, "name", None)
        return f"`{kind.value}" + (f' "{name}"' if isinstance(name, str) else "")
    return type(value).__name__


def describe_chain(ancestors: Sequence[Any]) -> str:
    """Render an ancestor chain, parent first: `Call < `Local < `Block"""
    return " < ".join(describe(a) for a in ancestors)


# ============================================================================
# Exception Classes
# ============================================================================

class WalkError(Exception):
    """Base exception for all luawalk errors"""
    error_code = "W0000"

    def __init__(self, message: str, node: Any = None, ancestors: Sequence[Any] = (),
                 location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.node = node
        self.ancestors = tuple(ancestors)
        if location is None and node is not None:
            location = getattr(node, "location", None)
        if location is None:
            for ancestor in self.ancestors:
                location = getattr(ancestor, "location", None)
                if location is not None:
                    break
        self.location = location

    def __str__(self):
        text = self.message
        if self.ancestors:
            text = f"{text} (in {describe_chain(self.ancestors)})"
        if self.location:
            return f"{self.location}: {text}"
        return text


class MalformedTreeError(WalkError):
    """Node kind outside the closed vocabulary, or a binder missing its identifiers"""
    error_code = "W0001"


class ScopeImbalanceError(WalkError):
    """Scope.pop() called more often than Scope.push()"""
    error_code = "W0002"


class ParseError(WalkError):
    """Syntax error in Lua source handed to the reference reader"""
    error_code = "W0100"

    def __init__(self, message: str, source_file: str, location: Optional[SourceLocation] = None):
        super().__init__(message, location=location)
        self.source_file = source_file


# ---------------------------------------------------------------------------
# Formatting engine
# ---------------------------------------------------------------------------

def format_diagnostic(error: WalkError, source: Optional[str] = None,
                      color: Optional[bool] = None) -> str:
    """
    Render an error in rustc style.

    Example output (plain, no color)::

        error[W0100]: unexpected token 'end'
         --> main.lua:2:7
          |
        2 | local end = 1
          |       ^^^
    """
    use_color = _use_color() if color is None else color
    out: List[str] = []

    out.append(
        _style(f"error[{error.error_code}]", _BOLD, _RED, color=use_color)
        + _style(f": {error.message}", _BOLD, color=use_color)
    )

    loc = error.location
    if loc is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=use_color) + "<unknown location>")
        _append_context(out, error, 1, use_color)
        return "\n".join(out)

    src_lines = source.split("\n") if source is not None else []
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=use_color) + str(loc))
    if 0 < loc.line <= len(src_lines):
        code_line = src_lines[loc.line - 1]
        col_start = max(loc.column, 1) - 1
        if loc.end_line == loc.line and loc.end_column > loc.column:
            span_len = loc.end_column - loc.column
        else:
            span_len = _guess_span(code_line, col_start)
        out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=use_color))
        out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=use_color) + code_line)
        carets = " " * col_start + ERROR_POINTER_CHAR * max(1, span_len)
        out.append(_style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=use_color)
                   + _style(carets, _BOLD, _RED, color=use_color))

    _append_context(out, error, gw, use_color)
    return "\n".join(out)


def _guess_span(code_line: str, col_start: int) -> int:
    """Guess token length when end_column is unavailable."""
    if col_start >= len(code_line):
        return 1
    length = 0
    for ch in code_line[col_start:]:
        if ch in (" ", "\t", ";", ",", ")", "]", "}"):
            break
        length += 1
    return max(1, length)


def _append_context(out: List[str], error: WalkError, gw: int, color: bool) -> None:
    if not error.ancestors:
        return
    pad = " " * (gw + 1)
    out.append(_style(pad + "|", _BOLD, _BLUE, color=color))
    out.append(
        _style(f"{pad}= ", _BOLD, _CYAN, color=color)
        + _style("note: ", _BOLD, color=color)
        + f"inside {describe_chain(error.ancestors[:ERROR_CONTEXT_LIMIT])}"
        + (" < ..." if len(error.ancestors) > ERROR_CONTEXT_LIMIT else "")
    )
