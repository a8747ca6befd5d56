"""
Parser

Reference reader producing luawalk ASTs from Lua 5.1 source. The walkers
never depend on it; it exists so trees can be written as source in tests and
on the command line.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken, VisitError

from ..shared.errors import ParseError
from ..shared.nodes import Block
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_FILE_ENCODING, DEFAULT_SOURCE_NAME, GRAMMAR_FILE, PARSER_START
from .transformers.base import LuaTransformer

logger = logging.getLogger("luawalk.frontend.parser")


class Parser:
    """
    Lua source to AST.

    The grammar is LALR; pass cache_file (or True) to let lark cache the
    generated tables between runs.
    """

    def __init__(self, cache_file: Union[str, bool, None] = None):
        grammar_path = Path(__file__).parent / GRAMMAR_FILE
        self.parser = Lark.open(
            str(grammar_path),
            start=PARSER_START,
            parser="lalr",
            lexer="basic",
            cache=cache_file or False,
            propagate_positions=True,
            maybe_placeholders=False,
        )
        self.transformer = LuaTransformer()

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Block:
        """Parse a chunk; returns its Block"""
        self.transformer.current_file = source_file
        try:
            tree = self.parser.parse(source)
        except UnexpectedInput as e:
            raise ParseError(_describe_unexpected(e), source_file, _error_location(e, source_file)) from e
        try:
            block = self.transformer.transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, ParseError):
                raise e.orig_exc from None
            raise
        logger.debug(f"parsed {source_file}: {len(block.statements)} top-level statement(s)")
        return block

    def parse_file(self, path: Union[str, Path], encoding: str = DEFAULT_FILE_ENCODING) -> Block:
        path = Path(path)
        return self.parse(path.read_text(encoding=encoding), str(path))


def _describe_unexpected(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedEOF):
        return "unexpected end of input"
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            return "unexpected end of input"
        return f"unexpected '{e.token}'"
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character '{e.char}'"
    return "syntax error"


def _error_location(e: UnexpectedInput, source_file: str) -> Optional[SourceLocation]:
    line = getattr(e, "line", -1)
    column = getattr(e, "column", -1)
    if not isinstance(line, int) or line < 1:
        return None
    return SourceLocation(file=source_file, line=line, column=max(column, 1))


_default_parser: Optional[Parser] = None


def parse(source: str, source_file: str = DEFAULT_SOURCE_NAME) -> Block:
    """Parse with a shared module-level Parser"""
    global _default_parser
    if _default_parser is None:
        _default_parser = Parser()
    return _default_parser.parse(source, source_file)
