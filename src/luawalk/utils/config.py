"""
Configuration constants to replace magic numbers throughout luawalk
"""

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
import os
import tempfile
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "luawalk_parser.cache")
PARSER_START = "start"
GRAMMAR_FILE = "grammar.lark"

# Source handling
DEFAULT_SOURCE_NAME = "<string>"
DEFAULT_FILE_ENCODING = "utf-8"

# Fresh names produced by alpha-renaming: base name plus a counter from 1
FRESH_NAME_FORMAT = "{name}_{index}"

# S-expression output
SEXPR_MAX_LINE = 100
SEXPR_INDENT = "  "

# Error reporting constants
ERROR_POINTER_CHAR = "^"
ERROR_CONTEXT_LIMIT = 4  # Ancestors shown in the "inside" note

# Logging
LOGGER_ROOT = "luawalk"
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"
