"""
Lua AST Transformers
====================

Lark parse tree to luawalk AST.
"""

from .base import LuaTransformer
from .literals import LiteralParser
from .functions import FunctionDefinitionParser, VarargParam

__all__ = [
    'LuaTransformer',
    'LiteralParser',
    'FunctionDefinitionParser',
    'VarargParam',
]
