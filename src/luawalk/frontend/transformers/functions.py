"""
Function Definition Parser - Extracted from LuaTransformer
Handles parameter lists and the `function a.b:c() end` statement sugar
"""

from typing import Any, Callable, List, Optional, Tuple

from typing_extensions import TypeAlias
from lark.lexer import Token

from ...shared.errors import ParseError
from ...shared.nodes import Assign, Function, Identifier, Index, Literal, LocalRec
from ...shared.source_location import SourceLocation

# Type aliases
TokenLocator: TypeAlias = Callable[[Token], Optional[SourceLocation]]


class VarargParam:
    """Marker for `...` in a parameter list"""

    def __init__(self, location: Optional[SourceLocation] = None) -> None:
        self.location = location


class FunctionDefinitionParser:
    """Builds Function nodes and the statements that desugar named functions"""

    def __init__(self, token_location: TokenLocator, source_file: str) -> None:
        self.token_location = token_location
        self.source_file = source_file

    def parameters(self, params: Tuple[Any, ...]) -> Tuple[List[Identifier], bool]:
        """Split a parsed parlist into identifiers and the vararg flag; `...` must come last"""
        names: List[Identifier] = []
        for i, param in enumerate(params):
            if isinstance(param, VarargParam):
                if i != len(params) - 1:
                    raise ParseError("'...' must be the last parameter", self.source_file, param.location)
                return names, True
            names.append(param)
        return names, False

    def function_statement(self, dotted: List[Token], method: Optional[Token], function: Function,
                           location: Optional[SourceLocation]) -> Assign:
        """
        function a.b.c:m(params) body end
        becomes
        a.b.c.m = function(self, params) body end
        """
        target: Any = Identifier(str(dotted[0]), location=self.token_location(dotted[0]))
        keys = list(dotted[1:]) + ([method] if method is not None else [])
        for key in keys:
            target = Index(target, Literal(str(key), location=self.token_location(key)),
                           location=self.token_location(key))
        if method is not None:
            function.params.insert(0, Identifier("self", location=self.token_location(method)))
        return Assign([target], [function], location=location)

    def local_function(self, name: Token, function: Function,
                       location: Optional[SourceLocation]) -> LocalRec:
        """local function f(...) end binds f before its body"""
        return LocalRec([Identifier(str(name), location=self.token_location(name))], [function],
                        location=location)
