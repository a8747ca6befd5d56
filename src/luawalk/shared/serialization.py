"""
AST Serialization to S-Expressions
==================================

Converts Lua ASTs to a canonical S-expression format for tests, debugging
and the command line `dump` output. Two trees with the same serialization
are structurally equal; nodes themselves only compare by identity.

Uses structured sexpr (nested lists + sexpdata.Symbol), then pretty-prints
for readable output. Keywords and operators are Symbols and print bare;
identifier names and string literals are Python strings and print quoted.
"""

from typing import Any, List

import sexpdata

from ..utils.config import SEXPR_INDENT, SEXPR_MAX_LINE
from .nodes import ASTNode, Pair

_ESCAPES = (("\\", "\\\\"), ('"', '\\"'), ("\n", "\\n"), ("\r", "\\r"), ("\t", "\\t"))


def _quote(text: str) -> str:
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return f'"{text}"'


def _pretty_dumps(sexpr: Any, indent: int = 0, indent_str: str = SEXPR_INDENT,
                  max_line: int = SEXPR_MAX_LINE) -> str:
    """
    Pretty-print structured sexpr. Keeps short forms on one line; breaks only when needed.
    """
    if isinstance(sexpr, bool):
        return "true" if sexpr else "false"
    if isinstance(sexpr, (int, float)):
        return repr(sexpr)
    # Check Symbol before str (sexpdata.Symbol subclasses str)
    if isinstance(sexpr, sexpdata.Symbol):
        return str(sexpr)
    if isinstance(sexpr, str):
        return _quote(sexpr)
    if isinstance(sexpr, list):
        if not sexpr:
            return "()"
        parts = [_pretty_dumps(e, indent + 1, indent_str, max_line) for e in sexpr]
        one_line = "(" + " ".join(parts) + ")"
        if len(one_line) + len(indent_str) * indent <= max_line and "\n" not in one_line:
            return one_line
        prefix = indent_str * indent
        next_prefix = indent_str * (indent + 1)
        # Head stays on the line of its paren
        rest = "\n".join(next_prefix + p for p in parts[1:])
        inner = parts[0] + ("\n" + rest if rest else "")
        return f"({inner}\n{prefix})"
    return str(sexpr)


def to_sexpr(node: Any, pretty: bool = True, include_location: bool = False) -> str:
    """
    Serialize an AST node to an S-expression string.

    Args:
        node: AST node to serialize
        pretty: Use pretty-printed format (default True). Set False for compact single-line.
        include_location: Append :loc (file line column) to nodes that carry a location

    Returns:
        S-expression string
    """
    sexpr = ASTSerializer(include_location=include_location).serialize_to_sexpr(node)
    if pretty:
        return _pretty_dumps(sexpr)
    return sexpdata.dumps(sexpr)


def structurally_equal(left: Any, right: Any) -> bool:
    """True if both trees serialize identically (locations ignored)"""
    return to_sexpr(left, pretty=False) == to_sexpr(right, pretty=False)


class ASTSerializer:
    """
    AST to structured S-expression serializer.

    Dispatches on the node class name to _serialize_<ClassName>. Unknown
    values serialize as (<TypeName> ...) so a dump never fails halfway.
    """

    def __init__(self, include_location: bool = False):
        self.include_location = include_location

    def _sym(self, s: str) -> Any:
        return sexpdata.Symbol(s)

    def serialize_to_sexpr(self, node: Any) -> Any:
        if node is None:
            return [self._sym("nil")]
        method = getattr(self, f"_serialize_{type(node).__name__}", None)
        if method is None:
            return self._serialize_generic(node)
        core = method(node)
        if self.include_location and isinstance(node, ASTNode) and node.location is not None:
            loc = node.location
            core.extend([self._sym(":loc"), [loc.file, loc.line, loc.column]])
        return core

    def _serialize_generic(self, node: Any) -> list:
        return [self._sym(type(node).__name__), self._sym("...")]

    def _all(self, nodes: List[Any]) -> list:
        return [self.serialize_to_sexpr(n) for n in nodes]

    def _atom(self, value: Any) -> Any:
        if value is None:
            return self._sym("nil")
        if value is True:
            return self._sym("true")
        if value is False:
            return self._sym("false")
        return value

    # Expressions

    def _serialize_Identifier(self, node) -> list:
        return [self._sym("id"), node.name]

    def _serialize_Literal(self, node) -> list:
        return [self._sym("literal"), self._atom(node.value)]

    def _serialize_Vararg(self, node) -> list:
        return [self._sym("dots")]

    def _serialize_Function(self, node) -> list:
        params = [self._sym("params")] + self._all(node.params)
        if node.is_vararg:
            params.append(self._sym("..."))
        return [self._sym("function"), params, self.serialize_to_sexpr(node.body)]

    def _serialize_Call(self, node) -> list:
        return [self._sym("call"), self.serialize_to_sexpr(node.func)] + self._all(node.args)

    def _serialize_Invoke(self, node) -> list:
        return ([self._sym("invoke"), self.serialize_to_sexpr(node.obj), node.method]
                + self._all(node.args))

    def _serialize_Pair(self, entry) -> list:
        return [self._sym("pair"), self.serialize_to_sexpr(entry.key),
                self.serialize_to_sexpr(entry.value)]

    def _serialize_Table(self, node) -> list:
        return [self._sym("table")] + [
            self._serialize_Pair(e) if isinstance(e, Pair) else self.serialize_to_sexpr(e)
            for e in node.entries
        ]

    def _serialize_BinaryOp(self, node) -> list:
        return [self._sym("op"), self._sym(node.op),
                self.serialize_to_sexpr(node.left), self.serialize_to_sexpr(node.right)]

    def _serialize_UnaryOp(self, node) -> list:
        return [self._sym("unop"), self._sym(node.op), self.serialize_to_sexpr(node.operand)]

    def _serialize_Index(self, node) -> list:
        return [self._sym("index"), self.serialize_to_sexpr(node.obj), self.serialize_to_sexpr(node.key)]

    def _serialize_Paren(self, node) -> list:
        return [self._sym("paren"), self.serialize_to_sexpr(node.expr)]

    # Statements

    def _serialize_Local(self, node) -> list:
        return [self._sym("local"), [self._sym("names")] + self._all(node.targets),
                [self._sym("values")] + self._all(node.values)]

    def _serialize_LocalRec(self, node) -> list:
        return [self._sym("localrec"), [self._sym("names")] + self._all(node.targets),
                [self._sym("values")] + self._all(node.values)]

    def _serialize_Assign(self, node) -> list:
        return [self._sym("set"), [self._sym("targets")] + self._all(node.targets),
                [self._sym("values")] + self._all(node.values)]

    def _serialize_Fornum(self, node) -> list:
        out = [self._sym("fornum"), self.serialize_to_sexpr(node.var),
               self.serialize_to_sexpr(node.start), self.serialize_to_sexpr(node.stop)]
        if node.step is not None:
            out.extend([self._sym(":step"), self.serialize_to_sexpr(node.step)])
        out.append(self.serialize_to_sexpr(node.body))
        return out

    def _serialize_Forin(self, node) -> list:
        return [self._sym("forin"), [self._sym("names")] + self._all(node.vars),
                [self._sym("iterators")] + self._all(node.iterators),
                self.serialize_to_sexpr(node.body)]

    def _serialize_Repeat(self, node) -> list:
        return [self._sym("repeat"), self.serialize_to_sexpr(node.body),
                self.serialize_to_sexpr(node.condition)]

    def _serialize_While(self, node) -> list:
        return [self._sym("while"), self.serialize_to_sexpr(node.condition),
                self.serialize_to_sexpr(node.body)]

    def _serialize_If(self, node) -> list:
        out = [self._sym("if")]
        for condition, body in zip(node.conditions, node.bodies):
            out.extend([self.serialize_to_sexpr(condition), self.serialize_to_sexpr(body)])
        if node.orelse is not None:
            out.extend([self._sym(":else"), self.serialize_to_sexpr(node.orelse)])
        return out

    def _serialize_Return(self, node) -> list:
        return [self._sym("return")] + self._all(node.values)

    def _serialize_Break(self, node) -> list:
        return [self._sym("break")]

    def _serialize_Do(self, node) -> list:
        return [self._sym("do"), self.serialize_to_sexpr(node.body)]

    # Blocks

    def _serialize_Block(self, node) -> list:
        return [self._sym("block")] + self._all(node.statements)
