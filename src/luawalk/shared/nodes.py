"""
Lua AST (Abstract Syntax Tree) Definitions
Clean, minimal AST nodes for the walkers

Three traversal categories share one closed vocabulary of node kinds:
- Expressions: identifiers, literals, functions, calls, tables, operators
- Statements: bindings, assignments, loops, conditionals, calls
- Blocks: ordered statement sequences

Call and Invoke belong to both the expression and the statement category;
which one applies is decided by the slot the node sits in, never by shape.

Nodes compare by identity (eq=False) so they can key dictionaries such as the
binder table used by alpha-renaming. Structural comparison goes through
luawalk.shared.serialization.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, List, Optional, Union

from typing_extensions import Final

from .source_location import SourceLocation


class NodeKind(Enum):
    """AST node kinds (closed vocabulary)"""
    # Expressions
    IDENTIFIER = "Id"
    LITERAL = "Literal"
    VARARG = "Dots"
    FUNCTION = "Function"
    TABLE = "Table"
    BINARY_OP = "Op"
    UNARY_OP = "UnOp"
    INDEX = "Index"
    PAREN = "Paren"
    # Expressions and statements
    CALL = "Call"
    INVOKE = "Invoke"
    # Statements
    LOCAL = "Local"
    LOCAL_REC = "Localrec"
    SET = "Set"
    FORNUM = "Fornum"
    FORIN = "Forin"
    REPEAT = "Repeat"
    WHILE = "While"
    IF = "If"
    RETURN = "Return"
    BREAK = "Break"
    DO = "Do"
    # Blocks
    BLOCK = "Block"


class Category(Enum):
    """Traversal category of a node"""
    EXPRESSION = "expr"
    STATEMENT = "stat"
    BLOCK = "block"


# Call and Invoke appear in both sets on purpose: their category depends on position.
EXPRESSION_KINDS: Final[FrozenSet[NodeKind]] = frozenset({
    NodeKind.IDENTIFIER, NodeKind.LITERAL, NodeKind.VARARG, NodeKind.FUNCTION,
    NodeKind.CALL, NodeKind.INVOKE, NodeKind.TABLE, NodeKind.BINARY_OP,
    NodeKind.UNARY_OP, NodeKind.INDEX, NodeKind.PAREN,
})

STATEMENT_KINDS: Final[FrozenSet[NodeKind]] = frozenset({
    NodeKind.LOCAL, NodeKind.LOCAL_REC, NodeKind.SET, NodeKind.CALL, NodeKind.INVOKE,
    NodeKind.FORNUM, NodeKind.FORIN, NodeKind.REPEAT, NodeKind.WHILE, NodeKind.IF,
    NodeKind.RETURN, NodeKind.BREAK, NodeKind.DO,
})

BLOCK_KINDS: Final[FrozenSet[NodeKind]] = frozenset({NodeKind.BLOCK})

BINDER_KINDS: Final[FrozenSet[NodeKind]] = frozenset({
    NodeKind.LOCAL, NodeKind.LOCAL_REC, NodeKind.FORNUM, NodeKind.FORIN, NodeKind.FUNCTION,
})

KINDS_BY_CATEGORY: Final = {
    Category.EXPRESSION: EXPRESSION_KINDS,
    Category.STATEMENT: STATEMENT_KINDS,
    Category.BLOCK: BLOCK_KINDS,
}


class ASTNode:
    """
    Base class for all AST nodes.

    Every node carries its kind and an optional source location. The location
    is metadata only; no walker decision ever depends on it.
    """
    __slots__ = ('kind', 'location')

    def __init__(self, kind: NodeKind, location: Optional[SourceLocation] = None):
        self.kind = kind
        self.location = location


# =============================================================================
# EXPRESSIONS
# =============================================================================

@dataclass(eq=False)
class Identifier(ASTNode):
    """Identifier leaf: a variable occurrence or a binding position"""
    name: str

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.IDENTIFIER, location)
        self.name = name


LiteralValue = Union[None, bool, int, float, str]


@dataclass(eq=False)
class Literal(ASTNode):
    """nil, true, false, number or string constant"""
    value: LiteralValue

    def __init__(self, value: LiteralValue, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.LITERAL, location)
        self.value = value


@dataclass(eq=False)
class Vararg(ASTNode):
    """The `...` expression"""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.VARARG, location)


@dataclass(eq=False)
class Function(ASTNode):
    """
    Function definition: function(params) body end

    Binder: each parameter is bound before the body is walked.
    """
    params: List[Identifier]
    body: Block
    is_vararg: bool

    def __init__(self, params: List[Identifier], body: Block, is_vararg: bool = False,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.FUNCTION, location)
        self.params = params
        self.body = body
        self.is_vararg = is_vararg


@dataclass(eq=False)
class Call(ASTNode):
    """Function call: func(args). Expression or statement depending on position."""
    func: ASTNode
    args: List[ASTNode]

    def __init__(self, func: ASTNode, args: Optional[List[ASTNode]] = None,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.CALL, location)
        self.func = func
        self.args = args if args is not None else []


@dataclass(eq=False)
class Invoke(ASTNode):
    """Method invocation: obj:method(args). Expression or statement depending on position."""
    obj: ASTNode
    method: str
    args: List[ASTNode]

    def __init__(self, obj: ASTNode, method: str, args: Optional[List[ASTNode]] = None,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.INVOKE, location)
        self.obj = obj
        self.method = method
        self.args = args if args is not None else []


@dataclass(eq=False)
class Pair:
    """
    Keyed table entry `[key] = value` or `name = value`.

    Not a node: it is a slot container inside Table, never visited itself and
    never part of an ancestor chain.
    """
    key: ASTNode
    value: ASTNode


@dataclass(eq=False)
class Table(ASTNode):
    """Table constructor: { entries }. Positional entries are expressions, keyed ones are Pairs."""
    entries: List[Union[ASTNode, Pair]]

    def __init__(self, entries: Optional[List[Union[ASTNode, Pair]]] = None,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.TABLE, location)
        self.entries = entries if entries is not None else []


@dataclass(eq=False)
class BinaryOp(ASTNode):
    """Binary operation: left op right"""
    op: str
    left: ASTNode
    right: ASTNode

    def __init__(self, op: str, left: ASTNode, right: ASTNode,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.BINARY_OP, location)
        self.op = op
        self.left = left
        self.right = right


@dataclass(eq=False)
class UnaryOp(ASTNode):
    """Unary operation: op operand (not, -, #)"""
    op: str
    operand: ASTNode

    def __init__(self, op: str, operand: ASTNode, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.UNARY_OP, location)
        self.op = op
        self.operand = operand


@dataclass(eq=False)
class Index(ASTNode):
    """Indexing: obj[key]; obj.name is Index(obj, Literal("name"))"""
    obj: ASTNode
    key: ASTNode

    def __init__(self, obj: ASTNode, key: ASTNode, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.INDEX, location)
        self.obj = obj
        self.key = key


@dataclass(eq=False)
class Paren(ASTNode):
    """Parenthesised expression (truncates multiple results to one)"""
    expr: ASTNode

    def __init__(self, expr: ASTNode, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.PAREN, location)
        self.expr = expr


# =============================================================================
# STATEMENTS
# =============================================================================

@dataclass(eq=False)
class Local(ASTNode):
    """
    local targets = values

    Binder: targets come into scope only after the values are walked, so
    `local x = x` reads the outer x on the right.
    """
    targets: List[Identifier]
    values: List[ASTNode]

    def __init__(self, targets: List[Identifier], values: Optional[List[ASTNode]] = None,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.LOCAL, location)
        self.targets = targets
        self.values = values if values is not None else []


@dataclass(eq=False)
class LocalRec(ASTNode):
    """
    local function f ... end

    Binder: targets come into scope before the values, so the initializer can
    refer to itself.
    """
    targets: List[Identifier]
    values: List[ASTNode]

    def __init__(self, targets: List[Identifier], values: List[ASTNode],
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.LOCAL_REC, location)
        self.targets = targets
        self.values = values


@dataclass(eq=False)
class Assign(ASTNode):
    """Assignment: targets = values (targets are identifiers or Index nodes)"""
    targets: List[ASTNode]
    values: List[ASTNode]

    def __init__(self, targets: List[ASTNode], values: List[ASTNode],
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.SET, location)
        self.targets = targets
        self.values = values


@dataclass(eq=False)
class Fornum(ASTNode):
    """for var = start, stop[, step] do body end"""
    var: Identifier
    start: ASTNode
    stop: ASTNode
    step: Optional[ASTNode]
    body: Block

    def __init__(self, var: Identifier, start: ASTNode, stop: ASTNode, body: Block,
                 step: Optional[ASTNode] = None, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.FORNUM, location)
        self.var = var
        self.start = start
        self.stop = stop
        self.step = step
        self.body = body


@dataclass(eq=False)
class Forin(ASTNode):
    """for vars in iterators do body end"""
    vars: List[Identifier]
    iterators: List[ASTNode]
    body: Block

    def __init__(self, vars: List[Identifier], iterators: List[ASTNode], body: Block,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.FORIN, location)
        self.vars = vars
        self.iterators = iterators
        self.body = body


@dataclass(eq=False)
class Repeat(ASTNode):
    """
    repeat body until condition

    The condition is evaluated inside the scope of the body, unlike every
    other loop condition.
    """
    body: Block
    condition: ASTNode

    def __init__(self, body: Block, condition: ASTNode, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.REPEAT, location)
        self.body = body
        self.condition = condition


@dataclass(eq=False)
class While(ASTNode):
    """while condition do body end"""
    condition: ASTNode
    body: Block

    def __init__(self, condition: ASTNode, body: Block, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.WHILE, location)
        self.condition = condition
        self.body = body


@dataclass(eq=False)
class If(ASTNode):
    """if c1 then b1 elseif c2 then b2 ... else orelse end"""
    conditions: List[ASTNode]
    bodies: List[Block]
    orelse: Optional[Block]

    def __init__(self, conditions: List[ASTNode], bodies: List[Block],
                 orelse: Optional[Block] = None, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.IF, location)
        self.conditions = conditions
        self.bodies = bodies
        self.orelse = orelse


@dataclass(eq=False)
class Return(ASTNode):
    """return values"""
    values: List[ASTNode]

    def __init__(self, values: Optional[List[ASTNode]] = None, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.RETURN, location)
        self.values = values if values is not None else []


@dataclass(eq=False)
class Break(ASTNode):
    """break"""

    def __init__(self, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.BREAK, location)


@dataclass(eq=False)
class Do(ASTNode):
    """do body end"""
    body: Block

    def __init__(self, body: Block, location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.DO, location)
        self.body = body


# =============================================================================
# BLOCKS
# =============================================================================

@dataclass(eq=False)
class Block(ASTNode):
    """Ordered statement sequence; also the root of a parsed chunk"""
    statements: List[ASTNode]

    def __init__(self, statements: Optional[List[ASTNode]] = None,
                 location: Optional[SourceLocation] = None):
        super().__init__(NodeKind.BLOCK, location)
        self.statements = statements if statements is not None else []


# =============================================================================
# Helpers
# =============================================================================

def is_node(value: Any) -> bool:
    return isinstance(value, ASTNode)


def is_binder(node: Any) -> bool:
    """True if node introduces bound identifiers"""
    return isinstance(node, ASTNode) and node.kind in BINDER_KINDS


def bound_identifiers(binder: ASTNode) -> List[Any]:
    """
    Identifiers introduced by a binder, in source order.

    The slots are returned as stored; the walker is the one that checks they
    really hold Identifier nodes.
    """
    kind = binder.kind
    if kind in (NodeKind.LOCAL, NodeKind.LOCAL_REC):
        return list(binder.targets)
    if kind is NodeKind.FORNUM:
        return [binder.var]
    if kind is NodeKind.FORIN:
        return list(binder.vars)
    if kind is NodeKind.FUNCTION:
        return list(binder.params)
    raise ValueError(f"{kind.value} is not a binder")
