"""
Shared components: the AST vocabulary, visitor protocol, scopes and errors.
"""

from .source_location import SourceLocation
from .errors import (
    WalkError, MalformedTreeError, ScopeImbalanceError, ParseError, format_diagnostic, describe,
)
from .nodes import (
    ASTNode, NodeKind, Category, Pair,
    Identifier, Literal, Vararg, Function, Call, Invoke, Table, BinaryOp, UnaryOp, Index, Paren,
    Local, LocalRec, Assign, Fornum, Forin, Repeat, While, If, Return, Break, Do, Block,
    EXPRESSION_KINDS, STATEMENT_KINDS, BLOCK_KINDS, BINDER_KINDS,
    is_node, is_binder, bound_identifiers,
)
from .ast_visitor import Visitor, CallbackVisitor, Replace, WalkSignal, CONTINUE, CUT
from .scope import Scope
from .serialization import to_sexpr, structurally_equal, ASTSerializer
