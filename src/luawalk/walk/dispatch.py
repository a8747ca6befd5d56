"""
Category Dispatcher

Picks the walker entry point for a root node whose category the caller does
not know. Without a parent slot to look at, Call and Invoke are taken as
expressions.
"""

from typing import Any

from ..shared.ast_visitor import Ancestors, Visitor
from ..shared.errors import MalformedTreeError, describe
from ..shared.nodes import ASTNode, Category, EXPRESSION_KINDS, NodeKind, STATEMENT_KINDS
from .walker import Walker


def guess_category(node: Any) -> Category:
    """Category of an arbitrary root node"""
    if not isinstance(node, ASTNode):
        raise MalformedTreeError(f"cannot walk {describe(node)}: not an AST node", node)
    if node.kind is NodeKind.BLOCK:
        return Category.BLOCK
    if node.kind in EXPRESSION_KINDS:
        return Category.EXPRESSION
    if node.kind in STATEMENT_KINDS:
        return Category.STATEMENT
    raise MalformedTreeError(f"cannot guess the category of {describe(node)}", node)


def dispatch(walker: Walker, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
    """Run the walker method matching node's guessed category"""
    category = guess_category(node)
    if category is Category.BLOCK:
        return walker.walk_block(node, ancestors)
    if category is Category.EXPRESSION:
        return walker.walk_expr(node, ancestors)
    return walker.walk_stat(node, ancestors)


def walk(visitor: Visitor, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
    """Walk any node, choosing expression, statement or block from its kind"""
    return dispatch(Walker(visitor), node, ancestors)
