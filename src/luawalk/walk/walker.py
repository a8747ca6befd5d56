"""
Core Walker

Generic down / children / up traversal over expressions, statements and
blocks. For every node:

1. the category's down-visitor runs; it may cut, or hand back a replacement
   which is installed in the parent slot;
2. unless cut, every child slot is walked left to right, as it stands after
   step 1, with (node,) + ancestors as the child's ancestor chain; whatever a
   child walk returns is stored back into the slot;
3. the category's up-visitor runs, cut or not.

Binders call visitor.binder(identifier, binder, ancestors) at the moment
their names become visible:

    Local              after the right-hand sides
    LocalRec           before the right-hand sides
    Fornum / Forin     after the range or iterator expressions, before the body
    Function           before the body

Identifiers in binding position only reach the binder hook, never the
expression hooks. Call and Invoke sitting in a block's statement list are
statements; anywhere else they are expressions.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..shared.ast_visitor import CONTINUE, CUT, Ancestors, DownResult, Replace, Visitor
from ..shared.errors import MalformedTreeError, describe
from ..shared.nodes import (
    ASTNode, Category, Identifier, NodeKind, Pair,
    EXPRESSION_KINDS, KINDS_BY_CATEGORY, STATEMENT_KINDS,
)

logger = logging.getLogger("luawalk.walk.walker")


# One handler per kind; checked against the vocabulary at import time below.
_EXPRESSION_HANDLERS: Dict[NodeKind, str] = {
    NodeKind.IDENTIFIER: "_walk_leaf",
    NodeKind.LITERAL: "_walk_leaf",
    NodeKind.VARARG: "_walk_leaf",
    NodeKind.FUNCTION: "_walk_function",
    NodeKind.CALL: "_walk_call",
    NodeKind.INVOKE: "_walk_invoke",
    NodeKind.TABLE: "_walk_table",
    NodeKind.BINARY_OP: "_walk_binary_op",
    NodeKind.UNARY_OP: "_walk_unary_op",
    NodeKind.INDEX: "_walk_index",
    NodeKind.PAREN: "_walk_paren",
}

_STATEMENT_HANDLERS: Dict[NodeKind, str] = {
    NodeKind.LOCAL: "_walk_local",
    NodeKind.LOCAL_REC: "_walk_local_rec",
    NodeKind.SET: "_walk_assign",
    NodeKind.CALL: "_walk_call",
    NodeKind.INVOKE: "_walk_invoke",
    NodeKind.FORNUM: "_walk_fornum",
    NodeKind.FORIN: "_walk_forin",
    NodeKind.REPEAT: "_walk_repeat",
    NodeKind.WHILE: "_walk_while",
    NodeKind.IF: "_walk_if",
    NodeKind.RETURN: "_walk_return",
    NodeKind.BREAK: "_walk_leaf",
    NodeKind.DO: "_walk_do",
}


def _check_dispatch_tables() -> None:
    missing = (EXPRESSION_KINDS - set(_EXPRESSION_HANDLERS)) | (STATEMENT_KINDS - set(_STATEMENT_HANDLERS))
    extra = (set(_EXPRESSION_HANDLERS) - EXPRESSION_KINDS) | (set(_STATEMENT_HANDLERS) - STATEMENT_KINDS)
    if missing or extra:
        raise RuntimeError(
            f"walker dispatch out of sync with NodeKind: missing={sorted(k.value for k in missing)} "
            f"extra={sorted(k.value for k in extra)}"
        )


_check_dispatch_tables()


def _slot_of(nodes: List[Any], node: Any, hint: int) -> Optional[int]:
    """Current index of node in nodes by identity, or None if it was removed"""
    if hint < len(nodes) and nodes[hint] is node:
        return hint
    for index, candidate in enumerate(nodes):
        if candidate is node:
            return index
    return None


class Walker:
    """
    Recursive walker bound to one visitor.

    walk_expr / walk_stat / walk_block return the node that ends up in the
    walked slot: the node itself, or the replacement its down-visitor
    returned. Visitors that cut can call these methods themselves to walk
    selected children, passing (node,) + ancestors along.
    """

    def __init__(self, visitor: Visitor):
        self.visitor = visitor
        self._expression_handlers: Dict[NodeKind, Callable[[Any, Ancestors], None]] = {
            kind: getattr(self, name) for kind, name in _EXPRESSION_HANDLERS.items()
        }
        self._statement_handlers: Dict[NodeKind, Callable[[Any, Ancestors], None]] = {
            kind: getattr(self, name) for kind, name in _STATEMENT_HANDLERS.items()
        }

    # =========================================================================
    # Category entry points
    # =========================================================================

    def walk_expr(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        ancestors = tuple(ancestors)
        self._check(node, Category.EXPRESSION, ancestors)
        node, cut = self._down(self.visitor.down_expr(node, ancestors), node, Category.EXPRESSION, ancestors)
        if not cut:
            self._expression_handlers[node.kind](node, (node,) + ancestors)
        self.visitor.up_expr(node, ancestors)
        return node

    def walk_stat(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        ancestors = tuple(ancestors)
        self._check(node, Category.STATEMENT, ancestors)
        node, cut = self._down(self.visitor.down_stat(node, ancestors), node, Category.STATEMENT, ancestors)
        if not cut:
            self._statement_handlers[node.kind](node, (node,) + ancestors)
        self.visitor.up_stat(node, ancestors)
        return node

    def walk_block(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        ancestors = tuple(ancestors)
        self._check(node, Category.BLOCK, ancestors)
        node, cut = self._down(self.visitor.down_block(node, ancestors), node, Category.BLOCK, ancestors)
        if not cut:
            self._walk_list(node.statements, self.walk_stat, (node,) + ancestors)
        self.visitor.up_block(node, ancestors)
        return node

    # =========================================================================
    # Protocol helpers
    # =========================================================================

    def _check(self, node: Any, category: Category, ancestors: Ancestors) -> None:
        if not isinstance(node, ASTNode):
            raise MalformedTreeError(f"expected {category.value} node, got {describe(node)}", node, ancestors)
        if node.kind not in KINDS_BY_CATEGORY[category]:
            raise MalformedTreeError(f"{describe(node)} is not a valid {category.value} node", node, ancestors)

    def _down(self, signal: DownResult, node: ASTNode, category: Category,
              ancestors: Ancestors) -> Tuple[ASTNode, bool]:
        if signal is None or signal is CONTINUE:
            return node, False
        if signal is CUT:
            return node, True
        if isinstance(signal, Replace):
            replacement, cut = signal.node, signal.cut
        elif isinstance(signal, ASTNode):
            replacement, cut = signal, False
        else:
            raise TypeError(
                f"down visitor for {describe(node)} must return None, CONTINUE, CUT, "
                f"a node or Replace, got {signal!r}"
            )
        self._check(replacement, category, ancestors)
        if replacement is not node:
            logger.debug(f"replaced {describe(node)} with {describe(replacement)}")
        return replacement, cut

    def _walk_list(self, nodes: List[Any], walk: Callable[[Any, Ancestors], ASTNode],
                   inner: Ancestors) -> None:
        # Index loop re-read after every child: entries appended by visitors are
        # walked too, and a child removed during its own walk is not written back.
        i = 0
        while i < len(nodes):
            old = nodes[i]
            new = walk(old, inner)
            slot = _slot_of(nodes, old, i)
            if slot is None:
                continue
            if new is not old:
                nodes[slot] = new
            i = slot + 1

    def _bind(self, identifiers: List[Any], binder: ASTNode, inner: Ancestors) -> None:
        for identifier in identifiers:
            if not isinstance(identifier, Identifier):
                raise MalformedTreeError(
                    f"{describe(binder)} binds {describe(identifier)}, expected an identifier",
                    identifier, inner,
                )
            self.visitor.binder(identifier, binder, inner[1:])

    def _require_targets(self, identifiers: List[Any], binder: ASTNode, inner: Ancestors) -> None:
        if not identifiers:
            raise MalformedTreeError(f"{describe(binder)} has no identifiers to bind", binder, inner[1:])

    # =========================================================================
    # Expressions (Call and Invoke are shared with statements)
    # =========================================================================

    def _walk_leaf(self, node: ASTNode, inner: Ancestors) -> None:
        pass

    def _walk_function(self, node, inner: Ancestors) -> None:
        self._bind(node.params, node, inner)
        node.body = self.walk_block(node.body, inner)

    def _walk_call(self, node, inner: Ancestors) -> None:
        node.func = self.walk_expr(node.func, inner)
        self._walk_list(node.args, self.walk_expr, inner)

    def _walk_invoke(self, node, inner: Ancestors) -> None:
        node.obj = self.walk_expr(node.obj, inner)
        self._walk_list(node.args, self.walk_expr, inner)

    def _walk_table(self, node, inner: Ancestors) -> None:
        entries = node.entries
        i = 0
        while i < len(entries):
            entry = entries[i]
            if isinstance(entry, Pair):
                entry.key = self.walk_expr(entry.key, inner)
                entry.value = self.walk_expr(entry.value, inner)
            else:
                entries[i] = self.walk_expr(entry, inner)
            i += 1

    def _walk_binary_op(self, node, inner: Ancestors) -> None:
        node.left = self.walk_expr(node.left, inner)
        node.right = self.walk_expr(node.right, inner)

    def _walk_unary_op(self, node, inner: Ancestors) -> None:
        node.operand = self.walk_expr(node.operand, inner)

    def _walk_index(self, node, inner: Ancestors) -> None:
        node.obj = self.walk_expr(node.obj, inner)
        node.key = self.walk_expr(node.key, inner)

    def _walk_paren(self, node, inner: Ancestors) -> None:
        node.expr = self.walk_expr(node.expr, inner)

    # =========================================================================
    # Statements
    # =========================================================================

    def _walk_local(self, node, inner: Ancestors) -> None:
        self._require_targets(node.targets, node, inner)
        self._walk_list(node.values, self.walk_expr, inner)
        self._bind(node.targets, node, inner)

    def _walk_local_rec(self, node, inner: Ancestors) -> None:
        self._require_targets(node.targets, node, inner)
        self._bind(node.targets, node, inner)
        self._walk_list(node.values, self.walk_expr, inner)

    def _walk_assign(self, node, inner: Ancestors) -> None:
        self._walk_list(node.targets, self.walk_expr, inner)
        self._walk_list(node.values, self.walk_expr, inner)

    def _walk_fornum(self, node, inner: Ancestors) -> None:
        node.start = self.walk_expr(node.start, inner)
        node.stop = self.walk_expr(node.stop, inner)
        if node.step is not None:
            node.step = self.walk_expr(node.step, inner)
        self._bind([node.var], node, inner)
        node.body = self.walk_block(node.body, inner)

    def _walk_forin(self, node, inner: Ancestors) -> None:
        self._require_targets(node.vars, node, inner)
        self._walk_list(node.iterators, self.walk_expr, inner)
        self._bind(node.vars, node, inner)
        node.body = self.walk_block(node.body, inner)

    def _walk_repeat(self, node, inner: Ancestors) -> None:
        node.body = self.walk_block(node.body, inner)
        node.condition = self.walk_expr(node.condition, inner)

    def _walk_while(self, node, inner: Ancestors) -> None:
        node.condition = self.walk_expr(node.condition, inner)
        node.body = self.walk_block(node.body, inner)

    def _walk_if(self, node, inner: Ancestors) -> None:
        if len(node.conditions) != len(node.bodies):
            raise MalformedTreeError(
                f"`If has {len(node.conditions)} conditions but {len(node.bodies)} bodies",
                node, inner[1:],
            )
        for i in range(len(node.conditions)):
            node.conditions[i] = self.walk_expr(node.conditions[i], inner)
            node.bodies[i] = self.walk_block(node.bodies[i], inner)
        if node.orelse is not None:
            node.orelse = self.walk_block(node.orelse, inner)

    def _walk_return(self, node, inner: Ancestors) -> None:
        self._walk_list(node.values, self.walk_expr, inner)

    def _walk_do(self, node, inner: Ancestors) -> None:
        node.body = self.walk_block(node.body, inner)


# =============================================================================
# Module-level entry points
# =============================================================================

def walk_expr(visitor: Visitor, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
    """Walk an expression tree; returns the (possibly replaced) root"""
    logger.debug(f"walk_expr from {describe(node)}")
    return Walker(visitor).walk_expr(node, ancestors)


def walk_stat(visitor: Visitor, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
    """Walk a statement tree; returns the (possibly replaced) root"""
    logger.debug(f"walk_stat from {describe(node)}")
    return Walker(visitor).walk_stat(node, ancestors)


def walk_block(visitor: Visitor, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
    """Walk a block; returns the (possibly replaced) root"""
    logger.debug(f"walk_block from {describe(node)}")
    return Walker(visitor).walk_block(node, ancestors)
