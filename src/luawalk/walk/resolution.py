"""
Identifier Resolution Layer

A Core Walker whose visitor is wrapped with automatic scope bookkeeping, so
every identifier leaf reached as an expression is reported either as bound
(visitor.bound(identifier, binder, ancestors)) or as free
(visitor.free(identifier, ancestors)).

Scope rules applied on the caller's behalf:

- every Block opens a scope, except the body of a Repeat, which shares the
  scope its Repeat opened;
- Function, Fornum and Forin open a scope on the way down and close it on
  the way up;
- each binder visit adds the identifier to the current scope, mapped to its
  binder, before the caller's binder hook runs. The walker's binder timing
  makes `local x = x` read the outer x and `local function f` see itself;
- Repeat is cut and walked by hand: open a scope, walk the body, walk the
  condition, close the scope. The condition thus sees the body's locals.

The caller's down-visitor runs before the bookkeeping. When it cuts,
classification of that identifier and the Repeat walk are skipped, while
scope pushes and pops stay paired. Replacements it returns are honoured.
"""

import logging
from typing import Any, Mapping, Optional

from ..shared.ast_visitor import CUT, Ancestors, DownResult, Replace, Visitor
from ..shared.errors import describe
from ..shared.nodes import ASTNode, NodeKind
from ..shared.scope import Scope
from .dispatch import dispatch
from .walker import Walker

logger = logging.getLogger("luawalk.walk.resolution")


def _target(node: ASTNode, signal: DownResult) -> Any:
    """Node the walk continues with after a down-visitor returned signal"""
    if isinstance(signal, Replace):
        return signal.node
    if isinstance(signal, ASTNode):
        return signal
    return node


def _is_cut(signal: DownResult) -> bool:
    return signal is CUT or (isinstance(signal, Replace) and signal.cut)


def _shares_repeat_scope(ancestors: Ancestors) -> bool:
    return bool(ancestors) and ancestors[0].kind is NodeKind.REPEAT


class _ScopeTracker(Visitor):
    """Wraps the caller's visitor with push/pop/add bookkeeping"""

    def __init__(self, visitor: Visitor):
        self.visitor = visitor
        self.scope = Scope()
        self.walker = Walker(self)

    # Expressions
    def down_expr(self, node, ancestors):
        signal = self.visitor.down_expr(node, ancestors)
        target = _target(node, signal)
        kind = getattr(target, "kind", None)
        if kind is NodeKind.FUNCTION:
            self.scope.push()
        elif kind is NodeKind.IDENTIFIER and not _is_cut(signal):
            if target.name in self.scope:
                self.visitor.bound(target, self.scope.lookup(target.name), ancestors)
            else:
                self.visitor.free(target, ancestors)
        return signal

    def up_expr(self, node, ancestors):
        if node.kind is NodeKind.FUNCTION:
            self.scope.pop()
        self.visitor.up_expr(node, ancestors)

    # Statements
    def down_stat(self, node, ancestors):
        signal = self.visitor.down_stat(node, ancestors)
        target = _target(node, signal)
        kind = getattr(target, "kind", None)
        if kind is NodeKind.FORNUM or kind is NodeKind.FORIN:
            self.scope.push()
        elif kind is NodeKind.REPEAT and not _is_cut(signal):
            inner = (target,) + ancestors
            self.scope.push()
            target.body = self.walker.walk_block(target.body, inner)
            target.condition = self.walker.walk_expr(target.condition, inner)
            self.scope.pop()
            return CUT if target is node else Replace(target, cut=True)
        return signal

    def up_stat(self, node, ancestors):
        if node.kind is NodeKind.FORNUM or node.kind is NodeKind.FORIN:
            self.scope.pop()
        self.visitor.up_stat(node, ancestors)

    # Blocks
    def down_block(self, node, ancestors):
        signal = self.visitor.down_block(node, ancestors)
        if not _shares_repeat_scope(ancestors):
            self.scope.push()
        return signal

    def up_block(self, node, ancestors):
        if not _shares_repeat_scope(ancestors):
            self.scope.pop()
        self.visitor.up_block(node, ancestors)

    # Binders
    def binder(self, identifier, binder, ancestors):
        self.scope.add([identifier], binder)
        self.visitor.binder(identifier, binder, ancestors)


class IdentifierWalker:
    """
    Scope-aware walker.

    Each entry point starts from a fresh Scope holding only the outer
    bindings (name → binder) given at construction, so one instance can walk
    several trees without leaking names between them.

    A visitor that cuts a node and walks some of its children by hand should
    use self.walker so the children still get resolved. For a Repeat it must
    also bracket that manual walk with self.scope.push()/pop(), since the
    repeat body does not open its own scope.
    """

    def __init__(self, visitor: Visitor, outer: Optional[Mapping[str, Any]] = None):
        self.visitor = visitor
        self.outer = dict(outer or {})
        self._tracker = _ScopeTracker(visitor)

    @property
    def scope(self) -> Scope:
        return self._tracker.scope

    @property
    def walker(self) -> Walker:
        return self._tracker.walker

    def _fresh_scope(self) -> None:
        scope = Scope()
        for name, binder in self.outer.items():
            scope.add([name], binder)
        self._tracker.scope = scope

    def walk_expr(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        self._fresh_scope()
        return self.walker.walk_expr(node, ancestors)

    def walk_stat(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        self._fresh_scope()
        return self.walker.walk_stat(node, ancestors)

    def walk_block(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        self._fresh_scope()
        return self.walker.walk_block(node, ancestors)

    def walk(self, node: ASTNode, ancestors: Ancestors = ()) -> ASTNode:
        self._fresh_scope()
        return dispatch(self.walker, node, ancestors)


# =============================================================================
# Module-level entry points
# =============================================================================

def walk_id_expr(visitor: Visitor, node: ASTNode, ancestors: Ancestors = (),
                 outer: Optional[Mapping[str, Any]] = None) -> ASTNode:
    logger.debug(f"walk_id_expr from {describe(node)}")
    return IdentifierWalker(visitor, outer).walk_expr(node, ancestors)


def walk_id_stat(visitor: Visitor, node: ASTNode, ancestors: Ancestors = (),
                 outer: Optional[Mapping[str, Any]] = None) -> ASTNode:
    logger.debug(f"walk_id_stat from {describe(node)}")
    return IdentifierWalker(visitor, outer).walk_stat(node, ancestors)


def walk_id_block(visitor: Visitor, node: ASTNode, ancestors: Ancestors = (),
                  outer: Optional[Mapping[str, Any]] = None) -> ASTNode:
    logger.debug(f"walk_id_block from {describe(node)}")
    return IdentifierWalker(visitor, outer).walk_block(node, ancestors)


def walk_id(visitor: Visitor, node: ASTNode, ancestors: Ancestors = (),
            outer: Optional[Mapping[str, Any]] = None) -> ASTNode:
    """Scope-aware walk of any node, category guessed from its kind"""
    logger.debug(f"walk_id from {describe(node)}")
    return IdentifierWalker(visitor, outer).walk(node, ancestors)
