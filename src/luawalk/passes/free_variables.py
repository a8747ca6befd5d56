"""
Free Variable Analysis

Two ways to the same answer:

- FreeVariableCollector drives the bare Core Walker and keeps its own Scope,
  pushing and popping around blocks, loops and functions. It shows the
  Repeat escape hatch: cut the Repeat, then walk body and condition by hand
  under one scope level.
- free_variables() lets the Identifier Resolution Layer do the bookkeeping
  and only listens to the free hook.
"""

import logging
from typing import Any, Mapping, Optional, Set

from ..shared.ast_visitor import CUT, CallbackVisitor, Visitor
from ..shared.nodes import ASTNode, NodeKind
from ..shared.scope import Scope
from ..walk.dispatch import dispatch
from ..walk.resolution import walk_id
from ..walk.walker import Walker

logger = logging.getLogger("luawalk.passes.free_variables")

_LOOP_KINDS = (NodeKind.FORNUM, NodeKind.FORIN)


class FreeVariableCollector(Visitor):
    """
    Core Walker visitor collecting the names of free identifiers.

    Usage:
        collector = FreeVariableCollector()
        names = collector.collect(tree)
    """

    def __init__(self) -> None:
        self.scope = Scope()
        self.free: Set[str] = set()
        self.walker = Walker(self)

    def collect(self, node: ASTNode) -> Set[str]:
        dispatch(self.walker, node)
        return self.free

    def down_block(self, node, ancestors):
        # A repeat body lives in the scope opened by its Repeat
        if not (ancestors and ancestors[0].kind is NodeKind.REPEAT):
            self.scope.push()

    def up_block(self, node, ancestors):
        if not (ancestors and ancestors[0].kind is NodeKind.REPEAT):
            self.scope.pop()

    def down_stat(self, node, ancestors):
        if node.kind in _LOOP_KINDS:
            self.scope.push()
        elif node.kind is NodeKind.REPEAT:
            inner = (node,) + ancestors
            with self.scope.scoped():
                node.body = self.walker.walk_block(node.body, inner)
                node.condition = self.walker.walk_expr(node.condition, inner)
            return CUT

    def up_stat(self, node, ancestors):
        if node.kind in _LOOP_KINDS:
            self.scope.pop()

    def down_expr(self, node, ancestors):
        if node.kind is NodeKind.FUNCTION:
            self.scope.push()
        elif node.kind is NodeKind.IDENTIFIER and node.name not in self.scope:
            self.free.add(node.name)

    def up_expr(self, node, ancestors):
        if node.kind is NodeKind.FUNCTION:
            self.scope.pop()

    def binder(self, identifier, binder, ancestors):
        self.scope.add([identifier], binder)


def free_variables(node: ASTNode, outer: Optional[Mapping[str, Any]] = None) -> Set[str]:
    """Names of the identifiers in node that no binder in scope covers"""
    names: Set[str] = set()
    walk_id(CallbackVisitor(free=lambda identifier, ancestors: names.add(identifier.name)),
            node, outer=outer)
    logger.debug(f"found {len(names)} free variable(s)")
    return names
