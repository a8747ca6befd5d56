"""
Test utilities for the luawalk test suite.

Event recorders for checking visit order, and small builders for trees that
are easier to write as Lua source.
"""

import sys
from pathlib import Path
from typing import Any, List, Tuple

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from luawalk.frontend.parser import parse
from luawalk.shared.ast_visitor import Visitor
from luawalk.shared.errors import describe
from luawalk.shared.nodes import ASTNode, NodeKind


def label(node: Any) -> str:
    """Compact label for events: `Id "x"`, `Call`, ..."""
    return describe(node).lstrip("`")


class EventRecorder(Visitor):
    """Records every hook call as (hook, label) in order"""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str]] = []
        self.ancestors: List[Tuple[str, Tuple[str, ...]]] = []

    def _record(self, hook: str, node: ASTNode, ancestors) -> None:
        self.events.append((hook, label(node)))
        self.ancestors.append((label(node), tuple(label(a) for a in ancestors)))

    def down_expr(self, node, ancestors):
        self._record("down_expr", node, ancestors)

    def up_expr(self, node, ancestors):
        self._record("up_expr", node, ancestors)

    def down_stat(self, node, ancestors):
        self._record("down_stat", node, ancestors)

    def up_stat(self, node, ancestors):
        self._record("up_stat", node, ancestors)

    def down_block(self, node, ancestors):
        self._record("down_block", node, ancestors)

    def up_block(self, node, ancestors):
        self._record("up_block", node, ancestors)

    def binder(self, identifier, binder, ancestors):
        self.events.append(("binder", label(identifier)))

    def bound(self, identifier, binder, ancestors):
        self.events.append(("bound", label(identifier)))

    def free(self, identifier, ancestors):
        self.events.append(("free", label(identifier)))

    def hooks(self, hook: str) -> List[str]:
        return [name for h, name in self.events if h == hook]


class ResolutionRecorder(Visitor):
    """Records (name, binder) for bound occurrences and names of free ones"""

    def __init__(self) -> None:
        self.bound_to: List[Tuple[str, Any]] = []
        self.free_names: List[str] = []

    def bound(self, identifier, binder, ancestors):
        self.bound_to.append((identifier.name, binder))

    def free(self, identifier, ancestors):
        self.free_names.append(identifier.name)


def parse_block(source: str):
    return parse(source, "<test>")


def parse_expr(source: str):
    """Expression parsed from `return <source>`"""
    return parse(f"return {source}", "<test>").statements[0].values[0]


def binder_names(node: ASTNode) -> List[str]:
    """Names introduced by every binder under node, in walk order"""
    from luawalk.walk.dispatch import walk
    from luawalk.shared.ast_visitor import CallbackVisitor
    names: List[str] = []
    walk(CallbackVisitor(binder=lambda identifier, binder, ancestors: names.append(identifier.name)), node)
    return names


def identifier_names(node: ASTNode) -> List[str]:
    """Names of identifiers reached as expressions, in walk order"""
    from luawalk.walk.dispatch import walk
    from luawalk.shared.ast_visitor import CallbackVisitor
    names: List[str] = []

    def down(n, ancestors):
        if n.kind is NodeKind.IDENTIFIER:
            names.append(n.name)
    walk(CallbackVisitor(down_expr=down), node)
    return names
