"""
Visitor protocol for the walkers.

A visitor is the walker's configuration: one down/up pair per category, one
binder hook for every binder construct, and the bound/free hooks read by the
Identifier Resolution Layer. Every hook is optional; the defaults do nothing
and let the walk continue.

Down-visitors steer the walk through their return value:

- None or CONTINUE: descend into the children;
- CUT: skip the children (the up-visitor still runs);
- a node: install it in place of the visited one, then descend into it;
- Replace(node, cut=True): install it without descending.

Up, binder, bound and free hooks return nothing meaningful.

Usage:
    class CountCalls(Visitor):
        def __init__(self):
            self.calls = 0

        def down_expr(self, node, ancestors):
            if node.kind is NodeKind.CALL:
                self.calls += 1

    walk_block(CountCalls(), tree)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple, Union

from .nodes import ASTNode, Identifier

Ancestors = Tuple[ASTNode, ...]


class WalkSignal(Enum):
    """Values a down-visitor may return"""
    CONTINUE = "continue"
    CUT = "cut"


CONTINUE = WalkSignal.CONTINUE
CUT = WalkSignal.CUT


@dataclass(frozen=True)
class Replace:
    """Down-visitor result: put node in the visited node's slot, optionally cutting"""
    node: ASTNode
    cut: bool = False


DownResult = Union[None, WalkSignal, ASTNode, Replace]


class Visitor:
    """
    Base visitor with no-op hooks.

    Subclass and override the hooks you need. ancestors is the tuple of
    enclosing nodes, immediate parent first; it is only valid during the call.
    """

    # Expressions
    def down_expr(self, node: ASTNode, ancestors: Ancestors) -> DownResult:
        return None

    def up_expr(self, node: ASTNode, ancestors: Ancestors) -> None:
        pass

    # Statements
    def down_stat(self, node: ASTNode, ancestors: Ancestors) -> DownResult:
        return None

    def up_stat(self, node: ASTNode, ancestors: Ancestors) -> None:
        pass

    # Blocks
    def down_block(self, node: ASTNode, ancestors: Ancestors) -> DownResult:
        return None

    def up_block(self, node: ASTNode, ancestors: Ancestors) -> None:
        pass

    # Binders: identifier is the binding occurrence, binder the node owning it
    def binder(self, identifier: Identifier, binder: ASTNode, ancestors: Ancestors) -> None:
        pass

    # Identifier Resolution Layer only
    def bound(self, identifier: Identifier, binder: Any, ancestors: Ancestors) -> None:
        pass

    def free(self, identifier: Identifier, ancestors: Ancestors) -> None:
        pass


HOOK_NAMES = (
    "down_expr", "up_expr", "down_stat", "up_stat", "down_block", "up_block",
    "binder", "bound", "free",
)


class CallbackVisitor(Visitor):
    """
    Visitor assembled from plain callables, one keyword per hook.

    Usage:
        free = set()
        walk_id_block(CallbackVisitor(free=lambda node, ancestors: free.add(node.name)), tree)
    """

    def __init__(self, **callbacks: Optional[Callable[..., Any]]):
        unknown = sorted(set(callbacks) - set(HOOK_NAMES))
        if unknown:
            raise TypeError(f"unknown visitor hooks: {', '.join(unknown)}")
        self.callbacks: Dict[str, Callable[..., Any]] = {
            name: fn for name, fn in callbacks.items() if fn is not None
        }

    def _call(self, hook: str, *args: Any) -> Any:
        fn = self.callbacks.get(hook)
        if fn is None:
            return None
        return fn(*args)

    def down_expr(self, node, ancestors):
        return self._call("down_expr", node, ancestors)

    def up_expr(self, node, ancestors):
        self._call("up_expr", node, ancestors)

    def down_stat(self, node, ancestors):
        return self._call("down_stat", node, ancestors)

    def up_stat(self, node, ancestors):
        self._call("up_stat", node, ancestors)

    def down_block(self, node, ancestors):
        return self._call("down_block", node, ancestors)

    def up_block(self, node, ancestors):
        self._call("up_block", node, ancestors)

    def binder(self, identifier, binder, ancestors):
        self._call("binder", identifier, binder, ancestors)

    def bound(self, identifier, binder, ancestors):
        self._call("bound", identifier, binder, ancestors)

    def free(self, identifier, ancestors):
        self._call("free", identifier, ancestors)
