"""
Scope management: a stack of binding snapshots.

current maps name → binder (the node that introduced the name, or True when
the caller does not track binders). push() saves a snapshot of current,
pop() restores it, add() marks names bound in the current layer.

Used directly by hand-written Core Walker visitors (FreeVariableCollector)
and internally by the Identifier Resolution Layer.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, Iterable, List, Optional, Union

from .errors import ScopeImbalanceError
from .nodes import Identifier


NameLike = Union[str, Identifier]


def _name_of(item: NameLike) -> str:
    if isinstance(item, Identifier):
        return item.name
    if isinstance(item, str):
        return item
    raise TypeError(f"expected an identifier or a name, got {type(item).__name__}")


class Scope:
    """
    Scope stack with snapshot semantics.

    Invariant: pop() restores exactly the mapping that was current at the
    matching push(). Balancing pushes and pops per block, loop and function is
    the caller's job; only popping an empty stack is detected.

    Usage:
        scope = Scope()
        with scope.scoped([param], binder=function_node):
            ...  # param visible here
        # param gone again
    """

    def __init__(self) -> None:
        self.current: Dict[str, Any] = {}
        self._stack: List[Dict[str, Any]] = []

    # =========================================================================
    # Snapshot API
    # =========================================================================

    def push(self, names: Iterable[NameLike] = (), binder: Any = True) -> None:
        """Save current bindings, then bind names in the new layer"""
        self._stack.append(dict(self.current))
        self.add(names, binder)

    def pop(self) -> None:
        """Restore the bindings saved by the matching push()"""
        if not self._stack:
            raise ScopeImbalanceError("scope pop without matching push")
        self.current = self._stack.pop()

    def add(self, names: Iterable[NameLike], binder: Any = True) -> None:
        """Mark each name as bound (to binder) in the current layer"""
        for item in names:
            self.current[_name_of(item)] = binder

    @contextmanager
    def scoped(self, names: Iterable[NameLike] = (), binder: Any = True) -> Generator[Scope, None, None]:
        """Context manager: push on enter, pop on exit (also on error)"""
        self.push(names, binder)
        try:
            yield self
        finally:
            self.pop()

    # =========================================================================
    # Queries
    # =========================================================================

    def lookup(self, name: str) -> Optional[Any]:
        """Binder currently associated with name, or None. Boundness is `name in scope`"""
        return self.current.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.current

    @property
    def depth(self) -> int:
        """Number of saved snapshots"""
        return len(self._stack)

    def bindings(self) -> Dict[str, Any]:
        """Copy of the current name → binder mapping"""
        return dict(self.current)

    def __repr__(self) -> str:
        return f"Scope(depth={self.depth}, names={sorted(self.current)})"
