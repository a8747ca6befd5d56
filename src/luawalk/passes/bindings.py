"""
Binding Analysis

Links every identifier occurrence to its binder in one scope-aware walk:
which names each binder declares, which occurrences refer to it, and which
occurrences are free.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..shared.ast_visitor import Visitor
from ..shared.nodes import ASTNode, Identifier
from ..walk.resolution import walk_id

logger = logging.getLogger("luawalk.passes.bindings")


@dataclass
class Bindings:
    """
    Result of find_bindings().

    declared:   binder → identifiers it binds, in walk order
    references: binder → bound occurrences resolved to it
    free:       name → free occurrences
    """
    declared: Dict[Any, List[Identifier]] = field(default_factory=dict)
    references: Dict[Any, List[Identifier]] = field(default_factory=dict)
    free: Dict[str, List[Identifier]] = field(default_factory=dict)

    def binder_of(self, occurrence: Identifier) -> Optional[Any]:
        """Binder an occurrence resolved to, or None if it is free or unknown"""
        for binder, occurrences in self.references.items():
            if any(o is occurrence for o in occurrences):
                return binder
        return None

    def unused(self) -> List[Tuple[ASTNode, Identifier]]:
        """(binder, identifier) pairs whose name is never referenced through that binder"""
        result: List[Tuple[ASTNode, Identifier]] = []
        for binder, identifiers in self.declared.items():
            used = {o.name for o in self.references.get(binder, [])}
            result.extend((binder, i) for i in identifiers if i.name not in used)
        return result


class _BindingsCollector(Visitor):
    def __init__(self, bindings: Bindings):
        self.bindings = bindings

    def binder(self, identifier, binder, ancestors):
        self.bindings.declared.setdefault(binder, []).append(identifier)

    def bound(self, identifier, binder, ancestors):
        self.bindings.references.setdefault(binder, []).append(identifier)

    def free(self, identifier, ancestors):
        self.bindings.free.setdefault(identifier.name, []).append(identifier)


def find_bindings(node: ASTNode, outer: Optional[Mapping[str, Any]] = None) -> Bindings:
    """Collect binders, their references and free occurrences under node"""
    bindings = Bindings()
    walk_id(_BindingsCollector(bindings), node, outer=outer)
    logger.debug(
        f"bindings: {len(bindings.declared)} binder(s), "
        f"{sum(len(v) for v in bindings.references.values())} bound and "
        f"{sum(len(v) for v in bindings.free.values())} free occurrence(s)"
    )
    return bindings
