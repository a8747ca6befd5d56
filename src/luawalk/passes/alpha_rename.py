"""
Alpha-Renaming

Gives every binder's identifiers fresh, tree-unique names and rewrites the
bound occurrences to match. Free identifiers are left alone, so the free
variable set of the tree is unchanged.

Renaming happens in two phases. plan_alpha_rename() walks the tree with the
Identifier Resolution Layer and records edits without touching any node;
RenamePlan.apply() then mutates the identifiers. alpha_rename() does both.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

from ..shared.ast_visitor import Visitor
from ..shared.nodes import ASTNode, Identifier, NodeKind
from ..utils.config import FRESH_NAME_FORMAT
from ..walk.dispatch import walk
from ..walk.resolution import walk_id

logger = logging.getLogger("luawalk.passes.alpha_rename")


class NameGenerator:
    """
    Produces names of the form FRESH_NAME_FORMAT that collide with nothing
    reserved and nothing it produced before.
    """

    def __init__(self, reserved: Iterable[str] = (), template: str = FRESH_NAME_FORMAT):
        self.reserved: Set[str] = set(reserved)
        self.template = template
        self._counters: Dict[str, int] = {}

    def fresh(self, base: str) -> str:
        index = self._counters.get(base, 0)
        while True:
            index += 1
            candidate = self.template.format(name=base, index=index)
            if candidate not in self.reserved:
                break
        self._counters[base] = index
        self.reserved.add(candidate)
        return candidate


class _NameCollector(Visitor):
    def __init__(self) -> None:
        self.names: Set[str] = set()

    def down_expr(self, node, ancestors):
        if node.kind is NodeKind.IDENTIFIER:
            self.names.add(node.name)

    def binder(self, identifier, binder, ancestors):
        self.names.add(identifier.name)


def collect_names(node: ASTNode) -> Set[str]:
    """Every identifier name occurring in node, bound, binding or free"""
    collector = _NameCollector()
    walk(collector, node)
    return collector.names


@dataclass
class RenameEdit:
    identifier: Identifier
    new_name: str


@dataclass
class RenamePlan:
    """
    Pending renames.

    binder_table maps each binder to {old name: fresh name} for the
    identifiers it introduces; edits lists every identifier to rewrite.
    """
    binder_table: Dict[Any, Dict[str, str]] = field(default_factory=dict)
    edits: List[RenameEdit] = field(default_factory=list)
    applied: bool = False

    def apply(self) -> int:
        """Rewrite the planned identifiers in place; returns the number of edits"""
        if self.applied:
            return 0
        for edit in self.edits:
            edit.identifier.name = edit.new_name
        self.applied = True
        logger.debug(f"applied {len(self.edits)} rename(s)")
        return len(self.edits)


class _RenamePlanner(Visitor):
    def __init__(self, plan: RenamePlan, names: NameGenerator):
        self.plan = plan
        self.names = names

    def binder(self, identifier, binder, ancestors):
        new_name = self.names.fresh(identifier.name)
        self.plan.binder_table.setdefault(binder, {})[identifier.name] = new_name
        self.plan.edits.append(RenameEdit(identifier, new_name))

    def bound(self, identifier, binder, ancestors):
        # Outer bindings have no entry and keep their names
        mapping = self.plan.binder_table.get(binder)
        if mapping is not None and identifier.name in mapping:
            self.plan.edits.append(RenameEdit(identifier, mapping[identifier.name]))


def plan_alpha_rename(node: ASTNode, outer: Optional[Mapping[str, Any]] = None,
                      names: Optional[NameGenerator] = None) -> RenamePlan:
    """Compute the renames for node without modifying it"""
    if names is None:
        names = NameGenerator(collect_names(node) | set(outer or ()))
    plan = RenamePlan()
    walk_id(_RenamePlanner(plan, names), node, outer=outer)
    logger.debug(f"planned {len(plan.edits)} rename(s) for {len(plan.binder_table)} binder(s)")
    return plan


def alpha_rename(node: ASTNode, outer: Optional[Mapping[str, Any]] = None,
                 names: Optional[NameGenerator] = None) -> RenamePlan:
    """Rename every bound identifier under node in place; returns the applied plan"""
    plan = plan_alpha_rename(node, outer=outer, names=names)
    plan.apply()
    return plan
