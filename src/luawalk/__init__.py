"""
luawalk: generic AST walkers and identifier resolution for Lua syntax trees.
"""

from .shared import *  # noqa: F401,F403
from .walk import (
    Walker, walk_expr, walk_stat, walk_block, guess_category, walk,
    IdentifierWalker, walk_id_expr, walk_id_stat, walk_id_block, walk_id,
)
from .passes.free_variables import FreeVariableCollector, free_variables
from .passes.bindings import Bindings, find_bindings
from .passes.alpha_rename import NameGenerator, RenamePlan, plan_alpha_rename, alpha_rename
from .frontend.parser import Parser, parse

__version__ = "0.1.0"
