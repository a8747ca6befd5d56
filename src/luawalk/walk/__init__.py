"""
Walkers: the Core Walker, the category dispatcher and the Identifier
Resolution Layer.
"""

from .walker import Walker, walk_expr, walk_stat, walk_block
from .dispatch import guess_category, dispatch, walk
from .resolution import IdentifierWalker, walk_id_expr, walk_id_stat, walk_id_block, walk_id
