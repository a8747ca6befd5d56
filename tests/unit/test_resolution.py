"""
Test Identifier Resolution Layer

Lua scoping as seen through the bound / free hooks:
- locals are visible after their statement, to the end of the block
- `local function` sees itself; `local f = function` does not
- loop variables and parameters are scoped to the loop or function body
- a repeat condition sees the locals of the repeat body
"""

import pytest

from luawalk.shared.ast_visitor import CUT, CallbackVisitor, Replace, Visitor
from luawalk.shared.nodes import (
    Block, Call, Forin, Fornum, Function, Identifier, Literal, Local, LocalRec, NodeKind, Repeat, Return,
)
from luawalk.walk.resolution import IdentifierWalker, walk_id, walk_id_block, walk_id_expr, walk_id_stat
from tests.test_utils import ResolutionRecorder, parse_block


def resolve(source, outer=None):
    recorder = ResolutionRecorder()
    tree = parse_block(source)
    walk_id_block(recorder, tree, outer=outer)
    return tree, recorder


def binder_kinds(recorder):
    return [(name, getattr(binder, "kind", binder)) for name, binder in recorder.bound_to]


class TestLocals:
    """local statements and blocks"""

    def test_local_then_use(self):
        _, recorder = resolve("local x = 1 print(x, y)")
        assert recorder.free_names == ["print", "y"]
        assert binder_kinds(recorder) == [("x", NodeKind.LOCAL)]

    def test_bound_to_the_exact_binder(self):
        tree, recorder = resolve("local x = 1 local x = x + 1 return x")
        first, second = tree.statements[0], tree.statements[1]
        assert [b for _, b in recorder.bound_to] == [first, second]

    def test_local_rhs_sees_outer_binding(self):
        _, recorder = resolve("local x = x")
        assert recorder.free_names == ["x"]

    def test_outer_bindings(self):
        marker = object()
        _, recorder = resolve("local x = x return x", outer={"x": marker})
        assert recorder.free_names == []
        assert recorder.bound_to[0] == ("x", marker)
        assert recorder.bound_to[1][1].kind is NodeKind.LOCAL

    def test_outer_binding_with_none_binder_is_bound(self):
        _, recorder = resolve("return x", outer={"x": None})
        assert recorder.free_names == []
        assert recorder.bound_to == [("x", None)]

    def test_scope_membership_decides_bound(self):
        """A name added with a None binder is still in scope"""
        class NoneBinder(ResolutionRecorder):
            def binder(self, identifier, binder, ancestors):
                walker.scope.add([identifier.name], None)

        recorder = NoneBinder()
        walker = IdentifierWalker(recorder)
        walker.walk_block(parse_block("local y = 1 return y"))
        assert recorder.free_names == []
        assert recorder.bound_to == [("y", None)]

    def test_block_scope_ends(self):
        _, recorder = resolve("do local x = 1 end return x")
        assert recorder.free_names == ["x"]

    def test_if_branches_are_separate_scopes(self):
        _, recorder = resolve("if c then local a = 1 else return a end")
        assert recorder.free_names == ["c", "a"]

    def test_while_body_scope(self):
        _, recorder = resolve("while true do local w = 1 end return w")
        assert recorder.free_names == ["w"]

    def test_assignment_does_not_bind(self):
        _, recorder = resolve("g = 1 return g")
        assert recorder.free_names == ["g", "g"]


class TestFunctions:
    """Parameters and recursive locals"""

    def test_localrec_sees_itself(self):
        tree, recorder = resolve("local function f() return f() end")
        assert recorder.free_names == []
        assert recorder.bound_to == [("f", tree.statements[0])]
        assert tree.statements[0].kind is NodeKind.LOCAL_REC

    def test_local_function_value_does_not_see_itself(self):
        _, recorder = resolve("local f = function() return f end")
        assert recorder.free_names == ["f"]

    def test_parameters_scoped_to_body(self):
        tree, recorder = resolve("local g = function(a) return a, b end return a")
        function = tree.statements[0].values[0]
        assert recorder.bound_to == [("a", function)]
        assert recorder.free_names == ["b", "a"]

    def test_method_self(self):
        _, recorder = resolve("function obj:m() return self end")
        assert recorder.free_names == ["obj"]
        assert binder_kinds(recorder) == [("self", NodeKind.FUNCTION)]


class TestLoops:
    """Numeric and generic for, repeat"""

    def test_fornum_range_does_not_see_variable(self):
        tree, recorder = resolve("for i = 1, i do print(i) end return i")
        loop = tree.statements[0]
        assert recorder.free_names == ["i", "print", "i"]
        assert recorder.bound_to == [("i", loop)]

    def test_forin(self):
        tree, recorder = resolve("for k, v in pairs(t) do print(k, v) end")
        loop = tree.statements[0]
        assert recorder.free_names == ["pairs", "t", "print"]
        assert recorder.bound_to == [("k", loop), ("v", loop)]

    def test_repeat_condition_sees_body_local(self):
        tree, recorder = resolve("repeat local a = 1 until a return a")
        local = tree.statements[0].body.statements[0]
        assert recorder.bound_to == [("a", local)]
        assert recorder.free_names == ["a"]

    def test_repeat_hand_built(self):
        local = Local([Identifier("a")], [Literal(1)])
        recorder = ResolutionRecorder()
        walk_id_stat(recorder, Repeat(Block([local]), Identifier("a")))
        assert recorder.bound_to == [("a", local)]

    def test_nested_repeat(self):
        _, recorder = resolve("repeat repeat local b = a until b local a = 1 until a")
        assert recorder.free_names == ["a"]
        assert [name for name, _ in recorder.bound_to] == ["b", "a"]


class TestUserVisitor:
    """The caller's hooks run alongside the bookkeeping"""

    def test_user_hooks_still_called(self):
        recorder = ResolutionRecorder()
        downs = []
        recorder.down_expr = lambda node, ancestors: downs.append(node.kind)
        walk_id_expr(recorder, Function([Identifier("a")], Block([Return([Identifier("a")])])))
        assert downs == [NodeKind.FUNCTION, NodeKind.IDENTIFIER]
        assert recorder.bound_to[0][0] == "a"

    def test_cut_function_keeps_scope_balanced(self):
        tree = parse_block("local f = function(a) return a end return a, f")

        class CutFunctions(ResolutionRecorder):
            def down_expr(self, node, ancestors):
                if node.kind is NodeKind.FUNCTION:
                    return CUT

        visitor = CutFunctions()
        walker = IdentifierWalker(visitor)
        walker.walk_block(tree)
        assert visitor.free_names == ["a"]
        assert [name for name, _ in visitor.bound_to] == ["f"]
        assert walker.scope.depth == 0

    def test_cut_identifier_is_not_classified(self):
        free_calls = []

        def down(node, ancestors):
            if node.kind is NodeKind.IDENTIFIER and node.name == "skip":
                return CUT

        visitor = CallbackVisitor(down_expr=down, free=lambda node, ancestors: free_calls.append(node.name))
        walk_id(visitor, parse_block("print(skip, keep)"))
        assert free_calls == ["print", "keep"]

    def test_cut_repeat_is_skipped(self):
        class CutRepeat(ResolutionRecorder):
            def down_stat(self, node, ancestors):
                if node.kind is NodeKind.REPEAT:
                    return CUT

        visitor = CutRepeat()
        walker = IdentifierWalker(visitor)
        walker.walk_block(parse_block("repeat local a = 1 until a return z"))
        assert visitor.free_names == ["z"]
        assert walker.scope.depth == 0

    def test_cut_block_keeps_scope_balanced(self):
        class CutInner(ResolutionRecorder):
            def down_block(self, node, ancestors):
                if ancestors:
                    return CUT

        visitor = CutInner()
        walker = IdentifierWalker(visitor)
        walker.walk_block(parse_block("do local x = 1 end local y = 2 return x, y"))
        assert visitor.free_names == ["x"]
        assert walker.scope.depth == 0

    def test_replacement_is_resolved(self):
        def down(node, ancestors):
            if node.kind is NodeKind.IDENTIFIER and node.name == "old":
                return Identifier("x")

        recorder = ResolutionRecorder()
        recorder.down_expr = down
        tree = parse_block("local x = 1 return old")
        walk_id_block(recorder, tree)
        assert recorder.free_names == []
        assert recorder.bound_to == [("x", tree.statements[0])]

    def test_replaced_function_opens_scope(self):
        replacement = Function([Identifier("p")], Block([Return([Identifier("p")])]))

        def down(node, ancestors):
            if node.kind is NodeKind.LITERAL:
                return Replace(replacement)

        recorder = ResolutionRecorder()
        recorder.down_expr = down
        walker = IdentifierWalker(recorder)
        walker.walk_block(parse_block("return 1, p"))
        assert recorder.bound_to == [("p", replacement)]
        assert recorder.free_names == ["p"]
        assert walker.scope.depth == 0

    def test_manual_walk_under_cut(self):
        tree = parse_block("local x = 1 f(x, y)")
        recorder = ResolutionRecorder()
        walker = IdentifierWalker(recorder)

        def down_stat(node, ancestors):
            if node.kind is NodeKind.CALL:
                inner = (node,) + ancestors
                for i, arg in enumerate(node.args):
                    node.args[i] = walker.walker.walk_expr(arg, inner)
                return CUT

        recorder.down_stat = down_stat
        walker.walk_block(tree)
        assert recorder.free_names == ["y"]
        assert recorder.bound_to == [("x", tree.statements[0])]


class TestIdentifierWalker:
    """Fresh scope per entry point"""

    def test_reuse_does_not_leak(self):
        recorder = ResolutionRecorder()
        walker = IdentifierWalker(recorder)
        walker.walk_block(parse_block("local a = 1"))
        walker.walk_block(parse_block("return a"))
        assert recorder.free_names == ["a"]

    def test_outer_applies_to_every_walk(self):
        recorder = ResolutionRecorder()
        walker = IdentifierWalker(recorder, outer={"print": "builtin"})
        walker.walk(parse_block("print(1)"))
        walker.walk_expr(Identifier("print"))
        assert recorder.bound_to == [("print", "builtin"), ("print", "builtin")]

    def test_entry_points(self):
        for entry, node in ((walk_id_expr, Identifier("q")),
                            (walk_id_stat, Call(Identifier("q"), [])),
                            (walk_id_block, Block([Return([Identifier("q")])])),
                            (walk_id, Identifier("q"))):
            recorder = ResolutionRecorder()
            entry(recorder, node)
            assert recorder.free_names == ["q"]

    def test_loop_nodes_built_by_hand(self):
        loop = Fornum(Identifier("i"), Literal(1), Identifier("n"), Block([Return([Identifier("i")])]))
        recorder = ResolutionRecorder()
        walk_id_stat(recorder, loop)
        assert recorder.free_names == ["n"]
        assert recorder.bound_to == [("i", loop)]

        forin = Forin([Identifier("v")], [Identifier("v")], Block([Return([Identifier("v")])]))
        recorder = ResolutionRecorder()
        walk_id_stat(recorder, forin)
        assert recorder.free_names == ["v"]
        assert recorder.bound_to == [("v", forin)]

    def test_localrec_hand_built(self):
        rec = LocalRec([Identifier("f")], [Function([], Block([Return([Call(Identifier("f"), [])])]))])
        recorder = ResolutionRecorder()
        walk_id_stat(recorder, rec)
        assert recorder.bound_to == [("f", rec)]

    def test_plain_visitor_accepted(self):
        walk_id_block(Visitor(), parse_block("local x = 1 return x, y"))
