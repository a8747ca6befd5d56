"""
Test S-Expression Serialization
"""

from luawalk.shared.nodes import (
    Block, Break, Fornum, Function, Identifier, If, Literal, Local, Pair, Return, Vararg,
)
from luawalk.shared.serialization import structurally_equal, to_sexpr
from tests.test_utils import parse_block


class TestPretty:
    """Default pretty form"""

    def test_atoms(self):
        assert to_sexpr(Literal(None)) == "(literal nil)"
        assert to_sexpr(Literal(True)) == "(literal true)"
        assert to_sexpr(Literal(False)) == "(literal false)"
        assert to_sexpr(Literal(2.5)) == "(literal 2.5)"
        assert to_sexpr(Vararg()) == "(dots)"
        assert to_sexpr(None) == "(nil)"

    def test_strings_are_escaped(self):
        assert to_sexpr(Literal('say "hi"\n')) == '(literal "say \\"hi\\"\\n")'

    def test_vararg_function(self):
        function = Function([Identifier("a")], Block(), is_vararg=True)
        assert to_sexpr(function) == '(function (params (id "a") ...) (block))'

    def test_optional_parts_are_keyworded(self):
        loop = Fornum(Identifier("i"), Literal(1), Literal(10), Block(), step=Literal(2))
        assert to_sexpr(loop) == '(fornum (id "i") (literal 1) (literal 10) :step (literal 2) (block))'
        branch = If([Identifier("c")], [Block()], Block([Break()]))
        assert to_sexpr(branch) == '(if (id "c") (block) :else (block (break)))'

    def test_long_forms_break_lines(self):
        block = Block([Local([Identifier(f"variable_{i}")], [Literal(i)]) for i in range(6)])
        text = to_sexpr(block)
        lines = text.split("\n")
        assert lines[0] == "(block"
        assert lines[1].startswith('  (local (names (id "variable_0"))')
        assert lines[-1] == ")"

    def test_unknown_values(self):
        assert to_sexpr(object()) == "(object ...)"

    def test_pair(self):
        assert to_sexpr(Pair(Literal("k"), Literal(1))) == '(pair (literal "k") (literal 1))'


class TestLocations:
    """include_location=True"""

    def test_identifier_location(self):
        tree = parse_block("return x")
        text = to_sexpr(tree.statements[0].values[0], include_location=True)
        assert text == '(id "x" :loc ("<test>" 1 8))'

    def test_nodes_without_location(self):
        assert to_sexpr(Identifier("x"), include_location=True) == '(id "x")'


class TestCompactAndEquality:
    """Compact output via sexpdata, structural comparison"""

    def test_compact_single_line(self):
        text = to_sexpr(parse_block("local x = 1\nreturn x"), pretty=False)
        assert "\n" not in text
        assert text.startswith("(block")
        assert '"x"' in text

    def test_structural_equality(self):
        assert structurally_equal(parse_block("local x=1"), parse_block("local  x  =  1 -- same"))
        assert not structurally_equal(parse_block("local x = 1"), parse_block("local y = 1"))
        assert not structurally_equal(Literal(1), Literal(1.0))

    def test_equal_trees_are_distinct_objects(self):
        left, right = Return([Identifier("x")]), Return([Identifier("x")])
        assert left != right
        assert structurally_equal(left, right)
