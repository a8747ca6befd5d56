"""
Test Error Reporting

Exception taxonomy and rustc-style diagnostics.
"""

import pytest

from luawalk.frontend.parser import parse
from luawalk.shared.errors import (
    MalformedTreeError, ParseError, ScopeImbalanceError, WalkError, describe, format_diagnostic,
)
from luawalk.shared.nodes import Block, Call, Identifier, Literal, Return
from luawalk.shared.source_location import SourceLocation
from luawalk.utils.config import ERROR_CONTEXT_LIMIT


class TestErrorClasses:
    """Codes, locations and messages"""

    def test_hierarchy_and_codes(self):
        assert issubclass(MalformedTreeError, WalkError)
        assert issubclass(ScopeImbalanceError, WalkError)
        assert issubclass(ParseError, WalkError)
        assert {MalformedTreeError.error_code, ScopeImbalanceError.error_code, ParseError.error_code} == {
            "W0001", "W0002", "W0100",
        }

    def test_location_from_node(self):
        node = Identifier("x", location=SourceLocation("a.lua", 3, 5))
        error = MalformedTreeError("bad", node)
        assert str(error) == "a.lua:3:5: bad"

    def test_location_from_nearest_ancestor(self):
        outer = Block(location=SourceLocation("a.lua", 1, 1))
        inner = Return(location=SourceLocation("a.lua", 2, 3))
        error = MalformedTreeError("bad", "junk", (inner, outer))
        assert error.location == inner.location
        assert str(error) == "a.lua:2:3: bad (in `Return < `Block)"

    def test_without_location(self):
        assert str(MalformedTreeError("bad")) == "bad"

    def test_describe(self):
        assert describe(Identifier("x")) == '`Id "x"'
        assert describe(Call(Identifier("f"))) == "`Call"
        assert describe(3) == "int"


class TestFormatDiagnostic:
    """Rendering with and without source"""

    def test_parse_error_with_caret(self):
        source = "local x = 1\nlocal end = 2"
        with pytest.raises(ParseError) as info:
            parse(source, "main.lua")
        text = format_diagnostic(info.value, source, color=False)
        assert text.split("\n") == [
            "error[W0100]: unexpected 'end'",
            " --> main.lua:2:7",
            "  |",
            "2 | local end = 2",
            "  |       ^^^",
        ]

    def test_unknown_location(self):
        text = format_diagnostic(WalkError("lost"), color=False)
        assert text == "error[W0000]: lost\n --> <unknown location>"

    def test_ancestor_note(self):
        block = Block()
        ret = Return()
        error = MalformedTreeError("bad", Literal(1, location=SourceLocation("m.lua", 1, 8)), (ret, block))
        text = format_diagnostic(error, "return 1", color=False)
        assert text.endswith("note: inside `Return < `Block")

    def test_long_chain_is_truncated(self):
        chain = tuple(Block() for _ in range(ERROR_CONTEXT_LIMIT + 2))
        text = format_diagnostic(MalformedTreeError("bad", None, chain), color=False)
        assert text.endswith(" < ...")
        assert text.count("`Block") == ERROR_CONTEXT_LIMIT

    def test_color(self):
        text = format_diagnostic(WalkError("x"), color=True)
        assert "\033[" in text

    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        assert "\033[" not in format_diagnostic(WalkError("x"))

    def test_disabled_by_luawalk_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("LUAWALK_COLOR", "never")
        assert "\033[" not in format_diagnostic(WalkError("x"))
