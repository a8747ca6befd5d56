"""
Test Command Line Interface
"""

import pytest

from luawalk.__main__ import main

SOURCE = """
local x = 1
do
  local x = x + 1
  print(x, y)
end
"""


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "script.lua"
    path.write_text(SOURCE, encoding="utf-8")
    return path


class TestCommands:
    """dump / free / rename / bindings"""

    def test_free(self, script, capsys):
        assert main(["free", str(script)]) == 0
        assert capsys.readouterr().out.split() == ["print", "y"]

    def test_dump(self, script, capsys):
        assert main(["dump", str(script)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("(block")
        assert '(id "x")' in out

    def test_dump_with_locations(self, script, capsys):
        assert main(["dump", "--locations", str(script)]) == 0
        assert ":loc" in capsys.readouterr().out

    def test_rename(self, script, capsys):
        assert main(["rename", str(script)]) == 0
        out = capsys.readouterr().out
        assert '(id "x_1")' in out
        assert '(id "x_2")' in out
        assert '(id "print")' in out

    def test_bindings(self, script, capsys):
        assert main(["bindings", str(script)]) == 0
        out = capsys.readouterr().out
        assert "`Local at " in out
        assert "free: print (1 occurrence(s))" in out

    def test_verbose(self, script, capsys):
        assert main(["free", "-v", str(script)]) == 0


class TestFailures:
    """Exit status 1 with a message on stderr"""

    def test_missing_file(self, tmp_path, capsys):
        assert main(["dump", str(tmp_path / "nope.lua")]) == 1
        assert "file not found" in capsys.readouterr().err

    def test_directory(self, tmp_path, capsys):
        assert main(["dump", str(tmp_path)]) == 1
        assert "not a file" in capsys.readouterr().err

    def test_syntax_error(self, tmp_path, capsys):
        path = tmp_path / "bad.lua"
        path.write_text("local = 1\n", encoding="utf-8")
        assert main(["dump", str(path)]) == 1
        err = capsys.readouterr().err
        assert "error[W0100]" in err
        assert "bad.lua:1:7" in err

    def test_unknown_command(self, script):
        with pytest.raises(SystemExit):
            main(["explode", str(script)])
