"""
Pytest configuration and shared fixtures for all luawalk tests.

The Lark parser is the only expensive object; it is built once per session.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from luawalk.frontend.parser import Parser


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_parser():
    """Session-scoped parser; stateless between parse() calls, safe to share"""
    return Parser()


@pytest.fixture
def lua(session_parser):
    """Parse a Lua chunk into its Block"""
    def _parse(source: str, source_file: str = "<test>"):
        return session_parser.parse(source, source_file)
    return _parse


def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "parser: marks tests that go through the Lark reader")
