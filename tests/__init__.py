"""
sourced test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (fake compose runner, mocked HTTP)
    tests/integration/  CLI tests through click's CliRunner

Run all tests:
    pytest

Run unit tests only:
    pytest tests/unit/
"""
