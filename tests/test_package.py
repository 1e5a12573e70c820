"""
Tests for package-level metadata.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

from pathlib import Path

import pytest

import stereodelay

SOURCES = sorted(Path(stereodelay.__file__).parent.glob("*.py"))


class TestPackage:
    def test_version(self):
        assert stereodelay.__version__ == "0.1.0"

    @pytest.mark.parametrize("path", SOURCES, ids=lambda p: p.name)
    def test_license_header(self, path):
        head = path.read_text(encoding="utf-8").splitlines()[:12]
        assert "Copyright (c) 2026 stereodelay contributors" in head
        assert "MIT License" in head
