# tests/conftest.py
from __future__ import annotations

import json
import re
import sys
import textwrap
from pathlib import Path

import pytest

# repo root = parent of /tests
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from autoimport.core.js_parser import JSParser  # noqa: E402
from autoimport.core.program import Program  # noqa: E402
from autoimport.utils.ts_utils import TreeSitterHelper  # noqa: E402


def js(source: str) -> str:
    """Dedent an inline JavaScript snippet."""
    return textwrap.dedent(source).lstrip("\n")


def squash(code: str) -> str:
    """Drop all whitespace, for layout-insensitive comparisons."""
    return re.sub(r"\s+", "", code)


def parse_program(source: str) -> Program:
    result = JSParser().parse_source(source)
    assert result.success, result.error_message
    return Program(result)


def find_nodes(root, node_type: str):
    return [node for node in TreeSitterHelper.walk(root) if node.type == node_type]


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration dict to a JSON file and return its path."""
    def _write(data, name="autoimport.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path
    return _write
