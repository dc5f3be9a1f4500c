"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Flat layout: make the top-level modules importable without installing.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from node_models import Dimension, MindNode  # noqa: E402


@pytest.fixture
def mixed_outline() -> str:
    """Headings, dash and asterisk bullets, and bare indented text in one document."""
    return "\n".join(
        [
            "# Video Topic",
            "## Part One",
            "- Point 1",
            "  - Detail 1.1",
            "  - Detail 1.2",
            "- Point 2",
            "## Part Two",
            "* Point 3",
            "  * Detail 3.1",
            "* Point 4",
            "  Detail 4.1",
            "    Detail 4.1.1",
        ]
    )


@pytest.fixture
def make_node():
    """Build a MindNode with short keyword defaults."""

    def _make(node_id: str, children=None, *, depth: int = 1, expanded: bool = True, text=None) -> MindNode:
        return MindNode(
            id=node_id,
            text=text or node_id,
            depth=depth,
            children=list(children or []),
            expanded=expanded,
        )

    return _make


@pytest.fixture
def uniform_dimensions():
    """Dimension map giving every id the same box, with the root overridable."""

    def _dims(root: MindNode, width: float = 80, height: float = 40, root_size=(100, 50)):
        dims = {}
        stack = [root]
        while stack:
            node = stack.pop()
            dims[node.id] = Dimension(width=width, height=height)
            stack.extend(node.children)
        dims[root.id] = Dimension(width=root_size[0], height=root_size[1])
        return dims

    return _dims


@pytest.fixture(autouse=True)
def isolate_env(monkeypatch):
    """Keep developer MINDMAP_* settings out of the tests."""
    for key in (
        "MINDMAP_DIRECTION",
        "MINDMAP_HORIZONTAL_SPACING",
        "MINDMAP_VERTICAL_SPACING",
        "MINDMAP_CENTER_OFFSET",
        "MINDMAP_LEVEL_SPACING",
        "MINDMAP_LOG_LEVEL",
        "MINDMAP_LOG_FILE",
        "MINDMAP_PREVIEW_PATH",
    ):
        monkeypatch.delenv(key, raising=False)
