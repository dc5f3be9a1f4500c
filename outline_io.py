import itertools
import logging
import re
from typing import Dict, Iterator, List, Optional, Tuple

from node_models import MindNode


logger = logging.getLogger(__name__)

DEFAULT_ROOT_TEXT = "Central Topic"
ROOT_ID = "root"

_HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
_BULLET_PATTERN = re.compile(r"^[-*]\s+(.*)$")
_TRAILING_DASH = re.compile(r"\s*-\s*$")
# Line starts that mark heading/list syntax; such lines never count as bare text.
_MARKER_CHARS = ("#", "-", "*")

ExpandPath = Tuple[str, ...]


def _heading_text(raw: str) -> str:
    return _TRAILING_DASH.sub("", raw.strip())


def _indent_level(line: str) -> int:
    """Nesting steps of a line: one per tab or per two leading spaces."""
    leading = line[: len(line) - len(line.lstrip())]
    tabs = leading.count("\t")
    spaces = len(leading) - tabs
    return tabs * 2 + spaces // 2


def _find_root_text(lines: List[str]) -> Optional[str]:
    for line in lines:
        heading_match = _HEADING_PATTERN.match(line.strip())
        if heading_match:
            text = _heading_text(heading_match.group(2))
            if text:
                return text
    return None


def _classify(line: str, base_level: int) -> Optional[Tuple[str, str, int]]:
    """Return (kind, text, level) for a content line, or None to skip it."""
    stripped = line.strip()
    if not stripped:
        return None

    heading_match = _HEADING_PATTERN.match(stripped)
    if heading_match:
        text = _heading_text(heading_match.group(2))
        if not text:
            return None
        return "heading", text, len(heading_match.group(1))

    bullet_match = _BULLET_PATTERN.match(stripped)
    if bullet_match:
        text = bullet_match.group(1).strip()
        if not text:
            return None
        return "list", text, base_level + _indent_level(line) + 1

    if stripped.startswith(_MARKER_CHARS):
        return None

    indent = _indent_level(line)
    if indent > 0:
        return "text", stripped, base_level + indent
    return None


def parse_outline(text: str) -> MindNode:
    """Parse an outline (headings, bullets, indentation) into a mind map tree.

    The first heading becomes the root label; without one the root keeps
    ``DEFAULT_ROOT_TEXT`` and every item hangs off it. Never raises.
    """
    lines = (text or "").splitlines()
    root_text = _find_root_text(lines)
    root = MindNode(
        id=ROOT_ID,
        text=root_text or DEFAULT_ROOT_TEXT,
        depth=0,
        expanded=True,
    )

    ids = itertools.count()
    stack: List[Tuple[MindNode, int]] = [(root, 0)]
    base_level = 0
    root_heading_pending = root_text is not None
    created = 0

    for line in lines:
        classified = _classify(line, base_level)
        if classified is None:
            continue
        kind, label, level = classified

        if kind == "heading":
            base_level = level
            if root_heading_pending:
                root_heading_pending = False
                continue

        # Pop to the nearest shallower entry; the root entry is never popped.
        while len(stack) > 1 and stack[-1][1] >= level:
            stack.pop()

        node = MindNode(id=f"node-{next(ids)}", text=label, depth=level)
        stack[-1][0].children.append(node)
        stack.append((node, level))
        created += 1

    logger.debug("Parsed outline root=%r with %d nodes", root.text, created)
    return root


def iter_nodes(root: MindNode, *, visible_only: bool = False) -> Iterator[MindNode]:
    """Pre-order walk; ``visible_only`` skips descendants of collapsed nodes."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        if visible_only and not node.expanded:
            continue
        stack.extend(reversed(node.children))


def all_nodes(root: MindNode) -> List[MindNode]:
    return list(iter_nodes(root))


def visible_nodes(root: MindNode) -> List[MindNode]:
    return list(iter_nodes(root, visible_only=True))


def max_depth(root: MindNode) -> int:
    """Tree steps from ``root`` to its deepest descendant."""
    deepest = 0
    stack = [(root, 0)]
    while stack:
        node, steps = stack.pop()
        deepest = max(deepest, steps)
        stack.extend((child, steps + 1) for child in node.children)
    return deepest


def expand_all(root: MindNode) -> None:
    for node in iter_nodes(root):
        node.expanded = True


def expand_to_level(root: MindNode, level: int) -> None:
    """Expand ``level`` tree steps below ``root`` and collapse everything deeper.

    A ``level`` of zero or less expands the whole tree.
    """
    if level <= 0:
        expand_all(root)
        return

    stack = [(root, 0)]
    while stack:
        node, steps = stack.pop()
        node.expanded = steps < level
        stack.extend((child, steps + 1) for child in node.children)


def apply_expand_state(root: MindNode, state: Dict[str, bool]) -> None:
    """Set expand flags by node id. Ids not in the tree are ignored."""
    for node in iter_nodes(root):
        if node.id in state:
            node.expanded = bool(state[node.id])


def _iter_paths(root: MindNode) -> Iterator[Tuple[ExpandPath, MindNode]]:
    stack: List[Tuple[ExpandPath, MindNode]] = [((root.text,), root)]
    while stack:
        path, node = stack.pop()
        yield path, node
        for child in reversed(node.children):
            stack.append((path + (child.text,), child))


def capture_expand_state(root: MindNode) -> Dict[ExpandPath, bool]:
    """Expand flags keyed by label path, for carrying across a re-parse.

    Ids are rebuilt on every parse, so the path of labels from the root is
    the only key that survives an edit. Duplicate sibling labels share a key
    and the first one wins.
    """
    state: Dict[ExpandPath, bool] = {}
    for path, node in _iter_paths(root):
        state.setdefault(path, node.expanded)
    return state


def restore_expand_state(root: MindNode, state: Dict[ExpandPath, bool]) -> None:
    for path, node in _iter_paths(root):
        if path in state:
            node.expanded = state[path]
