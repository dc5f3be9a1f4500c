"""Mind map placement.

Positions are computed for visible nodes only (every ancestor expanded).
The root sits at ``(center_offset, 0)``; each sibling group is stacked
vertically around its parent's center, one slot per branch, and aligned on
an anchor line beside the parent. In ``both`` mode the first ``ceil(n/2)``
root children go left and the rest go right.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from measure import estimate_dimensions
from node_models import Bounds, Dimension, EdgePath, LayoutOptions, MindNode, Position
from outline_io import all_nodes, apply_expand_state, parse_outline


logger = logging.getLogger(__name__)

MIN_BRANCH_HEIGHT = 32
ANCHOR_GAP_FACTOR = 0.6

Dimensions = Mapping[str, Dimension]


@dataclass
class Diagram:
    positions: Dict[str, Position] = field(default_factory=dict)
    edges: List[EdgePath] = field(default_factory=list)
    bounds: Optional[Bounds] = None


def _branch_heights(
    root: MindNode, dimensions: Dimensions, vertical_spacing: float
) -> Dict[str, float]:
    """Branch height of ``root`` and every visible descendant.

    Post-order over an explicit stack, so deep outlines do not hit the
    recursion limit.
    """
    heights: Dict[str, float] = {}
    stack: List[Tuple[MindNode, bool]] = [(root, False)]
    while stack:
        node, children_done = stack.pop()
        is_open = node.expanded and bool(node.children)
        if is_open and not children_done:
            stack.append((node, True))
            stack.extend((child, False) for child in node.children)
            continue
        own = max(dimensions[node.id].height, MIN_BRANCH_HEIGHT)
        if is_open:
            own = max(own, _group_height(node.children, heights, vertical_spacing))
        heights[node.id] = own
    return heights


def _group_height(
    nodes: Sequence[MindNode], heights: Mapping[str, float], vertical_spacing: float
) -> float:
    if not nodes:
        return 0
    total = sum(heights[node.id] for node in nodes)
    return total + (len(nodes) - 1) * vertical_spacing


def branch_height(node: MindNode, dimensions: Dimensions, vertical_spacing: float) -> float:
    """Vertical space used by ``node`` and its expanded descendants."""
    return _branch_heights(node, dimensions, vertical_spacing)[node.id]


def stack_height(
    nodes: Sequence[MindNode], dimensions: Dimensions, vertical_spacing: float
) -> float:
    """Total height of a sibling group: branch slots plus the gaps between them."""
    heights: Dict[str, float] = {}
    for node in nodes:
        heights.update(_branch_heights(node, dimensions, vertical_spacing))
    return _group_height(nodes, heights, vertical_spacing)


def _spacing_multiplier(depth: int) -> float:
    return 1.0 if depth >= 2 else 0.8


def _position(
    node: MindNode, dimension: Dimension, x: float, y: float, parent_id: Optional[str]
) -> Position:
    return Position(
        id=node.id,
        text=node.text,
        x=x,
        y=y,
        width=dimension.width,
        height=dimension.height,
        depth=node.depth,
        has_children=bool(node.children),
        expanded=node.expanded,
        parent_id=parent_id,
    )


# (node, x, y, side, parent id) of a node whose center is already known.
_Placement = Tuple[MindNode, float, float, Optional[str], Optional[str]]


def _stack_group(
    parent: MindNode,
    children: Sequence[MindNode],
    px: float,
    py: float,
    side: str,
    dimensions: Dimensions,
    heights: Mapping[str, float],
    options: LayoutOptions,
) -> List[_Placement]:
    if not children:
        return []

    sign = -1 if side == "left" else 1
    gap = options.horizontal_spacing * _spacing_multiplier(parent.depth) * ANCHOR_GAP_FACTOR
    anchor_x = px + sign * (dimensions[parent.id].width / 2 + gap)

    placed: List[_Placement] = []
    y_offset = py - _group_height(children, heights, options.vertical_spacing) / 2
    for child in children:
        slot = heights[child.id]
        # Near edge touches the anchor line.
        x = anchor_x + sign * dimensions[child.id].width / 2
        y = y_offset + slot / 2
        placed.append((child, x, y, side, parent.id))
        y_offset += slot + options.vertical_spacing
    return placed


def split_sides(children: Sequence[MindNode]) -> Tuple[List[MindNode], List[MindNode]]:
    """Left half gets ``ceil(n/2)`` children; source order is kept on both sides."""
    left_count = math.ceil(len(children) / 2)
    return list(children[:left_count]), list(children[left_count:])


def compute_layout(
    root: MindNode, dimensions: Dimensions, options: Optional[LayoutOptions] = None
) -> Dict[str, Position]:
    """Place every visible node of ``root``.

    ``dimensions`` must cover every node of the tree; a missing id is an
    internal error and raises ``KeyError``. Positions are inserted in
    pre-order.
    """
    options = options or LayoutOptions()
    heights = _branch_heights(root, dimensions, options.vertical_spacing)
    positions: Dict[str, Position] = {}

    stack: List[_Placement] = [(root, options.center_offset, 0.0, None, None)]
    while stack:
        node, x, y, side, parent_id = stack.pop()
        positions[node.id] = _position(node, dimensions[node.id], x, y, parent_id)
        if not (node.expanded and node.children):
            continue

        if side is not None:
            groups = [(side, node.children)]
        elif options.direction == "both":
            groups = list(zip(("left", "right"), split_sides(node.children)))
        else:
            groups = [(options.direction, node.children)]

        placed: List[_Placement] = []
        for group_side, group in groups:
            placed.extend(
                _stack_group(node, group, x, y, group_side, dimensions, heights, options)
            )
        stack.extend(reversed(placed))

    logger.debug(
        "Laid out %d visible nodes (direction=%s)", len(positions), options.direction
    )
    return positions


def edge_path(source: Position, target: Position) -> EdgePath:
    """S-curve from the parent's near edge to the child's near edge."""
    is_left = target.x < source.x
    sign = -1 if is_left else 1

    start_x = source.x + sign * source.width / 2
    start_y = source.y
    end_x = target.x - sign * target.width / 2
    end_y = target.y

    offset = abs(end_x - start_x) * 0.5
    return EdgePath(
        source_id=source.id,
        target_id=target.id,
        start=(start_x, start_y),
        control1=(start_x + sign * offset, start_y),
        control2=(end_x - sign * offset, end_y),
        end=(end_x, end_y),
    )


def edge_paths(positions: Mapping[str, Position]) -> List[EdgePath]:
    edges: List[EdgePath] = []
    for position in positions.values():
        if position.parent_id is None:
            continue
        edges.append(edge_path(positions[position.parent_id], position))
    return edges


def layout_bounds(positions: Mapping[str, Position]) -> Bounds:
    """Bounding box of all node boxes. An empty map yields a zero box."""
    if not positions:
        return Bounds(min_x=0, max_x=0, min_y=0, max_y=0)
    boxes = positions.values()
    return Bounds(
        min_x=min(p.x - p.width / 2 for p in boxes),
        max_x=max(p.x + p.width / 2 for p in boxes),
        min_y=min(p.y - p.height / 2 for p in boxes),
        max_y=max(p.y + p.height / 2 for p in boxes),
    )


def build_diagram(root: MindNode, options: Optional[LayoutOptions] = None) -> Diagram:
    """Measure, place and connect the tree in one pass."""
    dimensions = estimate_dimensions(all_nodes(root))
    positions = compute_layout(root, dimensions, options)
    return Diagram(
        positions=positions,
        edges=edge_paths(positions),
        bounds=layout_bounds(positions),
    )


def layout_outline(
    text: str,
    options: Optional[LayoutOptions] = None,
    expanded: Optional[Mapping[str, bool]] = None,
) -> Tuple[MindNode, Diagram]:
    root = parse_outline(text)
    if expanded:
        apply_expand_state(root, dict(expanded))
    return root, build_diagram(root, options)
