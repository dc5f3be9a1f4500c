"""Static node-size estimation.

Boxes are sized from a per-depth font table and a two-class character
width heuristic (CJK vs. everything else) instead of real text shaping.
Long labels get extra height so that they keep clear of their vertical
neighbours once a renderer wraps them.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable

from node_models import Dimension, MindNode


logger = logging.getLogger(__name__)

MIN_NODE_WIDTH = 60
WRAP_THRESHOLD = 180
STEEP_THRESHOLD = 350

# CJK ideographs, CJK punctuation and full-width forms.
_CJK_PATTERN = re.compile(r"[\u4e00-\u9fa5\u3000-\u303f\uff00-\uffef]")


@dataclass(frozen=True)
class FontMetrics:
    cjk_width: float
    latin_width: float
    padding: float
    base_height: float


# Indexed by depth; the last row applies to every deeper node.
FONT_TABLE = (
    FontMetrics(cjk_width=22, latin_width=12, padding=56, base_height=52),
    FontMetrics(cjk_width=18, latin_width=10, padding=28, base_height=36),
    FontMetrics(cjk_width=16, latin_width=9, padding=24, base_height=32),
    FontMetrics(cjk_width=14, latin_width=8, padding=20, base_height=30),
    FontMetrics(cjk_width=13, latin_width=7, padding=20, base_height=28),
)


def font_metrics(depth: int) -> FontMetrics:
    return FONT_TABLE[min(max(depth, 0), len(FONT_TABLE) - 1)]


def is_cjk(char: str) -> bool:
    return bool(_CJK_PATTERN.match(char))


def text_width(text: str, depth: int) -> float:
    metrics = font_metrics(depth)
    width = metrics.padding
    for char in text:
        width += metrics.cjk_width if is_cjk(char) else metrics.latin_width
    return max(MIN_NODE_WIDTH, width)


def extra_height(width: float) -> int:
    """Height added to a non-root box of the given width."""
    if width <= WRAP_THRESHOLD:
        return 0
    if width <= STEEP_THRESHOLD:
        return int((width - WRAP_THRESHOLD) // 12)
    # The 180-350 band contributes 14 on its own.
    return 14 + int((width - STEEP_THRESHOLD) // 10)


def measure_node(node: MindNode) -> Dimension:
    width = text_width(node.text, node.depth)
    height = font_metrics(node.depth).base_height
    if node.depth > 0:
        height += extra_height(width)
    return Dimension(width=width, height=height)


def estimate_dimensions(nodes: Iterable[MindNode]) -> Dict[str, Dimension]:
    """Measure every given node, collapsed or not.

    Callers pass the full node set so a later expand never needs sizes that
    were not computed.
    """
    dimensions = {node.id: measure_node(node) for node in nodes}
    logger.debug("Estimated dimensions for %d nodes", len(dimensions))
    return dimensions
