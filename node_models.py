from dataclasses import dataclass, field
from typing import List, Literal, Optional, Tuple


Direction = Literal["left", "right", "both"]
Point = Tuple[float, float]

DIRECTIONS: Tuple[str, ...] = ("left", "right", "both")


@dataclass
class MindNode:
    id: str
    text: str
    depth: int = 0
    children: List["MindNode"] = field(default_factory=list)
    # Supplied by the caller; the parser only sets the first-parse defaults.
    expanded: bool = False


@dataclass(frozen=True)
class Dimension:
    width: float
    height: float


@dataclass(frozen=True)
class Position:
    """Placed geometry of one visible node. ``(x, y)`` is the box center."""

    id: str
    text: str
    x: float
    y: float
    width: float
    height: float
    depth: int
    has_children: bool
    expanded: bool
    parent_id: Optional[str] = None


@dataclass(frozen=True)
class EdgePath:
    """Cubic Bézier connector from a parent anchor to a child anchor."""

    source_id: str
    target_id: str
    start: Point
    control1: Point
    control2: Point
    end: Point

    def svg_path(self) -> str:
        (sx, sy), (c1x, c1y), (c2x, c2y), (ex, ey) = (
            self.start,
            self.control1,
            self.control2,
            self.end,
        )
        return f"M {sx:g} {sy:g} C {c1x:g} {c1y:g}, {c2x:g} {c2y:g}, {ex:g} {ey:g}"


@dataclass(frozen=True)
class Bounds:
    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y


@dataclass(frozen=True)
class LayoutOptions:
    direction: Direction = "both"
    horizontal_spacing: float = 140
    vertical_spacing: float = 16
    center_offset: float = 0
    # Reserved; placement derives its per-level factor from node depth.
    level_spacing_multiplier: float = 0.85

    def __post_init__(self) -> None:
        if self.direction not in DIRECTIONS:
            raise ValueError(
                f"direction must be one of {', '.join(DIRECTIONS)}, got {self.direction!r}"
            )
