import html
from pathlib import Path
from typing import List

from layout import Diagram, layout_bounds


PREVIEW_MARGIN = 40
_FONT_SIZES = (22, 18, 16, 14, 13)


def _escape(text_value: str) -> str:
    return html.escape(text_value, quote=False)


def render_svg(diagram: Diagram) -> str:
    """Draw node boxes and connectors of a laid-out diagram as an SVG document."""
    bounds = diagram.bounds or layout_bounds(diagram.positions)
    min_x = bounds.min_x - PREVIEW_MARGIN
    min_y = bounds.min_y - PREVIEW_MARGIN
    width = bounds.width + 2 * PREVIEW_MARGIN
    height = bounds.height + 2 * PREVIEW_MARGIN

    parts: List[str] = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{min_x:g} {min_y:g} {width:g} {height:g}" '
        f'width="{width:g}" height="{height:g}">'
    ]
    for edge in diagram.edges:
        parts.append(
            f'  <path class="mm-edge" d="{edge.svg_path()}" fill="none" stroke="#7a7a7a" stroke-width="2" />'
        )
    for position in diagram.positions.values():
        left = position.x - position.width / 2
        top = position.y - position.height / 2
        font_size = _FONT_SIZES[min(position.depth, len(_FONT_SIZES) - 1)]
        css_class = "mm-node mm-root" if position.parent_id is None else "mm-node"
        if position.has_children and not position.expanded:
            css_class += " mm-folded"
        parts.append(f'  <g class="{css_class}" data-id="{_escape(position.id)}">')
        parts.append(
            f'    <rect x="{left:g}" y="{top:g}" width="{position.width:g}" height="{position.height:g}" rx="8" />'
        )
        parts.append(
            f'    <text x="{position.x:g}" y="{position.y:g}" font-size="{font_size}" '
            f'text-anchor="middle" dominant-baseline="central">{_escape(position.text)}</text>'
        )
        parts.append("  </g>")
    parts.append("</svg>")
    return "\n".join(parts)


def preview_html(diagram: Diagram, title: str = "Mind map") -> str:
    svg = render_svg(diagram)
    return f"""<!DOCTYPE html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>{_escape(title)}</title>
    <meta name="viewport" content="width=device-width,initial-scale=1" />
    <style>
      body {{
        margin: 0;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        background: #0f0f0f;
        color: #f2f2f2;
      }}
      svg {{
        display: block;
        margin: 0 auto;
        max-width: 100%;
        height: auto;
      }}
      .mm-node rect {{
        fill: #1e1e1e;
        stroke: #5c8df6;
        stroke-width: 1.5;
      }}
      .mm-root rect {{
        fill: #2b3f6b;
      }}
      .mm-folded rect {{
        stroke-dasharray: 4 3;
      }}
      .mm-node text {{
        fill: #f2f2f2;
      }}
    </style>
  </head>
  <body>
{svg}
  </body>
</html>
"""


def write_preview(diagram: Diagram, path: Path, title: str = "Mind map") -> Path:
    path = Path(path)
    path.write_text(preview_html(diagram, title), encoding="utf-8")
    return path
