from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
import subprocess
import sys
from typing import Optional
import webbrowser

from rich.table import Table
from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Footer, Header, Static, Tree
from textual.widgets._tree import TextType, TreeNode

from layout import Diagram, build_diagram
from node_models import DIRECTIONS, LayoutOptions, MindNode
from outline_io import (
    capture_expand_state,
    expand_all,
    expand_to_level,
    max_depth,
    parse_outline,
    restore_expand_state,
)
from preview import write_preview
import settings


logger = logging.getLogger(__name__)


class MindmapTree(Tree[MindNode]):
    """Tree widget specialised for ``MindNode`` data."""

    def process_label(self, label: TextType) -> Text:
        if isinstance(label, str):
            return Text(label, justify="left")
        return label


def geometry_table(diagram: Diagram) -> Table:
    """Visible node geometry plus the bounding box, as a rich table."""
    table = Table(expand=True, show_edge=False, pad_edge=False)
    table.add_column("Node", overflow="ellipsis", no_wrap=True)
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("w×h", justify="right")
    for position in diagram.positions.values():
        indent = "  " * min(position.depth, 6)
        marker = "▸ " if position.has_children and not position.expanded else ""
        table.add_row(
            f"{indent}{marker}{position.text}",
            f"{position.x:.0f}",
            f"{position.y:.0f}",
            f"{position.width:.0f}×{position.height:.0f}",
        )
    bounds = diagram.bounds
    if bounds is not None:
        table.caption = (
            f"bounds x[{bounds.min_x:.0f}, {bounds.max_x:.0f}] "
            f"y[{bounds.min_y:.0f}, {bounds.max_y:.0f}] "
            f"{bounds.width:.0f}×{bounds.height:.0f}"
        )
    return table


class MindmapViewer(App[None]):
    """Terminal viewer that re-lays out the outline on every expand/collapse."""

    TITLE = "mindmap"

    CSS = """
    #mindmap-tree {
        width: 2fr;
    }
    #geometry-panel {
        width: 3fr;
        padding: 0 1;
        overflow-y: auto;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("o", "reload", "Reload"),
        Binding("a", "expand_all", "Expand All"),
        Binding("l", "cycle_level", "Levels"),
        Binding("d", "cycle_direction", "Direction"),
        Binding("p", "preview", "Preview"),
    ]

    def __init__(
        self,
        outline_path: str | Path | None = None,
        options: Optional[LayoutOptions] = None,
    ) -> None:
        super().__init__()
        self.options = options or settings.load_layout_options()
        self.mindmap_root = parse_outline("")
        self.diagram: Optional[Diagram] = None
        self._tree_widget: Optional[MindmapTree] = None
        self._level_limit = 0
        self._active_path: Optional[Path] = (
            Path(outline_path).expanduser() if outline_path else None
        )

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            tree = MindmapTree("Mind Map", id="mindmap-tree")
            tree.show_root = True
            self._tree_widget = tree
            yield tree
            yield Static(id="geometry-panel")
        yield Footer()

    def on_mount(self) -> None:
        message = None
        if self._active_path is not None:
            if self._load_outline(self._active_path):
                message = f"Loaded {self._active_path}"
            else:
                message = f"Could not load {self._active_path}"
        self.rebuild_tree(message)

    def require_tree(self) -> MindmapTree:
        if self._tree_widget is None:
            raise RuntimeError("Tree widget not initialised")
        return self._tree_widget

    def rebuild_tree(self, message: str | None = None) -> None:
        tree = self.require_tree()
        tree.clear()
        tree.root.set_label(self.mindmap_root.text)
        tree.root.data = self.mindmap_root
        self.populate_tree(tree.root, self.mindmap_root)
        if self.mindmap_root.expanded:
            tree.root.expand()
        else:
            tree.root.collapse()
        # Selecting would toggle the root through auto_expand.
        tree.move_cursor(tree.root)
        tree.focus()
        self.refresh_layout(message)

    def populate_tree(self, tree_node: TreeNode[MindNode], node: MindNode) -> None:
        stack = [(tree_node, node)]
        while stack:
            parent_tree_node, parent = stack.pop()
            for child in parent.children:
                if child.children:
                    child_tree_node = parent_tree_node.add(
                        child.text, data=child, expand=child.expanded
                    )
                    stack.append((child_tree_node, child))
                else:
                    parent_tree_node.add_leaf(child.text, data=child)

    def refresh_layout(self, message: str | None = None) -> None:
        self.diagram = build_diagram(self.mindmap_root, self.options)
        self.query_one("#geometry-panel", Static).update(geometry_table(self.diagram))
        self.show_status(message)

    def _set_expanded(self, tree_node: TreeNode[MindNode], expanded: bool) -> None:
        node = tree_node.data
        if node is None:
            return
        if node.expanded != expanded:
            node.expanded = expanded
            self.refresh_layout()

    def on_tree_node_expanded(self, event: Tree.NodeExpanded[MindNode]) -> None:
        self._set_expanded(event.node, True)

    def on_tree_node_collapsed(self, event: Tree.NodeCollapsed[MindNode]) -> None:
        self._set_expanded(event.node, False)

    def _load_outline(self, path: Path) -> bool:
        target = path.expanduser()
        try:
            text = target.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Failed to read %s: %s", target, exc)
            self.bell()
            return False
        previous = capture_expand_state(self.mindmap_root)
        self.mindmap_root = parse_outline(text)
        restore_expand_state(self.mindmap_root, previous)
        self._active_path = target
        logger.info("Loaded outline from %s", target)
        return True

    def action_reload(self) -> None:
        if self._active_path is None:
            self.bell()
            self.show_status("No outline file to reload.")
            return
        if self._load_outline(self._active_path):
            self.rebuild_tree(f"Reloaded {self._active_path}")
        else:
            self.show_status(f"Could not load {self._active_path}")

    def action_expand_all(self) -> None:
        expand_all(self.mindmap_root)
        self._level_limit = 0
        self.rebuild_tree()

    def action_cycle_level(self) -> None:
        deepest = max_depth(self.mindmap_root)
        next_limit = 1 if self._level_limit <= 0 else self._level_limit + 1
        self._level_limit = 0 if next_limit >= deepest else next_limit
        expand_to_level(self.mindmap_root, self._level_limit)
        self.rebuild_tree()

    def action_cycle_direction(self) -> None:
        index = DIRECTIONS.index(self.options.direction)
        direction = DIRECTIONS[(index + 1) % len(DIRECTIONS)]
        self.options = dataclasses.replace(self.options, direction=direction)
        self.refresh_layout()

    def action_preview(self) -> None:
        if self.diagram is None:
            self.refresh_layout()
        path = write_preview(self.diagram, settings.get_preview_path(), title=self.mindmap_root.text)
        self._open_preview(path)
        self.show_status(f"Preview written to {path}")

    def _open_preview(self, path: Path) -> None:
        uri = path.resolve().as_uri()
        if sys.platform == "darwin":
            try:
                subprocess.Popen(["open", "-g", uri])
                return
            except OSError as exc:
                logger.warning("open failed, falling back to webbrowser: %s", exc)
        webbrowser.open(uri, new=2)

    def show_status(self, message: str | None = None) -> None:
        visible = len(self.diagram.positions) if self.diagram else 1
        level = "all" if self._level_limit <= 0 else str(self._level_limit)
        composed = f"{visible} visible · level {level} · {self.options.direction}"
        self.sub_title = f"{composed} · {message}" if message else composed


def main() -> None:
    settings.configure_logging()
    initial_path = sys.argv[1] if len(sys.argv) > 1 else None
    MindmapViewer(initial_path).run()


if __name__ == "__main__":
    main()
