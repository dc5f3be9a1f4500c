"""Environment-driven settings for the layout pipeline and the viewer."""
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from node_models import LayoutOptions


DEFAULT_LOG_FILE = "mindmap.log"
DEFAULT_PREVIEW_PATH = "mindmap_preview.html"


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_layout_options(environ: Optional[Mapping[str, str]] = None) -> LayoutOptions:
    env = os.environ if environ is None else environ
    defaults = LayoutOptions()
    return LayoutOptions(
        direction=(env.get("MINDMAP_DIRECTION", "").strip() or defaults.direction).lower(),
        horizontal_spacing=_env_float(env, "MINDMAP_HORIZONTAL_SPACING", defaults.horizontal_spacing),
        vertical_spacing=_env_float(env, "MINDMAP_VERTICAL_SPACING", defaults.vertical_spacing),
        center_offset=_env_float(env, "MINDMAP_CENTER_OFFSET", defaults.center_offset),
        level_spacing_multiplier=_env_float(
            env, "MINDMAP_LEVEL_SPACING", defaults.level_spacing_multiplier
        ),
    )


def get_log_level() -> int:
    name = os.getenv("MINDMAP_LOG_LEVEL", "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def get_log_file() -> Path:
    return Path(os.getenv("MINDMAP_LOG_FILE", DEFAULT_LOG_FILE)).expanduser()


def get_preview_path() -> Path:
    return Path(os.getenv("MINDMAP_PREVIEW_PATH", DEFAULT_PREVIEW_PATH)).expanduser()


def configure_logging() -> None:
    """Send log records to a file; the terminal belongs to the viewer."""
    logging.basicConfig(
        filename=str(get_log_file()),
        level=get_log_level(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
