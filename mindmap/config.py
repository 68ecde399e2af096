"""
Configuration management for the learning-network app.

Settings come from, in increasing priority:
1. Built-in defaults
2. config.json next to the project root
3. Environment variables (a .env file is loaded by app.py)

Recognised environment variables:
- MINDMAP_DATA_FILE: path to the learning records JSON file
- MINDMAP_PORT: port for the NiceGUI server
- MINDMAP_CENTER_RADIUS / MINDMAP_TOPIC_RADIUS / MINDMAP_USER_RADIUS: ring radii
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from mindmap.constants import DEFAULT_CENTER_RADIUS, DEFAULT_TOPIC_RADIUS, DEFAULT_USER_RADIUS
from mindmap.models import LayoutRadii
from mindmap.paths import get_config_path, get_default_data_file

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8081


@dataclass(frozen=True)
class MindmapConfig:
    data_file: Path
    port: int = DEFAULT_PORT
    radii: LayoutRadii = LayoutRadii()
    title: str = 'learning network'


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from config.json."""
    config_path = Path(config_path) if config_path else get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {config_path}: {e}")
            return {}
    return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> None:
    """Save configuration to config.json."""
    config_path = Path(config_path) if config_path else get_config_path()
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)


def _float_setting(env_name: str, config: dict, key: str, default: float) -> float:
    raw = os.environ.get(env_name, config.get(key, default))
    try:
        value = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Invalid value {raw!r} for {key}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Non-positive value {value} for {key}, using {default}")
        return default
    return value


def get_settings(config_path: Optional[Path] = None) -> MindmapConfig:
    config = load_config(config_path)

    data_file = os.environ.get('MINDMAP_DATA_FILE') or config.get('data_file')
    data_file = Path(data_file) if data_file else get_default_data_file()

    raw_port = os.environ.get('MINDMAP_PORT', config.get('port', DEFAULT_PORT))
    try:
        port = int(raw_port)
    except (TypeError, ValueError):
        logger.warning(f"Invalid port {raw_port!r}, using {DEFAULT_PORT}")
        port = DEFAULT_PORT

    radii = LayoutRadii(
        center_radius=_float_setting('MINDMAP_CENTER_RADIUS', config, 'center_radius', DEFAULT_CENTER_RADIUS),
        topic_radius=_float_setting('MINDMAP_TOPIC_RADIUS', config, 'topic_radius', DEFAULT_TOPIC_RADIUS),
        user_radius=_float_setting('MINDMAP_USER_RADIUS', config, 'user_radius', DEFAULT_USER_RADIUS),
    )

    return MindmapConfig(
        data_file=data_file,
        port=port,
        radii=radii,
        title=config.get('title', 'learning network'),
    )
