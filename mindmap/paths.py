"""
Path utilities for the learning-network app.

Handles path resolution for both development mode and frozen (PyInstaller) executables.
- In development: paths are relative to the project root
- When frozen: paths are relative to the executable location
"""

import sys
from pathlib import Path


def get_app_dir() -> Path:
    """
    Get the application directory.

    - In development: the project root (parent of mindmap/)
    - When frozen: the directory containing the executable
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent.parent


def get_db_dir() -> Path:
    """Get the data directory (db/) holding learning records."""
    return get_app_dir() / "db"


def get_config_path() -> Path:
    return get_app_dir() / "config.json"


def get_default_data_file() -> Path:
    return get_db_dir() / "learning.json"


def ensure_db_dir() -> Path:
    db_dir = get_db_dir()
    db_dir.mkdir(parents=True, exist_ok=True)
    return db_dir
