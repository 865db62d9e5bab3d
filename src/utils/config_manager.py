"""
Configuration Manager

This module handles persistent storage and retrieval of viewer preferences.
Settings are stored in a JSON file in the user's application data directory.

Inputs:
    - User preferences (last opened folder, default window, display size, etc.)

Outputs:
    - Loaded configuration values
    - Saved configuration file

Requirements:
    - json module (standard library)
    - pathlib module (standard library)
    - os module (standard library)
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

VALID_VIEWS = ["axial", "coronal", "sagittal"]


class ConfigManager:
    """
    Manages application configuration and user preferences.

    Handles loading and saving of settings including:
    - Last opened folder path
    - Default window level/width applied on load and reset
    - Maximum display size per view
    - Folder scan pattern and recursion
    - Which plane is shown in the main view
    """

    def __init__(self, config_filename: str = "mpr_viewer_config.json",
                 config_dir: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_filename: Name of the configuration file to use
            config_dir: Optional directory overriding the per-user application data directory
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
        elif os.name == 'nt':  # Windows
            app_data = os.getenv('APPDATA', os.path.expanduser('~'))
            self.config_dir = Path(app_data) / "DICOMMPRViewer"
        else:  # Mac/Linux
            self.config_dir = Path.home() / ".config" / "DICOMMPRViewer"

        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path = self.config_dir / config_filename

        self.default_config = {
            "last_path": "",
            "default_window_level": 40,
            "default_window_width": 400,
            "max_display_dim": 800,  # Maximum displayed size per side, in screen pixels
            "load_file_pattern": "*.dcm",
            "load_recursive": False,
            "main_view": "axial",  # axial, coronal or sagittal
        }

        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file, or return defaults if file doesn't exist.

        Returns:
            Dictionary containing configuration values
        """
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    loaded_config = json.load(f)
                if not isinstance(loaded_config, dict):
                    raise ValueError("Top-level JSON value is not an object")
                # Merge with defaults to ensure all keys exist
                config = self.default_config.copy()
                config.update(loaded_config)
                return config
            except (json.JSONDecodeError, ValueError, IOError) as e:
                # If file is corrupted, use defaults
                print(f"[CONFIG] Warning: Could not load config file: {e}")
                return self.default_config.copy()
        return self.default_config.copy()

    def save_config(self) -> bool:
        """
        Save current configuration to file.

        Returns:
            True if save was successful, False otherwise
        """
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=4, ensure_ascii=False)
            return True
        except IOError as e:
            print(f"[CONFIG] Error saving config file: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key to retrieve
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            key: Configuration key to set
            value: Value to set
        """
        self.config[key] = value

    def get_last_path(self) -> str:
        """Get the last opened folder path ("" if not set)."""
        return self.config.get("last_path", "")

    def set_last_path(self, path: str) -> None:
        """Set the last opened folder path."""
        self.config["last_path"] = path
        self.save_config()

    def get_default_window_level(self) -> int:
        """Window level applied when a volume is loaded or the view is reset."""
        try:
            return int(self.config.get("default_window_level", 40))
        except (TypeError, ValueError):
            return 40

    def get_default_window_width(self) -> int:
        """Window width applied when a volume is loaded or the view is reset (at least 1)."""
        try:
            return max(1, int(self.config.get("default_window_width", 400)))
        except (TypeError, ValueError):
            return 400

    def set_default_window(self, level: int, width: int) -> None:
        """
        Set the default window level and width.

        Args:
            level: Window level (may be negative)
            width: Window width; values below 1 are stored as 1
        """
        self.config["default_window_level"] = int(level)
        self.config["default_window_width"] = max(1, int(width))
        self.save_config()

    def get_max_display_dim(self) -> int:
        """Maximum display size per side."""
        try:
            value = int(self.config.get("max_display_dim", 800))
        except (TypeError, ValueError):
            return 800
        return value if value >= 1 else 800

    def set_max_display_dim(self, size: int) -> None:
        """
        Set the maximum display size per side.

        Args:
            size: Size in screen pixels (must be at least 1)
        """
        if int(size) >= 1:
            self.config["max_display_dim"] = int(size)
            self.save_config()

    def get_load_file_pattern(self) -> str:
        """Filename pattern used when scanning a folder ("*" for all files)."""
        return self.config.get("load_file_pattern", "*.dcm") or "*"

    def set_load_file_pattern(self, pattern: str) -> None:
        """Set the filename pattern used when scanning a folder."""
        self.config["load_file_pattern"] = pattern
        self.save_config()

    def get_load_recursive(self) -> bool:
        """Whether folder scans include subdirectories."""
        return bool(self.config.get("load_recursive", False))

    def set_load_recursive(self, recursive: bool) -> None:
        """Set whether folder scans include subdirectories."""
        self.config["load_recursive"] = bool(recursive)
        self.save_config()

    def get_main_view(self) -> str:
        """Plane shown in the main view ("axial", "coronal" or "sagittal")."""
        view = self.config.get("main_view", "axial")
        return view if view in VALID_VIEWS else "axial"

    def set_main_view(self, view: str) -> None:
        """
        Set the plane shown in the main view.

        Args:
            view: "axial", "coronal" or "sagittal"; other values are ignored
        """
        if view in VALID_VIEWS:
            self.config["main_view"] = view
            self.save_config()
