"""Configuration management for CardGen."""

import json
import logging
import os
import platform
from pathlib import Path
from typing import Optional, Dict, Any, List, Union

from .constants import APP_NAME, DEFAULT_CHARACTER_SIZE

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages application configuration and persistence."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Explicit config.json location; defaults to the
                platform configuration directory.
        """
        if config_path is not None:
            self.config_path = Path(config_path).expanduser()
            self.config_dir = self.config_path.parent
        else:
            self.config_dir = self._get_config_dir()
            self.config_path = self.config_dir / "config.json"
        self.config = self._load_config()

    def _get_config_dir(self) -> Path:
        """Get platform-specific configuration directory."""
        system = platform.system()
        home = Path.home()

        if system == "Windows":
            base = Path(os.getenv("APPDATA", home / "AppData" / "Roaming"))
            return base / APP_NAME
        elif system == "Darwin":  # macOS
            return home / "Library" / "Application Support" / APP_NAME
        else:  # Linux/Unix
            base = Path(os.getenv("XDG_CONFIG_HOME", home / ".config"))
            return base / APP_NAME

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from disk."""
        if self.config_path.exists():
            try:
                data = json.loads(self.config_path.read_text(encoding="utf-8"))
            except (OSError, IOError, json.JSONDecodeError) as e:
                logger.warning(f"Ignoring unreadable config file {self.config_path}: {e}")
                return {}
            if isinstance(data, dict):
                logger.debug(f"Loaded config from {self.config_path}")
                return data
            logger.warning(f"Ignoring config file {self.config_path}: top level is not an object")
        return {}

    def save(self) -> None:
        """Save current configuration to disk."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_path.write_text(
            json.dumps(self.config, indent=2),
            encoding="utf-8"
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self.config[key] = value

    def get_colors(self) -> Dict[str, Union[str, int]]:
        """Get user color definitions (name -> ARGB hex string or integer)."""
        colors = self.config.get("colors", {})
        return colors if isinstance(colors, dict) else {}

    def set_color(self, name: str, argb_hex: Union[str, int]) -> None:
        """Add or replace a user color definition."""
        self.config.setdefault("colors", {})[name] = argb_hex

    def get_font_dirs(self) -> List[Path]:
        """Get extra directories searched for fonts."""
        dirs = self.config.get("font_dirs", [])
        if isinstance(dirs, str):
            dirs = [dirs]
        return [Path(d).expanduser() for d in dirs]

    def get_log_level(self) -> int:
        """Get the configured log level, defaulting to WARNING."""
        name = str(self.config.get("log_level", "WARNING")).upper()
        level = logging.getLevelName(name)
        return level if isinstance(level, int) else logging.WARNING

    def get_log_to_file(self) -> bool:
        return bool(self.config.get("log_to_file", False))

    def get_default_character_size(self) -> int:
        try:
            return max(1, int(self.config.get("default_character_size", DEFAULT_CHARACTER_SIZE)))
        except (TypeError, ValueError):
            return DEFAULT_CHARACTER_SIZE

    def apply_to_context(self, context) -> None:
        """Register configured colors and font directories on a render context."""
        for name, value in self.get_colors().items():
            if isinstance(value, int):
                context.colors.add_color(name, value)
            else:
                context.colors.add_color(name, context.colors.resolve(str(value)))
        for font_dir in self.get_font_dirs():
            context.fonts.add_search_dir(font_dir)
