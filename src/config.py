# src/config.py
import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
import logging

from dotenv import load_dotenv

from utils.errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

ENV_PREFIX = "FLOATCHAT"

DEFAULT_SETTINGS: Dict[str, Any] = {
    'database': {
        'url': 'sqlite:///floatchat.db',
        'echo': False
    },
    'selection': {
        'capacity': 5,
        'palette': ['#ef4444', '#3b82f6', '#10b981', '#f59e0b', '#8b5cf6']
    },
    'explorer': {
        # Floats selected for comparison when a session starts
        'preselected_floats': ['5904471', '5906542']
    },
    'export': {
        # Stand-ins until a backend reports real row counts
        'records_per_float': 50,
        'bytes_per_record_factor': 0.1,
        'filename_prefix': 'argo_export',
        'preview_rows': 5,
        'preselected_floats': ['5904471'],
        'preselected_parameters': ['temperature', 'salinity']
    },
    'chat': {
        'response_delay_ms': 1000,
        'greeting': (
            "Hello! I'm your AI assistant for exploring ARGO ocean data. "
            "I can help you find information about ocean temperature, salinity, "
            "float locations, and much more. What would you like to know?"
        )
    },
    'visualization': {
        'default_theme': 'plotly_white',
        'height': 500
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file': None
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class Config:
    """Configuration manager for FloatChat Explorer"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else self._find_config_file()
        self.settings = self._load_settings(explicit=config_path is not None)

    def _find_config_file(self) -> Optional[Path]:
        """Find the configuration file in various locations"""
        env_path = os.getenv(f'{ENV_PREFIX}_CONFIG')
        possible_paths = [
            Path(env_path) if env_path else None,
            Path('config/settings.yaml'),
            Path('../config/settings.yaml'),
            Path(__file__).parent.parent / 'config' / 'settings.yaml',
        ]

        for path in possible_paths:
            if path is not None and path.exists():
                return path

        return None

    def _load_settings(self, explicit: bool = False) -> Dict[str, Any]:
        """Load settings from YAML file on top of the defaults"""
        if self.config_path is None:
            return copy.deepcopy(DEFAULT_SETTINGS)

        try:
            with open(self.config_path, 'r') as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            if explicit:
                raise ConfigError(f"Cannot read config file {self.config_path}: {e}") from e
            logger.error(f"Error loading config: {e}")
            return copy.deepcopy(DEFAULT_SETTINGS)

        if not isinstance(loaded, dict):
            raise ConfigError(f"Config file {self.config_path} must contain a mapping")

        return _merge(DEFAULT_SETTINGS, loaded)

    def load_config(self, config_path: Optional[str] = None):
        """Reload settings, optionally from a different file"""
        if config_path:
            self.config_path = Path(config_path)
        self.settings = self._load_settings(explicit=config_path is not None)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        # Environment variable override
        env_key = f"{ENV_PREFIX}_{key.replace('.', '_').upper()}"
        env_value = os.getenv(env_key)
        if env_value is not None:
            return yaml.safe_load(env_value)

        value = self.settings
        for k in key.split('.'):
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """Set configuration value using dot notation"""
        keys = key.split('.')
        section = self.settings
        for k in keys[:-1]:
            section = section.setdefault(k, {})
        section[keys[-1]] = value

    def get_database_url(self) -> str:
        """Get database URL with environment variable override"""
        return os.getenv('DATABASE_URL', self.get('database.url'))


# Global configuration instance
config = Config()
