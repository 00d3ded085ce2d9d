# uba_wallet/core/config_manager.py

from typing import Optional, Dict, Any
from pathlib import Path
import yaml

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.exceptions import ConfigError, UbaError
from uba_wallet.utils.logging import LogManager, logger

DEFAULT_LOGGING_CONFIG = {
    'log_level': 'INFO',
    'log_format': 'detailed',
    'enable_console': True,
    'log_file': None,
}

class ConfigManager:
    """YAML-backed configuration with ``uba`` and ``logging`` sections"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.uba_config = UbaConfig()
        self.logging_config: Dict[str, Any] = dict(DEFAULT_LOGGING_CONFIG)

        self._load_config()

    def _load_config(self):
        """Load configuration from file; a missing file keeps defaults"""
        if not self.config_path:
            return

        config_file = Path(self.config_path)
        if not config_file.exists():
            logger.debug("Config file not found, using defaults", path=str(config_file))
            return

        try:
            with open(config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config file: {e}") from e

        self._update_config_from_dict(config_data)

    def _update_config_from_dict(self, config_data: Dict[str, Any]):
        if not isinstance(config_data, dict):
            raise ConfigError("Config file must contain a mapping")

        uba_section = config_data.get('uba') or {}
        logging_section = config_data.get('logging') or {}
        if not isinstance(uba_section, dict) or not isinstance(logging_section, dict):
            raise ConfigError("Config sections must be mappings")

        try:
            self.uba_config = UbaConfig.from_dict(uba_section)
        except ConfigError:
            raise
        except (UbaError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid uba configuration: {e}") from e

        unknown = set(logging_section) - set(DEFAULT_LOGGING_CONFIG)
        if unknown:
            raise ConfigError(f"Unknown logging options: {', '.join(sorted(unknown))}")
        self.logging_config.update(logging_section)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation"""
        obj: Any = self.get_all()
        for part in key.split('.'):
            if isinstance(obj, dict) and part in obj:
                obj = obj[part]
            else:
                return default
        return obj

    def get_uba_config(self) -> UbaConfig:
        """Fresh copy; callers may mutate it freely"""
        return self.uba_config.copy()

    def apply_logging(self) -> LogManager:
        manager = LogManager()
        try:
            manager.configure(self.logging_config)
        except ValueError as e:
            raise ConfigError(f"Invalid logging configuration: {e}") from e
        return manager

    def get_all(self) -> Dict[str, Any]:
        return {
            'uba': self.uba_config.to_dict(),
            'logging': dict(self.logging_config),
        }

def init_config(config_path: Optional[str] = None) -> ConfigManager:
    """Initialize configuration manager"""
    return ConfigManager(config_path)
