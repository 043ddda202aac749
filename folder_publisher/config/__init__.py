# Configuration module
from .config_manager import ConfigManager, AppConfig, ConfigurationValidationError

__all__ = ['ConfigManager', 'AppConfig', 'ConfigurationValidationError']
