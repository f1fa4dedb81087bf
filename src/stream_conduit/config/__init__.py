from .loader import load_yaml_config
from .validator import ConfigError, validate_runtime_config

__all__ = ["ConfigError", "validate_runtime_config", "load_yaml_config"]
