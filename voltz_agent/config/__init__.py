"""Configuration module for voltz-agent."""

from voltz_agent.config.loader import get_config_path, load_config
from voltz_agent.config.schema import Config

__all__ = ["Config", "load_config", "get_config_path"]
