"""Configuration module."""

from agentry.config.schema import AgentSpec, Config
from agentry.config.loader import load_config, save_default_config

__all__ = ["AgentSpec", "Config", "load_config", "save_default_config"]
