"""
Configuration package for the translator client.
"""

from .config import config, load_config, Config, Environment, CacheBackend

__all__ = [
    "config",
    "load_config",
    "Config",
    "Environment",
    "CacheBackend"
]
