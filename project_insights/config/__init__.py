"""
Configuration module for the insights engine.
"""
from .settings import (
    InsightsConfig,
    get_config,
    load_config,
    reload_config
)

__all__ = [
    'InsightsConfig',
    'get_config',
    'load_config',
    'reload_config'
]
