"""
Configuration management for secretlink.
"""

from secretlink.config.export_config import (
    ExportConfiguration,
    load_config_from_env,
)

__all__ = [
    "ExportConfiguration",
    "load_config_from_env",
]
