"""Configuration package."""

from .saver_config import SaverConfig

__all__ = ["SaverConfig"]
