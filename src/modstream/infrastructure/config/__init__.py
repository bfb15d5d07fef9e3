from __future__ import annotations

from .load import load_config
from .schema import AppConfig, EnvOverrides, MoviesModConfig

__all__ = ["AppConfig", "EnvOverrides", "MoviesModConfig", "load_config"]
