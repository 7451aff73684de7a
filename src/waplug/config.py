from __future__ import annotations

from pathlib import Path

HOME_DIR = Path.home() / ".waplug"
HOME_CONFIG_PATH = HOME_DIR / "waplug.toml"
PACKAGE_DIR = Path(__file__).resolve().parent
BUILTIN_PLUGINS_DIR = PACKAGE_DIR / "builtin_plugins"


class ConfigError(RuntimeError):
    pass
